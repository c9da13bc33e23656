import logging
import os
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

import boto3
from botocore.exceptions import ClientError

from core.configuration.configuration import storage_download_route, storage_public_host, uploads_folder_name

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

ProgressCallback = Callable[[int], None]


class StorageService:
    """Stores build files locally or in AWS S3.

    Objects are addressed by a key relative to the uploads root. Game builds
    live under ``builds/<file_id>/<file_name>`` so that the opaque file id is
    enough to locate (and link to) a stored build.
    """

    BUILDS_DIR = "builds"

    def __init__(self) -> None:
        self._working_dir = os.getenv("WORKING_DIR", "")
        self._uploads_setting = uploads_folder_name()
        self._local_root = self._resolve_local_root()

        self._bucket = os.getenv("S3_BUCKET")
        self._region = os.getenv("S3_REGION")
        self._aws_key = os.getenv("AWS_ACCESS_KEY_ID")
        self._aws_secret = os.getenv("AWS_SECRET_ACCESS_KEY")
        self._remote_prefix = self._resolve_remote_prefix()

        self._use_s3 = all([self._bucket, self._region, self._aws_key, self._aws_secret])

        if self._use_s3:
            self._s3_client = boto3.client(
                "s3",
                aws_access_key_id=self._aws_key,
                aws_secret_access_key=self._aws_secret,
                region_name=self._region,
            )
            logger.info(
                "StorageService configured to use S3 bucket '%s' (prefix='%s')",
                self._bucket,
                self._remote_prefix,
            )
        else:
            self._s3_client = None

    def _resolve_local_root(self) -> str:
        uploads_dir = self._uploads_setting
        if os.path.isabs(uploads_dir):
            return uploads_dir
        return os.path.join(self._working_dir, uploads_dir)

    def _resolve_remote_prefix(self) -> str:
        explicit_prefix = os.getenv("S3_PREFIX")
        if explicit_prefix:
            return self._normalize_key(explicit_prefix)
        uploads_dir = self._uploads_setting or "uploads"
        uploads_dir = uploads_dir.replace("\\", "/").strip("/")
        return uploads_dir or "uploads"

    def _refresh_local_context_if_needed(self) -> None:
        working_dir = os.getenv("WORKING_DIR", "")
        uploads_setting = uploads_folder_name()
        if working_dir != self._working_dir or uploads_setting != self._uploads_setting:
            self._working_dir = working_dir
            self._uploads_setting = uploads_setting
            self._local_root = self._resolve_local_root()
            self._remote_prefix = self._resolve_remote_prefix()

    def _normalize_key(self, path: str) -> str:
        cleaned = path.replace("\\", "/")
        segments = [segment for segment in cleaned.split("/") if segment]
        return "/".join(segments)

    def _local_path(self, relative_path: str) -> str:
        self._refresh_local_context_if_needed()
        return os.path.join(self._local_root, relative_path)

    def _s3_key(self, relative_path: str) -> str:
        self._refresh_local_context_if_needed()
        rel = self._normalize_key(relative_path)
        if not self._remote_prefix:
            return rel
        return rel and f"{self._remote_prefix}/{rel}" or self._remote_prefix

    def uses_s3(self) -> bool:
        return self._use_s3

    @staticmethod
    def build_file_path(file_id: str, filename: str) -> str:
        return "/".join([StorageService.BUILDS_DIR, file_id, filename])

    @staticmethod
    def file_id_from_key(relative_path: str) -> Optional[str]:
        segments = relative_path.replace("\\", "/").split("/")
        if len(segments) >= 3 and segments[0] == StorageService.BUILDS_DIR:
            return segments[1]
        return None

    @staticmethod
    def download_url(file_id: str) -> str:
        return f"https://{storage_public_host()}/{storage_download_route()}?id={file_id}"

    def save_stream(self, stream, relative_dest: str, progress: Optional[ProgressCallback] = None) -> str:
        """Copy a binary stream into the backend.

        ``progress`` is called with the number of bytes moved by each chunk, the
        same contract boto3 uses for its transfer ``Callback``. An exception
        raised from the callback aborts the copy and, locally, removes the
        partial file.
        """
        if self._use_s3:
            self._s3_client.upload_fileobj(stream, self._bucket, self._s3_key(relative_dest), Callback=progress)
            return relative_dest

        dest_abs = self._local_path(relative_dest)
        os.makedirs(os.path.dirname(dest_abs), exist_ok=True)
        try:
            with open(dest_abs, "wb") as dest:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    dest.write(chunk)
                    if progress is not None:
                        progress(len(chunk))
        except Exception:
            self.delete_file(relative_dest)
            raise
        return relative_dest

    def get_local_path(self, relative_path: str) -> str:
        """Return the absolute local path (always inside uploads)."""
        return self._local_path(relative_path)

    def exists(self, relative_path: str) -> bool:
        if self._use_s3:
            try:
                self._s3_client.head_object(Bucket=self._bucket, Key=self._s3_key(relative_path))
                return True
            except ClientError:
                return False
        return os.path.exists(self._local_path(relative_path))

    def delete_file(self, relative_path: str) -> bool:
        if self._use_s3:
            self._s3_client.delete_object(Bucket=self._bucket, Key=self._s3_key(relative_path))
            return True

        abs_path = self._local_path(relative_path)
        if not os.path.exists(abs_path):
            return False
        os.remove(abs_path)
        parent = os.path.dirname(abs_path)
        if os.path.isdir(parent) and not os.listdir(parent):
            os.rmdir(parent)
        return True

    def list_objects(self, relative_dir: str) -> List[Tuple[str, datetime]]:
        """Return ``(key, last_modified)`` pairs inside the directory, recursively."""
        results: List[Tuple[str, datetime]] = []
        normalized_dir = self._normalize_key(relative_dir)
        if self._use_s3:
            prefix = self._s3_key(normalized_dir)
            paginator = self._s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for content in page.get("Contents", []):
                    key = content["Key"]
                    rel = key[len(self._remote_prefix) + 1 :] if self._remote_prefix else key
                    results.append((rel, content["LastModified"]))
        else:
            base = self._local_path(normalized_dir)
            if not os.path.isdir(base):
                return []
            for root, _, files in os.walk(base):
                for filename in files:
                    abs_path = os.path.join(root, filename)
                    rel = os.path.relpath(abs_path, self._local_root).replace("\\", "/")
                    modified = datetime.fromtimestamp(os.path.getmtime(abs_path), tz=timezone.utc)
                    results.append((rel, modified))
        return results

    def generate_presigned_url(self, relative_path: str, expires_in: int = 600) -> Optional[str]:
        if not self._use_s3:
            return None
        return self._s3_client.generate_presigned_url(
            "get_object",
            Params={
                "Bucket": self._bucket,
                "Key": self._s3_key(relative_path),
            },
            ExpiresIn=expires_in,
        )


storage_service = StorageService()
