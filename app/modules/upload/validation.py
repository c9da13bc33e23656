import os
import re

from app.modules.game.models import Platform
from app.modules.upload.exceptions import ValidationRejected

MAX_UPLOAD_BYTES = 500 * 1024 * 1024

ALLOWED_CONTENT_TYPES = {
    "application/zip",
    "application/x-zip-compressed",
    "application/octet-stream",
    "application/x-msdownload",
    "application/vnd.android.package-archive",
}
ALLOWED_EXTENSIONS = {".zip", ".exe", ".apk"}

VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


def _human_size(size: int) -> str:
    if size < 1024:
        return f"{size} bytes"
    if size < 1024**2:
        return f"{round(size / 1024, 2)} KB"
    if size < 1024**3:
        return f"{round(size / (1024 ** 2), 2)} MB"
    return f"{round(size / (1024 ** 3), 2)} GB"


def validate_upload(file_name, file_size, content_type, platform, version, max_bytes=MAX_UPLOAD_BYTES) -> Platform:
    """Check a candidate build and return its platform.

    A file passes the type check when either its content type or its
    extension is accepted.
    """
    try:
        platform = Platform.parse(platform)
    except ValueError:
        raise ValidationRejected(f"Unknown platform: {platform!r}") from None

    if not file_name:
        raise ValidationRejected("The file has no name.")

    if file_size is None or file_size <= 0:
        raise ValidationRejected(f"{file_name} is empty.")

    if file_size > max_bytes:
        raise ValidationRejected(
            f"{file_name} is too large ({_human_size(file_size)}); the limit is {_human_size(max_bytes)}."
        )

    _, ext = os.path.splitext(file_name)
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime not in ALLOWED_CONTENT_TYPES and ext.lower() not in ALLOWED_EXTENSIONS:
        raise ValidationRejected(f"{file_name} has an unsupported type. Allowed: .zip, .exe, .apk.")

    if not VERSION_PATTERN.match(version or ""):
        raise ValidationRejected("Version must follow x.y.z format (e.g., 1.2.3)")

    return platform
