import logging
import os
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor

from werkzeug.utils import secure_filename

from app.modules.auth.context import AuthContext
from app.modules.upload.tracker import UploadTracker
from app.modules.upload.transport import StorageTransport
from app.modules.upload.units import UploadSource
from core.configuration.configuration import upload_workers

logger = logging.getLogger(__name__)


class UploadTrackerRegistry:
    """Keeps one UploadTracker per user for the lifetime of the process.

    All trackers share one transport and one worker pool.
    """

    def __init__(self, transport=None, executor=None):
        self._trackers = {}
        self._lock = threading.Lock()
        self._transport = transport
        self._executor = executor

    @property
    def transport(self):
        if self._transport is None:
            self._transport = StorageTransport()
        return self._transport

    @property
    def executor(self):
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=upload_workers(), thread_name_prefix="upload")
            return self._executor

    def configure(self, transport=None, executor=None):
        """Swap the transport and worker pool; trackers created before are dropped."""
        with self._lock:
            self._trackers.clear()
            self._transport = transport
            self._executor = executor

    def tracker_for(self, auth: AuthContext) -> UploadTracker:
        user_id = auth.require_user()
        executor = self.executor
        with self._lock:
            tracker = self._trackers.get(user_id)
            if tracker is None:
                tracker = UploadTracker(auth, self.transport, executor=executor)
                self._trackers[user_id] = tracker
                logger.debug("Created upload tracker for user %s", user_id)
            return tracker

    def discard(self, user_id: int) -> None:
        with self._lock:
            self._trackers.pop(user_id, None)


def spool_upload(file_storage, temp_folder: str) -> UploadSource:
    """Save an incoming request file under ``temp_folder`` so a worker can read it later."""
    filename = secure_filename(file_storage.filename or "")
    os.makedirs(temp_folder, exist_ok=True)
    path = os.path.join(temp_folder, f"{uuid.uuid4().hex}_{filename}")
    file_storage.save(path)
    return UploadSource(
        file_name=filename,
        file_size=os.path.getsize(path),
        content_type=file_storage.mimetype,
        path=path,
        temporary=True,
    )


upload_registry = UploadTrackerRegistry()
