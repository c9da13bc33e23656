import logging
import threading
import uuid

from app.modules.upload.exceptions import TransferCancelled
from app.modules.upload.units import UploadSource
from core.storage import StorageService, storage_service

logger = logging.getLogger(__name__)


class StorageTransport:
    """Moves an upload source into object storage, reporting bytes as they go."""

    def __init__(self, storage: StorageService = None):
        self.storage = storage or storage_service

    def transfer(self, source: UploadSource, on_progress, cancelled: threading.Event) -> str:
        file_id = uuid.uuid4().hex
        key = StorageService.build_file_path(file_id, source.file_name)
        sent = 0

        def callback(chunk_size):
            nonlocal sent
            if cancelled.is_set():
                raise TransferCancelled(key)
            sent += chunk_size
            on_progress(sent)

        try:
            if cancelled.is_set():
                raise TransferCancelled(key)
            with source.open() as stream:
                self.storage.save_stream(stream, key, progress=callback)
        finally:
            if source.temporary:
                source.discard()

        logger.info("Stored %s (%d bytes) as %s", source.file_name, sent, key)
        return file_id

    def download_url(self, file_id: str) -> str:
        return StorageService.download_url(file_id)
