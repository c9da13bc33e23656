from core.storage.storage_service import StorageService, storage_service

__all__ = ["StorageService", "storage_service"]
