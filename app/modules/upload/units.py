import dataclasses
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from app.modules.build.models import DEFAULT_BUILD_VERSION
from app.modules.game.models import Platform


class UploadState(Enum):
    VALIDATING = "validating"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass
class UploadSource:
    """A file offered for upload.

    ``temporary`` sources are spooled copies owned by the pipeline and are
    deleted once their transfer ends.
    """

    file_name: str
    file_size: int
    content_type: Optional[str] = None
    path: Optional[str] = None
    temporary: bool = False

    @classmethod
    def from_path(cls, path, file_name=None, content_type=None, temporary=False):
        return cls(
            file_name=file_name or os.path.basename(path),
            file_size=os.path.getsize(path),
            content_type=content_type,
            path=path,
            temporary=temporary,
        )

    def open(self):
        return open(self.path, "rb")

    def discard(self):
        if self.path and os.path.exists(self.path):
            os.remove(self.path)


@dataclass
class UploadUnit:
    id: str
    file_name: str
    file_size: int
    content_type: Optional[str] = None
    platform: Optional[Platform] = None
    version: str = DEFAULT_BUILD_VERSION
    state: UploadState = UploadState.VALIDATING
    progress: int = 0
    bytes_sent: int = 0
    storage_file_id: Optional[str] = None
    download_url: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    def snapshot(self) -> "UploadUnit":
        return dataclasses.replace(self)

    def to_dict(self):
        return {
            "id": self.id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "platform": self.platform.value if self.platform else None,
            "version": self.version,
            "state": self.state.value,
            "progress": self.progress,
            "file_id": self.storage_file_id,
            "download_url": self.download_url,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass(frozen=True)
class UploadEvent:
    unit: UploadUnit

    @property
    def unit_id(self):
        return self.unit.id

    @property
    def state(self):
        return self.unit.state

    @property
    def progress(self):
        return self.unit.progress
