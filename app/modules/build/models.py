from datetime import datetime, timezone

from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import validates

from app import db
from app.modules.game.models import Platform
from core.storage import StorageService

DEFAULT_BUILD_VERSION = "1.0.0"


class BuildRecord(db.Model):
    __tablename__ = "build_record"
    __table_args__ = (CheckConstraint("file_size > 0", name="ck_build_file_size_positive"),)

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey("game_record.id", ondelete="CASCADE"), nullable=False, index=True)
    creator_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    file_name = db.Column(db.String(255), nullable=False)
    file_size = db.Column(db.BigInteger, nullable=False)
    platform = db.Column(SQLAlchemyEnum(Platform), nullable=False)
    version = db.Column(db.String(32), nullable=False, default=DEFAULT_BUILD_VERSION)
    uploaded_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    storage_file_id = db.Column(db.String(64), nullable=False, unique=True)

    def __repr__(self):
        return f"<BuildRecord {self.id} {self.platform.value if self.platform else None} {self.file_name!r}>"

    @validates("file_size")
    def _validate_file_size(self, key, value):
        if value is None or int(value) <= 0:
            raise ValueError("A build must contain at least one byte.")
        return int(value)

    @property
    def storage_key(self) -> str:
        return StorageService.build_file_path(self.storage_file_id, self.file_name)

    @property
    def download_url(self) -> str:
        return StorageService.download_url(self.storage_file_id)

    def to_dict(self):
        return {
            "id": self.id,
            "game_id": self.game_id,
            "creator_id": self.creator_id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "platform": self.platform.value if self.platform else None,
            "version": self.version,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
            "file_id": self.storage_file_id,
            "download_url": self.download_url,
        }
