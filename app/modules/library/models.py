from datetime import datetime, timezone

from app import db


class LibraryEntry(db.Model):
    __tablename__ = "library_entry"
    __table_args__ = (db.UniqueConstraint("user_id", "game_id", name="uq_library_user_game"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    game_id = db.Column(db.Integer, db.ForeignKey("game_record.id", ondelete="CASCADE"), nullable=False)
    acquired_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    download_count = db.Column(db.Integer, nullable=False, default=0)
    last_downloaded_at = db.Column(db.DateTime, nullable=True)

    game = db.relationship("GameRecord")

    def to_dict(self):
        return {
            "game": self.game.to_dict() if self.game else None,
            "acquired_at": self.acquired_at.isoformat() if self.acquired_at else None,
            "download_count": self.download_count,
            "last_downloaded_at": self.last_downloaded_at.isoformat() if self.last_downloaded_at else None,
        }
