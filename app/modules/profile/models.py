from enum import Enum

from sqlalchemy import Enum as SQLAlchemyEnum

from app import db


class UserType(Enum):
    DEVELOPER = "developer"
    COMPANY = "company"


class UserProfile(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), unique=True, nullable=False)

    display_name = db.Column(db.String(100), nullable=False)
    user_type = db.Column(SQLAlchemyEnum(UserType), nullable=False, default=UserType.DEVELOPER)
    bio = db.Column(db.String(500), nullable=True)

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "user_type": self.user_type.value,
            "bio": self.bio or "",
        }
