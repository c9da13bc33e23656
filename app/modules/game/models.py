from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import validates

from app import db

SHORT_DESCRIPTION_MAX = 300
FULL_DESCRIPTION_MAX = 5000
MAX_RATING = 5.0


class LabeledEnum(Enum):
    @classmethod
    def parse(cls, value):
        """Accept a member, its value or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if text in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown {cls.__name__.lower()}: {value!r}")


class Genre(LabeledEnum):
    ACTION = "Action"
    ADVENTURE = "Adventure"
    RPG = "RPG"
    STRATEGY = "Strategy"
    PUZZLE = "Puzzle"
    PLATFORMER = "Platformer"
    RACING = "Racing"
    SIMULATION = "Simulation"
    HORROR = "Horror"
    ARCADE = "Arcade"
    INDIE = "Indie"
    CASUAL = "Casual"


class Platform(LabeledEnum):
    WINDOWS = "Windows"
    MAC = "Mac"
    LINUX = "Linux"
    ANDROID = "Android"
    IOS = "iOS"
    WEB = "Web"
    PLAYSTATION = "PlayStation"
    XBOX = "Xbox"
    NINTENDO_SWITCH = "Nintendo Switch"


class GameStatus(LabeledEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    REJECTED = "rejected"


class Visibility(LabeledEnum):
    PUBLIC = "public"
    PRIVATE = "private"
    COMPANIES_ONLY = "companies-only"


class DevelopmentStage(LabeledEnum):
    IDEA = "idea"
    PROTOTYPE = "prototype"
    ALPHA = "alpha"
    BETA = "beta"
    RELEASE = "release"


STATUS_TRANSITIONS = {
    GameStatus.DRAFT: {GameStatus.PUBLISHED, GameStatus.REJECTED},
    GameStatus.PUBLISHED: {GameStatus.DRAFT},
    GameStatus.REJECTED: set(),
}


def can_transition(current: GameStatus, target: GameStatus) -> bool:
    return target in STATUS_TRANSITIONS.get(current, set())


class GamePlatform(db.Model):
    __tablename__ = "game_platform"
    __table_args__ = (db.UniqueConstraint("game_id", "platform", name="uq_game_platform"),)

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey("game_record.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = db.Column(SQLAlchemyEnum(Platform), nullable=False)


class GameTag(db.Model):
    __tablename__ = "game_tag"

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey("game_record.id", ondelete="CASCADE"), nullable=False, index=True)
    name = db.Column(db.String(50), nullable=False)


class GameRecord(db.Model):
    __tablename__ = "game_record"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_game_price_non_negative"),
        CheckConstraint("is_free = 0 OR price = 0", name="ck_game_free_has_no_price"),
        CheckConstraint("download_count >= 0", name="ck_game_download_count_non_negative"),
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(120), nullable=False)
    developer_name = db.Column(db.String(120), nullable=False, default="")
    developer_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True)

    short_description = db.Column(db.String(SHORT_DESCRIPTION_MAX), nullable=False, default="")
    full_description = db.Column(db.Text, nullable=False, default="")
    genre = db.Column(SQLAlchemyEnum(Genre), nullable=False)

    price = db.Column(db.Float, nullable=False, default=0.0)
    is_free = db.Column(db.Boolean, nullable=False, default=False)

    status = db.Column(SQLAlchemyEnum(GameStatus), nullable=False, default=GameStatus.DRAFT, index=True)
    visibility = db.Column(SQLAlchemyEnum(Visibility), nullable=False, default=Visibility.PUBLIC)
    stage = db.Column(SQLAlchemyEnum(DevelopmentStage), nullable=False, default=DevelopmentStage.RELEASE)
    looking_for_publisher = db.Column(db.Boolean, nullable=False, default=False)

    rating = db.Column(db.Float, nullable=False, default=0.0)
    download_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    platform_entries = db.relationship(
        "GamePlatform", cascade="all, delete-orphan", lazy="selectin", order_by="GamePlatform.id"
    )
    tag_entries = db.relationship("GameTag", cascade="all, delete-orphan", lazy="selectin", order_by="GameTag.id")
    builds = db.relationship(
        "BuildRecord",
        backref="game",
        cascade="all, delete-orphan",
        lazy=True,
        order_by="BuildRecord.uploaded_at",
    )

    def __repr__(self):
        return f"<GameRecord {self.id} {self.title!r}>"

    @validates("price")
    def _validate_price(self, key, value):
        value = float(value or 0)
        if value < 0:
            raise ValueError("Price must be zero or positive.")
        return value

    @validates("rating")
    def _validate_rating(self, key, value):
        value = float(value or 0)
        if not 0 <= value <= MAX_RATING:
            raise ValueError(f"Rating must be between 0 and {MAX_RATING:g}.")
        return value

    @validates("download_count")
    def _validate_download_count(self, key, value):
        value = int(value or 0)
        if self.download_count is not None and value < self.download_count:
            raise ValueError("Download count never decreases.")
        return value

    @validates("short_description")
    def _validate_short_description(self, key, value):
        if value and len(value) > SHORT_DESCRIPTION_MAX:
            raise ValueError(f"Short description is limited to {SHORT_DESCRIPTION_MAX} characters.")
        return value

    @validates("full_description")
    def _validate_full_description(self, key, value):
        if value and len(value) > FULL_DESCRIPTION_MAX:
            raise ValueError(f"Full description is limited to {FULL_DESCRIPTION_MAX} characters.")
        return value

    @property
    def platforms(self):
        return [entry.platform for entry in self.platform_entries]

    @property
    def tags(self):
        return [entry.name for entry in self.tag_entries]

    def set_platforms(self, platforms):
        wanted = []
        for platform in platforms or []:
            platform = Platform.parse(platform)
            if platform not in wanted:
                wanted.append(platform)
        kept = [entry for entry in self.platform_entries if entry.platform in wanted]
        known = {entry.platform for entry in kept}
        self.platform_entries = kept + [GamePlatform(platform=p) for p in wanted if p not in known]

    def set_tags(self, tags):
        if isinstance(tags, str):
            tags = tags.split(",")
        names = []
        for tag in tags or []:
            tag = str(tag).strip()
            if tag and tag.lower() not in [name.lower() for name in names]:
                names.append(tag)
        self.tag_entries = [GameTag(name=name) for name in names]

    def set_pricing(self, is_free: bool, price=None):
        if is_free and price not in (None, 0, 0.0):
            raise ValueError("A free game cannot have a price.")
        self.is_free = bool(is_free)
        self.price = 0.0 if is_free else float(price or 0)

    def is_owned_by(self, user_id) -> bool:
        return user_id is not None and self.developer_id == user_id

    def to_dict(self, include_builds=False):
        data = {
            "id": self.id,
            "title": self.title,
            "developer": self.developer_name,
            "developer_id": self.developer_id,
            "short_description": self.short_description,
            "full_description": self.full_description,
            "genre": self.genre.value if self.genre else None,
            "platforms": [p.value for p in self.platforms],
            "tags": self.tags,
            "price": self.price,
            "is_free": self.is_free,
            "status": self.status.value if self.status else None,
            "visibility": self.visibility.value if self.visibility else None,
            "stage": self.stage.value if self.stage else None,
            "looking_for_publisher": self.looking_for_publisher,
            "rating": self.rating,
            "download_count": self.download_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_builds:
            data["builds"] = [build.to_dict() for build in self.builds]
        return data
