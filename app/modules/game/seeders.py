import io
import uuid
from datetime import datetime, timedelta, timezone

from app.modules.auth.models import User
from app.modules.build.models import BuildRecord
from app.modules.game.models import DevelopmentStage, GameRecord, GameStatus, Genre, Platform, Visibility
from core.seeders.BaseSeeder import BaseSeeder
from core.storage import StorageService, storage_service

GAME_BLUEPRINTS = [
    {
        "title": "Lanternfall",
        "short_description": "Guide a lantern keeper through a city that forgets itself every night.",
        "genre": Genre.ADVENTURE,
        "platforms": [Platform.WINDOWS, Platform.MAC, Platform.LINUX],
        "tags": ["story", "atmospheric", "pixel art"],
        "price": 0.0,
        "rating": 4.6,
        "download_count": 1240,
        "user_ref": "user1",
    },
    {
        "title": "Crypt Ledger",
        "short_description": "A roguelite RPG about a dungeon accountant balancing the books.",
        "genre": Genre.RPG,
        "platforms": [Platform.WINDOWS, Platform.ANDROID],
        "tags": ["roguelite", "pixel art", "turn-based"],
        "price": 399.0,
        "rating": 4.2,
        "download_count": 310,
        "user_ref": "user1",
    },
    {
        "title": "Tiny Tow Trucks",
        "short_description": "Arcade racing with very small trucks and very big ramps.",
        "genre": Genre.RACING,
        "platforms": [Platform.WEB, Platform.ANDROID, Platform.IOS],
        "tags": ["multiplayer", "casual"],
        "price": 0.0,
        "rating": 3.9,
        "download_count": 5021,
        "user_ref": "user2",
    },
    {
        "title": "Quiet Orbit",
        "short_description": "Build a space station one module at a time, at your own pace.",
        "genre": Genre.SIMULATION,
        "platforms": [Platform.WINDOWS, Platform.LINUX],
        "tags": ["cozy", "building", "space"],
        "price": 549.0,
        "rating": 4.8,
        "download_count": 877,
        "user_ref": "user2",
    },
    {
        "title": "Hollow Signal",
        "short_description": "A short horror game told through a broken radio.",
        "genre": Genre.HORROR,
        "platforms": [Platform.WINDOWS],
        "tags": ["horror", "short", "story"],
        "price": 149.0,
        "rating": 0.0,
        "download_count": 0,
        "user_ref": "user2",
        "visibility": Visibility.COMPANIES_ONLY,
        "stage": DevelopmentStage.BETA,
        "looking_for_publisher": True,
    },
]

PLATFORM_EXTENSIONS = {Platform.ANDROID: ".apk", Platform.WINDOWS: ".exe"}


class GameSeeder(BaseSeeder):

    priority = 2  # Lower priority

    def run(self):
        users = {
            "user1": User.query.filter_by(email="user1@yopmail.com").first(),
            "user2": User.query.filter_by(email="user2@yopmail.com").first(),
        }
        if not all(users.values()):
            raise Exception("Users not found. Please seed users first.")

        now = datetime.now(timezone.utc)
        games = []
        for idx, blueprint in enumerate(GAME_BLUEPRINTS):
            owner = users[blueprint["user_ref"]]
            visibility = blueprint.get("visibility", Visibility.PUBLIC)
            game = GameRecord(
                title=blueprint["title"],
                developer_id=owner.id,
                developer_name=owner.display_name,
                short_description=blueprint["short_description"],
                full_description=blueprint["short_description"],
                genre=blueprint["genre"],
                status=GameStatus.PUBLISHED if visibility == Visibility.PUBLIC else GameStatus.DRAFT,
                visibility=visibility,
                stage=blueprint.get("stage", DevelopmentStage.RELEASE),
                looking_for_publisher=blueprint.get("looking_for_publisher", False),
                rating=blueprint["rating"],
                download_count=blueprint["download_count"],
                created_at=now - timedelta(days=len(GAME_BLUEPRINTS) - idx),
            )
            game.set_pricing(blueprint["price"] == 0, blueprint["price"])
            game.set_platforms(blueprint["platforms"])
            game.set_tags(blueprint["tags"])
            games.append(game)

        seeded_games = self.seed(games)
        self.seed(self._seed_builds(seeded_games))

    def _seed_builds(self, games):
        builds = []
        for game in games:
            for platform in game.platforms:
                file_id = uuid.uuid4().hex
                file_name = f"{game.title.lower().replace(' ', '_')}{PLATFORM_EXTENSIONS.get(platform, '.zip')}"
                content = f"{game.title} build for {platform.value}\n".encode("utf-8")
                storage_service.save_stream(io.BytesIO(content), StorageService.build_file_path(file_id, file_name))
                builds.append(
                    BuildRecord(
                        game_id=game.id,
                        creator_id=game.developer_id,
                        file_name=file_name,
                        file_size=len(content),
                        platform=platform,
                        storage_file_id=file_id,
                    )
                )
        return builds
