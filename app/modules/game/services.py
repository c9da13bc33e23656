import logging

from app.modules.auth.context import AuthContext
from app.modules.build.services import BuildService
from app.modules.game.exceptions import GameAccessDenied, GameNotFound, InvalidStatusTransition
from app.modules.game.models import (
    DevelopmentStage,
    GameRecord,
    GameStatus,
    Genre,
    Visibility,
    can_transition,
)
from app.modules.game.repositories import GameRepository
from app.modules.library.services import LibraryService
from core.services.BaseService import BaseService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title",
    "short_description",
    "full_description",
    "genre",
    "platforms",
    "tags",
    "visibility",
    "stage",
    "looking_for_publisher",
)


class GameService(BaseService):
    def __init__(self):
        super().__init__(GameRepository())
        self.build_service = BuildService()
        self.library_service = LibraryService()

    def get_game(self, game_id: int) -> GameRecord:
        game = self.repository.get_by_id(game_id)
        if game is None:
            raise GameNotFound(f"Game {game_id} does not exist")
        return game

    def can_view(self, game: GameRecord, auth: AuthContext) -> bool:
        if game.is_owned_by(auth.user_id):
            return True
        if game.status != GameStatus.PUBLISHED:
            return False
        if game.visibility == Visibility.PUBLIC:
            return True
        return game.visibility == Visibility.COMPANIES_ONLY and auth.user_type == "company"

    def get_visible_game(self, game_id: int, auth: AuthContext) -> GameRecord:
        game = self.get_game(game_id)
        if not self.can_view(game, auth):
            # Hidden games look exactly like missing ones.
            raise GameNotFound(f"Game {game_id} does not exist")
        return game

    def get_owned_game(self, game_id: int, auth: AuthContext) -> GameRecord:
        user_id = auth.require_user()
        game = self.get_game(game_id)
        if not game.is_owned_by(user_id):
            raise GameAccessDenied("Only the developer of a game can change it")
        return game

    def get_by_developer(self, developer_id: int):
        return self.repository.get_by_developer(developer_id)

    def _apply_fields(self, game: GameRecord, data: dict):
        for field in EDITABLE_FIELDS:
            if field not in data:
                continue
            value = data[field]
            if field == "platforms":
                game.set_platforms(value)
            elif field == "tags":
                game.set_tags(value)
            elif field == "genre":
                game.genre = Genre.parse(value)
            elif field == "visibility":
                game.visibility = Visibility.parse(value)
            elif field == "stage":
                game.stage = DevelopmentStage.parse(value)
            else:
                setattr(game, field, value)
        if "is_free" in data or "price" in data:
            is_free = data.get("is_free", game.is_free)
            game.set_pricing(is_free, None if is_free else data.get("price", game.price))

    def create_game(self, auth: AuthContext, **data) -> GameRecord:
        """Create a game for the authenticated developer.

        Public submissions are published right away; private and companies-only
        ones start as drafts.
        """
        user_id = auth.require_user()
        try:
            game = GameRecord(developer_id=user_id, developer_name=auth.display_name)
            self._apply_fields(game, data)
            if "is_free" not in data and "price" not in data:
                game.set_pricing(False, 0)
            if game.visibility is None:
                game.visibility = Visibility.PUBLIC
            game.status = GameStatus.PUBLISHED if game.visibility == Visibility.PUBLIC else GameStatus.DRAFT
            self.repository.session.add(game)
            self.repository.session.commit()
        except Exception as exc:
            logger.exception("Error creating game for user %s: %s", user_id, exc)
            self.repository.session.rollback()
            raise
        logger.info("Game %s created by user %s as %s", game.id, user_id, game.status.value)
        return game

    def update_game(self, game_id: int, auth: AuthContext, **data) -> GameRecord:
        game = self.get_owned_game(game_id, auth)
        try:
            self._apply_fields(game, data)
            self.repository.session.commit()
        except Exception as exc:
            logger.exception("Error updating game %s: %s", game_id, exc)
            self.repository.session.rollback()
            raise
        return game

    def change_status(self, game_id: int, target, auth: AuthContext) -> GameRecord:
        game = self.get_owned_game(game_id, auth)
        target = GameStatus.parse(target)
        if not can_transition(game.status, target):
            raise InvalidStatusTransition(game.status, target)
        game.status = target
        self.repository.session.commit()
        logger.info("Game %s moved to %s", game_id, target.value)
        return game

    def delete_game(self, game_id: int, auth: AuthContext) -> int:
        """Delete a game together with its builds, library entries and stored files.

        Returns the number of stored build files removed.
        """
        game = self.get_owned_game(game_id, auth)
        storage_keys = [build.storage_key for build in game.builds]
        try:
            self.library_service.delete_by_game(game.id, commit=False)
            self.repository.session.delete(game)
            self.repository.session.commit()
        except Exception as exc:
            logger.exception("Error deleting game %s: %s", game_id, exc)
            self.repository.session.rollback()
            raise
        removed = self.build_service.delete_stored_files(storage_keys)
        logger.info("Game %s deleted (%d of %d stored builds removed)", game_id, removed, len(storage_keys))
        return removed

    def register_download(self, game: GameRecord, auth: AuthContext):
        """Count one download of ``game`` and record it in the user's library."""
        user_id = auth.require_user()
        try:
            self.repository.increment_download_count(game.id)
            self.library_service.record_download(user_id, game, commit=False)
            self.repository.session.commit()
        except Exception as exc:
            logger.exception("Error registering download of game %s: %s", game.id, exc)
            self.repository.session.rollback()
            raise
        self.repository.session.refresh(game)
        return game.download_count

    def stats(self) -> dict:
        return {
            "published_games": self.repository.count_published(),
            "free_games": self.repository.count_free_published(),
            "total_downloads": self.repository.total_downloads(),
        }

    def developer_summary(self, developer_id: int) -> dict:
        games = self.get_by_developer(developer_id)
        return {
            "projects": len(games),
            "published": sum(1 for game in games if game.status == GameStatus.PUBLISHED),
            "drafts": sum(1 for game in games if game.status == GameStatus.DRAFT),
            "total_downloads": self.repository.total_downloads(developer_id),
            "library": self.library_service.count_library(developer_id),
        }
