import logging
from typing import Iterable, List

from app.modules.build.models import BuildRecord
from app.modules.build.repositories import BuildRepository
from app.modules.game.exceptions import GameAccessDenied, GameNotFound
from app.modules.game.repositories import GameRepository
from core.services.BaseService import BaseService
from core.storage import storage_service

logger = logging.getLogger(__name__)


class BuildService(BaseService):
    def __init__(self):
        super().__init__(BuildRepository())
        self.game_repository = GameRepository()

    def get_by_file_id(self, file_id: str):
        return self.repository.get_by_file_id(file_id)

    def get_by_game(self, game_id: int) -> List[BuildRecord]:
        return self.repository.get_by_game(game_id)

    def link_completed_units(self, game_id: int, creator_id: int, units: Iterable) -> List[BuildRecord]:
        """Persist one BuildRecord per completed upload unit.

        The game must exist and belong to ``creator_id``; otherwise nothing is
        written.
        """
        game = self.game_repository.get_by_id(game_id)
        if game is None:
            raise GameNotFound(f"Game {game_id} does not exist")
        if not game.is_owned_by(creator_id):
            raise GameAccessDenied("Only the developer of a game can attach builds to it")

        try:
            builds = [
                BuildRecord(
                    game_id=game.id,
                    creator_id=creator_id,
                    file_name=unit.file_name,
                    file_size=unit.file_size,
                    platform=unit.platform,
                    version=unit.version,
                    uploaded_at=unit.completed_at,
                    storage_file_id=unit.storage_file_id,
                )
                for unit in units
            ]
            self.repository.session.add_all(builds)
            self.repository.session.commit()
        except Exception as exc:
            logger.exception("Error linking builds to game %s: %s", game_id, exc)
            self.repository.session.rollback()
            raise

        # Re-read the relationship on next access rather than trusting a cached list.
        self.repository.session.expire(game, ["builds"])
        logger.info("Linked %d build(s) to game %s", len(builds), game_id)
        return builds

    def delete_stored_files(self, storage_keys: Iterable[str]) -> int:
        deleted = 0
        for key in storage_keys:
            try:
                if storage_service.delete_file(key):
                    deleted += 1
            except Exception as exc:
                logger.warning("Could not delete stored build %s: %s", key, exc)
        return deleted
