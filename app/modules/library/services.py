from datetime import datetime, timezone

from app.modules.library.repositories import LibraryRepository
from core.services.BaseService import BaseService


class LibraryService(BaseService):
    def __init__(self):
        super().__init__(LibraryRepository())

    def get_library(self, user_id: int):
        return self.repository.get_by_user(user_id)

    def count_library(self, user_id: int) -> int:
        return self.repository.count_by_user(user_id)

    def owns(self, user_id, game) -> bool:
        return user_id is not None and self.repository.get_entry(user_id, game.id) is not None

    def can_download(self, user_id, game) -> bool:
        if user_id is None:
            return False
        return game.is_free or game.is_owned_by(user_id) or self.owns(user_id, game)

    def record_download(self, user_id: int, game, commit: bool = True):
        """Count a download in the user's library, adding free games on first download.

        Paid games the user does not own yet are left out of the library.
        """
        entry = self.repository.get_entry(user_id, game.id)
        now = datetime.now(timezone.utc)
        if entry is None:
            if not game.is_free:
                return None
            entry = self.repository.create(commit=False, user_id=user_id, game_id=game.id, acquired_at=now)
        entry.download_count = (entry.download_count or 0) + 1
        entry.last_downloaded_at = now
        if commit:
            self.repository.session.commit()
        return entry

    def delete_by_game(self, game_id: int, commit: bool = True) -> int:
        deleted = self.repository.model.query.filter_by(game_id=game_id).delete(synchronize_session=False)
        if commit:
            self.repository.session.commit()
        return deleted
