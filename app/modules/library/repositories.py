from app.modules.library.models import LibraryEntry
from core.repositories.BaseRepository import BaseRepository


class LibraryRepository(BaseRepository):
    def __init__(self):
        super().__init__(LibraryEntry)

    def get_entry(self, user_id: int, game_id: int):
        return self.model.query.filter_by(user_id=user_id, game_id=game_id).first()

    def get_by_user(self, user_id: int):
        return (
            self.model.query.filter_by(user_id=user_id)
            .order_by(self.model.acquired_at.desc(), self.model.id.desc())
            .all()
        )

    def count_by_user(self, user_id: int) -> int:
        return self.model.query.filter_by(user_id=user_id).count()
