from app.modules.build.models import BuildRecord
from core.repositories.BaseRepository import BaseRepository


class BuildRepository(BaseRepository):
    def __init__(self):
        super().__init__(BuildRecord)

    def get_by_file_id(self, file_id: str):
        return self.model.query.filter_by(storage_file_id=file_id).first()

    def get_by_game(self, game_id: int):
        return self.model.query.filter_by(game_id=game_id).order_by(self.model.uploaded_at, self.model.id).all()

    def all_file_ids(self) -> set:
        return {row[0] for row in self.session.query(self.model.storage_file_id).all()}
