from sqlalchemy import func

from app.modules.game.models import GameRecord, GameStatus
from core.repositories.BaseRepository import BaseRepository


class GameRepository(BaseRepository):
    def __init__(self):
        super().__init__(GameRecord)

    def get_by_developer(self, developer_id: int):
        return (
            self.model.query.filter(self.model.developer_id == developer_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .all()
        )

    def count_published(self) -> int:
        return self.model.query.filter(self.model.status == GameStatus.PUBLISHED).count()

    def count_free_published(self) -> int:
        return self.model.query.filter(
            self.model.status == GameStatus.PUBLISHED, self.model.is_free.is_(True)
        ).count()

    def total_downloads(self, developer_id=None) -> int:
        query = self.session.query(func.coalesce(func.sum(self.model.download_count), 0))
        if developer_id is not None:
            query = query.filter(self.model.developer_id == developer_id)
        return int(query.scalar() or 0)

    def increment_download_count(self, game_id: int) -> None:
        # Single UPDATE so concurrent downloads never lose an increment.
        self.model.query.filter(self.model.id == game_id).update(
            {self.model.download_count: self.model.download_count + 1}, synchronize_session=False
        )
