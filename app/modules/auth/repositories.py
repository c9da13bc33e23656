from sqlalchemy import func

from app.modules.auth.models import User
from core.repositories.BaseRepository import BaseRepository


class UserRepository(BaseRepository):
    def __init__(self):
        super().__init__(User)

    def get_by_email(self, email: str) -> User | None:
        if not email:
            return None
        return self.model.query.filter(func.lower(User.email) == email.strip().lower()).first()
