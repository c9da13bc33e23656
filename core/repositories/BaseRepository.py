from typing import Generic, Optional, TypeVar

from app import db

T = TypeVar("T")


class BaseRepository(Generic[T]):
    def __init__(self, model: T):
        self.model = model
        self.session = db.session

    def create(self, commit: bool = True, **kwargs) -> T:
        instance: T = self.model(**kwargs)
        self.session.add(instance)
        if commit:
            self.session.commit()
        else:
            self.session.flush()
        return instance

    def get_by_id(self, id: int) -> Optional[T]:
        return self.session.get(self.model, id)

    def get_by_column(self, column_name: str, value) -> list:
        return self.model.query.filter(getattr(self.model, column_name) == value).all()

    def get_or_404(self, id: int) -> T:
        return db.get_or_404(self.model, id)

    def update(self, id: int, **kwargs) -> Optional[T]:
        instance = self.get_by_id(id)
        if instance:
            for key, value in kwargs.items():
                setattr(instance, key, value)
            self.session.commit()
            return instance
        return None

    def delete(self, id: int) -> bool:
        instance = self.get_by_id(id)
        if instance:
            self.session.delete(instance)
            self.session.commit()
            return True
        return False

    def delete_by_column(self, column_name: str, value) -> int:
        deleted = self.model.query.filter(getattr(self.model, column_name) == value).delete(
            synchronize_session=False
        )
        self.session.commit()
        return deleted

    def count(self) -> int:
        return self.model.query.count()
