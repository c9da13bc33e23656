import logging

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError

from app.modules.catalog.exceptions import CatalogUnavailable
from app.modules.game.models import GamePlatform, GameRecord, GameTag
from core.repositories.BaseRepository import BaseRepository

logger = logging.getLogger(__name__)


class CatalogRepository(BaseRepository):
    def __init__(self):
        super().__init__(GameRecord)

    def _condition(self, predicate):
        if predicate.op == "contains":
            if predicate.field == "platforms":
                return self.model.platform_entries.any(GamePlatform.platform == predicate.value)
            if predicate.field == "tags":
                return self.model.tag_entries.any(func.lower(GameTag.name) == predicate.value.lower())
            raise ValueError(f"'{predicate.field}' is not a collection")

        column = getattr(self.model, predicate.field)
        if predicate.op == "eq":
            return column == predicate.value
        if predicate.op == "in":
            return column.in_(list(predicate.value))
        raise ValueError(f"Unsupported predicate operator: {predicate.op!r}")

    def fetch(self, plan, after=None, limit=12):
        """Run the store side of ``plan``, resuming strictly after the ``after`` cursor."""
        column = getattr(self.model, plan.ordering.field)
        try:
            query = self.model.query.filter(*[self._condition(p) for p in plan.predicates])
            if after is not None:
                if plan.ordering.descending:
                    query = query.filter(
                        or_(column < after.value, and_(column == after.value, self.model.id < after.id))
                    )
                else:
                    query = query.filter(
                        or_(column > after.value, and_(column == after.value, self.model.id > after.id))
                    )
            if plan.ordering.descending:
                query = query.order_by(column.desc(), self.model.id.desc())
            else:
                query = query.order_by(column.asc(), self.model.id.asc())
            return query.limit(limit).all()
        except SQLAlchemyError as exc:
            logger.exception("Catalog query failed")
            self.session.rollback()
            raise CatalogUnavailable("The catalog is temporarily unavailable") from exc
