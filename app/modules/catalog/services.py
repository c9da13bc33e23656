import logging
from dataclasses import dataclass, field
from typing import List, Optional

from app.modules.auth.context import AuthContext
from app.modules.catalog.cursor import decode_cursor, encode_cursor
from app.modules.catalog.filters import FilterSpec
from app.modules.catalog.query import build_query_plan
from app.modules.catalog.repositories import CatalogRepository
from app.modules.game.models import GameRecord
from core.services.BaseService import BaseService

logger = logging.getLogger(__name__)


@dataclass
class CatalogPage:
    records: List[GameRecord] = field(default_factory=list)
    next_cursor: Optional[str] = None

    def to_dict(self):
        return {
            "records": [record.to_dict() for record in self.records],
            "next_cursor": self.next_cursor,
            "count": len(self.records),
        }


class CatalogService(BaseService):
    def __init__(self, auth: AuthContext = None, repository=None):
        super().__init__(repository or CatalogRepository())
        self.auth = auth or AuthContext.anonymous()

    def fetch_catalog_page(self, filter_spec: FilterSpec) -> CatalogPage:
        """Return one page of published games matching ``filter_spec``.

        The store answers the equality and membership filters; search, extra
        tags, the price range and the rating threshold are applied to the
        fetched page, so a page can hold fewer than ``page_size`` records.
        The next cursor points past the last record the store returned, so
        records dropped locally never cause later records to be skipped.
        """
        spec = filter_spec.validate()
        plan = build_query_plan(spec, self.auth)
        after = decode_cursor(spec.cursor, spec.sort_by) if spec.cursor else None

        rows = self.repository.fetch(plan, after=after, limit=spec.page_size + 1)
        server_page = rows[: spec.page_size]

        next_cursor = None
        if len(rows) > spec.page_size:
            last = server_page[-1]
            next_cursor = encode_cursor(spec.sort_by, getattr(last, plan.ordering.field), last.id)

        records = plan.apply_client_filters(server_page)
        logger.debug(
            "Catalog page: %d fetched, %d kept, more=%s", len(server_page), len(records), next_cursor is not None
        )
        return CatalogPage(records=records, next_cursor=next_cursor)


def fetch_catalog_page(filter_spec: FilterSpec, auth: AuthContext = None) -> CatalogPage:
    return CatalogService(auth).fetch_catalog_page(filter_spec)
