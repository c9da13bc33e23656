from collections import namedtuple
from dataclasses import dataclass
from typing import Optional, Tuple

import unidecode

from app.modules.auth.context import AuthContext
from app.modules.catalog.filters import FilterSpec
from app.modules.game.models import GameStatus, Visibility

# op is one of "eq", "contains" (collection membership) or "in" (value in a set).
Predicate = namedtuple("Predicate", ["field", "op", "value"])
Ordering = namedtuple("Ordering", ["field", "descending"])

SORT_ORDERINGS = {
    "newest": Ordering("created_at", True),
    "popular": Ordering("download_count", True),
    "rating": Ordering("rating", True),
    "price_low": Ordering("price", False),
    "price_high": Ordering("price", True),
}

PRICE_SORTS = {"price_low": False, "price_high": True}


def normalize(text) -> str:
    return unidecode.unidecode(text or "").lower().strip()


@dataclass(frozen=True)
class QueryPlan:
    """Everything one catalog fetch needs, decided up front.

    ``predicates`` and ``ordering`` go to the store; the remaining fields are
    applied to the fetched page only.
    """

    predicates: Tuple[Predicate, ...]
    ordering: Ordering
    search: str = ""
    extra_tags: Tuple[str, ...] = ()
    price_min: float = 0.0
    price_max: Optional[float] = None
    min_rating: float = 0.0
    price_descending: Optional[bool] = None

    def matches(self, record) -> bool:
        if self.search:
            haystacks = [record.title, record.developer_name] + list(record.tags)
            if not any(self.search in normalize(text) for text in haystacks):
                return False
        if self.extra_tags:
            record_tags = {tag.lower() for tag in record.tags}
            if not all(tag.lower() in record_tags for tag in self.extra_tags):
                return False
        if record.price < self.price_min:
            return False
        if self.price_max is not None and record.price > self.price_max:
            return False
        return record.rating >= self.min_rating

    def apply_client_filters(self, records) -> list:
        matched = [record for record in records if self.matches(record)]
        if self.price_descending is not None:
            # sorted() is stable, so equal prices keep the store order.
            matched = sorted(matched, key=lambda record: record.price, reverse=self.price_descending)
        return matched


def audience_visibilities(auth: AuthContext) -> Tuple[Visibility, ...]:
    if auth is not None and auth.user_type == "company":
        return (Visibility.PUBLIC, Visibility.COMPANIES_ONLY)
    return (Visibility.PUBLIC,)


def build_query_plan(spec: FilterSpec, auth: AuthContext = None) -> QueryPlan:
    predicates = [
        Predicate("status", "eq", GameStatus.PUBLISHED),
        Predicate("visibility", "in", audience_visibilities(auth)),
    ]
    if spec.genre_filter is not None:
        predicates.append(Predicate("genre", "eq", spec.genre_filter))
    if spec.platform_filter is not None:
        predicates.append(Predicate("platforms", "contains", spec.platform_filter))
    if spec.is_free is not None:
        predicates.append(Predicate("is_free", "eq", spec.is_free))
    if spec.tags:
        predicates.append(Predicate("tags", "contains", spec.tags[0]))

    return QueryPlan(
        predicates=tuple(predicates),
        ordering=SORT_ORDERINGS[spec.sort_by],
        search=normalize(spec.search),
        extra_tags=tuple(spec.tags[1:]),
        price_min=spec.price_min,
        price_max=spec.price_max,
        min_rating=spec.rating,
        price_descending=PRICE_SORTS.get(spec.sort_by),
    )
