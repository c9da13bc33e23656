import dataclasses
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from app.modules.catalog.cursor import decode_cursor
from app.modules.catalog.exceptions import InvalidFilterSpec
from app.modules.game.models import MAX_RATING, Genre, Platform

SORT_OPTIONS = ("newest", "popular", "rating", "price_low", "price_high")
DEFAULT_SORT = "newest"
DEFAULT_PAGE_SIZE = 12

# Values the storefront sends for "no constraint" in its select boxes.
ANY_VALUES = ("", "all", "any", "all genres", "all platforms")

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


def _parse_bool(name, value) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("", "any", "all", "null", "none"):
        return None
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise InvalidFilterSpec(f"'{name}' must be true or false, got {value!r}")


def _parse_float(name, value, default=None) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise InvalidFilterSpec(f"'{name}' must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidFilterSpec(f"'{name}' must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidFilterSpec(f"'{name}' must be a finite number, got {value!r}")
    return number


def _check_number(name, value, optional=False):
    if value is None and optional:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidFilterSpec(f"'{name}' must be a finite number, got {value!r}")


def _enum_text(name, value) -> str:
    """Selector value as text; None and members of the enum are accepted."""
    if value is None:
        return ""
    if isinstance(value, (Genre, Platform)):
        return value.value
    if isinstance(value, str):
        return value.strip()
    raise InvalidFilterSpec(f"'{name}' must be text, got {value!r}")


def _parse_tags(value) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    elif not isinstance(value, (list, tuple)):
        raise InvalidFilterSpec(f"'tags' must be text or a list of text, got {value!r}")
    tags = []
    for tag in value:
        if not isinstance(tag, str):
            raise InvalidFilterSpec(f"'tags' must only hold text, got {tag!r}")
        tag = tag.strip()
        if tag and tag.lower() not in [t.lower() for t in tags]:
            tags.append(tag)
    return tuple(tags)


@dataclass(frozen=True)
class FilterSpec:
    """What the storefront asks the catalog for.

    Empty strings and ``None`` mean "no constraint". ``price_max`` of None
    leaves the range open at the top.
    """

    search: str = ""
    genre: str = ""
    platform: str = ""
    price_min: float = 0.0
    price_max: Optional[float] = None
    is_free: Optional[bool] = None
    rating: float = 0.0
    sort_by: str = DEFAULT_SORT
    tags: Tuple[str, ...] = ()
    page_size: int = DEFAULT_PAGE_SIZE
    cursor: Optional[str] = None

    @classmethod
    def from_mapping(cls, data) -> "FilterSpec":
        """Build a spec from query-string or JSON input.

        ``data`` may be a plain dict or a werkzeug MultiDict, in which case
        repeated ``tags`` parameters are all kept.
        """
        if hasattr(data, "getlist") and len(data.getlist("tags")) > 1:
            tags = data.getlist("tags")
        else:
            tags = data.get("tags")

        page_size = data.get("page_size", data.get("limit"))
        if page_size is None or (isinstance(page_size, str) and not page_size.strip()):
            page_size = DEFAULT_PAGE_SIZE
        elif isinstance(page_size, bool):
            raise InvalidFilterSpec("'page_size' must be an integer")
        else:
            try:
                page_size = int(str(page_size).strip())
            except ValueError:
                raise InvalidFilterSpec(f"'page_size' must be an integer, got {page_size!r}") from None

        spec = cls(
            search=str(data.get("search") or "").strip(),
            genre=str(data.get("genre") or "").strip(),
            platform=str(data.get("platform") or "").strip(),
            price_min=_parse_float("price_min", data.get("price_min"), 0.0),
            price_max=_parse_float("price_max", data.get("price_max")),
            is_free=_parse_bool("is_free", data.get("is_free")),
            rating=_parse_float("rating", data.get("rating"), 0.0),
            sort_by=str(data.get("sort_by") or DEFAULT_SORT).strip(),
            tags=_parse_tags(tags),
            page_size=page_size,
            cursor=data.get("cursor") or None,
        )
        return spec.validate()

    @property
    def genre_filter(self) -> Optional[Genre]:
        text = _enum_text("genre", self.genre)
        if text.lower() in ANY_VALUES:
            return None
        return Genre.parse(text)

    @property
    def platform_filter(self) -> Optional[Platform]:
        text = _enum_text("platform", self.platform)
        if text.lower() in ANY_VALUES:
            return None
        return Platform.parse(text)

    def validate(self) -> "FilterSpec":
        """Raise InvalidFilterSpec for anything the catalog cannot answer; never clamps."""
        if isinstance(self.page_size, bool) or not isinstance(self.page_size, int) or self.page_size <= 0:
            raise InvalidFilterSpec(f"'page_size' must be a positive integer, got {self.page_size!r}")
        _check_number("price_min", self.price_min)
        _check_number("price_max", self.price_max, optional=True)
        _check_number("rating", self.rating)
        if self.price_min < 0:
            raise InvalidFilterSpec("'price_min' cannot be negative")
        if self.price_max is not None:
            if self.price_max < 0:
                raise InvalidFilterSpec("'price_max' cannot be negative")
            if self.price_max < self.price_min:
                raise InvalidFilterSpec("'price_min' cannot be greater than 'price_max'")
        if not 0 <= self.rating <= MAX_RATING:
            raise InvalidFilterSpec(f"'rating' must be between 0 and {MAX_RATING:g}")
        if self.sort_by not in SORT_OPTIONS:
            raise InvalidFilterSpec(f"'sort_by' must be one of {', '.join(SORT_OPTIONS)}")
        if not isinstance(self.search, str):
            raise InvalidFilterSpec(f"'search' must be text, got {self.search!r}")
        if isinstance(self.tags, str):
            raise InvalidFilterSpec("'tags' must be a list of text")
        _parse_tags(self.tags)
        for selector in ("genre_filter", "platform_filter"):
            try:
                getattr(self, selector)
            except InvalidFilterSpec:
                raise
            except ValueError as exc:
                raise InvalidFilterSpec(str(exc)) from None
        if self.cursor is not None:
            decode_cursor(self.cursor, self.sort_by)
        return self

    def with_cursor(self, cursor: Optional[str]) -> "FilterSpec":
        return dataclasses.replace(self, cursor=cursor)
