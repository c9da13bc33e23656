import base64
import binascii
import json
from collections import namedtuple
from datetime import datetime

from app.modules.catalog.exceptions import InvalidFilterSpec

Cursor = namedtuple("Cursor", ["sort_by", "value", "id"])

# Sort keys whose value is a datetime and travels as an ISO string.
DATETIME_SORTS = {"newest"}


def encode_cursor(sort_by: str, value, record_id: int) -> str:
    if isinstance(value, datetime):
        value = value.isoformat()
    payload = json.dumps({"s": sort_by, "v": value, "id": record_id}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(token: str, sort_by: str) -> Cursor:
    """Turn an opaque token back into the position it was minted at.

    The token is only valid for the ordering that produced it.
    """
    try:
        padded = token + "=" * (-len(token) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
        cursor = Cursor(payload["s"], payload["v"], int(payload["id"]))
    except (ValueError, KeyError, TypeError, binascii.Error, UnicodeError):
        raise InvalidFilterSpec("Malformed cursor") from None

    if cursor.sort_by != sort_by:
        raise InvalidFilterSpec(f"Cursor was created for sort '{cursor.sort_by}', not '{sort_by}'")

    value = cursor.value
    try:
        if sort_by in DATETIME_SORTS:
            value = datetime.fromisoformat(value)
        elif sort_by == "popular":
            value = int(value)
        else:
            value = float(value)
    except (TypeError, ValueError):
        raise InvalidFilterSpec("Malformed cursor") from None
    return cursor._replace(value=value)
