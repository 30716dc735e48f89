"""
Normalized message records and prompt/reply pairs.

Raw archive messages look like:

    {
      "id": "1088523571264938084",
      "content": "hello",
      "timestamp": "2023-03-22T14:02:11.513000+00:00",
      "author": {"id": "203210712233820160", ...},
      "message_reference": {"message_id": "1088523471264938001", ...}
    }

Only the fields above are kept; everything else in the export is ignored.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from dateutil.parser import isoparse

U64_MAX = 2**64 - 1
_DIGITS = re.compile(r"[0-9]+")


class RecordError(ValueError):
    """A raw message object is missing a required field or has a malformed one."""


def parse_snowflake(value: Any, field: str = "id") -> int:
    """Coerce a string-or-number id into an unsigned 64-bit integer."""
    if isinstance(value, bool):
        raise RecordError(f"{field}: expected an unsigned 64-bit id, got {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _DIGITS.fullmatch(value):
        number = int(value)
    else:
        raise RecordError(f"{field}: expected an unsigned 64-bit id, got {value!r}")
    if not 0 <= number <= U64_MAX:
        raise RecordError(f"{field}: {number} does not fit in an unsigned 64-bit integer")
    return number


def parse_timestamp(value: Any, field: str = "timestamp") -> datetime:
    """ISO-8601 -> aware UTC datetime. Naive timestamps are taken as UTC."""
    if not isinstance(value, str):
        raise RecordError(f"{field}: expected an ISO-8601 string, got {value!r}")
    try:
        ts = isoparse(value)
    except (ValueError, OverflowError) as e:
        raise RecordError(f"{field}: cannot parse {value!r} ({e})") from e
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _require(raw: Dict[str, Any], key: str, where: str = "") -> Any:
    if key not in raw:
        raise RecordError(f"missing required field '{where}{key}'")
    return raw[key]


@dataclass(frozen=True)
class Message:
    id: int
    content: str
    timestamp: datetime
    author: int
    reference: Optional[int] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "Message":
        if not isinstance(raw, dict):
            raise RecordError(f"expected a message object, got {type(raw).__name__}")

        content = _require(raw, "content")
        if not isinstance(content, str):
            raise RecordError(f"content: expected a string, got {content!r}")

        author = _require(raw, "author")
        if not isinstance(author, dict):
            raise RecordError(f"author: expected an object, got {author!r}")

        # only the referenced message id matters; channel/guild ids are dropped
        reference = None
        ref = raw.get("message_reference")
        if ref is not None:
            if not isinstance(ref, dict):
                raise RecordError(f"message_reference: expected an object, got {ref!r}")
            if ref.get("message_id") is not None:
                reference = parse_snowflake(ref["message_id"], "message_reference.message_id")

        return cls(
            id=parse_snowflake(_require(raw, "id"), "id"),
            content=content,
            timestamp=parse_timestamp(_require(raw, "timestamp")),
            author=parse_snowflake(_require(author, "id", "author."), "author.id"),
            reference=reference,
        )


@dataclass(frozen=True)
class Pair:
    prompt: str
    reply: str

    def as_dict(self) -> Dict[str, str]:
        return {"prompt": self.prompt, "reply": self.reply}
