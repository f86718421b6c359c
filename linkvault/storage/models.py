"""Data models for the link store."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Serialize an aware datetime as ISO-8601 UTC with a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp written by :func:`format_timestamp`.

    Also accepts the millisecond ``...000Z`` form. Naive values are taken as UTC.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class LinkRecord:
    """A short code and the URL it points to."""

    id: str
    long_url: str
    created: datetime
    expires: datetime
    pin: Optional[str] = None
    clicked: int = 0

    @property
    def requires_pin(self) -> bool:
        return self.pin is not None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires

    def to_dict(self) -> dict:
        """Convert to the persisted JSON shape."""
        return {
            "id": self.id,
            "long_url": self.long_url,
            "pin": self.pin,
            "clicked": self.clicked,
            "created": format_timestamp(self.created),
            "expires": format_timestamp(self.expires),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LinkRecord":
        """Create from the persisted JSON shape."""
        pin = data.get("pin")
        return cls(
            id=data["id"],
            long_url=data["long_url"],
            pin=str(pin) if pin else None,
            clicked=int(data.get("clicked", 0)),
            created=data["created"] if isinstance(data["created"], datetime) else parse_timestamp(data["created"]),
            expires=data["expires"] if isinstance(data["expires"], datetime) else parse_timestamp(data["expires"]),
        )


@dataclass(frozen=True)
class LinkDescription:
    """What a lookup may reveal about a link.

    ``long_url`` is only set for unprotected links.
    """

    id: str
    requires_pin: bool
    long_url: Optional[str] = None
