from datetime import UTC, datetime
from enum import StrEnum


class StringEnum(StrEnum):
    """
    A StrEnum subclass that behaves like a plain string in all representations.

    StrEnum.__repr__ returns the member representation (e.g. '<MyEnum.VALUE: 'value'>');
    this class returns the raw value instead, so enums log and serialize as text.
    """

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value

    def __format__(self, format_spec: str) -> str:
        return self.value.__format__(format_spec)


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from MongoDB (stored as naive UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Canonical wire format: ISO-8601, UTC, millisecond precision, 'Z' suffix."""
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def dedupe_trim(values: list[str] | None) -> list[str]:
    """Trim entries, drop blanks and duplicates, keep first-seen order."""
    seen: dict[str, None] = {}
    for raw in values or []:
        item = str(raw).strip()
        if item:
            seen.setdefault(item, None)
    return list(seen)
