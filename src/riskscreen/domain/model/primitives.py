"""Domain primitives: scalar aliases + small value objects."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Final

type CountryCode = str
type Identifier = str
type ConnectorId = str

_PARTIAL_DATE_PATTERN: Final = re.compile(r"^(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?$")


@dataclass(frozen=True, slots=True)
class PartialDate:
    """Date with optional month/day, as published on most watchlists."""

    year: int
    month: int | None = None
    day: int | None = None

    def __post_init__(self) -> None:
        if self.day is not None and self.month is None:
            raise ValueError("A day requires a month")
        # date() validates the calendar for us
        date(self.year, self.month or 1, self.day or 1)

    @classmethod
    def parse(cls, value: str) -> PartialDate:
        """Parse ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD`` (a time suffix is ignored)."""

        text = value.strip().split("T", 1)[0]
        match = _PARTIAL_DATE_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Invalid partial date: {value!r}")
        year, month, day = match.groups()
        return cls(
            year=int(year),
            month=int(month) if month else None,
            day=int(day) if day else None,
        )

    @classmethod
    def parse_lenient(cls, value: str | None) -> PartialDate | None:
        if not value:
            return None
        try:
            return cls.parse(value)
        except ValueError:
            return None

    @property
    def is_complete(self) -> bool:
        return self.month is not None and self.day is not None

    def __str__(self) -> str:
        parts = [f"{self.year:04d}"]
        if self.month is not None:
            parts.append(f"{self.month:02d}")
        if self.day is not None:
            parts.append(f"{self.day:02d}")
        return "-".join(parts)
