# billing_ledger/services/billing_period.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from functools import total_ordering
from typing import Iterator, List, Optional, Union

BEFORE = -1
EQUAL = 0
AFTER = 1

_PERIOD_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")


@total_ordering
@dataclass(frozen=True)
class Period:
    """A billing month. Ordered by (year, month)."""
    month: int
    year: int

    def __post_init__(self):
        if not isinstance(self.month, int) or not 1 <= self.month <= 12:
            raise ValueError(f"month must be 1..12, got {self.month!r}")
        if not isinstance(self.year, int):
            raise ValueError(f"year must be an int, got {self.year!r}")

    @property
    def key(self) -> int:
        return self.year * 12 + (self.month - 1)

    def __lt__(self, other: "Period") -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return self.key < other.key

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def as_dict(self) -> dict:
        return {"month": self.month, "year": self.year}

    @classmethod
    def from_key(cls, key: int) -> "Period":
        year, m0 = divmod(key, 12)
        return cls(month=m0 + 1, year=year)

    @classmethod
    def parse(cls, raw: str) -> "Period":
        """'2025-01' -> Period(1, 2025)"""
        m = _PERIOD_RE.match(raw or "")
        if not m:
            raise ValueError(f"Invalid period {raw!r}, expected YYYY-MM")
        return cls(month=int(m.group(2)), year=int(m.group(1)))


def period_of(d: Union[date, datetime]) -> Period:
    return Period(month=d.month, year=d.year)


def compare(p1: Period, p2: Period) -> int:
    if p1.key < p2.key:
        return BEFORE
    if p1.key > p2.key:
        return AFTER
    return EQUAL


def previous(p: Period) -> Period:
    return Period.from_key(p.key - 1)


def next_period(p: Period) -> Period:
    return Period.from_key(p.key + 1)


def is_before(p: Period, admission: Optional[Period]) -> bool:
    # unknown admission: every period is out of range
    if admission is None:
        return True
    return p.key < admission.key


def months_between(start: Period, end: Period) -> int:
    return end.key - start.key


def iter_periods(start: Period, end: Period) -> Iterator[Period]:
    for k in range(start.key, end.key + 1):
        yield Period.from_key(k)


def enumerate_periods(start: Period, end: Period) -> List[Period]:
    """Inclusive, ascending. Empty when start > end."""
    return list(iter_periods(start, end))
