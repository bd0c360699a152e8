"""Filtering and ordering of fill records for history views.

``select`` is a pure function: it takes the current snapshot of fills and an
explicit ``FillCriteria`` context and returns a new list. The input sequence
is never reordered in place.

Ordering rules:
- ``date`` compares the full datetime. A missing or unparseable date compares
  as the Unix epoch, so such fills come last in descending order and first in
  ascending order. They never match a year or month filter.
- ``amount`` and ``price_per_liter`` compare numerically; missing values
  compare as zero.
- The sort is stable, so applying the same criteria twice changes nothing.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from core.casting import record_value, safe_float
from date_utils import EPOCH, normalize_to_utc_datetime

ALL: Final[str] = "all"

SortField = Literal["date", "amount", "price_per_liter"]
SortDirection = Literal["asc", "desc"]


class FillCriteria(BaseModel):
    """Filter and sort selection for a fill list.

    Every filter defaults to ``"all"`` (no constraint). ``month`` is
    zero-indexed (0 = January).
    """

    model_config = ConfigDict(frozen=True)

    vehicle_id: str | int = ALL
    year: int | Literal["all"] = ALL
    month: int | Literal["all"] = ALL
    sort_by: SortField = "date"
    sort_direction: SortDirection = "desc"

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def normalize_vehicle(cls, v: Any) -> Any:
        if v is None:
            return ALL
        if isinstance(v, str):
            return v.strip() or ALL
        return v

    @field_validator("year", "month", mode="before")
    @classmethod
    def normalize_period(cls, v: Any) -> Any:
        if v is None:
            return ALL
        if isinstance(v, str):
            v = v.strip().lower()
            if not v or v == ALL:
                return ALL
            return int(v)
        return v

    @field_validator("month")
    @classmethod
    def check_month(cls, v: int | str) -> int | str:
        if v != ALL and not 0 <= v <= 11:
            msg = "month must be between 0 and 11"
            raise ValueError(msg)
        return v


def _fill_datetime(fill: Any) -> datetime | None:
    return normalize_to_utc_datetime(record_value(fill, "date"))


def _matches(fill: Any, criteria: FillCriteria) -> bool:
    if criteria.vehicle_id != ALL:
        vehicle_id = record_value(fill, "vehicle_id")
        if vehicle_id is None or str(vehicle_id) != str(criteria.vehicle_id):
            return False

    if criteria.year == ALL and criteria.month == ALL:
        return True

    day = _fill_datetime(fill)
    if day is None:
        return False
    if criteria.year != ALL and day.year != criteria.year:
        return False
    return criteria.month == ALL or day.month - 1 == criteria.month


def filter_fills(fills: Iterable[Any] | None, criteria: FillCriteria) -> list[Any]:
    """Keep fills matching every active filter, preserving input order."""
    return [fill for fill in fills or [] if _matches(fill, criteria)]


_SORT_KEYS: dict[str, Callable[[Any], Any]] = {
    "date": lambda fill: _fill_datetime(fill) or EPOCH,
    "amount": lambda fill: safe_float(record_value(fill, "amount")),
    "price_per_liter": lambda fill: safe_float(record_value(fill, "price_per_liter")),
}


def sort_fills(
    fills: Iterable[Any] | None,
    sort_by: SortField = "date",
    sort_direction: SortDirection = "desc",
) -> list[Any]:
    """Return a new list of fills ordered by ``sort_by``."""
    key = _SORT_KEYS.get(sort_by, _SORT_KEYS["date"])
    return sorted(fills or [], key=key, reverse=sort_direction == "desc")


def select(
    fills: Iterable[Any] | None, criteria: FillCriteria | None = None
) -> list[Any]:
    """Filter then sort fills according to ``criteria``.

    Defaults to every fill, most recent first.
    """
    criteria = criteria or FillCriteria()
    return sort_fills(
        filter_fills(fills, criteria),
        criteria.sort_by,
        criteria.sort_direction,
    )
