"""Monthly aggregation and headline statistics for fill records.

Everything here is a pure function of its input: records are read, never
mutated, and every call builds fresh result objects. Records may be plain
mappings (deserialized JSON, raw MongoDB documents) or ``db.models.Fill``
instances.

Malformed fields never raise. A missing ``amount`` counts as zero, a missing
``price_per_liter`` or ``odometer`` is left out of the averages that need it,
and a fill whose ``date`` cannot be parsed is left out of the monthly series
and of consumption intervals (its amount still counts toward ``total_cost``).
"""

from __future__ import annotations

import logging
import statistics
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from itertools import pairwise
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field

from core.casting import optional_float, record_value, safe_float
from date_utils import (
    month_key,
    normalize_calendar_date,
    normalize_to_utc_datetime,
)

logger = logging.getLogger(__name__)

COMPACT_CHART_MONTHS: Final[int] = 6
DEFAULT_CHART_MONTHS: Final[int] = 12


class MonthlyChartPoint(BaseModel):
    """Aggregate of one calendar month."""

    model_config = ConfigDict(frozen=True)

    month: str
    amount: float = 0.0
    count: int = 0
    odometer: float | None = None


class FillStatistics(BaseModel):
    """Headline statistics over a set of fills.

    Averages are None when no fill contributes a value.
    """

    model_config = ConfigDict(frozen=True)

    total_fills: int = 0
    total_liters: float = 0.0
    total_cost: float = 0.0
    avg_price_per_liter: float | None = None
    avg_consumption: float | None = None
    last_fill_date: str | None = None
    last_odometer: float | None = None


class FillAggregation(BaseModel):
    """Result of ``aggregate``: ascending monthly series plus statistics."""

    model_config = ConfigDict(frozen=True)

    monthly_series: list[MonthlyChartPoint] = Field(default_factory=list)
    stats: FillStatistics = Field(default_factory=FillStatistics)


@dataclass
class _MonthBucket:
    amount: float = 0.0
    count: int = 0
    odometer: float | None = None
    odometer_at: datetime | None = None

    def add(self, day: datetime, amount: float, odometer: float | None) -> None:
        self.amount += amount
        self.count += 1
        if odometer is None:
            return
        # Latest-dated reading wins; same day keeps the higher reading.
        if self.odometer_at is None or (day, odometer) > (
            self.odometer_at,
            self.odometer,
        ):
            self.odometer = odometer
            self.odometer_at = day


def consumption_intervals(fills: Iterable[Any]) -> list[float]:
    """Return L/100 km for each pair of consecutive odometer readings.

    Fills are grouped by vehicle and ordered by date (then odometer). Each
    interval uses the liters of the later fill. Intervals without a positive
    distance or without liters are skipped.
    """
    readings: dict[str, list[tuple[datetime, float, float | None]]] = defaultdict(
        list
    )
    for fill in fills:
        day = normalize_to_utc_datetime(record_value(fill, "date"))
        odometer = optional_float(record_value(fill, "odometer"))
        if day is None or odometer is None:
            continue
        vehicle_id = record_value(fill, "vehicle_id")
        key = "" if vehicle_id is None else str(vehicle_id)
        readings[key].append(
            (day, odometer, optional_float(record_value(fill, "liters")))
        )

    values: list[float] = []
    for vehicle_readings in readings.values():
        vehicle_readings.sort(key=lambda reading: (reading[0], reading[1]))
        for previous, current in pairwise(vehicle_readings):
            distance = current[1] - previous[1]
            liters = current[2]
            if distance <= 0 or liters is None or liters <= 0:
                continue
            values.append(liters / distance * 100)
    return values


def average_consumption(fills: Iterable[Any]) -> float | None:
    """Mean L/100 km over all consumption intervals, or None."""
    values = consumption_intervals(fills)
    if not values:
        return None
    return round(statistics.fmean(values), 2)


def aggregate(fills: Iterable[Any] | None) -> FillAggregation:
    """Group fills by month and compute headline statistics.

    Args:
        fills: Fill records in any order.

    Returns:
        FillAggregation whose ``monthly_series`` is sorted ascending by
        ``YYYY-MM`` label.
    """
    records = list(fills or [])
    buckets: dict[str, _MonthBucket] = defaultdict(_MonthBucket)

    total_cost = 0.0
    total_liters = 0.0
    prices: list[float] = []
    latest_day: datetime | None = None
    undated = 0

    for fill in records:
        amount = safe_float(record_value(fill, "amount"))
        total_cost += amount
        total_liters += safe_float(record_value(fill, "liters"))

        price = optional_float(record_value(fill, "price_per_liter"))
        if price is not None:
            prices.append(price)

        day = normalize_to_utc_datetime(record_value(fill, "date"))
        if day is None:
            undated += 1
            continue

        odometer = optional_float(record_value(fill, "odometer"))
        buckets[month_key(day)].add(day, amount, odometer)

        if latest_day is None or day > latest_day:
            latest_day = day

    if undated:
        logger.debug("Skipped %d fills without a usable date", undated)

    monthly_series = [
        MonthlyChartPoint(
            month=month,
            amount=round(bucket.amount, 2),
            count=bucket.count,
            odometer=bucket.odometer,
        )
        for month, bucket in sorted(buckets.items())
    ]
    # Month buckets already hold their latest reading; the newest such month wins.
    latest_odometer = next(
        (
            point.odometer
            for point in reversed(monthly_series)
            if point.odometer is not None
        ),
        None,
    )

    stats = FillStatistics(
        total_fills=len(records),
        total_liters=round(total_liters, 2),
        total_cost=round(total_cost, 2),
        avg_price_per_liter=(
            round(statistics.fmean(prices), 3) if prices else None
        ),
        avg_consumption=average_consumption(records),
        last_fill_date=normalize_calendar_date(latest_day),
        last_odometer=latest_odometer,
    )

    return FillAggregation(monthly_series=monthly_series, stats=stats)


class OdometerPoint(BaseModel):
    """One odometer reading of a vehicle, for per-vehicle distance charts."""

    model_config = ConfigDict(frozen=True)

    date: str
    odometer: float
    amount: float | None = None


def odometer_series(fills: Iterable[Any]) -> dict[str, list[OdometerPoint]]:
    """Per-vehicle odometer readings in ascending date order.

    Fills without a date, an odometer or a vehicle are skipped.
    """
    readings: dict[str, list[tuple[datetime, OdometerPoint]]] = defaultdict(list)
    for fill in fills:
        vehicle_id = record_value(fill, "vehicle_id")
        day = normalize_to_utc_datetime(record_value(fill, "date"))
        odometer = optional_float(record_value(fill, "odometer"))
        if vehicle_id is None or day is None or odometer is None:
            continue
        point = OdometerPoint(
            date=normalize_calendar_date(day),
            odometer=odometer,
            amount=optional_float(record_value(fill, "amount")),
        )
        readings[str(vehicle_id)].append((day, point))

    return {
        vehicle_id: [
            point
            for _, point in sorted(items, key=lambda item: (item[0], item[1].odometer))
        ]
        for vehicle_id, items in readings.items()
    }


def chart_months(compact: bool = False) -> int:
    """Number of months a chart shows: 6 on compact displays, 12 otherwise."""
    return COMPACT_CHART_MONTHS if compact else DEFAULT_CHART_MONTHS


def recent_months(
    series: Sequence[MonthlyChartPoint], months: int
) -> list[MonthlyChartPoint]:
    """Return the last ``months`` points of an ascending monthly series."""
    if months <= 0:
        return []
    return list(series[-months:])
