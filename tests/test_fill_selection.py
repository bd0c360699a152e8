from __future__ import annotations

import pytest
from pydantic import ValidationError

from garage.services.selection import FillCriteria, filter_fills, select, sort_fills


def _fill(fill_id, vehicle_id, date, amount=None, price=None):
    return {
        "id": fill_id,
        "vehicle_id": vehicle_id,
        "date": date,
        "amount": amount,
        "price_per_liter": price,
    }


@pytest.fixture
def fills():
    return [
        _fill("f1", 3, "2024-01-05", 60, 1.80),
        _fill("f2", 4, "2024-03-10", 80, 1.95),
        _fill("f3", 3, "2024-03-02", 40, 1.70),
        _fill("f4", 3, "2023-12-24", 90, 1.85),
        _fill("f5", 4, "2024-01-20", 20, None),
    ]


def _ids(records):
    return [r["id"] for r in records]


def test_select_filters_by_vehicle_then_sorts_by_date_desc(fills) -> None:
    result = select(fills, FillCriteria(vehicle_id=3))

    assert _ids(result) == ["f3", "f1", "f4"]


def test_select_vehicle_filter_compares_string_forms(fills) -> None:
    assert _ids(select(fills, FillCriteria(vehicle_id="3"))) == ["f3", "f1", "f4"]


def test_select_all_criteria_keeps_every_fill(fills) -> None:
    result = select(fills, FillCriteria())

    assert len(result) == len(fills)
    assert set(_ids(result)) == set(_ids(fills))
    assert _ids(result) == ["f2", "f3", "f5", "f1", "f4"]


def test_select_empty_input() -> None:
    assert select([], FillCriteria(vehicle_id=3, year=2024)) == []
    assert select(None) == []


def test_select_month_is_zero_indexed(fills) -> None:
    result = select(fills, FillCriteria(year=2024, month=2))

    assert _ids(result) == ["f2", "f3"]


def test_select_month_filter_across_years(fills) -> None:
    assert _ids(select(fills, FillCriteria(month=11))) == ["f4"]


def test_select_year_filter(fills) -> None:
    assert _ids(select(fills, FillCriteria(year=2023))) == ["f4"]


def test_select_sorts_by_amount(fills) -> None:
    result = select(fills, FillCriteria(sort_by="amount", sort_direction="asc"))

    assert _ids(result) == ["f5", "f3", "f1", "f2", "f4"]


def test_select_price_missing_compares_as_zero(fills) -> None:
    result = select(fills, FillCriteria(sort_by="price_per_liter"))

    assert _ids(result) == ["f2", "f4", "f1", "f3", "f5"]


def test_select_is_idempotent(fills) -> None:
    criteria = FillCriteria(sort_by="amount", sort_direction="desc")
    ties = fills + [_fill("f6", 4, "2024-02-01", 60, 1.9)]

    once = select(ties, criteria)
    twice = select(once, criteria)

    assert _ids(once) == _ids(twice)


def test_select_does_not_reorder_input(fills) -> None:
    before = _ids(fills)

    select(fills, FillCriteria(sort_direction="asc"))

    assert _ids(fills) == before


def test_invalid_dates_sort_as_epoch_and_never_match_periods() -> None:
    records = [
        _fill("bad", 1, "not-a-date", 10),
        _fill("good", 1, "2024-01-01", 10),
        _fill("none", 1, None, 10),
    ]

    assert _ids(select(records)) == ["good", "bad", "none"]
    assert _ids(select(records, FillCriteria(sort_direction="asc"))) == [
        "bad",
        "none",
        "good",
    ]
    assert _ids(select(records, FillCriteria(year=2024))) == ["good"]


def test_filter_fills_preserves_order(fills) -> None:
    assert _ids(filter_fills(fills, FillCriteria(vehicle_id=4))) == ["f2", "f5"]


def test_sort_fills_unknown_field_falls_back_to_date(fills) -> None:
    assert _ids(sort_fills(fills, "odometer", "asc")) == [
        "f4",
        "f1",
        "f5",
        "f3",
        "f2",
    ]


def test_criteria_normalizes_query_strings() -> None:
    criteria = FillCriteria(vehicle_id=" ", year="2024", month="ALL")

    assert criteria.vehicle_id == "all"
    assert criteria.year == 2024
    assert criteria.month == "all"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"month": 12},
        {"month": -1},
        {"year": "twenty"},
        {"sort_by": "odometer"},
        {"sort_direction": "up"},
    ],
)
def test_criteria_rejects_invalid_values(kwargs) -> None:
    with pytest.raises(ValidationError):
        FillCriteria(**kwargs)
