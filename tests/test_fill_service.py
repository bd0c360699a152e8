from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from core.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from db.models import Fill, Vehicle
from db.schemas import FillCreateModel, FillUpdateModel
from garage.services import FillService, StatisticsService, VehicleService
from garage.services.fill_service import derive_price_per_liter
from garage.services.selection import FillCriteria


async def _vehicle(owner: str = "user-1", **fields) -> Vehicle:
    vehicle = Vehicle(owner=owner, name="Clio", **fields)
    await vehicle.insert()
    return vehicle


def _fill_data(vehicle: Vehicle, date: str, **fields) -> dict:
    return FillCreateModel(vehicle_id=str(vehicle.id), date=date, **fields).model_dump(
        exclude_none=True
    )


def test_derive_price_per_liter() -> None:
    assert derive_price_per_liter(75.0, 40.0) == pytest.approx(1.875)
    assert derive_price_per_liter(10.0, 3.0) == pytest.approx(3.333)
    assert derive_price_per_liter(None, 40.0) is None
    assert derive_price_per_liter(10.0, 0) is None


@pytest.mark.asyncio
async def test_create_fill_derives_price_and_refreshes_vehicle(beanie_db) -> None:
    vehicle = await _vehicle(odometer=9000)

    fill, returned_vehicle = await FillService.create_fill(
        "user-1",
        _fill_data(vehicle, "2024-03-15", odometer=10000, liters=40, amount=75),
    )

    assert returned_vehicle.id == vehicle.id
    assert fill.price_per_liter == pytest.approx(1.875)
    assert fill.date == datetime(2024, 3, 15, tzinfo=UTC)

    stored = await Vehicle.get(vehicle.id)
    assert stored.odometer == pytest.approx(10000)
    assert stored.last_fill.date().isoformat() == "2024-03-15"
    assert stored.computed_consumption is None


@pytest.mark.asyncio
async def test_create_fill_keeps_given_price(beanie_db) -> None:
    vehicle = await _vehicle()

    fill, _ = await FillService.create_fill(
        "user-1",
        _fill_data(vehicle, "2024-03-15", liters=40, amount=75, price_per_liter=1.9),
    )

    assert fill.price_per_liter == pytest.approx(1.9)


@pytest.mark.asyncio
async def test_create_fill_computes_vehicle_consumption(beanie_db) -> None:
    vehicle = await _vehicle()
    for date, odometer, liters in [
        ("2024-01-01", 10000, 38),
        ("2024-01-20", 10500, 40),
        ("2024-02-10", 11200, 45),
    ]:
        await FillService.create_fill(
            "user-1",
            _fill_data(vehicle, date, odometer=odometer, liters=liters, amount=70),
        )

    stored = await Vehicle.get(vehicle.id)
    assert stored.computed_consumption == pytest.approx(7.21)
    assert stored.odometer == pytest.approx(11200)
    assert stored.last_fill.date().isoformat() == "2024-02-10"


@pytest.mark.asyncio
async def test_older_fill_does_not_lower_vehicle_odometer(beanie_db) -> None:
    vehicle = await _vehicle(odometer=20000)

    await FillService.create_fill(
        "user-1", _fill_data(vehicle, "2023-05-01", odometer=15000, liters=30)
    )

    stored = await Vehicle.get(vehicle.id)
    assert stored.odometer == pytest.approx(20000)


@pytest.mark.asyncio
async def test_create_fill_for_foreign_vehicle_is_not_found(beanie_db) -> None:
    vehicle = await _vehicle(owner="someone-else")

    with pytest.raises(ResourceNotFoundException):
        await FillService.create_fill("user-1", _fill_data(vehicle, "2024-01-01"))

    assert await Fill.find_all().count() == 0


@pytest.mark.asyncio
async def test_create_fill_rejects_malformed_vehicle_id(beanie_db) -> None:
    with pytest.raises(ValidationException):
        await FillService.create_fill(
            "user-1", {"vehicle_id": "nope", "date": "2024-01-01"}
        )


@pytest.mark.asyncio
async def test_update_fill_rederives_price_when_amount_changes(beanie_db) -> None:
    vehicle = await _vehicle()
    fill, _ = await FillService.create_fill(
        "user-1", _fill_data(vehicle, "2024-03-15", liters=40, amount=60)
    )

    update = FillUpdateModel(amount=80).model_dump(exclude_unset=True)
    updated, returned_vehicle = await FillService.update_fill(
        "user-1", str(fill.id), update
    )

    assert updated.amount == pytest.approx(80)
    assert updated.price_per_liter == pytest.approx(2.0)
    assert updated.liters == pytest.approx(40)
    assert returned_vehicle is not None


@pytest.mark.asyncio
async def test_update_fill_by_other_user_is_forbidden(beanie_db) -> None:
    vehicle = await _vehicle()
    fill, _ = await FillService.create_fill(
        "user-1", _fill_data(vehicle, "2024-03-15", amount=60)
    )

    with pytest.raises(AuthorizationException):
        await FillService.update_fill("user-2", str(fill.id), {"amount": 1.0})

    stored = await Fill.get(fill.id)
    assert stored.amount == pytest.approx(60)


@pytest.mark.asyncio
async def test_update_fill_missing_is_not_found(beanie_db) -> None:
    with pytest.raises(ResourceNotFoundException):
        await FillService.update_fill(
            "user-1", "65a0c0ffee0000000000beef", {"amount": 1.0}
        )


def test_fill_update_model_rejects_null_date() -> None:
    with pytest.raises(ValidationError):
        FillUpdateModel(date=None)


@pytest.mark.asyncio
async def test_delete_fill_recomputes_last_fill(beanie_db) -> None:
    vehicle = await _vehicle()
    first, _ = await FillService.create_fill(
        "user-1", _fill_data(vehicle, "2024-01-10", amount=10)
    )
    latest, _ = await FillService.create_fill(
        "user-1", _fill_data(vehicle, "2024-02-10", amount=10)
    )

    result = await FillService.delete_fill("user-1", str(latest.id))

    assert result == {"message": "Fill deleted", "fill_id": str(latest.id)}
    assert await Fill.get(latest.id) is None
    stored = await Vehicle.get(vehicle.id)
    assert stored.last_fill.date().isoformat() == "2024-01-10"

    await FillService.delete_fill("user-1", str(first.id))
    stored = await Vehicle.get(vehicle.id)
    assert stored.last_fill is None


@pytest.mark.asyncio
async def test_delete_fill_by_other_user_is_forbidden(beanie_db) -> None:
    vehicle = await _vehicle()
    fill, _ = await FillService.create_fill(
        "user-1", _fill_data(vehicle, "2024-01-10", amount=10)
    )

    with pytest.raises(AuthorizationException):
        await FillService.delete_fill("user-2", str(fill.id))

    assert await Fill.get(fill.id) is not None


@pytest.mark.asyncio
async def test_get_fills_applies_criteria_and_ownership(beanie_db) -> None:
    mine = await _vehicle()
    other = await _vehicle()
    foreign = await _vehicle(owner="user-2")
    await FillService.create_fill("user-1", _fill_data(mine, "2024-01-10", amount=1))
    await FillService.create_fill("user-1", _fill_data(mine, "2024-02-10", amount=2))
    await FillService.create_fill("user-1", _fill_data(other, "2024-03-10", amount=3))
    await FillService.create_fill(
        "user-2", _fill_data(foreign, "2024-03-11", amount=4)
    )

    fills = await FillService.get_fills("user-1", FillCriteria(vehicle_id=str(mine.id)))

    assert [f.amount for f in fills] == [2, 1]
    assert len(await FillService.get_fills("user-1")) == 3


@pytest.mark.asyncio
async def test_delete_vehicle_removes_its_fills(beanie_db) -> None:
    vehicle = await _vehicle()
    await FillService.create_fill("user-1", _fill_data(vehicle, "2024-01-10"))

    result = await VehicleService.delete_vehicle("user-1", str(vehicle.id))

    assert result["status"] == "success"
    assert await Vehicle.get(vehicle.id) is None
    assert await Fill.find_all().count() == 0


@pytest.mark.asyncio
async def test_statistics_window_and_vehicle_series(beanie_db) -> None:
    vehicle = await _vehicle()
    for month in range(1, 13):
        await FillService.create_fill(
            "user-1",
            _fill_data(
                vehicle,
                f"2024-{month:02d}-05",
                amount=month * 10,
                odometer=1000 * month,
                liters=40,
            ),
        )

    compact = await StatisticsService.get_statistics("user-1", months=6)
    full = await StatisticsService.get_statistics("user-1")

    assert [p["month"] for p in compact["monthly_chart"]] == [
        f"2024-{m:02d}" for m in range(7, 13)
    ]
    assert len(full["monthly_chart"]) == 12
    assert full["stats"]["total_fills"] == 12
    assert full["stats"]["total_cost"] == pytest.approx(780)
    assert full["stats"]["avg_consumption"] == pytest.approx(4.0)
    assert full["vehicles"][0]["vehicle_name"] == "Clio"
    assert len(full["vehicles"][0]["points"]) == 12


def test_summarize_applies_filters_before_aggregating() -> None:
    fills = [
        {"vehicle_id": "a", "date": "2024-01-05", "amount": 10},
        {"vehicle_id": "b", "date": "2024-01-06", "amount": 20},
        {"vehicle_id": "a", "date": "2023-06-01", "amount": 40},
    ]

    result = StatisticsService.summarize(
        fills, FillCriteria(vehicle_id="a", year=2024)
    )

    assert result["stats"]["total_cost"] == pytest.approx(10)
    assert result["monthly_chart"] == [
        {"month": "2024-01", "amount": 10.0, "count": 1, "odometer": None}
    ]
    assert result["vehicles"] == []
