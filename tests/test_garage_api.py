import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from db.models import Fill, Vehicle
from garage import router as garage_router

USER = {"X-User-Id": "user-1"}
OTHER = {"X-User-Id": "user-2"}


def _build_app() -> FastAPI:
    app = FastAPI()
    app.include_router(garage_router)
    return app


def _create_vehicle(client: TestClient, **fields) -> dict:
    resp = client.post("/api/vehicles", json={"name": "Clio", **fields}, headers=USER)
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_routes_require_user_header(beanie_db) -> None:
    client = TestClient(_build_app())

    assert client.get("/api/vehicles").status_code == 401
    assert client.get("/api/fills").status_code == 401
    assert client.get("/api/fills/statistics").status_code == 401


@pytest.mark.asyncio
async def test_vehicle_crud(beanie_db) -> None:
    client = TestClient(_build_app())

    created = _create_vehicle(client, make="Renault", odometer=1200)
    vehicle_id = created["id"]
    assert created["display_name"] == "Clio"
    assert created["owner"] == "user-1"

    listed = client.get("/api/vehicles", headers=USER).json()
    assert [v["id"] for v in listed] == [vehicle_id]
    assert client.get("/api/vehicles", headers=OTHER).json() == []

    resp = client.patch(
        f"/api/vehicles/{vehicle_id}", json={"plate": "AB-123-CD"}, headers=USER
    )
    assert resp.status_code == 200
    assert resp.json()["plate"] == "AB-123-CD"
    assert resp.json()["make"] == "Renault"

    assert (
        client.get(f"/api/vehicles/{vehicle_id}", headers=OTHER).status_code == 404
    )

    resp = client.delete(f"/api/vehicles/{vehicle_id}", headers=USER)
    assert resp.status_code == 200
    assert resp.json()["status"] == "success"
    assert await Vehicle.find_all().count() == 0


@pytest.mark.asyncio
async def test_vehicle_routes_validate_input(beanie_db) -> None:
    client = TestClient(_build_app())

    assert client.post("/api/vehicles", json={"name": ""}, headers=USER).status_code == 422
    assert client.get("/api/vehicles/not-an-id", headers=USER).status_code == 400


@pytest.mark.asyncio
async def test_fill_lifecycle(beanie_db) -> None:
    client = TestClient(_build_app())
    vehicle = _create_vehicle(client)

    resp = client.post(
        "/api/fills",
        json={
            "vehicle_id": vehicle["id"],
            "date": "2024-05-04",
            "odometer": 15000,
            "liters": 40,
            "amount": 74,
        },
        headers=USER,
    )
    assert resp.status_code == 201
    body = resp.json()
    fill = body["fill"]
    assert body["message"] == "Fill added"
    assert fill["date"] == "2024-05-04"
    assert fill["vehicle_name"] == "Clio"
    assert fill["price_per_liter"] == pytest.approx(1.85)

    resp = client.get(f"/api/fills/{fill['id']}", headers=USER)
    assert resp.status_code == 200
    assert resp.json()["amount"] == pytest.approx(74)

    resp = client.patch(
        f"/api/fills/{fill['id']}", json={"notes": "highway"}, headers=USER
    )
    assert resp.status_code == 200
    assert resp.json()["fill"]["notes"] == "highway"
    assert resp.json()["fill"]["price_per_liter"] == pytest.approx(1.85)

    assert (
        client.patch(
            f"/api/fills/{fill['id']}", json={"notes": "x"}, headers=OTHER
        ).status_code
        == 403
    )

    stored_vehicle = client.get(f"/api/vehicles/{vehicle['id']}", headers=USER).json()
    assert stored_vehicle["odometer"] == pytest.approx(15000)
    assert stored_vehicle["last_fill"] == "2024-05-04"

    resp = client.delete(f"/api/fills/{fill['id']}", headers=USER)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Fill deleted", "fill_id": fill["id"]}
    assert await Fill.find_all().count() == 0


@pytest.mark.asyncio
async def test_fill_create_rejects_bad_payload(beanie_db) -> None:
    client = TestClient(_build_app())
    vehicle = _create_vehicle(client)

    for payload in (
        {"vehicle_id": vehicle["id"], "date": "yesterday-ish"},
        {"vehicle_id": vehicle["id"], "date": "2024-01-01", "liters": 0},
        {"date": "2024-01-01"},
    ):
        assert client.post("/api/fills", json=payload, headers=USER).status_code == 422


@pytest.mark.asyncio
async def test_list_fills_filters_and_sorts(beanie_db) -> None:
    client = TestClient(_build_app())
    first = _create_vehicle(client)
    second = _create_vehicle(client, name="Kangoo")

    for vehicle, date, amount in [
        (first, "2024-01-05", 60),
        (second, "2024-03-10", 80),
        (first, "2024-03-02", 40),
        (first, "2023-12-24", 90),
    ]:
        client.post(
            "/api/fills",
            json={"vehicle_id": vehicle["id"], "date": date, "amount": amount},
            headers=USER,
        )

    body = client.get(
        "/api/fills", params={"vehicle_id": first["id"]}, headers=USER
    ).json()
    assert body["count"] == 3
    assert [f["date"] for f in body["fills"]] == [
        "2024-03-02",
        "2024-01-05",
        "2023-12-24",
    ]

    body = client.get(
        "/api/fills",
        params={"year": "2024", "month": "2", "sort_by": "amount"},
        headers=USER,
    ).json()
    assert [f["amount"] for f in body["fills"]] == [80, 40]
    assert [f["vehicle_name"] for f in body["fills"]] == ["Kangoo", "Clio"]

    body = client.get(
        "/api/fills", params={"sort_direction": "asc"}, headers=USER
    ).json()
    assert body["fills"][0]["date"] == "2023-12-24"

    resp = client.get("/api/fills", params={"month": "12"}, headers=USER)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_statistics_route(beanie_db) -> None:
    client = TestClient(_build_app())
    vehicle = _create_vehicle(client)
    for month in range(1, 13):
        client.post(
            "/api/fills",
            json={
                "vehicle_id": vehicle["id"],
                "date": f"2024-{month:02d}-15",
                "amount": 50,
                "liters": 30,
                "odometer": 10000 + month * 600,
            },
            headers=USER,
        )

    resp = client.get("/api/fills/statistics", headers=USER)
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["monthly_chart"]) == 12
    assert body["stats"]["total_fills"] == 12
    assert body["stats"]["total_cost"] == pytest.approx(600)
    assert body["stats"]["avg_consumption"] == pytest.approx(5.0)
    assert body["stats"]["last_fill_date"] == "2024-12-15"

    compact = client.get(
        "/api/fills/statistics", params={"compact": "true"}, headers=USER
    ).json()
    assert [p["month"] for p in compact["monthly_chart"]] == [
        f"2024-{m:02d}" for m in range(7, 13)
    ]

    window = client.get(
        "/api/fills/statistics", params={"months": 3, "year": 2024}, headers=USER
    ).json()
    assert [p["month"] for p in window["monthly_chart"]] == [
        "2024-10",
        "2024-11",
        "2024-12",
    ]
