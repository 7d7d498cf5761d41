import httpx
import jwt
import pytest
import pytest_asyncio
from sqlalchemy import select

from conftest import add_admin
from studiobook.config import settings
from studiobook.database import get_db
from studiobook.main import create_app
from studiobook.models import Client, Device, PhotoRequest, Scenario
from studiobook.services import blob_store as blob_store_module
from studiobook.services.blob_store import replaced_images
from studiobook.services.events import event_bus


def auth_header(uid: str) -> dict:
    token = jwt.encode({"sub": uid}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session_factory):
    app = create_app()

    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    event_bus.clear()

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    await event_bus.drain()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_create_appointment_requires_sign_in(client):
    response = await client.post("/api/appointments", json={"date": "2024-06-01T10:00"})

    assert response.status_code == 401
    assert response.json()["code"] == "unauthenticated"


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client):
    response = await client.post(
        "/api/appointments",
        json={"date": "2024-06-01T10:00"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_appointment_lifecycle_over_http(client):
    headers = auth_header("client-b")

    created = await client.post("/api/appointments", json={"date": "2030-06-01T10:00"}, headers=headers)
    assert created.status_code == 201
    appointment_id = created.json()["id"]

    duplicate = await client.post("/api/appointments", json={"date": "2030-06-01T18:00"}, headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "already-exists"

    accept = await client.patch(
        f"/api/appointments/{appointment_id}", json={"request_status": "accepted"}, headers=headers
    )
    assert accept.status_code == 403
    assert accept.json()["code"] == "permission-denied"

    cancel = await client.patch(
        f"/api/appointments/{appointment_id}", json={"request_status": "rejected"}, headers=headers
    )
    assert cancel.json() == {"success": True}

    listed = await client.get("/api/appointments", headers=headers)
    assert listed.status_code == 200
    assert listed.json() == []


@pytest.mark.asyncio
async def test_missing_date_is_invalid_argument(client):
    response = await client.post("/api/appointments", json={"notes": "hi"}, headers=auth_header("client-b"))

    assert response.status_code == 400
    assert response.json()["code"] == "invalid-argument"


@pytest.mark.asyncio
async def test_anonymous_device_registration_then_sign_in(client, session_factory):
    payload = {"device_id": "device-1", "push_token": "token-1", "platform": "android"}

    anonymous = await client.post("/api/devices/register", json=payload)
    assert anonymous.json() == {"success": True}

    signed_in = await client.post("/api/devices/register", json=payload, headers=auth_header("client-b"))
    assert signed_in.json() == {"success": True}

    async with session_factory() as db:
        devices = (await db.execute(select(Device))).scalars().all()
    assert len(devices) == 1
    assert devices[0].user_uid == "client-b"
    assert devices[0].active is True


@pytest.mark.asyncio
async def test_scenarios_are_admin_managed(client, session_factory):
    body = {"name": "Neon Room", "category": "indoor", "special": False, "session_minutes": 45}

    denied = await client.post("/api/scenarios", json=body, headers=auth_header("client-b"))
    assert denied.status_code == 403

    async with session_factory() as db:
        await add_admin(db, "admin-1")

    invalid = await client.post(
        "/api/scenarios", json={**body, "special": "yes"}, headers=auth_header("admin-1")
    )
    assert invalid.status_code == 400
    assert invalid.json()["code"] == "invalid-argument"

    created = await client.post(
        "/api/scenarios",
        json={**body, "images": [f"img/{i}.jpg" for i in range(7)]},
        headers=auth_header("admin-1"),
    )
    assert created.status_code == 201

    special = await client.post(
        "/api/scenarios",
        json={"name": "Night Shoot", "category": "outdoor", "special": True, "session_minutes": 30},
        headers=auth_header("admin-1"),
    )
    assert special.status_code == 201

    listed = (await client.get("/api/scenarios", params={"search": "Neon"})).json()
    assert [s["name"] for s in listed] == ["Neon Room"]
    assert listed[0]["images"] == [f"img/{i}.jpg" for i in range(5)]
    assert listed[0]["session_minutes"] == 45

    async with session_factory() as db:
        night = await db.get(Scenario, special.json()["id"])
    assert night.session_minutes is None

    outdoor = (await client.get("/api/scenarios", params={"category": "outdoor"})).json()
    assert [s["name"] for s in outdoor] == ["Night Shoot"]


@pytest.mark.asyncio
async def test_scenario_update_deletes_replaced_images(client, session_factory, monkeypatch):
    deleted = []

    async def fake_delete(reference):
        if reference:
            deleted.append(reference)

    monkeypatch.setattr(blob_store_module.blob_store, "delete", fake_delete)

    async with session_factory() as db:
        await add_admin(db, "admin-1")
        scenario = Scenario(
            name="Neon Room",
            category="indoor",
            main_image="img/main.jpg",
            images=["img/a.jpg", "img/b.jpg"],
        )
        db.add(scenario)
        await db.commit()
        scenario_id = scenario.id

    response = await client.patch(
        f"/api/scenarios/{scenario_id}",
        json={"main_image": "img/new.jpg", "images": ["img/b.jpg"]},
        headers=auth_header("admin-1"),
    )

    assert response.json() == {"success": True}
    assert deleted == ["img/main.jpg", "img/a.jpg"]

    missing = await client.patch("/api/scenarios/nope", json={"name": "X"}, headers=auth_header("admin-1"))
    assert missing.status_code == 404

    removed = await client.delete(f"/api/scenarios/{scenario_id}", headers=auth_header("admin-1"))
    assert removed.json() == {"success": True}
    assert deleted[-2:] == ["img/new.jpg", "img/b.jpg"]


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["name", "category", "special"])
async def test_scenario_update_cannot_clear_required_fields(client, session_factory, field):
    async with session_factory() as db:
        await add_admin(db, "admin-1")
        scenario = Scenario(name="Neon Room", category="indoor", special=False)
        db.add(scenario)
        await db.commit()
        scenario_id = scenario.id

    response = await client.patch(
        f"/api/scenarios/{scenario_id}", json={field: None}, headers=auth_header("admin-1")
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid-argument"

    async with session_factory() as db:
        unchanged = await db.get(Scenario, scenario_id)
    assert unchanged.name == "Neon Room"
    assert unchanged.category == "indoor"
    assert unchanged.special is False


def test_replaced_images_ignores_untouched_fields():
    old = {"main_image": "img/main.jpg", "images": ["img/a.jpg"]}

    assert replaced_images(old, {"name": "Renamed"}) == []
    assert replaced_images(old, {"main_image": "img/main.jpg"}) == []
    assert replaced_images(old, {"images": []}) == ["img/a.jpg"]


@pytest.mark.asyncio
async def test_client_profiles(client, session_factory):
    await client.put("/api/clients/me", json={"name": "Ana", "email": "ana@example.com"}, headers=auth_header("client-b"))
    await client.put("/api/clients/me", json={"email": "ana@example.com"}, headers=auth_header("client-c"))

    denied = await client.get("/api/clients", headers=auth_header("client-b"))
    assert denied.status_code == 403

    async with session_factory() as db:
        await add_admin(db, "admin-1")
        unnamed = await db.get(Client, "client-c")
    assert unnamed.name == "No name"

    found = (await client.get("/api/clients", params={"search": "An"}, headers=auth_header("admin-1"))).json()
    assert [c["id"] for c in found] == ["client-b"]

    not_mine = await client.delete("/api/clients/client-c", headers=auth_header("client-b"))
    assert not_mine.status_code == 403

    own = await client.delete("/api/clients/client-b", headers=auth_header("client-b"))
    assert own.json() == {"success": True}


@pytest.mark.asyncio
async def test_photo_request_flow(client, session_factory):
    created = await client.post("/api/photo-requests", json={"receipt_url": "receipts/1.jpg"}, headers=auth_header("client-b"))
    assert created.status_code == 201
    request_id = created.json()["id"]

    not_admin = await client.put(
        f"/api/photo-requests/{request_id}/delivery", json={"photo_urls": ["p/1.jpg"]}, headers=auth_header("client-b")
    )
    assert not_admin.status_code == 403

    async with session_factory() as db:
        await add_admin(db, "admin-1")

    delivered = await client.put(
        f"/api/photo-requests/{request_id}/delivery", json={"photo_urls": ["p/1.jpg"]}, headers=auth_header("admin-1")
    )
    assert delivered.json() == {"success": True}

    async with session_factory() as db:
        photo_request = await db.get(PhotoRequest, request_id)
    assert photo_request.status == "delivered"
    assert photo_request.photo_urls == ["p/1.jpg"]

    mine = (await client.get("/api/photo-requests", headers=auth_header("client-b"))).json()
    assert [r["id"] for r in mine] == [request_id]

    stranger = await client.delete(f"/api/photo-requests/{request_id}", headers=auth_header("client-c"))
    assert stranger.status_code == 403

    owner = await client.delete(f"/api/photo-requests/{request_id}", headers=auth_header("client-b"))
    assert owner.json() == {"success": True}


@pytest.mark.asyncio
async def test_notification_inbox_requires_sign_in(client):
    anonymous = await client.get("/api/notifications")
    assert anonymous.status_code == 401

    mine = await client.get("/api/notifications", headers=auth_header("client-b"))
    assert mine.json() == []
