import os
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("DATA_PATH", "/tmp/studiobook-tests")

from studiobook import models  # noqa: E402,F401
from studiobook.database import Base, configure_sqlite  # noqa: E402
from studiobook.models import Administrator, Appointment, Device  # noqa: E402
from studiobook.services.events import EventBus  # noqa: E402
from studiobook.services.notifier import NotificationDispatcher  # noqa: E402
from studiobook.services.push_sender import MulticastResult, PushGateway, PushMessage  # noqa: E402


class FakePushGateway(PushGateway):
    """Records multicast calls instead of talking to APNs."""

    def __init__(self, fail: bool = False, platforms=None):
        self.platforms = platforms
        self.calls: List[Tuple[List[str], PushMessage]] = []
        self.fail = fail

    async def send_multicast(self, tokens: Sequence[str], message: PushMessage) -> MulticastResult:
        self.calls.append((list(tokens), message))
        if self.fail:
            raise RuntimeError("gateway unavailable")
        return MulticastResult(success_count=len(tokens))


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as db:
        yield db


@pytest.fixture
def gateway() -> FakePushGateway:
    return FakePushGateway()


@pytest.fixture
def dispatcher(session_factory, gateway) -> NotificationDispatcher:
    return NotificationDispatcher(session_factory=session_factory, gateway=gateway, batch_size=500)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


async def add_admin(db: AsyncSession, uid: str):
    db.add(Administrator(uid=uid))
    await db.commit()


async def add_appointment(
    db: AsyncSession,
    client_uid: str,
    date: datetime,
    request_status: str = "waiting",
    created_at: Optional[datetime] = None,
    scenario_name: Optional[str] = "Neon Room",
    scenario_image: Optional[str] = None,
) -> Appointment:
    appointment = Appointment(
        client_uid=client_uid,
        date=date,
        request_status=request_status,
        attendance_status="waiting",
        scenario_name=scenario_name,
        scenario_image=scenario_image,
        created_at=created_at or date,
        updated_at=created_at or date,
    )
    db.add(appointment)
    await db.commit()
    return appointment


async def add_device(
    db: AsyncSession,
    device_id: str,
    user_uid: Optional[str],
    push_token: Optional[str],
    active: bool = True,
    platform: Optional[str] = "ios",
) -> Device:
    device = Device(id=device_id, user_uid=user_uid, push_token=push_token, platform=platform, active=active)
    db.add(device)
    await db.commit()
    return device
