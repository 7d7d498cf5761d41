"""Scenario CRUD API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_caller_uid
from ..database import get_db
from ..errors import InvalidArgument, NotFound
from ..models import Scenario
from ..schemas.common import CreatedResponse, SuccessResponse
from ..schemas.scenario import ScenarioCreate, ScenarioUpdate, ScenarioResponse
from ..services.authorization import require_administrator
from ..services.blob_store import blob_store, replaced_images
from ..services.events import ScenarioCreated, event_bus, snapshot
from ..utils.db_utils import retry_on_lock
from ..utils.pagination import paginate
from ..utils.timeutils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scenarios", tags=["scenarios"])

REQUIRED_SCENARIO_FIELDS = ("name", "category", "special")


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_scenario(
    scenario: ScenarioCreate,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Create a scenario and announce it to every device."""
    await require_administrator(db, caller_uid, "Only administrators can create scenarios.")

    now = utcnow()
    db_scenario = Scenario(
        **scenario.model_dump(exclude={"session_minutes"}),
        # Special scenarios have no fixed session length
        session_minutes=None if scenario.special else (scenario.session_minutes or 0),
        created_at=now,
        updated_at=now,
    )
    db.add(db_scenario)
    await retry_on_lock(db.commit)

    logger.info(f"Scenario created: {db_scenario.name} ({db_scenario.id})")
    event_bus.publish(ScenarioCreated(scenario=snapshot(db_scenario)))
    return CreatedResponse(id=db_scenario.id)


@router.patch("/{scenario_id}", response_model=SuccessResponse)
async def update_scenario(
    scenario_id: str,
    update: ScenarioUpdate,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Update a scenario, deleting images it no longer references."""
    await require_administrator(db, caller_uid, "You do not have permission.")

    scenario = await db.get(Scenario, scenario_id)
    if not scenario:
        raise NotFound("Scenario not found")

    changes = update.model_dump(exclude_unset=True)
    cleared = sorted(key for key in REQUIRED_SCENARIO_FIELDS if key in changes and changes[key] is None)
    if cleared:
        raise InvalidArgument(f"{', '.join(cleared)} cannot be null.")

    await blob_store.delete_many(replaced_images(snapshot(scenario), changes))

    for key, value in changes.items():
        setattr(scenario, key, value)
    scenario.updated_at = utcnow()

    await retry_on_lock(db.commit)
    return SuccessResponse()


@router.delete("/{scenario_id}", response_model=SuccessResponse)
async def delete_scenario(
    scenario_id: str,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Delete a scenario and its images. Deleting a missing scenario succeeds."""
    await require_administrator(db, caller_uid)

    scenario = await db.get(Scenario, scenario_id)
    if not scenario:
        return SuccessResponse()

    await blob_store.delete(scenario.main_image)
    await blob_store.delete_many(scenario.images or [])

    await db.delete(scenario)
    await retry_on_lock(db.commit)

    logger.info(f"Scenario deleted: {scenario_id}")
    return SuccessResponse()


@router.get("", response_model=List[ScenarioResponse])
async def list_scenarios(
    search: Optional[str] = Query(None, description="Name prefix"),
    category: Optional[str] = None,
    sub_category: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    last_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """List scenarios, newest first, or by name when searching."""
    query = select(Scenario)
    if category:
        query = query.where(Scenario.category == category)
    if sub_category:
        query = query.where(Scenario.sub_category == sub_category)

    if search:
        query = query.where(Scenario.name.startswith(search, autoescape=True))
        return await paginate(db, query, Scenario, Scenario.name, limit=limit, last_id=last_id)

    return await paginate(
        db, query, Scenario, Scenario.created_at, descending=True, limit=limit, last_id=last_id
    )
