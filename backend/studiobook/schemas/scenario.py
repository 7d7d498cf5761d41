"""Scenario schemas for API."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

from ..models.scenario import MAX_SCENARIO_IMAGES


def _keep_first_images(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    return value[:MAX_SCENARIO_IMAGES]


class ScenarioCreate(BaseModel):
    """Schema for creating a scenario."""
    name: StrictStr = Field(..., min_length=1, max_length=255)
    category: StrictStr = Field(..., min_length=1)
    special: StrictBool
    sub_category: str = ""
    description: str = ""
    session_minutes: Optional[int] = Field(None, ge=0)
    requires_costume: bool = False
    main_image: str = ""
    images: List[str] = Field(default_factory=list)

    truncate_images = field_validator("images")(_keep_first_images)


class ScenarioUpdate(BaseModel):
    """Schema for updating a scenario. Only sent fields change."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[StrictStr] = Field(None, min_length=1, max_length=255)
    category: Optional[StrictStr] = Field(None, min_length=1)
    special: Optional[StrictBool] = None
    sub_category: Optional[str] = None
    description: Optional[str] = None
    session_minutes: Optional[int] = Field(None, ge=0)
    requires_costume: Optional[bool] = None
    main_image: Optional[str] = None
    images: Optional[List[str]] = None

    truncate_images = field_validator("images")(_keep_first_images)


class ScenarioResponse(BaseModel):
    """Schema for scenario in API responses."""
    id: str
    name: str
    category: str
    sub_category: str = ""
    description: str = ""
    special: bool
    session_minutes: Optional[int] = None
    requires_costume: bool
    main_image: str = ""
    images: List[str] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
