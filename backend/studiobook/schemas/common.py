"""Shared response schemas."""
from pydantic import BaseModel


class SuccessResponse(BaseModel):
    success: bool = True


class CreatedResponse(BaseModel):
    """Id of a newly created record."""
    id: str
