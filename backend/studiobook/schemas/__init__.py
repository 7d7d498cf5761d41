"""Pydantic schemas for API request/response models."""
from .appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentQuery,
    AppointmentResponse,
)
from .client import ClientUpsert, ClientResponse
from .common import CreatedResponse, SuccessResponse
from .device import DeviceRegisterRequest
from .notification import NotificationResponse
from .photo_request import PhotoRequestCreate, PhotoDelivery, PhotoRequestResponse
from .scenario import ScenarioCreate, ScenarioUpdate, ScenarioResponse

__all__ = [
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentQuery",
    "AppointmentResponse",
    "ClientUpsert",
    "ClientResponse",
    "CreatedResponse",
    "SuccessResponse",
    "DeviceRegisterRequest",
    "NotificationResponse",
    "PhotoRequestCreate",
    "PhotoDelivery",
    "PhotoRequestResponse",
    "ScenarioCreate",
    "ScenarioUpdate",
    "ScenarioResponse",
]
