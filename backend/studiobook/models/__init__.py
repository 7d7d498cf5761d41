"""Database models."""
from .administrator import Administrator
from .appointment import Appointment
from .client import Client
from .device import Device
from .notification import Notification
from .photo_request import PhotoRequest
from .scenario import Scenario

__all__ = ["Administrator", "Appointment", "Client", "Device", "Notification", "PhotoRequest", "Scenario"]
