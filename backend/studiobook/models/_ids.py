"""Document id generation."""
import uuid


def new_id() -> str:
    """Random document id (32 hex chars)."""
    return uuid.uuid4().hex
