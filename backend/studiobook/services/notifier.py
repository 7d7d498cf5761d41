"""Notification dispatch - persisted notification log plus push fan-out.

Writing the notification record and pushing to devices are independent,
best-effort side effects. A failure in one never prevents the other and
never reaches the operation that triggered the notification.
"""
import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import async_session
from ..models import Device, Notification
from ..utils.db_utils import retry_on_lock
from .push_sender import PushGateway, PushMessage, push_gateway

logger = logging.getLogger(__name__)


def batched(tokens: Sequence[str], size: int) -> List[Sequence[str]]:
    """Split tokens into gateway-sized batches."""
    return [tokens[i:i + size] for i in range(0, len(tokens), size)]


def usable_tokens(tokens: Iterable[Optional[str]]) -> List[str]:
    """Drop empty tokens and duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for token in tokens:
        if token and token not in seen:
            seen.add(token)
            result.append(token)
    return result


class NotificationDispatcher:
    """Writes notification records and sends pushes to device tokens."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = async_session,
        gateway: PushGateway = push_gateway,
        batch_size: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.gateway = gateway
        self.batch_size = batch_size or settings.push_batch_size

    def _deliverable(self, statement):
        """Restrict a device query to platforms the gateway can reach.

        Devices that never reported a platform are kept.
        """
        platforms = self.gateway.platforms
        if platforms is None:
            return statement
        return statement.where(or_(Device.platform.is_(None), Device.platform.in_(platforms)))

    async def active_tokens(self, user_uid: str) -> List[str]:
        """Push tokens of the user's active devices."""
        async with self.session_factory() as session:
            statement = select(Device.push_token).where(
                Device.user_uid == user_uid,
                Device.active.is_(True),
            )
            result = await session.execute(self._deliverable(statement))
            return usable_tokens(result.scalars().all())

    async def all_active_tokens(self) -> List[str]:
        """Push tokens of every active device, whoever owns it."""
        async with self.session_factory() as session:
            statement = select(Device.push_token).where(Device.active.is_(True))
            result = await session.execute(self._deliverable(statement))
            return usable_tokens(result.scalars().all())

    async def _record(self, recipient: str, title: str, category: str, body: str, image: Optional[str]):
        async with self.session_factory() as session:
            session.add(Notification(
                recipient_uid=recipient,
                title=title,
                category=category,
                body=body,
                image=image,
            ))
            await retry_on_lock(session.commit)

    async def _send_batch(self, tokens: Sequence[str], message: PushMessage):
        try:
            await self.gateway.send_multicast(tokens, message)
        except Exception as e:
            logger.error(f"Push batch of {len(tokens)} tokens failed: {e}")

    async def push(self, tokens: Sequence[str], message: PushMessage):
        """Send to all tokens in independent batches."""
        if not tokens:
            return
        await asyncio.gather(*[
            self._send_batch(batch, message) for batch in batched(tokens, self.batch_size)
        ])

    async def dispatch(
        self,
        recipient: str,
        title: str,
        category: str,
        body: str,
        image: Optional[str] = None,
        tokens: Optional[Sequence[str]] = None,
    ):
        """Record a notification for `recipient` and push it to their devices.

        Pass `tokens` when the caller already resolved the recipient's devices.
        """
        lookup = self.active_tokens(recipient) if tokens is None else _resolved(tokens)
        record_outcome, token_outcome = await asyncio.gather(
            self._record(recipient, title, category, body, image),
            lookup,
            return_exceptions=True,
        )

        if isinstance(record_outcome, Exception):
            logger.error(f"Error saving notification for {recipient}: {record_outcome}")

        if isinstance(token_outcome, Exception):
            logger.error(f"Error resolving devices for {recipient}: {token_outcome}")
            return

        if not token_outcome:
            logger.debug(f"No active devices for {recipient}")
            return

        await self.push(token_outcome, PushMessage(title=title, body=body, image=image or None))

    async def broadcast(self, title: str, body: str, image: Optional[str] = None):
        """Push to every active device. No notification record is written."""
        try:
            tokens = await self.all_active_tokens()
        except Exception as e:
            logger.error(f"Error resolving devices for broadcast: {e}")
            return

        if not tokens:
            logger.debug("No active devices for broadcast")
            return

        await self.push(tokens, PushMessage(title=title, body=body, image=image or None))
        logger.info(f"Broadcast '{title}' to {len(tokens)} devices")


async def _resolved(tokens: Sequence[str]) -> List[str]:
    return usable_tokens(tokens)


# Global instance
notification_dispatcher = NotificationDispatcher()
