"""Push gateway - multicast push notifications via APNs."""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Sequence, Tuple

from aioapns import APNs, NotificationRequest, PushType

logger = logging.getLogger(__name__)


@dataclass
class PushConfig:
    """APNs configuration."""
    enabled: bool = False
    key_path: str = ""  # Path to .p8 key file
    key_id: str = ""
    team_id: str = ""
    bundle_id: str = ""
    use_sandbox: bool = True


@dataclass
class PushMessage:
    """Visible notification content."""
    title: str
    body: str
    image: Optional[str] = None


@dataclass
class MulticastResult:
    """Outcome of one multicast call."""
    success_count: int = 0
    failure_count: int = 0
    failed_tokens: List[str] = field(default_factory=list)


class PushGateway:
    """Interface of the push gateway used by the notification dispatcher."""

    # Device platforms this gateway can deliver to; None accepts any
    platforms: Optional[Tuple[str, ...]] = None

    async def send_multicast(self, tokens: Sequence[str], message: PushMessage) -> MulticastResult:
        raise NotImplementedError


class ApnsPushGateway(PushGateway):
    """Push gateway backed by an APNs HTTP/2 client."""

    platforms = ("ios",)

    def __init__(self):
        self._client: Optional[APNs] = None
        self._config: Optional[PushConfig] = None

    @property
    def is_configured(self) -> bool:
        return self._client is not None and self._config is not None and self._config.enabled

    def configure(self, config: PushConfig):
        """Configure the APNs client."""
        self._config = config
        self._client = None  # Reset client to force reconnection

        if not config.enabled:
            logger.info("Push notifications are disabled")
            return

        if not all([config.key_path, config.key_id, config.team_id, config.bundle_id]):
            logger.warning("Push notifications enabled but APNs not fully configured")
            return

        try:
            self._client = APNs(
                key=config.key_path,
                key_id=config.key_id,
                team_id=config.team_id,
                topic=config.bundle_id,
                use_sandbox=config.use_sandbox,
            )
            logger.info(f"APNs client configured (sandbox={config.use_sandbox})")
        except Exception as e:
            logger.error(f"Failed to configure APNs client: {e}")
            self._client = None

    def _build_payload(self, message: PushMessage) -> dict:
        alert = {"title": message.title, "body": message.body}
        aps = {"alert": alert, "sound": "default"}
        payload = {"aps": aps}
        if message.image:
            # Rendered by the app's notification service extension
            aps["mutable-content"] = 1
            payload["image"] = message.image
        return payload

    async def _send_one(self, token: str, payload: dict) -> bool:
        request = NotificationRequest(
            device_token=token,
            message=payload,
            push_type=PushType.ALERT,
        )
        response = await self._client.send_notification(request)
        if response.is_successful:
            return True
        logger.warning(f"Push notification failed: {response.description} (token: {token[:16]}...)")
        return False

    async def send_multicast(self, tokens: Sequence[str], message: PushMessage) -> MulticastResult:
        """Send the same notification to every token.

        Per-token failures are counted, not retried.
        """
        if not self.is_configured:
            logger.debug("Push notifications not configured, skipping")
            return MulticastResult()

        payload = self._build_payload(message)
        outcomes = await asyncio.gather(
            *[self._send_one(token, payload) for token in tokens],
            return_exceptions=True,
        )

        result = MulticastResult()
        for token, outcome in zip(tokens, outcomes):
            if outcome is True:
                result.success_count += 1
            else:
                if isinstance(outcome, Exception):
                    logger.error(f"Failed to send push notification: {outcome}")
                result.failure_count += 1
                result.failed_tokens.append(token)

        logger.info(
            f"Push notifications sent: {result.success_count} success, {result.failure_count} failed"
        )
        return result


# Global instance
push_gateway = ApnsPushGateway()
