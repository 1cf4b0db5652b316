import asyncio
from typing import Protocol

import httpx

from src.utils.logger import setup_logger

logger = setup_logger(__name__)


class Notifier(Protocol):
    def notify(self, kind: str, message: str) -> None: ...


class WebhookNotifier:
    """Fire-and-forget delivery of user notices to the notification service."""

    def __init__(self, webhook_url: str | None, timeout: float = 2.0, client: httpx.AsyncClient | None = None):
        self.webhook_url = webhook_url
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout=timeout))
        self._pending: set[asyncio.Task] = set()

    def notify(self, kind: str, message: str) -> None:
        """Schedule the delivery of a notice on the running event loop and return right away."""
        if not self.webhook_url:
            logger.debug(f"No notification webhook configured, dropping {kind} notice")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No event loop running, dropping {kind} notice")
            return

        task = loop.create_task(self._send(kind, message))
        # The loop only keeps weak references to its tasks
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, kind: str, message: str) -> None:
        try:
            response = await self.client.post(self.webhook_url, json={"kind": kind, "message": message})
        except httpx.HTTPError as e:
            # Delivery is best effort, a lost notice never fails the request
            logger.warning(f"Could not deliver {kind} notice: {str(e)}")
            return

        if response.status_code >= 400:
            logger.warning(f"Notification service answered {response.status_code} for {kind} notice")
        else:
            logger.debug(f"Delivered {kind} notice")

    async def aclose(self) -> None:
        """Wait for the notices still in flight, then close the HTTP client."""
        if self._pending:
            await asyncio.gather(*self._pending)
        await self.client.aclose()
