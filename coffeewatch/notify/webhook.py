"""Chat webhook delivery."""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)


class WebhookClient:
    def __init__(self, url: str | None, *, session: httpx.AsyncClient | None = None) -> None:
        self.url = url
        self._session = session

    async def send(self, content: str) -> None:
        if not self.url:
            raise RuntimeError("No webhook URL configured")
        if self._session is not None:
            response = await self._session.post(self.url, json={"content": content})
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(self.url, json={"content": content})
        response.raise_for_status()


class Diagnostics:
    """Best-effort status channel; delivery failures are logged, never raised."""

    def __init__(self, webhook: WebhookClient | None) -> None:
        self.webhook = webhook

    async def send(self, message: str) -> None:
        logger.info("Diagnostic: %s", message)
        if self.webhook is None or not self.webhook.url:
            return
        try:
            await self.webhook.send(message)
        except httpx.HTTPError as exc:
            logger.warning("Diagnostics webhook failed: %s", exc)
