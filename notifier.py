# notifier.py
import logging
from typing import Any, Dict, Optional

import httpx

from errors import CallbackDeliveryError
from job_store import Job

logger = logging.getLogger(__name__)


def callback_payload(job: Job) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"jobId": job.id, "status": job.status.value}
    if job.result is not None:
        payload["result"] = job.result
    if job.error is not None:
        payload["error"] = job.error
    return payload


class Notifier:
    """Best-effort POST of a finished job to a callback URL."""

    def __init__(self, default_url: str = "", *, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.default_url = default_url
        self.timeout = timeout
        self._transport = transport

    def target(self, override: Optional[str] = None) -> Optional[str]:
        return override or self.default_url or None

    async def _deliver(self, url: str, payload: Dict[str, Any]):
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise CallbackDeliveryError(f"callback to {url} failed: {e!r}") from e
        if r.status_code >= 300:
            raise CallbackDeliveryError(f"callback to {url} returned {r.status_code}")

    async def notify(self, job: Job, callback_url: Optional[str] = None) -> bool:
        """Returns True if a callback was delivered. Never raises on delivery failure."""
        url = self.target(callback_url)
        if not url:
            return False
        try:
            await self._deliver(url, callback_payload(job))
        except CallbackDeliveryError as e:
            logger.warning("callback error for job %s: %s", job.id, e)
            return False
        logger.info("callback delivered for job %s to %s", job.id, url)
        return True
