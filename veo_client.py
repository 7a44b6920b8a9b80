# veo_client.py
import logging
from typing import Any, Optional

import httpx

from errors import ProviderCallError
from settings import Settings

logger = logging.getLogger(__name__)


def _error_detail(resp: httpx.Response) -> Any:
    """Prefer the provider's JSON error body; fall back to raw text."""
    try:
        return resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"


class VeoClient:
    """
    Thin async client for the Gemini video-generation endpoint.

    One call per job, no retries. A new httpx.AsyncClient is opened per
    request; `transport` lets tests route traffic to an httpx.MockTransport.
    """

    def __init__(
        self,
        api_key: str,
        *,
        api_base: str = "https://generativelanguage.googleapis.com/v1beta",
        model: str = "veo-3.1-generate-001",
        fast_model: str = "veo-3.1-fast-generate-001",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_base = api_base.rstrip("/")
        self.model = model
        self.fast_model = fast_model
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "VeoClient":
        return cls(
            settings.gemini_api_key,
            api_base=settings.gemini_api_base,
            model=settings.veo_model,
            fast_model=settings.veo_fast_model,
            timeout=settings.provider_timeout_seconds,
            transport=transport,
        )

    def _headers(self):
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def model_for(self, quality: str) -> str:
        return self.fast_model if quality == "fast" else self.model

    def endpoint_for(self, quality: str) -> str:
        return f"{self.api_base}/models/{self.model_for(quality)}:generateVideo"

    async def generate_video(
        self,
        prompt: str,
        aspect_ratio: str,
        resolution: str,
        generate_audio: bool,
        quality: str,
    ) -> Any:
        """
        Start a text->video generation and return the decoded JSON reply,
        whatever its shape. A 2xx body that is not JSON comes back as raw
        text (None when empty) for the resolver to reject. Raises
        ProviderCallError on transport failure, timeout or non-2xx status.
        """
        payload = {
            "prompt": prompt,
            "aspectRatio": aspect_ratio,
            "resolution": resolution,
            "generateAudio": generate_audio,
        }
        url = self.endpoint_for(quality)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=self._headers(), transport=self._transport) as client:
                r = await client.post(url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProviderCallError(f"generate request failed: {e!r}") from e

        if r.status_code >= 300:
            raise ProviderCallError(
                f"generate failed: {r.status_code}",
                detail=_error_detail(r),
                status_code=r.status_code,
            )
        try:
            return r.json()
        except ValueError:
            logger.warning("provider returned a non-JSON body (%d bytes)", len(r.content))
            return r.text or None

    async def download(self, url: str) -> bytes:
        """Fetch the generated asset. The asset host gets no provider credentials."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True, transport=self._transport) as client:
                resp = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProviderCallError(f"download failed: {e!r}") from e
        if resp.status_code >= 300:
            raise ProviderCallError(
                f"download failed: {resp.status_code}",
                detail=_error_detail(resp),
                status_code=resp.status_code,
            )
        return resp.content
