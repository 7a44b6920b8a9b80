import httpx
import pytest

from errors import ProviderCallError
from veo_client import VeoClient

PROVIDER_BASE = "https://veo.test/v1beta"


def _client(upstream, **kw):
    return VeoClient("secret-key", api_base=PROVIDER_BASE, transport=upstream.transport, **kw)


@pytest.mark.asyncio
async def test_generate_posts_prompt_to_quality_model(upstream):
    upstream.on("veo.test", lambda r: httpx.Response(200, json={"outputUri": "https://cdn.test/v.mp4"}))
    body = await _client(upstream).generate_video("a cat", "9:16", "720p", True, "fast")

    assert body == {"outputUri": "https://cdn.test/v.mp4"}
    (req,) = upstream.sent_to("veo.test")
    assert req.url.path == "/v1beta/models/veo-3.1-fast-generate-001:generateVideo"
    assert req.headers["authorization"] == "Bearer secret-key"
    assert upstream.json_sent_to("veo.test") == [
        {"prompt": "a cat", "aspectRatio": "9:16", "resolution": "720p", "generateAudio": True}
    ]


def test_standard_quality_uses_full_model():
    client = VeoClient("k", api_base=PROVIDER_BASE)
    assert client.endpoint_for("standard").endswith("/models/veo-3.1-generate-001:generateVideo")
    assert client.endpoint_for("fast").endswith("/models/veo-3.1-fast-generate-001:generateVideo")


@pytest.mark.asyncio
async def test_error_status_keeps_provider_body(upstream):
    upstream.on("veo.test", lambda r: httpx.Response(429, json={"error": {"message": "quota exceeded"}}))
    with pytest.raises(ProviderCallError) as exc:
        await _client(upstream).generate_video("a cat", "9:16", "720p", True, "fast")
    assert exc.value.status_code == 429
    assert exc.value.detail == {"error": {"message": "quota exceeded"}}


@pytest.mark.asyncio
async def test_error_status_with_text_body(upstream):
    upstream.on("veo.test", lambda r: httpx.Response(503, text="upstream unavailable"))
    with pytest.raises(ProviderCallError) as exc:
        await _client(upstream).generate_video("a cat", "9:16", "720p", True, "fast")
    assert exc.value.detail == "upstream unavailable"


@pytest.mark.asyncio
async def test_timeout_is_a_provider_error(upstream):
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    upstream.on("veo.test", slow)
    with pytest.raises(ProviderCallError) as exc:
        await _client(upstream).generate_video("a cat", "9:16", "720p", True, "fast")
    assert "generate request failed" in str(exc.value.detail)


@pytest.mark.asyncio
async def test_non_json_success_is_returned_as_text(upstream):
    upstream.on("veo.test", lambda r: httpx.Response(200, text="<html>ok</html>"))
    body = await _client(upstream).generate_video("a cat", "9:16", "720p", True, "fast")
    assert body == "<html>ok</html>"


@pytest.mark.asyncio
async def test_empty_success_is_returned_as_none(upstream):
    upstream.on("veo.test", lambda r: httpx.Response(200, content=b""))
    assert await _client(upstream).generate_video("a cat", "9:16", "720p", True, "fast") is None


@pytest.mark.asyncio
async def test_malformed_asset_url_is_a_provider_error(upstream):
    with pytest.raises(ProviderCallError):
        await _client(upstream).download("http://[::1")


@pytest.mark.asyncio
async def test_download_does_not_leak_credentials(upstream):
    upstream.on("cdn.test", lambda r: httpx.Response(200, content=b"MP4"))
    data = await _client(upstream).download("https://cdn.test/v.mp4")
    assert data == b"MP4"
    (req,) = upstream.sent_to("cdn.test")
    assert "authorization" not in req.headers


@pytest.mark.asyncio
async def test_download_failure(upstream):
    upstream.on("cdn.test", lambda r: httpx.Response(404, text="gone"))
    with pytest.raises(ProviderCallError) as exc:
        await _client(upstream).download("https://cdn.test/v.mp4")
    assert exc.value.status_code == 404
