import json

import httpx
import pytest

from settings import Settings

TOKEN = "test-token"
PROVIDER_BASE = "https://veo.test/v1beta"


class Upstream:
    """
    Stand-in for every outbound HTTP peer (provider, asset CDN, callback
    receiver). Requests are routed by host and recorded.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, host, handler):
        self.routes[host] = handler
        return self

    def sent_to(self, host):
        return [r for r in self.requests if r.url.host == host]

    def json_sent_to(self, host):
        return [json.loads(r.content) for r in self.sent_to(host)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            return httpx.Response(502, text=f"no route for {request.url.host}")
        return handler(request)

    @property
    def transport(self):
        return httpx.MockTransport(self)


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides):
        values = dict(
            backend_public_token=TOKEN,
            gemini_api_key="",
            gemini_api_base=PROVIDER_BASE,
            callback_url="",
            storage_provider="local",
            local_storage_dir=str(tmp_path / "storage"),
            app_base_url="http://testserver",
            s3_bucket="",
            s3_endpoint_url="",
            s3_public_base="",
            cors_origins="*",
        )
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def auth():
    return {"Authorization": f"Bearer {TOKEN}"}
