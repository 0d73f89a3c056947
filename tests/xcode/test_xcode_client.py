"""Tests for XcodeServerClient against a mocked HTTP transport."""

import json

import httpx
import pytest

from xbot_sync.schemas import BotConfiguration
from xbot_sync.xcode import (
    XcodeAuthenticationError,
    XcodeBot,
    XcodeNotFoundError,
    XcodeServerClient,
    XcodeServerError,
)
from tests.factories import make_bot_record, make_integration_data

BASE_URL = "https://ci.local:20343/api"


class RecordingTransport:
    """Serves canned responses keyed by (method, path) and records requests."""

    def __init__(self, routes):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404)
        status, body = self.routes[key]
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


def make_client(routes, **kwargs):
    recorder = RecordingTransport(routes)
    client = XcodeServerClient(
        BASE_URL,
        kwargs.pop("user", "ci"),
        kwargs.pop("password", "secret"),
        verify_tls=False,
        transport=httpx.MockTransport(recorder),
        **kwargs,
    )
    return client, recorder


class TestBots:
    async def test_fetch_bots(self):
        client, recorder = make_client(
            {
                ("GET", "/api/bots"): (
                    200,
                    {
                        "count": 2,
                        "results": [
                            make_bot_record(bot_id="a", name="Fix X"),
                            make_bot_record(bot_id="b", name="Add Y"),
                        ],
                    },
                )
            }
        )
        async with client:
            bots = await client.fetch_bots()

        assert [b.name for b in bots] == ["Fix X", "Add Y"]
        assert all(isinstance(b, XcodeBot) for b in bots)
        assert recorder.requests[0].headers["authorization"].startswith("Basic ")

    async def test_fetch_bots_skips_invalid(self):
        client, _ = make_client(
            {("GET", "/api/bots"): (200, {"results": [{"name": "no id"}, make_bot_record()]})}
        )
        async with client:
            bots = await client.fetch_bots()

        assert [b.id for b in bots] == ["bot-1"]

    async def test_no_auth_without_user(self):
        client, recorder = make_client({("GET", "/api/bots"): (200, {"results": []})}, user="")
        async with client:
            await client.fetch_bots()

        assert "authorization" not in recorder.requests[0].headers

    async def test_create_bot(self, template):
        client, recorder = make_client(
            {("POST", "/api/bots"): (201, make_bot_record(bot_id="new", name="Fix X"))}
        )
        config = BotConfiguration.from_template(
            template, name="Fix X", branch="feature/x", git_url="git@github.com:org/repo.git"
        )
        async with client:
            bot = await client.create_bot(config)

        assert bot.id == "new"
        assert bot.name == "Fix X"
        sent = json.loads(recorder.requests[0].content)
        assert sent["name"] == "Fix X"
        assert sent["configuration"]["schemeName"] == "App"

    async def test_create_bot_rejected(self, template):
        client, _ = make_client({("POST", "/api/bots"): (400, {"status": 400})})
        config = BotConfiguration.from_template(
            template, name="Fix X", branch="feature/x", git_url="git@github.com:org/repo.git"
        )
        async with client:
            with pytest.raises(XcodeServerError) as exc_info:
                await client.create_bot(config)

        assert exc_info.value.status_code == 400

    async def test_delete_uses_revision(self):
        client, recorder = make_client(
            {
                ("GET", "/api/bots"): (200, {"results": [make_bot_record(bot_id="a", rev="3-c")]}),
                ("DELETE", "/api/bots/a/3-c"): (204, None),
            }
        )
        async with client:
            (bot,) = await client.fetch_bots()
            await bot.delete()

        assert recorder.requests[-1].method == "DELETE"
        assert recorder.requests[-1].url.path == "/api/bots/a/3-c"

    async def test_delete_missing_bot(self):
        client, _ = make_client({})
        async with client:
            with pytest.raises(XcodeNotFoundError):
                await client.delete_bot("gone", "1-a")


class TestIntegrations:
    async def test_start_integration(self):
        client, _ = make_client(
            {
                ("POST", "/api/bots/a/integrations"): (
                    201,
                    make_integration_data(number=4, current_step="pending", result="unknown"),
                )
            }
        )
        async with client:
            integration = await client.start_integration("a")

        assert integration is not None
        assert integration.number == 4
        assert integration.current_step == "pending"

    async def test_latest_integration(self):
        client, recorder = make_client(
            {
                ("GET", "/api/bots/a/integrations"): (
                    200,
                    {"results": [make_integration_data(number=9, result="build-errors")]},
                )
            }
        )
        async with client:
            integration = await client.latest_integration("a")

        assert integration.number == 9
        assert integration.result == "build-errors"
        assert recorder.requests[0].url.params["last"] == "1"

    async def test_never_integrated(self):
        client, _ = make_client({("GET", "/api/bots/a/integrations"): (200, {"results": []})})
        async with client:
            assert await client.latest_integration("a") is None

    async def test_list_body_accepted(self):
        client, _ = make_client(
            {("GET", "/api/bots/a/integrations"): (200, [make_integration_data(number=2)])}
        )
        async with client:
            integration = await client.latest_integration("a")

        assert integration.number == 2


class TestErrors:
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_errors(self, status):
        client, _ = make_client({("GET", "/api/bots"): (status, {"status": status})})
        async with client:
            with pytest.raises(XcodeAuthenticationError):
                await client.fetch_bots()

    async def test_server_error(self):
        client, _ = make_client({("GET", "/api/bots"): (500, {"status": 500})})
        async with client:
            with pytest.raises(XcodeServerError, match=r"\(500\) for GET /bots"):
                await client.fetch_bots()

    async def test_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = XcodeServerClient(BASE_URL, "ci", "secret", transport=httpx.MockTransport(refuse))
        async with client:
            with pytest.raises(XcodeServerError, match="Cannot reach Xcode Server"):
                await client.fetch_bots()
