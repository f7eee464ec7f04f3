"""
Tests for the direct fetcher module.
"""

import httpx
import pytest
from pydantic import BaseModel

from relayfetch.exceptions import DecodeError, TransportError, UpstreamChallenge
from relayfetch.fetchers.direct_fetcher import DirectFetcher
from relayfetch.models import OutcomeKind


URL = "https://api.test/x/v2/reply?oid=1&pn=1"


class ReplyPage(BaseModel):
    replies: list[str]


@pytest.mark.asyncio
async def test_success(make_client):
    """Test a decodable reply with a regular code."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"code": 0, "message": "0", "data": {"replies": ["hi"]}, "ttl": 1})

    fetcher = DirectFetcher(client=make_client(handler))
    outcome = await fetcher.fetch(URL)

    assert outcome.success is True
    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.response.code == 0
    assert outcome.response.data == {"replies": ["hi"]}
    assert outcome.via_relay is False
    assert len(calls) == 1
    assert str(calls[0].url) == URL


@pytest.mark.asyncio
async def test_typed_payload(make_client):
    """Test decoding ``data`` into a caller-supplied model."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": 0, "data": {"replies": ["a", "b"]}})

    fetcher = DirectFetcher(client=make_client(handler))
    outcome = await fetcher.fetch(URL, ReplyPage)

    assert isinstance(outcome.response.data, ReplyPage)
    assert outcome.response.data.replies == ["a", "b"]


@pytest.mark.asyncio
async def test_challenge_disqualifies(make_client):
    """Test that code 412 is never reported as a success."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": 412, "message": "request was banned"})

    fetcher = DirectFetcher(client=make_client(handler))
    outcome = await fetcher.fetch(URL)

    assert outcome.success is False
    assert outcome.kind is OutcomeKind.DISQUALIFIED
    assert isinstance(outcome.error, UpstreamChallenge)
    assert outcome.response is None


@pytest.mark.asyncio
async def test_timeout(make_client):
    """Test that a timeout becomes a transport error."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    fetcher = DirectFetcher(client=make_client(handler))
    outcome = await fetcher.fetch(URL)

    assert outcome.kind is OutcomeKind.TRANSPORT_ERROR
    assert isinstance(outcome.error, TransportError)


@pytest.mark.asyncio
async def test_error_status(make_client):
    """Test that a non-2xx status becomes a transport error."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    fetcher = DirectFetcher(client=make_client(handler))
    outcome = await fetcher.fetch(URL)

    assert outcome.kind is OutcomeKind.TRANSPORT_ERROR
    assert outcome.error.status_code == 503


@pytest.mark.asyncio
async def test_malformed_body(make_client):
    """Test that an undecodable body is treated like a transport failure."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>blocked</html>")

    fetcher = DirectFetcher(client=make_client(handler))
    outcome = await fetcher.fetch(URL)

    assert outcome.kind is OutcomeKind.TRANSPORT_ERROR
    assert isinstance(outcome.error, DecodeError)
    assert outcome.error.content == "<html>blocked</html>"


@pytest.mark.asyncio
async def test_single_attempt(make_client):
    """Test that the direct path never retries."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("refused", request=request)

    fetcher = DirectFetcher(client=make_client(handler))
    await fetcher.fetch(URL)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_invalid_url(make_client):
    """Test that a malformed URL becomes a transport error instead of raising."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("malformed URL must not reach the transport")

    fetcher = DirectFetcher(client=make_client(handler))
    outcome = await fetcher.fetch("http://[::1/x")

    assert outcome.kind is OutcomeKind.TRANSPORT_ERROR
    assert isinstance(outcome.error, TransportError)


@pytest.mark.asyncio
async def test_sends_user_agent(make_client):
    """Test that the configured User-Agent goes out with the request."""
    agents = []

    def handler(request: httpx.Request) -> httpx.Response:
        agents.append(request.headers["User-Agent"])
        return httpx.Response(200, json={"code": 0})

    fetcher = DirectFetcher(client=make_client(handler), user_agent="relayfetch-test/1.0")
    await fetcher.fetch(URL)

    assert agents == ["relayfetch-test/1.0"]


@pytest.mark.asyncio
async def test_non_string_message(make_client):
    """Test that a numeric ``message`` field still decodes."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": 0, "message": 0, "data": {"replies": []}})

    fetcher = DirectFetcher(client=make_client(handler))
    outcome = await fetcher.fetch(URL)

    assert outcome.success is True
    assert outcome.response.message == 0
