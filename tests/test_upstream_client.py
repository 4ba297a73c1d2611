"""
Tests for core/upstream_client_base.py - retry, backoff and outcome classification.
"""
import errno
import socket
import asyncio
import aiohttp
import pytest
from unittest.mock import MagicMock
from aiohttp import web
from aiohttp.test_utils import TestServer

from core.upstream_client_base import (
    BaseUpstreamClient,
    UpstreamConfig,
    Success,
    TransientFailure,
    PermanentFailure,
    NetworkError,
    is_retryable,
    parse_json,
)

PAYLOAD = {"q": "hello", "source": "auto", "target": "es", "format": "text"}


class TestParseJson:

    def test_valid_json(self):
        assert parse_json('{"translatedText": "hola"}') == {"translatedText": "hola"}

    def test_empty_body(self):
        assert parse_json("") is None

    def test_malformed_body(self):
        assert parse_json("<html>oops</html>") is None


class TestUpstreamConfig:

    def test_defaults(self):
        config = UpstreamConfig(url="http://x")
        assert config.timeout_ms == 10000
        assert config.max_attempts == 2
        assert config.backoff_ms == 300

    def test_is_frozen(self):
        config = UpstreamConfig(url="http://x")
        with pytest.raises(Exception):
            config.max_attempts = 5

    def test_upstream_info_reports_config(self):
        config = UpstreamConfig(url="http://x", backoff_ms=50, task_name="translate")
        expected = {
            "url": "http://x",
            "timeout_ms": 10000,
            "max_attempts": 2,
            "backoff_ms": 50,
            "pool_limit": 10,
            "task_name": "translate",
        }

        assert config.to_dict() == expected
        assert BaseUpstreamClient(config).get_upstream_info() == expected

    def test_is_available_requires_url(self):
        assert BaseUpstreamClient(UpstreamConfig(url="http://x")).is_available()
        assert not BaseUpstreamClient(UpstreamConfig(url="")).is_available()


REFUSED = aiohttp.ClientConnectorError(MagicMock(), ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused"))
DNS_FAILURE = aiohttp.ClientConnectorError(MagicMock(), socket.gaierror(-2, "Name or service not known"))
RESET = aiohttp.ClientOSError(errno.ECONNRESET, "Connection reset by peer")


class TestIsRetryable:

    @pytest.mark.parametrize("error", [
        asyncio.TimeoutError(),
        aiohttp.ServerDisconnectedError(),
        DNS_FAILURE,
        RESET,
        ConnectionResetError(),
    ])
    def test_retried(self, error):
        assert is_retryable(error)

    @pytest.mark.parametrize("error", [
        REFUSED,
        aiohttp.ClientOSError(errno.EPIPE, "Broken pipe"),
        aiohttp.ClientPayloadError("truncated body"),
    ])
    def test_not_retried(self, error):
        assert not is_retryable(error)


class TestPostJson:

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [(200, '{"translatedText": "hola"}')]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert outcome == Success(status=200, data={"translatedText": "hola"})
        send_mock.assert_awaited_once_with(PAYLOAD)
        sleep_mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_success_body_yields_none(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [(200, "not json")]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert isinstance(outcome, Success)
        assert outcome.data is None

    @pytest.mark.asyncio
    async def test_5xx_then_success_retries_once(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [(503, "busy"), (200, '{"translation": "bonjour"}')]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert outcome == Success(status=200, data={"translation": "bonjour"})
        assert send_mock.await_count == 2
        sleep_mock.assert_awaited_once_with(0.3)

    @pytest.mark.asyncio
    async def test_5xx_exhausted_is_terminal_transient_failure(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [(503, "busy"), (502, "still busy")]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert outcome == TransientFailure(status=502, body="still busy")
        assert send_mock.await_count == 2
        sleep_mock.assert_awaited_once_with(0.3)

    @pytest.mark.asyncio
    async def test_4xx_is_not_retried(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [(404, "not found"), (200, "{}")]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert outcome == PermanentFailure(status=404, body="not found")
        assert send_mock.await_count == 1
        sleep_mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeouts_exhaust_budget(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [asyncio.TimeoutError(), asyncio.TimeoutError()]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert isinstance(outcome, NetworkError)
        assert outcome.retryable
        assert "timed out after 10000 ms" in outcome.reason
        assert send_mock.await_count == 2
        sleep_mock.assert_awaited_once_with(0.3)

    @pytest.mark.asyncio
    async def test_connection_error_then_success(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [
            aiohttp.ServerDisconnectedError(),
            (200, '{"result": "hallo"}'),
        ]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert outcome == Success(status=200, data={"result": "hallo"})
        assert send_mock.await_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_client_error_stops_loop(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [aiohttp.ClientPayloadError("truncated body"), (200, "{}")]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert outcome == NetworkError(reason="truncated body", retryable=False)
        assert send_mock.await_count == 1
        sleep_mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refused_connection_is_not_retried(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [REFUSED, (200, "{}")]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert isinstance(outcome, NetworkError)
        assert not outcome.retryable
        assert send_mock.await_count == 1
        sleep_mock.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [DNS_FAILURE, RESET])
    async def test_dns_failure_and_reset_are_retried(self, upstream_client, send_mock, sleep_mock, error):
        send_mock.side_effect = [error, (200, '{"translatedText": "hola"}')]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert outcome == Success(status=200, data={"translatedText": "hola"})
        assert send_mock.await_count == 2
        sleep_mock.assert_awaited_once_with(0.3)

    @pytest.mark.asyncio
    async def test_5xx_then_network_error_reports_network_error(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [(500, "boom"), asyncio.TimeoutError()]

        outcome = await upstream_client.post_json(PAYLOAD)

        assert isinstance(outcome, NetworkError)
        assert send_mock.await_count == 2

    @pytest.mark.asyncio
    async def test_backoff_grows_with_attempt(self, send_mock, sleep_mock):
        client = BaseUpstreamClient(UpstreamConfig(url="http://x", max_attempts=3, backoff_ms=300))
        send_mock.side_effect = [(500, ""), (500, ""), (500, "")]

        outcome = await client.post_json(PAYLOAD)

        assert isinstance(outcome, TransientFailure)
        assert [c.args[0] for c in sleep_mock.await_args_list] == [0.3, 0.6]

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self, upstream_client, send_mock, sleep_mock):
        send_mock.side_effect = [RuntimeError("bug")]

        with pytest.raises(RuntimeError):
            await upstream_client.post_json(PAYLOAD)


class TestAgainstLocalServer:
    """Exercise the real aiohttp request path against an in-process server."""

    @pytest.mark.asyncio
    async def test_round_trip_and_timeout(self):
        calls = []

        async def translate(request):
            data = await request.json()
            calls.append(data)
            return web.json_response({"translatedText": data["q"].upper()})

        async def slow(request):
            await asyncio.sleep(1)
            return web.json_response({})

        app = web.Application()
        app.router.add_post("/translate", translate)
        app.router.add_post("/slow", slow)

        server = TestServer(app)
        await server.start_server()
        ok_client = BaseUpstreamClient(UpstreamConfig(url=str(server.make_url("/translate"))))
        slow_client = BaseUpstreamClient(
            UpstreamConfig(url=str(server.make_url("/slow")), timeout_ms=100, backoff_ms=0)
        )
        try:
            outcome = await ok_client.post_json(PAYLOAD)
            assert outcome == Success(status=200, data={"translatedText": "HELLO"})
            assert calls == [PAYLOAD]

            outcome = await slow_client.post_json(PAYLOAD)
            assert isinstance(outcome, NetworkError)
            assert "timed out" in outcome.reason
        finally:
            await ok_client.close()
            await slow_client.close()
            await server.close()
