"""Shared test fixtures for channel-auth.

Provides a scripted fake identity service backed by
:class:`httpx.MockTransport`, isolation from ``CHANNEL_AUTH_*`` environment
variables, and output state management.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Union

import httpx
import pytest

from channel_auth.auth.channel_auth import ChannelAuth
from channel_auth.models import ChannelAuthOptions
from channel_auth.output import OutputFormat, OutputManager, reset_output, set_output


BASE_URL = "https://broker.example.com:8443"
LOGIN_URL = f"{BASE_URL}/identity/v1/login"

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_library_logging() -> None:
    """Drop handlers the CLI installs on the ``channel_auth`` logger."""
    yield
    logger = logging.getLogger("channel_auth")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real CHANNEL_AUTH_* variables out of every test."""
    for var in [
        "CHANNEL_AUTH_CONFIG",
        "CHANNEL_AUTH_BASE_URL",
        "CHANNEL_AUTH_USERNAME",
        "CHANNEL_AUTH_PASSWORD_SOURCE",
        "CHANNEL_AUTH_PASSWORD",
    ]:
        monkeypatch.delenv(var, raising=False)


# ---------------------------------------------------------------------------
# Fake identity service
# ---------------------------------------------------------------------------


class FakeIdentityService:
    """Scripted identity endpoint.

    Replies are consumed in order; the last one repeats once the script runs
    out. A reply may be an :class:`httpx.Response`, an exception to raise
    from the transport, or a callable producing a response.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: list[Reply] = [
            httpx.Response(200, json={"AuthorizationToken": "abc123"})
        ]
        self.transport = httpx.MockTransport(self._handle)

    def reply(self, *replies: Reply) -> FakeIdentityService:
        self._replies = list(replies)
        return self

    def reply_json(self, body: Any, status_code: int = 200) -> FakeIdentityService:
        return self.reply(httpx.Response(status_code, json=body))

    @property
    def login_count(self) -> int:
        return len(self.requests)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        # A fresh response per request; httpx binds the stream on send.
        return httpx.Response(
            reply.status_code, headers=reply.headers, content=reply.content
        )


@pytest.fixture
def identity() -> FakeIdentityService:
    """A fake identity service that issues token ``abc123`` by default."""
    return FakeIdentityService()


@pytest.fixture
def make_auth(identity: FakeIdentityService) -> Callable[..., ChannelAuth]:
    """Factory building a :class:`ChannelAuth` wired to the fake service."""

    def _make(
        base: str = BASE_URL,
        username: str = "svc-user",
        password: str = "s3cret",
        options: ChannelAuthOptions | None = None,
    ) -> ChannelAuth:
        return ChannelAuth(
            base, username, password, options=options, transport=identity.transport
        )

    return _make


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format output manager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
