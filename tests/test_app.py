"""Tests for the ``channel-auth`` CLI."""

from __future__ import annotations

import base64
import json
from pathlib import Path

import httpx
import pytest

from channel_auth import __version__
from channel_auth import config as config_module
from channel_auth.app import _mask, app
from channel_auth.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_PERMANENT_AUTH_FAILURE,
    EXIT_SUCCESS,
    EXIT_TEMPORARY_AUTH_FAILURE,
)

BASE_URL = "https://broker.example.com:8443"
LOGIN_ARGS = [
    "login",
    "--base-url",
    BASE_URL,
    "--username",
    "svc-user",
    "--password-source",
    "literal:s3cret",
]


@pytest.fixture(autouse=True)
def _wire_identity(monkeypatch: pytest.MonkeyPatch, identity) -> None:
    """Route every CLI login to the fake identity service."""
    real_factory = config_module.create_channel_auth

    def factory(settings):
        return real_factory(settings, transport=identity.transport)

    monkeypatch.setattr("channel_auth.app.create_channel_auth", factory)


class TestVersion:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == EXIT_SUCCESS
        assert __version__ in result.output


class TestLogin:
    def test_success_json_masked(self, cli_runner, identity) -> None:
        result = cli_runner.invoke(app, ["--json", "--quiet", "--no-color", *LOGIN_ARGS])

        assert result.exit_code == EXIT_SUCCESS
        data = json.loads(result.stdout)
        assert data["login_url"] == f"{BASE_URL}/identity/v1/login"
        assert data["username"] == "svc-user"
        assert data["token"] == "abc1**"
        assert identity.login_count == 1

    def test_success_show_token(self, cli_runner) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--quiet", "--no-color", *LOGIN_ARGS, "--show-token"]
        )
        assert result.exit_code == EXIT_SUCCESS
        assert json.loads(result.stdout)["token"] == "abc123"

    def test_plain_output(self, cli_runner) -> None:
        result = cli_runner.invoke(
            app, ["--plain", "--quiet", "--no-color", *LOGIN_ARGS, "--show-token"]
        )
        assert result.exit_code == EXIT_SUCCESS
        assert "token\tabc123" in result.stdout

    def test_credentials_sent(self, cli_runner, identity) -> None:
        cli_runner.invoke(app, ["--quiet", "--no-color", *LOGIN_ARGS])
        expected = base64.b64encode(b"svc-user:s3cret").decode("ascii")
        assert identity.requests[0].headers["Authorization"] == f"Basic {expected}"

    def test_unauthorized_exits_permanent(self, cli_runner, identity) -> None:
        identity.reply(httpx.Response(401, text="bad password"))
        result = cli_runner.invoke(app, ["--no-color", *LOGIN_ARGS])

        assert result.exit_code == EXIT_PERMANENT_AUTH_FAILURE
        assert "Unauthorized 401" in result.output

    def test_missing_token_exits_permanent(self, cli_runner, identity) -> None:
        identity.reply_json({})
        result = cli_runner.invoke(app, ["--no-color", *LOGIN_ARGS])

        assert result.exit_code == EXIT_PERMANENT_AUTH_FAILURE
        assert "AuthorizationToken" in result.output

    def test_server_error_exits_temporary(self, cli_runner, identity) -> None:
        identity.reply(httpx.Response(500, json={"error": "down"}))
        result = cli_runner.invoke(app, ["--no-color", *LOGIN_ARGS])

        assert result.exit_code == EXIT_TEMPORARY_AUTH_FAILURE
        assert "500" in result.output
        assert "retry later" in result.output

    def test_connection_error_exits_temporary(self, cli_runner, identity) -> None:
        identity.reply(httpx.ConnectError("Connection refused"))
        result = cli_runner.invoke(app, ["--no-color", *LOGIN_ARGS])

        assert result.exit_code == EXIT_TEMPORARY_AUTH_FAILURE
        assert "Connection refused" in result.output

    def test_missing_settings_exits_generic(self, cli_runner, identity) -> None:
        result = cli_runner.invoke(app, ["--no-color", "login"])

        assert result.exit_code == EXIT_GENERIC_FAILURE
        assert "Invalid channel-auth settings" in result.output
        assert identity.login_count == 0

    def test_unset_password_env_exits_generic(self, cli_runner, identity) -> None:
        result = cli_runner.invoke(
            app, ["--no-color", "login", "--base-url", BASE_URL, "--username", "u"]
        )
        assert result.exit_code == EXIT_GENERIC_FAILURE
        assert "CHANNEL_AUTH_PASSWORD" in result.output
        assert identity.login_count == 0

    def test_settings_file(self, cli_runner, identity, tmp_path: Path, monkeypatch) -> None:
        settings = tmp_path / "channel.json"
        settings.write_text(
            json.dumps({"baseUrl": BASE_URL, "username": "file-user"}), encoding="utf-8"
        )
        monkeypatch.setenv("CHANNEL_AUTH_PASSWORD", "s3cret")

        result = cli_runner.invoke(
            app, ["--json", "--quiet", "--no-color", "login", "--config", str(settings)]
        )

        assert result.exit_code == EXIT_SUCCESS
        assert json.loads(result.stdout)["username"] == "file-user"
        assert identity.login_count == 1

    def test_insecure_warns(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--quiet", "--no-color", *LOGIN_ARGS, "--insecure"])

        assert result.exit_code == EXIT_SUCCESS
        assert "Warning: Certificate verification is disabled" in result.output

    def test_verbose_shows_debug_without_secrets(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--verbose", "--no-color", *LOGIN_ARGS])

        assert result.exit_code == EXIT_SUCCESS
        assert "[debug] Login timeout: 30.0s; trust store: system" in result.output
        assert "s3cret" not in result.output

    def test_debug_hidden_by_default(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--no-color", *LOGIN_ARGS])
        assert "[debug]" not in result.output

    def test_invalid_ca_exits_generic(self, cli_runner, tmp_path: Path) -> None:
        result = cli_runner.invoke(
            app, ["--no-color", *LOGIN_ARGS, "--ca", str(tmp_path / "missing.pem")]
        )
        assert result.exit_code == EXIT_GENERIC_FAILURE
        assert "CA file not found" in result.output


class TestMask:
    @pytest.mark.parametrize(
        ("token", "masked"),
        [("abc123", "abc1**"), ("abcd", "****"), ("", ""), ("a1b2c3d4e5", "a1b2******")],
    )
    def test_mask(self, token: str, masked: str) -> None:
        assert _mask(token) == masked
