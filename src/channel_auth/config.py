"""Configuration loading and credential resolution.

This module handles all configuration for channel-auth:

* **Settings** -- :class:`ChannelAuthSettings` describes one identity
  endpoint: base URL, user name, where to find the password, and the
  TLS/transport :class:`~channel_auth.models.ChannelAuthOptions`.
* **Precedence resolution** -- :func:`load_settings` merges explicit
  overrides (CLI flags), environment variables and a JSON settings file into
  the effective settings.
* **Credential resolution** -- :func:`resolve_credential` reads secrets from
  env vars, files, or an interactive prompt so that passwords never have to
  be written into settings files.
* **Factory** -- :func:`create_channel_auth` builds a ready
  :class:`~channel_auth.auth.channel_auth.ChannelAuth` from settings.
"""

from __future__ import annotations

import getpass
import json
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from channel_auth.exceptions import ConfigError
from channel_auth.models import ChannelAuthOptions

if TYPE_CHECKING:
    import httpx

    from channel_auth.auth.channel_auth import ChannelAuth

ENV_CONFIG = "CHANNEL_AUTH_CONFIG"
ENV_BASE_URL = "CHANNEL_AUTH_BASE_URL"
ENV_USERNAME = "CHANNEL_AUTH_USERNAME"
ENV_PASSWORD_SOURCE = "CHANNEL_AUTH_PASSWORD_SOURCE"

DEFAULT_PASSWORD_SOURCE = "env:CHANNEL_AUTH_PASSWORD"


class ChannelAuthSettings(BaseModel):
    """Settings for one identity endpoint.

    Example settings file::

        {
            "baseUrl": "https://broker:8443",
            "username": "svc-user",
            "passwordSource": "file:~/.channel-password",
            "options": {"ca": "/etc/pki/identity-ca.pem", "rejectUnauthorized": true}
        }
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    base_url: str = Field(description="Base URL of the identity service")
    username: str = Field(description="User name presented on login")
    password_source: str = Field(
        default=DEFAULT_PASSWORD_SOURCE,
        description="Credential source for the password: env:VAR, file:/path, prompt, literal:VALUE",
    )
    options: ChannelAuthOptions = Field(default_factory=ChannelAuthOptions)


def _read_settings_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Settings file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid settings file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid settings file at {path}: expected a JSON object")
    return data


def load_settings(
    path: Optional[str] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> ChannelAuthSettings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. *overrides* (typically CLI flags; ``None`` values are ignored)
        2. Environment variables (``CHANNEL_AUTH_BASE_URL``,
           ``CHANNEL_AUTH_USERNAME``, ``CHANNEL_AUTH_PASSWORD_SOURCE``)
        3. The JSON settings file at *path*, or at ``$CHANNEL_AUTH_CONFIG``
        4. Defaults

    Args:
        path: Optional path to a JSON settings file.
        overrides: Field values that win over every other source. Keys use
            the snake_case field names; ``options`` entries are merged into
            the file's options rather than replacing them.

    Returns:
        The validated :class:`ChannelAuthSettings`.

    Raises:
        ConfigError: If the file cannot be read or the merged settings fail
            validation.
    """
    data: dict[str, Any] = {}

    settings_path = path or os.environ.get(ENV_CONFIG)
    if settings_path:
        data.update(_read_settings_file(Path(settings_path).expanduser()))

    for field_name, env_var in (
        ("base_url", ENV_BASE_URL),
        ("username", ENV_USERNAME),
        ("password_source", ENV_PASSWORD_SOURCE),
    ):
        value = os.environ.get(env_var)
        if value:
            _set_field(data, field_name, value)

    for field_name, value in (overrides or {}).items():
        if value is None:
            continue
        if field_name == "options":
            options = dict(data.get("options") or {})
            for option_name, option_value in value.items():
                if option_value is not None:
                    _set_field(options, option_name, option_value)
            data["options"] = options
        else:
            _set_field(data, field_name, value)

    try:
        return ChannelAuthSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid channel-auth settings: {exc}") from exc


def _set_field(data: dict[str, Any], field_name: str, value: Any) -> None:
    """Set *field_name* in *data*, dropping a camelCase spelling from a file."""
    data.pop(to_camel(field_name), None)
    data[field_name] = value


def create_channel_auth(
    settings: ChannelAuthSettings,
    transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
) -> ChannelAuth:
    """Build a :class:`~channel_auth.auth.channel_auth.ChannelAuth` from *settings*.

    The password is resolved from ``settings.password_source`` at this point;
    the network is not contacted.

    Raises:
        ConfigError: If the password source cannot be resolved or the
            settings are otherwise unusable.
    """
    from channel_auth.auth.channel_auth import ChannelAuth

    password = resolve_credential(settings.password_source)
    return ChannelAuth(
        settings.base_url,
        settings.username,
        password,
        options=settings.options,
        transport=transport,
    )


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts the user interactively (requires a TTY)
        - ``"literal:VALUE"`` -- the value itself

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter password: ")

    if source.startswith("literal:"):
        return source[8:]

    raise ConfigError(
        f"Unknown credential source '{source}'. "
        "Expected env:VAR, file:/path, prompt, or literal:VALUE"
    )
