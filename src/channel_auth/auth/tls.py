"""TLS setup for the login exchange.

:func:`build_ssl_context` turns a :class:`~channel_auth.models.ChannelAuthOptions`
into the :class:`ssl.SSLContext` handed to httpx as ``verify``.

A custom ``check_server_identity`` callable cannot be plugged into
:mod:`ssl` directly, so it runs through httpx's ``trace`` request extension
instead: :func:`server_identity_trace` (and its async twin) fire once the
TLS handshake completes and before any request bytes, including the Basic
auth header, go out on the wire. A rejection is raised as
:class:`httpx.ConnectError` so the login classifies it like any other
transport failure.
"""

from __future__ import annotations

import ssl
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx

from channel_auth.exceptions import ConfigError
from channel_auth.models import ChannelAuthOptions, ServerIdentityCheck

_PEM_MARKER = "-----BEGIN"
_TLS_COMPLETE_EVENT = "connection.start_tls.complete"


def build_ssl_context(options: ChannelAuthOptions) -> ssl.SSLContext:
    """Build the SSL context used to reach the identity endpoint.

    - ``ca`` replaces the system trust store. It may hold PEM text (several
      certificates concatenated) or the path of a PEM file.
    - ``cert`` / ``key`` / ``passphrase`` load a client certificate chain.
    - ``reject_unauthorized=False`` disables certificate and hostname checks.
    - ``check_server_identity`` disables the built-in hostname check; the
      certificate chain is still verified.

    Args:
        options: Transport options of the authenticator.

    Returns:
        A configured :class:`ssl.SSLContext`.

    Raises:
        ConfigError: If any TLS material is missing or cannot be parsed.
    """
    try:
        if options.ca is None:
            context = ssl.create_default_context()
        elif _PEM_MARKER in options.ca:
            context = ssl.create_default_context(cadata=options.ca)
        else:
            ca_path = Path(options.ca).expanduser()
            if not ca_path.is_file():
                raise ConfigError(f"CA file not found: {ca_path}")
            context = ssl.create_default_context(cafile=str(ca_path))

        if options.cert:
            context.load_cert_chain(
                certfile=str(Path(options.cert).expanduser()),
                keyfile=str(Path(options.key).expanduser()) if options.key else None,
                password=options.passphrase,
            )
        elif options.key:
            raise ConfigError("A client 'key' was given without a matching 'cert'")
    except (ssl.SSLError, OSError) as exc:
        raise ConfigError(f"Invalid TLS material: {exc}") from exc

    if not options.reject_unauthorized:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    elif options.check_server_identity is not None:
        context.check_hostname = False
    return context


def _check_peer(check: ServerIdentityCheck, hostname: str, info: dict[str, Any]) -> None:
    """Run *check* against the peer certificate of a freshly opened TLS stream."""
    stream = info.get("return_value")
    if stream is None:
        return
    ssl_object = stream.get_extra_info("ssl_object")
    if ssl_object is None:
        return

    try:
        failure = check(hostname, ssl_object.getpeercert() or {})
    except Exception as exc:
        failure = exc
    if failure is not None:
        cause = failure if isinstance(failure, BaseException) else None
        raise httpx.ConnectError(
            f"Server identity check failed for {hostname}: {failure}"
        ) from cause


def server_identity_trace(
    check: ServerIdentityCheck, hostname: str
) -> Callable[[str, dict[str, Any]], None]:
    """Return a sync httpx ``trace`` hook applying *check* after the TLS handshake."""

    def trace(event_name: str, info: dict[str, Any]) -> None:
        if event_name == _TLS_COMPLETE_EVENT:
            _check_peer(check, hostname, info)

    return trace


def async_server_identity_trace(
    check: ServerIdentityCheck, hostname: str
) -> Callable[[str, dict[str, Any]], Awaitable[None]]:
    """Return an async httpx ``trace`` hook applying *check* after the TLS handshake."""

    async def trace(event_name: str, info: dict[str, Any]) -> None:
        if event_name == _TLS_COMPLETE_EVENT:
            _check_peer(check, hostname, info)

    return trace
