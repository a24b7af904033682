"""channel-auth -- bearer-token authentication for channel HTTP requests.

A channel (any client that issues HTTP requests to a broker or service on
behalf of an application) asks an authenticator for credentials before each
request. :class:`~channel_auth.auth.ChannelAuth` logs in once against an
identity service, caches the issued token, and attaches it to every request
until the channel reports it stale with ``reset()``.

Typical usage::

    import httpx
    from channel_auth import ChannelAuth, ChannelHttpxAuth

    auth = ChannelAuth("https://broker:8443", "svc-user", "s3cret")
    with httpx.Client(auth=ChannelHttpxAuth(auth)) as client:
        client.get("https://broker:8443/databus/consumer-service/v1/consumers")

Modules:
    auth: The authenticator interface, the login-based implementation, TLS
        setup and the httpx adapter.
    plugins: Alternate strategies (static token).
    models: Pydantic models shared across the package.
    config: Settings loading and credential source resolution.
    exceptions: Exception hierarchy with permanent/temporary classification.
    app: The ``channel-auth`` CLI.
"""

__version__ = "0.1.0"

from channel_auth.auth import (  # noqa: E402
    ChannelAuth,
    ChannelAuthenticator,
    ChannelHttpxAuth,
)
from channel_auth.exceptions import (  # noqa: E402
    AuthenticationError,
    ChannelAuthError,
    ConfigError,
    PermanentAuthenticationError,
    TemporaryAuthenticationError,
)
from channel_auth.models import ChannelAuthOptions, Credentials, RequestOptions  # noqa: E402

__all__ = [
    "AuthenticationError",
    "ChannelAuth",
    "ChannelAuthError",
    "ChannelAuthOptions",
    "ChannelAuthenticator",
    "ChannelHttpxAuth",
    "ConfigError",
    "Credentials",
    "PermanentAuthenticationError",
    "RequestOptions",
    "TemporaryAuthenticationError",
]
