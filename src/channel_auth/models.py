"""Pydantic models shared across channel-auth.

This is the single source of truth for data shapes in the project:

- :class:`Credentials` -- the immutable ``(username, secret)`` pair used for
  the login exchange.
- :class:`ChannelAuthOptions` -- TLS and transport settings for the identity
  endpoint, frozen after construction.
- :class:`RequestOptions` -- the outbound channel request that an
  authenticator decorates with a bearer token.

Option models accept both ``snake_case`` field names and their ``camelCase``
aliases (``rejectUnauthorized``, ``checkServerIdentity``) so that settings
files written for other channel clients load unchanged.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic.alias_generators import to_camel


ServerIdentityCheck = Callable[[str, dict[str, Any]], Optional[BaseException]]
"""Signature of a hostname-verification override.

Called with the hostname the client connected to and the peer certificate
(as returned by :meth:`ssl.SSLSocket.getpeercert`). Returning or raising an
exception rejects the server.
"""


# --- Credentials ---


class Credentials(BaseModel):
    """Username and secret presented as HTTP Basic auth on login.

    The secret is held as a :class:`~pydantic.SecretStr` so it never shows
    up in ``repr()`` output or log records.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    secret: SecretStr

    def basic_auth(self) -> tuple[str, str]:
        """Return the ``(username, password)`` tuple httpx expects for Basic auth."""
        return self.username, self.secret.get_secret_value()


# --- Transport options ---


class ChannelAuthOptions(BaseModel):
    """TLS and transport settings used for every login exchange.

    Example::

        ChannelAuthOptions(
            ca="/etc/pki/identity-ca.pem",
            cert="/etc/pki/client.pem",
            key="/etc/pki/client.key",
            rejectUnauthorized=True,
        )
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    key: Optional[str] = Field(
        default=None, description="Path to the client private key in PEM format"
    )
    cert: Optional[str] = Field(
        default=None, description="Path to the client certificate chain in PEM format"
    )
    ca: Optional[str] = Field(
        default=None,
        description="Trusted CA certificates: PEM text (may hold several) or a path to a PEM file",
    )
    passphrase: Optional[str] = Field(
        default=None, description="Passphrase for the client private key"
    )
    reject_unauthorized: bool = Field(
        default=True,
        description="Verify the identity server certificate against the trusted CAs",
    )
    check_server_identity: Optional[ServerIdentityCheck] = Field(
        default=None,
        exclude=True,
        description="Override for checking the server hostname against its certificate",
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Transport timeout in seconds for the login exchange"
    )


# --- Outbound request ---


class RequestOptions(BaseModel):
    """An outbound channel request, as seen by an authenticator.

    Authenticators never mutate the instance they are given; they return a
    copy with :attr:`bearer` set (see :meth:`with_bearer`). The transport
    turns :attr:`bearer` into an ``Authorization`` header via
    :meth:`authorization_headers`.
    """

    method: str = "GET"
    url: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, Any] = Field(default_factory=dict)
    bearer: Optional[str] = Field(
        default=None, description="Bearer token to present on the request"
    )

    def with_bearer(self, token: str) -> RequestOptions:
        """Return a copy of these options carrying *token* as bearer credential."""
        return self.model_copy(update={"bearer": token})

    def authorization_headers(self) -> dict[str, str]:
        """Return :attr:`headers` with the bearer token merged in, if one is set.

        A bearer replaces any existing ``Authorization`` header, whatever its
        case.
        """
        if self.bearer is None:
            return dict(self.headers)
        headers = {
            name: value
            for name, value in self.headers.items()
            if name.lower() != "authorization"
        }
        headers["Authorization"] = f"Bearer {self.bearer}"
        return headers
