"""Token-based channel authentication against an identity endpoint.

:class:`ChannelAuth` supplies bearer tokens for channel requests. The first
:meth:`~ChannelAuth.authenticate` call logs in with HTTP Basic credentials at
``<base>/identity/v1/login``; the ``AuthorizationToken`` from the response is
cached and attached to that and every later request without touching the
network again. The token lives until :meth:`~ChannelAuth.reset` is called,
which the channel does when a request made with it is refused.

Login outcomes are classified so callers can pick a retry policy:

=============================  ===============================================
Outcome                        Result
=============================  ===============================================
transport failure / timeout    :class:`TemporaryAuthenticationError`
200 with ``AuthorizationToken``  token cached, bearer attached
200 without it                 :class:`PermanentAuthenticationError`
401 / 403                      :class:`PermanentAuthenticationError`
any other status               :class:`TemporaryAuthenticationError`
=============================  ===============================================

No retries happen here; that is the caller's decision.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Optional

import httpx

from channel_auth.auth.base import ChannelAuthenticator
from channel_auth.auth.tls import (
    async_server_identity_trace,
    build_ssl_context,
    server_identity_trace,
)
from channel_auth.exceptions import (
    ConfigError,
    PermanentAuthenticationError,
    TemporaryAuthenticationError,
)
from channel_auth.models import ChannelAuthOptions, Credentials, RequestOptions

logger = logging.getLogger(__name__)

LOGIN_PATH = "/identity/v1/login"
TOKEN_FIELD = "AuthorizationToken"


class ChannelAuth(ChannelAuthenticator):
    """Authenticate channel requests with a token from the identity service.

    Constructing the object validates the configuration but does not contact
    the network.

    Args:
        base: Base URL of the identity service, e.g. ``https://broker:8443``.
        username: User name presented on login.
        password: Password presented on login.
        options: TLS and transport settings for the login exchange.
        transport: Optional httpx transport used instead of the default
            network transport (custom proxies, mock servers in tests).

    Raises:
        ConfigError: If *base* is not an http(s) URL or the TLS material in
            *options* cannot be loaded.

    Example::

        auth = ChannelAuth("https://broker:8443", "svc-user", "s3cret")
        options = auth.authenticate(RequestOptions(method="POST", url=url))
        httpx.post(url, headers=options.authorization_headers(), json=payload)
    """

    def __init__(
        self,
        base: str,
        username: str,
        password: str,
        options: Optional[ChannelAuthOptions] = None,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._options = options or ChannelAuthOptions()
        self._login_url = _login_url(base)
        self._credentials = Credentials(username=username, secret=password)
        self._ssl_context = build_ssl_context(self._options)
        self._transport = transport
        self._token: Optional[str] = None
        # Guards check-then-set on the token slot; never held across I/O.
        self._lock = threading.Lock()

    @property
    def login_url(self) -> str:
        """Full URL of the login endpoint."""
        return str(self._login_url)

    @property
    def has_token(self) -> bool:
        """Whether a token from a previous login is cached."""
        with self._lock:
            return self._token is not None

    # ------------------------------------------------------------------ #
    # ChannelAuthenticator
    # ------------------------------------------------------------------ #

    def authenticate(self, request_options: RequestOptions) -> RequestOptions:
        """Attach a bearer token to *request_options*, logging in if needed.

        Args:
            request_options: The outbound channel request. Never mutated.

        Returns:
            A copy of *request_options* with :attr:`~RequestOptions.bearer` set.

        Raises:
            PermanentAuthenticationError: Bad credentials or unusable login
                response.
            TemporaryAuthenticationError: Transport failure or unexpected
                status code.
        """
        token = self._cached_token()
        if token is None:
            token = self._store_token(_token_from_response(self._login()))
        return request_options.with_bearer(token)

    async def authenticate_async(self, request_options: RequestOptions) -> RequestOptions:
        """Async counterpart of :meth:`authenticate`."""
        token = self._cached_token()
        if token is None:
            response = await self._login_async()
            token = self._store_token(_token_from_response(response))
        return request_options.with_bearer(token)

    def reset(self) -> None:
        """Discard the cached token so the next call logs in again."""
        with self._lock:
            if self._token is not None:
                logger.debug("Discarding cached token for %s", self._login_url)
            self._token = None

    # ------------------------------------------------------------------ #
    # Token slot
    # ------------------------------------------------------------------ #

    def _cached_token(self) -> Optional[str]:
        with self._lock:
            token = self._token
        if token is not None:
            logger.debug("Using cached token for %s", self._login_url)
        return token

    def _store_token(self, token: str) -> str:
        with self._lock:
            self._token = token
        logger.info("Obtained token from %s", self._login_url)
        return token

    # ------------------------------------------------------------------ #
    # Login exchange
    # ------------------------------------------------------------------ #

    def _request_kwargs(self) -> dict[str, Any]:
        return {
            "auth": self._credentials.basic_auth(),
            "headers": {"Accept": "application/json"},
        }

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "verify": self._ssl_context,
            "timeout": self._options.timeout,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    def _checks_server_identity(self) -> bool:
        return (
            self._options.reject_unauthorized
            and self._options.check_server_identity is not None
        )

    def _login(self) -> httpx.Response:
        """GET the login endpoint with Basic credentials."""
        logger.debug("Logging in to %s as %s", self._login_url, self._credentials.username)
        kwargs = self._request_kwargs()
        if self._checks_server_identity():
            kwargs["extensions"] = {
                "trace": server_identity_trace(
                    self._options.check_server_identity, self._login_url.host
                )
            }
        try:
            with httpx.Client(**self._client_kwargs()) as client:
                return client.get(self._login_url, **kwargs)
        except httpx.HTTPError as exc:
            raise _transport_failure(self._login_url, exc) from exc

    async def _login_async(self) -> httpx.Response:
        logger.debug("Logging in to %s as %s", self._login_url, self._credentials.username)
        kwargs = self._request_kwargs()
        if self._checks_server_identity():
            kwargs["extensions"] = {
                "trace": async_server_identity_trace(
                    self._options.check_server_identity, self._login_url.host
                )
            }
        try:
            async with httpx.AsyncClient(**self._client_kwargs()) as client:
                return await client.get(self._login_url, **kwargs)
        except httpx.HTTPError as exc:
            raise _transport_failure(self._login_url, exc) from exc


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _login_url(base: str) -> httpx.URL:
    """Join *base* and :data:`LOGIN_PATH`, rejecting anything but http(s) URLs."""
    try:
        url = httpx.URL(base.rstrip("/") + LOGIN_PATH)
    except httpx.InvalidURL as exc:
        raise ConfigError(f"Invalid identity service URL '{base}': {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(
            f"Invalid identity service URL '{base}': expected an http(s) URL with a host"
        )
    return url


def _transport_failure(url: httpx.URL, exc: Exception) -> TemporaryAuthenticationError:
    logger.warning("Login to %s failed: %s", url, exc)
    return TemporaryAuthenticationError(f"Unexpected error: {exc}")


def _response_body(response: httpx.Response) -> Any:
    """Parsed JSON body of *response*, or its raw text when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


def _token_from_response(response: httpx.Response) -> str:
    """Extract the token from a login response or raise the matching error."""
    status = response.status_code
    url = response.request.url

    if status == 200:
        body = _response_body(response)
        token = body.get(TOKEN_FIELD) if isinstance(body, dict) else None
        if isinstance(token, str) and token:
            return token
        logger.warning("Login response from %s has no %s", url, TOKEN_FIELD)
        raise PermanentAuthenticationError(
            f"Unable to locate {TOKEN_FIELD} in login response"
        )

    if status in (401, 403):
        logger.warning("Login to %s was refused with status %d", url, status)
        raise PermanentAuthenticationError(f"Unauthorized {status}: {response.text}")

    logger.warning("Login to %s returned unexpected status %d", url, status)
    raise TemporaryAuthenticationError(
        f"Unexpected status code {status}: {json.dumps(_response_body(response))}"
    )
