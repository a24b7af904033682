"""Static bearer token strategy.

This module provides :class:`StaticTokenAuth`, a
:class:`~channel_auth.auth.base.ChannelAuthenticator` for channels that are
handed a pre-issued token (or API key) instead of login credentials. The
token comes either directly from the caller or from a credential ``source``
(e.g. ``env:CHANNEL_TOKEN``, ``file:~/.channel-token``).

No exchange with an identity service takes place. A source is read on first
use and cached; :meth:`~StaticTokenAuth.reset` drops the cached value so a
rotated token file or variable is picked up on the next request.

See Also:
    :class:`channel_auth.auth.channel_auth.ChannelAuth` for the login-based
    strategy.
"""

from __future__ import annotations

import threading
from typing import Optional

from channel_auth.auth.base import ChannelAuthenticator
from channel_auth.config import resolve_credential
from channel_auth.exceptions import ConfigError, PermanentAuthenticationError
from channel_auth.models import RequestOptions


class StaticTokenAuth(ChannelAuthenticator):
    """Present a fixed bearer token on every channel request.

    Exactly one of *token* and *source* must be given.

    Args:
        token: The bearer token itself.
        source: A credential source descriptor resolved with
            :func:`~channel_auth.config.resolve_credential`.

    Raises:
        ConfigError: If neither or both of *token* and *source* are given.
    """

    def __init__(self, token: Optional[str] = None, source: Optional[str] = None) -> None:
        if (token is None) == (source is None):
            raise ConfigError("StaticTokenAuth needs exactly one of 'token' or 'source'")
        self._source = source
        self._token = token
        self._lock = threading.Lock()

    def authenticate(self, request_options: RequestOptions) -> RequestOptions:
        """Return a copy of *request_options* carrying the static token.

        Raises:
            PermanentAuthenticationError: If the token source cannot be
                resolved or yields an empty token.
        """
        return request_options.with_bearer(self._current_token())

    async def authenticate_async(self, request_options: RequestOptions) -> RequestOptions:
        return self.authenticate(request_options)

    def reset(self) -> None:
        """Forget a token read from ``source``. A literal token is kept."""
        if self._source is None:
            return
        with self._lock:
            self._token = None

    def _current_token(self) -> str:
        with self._lock:
            token = self._token
        if token is not None:
            if not token.strip():
                raise PermanentAuthenticationError("Static bearer token is empty")
            return token

        assert self._source is not None
        try:
            token = resolve_credential(self._source).strip()
        except ConfigError as exc:
            raise PermanentAuthenticationError(str(exc)) from exc
        if not token:
            raise PermanentAuthenticationError(
                f"Token source '{self._source}' resolved to an empty token"
            )
        with self._lock:
            self._token = token
        return token
