"""httpx adapter that lets a channel use any :class:`ChannelAuthenticator`.

:class:`ChannelHttpxAuth` implements the channel side of the contract:

1. Before each request, ask the authenticator for credentials and set the
   ``Authorization: Bearer`` header.
2. If the server answers 401, the cached token is no longer accepted: call
   :meth:`~ChannelAuthenticator.reset`, authenticate again, and resend the
   request once.

Authentication errors propagate out of the httpx call unchanged, so callers
can catch :class:`~channel_auth.exceptions.TemporaryAuthenticationError` and
retry.

Example::

    auth = ChannelHttpxAuth(ChannelAuth(base, user, password))
    with httpx.Client(auth=auth) as client:
        client.post("https://broker:8443/databus/consumer-service/v1/consumers")
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Generator

import httpx

from channel_auth.auth.base import ChannelAuthenticator
from channel_auth.models import RequestOptions

logger = logging.getLogger(__name__)


class ChannelHttpxAuth(httpx.Auth):
    """Attach channel credentials to httpx requests and recover from 401s.

    Args:
        authenticator: The strategy supplying credentials.
    """

    def __init__(self, authenticator: ChannelAuthenticator) -> None:
        self._authenticator = authenticator

    def sync_auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        self._apply(request, self._authenticator.authenticate(_options_for(request)))
        response = yield request

        if response.status_code == 401:
            logger.info("Token rejected by %s, logging in again", request.url)
            self._authenticator.reset()
            self._apply(request, self._authenticator.authenticate(_options_for(request)))
            yield request

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        options = await self._authenticator.authenticate_async(_options_for(request))
        self._apply(request, options)
        response = yield request

        if response.status_code == 401:
            logger.info("Token rejected by %s, logging in again", request.url)
            self._authenticator.reset()
            options = await self._authenticator.authenticate_async(_options_for(request))
            self._apply(request, options)
            yield request

    @staticmethod
    def _apply(request: httpx.Request, options: RequestOptions) -> None:
        for name, value in options.authorization_headers().items():
            if request.headers.get(name) != value:
                request.headers[name] = value


def _options_for(request: httpx.Request) -> RequestOptions:
    """Describe *request* as :class:`RequestOptions` without its auth header."""
    headers = {
        name: value
        for name, value in request.headers.items()
        if name.lower() != "authorization"
    }
    return RequestOptions(method=request.method, url=str(request.url), headers=headers)
