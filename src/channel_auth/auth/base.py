"""Authentication strategy interface used by channels.

A channel does not care how credentials are obtained. Before each outbound
request it hands its :class:`~channel_auth.models.RequestOptions` to a
:class:`ChannelAuthenticator` and sends whatever comes back. When a request
made with those credentials is later refused, the channel calls
:meth:`~ChannelAuthenticator.reset` so the next call starts from scratch.

Implementations in this package:

- :class:`~channel_auth.auth.channel_auth.ChannelAuth` -- logs in against an
  identity endpoint and caches the issued token.
- :class:`~channel_auth.plugins.static_token.StaticTokenAuth` -- presents a
  pre-issued token.

See Also:
    :class:`~channel_auth.auth.flow.ChannelHttpxAuth` for the httpx adapter
    that drives this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from channel_auth.models import RequestOptions


class ChannelAuthenticator(ABC):
    """Interface every channel authentication strategy implements.

    The class carries no state or behaviour of its own; it only fixes the
    contract the channel relies on.
    """

    @abstractmethod
    def authenticate(self, request_options: RequestOptions) -> RequestOptions:
        """Return a copy of *request_options* carrying credentials.

        Args:
            request_options: The outbound request. Never mutated.

        Returns:
            New :class:`~channel_auth.models.RequestOptions` with credentials
            attached.

        Raises:
            PermanentAuthenticationError: If the credentials are unusable.
            TemporaryAuthenticationError: If the attempt may succeed on retry.
        """
        ...

    @abstractmethod
    async def authenticate_async(self, request_options: RequestOptions) -> RequestOptions:
        """Async counterpart of :meth:`authenticate` with the same contract."""
        ...

    @abstractmethod
    def reset(self) -> None:
        """Forget any cached credentials. Must be idempotent."""
        ...
