"""Channel authentication.

The main entry points are:

- :class:`ChannelAuthenticator` -- the interface channels program against.
- :class:`ChannelAuth` -- logs in against an identity service and caches
  the issued bearer token.
- :class:`ChannelHttpxAuth` -- httpx adapter that applies an authenticator
  to requests and resets it on 401.
- :func:`build_ssl_context` -- TLS setup for the login exchange.
"""

from channel_auth.auth.base import ChannelAuthenticator
from channel_auth.auth.channel_auth import LOGIN_PATH, ChannelAuth
from channel_auth.auth.flow import ChannelHttpxAuth
from channel_auth.auth.tls import build_ssl_context

__all__ = [
    "LOGIN_PATH",
    "ChannelAuth",
    "ChannelAuthenticator",
    "ChannelHttpxAuth",
    "build_ssl_context",
]
