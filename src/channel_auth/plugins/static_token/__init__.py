"""Static bearer token strategy.

See Also:
    :class:`~channel_auth.plugins.static_token.plugin.StaticTokenAuth`
    :mod:`channel_auth.auth.base` for the interface contract.
"""

from channel_auth.plugins.static_token.plugin import StaticTokenAuth

__all__ = ["StaticTokenAuth"]
