"""Alternate channel authentication strategies."""

from channel_auth.plugins.static_token import StaticTokenAuth

__all__ = ["StaticTokenAuth"]
