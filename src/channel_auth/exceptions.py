"""Exception hierarchy for channel-auth.

All exceptions inherit from :class:`ChannelAuthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`channel_auth.exit_codes`.
The CLI catches ``ChannelAuthError`` and exits with the appropriate code.

Authentication failures come in exactly two kinds so that channels can pick
a retry policy without inspecting messages:

- :class:`PermanentAuthenticationError` -- the credentials are invalid or the
  identity server's answer cannot be used as a grant. Retrying will not help
  until an operator fixes something.
- :class:`TemporaryAuthenticationError` -- a transport hiccup or an
  unexpected status. Safe to retry, optionally after backoff.

Subclass hierarchy::

    ChannelAuthError                  (exit 1)
    +-- ConfigError                   (exit 1)
    +-- AuthenticationError           (exit 1)
        +-- PermanentAuthenticationError  (exit 3)
        +-- TemporaryAuthenticationError  (exit 6)
"""

from channel_auth.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_PERMANENT_AUTH_FAILURE,
    EXIT_TEMPORARY_AUTH_FAILURE,
)


class ChannelAuthError(Exception):
    """Base exception for all channel-auth errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(ChannelAuthError):
    """Raised for configuration problems (bad base URL, unreadable TLS material, credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class AuthenticationError(ChannelAuthError):
    """Base class for login failures.

    Callers normally catch this and branch on :attr:`retryable` (or on the
    concrete subclass).
    """

    retryable: bool = False


class PermanentAuthenticationError(AuthenticationError):
    """Raised when the credentials are rejected or the login response is not a usable grant."""

    exit_code = EXIT_PERMANENT_AUTH_FAILURE
    retryable = False


class TemporaryAuthenticationError(AuthenticationError):
    """Raised on transport failures and unexpected status codes from the identity service."""

    exit_code = EXIT_TEMPORARY_AUTH_FAILURE
    retryable = True
