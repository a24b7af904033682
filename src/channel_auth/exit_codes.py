"""Numeric process exit codes for the ``channel-auth`` CLI.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~channel_auth.exceptions.ChannelAuthError` subclass.
Shell wrappers can inspect the exit code to decide whether a failed login
is worth retrying without parsing stderr.

Example::

    $ channel-auth login --config channel.json
    $ echo $?
    6   # EXIT_TEMPORARY_AUTH_FAILURE -- retry later
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including configuration problems)."""

EXIT_PERMANENT_AUTH_FAILURE = 3
"""The identity service rejected the credentials or sent an unusable grant."""

EXIT_TEMPORARY_AUTH_FAILURE = 6
"""The login exchange failed in a way that may succeed on retry."""
