"""Typer application and CLI entry point for channel-auth.

The ``channel-auth`` command lets operators check a channel's identity
settings without starting the channel: ``channel-auth login`` performs one
login exchange and reports the outcome. The exit code tells scripts whether
a failure is worth retrying (see :mod:`channel_auth.exit_codes`).

Example::

    $ export CHANNEL_AUTH_PASSWORD=s3cret
    $ channel-auth login --base-url https://broker:8443 --username svc-user
    $ channel-auth --json login --config channel.json --show-token

:func:`main` is the console-script entry point declared in ``pyproject.toml``.
"""

from __future__ import annotations

from typing import Optional

import typer

from channel_auth import __version__
from channel_auth.config import create_channel_auth, load_settings, resolve_credential
from channel_auth.exceptions import AuthenticationError, ChannelAuthError
from channel_auth.models import RequestOptions
from channel_auth.output import (
    OutputFormat,
    OutputManager,
    error,
    debug,
    format_response,
    info,
    set_output,
    success,
    warning,
)


app = typer.Typer(
    name="channel-auth",
    help="Obtain and check channel bearer tokens from an identity service.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"channel-auth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress status messages."),
) -> None:
    """Configure output and logging before any sub-command runs."""
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO
    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    output.configure_logging()


@app.command("login")
def login(
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="JSON settings file (default: $CHANNEL_AUTH_CONFIG)."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Base URL of the identity service."
    ),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Login user name."),
    password_source: Optional[str] = typer.Option(
        None,
        "--password-source",
        help="Where to read the password: env:VAR, file:/path, prompt, literal:VALUE.",
    ),
    ca: Optional[str] = typer.Option(None, "--ca", help="CA bundle (PEM file) to trust."),
    cert: Optional[str] = typer.Option(None, "--cert", help="Client certificate (PEM file)."),
    key: Optional[str] = typer.Option(None, "--key", help="Client private key (PEM file)."),
    passphrase_source: Optional[str] = typer.Option(
        None, "--passphrase-source", help="Where to read the client key passphrase."
    ),
    insecure: bool = typer.Option(
        False, "--insecure", help="Do not verify the identity service certificate."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Login timeout in seconds."
    ),
    show_token: bool = typer.Option(
        False, "--show-token", help="Print the full token instead of a masked one."
    ),
) -> None:
    """Log in once and report the issued token.

    Exits with 3 when the credentials are rejected or the response is not a
    usable grant, and with 6 when the attempt may succeed on retry.
    """
    try:
        passphrase = resolve_credential(passphrase_source) if passphrase_source else None
        settings = load_settings(
            config,
            overrides={
                "base_url": base_url,
                "username": username,
                "password_source": password_source,
                "options": {
                    "ca": ca,
                    "cert": cert,
                    "key": key,
                    "passphrase": passphrase,
                    "reject_unauthorized": False if insecure else None,
                    "timeout": timeout,
                },
            },
        )
        auth = create_channel_auth(settings)
        if not settings.options.reject_unauthorized:
            warning("Certificate verification is disabled for the identity service.")
        debug(
            f"Login timeout: {settings.options.timeout}s; trust store: "
            f"{'custom CA' if settings.options.ca else 'system'}"
        )
        info(f"Logging in to {auth.login_url} as {settings.username}")
        options = auth.authenticate(RequestOptions())
    except AuthenticationError as exc:
        error(str(exc))
        if exc.retryable:
            info("The failure may be temporary; retry later.")
        raise typer.Exit(code=exc.exit_code) from None
    except ChannelAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    token = options.bearer or ""
    format_response(
        {
            "login_url": auth.login_url,
            "username": settings.username,
            "token": token if show_token else _mask(token),
        }
    )
    success("Login succeeded.")


def _mask(token: str) -> str:
    """Keep the first four characters of *token* and hide the rest."""
    if len(token) <= 4:
        return "*" * len(token)
    return token[:4] + "*" * (len(token) - 4)


def main() -> None:
    """Console-script entry point."""
    app()
