"""
PwnedPolicy CLI - Main entry point for the command-line interface.
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from pwnedpolicy import __version__
from pwnedpolicy.config import (
    DEFAULT_BREACH_LIMIT,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MIN_PASSWORD_LENGTH,
    PolicyConfig,
)

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="pwnedpolicy")
@click.option(
    "--user-agent", "-u",
    envvar="PWNEDPOLICY_USER_AGENT",
    default=f"pwnedpolicy/{__version__}",
    show_default=True,
    help="User-Agent sent to the Pwned Passwords API",
)
@click.option("--api-key", "-k", envvar="HIBP_API_KEY", help="HIBP API key (optional)")
@click.option(
    "--min-length", "-m",
    envvar="PWNEDPOLICY_MIN_LENGTH",
    type=click.IntRange(min=1),
    default=DEFAULT_MIN_PASSWORD_LENGTH,
    show_default=True,
    help="Minimum password length in UTF-8 bytes",
)
@click.option(
    "--breach-limit", "-l",
    envvar="PWNEDPOLICY_BREACH_LIMIT",
    type=click.IntRange(min=1),
    default=DEFAULT_BREACH_LIMIT,
    show_default=True,
    help="Breach count at which a password is rejected",
)
@click.option(
    "--max-attempts",
    envvar="PWNEDPOLICY_MAX_ATTEMPTS",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_ATTEMPTS,
    show_default=True,
    help="Request attempts before giving up",
)
@click.option("--padding", is_flag=True, envvar="PWNEDPOLICY_ADD_PADDING", help="Request padded responses")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context,
    user_agent: str,
    api_key: str | None,
    min_length: int,
    breach_limit: int,
    max_attempts: int,
    padding: bool,
    verbose: bool,
) -> None:
    """PwnedPolicy - password breach policy checks

    Checks passwords against the Have I Been Pwned "Pwned Passwords"
    corpus using k-anonymity. Only the first 5 characters of the SHA-1
    hash ever leave this system.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    config = PolicyConfig.from_env()
    config.user_agent = user_agent
    config.api_key = api_key
    config.add_padding = padding
    config.min_password_length = min_length
    config.breach_limit = breach_limit
    config.max_attempts = max_attempts

    ctx.ensure_object(dict)
    ctx.obj["console"] = console
    ctx.obj["config"] = config


# Import and register commands
from pwnedpolicy.hibp.cli import add_hibp_commands

add_hibp_commands(main)


if __name__ == "__main__":
    main()
