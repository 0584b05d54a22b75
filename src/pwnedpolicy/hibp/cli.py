"""
CLI commands for password breach policy checks.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import json

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from pwnedpolicy.config import PolicyConfig
from pwnedpolicy.hibp.errors import (
    BreachLimitError,
    ConfigurationError,
    MinLengthError,
    TransportError,
)
from pwnedpolicy.hibp.hashing import split_hash
from pwnedpolicy.hibp.models import EvaluationResult, RiskLevel
from pwnedpolicy.hibp.policy import PasswordPolicy

console = Console()


def risk_color(risk: RiskLevel) -> str:
    """Get color for risk level."""
    colors = {
        RiskLevel.SAFE: "green",
        RiskLevel.LOW: "yellow",
        RiskLevel.MEDIUM: "orange3",
        RiskLevel.HIGH: "red",
        RiskLevel.CRITICAL: "bold red",
    }
    return colors.get(risk, "white")


def build_policy(config: PolicyConfig) -> PasswordPolicy:
    """Create a policy or exit with the configuration problem."""
    try:
        return PasswordPolicy(config)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        console.print("Set PWNEDPOLICY_USER_AGENT or use --user-agent")
        raise SystemExit(1)


def run_with_spinner(description: str, coro_factory):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        return asyncio.run(coro_factory())


def print_result(result: EvaluationResult, breach_limit: int) -> None:
    color = risk_color(result.risk_level)
    verdict = "[green]ALLOWED[/green]" if result.allowed else "[red]REJECTED[/red]"

    if not result.is_pwned:
        body = "[green]Good news![/green] This password has NOT been found in any known data breaches."
    else:
        body = (
            f"[red]Warning![/red] This password has been seen "
            f"[bold]{result.breach_count:,}[/bold] times in data breaches!\n\n"
            f"{result.risk_description}"
        )

    console.print(Panel(
        f"{body}\n\n"
        f"Risk Level: [{color}]{result.risk_level.value.upper()}[/{color}]\n"
        f"Breach Limit: {breach_limit:,}\n"
        f"Verdict: {verdict}",
        title="Password Policy Result"
    ))


@click.command("check")
@click.option("--password", "-p", help="Password to check (or prompts securely)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check_password(ctx: click.Context, password: str | None, json_output: bool) -> None:
    """Evaluate a password against the breach policy.

    Example:
        pwnedpolicy check
        pwnedpolicy --breach-limit 1 check --json
    """
    config: PolicyConfig = ctx.obj["config"]
    policy = build_policy(config)

    if password is None:
        password = click.prompt("Password to check", hide_input=True)

    async def _evaluate():
        async with policy:
            return await policy.evaluate(password)

    try:
        result = run_with_spinner("Checking password...", _evaluate)
    except MinLengthError as e:
        console.print(f"[red]Password too short: {e.length} bytes, minimum is {e.min_required}[/red]")
        raise SystemExit(1)
    except TransportError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    if json_output:
        console.print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    print_result(result, config.breach_limit)


@click.command("validate")
@click.option("--password", "-p", help="Password to validate (or prompts securely)")
@click.pass_context
def validate_password(ctx: click.Context, password: str | None) -> None:
    """Validate a password, exiting non-zero if the policy rejects it.

    Example:
        pwnedpolicy --min-length 10 validate -p "correct horse battery staple"
    """
    policy = build_policy(ctx.obj["config"])

    if password is None:
        password = click.prompt("Password to validate", hide_input=True)

    async def _validate():
        async with policy:
            await policy.validate(password)

    try:
        run_with_spinner("Validating password...", _validate)
    except MinLengthError as e:
        console.print(f"[red]Rejected: minimum length {e.min_required} not satisfied ({e.length} bytes)[/red]")
        raise SystemExit(1)
    except BreachLimitError as e:
        console.print(f"[red]Rejected: found in {e.breach_count:,} data breaches[/red]")
        raise SystemExit(1)
    except TransportError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    console.print("[green]Password satisfies the policy[/green]")


@click.command("hash")
@click.argument("sha1_hash")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check_hash(ctx: click.Context, sha1_hash: str, json_output: bool) -> None:
    """Look up a pre-computed SHA-1 password hash.

    Example:
        pwnedpolicy hash 5BAA61E4C9B93F3F0682250B6CF8331B7EE68FD8
    """
    try:
        keys = split_hash(sha1_hash)
    except ValueError as e:
        console.print(f"[red]Invalid hash: {e}[/red]")
        raise SystemExit(1)

    config: PolicyConfig = ctx.obj["config"]
    policy = build_policy(config)

    async def _lookup():
        async with policy:
            return await policy.breach_count_for_hash(keys.digest)

    try:
        count = run_with_spinner("Checking hash...", _lookup)
    except TransportError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    risk = RiskLevel.from_count(count)
    if json_output:
        console.print(json.dumps({
            "hash_prefix": keys.prefix,
            "breach_count": count,
            "allowed": count < config.breach_limit,
            "risk_level": risk.value,
        }, indent=2))
        return

    color = risk_color(risk)
    console.print(
        f"Seen [bold]{count:,}[/bold] times - "
        f"Risk Level: [{color}]{risk.value.upper()}[/{color}]"
    )


@click.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show effective policy configuration."""
    config: PolicyConfig = ctx.obj["config"]

    table = Table(title="Policy Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for key, value in config.to_dict().items():
        if key == "api_key":
            value = f"[green]Set ({value})[/green]" if value else "[red]Not set[/red]"
        table.add_row(key, str(value))

    console.print(table)

    problems = config.validate()
    if problems:
        console.print("\n[yellow]Problems:[/yellow]")
        for problem in problems:
            console.print(f"  - {problem}")


def add_hibp_commands(main_cli):
    """Add policy commands to main CLI."""
    main_cli.add_command(check_password)
    main_cli.add_command(validate_password)
    main_cli.add_command(check_hash)
    main_cli.add_command(show_config)
