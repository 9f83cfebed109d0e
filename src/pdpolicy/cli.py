"""CLI interface for browsing PagerDuty escalation policies."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from pdpolicy.config import ConfigError, Settings, build_fetcher, load_settings
from pdpolicy.lookup import LookupFailed, find_policy, policies_for_service
from pdpolicy.models import EscalationPolicy, PolicyFetchError
from pdpolicy.output import (
    render_json,
    render_on_call,
    render_on_call_json,
    render_policy,
    render_policy_list,
)

console = Console()

app = typer.Typer(
    name="pdpolicy",
    help="PagerDuty escalation policies and who is on call.",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Path, typer.Option("--config", "-c", help="Path to settings YAML file.")
]
DomainOption = Annotated[
    Optional[str], typer.Option("--domain", "-d", help="PagerDuty account subdomain.")
]
TokenOption = Annotated[
    Optional[str],
    typer.Option("--token", envvar="PAGERDUTY_TOKEN", help="PagerDuty API token."),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON.")]
VerboseOption = Annotated[
    bool, typer.Option("--verbose", "-v", help="Log requests and cache activity.")
]


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
            force=True,
        )


def _settings(config: Path, domain: str | None, token: str | None) -> Settings:
    settings = load_settings(config)
    overrides = {k: v for k, v in (("domain", domain), ("token", token)) if v}
    if overrides:
        settings = settings.model_copy(update=overrides)
    if not settings.domain:
        raise ConfigError("No PagerDuty domain configured (use --domain)")
    if not settings.token:
        raise ConfigError("No PagerDuty token configured (use --token)")
    return settings


def _fetch(config: Path, domain: str | None, token: str | None) -> list[EscalationPolicy]:
    settings = _settings(config, domain, token)
    fetcher = build_fetcher(settings)
    try:
        return fetcher.get_escalation_policies(settings.token, settings.domain)
    finally:
        close = getattr(fetcher.getter, "close", None)
        if close is not None:
            close()


@app.command("list")
def list_cmd(
    config: ConfigOption = Path("pdpolicy.yaml"),
    domain: DomainOption = None,
    token: TokenOption = None,
    service: Annotated[
        Optional[str],
        typer.Option("--service", "-s", help="Only policies covering this service ID."),
    ] = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
) -> None:
    """List all escalation policies."""
    _setup_logging(verbose)
    try:
        policies = _fetch(config, domain, token)
    except (ConfigError, PolicyFetchError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)

    if service is not None:
        policies = policies_for_service(policies, service)

    if as_json:
        render_json(policies)
    else:
        render_policy_list(policies)


@app.command("show")
def show_cmd(
    policy: Annotated[str, typer.Argument(help="Policy ID or name.")],
    config: ConfigOption = Path("pdpolicy.yaml"),
    domain: DomainOption = None,
    token: TokenOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Show the rules and services of one escalation policy."""
    _setup_logging(verbose)
    try:
        found = find_policy(_fetch(config, domain, token), policy)
    except (ConfigError, PolicyFetchError, LookupFailed) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)

    if as_json:
        render_json([found])
    else:
        render_policy(found)


@app.command("oncall")
def oncall_cmd(
    policy: Annotated[str, typer.Argument(help="Policy ID or name.")],
    config: ConfigOption = Path("pdpolicy.yaml"),
    domain: DomainOption = None,
    token: TokenOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Show who is currently on call for an escalation policy."""
    _setup_logging(verbose)
    try:
        found = find_policy(_fetch(config, domain, token), policy)
    except (ConfigError, PolicyFetchError, LookupFailed) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)

    if as_json:
        render_on_call_json(found)
    else:
        render_on_call(found)
