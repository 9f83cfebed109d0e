"""Rich output formatting for CLI results."""

from __future__ import annotations

import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pdpolicy.lookup import on_call_by_level
from pdpolicy.models import EscalationPolicy

console = Console()


def _delay_style(minutes: int) -> str:
    if minutes <= 5:
        return "red"
    if minutes <= 30:
        return "yellow"
    return "green"


def render_policy_list(policies: list[EscalationPolicy]) -> None:
    """Render a table of escalation policies sorted by name."""
    if not policies:
        console.print(Text("No escalation policies found.", style="dim"))
        return

    table = Table(title="Escalation Policies", show_header=True, header_style="bold")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Rules", justify="right")
    table.add_column("Services", justify="right")
    table.add_column("Loops", justify="right")

    for p in sorted(policies, key=lambda p: (p.name.lower(), p.id)):
        table.add_row(
            p.id,
            p.name,
            str(len(p.escalation_rules)),
            str(len(p.services)),
            str(p.num_loops),
        )

    console.print(table)


def render_policy(policy: EscalationPolicy) -> None:
    """Render a policy's rules and services inside a panel.

    Args:
        policy: The escalation policy to display.
    """
    header_text = Text()
    header_text.append("Escalation Policy: ")
    header_text.append(policy.name, style="bold")
    header_text.append(f" [{policy.id}]")

    rules = Table(show_header=True, header_style="bold")
    rules.add_column("Level", justify="center")
    rules.add_column("Target")
    rules.add_column("Type")
    rules.add_column("Delay", justify="right", no_wrap=True)

    for idx, rule in enumerate(policy.escalation_rules, start=1):
        target = rule.rule_object
        delay = rule.escalation_delay_in_minutes
        rules.add_row(
            str(idx),
            target.name,
            target.type,
            Text(f"{delay} min", style=_delay_style(delay)),
        )

    console.print(Panel(rules, title=header_text, border_style="blue"))

    if policy.services:
        services = Table(title="Services", show_header=True, header_style="bold")
        services.add_column("ID")
        services.add_column("Name")
        services.add_column("URL")
        for svc in policy.services:
            services.add_row(svc.id, svc.name, svc.html_url)
        console.print(services)

    console.print(Text(f"  Loops: {policy.num_loops}", style="dim"))


def render_on_call(policy: EscalationPolicy) -> None:
    """Render who is currently on call for each level of a policy."""
    entries = on_call_by_level(policy)
    if not entries:
        console.print(Text(f"Nobody is on call for {policy.name}.", style="dim"))
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Level", justify="center")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Until")

    for level, oc in entries:
        table.add_row(str(level), oc.user.name, oc.user.email, oc.end or "-")

    console.print(Panel(table, title=f"On Call: {policy.name}", border_style="cyan"))


def render_json(policies: list[EscalationPolicy]) -> None:
    """Output policies as JSON using the remote API's field names."""
    data = [p.model_dump(by_alias=True) for p in policies]
    console.print_json(json.dumps(data))


def render_on_call_json(policy: EscalationPolicy) -> None:
    """Output a policy's on-call entries as JSON, ordered by level."""
    data = [
        {"level": level, **oc.model_dump(by_alias=True)}
        for level, oc in on_call_by_level(policy)
    ]
    console.print_json(json.dumps(data))
