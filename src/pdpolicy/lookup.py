"""Lookups over fetched escalation policies."""

from __future__ import annotations

from pdpolicy.models import EscalationPolicy, OnCall


class LookupFailed(Exception):
    """Exception raised when no policy matches a lookup."""


def find_policy(policies: list[EscalationPolicy], key: str) -> EscalationPolicy:
    """Find a policy by exact id, falling back to a case-insensitive name match.

    Raises:
        LookupFailed: If no policy matches.
    """
    for p in policies:
        if p.id == key:
            return p

    lowered = key.lower()
    for p in policies:
        if p.name.lower() == lowered:
            return p

    available = ", ".join(sorted(p.name for p in policies)) or "none"
    raise LookupFailed(
        f"Escalation policy '{key}' not found. Available policies: {available}"
    )


def policies_for_service(
    policies: list[EscalationPolicy], service_id: str
) -> list[EscalationPolicy]:
    """Return the policies that list ``service_id`` among their services."""
    return [p for p in policies if any(s.id == service_id for s in p.services)]


def on_call_by_level(policy: EscalationPolicy) -> list[tuple[int, OnCall]]:
    """Return the policy's on-call entries ordered by escalation level.

    Entries sharing a level keep their original order.
    """
    return sorted(((oc.level, oc) for oc in policy.on_call), key=lambda t: t[0])
