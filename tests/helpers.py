"""Canned API pages, a scripted getter and a fake clock for tests."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

from pdpolicy.transport import TransportError


def policy_json(policy_id: str, name: str | None = None) -> dict:
    return {
        "id": policy_id,
        "name": name or f"Policy {policy_id}",
        "escalation_rules": [
            {
                "id": f"R{policy_id}",
                "escalation_delay_in_minutes": 30,
                "rule_object": {
                    "id": "PUSER1",
                    "name": "Alice",
                    "type": "user",
                    "email": "alice@example.com",
                    "time_zone": "Europe/Madrid",
                    "color": "red",
                },
            }
        ],
        "services": [
            {
                "id": f"S{policy_id}",
                "name": f"svc-{policy_id}",
                "integration_email": f"svc-{policy_id}@example.pagerduty.com",
                "html_url": f"https://example.pagerduty.com/services/S{policy_id}",
                "escalation_policy_id": policy_id,
            }
        ],
        "on_call": [
            {
                "level": 1,
                "start": "2026-10-19T08:00:00Z",
                "end": "2026-10-20T08:00:00Z",
                "user": {"id": "PUSER1", "name": "Alice", "email": "alice@example.com"},
            }
        ],
        "num_loops": 2,
    }


def page_body(ids: list[str], offset: int, total: int, limit: int = 100) -> bytes:
    return json.dumps(
        {
            "escalation_policies": [policy_json(i) for i in ids],
            "limit": limit,
            "offset": offset,
            "total": total,
        }
    ).encode()


class ScriptedGetter:
    """Getter returning canned bodies keyed by the ``offset`` in the URL.

    A value that is an exception instance is raised instead of returned.
    """

    def __init__(self, responses: dict[int, bytes | Exception]) -> None:
        self.responses = responses
        self.urls: list[str] = []

    def get(self, url: str, token: str, extra: str = "") -> bytes:
        self.urls.append(url)
        offset = int(url.split("offset=")[1].split("&")[0])
        resp = self.responses.get(offset)
        if resp is None:
            raise TransportError(f"unexpected request {url}")
        if isinstance(resp, Exception):
            raise resp
        return resp


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)
