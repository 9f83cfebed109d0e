"""Pydantic models for PagerDuty escalation policies and their paged responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class PolicyFetchError(Exception):
    """Base exception for failures while fetching escalation policies.

    ``partial`` holds the policies accumulated before the failure.
    """

    def __init__(self, message: str, partial: list[EscalationPolicy] | None = None) -> None:
        super().__init__(message)
        self.partial: list[EscalationPolicy] = list(partial or [])


class DecodeError(PolicyFetchError):
    """Exception raised when a response body cannot be decoded into policies."""


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # null leaves the field at its zero value
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class RuleObject(_Frozen):
    id: str = ""
    name: str = ""
    type: str = ""
    email: str = ""
    timezone: str = Field(default="", alias="time_zone")
    color: str = ""


class EscalationRule(_Frozen):
    id: str = ""
    escalation_delay_in_minutes: int = 0
    rule_object: RuleObject = Field(default_factory=RuleObject)


class Service(_Frozen):
    id: str = ""
    name: str = ""
    integration_email: str = ""
    html_url: str = ""
    escalation_policy_id: str = ""


class OnCallUser(_Frozen):
    id: str = ""
    name: str = ""
    email: str = ""
    timezone: str = Field(default="", alias="time_zone")
    color: str = ""


class OnCall(_Frozen):
    level: int = 0
    start: str | None = None
    end: str | None = None
    user: OnCallUser = Field(default_factory=OnCallUser)


class EscalationPolicy(_Frozen):
    id: str = ""
    name: str = ""
    escalation_rules: list[EscalationRule] = Field(default_factory=list)
    services: list[Service] = Field(default_factory=list)
    on_call: list[OnCall] = Field(default_factory=list)
    num_loops: int = 0


class EscalationPolicyResponse(_Frozen):
    """One page of ``/api/v1/escalation_policies/on_call``."""

    escalation_policies: list[EscalationPolicy] = Field(default_factory=list)
    limit: int = 0
    offset: int = 0
    total: int = 0


def decode_page(data: bytes | str) -> EscalationPolicyResponse:
    """Decode a raw response body into an ``EscalationPolicyResponse``.

    Args:
        data: The full response body.

    Returns:
        The decoded page.

    Raises:
        DecodeError: If the body is not JSON or does not have the expected shape.
    """
    try:
        return EscalationPolicyResponse.model_validate_json(data)
    except ValidationError as e:
        raise DecodeError(f"Invalid escalation policy response: {e}") from e
