"""Authenticated HTTP transport for the PagerDuty REST API."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from pdpolicy.models import PolicyFetchError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://{domain}.pagerduty.com"
DEFAULT_TIMEOUT = 10.0


class TransportError(PolicyFetchError):
    """Exception raised when an authenticated GET fails."""


class HttpGetter(Protocol):
    def get(self, url: str, token: str, extra: str = "") -> bytes:
        """Return the full response body of a GET, or raise ``TransportError``."""
        ...


def paged_url(
    path: str,
    domain: str,
    offset: int,
    limit: int,
    base_url: str = DEFAULT_BASE_URL,
) -> str:
    """Build the URL for one page of a paginated collection.

    Args:
        path: Resource path, e.g. ``/api/v1/escalation_policies/on_call``.
        domain: The account subdomain.
        offset: Index of the first item to return.
        limit: Page size.
        base_url: Template for the account base URL; ``{domain}`` is substituted.
    """
    base = base_url.format(domain=domain).rstrip("/")
    return f"{base}{path}?offset={offset}&limit={limit}"


class AuthenticatedGetter:
    """``HttpGetter`` backed by an ``httpx.Client``.

    The token is sent as ``Authorization: Token token=<token>``.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(timeout=timeout)

    def get(self, url: str, token: str, extra: str = "") -> bytes:
        if extra:
            sep = "&" if "?" in url else "?"
            url = f"{url}{sep}{extra.lstrip('?&')}"

        headers = {
            "Authorization": f"Token token={token}",
            "Accept": "application/json",
        }
        try:
            resp = self._client.get(url, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"GET {url} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}") from e

        logger.debug("GET %s -> %d", url, resp.status_code)
        return resp.content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> AuthenticatedGetter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
