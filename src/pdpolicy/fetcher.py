"""Cached, paginated retrieval of on-call escalation policies."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pdpolicy.models import (
    DecodeError,
    EscalationPolicy,
    PolicyFetchError,
    decode_page,
)
from pdpolicy.transport import DEFAULT_BASE_URL, HttpGetter, TransportError, paged_url

logger = logging.getLogger(__name__)

# API docs: https://developer.pagerduty.com/documentation/rest/escalation_policies/on_call
POLICIES_PATH = "/api/v1/escalation_policies/on_call"
PAGE_LIMIT = 100
DEFAULT_TTL = timedelta(hours=1)
DEFAULT_MAX_PAGES = 1000

Clock = Callable[[], datetime]


class PaginationError(PolicyFetchError):
    """Exception raised when the remote service never reports the last page."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PolicyCache:
    """Last successfully fetched policies and the time they were fetched.

    The cache is either empty or holds a complete result; it is only ever
    replaced as a whole.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock: Clock = _utcnow) -> None:
        self.ttl = ttl
        self.clock = clock
        self.lock = threading.Lock()
        self._policies: tuple[EscalationPolicy, ...] | None = None
        self._timestamp: datetime | None = None

    @property
    def policies(self) -> list[EscalationPolicy] | None:
        """A copy of the cached policies, or None before the first store."""
        if self._policies is None:
            return None
        return list(self._policies)

    @property
    def timestamp(self) -> datetime | None:
        return self._timestamp

    def is_populated(self) -> bool:
        return self._policies is not None

    def is_fresh(self) -> bool:
        """True if populated and the TTL has not elapsed since the last store."""
        if self._policies is None or self._timestamp is None:
            return False
        return self.clock() < self._timestamp + self.ttl

    def store(self, policies: list[EscalationPolicy]) -> None:
        self._policies = tuple(policies)
        self._timestamp = self.clock()

    def clear(self) -> None:
        self._policies = None
        self._timestamp = None


class PolicyFetcher:
    """Fetch every escalation policy of an account, served from a ``PolicyCache``.

    Args:
        getter: Transport performing authenticated GETs.
        cache: Cache to read from and store into. A fresh one-hour cache is
            created when omitted.
        base_url: Account base URL template, see ``paged_url``.
        max_pages: Upper bound on requests per fetch.
    """

    def __init__(
        self,
        getter: HttpGetter,
        cache: PolicyCache | None = None,
        base_url: str = DEFAULT_BASE_URL,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        self.getter = getter
        self.cache = cache if cache is not None else PolicyCache()
        self.base_url = base_url
        self.max_pages = max_pages

    def is_cached(self) -> bool:
        """Return True once any fetch has succeeded, regardless of staleness."""
        return self.cache.is_populated()

    def invalidate(self) -> None:
        """Drop cached policies so the next call goes to the network."""
        with self.cache.lock:
            self.cache.clear()

    def get_escalation_policies(self, token: str, domain: str) -> list[EscalationPolicy]:
        """Return all escalation policies for ``domain``.

        Cached policies are returned while younger than the cache TTL.
        Otherwise every page is fetched and merged, and the cache is replaced
        with the result.

        Args:
            token: API credential token.
            domain: The account subdomain.

        Returns:
            The ordered list of policies across all pages.

        Raises:
            TransportError: If a GET fails.
            DecodeError: If a page cannot be decoded.
            PaginationError: If more than ``max_pages`` pages would be needed.

            Each carries the policies accumulated so far in ``partial``; the
            cache is left untouched.
        """
        with self.cache.lock:
            if self.cache.is_fresh():
                logger.info("returning cached policies")
                return self.cache.policies  # type: ignore[return-value]

            policies = self._fetch_all(token, domain)
            self.cache.store(policies)
            return list(policies)

    def _fetch_all(self, token: str, domain: str) -> list[EscalationPolicy]:
        policies: list[EscalationPolicy] = []
        offset = 0

        for _ in range(self.max_pages):
            url = paged_url(POLICIES_PATH, domain, offset, PAGE_LIMIT, self.base_url)

            try:
                data = self.getter.get(url, token, "")
            except TransportError as e:
                logger.warning("GET %s failed: %s", url, e)
                e.partial = list(policies)
                raise
            logger.debug("Got %d bytes from URL %r", len(data), url)

            try:
                page = decode_page(data)
            except DecodeError as e:
                logger.warning("decoding %s failed: %s", url, e)
                e.partial = list(policies)
                raise

            policies.extend(page.escalation_policies)

            # Deliberately not the bare `offset < total` check: that never stops
            # on a final page whose echoed offset is still below total. Keyed on
            # the echoed offset, advanced by one page.
            if page.offset + (page.limit or PAGE_LIMIT) < page.total:
                offset += PAGE_LIMIT
            else:
                return policies

        raise PaginationError(
            f"Gave up after {self.max_pages} pages from {domain}", partial=policies
        )
