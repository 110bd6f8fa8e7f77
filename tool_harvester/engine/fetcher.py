"""HTTP fetching with retry, backoff and rate-limit awareness."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict

import httpx
import structlog

from ..config import FetchSettings
from ..infra import UserAgentPool

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class FetchError(RuntimeError):
    """Raised once every attempt for a single URL has failed."""

    def __init__(self, url: str, attempts: int, status_code: int | None = None) -> None:
        detail = f"HTTP {status_code}" if status_code is not None else "network error"
        super().__init__(f"Fetch failed after {attempts} attempts ({detail}): {url}")
        self.url = url
        self.attempts = attempts
        self.status_code = status_code


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)


class Fetcher:
    """Issue GET requests with a browser-like identity and bounded retries.

    ``httpx.Client`` is safe to share across threads, so one fetcher serves every
    pool worker of a run.
    """

    def __init__(
        self,
        settings: FetchSettings | None = None,
        ua_pool: UserAgentPool | None = None,
        *,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.settings = settings or FetchSettings()
        self.ua_pool = ua_pool or UserAgentPool(self.settings.user_agents)
        self.logger = logger or structlog.get_logger("tool_harvester.fetcher")
        self._sleep = sleep
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=self.settings.timeout,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()

    def fetch(self, url: str, *, timeout: float | None = None) -> FetchResponse:
        retries = self.settings.retries
        delay = self.settings.backoff_delay
        last_error: Exception | None = None
        last_status: int | None = None

        for attempt in range(1, retries + 1):
            headers = {"User-Agent": self.ua_pool.get(), **DEFAULT_HEADERS}
            try:
                response = self._client.get(
                    url,
                    headers=headers,
                    timeout=timeout or self.settings.timeout,
                )
            except httpx.HTTPError as exc:
                self.logger.warning("fetch_error", url=url, attempt=attempt, error=str(exc))
                last_error = exc
                last_status = None
            else:
                if response.is_success:
                    return FetchResponse(
                        url=str(response.url),
                        status_code=response.status_code,
                        text=response.text,
                        headers=dict(response.headers),
                        raw=response,
                    )
                last_status = response.status_code
                last_error = None
                if response.status_code == 429:
                    wait = delay * (attempt + 1)
                    self.logger.warning(
                        "fetch_rate_limited", url=url, attempt=attempt, wait=wait
                    )
                    if attempt < retries:
                        self._sleep(wait)
                    continue
                self.logger.warning(
                    "fetch_error",
                    url=url,
                    attempt=attempt,
                    status=response.status_code,
                )

            if attempt < retries:
                self._sleep(delay * attempt)

        raise FetchError(url, retries, last_status) from last_error


__all__ = ["FetchError", "FetchResponse", "Fetcher"]
