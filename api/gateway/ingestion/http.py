from __future__ import annotations

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from gateway.core.config import settings
from gateway.utils.redaction import redact_secrets


class ExternalAPIError(Exception):
    pass


class UpstreamUnavailable(ExternalAPIError):
    """The upstream call errored or answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFound(ExternalAPIError):
    """The upstream rejected the native identifier."""


class AuthenticationFailed(ExternalAPIError):
    """No usable credential could be obtained for the upstream."""


async def fetch_json(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict | None = None,
    method: str = "GET",
    data: dict | None = None,
) -> dict:
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(settings.upstream_max_attempts),
        wait=wait_exponential_jitter(initial=1, max=8),
        retry=retry_if_exception_type(UpstreamUnavailable),
        reraise=True,
    ):
        with attempt:
            try:
                async with httpx.AsyncClient(timeout=settings.upstream_timeout_seconds) as client:
                    response = await client.request(
                        method, url, headers=headers, params=params, data=data
                    )
            except httpx.HTTPError as exc:
                raise UpstreamUnavailable(redact_secrets(f"{url}: {exc}")) from exc
            if response.status_code == 404:
                raise NotFound(f"{url} returned 404")
            if response.status_code >= 400:
                raise UpstreamUnavailable(f"{url} returned {response.status_code}", status_code=response.status_code)
            try:
                payload = response.json()
            except ValueError as exc:
                raise UpstreamUnavailable(f"{url} returned malformed JSON") from exc
            if not isinstance(payload, dict):
                raise UpstreamUnavailable(f"{url} returned an unexpected payload")
            return payload
    raise UpstreamUnavailable("Unreachable")
