"""HTTP helper shared by every provider adapter.

Each adapter owns an injected ``httpx.AsyncClient``; this module turns the
raw response into either parsed JSON, ``None`` for "nothing there", or one
of the typed errors from :mod:`crossfade.utils.errors`:

    transport error / timeout   -> ProviderUnavailableError
    401, 403, 5xx               -> ProviderUnavailableError
    429                         -> RateLimitError
    204, 404                    -> None (absence of data is not a failure)
    other 4xx                   -> CatalogRequestError
"""

from __future__ import annotations

from typing import Any

import httpx

from crossfade.utils.errors import (
    CatalogRequestError,
    ProviderUnavailableError,
    RateLimitError,
)


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    provider_name: str,
    params: dict[str, Any] | None = None,
    json: Any = None,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
) -> Any:
    """Send one request and return its decoded JSON body.

    Returns ``None`` for 204/404 and ``{}`` for an empty 2xx body.
    """
    kwargs: dict[str, Any] = {"params": params, "headers": headers}
    if json is not None:
        kwargs["json"] = json
    if timeout is not None:
        kwargs["timeout"] = timeout

    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        raise ProviderUnavailableError(
            message=f"{method} {url} timed out",
            provider_name=provider_name,
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderUnavailableError(
            message=f"{method} {url} failed: {exc}",
            provider_name=provider_name,
        ) from exc

    status = response.status_code
    if status in (204, 404):
        return None
    if status == 429:
        raise RateLimitError(
            message=f"Rate limited on {method} {url}",
            provider_name=provider_name,
            retry_after=_retry_after(response),
        )
    if status in (401, 403):
        raise ProviderUnavailableError(
            message=f"Not authorized for {method} {url} (HTTP {status})",
            provider_name=provider_name,
        )
    if status >= 500:
        raise ProviderUnavailableError(
            message=f"Server error on {method} {url} (HTTP {status})",
            provider_name=provider_name,
        )
    if status >= 400:
        raise CatalogRequestError(
            message=f"{method} {url} rejected (HTTP {status})",
            provider_name=provider_name,
            status_code=status,
        )

    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderUnavailableError(
            message=f"{method} {url} returned invalid JSON",
            provider_name=provider_name,
        ) from exc
