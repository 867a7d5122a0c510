"""HTTP client helper for talking to the tracker API."""
from __future__ import annotations

import httpx


def create_client(
    base_url: str, *, timeout: float = 10.0, transport: httpx.BaseTransport | None = None
) -> httpx.Client:
    """Return an HTTPX client bound to the API base URL, expecting JSON responses."""

    return httpx.Client(
        base_url=base_url,
        timeout=timeout,
        transport=transport,
        headers={"Accept": "application/json"},
    )
