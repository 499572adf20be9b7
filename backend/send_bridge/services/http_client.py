"""
Outbound HTTP client factory.

Every /send request gets its own httpx.AsyncClient. The client's cookie jar
refuses all cookies: the only cookies ever sent to Drive are the ones
DriveFetcher passes explicitly into the confirm retry.
"""

from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Optional

import httpx

from send_bridge.config import Settings


def cookie_free_jar() -> CookieJar:
    """A cookie jar that never stores anything (no domain is allowed)."""
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


def new_http_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Build an AsyncClient for one request pipeline.

    Args:
        settings:  Process settings (redirect cap).
        transport: Override the transport, e.g. httpx.MockTransport in tests.
    """
    return httpx.AsyncClient(
        cookies=cookie_free_jar(),
        max_redirects=settings.max_redirects,
        transport=transport,
    )
