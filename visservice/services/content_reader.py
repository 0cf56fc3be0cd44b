from __future__ import annotations

import httpx

from visservice.config import get_settings


class ContentReadError(Exception):
    pass


def read_content_from_url(url: str | None) -> str:
    """Fetch the text body at `url`, following redirects."""
    if not url:
        raise ContentReadError("No URL given")

    settings = get_settings()
    try:
        response = httpx.get(url, timeout=settings.url_read_timeout_seconds, follow_redirects=True)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise ContentReadError(f"Could not read {url}: {exc}") from exc
    return response.text
