from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from .errors import FetchFailedError, InvalidURLError, NetworkTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_TEXT_LIMIT = 10_000
USER_AGENT = "Mozilla/5.0 (compatible; CookbookImporter/1.0)"

NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]


def validate_url(url: str) -> str:
    cleaned = (url or "").strip()
    parsed = urlparse(cleaned)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError(f"Not an http(s) URL: {url}")
    return cleaned


def _visible_text(soup: BeautifulSoup) -> str:
    for element in soup(NON_CONTENT_TAGS):
        element.decompose()

    text = soup.get_text(separator="\n", strip=True)
    lines = (" ".join(line.split()) for line in text.splitlines())
    return "\n".join(line for line in lines if line)


def _og_image(soup: BeautifulSoup) -> str | None:
    meta = soup.find("meta", property="og:image")
    content = meta.get("content") if meta else None
    if not isinstance(content, str) or not content.strip():
        return None
    return content.strip()


def html_to_text(markup: str) -> str:
    """Visible text of an HTML document, one block per line."""
    return _visible_text(BeautifulSoup(markup, "html.parser"))


def find_og_image(markup: str) -> str | None:
    return _og_image(BeautifulSoup(markup, "html.parser"))


def fetch_page(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> str:
    """Download a page and return its raw markup."""
    target = validate_url(url)
    try:
        with httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            response = client.get(target)
            response.raise_for_status()
            return response.text
    except httpx.TimeoutException as error:
        raise NetworkTimeoutError(target, timeout) from error
    except httpx.HTTPStatusError as error:
        raise FetchFailedError(f"HTTP {error.response.status_code} fetching {target}") from error
    except httpx.HTTPError as error:
        logger.warning("Network error fetching page: url=%s, error=%s", target, error)
        raise FetchFailedError(f"Could not fetch {target}: {error}") from error


def fetch_page_text(
    url: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    limit: int = DEFAULT_TEXT_LIMIT,
) -> tuple[str, str | None]:
    """
    Visible text of a page, truncated to limit characters, and its
    og:image URL when the page declares one.
    """
    soup = BeautifulSoup(fetch_page(url, timeout=timeout), "html.parser")
    image = _og_image(soup)
    text = _visible_text(soup)
    if not text:
        raise FetchFailedError(f"No text content at {url}")
    return text[:limit], image
