"""HTTP retrieval of pages with a browser-like header set."""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

# Many sites reject default or bot-identifying clients
DEFAULT_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/111.0.0.0 Safari/537.36'
    ),
    'Accept': (
        'text/html,application/xhtml+xml,application/xml;q=0.9,'
        'image/avif,image/webp,*/*;q=0.8'
    ),
}


class FetchError(Exception):
    """A page could not be retrieved."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


@dataclass
class PageContent:
    """Raw response for one URL."""

    source_url: str
    html: str
    status: int
    content_type: str = ''
    # Where the response was served from, after redirects
    final_url: str = ''

    @property
    def is_html(self) -> bool:
        return not self.content_type or 'html' in self.content_type.lower()

    @property
    def ok(self) -> bool:
        return self.status < 400

    @property
    def base_url(self) -> str:
        """URL that relative links on this page resolve against."""
        return self.final_url or self.source_url


class Fetcher:
    """Perform single GET requests. No retries."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

    def fetch(self, url: str) -> PageContent:
        """Fetch url, raising FetchError only when no response arrives.

        HTTP error statuses are returned as they are; callers check `ok`.
        """
        logger.debug(f"Fetching: {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            html = response.text
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

        return PageContent(
            source_url=url,
            html=html,
            status=response.status_code,
            content_type=response.headers.get('content-type', ''),
            final_url=response.url or url,
        )

    def close(self):
        self.session.close()
