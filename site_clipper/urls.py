"""URL canonicalization, link extraction and crawl filters."""

import fnmatch
import logging
from typing import Iterable, List, Optional
from urllib.parse import urldefrag, urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ('http', 'https')
GLOB_CHARS = '*?['


class InvalidUrlError(ValueError):
    """Raised when a string cannot be turned into a usable HTTP(S) URL."""


def normalize_url(url: str, base_url: Optional[str] = None) -> str:
    """Normalize URL to canonical form for deduplication.
    - Resolve against base_url when given
    - Lower-case scheme and host
    - Root path becomes '/'
    - A single trailing slash is dropped from non-root paths
    - Remove fragment (query is kept)
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrlError(f"Empty URL: {url!r}")

    try:
        absolute = urljoin(base_url, url.strip()) if base_url else url.strip()
        parsed = urlparse(absolute)
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise InvalidUrlError(f"Malformed URL {url!r}: {e}") from e

    scheme = parsed.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidUrlError(f"Unsupported scheme in {url!r}")
    if not parsed.hostname:
        raise InvalidUrlError(f"Missing host in {url!r}")

    netloc = parsed.netloc
    if '@' in netloc:
        userinfo, host = netloc.rsplit('@', 1)
        netloc = f"{userinfo}@{host.lower()}"
    else:
        netloc = netloc.lower()

    path = parsed.path or '/'
    if path != '/' and path.endswith('/'):
        path = path[:-1]

    return urlunparse((scheme, netloc, path, parsed.params, parsed.query, ''))


def request_url(url: str) -> str:
    """Address to fetch for a link: the link as written, minus its fragment.

    Unlike normalize_url this keeps a trailing slash, which changes how the
    page's own relative links resolve.
    """
    address = urldefrag(url.strip())[0]
    parsed = urlparse(address)
    if not parsed.path:
        address = urlunparse(parsed._replace(path='/'))
    return address


def extract_links(soup: BeautifulSoup, base_url: str) -> List[str]:
    """Return absolute HTTP(S) link targets in document order.

    base_url should be the address the page was served from. A <base href>
    in the document takes precedence over it.
    """
    base = soup.find('base', href=True)
    if base is not None and base['href'].strip():
        base_url = urljoin(base_url, base['href'].strip())
    links = []
    for tag in soup.find_all(['a', 'area'], href=True):
        href = tag['href'].strip()
        if not href or href.startswith('#'):
            continue
        try:
            absolute_url = urljoin(base_url, href)
        except ValueError:
            logger.debug(f"Dropping unparseable href {href!r} on {base_url}")
            continue
        if urlparse(absolute_url).scheme.lower() not in ALLOWED_SCHEMES:
            continue
        links.append(absolute_url)
    return links


def split_patterns(value: Optional[str]) -> List[str]:
    """Split a comma-separated pattern string, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(',') if part.strip()]


def matches_pattern(url: str, pattern: str) -> bool:
    """Glob match when the pattern has wildcards, substring match otherwise."""
    if any(char in pattern for char in GLOB_CHARS):
        return fnmatch.fnmatchcase(url, pattern)
    return pattern in url


def matches_any(url: str, patterns: Iterable[str]) -> bool:
    return any(matches_pattern(url, pattern) for pattern in patterns)


def is_sub_url(candidate: str, seed: str) -> bool:
    """True if candidate shares the seed's origin and sits under its path.

    Both arguments must already be normalized.
    """
    cand = urlparse(candidate)
    root = urlparse(seed)
    if (cand.scheme, cand.netloc) != (root.scheme, root.netloc):
        return False
    if root.path == '/' or cand.path == root.path:
        return True
    return cand.path.startswith(root.path.rstrip('/') + '/')
