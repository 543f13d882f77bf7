"""Breadth-first URL discovery from a seed page."""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Sequence, Set, Tuple

from bs4 import BeautifulSoup
from tqdm import tqdm

from .fetcher import FetchError, Fetcher
from .urls import (
    InvalidUrlError, extract_links, is_sub_url, matches_any, normalize_url, request_url,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_URLS = 10000


@dataclass
class CrawlConfig:
    """Limits and filters applied while discovering URLs."""

    max_urls: int = DEFAULT_MAX_URLS
    include_patterns: Sequence[str] = ()
    exclude_patterns: Sequence[str] = ()
    sub_urls_only: bool = False
    timeout: Optional[float] = None


@dataclass(frozen=True)
class SeedRequest:
    """One crawl run: where to start, how deep to go and what to keep."""

    url: str
    depth: int
    config: CrawlConfig = field(default_factory=CrawlConfig)

    def __post_init__(self):
        if self.depth < 0:
            raise ValueError(f"depth must be non-negative, got {self.depth}")
        if self.config.max_urls < 1:
            raise ValueError(f"max_urls must be positive, got {self.config.max_urls}")


class WebCrawler:
    """Crawl a website to discover pages reachable from a seed URL."""

    def __init__(self, request: SeedRequest, fetcher: Optional[Fetcher] = None):
        self.request = request
        self.config = request.config
        self.fetcher = fetcher or Fetcher(timeout=self.config.timeout)
        self.seed_url = normalize_url(request.url)
        # (normalized url, depth, address to fetch)
        self.frontier: Deque[Tuple[str, int, str]] = deque()
        self.visited_urls: Set[str] = set()
        self.discovered_urls: List[str] = []

    def _is_wanted(self, url: str) -> bool:
        """Apply exclude, include and scope filters to a normalized URL."""
        if matches_any(url, self.config.exclude_patterns):
            logger.debug(f"Excluded: {url}")
            return False
        if self.config.include_patterns and not matches_any(url, self.config.include_patterns):
            logger.debug(f"Not included: {url}")
            return False
        if self.config.sub_urls_only and not is_sub_url(url, self.seed_url):
            logger.debug(f"Outside seed scope: {url}")
            return False
        return True

    def _budget_left(self) -> bool:
        return len(self.discovered_urls) < self.config.max_urls

    def _enqueue(self, url: str, depth: int, location: str):
        self.visited_urls.add(url)
        self.frontier.append((url, depth, location))

    def _links_on(self, location: str) -> List[str]:
        """Fetch location and return its outbound links; empty on any failure."""
        try:
            page = self.fetcher.fetch(location)
        except FetchError as e:
            logger.warning(f"Error crawling {location}: {e.reason}")
            return []
        if not page.ok:
            logger.warning(f"Error crawling {location}: HTTP {page.status}")
            return []
        if not page.is_html:
            logger.debug(f"Skipping links of non-HTML page {location} ({page.content_type})")
            return []
        soup = BeautifulSoup(page.html, 'html.parser')
        return extract_links(soup, page.base_url)

    def crawl(self) -> List[str]:
        """Crawl the website and return discovered URLs in BFS order."""
        max_depth = self.request.depth
        logger.info(f"Starting web crawl of {self.seed_url}")
        logger.info(f"Max depth: {max_depth}, Max URLs: {self.config.max_urls}")

        # A filtered-out seed is still explored, it is just not reported
        self._enqueue(self.seed_url, 0, request_url(self.request.url))
        if self._is_wanted(self.seed_url):
            self.discovered_urls.append(self.seed_url)

        with tqdm(total=self.config.max_urls, desc="Crawling pages",
                  initial=len(self.discovered_urls)) as pbar:
            while self.frontier and self._budget_left():
                current_url, depth, location = self.frontier.popleft()

                # Children would exceed the depth limit
                if depth >= max_depth:
                    continue

                for link in self._links_on(location):
                    if not self._budget_left():
                        break
                    try:
                        normalized = normalize_url(link)
                    except InvalidUrlError as e:
                        logger.debug(f"Dropping link: {e}")
                        continue
                    if normalized in self.visited_urls:
                        continue
                    if not self._is_wanted(normalized):
                        continue
                    self._enqueue(normalized, depth + 1, request_url(link))
                    self.discovered_urls.append(normalized)
                    pbar.update(1)

        logger.info(f"Crawl complete. Discovered {len(self.discovered_urls)} URLs")
        return list(self.discovered_urls)


def crawl_urls(seed_url: str, depth: int, config: Optional[CrawlConfig] = None,
               fetcher: Optional[Fetcher] = None) -> List[str]:
    """Discover URLs reachable from seed_url within depth hops."""
    request = SeedRequest(url=seed_url, depth=depth, config=config or CrawlConfig())
    return WebCrawler(request, fetcher=fetcher).crawl()
