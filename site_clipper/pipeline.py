"""Fetch, extract, convert, render and save clippings for a list of URLs."""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple, Union

from bs4 import BeautifulSoup
from tqdm import tqdm

from .crawler import DEFAULT_MAX_URLS, CrawlConfig, crawl_urls
from .extraction import ArticleExtractor, MarkdownConverter, MetadataResolver
from .fetcher import FetchError, Fetcher
from .files import persist, sanitize_filename
from .templates import get_default_template, load_template, render_template
from .urls import split_patterns

logger = logging.getLogger(__name__)

SAVED = 'saved'
SKIPPED = 'skipped'
FAILED = 'failed'


@dataclass
class ScrapeOutcome:
    """Result of processing a single URL."""

    url: str
    status: str
    path: Optional[Path] = None
    title: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class RunReport:
    """Per-URL outcomes of one pipeline run, in processing order."""

    outcomes: List[ScrapeOutcome] = field(default_factory=list)

    def _with_status(self, status: str) -> List[ScrapeOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def saved(self) -> List[ScrapeOutcome]:
        return self._with_status(SAVED)

    @property
    def skipped(self) -> List[ScrapeOutcome]:
        return self._with_status(SKIPPED)

    @property
    def failed(self) -> List[ScrapeOutcome]:
        return self._with_status(FAILED)

    @property
    def errors(self) -> List[Tuple[str, str]]:
        """(url, reason) for every URL that was not saved."""
        return [(o.url, o.reason) for o in self.outcomes if o.status != SAVED]


class ClippingPipeline:
    """Turn web pages into templated markdown files, one URL at a time."""

    def __init__(self, fetcher: Optional[Fetcher] = None, timeout: Optional[float] = None):
        self.fetcher = fetcher or Fetcher(timeout=timeout)
        self.extractor = ArticleExtractor()
        self.converter = MarkdownConverter()
        self.resolver = MetadataResolver()

    def scrape_url(self, url: str, template: str, destination: Path,
                   today: Optional[date] = None) -> ScrapeOutcome:
        """Process one URL. Expected failures become skipped outcomes."""
        try:
            page = self.fetcher.fetch(url)
        except FetchError as e:
            logger.warning(f"Error fetching {url}: {e.reason}")
            return ScrapeOutcome(url=url, status=SKIPPED, reason=f"fetch failed: {e.reason}")
        if not page.ok:
            logger.warning(f"Error fetching {url}: HTTP {page.status}")
            return ScrapeOutcome(url=url, status=SKIPPED, reason=f"HTTP {page.status}")

        article = self.extractor.extract(page)
        if article is None:
            logger.warning(f"Failed to extract content from {url}")
            return ScrapeOutcome(url=url, status=SKIPPED, reason="no article content found")

        markdown = self.converter.convert(article.html_content)
        soup = BeautifulSoup(page.html, 'html.parser')
        metadata = self.resolver.resolve(soup, url, article, today=today)
        text = render_template(template, metadata, markdown)

        path = persist(destination / sanitize_filename(metadata.title), text)
        return ScrapeOutcome(url=url, status=SAVED, path=path, title=metadata.title)

    def run(self, urls: List[str], template: Optional[str],
            destination: Union[str, Path]) -> RunReport:
        """Process every URL in order, continuing past per-URL failures."""
        template = template if template is not None else get_default_template()
        destination = Path(destination)
        today = date.today()
        report = RunReport()

        logger.info(f"Processing {len(urls)} URLs...")
        for url in tqdm(urls, desc="Extracting content"):
            try:
                outcome = self.scrape_url(url, template, destination, today=today)
            except Exception as e:
                logger.error(f"Error scraping {url}: {e}")
                outcome = ScrapeOutcome(url=url, status=FAILED, reason=str(e))
            report.outcomes.append(outcome)

        logger.info(f"Done: {len(report.saved)} saved, {len(report.skipped)} skipped, "
                    f"{len(report.failed)} failed")
        return report


def process_urls(urls: List[str], destination: Union[str, Path],
                 template_path: Optional[Union[str, Path]] = None,
                 fetcher: Optional[Fetcher] = None) -> RunReport:
    """Scrape urls into destination using the template at template_path."""
    template = load_template(template_path)
    return ClippingPipeline(fetcher=fetcher).run(urls, template, destination)


@dataclass
class SiteScrapeOptions:
    """Options for crawling a site and scraping every page found."""

    url: str
    output: Union[str, Path]
    depth: int = 2
    max_urls: int = DEFAULT_MAX_URLS
    template: Optional[Union[str, Path]] = None
    exclude: Optional[str] = None
    include: Optional[str] = None
    timeout: Optional[float] = None


def scrape_site(options: SiteScrapeOptions, fetcher: Optional[Fetcher] = None) -> RunReport:
    """Find sub-URLs of options.url, then scrape each into options.output."""
    fetcher = fetcher or Fetcher(timeout=options.timeout)
    config = CrawlConfig(
        max_urls=options.max_urls,
        include_patterns=split_patterns(options.include),
        exclude_patterns=split_patterns(options.exclude),
        sub_urls_only=True,
        timeout=options.timeout,
    )

    logger.info("Step 1: Finding sub-URLs...")
    found_urls = crawl_urls(options.url, options.depth, config, fetcher=fetcher)
    if not found_urls:
        logger.error("No URLs found to scrape.")
        return RunReport()

    logger.info(f"Step 2: Scraping {len(found_urls)} URLs...")
    output = Path(options.output)
    output.mkdir(parents=True, exist_ok=True)
    report = process_urls(found_urls, output, options.template, fetcher=fetcher)
    logger.info(f"Scraped content saved to: {output}")
    return report
