"""Crawl a site and save its pages as templated markdown clippings."""

from .crawler import CrawlConfig, SeedRequest, WebCrawler, crawl_urls
from .extraction import ArticleExtractor, ExtractedArticle, MarkdownConverter, Metadata, MetadataResolver
from .fetcher import FetchError, Fetcher, PageContent
from .files import persist, sanitize_filename
from .pipeline import (
    ClippingPipeline,
    RunReport,
    ScrapeOutcome,
    SiteScrapeOptions,
    process_urls,
    scrape_site,
)
from .templates import get_default_template, load_template, render_template
from .urls import InvalidUrlError, extract_links, normalize_url

__version__ = '1.0.0'
