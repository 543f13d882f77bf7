"""Article isolation, markdown conversion and metadata resolution."""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

import html2text
from bs4 import BeautifulSoup
from dateutil import parser as date_parser
from readability import Document
from readability.readability import Unparseable

from .fetcher import PageContent

logger = logging.getLogger(__name__)

UNTITLED = 'Untitled Page'
NO_TITLE_MARKER = '[no-title]'
BYLINE_HINT = re.compile(r'byline|author|dateline|writtenby', re.IGNORECASE)
MAX_BYLINE_LENGTH = 100
PAGE_CHROME = ('nav', 'header', 'footer', 'aside')
LIST_ITEM = re.compile(r'^( *)(?:[-*+]|\d+\.) ')

AUTHOR_META = ('author', 'article:author')
DATE_META = ('date', 'article:published_time', 'og:published_time')
DESCRIPTION_META = ('description', 'og:description')


@dataclass
class ExtractedArticle:
    """Main readable content isolated from a page."""

    title: Optional[str]
    html_content: str
    byline: Optional[str] = None


@dataclass
class Metadata:
    url: str
    title: str
    author: str = ''
    date: str = ''
    description: str = ''


class ArticleExtractor:
    """Isolate the primary readable region of a page using readability."""

    def extract(self, page: PageContent) -> Optional[ExtractedArticle]:
        """Return the article, or None when no main content region is found."""
        try:
            document = Document(page.html, url=page.base_url)
            content = document.summary(html_partial=True)
        except Unparseable as e:
            logger.debug(f"Readability could not parse {page.source_url}: {e}")
            return None

        if not content or not BeautifulSoup(content, 'html.parser').get_text(strip=True):
            return None

        title = document.title()
        if not title or title == NO_TITLE_MARKER:
            title = None

        return ExtractedArticle(
            title=title,
            html_content=content,
            byline=self._find_byline(content, page.html),
        )

    def _find_byline(self, content: str, page_html: str) -> Optional[str]:
        """Find an author credit, preferring the article region.

        Outside the article, site navigation is ignored so that menu entries
        such as an "Authors" link are not taken for a credit.
        """
        byline = self._byline_in(BeautifulSoup(content, 'html.parser'))
        if byline:
            return byline
        page = BeautifulSoup(page_html, 'html.parser')
        for chrome in page.find_all(PAGE_CHROME):
            chrome.decompose()
        return self._byline_in(page)

    def _byline_in(self, soup: BeautifulSoup) -> Optional[str]:
        for tag in soup.find_all(True):
            if tag.name in ('meta', 'link', 'html', 'body'):
                continue
            hints = [tag.get('rel'), tag.get('itemprop'), tag.get('class'), tag.get('id')]
            marker = ' '.join(
                ' '.join(hint) if isinstance(hint, list) else hint
                for hint in hints if hint
            )
            if not marker or not BYLINE_HINT.search(marker):
                continue
            text = tag.get_text(' ', strip=True)
            if text and len(text) < MAX_BYLINE_LENGTH:
                return text
        return None


class MarkdownConverter:
    """Convert article HTML to markdown with html2text."""

    def __init__(self):
        self.h2t = html2text.HTML2Text()
        self.h2t.ignore_links = False
        self.h2t.ignore_images = False
        self.h2t.ignore_emphasis = False
        self.h2t.body_width = 0  # Don't wrap lines
        self.h2t.ul_item_mark = '-'
        self.h2t.backquote_code_style = True

    def convert(self, html_content: str) -> str:
        soup = BeautifulSoup(html_content, 'html.parser')
        self._flatten_tables(soup)
        markdown = self.h2t.handle(str(soup))
        return self._tidy(markdown)

    def _flatten_tables(self, soup: BeautifulSoup):
        """Pass tables through as their cell content, one paragraph per cell.

        No markdown table syntax is produced.
        """
        for table in soup.find_all('table'):
            for cell in table.find_all(['td', 'th']):
                cell.name = 'p'
                cell.attrs = {}
            for row_tag in table.find_all(['tr', 'thead', 'tbody', 'tfoot', 'caption', 'colgroup', 'col']):
                row_tag.unwrap()
            table.name = 'div'
            table.attrs = {}

    def _tidy(self, markdown: str) -> str:
        """Regroup html2text output into blocks separated by one blank line.

        HTML comments are dropped and trailing whitespace is trimmed. Blank
        lines inside fenced code are kept.
        """
        markdown = re.sub(r'<!--.*?-->', '', markdown, flags=re.DOTALL)

        blocks: List[List[str]] = []
        current: List[str] = []
        in_fence = False
        for line in markdown.split('\n'):
            line = line.rstrip()
            if line.lstrip().startswith('```'):
                in_fence = not in_fence
            if not line and not in_fence:
                if current:
                    blocks.append(current)
                    current = []
                continue
            current.append(line)
        if current:
            blocks.append(current)

        return '\n\n'.join('\n'.join(self._outdent_list(block)) for block in blocks)

    def _outdent_list(self, block: List[str]) -> List[str]:
        """Shift a list block left so its outermost items start the line.

        html2text indents top-level items by two spaces.
        """
        if not LIST_ITEM.match(block[0]):
            return block
        indent = min(len(m.group(1)) for m in map(LIST_ITEM.match, block) if m)
        if not indent:
            return block
        return [line[min(indent, len(line) - len(line.lstrip(' '))):] for line in block]


def _meta_content(soup: BeautifulSoup, keys: Iterable[str]) -> Optional[str]:
    """Content of the first <meta> whose name or property is one of keys."""
    keys = set(keys)
    tag = soup.find(
        lambda t: t.name == 'meta' and (t.get('name') in keys or t.get('property') in keys)
    )
    if tag is None:
        return None
    return (tag.get('content') or '').strip()


class MetadataResolver:
    """Derive title, author, date and description for a page."""

    def resolve(self, soup: BeautifulSoup, url: str,
                article: Optional[ExtractedArticle] = None,
                today: Optional[date] = None) -> Metadata:
        today = today or date.today()

        title = soup.title.get_text(strip=True) if soup.title else ''
        if not title and article and article.title:
            title = article.title.strip()

        author = _meta_content(soup, AUTHOR_META) or ''
        if not author and article and article.byline:
            author = article.byline

        return Metadata(
            url=url,
            title=title or UNTITLED,
            author=author,
            date=self._parse_date(_meta_content(soup, DATE_META), today),
            description=_meta_content(soup, DESCRIPTION_META) or '',
        )

    def _parse_date(self, value: Optional[str], today: date) -> str:
        if value:
            try:
                return date_parser.parse(value).date().isoformat()
            except (ValueError, OverflowError):
                logger.debug(f"Unparseable date {value!r}, using {today}")
        return today.isoformat()
