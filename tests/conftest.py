from typing import Dict, List, Optional, Tuple, Union

import pytest
import requests

from site_clipper.fetcher import Fetcher


class FakeResponse:
    def __init__(self, text: str = "", headers=None, status_code: int = 200, url: Optional[str] = None):
        self.text = text
        self.headers = headers or {"content-type": "text/html; charset=utf-8"}
        self.status_code = status_code
        # Set to a different address to simulate a redirect
        self.url = url


class FakeSession:
    """Serves canned pages; unknown URLs raise a connection error."""

    def __init__(self, pages: Dict[str, Union[str, FakeResponse]]):
        self.pages = pages
        self.requested: List[str] = []
        self.headers: Dict[str, str] = {}

    def get(self, url, timeout=None):
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            raise requests.ConnectionError(f"no route to {url}")
        if not isinstance(page, FakeResponse):
            page = FakeResponse(text=page)
        if page.url is None:
            page.url = url
        return page

    def close(self):
        pass


@pytest.fixture
def make_fetcher():
    """Build a Fetcher whose session serves the given pages."""
    def factory(pages: Dict[str, Union[str, FakeResponse]]) -> Tuple[Fetcher, FakeSession]:
        fetcher = Fetcher()
        session = FakeSession(pages)
        session.headers.update(fetcher.session.headers)
        fetcher.session = session
        return fetcher, session
    return factory


def link_page(*hrefs: str, title: Optional[str] = None) -> str:
    links = "\n".join(f'<a href="{href}">{href}</a>' for href in hrefs)
    head = f"<title>{title}</title>" if title else ""
    return f"<html><head>{head}</head><body>{links}</body></html>"


PARAGRAPH = (
    "This paragraph is long enough, with enough commas, to be scored as real content, "
    "by the readability heuristic, which prefers prose over navigation links and menus. "
)


def article_page(title: str, body: str = "", meta: str = "", nav: bool = True) -> str:
    paragraphs = "".join(f"<p>{PARAGRAPH * 3}</p>" for _ in range(4))
    menu = '<nav><a href="/">Home</a> <a href="/about">About</a></nav>' if nav else ""
    return f"""<html>
<head><title>{title}</title>{meta}</head>
<body>
  {menu}
  <article>
    <h1>{title}</h1>
    {body}
    {paragraphs}
  </article>
  <footer>Copyright</footer>
</body>
</html>"""
