"""
Content Scraper Service
Discovers article links on listing pages and extracts article bodies
"""

import logging
import re
from datetime import datetime
from typing import List, Optional, Union
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from .sources import ArticleDraft, SiteProfile, CAFEF_PROFILE
from ...exceptions import NetworkError

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
}

PUBLISHED_AT_PATTERN = re.compile(r'(\d{2})/(\d{2})/(\d{4})\s*-\s*(\d{2}):(\d{2})')

Markup = Union[str, bytes]


class ContentScraperService:
    """Service for finding and extracting articles from a single news site"""

    def __init__(
        self,
        profile: SiteProfile = CAFEF_PROFILE,
        timeout: float = 30.0,
        max_redirects: int = 5,
        session: Optional[requests.Session] = None,
    ):
        self.profile = profile
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(BROWSER_HEADERS)
        self.session.max_redirects = max_redirects

    def fork(self) -> "ContentScraperService":
        """Same site profile and limits over a new HTTP session"""
        return ContentScraperService(
            profile=self.profile,
            timeout=self.timeout,
            max_redirects=self.session.max_redirects,
        )

    def discover_links(self, source_url: str) -> List[str]:
        """
        Find article links on a listing page.

        Never raises: an unreachable source yields an empty list so the
        remaining sources can still be scanned.
        """
        try:
            html = self.fetch_listing(source_url)
        except NetworkError as e:
            logger.warning(f"Link discovery failed for {source_url}: {e}")
            return []
        return self.parse_links(html)

    def fetch_listing(self, source_url: str) -> bytes:
        return self._fetch(source_url)

    def parse_links(self, html: Markup) -> List[str]:
        soup = BeautifulSoup(html, 'html.parser')
        hrefs = [
            anchor.get('href')
            for anchor in soup.select(self.profile.listing_selector)
            if self._is_headline_anchor(anchor)
        ]
        links = self._filter_links(hrefs)
        logger.info(f"Found {len(links)} article links")
        return links

    def extract_links_from_html(self, html: Markup) -> List[str]:
        """Extract article links from a saved listing page without fetching anything"""
        soup = BeautifulSoup(html, 'html.parser')
        hrefs = [anchor.get('href') for anchor in soup.select(self.profile.offline_listing_selector)]
        return self._filter_links(hrefs)

    def extract_content(self, article_url: str) -> Optional[ArticleDraft]:
        """
        Fetch and parse one article page.

        Raises:
            NetworkError: the page could not be fetched

        Returns:
            ArticleDraft, or None when the page has no usable title or body
        """
        html = self._fetch(article_url)
        return self.parse_article(article_url, html)

    def parse_article(self, article_url: str, html: Markup) -> Optional[ArticleDraft]:
        soup = BeautifulSoup(html, 'html.parser')

        title = self._extract_title(soup)
        content = self._extract_body(soup)

        if not title or not content:
            logger.debug(f"No extractable content at {article_url} (title={bool(title)}, content={bool(content)})")
            return None

        date_text = ' '.join(el.get_text(' ', strip=True) for el in soup.select(self.profile.date_selector))

        return ArticleDraft(
            url=article_url,
            title=title,
            content=content,
            published_at=parse_published_at(date_text),
        )

    def _fetch(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"Failed to fetch {url}: {e}") from e
        return response.content

    def _is_headline_anchor(self, anchor) -> bool:
        if anchor.find_parent('h3') is not None:
            return True
        classes = anchor.get('class') or []
        return any(cls in classes for cls in self.profile.title_classes)

    def _filter_links(self, hrefs) -> List[str]:
        links = []
        seen = set()
        for href in hrefs:
            if not href:
                continue
            url = self._absolute_url(href.strip())
            if url in seen or not self.is_article_url(url):
                continue
            seen.add(url)
            links.append(url)
        return links

    def _absolute_url(self, href: str) -> str:
        if href.startswith('http'):
            return href
        return urljoin(self.profile.base_url + '/', href)

    def is_article_url(self, url: str) -> bool:
        if len(url) >= self.profile.max_url_length:
            return False

        parsed = urlparse(url)
        host = (parsed.hostname or '').lower()
        if host != self.profile.host and not host.endswith('.' + self.profile.host):
            return False

        path = parsed.path.lower()
        if self.profile.content_url_marker not in path:
            return False
        return not any(segment in host + path for segment in self.profile.excluded_segments)

    def _extract_title(self, soup: BeautifulSoup) -> str:
        for element in soup.select(self.profile.title_selector):
            title = element.get_text(' ', strip=True)
            if title:
                return title
        return ''

    def _extract_body(self, soup: BeautifulSoup) -> str:
        for selector in self.profile.content_selectors:
            text = ' '.join(
                el.get_text(' ', strip=True) for el in soup.select(selector)
            ).strip()
            if text:
                return text

        # Fallback: long paragraphs only, short ones are usually captions and widgets
        paragraphs = [p.get_text(' ', strip=True) for p in soup.find_all('p')]
        return '\n\n'.join(p for p in paragraphs if len(p) > self.profile.min_paragraph_length)


def parse_published_at(text: Optional[str]) -> Optional[datetime]:
    """Parse a 'DD/MM/YYYY - HH:MM' stamp; anything else gives None"""
    if not text:
        return None

    match = PUBLISHED_AT_PATTERN.search(text)
    if not match:
        return None

    day, month, year, hour, minute = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None
