#!/usr/bin/env python3
"""
Listing page harvester

Walks the paginated listing source and yields candidate release labels.
Fails soft: any stop condition ends the walk and keeps what was collected.

Stop conditions:
- max_items labels collected, or max_pages pages fetched
- a page after the first yields no new labels (end of listing)
- HTTP 404 (past the last page)
- transport failure, unparseable page, or anti-bot block page
"""

import logging
import time
from typing import Iterator, List, Optional, Set
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from releasefeed.constants import (
    DEFAULT_BASE_URL, DEFAULT_PAGE_URL_TEMPLATE, USER_AGENT,
    YEAR_WORD, BLOCK_PAGE_MARKERS,
    CONTAINER_SELECTOR, HEADING_SELECTOR, LINK_SELECTOR,
    CONTAINER_LABEL_MAX, LINK_LABEL_MIN, LINK_LABEL_MAX,
)
from releasefeed.errors import (
    ServiceError, NotFoundError, ParseError, SourceBlockedError,
)
from releasefeed.http import get_html, DEFAULT_TIMEOUT
from releasefeed.models import RawListing

logger = logging.getLogger(__name__)


def looks_like_release(text: str, min_length: int = 0, max_length: int = CONTAINER_LABEL_MAX) -> bool:
    """A release label carries a year token and is title-sized, not a paragraph"""
    if not YEAR_WORD.search(text):
        return False
    return min_length < len(text) <= max_length


def _collapse(text: str) -> str:
    return ' '.join(text.split())


class PageHarvester:
    """Fetch listing pages and extract release labels"""

    def __init__(self, base_url: str = DEFAULT_BASE_URL,
                 page_url_template: str = DEFAULT_PAGE_URL_TEMPLATE,
                 page_delay: float = 1.5,
                 timeout: float = DEFAULT_TIMEOUT,
                 user_agent: str = USER_AGENT):
        self.base_url = base_url
        self.page_url_template = page_url_template
        self.page_delay = page_delay
        self.timeout = timeout
        self.user_agent = user_agent
        self.pages_fetched = 0
        self.stop_reason: Optional[str] = None

    def page_url(self, page: int) -> str:
        if page == 1:
            return self.base_url
        return self.page_url_template.format(base_url=self.base_url, page=page)

    def _parse_page(self, html: str) -> BeautifulSoup:
        try:
            soup = BeautifulSoup(html, 'html.parser')
        except Exception as e:
            raise ParseError(f"Could not parse listing page: {e}") from e

        title = soup.title.get_text(strip=True).lower() if soup.title else ''
        for marker in BLOCK_PAGE_MARKERS:
            if marker in title:
                raise SourceBlockedError(f"Block page detected (title: {title!r})")
        return soup

    def _container_label(self, container: Tag) -> Optional[str]:
        """Pick the label for one listing card: heading first, card text second"""
        full_text = _collapse(container.get_text(' '))
        heading = container.select_one(HEADING_SELECTOR)
        heading_text = _collapse(heading.get_text(' ')) if heading else ''

        if not heading_text:
            heading_text = full_text[:CONTAINER_LABEL_MAX]

        if YEAR_WORD.search(heading_text):
            return heading_text
        if YEAR_WORD.search(full_text):
            # Year lives in a sibling element (date line, meta row)
            return full_text[:CONTAINER_LABEL_MAX].strip()
        return None

    def _container_url(self, container: Tag, page_url: str) -> Optional[str]:
        link = container.select_one('a[href]')
        if link is None:
            return None
        return urljoin(page_url, link['href'])

    def extract_listings(self, soup: BeautifulSoup, page_url: str) -> List[RawListing]:
        """
        Apply the structural queries to one page, in priority order

        Cards are tried first; bare links are only scanned when no card
        produced a label.
        """
        listings: List[RawListing] = []
        seen: Set[str] = set()

        for container in soup.select(CONTAINER_SELECTOR):
            label = self._container_label(container)
            if not label or label in seen:
                continue
            if not looks_like_release(label, max_length=CONTAINER_LABEL_MAX):
                continue
            seen.add(label)
            listings.append(RawListing(raw_label=label,
                                       source_url=self._container_url(container, page_url)))

        if listings:
            return listings

        for link in soup.select(LINK_SELECTOR):
            text = link.get_text(strip=True)
            if text in seen:
                continue
            if not looks_like_release(text, min_length=LINK_LABEL_MIN, max_length=LINK_LABEL_MAX - 1):
                continue
            seen.add(text)
            href = link.get('href')
            listings.append(RawListing(raw_label=text,
                                       source_url=urljoin(page_url, href) if href else None))

        return listings

    def harvest(self, max_items: int, max_pages: int) -> Iterator[RawListing]:
        """
        Yield new RawListing records page by page

        Each call starts over at page 1 with fresh network activity.
        """
        self.pages_fetched = 0
        self.stop_reason = None
        seen_labels: Set[str] = set()
        total = 0
        page = 1

        logger.info('--- Starting listing harvest ---')

        while True:
            if page > max_pages:
                self.stop_reason = 'max_pages'
                break
            if total >= max_items:
                self.stop_reason = 'max_items'
                break

            if page > 1:
                time.sleep(self.page_delay)

            url = self.page_url(page)
            logger.info(f"> Fetching page {page}... (current total: {total})")

            try:
                html = get_html(url, timeout=self.timeout, user_agent=self.user_agent)
                self.pages_fetched += 1
                soup = self._parse_page(html)
                listings = self.extract_listings(soup, url)
            except NotFoundError:
                logger.info(f"> Reached end of listing (404 on page {page}). Stopping.")
                self.stop_reason = 'not_found'
                break
            except SourceBlockedError as e:
                logger.error(f"Listing source blocked the harvester: {e}")
                self.stop_reason = 'blocked'
                break
            except ParseError as e:
                logger.warning(f"Could not parse page {page}: {e}. Stopping.")
                self.stop_reason = 'parse_error'
                break
            except ServiceError as e:
                logger.warning(f"Error fetching page {page}: {e}. Stopping.")
                self.stop_reason = 'transport_error'
                break

            new_on_page = 0
            for listing in listings:
                if total >= max_items:
                    break
                if listing.raw_label in seen_labels:
                    continue
                seen_labels.add(listing.raw_label)
                new_on_page += 1
                total += 1
                yield listing

            logger.info(f"> Page {page}: found {new_on_page} new items.")

            if new_on_page == 0 and page > 1:
                logger.info('> No new items, treating as end of listing.')
                self.stop_reason = 'exhausted'
                break

            page += 1

        logger.info(f"> Harvest finished after {self.pages_fetched} page(s): "
                    f"{total} items ({self.stop_reason})")
