#!/usr/bin/env python3
"""
Test suite for releasefeed/harvester.py — extraction and stopping rules
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import patch, MagicMock

sys.path.insert(0, str(Path(__file__).parent.parent))

from bs4 import BeautifulSoup

from releasefeed.errors import NotFoundError, TransportError
from releasefeed.harvester import PageHarvester, looks_like_release

BASE_URL = 'https://listing.example/'

PAGE_ONE = """
<html><head><title>Latest Reports</title></head><body>
  <article>
    <h2><a href="/reports/1">The.Movie.Name.2024.1080p.WEB</a></h2>
    <p>Submitted by someone</p>
  </article>
  <article>
    <h2>Another Film 2023 WEBRip</h2>
  </article>
  <article>
    <h2>No year here</h2>
    <p>About us</p>
  </article>
</body></html>
"""

PAGE_TWO = """
<html><head><title>Latest Reports - Page 2</title></head><body>
  <div class="post"><h3>Third Film 2022 BluRay</h3></div>
  <div class="post"><h3>Another Film 2023 WEBRip</h3></div>
</body></html>
"""

EMPTY_PAGE = "<html><head><title>Latest</title></head><body><p>Nothing</p></body></html>"

BLOCK_PAGE = "<html><head><title>Just a moment...</title></head><body>checking</body></html>"


@pytest.fixture
def harvester():
    return PageHarvester(base_url=BASE_URL, page_delay=0)


def _labels(listings):
    return [listing.raw_label for listing in listings]


class TestLooksLikeRelease:

    def test_label_with_year(self):
        assert looks_like_release("Anora 2024 WEB-DL")

    def test_label_without_year(self):
        assert not looks_like_release("About us")

    def test_paragraph_rejected(self):
        assert not looks_like_release("word " * 30 + "2024")

    def test_min_length(self):
        assert not looks_like_release("2024", min_length=5)


class TestPageUrls:

    def test_first_page_is_base(self, harvester):
        assert harvester.page_url(1) == BASE_URL

    def test_later_pages_use_template(self, harvester):
        assert harvester.page_url(3) == 'https://listing.example/page/3/'

    def test_custom_template(self):
        h = PageHarvester(base_url=BASE_URL, page_url_template='{base_url}?paged={page}')
        assert h.page_url(2) == 'https://listing.example/?paged=2'


class TestExtraction:

    def test_container_headings(self, harvester):
        soup = BeautifulSoup(PAGE_ONE, 'html.parser')
        listings = harvester.extract_listings(soup, BASE_URL)
        assert _labels(listings) == ["The.Movie.Name.2024.1080p.WEB", "Another Film 2023 WEBRip"]

    def test_source_url_resolved(self, harvester):
        soup = BeautifulSoup(PAGE_ONE, 'html.parser')
        listings = harvester.extract_listings(soup, BASE_URL)
        assert listings[0].source_url == 'https://listing.example/reports/1'
        assert listings[1].source_url is None

    def test_year_outside_heading_uses_card_text(self, harvester):
        html = '<article><h2>Quiet Title</h2><span>Released 2024</span></article>'
        listings = harvester.extract_listings(BeautifulSoup(html, 'html.parser'), BASE_URL)
        assert _labels(listings) == ["Quiet Title Released 2024"]

    def test_link_fallback_when_no_cards(self, harvester):
        html = """
        <body>
          <a href="/r/9">Some Film 2022 1080p</a>
          <a href="/">Home</a>
          <a href="/x">2024</a>
        </body>
        """
        listings = harvester.extract_listings(BeautifulSoup(html, 'html.parser'), BASE_URL)
        assert _labels(listings) == ["Some Film 2022 1080p"]
        assert listings[0].source_url == 'https://listing.example/r/9'

    def test_duplicate_cards_collapsed(self, harvester):
        html = '<article><h2>Anora 2024</h2></article><article><h2>Anora 2024</h2></article>'
        listings = harvester.extract_listings(BeautifulSoup(html, 'html.parser'), BASE_URL)
        assert _labels(listings) == ["Anora 2024"]


class TestHarvestStopping:

    def test_stops_when_page_has_no_new_items(self, harvester):
        with patch('releasefeed.harvester.get_html', side_effect=[PAGE_ONE, PAGE_ONE]) as mock_get:
            listings = list(harvester.harvest(max_items=100, max_pages=10))

        assert len(listings) == 2
        assert mock_get.call_count == 2
        assert harvester.stop_reason == 'exhausted'

    def test_dedups_across_pages(self, harvester):
        with patch('releasefeed.harvester.get_html',
                   side_effect=[PAGE_ONE, PAGE_TWO, EMPTY_PAGE]):
            listings = list(harvester.harvest(max_items=100, max_pages=10))

        assert _labels(listings) == [
            "The.Movie.Name.2024.1080p.WEB",
            "Another Film 2023 WEBRip",
            "Third Film 2022 BluRay",
        ]

    def test_stops_on_404(self, harvester):
        with patch('releasefeed.harvester.get_html',
                   side_effect=[PAGE_ONE, NotFoundError('404')]):
            listings = list(harvester.harvest(max_items=100, max_pages=10))

        assert len(listings) == 2
        assert harvester.stop_reason == 'not_found'

    def test_transport_error_keeps_collected(self, harvester):
        with patch('releasefeed.harvester.get_html',
                   side_effect=[PAGE_ONE, TransportError('connection reset')]):
            listings = list(harvester.harvest(max_items=100, max_pages=10))

        assert len(listings) == 2
        assert harvester.stop_reason == 'transport_error'

    def test_block_page_stops(self, harvester):
        with patch('releasefeed.harvester.get_html',
                   side_effect=[PAGE_ONE, BLOCK_PAGE, PAGE_TWO]) as mock_get:
            listings = list(harvester.harvest(max_items=100, max_pages=10))

        assert len(listings) == 2
        assert mock_get.call_count == 2
        assert harvester.stop_reason == 'blocked'

    def test_empty_first_page_does_not_stop(self, harvester):
        with patch('releasefeed.harvester.get_html',
                   side_effect=[EMPTY_PAGE, PAGE_ONE, EMPTY_PAGE]):
            listings = list(harvester.harvest(max_items=100, max_pages=10))

        assert len(listings) == 2

    def test_max_items(self, harvester):
        with patch('releasefeed.harvester.get_html', side_effect=[PAGE_ONE]) as mock_get:
            listings = list(harvester.harvest(max_items=1, max_pages=10))

        assert len(listings) == 1
        assert mock_get.call_count == 1
        assert harvester.stop_reason == 'max_items'

    def test_max_pages(self, harvester):
        with patch('releasefeed.harvester.get_html', side_effect=[PAGE_ONE, PAGE_TWO]) as mock_get:
            listings = list(harvester.harvest(max_items=100, max_pages=1))

        assert len(listings) == 2
        assert mock_get.call_count == 1
        assert harvester.stop_reason == 'max_pages'

    def test_delay_between_pages(self):
        h = PageHarvester(base_url=BASE_URL, page_delay=1.5)
        with patch('releasefeed.harvester.get_html', side_effect=[PAGE_ONE, PAGE_TWO, EMPTY_PAGE]), \
             patch('releasefeed.harvester.time.sleep') as mock_sleep:
            list(h.harvest(max_items=100, max_pages=10))

        # No delay before the first page
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(1.5)

    def test_each_call_starts_fresh(self, harvester):
        with patch('releasefeed.harvester.get_html', side_effect=[PAGE_ONE, NotFoundError('404')] * 2):
            first = list(harvester.harvest(max_items=100, max_pages=10))
            second = list(harvester.harvest(max_items=100, max_pages=10))

        assert _labels(first) == _labels(second)


class TestUserAgent:

    def test_browser_user_agent_sent(self):
        response = MagicMock()
        response.status_code = 200
        response.text = EMPTY_PAGE
        h = PageHarvester(base_url=BASE_URL, page_delay=0, user_agent='TestBrowser/1.0')

        with patch('requests.get', return_value=response) as mock_get:
            list(h.harvest(max_items=10, max_pages=1))

        headers = mock_get.call_args[1]['headers']
        assert headers['User-Agent'] == 'TestBrowser/1.0'
