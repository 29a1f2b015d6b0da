#!/usr/bin/env python3
"""
Shared constants for the release catalog pipeline

Single source of truth for service endpoints, label patterns, block-page
markers and run status strings. Import from here instead of redefining.
"""

import re

# Listing source
DEFAULT_BASE_URL = 'https://whereyouwatch.com/'
DEFAULT_PAGE_URL_TEMPLATE = '{base_url}page/{page}/'

USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36'
)

# Metadata and rating services
CINEMETA_URL = 'https://v3-cinemeta.strem.io/catalog/movie/top'
OMDB_URL = 'http://www.omdbapi.com/'
CRITIC_SEARCH_URL = 'https://www.rottentomatoes.com/napi/search/all'
POSTER_URL_TEMPLATE = 'https://images.metahub.space/poster/medium/{id}/img'

# First 4-digit token starting with 19 or 20. Bounded by non-digits rather
# than word boundaries so scene labels like "Name_2024_1080p" still match.
YEAR_TOKEN = re.compile(r'(?<!\d)(19|20)\d{2}(?!\d)')

# Word-bounded variant used to decide whether harvested text looks like a release
YEAR_WORD = re.compile(r'\b(19|20)\d{2}\b')

# Submission/byline boilerplate that trails labels on the listing site
BOILERPLATE_PHRASES = [
    r'submitted on:',
    r'posted by:',
]

# Navigation chrome that sometimes survives extraction as a "label"
NAVIGATION_WORDS = ['Search', 'Menu']

MIN_TITLE_LENGTH = 2

# Harvester selectors, in priority order
CONTAINER_SELECTOR = '.post, article, .entry, .type-post, .jrListing'
HEADING_SELECTOR = 'h1, h2, h3, h4, .jrResourceTitle, .entry-title'
LINK_SELECTOR = 'a'

# Label length bounds
CONTAINER_LABEL_MAX = 100
LINK_LABEL_MIN = 5
LINK_LABEL_MAX = 100

# <title> markers of anti-bot challenge pages
BLOCK_PAGE_MARKERS = [
    'just a moment',
    'attention required',
    'access denied',
    'are you a robot',
    'ddos-guard',
    'captcha',
]

# Run status strings read by the catalog server
STATUS_INITIALIZING = 'Initializing'
STATUS_SCRAPING = 'Scraping...'
STATUS_PROCESSING = 'Processing {count} items...'
STATUS_READY = 'Ready'
STATUS_ERROR = 'Error: {message}'

# Catalog wire contract
CATALOG_TYPE = 'movie'
DEFAULT_PAGE_LIMIT = 100
STATUS_ENTRY_ID = 'tt_status'
STATUS_ENTRY_POSTER = 'https://via.placeholder.com/300x450.png?text=Loading...'
STATUS_ENTRY_DESCRIPTION = 'The addon is currently fetching data. Please wait.'
SYNTHETIC_ID_PREFIX = 'wyw'
UNKNOWN_YEAR = '????'

# OMDb rating source names → rating kind value
RATING_SOURCE_KINDS = {
    'Rotten Tomatoes': 'primary_critic',
    'Metacritic': 'secondary_critic',
    'Internet Movie Database': 'audience_score',
}
