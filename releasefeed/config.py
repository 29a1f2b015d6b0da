#!/usr/bin/env python3
"""
YAML configuration with defaults

Only keys that differ from DEFAULT_CONFIG need to appear in config.yaml.
"""

from pathlib import Path
from typing import Optional

import yaml

from releasefeed.constants import (
    DEFAULT_BASE_URL, DEFAULT_PAGE_URL_TEMPLATE, CINEMETA_URL, OMDB_URL,
    CRITIC_SEARCH_URL, SYNTHETIC_ID_PREFIX,
)

DEFAULT_CONFIG = {
    # Listing source
    'base_url': DEFAULT_BASE_URL,
    'page_url_template': DEFAULT_PAGE_URL_TEMPLATE,
    'max_pages': 25,
    'max_items': 300,
    'page_delay': 1.5,

    # External services
    'cinemeta_url': CINEMETA_URL,
    'omdb_url': OMDB_URL,
    'omdb_api_key': None,
    'critic_search_url': CRITIC_SEARCH_URL,
    'critic_search_enabled': True,
    'request_timeout': 15,

    # Resolution
    'min_loose_year': 2000,
    'synthetic_id_prefix': SYNTHETIC_ID_PREFIX,

    # Storage
    'rating_cache_path': 'output/rating_cache.json',
    'catalog_path': 'output/catalog.json',

    # Scheduling
    'refresh_interval_minutes': 180,
}


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from YAML file, falling back to defaults"""
    config = dict(DEFAULT_CONFIG)
    if config_path is None:
        return config

    with open(config_path, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    config.update({k: v for k, v in loaded.items() if v is not None})
    return config
