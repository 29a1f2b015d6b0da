#!/usr/bin/env python3
"""
Cinemeta catalog search client (primary metadata search service)
"""

import logging
from typing import List, Dict
from urllib.parse import quote

from releasefeed.constants import CINEMETA_URL
from releasefeed.errors import NotFoundError, ParseError
from releasefeed.http import get_json, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class CinemetaClient:
    """Free-text search against the Cinemeta movie catalog"""

    def __init__(self, base_url: str = CINEMETA_URL, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def search(self, query: str) -> List[Dict]:
        """
        Return candidate metas for query, best match first

        Each meta carries at least 'id' (IMDb id), 'name', and usually
        'releaseInfo' and 'poster'. Raises NotFoundError when the catalog
        has no match.
        """
        url = f"{self.base_url}/search={quote(query)}.json"
        data = get_json(url, timeout=self.timeout)

        if not isinstance(data, dict):
            raise ParseError(f"Unexpected Cinemeta payload for '{query}'")

        metas = [m for m in data.get('metas') or [] if isinstance(m, dict) and m.get('id')]
        if not metas:
            raise NotFoundError(f"No Cinemeta results for '{query}'")

        logger.debug(f"Cinemeta: '{query}' → {len(metas)} result(s), top '{metas[0].get('name')}'")
        return metas
