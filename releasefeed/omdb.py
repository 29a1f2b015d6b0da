#!/usr/bin/env python3
"""
OMDb API client

Serves two roles in the pipeline:
- secondary metadata service for identity resolution (t=, s=, i= queries)
- primary rating service keyed by IMDb id (Ratings / imdbRating fields)
"""

import logging
from typing import Optional, Dict, List

from releasefeed.constants import OMDB_URL, RATING_SOURCE_KINDS
from releasefeed.errors import NotFoundError, ParseError
from releasefeed.http import get_json, DEFAULT_TIMEOUT
from releasefeed.models import CanonicalIdentity, RatingKind, RatingRecord

logger = logging.getLogger(__name__)


def _present(value) -> bool:
    return bool(value) and value != 'N/A'


class OMDbClient:
    """Interface to the Open Movie Database API"""

    def __init__(self, api_key: Optional[str], base_url: str = OMDB_URL,
                 timeout: float = DEFAULT_TIMEOUT):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.enabled = bool(api_key)

    def _query(self, params: Dict[str, str]) -> Dict:
        """Make actual API request to OMDb"""
        if not self.enabled:
            raise NotFoundError('OMDb disabled (no API key)')

        data = get_json(self.base_url, params={'apikey': self.api_key, **params},
                        timeout=self.timeout)
        if not isinstance(data, dict):
            raise ParseError('Unexpected OMDb payload')

        # OMDb reports misses in-band with HTTP 200
        if data.get('Response') == 'False':
            raise NotFoundError(f"OMDb: {data.get('Error', 'Unknown error')}")
        return data

    def get_by_title(self, title: str, year: Optional[str] = None) -> Dict:
        """Exact title lookup, optionally constrained to a year"""
        params = {'t': title, 'type': 'movie', 'plot': 'short'}
        if year:
            params['y'] = str(year)
        data = self._query(params)
        logger.debug(f"OMDb: '{title}' ({year}) → '{data.get('Title')}' {data.get('imdbID')}")
        return data

    def search(self, title: str) -> List[Dict]:
        """Free-text search; returns the Search list (id, title, year only)"""
        data = self._query({'s': title, 'type': 'movie'})
        hits = [h for h in data.get('Search') or [] if isinstance(h, dict) and h.get('imdbID')]
        if not hits:
            raise NotFoundError(f"OMDb: no search hits for '{title}'")
        return hits

    def get_by_id(self, imdb_id: str) -> Dict:
        """Full record by IMDb id"""
        return self._query({'i': imdb_id, 'plot': 'short'})

    @staticmethod
    def parse_year(value: Optional[str]) -> Optional[str]:
        """OMDb returns year as string, sometimes with range like "2019–2020" """
        if not _present(value):
            return None
        year_str = value.split('–')[0].split('-')[0].strip()
        return year_str if year_str.isdigit() else None

    @classmethod
    def to_identity(cls, record: Dict) -> Optional[CanonicalIdentity]:
        """Build a CanonicalIdentity from a full OMDb record"""
        imdb_id = record.get('imdbID')
        title = record.get('Title')
        if not imdb_id or not title:
            return None
        return CanonicalIdentity(
            id=imdb_id,
            display_name=title,
            release_year=cls.parse_year(record.get('Year')),
            poster_url=record['Poster'] if _present(record.get('Poster')) else None,
            synopsis=record['Plot'] if _present(record.get('Plot')) else None,
        )

    @staticmethod
    def extract_ratings(record: Dict) -> Dict[RatingKind, RatingRecord]:
        """
        Collect named ratings from a full record, keyed by kind

        Ratings[] entries are mapped by source name; imdbRating fills
        AUDIENCE_SCORE when the Ratings list omits it.
        """
        ratings: Dict[RatingKind, RatingRecord] = {}

        for entry in record.get('Ratings') or []:
            if not isinstance(entry, dict):
                continue
            kind_value = RATING_SOURCE_KINDS.get(entry.get('Source'))
            value = entry.get('Value')
            if kind_value and _present(value):
                kind = RatingKind(kind_value)
                ratings[kind] = RatingRecord(source_kind=kind, value=value)

        imdb_rating = record.get('imdbRating')
        if RatingKind.AUDIENCE_SCORE not in ratings and _present(imdb_rating):
            ratings[RatingKind.AUDIENCE_SCORE] = RatingRecord(
                source_kind=RatingKind.AUDIENCE_SCORE, value=f"{imdb_rating}/10"
            )

        return ratings

    @staticmethod
    def best_rating(ratings: Dict[RatingKind, RatingRecord]) -> Optional[RatingRecord]:
        if not ratings:
            return None
        return max(ratings.values(), key=lambda r: r.source_kind.priority)
