#!/usr/bin/env python3
"""
Critic-score search client

Looks a title up directly on the critic aggregator's search endpoint.
Only ever produces a PRIMARY_CRITIC rating.
"""

import logging
from typing import Optional, Dict, List

from releasefeed.constants import CRITIC_SEARCH_URL
from releasefeed.errors import NotFoundError, ParseError
from releasefeed.http import get_json, DEFAULT_TIMEOUT
from releasefeed.models import RatingKind, RatingRecord
from releasefeed.normalization import title_similarity

logger = logging.getLogger(__name__)


class CriticScoreClient:
    """Search-by-title critic score lookup"""

    def __init__(self, search_url: str = CRITIC_SEARCH_URL, timeout: float = DEFAULT_TIMEOUT,
                 year_tolerance: int = 1, min_similarity: float = 0.6):
        self.search_url = search_url
        self.timeout = timeout
        self.year_tolerance = year_tolerance
        self.min_similarity = min_similarity

    def _candidates(self, title: str) -> List[Dict]:
        data = get_json(self.search_url, params={'searchQuery': title, 'type': 'movie'},
                        timeout=self.timeout)
        if not isinstance(data, dict):
            raise ParseError('Unexpected critic search payload')
        movie_block = data.get('movie') or {}
        items = movie_block.get('items') if isinstance(movie_block, dict) else None
        return [i for i in items or [] if isinstance(i, dict)]

    def _validate_result(self, candidate: Dict, title: str, year: Optional[str]) -> bool:
        """
        Title similarity >= min_similarity and year within tolerance

        When a year is wanted, candidates without a usable year are rejected
        so an undated namesake cannot lend its score to a remake.
        """
        name = candidate.get('name') or ''
        if not name or title_similarity(name, title) < self.min_similarity:
            return False

        if year and str(year).isdigit():
            try:
                candidate_year = int(candidate.get('releaseYear'))
            except (TypeError, ValueError):
                return False
            if abs(candidate_year - int(year)) > self.year_tolerance:
                return False

        return True

    @staticmethod
    def _score(candidate: Dict) -> Optional[str]:
        block = candidate.get('tomatometerScore') or {}
        score = block.get('score') if isinstance(block, dict) else block
        if score in (None, ''):
            return None
        return f"{score}%"

    def search(self, title: str, year: Optional[str] = None) -> RatingRecord:
        """
        Return the critic score of the first plausible match

        Raises NotFoundError when no candidate matches or the match has no score.
        """
        for candidate in self._candidates(title):
            if not self._validate_result(candidate, title, year):
                logger.debug(
                    f"Critic search mismatch: query='{title}' ({year}), "
                    f"got='{candidate.get('name')}' ({candidate.get('releaseYear')})"
                )
                continue
            score = self._score(candidate)
            if score is None:
                continue
            logger.debug(f"Critic score: '{title}' ({year}) → {score}")
            return RatingRecord(source_kind=RatingKind.PRIMARY_CRITIC, value=score)

        raise NotFoundError(f"No critic score for '{title}' ({year})")
