#!/usr/bin/env python3
"""
Identity resolution - (title, year) → CanonicalIdentity

Resolution chain, first success wins:
1. StrictSearchStrategy    Cinemeta search for "title year", top hit accepted
2. LooseSearchStrategy     Cinemeta search for title alone, top hit only if recent
3. SecondaryLookupStrategy OMDb exact title(+year) → exact title → search + full record

Every strategy swallows ServiceError and reports a miss; only an exhausted
chain yields None.
"""

import logging
from collections import defaultdict
from typing import Optional, Dict, List

from releasefeed.cinemeta import CinemetaClient
from releasefeed.errors import ServiceError, NotFoundError
from releasefeed.models import CanonicalIdentity
from releasefeed.omdb import OMDbClient
from releasefeed.rating_cache import RatingCache

logger = logging.getLogger(__name__)


def identity_from_meta(meta: Dict) -> CanonicalIdentity:
    """Build a CanonicalIdentity from a Cinemeta meta object"""
    return CanonicalIdentity(
        id=str(meta['id']),
        display_name=meta.get('name') or str(meta['id']),
        release_year=str(meta['releaseInfo']) if meta.get('releaseInfo') else None,
        poster_url=meta.get('poster') or None,
        synopsis=meta.get('description') or None,
    )


class ResolutionStrategy:
    """One link of the resolution chain"""

    name = 'base'

    def attempt(self, title: str, year: Optional[str]) -> Optional[CanonicalIdentity]:
        raise NotImplementedError


class StrictSearchStrategy(ResolutionStrategy):
    """Title + year query; the service's top hit is trusted as-is"""

    name = 'strict_search'

    def __init__(self, client: CinemetaClient):
        self.client = client

    def attempt(self, title, year):
        if not year:
            return None
        metas = self.client.search(f"{title} {year}")
        return identity_from_meta(metas[0])


class LooseSearchStrategy(ResolutionStrategy):
    """
    Title-only query

    The top hit is accepted only when its year is numeric and newer than
    min_year, so an old film sharing the title does not win by default.
    """

    name = 'loose_search'

    def __init__(self, client: CinemetaClient, min_year: int = 2000):
        self.client = client
        self.min_year = min_year

    def attempt(self, title, year):
        metas = self.client.search(title)
        top = metas[0]
        release_info = str(top.get('releaseInfo') or '').strip()
        if not release_info.isdigit() or int(release_info) <= self.min_year:
            logger.debug(f"Loose search rejected '{top.get('name')}' ({release_info or '?'}) for '{title}'")
            return None
        return identity_from_meta(top)


class SecondaryLookupStrategy(ResolutionStrategy):
    """
    OMDb lookups, narrowest first

    Ratings embedded in the winning record are seeded into the rating cache
    so enrichment can skip its own OMDb call.
    """

    name = 'secondary_lookup'

    def __init__(self, client: OMDbClient, rating_cache: Optional[RatingCache] = None):
        self.client = client
        self.rating_cache = rating_cache

    def _lookup(self, title: str, year: Optional[str]) -> Optional[Dict]:
        if year:
            try:
                return self.client.get_by_title(title, year)
            except ServiceError as e:
                logger.debug(f"OMDb exact lookup with year failed for '{title}' ({year}): {e}")

        try:
            return self.client.get_by_title(title)
        except ServiceError as e:
            logger.debug(f"OMDb exact lookup failed for '{title}': {e}")

        hits = self.client.search(title)
        return self.client.get_by_id(hits[0]['imdbID'])

    def attempt(self, title, year):
        if not self.client.enabled:
            return None

        record = self._lookup(title, year)
        identity = OMDbClient.to_identity(record)
        if identity is None:
            return None

        if self.rating_cache is not None:
            best = OMDbClient.best_rating(OMDbClient.extract_ratings(record))
            if best is not None and self.rating_cache.seed(identity.id, best):
                logger.debug(f"Seeded rating for {identity.id}: {best.label()}")

        return identity


class IdentityResolver:
    """Run the resolution chain with early exit"""

    def __init__(self, strategies: List[ResolutionStrategy]):
        self.strategies = strategies
        self.stats = defaultdict(int)
        self._memo: Dict[str, Optional[CanonicalIdentity]] = {}

    @classmethod
    def build(cls, cinemeta: CinemetaClient, omdb: Optional[OMDbClient] = None,
              rating_cache: Optional[RatingCache] = None,
              min_loose_year: int = 2000) -> 'IdentityResolver':
        strategies: List[ResolutionStrategy] = [
            StrictSearchStrategy(cinemeta),
            LooseSearchStrategy(cinemeta, min_year=min_loose_year),
        ]
        if omdb is not None:
            strategies.append(SecondaryLookupStrategy(omdb, rating_cache))
        return cls(strategies)

    def _make_key(self, title: str, year: Optional[str]) -> str:
        return f"{title}|{year if year else 'None'}"

    def reset(self):
        """Forget per-run memo and counters"""
        self._memo.clear()
        self.stats = defaultdict(int)

    def resolve(self, title: str, year: Optional[str] = None) -> Optional[CanonicalIdentity]:
        key = self._make_key(title, year)
        if key in self._memo:
            return self._memo[key]

        identity = None
        for strategy in self.strategies:
            try:
                identity = strategy.attempt(title, year)
            except NotFoundError as e:
                logger.debug(f"{strategy.name}: no match for '{title}' ({year}): {e}")
                identity = None
            except ServiceError as e:
                logger.warning(f"{strategy.name}: lookup failed for '{title}' ({year}): {e}")
                identity = None

            if identity is not None:
                self.stats[strategy.name] += 1
                logger.info(f"Resolved '{title}' ({year}) → '{identity.display_name}' "
                            f"{identity.id} via {strategy.name}")
                break
        else:
            self.stats['unresolved'] += 1
            logger.info(f"Unresolved: '{title}' ({year})")

        self._memo[key] = identity
        return identity
