#!/usr/bin/env python3
"""
Rating enrichment - CanonicalIdentity → best-available RatingRecord

Kind priority, whatever service supplied it:
  PRIMARY_CRITIC > SECONDARY_CRITIC > AUDIENCE_SCORE

Lookup order:
1. Rating cache (no network)
2. OMDb by IMDb id - a primary critic rating ends the search
3. Critic-score search by title + year - overrides anything lower
4. Cache whatever is best, possibly nothing
"""

import logging
from collections import defaultdict
from typing import Optional

from releasefeed.critics import CriticScoreClient
from releasefeed.errors import ServiceError, NotFoundError
from releasefeed.models import CanonicalIdentity, RatingKind, RatingRecord
from releasefeed.omdb import OMDbClient
from releasefeed.rating_cache import RatingCache

logger = logging.getLogger(__name__)


class RatingEnricher:
    """Attach ratings to resolved identities"""

    def __init__(self, cache: RatingCache, omdb: Optional[OMDbClient] = None,
                 critics: Optional[CriticScoreClient] = None):
        self.cache = cache
        self.omdb = omdb
        self.critics = critics
        self.stats = defaultdict(int)

    def _from_rating_service(self, identity: CanonicalIdentity) -> Optional[RatingRecord]:
        if self.omdb is None or not self.omdb.enabled:
            return None
        try:
            record = self.omdb.get_by_id(identity.id)
        except NotFoundError as e:
            logger.debug(f"OMDb has no record for {identity.id}: {e}")
            return None
        except ServiceError as e:
            logger.warning(f"OMDb rating lookup failed for {identity.id}: {e}")
            return None
        return OMDbClient.best_rating(OMDbClient.extract_ratings(record))

    def _from_critic_search(self, identity: CanonicalIdentity) -> Optional[RatingRecord]:
        if self.critics is None:
            return None
        try:
            return self.critics.search(identity.display_name, identity.release_year)
        except NotFoundError as e:
            logger.debug(str(e))
            return None
        except ServiceError as e:
            logger.warning(f"Critic search failed for '{identity.display_name}': {e}")
            return None

    def enrich(self, identity: CanonicalIdentity) -> Optional[RatingRecord]:
        cached = self.cache.get(identity.id)
        seeded = self.cache.was_seeded(identity.id)

        if cached is not None and not seeded:
            self.stats['cache_hit'] += 1
            return cached

        if seeded:
            # Resolver already read OMDb for this id; only the critic search is left
            best = cached
            self.stats['seeded'] += 1
        else:
            best = self._from_rating_service(identity)
            if best is not None:
                self.stats[f"omdb_{best.source_kind.value}"] += 1

        if best is None or best.source_kind != RatingKind.PRIMARY_CRITIC:
            critic = self._from_critic_search(identity)
            if critic is not None:
                self.stats['critic_search'] += 1
                best = critic

        if best is not None:
            self.cache.put(identity.id, best)
            logger.debug(f"Rating for {identity.id}: {best.label()}")
        else:
            self.stats['no_rating'] += 1

        self.cache.mark_settled(identity.id)
        return best
