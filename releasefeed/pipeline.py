#!/usr/bin/env python3
"""
Catalog pipeline - harvest → parse → resolve → enrich → deduplicate → publish

One run is strictly sequential, item by item, to stay under the external
services' rate limits. The published catalog is only replaced when a run
completes; a failed run leaves the previous catalog in place and records
an error status.
"""

import logging
from collections import defaultdict
from pathlib import Path
from typing import List, Optional

from releasefeed.catalog import CatalogContext
from releasefeed.cinemeta import CinemetaClient
from releasefeed.constants import (
    STATUS_SCRAPING, STATUS_PROCESSING, STATUS_READY, STATUS_ERROR,
    SYNTHETIC_ID_PREFIX, UNKNOWN_YEAR,
)
from releasefeed.critics import CriticScoreClient
from releasefeed.enricher import RatingEnricher
from releasefeed.harvester import PageHarvester
from releasefeed.models import CanonicalIdentity, CatalogEntry, RawListing
from releasefeed.normalization import synthetic_id
from releasefeed.omdb import OMDbClient
from releasefeed.parser import ReleaseParser
from releasefeed.rating_cache import RatingCache
from releasefeed.resolver import IdentityResolver

logger = logging.getLogger(__name__)


def deduplicate(entries: List[CatalogEntry]) -> List[CatalogEntry]:
    """Keep the first entry per identity id, preserving order"""
    unique = []
    seen_ids = set()
    for entry in entries:
        if entry.id in seen_ids:
            continue
        seen_ids.add(entry.id)
        unique.append(entry)
    return unique


class CatalogPipeline:
    """Build and publish the release catalog"""

    def __init__(self, context: CatalogContext, harvester: PageHarvester,
                 resolver: IdentityResolver, enricher: RatingEnricher,
                 rating_cache: RatingCache, parser: Optional[ReleaseParser] = None,
                 max_items: int = 300, max_pages: int = 25,
                 synthetic_id_prefix: str = SYNTHETIC_ID_PREFIX):
        self.context = context
        self.harvester = harvester
        self.resolver = resolver
        self.enricher = enricher
        self.rating_cache = rating_cache
        self.parser = parser or ReleaseParser()
        self.max_items = max_items
        self.max_pages = max_pages
        self.synthetic_id_prefix = synthetic_id_prefix
        self.stats = defaultdict(int)

    @classmethod
    def from_config(cls, config: dict, context: CatalogContext,
                    no_api: bool = False) -> 'CatalogPipeline':
        """Wire up clients from a loaded config dict"""
        timeout = config['request_timeout']

        rating_cache = RatingCache(Path(config['rating_cache_path']))

        harvester = PageHarvester(
            base_url=config['base_url'],
            page_url_template=config['page_url_template'],
            page_delay=config['page_delay'],
            timeout=timeout,
        )

        cinemeta = CinemetaClient(config['cinemeta_url'], timeout=timeout)

        omdb = None
        critics = None
        if no_api:
            logger.info('Metadata fallbacks disabled (--no-api): Cinemeta only, cached ratings only')
        else:
            omdb_key = config.get('omdb_api_key')
            if omdb_key:
                omdb = OMDbClient(omdb_key, base_url=config['omdb_url'], timeout=timeout)
                logger.info('OMDb lookup and ratings enabled')
            else:
                logger.warning('OMDb disabled (no omdb_api_key in config)')

            if config.get('critic_search_enabled'):
                critics = CriticScoreClient(config['critic_search_url'], timeout=timeout)

        resolver = IdentityResolver.build(
            cinemeta, omdb, rating_cache, min_loose_year=config['min_loose_year']
        )
        enricher = RatingEnricher(rating_cache, omdb=omdb, critics=critics)

        return cls(
            context=context,
            harvester=harvester,
            resolver=resolver,
            enricher=enricher,
            rating_cache=rating_cache,
            max_items=config['max_items'],
            max_pages=config['max_pages'],
            synthetic_id_prefix=config['synthetic_id_prefix'],
        )

    def _synthetic_entry(self, title: str, year: Optional[str], raw_label: str) -> CatalogEntry:
        identity = CanonicalIdentity(
            id=synthetic_id(title, year, self.synthetic_id_prefix),
            display_name=title,
            release_year=year or UNKNOWN_YEAR,
        )
        return CatalogEntry(identity=identity, origin_label=raw_label, synthetic=True)

    def process_listing(self, listing: RawListing, working_size: int) -> Optional[CatalogEntry]:
        """Turn one harvested label into a catalog entry, or None to discard it"""
        parsed = self.parser.parse(listing.raw_label)

        if not self.parser.is_valid(parsed):
            self.stats['discarded_invalid'] += 1
            logger.debug(f"Discarding invalid label: {listing.raw_label!r}")
            return None

        if parsed.year is None:
            self.stats['discarded_no_year'] += 1
            logger.debug(f"Discarding label without year: {listing.raw_label!r}")
            return None

        identity = self.resolver.resolve(parsed.title, parsed.year)

        if identity is None:
            if working_size >= self.max_items:
                self.stats['skipped_unmatched'] += 1
                return None
            self.stats['synthetic'] += 1
            return self._synthetic_entry(parsed.title, parsed.year, listing.raw_label)

        self.stats['resolved'] += 1
        rating = self.enricher.enrich(identity)
        if rating is not None:
            self.stats['rated'] += 1

        return CatalogEntry(identity=identity, origin_label=listing.raw_label, rating=rating)

    def _run(self) -> List[CatalogEntry]:
        self.context.set_status(STATUS_SCRAPING)
        listings = list(self.harvester.harvest(self.max_items, self.max_pages))
        self.stats['harvested'] = len(listings)

        logger.info(f"> Found {len(listings)} raw items. Matching...")
        self.context.set_status(STATUS_PROCESSING.format(count=len(listings)))

        working: List[CatalogEntry] = []
        for listing in listings:
            entry = self.process_listing(listing, len(working))
            if entry is not None:
                working.append(entry)

        unique = deduplicate(working)
        self.stats['duplicates'] = len(working) - len(unique)

        self.context.publish(unique)
        self.context.set_status(STATUS_READY)
        logger.info(f"> Update complete. Catalog size: {len(unique)}")
        return unique

    def run(self) -> List[CatalogEntry]:
        """
        Execute one full run and return the catalog now published

        A run requested while another is active is refused, and a failed run
        leaves the published catalog in place. Both return the entries built
        by the last successful run in this process. A catalog reloaded with
        publish_metas() has no entries, so that case returns [] while
        context.metas still serves the reloaded list.
        """
        if not self.context.run_lock.acquire(blocking=False):
            logger.warning('Run already in progress, skipping this trigger')
            return self.context.entries

        self.stats = defaultdict(int)
        self.enricher.stats = defaultdict(int)
        self.resolver.reset()
        try:
            return self._run()
        except Exception as e:
            logger.exception(f"! Critical error during run: {e}")
            self.context.set_status(STATUS_ERROR.format(message=e))
            return self.context.entries
        finally:
            if self.rating_cache.save_if_dirty():
                logger.info(f"Saved rating cache ({len(self.rating_cache)} entries)")
            self.context.run_lock.release()
