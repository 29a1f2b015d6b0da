#!/usr/bin/env python3
"""
harvest.py - Release catalog builder

Walks the listing source, matches every release to a catalog identity,
attaches the best available rating and writes the deduplicated catalog to
JSON for the catalog server.

Pipeline:
1. Harvest listing pages → raw labels
2. Parse label → (title, year), discard junk
3. Resolve identity: Cinemeta strict → Cinemeta loose → OMDb
4. Enrich rating: cache → OMDb ratings → critic-score search
5. Deduplicate by id (first wins), publish

Usage:
  python harvest.py --once                      # single run, then exit
  python harvest.py                             # run now, then every 180 minutes
  python harvest.py --interval 60               # custom refresh interval
  python harvest.py --once --no-api             # Cinemeta only, no OMDb/critic calls
"""

import sys
import time
import logging
import argparse
from pathlib import Path

from releasefeed.catalog import CatalogContext, write_catalog, load_catalog
from releasefeed.config import load_config
from releasefeed.constants import STATUS_READY
from releasefeed.pipeline import CatalogPipeline

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def print_stats(pipeline: CatalogPipeline, context: CatalogContext):
    """Print run statistics"""
    stats = pipeline.stats

    print("\n" + "=" * 60)
    print("CATALOG RUN STATISTICS")
    print("=" * 60)
    print(f"Status:            {context.status}")
    print(f"Pages fetched:     {pipeline.harvester.pages_fetched} "
          f"(stopped: {pipeline.harvester.stop_reason})")
    print(f"Labels harvested:  {stats.get('harvested', 0)}")
    print(f"Catalog size:      {len(context)}")

    print("\nBY OUTCOME:")
    for key in ['resolved', 'synthetic', 'rated', 'duplicates',
                'discarded_invalid', 'discarded_no_year', 'skipped_unmatched']:
        print(f"  {key:25s}: {stats.get(key, 0):4d}")

    if pipeline.resolver.stats:
        print("\nRESOLUTION STRATEGY:")
        for name, count in sorted(pipeline.resolver.stats.items(), key=lambda x: -x[1]):
            print(f"  {name:25s}: {count:4d}")

    if pipeline.enricher.stats:
        print("\nRATING SOURCE:")
        for name, count in sorted(pipeline.enricher.stats.items(), key=lambda x: -x[1]):
            print(f"  {name:25s}: {count:4d}")

    cache_stats = pipeline.rating_cache.get_cache_stats()
    print(f"\nRating cache: {cache_stats['hits']} hits, {cache_stats['misses']} misses "
          f"({cache_stats['hit_rate']:.0f}% hit rate), {cache_stats['cache_size']} entries")
    print("=" * 60)


def run_once(pipeline: CatalogPipeline, context: CatalogContext, catalog_path: Path) -> bool:
    pipeline.run()
    print_stats(pipeline, context)
    if context.status != STATUS_READY:
        logger.error(f"Run did not complete: {context.status}")
        return False
    try:
        write_catalog(context.metas, catalog_path)
    except OSError as e:
        # Catalog stays published in memory; the next run retries the write
        logger.error(f"Could not write catalog to {catalog_path}: {e}")
        return False
    return True


def main():
    parser = argparse.ArgumentParser(
        description='Harvest release listings and build the rated catalog',
        epilog="""
Examples:
  python harvest.py --once
  python harvest.py --config config.yaml --interval 60
  python harvest.py --once --max-pages 2 --output output/test_catalog.json
        """
    )
    parser.add_argument('--config', type=Path, default=Path('config.yaml'),
                        help='Configuration file (default: config.yaml, optional)')
    parser.add_argument('--output', '-o', type=Path, default=None,
                        help='Catalog JSON path (default: catalog_path from config)')
    parser.add_argument('--once', action='store_true',
                        help='Run a single time and exit')
    parser.add_argument('--interval', type=float, default=None,
                        help='Minutes between runs (default: refresh_interval_minutes from config)')
    parser.add_argument('--max-items', type=int, default=None,
                        help='Stop harvesting after this many labels')
    parser.add_argument('--max-pages', type=int, default=None,
                        help='Stop harvesting after this many pages')
    parser.add_argument('--no-api', action='store_true',
                        help='Disable OMDb and critic-score lookups (Cinemeta only)')

    args = parser.parse_args()

    if args.config.exists():
        config = load_config(args.config)
        logger.info(f"Loaded config from {args.config}")
    else:
        logger.warning(f"Config file not found: {args.config} - using defaults")
        config = load_config(None)

    if args.max_items is not None:
        config['max_items'] = args.max_items
    if args.max_pages is not None:
        config['max_pages'] = args.max_pages

    catalog_path = args.output or Path(config['catalog_path'])
    interval_minutes = args.interval if args.interval is not None else config['refresh_interval_minutes']

    context = CatalogContext()
    previous = load_catalog(catalog_path)
    if previous:
        context.publish_metas(previous)
        logger.info(f"Serving previous catalog ({len(previous)} entries) until the first run completes")

    pipeline = CatalogPipeline.from_config(config, context, no_api=args.no_api)

    if args.once:
        return 0 if run_once(pipeline, context, catalog_path) else 1

    logger.info(f"Refreshing every {interval_minutes:g} minutes (Ctrl-C to stop)")
    try:
        while True:
            started = time.monotonic()
            run_once(pipeline, context, catalog_path)
            elapsed = time.monotonic() - started
            time.sleep(max(interval_minutes * 60 - elapsed, 0))
    except KeyboardInterrupt:
        logger.info('Stopped.')

    return 0


if __name__ == '__main__':
    sys.exit(main())
