#!/usr/bin/env python3
"""
Clear rating cache entries so the next run re-queries them.

Cached ratings never expire on their own. Use this when critic scores have
been published since a title was first cached with only an audience score.

Usage:
    python scripts/clear_rating_cache.py --below primary_critic   # drop everything that could be upgraded
    python scripts/clear_rating_cache.py --id tt1234567 --id tt7654321
    python scripts/clear_rating_cache.py --all
"""
import argparse
import shutil
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from releasefeed.models import RatingKind
from releasefeed.rating_cache import RatingCache


def backup_cache(cache_path: Path) -> Path:
    """Backup cache to cache_backups/ before modification"""
    backup_dir = cache_path.parent / 'cache_backups'
    backup_dir.mkdir(exist_ok=True, parents=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    backup_path = backup_dir / f"{cache_path.stem}_backup_{timestamp}.json"

    shutil.copy2(cache_path, backup_path)
    print(f"✓ Backed up to {backup_path}")
    return backup_path


def main():
    parser = argparse.ArgumentParser(description='Clear rating cache entries')
    parser.add_argument('--cache', type=Path, default=Path('output/rating_cache.json'))
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--all', action='store_true', help='Remove every entry')
    group.add_argument('--below', choices=[k.value for k in RatingKind],
                       help='Remove entries of lower priority than this kind')
    group.add_argument('--id', action='append', dest='ids', help='Remove one id (repeatable)')
    parser.add_argument('--dry-run', action='store_true')
    args = parser.parse_args()

    if not args.cache.exists():
        print(f"Error: {args.cache} not found", file=sys.stderr)
        return 1

    cache = RatingCache(args.cache)
    before = len(cache)

    if args.all:
        predicate = None
    elif args.below:
        threshold = RatingKind(args.below).priority
        predicate = lambda _key, record: record.source_kind.priority < threshold  # noqa: E731
    else:
        wanted = set(args.ids)
        predicate = lambda key, _record: key in wanted  # noqa: E731

    if args.dry_run:
        matching = len(cache) if predicate is None else sum(
            1 for key, record in cache.cache.items() if predicate(key, record)
        )
        print(f"[dry-run] Would remove {matching} of {before} entries")
        return 0

    backup_cache(args.cache)
    removed = cache.clear(predicate)
    cache.save_if_dirty()

    print(f"✓ Removed {removed} entries from {args.cache}")
    print(f"  Before: {before} entries")
    print(f"  After: {len(cache)} entries")
    return 0


if __name__ == '__main__':
    sys.exit(main())
