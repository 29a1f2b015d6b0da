#!/usr/bin/env python3
"""
Persistent rating cache - canonical id → RatingRecord, stored as JSON

Loaded once at startup, mutated in memory during enrichment and written
back wholesale by save_if_dirty() at the end of a run that added entries.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Set

from releasefeed.errors import CacheIOError
from releasefeed.models import RatingRecord

logger = logging.getLogger(__name__)


class RatingCache:
    """Rating store shared by resolver side artifacts and the enricher"""

    def __init__(self, cache_path: Path):
        self.cache_path = cache_path
        self.cache: Dict[str, RatingRecord] = self._load_cache()
        self.cache_hits = 0
        self.cache_misses = 0
        self._dirty = False
        # ids whose record was seeded by the resolver during the current run
        self._seeded: Set[str] = set()

    def _load_cache(self) -> Dict[str, RatingRecord]:
        """Load cache from JSON file; missing or corrupt file starts empty"""
        if not self.cache_path.exists():
            return {}
        try:
            with open(self.cache_path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError(f"expected object, got {type(raw).__name__}")
            cache = {}
            for key, value in raw.items():
                try:
                    cache[key] = RatingRecord.from_dict(value)
                except (KeyError, TypeError, ValueError):
                    logger.debug(f"Skipping malformed rating cache entry: {key}")
            logger.info(f"Loaded rating cache with {len(cache)} entries")
            return cache
        except Exception as e:
            logger.warning(f"Could not load rating cache: {e}. Starting fresh.")
            return {}

    def _save_cache(self):
        """Write the whole cache to JSON via a temp file so a crash never truncates it"""
        tmp_path = self.cache_path.with_suffix(self.cache_path.suffix + '.tmp')
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            payload = {key: record.to_dict() for key, record in self.cache.items()}
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            tmp_path.replace(self.cache_path)
        except OSError as e:
            raise CacheIOError(f"Could not save rating cache to {self.cache_path}: {e}") from e
        logger.debug(f"Saved rating cache with {len(self.cache)} entries")

    def get(self, key: str) -> Optional[RatingRecord]:
        record = self.cache.get(key)
        if record is None:
            self.cache_misses += 1
        else:
            self.cache_hits += 1
        return record

    def __contains__(self, key: str) -> bool:
        return key in self.cache

    def __len__(self) -> int:
        return len(self.cache)

    def put(self, key: str, record: RatingRecord) -> bool:
        """
        Store record unless an equal-or-higher priority record is already cached

        Returns True when the cache changed.
        """
        existing = self.cache.get(key)
        if existing is not None and not record.outranks(existing):
            return False
        self.cache[key] = record
        self._dirty = True
        return True

    def seed(self, key: str, record: RatingRecord) -> bool:
        """Store a rating found as a by-product of identity resolution"""
        changed = self.put(key, record)
        if changed:
            self._seeded.add(key)
        return changed

    def was_seeded(self, key: str) -> bool:
        return key in self._seeded

    def mark_settled(self, key: str):
        """Enrichment finished for key; later lookups are plain cache hits"""
        self._seeded.discard(key)

    @property
    def dirty(self) -> bool:
        return self._dirty

    def save_if_dirty(self) -> bool:
        """
        Flush to disk when entries were added since the last flush

        Save failures are logged, not raised: the in-memory cache stays
        valid for this process and the file catches up on the next flush.
        """
        self._seeded.clear()
        if not self._dirty:
            return False
        try:
            self._save_cache()
        except CacheIOError as e:
            logger.error(str(e))
            return False
        self._dirty = False
        return True

    def clear(self, predicate=None) -> int:
        """Drop all entries, or those for which predicate(key, record) is true"""
        if predicate is None:
            removed = len(self.cache)
            self.cache = {}
        else:
            doomed = [k for k, r in self.cache.items() if predicate(k, r)]
            for key in doomed:
                del self.cache[key]
            removed = len(doomed)
        if removed:
            self._dirty = True
        return removed

    def get_cache_stats(self) -> Dict:
        """Get cache performance statistics"""
        total = self.cache_hits + self.cache_misses
        hit_rate = (self.cache_hits / total * 100) if total > 0 else 0

        return {
            'hits': self.cache_hits,
            'misses': self.cache_misses,
            'total_queries': total,
            'hit_rate': hit_rate,
            'cache_size': len(self.cache)
        }
