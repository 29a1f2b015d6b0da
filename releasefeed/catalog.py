#!/usr/bin/env python3
"""
Published catalog state and the read contract used by the catalog server

CatalogContext is the one piece of process-wide state: the pipeline writes
it through publish()/set_status(), the server only reads it through
catalog_page(). Nothing else holds the catalog.
"""

import json
import logging
import threading
from pathlib import Path
from typing import List, Dict, Optional

from releasefeed.constants import (
    STATUS_INITIALIZING, CATALOG_TYPE, DEFAULT_PAGE_LIMIT,
    STATUS_ENTRY_ID, STATUS_ENTRY_POSTER, STATUS_ENTRY_DESCRIPTION,
)
from releasefeed.models import CatalogEntry

logger = logging.getLogger(__name__)

Meta = Dict[str, Optional[str]]


class CatalogContext:
    """Published catalog, run status, and the run-in-progress guard"""

    def __init__(self):
        self._entries: List[CatalogEntry] = []
        self._metas: List[Meta] = []
        self._status = STATUS_INITIALIZING
        self._publish_lock = threading.Lock()
        self.run_lock = threading.Lock()

    @property
    def status(self) -> str:
        return self._status

    def set_status(self, status: str):
        self._status = status
        logger.debug(f"Status: {status}")

    @property
    def entries(self) -> List[CatalogEntry]:
        return list(self._entries)

    @property
    def metas(self) -> List[Meta]:
        return list(self._metas)

    def publish(self, entries: List[CatalogEntry]):
        """Swap in a complete catalog; readers never see a partial list"""
        metas = [entry.to_meta() for entry in entries]
        with self._publish_lock:
            self._entries = list(entries)
            self._metas = metas

    def publish_metas(self, metas: List[Meta]):
        """Swap in an already-rendered catalog (e.g. reloaded from disk)"""
        with self._publish_lock:
            self._entries = []
            self._metas = list(metas)

    def __len__(self) -> int:
        return len(self._metas)

    def __bool__(self) -> bool:
        # An empty catalog is still a live context
        return True


def status_meta(status: str) -> Meta:
    """Placeholder entry served while the catalog is empty"""
    return {
        'id': STATUS_ENTRY_ID,
        'type': CATALOG_TYPE,
        'name': f"Status: {status}",
        'description': STATUS_ENTRY_DESCRIPTION,
        'poster': STATUS_ENTRY_POSTER,
    }


def catalog_page(context: CatalogContext, offset: int = 0,
                 limit: int = DEFAULT_PAGE_LIMIT) -> List[Meta]:
    """
    One page of the published catalog

    An empty catalog yields a single status entry so clients can show why
    there is nothing yet.
    """
    metas = context.metas
    if not metas:
        return [status_meta(context.status)]
    offset = max(int(offset or 0), 0)
    return metas[offset:offset + limit]


def write_catalog(metas: List[Meta], path: Path):
    """Persist the rendered catalog for an out-of-process server"""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + '.tmp')
    with open(tmp_path, 'w', encoding='utf-8') as f:
        json.dump(metas, f, indent=2, ensure_ascii=False)
    tmp_path.replace(path)
    logger.info(f"Wrote catalog ({len(metas)} entries) to {path}")


def load_catalog(path: Path) -> List[Meta]:
    """Previously written catalog; missing or unreadable file yields an empty list"""
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load catalog from {path}: {e}. Starting empty.")
        return []
    if not isinstance(data, list):
        logger.warning(f"Ignoring catalog at {path}: expected a list, got {type(data).__name__}")
        return []
    return [entry for entry in data if isinstance(entry, dict) and entry.get('id')]
