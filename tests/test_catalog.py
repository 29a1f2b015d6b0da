#!/usr/bin/env python3
"""
Test suite for releasefeed/catalog.py — catalog read contract and persistence
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from releasefeed.catalog import (
    CatalogContext, catalog_page, load_catalog, status_meta, write_catalog,
)
from releasefeed.constants import STATUS_ENTRY_ID, STATUS_INITIALIZING
from releasefeed.models import CanonicalIdentity, CatalogEntry, RatingKind, RatingRecord


def _entry(n: int) -> CatalogEntry:
    identity = CanonicalIdentity(id=f"tt{n:07d}", display_name=f"Film {n}", release_year='2024')
    return CatalogEntry(identity=identity, origin_label=f"Film {n} (2024)")


class TestCatalogPage:

    def test_empty_catalog_serves_status_entry(self):
        context = CatalogContext()
        page = catalog_page(context)

        assert len(page) == 1
        assert page[0]['id'] == STATUS_ENTRY_ID
        assert page[0]['name'] == f"Status: {STATUS_INITIALIZING}"

    def test_status_entry_follows_current_status(self):
        context = CatalogContext()
        context.set_status('Processing 42 items...')
        assert catalog_page(context)[0]['name'] == 'Status: Processing 42 items...'

    def test_offset_and_limit(self):
        context = CatalogContext()
        context.publish([_entry(n) for n in range(10)])

        page = catalog_page(context, offset=3, limit=4)
        assert [m['id'] for m in page] == ['tt0000003', 'tt0000004', 'tt0000005', 'tt0000006']

    def test_default_limit_is_one_hundred(self):
        context = CatalogContext()
        context.publish([_entry(n) for n in range(150)])

        assert len(catalog_page(context)) == 100
        assert len(catalog_page(context, offset=100)) == 50

    def test_offset_past_end_is_empty(self):
        context = CatalogContext()
        context.publish([_entry(1)])
        assert catalog_page(context, offset=5) == []

    def test_negative_offset_treated_as_zero(self):
        context = CatalogContext()
        context.publish([_entry(1), _entry(2)])
        assert catalog_page(context, offset=-3)[0]['id'] == 'tt0000001'

    def test_empty_context_is_truthy(self):
        context = CatalogContext()
        assert len(context) == 0
        assert context

    def test_publish_replaces_whole_list(self):
        context = CatalogContext()
        context.publish([_entry(1), _entry(2)])
        context.publish([_entry(3)])

        assert [m['id'] for m in context.metas] == ['tt0000003']
        assert len(context) == 1


class TestEntryRendering:

    def test_matched_entry(self):
        entry = CatalogEntry(
            identity=CanonicalIdentity(id='tt28607951', display_name='Anora', release_year='2024'),
            origin_label='Anora (2024) [4K]',
            rating=RatingRecord(RatingKind.PRIMARY_CRITIC, '93%'),
        )
        meta = entry.to_meta()

        assert meta['type'] == 'movie'
        assert meta['releaseInfo'] == '2024'
        assert meta['poster'] == 'https://images.metahub.space/poster/medium/tt28607951/img'
        assert meta['description'] == 'Release: Anora (2024) [4K]\nMatched: Anora\nCritics: 93%'

    def test_matched_entry_keeps_service_poster(self):
        entry = CatalogEntry(
            identity=CanonicalIdentity(id='tt1', display_name='X', poster_url='https://img.example/x.jpg'),
            origin_label='X 2024',
        )
        assert entry.to_meta()['poster'] == 'https://img.example/x.jpg'

    def test_synthetic_entry(self):
        entry = CatalogEntry(
            identity=CanonicalIdentity(id='wyw_ObscureFilm_2024', display_name='Obscure Film',
                                       release_year='2024'),
            origin_label='Obscure Film (2024)',
            synthetic=True,
        )
        meta = entry.to_meta()

        assert meta['poster'] is None
        assert meta['description'] == 'Unmatched Release: Obscure Film (2024)'

    def test_unknown_year_placeholder(self):
        entry = CatalogEntry(identity=CanonicalIdentity(id='tt2', display_name='Y'), origin_label='Y')
        assert entry.to_meta()['releaseInfo'] == '????'


class TestPersistence:

    def test_write_then_load(self, tmp_path):
        path = tmp_path / 'output' / 'catalog.json'
        metas = [_entry(1).to_meta(), _entry(2).to_meta()]

        write_catalog(metas, path)

        assert load_catalog(path) == metas
        assert not path.with_suffix('.json.tmp').exists()

    def test_load_missing_file(self, tmp_path):
        assert load_catalog(tmp_path / 'nope.json') == []

    def test_load_corrupt_file(self, tmp_path):
        path = tmp_path / 'catalog.json'
        path.write_text('[{"id": "tt1"')
        assert load_catalog(path) == []

    def test_load_wrong_shape(self, tmp_path):
        path = tmp_path / 'catalog.json'
        path.write_text(json.dumps({'id': 'tt1'}))
        assert load_catalog(path) == []

    def test_load_skips_entries_without_id(self, tmp_path):
        path = tmp_path / 'catalog.json'
        path.write_text(json.dumps([{'id': 'tt1', 'name': 'A'}, {'name': 'B'}, 'junk']))
        assert load_catalog(path) == [{'id': 'tt1', 'name': 'A'}]

    def test_reloaded_catalog_served_before_first_run(self, tmp_path):
        context = CatalogContext()
        context.publish_metas([_entry(7).to_meta()])
        assert catalog_page(context)[0]['id'] == 'tt0000007'

    def test_status_meta_shape(self):
        meta = status_meta('Ready')
        assert set(meta) == {'id', 'type', 'name', 'description', 'poster'}
