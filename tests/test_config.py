#!/usr/bin/env python3
"""
Test suite for releasefeed/config.py
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from releasefeed.config import DEFAULT_CONFIG, load_config


def test_defaults_without_file():
    config = load_config(None)
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_file_overrides_defaults(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('max_pages: 3\nomdb_api_key: abc123\n')

    config = load_config(path)

    assert config['max_pages'] == 3
    assert config['omdb_api_key'] == 'abc123'
    assert config['max_items'] == DEFAULT_CONFIG['max_items']


def test_null_values_keep_defaults(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('max_items:\n')
    assert load_config(path)['max_items'] == 300


def test_empty_file(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('')
    assert load_config(path) == DEFAULT_CONFIG


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('- just\n- a list\n')
    with pytest.raises(ValueError):
        load_config(path)
