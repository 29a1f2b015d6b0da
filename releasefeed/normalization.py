#!/usr/bin/env python3
"""
Shared title normalization for identity keys and title matching

The same normalization MUST be used wherever two titles are compared or a
title is turned into a key, otherwise synthetic ids drift between runs and
critic-score matches fail silently.
"""

import difflib
import re
import unicodedata
from typing import Optional

from releasefeed.constants import SYNTHETIC_ID_PREFIX


def normalize_for_lookup(title: str) -> str:
    """
    Normalize title for comparison

    Normalization steps:
    1. Normalize Unicode (decompose accents)
    2. Remove diacritics/accents
    3. Lowercase
    4. Remove punctuation (keep only alphanumeric and spaces)
    5. Collapse whitespace

    Examples:
        >>> normalize_for_lookup("Dr. Strangelove")
        'dr strangelove'

        >>> normalize_for_lookup("À bout de souffle")
        'a bout de souffle'
    """
    title = unicodedata.normalize('NFD', title)
    title = ''.join(c for c in title if unicodedata.category(c) != 'Mn')
    title = title.lower()
    title = re.sub(r'[^\w\s]', '', title)
    title = ' '.join(title.split())
    return title.strip()


def title_similarity(a: str, b: str) -> float:
    """Normalised title similarity using difflib SequenceMatcher."""
    return difflib.SequenceMatcher(
        None, normalize_for_lookup(a), normalize_for_lookup(b)
    ).ratio()


def synthetic_id(title: str, year: Optional[str], prefix: str = SYNTHETIC_ID_PREFIX) -> str:
    """
    Build a deterministic id for a release no service could resolve

    Keyed on the parsed title with whitespace removed, so the same label
    yields the same id on every run.

        >>> synthetic_id("The Movie Name", "2024")
        'wyw_TheMovieName_2024'
    """
    compact = re.sub(r'\s', '', title)
    return f"{prefix}_{compact}_{year or '0000'}"
