#!/usr/bin/env python3
"""
Release label parser - raw listing labels → (title, year)

Labels come in scene-release form ("The.Movie.Name.2024.1080p.WEB") or as
plain headings ("The Movie Name 2024 WEB-DL Report"). Everything after the
first year token is release metadata and never part of the title.
"""

import re
from typing import Optional, Tuple

from releasefeed.constants import (
    YEAR_TOKEN, BOILERPLATE_PHRASES, NAVIGATION_WORDS, MIN_TITLE_LENGTH,
)
from releasefeed.models import ParsedRelease


class ReleaseParser:
    """Parse release labels into ParsedRelease records"""

    def _extract_year(self, label: str) -> Optional[Tuple[str, str]]:
        """Return (year, text before year) for the first year token, or None"""
        match = YEAR_TOKEN.search(label)
        if not match:
            return None
        return match.group(0), label[:match.start()]

    def _clean_title(self, title: str) -> str:
        """Clean title cut from a release label"""
        # Scene separators
        title = title.replace('.', ' ').replace('_', ' ')
        title = ' '.join(title.split())

        # Closed [...] and (...) groups: release groups, AKA titles, sources
        title = re.sub(r'\s*\[[^\]]*\]', ' ', title)
        title = re.sub(r'\s*\([^)]*\)', ' ', title)

        # Open fragments left when the year sat inside a bracket: "Name (" / "Name ["
        title = re.sub(r'\s*\([^)]*$', '', title)
        title = re.sub(r'\s*\[[^\]]*$', '', title)

        for phrase in BOILERPLATE_PHRASES:
            title = re.sub(phrase, '', title, flags=re.IGNORECASE)

        return ' '.join(title.split()).strip()

    def parse(self, raw_label: str) -> ParsedRelease:
        """
        Extract title and year from a raw label

        A label with several year-like tokens uses the first one; titles
        that legitimately contain such a number ("Blade Runner 2049 2017")
        are cut short. Known limitation.
        """
        year_result = self._extract_year(raw_label)
        if year_result:
            year, before = year_result
            return ParsedRelease(title=self._clean_title(before), year=year)

        return ParsedRelease(title=self._clean_title(raw_label), year=None)

    def is_valid(self, parsed: ParsedRelease) -> bool:
        """False for titles too short to query or that are site navigation"""
        if not parsed.title or len(parsed.title) < MIN_TITLE_LENGTH:
            return False
        if any(word in parsed.title for word in NAVIGATION_WORDS):
            return False
        return True


_default_parser = ReleaseParser()


def normalize(raw_label: str) -> ParsedRelease:
    """Module-level shortcut for ReleaseParser().parse()"""
    return _default_parser.parse(raw_label)


def is_valid(parsed: ParsedRelease) -> bool:
    return _default_parser.is_valid(parsed)
