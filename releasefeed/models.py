#!/usr/bin/env python3
"""
Data containers passed between pipeline stages
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict

from releasefeed.constants import (
    CATALOG_TYPE, POSTER_URL_TEMPLATE, UNKNOWN_YEAR,
)


@dataclass
class RawListing:
    """Candidate label scraped from one listing page"""
    raw_label: str
    source_url: Optional[str] = None


@dataclass(frozen=True)
class ParsedRelease:
    """Title and year extracted from a raw label"""
    title: str
    year: Optional[str] = None


@dataclass(frozen=True)
class CanonicalIdentity:
    """Catalog identity of a real-world title"""
    id: str
    display_name: str
    release_year: Optional[str] = None
    poster_url: Optional[str] = None
    synopsis: Optional[str] = None


class RatingKind(Enum):
    """Rating source kinds, highest priority first"""
    PRIMARY_CRITIC = 'primary_critic'
    SECONDARY_CRITIC = 'secondary_critic'
    AUDIENCE_SCORE = 'audience_score'

    @property
    def priority(self) -> int:
        """Higher number wins"""
        return {
            RatingKind.PRIMARY_CRITIC: 3,
            RatingKind.SECONDARY_CRITIC: 2,
            RatingKind.AUDIENCE_SCORE: 1,
        }[self]


@dataclass(frozen=True)
class RatingRecord:
    """Best-available rating for an identity"""
    source_kind: RatingKind
    value: str

    def outranks(self, other: Optional['RatingRecord']) -> bool:
        if other is None:
            return True
        return self.source_kind.priority > other.source_kind.priority

    def to_dict(self) -> Dict[str, str]:
        return {'source_kind': self.source_kind.value, 'value': self.value}

    @classmethod
    def from_dict(cls, data: Dict) -> 'RatingRecord':
        return cls(source_kind=RatingKind(data['source_kind']), value=str(data['value']))

    def label(self) -> str:
        names = {
            RatingKind.PRIMARY_CRITIC: 'Critics',
            RatingKind.SECONDARY_CRITIC: 'Metascore',
            RatingKind.AUDIENCE_SCORE: 'Audience',
        }
        return f"{names[self.source_kind]}: {self.value}"


@dataclass
class CatalogEntry:
    """One published catalog record"""
    identity: CanonicalIdentity
    origin_label: str
    rating: Optional[RatingRecord] = None
    synthetic: bool = False

    @property
    def id(self) -> str:
        return self.identity.id

    def to_meta(self) -> Dict[str, Optional[str]]:
        """Render the wire shape served by the catalog server"""
        if self.synthetic:
            description = f"Unmatched Release: {self.origin_label}"
            poster = None
        else:
            description = (
                f"Release: {self.origin_label}\n"
                f"Matched: {self.identity.display_name}"
            )
            poster = self.identity.poster_url or POSTER_URL_TEMPLATE.format(id=self.identity.id)

        if self.rating:
            description += f"\n{self.rating.label()}"

        return {
            'id': self.identity.id,
            'type': CATALOG_TYPE,
            'name': self.identity.display_name,
            'poster': poster,
            'description': description,
            'releaseInfo': self.identity.release_year or UNKNOWN_YEAR,
        }
