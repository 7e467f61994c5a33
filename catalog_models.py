"""
Catalog Models - records shared by every site adapter

CatalogItem / ChapterEntry / PageRef are what callers see, whatever the
upstream site looks like. Filter types describe the facets a search accepts.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union


class MangaStatus(Enum):
    UNKNOWN = 0
    ONGOING = 1
    COMPLETED = 2


@dataclass
class CatalogItem:
    """One catalog entry. `url` is relative to the site (no scheme/host)."""
    url: str
    title: str
    thumbnail_url: Optional[str] = None
    author: Optional[str] = None
    artist: Optional[str] = None
    genres: List[str] = field(default_factory=list)
    status: MangaStatus = MangaStatus.UNKNOWN
    description: Optional[str] = None


@dataclass
class ChapterEntry:
    url: str
    name: str
    date_upload: int = 0  # epoch millis, 0 = unknown
    chapter_number: Optional[float] = None


@dataclass(frozen=True)
class PageRef:
    index: int
    image_url: str


@dataclass(frozen=True)
class ListingPage:
    items: Tuple[CatalogItem, ...]
    has_next_page: bool

    @classmethod
    def empty(cls) -> 'ListingPage':
        return cls(items=(), has_next_page=False)


def dedupe_by_url(items: Sequence[CatalogItem]) -> List[CatalogItem]:
    """Keep the first item for each url, preserving order"""
    seen = set()
    unique = []
    for item in items:
        if item.url in seen:
            continue
        seen.add(item.url)
        unique.append(item)
    return unique


# === Filters ===

class TriState(Enum):
    IGNORED = 0
    INCLUDED = 1
    EXCLUDED = 2


@dataclass
class TriStateOption:
    name: str
    id: str
    state: TriState = TriState.IGNORED


@dataclass
class TriStateGroup:
    """
    A group of tri-state choices.

    `include_key` is used for INCLUDED options. `exclude_key` is used for
    EXCLUDED ones; when it is None the group has no exclude concept and both
    states encode under `include_key`.
    """
    title: str
    include_key: str
    options: List[TriStateOption]
    exclude_key: Optional[str] = None

    def with_states(self, states: Dict[str, TriState]) -> 'TriStateGroup':
        """Copy of the group with the given option ids set to new states"""
        options = []
        for option in self.options:
            state = states.get(option.id, option.state)
            options.append(replace(option, state=state))
        return replace(self, options=options)


@dataclass
class SortGroup:
    title: str
    options: List[Tuple[str, str]]  # (label, upstream token)
    index: int = 0
    ascending: bool = False
    direction_key: str = 'dir'
    sort_key: str = 'sort'


FilterGroup = Union[TriStateGroup, SortGroup]


@dataclass
class FilterSpec:
    groups: List[FilterGroup] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.groups
