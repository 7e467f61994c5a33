"""
Filter Encoder - turns a FilterSpec into search query parameters
"""

import logging
from typing import List, Optional, Tuple

from catalog_models import FilterSpec, SortGroup, TriState, TriStateGroup

logger = logging.getLogger(__name__)

QueryParams = List[Tuple[str, str]]


def encode_tristate(group: TriStateGroup) -> QueryParams:
    params = []
    for option in group.options:
        if option.state == TriState.IGNORED:
            continue
        if option.state == TriState.EXCLUDED and group.exclude_key:
            params.append((group.exclude_key, option.id))
        else:
            params.append((group.include_key, option.id))
    return params


def encode_sort(group: SortGroup) -> QueryParams:
    # An index outside the vocabulary is a caller bug; let IndexError surface
    _, token = group.options[group.index]
    return [
        (group.direction_key, 'asc' if group.ascending else 'desc'),
        (group.sort_key, token),
    ]


def encode_filters(spec: Optional[FilterSpec], default: FilterSpec) -> QueryParams:
    """
    Encode `spec` in group order, then option order within each group.

    An empty or missing spec means "use the site defaults", not "no filters".
    """
    if spec is None or spec.is_empty():
        spec = default

    params: QueryParams = []
    for group in spec.groups:
        if isinstance(group, SortGroup):
            params.extend(encode_sort(group))
        elif isinstance(group, TriStateGroup):
            params.extend(encode_tristate(group))
        else:
            raise TypeError(f"Unsupported filter group: {type(group).__name__}")

    logger.debug(f"Encoded {len(spec.groups)} filter groups into {len(params)} params")
    return params
