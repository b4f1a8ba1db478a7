"""
Advanced search over "missing value" datasets.

A search narrows one dataset epoch by entity ids (``qNumber``) and by
language codes found in the ``languages`` column.
"""

import re
from typing import List

from .data_access import Query, select, table_name
from .errors import InvalidSearchInputError
from .models import SearchFilter

ENTITY_ID_RE = re.compile(r"^[Qq][0-9]+$")
ALL_LANGUAGES = "all"


def parse_items(raw: str) -> List[str]:
    """
    Extract entity ids from a comma-separated item list.

    >>> parse_items("Q42, q7,notanid, Q")
    ['Q42', 'q7']
    """
    tokens = (token.strip() for token in raw.split(","))
    return [token for token in tokens if ENTITY_ID_RE.match(token)]


def _like_pattern(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def build_search_query(search: SearchFilter) -> Query:
    """
    Compose the query for an advanced search.

    Item ids are matched exactly (case as given). A row matches the language
    filter when its ``languages`` value contains any of the requested codes.
    Both filters are ANDed; either one is skipped when it has nothing to filter.

    Raises:
        InvalidSearchInputError: items were given but none is an entity id
    """
    items = parse_items(search.items)
    if search.items and not items:
        raise InvalidSearchInputError()

    where = []
    params = []

    if items:
        placeholders = ",".join("?" * len(items))
        where.append(f'"qNumber" IN ({placeholders})')
        params.extend(items)

    languages = search.languages
    if languages and ALL_LANGUAGES not in languages:
        likes = ["languages LIKE ? ESCAPE '\\'"] * len(languages)
        where.append(f"({' OR '.join(likes)})")
        params.extend(_like_pattern(lang) for lang in languages)

    return select(
        search.dsname,
        table_name(search.dsname, search.epoch),
        where=where,
        params=params
    )
