"""
Structured lookup over the in-memory city dataset.
"""

import re
from typing import List, Optional, Sequence

from travel_companion.models import CityRecord

_TOKEN_SPLIT = re.compile(r"\W+")


def match_cities(query: str, records: Sequence[CityRecord]) -> List[CityRecord]:
    """
    Find the cities a query talks about.

    Tier 1 returns every record whose city or region name appears in the
    query as a substring, in dataset order. Only when tier 1 is empty does
    tier 2 compare the query's word tokens against city names.

    Args:
        query: Raw user query
        records: City dataset (never modified)

    Returns:
        Matching records; callers use the first element as the best guess
    """
    q = (query or "").lower()
    if not q.strip():
        return []

    hits = [
        record
        for record in records
        if _contains(q, record.name) or _contains(q, record.region)
    ]
    if hits:
        return hits

    tokens = {token for token in _TOKEN_SPLIT.split(q) if token}
    return [record for record in records if record.name.lower() in tokens]


def best_city(query: str, records: Sequence[CityRecord]) -> Optional[CityRecord]:
    """Return the first match for ``query`` or None."""
    hits = match_cities(query, records)
    return hits[0] if hits else None


def _contains(query: str, name: str) -> bool:
    # An empty name would match every query.
    needle = name.lower()
    return bool(needle) and needle in query
