"""
Renders structured and semantic retrieval results into one context block.

The layout is fixed because the block is spliced into the persona prompt by
plain substring replacement.
"""

from typing import Optional, Sequence

from travel_companion.models import CityRecord, RetrievedSnippet

NO_CITY_MATCH = "No specific city found in my database."
NO_SNIPPETS = "No relevant travel notes found."
SNIPPET_DELIMITER = "\n---\n"


def render_city(city: Optional[CityRecord]) -> str:
    if city is None:
        return NO_CITY_MATCH
    spots = ", ".join(place.name for place in city.notable_places)
    return (
        f"Found Data: {city.name}, STATE:{city.region}, "
        f"HOTEL:{city.average_lodging_cost}, FOOD:{city.average_food_cost}, "
        f"SPOTS:{spots}"
    )


def render_snippets(snippets: Sequence[RetrievedSnippet]) -> str:
    if not snippets:
        return NO_SNIPPETS
    return SNIPPET_DELIMITER.join(
        f"[from {snippet.source_label}]: {snippet.text}" for snippet in snippets
    )


def fuse_context(
    best: Optional[CityRecord], snippets: Sequence[RetrievedSnippet]
) -> str:
    """
    Build the fused context for one request.

    Args:
        best: Best structured match, or None
        snippets: Semantic hits in backend order

    Returns:
        Two-section text block, never empty
    """
    return (
        f"Structured Data: {render_city(best)}\n"
        f"RAG Context: {render_snippets(snippets)}"
    )
