"""
Retrieval package: structured city matching, semantic retrieval, context
fusion and prompt seeding.
"""

from .dataset_loader import load_travel_data
from .fusion import NO_CITY_MATCH, NO_SNIPPETS, fuse_context
from .matcher import best_city, match_cities
from .prompt import compose_seed
from .retriever import SemanticRetriever

__all__ = [
    'load_travel_data',
    'match_cities',
    'best_city',
    'SemanticRetriever',
    'fuse_context',
    'compose_seed',
    'NO_CITY_MATCH',
    'NO_SNIPPETS',
]
