"""
Semantic retrieval: embed the query, then ask the vector index for the
nearest travel-note chunks.
"""

import logging
from typing import Any, List, Mapping, Optional, Protocol, Sequence

from langchain_core.embeddings import Embeddings
from pydantic import ValidationError

from travel_companion.exceptions import RetrievalFailure
from travel_companion.models import RetrievedSnippet

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3


class VectorIndex(Protocol):
    """Nearest-neighbour search over stored chunks."""

    async def search(self, vector: Sequence[float], k: int) -> List[Mapping[str, Any]]:
        """Return rows shaped like ``{"content", "metadata": {"source"}, "similarity"}``."""
        ...


class SemanticRetriever:
    """
    Wraps the embedding provider and the vector index.

    Both calls run sequentially and are never retried; any failure is
    reported as a ``RetrievalFailure`` with the provider's message kept.
    """

    def __init__(self, embeddings: Embeddings, index: VectorIndex, top_k: int = DEFAULT_TOP_K):
        self.embeddings = embeddings
        self.index = index
        self.top_k = top_k

    async def retrieve(self, query: str, k: Optional[int] = None) -> List[RetrievedSnippet]:
        """
        Fetch the top-k snippets for a query.

        Args:
            query: Non-empty user query
            k: Number of rows to request (defaults to ``top_k``)

        Returns:
            Snippets in the order the index returned them (may be empty)

        Raises:
            RetrievalFailure: On embedding, search, or row validation failure
        """
        if k is None:
            k = self.top_k
        if not query or not query.strip():
            raise RetrievalFailure("Cannot retrieve context for an empty query")

        logger.info("🧭 Generating query vector...")
        try:
            vector = await self.embeddings.aembed_query(query)
        except Exception as e:
            raise RetrievalFailure(f"Failed to embed query: {e}") from e
        if not vector:
            raise RetrievalFailure("Embedding provider returned an empty vector")
        logger.info(f"   Query vector generated (dim={len(vector)})")

        try:
            rows = await self.index.search(vector, k)
        except Exception as e:
            raise RetrievalFailure(f"Failed to match documents: {e}") from e

        if not rows:
            logger.info("📭 No RAG results found in the vector index")
            return []

        snippets = [to_snippet(row) for row in rows]
        logger.info(f"📊 Retrieved {len(snippets)} snippets")
        return snippets


def to_snippet(row: Mapping[str, Any]) -> RetrievedSnippet:
    """
    Validate one vector-store row.

    Raises:
        RetrievalFailure: If the row is missing content, source or score
    """
    try:
        metadata = row.get("metadata") or {}
        return RetrievedSnippet(
            source_label=metadata["source"],
            text=row["content"],
            similarity_score=row["similarity"],
        )
    except (AttributeError, KeyError, TypeError, ValidationError) as e:
        raise RetrievalFailure(f"Malformed vector row: {e!r}") from e
