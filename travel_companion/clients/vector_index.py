"""
Chroma-backed vector index for travel-note chunks.

Rows are produced by the offline ingestion job with ``metadata.source`` set
to the originating file name.
"""

import asyncio
import logging
import math
from typing import Any, Dict, List, Sequence

from langchain_chroma import Chroma
from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; 0.0 when either is all zeros."""
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if norm == 0:
        return 0.0
    return max(-1.0, min(1.0, dot / norm))


class ChromaVectorIndex:
    """Adapts a Chroma collection to the ``VectorIndex`` protocol."""

    def __init__(self, store: Chroma):
        self.store = store

    async def search(self, vector: Sequence[float], k: int) -> List[Dict[str, Any]]:
        if k <= 0:
            return []
        # The Chroma client is synchronous; keep it off the event loop.
        return await asyncio.to_thread(self._query, [float(x) for x in vector], k)

    def _query(self, vector: List[float], k: int) -> List[Dict[str, Any]]:
        # The collection's distance space is fixed by whoever created it, so
        # the score is computed from the stored embeddings instead.
        results = self.store._collection.query(
            query_embeddings=[vector],
            n_results=k,
            include=["documents", "metadatas", "embeddings"],
        )
        documents = results["documents"][0]
        metadatas = results["metadatas"][0]
        embeddings = results["embeddings"][0]

        return [
            {
                "content": document,
                "metadata": dict(metadata or {}),
                "similarity": cosine_similarity(vector, [float(x) for x in embedding]),
            }
            for document, metadata, embedding in zip(documents, metadatas, embeddings)
        ]


def load_vector_index(
    embeddings: Embeddings, persist_directory: str, collection_name: str
) -> ChromaVectorIndex:
    """
    Open a persisted Chroma collection.

    Args:
        embeddings: Embedding model the collection was built with
        persist_directory: Path where ChromaDB was persisted
        collection_name: Collection holding the chunks

    Returns:
        ChromaVectorIndex wrapping the collection
    """
    logger.info(f"📂 Loading vector index '{collection_name}' from {persist_directory}")
    store = Chroma(
        collection_name=collection_name,
        embedding_function=embeddings,
        persist_directory=persist_directory,
        collection_metadata={"hnsw:space": "cosine"},
    )
    return ChromaVectorIndex(store)
