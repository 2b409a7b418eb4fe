"""
Clients for external AI services: Gemini chat, embeddings and the vector index.
"""

from .chat_model import build_messages, initialize_llm
from .embedding_client import initialize_embeddings
from .vector_index import ChromaVectorIndex, load_vector_index

__all__ = [
    'initialize_llm',
    'build_messages',
    'initialize_embeddings',
    'ChromaVectorIndex',
    'load_vector_index',
]
