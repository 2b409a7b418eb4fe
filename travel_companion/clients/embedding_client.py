"""
Embedding provider factory.

Google's embedding model is the default so that query vectors match the
ones written at ingestion time; a local HuggingFace model is available for
development.
"""

import logging
from typing import Optional

from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)

LOCAL_MODEL = "sentence-transformers/all-MiniLM-L6-v2"


def initialize_embeddings(
    provider: str = "google",
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
) -> Embeddings:
    """
    Create the embedding client.

    Args:
        provider: ``"google"`` or ``"huggingface"``
        model_name: Model identifier for the provider
        api_key: Google API key (google provider only)

    Returns:
        LangChain Embeddings instance

    Raises:
        ValueError: If the provider is unknown or the key is missing
    """
    if provider == "google":
        if not api_key:
            raise ValueError("api_key required for google embeddings")
        from langchain_google_genai import GoogleGenerativeAIEmbeddings

        logger.info(f"🔗 Initializing Gemini embedder: {model_name}")
        return GoogleGenerativeAIEmbeddings(
            model=model_name or "models/embedding-001",
            google_api_key=api_key,
            task_type="semantic_similarity",
        )

    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        logger.info(f"🤖 Loading local embedding model: {model_name or LOCAL_MODEL}")
        return HuggingFaceEmbeddings(
            model_name=model_name or LOCAL_MODEL,
            model_kwargs={'device': 'cpu'},
            encode_kwargs={'normalize_embeddings': True}
        )

    raise ValueError(f"Unknown embedding provider: {provider}")
