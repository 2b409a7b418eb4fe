"""
Travel Companion RAG engine setup.

Wires the structured dataset, the semantic retriever and the Gemini chat
model into one ResponseStreamer. Everything is built once at startup from
an explicit Config; nothing here reads the environment.
"""

import logging

from config import Config
from travel_companion.clients.chat_model import initialize_llm
from travel_companion.clients.embedding_client import initialize_embeddings
from travel_companion.clients.vector_index import load_vector_index
from travel_companion.rag.dataset_loader import load_travel_data
from travel_companion.rag.retriever import SemanticRetriever
from travel_companion.streaming.session import ResponseStreamer

logger = logging.getLogger(__name__)


def initialize_rag_system(config: Config) -> ResponseStreamer:
    """
    Initialize the complete retrieval + generation pipeline.

    Args:
        config: Application configuration

    Returns:
        ResponseStreamer ready to open chat sessions

    Raises:
        ValueError: If required configuration is missing
    """
    missing = config.validate()
    if missing:
        raise ValueError(f"Missing or invalid configuration: {', '.join(missing)}")

    logger.info("🚀 Initializing travel companion RAG system...")

    cities = load_travel_data(config.travel_data_path)

    embeddings = initialize_embeddings(
        provider=config.embedding_provider,
        model_name=config.embedding_model,
        api_key=config.google_api_key,
    )
    index = load_vector_index(
        embeddings,
        persist_directory=config.chroma_db_path,
        collection_name=config.chroma_collection,
    )
    retriever = SemanticRetriever(embeddings, index, top_k=config.rag_top_k)

    llm = initialize_llm(
        api_key=config.google_api_key,
        model=config.gemini_model,
        temperature=config.llm_temperature,
    )

    logger.info("✅ RAG system ready")
    return ResponseStreamer(cities, retriever, llm, top_k=config.rag_top_k)
