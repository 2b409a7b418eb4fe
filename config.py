"""
Configuration module for the Travel Companion service.
Loads environment variables once at startup into an explicit Config object
that is handed to every component.
"""

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from dotenv import load_dotenv


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    # Gemini
    google_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    llm_temperature: float = 0.7

    # Embeddings + vector index
    embedding_provider: str = "google"
    embedding_model: str = "models/embedding-001"
    chroma_db_path: str = "data/vector_db/travel_notes"
    chroma_collection: str = "documents"
    rag_top_k: int = 3

    # Structured city dataset
    travel_data_path: str = "travelData.json"

    # Chatbot
    chatbot_enabled: bool = True

    # CORS
    frontend_url: Optional[str] = None

    # Identity provider (bearer token verification)
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    auth_enabled: bool = True

    # Rate limiting: 100 requests per 15 minutes per client
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 900

    # Reverse proxies in front of the app whose X-Forwarded-For is trusted
    trusted_proxy_count: int = 0

    # Server
    port: int = 8080
    debug: bool = False
    log_level: str = "INFO"

    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    DEV_ORIGIN = "http://localhost:5173"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a Config from environment variables.

        Args:
            environ: Mapping to read from. When omitted, ``.env`` is loaded
                and the process environment is used.

        Returns:
            Config: Populated configuration
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        return cls(
            google_api_key=environ.get("GOOGLE_API_KEY") or None,
            gemini_model=environ.get("GEMINI_MODEL", cls.gemini_model),
            llm_temperature=float(environ.get("LLM_TEMPERATURE", cls.llm_temperature)),
            embedding_provider=environ.get("EMBEDDING_PROVIDER", cls.embedding_provider).lower(),
            embedding_model=environ.get("EMBEDDING_MODEL", cls.embedding_model),
            chroma_db_path=environ.get("CHROMA_DB_PATH", cls.chroma_db_path),
            chroma_collection=environ.get("CHROMA_COLLECTION", cls.chroma_collection),
            rag_top_k=int(environ.get("RAG_TOP_K", cls.rag_top_k)),
            travel_data_path=environ.get("TRAVEL_DATA_PATH", cls.travel_data_path),
            chatbot_enabled=_env_bool(environ.get("CHATBOT_ENABLED"), cls.chatbot_enabled),
            frontend_url=environ.get("FRONTEND_URL") or None,
            supabase_url=environ.get("SUPABASE_URL") or None,
            supabase_anon_key=environ.get("SUPABASE_ANON_KEY") or None,
            auth_enabled=_env_bool(environ.get("AUTH_ENABLED"), cls.auth_enabled),
            rate_limit_max_requests=int(
                environ.get("RATE_LIMIT_MAX_REQUESTS", cls.rate_limit_max_requests)
            ),
            rate_limit_window_seconds=int(
                environ.get("RATE_LIMIT_WINDOW_SECONDS", cls.rate_limit_window_seconds)
            ),
            trusted_proxy_count=int(
                environ.get("TRUSTED_PROXY_COUNT", cls.trusted_proxy_count)
            ),
            port=int(environ.get("PORT", cls.port)),
            debug=_env_bool(environ.get("DEBUG"), cls.debug),
            log_level=environ.get("LOG_LEVEL", cls.log_level).upper(),
        )

    @property
    def allowed_origins(self) -> List[str]:
        origins = [self.DEV_ORIGIN]
        if self.frontend_url:
            origins.insert(0, self.frontend_url.rstrip("/"))
        return origins

    @property
    def auth_active(self) -> bool:
        """Bearer auth runs only when enabled and the identity provider is configured."""
        return self.auth_enabled and bool(self.supabase_url and self.supabase_anon_key)

    def validate(self) -> List[str]:
        """
        Check that required configuration is present.

        Returns:
            List of missing or invalid variable names (empty when valid)
        """
        required = [
            ("GOOGLE_API_KEY", self.google_api_key),
            ("EMBEDDING_PROVIDER", self.embedding_provider in ("google", "huggingface")),
        ]
        return [name for name, value in required if not value]

    def describe(self) -> List[str]:
        """Safe, secret-free summary lines for startup logging."""
        return [
            f"Gemini Model: {self.gemini_model}",
            f"Embeddings: {self.embedding_provider} ({self.embedding_model})",
            f"Vector DB Path: {self.chroma_db_path} [{self.chroma_collection}]",
            f"Top K: {self.rag_top_k}",
            f"Travel Data: {self.travel_data_path}",
            f"Auth Active: {'✅' if self.auth_active else '❌'}",
            f"API Key Set: {'✅' if self.google_api_key else '❌'}",
        ]
