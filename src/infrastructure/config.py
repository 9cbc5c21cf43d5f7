"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment or passed
explicitly (tests build it directly).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the diet recipe recommender.

    No module-level globals: construct via from_env() or pass explicitly in tests.
    """

    # Database
    db_path: str = "recipes.db"
    seed_catalog: bool = True

    # ── Centralized LLM Provider ────────────────────────────────
    # One setting controls the recipe generator and the cooking assistant.
    # Allowed: "openai", "groq", "ollama"
    llm_provider: str = "ollama"

    # Model names: only the one matching llm_provider is used as primary.
    llm_model_ollama: str = "llama3.2"
    llm_model_openai: str = "gpt-4.1-mini"
    llm_model_groq: str = "llama-3.3-70b-versatile"

    # Generator fallback chain, tried in order. Empty → active model only.
    llm_fallback_models: tuple[str, ...] = field(default_factory=tuple)
    llm_max_retries: int = 2
    llm_retry_backoff_seconds: float = 2.0
    llm_max_tokens: int = 4096

    # Cooking assistant chat
    chat_max_attempts: int = 3
    chat_retry_delay_seconds: float = 5.0

    # Connection details
    ollama_base_url: str = "http://localhost:11434/"
    groq_api_key: str = ""
    openai_api_key: str = ""

    # Recommendation gating
    recommendation_min_pool: int = 3
    recommendation_generate_count: int = 5
    recommendation_log_limit: int = 5
    recommendation_response_limit: int = 10

    log_level: str = "INFO"

    @property
    def active_llm_model(self) -> str:
        """Return the model name for the currently active LLM provider."""
        if self.llm_provider == "openai":
            return self.llm_model_openai
        elif self.llm_provider == "groq":
            return self.llm_model_groq
        return self.llm_model_ollama

    @property
    def generator_models(self) -> list[str]:
        """Ordered model chain for recipe generation (no duplicates)."""
        chain = list(self.llm_fallback_models) or [self.active_llm_model]
        return list(dict.fromkeys(chain))

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> Settings:
        """Build Settings from environment variables (and .env, if present)."""
        from dotenv import load_dotenv
        load_dotenv(env_file)

        return cls(
            db_path=os.getenv("DB_PATH", "recipes.db"),
            seed_catalog=_env_bool("SEED_CATALOG", True),

            llm_provider=os.getenv("LLM_PROVIDER", "ollama"),
            llm_model_ollama=os.getenv("LLM_MODEL_OLLAMA", "llama3.2"),
            llm_model_openai=os.getenv("LLM_MODEL_OPENAI", "gpt-4.1-mini"),
            llm_model_groq=os.getenv("LLM_MODEL_GROQ", "llama-3.3-70b-versatile"),
            llm_fallback_models=tuple(
                m.strip() for m in os.getenv("LLM_FALLBACK_MODELS", "").split(",") if m.strip()
            ),
            llm_max_retries=int(os.getenv("LLM_MAX_RETRIES", "2")),
            llm_retry_backoff_seconds=float(os.getenv("LLM_RETRY_BACKOFF_SECONDS", "2.0")),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "4096")),
            chat_max_attempts=int(os.getenv("CHAT_MAX_ATTEMPTS", "3")),
            chat_retry_delay_seconds=float(os.getenv("CHAT_RETRY_DELAY_SECONDS", "5.0")),

            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),

            recommendation_min_pool=int(os.getenv("RECOMMENDATION_MIN_POOL", "3")),
            recommendation_generate_count=int(os.getenv("RECOMMENDATION_GENERATE_COUNT", "5")),
            recommendation_log_limit=int(os.getenv("RECOMMENDATION_LOG_LIMIT", "5")),
            recommendation_response_limit=int(os.getenv("RECOMMENDATION_RESPONSE_LIMIT", "10")),

            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}
