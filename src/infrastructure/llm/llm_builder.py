"""
infrastructure.llm.llm_builder - Centralized LLM construction.

Single source of truth for building LLM instances for the recipe generator
and the cooking assistant. The provider is controlled by LLM_PROVIDER.

Supported providers:
    - "openai"  → langchain_openai.ChatOpenAI
    - "groq"    → langchain_groq.ChatGroq
    - "ollama"  → langchain_ollama.ChatOllama / OllamaLLM
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from langchain_core.language_models import BaseChatModel, BaseLLM

from infrastructure.config import Settings

logger = logging.getLogger(__name__)


def build_llm(
    settings: Settings,
    model: Optional[str] = None,
    *,
    temperature: float = 0.7,
    max_tokens: Optional[int] = None,
    chat_model: bool = True,
) -> Union[BaseChatModel, BaseLLM]:
    """Build an LLM instance for the configured provider.

    Args:
        settings: Provider, credentials and base URLs.
        model: Model name; defaults to the provider's active model.
        temperature: Sampling temperature.
        max_tokens: Maximum output tokens (provider default when None).
        chat_model: When False and provider="ollama", use the completion
                    model OllamaLLM instead of ChatOllama.

    Returns:
        A configured LangChain LLM instance.

    Raises:
        ValueError: If the provider is unknown or required credentials are missing.
    """
    provider = settings.llm_provider.lower().strip()
    model = model or settings.active_llm_model

    if provider == "openai":
        from langchain_openai import ChatOpenAI

        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER='openai'")

        kwargs: Dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "api_key": settings.openai_api_key,
            # Retries are handled by the callers' fallback chains
            "max_retries": 0,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        logger.info("Building OpenAI LLM (model=%s)", model)
        return ChatOpenAI(**kwargs)

    elif provider == "groq":
        from langchain_groq import ChatGroq

        if not settings.groq_api_key:
            raise ValueError("GROQ_API_KEY is required when LLM_PROVIDER='groq'")

        kwargs = {
            "model": model,
            "temperature": temperature,
            "api_key": settings.groq_api_key,
            "max_retries": 0,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        logger.info("Building Groq LLM (model=%s)", model)
        return ChatGroq(**kwargs)

    elif provider == "ollama":
        kwargs = {
            "model": model,
            "temperature": temperature,
            "base_url": settings.ollama_base_url,
        }
        if max_tokens is not None:
            kwargs["num_predict"] = max_tokens

        if chat_model:
            from langchain_ollama import ChatOllama

            logger.info("Building ChatOllama (model=%s)", model)
            return ChatOllama(**kwargs)

        from langchain_ollama import OllamaLLM

        logger.info("Building OllamaLLM (model=%s)", model)
        return OllamaLLM(**kwargs)

    else:
        raise ValueError(
            f"Unsupported LLM_PROVIDER: '{provider}'. "
            "Must be 'openai', 'groq', or 'ollama'."
        )


def is_rate_limited(exc: BaseException) -> bool:
    """Whether a provider error is a rate-limit / quota failure worth retrying.

    Provider SDKs disagree on exception types, so this checks the HTTP status
    carried on the exception (or its response), the class name, and the message.
    """
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    response = getattr(exc, "response", None)
    if status is None and response is not None:
        status = getattr(response, "status_code", None)
    if status == 429:
        return True
    if "ratelimit" in type(exc).__name__.lower():
        return True
    message = str(exc).lower()
    return any(token in message for token in ("rate limit", "rate_limit", "429", "quota", "resource exhausted"))
