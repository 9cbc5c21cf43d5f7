"""Settings loading and LLM construction."""

import pytest

from infrastructure.config import Settings
from infrastructure.llm.llm_builder import build_llm

_KEYS = [
    "DB_PATH", "LLM_PROVIDER", "LLM_MODEL_GROQ", "LLM_FALLBACK_MODELS",
    "RECOMMENDATION_MIN_POOL", "SEED_CATALOG", "CHAT_RETRY_DELAY_SECONDS",
]


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so values written by load_dotenv are removed at teardown
    for key in _KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


def test_defaults_from_empty_env_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("")

    settings = Settings.from_env(str(env_file))
    assert settings.db_path == "recipes.db"
    assert settings.recommendation_min_pool == 3
    assert settings.recommendation_generate_count == 5
    assert settings.recommendation_response_limit == 10
    assert settings.chat_retry_delay_seconds == 5.0
    assert settings.seed_catalog is True
    assert settings.generator_models == [settings.llm_model_ollama]


def test_env_file_values(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "DB_PATH=/tmp/other.db\n"
        "LLM_PROVIDER=groq\n"
        "LLM_MODEL_GROQ=llama-3.1-8b-instant\n"
        "LLM_FALLBACK_MODELS=llama-3.3-70b-versatile, llama-3.1-8b-instant,llama-3.3-70b-versatile\n"
        "RECOMMENDATION_MIN_POOL=4\n"
        "SEED_CATALOG=no\n"
    )

    settings = Settings.from_env(str(env_file))
    assert settings.db_path == "/tmp/other.db"
    assert settings.active_llm_model == "llama-3.1-8b-instant"
    assert settings.generator_models == ["llama-3.3-70b-versatile", "llama-3.1-8b-instant"]
    assert settings.recommendation_min_pool == 4
    assert settings.seed_catalog is False


def test_build_llm_rejects_unknown_provider():
    with pytest.raises(ValueError):
        build_llm(Settings(llm_provider="bogus"))


def test_build_llm_requires_api_keys():
    with pytest.raises(ValueError):
        build_llm(Settings(llm_provider="openai", openai_api_key=""))
    with pytest.raises(ValueError):
        build_llm(Settings(llm_provider="groq", groq_api_key=""))


def test_build_ollama_models():
    from langchain_ollama import ChatOllama, OllamaLLM

    settings = Settings(llm_provider="ollama", llm_model_ollama="llama3.2")
    assert isinstance(build_llm(settings), ChatOllama)
    assert isinstance(build_llm(settings, chat_model=False, max_tokens=256), OllamaLLM)
