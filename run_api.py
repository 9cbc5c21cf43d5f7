"""
Run the Diet Recipe Recommender REST API.

Usage:
    python run_api.py

Environment variables (all optional):
    LLM_PROVIDER        "openai", "groq", or "ollama" (controls ALL LLM components)
    LLM_MODEL_OPENAI    Model name when LLM_PROVIDER=openai (default: gpt-4.1-mini)
    LLM_MODEL_GROQ      Model name when LLM_PROVIDER=groq (default: llama-3.3-70b-versatile)
    LLM_MODEL_OLLAMA    Model name when LLM_PROVIDER=ollama (default: llama3.2)
    LLM_FALLBACK_MODELS Comma-separated generator model chain (default: active model)
    OPENAI_API_KEY      Required when LLM_PROVIDER=openai
    GROQ_API_KEY        Required when LLM_PROVIDER=groq
    DB_PATH             SQLite database file path (default: recipes.db)
    OLLAMA_BASE_URL     Ollama server URL (default: http://localhost:11434/)
    LOG_LEVEL           Root log level (default: INFO)
"""

import logging
import os
import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
