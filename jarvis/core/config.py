"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Completion service (Ollama-compatible /api/generate)
LLAMA_API_URL: str = (
    os.getenv("LLAMA_API_URL", "http://127.0.0.1:11434/api/generate").strip()
    or "http://127.0.0.1:11434/api/generate"
)
LLAMA_MODEL: str = os.getenv("LLAMA_MODEL", "mistral-openorca").strip() or "mistral-openorca"

# Deterministic generation: same prompt, same answer
LLM_NUM_PREDICT: int = 200
LLM_TEMPERATURE: float = 0.0
LLM_TOP_K: int = 20

# Hugging Face (embeddings)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_EMBED_MODEL: str = (
    os.getenv("HF_EMBED_MODEL", "sentence-transformers/all-MiniLM-L6-v2").strip()
    or "sentence-transformers/all-MiniLM-L6-v2"
)
EMBED_BATCH_SIZE: int = 32

# API timeouts (seconds)
EMBED_API_TIMEOUT: float = 30.0
LLM_API_TIMEOUT: float = 60.0
TOOLS_HTTP_TIMEOUT: float = 15.0

# Document indexed at startup (PDF path or URL). Empty means no document.
DOCUMENT_PATH: str = os.getenv("DOCUMENT_PATH", "").strip()

# Indexing and retrieval (tuning these affects retrieval quality)
WINDOW_SIZE: int = 3
SEARCH_TOP_K: int = 3
RELEVANCE_THRESHOLD: float = 0.4

# Agent
HISTORY_MAX_TURNS: int = 3
MAX_ACTION_RETRIES: int = 1
DEFAULT_SESSION_ID: str = "default"

# Currency exchange action (no key required)
EXCHANGE_API_URL: str = "https://open.er-api.com/v6/latest"
