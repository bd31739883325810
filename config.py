"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all router settings: model names, the inference server URL,
  the Tavily key, timeouts and the bind address. Values are read once at
  process start and never change while the server is running.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so API keys stay out of code).
  - Exposes FRONT_MODEL, BACK_MODEL, VISION_MODEL, OLLAMA_BASE_URL, TAVILY_API_KEY.
  - Defines timeouts for the generate call (minutes) and the search call (seconds).
  - Builds a frozen RouterSettings object that the app passes into every service,
    so services never read os.environ themselves.

USAGE:
  from config import load_settings
  settings = load_settings()
"""

import os
import logging
from dataclasses import dataclass
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
# Used to warn about unparseable numeric settings.
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
load_dotenv()


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name, "") or "").strip() or default


def _env_number(name: str, default, cast=float):
    """
    Read a numeric env var. Empty or invalid values fall back to the default
    (with a warning) instead of stopping the server at import time.
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Invalid value for %s=%r, using default %s", name, raw, default)
        return default


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


# ============================================================================
# MODEL CONFIGURATION
# ============================================================================
# FRONT_MODEL: small/fast model for simple prompts.
# BACK_MODEL: larger model for complex prompts and every search-augmented prompt.
# VISION_MODEL: optional; pulled by the installer but never dispatched to here.

FRONT_MODEL = _env_str("FRONT_MODEL", "llama3:8b")
BACK_MODEL = _env_str("BACK_MODEL", "qwen2.5:14b-instruct")
VISION_MODEL = _env_str("VISION_MODEL")

# The one model name clients see in /v1/models. Every request is addressed to it.
ROUTER_MODEL_ID = _env_str("ROUTER_MODEL_ID", "router-escalate")
SERVICE_NAME = "router-escalate"

# Optional system prompt used when the request carries no system message.
ROUTER_SYSTEM_PROMPT = _env_str("ROUTER_SYSTEM_PROMPT")

# ============================================================================
# INFERENCE SERVER (OLLAMA)
# ============================================================================
# Generation on the back model can take minutes, hence the long default timeout.

OLLAMA_BASE_URL = _env_str("OLLAMA_BASE_URL", "http://127.0.0.1:11434").rstrip("/")
GENERATE_TIMEOUT = _env_number("GENERATE_TIMEOUT", 300.0)

# ============================================================================
# TAVILY API CONFIGURATION
# ============================================================================
# Tavily is the web search provider for search-routed prompts.
# The installer historically wrote TAVILY_KEY, so it is accepted as a fallback.
# Leaving both empty disables search; prompts still reach the back model.

TAVILY_API_KEY = _env_str("TAVILY_API_KEY") or _env_str("TAVILY_KEY")
SEARCH_TIMEOUT = _env_number("SEARCH_TIMEOUT", 10.0)
# Never more than 3 results go into the prompt.
SEARCH_MAX_RESULTS = max(1, min(3, _env_number("SEARCH_MAX_RESULTS", 3, int)))

# ============================================================================
# SERVER
# ============================================================================

ROUTER_HOST = _env_str("ROUTER_HOST", "0.0.0.0")
ROUTER_PORT = _env_number("ROUTER_PORT", 1338, int)
ROUTER_RELOAD = _env_flag("ROUTER_RELOAD")
LOG_LEVEL = _env_str("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class RouterSettings:
    """
    Immutable snapshot of the router configuration.

    Built once at startup and handed to the classifier, search and Ollama services.
    Tests construct their own instance instead of touching the environment.
    """
    front_model: str = "llama3:8b"
    back_model: str = "qwen2.5:14b-instruct"
    vision_model: str = ""
    ollama_base_url: str = "http://127.0.0.1:11434"
    tavily_api_key: str = ""
    router_model_id: str = "router-escalate"
    system_prompt: str = ""
    generate_timeout: float = 300.0
    search_timeout: float = 10.0
    search_max_results: int = 3

    @property
    def search_enabled(self) -> bool:
        return bool(self.tavily_api_key)


def load_settings() -> RouterSettings:
    """Build RouterSettings from the module-level values read out of the environment."""
    return RouterSettings(
        front_model=FRONT_MODEL,
        back_model=BACK_MODEL,
        vision_model=VISION_MODEL,
        ollama_base_url=OLLAMA_BASE_URL,
        tavily_api_key=TAVILY_API_KEY,
        router_model_id=ROUTER_MODEL_ID,
        system_prompt=ROUTER_SYSTEM_PROMPT,
        generate_timeout=GENERATE_TIMEOUT,
        search_timeout=SEARCH_TIMEOUT,
        search_max_results=SEARCH_MAX_RESULTS,
    )
