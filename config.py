"""
Configuration settings for script generation.
Backend defaults come from .env; they can be overridden via command line arguments
or AIOptions passed to build_script.generate().

.env variables:
  AI_TYPE            - default backend: OpenAIGen, GoogleAIGen, AnthropicAIGen, OllamaAIGen (default: OllamaAIGen)
  OPENAI_MODEL       - OpenAI chat model (default: gpt-4o-mini)
  OPENAI_ENDPOINT    - OpenAI-compatible base URL (default: https://api.openai.com/v1/)
  GOOGLE_AI_MODEL    - Gemini model (default: gemini-1.5-flash)
  ANTHROPIC_MODEL    - Anthropic model (default: claude-3-5-sonnet-20240620)
  ANTHROPIC_ENDPOINT - Anthropic API base URL (default: https://api.anthropic.com/v1)
  ANTHROPIC_VERSION  - anthropic-version header (default: 2023-06-01)
  OLLAMA_MODEL       - Ollama model (default: llama3.2)
  OLLAMA_HOST        - Ollama server URL (default: http://localhost:11434)
  AI_MAX_TOKENS      - max tokens per reply for backends that take it (default: 1024)
  REQUEST_TIMEOUT    - seconds before an HTTP call gives up (default: unset, wait forever)
  DEBUG              - "1"/"true" to log every streamed chunk
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def _env_float(name: str) -> float | None:
    value = os.getenv(name)
    if not value:
        return None
    return float(value)


@dataclass(frozen=True)
class BackendConfig:
    """Per-backend defaults: display name, model, endpoint, credential env vars, static model list."""

    display_name: str
    default_model: str
    default_endpoint: str | None = None
    # First entry is the documented one; the rest are accepted aliases.
    api_key_env: tuple[str, ...] = ()
    # Empty when the backend can be queried live.
    static_models: tuple[str, ...] = ()

    @property
    def requires_api_key(self) -> bool:
        return bool(self.api_key_env)

    def resolve_api_key(self, api_key: str | None = None) -> str | None:
        """Explicit key wins; otherwise the first non-empty env var."""
        if api_key:
            return api_key
        for name in self.api_key_env:
            value = os.getenv(name)
            if value:
                return value
        return None


OPENAI = BackendConfig(
    display_name="OpenAI",
    default_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
    default_endpoint=os.getenv("OPENAI_ENDPOINT", "https://api.openai.com/v1/"),
    api_key_env=("OPENAI_API_KEY",),
)

GOOGLE_AI = BackendConfig(
    display_name="Google AI",
    default_model=os.getenv("GOOGLE_AI_MODEL", "gemini-1.5-flash"),
    default_endpoint="https://generativelanguage.googleapis.com/v1beta",
    api_key_env=("GOOGLE_AI_API_KEY", "GOOGLE_API_KEY", "GEMINI_API_KEY"),
    static_models=("gemini-1.5-flash", "gemini-1.5-pro", "gemini-1.0-pro", "aqa"),
)

ANTHROPIC = BackendConfig(
    display_name="Anthropic",
    default_model=os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20240620"),
    default_endpoint=os.getenv("ANTHROPIC_ENDPOINT", "https://api.anthropic.com/v1"),
    api_key_env=("ANTHROPIC_API_KEY",),
    static_models=(
        "claude-3-5-sonnet-20240620",
        "claude-3-opus-20240229",
        "claude-3-sonnet-20240229",
        "claude-3-haiku-20240307",
    ),
)

OLLAMA = BackendConfig(
    display_name="Ollama",
    default_model=os.getenv("OLLAMA_MODEL", "llama3.2"),
    default_endpoint=os.getenv("OLLAMA_HOST", "http://localhost:11434"),
)


@dataclass
class AIOptions:
    """Per-call overrides. None means use the backend default."""

    model: str | None = None
    endpoint: str | None = None


@dataclass
class Config:
    # Which backend to use when none is given
    ai_type: str = "OllamaAIGen"
    max_tokens: int = 1024              # Reply cap for OpenAI / Anthropic
    anthropic_version: str = "2023-06-01"
    request_timeout: float | None = None  # None: block until the backend answers
    debug: bool = False                 # Log every streamed chunk

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            ai_type=os.getenv("AI_TYPE", "OllamaAIGen"),
            max_tokens=int(os.getenv("AI_MAX_TOKENS", "1024")),
            anthropic_version=os.getenv("ANTHROPIC_VERSION", "2023-06-01"),
            request_timeout=_env_float("REQUEST_TIMEOUT"),
            debug=_env_flag("DEBUG"),
        )


config = Config.from_env()
