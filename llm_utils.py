"""
Backend adapters for conversational script generation.
Every adapter runs one turn of a conversation and hands back the reply as a single string,
whatever the wire shape underneath:

  OpenAIGen      - BatchAdapter: OpenAI chat completions, whole history resent each turn
  GoogleAIGen    - SessionStreamAdapter: Gemini chat session (google-genai), streamed replies
  OllamaAIGen    - StatelessStreamAdapter: local Ollama chat, whole history resent, streamed replies
  AnthropicAIGen - RawHTTPAdapter: Anthropic Messages API over plain HTTP (requests)

Credentials: explicit api_key, else the backend's env var (OPENAI_API_KEY, GOOGLE_AI_API_KEY,
ANTHROPIC_API_KEY). Ollama needs none. Missing credentials raise ConfigError before any I/O.
"""

import json
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Protocol

import requests

import config as config_module
from build_scripts_utils import clean_json_response
from config import AIOptions, BackendConfig, Config
from conversation import ConversationHistory
from utils import LogSink

# Chunk-log label and JSON key of the classification turn's answer.
CLASSIFICATION_KEY = "type"


class GenerationError(RuntimeError):
    """Base class for failures that abort a generate() call."""


class ConfigError(GenerationError, ValueError):
    """Missing credential or unknown backend. Raised before any network I/O."""


class ProviderError(GenerationError):
    """The backend could not be reached or answered with an error."""


class AIGenType(str, Enum):
    OpenAIGen = "OpenAIGen"
    GoogleAIGen = "GoogleAIGen"
    AnthropicAIGen = "AnthropicAIGen"
    OllamaAIGen = "OllamaAIGen"


_AI_TYPE_ALIASES = {
    "openai": AIGenType.OpenAIGen,
    "google": AIGenType.GoogleAIGen,
    "gemini": AIGenType.GoogleAIGen,
    "anthropic": AIGenType.AnthropicAIGen,
    "claude": AIGenType.AnthropicAIGen,
    "ollama": AIGenType.OllamaAIGen,
}


def resolve_ai_type(value: "AIGenType | str") -> AIGenType:
    """Accept an AIGenType, its name (any case), or a short alias like 'openai'."""
    if isinstance(value, AIGenType):
        return value
    wanted = str(value or "").strip().lower()
    for ai_type in AIGenType:
        if ai_type.value.lower() == wanted:
            return ai_type
    if wanted in _AI_TYPE_ALIASES:
        return _AI_TYPE_ALIASES[wanted]
    raise ConfigError(
        f"Invalid AI type: '{value}'. Valid AI types: {', '.join(t.value for t in AIGenType)}"
    )


class BackendAdapter(Protocol):
    """What the engine needs from a backend. One instance per generate() call."""

    backend: BackendConfig
    model: str
    endpoint: str | None
    # True when the classification turn is forced to a JSON object that must be unwrapped.
    structured_classification: bool

    def run_turn(
        self,
        history: ConversationHistory,
        prompt: str,
        *,
        classification: bool = False,
        key: str = CLASSIFICATION_KEY,
    ) -> str:
        ...

    def unwrap_classification(self, text: str) -> str:
        ...

    def list_models(self) -> list[str]:
        ...


def drain_stream(
    stream: Iterable[Any],
    text_of: Callable[[Any], str | None],
    log: LogSink,
    key: str,
) -> str:
    """Consume a finite chunk stream to exhaustion and return the concatenated text."""
    parts: list[str] = []
    for chunk in stream:
        piece = text_of(chunk) or ""
        parts.append(piece)
        log.log(f"AI Response chunk for '{key}' -> {piece.strip()}", verbose_only=True)
    return "".join(parts)


def _get(obj: Any, name: str) -> Any:
    """Read a field from an SDK object or its dict form."""
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _wrap_error(backend: BackendConfig, exc: Exception) -> ProviderError:
    return ProviderError(f"Error while calling {backend.display_name} API: {exc}")


def _resolve_options(backend: BackendConfig, options: AIOptions | None) -> tuple[str, str | None]:
    opts = options or AIOptions()
    return opts.model or backend.default_model, opts.endpoint or backend.default_endpoint


class BatchAdapter:
    """OpenAI (or any OpenAI-compatible endpoint) chat completions, one request per turn."""

    structured_classification = True

    def __init__(
        self,
        backend: BackendConfig,
        log: LogSink,
        api_key: str | None = None,
        options: AIOptions | None = None,
        settings: Config | None = None,
    ):
        self.backend = backend
        self.log = log
        self.api_key = api_key
        self.model, self.endpoint = _resolve_options(backend, options)
        self.settings = settings or config_module.config
        self._client = None

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI
            client_kw: dict[str, Any] = {"api_key": self.api_key, "base_url": self.endpoint}
            if self.settings.request_timeout is not None:
                client_kw["timeout"] = self.settings.request_timeout
            self._client = OpenAI(**client_kw)
        return self._client

    def run_turn(
        self,
        history: ConversationHistory,
        prompt: str,
        *,
        classification: bool = False,
        key: str = CLASSIFICATION_KEY,
    ) -> str:
        history.append("user", prompt)
        req: dict[str, Any] = {
            "model": self.model,
            "messages": history.as_ordered_list(),
            "max_tokens": self.settings.max_tokens,
        }
        if classification:
            req["response_format"] = {"type": "json_object"}
        try:
            response = self._get_client().chat.completions.create(**req)
        except Exception as e:
            raise _wrap_error(self.backend, e) from e
        try:
            text = response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise ProviderError(
                f"Unexpected response from {self.backend.display_name} API: no message in reply"
            ) from e
        history.append("assistant", text)
        return text

    def unwrap_classification(self, text: str) -> str:
        """JSON mode answers {"type": "..."}; anything else is passed through for matching."""
        try:
            data = json.loads(clean_json_response(text))
        except json.JSONDecodeError:
            return text.strip()
        value = data.get(CLASSIFICATION_KEY) if isinstance(data, dict) else None
        return value.strip() if isinstance(value, str) else text.strip()

    def list_models(self) -> list[str]:
        try:
            response = self._get_client().models.list()
        except Exception as e:
            raise _wrap_error(self.backend, e) from e
        return [model.id for model in response.data]


class SessionStreamAdapter:
    """
    Google Gemini chat session. The session is created on the first turn, seeded with the
    history so far (the system prompt), and keeps its own context afterwards; each turn sends
    only the new prompt. The local history still mirrors the transcript.
    """

    structured_classification = False

    def __init__(
        self,
        backend: BackendConfig,
        log: LogSink,
        api_key: str | None = None,
        options: AIOptions | None = None,
        settings: Config | None = None,
    ):
        self.backend = backend
        self.log = log
        self.api_key = api_key
        # The SDK picks its own endpoint; options.endpoint is ignored here.
        self.model = (options.model if options else None) or backend.default_model
        self.endpoint = backend.default_endpoint
        self.settings = settings or config_module.config
        self._chat = None

    def _get_chat(self, history: ConversationHistory):
        if self._chat is None:
            from google import genai
            from google.genai import types
            client = genai.Client(api_key=self.api_key)
            seed = [
                types.Content(
                    role="user" if m.role == "user" else "model",
                    parts=[types.Part(text=m.content)],
                )
                for m in history
            ]
            self._chat = client.chats.create(model=self.model, history=seed)
        return self._chat

    def run_turn(
        self,
        history: ConversationHistory,
        prompt: str,
        *,
        classification: bool = False,
        key: str = CLASSIFICATION_KEY,
    ) -> str:
        try:
            chat = self._get_chat(history)
            history.append("user", prompt)
            text = drain_stream(chat.send_message_stream(prompt), lambda part: part.text, self.log, key)
        except Exception as e:
            raise _wrap_error(self.backend, e) from e
        history.append("assistant", text)
        return text

    def unwrap_classification(self, text: str) -> str:
        return text.strip()

    def list_models(self) -> list[str]:
        return list(self.backend.static_models)


class StatelessStreamAdapter:
    """Local Ollama chat. Full history each turn; field turns request JSON output."""

    structured_classification = False

    def __init__(
        self,
        backend: BackendConfig,
        log: LogSink,
        api_key: str | None = None,
        options: AIOptions | None = None,
        settings: Config | None = None,
    ):
        self.backend = backend
        self.log = log
        self.model, self.endpoint = _resolve_options(backend, options)
        self.settings = settings or config_module.config
        self._client = None

    def _get_client(self):
        if self._client is None:
            import ollama
            self._client = ollama.Client(host=self.endpoint)
        return self._client

    @staticmethod
    def _chunk_text(part: Any) -> str:
        return _get(_get(part, "message"), "content") or ""

    def run_turn(
        self,
        history: ConversationHistory,
        prompt: str,
        *,
        classification: bool = False,
        key: str = CLASSIFICATION_KEY,
    ) -> str:
        history.append("user", prompt)
        req: dict[str, Any] = {
            "model": self.model,
            "messages": history.as_ordered_list(),
            "stream": True,
        }
        if not classification:
            req["format"] = "json"
        try:
            text = drain_stream(self._get_client().chat(**req), self._chunk_text, self.log, key)
        except Exception as e:
            raise _wrap_error(self.backend, e) from e
        history.append("assistant", text)
        return text

    def unwrap_classification(self, text: str) -> str:
        return text.strip()

    def list_models(self) -> list[str]:
        try:
            response = self._get_client().list()
        except Exception as e:
            raise _wrap_error(self.backend, e) from e
        # Newer clients expose `.model`, older ones a `name` key.
        return [_get(entry, "model") or _get(entry, "name") for entry in _get(response, "models") or []]


class RawHTTPAdapter:
    """Anthropic Messages API called directly; the request body carries the whole history."""

    structured_classification = False

    def __init__(
        self,
        backend: BackendConfig,
        log: LogSink,
        api_key: str | None = None,
        options: AIOptions | None = None,
        settings: Config | None = None,
    ):
        self.backend = backend
        self.log = log
        self.api_key = api_key
        self.model, self.endpoint = _resolve_options(backend, options)
        self.settings = settings or config_module.config

    @property
    def messages_url(self) -> str:
        return f"{self.endpoint.rstrip('/')}/messages"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key or "",
            "anthropic-version": self.settings.anthropic_version,
        }

    def run_turn(
        self,
        history: ConversationHistory,
        prompt: str,
        *,
        classification: bool = False,
        key: str = CLASSIFICATION_KEY,
    ) -> str:
        history.append("user", prompt)
        data = {
            "model": self.model,
            "max_tokens": self.settings.max_tokens,
            "messages": history.as_ordered_list(),
        }
        try:
            response = requests.post(
                self.messages_url,
                headers=self._headers(),
                json=data,
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as e:
            raise _wrap_error(self.backend, e) from e

        if not response.ok:
            raise ProviderError(
                f"Failed to call {self.backend.display_name} API: {response.status_code} {response.reason}"
            )

        try:
            text = response.json()["content"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                f"Unexpected response from {self.backend.display_name} API: {response.text[:500]}"
            ) from e
        history.append("assistant", text)
        return text

    def unwrap_classification(self, text: str) -> str:
        return text.strip()

    def list_models(self) -> list[str]:
        return list(self.backend.static_models)


# AIGenType -> (defaults, adapter class)
BACKENDS: Mapping[AIGenType, tuple[BackendConfig, type]] = {
    AIGenType.OpenAIGen: (config_module.OPENAI, BatchAdapter),
    AIGenType.GoogleAIGen: (config_module.GOOGLE_AI, SessionStreamAdapter),
    AIGenType.AnthropicAIGen: (config_module.ANTHROPIC, RawHTTPAdapter),
    AIGenType.OllamaAIGen: (config_module.OLLAMA, StatelessStreamAdapter),
}


def require_api_key(backend: BackendConfig, api_key: str | None = None) -> str | None:
    """Resolve the credential for a backend, failing fast when one is needed and absent."""
    resolved = backend.resolve_api_key(api_key)
    if backend.requires_api_key and not resolved:
        raise ConfigError(
            f"{backend.display_name} API key is not set! Set via '--api-key' flag or define "
            f"'{backend.api_key_env[0]}' environment variable."
        )
    return resolved


def create_adapter(
    ai_type: "AIGenType | str",
    log: LogSink,
    api_key: str | None = None,
    options: AIOptions | None = None,
    settings: Config | None = None,
) -> BackendAdapter:
    """Build a fresh adapter for one call. Raises ConfigError for unknown backends or missing keys."""
    backend, adapter_cls = BACKENDS[resolve_ai_type(ai_type)]
    resolved_key = require_api_key(backend, api_key)
    return adapter_cls(backend, log, api_key=resolved_key, options=options, settings=settings)


def get_text_model_display(adapter: BackendAdapter) -> str:
    """Short string for logging: backend / model (e.g. 'OpenAI / gpt-4o-mini')."""
    return f"{adapter.backend.display_name} / {adapter.model}"
