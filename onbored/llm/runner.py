"""HTTP adapters for the optional summarization providers (Ollama / OpenAI)."""

from __future__ import annotations

import http.client
import json
import os
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence
from urllib.error import HTTPError
from urllib.request import Request, urlopen

PROVIDERS = ("ollama", "openai")


@dataclass
class LLMRequest:
    """Represents one completion request sent to a provider."""

    provider: str
    prompt: str
    model: str
    base_url: str
    api_key: Optional[str]
    temperature: Optional[float]
    max_tokens: Optional[int]
    request_timeout: float


class LLMRunner:
    """Sends prompts to Ollama or the OpenAI chat API and returns the text reply.

    Every failure surfaces as ``RuntimeError``.
    """

    DEFAULT_MODELS = {"ollama": "qwen2.5-coder:7b", "openai": "gpt-4o-mini"}
    DEFAULT_BASE_URLS = {
        "ollama": "http://localhost:11434",
        "openai": "https://api.openai.com/v1",
    }
    DEFAULT_MAX_TOKENS = {"ollama": None, "openai": 2000}
    ENV_MODEL_KEYS = ("ONBORED_LLM_MODEL",)
    ENV_BASE_URL_KEYS = ("ONBORED_LLM_BASE_URL",)
    ENV_API_KEY_KEYS = ("ONBORED_LLM_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        provider: str = "ollama",
        *,
        model: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        request_timeout: Optional[float] = 120.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        normalized = (provider or "").strip().lower()
        if normalized not in PROVIDERS:
            raise ValueError(f"Unknown AI provider: {provider}")
        self.provider = normalized
        self.model = model or self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODELS[normalized]
        self.base_url = self._normalize_base_url(
            base_url
            or self._first_env_value(self.ENV_BASE_URL_KEYS)
            or self.DEFAULT_BASE_URLS[normalized]
        )
        self.api_key = api_key or self._first_env_value(self.ENV_API_KEY_KEYS)
        self.temperature = temperature
        self.max_tokens = max_tokens if max_tokens is not None else self.DEFAULT_MAX_TOKENS[normalized]
        self.request_timeout = request_timeout or 120.0
        self._runner = runner or self._http_runner
        self._uses_http = runner is None

    def run(self, prompt: str) -> str:
        """Send the prompt and return the response text."""
        if self.provider == "openai" and not self.api_key and self._uses_http:
            raise RuntimeError("OPENAI_API_KEY environment variable not set")
        request = LLMRequest(
            provider=self.provider,
            prompt=prompt,
            model=self.model,
            base_url=self.base_url,
            api_key=self.api_key,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    @staticmethod
    def _normalize_base_url(url: str) -> str:
        return url.rstrip("/")

    @staticmethod
    def _http_runner(request: LLMRequest) -> str:
        if request.provider == "ollama":
            endpoint = f"{request.base_url}/api/generate"
            payload: Dict[str, object] = {
                "model": request.model,
                "prompt": request.prompt,
                "stream": False,
            }
            options: Dict[str, object] = {}
            if request.temperature is not None:
                options["temperature"] = request.temperature
            if request.max_tokens is not None:
                options["num_predict"] = request.max_tokens
            if options:
                payload["options"] = options
        else:
            endpoint = f"{request.base_url}/chat/completions"
            payload = {
                "model": request.model,
                "messages": [{"role": "user", "content": request.prompt}],
            }
            if request.temperature is not None:
                payload["temperature"] = request.temperature
            if request.max_tokens is not None:
                payload["max_tokens"] = request.max_tokens

        headers = {"Content-Type": "application/json"}
        if request.api_key and request.provider == "openai":
            headers["Authorization"] = f"Bearer {request.api_key}"
        http_request = Request(
            endpoint, data=json.dumps(payload).encode("utf-8"), headers=headers, method="POST"
        )

        try:
            with urlopen(http_request, timeout=request.request_timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on runtime
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise RuntimeError(f"{request.provider} request failed with status {exc.code}: {message}") from exc
        except (OSError, http.client.HTTPException) as exc:
            reason = getattr(exc, "reason", None) or exc
            raise RuntimeError(f"{request.provider} request failed: {reason}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RuntimeError(f"{request.provider} returned invalid JSON") from exc

        content = LLMRunner._extract_content(request.provider, response_payload)
        if not content:
            raise RuntimeError(f"{request.provider} returned an empty response")
        return content.strip()

    @staticmethod
    def _extract_content(provider: str, payload: object) -> str:
        if not isinstance(payload, dict):
            return ""
        if provider == "ollama":
            text = payload.get("response")
            return text if isinstance(text, str) else ""
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        text = first.get("text")
        if isinstance(text, str):
            return text
        return ""

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


__all__ = ["LLMRequest", "LLMRunner", "PROVIDERS"]
