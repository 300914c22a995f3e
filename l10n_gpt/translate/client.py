"""
Completion-service client.

Request:  {model, messages: [{role: "user", content}], temperature}
Response: {"error": {"message": ...}} or {"choices": [{"message": {"content": ...}}]}

CompletionClient is the seam the orchestrator depends on. The only
exception a client may raise is TransientTransportTimeout; every other
failure comes back as an error payload.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from l10n_gpt.errors import TransientTransportTimeout

logger = logging.getLogger(__name__)


@dataclass
class CompletionRequest:
    """One chat-completion request."""
    model: str
    messages: list[dict[str, str]] = field(default_factory=list)
    temperature: float = 0.5

    @classmethod
    def from_prompt(cls, prompt: str, model: str, temperature: float) -> "CompletionRequest":
        return cls(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
        )

    @property
    def prompt(self) -> str:
        return "\n".join(m["content"] for m in self.messages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": self.messages,
            "temperature": self.temperature,
        }


def error_payload(message: str) -> dict[str, Any]:
    return {"error": {"message": message}}


def content_payload(content: Optional[str]) -> dict[str, Any]:
    return {"choices": [{"message": {"content": content}}]}


class CompletionClient(ABC):
    """Abstract completion service."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name for logs (e.g. 'openai-gpt-4o-mini')."""

    @abstractmethod
    def complete(self, request: CompletionRequest) -> dict[str, Any]:
        """Send one request and return the response payload.

        Raises:
            TransientTransportTimeout: the call timed out
        """


class OpenAICompletionClient(CompletionClient):
    """OpenAI (or OpenAI-compatible) chat completions.

    Usage:
        client = OpenAICompletionClient(api_key="sk-...", timeout=30)
        response = client.complete(CompletionRequest.from_prompt("Hi", "gpt-4o-mini", 0.5))
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key or os.getenv("GPT_API_KEY") or os.getenv("OPENAI_API_KEY")
        self.base_url = base_url
        self.timeout = timeout
        self._client = None

    @property
    def name(self) -> str:
        return f"openai{'@' + self.base_url if self.base_url else ''}"

    def _get_client(self):
        """Lazy initialization of the OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            if not self.api_key:
                raise ValueError(
                    "API key required. Set the GPT_API_KEY environment variable "
                    "or pass api_key."
                )

            kwargs = {
                "api_key": self.api_key,
                "timeout": self.timeout,
                # Retries are handled by RetryPolicy
                "max_retries": 0,
            }
            if self.base_url:
                kwargs["base_url"] = self.base_url

            self._client = OpenAI(**kwargs)

        return self._client

    def complete(self, request: CompletionRequest) -> dict[str, Any]:
        import openai

        client = self._get_client()
        try:
            response = client.chat.completions.create(**request.to_dict())
        except openai.APITimeoutError as e:
            raise TransientTransportTimeout(f"request timed out after {self.timeout}s") from e
        except openai.APIStatusError as e:
            logger.debug(f"{self.name}: HTTP {e.status_code}")
            return error_payload(_status_error_message(e))
        except openai.APIError as e:
            return error_payload(str(e))

        return response.model_dump()


def _status_error_message(error) -> str:
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict) and inner.get("message"):
            return inner["message"]
    return str(error)
