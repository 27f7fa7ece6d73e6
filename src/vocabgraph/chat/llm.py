from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import httpx


class LLMError(RuntimeError):
    pass


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


class OllamaChatClient:
    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        timeout_s: float = 120.0,
        options: dict[str, Any] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout_s = float(timeout_s)
        self.options = dict(options or {})
        self._transport = transport

    def chat(self, messages: list[ChatMessage], *, format: str | None = None) -> str:
        url = f"{self.base_url}/api/chat"
        payload: dict[str, Any] = {
            "model": self.model,
            "stream": False,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if format:
            payload["format"] = format
        if self.options:
            payload["options"] = self.options

        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                r = client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise LLMError(
                f"Failed to connect to Ollama at {self.base_url}. Is it running? ({e})"
            ) from e

        if r.status_code != 200:
            raise LLMError(f"Ollama error {r.status_code}: {r.text}")

        try:
            data = r.json()
        except ValueError as e:
            raise LLMError(f"Ollama returned a non-JSON response: {r.text[:200]}") from e
        if not isinstance(data, dict):
            raise LLMError(f"Unexpected Ollama response: {data}")

        msg = data.get("message")
        if not isinstance(msg, dict):
            msg = {}
        content = msg.get("content")
        if not isinstance(content, str):
            raise LLMError(f"Unexpected Ollama response: {data}")
        return content

    def chat_json(self, messages: list[ChatMessage]) -> dict[str, Any]:
        """Chat in Ollama's JSON mode and decode the reply object."""
        content = self.chat(messages, format="json")
        try:
            parsed = json.loads(content or "{}")
        except json.JSONDecodeError as e:
            raise LLMError(f"Model did not return valid JSON: {content[:200]}") from e
        if not isinstance(parsed, dict):
            raise LLMError(f"Expected a JSON object, got: {type(parsed).__name__}")
        return parsed
