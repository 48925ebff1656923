"""Completion service backends behind one contract: complete(prompt, system_instruction) -> text."""

import asyncio
import logging
from typing import Protocol

import httpx
from google import genai
from google.genai import types
from groq import AsyncGroq
from openai import AsyncOpenAI

from screening.errors import CompletionFailed

log = logging.getLogger(__name__)


class CompletionService(Protocol):
    async def complete(
        self, prompt: str, system_instruction: str | None = None, json_mode: bool = False
    ) -> str: ...


def _chat_messages(prompt: str, system_instruction: str | None) -> list[dict]:
    messages = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})
    messages.append({"role": "user", "content": prompt})
    return messages


class GroqBackend:
    def __init__(self, config: dict):
        self.client = AsyncGroq(api_key=config["api_key"])
        self.model = config["model"]
        self.temperature = config["temperature"]

    async def complete(self, prompt, system_instruction=None, json_mode=False) -> str:
        kwargs = {
            "model": self.model,
            "messages": _chat_messages(prompt, system_instruction),
            "temperature": self.temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = await self.client.chat.completions.create(**kwargs)
        return (response.choices[0].message.content or "").strip()


class OpenAIBackend:
    def __init__(self, config: dict):
        self.client = AsyncOpenAI(api_key=config["api_key"], base_url=config.get("base_url"))
        self.model = config["model"]
        self.temperature = config["temperature"]

    async def complete(self, prompt, system_instruction=None, json_mode=False) -> str:
        kwargs = {
            "model": self.model,
            "messages": _chat_messages(prompt, system_instruction),
            "temperature": self.temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = await self.client.chat.completions.create(**kwargs)
        return (response.choices[0].message.content or "").strip()


class GeminiBackend:
    def __init__(self, config: dict):
        self.client = genai.Client(api_key=config["api_key"])
        self.model = config["model"]
        self.temperature = config["temperature"]

    async def complete(self, prompt, system_instruction=None, json_mode=False) -> str:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=self.temperature,
                response_mime_type="application/json" if json_mode else "text/plain",
            ),
        )
        return (response.text or "").strip()


class OllamaBackend:
    def __init__(self, config: dict):
        self.base_url = config["base_url"].rstrip("/")
        self.model = config["model"]
        self.temperature = config["temperature"]
        self.timeout = config.get("timeout", 60.0)

    async def complete(self, prompt, system_instruction=None, json_mode=False) -> str:
        payload = {
            "model": self.model,
            "messages": _chat_messages(prompt, system_instruction),
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        if json_mode:
            payload["format"] = "json"
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
            response = await client.post("/api/chat", json=payload)
            response.raise_for_status()
            return (response.json()["message"]["content"] or "").strip()


BACKENDS = {
    "groq": GroqBackend,
    "openai": OpenAIBackend,
    "gemini": GeminiBackend,
    "ollama": OllamaBackend,
}


class BoundedCompletion:
    """
    Wraps any backend with a caller-configured timeout.
    Timeouts and backend errors surface uniformly as CompletionFailed.
    """

    def __init__(self, backend, timeout: float | None = 60.0, name: str = "completion"):
        self.backend = backend
        self.timeout = timeout
        self.name = name

    async def complete(
        self, prompt: str, system_instruction: str | None = None, json_mode: bool = False
    ) -> str:
        try:
            return await asyncio.wait_for(
                self.backend.complete(prompt, system_instruction=system_instruction, json_mode=json_mode),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise CompletionFailed(f"{self.name} timed out after {self.timeout}s") from e
        except CompletionFailed:
            raise
        except Exception as e:
            raise CompletionFailed(f"{self.name} request failed: {e}") from e


def create_completion_client(config: dict) -> BoundedCompletion:
    """Build the configured backend. Raises ValueError if the provider needs a missing API key."""
    provider = config["provider"]
    backend_cls = BACKENDS.get(provider)
    if backend_cls is None:
        raise ValueError(f"Unsupported AI provider: {provider}")
    if provider != "ollama" and not config.get("api_key"):
        raise ValueError(f"{provider.upper()}_API_KEY is required. Set it in .env or the environment.")
    log.info("Completion backend: %s (model=%s, timeout=%ss)", provider, config["model"], config["timeout"])
    return BoundedCompletion(backend_cls(config), timeout=config["timeout"], name=f"{provider}:{config['model']}")
