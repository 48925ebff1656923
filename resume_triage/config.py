"""Environment configuration for completion backends, storage and the worker pool."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROVIDERS = ("groq", "openai", "gemini", "ollama")


def get_completion_config() -> dict:
    """Select the completion backend from LLM_PROVIDER. Raises ValueError for unknown providers."""
    provider = (os.environ.get("LLM_PROVIDER") or "groq").lower()
    temperature = float(os.environ.get("LLM_TEMPERATURE", "0.2"))
    timeout = float(os.environ.get("COMPLETION_TIMEOUT_SECONDS", "60"))

    if provider == "groq":
        config = {
            "model": os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile"),
            "api_key": os.environ.get("GROQ_API_KEY"),
        }
    elif provider == "openai":
        config = {
            "model": os.environ.get("OPENAI_MODEL", "gpt-4o"),
            "api_key": os.environ.get("OPENAI_API_KEY"),
            "base_url": os.environ.get("OPENAI_BASE_URL"),
        }
    elif provider == "gemini":
        config = {
            "model": os.environ.get("GEMINI_MODEL", "gemini-2.5-flash"),
            "api_key": os.environ.get("GEMINI_API_KEY"),
        }
    elif provider == "ollama":
        config = {
            "model": os.environ.get("OLLAMA_MODEL", "llama3"),
            "base_url": os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434"),
        }
    else:
        raise ValueError(f"Unsupported AI provider: {provider}")

    config.update(provider=provider, temperature=temperature, timeout=timeout)
    return config


def get_storage_config() -> dict:
    """Document store backend (local|s3) and the artifact store location."""
    return {
        "document_store": (os.environ.get("DOCUMENT_STORE") or "local").lower(),
        "document_dir": os.environ.get("DOCUMENT_DIR", str(PROJECT_ROOT / "uploads")),
        "s3_bucket": os.environ.get("AWS_S3_BUCKET", ""),
        "aws_region": os.environ.get("AWS_REGION", "us-east-1"),
        "data_dir": os.environ.get("DATA_DIR", str(PROJECT_ROOT / "artifacts")),
    }


def get_queue_concurrency() -> int:
    return max(1, int(os.environ.get("QUEUE_CONCURRENCY", "2")))
