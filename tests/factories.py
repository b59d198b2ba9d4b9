"""Test data factories."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from research_cache.core.cache.manager import CacheManager

COMPLETIONS_URL = "https://api.perplexity.ai/chat/completions"


def create_completion_payload(
    content: str = "Obsidian and Notion both ship AI assistants.",
    model: str = "sonar",
    prompt_tokens: int = 1000,
    completion_tokens: int = 500,
    **usage_extra: int,
) -> dict[str, Any]:
    return {
        "id": "pplx-test-0001",
        "model": model,
        "created": 1_750_000_000,
        "object": "chat.completion",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
            **usage_extra,
        },
        "citations": ["https://example.com/notes"],
    }


def entry_files(directory: Path) -> list[Path]:
    """All entry files in a cache directory (everything but stats.json)."""
    return sorted(p for p in directory.glob("*.json") if p.name != "stats.json")


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def read_entry(cache: CacheManager, query: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    from research_cache.core.cache.keys import compute_fingerprint

    return read_json(cache.directory / f"{compute_fingerprint(query, params)}.json")
