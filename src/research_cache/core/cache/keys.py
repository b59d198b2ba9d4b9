"""
Cache key derivation.

Key: SHA-256 of the canonical JSON form of ``{"query": ..., "params": ...}``.
Canonical form sorts map keys recursively and drops ``None`` values, so
parameter sets that differ only in ordering (map keys, set members) or in
explicitly unset options share one fingerprint.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Mapping


def canonicalize(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            str(k): canonicalize(v)
            for k, v in sorted(value.items(), key=lambda item: str(item[0]))
            if v is not None
        }
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    if isinstance(value, (set, frozenset)):
        # Iteration order follows the hash seed; order members by their JSON form
        return sorted((canonicalize(item) for item in value), key=_dumps)
    return value


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def compute_fingerprint(query: str, params: Mapping[str, Any] | None = None) -> str:
    """Return the 64-char hex fingerprint for a (query, params) pair."""
    payload = {"query": query, "params": canonicalize(params or {})}
    return hashlib.sha256(_dumps(payload).encode("utf-8")).hexdigest()
