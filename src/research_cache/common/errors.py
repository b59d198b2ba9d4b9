"""
Unified error handling.

The cache core never raises to its callers; these types are raised only
while loading configuration or calling Perplexity.
"""

from __future__ import annotations

from typing import Any


class ResearchCacheError(Exception):
    """Base exception for all research cache errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(ResearchCacheError):
    """Required configuration is missing or invalid."""


class ProviderError(ResearchCacheError):
    """Upstream call failed; ``details`` carries ``status_code`` and ``retry``."""

    @property
    def status_code(self) -> int | None:
        return self.details.get("status_code")

    @property
    def retryable(self) -> bool:
        return bool(self.details.get("retry", False))
