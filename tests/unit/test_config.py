"""Tests for settings resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from research_cache.config import LogLevel, Settings, get_settings
from research_cache.schemas.cost import CostTier


@pytest.mark.unit
class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.cache.enabled is True
        assert settings.cache.directory == Path("cache")
        assert settings.cache.ttl_hours == 24
        assert settings.perplexity.default_model == "sonar-reasoning-pro"
        assert settings.perplexity.default_effort == CostTier.MEDIUM
        assert settings.perplexity.api_key == ""

    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESEARCH_CACHE_CACHE__TTL_HOURS", "2")
        monkeypatch.setenv("RESEARCH_CACHE_PERPLEXITY__DEFAULT_EFFORT", "high")
        settings = Settings()
        assert settings.cache.ttl_hours == 2
        assert settings.perplexity.default_effort == CostTier.HIGH

    def test_flat_api_key_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-from-env")
        assert Settings().perplexity.api_key == "pplx-from-env"

    def test_flat_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESEARCH_CACHE_LOG_LEVEL", "debug")
        assert Settings().logging.level == LogLevel.DEBUG

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ValueError):
            Settings(cache={"ttl_hours": 0})  # type: ignore[arg-type]

    def test_yaml_file_is_loaded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "research_cache.yaml").write_text(
            "cache:\n  directory: /var/cache/research\n  ttl_hours: 6\n", encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)
        settings = get_settings()
        assert settings.cache.directory == Path("/var/cache/research")
        assert settings.cache.ttl_hours == 6

    def test_env_wins_over_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "research_cache.yaml").write_text(
            "cache:\n  directory: /var/cache/research\n  ttl_hours: 6\n", encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RESEARCH_CACHE_CACHE__TTL_HOURS", "3")
        settings = get_settings()
        assert settings.cache.ttl_hours == 3
        assert settings.cache.directory == Path("/var/cache/research")
