"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from entity_repository.settings import Settings


class TestSettings:
    """Tests for Settings loading."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ENTITY_REPO_DEFAULT_PAGE_SIZE", raising=False)
        monkeypatch.delenv("ENTITY_REPO_LOG_LEVEL", raising=False)

        settings = Settings()

        assert settings.DEFAULT_PAGE_SIZE == 10
        assert settings.STABLE_DEFAULT_ORDER is False
        assert settings.DEFAULT_ORDER_FIELD == "id"
        assert settings.LOG_LEVEL == "INFO"
        assert settings.LOG_FORMAT == "text"

    def test_prefixed_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ENTITY_REPO_DEFAULT_PAGE_SIZE", "25")
        monkeypatch.setenv("ENTITY_REPO_STABLE_DEFAULT_ORDER", "true")
        monkeypatch.setenv("ENTITY_REPO_LOG_FORMAT", "json")

        settings = Settings()

        assert settings.DEFAULT_PAGE_SIZE == 25
        assert settings.STABLE_DEFAULT_ORDER is True
        assert settings.LOG_FORMAT == "json"

    def test_unprefixed_variables_ignored(self, monkeypatch):
        monkeypatch.delenv("ENTITY_REPO_DEFAULT_PAGE_SIZE", raising=False)
        monkeypatch.setenv("DEFAULT_PAGE_SIZE", "99")

        assert Settings().DEFAULT_PAGE_SIZE == 10

    def test_page_size_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("ENTITY_REPO_DEFAULT_PAGE_SIZE", "0")

        with pytest.raises(ValidationError):
            Settings()
