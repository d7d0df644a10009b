"""
Unit tests for configuration module.
"""

import os
from unittest.mock import patch

import pytest

from askdocs.errors import ConfigMissingError


@pytest.mark.unit
class TestSettings:
    """Tests for Settings class."""

    def test_settings_loads_from_env(self, mock_settings):
        """Settings should load values from environment variables."""
        assert mock_settings.max_context_bytes == 1000
        assert mock_settings.log_level == "DEBUG"
        assert mock_settings.index_path.name == "index.json.gz"

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            from askdocs.config import Settings

            settings = Settings(_env_file=None)

        assert settings.embedding_model == "text-embedding-ada-002"
        assert settings.llm_max_tokens == 300
        assert settings.document_error_policy == "fail"
        assert settings.skip_unreadable_chunks is False
        assert settings.index_path.name == "index.json.gz"

    def test_missing_api_key_raises_config_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            from askdocs.config import Settings

            settings = Settings(_env_file=None)

        assert settings.openai_api_key_value is None
        with pytest.raises(ConfigMissingError):
            settings.require_api_key()

    def test_api_key_is_secret(self, mock_settings):
        """API key should be stored as SecretStr."""
        assert "test-api-key" not in str(mock_settings.openai_api_key)
        assert mock_settings.require_api_key() == "test-api-key"

    def test_invalid_policy_rejected(self):
        with patch.dict(os.environ, {"DOCUMENT_ERROR_POLICY": "ignore"}, clear=True):
            from askdocs.config import Settings

            with pytest.raises(Exception):  # ValidationError
                Settings(_env_file=None)

    def test_paths_are_resolved(self, mock_settings):
        assert mock_settings.index_path.is_absolute()

    def test_base_url_trailing_slash_stripped(self):
        with patch.dict(os.environ, {"API_BASE_URL": "http://localhost:8080/v1/"}, clear=True):
            from askdocs.config import Settings

            assert Settings(_env_file=None).api_base_url == "http://localhost:8080/v1"

    def test_get_settings_is_cached(self):
        """get_settings should return cached instance."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "test-key"}):
            from askdocs.config import get_settings

            get_settings.cache_clear()

            settings1 = get_settings()
            settings2 = get_settings()

            assert settings1 is settings2
            get_settings.cache_clear()
