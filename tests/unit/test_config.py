"""Tests for connector configuration."""

import pytest
from pydantic import ValidationError

from cortex_connector.config import CortexInstanceConfig, Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.environment == "dev"
        assert settings.log_level == "INFO"
        assert settings.instances == []

    def test_yaml_file(self, tmp_path):
        cfg = tmp_path / "cortex.yaml"
        cfg.write_text(
            "environment: prod\n"
            "instances:\n"
            "  - name: local\n"
            "    url: http://127.0.0.1:9001/\n"
            "    api_key: abc\n"
            "  - name: remote\n"
            "    url: https://cortex.example.org\n"
            "    timeout_ms: 2000\n"
            "    verify_ssl: false\n",
            encoding="utf-8",
        )

        settings = Settings(_env_file=str(cfg))

        assert settings.environment == "prod"
        assert [i.name for i in settings.instances] == ["local", "remote"]
        assert settings.instances[0].url == "http://127.0.0.1:9001"
        assert settings.instances[1].timeout_ms == 2000
        assert settings.instances[1].verify_ssl is False

    def test_explicit_values_override_file(self, tmp_path):
        cfg = tmp_path / "cortex.yaml"
        cfg.write_text("environment: prod\n", encoding="utf-8")

        settings = Settings(_env_file=str(cfg), environment="stage")

        assert settings.environment == "stage"

    def test_missing_file_is_ignored(self, tmp_path):
        settings = Settings(_env_file=str(tmp_path / "absent.yaml"))

        assert settings.instances == []

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv(
            "CORTEX_INSTANCES", '[{"name": "env", "url": "http://env:9001"}]'
        )
        monkeypatch.setenv("CORTEX_LOG_LEVEL", "DEBUG")

        settings = Settings()

        assert settings.log_level == "DEBUG"
        assert settings.instances[0].name == "env"

    def test_duplicate_instance_names_rejected(self):
        with pytest.raises(ValidationError):
            Settings(
                instances=[
                    {"name": "a", "url": "http://one"},
                    {"name": "a", "url": "http://two"},
                ]
            )


class TestCortexInstanceConfig:
    def test_defaults(self):
        config = CortexInstanceConfig(name="a", url="http://a")

        assert config.api_key is None
        assert config.timeout_ms == 5000
        assert config.max_retries == 1
        assert config.verify_ssl is True

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            CortexInstanceConfig(name="", url="http://a")
