"""Tests for settings loading."""

import tempfile
from pathlib import Path

import pytest
import yaml

from starpin.config import DEFAULT_REGISTRY_URL, load_settings
from starpin.errors import ProjectError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for var in ("STARPIN_CONFIG", "STARPIN_REGISTRY_URL", "STARPIN_USER_AGENT", "STARPIN_HTTP_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))


def test_defaults():
    settings = load_settings()
    assert settings.registry_url == DEFAULT_REGISTRY_URL
    assert settings.user_agent == "starpin-cli"
    assert settings.fallback_for("star_frame") == "0.23.1"
    assert settings.fallback_for("unknown") == ""


def test_yaml_file_overrides_defaults():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.yaml"
        path.write_text(yaml.dump({
            "registry_url": "https://mirror.test/crates",
            "http_timeout": 3,
            "fallback_versions": {"star_frame": "0.20.0"},
        }))

        settings = load_settings(path)

        assert settings.registry_url == "https://mirror.test/crates"
        assert settings.http_timeout == 3.0
        assert settings.fallback_for("star_frame") == "0.20.0"
        assert settings.fallback_for("borsh") == "1.5"


def test_env_overrides_file(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.yaml"
        path.write_text("registry_url: https://file.test\n")
        monkeypatch.setenv("STARPIN_CONFIG", str(path))
        monkeypatch.setenv("STARPIN_REGISTRY_URL", "https://env.test")
        monkeypatch.setenv("STARPIN_HTTP_TIMEOUT", "2.5")

        settings = load_settings()

        assert settings.registry_url == "https://env.test"
        assert settings.http_timeout == 2.5


def test_missing_explicit_file_raises():
    with pytest.raises(ProjectError):
        load_settings("/nonexistent/starpin.yaml")


def test_invalid_values_raise():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.yaml"

        path.write_text("- just\n- a list\n")
        with pytest.raises(ProjectError):
            load_settings(path)

        path.write_text("http_timeout: soon\n")
        with pytest.raises(ProjectError):
            load_settings(path)

        path.write_text("registry_url: [unclosed\n")
        with pytest.raises(ProjectError):
            load_settings(path)
