"""Settings for registry access and dependency fallbacks.

Values come from three layers, later ones winning:

1. Built-in defaults.
2. A YAML file: ``$STARPIN_CONFIG`` if set, else
   ``~/.config/starpin/config.yaml`` when it exists.
3. Environment variables ``STARPIN_REGISTRY_URL``, ``STARPIN_USER_AGENT``
   and ``STARPIN_HTTP_TIMEOUT``.

Example YAML::

    registry_url: https://crates.io/api/v1/crates
    http_timeout: 5
    fallback_versions:
      star_frame: 0.23.1
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from starpin.errors import ProjectError

DEFAULT_REGISTRY_URL = "https://crates.io/api/v1/crates"
DEFAULT_USER_AGENT = "starpin-cli"
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_CONFIG_PATH = Path("~/.config/starpin/config.yaml")

# Used when the registry cannot be reached (star_frame) and as the pinned
# versions of the other crates the templates depend on.
DEFAULT_VERSIONS: dict[str, str] = {
    "star_frame": "0.23.1",
    "solana-program": "1.18",
    "spl-token": "4.0",
    "spl-associated-token-account": "2.3",
    "bytemuck": "1.18",
    "borsh": "1.5",
}


@dataclass
class Settings:
    """Runtime settings for starpin."""

    registry_url: str = DEFAULT_REGISTRY_URL
    user_agent: str = DEFAULT_USER_AGENT
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    fallback_versions: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_VERSIONS))

    def fallback_for(self, package: str) -> str:
        return self.fallback_versions.get(package, "")


def load_settings(path: str | Path | None = None) -> Settings:
    """Build :class:`Settings` from defaults, a YAML file and the environment.

    Args:
        path: Explicit config file.  Must exist when given.

    Raises:
        ProjectError: The config file is missing (explicit path only),
            is not valid YAML, or holds values of the wrong type.
    """
    settings = Settings()

    explicit = path or os.environ.get("STARPIN_CONFIG", "")
    config_path = Path(explicit).expanduser() if explicit else DEFAULT_CONFIG_PATH.expanduser()

    if config_path.exists():
        _apply_file(settings, config_path)
    elif explicit:
        raise ProjectError(f"Config file not found: {config_path}")

    _apply_env(settings)
    return settings


def _apply_file(settings: Settings, config_path: Path) -> None:
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ProjectError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ProjectError(f"{config_path} must contain a mapping at the top level")

    if "registry_url" in data:
        settings.registry_url = str(data["registry_url"])
    if "user_agent" in data:
        settings.user_agent = str(data["user_agent"])
    if "http_timeout" in data:
        settings.http_timeout = _as_timeout(data["http_timeout"], str(config_path))

    fallbacks = data.get("fallback_versions", {})
    if not isinstance(fallbacks, dict):
        raise ProjectError(f"'fallback_versions' in {config_path} must be a mapping")
    for name, version in fallbacks.items():
        settings.fallback_versions[str(name)] = str(version)


def _apply_env(settings: Settings) -> None:
    registry_url = os.environ.get("STARPIN_REGISTRY_URL", "")
    if registry_url:
        settings.registry_url = registry_url

    user_agent = os.environ.get("STARPIN_USER_AGENT", "")
    if user_agent:
        settings.user_agent = user_agent

    timeout = os.environ.get("STARPIN_HTTP_TIMEOUT", "")
    if timeout:
        settings.http_timeout = _as_timeout(timeout, "STARPIN_HTTP_TIMEOUT")


def _as_timeout(value: object, origin: str) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ProjectError(f"Invalid http_timeout {value!r} in {origin}") from None
    if timeout <= 0:
        raise ProjectError(f"http_timeout must be positive (got {timeout} in {origin})")
    return timeout
