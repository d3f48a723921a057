"""crates.io client.  This is the only network call starpin makes.

``GET {registry_url}/{crate}`` returns a JSON body with a ``versions``
array; each entry has a ``num`` version string and a ``created_at``
timestamp.  Only ``num`` drives version selection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from starpin.config import Settings, load_settings
from starpin.errors import RegistryError

logger = logging.getLogger(__name__)


@dataclass
class CrateVersion:
    """One published version of a crate."""

    num: str
    created_at: str = ""
    yanked: bool = False


class RegistryClient:
    """Fetches published versions of a crate.

    Parameters
    ----------
    settings : Settings | None
        Registry URL, user agent and timeout.  Loaded from the environment
        when *None*.
    transport : httpx.BaseTransport | None
        Optional transport override, used by tests to stub the registry.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self._transport = transport

    def fetch_versions(self, package: str) -> list[CrateVersion]:
        """Return every version the registry lists for *package*.

        Raises:
            RegistryError: On transport failure, a non-success status, or a
                body that is not the expected ``{"versions": [...]}`` shape.
        """
        url = f"{self.settings.registry_url.rstrip('/')}/{package}"
        headers = {"User-Agent": self.settings.user_agent}
        logger.debug("GET %s", url)

        try:
            with httpx.Client(
                timeout=self.settings.http_timeout, transport=self._transport
            ) as client:
                resp = client.get(url, headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise RegistryError(package, f"HTTP {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            raise RegistryError(package, f"request failed: {exc}") from exc
        except ValueError as exc:
            raise RegistryError(package, f"invalid JSON response: {exc}") from exc

        return _parse_versions(package, data)


def _parse_versions(package: str, data: object) -> list[CrateVersion]:
    if not isinstance(data, dict) or not isinstance(data.get("versions"), list):
        raise RegistryError(package, "response has no 'versions' list")

    versions: list[CrateVersion] = []
    for entry in data["versions"]:
        if not isinstance(entry, dict) or not isinstance(entry.get("num"), str):
            raise RegistryError(package, f"malformed version entry: {entry!r}")
        versions.append(
            CrateVersion(
                num=entry["num"],
                created_at=entry.get("created_at") or "",
                yanked=bool(entry.get("yanked", False)),
            )
        )
    return versions
