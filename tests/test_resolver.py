"""Tests for the crates.io client and version resolution."""

import httpx
import pytest

from starpin.config import Settings
from starpin.errors import NoVersionsError, RegistryError
from starpin.versions.registry import RegistryClient
from starpin.versions.resolver import (
    STAR_FRAME,
    VersionResolver,
    resolve_dependency_versions,
    select_version,
)


def _client(handler) -> RegistryClient:
    settings = Settings(registry_url="https://registry.test/api/v1/crates")
    return RegistryClient(settings, transport=httpx.MockTransport(handler))


def _versions_response(*nums: str):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"versions": [{"num": n, "created_at": "2025-01-01T00:00:00Z"} for n in nums]},
        )

    return handler


# --- select_version ---


def test_select_prefers_stable():
    assert select_version(["1.0.0", "1.1.0-beta", "1.0.5"]) == "1.0.5"


def test_select_stable_below_prerelease():
    assert select_version(["2.0.0-rc1", "1.9.9"]) == "1.9.9"


def test_select_prerelease_only():
    assert select_version(["3.0.0-alpha"]) == "3.0.0-alpha"


def test_select_skips_unparsable():
    assert select_version(["garbage", "0.23.1", "0.9"]) == "0.23.1"


def test_select_nothing_usable_raises():
    with pytest.raises(NoVersionsError):
        select_version([], "star_frame")
    with pytest.raises(NoVersionsError):
        select_version(["nope"], "star_frame")


# --- RegistryClient ---


def test_fetch_sends_user_agent_and_url():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["agent"] = request.headers["User-Agent"]
        return httpx.Response(200, json={"versions": [{"num": "0.23.1", "created_at": "x", "yanked": True}]})

    versions = _client(handler).fetch_versions("star_frame")
    assert seen["url"] == "https://registry.test/api/v1/crates/star_frame"
    assert seen["agent"] == "starpin-cli"
    assert versions[0].num == "0.23.1"
    assert versions[0].yanked


def test_fetch_http_error():
    client = _client(lambda request: httpx.Response(404, json={"errors": []}))
    with pytest.raises(RegistryError) as exc:
        client.fetch_versions("missing_crate")
    assert "HTTP 404" in exc.value.message
    assert exc.value.package == "missing_crate"


def test_fetch_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RegistryError):
        _client(handler).fetch_versions("star_frame")


def test_fetch_invalid_json():
    client = _client(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(RegistryError):
        client.fetch_versions("star_frame")


def test_fetch_wrong_shape():
    client = _client(lambda request: httpx.Response(200, json={"crate": {}}))
    with pytest.raises(RegistryError):
        client.fetch_versions("star_frame")


# --- VersionResolver ---


def test_pinned_version_skips_network():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("registry must not be called")

    resolver = VersionResolver(_client(handler))
    assert resolver.resolve(STAR_FRAME, pinned="0.20.0") == "0.20.0"


def test_resolve_from_registry():
    resolver = VersionResolver(_client(_versions_response("0.22.0", "0.23.1", "0.24.0-beta")))
    assert resolver.resolve(STAR_FRAME) == "0.23.1"


def test_resolve_skips_yanked_releases():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "versions": [
                    {"num": "0.24.0", "yanked": True},
                    {"num": "0.23.1", "yanked": False},
                ]
            },
        )

    resolver = VersionResolver(_client(handler))
    assert resolver.resolve(STAR_FRAME) == "0.23.1"


def test_resolve_all_yanked_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"versions": [{"num": "0.24.0", "yanked": True}]})

    with pytest.raises(NoVersionsError):
        VersionResolver(_client(handler)).resolve(STAR_FRAME)


def test_resolve_dependency_versions_falls_back():
    settings = Settings(fallback_versions={STAR_FRAME: "0.23.1", "solana-program": "1.18"})
    resolver = VersionResolver(_client(lambda request: httpx.Response(500)))

    versions = resolve_dependency_versions(resolver=resolver, settings=settings)

    assert versions.star_frame == "0.23.1"
    assert versions.fallbacks == [STAR_FRAME]
    assert versions.get("solana-program") == "1.18"


def test_resolve_dependency_versions_no_versions_falls_back():
    settings = Settings()
    resolver = VersionResolver(_client(_versions_response()))

    versions = resolve_dependency_versions(resolver=resolver, settings=settings)
    assert versions.star_frame == settings.fallback_for(STAR_FRAME)
    assert versions.fallbacks == [STAR_FRAME]


def test_resolve_dependency_versions_uses_registry():
    resolver = VersionResolver(_client(_versions_response("0.24.0")))
    versions = resolve_dependency_versions(resolver=resolver, settings=Settings())
    assert versions.star_frame == "0.24.0"
    assert versions.fallbacks == []
