"""Tests for build artifact cleanup and the network table."""

import tempfile
from pathlib import Path

import pytest

from starpin.errors import ProjectError
from starpin.utils.cleanup import clean_project
from starpin.utils.network import lookup_network


def _touch(path: Path, text: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def test_clean_removes_artifacts_and_keeps_keypairs():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _touch(root / "Cargo.toml")
        _touch(root / "target" / "deploy" / "counter-keypair.json", "[1]")
        _touch(root / "target" / "deploy" / "counter.so")
        _touch(root / "target" / "idl" / "counter.json")
        _touch(root / "target" / "counter.so")
        _touch(root / "target" / "debug" / "build" / "x.o")
        _touch(root / "target" / "debug" / "deps" / "y.rlib")
        _touch(root / "node_modules" / "pkg" / "index.js")
        _touch(root / "coverage" / "lcov.info")

        cleaned = clean_project(root)

        assert (root / "target" / "deploy" / "counter-keypair.json").exists()
        assert not (root / "target" / "deploy" / "counter.so").exists()
        assert not (root / "target" / "idl").exists()
        assert not (root / "target" / "counter.so").exists()
        assert not (root / "target" / "debug" / "build").exists()
        assert (root / "target" / "debug" / "deps" / "y.rlib").exists()
        assert not (root / "node_modules").exists()
        assert not (root / "coverage").exists()
        assert "target/idl/" in cleaned
        assert "node_modules/" in cleaned


def test_clean_already_clean():
    with tempfile.TemporaryDirectory() as tmpdir:
        _touch(Path(tmpdir) / "Cargo.toml")
        assert clean_project(tmpdir) == []


def test_clean_requires_cargo_toml():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ProjectError):
            clean_project(tmpdir)


def test_network_aliases():
    assert lookup_network("localhost").url == "http://127.0.0.1:8899"
    assert lookup_network("mainnet").name == "mainnet-beta"
    assert lookup_network("mainnet-beta").url == "https://api.mainnet-beta.solana.com"


def test_unknown_network_falls_back_to_devnet(caplog):
    with caplog.at_level("WARNING"):
        assert lookup_network("testnet-xyz").url == "https://api.devnet.solana.com"
    assert "Unknown network" in caplog.text
