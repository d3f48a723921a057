"""Tests for program ID reconciliation between lib.rs and Starpin.toml."""

import tempfile
from pathlib import Path

import pytest

from starpin.errors import NotFoundError, ParseError, ProjectError
from starpin.sync.fields import count_manifest_sites, count_source_sites
from starpin.sync.keys import generate_keypair, read_keypair
from starpin.sync.reconciler import (
    ProgramIdSync,
    SyncAction,
    check_sync,
    reconcile,
    resolve_program_name,
)


def _lib(program_id: str | None) -> str:
    id_line = f'    id = "{program_id}"\n' if program_id else ""
    return (
        "use star_frame::prelude::*;\n\n"
        "#[derive(StarFrameProgram)]\n"
        "#[program(\n"
        "    instruction_set = ProgInstructionSet,\n"
        f"{id_line}"
        ")]\n"
        "pub struct ProgProgram;\n"
    )


def _manifest(program_id: str | None) -> str:
    content = "[features]\nresolution = true\n\n"
    for network in ("localnet", "devnet", "mainnet"):
        content += f"[programs.{network}]\n"
        if program_id:
            content += f'prog = "{program_id}"\n'
        content += "\n"
    return content + '[provider]\ncluster = "localnet"\n'


# --- Pure reconciliation ---


def test_equal_ids_are_a_no_op():
    source, manifest = _lib("AAA"), _manifest("AAA")
    result = reconcile(source, manifest, "prog")
    assert result.action == SyncAction.ALREADY_SYNCED
    assert result.source_content == source
    assert result.manifest_content == manifest
    assert not result.source_changed and not result.manifest_changed
    assert result.synchronized


def test_conflict_favors_manifest_by_default():
    result = reconcile(_lib("AAA"), _manifest("BBB"), "prog")
    assert result.action == SyncAction.MANIFEST_TO_SOURCE
    assert result.program_id == "BBB"
    assert result.source_content == _lib("BBB")
    assert result.manifest_content == _manifest("BBB")
    assert result.synchronized


def test_conflict_favor_source():
    result = reconcile(_lib("AAA"), _manifest("BBB"), "prog", favor_source=True)
    assert result.action == SyncAction.SOURCE_TO_MANIFEST
    assert result.manifest_content == _manifest("AAA")
    assert result.manifest_sites_updated == 3
    assert result.source_content == _lib("AAA")


def test_source_only_inserts_into_manifest():
    manifest = _manifest(None)
    result = reconcile(_lib("AAA"), manifest, "prog")
    assert result.action == SyncAction.SOURCE_TO_MANIFEST
    assert count_manifest_sites(result.manifest_content, "prog") == count_manifest_sites(manifest, "prog") + 1
    assert result.synchronized


def test_manifest_only_inserts_into_source():
    source = _lib(None)
    result = reconcile(source, _manifest("BBB"), "prog")
    assert result.action == SyncAction.MANIFEST_TO_SOURCE
    assert count_source_sites(result.source_content) == count_source_sites(source) + 1
    assert result.program_id == "BBB"
    assert result.synchronized


def test_neither_present_generates_identifier():
    result = reconcile(_lib(None), _manifest(None), "prog", generate_identifier=lambda: "CCC")
    assert result.action == SyncAction.GENERATED
    assert result.program_id == "CCC"
    assert 'id = "CCC"' in result.source_content
    assert 'prog = "CCC"' in result.manifest_content
    assert result.synchronized


def test_generated_with_unwritable_source_records_warning():
    source = "pub struct NoAttribute;\n"
    result = reconcile(source, _manifest(None), "prog", generate_identifier=lambda: "CCC")
    assert result.action == SyncAction.GENERATED
    assert result.source_content == source
    assert result.manifest_changed
    assert len(result.warnings) == 1
    assert not result.synchronized


def test_check_sync_reports_mismatch():
    mismatch = check_sync(_lib("AAA"), _manifest("BBB"), "prog")
    assert mismatch is not None
    assert mismatch.source_id == "AAA"
    assert mismatch.manifest_id == "BBB"
    assert check_sync(_lib("AAA"), _manifest("AAA"), "prog") is None


# --- File-backed sync ---


def _write_project(root: Path, source: str, manifest: str, crate: str = "prog") -> None:
    (root / "src").mkdir(parents=True, exist_ok=True)
    (root / "src" / "lib.rs").write_text(source)
    (root / "Starpin.toml").write_text(manifest)
    (root / "Cargo.toml").write_text(f'[package]\nname = "{crate}"\nversion = "0.1.0"\n')


def test_sync_writes_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_project(root, _lib("AAA"), _manifest("BBB"))

        result = ProgramIdSync(root).sync()

        assert result.synchronized
        assert (root / "src" / "lib.rs").read_text() == _lib("BBB")
        assert (root / "Starpin.toml").read_text() == _manifest("BBB")


def test_sync_from_lib():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_project(root, _lib("AAA"), _manifest("BBB"))

        ProgramIdSync(root).sync(favor_source=True)
        assert (root / "Starpin.toml").read_text() == _manifest("AAA")


def test_sync_preserves_crlf():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_project(root, _lib("AAA"), _manifest("BBB"))
        lib_path = root / "src" / "lib.rs"
        lib_path.write_bytes(_lib("AAA").replace("\n", "\r\n").encode())

        ProgramIdSync(root).sync()
        assert lib_path.read_bytes() == _lib("BBB").replace("\n", "\r\n").encode()


def test_sync_missing_manifest_raises():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "src").mkdir()
        (root / "src" / "lib.rs").write_text(_lib("AAA"))
        with pytest.raises(ProjectError):
            ProgramIdSync(root, program_name="prog").sync()


def test_rotate_writes_keypair_and_both_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_project(root, _lib("AAA"), _manifest("AAA"))
        keypair = generate_keypair()

        result = ProgramIdSync(root).rotate(keypair)

        assert result.synchronized
        assert result.program_id == keypair.program_id
        assert result.keypair_file == root / "target" / "deploy" / "prog-keypair.json"
        assert read_keypair(result.keypair_file) == keypair
        assert (root / "Starpin.toml").read_text() == _manifest(keypair.program_id)


def test_resolve_program_name():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "Cargo.toml").write_text('[package]\nname = "my-prog"\n\n[dependencies]\nname = "x"\n')
        assert resolve_program_name(root) == "my_prog"

        other = root / "dir-name"
        other.mkdir()
        assert resolve_program_name(other) == "dir_name"


def test_sync_malformed_manifest_raises_and_leaves_source_untouched():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_project(root, _lib("AAA"), '[programs.localnet]\nprog = "BBB\n')
        lib_path = root / "src" / "lib.rs"
        before = lib_path.read_bytes()

        with pytest.raises(ParseError) as exc:
            ProgramIdSync(root).sync()

        assert exc.value.line_number == 2
        assert exc.value.message.startswith("Starpin.toml: Unbalanced quotes")
        assert lib_path.read_bytes() == before
        assert (root / "Starpin.toml").read_text() == '[programs.localnet]\nprog = "BBB\n'


def test_sync_without_program_attribute_raises():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_project(root, "pub struct Bare;\n", _manifest("BBB"))

        with pytest.raises(NotFoundError):
            ProgramIdSync(root).sync()
        assert (root / "src" / "lib.rs").read_text() == "pub struct Bare;\n"
