"""Program ID sync: keep lib.rs and Starpin.toml pointing at the same program.

The program ID lives in two generated files.  They drift apart when one is
edited by hand, when a keypair is regenerated, or when a project is copied.
The reconciler classifies the pair of extracted values and decides which
file to correct:

1. Both present and equal: nothing to do.
2. Both present and different: copy in the chosen direction.  The manifest
   wins by default; ``favor_source`` makes lib.rs win.
3. Only one present: propagate it into the file that lacks a declaration.
4. Neither present: generate a fresh ID and write it into both.

After writing, both files are read back and compared.  A disagreement is
reported as a soft :class:`MismatchError` on the result, never raised.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from starpin.errors import MismatchError, ParseError, ProjectError, StarpinError
from starpin.sync.fields import (
    extract_field,
    extract_manifest_id,
    extract_source_id,
    set_manifest_id,
    set_source_id,
)
from starpin.sync.keys import Keypair, generate_keypair, generate_program_id, keypair_path, write_keypair
from starpin.utils.files import read_text, write_text

logger = logging.getLogger(__name__)

SOURCE_FILE = Path("src") / "lib.rs"
MANIFEST_FILE = Path("Starpin.toml")
CARGO_FILE = Path("Cargo.toml")


class SyncAction(Enum):
    """What a sync did to the two files."""

    ALREADY_SYNCED = "already_synced"
    SOURCE_TO_MANIFEST = "source_to_manifest"  # lib.rs -> Starpin.toml
    MANIFEST_TO_SOURCE = "manifest_to_source"  # Starpin.toml -> lib.rs
    GENERATED = "generated"  # fresh ID written to both


@dataclass
class SyncResult:
    """Outcome of reconciling one lib.rs / Starpin.toml pair."""

    program_name: str
    action: SyncAction
    program_id: str
    source_before: str | None
    manifest_before: str | None
    source_content: str
    manifest_content: str
    source_changed: bool = False
    manifest_changed: bool = False
    manifest_sites_updated: int = 0
    warnings: list[str] = field(default_factory=list)
    mismatch: MismatchError | None = None
    keypair_file: Path | None = None

    @property
    def synchronized(self) -> bool:
        return self.mismatch is None

    def summary(self) -> str:
        if self.action == SyncAction.ALREADY_SYNCED:
            return f"{self.program_name}: program IDs already synchronized ({self.program_id})"
        direction = {
            SyncAction.SOURCE_TO_MANIFEST: "lib.rs → Starpin.toml",
            SyncAction.MANIFEST_TO_SOURCE: "Starpin.toml → lib.rs",
            SyncAction.GENERATED: "new program ID → both files",
        }[self.action]
        status = "synchronized" if self.synchronized else "NOT synchronized"
        return f"{self.program_name}: {direction}, {status} ({self.program_id})"


# ---------------------------------------------------------------------------
# Pure reconciliation
# ---------------------------------------------------------------------------


@contextmanager
def _in_file(path: Path):
    """Prefix a :class:`ParseError` raised inside the block with *path*."""
    try:
        yield
    except ParseError as e:
        e.message = f"{path.as_posix()}: {e.message}"
        e.args = (e.message,)
        raise


def check_sync(source: str, manifest: str, program_name: str) -> MismatchError | None:
    """Re-extract both IDs; return a :class:`MismatchError` if they disagree."""
    try:
        source_id = extract_source_id(source)
        manifest_id = extract_manifest_id(manifest, program_name)
    except ParseError as e:
        logger.warning("Could not re-read program IDs for verification: %s", e.message)
        return MismatchError(None, None)

    if source_id is None or source_id != manifest_id:
        return MismatchError(source_id, manifest_id)
    return None


def reconcile(
    source: str,
    manifest: str,
    program_name: str,
    *,
    favor_source: bool = False,
    generate_identifier: Callable[[], str] = generate_program_id,
) -> SyncResult:
    """Reconcile lib.rs content with Starpin.toml content.

    Args:
        source: Full lib.rs content.
        manifest: Full Starpin.toml content.
        program_name: Key used for the program under ``[programs.<network>]``.
        favor_source: When both IDs exist and differ, copy lib.rs into the
            manifest instead of the other way round.
        generate_identifier: Called for a fresh ID when neither file has one.

    Returns:
        A :class:`SyncResult` holding the new contents of both files.

    Raises:
        ParseError: A declaration site in either file is malformed.
        NotFoundError: A file has no place to hold the propagated ID.
    """
    with _in_file(SOURCE_FILE):
        source_id = extract_source_id(source)
    with _in_file(MANIFEST_FILE):
        manifest_id = extract_manifest_id(manifest, program_name)

    result = SyncResult(
        program_name=program_name,
        action=SyncAction.ALREADY_SYNCED,
        program_id=source_id or manifest_id or "",
        source_before=source_id,
        manifest_before=manifest_id,
        source_content=source,
        manifest_content=manifest,
    )

    if source_id is not None and source_id == manifest_id:
        return result

    if source_id is not None and (manifest_id is None or favor_source):
        result.action = SyncAction.SOURCE_TO_MANIFEST
        result.program_id = source_id
        with _in_file(MANIFEST_FILE):
            result.manifest_content, result.manifest_sites_updated = set_manifest_id(
                manifest, program_name, source_id
            )
        result.manifest_changed = True

    elif manifest_id is not None:
        result.action = SyncAction.MANIFEST_TO_SOURCE
        result.program_id = manifest_id
        with _in_file(SOURCE_FILE):
            result.source_content = set_source_id(source, manifest_id)
        result.source_changed = True

    else:
        result.action = SyncAction.GENERATED
        result.program_id = generate_identifier()
        _write_both(result, source, manifest)

    result.mismatch = check_sync(result.source_content, result.manifest_content, program_name)
    return result


def _write_both(result: SyncResult, source: str, manifest: str) -> None:
    """Put ``result.program_id`` into both contents, each side independently."""
    try:
        result.source_content = set_source_id(source, result.program_id)
        result.source_changed = True
    except StarpinError as e:
        result.warnings.append(f"Could not update src/lib.rs: {e.message}")
        logger.warning("Could not update src/lib.rs: %s", e.message)

    try:
        result.manifest_content, result.manifest_sites_updated = set_manifest_id(
            manifest, result.program_name, result.program_id
        )
        result.manifest_changed = True
    except StarpinError as e:
        result.warnings.append(f"Could not update Starpin.toml: {e.message}")
        logger.warning("Could not update Starpin.toml: %s", e.message)


# ---------------------------------------------------------------------------
# File-backed sync
# ---------------------------------------------------------------------------


def resolve_program_name(project_dir: str | Path) -> str:
    """Program name for a project: Cargo.toml ``[package] name``, else the dir name.

    Hyphens become underscores, matching the Starpin.toml keys written by
    ``starpin init``.
    """
    project_dir = Path(project_dir)
    cargo_path = project_dir / CARGO_FILE
    name = None

    if cargo_path.exists():
        try:
            name = extract_field(
                read_text(cargo_path), "name", section_prefix="package"
            )
        except ParseError:
            name = None

    if not name:
        name = project_dir.resolve().name
    return name.replace("-", "_")


class ProgramIdSync:
    """Reconciles the program ID between a project's lib.rs and Starpin.toml."""

    def __init__(self, project_dir: str | Path = ".", program_name: str | None = None):
        self.project_dir = Path(project_dir)
        self.source_path = self.project_dir / SOURCE_FILE
        self.manifest_path = self.project_dir / MANIFEST_FILE
        self.program_name = (
            program_name.replace("-", "_") if program_name else resolve_program_name(self.project_dir)
        )

    def sync(self, favor_source: bool = False) -> SyncResult:
        """Reconcile the two files on disk and verify the outcome."""
        source, manifest = self._read()
        result = reconcile(source, manifest, self.program_name, favor_source=favor_source)
        logger.info("Program ID sync for %s: %s", self.program_name, result.action.value)
        self._persist(result)
        return result

    def rotate(self, keypair: Keypair | None = None) -> SyncResult:
        """Generate a new program keypair and write its ID into both files."""
        source, manifest = self._read()
        keypair = keypair or generate_keypair()
        with _in_file(SOURCE_FILE):
            source_id = extract_source_id(source)
        with _in_file(MANIFEST_FILE):
            manifest_id = extract_manifest_id(manifest, self.program_name)

        result = SyncResult(
            program_name=self.program_name,
            action=SyncAction.GENERATED,
            program_id=keypair.program_id,
            source_before=source_id,
            manifest_before=manifest_id,
            source_content=source,
            manifest_content=manifest,
        )
        _write_both(result, source, manifest)

        result.keypair_file = write_keypair(
            keypair_path(self.project_dir, self.program_name), keypair
        )
        self._persist(result)
        return result

    # -- internals ---------------------------------------------------------

    def _read(self) -> tuple[str, str]:
        for path in (self.manifest_path, self.source_path):
            if not path.exists():
                raise ProjectError(
                    f"{path.relative_to(self.project_dir)} not found",
                    hint="Make sure you're in a Star Frame project directory.",
                )
        return (
            read_text(self.source_path),
            read_text(self.manifest_path),
        )

    def _persist(self, result: SyncResult) -> None:
        """Write changed files one at a time, then re-read and verify."""
        if result.source_changed:
            write_text(self.source_path, result.source_content)
        if result.manifest_changed:
            write_text(self.manifest_path, result.manifest_content)

        source, manifest = self._read()
        result.mismatch = check_sync(source, manifest, self.program_name)
        if result.mismatch is not None:
            logger.warning("%s", result.mismatch.message)
