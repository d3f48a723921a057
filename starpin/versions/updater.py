"""Cargo.toml dependency updates.

A dependency line is one whose stripped form starts with the crate name and
contains ``version``; its version is the first double-quoted value after the
``version`` token::

    star_frame = { version = "0.23.1", features = ["idl"] }

Rewriting touches only the characters between those quotes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from starpin.errors import NotFoundError, ParseError, ProjectError
from starpin.utils.files import read_text, write_text
from starpin.versions.resolver import STAR_FRAME, DependencyVersions

CARGO_FILE = "Cargo.toml"

# Crates `starpin update` keeps current, in report order.
TRACKED_DEPENDENCIES = (STAR_FRAME, "solana-program")

_VERSION_TOKEN = "version"


@dataclass
class DependencyUpdate:
    """A declared dependency whose version differs from the resolved one."""

    name: str
    current: str
    target: str

    def __str__(self) -> str:
        return f"{self.name}: {self.current} → {self.target}"


@dataclass
class UpdateReport:
    """Result of checking (and possibly applying) dependency updates."""

    cargo_path: Path
    dry_run: bool = False
    updates: list[DependencyUpdate] = field(default_factory=list)
    up_to_date: dict[str, str] = field(default_factory=dict)
    written: bool = False

    @property
    def has_updates(self) -> bool:
        return bool(self.updates)


# ---------------------------------------------------------------------------
# Line scanning
# ---------------------------------------------------------------------------


def _is_dependency_line(line: str, name: str) -> bool:
    # prefix match: `star_frame` also covers `star_frame_spl`
    stripped = line.lstrip()
    return stripped.startswith(name) and _VERSION_TOKEN in stripped[len(name):]


def _version_span(line: str, name: str, line_number: int) -> tuple[int, int]:
    """Indices of the quotes delimiting the version on a dependency line."""
    name_end = line.index(name) + len(name)
    token = line.index(_VERSION_TOKEN, name_end)
    open_quote = line.find('"', token + len(_VERSION_TOKEN))
    close_quote = line.find('"', open_quote + 1) if open_quote != -1 else -1
    if close_quote == -1:
        raise ParseError(f"Malformed version for dependency '{name}'", line_number, line)
    return open_quote, close_quote


def dependency_versions(content: str, name: str) -> list[str]:
    """Versions on every line declaring crate *name*, in file order."""
    found = []
    for index, line in enumerate(content.split("\n")):
        if _is_dependency_line(line, name):
            start, end = _version_span(line, name, index + 1)
            found.append(line[start + 1:end])
    return found


def extract_dependency_version(content: str, name: str) -> str | None:
    """Version declared for crate *name*, or ``None`` if it is not declared."""
    found = dependency_versions(content, name)
    return found[0] if found else None


def replace_dependency_version(content: str, name: str, version: str) -> tuple[str, int]:
    """Set the version of every declaration of crate *name*.

    Returns ``(new_content, lines_changed)``; raises :class:`NotFoundError`
    when the crate is not declared.
    """
    lines = content.split("\n")
    changed = 0
    for index, line in enumerate(lines):
        if _is_dependency_line(line, name):
            start, end = _version_span(line, name, index + 1)
            lines[index] = line[:start + 1] + version + line[end:]
            changed += 1

    if changed == 0:
        raise NotFoundError(f"Dependency '{name}' with a version not found in {CARGO_FILE}")
    return "\n".join(lines), changed


# ---------------------------------------------------------------------------
# Update decision
# ---------------------------------------------------------------------------


def plan_updates(
    content: str,
    versions: DependencyVersions,
    tracked: tuple[str, ...] = TRACKED_DEPENDENCIES,
) -> tuple[list[DependencyUpdate], dict[str, str]]:
    """Compare declared versions with *versions*.

    Returns ``(updates, up_to_date)`` where *up_to_date* maps crate name to
    its already-current version.  Crates the file does not declare are
    skipped.  A crate needs an update when any of its lines (including
    prefixed crates such as ``star_frame_spl``) differs from the target.
    """
    updates: list[DependencyUpdate] = []
    up_to_date: dict[str, str] = {}

    for name in tracked:
        target = versions.get(name)
        declared = dependency_versions(content, name)
        if not declared or not target:
            continue
        current = next((v for v in declared if v != target), target)
        if current != target:
            updates.append(DependencyUpdate(name=name, current=current, target=target))
        else:
            up_to_date[name] = current

    return updates, up_to_date


def apply_updates(content: str, updates: list[DependencyUpdate]) -> str:
    for update in updates:
        content, _ = replace_dependency_version(content, update.name, update.target)
    return content


def update_project(
    project_dir: str | Path,
    versions: DependencyVersions,
    dry_run: bool = False,
) -> UpdateReport:
    """Check a project's Cargo.toml against *versions* and apply updates.

    With *dry_run* the file is left untouched and the report only lists what
    would change.
    """
    cargo_path = Path(project_dir) / CARGO_FILE
    if not cargo_path.exists():
        raise ProjectError(
            f"{CARGO_FILE} not found",
            hint="Are you in a Star Frame project directory?",
        )

    content = read_text(cargo_path)
    updates, up_to_date = plan_updates(content, versions)
    report = UpdateReport(
        cargo_path=cargo_path, dry_run=dry_run, updates=updates, up_to_date=up_to_date
    )

    if updates and not dry_run:
        write_text(cargo_path, apply_updates(content, updates))
        report.written = True

    return report
