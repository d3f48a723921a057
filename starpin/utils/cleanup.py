"""Removal of build artifacts from a Star Frame project.

Program keypairs (``target/deploy/*-keypair.json``) are never removed: losing
one means losing the program's deploy authority.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from starpin.errors import ProjectError
from starpin.sync.keys import KEYPAIR_SUFFIX

logger = logging.getLogger(__name__)

_TOP_LEVEL_DIRS = ("node_modules", "coverage")


def _remove(path: Path, label: str, cleaned: list[str]) -> None:
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        logger.warning("Failed to remove %s: %s", label, e)
        return
    cleaned.append(label)


def _clean_deploy_dir(deploy_dir: Path, cleaned: list[str]) -> None:
    for entry in sorted(deploy_dir.iterdir()):
        if entry.name.endswith(KEYPAIR_SUFFIX):
            continue
        _remove(entry, f"target/deploy/{entry.name}", cleaned)


def clean_project(project_dir: str | Path = ".") -> list[str]:
    """Delete build outputs under *project_dir* and return what was removed.

    Removed: ``target/deploy`` (keypairs excepted), ``target/idl``, ``.so``
    and ``.json`` files directly under ``target``, ``*build*`` directories in
    ``target/debug`` and ``target/release``, ``node_modules`` and
    ``coverage``.

    Raises:
        ProjectError: *project_dir* has no Cargo.toml.
    """
    project_dir = Path(project_dir)
    if not (project_dir / "Cargo.toml").exists():
        raise ProjectError(
            "No Cargo.toml found",
            hint="Run this command in a Star Frame project directory.",
        )

    cleaned: list[str] = []
    target = project_dir / "target"

    if target.is_dir():
        for entry in sorted(target.iterdir()):
            if entry.name == "deploy" and entry.is_dir():
                _clean_deploy_dir(entry, cleaned)
            elif entry.name == "idl" and entry.is_dir():
                _remove(entry, "target/idl/", cleaned)
            elif entry.is_file() and entry.suffix in (".so", ".json"):
                if not entry.name.endswith(KEYPAIR_SUFFIX):
                    _remove(entry, f"target/{entry.name}", cleaned)

        for profile in ("debug", "release"):
            profile_dir = target / profile
            if not profile_dir.is_dir():
                continue
            for entry in sorted(profile_dir.iterdir()):
                if entry.is_dir() and "build" in entry.name:
                    _remove(entry, f"target/{profile}/{entry.name}/", cleaned)

    for name in _TOP_LEVEL_DIRS:
        path = project_dir / name
        if path.exists():
            _remove(path, f"{name}/", cleaned)

    return cleaned
