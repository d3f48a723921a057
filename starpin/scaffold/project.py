"""Project scaffold generator: creates a new Star Frame program directory.

The generated project always starts synchronized: the program identifier in
``src/lib.rs``, every ``[programs.*]`` entry of ``Starpin.toml`` and the
public half of ``target/deploy/<name>-keypair.json`` are the same value.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from starpin.config import DEFAULT_VERSIONS
from starpin.errors import ProjectError
from starpin.scaffold.templates import COMMON_FILES, TEMPLATES, get_template
from starpin.sync.keys import Keypair, generate_keypair, keypair_path, write_keypair
from starpin.utils.files import write_text
from starpin.versions.resolver import DependencyVersions

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^[^\W_][\w-]*$")


def validate_project_name(name: str) -> bool:
    """Alphanumerics, ``-`` and ``_`` only; must not start with ``-``/``_``
    or end with ``-``."""
    return bool(_NAME_RE.match(name)) and not name.endswith("-")


def template_variables(name: str) -> dict[str, str]:
    """Name variants substituted into template text.

    >>> template_variables("my-counter")["pascal_name"]
    'MyCounter'
    """
    snake = name.replace("-", "_")
    pascal = "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_]", name) if part)
    return {
        "project_name": name,
        "snake_name": snake,
        "pascal_name": pascal,
        "upper_name": snake.upper(),
    }


class ProjectScaffold:
    """Writes a template into ``<parent>/<name>/``."""

    def __init__(self, parent_dir: str | Path = "."):
        self.parent_dir = Path(parent_dir)

    def generate(
        self,
        name: str,
        template: str,
        versions: DependencyVersions,
        keypair: Keypair | None = None,
    ) -> dict:
        """Create the project.

        Args:
            name: Project (and crate) name.
            template: ``counter``, ``simple_counter`` or ``marketplace``.
            versions: Resolved dependency versions for ``Cargo.toml``.
            keypair: Program keypair; a fresh one is generated when omitted.

        Returns:
            dict with ``path`` (project directory), ``program_id`` and
            ``files`` (list of written paths, relative to ``path``).

        Raises:
            ProjectError: Invalid name, unknown template, or the target
                directory already exists.
        """
        if not validate_project_name(name):
            raise ProjectError(
                f"Invalid project name: '{name}'",
                hint="Use only alphanumeric characters, hyphens, and underscores.",
            )

        chosen = get_template(template)
        if chosen is None:
            raise ProjectError(
                f"Unknown template: {template}",
                hint=f"Available templates: {', '.join(TEMPLATES)}",
            )

        project_dir = self.parent_dir / name
        if project_dir.exists():
            raise ProjectError(f"Directory '{project_dir}' already exists")

        keypair = keypair or generate_keypair()
        variables = template_variables(name)
        variables["program_id"] = keypair.program_id
        for package, version in {**DEFAULT_VERSIONS, **versions.versions}.items():
            variables[f"{package.replace('-', '_')}_version"] = version

        written: list[str] = []
        files = {**chosen.files, **COMMON_FILES}
        for rel_path, text in files.items():
            rel_path = rel_path.format(**variables)
            write_text(project_dir / rel_path, text.format(**variables))
            written.append(rel_path)

        key_file = keypair_path(project_dir, variables["snake_name"])
        write_keypair(key_file, keypair)
        written.append(str(key_file.relative_to(project_dir)))

        logger.info("Created %s project '%s' at %s", chosen.name, name, project_dir)
        return {"path": project_dir, "program_id": keypair.program_id, "files": written}
