"""Declaration-site editing for lib.rs and Starpin.toml.

A declaration site is a single line of the form ``<key> = "<value>"``.  In
``src/lib.rs`` the key is ``id`` (inside the ``#[program(...)]`` attribute);
in ``Starpin.toml`` the key is the program name and only lines inside a
``[programs.<network>]`` table count.

The functions here are pure text transforms: content in, content out.
Lines are split on ``\\n`` only, so ``\\r`` and anything after the closing
quote stay attached to their line and are written back unchanged.
"""

from __future__ import annotations

import re

from starpin.errors import NotFoundError, ParseError

# ---------------------------------------------------------------------------
# Constants / regex helpers
# ---------------------------------------------------------------------------

SOURCE_KEY = "id"
PROGRAMS_SECTION_PREFIX = "programs."
DEFAULT_NETWORK_SECTION = "programs.localnet"

# ``[table]`` or ``[[array.table]]`` header, with an optional trailing comment.
_SECTION_RE = re.compile(r"^\s*\[\[?\s*([^\[\]]+?)\s*\]\]?\s*(?:#.*)?$")

# Opening line of the Star Frame ``#[program(`` attribute.
_PROGRAM_ATTR_RE = re.compile(r"^(?P<indent>\s*)#\[program\(\s*$")


# ---------------------------------------------------------------------------
# Generic key scanning
# ---------------------------------------------------------------------------


def _split(content: str) -> list[str]:
    return content.split("\n")


def _join(lines: list[str]) -> str:
    return "\n".join(lines)


def _section_name(line: str) -> str | None:
    """Return the table name if *line* is a TOML table header."""
    match = _SECTION_RE.match(line.rstrip("\r"))
    return match.group(1) if match else None


def _key_matches(line: str, key: str) -> bool:
    """True when *line*, left-stripped, is ``<key>`` followed by ``=``."""
    stripped = line.lstrip()
    if not stripped.startswith(key):
        return False
    return stripped[len(key):].lstrip(" \t").startswith("=")


def _iter_sites(lines: list[str], key: str, section_prefix: str | None = None):
    """Yield ``(index, line)`` for every declaration site of *key*.

    With a *section_prefix*, only lines inside tables whose name starts with
    that prefix are considered.
    """
    in_section = section_prefix is None
    for index, line in enumerate(lines):
        if section_prefix is not None:
            name = _section_name(line)
            if name is not None:
                in_section = name.startswith(section_prefix)
                continue
        if in_section and _key_matches(line, key):
            yield index, line


def _quote_span(line: str, line_number: int) -> tuple[int, int]:
    """Return the indices of the first and last double quote on *line*."""
    first = line.find('"')
    last = line.rfind('"')
    if first == -1 or first == last:
        raise ParseError("Unbalanced quotes in declaration", line_number, line)
    return first, last


def _check_value(value: str) -> None:
    if not value:
        raise ParseError("Declaration value must not be empty")
    if '"' in value or "\n" in value or "\r" in value:
        raise ParseError(f"Declaration value may not contain quotes or newlines: {value!r}")


def _line_ending(line: str) -> str:
    return "\r" if line.endswith("\r") else ""


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_field(content: str, key: str, *, section_prefix: str | None = None) -> str | None:
    """Return the value of the first declaration site of *key*.

    Returns ``None`` when there is no site, or when the first site holds an
    empty string.  Raises :class:`ParseError` when the first site has fewer
    than two double quotes.
    """
    lines = _split(content)
    for index, line in _iter_sites(lines, key, section_prefix):
        first, last = _quote_span(line, index + 1)
        return line[first + 1:last] or None
    return None


def count_sites(content: str, key: str, *, section_prefix: str | None = None) -> int:
    """Number of declaration sites of *key* in *content*."""
    return sum(1 for _ in _iter_sites(_split(content), key, section_prefix))


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------


def replace_field(
    content: str,
    key: str,
    value: str,
    *,
    section_prefix: str | None = None,
    first_only: bool = True,
) -> tuple[str, int]:
    """Replace the quoted value of *key* and return ``(new_content, changed)``.

    Everything outside the quotes is preserved byte-for-byte.  Raises
    :class:`NotFoundError` when no site matches.
    """
    _check_value(value)
    lines = _split(content)
    changed = 0

    for index, line in _iter_sites(lines, key, section_prefix):
        first, last = _quote_span(line, index + 1)
        lines[index] = line[:first + 1] + value + line[last:]
        changed += 1
        if first_only:
            break

    if changed == 0:
        raise NotFoundError(f"No '{key} = \"...\"' declaration found")

    return _join(lines), changed


# ---------------------------------------------------------------------------
# lib.rs
# ---------------------------------------------------------------------------


def extract_source_id(content: str) -> str | None:
    """Program ID declared in lib.rs, or ``None``."""
    return extract_field(content, SOURCE_KEY)


def count_source_sites(content: str) -> int:
    return count_sites(content, SOURCE_KEY)


def replace_source_id(content: str, program_id: str) -> str:
    """Rewrite the first ``id = "..."`` line in lib.rs."""
    try:
        new_content, _ = replace_field(content, SOURCE_KEY, program_id)
    except NotFoundError:
        raise NotFoundError(
            "Could not find program ID declaration in lib.rs",
            hint='Expected a line like: id = "<program id>"',
        ) from None
    return new_content


def insert_source_id(content: str, program_id: str) -> str:
    """Add an ``id = "..."`` line right after the ``#[program(`` opener."""
    _check_value(program_id)
    lines = _split(content)
    for index, line in enumerate(lines):
        match = _PROGRAM_ATTR_RE.match(line.rstrip("\r"))
        if match:
            indent = match.group("indent") + "    "
            new_line = f'{indent}{SOURCE_KEY} = "{program_id}",{_line_ending(line)}'
            lines.insert(index + 1, new_line)
            return _join(lines)

    raise NotFoundError(
        "Could not find a '#[program(' attribute in lib.rs to hold the program ID",
        hint="Add the program ID to the #[program(...)] attribute manually.",
    )


def set_source_id(content: str, program_id: str) -> str:
    """Replace the lib.rs program ID, inserting a declaration if there is none."""
    if count_source_sites(content):
        return replace_source_id(content, program_id)
    return insert_source_id(content, program_id)


# ---------------------------------------------------------------------------
# Starpin.toml
# ---------------------------------------------------------------------------


def extract_manifest_id(content: str, program_name: str) -> str | None:
    """Program ID for *program_name* from the first ``[programs.*]`` match."""
    return extract_field(content, program_name, section_prefix=PROGRAMS_SECTION_PREFIX)


def count_manifest_sites(content: str, program_name: str) -> int:
    return count_sites(content, program_name, section_prefix=PROGRAMS_SECTION_PREFIX)


def replace_manifest_id(content: str, program_name: str, program_id: str) -> tuple[str, int]:
    """Rewrite every ``<program_name> = "..."`` line across all networks.

    Returns ``(new_content, lines_changed)``.
    """
    try:
        return replace_field(
            content,
            program_name,
            program_id,
            section_prefix=PROGRAMS_SECTION_PREFIX,
            first_only=False,
        )
    except NotFoundError:
        raise NotFoundError(
            f"Could not find program '{program_name}' declaration in Starpin.toml",
            hint=f'Expected a line like: {program_name} = "<program id>" under [programs.<network>]',
        ) from None


def insert_manifest_id(content: str, program_name: str, program_id: str) -> str:
    """Add one ``<program_name> = "..."`` line to Starpin.toml.

    The line goes at the end of the first ``[programs.<network>]`` table.
    When the file has no such table a ``[programs.localnet]`` table is
    appended.
    """
    _check_value(program_id)
    lines = _split(content)

    header = None
    for index, line in enumerate(lines):
        name = _section_name(line)
        if name is not None and name.startswith(PROGRAMS_SECTION_PREFIX):
            header = index
            break

    if header is None:
        prefix = content
        if prefix and not prefix.endswith("\n"):
            prefix += "\n"
        if prefix.strip():
            prefix += "\n"
        return f'{prefix}[{DEFAULT_NETWORK_SECTION}]\n{program_name} = "{program_id}"\n'

    end = len(lines)
    for index in range(header + 1, len(lines)):
        if _section_name(lines[index]) is not None:
            end = index
            break

    position = header + 1
    for index in range(end - 1, header, -1):
        if lines[index].strip():
            position = index + 1
            break

    eol = _line_ending(lines[header])
    lines.insert(position, f'{program_name} = "{program_id}"{eol}')
    return _join(lines)


def set_manifest_id(content: str, program_name: str, program_id: str) -> tuple[str, int]:
    """Replace every manifest site, inserting one if there is none."""
    if count_manifest_sites(content, program_name):
        return replace_manifest_id(content, program_name, program_id)
    return insert_manifest_id(content, program_name, program_id), 1
