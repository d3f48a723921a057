"""Error types shared by the sync engine, the version resolver and the CLI.

Every error carries a human-readable message and an optional hint that the
CLI prints underneath it.
"""

from __future__ import annotations


class StarpinError(Exception):
    """Base class for all starpin errors."""

    def __init__(self, message: str, hint: str = ""):
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n[HINT] {self.hint}"
        return self.message


class NotFoundError(StarpinError):
    """A declaration site is absent from otherwise valid content."""


class ParseError(StarpinError):
    """A declaration site is present but malformed (e.g. unbalanced quotes)."""

    def __init__(self, message: str, line_number: int = 0, line: str = "", hint: str = ""):
        self.line_number = line_number
        self.line = line
        if line_number:
            message = f"{message} (line {line_number}: {line.strip()!r})"
        super().__init__(message, hint)


class RegistryError(StarpinError):
    """The package registry could not be reached or returned an unusable body."""

    def __init__(self, package: str, reason: str):
        self.package = package
        self.reason = reason
        super().__init__(f"Failed to fetch versions for '{package}': {reason}")


class NoVersionsError(StarpinError):
    """The registry answered but no usable version was found."""

    def __init__(self, package: str):
        self.package = package
        super().__init__(f"No valid versions found for '{package}'")


class MismatchError(StarpinError):
    """Soft error: the two files still disagree after a sync.

    Stored on the sync result and logged; the reconciler never raises it.
    """

    def __init__(self, source_id: str | None, manifest_id: str | None):
        self.source_id = source_id
        self.manifest_id = manifest_id
        super().__init__(
            f"Program IDs still differ after sync "
            f"(lib.rs: {source_id or 'not found'}, Starpin.toml: {manifest_id or 'not found'})",
            hint="Check both files manually.",
        )


class ProjectError(StarpinError):
    """Project-level problems: missing files, bad names, bad configuration."""
