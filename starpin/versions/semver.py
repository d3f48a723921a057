"""Semantic versions (https://semver.org, 2.0.0) and their precedence."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field

# Official semver.org pattern, numeric identifiers without leading zeros.
_SEMVER_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SemVer:
    """A parsed semantic version.

    Ordering follows semver precedence: major, minor and patch numerically,
    then a version without pre-release ranks above any pre-release of the
    same core, then pre-release identifiers left to right (numeric ones
    numerically and below alphanumeric ones, which compare as ASCII).
    Build metadata is kept for display but ignored for precedence.
    """

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: tuple[str, ...] = field(default=())

    @classmethod
    def parse(cls, text: str) -> SemVer:
        """Parse *text*; raises ``ValueError`` if it is not a semantic version."""
        match = _SEMVER_RE.match(text.strip())
        if not match:
            raise ValueError(f"Not a semantic version: {text!r}")
        pre = match.group("pre")
        build = match.group("build")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            pre=tuple(pre.split(".")) if pre else (),
            build=tuple(build.split(".")) if build else (),
        )

    @property
    def is_stable(self) -> bool:
        """True when there is no pre-release component."""
        return not self.pre

    def _key(self) -> tuple:
        if not self.pre:
            pre_key: tuple = (1,)
        else:
            pre_key = (0, tuple(
                (0, int(part), "") if part.isdigit() else (1, 0, part)
                for part in self.pre
            ))
        return (self.major, self.minor, self.patch, pre_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: SemVer) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def try_parse(text: str) -> SemVer | None:
    """Like :meth:`SemVer.parse` but returns ``None`` for invalid input."""
    try:
        return SemVer.parse(text)
    except ValueError:
        return None
