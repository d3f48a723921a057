"""Dependency version resolution.

:class:`VersionResolver` answers "which version of this crate should a
project use?": a pinned version wins as-is, otherwise the registry is asked
and the highest stable non-yanked release is chosen, falling back to the highest
pre-release when no stable release exists.

The resolver reports failures as :class:`RegistryError` or
:class:`NoVersionsError`.  Substituting a fallback version is the caller's
decision; :func:`resolve_dependency_versions` is the caller used by
``starpin init`` and ``starpin update``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from starpin.config import Settings, load_settings
from starpin.errors import NoVersionsError, RegistryError
from starpin.versions.registry import RegistryClient
from starpin.versions.semver import try_parse

logger = logging.getLogger(__name__)

STAR_FRAME = "star_frame"


def select_version(nums: Iterable[str], package: str = "") -> str:
    """Pick the version to use from a registry version list.

    Unparsable entries are skipped.  Returns the highest stable version if
    there is one, else the highest version overall.

    Raises:
        NoVersionsError: Nothing in *nums* parses as a semantic version.
    """
    latest = None
    latest_stable = None

    for num in nums:
        version = try_parse(num)
        if version is None:
            continue
        if latest is None or version > latest:
            latest = version
        if version.is_stable and (latest_stable is None or version > latest_stable):
            latest_stable = version

    chosen = latest_stable or latest
    if chosen is None:
        raise NoVersionsError(package)
    return str(chosen)


class VersionResolver:
    """Resolves the version of a crate, pinned or from the registry."""

    def __init__(self, client: RegistryClient | None = None):
        self.client = client or RegistryClient()

    def resolve(self, package: str, pinned: str | None = None) -> str:
        """Return *pinned* unchanged, or the best published version of *package*.

        Raises:
            RegistryError: The registry call failed.
            NoVersionsError: The registry listed no usable, non-yanked versions.
        """
        if pinned:
            return pinned

        versions = self.client.fetch_versions(package)
        return select_version((v.num for v in versions if not v.yanked), package)


@dataclass
class DependencyVersions:
    """The chosen version of every crate a Star Frame project depends on."""

    versions: dict[str, str] = field(default_factory=dict)
    fallbacks: list[str] = field(default_factory=list)  # crates that fell back

    @property
    def star_frame(self) -> str:
        return self.versions[STAR_FRAME]

    def get(self, package: str) -> str:
        return self.versions.get(package, "")


def resolve_dependency_versions(
    star_frame_version: str | None = None,
    resolver: VersionResolver | None = None,
    settings: Settings | None = None,
) -> DependencyVersions:
    """Resolve versions for a project, falling back when the registry fails.

    ``star_frame`` is resolved through *resolver* (or pinned with
    *star_frame_version*); the other crates use the configured versions.
    """
    settings = settings or load_settings()
    resolver = resolver or VersionResolver(RegistryClient(settings))
    resolved = DependencyVersions(versions=dict(settings.fallback_versions))

    try:
        resolved.versions[STAR_FRAME] = resolver.resolve(STAR_FRAME, pinned=star_frame_version)
    except (RegistryError, NoVersionsError) as e:
        fallback = settings.fallback_for(STAR_FRAME)
        logger.warning(
            "Could not resolve latest %s version (%s); using fallback %s",
            STAR_FRAME, e.message, fallback,
        )
        resolved.versions[STAR_FRAME] = fallback
        resolved.fallbacks.append(STAR_FRAME)

    return resolved
