"""
Locate the nearest tagged versions reachable from HEAD.

A :class:`NearestVersion` is a snapshot of the tag history as seen from
the current commit: the closest normal (non pre-release) version, the
closest version of any kind, and how many commits lie between HEAD and
each of them. The engine only needs an object with a ``locate()``
method returning this snapshot, so tests and other tools can supply
their own locator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import semver

from tag_semver.vcs.git_client import GitClient


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


INITIAL_VERSION = semver.Version(0, 0, 0)


@dataclass(frozen=True)
class NearestVersion:
    """Nearest tagged versions and their distances from HEAD.

    Attributes
    ----------
    normal : semver.Version
        Nearest tagged version without a pre-release component.
    any : semver.Version
        Nearest tagged version of any kind. May carry a pre-release and
        may equal ``normal``.
    stage : Optional[str]
        Stage label of ``any`` (its first pre-release identifier), if any.
    distance_from_normal : int
        Commits between HEAD and the ``normal`` tag.
    distance_from_any : int
        Commits between HEAD and the ``any`` tag. Not necessarily smaller
        than ``distance_from_normal``.
    """

    normal: semver.Version
    any: semver.Version
    stage: Optional[str]
    distance_from_normal: int
    distance_from_any: int

    def __post_init__(self) -> None:
        if self.distance_from_normal < 0 or self.distance_from_any < 0:
            raise ValueError("Distances must not be negative")

    @classmethod
    def of(
        cls,
        normal: semver.Version,
        any: semver.Version,
        distance_from_normal: int,
        distance_from_any: int,
    ) -> "NearestVersion":
        """Build a snapshot, deriving ``stage`` from ``any``'s pre-release."""
        return cls(
            normal=normal,
            any=any,
            stage=stage_of(any),
            distance_from_normal=distance_from_normal,
            distance_from_any=distance_from_any,
        )

    def __str__(self) -> str:
        return (
            f"normal={self.normal} ({self.distance_from_normal} commits), "
            f"any={self.any} ({self.distance_from_any} commits)"
        )


def stage_of(version: semver.Version) -> Optional[str]:
    """Return the first pre-release identifier of ``version``, or None."""
    if not version.prerelease:
        return None
    return version.prerelease.split(".")[0]


def parse_tag(name: str, prefix: str = "v") -> Optional[semver.Version]:
    """Parse a tag name as a version.

    The prefix is optional: with the default ``"v"`` both ``v1.2.0`` and
    ``1.2.0`` are recognised. Returns None for tags that are not versions.
    """
    text = name
    if prefix and text.startswith(prefix):
        text = text[len(prefix):]
    try:
        return semver.Version.parse(text)
    except ValueError:
        return None


def _nearest(
    candidates: Iterable[Tuple[semver.Version, int]],
) -> Optional[Tuple[semver.Version, int]]:
    """Pick the candidate with the smallest distance, preferring higher versions on ties."""
    best: Optional[Tuple[semver.Version, int]] = None
    for version, distance in candidates:
        if best is None or distance < best[1] or (distance == best[1] and version > best[0]):
            best = (version, distance)
    return best


class NearestVersionLocator:
    """Find the nearest version tags reachable from HEAD in a Git repository."""

    def __init__(self, git_client: GitClient, tag_prefix: str = "v") -> None:
        self.git_client = git_client
        self.tag_prefix = tag_prefix

    def _tagged_versions(self) -> List[Tuple[semver.Version, int]]:
        tagged = []
        for tag in self.git_client.list_merged_tags("HEAD"):
            version = parse_tag(tag, self.tag_prefix)
            if version is None:
                logger.debug("Ignoring tag that is not a version: %s", tag)
                continue
            distance = self.git_client.count_commits(f"refs/tags/{tag}..HEAD")
            logger.debug("Tag %s is %d commits from HEAD", tag, distance)
            tagged.append((version, distance))
        return tagged

    def locate(self) -> NearestVersion:
        """Return the nearest normal and nearest any version reachable from HEAD.

        When no normal version is tagged, ``0.0.0`` is used with a distance
        equal to the number of commits reachable from HEAD. When no version
        is tagged at all, ``any`` falls back to the same value.

        Raises
        ------
        GitError
            If any of the underlying Git queries fail.
        """
        tagged = self._tagged_versions()

        normal = _nearest((v, d) for v, d in tagged if not v.prerelease)
        if normal is None:
            normal = (INITIAL_VERSION, self.git_client.count_commits("HEAD"))

        any_version = _nearest(tagged) or normal

        nearest = NearestVersion.of(
            normal=normal[0],
            any=any_version[0],
            distance_from_normal=normal[1],
            distance_from_any=any_version[1],
        )
        logger.debug("Located nearest version: %s", nearest)
        return nearest
