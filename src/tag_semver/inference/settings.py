"""
Settings and override points for version inference.

:class:`InferenceSettings` holds the configured stage sets and the three
hooks the engine consults during an inference: whether a release is
allowed at all, whether a stage gets build metadata, and what that
build metadata is. Subclass it and override the hook methods to change
their behaviour; the engine calls each hook at most once per inference.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Protocol

from tag_semver.inference.locator import NearestVersion
from tag_semver.inference.model import (
    FINAL_STAGE,
    InvalidArgumentError,
    Stage,
    StageKind,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


DEFAULT_UNTAGGED_STAGES = ("dev",)
DEFAULT_TAGGED_STAGES = ("milestone", "rc")

STAGE_NAME_PATTERN = re.compile(r"[0-9A-Za-z-]+")


class CommitIdSource(Protocol):
    """Anything that can report the abbreviated id of the current commit."""

    def head_short_id(self) -> str:
        ...


def _stage_set(stages: Iterable[str], label: str) -> frozenset:
    if isinstance(stages, str):
        raise InvalidArgumentError(f"{label} must be a collection of stage names, not a string")
    entries = list(stages)
    for stage in entries:
        if not isinstance(stage, str) or not stage:
            raise InvalidArgumentError(f"Invalid {label} entry ({stage!r}). Stage names must be non-empty strings.")
        # stage names become the first pre-release identifier
        if not STAGE_NAME_PATTERN.fullmatch(stage):
            raise InvalidArgumentError(
                f"Invalid {label} entry ({stage!r}). Stage names may only contain [0-9A-Za-z-]."
            )
        if stage == FINAL_STAGE:
            raise InvalidArgumentError(f"'{FINAL_STAGE}' is reserved and cannot be one of the {label}")
    return frozenset(entries)


class InferenceSettings:
    """Stage configuration plus the overridable inference hooks.

    Parameters
    ----------
    repository : CommitIdSource, optional
        Used by the default :meth:`create_build_metadata`. Usually the
        :class:`~tag_semver.vcs.git_client.GitClient` of the repository.
    untagged_stages : Iterable[str], optional
        Stages numbered by commits since the nearest normal version.
        Defaults to ``{"dev"}``.
    tagged_stages : Iterable[str], optional
        Stages numbered by release sequence. Defaults to
        ``{"milestone", "rc"}``.

    Raises
    ------
    InvalidArgumentError
        If a stage name is empty, is ``"final"``, or appears in both sets.
    """

    def __init__(
        self,
        repository: Optional[CommitIdSource] = None,
        untagged_stages: Optional[Iterable[str]] = None,
        tagged_stages: Optional[Iterable[str]] = None,
    ) -> None:
        self.repository = repository
        untagged = _stage_set(
            DEFAULT_UNTAGGED_STAGES if untagged_stages is None else untagged_stages,
            "untagged stages",
        )
        tagged = _stage_set(
            DEFAULT_TAGGED_STAGES if tagged_stages is None else tagged_stages,
            "tagged stages",
        )
        overlap = untagged & tagged
        if overlap:
            raise InvalidArgumentError(
                f"Stages cannot be both tagged and untagged: {sorted(overlap)}"
            )
        self._untagged_stages = untagged
        self._tagged_stages = tagged

    @property
    def untagged_stages(self) -> List[str]:
        return sorted(self._untagged_stages)

    @property
    def tagged_stages(self) -> List[str]:
        return sorted(self._tagged_stages)

    @property
    def all_stages(self) -> List[str]:
        """All valid stages: untagged, tagged and ``final``, sorted."""
        return sorted(self._untagged_stages | self._tagged_stages | {FINAL_STAGE})

    def default_stage(self) -> str:
        """Return the lowest-precedence untagged stage.

        Raises
        ------
        InvalidArgumentError
            If no untagged stages are configured.
        """
        if not self._untagged_stages:
            raise InvalidArgumentError(
                "No untagged stages configured; a stage must be given explicitly"
            )
        # the lexicographically first stage has the lowest semver precedence
        return min(self._untagged_stages)

    def resolve_stage(self, name: str) -> Stage:
        """Classify ``name`` against the configured stage sets.

        Raises
        ------
        InvalidArgumentError
            If ``name`` is not one of :attr:`all_stages`.
        """
        if not isinstance(name, str):
            raise InvalidArgumentError(
                f"Invalid stage ({name!r}). Must use one of: {self.all_stages}"
            )
        if name == FINAL_STAGE:
            return Stage(name, StageKind.FINAL)
        if name in self._untagged_stages:
            return Stage(name, StageKind.UNTAGGED)
        if name in self._tagged_stages:
            return Stage(name, StageKind.TAGGED)
        raise InvalidArgumentError(
            f"Invalid stage ({name}). Must use one of: {self.all_stages}"
        )

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def allow_release(self, nearest: NearestVersion) -> bool:
        """Return True if a new version may be inferred.

        By default a release needs at least one commit since the nearest
        version of any kind.
        """
        return nearest.distance_from_any > 0

    def use_build_metadata_for_stage(self, stage: str) -> bool:
        """Return True if versions for ``stage`` carry build metadata."""
        return stage != FINAL_STAGE

    def create_build_metadata(self) -> str:
        """Return the build metadata to attach, by default HEAD's short id."""
        if self.repository is None:
            raise InvalidArgumentError(
                "No repository configured to create build metadata from"
            )
        return self.repository.head_short_id()


class NoBuildMetadataSettings(InferenceSettings):
    """Settings that never attach build metadata to inferred versions."""

    def use_build_metadata_for_stage(self, stage: str) -> bool:
        return False
