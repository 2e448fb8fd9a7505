"""
Version inference engine.

The engine infers the next version from the nearest tagged versions,
the scope of the change and the stage of its completion. If the nearest
normal version is 1.1.0 and the nearest version of any kind is
1.2.0-milestone.1, the default settings infer:

=====  =========  ==================================
scope  stage      inferred version
=====  =========  ==================================
patch  milestone  1.1.1-milestone.1
minor  dev        1.2.0-dev.<commits since 1.1.0>
minor  milestone  1.2.0-milestone.2
minor  rc         1.2.0-rc.1
minor  final      1.2.0
major  milestone  2.0.0-milestone.1
=====  =========  ==================================

Build metadata (the short commit id by default) is appended to every
stage but ``final``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple, Union

import semver

from tag_semver.inference.locator import NearestVersion
from tag_semver.inference.model import (
    ChangeScope,
    InvalidArgumentError,
    Stage,
    StageKind,
)
from tag_semver.inference.settings import InferenceSettings


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


ScopeArg = Union[ChangeScope, str]


class Locator(Protocol):
    def locate(self) -> NearestVersion:
        ...


@dataclass(frozen=True)
class InferenceResult:
    """Outcome of a single inference.

    ``releasable`` is False when the release gate refused a new version;
    ``version`` is then the nearest version of any kind, unchanged.
    """

    version: semver.Version
    releasable: bool
    scope: ChangeScope
    stage: str
    nearest: NearestVersion

    def __str__(self) -> str:
        return str(self.version)


def increment_normal(previous: semver.Version, scope: ChangeScope) -> semver.Version:
    """Increment the normal version of ``previous`` according to ``scope``.

    The result never carries a pre-release or build metadata.
    """
    if scope is ChangeScope.MAJOR:
        return previous.bump_major()
    if scope is ChangeScope.MINOR:
        return previous.bump_minor()
    if scope is ChangeScope.PATCH:
        return previous.bump_patch()
    raise InvalidArgumentError(f"Invalid scope: {scope}")


def increment_prerelease(version: semver.Version) -> semver.Version:
    """Increment the pre-release of ``version``, dropping build metadata.

    A numeric last identifier is incremented (``rc.1`` -> ``rc.2``);
    otherwise ``.1`` is appended (``rc`` -> ``rc.1``).
    """
    identifiers = version.prerelease.split(".") if version.prerelease else []
    if identifiers and identifiers[-1].isdigit():
        identifiers[-1] = str(int(identifiers[-1]) + 1)
    else:
        identifiers.append("1")
    return version.replace(prerelease=".".join(identifiers), build=None)


class VersionInferenceEngine:
    """Infer versions from the nearest tags, a scope and a stage.

    Parameters
    ----------
    locator
        Object whose ``locate()`` returns a fresh :class:`NearestVersion`.
    settings : InferenceSettings, optional
        Stage sets and hooks. Defaults to :class:`InferenceSettings` with
        no repository, so the default build metadata hook would fail;
        pass settings bound to a repository for real use.
    """

    def __init__(self, locator: Locator, settings: Optional[InferenceSettings] = None) -> None:
        self.locator = locator
        self.settings = settings if settings is not None else InferenceSettings()
        self._last_result: Optional[InferenceResult] = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Argument handling
    # ------------------------------------------------------------------
    @staticmethod
    def _coerce_scope(scope: Optional[ScopeArg]) -> ChangeScope:
        if scope is None:
            raise InvalidArgumentError("Scope cannot be null.")
        if isinstance(scope, ChangeScope):
            return scope
        return ChangeScope.parse(scope)

    def resolve_default_scope_and_stage(
        self,
        scope: Optional[ScopeArg] = None,
        stage: Optional[str] = None,
    ) -> Tuple[ChangeScope, str]:
        """Fill in a missing scope or stage with its default.

        The stage defaults to the lowest untagged stage and the scope to
        PATCH. Values that are given are returned as they are, apart from
        scope names being parsed.
        """
        if stage is None:
            stage = self.settings.default_stage()
        resolved_scope = ChangeScope.PATCH if scope is None else self._coerce_scope(scope)
        return resolved_scope, stage

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------
    def infer_default(
        self,
        scope: Optional[ScopeArg] = None,
        stage: Optional[str] = None,
    ) -> InferenceResult:
        """Infer a version, using defaults for whichever of scope and stage is missing."""
        resolved_scope, resolved_stage = self.resolve_default_scope_and_stage(scope, stage)
        return self.infer(resolved_scope, resolved_stage)

    def infer(self, scope: Optional[ScopeArg], stage: str) -> InferenceResult:
        """Infer the version for a ``scope`` change at ``stage``.

        Arguments are validated before anything else happens; an invalid
        scope or stage leaves the cached result untouched. Errors from the
        locator or the settings hooks propagate unchanged.

        Raises
        ------
        InvalidArgumentError
            If ``scope`` is missing or unknown, or ``stage`` is not valid.
        """
        change_scope = self._coerce_scope(scope)
        resolved = self.settings.resolve_stage(stage)
        logger.info("Beginning version inference for %s version of %s change", stage, change_scope.name)

        nearest = self.locator.locate()
        logger.debug("Located nearest version: %s", nearest)

        if self.settings.allow_release(nearest):
            version = self._infer_releasable(nearest, change_scope, resolved)
            logger.info("Inferred version %s for %s %s change", version, stage, change_scope.name)
            result = InferenceResult(version, True, change_scope, stage, nearest)
        else:
            logger.warning("No committed changes since %s, using that version", nearest.any)
            result = InferenceResult(nearest.any, False, change_scope, stage, nearest)

        with self._lock:
            self._last_result = result
        return result

    def _infer_releasable(
        self,
        nearest: NearestVersion,
        scope: ChangeScope,
        stage: Stage,
    ) -> semver.Version:
        target = increment_normal(nearest.normal, scope)
        logger.debug("Inferred target normal version: %s", target)

        if stage.kind is StageKind.UNTAGGED:
            target = target.replace(prerelease=f"{stage.name}.{nearest.distance_from_normal}")
        elif stage.kind is StageKind.TAGGED:
            if nearest.any.finalize_version() == target and nearest.stage == stage.name:
                # continue the release train
                target = increment_prerelease(nearest.any)
            else:
                target = target.replace(prerelease=f"{stage.name}.1")

        if self.settings.use_build_metadata_for_stage(stage.name):
            target = target.replace(build=self.settings.create_build_metadata())
        return target

    # ------------------------------------------------------------------
    # Memoized accessors
    # ------------------------------------------------------------------
    @property
    def last_result(self) -> Optional[InferenceResult]:
        """The result of the most recent successful inference, if any."""
        return self._last_result

    @property
    def version(self) -> semver.Version:
        """The last inferred version, inferring with defaults on first access."""
        with self._lock:
            if self._last_result is None:
                logger.info("Version being inferred due to first access")
                self.infer_default()
            return self._last_result.version

    def __str__(self) -> str:
        return str(self.version)
