"""
Version inference.

The engine in :mod:`tag_semver.inference.engine` combines the nearest
tagged versions found by :mod:`tag_semver.inference.locator` with a
change scope and a release stage to produce the next version. Stage
sets and the inference hooks live in :mod:`tag_semver.inference.settings`.
"""

from .engine import InferenceResult, VersionInferenceEngine, increment_normal, increment_prerelease  # noqa: F401
from .locator import NearestVersion, NearestVersionLocator  # noqa: F401
from .model import FINAL_STAGE, ChangeScope, InvalidArgumentError, Stage, StageKind  # noqa: F401
from .settings import InferenceSettings, NoBuildMetadataSettings  # noqa: F401
