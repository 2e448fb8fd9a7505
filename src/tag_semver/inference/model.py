"""
Value types shared by the inference engine.

:class:`ChangeScope` names the magnitude of a change and :class:`Stage`
is a release stage name already classified against the configured
stage sets. Classification happens once, when the stage is validated,
so the rest of the engine dispatches on :class:`StageKind` instead of
repeating membership tests.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


FINAL_STAGE = "final"


class InvalidArgumentError(ValueError):
    """Raised when a scope, stage or stage configuration is not valid."""

    pass


class ChangeScope(enum.IntEnum):
    """Magnitude of a change, ordered PATCH < MINOR < MAJOR."""

    PATCH = 1
    MINOR = 2
    MAJOR = 3

    @classmethod
    def parse(cls, value: str) -> "ChangeScope":
        """Return the scope named by ``value``, ignoring case.

        Raises
        ------
        InvalidArgumentError
            If ``value`` does not name a scope.
        """
        if not isinstance(value, str):
            raise InvalidArgumentError(f"Invalid scope ({value!r}). Must be a string.")
        try:
            return cls[value.strip().upper()]
        except KeyError:
            choices = ", ".join(scope.name.lower() for scope in sorted(cls, reverse=True))
            raise InvalidArgumentError(
                f"Invalid scope ({value}). Must use one of: {choices}"
            ) from None


class StageKind(enum.Enum):
    """How versions for a stage are numbered."""

    FINAL = "final"        # no pre-release label
    UNTAGGED = "untagged"  # numbered by commits since the nearest normal version
    TAGGED = "tagged"      # numbered by release sequence


@dataclass(frozen=True)
class Stage:
    """A validated stage name together with its numbering kind."""

    name: str
    kind: StageKind

    def __str__(self) -> str:
        return self.name
