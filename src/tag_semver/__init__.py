"""
Top-level package for tag_semver.

tag_semver infers the next semantic version of a project from the
version tags in its Git history. The command line entry point lives in
``tag_semver.cli``; library users start from
:class:`tag_semver.inference.VersionInferenceEngine`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
