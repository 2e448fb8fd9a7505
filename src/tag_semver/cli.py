"""
Command line interface for the tag_semver tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``tag-semver`` command. It locates the
repository, loads the optional project configuration, runs the version
inference and prints the inferred version on stdout so build scripts
can capture it. Status and error messages go to stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from tag_semver import __version__
from tag_semver.config.loader import ConfigError, load_config
from tag_semver.inference.engine import InferenceResult, VersionInferenceEngine
from tag_semver.inference.locator import NearestVersionLocator
from tag_semver.inference.model import InvalidArgumentError
from tag_semver.inference.settings import InferenceSettings, NoBuildMetadataSettings
from tag_semver.vcs.git_client import GitClient, GitError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_CONFIG_ERROR = 4
EXIT_VCS_FAILURE = 5


# ---------------------------------------------------------------------------
# Status display utilities (stderr, stdout is reserved for the version)
# ---------------------------------------------------------------------------

def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}", err=True)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def print_summary_box(title: str, items: List[str]):
    """Print a formatted summary box."""
    max_width = max(len(title), max(len(item) for item in items) if items else 0)
    box_width = min(max_width + 4, 60)

    click.echo(f"┌{'─' * box_width}┐", err=True)
    click.echo(f"│ {title.ljust(box_width - 2)}│", err=True)
    click.echo(f"├{'─' * box_width}┤", err=True)
    for item in items:
        click.echo(f"│ {item.ljust(box_width - 2)}│", err=True)
    click.echo(f"└{'─' * box_width}┘", err=True)


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def build_settings(client: GitClient, config: Dict[str, Any]) -> InferenceSettings:
    """Create inference settings from the loaded configuration.

    Raises
    ------
    InvalidArgumentError
        If the configured stage sets are not valid.
    """
    settings_cls = InferenceSettings if config["build_metadata"] else NoBuildMetadataSettings
    return settings_cls(
        repository=client,
        untagged_stages=config["untagged_stages"],
        tagged_stages=config["tagged_stages"],
    )


def show_nearest_versions(result: InferenceResult) -> None:
    """Print the nearest versions the result was inferred from."""
    nearest = result.nearest
    print_summary_box(
        "Nearest versions",
        [
            f"normal: {nearest.normal} ({nearest.distance_from_normal} commits)",
            f"any:    {nearest.any} ({nearest.distance_from_any} commits)",
            f"stage:  {nearest.stage or '-'}",
            f"scope:  {result.scope.name.lower()} / stage: {result.stage}",
        ],
    )


@click.command()
@click.option("--scope", envvar="RELEASE_SCOPE", help="Scope of the change: major, minor or patch.")
@click.option("--stage", envvar="RELEASE_STAGE", help="Stage of the release, e.g. dev, milestone, rc or final.")
@click.option(
    "--repo",
    "repo",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory inside the Git repository (defaults to the current directory).",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file to use instead of .tag_semver.json in the repository root.",
)
@click.option("--show-nearest", is_flag=True, help="Also show the nearest tagged versions on stderr.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="tag-semver")
def main(
    scope: Optional[str],
    stage: Optional[str],
    repo: Optional[Path],
    config_file: Optional[Path],
    show_nearest: bool,
    verbose: bool,
) -> None:
    """Infer the next semantic version from the Git tags of a repository."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    try:
        start_dir = repo if repo is not None else Path.cwd()
        repo_root = GitClient.find_repo_root(start_dir)
        if repo_root is None:
            print_error(f"No Git repository found at {start_dir} or its parent directories.")
            raise click.exceptions.Exit(EXIT_NO_REPO)
        logger.debug("Repository root: %s", repo_root)

        try:
            config = load_config(repo_root, config_file)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        client = GitClient(repo_root)
        try:
            settings = build_settings(client, config)
        except InvalidArgumentError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        engine = VersionInferenceEngine(
            NearestVersionLocator(client, tag_prefix=config["tag_prefix"]),
            settings,
        )

        try:
            result = engine.infer_default(
                scope if scope is not None else config["scope"],
                stage if stage is not None else config["stage"],
            )
        except InvalidArgumentError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_INVALID_USAGE)
        except GitError as exc:
            print_error(f"Git error: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        if show_nearest:
            show_nearest_versions(result)
        if not result.releasable:
            print_warning(f"No commits since {result.nearest.any}; nothing to release.")

        click.echo(str(result.version))
        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
