import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import semver
from click.testing import CliRunner

import tag_semver.cli as cli
from tag_semver.config.loader import DEFAULTS, ConfigError
from tag_semver.inference.locator import NearestVersion
from tag_semver.vcs.git_client import GitError


class DummyLocator:
    def __init__(self, nearest=None, error=None):
        self.nearest = nearest
        self.error = error

    def locate(self):
        if self.error is not None:
            raise self.error
        return self.nearest


def nearest_version(distance_from_any=5):
    return NearestVersion.of(
        normal=semver.Version.parse("1.1.0"),
        any=semver.Version.parse("1.2.0-milestone.1"),
        distance_from_normal=5,
        distance_from_any=distance_from_any,
    )


class TestCLI(unittest.TestCase):
    def invoke(self, args=None, config=None, locator=None, repo_root=Path("/repo"), env=None):
        runner = CliRunner()
        merged = dict(DEFAULTS)
        merged.update(config or {})
        git_client_cls = MagicMock()
        git_client_cls.find_repo_root.return_value = repo_root
        git_client_cls.return_value.head_short_id.return_value = "abc1234"
        locator = locator or DummyLocator(nearest_version())
        with patch.object(cli, "GitClient", git_client_cls):
            with patch.object(cli, "load_config", return_value=merged):
                with patch.object(cli, "NearestVersionLocator", return_value=locator) as locator_cls:
                    result = runner.invoke(cli.main, args or [], env=env)
        self.locator_cls = locator_cls
        return result

    def lines(self, result):
        return result.output.splitlines()

    def test_defaults(self) -> None:
        result = self.invoke()
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("1.1.1-dev.5+abc1234", self.lines(result))

    def test_scope_and_stage_options(self) -> None:
        result = self.invoke(["--scope", "minor", "--stage", "milestone"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("1.2.0-milestone.2+abc1234", self.lines(result))

    def test_environment_variables(self) -> None:
        result = self.invoke(env={"RELEASE_SCOPE": "major", "RELEASE_STAGE": "final"})
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("2.0.0", self.lines(result))

    def test_options_override_config(self) -> None:
        result = self.invoke(["--stage", "rc"], config={"scope": "minor", "stage": "milestone"})
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("1.2.0-rc.1+abc1234", self.lines(result))

    def test_config_defaults_and_build_metadata_switch(self) -> None:
        result = self.invoke(config={"scope": "minor", "stage": "rc", "build_metadata": False})
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("1.2.0-rc.1", self.lines(result))

    def test_config_stages_and_prefix(self) -> None:
        result = self.invoke(
            ["--scope", "patch"],
            config={"untagged_stages": ["snapshot"], "tagged_stages": ["beta"], "tag_prefix": "rel-"},
        )
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("1.1.1-snapshot.5+abc1234", self.lines(result))
        self.assertEqual(self.locator_cls.call_args.kwargs["tag_prefix"], "rel-")

    def test_nothing_to_release(self) -> None:
        result = self.invoke(locator=DummyLocator(nearest_version(distance_from_any=0)))
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("1.2.0-milestone.1", self.lines(result))
        self.assertIn("nothing to release", result.output)

    def test_show_nearest(self) -> None:
        result = self.invoke(["--show-nearest"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("normal: 1.1.0 (5 commits)", result.output)
        self.assertIn("any:    1.2.0-milestone.1 (5 commits)", result.output)

    def test_invalid_stage(self) -> None:
        result = self.invoke(["--stage", "beta"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)
        self.assertIn("Invalid stage (beta)", result.output)

    def test_invalid_scope(self) -> None:
        result = self.invoke(["--scope", "huge"])
        self.assertEqual(result.exit_code, cli.EXIT_INVALID_USAGE)
        self.assertIn("Invalid scope (huge)", result.output)

    def test_no_repository(self) -> None:
        result = self.invoke(repo_root=None)
        self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)

    def test_config_error(self) -> None:
        runner = CliRunner()
        git_client_cls = MagicMock()
        git_client_cls.find_repo_root.return_value = Path("/repo")
        with patch.object(cli, "GitClient", git_client_cls):
            with patch.object(cli, "load_config", side_effect=ConfigError("bad config")):
                result = runner.invoke(cli.main, [])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        self.assertIn("bad config", result.output)

    def test_overlapping_stages_in_config(self) -> None:
        result = self.invoke(config={"untagged_stages": ["rc"], "tagged_stages": ["rc"]})
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_stage_name_outside_prerelease_grammar_in_config(self) -> None:
        result = self.invoke(config={"untagged_stages": ["pre release"]})
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        self.assertIn("pre release", result.output)

    def test_git_failure(self) -> None:
        result = self.invoke(locator=DummyLocator(error=GitError("fatal: bad revision")))
        self.assertEqual(result.exit_code, cli.EXIT_VCS_FAILURE)
        self.assertIn("fatal: bad revision", result.output)

    def test_unexpected_error(self) -> None:
        result = self.invoke(locator=DummyLocator(error=RuntimeError("boom")))
        self.assertEqual(result.exit_code, cli.EXIT_GENERIC_ERROR)
        self.assertIn("Unexpected error: boom", result.output)

    def test_version_option(self) -> None:
        result = CliRunner().invoke(cli.main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("tag-semver", result.output)


if __name__ == "__main__":
    unittest.main()
