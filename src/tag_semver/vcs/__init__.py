"""
Version control system (VCS) integration.

Contains the Git client used to read tags, commit counts and the
current commit id. The client never writes to the repository.
"""

from .git_client import GitClient, GitError  # noqa: F401
