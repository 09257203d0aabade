"""Git operations.

Usage:
    from modsync.git import Repository

    repo = Repository(Path("/path/to/repo"), runner)
    branch = repo.current_branch()
"""

from modsync.git.repository import GitError, Repository, StatusEntry, git_timeout

__all__ = [
    "GitError",
    "Repository",
    "StatusEntry",
    "git_timeout",
]
