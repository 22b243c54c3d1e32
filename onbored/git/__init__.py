"""Git data source for repository history."""

from .history import GitRepository, NotARepositoryError, repo_name_from_url

__all__ = ["GitRepository", "NotARepositoryError", "repo_name_from_url"]
