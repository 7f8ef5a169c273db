"""Data types for GitHub star lookups."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RepositoryIdentifier:
    """Canonical (owner, repo) pair, independent of URL decoration."""

    owner: str
    repo: str

    @property
    def cache_key(self) -> str:
        """Key used for the star cache, compared as given (not case-folded)."""
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return self.cache_key
