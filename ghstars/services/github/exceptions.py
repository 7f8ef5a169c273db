"""Exceptions for GitHub star lookups."""


class GitHubAPIError(Exception):
    """Error from GitHub API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        rate_limit_reset: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.rate_limit_reset = rate_limit_reset  # Unix timestamp when rate limit resets
        super().__init__(message)


class RepositoryNotFound(GitHubAPIError):
    """Repository is missing, private, or was renamed without a redirect.

    A 404 is authoritative, so callers must not fall back to a stale count.
    """

    def __init__(self, full_name: str):
        self.full_name = full_name
        super().__init__(f"Repository {full_name} not found", status_code=404)


class RateLimitExceeded(GitHubAPIError):
    """GitHub API quota is exhausted until the reset timestamp."""

    def __init__(self, rate_limit_reset: int | None, status_code: int | None = None):
        super().__init__(
            "GitHub API rate limit exceeded",
            status_code=status_code,
            rate_limit_reset=rate_limit_reset,
        )


class MalformedResponse(GitHubAPIError):
    """Successful response whose body does not carry a usable star count."""

    def __init__(self, full_name: str, detail: str):
        self.full_name = full_name
        super().__init__(f"Invalid response data for {full_name}: {detail}", status_code=200)
