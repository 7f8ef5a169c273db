"""Constants for the GitHub star lookup."""

# Host token a link must contain before it is parsed as a repository URL
GITHUB_HOST = "github.com"

# Stable REST API media type; pinned so response shapes do not drift
GITHUB_ACCEPT = "application/vnd.github.v3+json"

RATE_LIMIT_REMAINING_HEADER = "X-RateLimit-Remaining"
RATE_LIMIT_RESET_HEADER = "X-RateLimit-Reset"

# Field in the /repos/{owner}/{repo} payload carrying the star count
STARGAZERS_FIELD = "stargazers_count"
