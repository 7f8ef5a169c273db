"""
Repository identifier extraction from link targets.

Recognized forms (scheme and host are matched case-insensitively):
- https://github.com/owner/repo
- https://github.com/owner/repo/
- https://github.com/owner/repo/tree/main
- https://github.com/owner/repo/blob/main/README.md
- https://www.github.com/owner/repo
- http://github.com/owner/repo
- https://github.com/owner/repo.git
"""

import re

from ghstars.services.github.constants import GITHUB_HOST
from ghstars.services.github.types import RepositoryIdentifier

_REPO_URL_RE = re.compile(
    r"https?://(?:www\.)?github\.com/([^/\s#?\x00-\x1f\x7f]+)/([^/\s#?\x00-\x1f\x7f]+)(?:/.*)?\Z",
    re.IGNORECASE,
)

_GIT_SUFFIX = ".git"


def extract_repo_info(url: str) -> RepositoryIdentifier | None:
    """
    Extract repository owner and name from a GitHub URL.

    Returns None if the URL is not a GitHub repository URL. Owner and repo are
    returned exactly as written in the URL.
    """
    if GITHUB_HOST not in url.strip().lower():
        return None

    match = _REPO_URL_RE.search(url)
    if not match:
        return None

    owner, repo = match.group(1), match.group(2)
    if repo.endswith(_GIT_SUFFIX):
        repo = repo[: -len(_GIT_SUFFIX)]
    if not repo:
        return None

    return RepositoryIdentifier(owner=owner, repo=repo)
