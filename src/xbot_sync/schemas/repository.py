"""Helpers for repository identifiers."""


def parse_repo_string(repo: str) -> tuple[str, str]:
    """Split an ``owner/name`` repository string.

    Args:
        repo: Repository string (e.g., 'octo-org/ios-app')

    Returns:
        Tuple of (owner, name)

    Raises:
        ValueError: If the string is not in owner/name format
    """
    owner, sep, name = repo.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Repository must be in owner/name format: {repo!r}")
    return owner, name


def ssh_git_url(repo: str) -> str:
    """Build the SSH clone URL used by newly created bots.

    Args:
        repo: Repository in owner/name format

    Returns:
        URL like 'git@github.com:owner/name.git'
    """
    owner, name = parse_repo_string(repo)
    return f"git@github.com:{owner}/{name}.git"
