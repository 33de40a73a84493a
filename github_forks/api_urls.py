"""Endpoint paths for the Repository Forks API."""


def repository_forks(owner: str, name: str) -> str:
    """Forks of the repository addressed by owner and name."""
    return f"repos/{owner}/{name}/forks"


def repository_forks_by_id(repository_id: int) -> str:
    """Forks of the repository addressed by its numeric id."""
    return f"repositories/{repository_id}/forks"
