"""List and create GitHub repository forks, synchronously or as async streams."""

from .cli import main
from .ensure import InvalidArgumentError
from .github import GitHubClient, get_client
from .models import NO_OPTIONS, ApiOptions, ForkSort, NewRepositoryFork, RepositoryForksListRequest
from .reactive import ObservableRepositoryForksClient

__all__ = [
    "main",
    "GitHubClient",
    "get_client",
    "ObservableRepositoryForksClient",
    "InvalidArgumentError",
    "ApiOptions",
    "NO_OPTIONS",
    "ForkSort",
    "NewRepositoryFork",
    "RepositoryForksListRequest",
]

if __name__ == "__main__":
    main()
