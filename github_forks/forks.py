"""Synchronous client for GitHub's Repository Forks API.

See https://docs.github.com/rest/repos/forks for the endpoints behind it.
"""

from typing import TYPE_CHECKING

from . import api_urls
from .ensure import argument_not_null, argument_not_null_or_empty_string
from .models import NO_OPTIONS, ApiOptions, NewRepositoryFork, RepositoryForksListRequest

if TYPE_CHECKING:
    from .github import GitHubClient


class RepositoryForksClient:
    """List and create forks, returning plain results."""

    def __init__(self, client: "GitHubClient"):
        argument_not_null(client, "client")
        self._client = client

    def get_all(
        self,
        owner: str,
        name: str,
        request: RepositoryForksListRequest | None = None,
        options: ApiOptions = NO_OPTIONS,
    ) -> list[dict]:
        """Get every fork of a repository, all pages fetched."""
        argument_not_null_or_empty_string(owner, "owner")
        argument_not_null_or_empty_string(name, "name")
        argument_not_null(options, "options")

        return self._get_all(api_urls.repository_forks(owner, name), request, options)

    def get_all_for_repository_id(
        self,
        repository_id: int,
        request: RepositoryForksListRequest | None = None,
        options: ApiOptions = NO_OPTIONS,
    ) -> list[dict]:
        argument_not_null(options, "options")

        return self._get_all(api_urls.repository_forks_by_id(repository_id), request, options)

    def _get_all(self, endpoint, request, options) -> list[dict]:
        params = None if request is None else request.to_parameters_dict()
        return list(self._client.connection.get_and_flatten_all_pages(endpoint, params, options))

    def create(self, owner: str, name: str, fork: NewRepositoryFork) -> dict:
        """Fork a repository. Set fork.organization to fork into an organization.

        GitHub answers immediately and copies the repository in the background,
        so the returned repository may not be populated yet.
        """
        argument_not_null_or_empty_string(owner, "owner")
        argument_not_null_or_empty_string(name, "name")
        argument_not_null(fork, "fork")

        return self._create(f"{owner}/{name}", fork)

    def create_for_repository_id(self, repository_id: int, fork: NewRepositoryFork) -> dict:
        argument_not_null(fork, "fork")

        return self._create(repository_id, fork)

    def _create(self, full_name_or_id: str | int, fork: NewRepositoryFork) -> dict:
        def _do_create():
            # lazy: skip the GET, create_fork only needs the repository URL
            repo = self._client.github.get_repo(full_name_or_id, lazy=True)
            return repo.create_fork(**fork.to_create_kwargs())

        created = self._client.call(_do_create)
        return created.raw_data
