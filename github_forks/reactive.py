"""Async wrapper over the Repository Forks API.

List calls return an async iterator and create calls return an awaitable.
Arguments are checked when the method is called; no request is made until
the result is iterated or awaited.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable
from typing import TYPE_CHECKING

from . import api_urls
from .ensure import argument_not_null, argument_not_null_or_empty_string
from .models import NO_OPTIONS, ApiOptions, NewRepositoryFork, RepositoryForksListRequest

if TYPE_CHECKING:
    from .github import GitHubClient

logger = logging.getLogger(__name__)

_EXHAUSTED = object()


class ObservableRepositoryForksClient:
    """Lazy async access to a repository's forks."""

    def __init__(self, client: "GitHubClient"):
        argument_not_null(client, "client")

        self._client = client.repository.forks
        self._connection = client.connection

    def get_all(
        self,
        owner: str,
        name: str,
        request: RepositoryForksListRequest | None = None,
        options: ApiOptions = NO_OPTIONS,
    ) -> AsyncIterator[dict]:
        """Iterate over every fork of owner/name, all pages flattened in order.

        Args:
            owner: The owner of the repository
            name: The name of the repository
            request: Optional filter, e.g. sort order. None lists unfiltered.
            options: Pagination controls. Must not be None.
        """
        argument_not_null_or_empty_string(owner, "owner")
        argument_not_null_or_empty_string(name, "name")
        argument_not_null(options, "options")

        return self._get_and_flatten_all_pages(api_urls.repository_forks(owner, name), request, options)

    def get_all_for_repository_id(
        self,
        repository_id: int,
        request: RepositoryForksListRequest | None = None,
        options: ApiOptions = NO_OPTIONS,
    ) -> AsyncIterator[dict]:
        """Same as get_all, addressing the repository by its numeric id."""
        argument_not_null(options, "options")

        return self._get_and_flatten_all_pages(api_urls.repository_forks_by_id(repository_id), request, options)

    async def _get_and_flatten_all_pages(self, endpoint, request, options):
        params = None if request is None else request.to_parameters_dict()
        pages = self._connection.get_all_pages(endpoint, params, options)
        while True:
            # each page is a blocking HTTP call
            page = await asyncio.to_thread(next, pages, _EXHAUSTED)
            if page is _EXHAUSTED:
                return
            logger.debug("Fetched %d forks from %s", len(page), endpoint)
            for repository in page:
                yield repository

    def create(self, owner: str, name: str, fork: NewRepositoryFork) -> Awaitable[dict]:
        """Fork owner/name. Awaiting the result sends exactly one create request."""
        argument_not_null_or_empty_string(owner, "owner")
        argument_not_null_or_empty_string(name, "name")
        argument_not_null(fork, "fork")

        return asyncio.to_thread(self._client.create, owner, name, fork)

    def create_for_repository_id(self, repository_id: int, fork: NewRepositoryFork) -> Awaitable[dict]:
        argument_not_null(fork, "fork")

        return asyncio.to_thread(self._client.create_for_repository_id, repository_id, fork)
