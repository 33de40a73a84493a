"""Unit tests for the synchronous forks client."""

from unittest.mock import MagicMock

import pytest

from .ensure import InvalidArgumentError
from .forks import RepositoryForksClient
from .models import NO_OPTIONS, ApiOptions, ForkSort, NewRepositoryFork, RepositoryForksListRequest


def describe_RepositoryForksClient():
    @pytest.fixture
    def github_client():
        client = MagicMock()
        client.connection.get_and_flatten_all_pages.return_value = iter([{"id": 1}, {"id": 2}])
        client.call.side_effect = lambda fn, *args, **kwargs: fn(*args, **kwargs)
        client.github.get_repo.return_value.create_fork.return_value.raw_data = {
            "id": 42,
            "full_name": "me/Hello-World",
        }
        return client

    @pytest.fixture
    def forks(github_client: MagicMock):
        return RepositoryForksClient(github_client)

    def describe_get_all():
        def it_returns_every_fork(forks, github_client: MagicMock):
            result = forks.get_all("octocat", "Hello-World")

            assert result == [{"id": 1}, {"id": 2}]
            github_client.connection.get_and_flatten_all_pages.assert_called_once_with(
                "repos/octocat/Hello-World/forks", None, NO_OPTIONS
            )

        def it_passes_filter_and_options(forks, github_client: MagicMock):
            options = ApiOptions(page_size=100)

            forks.get_all("octocat", "Hello-World", RepositoryForksListRequest(ForkSort.WATCHERS), options)

            github_client.connection.get_and_flatten_all_pages.assert_called_once_with(
                "repos/octocat/Hello-World/forks", {"sort": "watchers"}, options
            )

        def it_lists_by_repository_id(forks, github_client: MagicMock):
            forks.get_all_for_repository_id(1296269)

            github_client.connection.get_and_flatten_all_pages.assert_called_once_with(
                "repositories/1296269/forks", None, NO_OPTIONS
            )

        def it_rejects_empty_owner(forks, github_client: MagicMock):
            with pytest.raises(InvalidArgumentError):
                forks.get_all("", "Hello-World")

            github_client.connection.get_and_flatten_all_pages.assert_not_called()

        def it_rejects_none_options(forks):
            with pytest.raises(InvalidArgumentError):
                forks.get_all_for_repository_id(1296269, options=None)

    def describe_create():
        def it_forks_through_pygithub(forks, github_client: MagicMock):
            result = forks.create("octocat", "Hello-World", NewRepositoryFork(organization="github"))

            assert result == {"id": 42, "full_name": "me/Hello-World"}
            github_client.github.get_repo.assert_called_once_with("octocat/Hello-World", lazy=True)
            github_client.github.get_repo.return_value.create_fork.assert_called_once_with(
                organization="github"
            )
            github_client.call.assert_called_once()

        def it_forks_by_repository_id(forks, github_client: MagicMock):
            forks.create_for_repository_id(1296269, NewRepositoryFork())

            github_client.github.get_repo.assert_called_once_with(1296269, lazy=True)
            github_client.github.get_repo.return_value.create_fork.assert_called_once_with()

        def it_rejects_none_fork(forks, github_client: MagicMock):
            with pytest.raises(InvalidArgumentError) as exc_info:
                forks.create("octocat", "Hello-World", None)

            assert exc_info.value.param_name == "fork"
            github_client.call.assert_not_called()

        def it_rejects_none_fork_by_id(forks, github_client: MagicMock):
            with pytest.raises(InvalidArgumentError):
                forks.create_for_repository_id(1296269, None)

            github_client.call.assert_not_called()
