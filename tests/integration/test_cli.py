"""Tests for the github-forks CLI."""

import json
from unittest.mock import MagicMock, patch

import pytest

from github_forks.cli import main, parse_repo_ref
from github_forks.ensure import InvalidArgumentError
from github_forks.models import ApiOptions, ApiResponse, NewRepositoryFork, RepositoryForksListRequest


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.connection.get_all_pages.return_value = iter(
        [[{"full_name": "a/Hello-World"}], [{"full_name": "b/Hello-World"}]]
    )
    client.repository.forks.create.return_value = {"full_name": "me/Hello-World"}
    client.repository.forks.create_for_repository_id.return_value = {"full_name": "me/Hello-World"}
    with patch("github_forks.github.get_client", return_value=client) as mock_get:
        client.mock_get = mock_get
        yield client


class TestParseRepoRef:
    def test_owner_name(self):
        assert parse_repo_ref("octocat/Hello-World") == ("octocat", "Hello-World")

    def test_numeric_id(self):
        assert parse_repo_ref("1296269") == 1296269

    @pytest.mark.parametrize("value", ["octocat", "/Hello-World", "octocat/", "a/b/c"])
    def test_invalid(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_repo_ref(value)


class TestListSubcommand:
    def test_prints_full_names_in_order(self, mock_client, capsys):
        with patch("sys.argv", ["prog", "list", "octocat/Hello-World"]):
            main()

        captured = capsys.readouterr()
        assert captured.out == "a/Hello-World\nb/Hello-World\n"
        assert "2 forks" in captured.err
        mock_client.connection.get_all_pages.assert_called_once_with(
            "repos/octocat/Hello-World/forks", None, ApiOptions()
        )

    def test_sort_and_paging_flags(self, mock_client):
        with patch("sys.argv", ["prog", "list", "1296269", "--sort", "oldest",
                                "--page-size", "50", "--page-count", "2"]):
            main()

        mock_client.connection.get_all_pages.assert_called_once_with(
            "repositories/1296269/forks",
            RepositoryForksListRequest(sort="oldest").to_parameters_dict(),
            ApiOptions(page_size=50, page_count=2),
        )

    def test_json_lines(self, mock_client, capsys):
        with patch("sys.argv", ["prog", "list", "octocat/Hello-World", "--json"]):
            main()

        lines = capsys.readouterr().out.splitlines()
        assert [json.loads(line) for line in lines] == [
            {"full_name": "a/Hello-World"},
            {"full_name": "b/Hello-World"},
        ]

    def test_passes_cache_flags(self, mock_client, tmp_path):
        with patch("sys.argv", ["prog", "--cache-dir", str(tmp_path), "--skip-cache",
                                "list", "octocat/Hello-World"]):
            main()

        mock_client.mock_get.assert_called_once_with(tmp_path, skip_cache=True)

    def test_invalid_repo_exits_1(self, mock_client, capsys):
        with patch("sys.argv", ["prog", "list", "not-a-repo"]):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert "error:" in capsys.readouterr().err
        mock_client.connection.get_all_pages.assert_not_called()

    def test_invalid_page_size_exits_1(self, mock_client):
        with patch("sys.argv", ["prog", "list", "octocat/Hello-World", "--page-size", "0"]):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1


class TestCreateSubcommand:
    def test_creates_fork(self, mock_client, capsys):
        with patch("sys.argv", ["prog", "create", "octocat/Hello-World", "--organization", "github"]):
            main()

        assert json.loads(capsys.readouterr().out) == {"full_name": "me/Hello-World"}
        mock_client.repository.forks.create.assert_called_once_with(
            "octocat", "Hello-World", NewRepositoryFork(organization="github")
        )

    def test_creates_fork_by_id(self, mock_client):
        with patch("sys.argv", ["prog", "create", "1296269", "--default-branch-only"]):
            main()

        mock_client.repository.forks.create_for_repository_id.assert_called_once_with(
            1296269, NewRepositoryFork(default_branch_only=True)
        )

    def test_missing_token_exits_1(self, mock_client, capsys):
        mock_client.repository.forks.create.side_effect = RuntimeError("GITHUB_TOKEN is not set")

        with patch("sys.argv", ["prog", "create", "octocat/Hello-World"]):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert capsys.readouterr().err == "error: GITHUB_TOKEN is not set\n"


class TestApiSubcommand:
    def test_rest_with_params(self, capsys):
        body = [{"id": 1}]
        with patch("github_forks.connection.get_connection") as mock_get:
            mock_conn = MagicMock()
            mock_conn.api.return_value = ApiResponse(status=200, body=body)
            mock_get.return_value = mock_conn

            with patch("sys.argv", ["prog", "api", "repos/o/r/forks", "--param", "per_page=100"]):
                main()

        assert json.loads(capsys.readouterr().out) == body
        mock_get.assert_called_once_with(None, skip_cache=False)
        mock_conn.api.assert_called_once_with("repos/o/r/forks", params={"per_page": "100"}, method="GET")

    def test_no_command_prints_help(self, capsys):
        with patch("sys.argv", ["prog"]):
            main()

        assert "usage" in capsys.readouterr().out
