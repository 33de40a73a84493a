"""CLI commands for listing and creating forks."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import httpx
from github import GithubException

from .ensure import InvalidArgumentError
from .models import ApiOptions, ForkSort, NewRepositoryFork, RepositoryForksListRequest


def parse_repo_ref(value: str) -> tuple[str, str] | int:
    """Parse "owner/name" or a numeric repository id."""
    if value.isdigit():
        return int(value)
    owner, sep, name = value.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise InvalidArgumentError("repo", f"Expected owner/name or a repository id, got '{value}'")
    return owner, name


async def _list_forks(forks, repo_ref, request, options, as_json):
    if isinstance(repo_ref, int):
        iterator = forks.get_all_for_repository_id(repo_ref, request, options)
    else:
        iterator = forks.get_all(*repo_ref, request=request, options=options)
    count = 0
    async for fork in iterator:
        count += 1
        if as_json:
            sys.stdout.write(json.dumps(fork) + "\n")
        else:
            sys.stdout.write(f"{fork.get('full_name')}\n")
    sys.stdout.flush()
    return count


async def _create_fork(forks, repo_ref, fork):
    if isinstance(repo_ref, int):
        return await forks.create_for_repository_id(repo_ref, fork)
    return await forks.create(*repo_ref, fork)


def main():
    parser = argparse.ArgumentParser(
        description="List and create GitHub repository forks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory for cached API responses (default: ~/.cache/github-forks)",
    )
    parser.add_argument(
        "--skip-cache",
        action="store_true",
        help="Skip reading from cache (still writes to cache)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log requests and retries",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # list subcommand
    list_parser = subparsers.add_parser(
        "list",
        help="List the forks of a repository",
    )
    list_parser.add_argument(
        "repo",
        help="Repository as owner/name or numeric id (e.g., octocat/Hello-World)",
    )
    list_parser.add_argument(
        "--sort",
        choices=[s.value for s in ForkSort],
        default=None,
        help="Sort order (default: server default, newest)",
    )
    list_parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Forks per page (server default if unset)",
    )
    list_parser.add_argument(
        "--page-count",
        type=int,
        default=None,
        help="Maximum number of pages to fetch (default: all)",
    )
    list_parser.add_argument(
        "--start-page",
        type=int,
        default=None,
        help="Page to start from (default: 1)",
    )
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Print each fork as a JSON line instead of its full name",
    )

    # create subcommand
    create_parser = subparsers.add_parser(
        "create",
        help="Fork a repository",
    )
    create_parser.add_argument(
        "repo",
        help="Repository as owner/name or numeric id",
    )
    create_parser.add_argument(
        "--organization",
        default=None,
        help="Fork into this organization instead of your account",
    )
    create_parser.add_argument(
        "--name",
        default=None,
        help="Name for the new fork",
    )
    create_parser.add_argument(
        "--default-branch-only",
        action="store_true",
        default=None,
        help="Copy only the default branch",
    )

    # api subcommand
    api_parser = subparsers.add_parser(
        "api",
        help="Make a generic cached GitHub API call",
    )
    api_parser.add_argument(
        "endpoint",
        help="API endpoint path (e.g., repos/owner/repo/forks)",
    )
    api_parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter (repeatable, e.g., --param per_page=100)",
    )
    api_parser.add_argument(
        "--method",
        default="GET",
        help="HTTP method (default: GET)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        return

    try:
        if args.command == "list":
            from .github import get_client
            from .reactive import ObservableRepositoryForksClient

            repo_ref = parse_repo_ref(args.repo)
            request = RepositoryForksListRequest(sort=ForkSort(args.sort)) if args.sort else None
            options = ApiOptions(
                page_size=args.page_size,
                page_count=args.page_count,
                start_page=args.start_page,
            )
            forks = ObservableRepositoryForksClient(get_client(args.cache_dir, skip_cache=args.skip_cache))
            count = asyncio.run(_list_forks(forks, repo_ref, request, options, args.json))
            sys.stderr.write(f"{count:,} forks\n")
        elif args.command == "create":
            from .github import get_client
            from .reactive import ObservableRepositoryForksClient

            repo_ref = parse_repo_ref(args.repo)
            fork = NewRepositoryFork(
                organization=args.organization,
                name=args.name,
                default_branch_only=args.default_branch_only,
            )
            forks = ObservableRepositoryForksClient(get_client(args.cache_dir, skip_cache=args.skip_cache))
            created = asyncio.run(_create_fork(forks, repo_ref, fork))
            json.dump(created, sys.stdout, indent=2)
            sys.stdout.write("\n")
        elif args.command == "api":
            from . import connection

            params = {}
            for p in args.param:
                k, _, v = p.partition("=")
                params[k] = v

            conn = connection.get_connection(args.cache_dir, skip_cache=args.skip_cache)
            resp = conn.api(args.endpoint, params=params or None, method=args.method)
            json.dump(resp.body, sys.stdout, indent=2)
            sys.stdout.write("\n")
    except InvalidArgumentError as e:
        sys.stderr.write(f"error: {e}\n")
        sys.exit(1)
    except httpx.HTTPStatusError as e:
        sys.stderr.write(f"error: {e} ({e.response.status_code})\n")
        sys.exit(1)
    except GithubException as e:
        sys.stderr.write(f"error: GitHub API error {e.status}: {e.data}\n")
        sys.exit(1)
    except RuntimeError as e:
        sys.stderr.write(f"error: {e}\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
