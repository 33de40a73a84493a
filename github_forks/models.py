"""Data models for the Repository Forks API."""

from dataclasses import dataclass
from enum import Enum

from .ensure import InvalidArgumentError


@dataclass
class ApiResponse:
    """Response from the GitHub REST API connection."""

    status: int
    body: dict | list
    etag: str | None = None
    link: str | None = None


@dataclass(frozen=True)
class ApiOptions:
    """Pagination controls for list calls.

    Unset fields fall back to server defaults; page_count caps how many
    pages are fetched.
    """

    page_size: int | None = None
    page_count: int | None = None
    start_page: int | None = None

    def __post_init__(self):
        for field_name in ("page_size", "page_count", "start_page"):
            value = getattr(self, field_name)
            if value is not None and value < 1:
                raise InvalidArgumentError(
                    field_name, f"Argument '{field_name}' must be a positive integer, got {value}"
                )

    def to_parameters_dict(self) -> dict:
        params = {}
        if self.page_size is not None:
            params["per_page"] = self.page_size
        if self.start_page is not None:
            params["page"] = self.start_page
        return params


NO_OPTIONS = ApiOptions()


class ForkSort(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    STARGAZERS = "stargazers"
    WATCHERS = "watchers"


@dataclass
class RepositoryForksListRequest:
    """Filter for listing forks."""

    sort: ForkSort | None = ForkSort.NEWEST

    def to_parameters_dict(self) -> dict:
        params = {}
        if self.sort is not None:
            params["sort"] = ForkSort(self.sort).value
        return params


@dataclass
class NewRepositoryFork:
    """Payload for creating a fork.

    Leave organization unset to fork into the authenticated user's account.
    """

    organization: str | None = None
    name: str | None = None
    default_branch_only: bool | None = None

    def to_create_kwargs(self) -> dict:
        """Keyword arguments for PyGithub's Repository.create_fork, unset fields omitted."""
        kwargs = {}
        if self.organization is not None:
            kwargs["organization"] = self.organization
        if self.name is not None:
            kwargs["name"] = self.name
        if self.default_branch_only is not None:
            kwargs["default_branch_only"] = self.default_branch_only
        return kwargs
