"""Parent GitHub client handle: REST connection plus PyGithub for writes."""

import logging
import time
from pathlib import Path

from github import Auth, Github, GithubException, RateLimitExceededException

from .connection import BACKOFF_FACTOR, MAX_RETRIES, get_connection
from .forks import RepositoryForksClient
from .settings import get_settings

logger = logging.getLogger(__name__)


class RepositoriesClient:
    """Groups the repository sub-clients."""

    def __init__(self, client: "GitHubClient"):
        self.forks = RepositoryForksClient(client)


class GitHubClient:
    """Handle that owns the collaborators the forks clients are built from.

    Auth is handled via GITHUB_TOKEN environment variable. Reads go through
    the cached `connection`; writes go through PyGithub via `call()`.
    """

    def __init__(self, cache_dir: Path | None = None, skip_cache: bool = False):
        self.connection = get_connection(cache_dir, skip_cache=skip_cache)
        self._github: Github | None = None
        self._rate_limit_reset = 0  # unix timestamp when rate limit resets
        self.repository = RepositoriesClient(self)

    @property
    def github(self) -> Github:
        """Lazy-initialize the PyGithub client."""
        if self._github is None:
            settings = get_settings()
            if not settings.github_token:
                raise RuntimeError("GITHUB_TOKEN is not set")
            auth = Auth.Token(settings.github_token)
            self._github = Github(auth=auth, base_url=settings.github_api_url, retry=3)
        return self._github

    @property
    def rate_limit_waiting(self) -> int:
        """Seconds until rate limit resets, 0 if not limited."""
        return max(0, int(self._rate_limit_reset - time.time()))

    def _handle_rate_limit(self, e: RateLimitExceededException) -> None:
        """Handle rate limit by waiting until reset."""
        reset_time = self.github.rate_limiting_resettime
        self._rate_limit_reset = max(self._rate_limit_reset, reset_time + 1)
        logger.info("Rate limited, waiting %ss", self.rate_limit_waiting)
        while time.time() < self._rate_limit_reset:
            time.sleep(1)

    def call(self, fn, *args, **kwargs):
        """Run a PyGithub call with throttling and rate limit handling.

        Rate limits are waited out and 5xx errors retried; any other
        GithubException propagates unchanged.
        """
        for attempt in range(MAX_RETRIES):
            try:
                # PyGithub calls share the REST connection's request budget
                self.connection.throttle()
                return fn(*args, **kwargs)
            except RateLimitExceededException as e:
                self._handle_rate_limit(e)
                continue
            except GithubException as e:
                if e.status in (403, 429) and "rate limit" in str(e).lower():
                    self._handle_rate_limit(RateLimitExceededException(e.status, e.data, e.headers))
                    continue
                elif e.status >= 500:
                    logger.warning("API error: %s, retrying (%d/%d)", e, attempt + 1, MAX_RETRIES)
                    time.sleep(BACKOFF_FACTOR**attempt)
                    continue
                raise

        raise RuntimeError(f"Max retries exceeded calling {getattr(fn, '__name__', fn)}")


# Client instances keyed by config
_clients: dict[tuple, GitHubClient] = {}


def get_client(cache_dir: Path | None = None, skip_cache: bool = False) -> GitHubClient:
    """Get or create a GitHub client with the given configuration."""
    key = (str(cache_dir) if cache_dir else None, skip_cache)
    if key not in _clients:
        _clients[key] = GitHubClient(cache_dir, skip_cache=skip_cache)
    return _clients[key]
