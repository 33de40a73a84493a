"""Cached GitHub REST API connection using httpx + Cachetta."""

import hashlib
import json
import logging
import re
import threading
import time
from collections.abc import Iterator
from datetime import timedelta
from pathlib import Path

import httpx
from cachetta import Cachetta

from .models import NO_OPTIONS, ApiOptions, ApiResponse
from .settings import get_settings

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".cache/github-forks"

# Rate limit backoff settings
BACKOFF_FACTOR = 1.5
MAX_RETRIES = 30

# Steady-state throttle: 1.3 req/sec = ~4,680/hour (under 5K limit)
REQUESTS_PER_SECOND = 1.3

_LINK_RE = re.compile(r'<([^>]+)>\s*;\s*rel="([^"]+)"')


def _cache_key(endpoint, params=None):
    params = params or {}
    raw = f"{endpoint}|{json.dumps(params, sort_keys=True)}"
    return hashlib.sha256(raw.encode()).hexdigest()[:16]


class _RateLimitError(Exception):
    def __init__(self, wait):
        self.wait = wait


class _RetryableError(Exception):
    def __init__(self, response):
        self.response = response


class Connection:
    """Thin cached client for GitHub REST API endpoints, with pagination."""

    def __init__(self, cache_dir=None, skip_cache=False):
        settings = get_settings()
        headers = {"Accept": "application/vnd.github+json"}
        # Anonymous access is enough for public fork lists
        if settings.github_token:
            headers["Authorization"] = f"bearer {settings.github_token}"
        self._client = httpx.Client(headers=headers, timeout=30.0)
        self._base_url = settings.github_api_url.rstrip("/")
        self._throttle_lock = threading.Lock()
        self._last_request_time = 0.0
        self._min_interval = 1.0 / REQUESTS_PER_SECOND
        self._skip_cache = skip_cache

        cache_dir = Path(cache_dir or DEFAULT_CACHE_DIR)
        cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache_dir = cache_dir

        def _cache_path(endpoint, params=None):
            return cache_dir / f"{_cache_key(endpoint, params)}.pkl"

        # Pure fetch function -- no retry, no throttle, no cache logic.
        # Cachetta handles caching; exceptions propagate (not cached).
        def _do_fetch(endpoint, params=None):
            return self._send("GET", endpoint, params)

        cache = Cachetta(path=_cache_path, duration=timedelta(seconds=settings.cache_ttl_seconds))
        self._cached_fetch = cache(_do_fetch)
        self._skip_read_fetch = cache.copy(read=False)(_do_fetch)

    def _url(self, endpoint: str) -> str:
        ep = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{self._base_url}{ep}"

    def _send(self, method, endpoint, params=None, body=None) -> dict:
        kwargs = {"params": params}
        if body is not None:
            kwargs["json"] = body
        logger.debug("%s %s params=%s", method, endpoint, params)
        resp = self._client.request(method, self._url(endpoint), **kwargs)

        if resp.status_code == 429 or (
            resp.status_code == 403 and "rate limit" in resp.text.lower()
        ):
            wait = _parse_retry_after(resp) or 5
            raise _RateLimitError(wait)

        if resp.status_code >= 500:
            raise _RetryableError(resp)

        if 200 <= resp.status_code < 300:
            return {
                "status": resp.status_code,
                "body": resp.json() if resp.content else {},
                "etag": resp.headers.get("etag"),
                "link": resp.headers.get("link"),
            }

        # Client error -- not retryable, not cached
        raise httpx.HTTPStatusError(
            f"GitHub API error {resp.status_code}",
            request=resp.request,
            response=resp,
        )

    def throttle(self):
        """Wait if needed to keep a steady request rate across all callers."""
        with self._throttle_lock:
            now = time.time()
            elapsed = now - self._last_request_time
            if elapsed < self._min_interval:
                time.sleep(self._min_interval - elapsed)
            self._last_request_time = time.time()

    def api(self, endpoint, params=None, method="GET", body=None, skip_cache=False) -> ApiResponse:
        """Make a GitHub REST API call. GET responses are cached.

        Args:
            endpoint: API path, e.g. "repos/owner/repo/forks"
            params: Query parameters dict
            method: HTTP method (default GET)
            body: JSON body for non-GET requests
            skip_cache: Skip reading cache for this call (still writes)

        Returns:
            ApiResponse with status, body, etag, and link fields.
        """
        params = params or {}

        for attempt in range(MAX_RETRIES):
            self.throttle()
            try:
                if method != "GET":
                    data = self._send(method, endpoint, params, body)
                elif skip_cache or self._skip_cache:
                    data = self._skip_read_fetch(endpoint, params)
                else:
                    data = self._cached_fetch(endpoint, params)

                return ApiResponse(
                    status=data["status"],
                    body=data["body"],
                    etag=data.get("etag"),
                    link=data.get("link"),
                )
            except _RateLimitError as e:
                logger.warning("Rate limited on %s, waiting %ss", endpoint, e.wait)
                time.sleep(BACKOFF_FACTOR**attempt * e.wait)
                continue
            except _RetryableError as e:
                # non-GET requests may already have been applied
                if method != "GET":
                    raise httpx.HTTPStatusError(
                        f"GitHub API error {e.response.status_code}",
                        request=e.response.request,
                        response=e.response,
                    ) from None
                logger.warning("Server error on %s, retrying (%d/%d)", endpoint, attempt + 1, MAX_RETRIES)
                time.sleep(BACKOFF_FACTOR**attempt)
                continue
            except (httpx.ConnectError, httpx.RemoteProtocolError, httpx.ReadError) as e:
                if method != "GET" and not isinstance(e, httpx.ConnectError):
                    raise
                logger.warning("Transport error on %s: %s, retrying", endpoint, e)
                time.sleep(BACKOFF_FACTOR**attempt)
                continue

        raise RuntimeError(f"GitHub API request failed after {MAX_RETRIES} retries: {method} {endpoint}")

    def get_all_pages(
        self,
        endpoint: str,
        params: dict | None = None,
        options: ApiOptions = NO_OPTIONS,
    ) -> Iterator[list]:
        """Yield each page of a list endpoint, following Link rel="next".

        Nothing is requested until the generator is advanced. Stops when
        there is no next page or options.page_count pages have been fetched.
        """
        params = {**(params or {}), **options.to_parameters_dict()}
        pages_fetched = 0
        while True:
            resp = self.api(endpoint, params=params)
            yield resp.body
            pages_fetched += 1
            if options.page_count is not None and pages_fetched >= options.page_count:
                return
            next_url = _parse_next_link(resp.link)
            if next_url is None:
                return
            endpoint, params = self._split_url(next_url)

    def get_and_flatten_all_pages(
        self,
        endpoint: str,
        params: dict | None = None,
        options: ApiOptions = NO_OPTIONS,
    ) -> Iterator:
        """Yield every item of every page, in page order."""
        for page in self.get_all_pages(endpoint, params, options):
            yield from page

    def _split_url(self, url: str) -> tuple[str, dict]:
        """Turn an absolute next-page URL back into (endpoint, params)."""
        parsed = httpx.URL(url)
        path = parsed.path
        base_path = httpx.URL(self._base_url).path.rstrip("/")
        if base_path and path.startswith(base_path):
            path = path[len(base_path):]
        return path.lstrip("/"), dict(parsed.params)

    def close(self):
        self._client.close()


# Connection instances keyed by config
_connections: dict[tuple, Connection] = {}


def get_connection(cache_dir=None, skip_cache=False) -> Connection:
    """Get or create a Connection with the given configuration."""
    key = (str(cache_dir) if cache_dir else None, skip_cache)
    if key not in _connections:
        _connections[key] = Connection(cache_dir, skip_cache=skip_cache)
    return _connections[key]


def _parse_retry_after(resp: httpx.Response) -> float | None:
    val = resp.headers.get("retry-after")
    if val is None:
        return None
    try:
        return float(val)
    except ValueError:
        return None


def _parse_next_link(link: str | None) -> str | None:
    if not link:
        return None
    for url, rel in _LINK_RE.findall(link):
        if "next" in rel.split():
            return url
    return None
