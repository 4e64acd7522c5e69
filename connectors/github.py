"""
GitHub connector using PyGithub's requester.

This connector performs the raw REST calls behind the GitHub tables and
returns typed payloads. List calls return a :class:`Page` whose cursor is
the next page number taken from the ``Link`` response header.
"""

import hashlib
import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar
from urllib.parse import parse_qs, urlparse

import requests
from github import Auth, Github, GithubException, RateLimitExceededException
from requests.utils import parse_header_links

from connectors.config import (PUBLIC_API_URL, ConnectionConfig,
                               resolve_connection_config)
from connectors.exceptions import (APIException, AuthenticationException,
                                   ConnectorException, NotFoundException,
                                   PaginationException, RateLimitException,
                                   TransientNetworkException)
from connectors.models import Release, Repository, Workflow
from connectors.utils import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_next_page(link_header: Optional[str]) -> Optional[int]:
    """
    Extract the next page number from a ``Link`` header.

    :return: The page number of ``rel="next"``, or None when there is none.
    :raises PaginationException: If the next link has no usable page number.
    """
    if not link_header:
        return None

    for link in parse_header_links(link_header):
        if link.get("rel") != "next":
            continue
        query = parse_qs(urlparse(link.get("url", "")).query)
        values = query.get("page")
        try:
            return int(values[0]) if values else None
        except ValueError:
            raise PaginationException(f"Invalid next page in Link header: {link_header}")
    return None


class GitHubConnector:
    """
    GitHub REST connector.

    Retries are not done here: every call maps to exactly one request so the
    pagination layer stays in charge of backoff.
    """

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        per_page: int = 100,
        timeout: int = 30,
    ):
        """
        Initialize GitHub connector.

        :param token: GitHub personal access token.
        :param base_url: Optional base URL for GitHub Enterprise.
        :param per_page: Default number of items per page.
        :param timeout: Request timeout in seconds.
        """
        self.token = token
        self.per_page = per_page

        # retry=None: rate limits must surface to our own retry policy
        if base_url and base_url != PUBLIC_API_URL:
            self.github = Github(
                base_url=base_url.rstrip("/"),
                auth=Auth.Token(token),
                per_page=per_page,
                timeout=timeout,
                retry=None,
            )
        else:
            self.github = Github(
                auth=Auth.Token(token),
                per_page=per_page,
                timeout=timeout,
                retry=None,
            )

    def _handle_github_exception(self, e: Exception) -> None:
        """
        Handle GitHub API exceptions and convert to connector exceptions.

        :param e: Exception from GitHub API.
        :raises: Appropriate connector exception.
        """
        if isinstance(e, ConnectorException):
            raise e
        if isinstance(e, RateLimitExceededException):
            raise RateLimitException(
                f"GitHub rate limit exceeded: {e}", code=str(e.status)
            )
        elif isinstance(e, GithubException):
            code = str(e.status)
            message = str(e)
            if e.status == 401:
                raise AuthenticationException(f"GitHub authentication failed: {e}")
            elif e.status == 404:
                raise NotFoundException(f"GitHub resource not found: {e}")
            elif e.status == 429 or (
                e.status == 403 and "rate limit" in message.lower()
            ):
                raise RateLimitException(
                    f"GitHub rate limit exceeded: {e}", code=code
                )
            else:
                raise APIException(f"GitHub API error: {e}", code=code)
        elif isinstance(e, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
            raise TransientNetworkException(f"GitHub request failed: {e}")
        else:
            raise APIException(f"Unexpected error: {e}")

    def _request(
        self, path: str, parameters: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, Any], Any]:
        try:
            return self.github.requester.requestJsonAndCheck(
                "GET", path, parameters=parameters
            )
        except Exception as e:
            self._handle_github_exception(e)

    def _list(
        self,
        path: str,
        page: Optional[int],
        per_page: Optional[int],
        parse: Callable[[Any], list],
    ) -> Page:
        params: Dict[str, Any] = {"per_page": per_page or self.per_page}
        if page:
            params["page"] = page

        logger.debug(f"GET {path} page={page or 1} per_page={params['per_page']}")
        headers, data = self._request(path, params)
        return Page(items=parse(data), next_page=parse_next_page(headers.get("link")))

    def list_releases(
        self,
        owner: str,
        repo: str,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> Page:
        """
        List one page of releases for a repository.

        :return: Page of Release objects.
        """
        return self._list(
            f"/repos/{owner}/{repo}/releases",
            page,
            per_page,
            lambda data: [Release.from_api(r) for r in data or []],
        )

    def get_release(self, owner: str, repo: str, release_id: int) -> Release:
        _, data = self._request(f"/repos/{owner}/{repo}/releases/{release_id}")
        return Release.from_api(data)

    def list_workflows(
        self,
        owner: str,
        repo: str,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> Page:
        """
        List one page of Actions workflows for a repository.

        The API wraps workflows in a ``{"total_count", "workflows"}`` envelope.
        """
        return self._list(
            f"/repos/{owner}/{repo}/actions/workflows",
            page,
            per_page,
            lambda data: [Workflow.from_api(w) for w in (data or {}).get("workflows") or []],
        )

    def get_workflow(self, owner: str, repo: str, workflow_id: int) -> Workflow:
        _, data = self._request(f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}")
        return Workflow.from_api(data)

    def get_repository(self, owner: str, repo: str) -> Repository:
        _, data = self._request(f"/repos/{owner}/{repo}")
        return Repository.from_api(data)

    def get_rate_limit(self) -> dict:
        """
        Get current rate limit status.

        :return: Dictionary with rate limit information.
        """
        _, data = self._request("/rate_limit")
        core = (data or {}).get("resources", {}).get("core", {})
        return {
            "limit": core.get("limit"),
            "remaining": core.get("remaining"),
            "reset": core.get("reset"),
        }

    def close(self) -> None:
        """Close the connector and cleanup resources."""
        if hasattr(self.github, "close"):
            self.github.close()


class GitHubConnection:
    """
    Resolved credentials plus a lazily built connector.

    Configuration is validated on construction, so a missing token fails
    before any remote call. The connector itself is built once, on first
    use, under a lock.
    """

    def __init__(
        self,
        config: Optional[ConnectionConfig] = None,
        environ: Optional[Dict[str, str]] = None,
        per_page: int = 100,
    ):
        self.config = resolve_connection_config(config, environ)
        self.per_page = per_page
        self._connector: Optional[GitHubConnector] = None
        self._lock = threading.Lock()

    @property
    def cache_key(self) -> str:
        return connection_cache_key(self.config)

    @property
    def connector(self) -> GitHubConnector:
        if self._connector is None:
            with self._lock:
                if self._connector is None:
                    logger.debug(
                        f"Creating GitHub client for {self.config.base_url or PUBLIC_API_URL}"
                    )
                    self._connector = GitHubConnector(
                        token=self.config.token,
                        base_url=self.config.base_url,
                        per_page=self.per_page,
                    )
        return self._connector

    def close(self) -> None:
        with self._lock:
            if self._connector is not None:
                self._connector.close()
                self._connector = None


def connection_cache_key(config: ConnectionConfig) -> str:
    """Cache key for a resolved config: endpoint plus a digest of the token."""
    digest = hashlib.sha256((config.token or "").encode("utf-8")).hexdigest()[:16]
    return f"github:{config.base_url or PUBLIC_API_URL}:{digest}"


class ConnectionCache:
    """Keyed initialize-once cache shared by queries in one session."""

    def __init__(self):
        self._items: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: str, factory: Callable[[], T]) -> T:
        with self._lock:
            if key not in self._items:
                self._items[key] = factory()
            return self._items[key]

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._items.get(key)

    def close(self) -> None:
        with self._lock:
            items = list(self._items.values())
            self._items.clear()
        for item in items:
            if hasattr(item, "close"):
                item.close()
