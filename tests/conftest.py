"""Shared test fixtures for the test suite."""
from typing import Any, Dict, List, Optional

import pytest

from connectors.utils import FetchRequest, Page, PaginationHandler, RetryPolicy


class ListSink:
    """In-memory row sink with an optional limit and cancel-after-N switch."""

    def __init__(self, limit: Optional[int] = None, cancel_after: Optional[int] = None):
        self.limit = limit
        self.cancel_after = cancel_after
        self.items: List[Any] = []
        self.cancelled = False

    def stream_item(self, item):
        self.items.append(item)
        if self.cancel_after is not None and len(self.items) >= self.cancel_after:
            self.cancelled = True

    def remaining_capacity(self):
        if self.limit is None:
            return None
        return max(self.limit - len(self.items), 0)

    def is_cancelled(self):
        return self.cancelled


class SlicingLister:
    """Serves ``items`` page by page, like a page-numbered REST listing."""

    def __init__(self, items: List[Any]):
        self.items = items
        self.requests: List[FetchRequest] = []

    def fetch_page(self, request: FetchRequest) -> Page:
        self.requests.append(request)
        page = request.page or 1
        start = (page - 1) * request.per_page
        end = start + request.per_page
        next_page = page + 1 if end < len(self.items) else None
        return Page(items=self.items[start:end], next_page=next_page)


@pytest.fixture
def sleeps():
    """Records backoff delays instead of sleeping."""
    return []


@pytest.fixture
def handler(sleeps):
    """Pagination handler that never actually sleeps."""
    return PaginationHandler(
        policy=RetryPolicy(base_delay=0.1, max_attempts=10),
        sleep=sleeps.append,
    )


@pytest.fixture
def release_data():
    """Factory for GitHub release API payloads."""

    def _make(release_id: int = 1, **overrides) -> Dict[str, Any]:
        data = {
            "id": release_id,
            "node_id": f"RE_{release_id}",
            "tag_name": f"v1.0.{release_id}",
            "name": f"Release {release_id}",
            "body": "Notes",
            "draft": False,
            "prerelease": False,
            "target_commitish": "main",
            "author": {"id": 7, "login": "octocat", "type": "User"},
            "assets": [
                {
                    "id": 100 + release_id,
                    "name": "dist.tar.gz",
                    "size": 1024,
                    "download_count": 3,
                    "created_at": "2024-01-02T03:04:05Z",
                }
            ],
            "created_at": "2024-01-02T03:04:05Z",
            "published_at": "2024-01-03T00:00:00Z",
            "html_url": f"https://github.com/octo/repo/releases/tag/v1.0.{release_id}",
            "url": f"https://api.github.com/repos/octo/repo/releases/{release_id}",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def workflow_data():
    """Factory for GitHub Actions workflow API payloads."""

    def _make(workflow_id: int = 1, **overrides) -> Dict[str, Any]:
        data = {
            "id": workflow_id,
            "node_id": f"W_{workflow_id}",
            "name": f"CI {workflow_id}",
            "path": f".github/workflows/ci{workflow_id}.yml",
            "state": "active",
            "created_at": "2023-05-01T10:00:00Z",
            "updated_at": "2023-06-01T10:00:00Z",
            "url": f"https://api.github.com/repos/octo/repo/actions/workflows/{workflow_id}",
            "html_url": "https://github.com/octo/repo/blob/main/.github/workflows/ci.yml",
            "badge_url": "https://github.com/octo/repo/workflows/CI/badge.svg",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def repository_data():
    """Factory for GitHub repository API payloads."""

    def _make(full_name: str = "octo/repo", **overrides) -> Dict[str, Any]:
        owner, name = full_name.split("/")
        data = {
            "id": 1296269,
            "node_id": "R_1",
            "name": name,
            "full_name": full_name,
            "owner": {"id": 1, "login": owner, "type": "Organization"},
            "description": "A test repository",
            "private": False,
            "fork": False,
            "archived": False,
            "default_branch": "main",
            "language": "Python",
            "topics": ["api", "github"],
            "license": {"spdx_id": "MIT"},
            "stargazers_count": 42,
            "forks_count": 5,
            "created_at": "2020-01-01T00:00:00Z",
            "updated_at": "2024-01-01T00:00:00Z",
            "pushed_at": None,
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def make_sink():
    """Factory for in-memory row sinks."""
    return ListSink


@pytest.fixture
def make_lister():
    """Factory for listers serving a fixed item list page by page."""
    return SlicingLister
