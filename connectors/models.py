"""
Typed payloads returned by the GitHub connector.

Each resource has a ``from_api`` constructor that maps a REST API JSON
object onto the dataclass, so table code never inspects raw dicts.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp ('...Z') into an aware datetime."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        logger.warning(f"Failed to parse date {value}: {e}")
        return None


@dataclass
class User:
    id: int
    login: str
    type: Optional[str] = None
    html_url: Optional[str] = None
    site_admin: bool = False

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["User"]:
        if not data:
            return None
        return cls(
            id=data.get("id", 0),
            login=data.get("login", ""),
            type=data.get("type"),
            html_url=data.get("html_url"),
            site_admin=bool(data.get("site_admin", False)),
        )


@dataclass
class ReleaseAsset:
    id: int
    name: str
    label: Optional[str] = None
    content_type: Optional[str] = None
    state: Optional[str] = None
    size: int = 0
    download_count: int = 0
    browser_download_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ReleaseAsset":
        return cls(
            id=data.get("id", 0),
            name=data.get("name", ""),
            label=data.get("label"),
            content_type=data.get("content_type"),
            state=data.get("state"),
            size=data.get("size", 0),
            download_count=data.get("download_count", 0),
            browser_download_url=data.get("browser_download_url"),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )


@dataclass
class Release:
    id: int
    tag_name: str
    node_id: Optional[str] = None
    name: Optional[str] = None
    body: Optional[str] = None
    draft: bool = False
    prerelease: bool = False
    target_commitish: Optional[str] = None
    author: Optional[User] = None
    assets: List[ReleaseAsset] = field(default_factory=list)
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    url: Optional[str] = None
    html_url: Optional[str] = None
    assets_url: Optional[str] = None
    upload_url: Optional[str] = None
    tarball_url: Optional[str] = None
    zipball_url: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Release":
        return cls(
            id=data["id"],
            tag_name=data.get("tag_name", ""),
            node_id=data.get("node_id"),
            name=data.get("name"),
            body=data.get("body"),
            draft=bool(data.get("draft", False)),
            prerelease=bool(data.get("prerelease", False)),
            target_commitish=data.get("target_commitish"),
            author=User.from_api(data.get("author")),
            assets=[ReleaseAsset.from_api(a) for a in data.get("assets") or []],
            created_at=parse_timestamp(data.get("created_at")),
            published_at=parse_timestamp(data.get("published_at")),
            url=data.get("url"),
            html_url=data.get("html_url"),
            assets_url=data.get("assets_url"),
            upload_url=data.get("upload_url"),
            tarball_url=data.get("tarball_url"),
            zipball_url=data.get("zipball_url"),
        )


@dataclass
class Workflow:
    id: int
    name: str
    path: str
    node_id: Optional[str] = None
    state: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    url: Optional[str] = None
    html_url: Optional[str] = None
    badge_url: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Workflow":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            path=data.get("path", ""),
            node_id=data.get("node_id"),
            state=data.get("state"),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            url=data.get("url"),
            html_url=data.get("html_url"),
            badge_url=data.get("badge_url"),
        )


@dataclass
class Repository:
    id: int
    name: str
    full_name: str
    node_id: Optional[str] = None
    owner: Optional[User] = None
    description: Optional[str] = None
    private: bool = False
    fork: bool = False
    archived: bool = False
    disabled: bool = False
    visibility: Optional[str] = None
    default_branch: Optional[str] = None
    language: Optional[str] = None
    homepage: Optional[str] = None
    topics: List[str] = field(default_factory=list)
    license_spdx_id: Optional[str] = None
    stargazers_count: int = 0
    watchers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    size: int = 0
    html_url: Optional[str] = None
    clone_url: Optional[str] = None
    git_url: Optional[str] = None
    ssh_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Repository":
        license_data = data.get("license") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            full_name=data.get("full_name", ""),
            node_id=data.get("node_id"),
            owner=User.from_api(data.get("owner")),
            description=data.get("description"),
            private=bool(data.get("private", False)),
            fork=bool(data.get("fork", False)),
            archived=bool(data.get("archived", False)),
            disabled=bool(data.get("disabled", False)),
            visibility=data.get("visibility"),
            default_branch=data.get("default_branch"),
            language=data.get("language"),
            homepage=data.get("homepage"),
            topics=list(data.get("topics") or []),
            license_spdx_id=license_data.get("spdx_id"),
            stargazers_count=data.get("stargazers_count", 0),
            watchers_count=data.get("watchers_count", 0),
            forks_count=data.get("forks_count", 0),
            open_issues_count=data.get("open_issues_count", 0),
            size=data.get("size", 0),
            html_url=data.get("html_url"),
            clone_url=data.get("clone_url"),
            git_url=data.get("git_url"),
            ssh_url=data.get("ssh_url"),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
            pushed_at=parse_timestamp(data.get("pushed_at")),
        )
