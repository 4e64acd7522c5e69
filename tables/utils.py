"""
Shared hydrate helpers and column transforms for the GitHub tables.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Tuple

from connectors.github import GitHubConnector
from connectors.utils import (FetchRequest, FunctionGetter, FunctionLister,
                              Page)
from tables.plugin import QueryData, TransformData

logger = logging.getLogger(__name__)

ListFunc = Callable[[QueryData, GitHubConnector, FetchRequest], Page]
GetFunc = Callable[[QueryData, GitHubConnector, FetchRequest], Any]


def parse_repo_full_name(full_name: str) -> Tuple[str, str]:
    """Split 'owner/repo'; repo is empty when there is no slash."""
    parts = (full_name or "").split("/")
    owner = parts[0]
    repo = parts[1] if len(parts) > 1 else ""
    return owner, repo


def repo_request(query_data: QueryData, qual: str = "repository_full_name") -> FetchRequest:
    owner, repo = parse_repo_full_name(query_data.quals.get(qual, ""))
    return FetchRequest(owner=owner, name=repo, item_id=query_data.quals.get("id"))


# transforms


def convert_timestamp(data: TransformData) -> Optional[str]:
    if isinstance(data.value, datetime):
        return data.value.isoformat()
    return None


# hydrate glue


def stream_github_list(
    query_data: QueryData, list_func: ListFunc, qual: str = "repository_full_name"
) -> None:
    """
    Page through a list call, streaming every item into the query.

    The first page size is shrunk to the query limit when that is smaller.
    """
    connector = query_data.connector
    request = repo_request(query_data, qual)
    lister = FunctionLister(lambda req: list_func(query_data, connector, req))

    emitted = query_data.pagination.stream(lister, request, query_data)
    logger.debug(f"Streamed {emitted} rows for {query_data.table.name}")


def get_github_item(
    query_data: QueryData,
    get_func: GetFunc,
    qual: str = "repository_full_name",
) -> Any:
    """Fetch one item with retry; errors the table ignores yield None."""
    connector = query_data.connector
    request = repo_request(query_data, qual)
    getter = FunctionGetter(lambda req: get_func(query_data, connector, req))

    logger.debug(
        f"Hydrating table={query_data.table.name} quals={query_data.quals} "
        f"fetch_type={query_data.fetch_type}"
    )
    ignore = query_data.table.get.should_ignore_error if query_data.table.get else None
    return query_data.pagination.get(getter, request, ignore=ignore)


def stream_github_list_or_item(
    query_data: QueryData,
    get_func: GetFunc,
    qual: str = "repository_full_name",
) -> None:
    """Fetch once and stream the result, whether one item or a list."""
    connector = query_data.connector
    request = repo_request(query_data, qual)
    getter = FunctionGetter(lambda req: get_func(query_data, connector, req))

    ignore = query_data.table.list.should_ignore_error if query_data.table.list else None
    query_data.pagination.stream_list_or_item(getter, request, query_data, ignore=ignore)
