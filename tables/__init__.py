"""
GitHub resources exposed as queryable tables.
"""

from typing import Dict

from .github_release import table_github_release
from .github_repository import table_github_repository
from .github_workflow import table_github_workflow
from .plugin import (Column, ColumnType, GetConfig, ListConfig, QueryData,
                     QueryRowSink, QuerySession, Table)

TABLES: Dict[str, Table] = {
    t.name: t
    for t in (
        table_github_release(),
        table_github_repository(),
        table_github_workflow(),
    )
}


def get_table(name: str) -> Table:
    """
    Look up a table by name.

    :raises KeyError: If no table has that name.
    """
    try:
        return TABLES[name]
    except KeyError:
        raise KeyError(
            f"Unknown table '{name}'. Available: {', '.join(sorted(TABLES))}"
        ) from None


__all__ = [
    "TABLES",
    "get_table",
    "Column",
    "ColumnType",
    "GetConfig",
    "ListConfig",
    "QueryData",
    "QueryRowSink",
    "QuerySession",
    "Table",
]
