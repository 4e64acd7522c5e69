"""
Table definitions and query execution.

A :class:`Table` declares its columns and a list and/or get hydrate
function. Executing a query picks the get path when every get key column
is supplied as a qual, otherwise the list path. Hydrate functions push
items through :class:`QueryData`, which is also the row sink the
pagination layer streams into.
"""

import enum
import logging
import threading
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import (Any, Callable, Dict, Iterable, List, Mapping, Optional,
                    Sequence, Tuple)

from connectors.config import ConnectionConfig, resolve_connection_config
from connectors.exceptions import ConfigurationException, ConnectorException
from connectors.github import (ConnectionCache, GitHubConnection,
                               connection_cache_key)
from connectors.utils import PaginationHandler, should_stop

logger = logging.getLogger(__name__)


class ColumnType(str, enum.Enum):
    STRING = "string"
    INT = "int"
    DOUBLE = "double"
    BOOL = "bool"
    TIMESTAMP = "timestamp"
    JSON = "json"


@dataclass
class TransformData:
    """State threaded through a column's transform chain."""

    item: Any
    column_name: str
    quals: Mapping[str, Any]
    value: Any = None


TransformStep = Callable[[TransformData], Any]


def _get_field(obj: Any, path: str) -> Any:
    value = obj
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def _to_json(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set, str)):
        return len(value) == 0
    return value == 0


class Transform:
    """An immutable chain of value transforms for one column."""

    def __init__(self, steps: Sequence[TransformStep] = ()):
        self.steps: Tuple[TransformStep, ...] = tuple(steps)

    def _then(self, step: TransformStep) -> "Transform":
        return Transform(self.steps + (step,))

    def from_field(self, path: str) -> "Transform":
        return self._then(lambda d: _get_field(d.item, path))

    def from_qual(self, name: str) -> "Transform":
        return self._then(lambda d: d.quals.get(name))

    def null_if_zero(self) -> "Transform":
        return self._then(lambda d: None if _is_zero(d.value) else d.value)

    def transform(self, fn: TransformStep) -> "Transform":
        return self._then(fn)

    def apply(self, item: Any, column_name: str, quals: Mapping[str, Any]) -> Any:
        data = TransformData(item=item, column_name=column_name, quals=quals)
        for step in self.steps:
            data.value = step(data)
        return data.value


def from_field(path: str) -> Transform:
    return Transform().from_field(path)


def from_qual(name: str) -> Transform:
    return Transform().from_qual(name)


@dataclass
class Column:
    name: str
    type: ColumnType
    description: str = ""
    transform: Optional[Transform] = None

    def value(self, item: Any, quals: Mapping[str, Any]) -> Any:
        transform = self.transform or from_field(self.name)
        value = transform.apply(item, self.name, quals)
        if self.type == ColumnType.JSON:
            return _to_json(value)
        return value


@dataclass(frozen=True)
class KeyColumns:
    names: Tuple[str, ...]

    def missing(self, quals: Mapping[str, Any]) -> List[str]:
        return [n for n in self.names if quals.get(n) in (None, "")]

    def satisfied_by(self, quals: Mapping[str, Any]) -> bool:
        return not self.missing(quals)


def single_column(name: str) -> KeyColumns:
    return KeyColumns((name,))


def all_columns(names: Iterable[str]) -> KeyColumns:
    return KeyColumns(tuple(names))


Hydrate = Callable[["QueryData"], Any]


@dataclass
class ListConfig:
    hydrate: Hydrate
    key_columns: Optional[KeyColumns] = None
    should_ignore_error: Optional[Callable[[BaseException], bool]] = None


@dataclass
class GetConfig:
    hydrate: Hydrate
    key_columns: KeyColumns
    should_ignore_error: Optional[Callable[[BaseException], bool]] = None


class QueryRowSink:
    """
    Collects streamed items for one query.

    Tracks the row limit and a cancellation flag; ``on_item`` is called for
    every item as it arrives.
    """

    def __init__(
        self,
        limit: Optional[int] = None,
        on_item: Optional[Callable[[Any], None]] = None,
    ):
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        self.limit = limit
        self.on_item = on_item
        self.items: List[Any] = []
        self._cancelled = threading.Event()

    def stream_item(self, item: Any) -> None:
        self.items.append(item)
        if self.on_item is not None:
            self.on_item(item)

    def remaining_capacity(self) -> Optional[int]:
        if self.limit is None:
            return None
        return max(self.limit - len(self.items), 0)

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()


@dataclass
class QueryData:
    """Everything a hydrate function needs for one fetch sequence."""

    table: "Table"
    connection: Optional[GitHubConnection] = None
    quals: Dict[str, Any] = field(default_factory=dict)
    sink: QueryRowSink = field(default_factory=QueryRowSink)
    pagination: PaginationHandler = field(default_factory=PaginationHandler)
    fetch_type: Optional[str] = None

    @property
    def limit(self) -> Optional[int]:
        return self.sink.limit

    def stream_list_item(self, item: Any) -> None:
        self.sink.stream_item(item)

    def rows_remaining(self) -> Optional[int]:
        return self.sink.remaining_capacity()

    # RowSink protocol, so the pagination layer can stream straight into us
    def stream_item(self, item: Any) -> None:
        self.stream_list_item(item)

    def remaining_capacity(self) -> Optional[int]:
        return self.rows_remaining()

    def is_cancelled(self) -> bool:
        return self.sink.is_cancelled()

    @property
    def connector(self):
        if self.connection is None:
            raise ConfigurationException("No GitHub connection configured for this query")
        return self.connection.connector


@dataclass
class Table:
    name: str
    description: str
    columns: List[Column]
    list: Optional[ListConfig] = None
    get: Optional[GetConfig] = None

    def column(self, name: str) -> Column:
        for col in self.columns:
            if col.name == name:
                return col
        raise KeyError(f"Table {self.name} has no column '{name}'")

    def parse_quals(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        """Coerce qual values to their column types."""
        quals: Dict[str, Any] = {}
        for name, value in raw.items():
            try:
                col = self.column(name)
            except KeyError as e:
                raise ConfigurationException(str(e)) from e
            if col.type == ColumnType.INT and not isinstance(value, int):
                try:
                    value = int(value)
                except (TypeError, ValueError) as e:
                    raise ConfigurationException(
                        f"Qual '{name}' must be an integer, got {value!r}"
                    ) from e
            quals[name] = value
        return quals

    def to_row(self, item: Any, quals: Mapping[str, Any]) -> Dict[str, Any]:
        return {col.name: col.value(item, quals) for col in self.columns}

    def execute(self, query_data: QueryData) -> List[Dict[str, Any]]:
        """
        Run the list or get hydrate for a query and return its rows.

        :raises ConfigurationException: If required key quals are missing.
        :raises ConnectorException: On fetch failure; items already streamed
                                    stay in ``query_data.sink``.
        """
        quals = query_data.quals

        if self.get is not None and self.get.key_columns.satisfied_by(quals):
            query_data.fetch_type = "get"
            config = self.get
        elif self.list is not None:
            missing = self.list.key_columns.missing(quals) if self.list.key_columns else []
            if missing:
                raise ConfigurationException(
                    f"Table {self.name} requires qual(s): {', '.join(missing)}"
                )
            query_data.fetch_type = "list"
            config = self.list
        else:
            needed = ", ".join(self.get.key_columns.names) if self.get else ""
            raise ConfigurationException(f"Table {self.name} requires qual(s): {needed}")

        if should_stop(query_data):
            logger.debug(f"Skipping {self.name}: query is cancelled or at its row limit")
            return [self.to_row(item, quals) for item in query_data.sink.items]

        logger.debug(
            f"Hydrating table={self.name} fetch_type={query_data.fetch_type} quals={quals}"
        )
        try:
            result = config.hydrate(query_data)
        except ConnectorException as e:
            if config.should_ignore_error is not None and config.should_ignore_error(e):
                logger.info(f"Ignoring error for {self.name}: {e}")
            else:
                raise
        else:
            if (
                query_data.fetch_type == "get"
                and result is not None
                and not should_stop(query_data)
            ):
                query_data.stream_list_item(result)

        return [self.to_row(item, quals) for item in query_data.sink.items]


class QuerySession:
    """
    Holds connection settings and the shared connection cache for a run.

    Connections are keyed by endpoint and credentials, so concurrent
    queries against the same endpoint share one client.
    """

    def __init__(
        self,
        config: Optional[ConnectionConfig] = None,
        environ: Optional[Mapping[str, str]] = None,
        pagination: Optional[PaginationHandler] = None,
    ):
        self.config = config
        self.environ = environ
        self.pagination = pagination or PaginationHandler()
        self.cache = ConnectionCache()

    def connection(self) -> GitHubConnection:
        resolved = resolve_connection_config(self.config, self.environ)
        return self.cache.get_or_create(
            connection_cache_key(resolved),
            lambda: GitHubConnection(resolved, environ={}),
        )

    def query_data(
        self,
        table: Table,
        quals: Mapping[str, Any],
        limit: Optional[int] = None,
        on_item: Optional[Callable[[Any], None]] = None,
    ) -> QueryData:
        return QueryData(
            table=table,
            connection=self.connection(),
            quals=table.parse_quals(quals),
            sink=QueryRowSink(limit=limit, on_item=on_item),
            pagination=self.pagination,
        )

    def execute(
        self,
        table: Table,
        quals: Mapping[str, Any],
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return table.execute(self.query_data(table, quals, limit))

    def close(self) -> None:
        self.cache.close()
