"""
Page-cursor pagination for list endpoints.

A listing is driven one page at a time: the cursor for the next page comes
from the previous response, so there is never more than one request in
flight for a given sequence. Iteration stops when the API stops reporting a
next page, when the row sink is full, or when the sink is cancelled.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import (Any, Callable, Generic, List, Optional, Protocol, Sequence,
                    TypeVar)

from connectors.exceptions import ConnectorException, PaginationException
from connectors.utils.retry import DEFAULT_POLICY, RetryPolicy, retry_call

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PER_PAGE = 100


@dataclass(frozen=True)
class FetchRequest:
    """Parameters identifying one remote call."""

    owner: str = ""
    name: str = ""
    item_id: Optional[int] = None
    page: Optional[int] = None
    per_page: Optional[int] = None

    def with_page(self, page: Optional[int]) -> "FetchRequest":
        return replace(self, page=page)


@dataclass
class Page(Generic[T]):
    """One page of results plus the cursor of the page after it."""

    items: List[T] = field(default_factory=list)
    next_page: Optional[int] = None

    @classmethod
    def single(cls, item: T) -> "Page[T]":
        return cls(items=[item] if item is not None else [])

    @property
    def exhausted(self) -> bool:
        return not self.next_page


class Lister(Protocol[T]):
    def fetch_page(self, request: FetchRequest) -> Page[T]: ...


class Getter(Protocol[T]):
    def fetch_one(self, request: FetchRequest) -> Optional[T]: ...


class RowSink(Protocol):
    def stream_item(self, item: Any) -> None: ...

    def remaining_capacity(self) -> Optional[int]: ...

    def is_cancelled(self) -> bool: ...


class FunctionLister(Generic[T]):
    """Adapt a ``request -> Page`` callable to the Lister protocol."""

    def __init__(self, func: Callable[[FetchRequest], Page[T]]):
        self.func = func

    def fetch_page(self, request: FetchRequest) -> Page[T]:
        return self.func(request)


class FunctionGetter(Generic[T]):
    """Adapt a ``request -> item`` callable to the Getter protocol."""

    def __init__(self, func: Callable[[FetchRequest], Optional[T]]):
        self.func = func

    def fetch_one(self, request: FetchRequest) -> Optional[T]:
        return self.func(request)


def effective_page_size(per_page: int, limit: Optional[int]) -> int:
    """Shrink the page size to the row limit when the limit is smaller."""
    if limit is not None and 0 < limit < per_page:
        return int(limit)
    return per_page


def is_not_found_error(codes: Sequence[str]) -> Callable[[BaseException], bool]:
    """
    Build an ignore predicate matching connector errors by normalized code.

    :param codes: Error codes to ignore, e.g. ``["404"]``.
    """
    wanted = {str(c) for c in codes}

    def _predicate(exc: BaseException) -> bool:
        return isinstance(exc, ConnectorException) and exc.code in wanted

    return _predicate


def should_stop(sink: RowSink) -> bool:
    """True once the sink is cancelled or has no capacity left."""
    if sink.is_cancelled():
        return True
    remaining = sink.remaining_capacity()
    return remaining is not None and remaining <= 0


class PaginationHandler:
    """
    Drives list and get calls under a retry policy and streams results
    into a row sink.
    """

    def __init__(
        self,
        policy: RetryPolicy = DEFAULT_POLICY,
        per_page: int = DEFAULT_PER_PAGE,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.policy = policy
        self.per_page = per_page
        self.sleep = sleep

    def _call(self, func: Callable[[], T], sink: Optional[RowSink] = None) -> T:
        is_cancelled = sink.is_cancelled if sink is not None else None
        return retry_call(func, self.policy, sleep=self.sleep, is_cancelled=is_cancelled)

    def stream(self, lister: Lister[T], request: FetchRequest, sink: RowSink) -> int:
        """
        Fetch pages until the cursor is exhausted or the sink says stop.

        :param lister: Listing call to page through.
        :param request: Initial request; ``per_page`` defaults to the handler's.
        :param sink: Destination for emitted items.
        :return: Number of items emitted.
        :raises ConnectorException: On non-retryable or exhausted-retry errors.
                                    Rows already emitted stay in the sink.
        """
        per_page = effective_page_size(
            request.per_page or self.per_page, sink.remaining_capacity()
        )
        request = replace(request, per_page=per_page)

        emitted = 0
        fetches = 0
        while True:
            if should_stop(sink):
                logger.debug(f"Stopping before page {request.page}: sink is done")
                return emitted

            current = request
            page = self._call(lambda: lister.fetch_page(current), sink)
            fetches += 1
            logger.debug(
                f"Fetched page {current.page or 1} with {len(page.items)} items "
                f"(next={page.next_page})"
            )

            for item in page.items:
                if should_stop(sink):
                    return emitted
                sink.stream_item(item)
                emitted += 1

            if page.exhausted:
                logger.debug(f"Pagination exhausted after {fetches} pages, {emitted} items")
                return emitted

            if page.next_page == (current.page or 1):
                raise PaginationException(
                    f"Cursor did not advance past page {current.page or 1}"
                )
            request = current.with_page(page.next_page)

    def get(
        self,
        getter: Getter[T],
        request: FetchRequest,
        ignore: Optional[Callable[[BaseException], bool]] = None,
    ) -> Optional[T]:
        """
        Fetch a single item with retry.

        :param ignore: Optional predicate; matching errors produce ``None``.
        """
        try:
            return self._call(lambda: getter.fetch_one(request))
        except ConnectorException as e:
            if ignore is not None and ignore(e):
                logger.debug(f"Ignoring error for {request}: {e}")
                return None
            raise

    def stream_list_or_item(
        self,
        getter: Getter[Any],
        request: FetchRequest,
        sink: RowSink,
        ignore: Optional[Callable[[BaseException], bool]] = None,
    ) -> int:
        """
        Fetch once and stream the result, which may be one item or a list.

        Empty entries in a list result are skipped.
        """
        if should_stop(sink):
            return 0
        data = self.get(getter, request, ignore=ignore)
        if data is None:
            return 0

        if isinstance(data, Page):
            data = data.items
        if not isinstance(data, (list, tuple)):
            if should_stop(sink):
                return 0
            sink.stream_item(data)
            return 1

        emitted = 0
        for item in data:
            if should_stop(sink):
                break
            if item is None or item == "":
                continue
            sink.stream_item(item)
            emitted += 1
        return emitted
