"""
Utility modules for connectors.
"""

from .pagination import (FetchRequest, FunctionGetter, FunctionLister, Getter,
                         Lister, Page, PaginationHandler, RowSink,
                         effective_page_size, is_not_found_error,
                         should_stop)
from .retry import (RetryPolicy, fibonacci_backoff, is_rate_limit_error,
                    retry_call, retry_with_backoff)

__all__ = [
    "FetchRequest",
    "FunctionGetter",
    "FunctionLister",
    "Getter",
    "Lister",
    "Page",
    "PaginationHandler",
    "RowSink",
    "effective_page_size",
    "is_not_found_error",
    "should_stop",
    "RetryPolicy",
    "fibonacci_backoff",
    "is_rate_limit_error",
    "retry_call",
    "retry_with_backoff",
]
