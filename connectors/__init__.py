"""
GitHub connector for retrieving repository resources.

This package provides the GitHub connection, typed payload models, and the
retrying, pagination-aware fetch primitives the tables are built on.
"""

from .config import (ConnectionConfig, load_connection_config, load_env_file,
                     normalize_base_url, resolve_connection_config)
from .exceptions import (APIException, AuthenticationException,
                         ConfigurationException, ConnectorException,
                         NotFoundException, PaginationException,
                         RateLimitException, TransientNetworkException)
from .github import (ConnectionCache, GitHubConnection, GitHubConnector,
                     parse_next_page)
from .models import Release, ReleaseAsset, Repository, User, Workflow

__all__ = [
    # Connectors
    "GitHubConnector",
    "GitHubConnection",
    "ConnectionCache",
    "parse_next_page",
    # Config
    "ConnectionConfig",
    "load_connection_config",
    "load_env_file",
    "normalize_base_url",
    "resolve_connection_config",
    # Models
    "User",
    "Release",
    "ReleaseAsset",
    "Workflow",
    "Repository",
    # Exceptions
    "ConnectorException",
    "RateLimitException",
    "AuthenticationException",
    "NotFoundException",
    "ConfigurationException",
    "TransientNetworkException",
    "PaginationException",
    "APIException",
]
