"""
Connection configuration for the GitHub connector.

Explicit per-connection settings win over the ``GITHUB_TOKEN`` and
``GITHUB_BASE_URL`` environment defaults. A missing token is reported
before any remote call is attempted.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Union
from urllib.parse import urlparse

import yaml

from connectors.exceptions import ConfigurationException

logger = logging.getLogger(__name__)

PUBLIC_API_URL = "https://api.github.com/"


@dataclass(frozen=True)
class ConnectionConfig:
    token: Optional[str] = None
    base_url: Optional[str] = None


def normalize_base_url(base_url: str) -> str:
    """
    Validate a base URL and point it at the REST API root.

    Enterprise hosts get ``api/v3/`` appended; the public API URL is left
    as is.

    :raises ConfigurationException: If the URL is not an http(s) URL with a host.
    """
    parsed = urlparse(base_url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationException(f"github.base_url is invalid: {base_url}")

    url = parsed.geturl()
    if not url.endswith("/"):
        url += "/"
    if url != PUBLIC_API_URL and not url.endswith("api/v3/"):
        url += "api/v3/"
    return url


def load_connection_config(
    path: Union[str, Path], connection: Optional[str] = None
) -> ConnectionConfig:
    """
    Load a connection config from a YAML file.

    The file either holds ``token``/``base_url`` at the top level, or a
    ``connections`` mapping keyed by connection name.

    :param path: Path to the YAML file.
    :param connection: Connection name to select from ``connections``.
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise ConfigurationException(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationException(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationException(f"Config file {path} must contain a mapping")

    connections = data.get("connections")
    if connections is not None:
        if not isinstance(connections, dict) or not connections:
            raise ConfigurationException(f"'connections' in {path} must be a mapping")
        if connection is None:
            if len(connections) != 1:
                raise ConfigurationException(
                    f"Multiple connections in {path}; choose one of: "
                    f"{', '.join(sorted(connections))}"
                )
            connection = next(iter(connections))
        if connection not in connections:
            raise ConfigurationException(f"Unknown connection '{connection}' in {path}")
        data = connections[connection] or {}
        logger.debug(f"Using connection '{connection}' from {path}")

    return ConnectionConfig(token=data.get("token"), base_url=data.get("base_url"))


def resolve_connection_config(
    config: Optional[ConnectionConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ConnectionConfig:
    """
    Merge explicit config over environment defaults and validate it.

    :return: A config with a token and a normalized (or absent) base URL.
    :raises ConfigurationException: If no token is set or the base URL is invalid.
    """
    config = config or ConnectionConfig()
    environ = os.environ if environ is None else environ

    token = config.token or environ.get("GITHUB_TOKEN") or ""
    base_url = config.base_url or environ.get("GITHUB_BASE_URL") or ""

    if not token:
        raise ConfigurationException(
            "'token' must be set in the connection configuration "
            "(or set GITHUB_TOKEN)."
        )

    return ConnectionConfig(
        token=token,
        base_url=normalize_base_url(base_url) if base_url else None,
    )


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def load_env_file(
    path: Union[str, Path],
    environ: Optional[MutableMapping[str, str]] = None,
) -> int:
    """
    Export ``KEY=value`` lines from a dotenv-style file.

    Variables already present in ``environ`` keep their values. Blank lines,
    ``#`` comments and lines without ``=`` are skipped, and an ``export``
    prefix is accepted.

    :param path: File to read; a missing file loads nothing.
    :param environ: Target mapping, ``os.environ`` by default.
    :return: Number of variables set.
    """
    environ = os.environ if environ is None else environ
    path = Path(path)
    if not path.is_file():
        return 0

    count = 0
    with path.open(encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line.startswith("export "):
                line = line[len("export "):].lstrip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            if key and key not in environ:
                environ[key] = _unquote(value.strip())
                count += 1

    if count:
        logger.debug(f"Loaded {count} variables from {path}")
    return count
