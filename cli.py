#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from connectors import (ConfigurationException, ConnectionConfig,
                        ConnectorException, load_connection_config,
                        load_env_file)
from tables import TABLES, QuerySession, get_table


def _parse_qual(value: str) -> tuple:
    if "=" not in value:
        raise argparse.ArgumentTypeError(f"Invalid qual '{value}', expected name=value")
    name, qual = value.split("=", 1)
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid qual '{value}', expected name=value")
    return name, qual.strip()


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid limit '{value}'") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("--limit must be >= 0")
    return parsed


def _connection_config(ns: argparse.Namespace) -> ConnectionConfig:
    """Config file settings, overridden by --token/--base-url."""
    config = ConnectionConfig()
    if ns.config:
        config = load_connection_config(ns.config, connection=ns.connection)
    return ConnectionConfig(
        token=ns.token or config.token,
        base_url=ns.base_url or config.base_url,
    )


def _dump(row: Dict[str, Any], indent: Optional[int] = None) -> str:
    return json.dumps(row, default=str, indent=indent)


def _cmd_tables(_ns: argparse.Namespace) -> int:
    for name in sorted(TABLES):
        print(f"{name}\t{TABLES[name].description}")
    return 0


def _cmd_columns(ns: argparse.Namespace) -> int:
    try:
        table = get_table(ns.table)
    except KeyError as exc:
        raise SystemExit(str(exc.args[0])) from exc
    for col in table.columns:
        print(f"{col.name}\t{col.type.value}\t{col.description}")
    return 0


def _cmd_query(ns: argparse.Namespace) -> int:
    try:
        table = get_table(ns.table)
    except KeyError as exc:
        raise SystemExit(str(exc.args[0])) from exc

    quals = dict(ns.qual or [])
    rows: List[Dict[str, Any]] = []

    def _on_item(item: Any) -> None:
        row = table.to_row(item, query_data.quals)
        rows.append(row)
        if ns.output == "jsonl":
            print(_dump(row), flush=True)

    try:
        session = QuerySession(config=_connection_config(ns))
    except ConfigurationException as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    try:
        query_data = session.query_data(table, quals, limit=ns.limit, on_item=_on_item)
        table.execute(query_data)
    except ConfigurationException as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc
    except ConnectorException as exc:
        # Rows streamed before the failure are still reported
        if ns.output == "json":
            print(json.dumps(rows, default=str, indent=2))
        logging.error(f"Query on {table.name} failed after {len(rows)} rows: {exc}")
        return 1
    finally:
        session.close()

    if ns.output == "json":
        print(json.dumps(rows, default=str, indent=2))
    logging.info(f"{len(rows)} rows from {table.name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-tables",
        description="Query GitHub resources (releases, workflows, repositories) as rows.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # ---- tables ----
    tbl = sub.add_parser("tables", help="List available tables.")
    tbl.set_defaults(func=_cmd_tables)

    # ---- columns ----
    cols = sub.add_parser("columns", help="Show the columns of a table.")
    cols.add_argument("table", help="Table name (e.g. github_release).")
    cols.set_defaults(func=_cmd_columns)

    # ---- query ----
    query = sub.add_parser("query", help="Fetch rows from a table.")
    query.add_argument("table", help="Table name (e.g. github_release).")
    query.add_argument(
        "--qual",
        "-q",
        action="append",
        type=_parse_qual,
        metavar="NAME=VALUE",
        help="Key column qualifier, e.g. repository_full_name=owner/repo. Repeatable.",
    )
    query.add_argument("--limit", type=_non_negative_int, help="Maximum rows to return.")
    query.add_argument("--config", help="YAML connection config file.")
    query.add_argument(
        "--connection", help="Connection name inside the config file's 'connections'."
    )
    query.add_argument("--token", help="GitHub token (defaults to GITHUB_TOKEN).")
    query.add_argument(
        "--base-url", help="GitHub Enterprise base URL (defaults to GITHUB_BASE_URL)."
    )
    query.add_argument(
        "--output",
        choices=("json", "jsonl"),
        default="json",
        help="json prints one array at the end; jsonl streams one row per line.",
    )
    query.set_defaults(func=_cmd_query)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if os.getenv("DISABLE_DOTENV", "").strip().lower() not in {
        "1",
        "true",
        "yes",
        "on",
    }:
        load_env_file(Path.cwd() / ".env")

    parser = build_parser()
    ns = parser.parse_args(argv)

    level_name = str(getattr(ns, "log_level", "") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    func = getattr(ns, "func", None)
    if func is None:
        parser.print_help()
        return 2
    return int(func(ns))


if __name__ == "__main__":
    raise SystemExit(main())
