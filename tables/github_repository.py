"""
github_repository: a single repository looked up by full name.
"""

import logging

from connectors.utils import FetchRequest, is_not_found_error
from tables.plugin import (Column, ColumnType, ListConfig, Table, from_field,
                           single_column)
from tables.utils import convert_timestamp, stream_github_list_or_item

logger = logging.getLogger(__name__)


def table_github_repository() -> Table:
    return Table(
        name="github_repository",
        description="GitHub Repositories contain all of your project's files and each file's revision history.",
        list=ListConfig(
            key_columns=single_column("full_name"),
            should_ignore_error=is_not_found_error(["404"]),
            hydrate=list_repository,
        ),
        columns=[
            # Top columns
            Column("full_name", ColumnType.STRING, "Full name of the repository, including the owner and repo name."),
            Column("name", ColumnType.STRING, "The name of the repository."),
            Column("id", ColumnType.INT, "Unique ID of the repository."),
            Column("description", ColumnType.STRING, "The description of the repository."),

            # Other columns
            Column("archived", ColumnType.BOOL, "If true, the repository is archived and read-only."),
            Column("clone_url", ColumnType.STRING, "URL that can be provided to git clone to clone the repository via HTTPS."),
            Column("created_at", ColumnType.TIMESTAMP, "Timestamp when the repository was created.", from_field("created_at").transform(convert_timestamp)),
            Column("default_branch", ColumnType.STRING, "The default branch of the repository."),
            Column("disabled", ColumnType.BOOL, "If true, the repository is disabled."),
            Column("fork", ColumnType.BOOL, "If true, the repository is a fork."),
            Column("forks_count", ColumnType.INT, "Number of forks of the repository."),
            Column("git_url", ColumnType.STRING, "URL that can be provided to git clone to clone the repository via the Git protocol."),
            Column("homepage", ColumnType.STRING, "URL of a page describing the project."),
            Column("html_url", ColumnType.STRING, "URL to view the repository on GitHub."),
            Column("language", ColumnType.STRING, "The primary language of the repository."),
            Column("license_spdx_id", ColumnType.STRING, "SPDX identifier of the repository license."),
            Column("node_id", ColumnType.STRING, "Node where GitHub stores this data internally."),
            Column("open_issues_count", ColumnType.INT, "Number of open issues and pull requests."),
            Column("owner_login", ColumnType.STRING, "Login of the repository owner.", from_field("owner.login")),
            Column("owner_type", ColumnType.STRING, "Type of the repository owner (User or Organization).", from_field("owner.type")),
            Column("private", ColumnType.BOOL, "If true, the repository is private."),
            Column("pushed_at", ColumnType.TIMESTAMP, "Timestamp when the last push to the repository happened.", from_field("pushed_at").null_if_zero().transform(convert_timestamp)),
            Column("size", ColumnType.INT, "The size of the whole repository (including history), in kilobytes."),
            Column("ssh_url", ColumnType.STRING, "URL that can be provided to git clone to clone the repository via SSH."),
            Column("stargazers_count", ColumnType.INT, "Number of users who have starred the repository."),
            Column("topics", ColumnType.JSON, "The topics (similar to tags or labels) associated with the repository."),
            Column("updated_at", ColumnType.TIMESTAMP, "Timestamp when the repository was last updated.", from_field("updated_at").transform(convert_timestamp)),
            Column("visibility", ColumnType.STRING, "Visibility of the repository (public, private or internal)."),
            Column("watchers_count", ColumnType.INT, "Number of users watching the repository."),
        ],
    )


#### LIST FUNCTION


def list_repository(query_data):
    def get_details(query_data, connector, request: FetchRequest):
        logger.debug(f"get_repository owner={request.owner} repo={request.name}")
        return connector.get_repository(request.owner, request.name)

    stream_github_list_or_item(query_data, get_details, qual="full_name")
    return None
