"""
github_release: releases of a repository.
"""

import logging

from connectors.utils import FetchRequest, is_not_found_error
from tables.plugin import (Column, ColumnType, GetConfig, ListConfig, Table,
                           all_columns, from_field, from_qual, single_column)
from tables.utils import (convert_timestamp, get_github_item,
                          stream_github_list)

logger = logging.getLogger(__name__)


def table_github_release() -> Table:
    return Table(
        name="github_release",
        description="GitHub Releases bundle project files for download by users.",
        list=ListConfig(
            key_columns=single_column("repository_full_name"),
            should_ignore_error=is_not_found_error(["404"]),
            hydrate=list_releases,
        ),
        get=GetConfig(
            key_columns=all_columns(["repository_full_name", "id"]),
            should_ignore_error=is_not_found_error(["404"]),
            hydrate=get_release,
        ),
        columns=[
            # Top columns
            Column("repository_full_name", ColumnType.STRING, "Full name of the repository that contains the release.", from_qual("repository_full_name")),

            # Other columns
            Column("assets", ColumnType.JSON, "List of assets contained in the release."),
            Column("assets_url", ColumnType.STRING, "Assets URL for the release."),
            Column("author_login", ColumnType.STRING, "The login name of the user that created the release.", from_field("author.login")),
            Column("body", ColumnType.STRING, "Text describing the contents of the tag."),
            Column("created_at", ColumnType.TIMESTAMP, "Time when the release was created.", from_field("created_at").transform(convert_timestamp)),
            Column("draft", ColumnType.BOOL, "True if this is a draft (unpublished) release."),
            Column("html_url", ColumnType.STRING, "HTML URL for the release."),
            Column("id", ColumnType.INT, "Unique ID of the release."),
            Column("name", ColumnType.STRING, "The name of the release."),
            Column("node_id", ColumnType.STRING, "Node where GitHub stores this data internally."),
            Column("prerelease", ColumnType.BOOL, "True if this is a prerelease version."),
            Column("published_at", ColumnType.TIMESTAMP, "Time when the release was published.", from_field("published_at").null_if_zero().transform(convert_timestamp)),
            Column("tag_name", ColumnType.STRING, "The name of the tag the release is associated with."),
            Column("tarball_url", ColumnType.STRING, "Tarball URL for the release."),
            Column("target_commitish", ColumnType.STRING, "Specifies the commitish value that determines where the Git tag is created from. Can be any branch or commit SHA."),
            Column("upload_url", ColumnType.STRING, "Upload URL for the release."),
            Column("url", ColumnType.STRING, "URL of the release."),
            Column("zipball_url", ColumnType.STRING, "Zipball URL for the release."),
        ],
    )


#### LIST FUNCTION


def list_releases(query_data):
    def get_list(query_data, connector, request: FetchRequest):
        return connector.list_releases(
            request.owner, request.name, page=request.page, per_page=request.per_page
        )

    stream_github_list(query_data, get_list)
    return None


#### HYDRATE FUNCTIONS


def get_release(query_data):
    def get_details(query_data, connector, request: FetchRequest):
        logger.debug(
            f"get_release owner={request.owner} repo={request.name} id={request.item_id}"
        )
        return connector.get_release(request.owner, request.name, request.item_id)

    return get_github_item(query_data, get_details)
