"""
github_workflow: GitHub Actions workflows of a repository.
"""

import logging

from connectors.utils import FetchRequest
from tables.plugin import (Column, ColumnType, GetConfig, ListConfig, Table,
                           all_columns, from_field, from_qual, single_column)
from tables.utils import (convert_timestamp, get_github_item,
                          stream_github_list)

logger = logging.getLogger(__name__)


def table_github_workflow() -> Table:
    return Table(
        name="github_workflow",
        description="GitHub Workflows bundle project files for download by users.",
        list=ListConfig(
            key_columns=single_column("repository_full_name"),
            hydrate=list_workflows,
        ),
        get=GetConfig(
            key_columns=all_columns(["repository_full_name", "id"]),
            hydrate=get_workflow,
        ),
        columns=[
            # Top columns
            Column("repository_full_name", ColumnType.STRING, "Full name of the repository that contains the workflow.", from_qual("repository_full_name")),
            Column("name", ColumnType.STRING, "The name of the workflow."),
            Column("id", ColumnType.INT, "Unique ID of the workflow."),
            Column("path", ColumnType.STRING, "Path of the workflow."),

            # Other columns
            Column("badge_url", ColumnType.STRING, "Badge URL for the workflow."),
            Column("created_at", ColumnType.TIMESTAMP, "Time when the workflow was created.", from_field("created_at").transform(convert_timestamp)),
            Column("html_url", ColumnType.STRING, "HTML URL for the workflow."),
            Column("node_id", ColumnType.STRING, "Node where GitHub stores this data internally."),
            Column("state", ColumnType.STRING, "State of the workflow."),
            Column("updated_at", ColumnType.TIMESTAMP, "Time when the workflow was updated.", from_field("updated_at").transform(convert_timestamp)),
            Column("url", ColumnType.STRING, "URL of the workflow."),
        ],
    )


#### LIST FUNCTION


def list_workflows(query_data):
    def get_list(query_data, connector, request: FetchRequest):
        return connector.list_workflows(
            request.owner, request.name, page=request.page, per_page=request.per_page
        )

    stream_github_list(query_data, get_list)
    return None


#### HYDRATE FUNCTIONS


def get_workflow(query_data):
    def get_details(query_data, connector, request: FetchRequest):
        logger.debug(
            f"get_workflow owner={request.owner} repo={request.name} id={request.item_id}"
        )
        return connector.get_workflow(request.owner, request.name, request.item_id)

    return get_github_item(query_data, get_details)
