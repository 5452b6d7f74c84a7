"""
AITable tools

Each tool validates its arguments, sends one request to the AITable Fusion
API and reports a short summary followed by the full response data. Failures
are returned as error results instead of being raised.
"""

import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from .client import AITableClient, build_query, sort_params
from .exceptions import ToolInputError
from .models import CellFormat, FieldKey, FieldSpec, SearchableNodeType, SortSpec
from .results import ToolOutput, tool_handler
from .validation import (
    check_description,
    check_field_specs,
    check_name,
    check_record_ids,
    prepare_create_records,
    prepare_update_records,
    require_id,
)

logger = logging.getLogger("aitable-mcp.tools")

ALL_PERMISSIONS = "all (0,1,2,3)"

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)
WRITE = ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=True)
DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=True, openWorldHint=True)

TOOL_ANNOTATIONS = {
    "get_records": READ_ONLY,
    "create_records": WRITE,
    "update_records": WRITE,
    "delete_records": DESTRUCTIVE,
    "get_fields": READ_ONLY,
    "create_field": WRITE,
    "delete_field": DESTRUCTIVE,
    "get_views": READ_ONLY,
    "get_node_list": READ_ONLY,
    "create_datasheet": WRITE,
    "upload_attachment": WRITE,
    "search_nodes": READ_ONLY,
    "create_embed_link": WRITE,
    "get_embed_links": READ_ONLY,
    "delete_embed_link": DESTRUCTIVE,
    "get_node_detail": READ_ONLY,
}


def _items(data: Any, key: str) -> List[Any]:
    if isinstance(data, dict) and isinstance(data.get(key), list):
        return data[key]
    return []


def _get(data: Any, key: str, default: Any = None) -> Any:
    if isinstance(data, dict) and data.get(key) is not None:
        return data[key]
    return default


class AITableTools:
    """The AITable tool handlers bound to one client and one space."""

    def __init__(self, client: AITableClient, space_id: str):
        self.client = client
        self.space_id = space_id

    def register(self, server: FastMCP) -> None:
        """Register every tool on ``server``; the docstrings become the tool descriptions."""
        for name, annotations in TOOL_ANNOTATIONS.items():
            server.add_tool(
                getattr(self, name),
                name=name,
                annotations=annotations,
                structured_output=False,
            )
        logger.debug(f"Registered {len(TOOL_ANNOTATIONS)} tools for space '{self.space_id}'")

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    @tool_handler("getting records")
    async def get_records(
        self,
        datasheet_id: str,
        page_size: Optional[Annotated[int, Field(ge=1, le=1000)]] = None,
        max_records: Optional[int] = None,
        page_num: Optional[Annotated[int, Field(ge=1)]] = None,
        sort: Optional[List[SortSpec]] = None,
        record_ids: Optional[Annotated[List[str], Field(max_length=1000)]] = None,
        view_id: Optional[str] = None,
        fields: Optional[List[str]] = None,
        filter_by_formula: Optional[str] = None,
        cell_format: Optional[CellFormat] = None,
        field_key: Optional[FieldKey] = None,
    ) -> ToolOutput:
        """
        Get records from an AITable datasheet with full query support including pagination,
        filtering, sorting, and field selection.

        Parameters:
        - datasheet_id: The ID of the datasheet (e.g., 'dst0Yj5aNeoHldqvf6')
        - page_size: (Optional) Records per page (1-1000, default: 100)
        - max_records: (Optional) Total records to return
        - page_num: (Optional) Page number (default: 1)
        - sort: (Optional) List of sort objects, e.g. [{"field": "Name", "order": "asc"}]
        - record_ids: (Optional) Specific record IDs to fetch (max 1000)
        - view_id: (Optional) View ID to filter records
        - fields: (Optional) Field names to include
        - filter_by_formula: (Optional) Formula to filter records, e.g. {Status}="Done"
        - cell_format: (Optional) Cell value format: "json" or "string"
        - field_key: (Optional) Use field "name" (default) or "id" as keys
        """
        require_id(datasheet_id, "Datasheet ID")

        params = build_query(
            pageSize=page_size,
            maxRecords=max_records,
            pageNum=page_num,
            viewId=view_id,
            cellFormat=cell_format,
            fieldKey=field_key,
            filterByFormula=filter_by_formula,
            fields=fields,
            recordIds=record_ids,
        )
        params.extend(sort_params(sort))

        data = await self.client.request("GET", f"/datasheets/{datasheet_id}/records", params=params)

        records = _items(data, "records")
        logger.info(f"Retrieved {len(records)} records from datasheet '{datasheet_id}'")
        summary = (
            f"✓ Retrieved {len(records)} records from datasheet {datasheet_id}\n\n"
            f"Total: {_get(data, 'total', 0)} | Page: {_get(data, 'pageNum', 1)} | "
            f"Page Size: {_get(data, 'pageSize', 0)}"
        )
        return summary, data

    @tool_handler("creating records")
    async def create_records(
        self,
        datasheet_id: str,
        records: List[Dict[str, Any]],
        view_id: Optional[str] = None,
        field_key: Optional[FieldKey] = None,
    ) -> ToolOutput:
        """
        Create new records in an AITable datasheet (max 10 per request).

        Parameters:
        - datasheet_id: The datasheet ID
        - records: Records to create (1-10), each {"fields": {"Field name": value, ...}}.
          For attachment fields, provide a list of objects with 'token' and 'name'
          properties: {"Files": [{"token": "space/...", "name": "filename.pdf"}]}
        - view_id: (Optional) When specified, returns fields that are not hidden and not empty in the view
        - field_key: (Optional) Use field "name" (default) or "id" for writing and returning fields

        Example:
           create_records(
               datasheet_id="dst0Yj5aNeoHldqvf6",
               records=[{"fields": {"Name": "John Doe", "Age": 35}}]
           )
        """
        require_id(datasheet_id, "Datasheet ID")
        prepared = prepare_create_records(records)

        logger.info(f"Creating {len(prepared)} records in datasheet '{datasheet_id}'")
        data = await self.client.request(
            "POST",
            f"/datasheets/{datasheet_id}/records",
            params=build_query(viewId=view_id, fieldKey=field_key),
            json={"records": prepared},
        )

        created = _items(data, "records")
        return f"✓ Created {len(created)} records in datasheet {datasheet_id}", data

    @tool_handler("updating records")
    async def update_records(
        self,
        datasheet_id: str,
        records: List[Dict[str, Any]],
        view_id: Optional[str] = None,
        field_key: Optional[FieldKey] = None,
    ) -> ToolOutput:
        """
        Update existing records in an AITable datasheet (max 10 per request).

        Parameters:
        - datasheet_id: The datasheet ID
        - records: Records to update (1-10), each {"recordId": "rec...", "fields": {...}}.
          For attachment fields, provide a list of objects with 'token' and 'name'
          properties: {"Files": [{"token": "space/...", "name": "filename.pdf"}]}
        - view_id: (Optional) When specified, returns fields that are not hidden and not empty in the view
        - field_key: (Optional) Use field "name" (default) or "id" for writing and returning fields
        """
        require_id(datasheet_id, "Datasheet ID")
        prepared = prepare_update_records(records)

        body: Dict[str, Any] = {"records": prepared}
        if field_key:
            body["fieldKey"] = field_key

        logger.info(f"Updating {len(prepared)} records in datasheet '{datasheet_id}'")
        data = await self.client.request(
            "PATCH",
            f"/datasheets/{datasheet_id}/records",
            params=build_query(viewId=view_id),
            json=body,
        )

        updated = _items(data, "records")
        return f"✓ Updated {len(updated)} records in datasheet {datasheet_id}", data

    @tool_handler("deleting records")
    async def delete_records(self, datasheet_id: str, record_ids: List[str]) -> ToolOutput:
        """
        Delete records from an AITable datasheet (max 10 per request).

        Parameters:
        - datasheet_id: The datasheet ID
        - record_ids: Record IDs to delete (1-10)
        """
        require_id(datasheet_id, "Datasheet ID")
        record_ids = check_record_ids(record_ids)

        logger.info(f"Deleting {len(record_ids)} records from datasheet '{datasheet_id}'")
        await self.client.request(
            "DELETE",
            f"/datasheets/{datasheet_id}/records",
            params=build_query(recordIds=record_ids),
        )

        summary = (
            f"✓ Successfully deleted {len(record_ids)} record(s) from datasheet {datasheet_id}\n\n"
            f"Deleted record IDs:"
        )
        return summary, record_ids

    # ------------------------------------------------------------------
    # Fields and views
    # ------------------------------------------------------------------

    @tool_handler("getting fields")
    async def get_fields(self, datasheet_id: str, view_id: Optional[str] = None) -> ToolOutput:
        """
        Get information about all fields in an AITable datasheet. Returns field metadata
        including id, name, type, and properties. Max 200 fields per datasheet.

        Parameters:
        - datasheet_id: The datasheet ID
        - view_id: (Optional) When specified, returns fields in view order and excludes hidden fields
        """
        require_id(datasheet_id, "Datasheet ID")
        data = await self.client.request(
            "GET",
            f"/datasheets/{datasheet_id}/fields",
            params=build_query(viewId=view_id),
        )
        fields = _items(data, "fields")
        return f"✓ Retrieved {len(fields)} fields from datasheet {datasheet_id}", data

    @tool_handler("creating field")
    async def create_field(
        self,
        datasheet_id: str,
        field_type: str,
        name: str,
        field_property: Optional[Dict[str, Any]] = None,
    ) -> ToolOutput:
        """
        Create a new field in an AITable datasheet. Max 200 fields per datasheet.

        Parameters:
        - datasheet_id: The datasheet ID
        - field_type: Field type (e.g., 'SingleText')
        - name: Field name, max 100 characters
        - field_property: (Optional) Field properties, e.g. {"defaultValue": "N/A"} for SingleText
        """
        require_id(datasheet_id, "Datasheet ID")
        check_name(name, "Field name")
        if not isinstance(field_type, str) or not field_type.strip():
            raise ToolInputError("Field type is required and cannot be empty")

        data = await self.client.request(
            "POST",
            f"/spaces/{self.space_id}/datasheets/{datasheet_id}/fields",
            json={"type": field_type, "name": name, "property": field_property or {}},
        )
        return f'✓ Successfully created field "{name}" in datasheet {datasheet_id}', data

    @tool_handler("deleting field")
    async def delete_field(self, datasheet_id: str, field_id: str) -> ToolOutput:
        """
        Delete a field from an AITable datasheet.

        Parameters:
        - datasheet_id: The datasheet ID
        - field_id: The field ID to delete
        """
        require_id(datasheet_id, "Datasheet ID")
        require_id(field_id, "Field ID")
        await self.client.request(
            "DELETE",
            f"/spaces/{self.space_id}/datasheets/{datasheet_id}/fields/{field_id}",
        )
        return f"✓ Successfully deleted field {field_id} from datasheet {datasheet_id}", None

    @tool_handler("getting views")
    async def get_views(self, datasheet_id: str) -> ToolOutput:
        """
        Get all views from an AITable datasheet. Returns view metadata including id, name,
        and type (Grid, Gallery, Kanban, Gantt, Calendar, Architecture).

        Parameters:
        - datasheet_id: The datasheet ID
        """
        require_id(datasheet_id, "Datasheet ID")
        data = await self.client.request("GET", f"/datasheets/{datasheet_id}/views")
        views = _items(data, "views")
        return f"✓ Retrieved {len(views)} views from datasheet {datasheet_id}", data

    # ------------------------------------------------------------------
    # Nodes and datasheets
    # ------------------------------------------------------------------

    @tool_handler("getting node list")
    async def get_node_list(self) -> ToolOutput:
        """
        Get a list of the outermost files in the working directory of the AITable space.
        Returns datasheets, folders, forms, dashboards, automations, etc.
        """
        data = await self.client.request("GET", f"/spaces/{self.space_id}/nodes")
        nodes = _items(data, "nodes")
        return f"✓ Retrieved {len(nodes)} nodes from space {self.space_id}", data

    @tool_handler("creating datasheet")
    async def create_datasheet(
        self,
        name: str,
        description: Optional[str] = None,
        folder_id: Optional[str] = None,
        pre_node_id: Optional[str] = None,
        fields: Optional[List[FieldSpec]] = None,
    ) -> ToolOutput:
        """
        Create a new datasheet in an AITable space. Max 200 fields can be created in a
        single request. If no fields are provided, 3 default fields will be added.

        Parameters:
        - name: Datasheet name, max 100 characters
        - description: (Optional) Table description, max 500 characters
        - folder_id: (Optional) Folder ID; defaults to the working directory
        - pre_node_id: (Optional) Previous node ID; defaults to the first position
        - fields: (Optional) Field list, each {"type": "SingleText", "name": "Title", "property": {}}
        """
        check_name(name, "Datasheet name")
        check_description(description)
        field_list = check_field_specs(fields)

        body: Dict[str, Any] = {"name": name}
        if description:
            body["description"] = description
        if folder_id:
            body["folderId"] = folder_id
        if pre_node_id:
            body["preNodeId"] = pre_node_id
        if field_list is not None:
            body["fields"] = field_list

        data = await self.client.request("POST", f"/spaces/{self.space_id}/datasheets", json=body)

        summary = (
            f'✓ Successfully created datasheet "{name}" in space {self.space_id}\n\n'
            f"Datasheet ID: {_get(data, 'id')}\n"
            f"Created at: {_get(data, 'createdAt')}\n"
            f"Fields created: {len(_items(data, 'fields'))}"
        )
        return summary, data

    @tool_handler("uploading attachment")
    async def upload_attachment(self, datasheet_id: str, file_path: str) -> ToolOutput:
        """
        Upload an attachment file to an AITable datasheet. This is STEP 1 of a 2-step process:

        STEP 1: Upload file -> returns token and name
        STEP 2: Use token+name in create_records or update_records to attach the file to a record

        The file is NOT attached to any record yet. Use the returned token and name in the
        fields of create_records/update_records: {"FieldName": [{"token": "...", "name": "..."}]}.
        The returned URL is valid for about 2 hours.

        Parameters:
        - datasheet_id: The datasheet ID where the file will eventually be attached
        - file_path: Local absolute path of the file (e.g., '/home/user/file.png')
        """
        require_id(file_path, "File path")
        require_id(datasheet_id, "Datasheet ID")

        try:
            content = Path(file_path).read_bytes()
        except OSError as e:
            raise ToolInputError(f"Failed to read file at path '{file_path}': {e}") from e

        file_name = Path(file_path).name
        if not file_name.strip():
            raise ToolInputError(f"Invalid file path '{file_path}': cannot extract file name")

        logger.info(f"Uploading '{file_name}' ({len(content)} bytes) to datasheet '{datasheet_id}'")
        data = await self.client.upload(f"/datasheets/{datasheet_id}/attachments", file_name, content)

        token = _get(data, "token")
        uploaded_name = _get(data, "name")
        lines = [
            f'✓ Successfully uploaded attachment "{file_name}" to datasheet {datasheet_id}',
            "",
            "Attachment Details:",
            f"Token: {token}",
            f"Name: {uploaded_name}",
            f"Size: {_get(data, 'size')} bytes",
            f"MIME Type: {_get(data, 'mimeType')}",
        ]
        if _get(data, "width"):
            lines.append(f"Dimensions: {data['width']}x{_get(data, 'height')}")
        lines += [
            f"URL (valid 2h): {_get(data, 'url')}",
            "",
            "NEXT STEP: The file is uploaded but NOT yet attached to any record.",
            "To attach it, call create_records or update_records with fields:",
            f'{{"AttachmentFieldName": [{{"token": "{token}", "name": "{uploaded_name}"}}]}}',
            "",
            "Full response:",
        ]
        return "\n".join(lines), data

    @tool_handler("searching nodes")
    async def search_nodes(
        self,
        node_type: SearchableNodeType,
        permissions: Optional[List[Annotated[int, Field(ge=0, le=3)]]] = None,
        query: Optional[str] = None,
    ) -> ToolOutput:
        """
        Search for file nodes in the AITable space by type, permissions and name, without
        considering folder hierarchy.

        Parameters:
        - node_type: Node type, case-sensitive: 'Folder', 'Datasheet', 'Form', 'Dashboard', 'Mirror'
        - permissions: (Optional) Permission levels: 0=Manager, 1=Editor, 2=Update-only,
          3=Read-only. All levels are matched when omitted.
        - query: (Optional) Search keywords for partial name matching
        """
        params = [("type", node_type)]
        if permissions:
            params.append(("permissions", ",".join(str(p) for p in permissions)))
        if query:
            params.append(("query", query))

        data = await self.client.request(
            "GET",
            f"/spaces/{self.space_id}/nodes",
            params=params,
            api_version="v2",
        )

        nodes = _items(data, "nodes")
        permissions_label = ", ".join(str(p) for p in permissions) if permissions else ALL_PERMISSIONS
        summary = (
            f"✓ Found {len(nodes)} nodes matching type '{node_type}'\n\n"
            f"Query: {query or 'none'}\n"
            f"Permissions: {permissions_label}"
        )
        return summary, data

    @tool_handler("getting node details")
    async def get_node_detail(self, node_id: str) -> ToolOutput:
        """
        Get detailed information about a specific node (datasheet, folder, form, dashboard,
        automation) in the AITable space. Folder nodes include their child nodes.

        Parameters:
        - node_id: The node ID to get details for
        """
        require_id(node_id, "Node ID")
        data = await self.client.request("GET", f"/spaces/{self.space_id}/nodes/{node_id}")

        lines = [
            f"✓ Retrieved details for node {node_id}",
            "",
            "Node Details:",
            f"- Name: {_get(data, 'name')}",
            f"- Type: {_get(data, 'type')}",
            f"- Icon: {_get(data, 'icon')}",
            f"- Favorite: {'Yes' if _get(data, 'isFav') else 'No'}",
        ]
        children = _items(data, "children")
        if _get(data, "type") == "Folder" and children:
            lines.append(f"- Children: {len(children)} item(s)")
        lines += ["", "Full Response:"]
        return "\n".join(lines), data

    # ------------------------------------------------------------------
    # Embed links
    # ------------------------------------------------------------------

    @tool_handler("creating embed link")
    async def create_embed_link(self, node_id: str, payload: Optional[Dict[str, Any]] = None) -> ToolOutput:
        """
        Create an embed link for a node (datasheet, dashboard, or form). Returns a URL that
        can be embedded in other websites. If payload is omitted, the link is read-only.

        Parameters:
        - node_id: The node ID to create an embed link for
        - payload: (Optional) Embed configuration. Can include: viewControl (viewId, tabBar,
          toolBar), primarySideBar (collapsed), nodeInfoBar, collaboratorStatusBar, bannerLogo,
          permissionType (readOnly/publicEdit/privateEdit), theme (light/dark)
        """
        require_id(node_id, "Node ID")
        body = {"payload": payload} if payload else {}
        data = await self.client.request(
            "POST",
            f"/spaces/{self.space_id}/nodes/{node_id}/embedlinks",
            json=body,
        )
        summary = (
            f"✓ Created embed link for node {node_id}\n\n"
            f"Link ID: {_get(data, 'linkId')}\n"
            f"URL: {_get(data, 'url')}"
        )
        return summary, data

    @tool_handler("getting embed links")
    async def get_embed_links(self, node_id: str) -> ToolOutput:
        """
        Get all embed links of a node (datasheet, dashboard, or form). Returns up to 30
        embed links; deleted links are not included.

        Parameters:
        - node_id: The node ID to get embed links for
        """
        require_id(node_id, "Node ID")
        data = await self.client.request("GET", f"/spaces/{self.space_id}/nodes/{node_id}/embedlinks")

        if isinstance(data, list):
            links = data
        else:
            links = _items(data, "embedLinks")

        lines = [f"✓ Retrieved {len(links)} embed link(s) for node {node_id}", ""]
        if links:
            lines.append("Embed Links:")
            for index, link in enumerate(links, start=1):
                lines.append(f"{index}. Link ID: {_get(link, 'linkId')}")
                lines.append(f"   URL: {_get(link, 'url')}")
                permission = _get(_get(link, "payload", {}), "permissionType")
                if permission:
                    lines.append(f"   Permission: {permission}")
        else:
            lines.append("No embed links found for this node.")
        lines += ["", "Full Response:"]
        return "\n".join(lines), data

    @tool_handler("deleting embed link")
    async def delete_embed_link(self, node_id: str, link_id: str) -> ToolOutput:
        """
        Delete (disable) an embed link of a node. After deletion the link can no longer be
        accessed.

        Parameters:
        - node_id: The node ID containing the embed link
        - link_id: The embed link ID to delete (e.g., 'embb90a52cfc02a4f83')
        """
        require_id(node_id, "Node ID")
        require_id(link_id, "Link ID")
        await self.client.request("DELETE", f"/spaces/{self.space_id}/nodes/{node_id}/embedlinks/{link_id}")
        summary = (
            "✓ Successfully deleted embed link\n\n"
            f"Node ID: {node_id}\n"
            f"Link ID: {link_id}\n\n"
            "The embed link is now disabled and can no longer be accessed."
        )
        return summary, None
