"""Pydantic models for structured tool arguments."""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

SortOrder = Literal["asc", "desc"]
CellFormat = Literal["json", "string"]
FieldKey = Literal["name", "id"]
SearchableNodeType = Literal["Folder", "Datasheet", "Form", "Dashboard", "Mirror"]


class SortSpec(BaseModel):
    """One sort criterion for get_records."""

    field: str = Field(..., description="Field name or ID to sort by")
    order: SortOrder = Field(..., description="Sort order")


class FieldSpec(BaseModel):
    """A field to create together with a new datasheet."""

    type: str = Field(..., description="Field type (e.g., 'SingleText')")
    name: str = Field(..., description="Field name, max 100 characters")
    property: Optional[Dict[str, Any]] = Field(default=None, description="Field properties")
