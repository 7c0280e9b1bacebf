from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys for the browser client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Menu Models
class MenuNode(CamelModel):
    """A menu node as held by the store. Never carries children."""

    id: str
    name: str
    label: str
    depth: int = Field(1, ge=1)
    order: int = Field(0, ge=0)
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MenuItem(MenuNode):
    """Derived nested view of a node, built on demand from the flat collection."""

    children: List["MenuItem"] = []


class MenuItemCreate(CamelModel):
    name: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    parent_id: Optional[str] = None


class MenuItemUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    label: Optional[str] = Field(None, min_length=1)
    # An explicit null moves the node to the root level; omit to keep the parent.
    parent_id: Optional[str] = None

    @property
    def changes_parent(self) -> bool:
        return "parent_id" in self.model_fields_set


class MenuItemMove(CamelModel):
    parent_id: Optional[str] = None


class MenuItemReorder(CamelModel):
    order: int = Field(..., ge=0)


# Response Models
class MenuResponse(BaseModel):
    data: MenuItem


class MenusResponse(BaseModel):
    data: List[MenuItem]


class ErrorResponse(BaseModel):
    error: str
    message: str


class PingResponse(BaseModel):
    message: str


# Update forward references
MenuItem.model_rebuild()
