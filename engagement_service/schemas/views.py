"""Available view schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class ViewCreateRequest(BaseModel):
    """Request to register a new view."""

    view_name: Optional[str] = Field(None, max_length=255, description="Name of the view")

    @field_validator("view_name", mode="before")
    @classmethod
    def _strip_view_name(cls, value: Any) -> Any:
        # Length is checked on the trimmed name that gets stored
        return value.strip() if isinstance(value, str) else value


class ViewResponse(BaseModel):
    id: int
    view_name: str
    created_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class ViewExistsResponse(BaseModel):
    exists: bool
    view_name: str
