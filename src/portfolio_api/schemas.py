from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Request bodies accept and responses emit the display (camelCase) field names.
_CONFIG = dict(populate_by_name=True)


def _strip_list(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    return [s.strip() for s in v if s and s.strip()]


# PUBLIC_INTERFACE
class TimelineCreate(BaseModel):
    """
    Schema for creating a timeline entry. Only dateValue is required.
    """

    model_config = ConfigDict(
        **_CONFIG,
        json_schema_extra={
            "example": {
                "dateValue": "2024-05-10",
                "title": "Moved to Berlin",
                "content": "New city, new job.",
                "tag": "Life",
                "color": "bg-emerald-500",
                "markdownContent": "# The move\n\nLong story...",
            }
        },
    )

    date_value: str = Field(..., alias="dateValue", min_length=1, description="ISO calendar date, e.g. 2024-05-10")
    title: Optional[str] = Field(default=None, description="Entry title")
    content: Optional[str] = Field(default=None, description="Short excerpt")
    tag: Optional[str] = Field(default=None, description="Category label")
    color: Optional[str] = Field(default=None, description="Accent token; 'bg-emerald-500' when omitted")
    markdown_content: Optional[str] = Field(
        default=None, alias="markdownContent", description="Optional long-form body"
    )


# PUBLIC_INTERFACE
class TimelineUpdate(BaseModel):
    """
    Schema for updating a timeline entry.
    Only fields present in the body are changed; markdownContent null or "" clears it.
    """

    model_config = ConfigDict(**_CONFIG)

    date_value: Optional[str] = Field(default=None, alias="dateValue")
    title: Optional[str] = None
    content: Optional[str] = None
    tag: Optional[str] = None
    color: Optional[str] = None
    markdown_content: Optional[str] = Field(default=None, alias="markdownContent")


# PUBLIC_INTERFACE
class TimelineOut(BaseModel):
    """Timeline entry as returned by the API."""

    model_config = ConfigDict(**_CONFIG)

    id: str
    date_value: str = Field(..., alias="dateValue")
    title: str
    content: str
    tag: str
    color: str
    markdown_content: Optional[str] = Field(default=None, alias="markdownContent")


# PUBLIC_INTERFACE
class CareerCreate(BaseModel):
    """
    Schema for creating a career entry. role, company and period are required.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "role": "Engineer",
                "company": "Acme",
                "period": "2020-2022",
                "description": "Built things",
                "stack": ["Go", "Postgres"],
                "order": 1,
            }
        }
    )

    role: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    period: str = Field(..., min_length=1, description="Free text, e.g. '2023-Present'")
    description: Optional[str] = None
    stack: Optional[List[str]] = Field(default=None, description="Technologies, in display order")
    order: Optional[int] = Field(default=None, description="Display rank; higher comes first")

    @field_validator("stack")
    @classmethod
    def clean_stack(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Trim entries and drop blank ones."""
        return _strip_list(v)


# PUBLIC_INTERFACE
class CareerUpdate(BaseModel):
    """Partial update for a career entry."""

    role: Optional[str] = None
    company: Optional[str] = None
    period: Optional[str] = None
    description: Optional[str] = None
    stack: Optional[List[str]] = None
    order: Optional[int] = None

    @field_validator("stack")
    @classmethod
    def clean_stack(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _strip_list(v)


# PUBLIC_INTERFACE
class CareerOut(BaseModel):
    """Career entry as returned by the API."""

    id: str
    role: str
    company: str
    period: str
    description: str
    stack: List[str]
    order: int


# PUBLIC_INTERFACE
class PostCreate(BaseModel):
    """
    Schema for creating a post. content and date are required.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"content": "hello", "date": "1d ago", "likes": "1.2k", "subtext": None, "order": 0}
        }
    )

    content: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1, description="Display string, e.g. '1d ago'")
    likes: Optional[str] = Field(default=None, description="Display string; '0' when omitted")
    subtext: Optional[str] = None
    order: Optional[int] = None


# PUBLIC_INTERFACE
class PostUpdate(BaseModel):
    """Partial update for a post; subtext null or "" clears it."""

    content: Optional[str] = None
    date: Optional[str] = None
    likes: Optional[str] = None
    subtext: Optional[str] = None
    order: Optional[int] = None


# PUBLIC_INTERFACE
class PostOut(BaseModel):
    """Post as returned by the API."""

    id: str
    content: str
    likes: str
    date: str
    subtext: Optional[str] = None
    order: int


class SuccessOut(BaseModel):
    success: bool = True
