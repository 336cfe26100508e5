"""Pydantic schemas for learning resources."""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from sismonev.core.models import ResourceType

AgeGroup = Literal["0-2", "2-4", "4-6", "0-6", "all"]
Aspect = Literal[
    "kognitif",
    "fisik",
    "sosial-emosional",
    "bahasa",
    "seni",
    "moral-agama",
    "multi-aspek",
]

YOUTUBE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")
DURATION_RE = re.compile(r"^(?:(\d{1,2}):)?(\d{1,2}):(\d{2})$")
URL_RE = re.compile(r"^https?://\S+$")


def split_tags(value):
    """Accept a list or a comma-separated string; drop blanks."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    return [str(t).strip() for t in value if str(t).strip()]


class LearningResourceBase(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10, max_length=1000)
    resource_type: ResourceType
    category: str = Field(..., min_length=1, max_length=100)
    author: str = Field(..., min_length=1, max_length=100)
    age_group: AgeGroup | None = None
    aspect: Aspect | None = None
    tags: list[str] | None = None
    stakeholder: str | None = Field(None, max_length=100)
    thumbnail: str | None = None
    organization_id: str | None = None
    organization_name: str | None = None
    pages: int | None = Field(None, ge=1)
    pdf_url: str | None = None
    youtube_id: str | None = None
    duration: str | None = None
    format: str | None = Field(None, max_length=100)
    features: list[str] | None = None
    usage: str | None = Field(None, max_length=500)

    @field_validator("tags", "features", mode="before")
    @classmethod
    def split_lists(cls, v):
        return split_tags(v)

    @field_validator("thumbnail", "pdf_url")
    @classmethod
    def valid_url(cls, v: str | None) -> str | None:
        if v and not URL_RE.match(v.strip()):
            raise ValueError("must be a valid URL")
        return v.strip() if v else v

    @field_validator("duration")
    @classmethod
    def valid_duration(cls, v: str | None) -> str | None:
        if v and not DURATION_RE.match(v.strip()):
            raise ValueError("invalid duration format (use MM:SS or HH:MM:SS)")
        return v.strip() if v else v

    @model_validator(mode="after")
    def type_specific_fields(self):
        if self.resource_type == ResourceType.guide and not self.pdf_url:
            raise ValueError("pdf_url is required for guides")
        if self.resource_type == ResourceType.video:
            if not self.youtube_id or not YOUTUBE_ID_RE.match(self.youtube_id):
                raise ValueError("a valid 11-character youtube_id is required for videos")
        if self.resource_type == ResourceType.tool and not (self.format and self.format.strip()):
            raise ValueError("format is required for tools")
        return self


class LearningResourceCreate(LearningResourceBase):
    pass


class LearningResourceUpdate(LearningResourceBase):
    """Full replacement of the editable fields."""

    is_active: bool | None = None


class LearningResourceResponse(BaseModel):
    id: int
    title: str
    description: str
    resource_type: ResourceType
    category: str
    author: str
    age_group: str | None
    aspect: str | None
    tags: list[str] | None
    stakeholder: str | None
    thumbnail: str | None
    thumbnail_url: str | None = None
    publish_date: datetime | None
    organization_id: str | None
    organization_name: str | None
    pages: int | None
    pdf_url: str | None
    youtube_id: str | None
    duration: str | None
    format: str | None
    features: list[str] | None
    usage: str | None
    is_active: bool
    views: int
    downloads: int
    likes: int
    created_by_id: int | None
    updated_by_id: int | None
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True

    @model_validator(mode="after")
    def default_thumbnail(self):
        if self.thumbnail:
            self.thumbnail_url = self.thumbnail
        elif self.resource_type == ResourceType.video and self.youtube_id:
            self.thumbnail_url = f"https://img.youtube.com/vi/{self.youtube_id}/mqdefault.jpg"
        return self


class LearningResourceList(BaseModel):
    items: list[LearningResourceResponse]
    total: int
    page: int
    limit: int
    pages: int


class BulkRequest(BaseModel):
    operation: Literal["delete", "activate", "deactivate"]
    ids: list[int] = Field(..., min_length=1)


class BulkResult(BaseModel):
    operation: str
    affected: int


class StatsRequest(BaseModel):
    type: Literal["view", "download", "like"]


class StatsResponse(BaseModel):
    id: int
    views: int
    downloads: int
    likes: int

    class Config:
        from_attributes = True
