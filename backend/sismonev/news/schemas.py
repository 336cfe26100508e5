"""Pydantic schemas for news articles."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from sismonev.core.config import get_settings
from sismonev.core.models import NewsStatus
from sismonev.news.images import to_full_image_url


class NewsCreate(BaseModel):
    """Create payload. ``source`` is derived from the author and never accepted."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    excerpt: str = ""
    image: Any = None
    category: str = Field("general", min_length=1, max_length=100)
    status: NewsStatus | None = None


class NewsUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    content: str | None = Field(None, min_length=1)
    excerpt: str | None = None
    image: Any = None
    category: str | None = Field(None, min_length=1, max_length=100)
    status: NewsStatus | None = None
    is_active: bool | None = None


class NewsAuthor(BaseModel):
    id: int
    full_name: str
    email: str
    organization_id: str | None
    organization_name: str | None

    class Config:
        from_attributes = True


class NewsResponse(BaseModel):
    """News article in API responses; image is always an absolute URL."""

    id: int
    title: str
    content: str
    excerpt: str
    image: str | None
    author_id: int | None
    author: NewsAuthor | None
    status: NewsStatus
    approved_by_id: int | None
    approved_at: datetime | None
    published_at: datetime | None
    source: str | None
    category: str
    is_active: bool
    views: int
    likes: int
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True

    @field_validator("image")
    @classmethod
    def absolute_image(cls, v: str | None) -> str | None:
        return to_full_image_url(get_settings().BASE_URL, v)


class NewsList(BaseModel):
    items: list[NewsResponse]
    total: int
    page: int
    limit: int
    pages: int


class NewsAdminList(NewsList):
    status_counts: dict[str, int]


class LikeResponse(BaseModel):
    id: int
    likes: int
