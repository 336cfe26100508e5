"""Pydantic schemas for FAQs."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from sismonev.learning_resources.schemas import split_tags


class FAQBase(BaseModel):
    question: str = Field(..., min_length=5, max_length=500)
    answer: str = Field(..., min_length=10, max_length=2000)
    category: str = Field("general", min_length=1, max_length=100)
    tags: list[str] | None = None
    sort_order: int = Field(0, ge=0)

    @field_validator("tags", mode="before")
    @classmethod
    def split(cls, v):
        return split_tags(v)


class FAQCreate(FAQBase):
    is_active: bool = True


class FAQUpdate(BaseModel):
    question: str | None = Field(None, min_length=5, max_length=500)
    answer: str | None = Field(None, min_length=10, max_length=2000)
    category: str | None = Field(None, min_length=1, max_length=100)
    tags: list[str] | None = None
    sort_order: int | None = Field(None, ge=0)
    is_active: bool | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def split(cls, v):
        return split_tags(v)


class FAQResponse(BaseModel):
    id: int
    question: str
    answer: str
    category: str
    tags: list[str] | None
    sort_order: int
    is_active: bool
    created_by_id: int | None
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True


class ReorderRequest(BaseModel):
    """FAQ ids in their new display order."""

    ids: list[int] = Field(..., min_length=1)


class ReorderResult(BaseModel):
    updated: int
