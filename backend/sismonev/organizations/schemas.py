"""Pydantic schemas for the organization catalog."""

from pydantic import BaseModel


class OrganizationResponse(BaseModel):
    """Catalog entry."""

    id: str
    name: str
