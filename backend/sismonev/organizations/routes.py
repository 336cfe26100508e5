"""Organization catalog routes."""

from fastapi import APIRouter, Depends

from sismonev.auth.dependencies import get_current_user
from sismonev.core.models import User
from sismonev.organizations.schemas import OrganizationResponse
from sismonev.organizations.service import ORGANIZATIONS, list_organizations

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.get("", response_model=list[OrganizationResponse])
async def list_orgs(current_user: User = Depends(get_current_user)):
    """List all K/L organizations (any authenticated user)."""
    return [OrganizationResponse(**o) for o in list_organizations()]


@router.get("/public", response_model=dict[str, str])
async def organization_mapping():
    """Code to name mapping (public)."""
    return dict(ORGANIZATIONS)
