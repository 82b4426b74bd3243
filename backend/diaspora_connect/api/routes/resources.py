"""Member Resources: tier-gated downloads.

Invariants:
    - Listing returns only resources the caller's tier (or staff role) unlocks
    - Download tracking re-checks the tier before counting
"""

from fastapi import APIRouter, Depends, status

from diaspora_connect.api.dependencies import (
    get_current_profile, repository, require_staff,
)
from diaspora_connect.core.access import can_view_tier_content
from diaspora_connect.core.errors import MembershipTierRequiredError
from diaspora_connect.repositories.content import ResourceRepository
from diaspora_connect.schemas.content import ResourceCreate

router = APIRouter(prefix="/api/resources", tags=["resources"])


@router.get("")
def list_resources(
    profile: dict = Depends(get_current_profile),
    resources: ResourceRepository = Depends(repository(ResourceRepository)),
):
    visible = [
        r for r in resources.list_all()
        if can_view_tier_content(profile, r.get("requiredTier"))
    ]
    return {"resources": visible}


@router.post("/{resource_id}/download")
def track_download(
    resource_id: str,
    profile: dict = Depends(get_current_profile),
    resources: ResourceRepository = Depends(repository(ResourceRepository)),
):
    """Count a download and hand back the file URL."""
    resource = resources.require(resource_id)
    required = resource.get("requiredTier")
    if not can_view_tier_content(profile, required):
        raise MembershipTierRequiredError(required)
    resources.increment_downloads(resource_id)
    return {"fileUrl": resource.get("fileUrl")}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_resource(
    body: ResourceCreate,
    staff: dict = Depends(require_staff),
    resources: ResourceRepository = Depends(repository(ResourceRepository)),
):
    return resources.create(body.to_document(), uploaded_by=staff["uid"])


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resource(
    resource_id: str,
    _staff: dict = Depends(require_staff),
    resources: ResourceRepository = Depends(repository(ResourceRepository)),
):
    resources.require(resource_id)
    resources.delete(resource_id)
