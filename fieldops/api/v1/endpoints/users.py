"""Users API: the current caller's profile and effective permissions."""

from typing import Annotated

from fastapi import APIRouter, Depends

from fieldops.api.v1.dependencies import get_request_authorizer, require_permission
from fieldops.application.dtos.identity import AuthResult
from fieldops.application.services.request_authorizer import RequestAuthorizer
from fieldops.domain.permissions import ANY_AUTHENTICATED, dump_permission_map
from fieldops.schemas.user import CurrentUserResponse

router = APIRouter()


@router.get("/me", response_model=CurrentUserResponse)
async def read_me(
    auth: Annotated[AuthResult, Depends(require_permission(ANY_AUTHENTICATED))],
    authorizer: Annotated[RequestAuthorizer, Depends(get_request_authorizer)],
):
    """Any authenticated user; permissions are the union of their roles' grants."""
    identity = auth.identity
    evaluator = authorizer.evaluator
    permissions = await evaluator.effective_permissions(identity)
    return CurrentUserResponse(
        id=identity.user_id,
        company_id=identity.company_id,
        email=identity.profile.email,
        display_name=identity.profile.display_name,
        is_platform=identity.is_platform,
        is_super_admin=await evaluator.is_super_admin(identity),
        permissions=dump_permission_map(permissions),
    )
