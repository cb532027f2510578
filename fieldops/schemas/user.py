"""User API schemas."""

from typing import Any

from pydantic import BaseModel


class CurrentUserResponse(BaseModel):
    """Response for GET /users/me: profile plus effective permissions."""

    id: str
    company_id: str | None
    email: str | None = None
    display_name: str | None = None
    is_platform: bool
    is_super_admin: bool
    permissions: dict[str, Any]
