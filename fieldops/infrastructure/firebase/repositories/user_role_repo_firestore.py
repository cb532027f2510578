"""Firestore-backed user-role assignment repository (implements IUserRoleRepository).

Assignment ids are derived from (user, tenant context, role) so assigning the
same role twice is a no-op rather than a duplicate document.
"""

from __future__ import annotations

from typing import Any

from fieldops.application.dtos.role import UserRoleAssignment
from fieldops.infrastructure.exceptions import DocumentExistsError
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_USER_ROLES
from fieldops.shared.utils.datetime import utc_now

PLATFORM_CONTEXT = "platform"


def assignment_id(user_id: str, role_id: str, company_id: str | None) -> str:
    return f"{user_id}__{company_id or PLATFORM_CONTEXT}__{role_id}"


def _to_result(doc_id: str, data: dict[str, Any]) -> UserRoleAssignment:
    return UserRoleAssignment(
        id=doc_id,
        user_id=data.get("user_id", ""),
        role_id=data.get("role_id", ""),
        company_id=data.get("company_id") or None,
        assigned_at=data.get("assigned_at"),
        assigned_by=data.get("assigned_by"),
    )


class FirestoreUserRoleRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_USER_ROLES)

    async def list_for_user(
        self, user_id: str, company_id: str | None
    ) -> list[UserRoleAssignment]:
        """Assignments in exactly this tenant context; platform roles only when company_id is None."""
        q = (
            self._coll.where("user_id", "==", user_id)
            .where("company_id", "==", company_id)
        )
        return [_to_result(s.id, s.to_dict()) async for s in q.stream()]

    async def list_for_role(self, role_id: str) -> list[UserRoleAssignment]:
        q = self._coll.where("role_id", "==", role_id)
        return [_to_result(s.id, s.to_dict()) async for s in q.stream()]

    async def assign(
        self,
        user_id: str,
        role_id: str,
        company_id: str | None,
        assigned_by: str | None,
    ) -> UserRoleAssignment:
        doc_id = assignment_id(user_id, role_id, company_id)
        data = {
            "user_id": user_id,
            "role_id": role_id,
            "company_id": company_id,
            "assigned_at": utc_now(),
            "assigned_by": assigned_by,
        }
        try:
            await self._coll.create(doc_id, data)
        except DocumentExistsError:
            existing = await self._coll.document(doc_id).get()
            if existing:
                return _to_result(existing.id, existing.to_dict())
        return _to_result(doc_id, data)

    async def remove(self, user_id: str, role_id: str, company_id: str | None) -> bool:
        """Delete every matching assignment, including ones written with non-derived ids."""
        removed = False
        for assignment in await self.list_for_user(user_id, company_id):
            if assignment.role_id == role_id:
                await self._coll.document(assignment.id).delete()
                removed = True
        return removed
