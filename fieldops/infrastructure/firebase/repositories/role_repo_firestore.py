"""Firestore-backed role repository (implements IRoleRepository).

Role documents store ``permissions`` as module-slug -> ``true`` | {action: bool}.
Parsing is lenient: a malformed map yields ``permissions=None`` and the
evaluator skips that role instead of failing the request.
"""

from __future__ import annotations

from typing import Any

from fieldops.application.dtos.role import RoleCreate, RoleResult
from fieldops.domain.enums import RoleScope
from fieldops.domain.permissions import dump_permission_map, parse_permission_map
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_ROLES
from fieldops.shared.telemetry.logging import get_logger
from fieldops.shared.utils.datetime import utc_now
from fieldops.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


def role_from_document(doc_id: str, data: dict[str, Any]) -> RoleResult:
    company_id = data.get("company_id") or None
    raw_scope = data.get("scope")
    try:
        scope = RoleScope(raw_scope) if raw_scope else None
    except ValueError:
        scope = None
    if scope is None:
        scope = RoleScope.PLATFORM if company_id is None else RoleScope.COMPANY
    permissions = parse_permission_map(data.get("permissions"))
    if permissions is None:
        logger.warning("Role %s has missing or malformed permissions", doc_id)
    return RoleResult(
        id=doc_id,
        name=data.get("name", ""),
        description=data.get("description"),
        scope=scope,
        company_id=company_id,
        permissions=permissions,
        is_super_admin=data.get("is_super_admin") is True,
        is_template=data.get("is_template") is True,
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


class FirestoreRoleRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_ROLES)

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        doc = await self._coll.document(role_id).get()
        if not doc:
            return None
        return role_from_document(doc.id, doc.to_dict())

    async def get_many(self, role_ids: list[str]) -> list[RoleResult]:
        """Batch-fetch roles in one round-trip; ids that do not exist are omitted."""
        unique = list(dict.fromkeys(role_ids))
        if not unique:
            return []
        snapshots = await self._client.get_all(
            [self._coll.document(rid) for rid in unique]
        )
        return [role_from_document(s.id, s.to_dict()) for s in snapshots]

    async def list_for_company(self, company_id: str | None) -> list[RoleResult]:
        q = self._coll.where("company_id", "==", company_id)
        roles = [role_from_document(s.id, s.to_dict()) async for s in q.stream()]
        return sorted(roles, key=lambda r: r.name.lower())

    async def create(self, data: RoleCreate) -> RoleResult:
        now = utc_now()
        role_id = generate_cuid()
        doc = {
            "name": data.name,
            "description": data.description,
            "scope": (RoleScope.PLATFORM if data.company_id is None else RoleScope.COMPANY).value,
            "company_id": data.company_id,
            "is_super_admin": False,
            "is_template": False,
            "permissions": dump_permission_map(data.permissions),
            "created_at": now,
            "updated_at": now,
        }
        await self._coll.document(role_id).set(doc)
        return role_from_document(role_id, doc)

    async def update(self, role_id: str, fields: dict[str, Any]) -> RoleResult | None:
        payload = dict(fields)
        if "permissions" in payload:
            payload["permissions"] = dump_permission_map(payload["permissions"])
        payload["updated_at"] = utc_now()
        if not await self._coll.document(role_id).update(payload):
            return None
        return await self.get_by_id(role_id)

    async def delete(self, role_id: str) -> None:
        await self._coll.document(role_id).delete()
