"""Firestore-backed user profile repository (implements IProfileRepository)."""

from __future__ import annotations

from fieldops.application.dtos.identity import UserProfile
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_USERS


class FirestoreProfileRepository:
    """Reads ``users/{id}`` profiles. Profiles are provisioned by the identity service."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_USERS)

    async def get_by_id(self, user_id: str) -> UserProfile | None:
        doc = await self._coll.document(user_id).get()
        if not doc:
            return None
        data = doc.to_dict()
        return UserProfile(
            id=doc.id,
            company_id=data.get("company_id") or None,
            email=data.get("email"),
            display_name=data.get("display_name"),
            is_active=data.get("is_active", True) is not False,
        )
