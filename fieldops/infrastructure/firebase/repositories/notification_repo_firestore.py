"""Firestore-backed in-app notification writer (implements INotificationRepository)."""

from __future__ import annotations

from typing import Any

from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_NOTIFICATIONS
from fieldops.shared.utils.datetime import utc_now
from fieldops.shared.utils.generators import generate_cuid


class FirestoreNotificationRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_NOTIFICATIONS)

    async def create(self, data: dict[str, Any]) -> str:
        notification_id = generate_cuid()
        doc = {"is_read": False, "created_at": utc_now(), **data}
        await self._coll.document(notification_id).set(doc)
        return notification_id
