"""Firestore REST v1 client covering what the fieldops repositories need.

Documents: get / set / update / delete, plus create-if-absent on a
collection (used to claim trigger runs). An update may be guarded by the
update time of an earlier read, turning read-then-write into compare-and-set.
Queries: AND of field filters with an optional limit. Batches: atomic
multi-document set. batchGet for loading several roles in one round-trip.

google-auth supplies service-account tokens; httpx does the I/O. Transport
errors and unexpected HTTP statuses raise StoreUnavailableException, a 404
read returns None, a 409 create raises DocumentExistsError and a failed
update precondition raises ConcurrentUpdateError.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import AsyncIterator, Iterable
from typing import Any
from urllib.parse import urlencode

import httpx

from fieldops.domain.exceptions import StoreUnavailableException
from fieldops.infrastructure.exceptions import ConcurrentUpdateError, DocumentExistsError
from fieldops.infrastructure.firebase._rest_encoding import (
    decode_document,
    encode_document,
    encode_value,
)
from fieldops.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"
_SIMPLE_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
}


def _get_credentials(key_dict: dict):
    """Service-account credentials scoped for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _refresh_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


def _field_path(name: str) -> str:
    # Permission module keys such as "work-orders" need backtick quoting.
    if _SIMPLE_FIELD_RE.match(name):
        return name
    return "`" + name.replace("\\", "\\\\").replace("`", "\\`") + "`"


def _snapshot(doc: dict) -> DocumentSnapshot:
    return DocumentSnapshot(
        doc.get("name", "").rsplit("/", 1)[-1],
        decode_document(doc.get("fields")),
        doc.get("updateTime"),
    )


def _build_filter(field: str, op: str, value: Any) -> dict:
    """``== None`` / ``!= None`` become IS_NULL / IS_NOT_NULL unary filters."""
    path = {"fieldPath": _field_path(field)}
    if value is None and op in ("==", "!="):
        return {"unaryFilter": {"field": path, "op": "IS_NULL" if op == "==" else "IS_NOT_NULL"}}
    if op not in _OP_MAP:
        raise ValueError(f"Unsupported query operator: {op!r}")
    return {"fieldFilter": {"field": path, "op": _OP_MAP[op], "value": encode_value(value)}}


class DocumentSnapshot:
    def __init__(self, id_: str, data: dict, update_time: str | None = None):
        self.id = id_
        self._data = data
        self.update_time = update_time

    def to_dict(self) -> dict:
        return self._data


class DocumentReference:
    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    @property
    def path(self) -> str:
        return self._path

    async def get(self) -> DocumentSnapshot | None:
        out = await self._client.call("GET", self._path)
        return _snapshot(out) if out else None

    async def set(self, data: dict[str, Any]) -> None:
        """Create or fully replace the document."""
        await self._client.call("PATCH", self._path, body=encode_document(data))

    async def update(self, data: dict[str, Any], *, update_time: str | None = None) -> bool:
        """Merge top-level fields; returns False (writing nothing) if the document is missing.

        With ``update_time`` (from a snapshot) the write only applies if the
        document is unchanged since that read; otherwise ConcurrentUpdateError.
        """
        params = [("updateMask.fieldPaths", _field_path(k)) for k in data]
        if update_time is not None:
            params.append(("currentDocument.updateTime", update_time))
        else:
            params.append(("currentDocument.exists", "true"))
        out = await self._client.call(
            "PATCH", self._path, body=encode_document(data), params=params
        )
        return out is not None

    async def delete(self) -> None:
        """Idempotent: deleting a missing document is not an error."""
        await self._client.call("DELETE", self._path)


class Query:
    """AND of field filters over one collection, run via runQuery."""

    def __init__(self, client: FirestoreRESTClient, collection_path: str):
        self._client = client
        self._parent, self._collection_id = collection_path.rsplit("/", 1)
        self._filters: list[dict] = []
        self._limit: int | None = None

    def where(self, field: str, op: str, value: Any) -> Query:
        self._filters.append(_build_filter(field, op, value))
        return self

    def limit(self, n: int) -> Query:
        self._limit = n
        return self

    def _structured_query(self) -> dict[str, Any]:
        query: dict[str, Any] = {"from": [{"collectionId": self._collection_id}]}
        if len(self._filters) == 1:
            query["where"] = self._filters[0]
        elif self._filters:
            query["where"] = {"compositeFilter": {"op": "AND", "filters": self._filters}}
        if self._limit:
            query["limit"] = self._limit
        return query

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        rows = await self._client.call(
            "POST", f"{self._parent}:runQuery", body={"structuredQuery": self._structured_query()}
        )
        # runQuery answers with a list; entries without "document" carry only read times.
        for row in rows or []:
            if "document" in row:
                yield _snapshot(row["document"])


class CollectionReference:
    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self._path = path.rstrip("/")

    @property
    def id(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        """Create ``document_id``; DocumentExistsError if it is already there."""
        await self._client.call(
            "POST", self._path, body=encode_document(data), params=[("documentId", document_id)]
        )

    def where(self, field: str, op: str, value: Any) -> Query:
        return Query(self._client, self._path).where(field, op, value)


class WriteBatch:
    """Atomic multi-document set (documents:commit)."""

    def __init__(self, client: FirestoreRESTClient):
        self._client = client
        self._writes: list[dict] = []

    def set(self, ref: DocumentReference, data: dict[str, Any]) -> WriteBatch:
        self._writes.append({"update": {"name": ref.path, **encode_document(data)}})
        return self

    def __len__(self) -> int:
        return len(self._writes)

    async def commit(self) -> None:
        if not self._writes:
            return
        await self._client.call(
            "POST", f"{self._client.documents_root}:commit", body={"writes": self._writes}
        )
        self._writes = []


class FirestoreRESTClient:
    """Entry point: ``collection()``, ``batch()`` and ``get_all()``."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._credentials = credentials
        self.documents_root = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP pool unless it was injected."""
        if self._owns_http:
            await self._http.aclose()

    async def _token(self) -> str:
        # google-auth refreshes synchronously; keep it off the event loop.
        try:
            return await asyncio.to_thread(_refresh_token, self._credentials)
        except Exception as e:
            logger.error("Firestore token refresh failed: %s", e)
            raise StoreUnavailableException(
                "Document store credentials could not be refreshed", operation="auth"
            ) from e

    async def call(
        self,
        method: str,
        path: str,
        *,
        body: dict | None = None,
        params: list[tuple[str, str]] | None = None,
    ) -> Any:
        """One REST round-trip. Returns decoded JSON, ``{}`` for empty bodies, None on 404."""
        url = f"{_BASE}/{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        headers = {"Authorization": f"Bearer {await self._token()}"}
        try:
            resp = await self._http.request(method, url, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.error("Firestore %s %s failed: %s", method, path, e)
            raise StoreUnavailableException(operation=method) from e
        if resp.status_code == 404:
            return None
        if resp.status_code == 409:
            raise DocumentExistsError("Document already exists")
        if resp.status_code == 400 and "FAILED_PRECONDITION" in resp.text:
            raise ConcurrentUpdateError(f"Precondition failed for {path}")
        if resp.status_code >= 300:
            logger.error(
                "Firestore %s %s returned %s: %s", method, path, resp.status_code, resp.text[:500]
            )
            raise StoreUnavailableException(
                f"Document store returned HTTP {resp.status_code}", operation=method
            )
        return resp.json() if resp.content else {}

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self.documents_root}/{collection_id}")

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    async def get_all(self, refs: Iterable[DocumentReference]) -> list[DocumentSnapshot]:
        """Fetch several documents in one batchGet; missing ones are left out."""
        names = [ref.path for ref in refs]
        if not names:
            return []
        rows = await self.call("POST", f"{self.documents_root}:batchGet", body={"documents": names})
        return [_snapshot(row["found"]) for row in rows or [] if row.get("found")]
