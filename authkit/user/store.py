"""Profile store contract and implementations.

The profile store is document-oriented and keyed by the backend-issued
user id. ``set`` replaces a whole document, ``update`` merges fields into
an existing one.
"""

import asyncio
import copy
from typing import Any, Protocol

from authkit.core.constants import FirestoreCollections


class DocumentNotFoundError(LookupError):
    """Raised by ``update`` when the document does not exist."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Profile document not found: {document_id}")


class ProfileStore(Protocol):
    async def get(self, document_id: str) -> dict[str, Any] | None: ...

    async def exists(self, document_id: str) -> bool: ...

    async def set(self, document_id: str, fields: dict[str, Any]) -> None: ...

    async def update(self, document_id: str, fields: dict[str, Any]) -> None: ...

    async def delete(self, document_id: str) -> None: ...


class FirestoreProfileStore:
    """Profile documents in a Cloud Firestore collection."""

    def __init__(self, client, collection: str = FirestoreCollections.USERS):
        self._client = client
        self._collection = collection

    def _document(self, document_id: str):
        return self._client.collection(self._collection).document(document_id)

    async def get(self, document_id: str) -> dict[str, Any] | None:
        snapshot = await self._document(document_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    async def exists(self, document_id: str) -> bool:
        snapshot = await self._document(document_id).get()
        return bool(snapshot.exists)

    async def set(self, document_id: str, fields: dict[str, Any]) -> None:
        await self._document(document_id).set(fields)

    async def update(self, document_id: str, fields: dict[str, Any]) -> None:
        # Firestore's update fails with NotFound on a missing document.
        await self._document(document_id).update(fields)

    async def delete(self, document_id: str) -> None:
        await self._document(document_id).delete()


class InMemoryProfileStore:
    """Process-local profile store for tests and offline development."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._documents)

    async def get(self, document_id: str) -> dict[str, Any] | None:
        async with self._lock:
            document = self._documents.get(document_id)
            return copy.deepcopy(document) if document is not None else None

    async def exists(self, document_id: str) -> bool:
        async with self._lock:
            return document_id in self._documents

    async def set(self, document_id: str, fields: dict[str, Any]) -> None:
        async with self._lock:
            self._documents[document_id] = copy.deepcopy(fields)

    async def update(self, document_id: str, fields: dict[str, Any]) -> None:
        async with self._lock:
            if document_id not in self._documents:
                raise DocumentNotFoundError(document_id)
            self._documents[document_id].update(copy.deepcopy(fields))

    async def delete(self, document_id: str) -> None:
        async with self._lock:
            self._documents.pop(document_id, None)
