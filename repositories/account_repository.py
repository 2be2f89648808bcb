"""MongoDB implementation of AccountStore.

Collection layout:
- `_id` primary key (assigned by the service before insert)
- unique index on `email` — the authority for duplicate registrations
- compound index on (`verified`, `otp_issued_at`) for the expiry sweep

Driver failures other than duplicate keys surface as StoreUnavailableError.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import ConflictError, StoreUnavailableError
from schemas.models.account import AccountDoc
from shared.logging import get_logger

log = get_logger(__name__)

ACCOUNTS_COLLECTION = "accounts"


class MongoAccountRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def ensure_indexes(self) -> None:
        await self._col.create_index([("email", ASCENDING)], unique=True)
        await self._col.create_index(
            [("verified", ASCENDING), ("otp_issued_at", ASCENDING)]
        )
        log.info("indexes_ensured", collection=ACCOUNTS_COLLECTION)

    async def find_by_email(self, email: str) -> Optional[AccountDoc]:
        try:
            doc = await self._col.find_one({"email": email})
        except PyMongoError as e:
            raise StoreUnavailableError("Account store unavailable") from e
        return AccountDoc.from_mongo(doc)

    async def find_by_id(self, account_id: ObjectId) -> Optional[AccountDoc]:
        try:
            doc = await self._col.find_one({"_id": account_id})
        except PyMongoError as e:
            raise StoreUnavailableError("Account store unavailable") from e
        return AccountDoc.from_mongo(doc)

    async def insert(self, account: AccountDoc) -> ObjectId:
        try:
            result = await self._col.insert_one(account.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError("Email already registered!", field="email") from e
        except PyMongoError as e:
            raise StoreUnavailableError("Account store unavailable") from e
        return result.inserted_id

    async def update(
        self,
        account_id: ObjectId,
        fields: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        query: dict = {"_id": account_id}
        if expected:
            query.update(expected)
        try:
            result = await self._col.update_one(query, {"$set": dict(fields)})
        except PyMongoError as e:
            raise StoreUnavailableError("Account store unavailable") from e
        return result.matched_count == 1

    async def delete(self, account_id: ObjectId) -> bool:
        try:
            result = await self._col.delete_one({"_id": account_id})
        except PyMongoError as e:
            raise StoreUnavailableError("Account store unavailable") from e
        return result.deleted_count == 1

    async def find_expired_unverified(self, cutoff: datetime) -> list[AccountDoc]:
        query = {"verified": False, "otp_issued_at": {"$lt": cutoff}}
        try:
            docs = await self._col.find(query).to_list(length=None)
        except PyMongoError as e:
            raise StoreUnavailableError("Account store unavailable") from e
        return [AccountDoc.from_mongo(d) for d in docs]

    async def delete_batch(
        self,
        account_ids: Sequence[ObjectId],
        unverified_before: Optional[datetime] = None,
    ) -> int:
        if not account_ids:
            return 0
        query: dict = {"_id": {"$in": list(account_ids)}}
        if unverified_before is not None:
            query["verified"] = False
            query["otp_issued_at"] = {"$lt": unverified_before}
        try:
            result = await self._col.delete_many(query)
        except PyMongoError as e:
            raise StoreUnavailableError("Account store unavailable") from e
        return result.deleted_count
