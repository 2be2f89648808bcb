"""MongoDB implementation of DiagnosisStore."""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from errors import StoreUnavailableError
from schemas.models.diagnosis import DiagnosisReportDoc
from shared.logging import get_logger

log = get_logger(__name__)

DIAGNOSIS_COLLECTION = "diagnosis_reports"


class MongoDiagnosisRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def ensure_indexes(self) -> None:
        await self._col.create_index(
            [("user_id", ASCENDING), ("created_at", DESCENDING)]
        )
        log.info("indexes_ensured", collection=DIAGNOSIS_COLLECTION)

    async def insert(self, report: DiagnosisReportDoc) -> ObjectId:
        try:
            result = await self._col.insert_one(report.to_mongo())
        except PyMongoError as e:
            raise StoreUnavailableError("Diagnosis store unavailable") from e
        return result.inserted_id

    async def find_by_id(self, report_id: ObjectId) -> Optional[DiagnosisReportDoc]:
        try:
            doc = await self._col.find_one({"_id": report_id})
        except PyMongoError as e:
            raise StoreUnavailableError("Diagnosis store unavailable") from e
        return DiagnosisReportDoc.from_mongo(doc)

    async def find_by_user(self, user_id: ObjectId) -> list[DiagnosisReportDoc]:
        try:
            cursor = self._col.find({"user_id": user_id}).sort("created_at", DESCENDING)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StoreUnavailableError("Diagnosis store unavailable") from e
        return [DiagnosisReportDoc.from_mongo(d) for d in docs]

    async def delete(self, report_id: ObjectId) -> bool:
        try:
            result = await self._col.delete_one({"_id": report_id})
        except PyMongoError as e:
            raise StoreUnavailableError("Diagnosis store unavailable") from e
        return result.deleted_count == 1

    async def delete_by_user(self, user_id: ObjectId) -> int:
        try:
            result = await self._col.delete_many({"user_id": user_id})
        except PyMongoError as e:
            raise StoreUnavailableError("Diagnosis store unavailable") from e
        return result.deleted_count
