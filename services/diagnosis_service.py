"""
Diagnosis records: run symptoms through the SymptomDiagnoser and keep the
result per account. Reads and deletes are scoped to the owning account; a
report that belongs to someone else is indistinguishable from a missing one.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from bson import ObjectId

from errors import NotFoundError, ValidationError
from infrastructure.diagnosis.protocol import SymptomDiagnoser
from repositories.protocol import DiagnosisStore
from schemas.models.base import to_object_id
from schemas.models.diagnosis import DiagnosisReportDoc
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)

MAX_SYMPTOMS_LENGTH = 4000


class DiagnosisService:
    def __init__(
        self,
        store: DiagnosisStore,
        diagnoser: SymptomDiagnoser,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._diagnoser = diagnoser
        self._clock = clock or utcnow

    async def analyze(self, user_id: ObjectId, symptoms: Optional[str]) -> DiagnosisReportDoc:
        symptoms = (symptoms or "").strip()
        if not symptoms:
            raise ValidationError("Symptoms are required", field="symptoms")
        if len(symptoms) > MAX_SYMPTOMS_LENGTH:
            raise ValidationError(
                f"Symptoms must be at most {MAX_SYMPTOMS_LENGTH} characters",
                field="symptoms",
            )

        diagnosis = await self._diagnoser.diagnose(symptoms)

        now = self._clock()
        report = DiagnosisReportDoc(
            id=ObjectId(),
            user_id=user_id,
            symptoms=symptoms,
            diagnosis=diagnosis,
            created_at=now,
            updated_at=now,
        )
        await self._store.insert(report)
        log.info("diagnosis_created", report_id=str(report.id), user_id=str(user_id))
        return report

    async def history(self, user_id: ObjectId) -> list[DiagnosisReportDoc]:
        return await self._store.find_by_user(user_id)

    async def get(self, user_id: ObjectId, report_id: str) -> DiagnosisReportDoc:
        oid = to_object_id(report_id)
        report = await self._store.find_by_id(oid) if oid is not None else None
        if report is None or report.user_id != user_id:
            raise NotFoundError("Report not found")
        return report

    async def delete(self, user_id: ObjectId, report_id: str) -> None:
        report = await self.get(user_id, report_id)
        if not await self._store.delete(report.id):
            raise NotFoundError("Report not found")
        log.info("diagnosis_deleted", report_id=str(report.id), user_id=str(user_id))

    async def delete_all_for_user(self, user_id: ObjectId) -> int:
        deleted = await self._store.delete_by_user(user_id)
        if deleted:
            log.info("diagnosis_history_purged", user_id=str(user_id), deleted=deleted)
        return deleted
