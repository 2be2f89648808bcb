"""
Response DTOs for diagnosis endpoints.

DiagnosisReportResponse — POST /diagnosis, GET /diagnosis/history,
                          GET /diagnosis/{report_id}
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from schemas.models.diagnosis import DiagnosisReportDoc


class DiagnosisReportResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    report_id: str
    user_id: str
    symptoms: str
    diagnosis: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, report: DiagnosisReportDoc) -> "DiagnosisReportResponse":
        return cls(
            report_id=str(report.id),
            user_id=str(report.user_id),
            symptoms=report.symptoms,
            diagnosis=report.diagnosis,
            created_at=report.created_at,
            updated_at=report.updated_at,
        )
