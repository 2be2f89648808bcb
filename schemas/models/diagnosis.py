"""
Diagnosis report document model.

Maps to the `diagnosis_reports` MongoDB collection. One document per
symptom analysis; user_id is the owning account's _id.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel, PyObjectId


class DiagnosisReportDoc(MongoBaseModel):
    """Document model for the `diagnosis_reports` collection."""

    user_id: PyObjectId
    symptoms: str
    diagnosis: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
