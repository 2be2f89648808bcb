"""
Request DTOs for diagnosis endpoints.

DiagnosisRequest — POST /diagnosis
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class DiagnosisRequest(BaseModel):
    """Request body for POST /diagnosis.

    The owner is the authenticated account; a ``userId`` sent by older
    clients is ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    symptoms: Optional[str] = None
