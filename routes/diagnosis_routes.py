"""
Diagnosis endpoints. All require a bearer token and only ever touch the
caller's own reports.

POST   /diagnosis              — analyse symptoms and store the report
GET    /diagnosis/history      — the caller's reports, newest first
GET    /diagnosis/{report_id}  — one report
DELETE /diagnosis/{report_id}  — delete one report
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_current_account, get_diagnosis_service
from schemas.dto.requests.diagnosis import DiagnosisRequest
from schemas.dto.responses.common import ERROR_RESPONSES, MessageResponse
from schemas.dto.responses.diagnosis import DiagnosisReportResponse
from schemas.models.account import AccountDoc
from services.diagnosis_service import DiagnosisService

router = APIRouter(prefix="/diagnosis", tags=["diagnosis"], responses=ERROR_RESPONSES)


@router.post("", response_model=DiagnosisReportResponse, response_model_by_alias=True)
async def create_diagnosis(
    body: DiagnosisRequest,
    account: AccountDoc = Depends(get_current_account),
    diagnoses: DiagnosisService = Depends(get_diagnosis_service),
) -> DiagnosisReportResponse:
    report = await diagnoses.analyze(account.id, body.symptoms)
    return DiagnosisReportResponse.from_doc(report)


@router.get(
    "/history",
    response_model=list[DiagnosisReportResponse],
    response_model_by_alias=True,
)
async def diagnosis_history(
    account: AccountDoc = Depends(get_current_account),
    diagnoses: DiagnosisService = Depends(get_diagnosis_service),
) -> list[DiagnosisReportResponse]:
    reports = await diagnoses.history(account.id)
    return [DiagnosisReportResponse.from_doc(r) for r in reports]


@router.get(
    "/{report_id}",
    response_model=DiagnosisReportResponse,
    response_model_by_alias=True,
)
async def get_diagnosis(
    report_id: str,
    account: AccountDoc = Depends(get_current_account),
    diagnoses: DiagnosisService = Depends(get_diagnosis_service),
) -> DiagnosisReportResponse:
    return DiagnosisReportResponse.from_doc(await diagnoses.get(account.id, report_id))


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_diagnosis(
    report_id: str,
    account: AccountDoc = Depends(get_current_account),
    diagnoses: DiagnosisService = Depends(get_diagnosis_service),
) -> MessageResponse:
    await diagnoses.delete(account.id, report_id)
    return MessageResponse(message="Report deleted successfully")
