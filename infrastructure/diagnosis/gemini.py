"""Gemini implementation of SymptomDiagnoser (generateContent REST API)."""

from typing import Any

import httpx

from config import DiagnosisSettings
from errors import UpstreamError
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

_PROMPT = (
    "You are a medical assistant. A user reports the following symptoms:\n"
    "{symptoms}\n\n"
    "List the most likely conditions, suggested next steps, and when to seek "
    "urgent care. Remind the user that this is not a substitute for a doctor."
)


class GeminiDiagnoser:
    def __init__(self, settings: DiagnosisSettings, http_client: HttpClient) -> None:
        self._settings = settings
        self._http = http_client

    async def diagnose(self, symptoms: str) -> str:
        if not self._settings.gemini_api_key:
            log.error("diagnosis_failed", reason="api_key_not_configured")
            raise UpstreamError("Diagnosis service is not configured")

        url = _GEMINI_API_URL.format(model=self._settings.gemini_model)
        payload = {"contents": [{"parts": [{"text": _PROMPT.format(symptoms=symptoms)}]}]}
        headers = {"x-goog-api-key": self._settings.gemini_api_key}

        try:
            response = await self._http.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            log.error("diagnosis_failed", error=str(e), error_type=type(e).__name__)
            raise UpstreamError("Diagnosis service unavailable") from e

        if response.status_code != 200:
            log.error(
                "diagnosis_failed",
                status_code=response.status_code,
                response=response.text[:200],
            )
            raise UpstreamError("Diagnosis service unavailable")

        try:
            body = response.json()
        except ValueError as e:
            log.error("diagnosis_failed", reason="invalid_json")
            raise UpstreamError("Diagnosis service returned no answer") from e

        text = _extract_text(body)
        if not text:
            log.error("diagnosis_failed", reason="empty_response")
            raise UpstreamError("Diagnosis service returned no answer")
        return text


def _extract_text(body: Any) -> str:
    """Pull the first candidate's text parts out of a generateContent response."""
    try:
        parts = body["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()
