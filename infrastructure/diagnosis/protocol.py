"""SymptomDiagnoser protocol — DiagnosisService depends on this, not the concrete model API."""

from typing import Protocol


class SymptomDiagnoser(Protocol):
    async def diagnose(self, symptoms: str) -> str:
        """Return a free-text assessment of *symptoms*.

        Raises UpstreamError when the inference service cannot answer.
        """
        ...
