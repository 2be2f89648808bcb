"""Unit tests for DiagnosisService."""

import pytest
from bson import ObjectId

from errors import NotFoundError, UpstreamError, ValidationError


class TestAnalyze:
    async def test_stores_and_returns_report(
        self, diagnosis_service, diagnosis_store, diagnoser, clock
    ):
        owner = ObjectId()
        report = await diagnosis_service.analyze(owner, "  fever and cough ")

        assert diagnoser.calls == ["fever and cough"]
        assert report.user_id == owner
        assert report.symptoms == "fever and cough"
        assert report.diagnosis == diagnoser.answer
        assert report.created_at == clock.now
        assert (await diagnosis_store.find_by_id(report.id)) is not None

    @pytest.mark.parametrize("symptoms", [None, "", "   "])
    async def test_symptoms_required(self, diagnosis_service, diagnoser, symptoms):
        with pytest.raises(ValidationError) as exc:
            await diagnosis_service.analyze(ObjectId(), symptoms)
        assert exc.value.field == "symptoms"
        assert diagnoser.calls == []

    async def test_overlong_symptoms_rejected(self, diagnosis_service):
        with pytest.raises(ValidationError):
            await diagnosis_service.analyze(ObjectId(), "x" * 5000)

    async def test_upstream_failure_stores_nothing(
        self, diagnosis_service, diagnosis_store, diagnoser
    ):
        owner = ObjectId()
        diagnoser.error = UpstreamError("Diagnosis service unavailable")
        with pytest.raises(UpstreamError):
            await diagnosis_service.analyze(owner, "fever")
        assert await diagnosis_store.find_by_user(owner) == []


class TestOwnerScoping:
    async def test_history_newest_first(self, diagnosis_service, clock):
        owner = ObjectId()
        first = await diagnosis_service.analyze(owner, "fever")
        clock.advance(minutes=1)
        second = await diagnosis_service.analyze(owner, "cough")
        await diagnosis_service.analyze(ObjectId(), "someone else")

        history = await diagnosis_service.history(owner)
        assert [r.id for r in history] == [second.id, first.id]

    async def test_get_own_report(self, diagnosis_service):
        owner = ObjectId()
        report = await diagnosis_service.analyze(owner, "fever")
        assert (await diagnosis_service.get(owner, str(report.id))).id == report.id

    async def test_other_owner_sees_not_found(self, diagnosis_service):
        report = await diagnosis_service.analyze(ObjectId(), "fever")
        with pytest.raises(NotFoundError):
            await diagnosis_service.get(ObjectId(), str(report.id))
        with pytest.raises(NotFoundError):
            await diagnosis_service.delete(ObjectId(), str(report.id))

    @pytest.mark.parametrize("report_id", ["not-an-id", "", str(ObjectId())])
    async def test_unknown_or_malformed_id(self, diagnosis_service, report_id):
        with pytest.raises(NotFoundError):
            await diagnosis_service.get(ObjectId(), report_id)

    async def test_delete_own_report(self, diagnosis_service, diagnosis_store):
        owner = ObjectId()
        report = await diagnosis_service.analyze(owner, "fever")
        await diagnosis_service.delete(owner, str(report.id))
        assert await diagnosis_store.find_by_id(report.id) is None

    async def test_delete_all_for_user(self, diagnosis_service, clock):
        owner, other = ObjectId(), ObjectId()
        await diagnosis_service.analyze(owner, "fever")
        clock.advance(seconds=1)
        await diagnosis_service.analyze(owner, "cough")
        await diagnosis_service.analyze(other, "rash")

        assert await diagnosis_service.delete_all_for_user(owner) == 2
        assert await diagnosis_service.history(owner) == []
        assert len(await diagnosis_service.history(other)) == 1
