"""In-memory AccountStore and DiagnosisStore.

Reference implementations with the same semantics as the MongoDB
repositories: unique email, conditional update, filtered batch delete.
Used for local development without MongoDB and throughout the test suite.

Each store holds one asyncio.Lock around its maps and hands out deep copies,
so callers never share mutable state with the store.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from bson import ObjectId

from errors import ConflictError
from schemas.models.account import AccountDoc
from schemas.models.diagnosis import DiagnosisReportDoc
from shared.datetime_utils import as_utc


class InMemoryAccountStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._by_id: dict[ObjectId, AccountDoc] = {}
        self._id_by_email: dict[str, ObjectId] = {}

    async def ensure_indexes(self) -> None:
        return None

    async def find_by_email(self, email: str) -> Optional[AccountDoc]:
        async with self._lock:
            account_id = self._id_by_email.get(email)
            if account_id is None:
                return None
            return self._by_id[account_id].model_copy(deep=True)

    async def find_by_id(self, account_id: ObjectId) -> Optional[AccountDoc]:
        async with self._lock:
            account = self._by_id.get(account_id)
            return account.model_copy(deep=True) if account else None

    async def insert(self, account: AccountDoc) -> ObjectId:
        async with self._lock:
            if account.email in self._id_by_email:
                raise ConflictError("Email already registered!", field="email")
            stored = account.model_copy(deep=True)
            if stored.id is None:
                stored.id = ObjectId()
            if stored.id in self._by_id:
                raise ConflictError("Account id already exists")
            self._by_id[stored.id] = stored
            self._id_by_email[stored.email] = stored.id
            return stored.id

    async def update(
        self,
        account_id: ObjectId,
        fields: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        async with self._lock:
            current = self._by_id.get(account_id)
            if current is None:
                return False
            for name, value in (expected or {}).items():
                if getattr(current, name) != value:
                    return False
            self._by_id[account_id] = current.model_copy(update=dict(fields), deep=True)
            return True

    async def delete(self, account_id: ObjectId) -> bool:
        async with self._lock:
            return self._remove(account_id)

    async def find_expired_unverified(self, cutoff: datetime) -> list[AccountDoc]:
        async with self._lock:
            return [
                a.model_copy(deep=True)
                for a in self._by_id.values()
                if self._is_stale(a, cutoff)
            ]

    async def delete_batch(
        self,
        account_ids: Sequence[ObjectId],
        unverified_before: Optional[datetime] = None,
    ) -> int:
        deleted = 0
        async with self._lock:
            for account_id in account_ids:
                account = self._by_id.get(account_id)
                if account is None:
                    continue
                if unverified_before is not None and not self._is_stale(
                    account, unverified_before
                ):
                    continue
                deleted += self._remove(account_id)
        return deleted

    def _remove(self, account_id: ObjectId) -> bool:
        account = self._by_id.pop(account_id, None)
        if account is None:
            return False
        self._id_by_email.pop(account.email, None)
        return True

    @staticmethod
    def _is_stale(account: AccountDoc, cutoff: datetime) -> bool:
        return (
            not account.verified
            and account.otp_issued_at is not None
            and as_utc(account.otp_issued_at) < as_utc(cutoff)
        )


class InMemoryDiagnosisStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._by_id: dict[ObjectId, DiagnosisReportDoc] = {}

    async def ensure_indexes(self) -> None:
        return None

    async def insert(self, report: DiagnosisReportDoc) -> ObjectId:
        async with self._lock:
            stored = report.model_copy(deep=True)
            if stored.id is None:
                stored.id = ObjectId()
            self._by_id[stored.id] = stored
            return stored.id

    async def find_by_id(self, report_id: ObjectId) -> Optional[DiagnosisReportDoc]:
        async with self._lock:
            report = self._by_id.get(report_id)
            return report.model_copy(deep=True) if report else None

    async def find_by_user(self, user_id: ObjectId) -> list[DiagnosisReportDoc]:
        async with self._lock:
            reports = [r for r in self._by_id.values() if r.user_id == user_id]
            # Newest first; insertion order breaks ties between equal timestamps
            ordered = sorted(
                enumerate(reports),
                key=lambda pair: (pair[1].created_at is not None, pair[1].created_at, pair[0]),
                reverse=True,
            )
            return [r.model_copy(deep=True) for _, r in ordered]

    async def delete(self, report_id: ObjectId) -> bool:
        async with self._lock:
            return self._by_id.pop(report_id, None) is not None

    async def delete_by_user(self, user_id: ObjectId) -> int:
        async with self._lock:
            doomed = [rid for rid, r in self._by_id.items() if r.user_id == user_id]
            for rid in doomed:
                del self._by_id[rid]
            return len(doomed)
