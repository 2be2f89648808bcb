"""Store protocols — services depend on these, not on MongoDB.

Every method is a single-record or single-batch operation; those operations
are the only transaction boundary the services rely on.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from bson import ObjectId

from schemas.models.account import AccountDoc
from schemas.models.diagnosis import DiagnosisReportDoc


class AccountStore(Protocol):
    async def ensure_indexes(self) -> None: ...

    async def find_by_email(self, email: str) -> Optional[AccountDoc]: ...

    async def find_by_id(self, account_id: ObjectId) -> Optional[AccountDoc]: ...

    async def insert(self, account: AccountDoc) -> ObjectId:
        """Insert *account*; raises ConflictError when the email is taken."""
        ...

    async def update(
        self,
        account_id: ObjectId,
        fields: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """Set *fields* on the account, only if every *expected* field still
        holds its given value. Returns False when nothing matched."""
        ...

    async def delete(self, account_id: ObjectId) -> bool: ...

    async def find_expired_unverified(self, cutoff: datetime) -> list[AccountDoc]:
        """Accounts with ``verified == False`` and ``otp_issued_at < cutoff``."""
        ...

    async def delete_batch(
        self,
        account_ids: Sequence[ObjectId],
        unverified_before: Optional[datetime] = None,
    ) -> int:
        """Delete *account_ids*. With *unverified_before*, only those still
        unverified and issued before that instant are removed."""
        ...


class DiagnosisStore(Protocol):
    async def ensure_indexes(self) -> None: ...

    async def insert(self, report: DiagnosisReportDoc) -> ObjectId: ...

    async def find_by_id(self, report_id: ObjectId) -> Optional[DiagnosisReportDoc]: ...

    async def find_by_user(self, user_id: ObjectId) -> list[DiagnosisReportDoc]: ...

    async def delete(self, report_id: ObjectId) -> bool: ...

    async def delete_by_user(self, user_id: ObjectId) -> int: ...
