"""Notifier protocol — AccountService depends on this, not the concrete implementation."""

from typing import Optional, Protocol


class Notifier(Protocol):
    async def send_otp(self, email: str, name: Optional[str], otp_code: str) -> bool:
        """Deliver *otp_code* to *email*. Returns True once the provider accepted it."""
        ...
