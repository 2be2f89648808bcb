"""Development notifier: writes the OTP to the log instead of sending mail."""

from typing import Optional

from shared.logging import get_logger, mask_email

log = get_logger(__name__)


class ConsoleNotifier:
    """Refused by build_notifier in production: the code is readable by anyone with log access."""

    async def send_otp(self, email: str, name: Optional[str], otp_code: str) -> bool:
        # "code" rather than "otp" so the redaction processor lets it through
        log.warning("dev_otp_issued", to_email=mask_email(email), code=otp_code)
        return True
