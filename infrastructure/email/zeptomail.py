"""ZeptoMail implementation of Notifier.

Sends the registration OTP through the ZeptoMail HTTP API with an HTML body
rendered from templates/emails/otp.html and a plain-text fallback.
"""

import os
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger, mask_email

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


class ZeptoMailNotifier:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        otp_ttl_minutes: int = 5,
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._otp_ttl_minutes = otp_ttl_minutes
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def _send(
        self,
        to_email: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> bool:
        if not self._settings.zepto_api_token:
            log.error("zepto_mail_send_failed", reason="token_not_configured")
            return False

        payload: dict = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [
                {
                    "email_address": {
                        "address": to_email,
                        "name": to_name or to_email,
                    }
                }
            ],
            "subject": subject,
            "htmlbody": html_body,
        }
        if text_body:
            payload["textbody"] = text_body

        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"

        headers = {"Authorization": token, "Content-Type": "application/json"}

        try:
            response = await self._http.post(
                _ZEPTO_API_URL, json=payload, headers=headers
            )
        except httpx.HTTPError as e:
            log.error(
                "email_send_error",
                to_email=mask_email(to_email),
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        if response.status_code in (200, 201, 202):
            log.info("email_sent_success", to_email=mask_email(to_email), subject=subject)
            return True
        log.error(
            "email_sent_failed",
            to_email=mask_email(to_email),
            subject=subject,
            status_code=response.status_code,
            response=response.text[:200],
        )
        return False

    async def send_otp(self, email: str, name: Optional[str], otp_code: str) -> bool:
        subject = "Your HealthMate OTP"
        template = self._jinja.get_template("otp.html")
        html_body = template.render(
            otp_code=otp_code, user_name=name, ttl_minutes=self._otp_ttl_minutes
        )
        text_body = (
            f"HealthMate Verification\n\n"
            f"Hello{f' {name}' if name else ''},\n\n"
            f"Thank you for registering with HealthMate!\n"
            f"Your one-time password is: {otp_code}\n\n"
            f"This code is valid for {self._otp_ttl_minutes} minutes.\n"
            f"If you didn't request this email, you can safely ignore it."
        )
        return await self._send(email, name, subject, html_body, text_body)
