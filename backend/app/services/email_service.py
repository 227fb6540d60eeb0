"""
AfriVerse Editorial Desk - Email Service.
Transactional email through the SendGrid v3 HTTP API.
"""

import re
from typing import Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger("services.email")
settings = get_settings()


class EmailService:
    """send(to, subject, html) -> bool. Never raises."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(settings.sendgrid_api_key)

    @staticmethod
    def _plain_text(html_body: str) -> str:
        return re.sub(r"\s+", " ", re.sub(r"<[^>]*>", " ", html_body or "")).strip()

    def _payload(self, to: list[str], subject: str, html_body: str) -> dict:
        return {
            "personalizations": [{"to": [{"email": address} for address in to]}],
            "from": {"email": settings.sendgrid_from_email, "name": settings.sendgrid_from_name},
            "reply_to": {"email": settings.sendgrid_from_email},
            "subject": subject[:250],
            "content": [
                {"type": "text/plain", "value": self._plain_text(html_body)},
                {"type": "text/html", "value": html_body},
            ],
        }

    async def send(self, to: str | list[str], subject: str, html_body: str) -> bool:
        recipients = [to] if isinstance(to, str) else [address for address in to if address]
        if not recipients:
            return False
        if not self.configured:
            logger.warning("email_not_configured", recipients=len(recipients))
            return False

        headers = {"Authorization": f"Bearer {settings.sendgrid_api_key}"}
        try:
            async with httpx.AsyncClient(
                timeout=settings.email_timeout_seconds,
                transport=self._transport,
            ) as client:
                async for attempt in AsyncRetrying(
                    stop=stop_after_attempt(3),
                    wait=wait_exponential(multiplier=1, min=1, max=8),
                    retry=retry_if_exception_type(httpx.TransportError),
                    reraise=True,
                ):
                    with attempt:
                        resp = await client.post(
                            settings.sendgrid_api_url,
                            json=self._payload(recipients, subject, html_body),
                            headers=headers,
                        )
        except httpx.HTTPError as exc:
            logger.error("email_exception", error=str(exc), recipients=len(recipients))
            return False

        if resp.status_code in (200, 202):
            logger.info("email_sent", recipients=len(recipients), subject=subject[:80])
            return True
        logger.error("email_error", status=resp.status_code, body=resp.text[:500])
        return False


email_service = EmailService()
