"""
Resend email sender adapter - Implements EmailSender protocol over HTTP.

Posts each message to the Resend REST API (POST /emails) with a bounded
timeout. Transport and HTTP status errors are raised as NotificationFailure;
the dispatcher decides what to do with them.
"""

import logging

import httpx

from src.domain.exceptions import NotificationFailure
from src.domain.ports import EmailMessage

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com"


class ResendEmailSender:
    """
    Implements EmailSender protocol via the Resend API.

    Owns an httpx.Client; call close() on shutdown.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = RESEND_API_URL,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    def send(self, message: EmailMessage) -> None:
        payload = {
            "from": message.sender,
            "to": list(message.to),
            "subject": message.subject,
            "html": message.html,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to

        try:
            response = self._client.post("/emails", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationFailure(
                f"Resend rejected message: HTTP {e.response.status_code} {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise NotificationFailure(f"Resend request failed: {e}") from e

        logger.info("Resend accepted message %s", response.json().get("id"))

    def close(self) -> None:
        self._client.close()
