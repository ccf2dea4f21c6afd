# src/rms_reminders/channels/emailjs.py

"""EmailJS sender: email (and email-to-SMS) via the EmailJS REST API, using httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class EmailJSSender:
    """
    ChannelSender over EmailJS.

    The template is expected to use {{to_email}}, {{subject}}, {{message}} and {{from_name}}.
    Transport problems are logged and reported as False; nothing is raised.
    """

    def __init__(
        self,
        *,
        service_id: str,
        template_id: str,
        public_key: str,
        private_key: str = "",
        api_url: str = "https://api.emailjs.com/api/v1.0/email/send",
        from_name: str = "RMS Notification System",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not (service_id and template_id and public_key):
            raise ValueError("EmailJS service_id, template_id and public_key are required")
        self._service_id = service_id
        self._template_id = template_id
        self._public_key = public_key
        self._private_key = private_key
        self._api_url = api_url
        self._from_name = from_name
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings) -> EmailJSSender:
        return cls(
            service_id=settings.emailjs_service_id,
            template_id=settings.emailjs_template_id,
            public_key=settings.emailjs_public_key,
            private_key=settings.emailjs_private_key,
            api_url=settings.emailjs_api_url,
            from_name=settings.email_from_name,
            timeout_seconds=settings.http_timeout_seconds,
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    def _payload(self, address: str, subject: str, body: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "service_id": self._service_id,
            "template_id": self._template_id,
            "user_id": self._public_key,
            "template_params": {
                "to_email": address,
                "subject": subject,
                "message": body,
                "from_name": self._from_name,
            },
        }
        if self._private_key:
            payload["accessToken"] = self._private_key
        return payload

    async def send_message(self, address: str, subject: str, body: str) -> bool:
        client = self._get_client()
        try:
            resp = await client.post(self._api_url, json=self._payload(address, subject, body))
        except httpx.HTTPError as e:
            logger.error("EmailJS request failed to=%s: %s", address, e)
            return False

        if resp.status_code != 200:
            logger.error("EmailJS send failed to=%s: %s %s", address, resp.status_code, resp.text[:200])
            return False

        logger.info("Email sent to %s (subject=%r)", address, subject)
        return True

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
