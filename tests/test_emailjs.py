# tests/test_emailjs.py

from __future__ import annotations

import json

import httpx
import pytest

from rms_reminders.channels.emailjs import EmailJSSender


def _sender(handler, **kwargs) -> EmailJSSender:
    return EmailJSSender(
        service_id="svc",
        template_id="tpl",
        public_key="pub",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_posts_template_params_and_reports_success() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, text="OK")

    sender = _sender(handler, private_key="secret")
    try:
        ok = await sender.send_message("alice@example.com", "Overdue Items - RMS", "body")
    finally:
        await sender.close()

    assert ok is True
    payload = seen[0]
    assert payload["service_id"] == "svc"
    assert payload["user_id"] == "pub"
    assert payload["accessToken"] == "secret"
    assert payload["template_params"] == {
        "to_email": "alice@example.com",
        "subject": "Overdue Items - RMS",
        "message": "body",
        "from_name": "RMS Notification System",
    }


@pytest.mark.asyncio
async def test_non_200_is_a_failed_send() -> None:
    sender = _sender(lambda request: httpx.Response(400, text="The template ID is invalid"))
    try:
        assert await sender.send_message("a@x.io", "s", "b") is False
    finally:
        await sender.close()


@pytest.mark.asyncio
async def test_transport_error_is_reported_not_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    sender = _sender(handler)
    try:
        assert await sender.send_message("a@x.io", "s", "b") is False
    finally:
        await sender.close()


def test_requires_credentials() -> None:
    with pytest.raises(ValueError):
        EmailJSSender(service_id="", template_id="tpl", public_key="pub")
