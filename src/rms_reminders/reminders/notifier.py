# src/rms_reminders/reminders/notifier.py

"""
Multi-channel notifier.

Composes up to four messages per cycle (overdue/upcoming x email/SMS) and sends
them concurrently. Sends are independent: one failing never affects another, and
failures are reported as SendResult values instead of exceptions.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..channels.sms_gateway import DEFAULT_CARRIER, sms_address
from ..core.ports import ChannelSender
from .models import (
    AlertKind,
    Channel,
    ChannelMessage,
    DerivedAlert,
    DispatchReport,
    SendResult,
    SourceType,
    User,
)

logger = logging.getLogger(__name__)

EMAIL_SUBJECTS = {
    AlertKind.OVERDUE: "Overdue Items - RMS",
    AlertKind.UPCOMING: "Upcoming Deadlines - RMS",
}
SMS_SUBJECT = "RMS Notification"
SMS_MAX_LENGTH = 160


def _plural_days(n: int) -> str:
    return f"{n} day" if n == 1 else f"{n} days"


def _type_label(alert: DerivedAlert) -> str:
    return "Task" if alert.source_type == SourceType.TASK else "Project"


def _date_label(alert: DerivedAlert) -> str:
    return alert.due_at.strftime("%Y-%m-%d")


def _email_line(alert: DerivedAlert) -> str:
    head = f'• {_type_label(alert)}: "{alert.title}"'
    if alert.kind == AlertKind.OVERDUE:
        return f"{head} - Was due on {_date_label(alert)}"
    days = alert.days_left or 0
    when = "Due today" if days <= 0 else f"Due in {_plural_days(days)}"
    return f"{head} - {when} ({_date_label(alert)})"


def compose_email(user: User, alerts: Sequence[DerivedAlert], kind: AlertKind) -> tuple[str, str]:
    """(subject, body) for one email bucket."""
    lines = [f"Hello {user.name or 'there'},", ""]
    if kind == AlertKind.UPCOMING:
        lines.append("You have the following tasks and projects approaching their deadlines:")
    else:
        lines.append("You have the following overdue tasks and projects:")
    lines.append("")
    lines.extend(_email_line(a) for a in alerts)
    lines += [
        "",
        "Please review these items in your RMS dashboard.",
        "",
        "Best regards,",
        "RMS Notification System",
    ]
    return EMAIL_SUBJECTS[kind], "\n".join(lines)


def _sms_line(alert: DerivedAlert) -> str:
    head = f'{_type_label(alert)} "{alert.title}"'
    if alert.kind == AlertKind.OVERDUE:
        return f"{head} is overdue"
    days = alert.days_left or 0
    return f"{head} due today" if days <= 0 else f"{head} due in {_plural_days(days)}"


def compose_sms(alerts: Sequence[DerivedAlert], kind: AlertKind) -> str:
    if len(alerts) == 1:
        text = f"RMS Alert: {_sms_line(alerts[0])}"
    else:
        what = "items are overdue" if kind == AlertKind.OVERDUE else "items approaching deadline"
        text = "\n".join([f"RMS Alert: {len(alerts)} {what}", *(_sms_line(a) for a in alerts)])

    if len(text) > SMS_MAX_LENGTH:
        text = text[: SMS_MAX_LENGTH - 3].rstrip() + "..."
    return text


def compose_messages(
    user: User,
    new_overdue: Sequence[DerivedAlert],
    new_upcoming: Sequence[DerivedAlert],
    *,
    send_email: bool,
    send_sms: bool,
    default_carrier: str = DEFAULT_CARRIER,
) -> list[ChannelMessage]:
    """
    Each message is gated by (channel flag AND bucket non-empty AND address exists).
    """
    messages: list[ChannelMessage] = []
    buckets = ((AlertKind.OVERDUE, new_overdue), (AlertKind.UPCOMING, new_upcoming))

    email = (user.email or "").strip()
    if send_email and email:
        for kind, alerts in buckets:
            if not alerts:
                continue
            subject, body = compose_email(user, alerts, kind)
            messages.append(ChannelMessage(Channel.EMAIL, kind, email, subject, body))

    phone_address = sms_address(user.phone, user.sms_carrier, default_carrier=default_carrier)
    if send_sms and phone_address is None:
        logger.warning("SMS enabled for %s but phone %r is not a valid 10-digit number", user.id, user.phone)
    if send_sms and phone_address:
        for kind, alerts in buckets:
            if not alerts:
                continue
            messages.append(ChannelMessage(Channel.SMS, kind, phone_address, SMS_SUBJECT, compose_sms(alerts, kind)))

    return messages


@dataclass(slots=True)
class PendingDispatch:
    """Sends that were issued but may not have resolved yet."""

    messages: tuple[ChannelMessage, ...]
    futures: tuple[asyncio.Future, ...]

    def attempted(self, channel: Channel) -> bool:
        return any(m.channel == channel for m in self.messages)

    async def settle(self) -> DispatchReport:
        """Wait for every send, tolerating partial failure."""
        if not self.futures:
            return DispatchReport()

        outcomes = await asyncio.gather(*self.futures, return_exceptions=True)
        results: list[SendResult] = []
        for msg, outcome in zip(self.messages, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "%s send failed bucket=%s to=%s: %r",
                    msg.channel.value,
                    msg.bucket.value,
                    msg.address,
                    outcome,
                )
                results.append(SendResult(msg.channel, msg.bucket, msg.address, True, False, repr(outcome)))
                continue
            ok = bool(outcome)
            if not ok:
                logger.warning("%s send rejected bucket=%s to=%s", msg.channel.value, msg.bucket.value, msg.address)
            results.append(SendResult(msg.channel, msg.bucket, msg.address, True, ok))

        report = DispatchReport(tuple(results))
        logger.info("Sent %d/%d notifications", report.succeeded, report.attempted)
        return report


class Notifier:
    def __init__(self, sender: ChannelSender, *, default_carrier: str = DEFAULT_CARRIER) -> None:
        self._sender = sender
        self._default_carrier = default_carrier

    def compose(
        self,
        user: User,
        new_overdue: Sequence[DerivedAlert],
        new_upcoming: Sequence[DerivedAlert],
        *,
        send_email: bool,
        send_sms: bool,
    ) -> list[ChannelMessage]:
        return compose_messages(
            user,
            new_overdue,
            new_upcoming,
            send_email=send_email,
            send_sms=send_sms,
            default_carrier=self._default_carrier,
        )

    async def _send_one(self, msg: ChannelMessage) -> bool:
        return await self._sender.send_message(msg.address, msg.subject, msg.body)

    def start(self, messages: Sequence[ChannelMessage]) -> PendingDispatch:
        """Issue all sends concurrently; must be called from a running event loop."""
        futures = tuple(asyncio.ensure_future(self._send_one(m)) for m in messages)
        for m in messages:
            logger.debug("Dispatch issued channel=%s bucket=%s to=%s", m.channel.value, m.bucket.value, m.address)
        return PendingDispatch(messages=tuple(messages), futures=futures)

    async def dispatch(self, messages: Sequence[ChannelMessage]) -> DispatchReport:
        return await self.start(messages).settle()
