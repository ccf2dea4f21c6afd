# src/rms_reminders/channels/sms_gateway.py

"""Email-to-SMS gateway addressing: phone number + carrier domain -> email address."""

from __future__ import annotations

import re

SMS_CARRIERS: dict[str, str] = {
    "verizon": "vtext.com",
    "att": "txt.att.net",
    "tmobile": "tmomail.net",
    "sprint": "messaging.sprintpcs.com",
    "uscellular": "email.uscc.net",
    "virgin": "vmobl.com",
    "cricket": "sms.cricketwireless.net",
    "metro": "mymetropcs.com",
    "boost": "sms.myboostmobile.com",
    "straighttalk": "vtext.com",
}

DEFAULT_CARRIER = "verizon"

_NON_DIGITS = re.compile(r"\D")


def clean_phone_number(phone: str | None) -> str:
    return _NON_DIGITS.sub("", phone or "")


def validate_phone_number(phone: str | None) -> bool:
    """US numbers only: exactly 10 digits after stripping formatting."""
    return len(clean_phone_number(phone)) == 10


def carrier_domain(carrier: str | None, default_carrier: str = DEFAULT_CARRIER) -> str:
    key = (carrier or "").strip().lower()
    if key in SMS_CARRIERS:
        return SMS_CARRIERS[key]
    return SMS_CARRIERS.get(default_carrier, SMS_CARRIERS[DEFAULT_CARRIER])


def sms_address(phone: str | None, carrier: str | None = None, *, default_carrier: str = DEFAULT_CARRIER) -> str | None:
    """Gateway address for `phone`, or None when it is not a valid 10-digit number."""
    if not validate_phone_number(phone):
        return None
    digits = clean_phone_number(phone)
    return f"{digits}@{carrier_domain(carrier, default_carrier)}"
