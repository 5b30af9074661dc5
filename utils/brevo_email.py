from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from utils.errors import DeliveryError

logger = logging.getLogger(__name__)

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"


class OtpDelivery(Protocol):
    def deliver(self, *, email: str, code: str, ttl_minutes: int) -> None:
        ...


def send_email(
    *,
    api_key: str,
    from_email: str,
    to_email: str,
    subject: str,
    html: str,
    text: Optional[str] = None,
    timeout: int = 15,
) -> None:
    """
    Sends email using Brevo Transactional Email API.
    Raises DeliveryError on transport failure or a non-2xx answer.
    """
    payload = {
        "sender": {"email": from_email, "name": "Verification"},
        "to": [{"email": to_email}],
        "subject": subject,
        "htmlContent": html,
    }
    if text:
        payload["textContent"] = text

    try:
        resp = requests.post(
            BREVO_SEND_URL,
            headers={
                "accept": "application/json",
                "api-key": api_key,
                "content-type": "application/json",
            },
            json=payload,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise DeliveryError() from exc
    if resp.status_code >= 300:
        logger.error("Brevo send failed (%s): %s", resp.status_code, resp.text)
        raise DeliveryError()


def render_otp_html(code: str, ttl_minutes: int) -> str:
    return f"""
    <div style="font-family:Arial,sans-serif">
      <h2>Verify your email</h2>
      <p>Your verification code is:</p>
      <div style="font-size:28px;font-weight:700;letter-spacing:2px">{code}</div>
      <p>This code expires in {ttl_minutes} minutes.</p>
    </div>
    """


class ConsoleDelivery:
    """Demo delivery: the code only goes to the log."""

    def deliver(self, *, email: str, code: str, ttl_minutes: int) -> None:
        logger.info("DEMO OTP for %s: %s", email, code)


class BrevoDelivery:
    def __init__(self, *, api_key: str, from_email: str, subject: str) -> None:
        self.api_key = api_key
        self.from_email = from_email
        self.subject = subject

    def deliver(self, *, email: str, code: str, ttl_minutes: int) -> None:
        send_email(
            api_key=self.api_key,
            from_email=self.from_email,
            to_email=email,
            subject=self.subject,
            html=render_otp_html(code, ttl_minutes),
            text=f"Your verification code is {code}",
        )
        logger.info("OTP email sent to %s", email)
