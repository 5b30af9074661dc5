from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable

from models import Challenge
from utils.brevo_email import OtpDelivery
from utils.errors import ConflictError, DeliveryError
from utils.stores import KeyedLocks, KeyedStore

logger = logging.getLogger(__name__)


def _gen_otp() -> str:
    return f"{100000 + secrets.randbelow(900000)}"


class ChallengeIssuer:
    """
    Issues OTP challenges: one live challenge per email, newest wins.

    The challenge is stored before delivery is attempted, so a failed send
    still leaves a (never delivered) code behind. Callers must resend.
    """

    def __init__(
        self,
        *,
        challenges: KeyedStore[Challenge],
        delivery: OtpDelivery,
        ttl: timedelta,
        now: Callable[[], datetime],
        generate_code: Callable[[], str] = _gen_otp,
    ) -> None:
        self.challenges = challenges
        self.delivery = delivery
        self.ttl = ttl
        self._now = now
        self._generate_code = generate_code

    def issue(self, email: str) -> Challenge:
        challenge = Challenge.new(
            email=email,
            code=self._generate_code(),
            now=self._now(),
            ttl=self.ttl,
        )
        self.challenges.set(email, challenge)

        try:
            self.delivery.deliver(
                email=email,
                code=challenge.code,
                ttl_minutes=int(self.ttl.total_seconds() // 60),
            )
        except DeliveryError:
            logger.exception("OTP delivery failed for %s", email)
            raise
        return challenge


class OtpService:
    def __init__(
        self,
        *,
        issuer: ChallengeIssuer,
        users: KeyedStore,
        locks: KeyedLocks,
    ) -> None:
        self.issuer = issuer
        self.users = users
        self.locks = locks

    def send(self, email: str) -> Challenge:
        """First code for an email; rejected once the email is registered."""
        with self.locks.hold(email):
            if self.users.has(email):
                raise ConflictError()
            return self.issuer.issue(email)

    def resend(self, email: str) -> Challenge:
        with self.locks.hold(email):
            return self.issuer.issue(email)
