from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from config import Settings
from models import Challenge, UserRecord
from utils.brevo_email import BrevoDelivery, ConsoleDelivery, OtpDelivery
from utils.otp_service import ChallengeIssuer, OtpService
from utils.registration import RegistrationHandler
from utils.stores import InMemoryStore, KeyedLocks, sweep_expired_challenges
from utils.tokens import TokenIssuer


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Gateway:
    settings: Settings
    users: InMemoryStore[UserRecord]
    challenges: InMemoryStore[Challenge]
    otp: OtpService
    registration: RegistrationHandler
    tokens: TokenIssuer
    now: Callable[[], datetime]

    def sweep(self) -> int:
        return sweep_expired_challenges(self.challenges, self.now())


def _delivery_for(settings: Settings) -> OtpDelivery:
    if settings.is_demo:
        return ConsoleDelivery()
    return BrevoDelivery(
        api_key=settings.brevo_api_key or "",
        from_email=settings.brevo_from or "",
        subject=settings.otp_subject,
    )


def build_gateway(
    settings: Settings,
    *,
    now: Callable[[], datetime] = utcnow,
    delivery: OtpDelivery | None = None,
) -> Gateway:
    users: InMemoryStore[UserRecord] = InMemoryStore()
    challenges: InMemoryStore[Challenge] = InMemoryStore()
    locks = KeyedLocks()

    tokens = TokenIssuer(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_alg,
        ttl=timedelta(hours=settings.jwt_exp_hours),
        now=now,
    )
    issuer = ChallengeIssuer(
        challenges=challenges,
        delivery=delivery if delivery is not None else _delivery_for(settings),
        ttl=timedelta(minutes=settings.otp_exp_minutes),
        now=now,
    )
    return Gateway(
        settings=settings,
        users=users,
        challenges=challenges,
        otp=OtpService(issuer=issuer, users=users, locks=locks),
        registration=RegistrationHandler(
            users=users,
            challenges=challenges,
            locks=locks,
            tokens=tokens,
            now=now,
            bcrypt_rounds=settings.bcrypt_rounds,
            accept_any_code=settings.is_demo and settings.demo_accept_any_code,
        ),
        tokens=tokens,
        now=now,
    )
