from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from models import Challenge, UserRecord
from utils.errors import (
    ChallengeExpired,
    ChallengeNotFound,
    CodeMismatch,
    ConflictError,
    InvalidCredentials,
    ValidationError,
)
from utils.passwords import hash_password, verify_password
from utils.stores import KeyedLocks, KeyedStore
from utils.tokens import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationResult:
    token: str
    user: UserRecord


class RegistrationHandler:
    def __init__(
        self,
        *,
        users: KeyedStore[UserRecord],
        challenges: KeyedStore[Challenge],
        locks: KeyedLocks,
        tokens: TokenIssuer,
        now: Callable[[], datetime],
        bcrypt_rounds: int = 10,
        accept_any_code: bool = False,
    ) -> None:
        self.users = users
        self.challenges = challenges
        self.locks = locks
        self.tokens = tokens
        self._now = now
        self._bcrypt_rounds = bcrypt_rounds
        # Demo-only: skip challenge checks for any 6-digit code.
        self._accept_any_code = accept_any_code

    def register(self, email: str, password: str, code: str) -> RegistrationResult:
        # Blank strings count as missing.
        if not all(value and value.strip() for value in (email, password, code)):
            raise ValidationError("All fields are required")

        with self.locks.hold(email):
            if self._accept_any_code and len(code) == 6 and code.isdigit():
                logger.warning("DEMO: accepting unchecked code for %s", email)
            else:
                self._check_challenge(email, code)

            if self.users.has(email):
                raise ConflictError()

            user = UserRecord(
                email=email,
                credential_hash=hash_password(password, rounds=self._bcrypt_rounds),
                created_at=self._now(),
            )
            self.users.set(email, user)
            self.challenges.delete(email)
            token = self.tokens.issue(email)

        logger.info("Registered %s", email)
        return RegistrationResult(token=token, user=user)

    def authenticate(self, email: str, password: str) -> RegistrationResult:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.users.get(email)
        if not user or not verify_password(password, user.credential_hash):
            raise InvalidCredentials()
        return RegistrationResult(token=self.tokens.issue(email), user=user)

    def _check_challenge(self, email: str, code: str) -> None:
        challenge = self.challenges.get(email)
        if challenge is None:
            raise ChallengeNotFound()

        if challenge.is_expired(self._now()):
            self.challenges.delete(email)
            raise ChallengeExpired()

        # A wrong code leaves the challenge in place for another attempt.
        if code != challenge.code:
            raise CodeMismatch()
