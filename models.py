from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class Challenge:
    email: str
    code: str  # 6 digits, leading zeros never occur (range 100000-999999)
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def new(cls, *, email: str, code: str, now: datetime, ttl: timedelta) -> "Challenge":
        return cls(email=email, code=code, issued_at=now, expires_at=now + ttl)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class UserRecord:
    email: str

    # Store password hash (bcrypt). Never store plaintext.
    credential_hash: str

    created_at: datetime

    # Only verified users are ever stored.
    verified: bool = True

    def to_public(self) -> dict:
        return {"email": self.email, "createdAt": self.created_at.isoformat()}
