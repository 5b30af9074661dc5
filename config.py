from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEMO = "demo"
PRODUCTION = "production"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    mode: str = DEMO
    port: int = 5000

    jwt_secret: str = ""
    jwt_alg: str = "HS256"
    jwt_exp_hours: int = 24

    otp_exp_minutes: int = 10
    otp_sweep_minutes: int = 5
    bcrypt_rounds: int = 10

    brevo_api_key: Optional[str] = None
    brevo_from: Optional[str] = None
    otp_subject: str = "Your verification code"

    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    # Demo-only relaxation: any 6-digit code is accepted on verify.
    demo_accept_any_code: bool = False

    @property
    def is_demo(self) -> bool:
        return self.mode == DEMO


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _bool_env(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    """
    Build settings from the environment.

    Production refuses to start without a signing secret and Brevo
    credentials. Demo mode generates a per-process secret instead.
    """
    mode = (os.getenv("GATEWAY_MODE") or DEMO).strip().lower()
    if mode not in {DEMO, PRODUCTION}:
        raise ConfigError(f"GATEWAY_MODE must be '{DEMO}' or '{PRODUCTION}', got {mode!r}")

    jwt_secret = (os.getenv("JWT_SECRET") or "").strip()
    brevo_api_key = (os.getenv("BREVO_API_KEY") or "").strip() or None
    brevo_from = (os.getenv("BREVO_FROM") or os.getenv("EMAIL_FROM") or "").strip() or None
    accept_any = _bool_env("DEMO_ACCEPT_ANY_CODE")

    if mode == PRODUCTION:
        missing = [
            name
            for name, value in (
                ("JWT_SECRET", jwt_secret),
                ("BREVO_API_KEY", brevo_api_key),
                ("BREVO_FROM", brevo_from),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Production mode requires: {', '.join(missing)}")
        if accept_any:
            logger.warning("DEMO_ACCEPT_ANY_CODE is ignored in production mode")
            accept_any = False
    elif not jwt_secret:
        jwt_secret = secrets.token_urlsafe(32)
        logger.warning("JWT_SECRET not set; using an ephemeral secret (tokens die with the process)")

    origins = tuple(
        origin.strip()
        for origin in (os.getenv("CORS_ORIGINS") or "*").split(",")
        if origin.strip()
    )

    return Settings(
        mode=mode,
        port=_int_env("PORT", 5000),
        jwt_secret=jwt_secret,
        jwt_alg=os.getenv("JWT_ALG", "HS256"),
        jwt_exp_hours=_int_env("JWT_EXP_HOURS", 24),
        otp_exp_minutes=_int_env("OTP_EXP_MINUTES", 10),
        otp_sweep_minutes=max(1, _int_env("OTP_SWEEP_MINUTES", 5)),
        bcrypt_rounds=_int_env("BCRYPT_ROUNDS", 10),
        brevo_api_key=brevo_api_key,
        brevo_from=brevo_from,
        otp_subject=os.getenv("OTP_SUBJECT", "Your verification code"),
        cors_origins=origins or ("*",),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        demo_accept_any_code=accept_any,
    )
