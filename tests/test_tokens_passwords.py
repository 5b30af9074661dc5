from __future__ import annotations

from datetime import timedelta

import pytest

from utils.errors import AuthError
from utils.passwords import hash_password, verify_password
from utils.tokens import TokenIssuer


def test_hash_password_is_salted():
    first = hash_password("p", rounds=4)
    second = hash_password("p", rounds=4)

    assert first != "p"
    assert first != second
    assert verify_password("p", first)
    assert verify_password("p", second)
    assert not verify_password("q", first)


def test_hash_password_truncates_long_multibyte_input():
    password = "é" * 100
    hashed = hash_password(password, rounds=4)
    assert verify_password(password, hashed)


def test_verify_password_rejects_malformed_hash():
    assert verify_password("p", "not-a-bcrypt-hash") is False


def test_token_carries_email_and_24h_window(clock):
    issuer = TokenIssuer(secret="s", now=clock)
    claims = issuer.decode(issuer.issue("a@x.com"))

    assert claims["sub"] == "a@x.com"
    assert claims["email"] == "a@x.com"
    assert claims["exp"] - claims["iat"] == 24 * 3600


def test_token_expires_after_24h(clock):
    issuer = TokenIssuer(secret="s", now=clock)
    token = issuer.issue("a@x.com")

    clock.advance(hours=23, minutes=59)
    assert issuer.decode(token)["sub"] == "a@x.com"

    clock.advance(minutes=1)
    with pytest.raises(AuthError, match="expired"):
        issuer.decode(token)


def test_token_signed_with_other_secret_is_rejected(clock):
    token = TokenIssuer(secret="one", now=clock).issue("a@x.com")
    with pytest.raises(AuthError):
        TokenIssuer(secret="two", now=clock).decode(token)


def test_garbage_token_is_rejected(clock):
    with pytest.raises(AuthError):
        TokenIssuer(secret="s", now=clock).decode("not.a.token")


def test_token_issuer_requires_secret():
    with pytest.raises(ValueError):
        TokenIssuer(secret="", ttl=timedelta(hours=1))
