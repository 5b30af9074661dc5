from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from config import PRODUCTION, Settings
from gateway import Gateway, build_gateway
from main import create_app
from utils.errors import DeliveryError


@dataclass
class FakeClock:
    current: datetime

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


@dataclass
class FakeDelivery:
    sent: list[dict[str, object]] = field(default_factory=list)
    fail: bool = False

    def deliver(self, *, email: str, code: str, ttl_minutes: int) -> None:
        if self.fail:
            raise DeliveryError()
        self.sent.append({"email": email, "code": code, "ttl_minutes": ttl_minutes})

    @property
    def last_code(self) -> str:
        return str(self.sent[-1]["code"])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def fake_delivery() -> FakeDelivery:
    return FakeDelivery()


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret="test-secret", bcrypt_rounds=4)


@pytest.fixture
def production_settings() -> Settings:
    return Settings(
        mode=PRODUCTION,
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        brevo_api_key="key",
        brevo_from="noreply@example.com",
    )


@pytest.fixture
def gateway(settings, clock, fake_delivery) -> Gateway:
    return build_gateway(settings, now=clock, delivery=fake_delivery)


@pytest.fixture
def production_gateway(production_settings, clock, fake_delivery) -> Gateway:
    return build_gateway(production_settings, now=clock, delivery=fake_delivery)


@pytest.fixture
def client(settings, gateway) -> TestClient:
    return TestClient(create_app(settings, gateway))


@pytest.fixture
def production_client(production_settings, production_gateway) -> TestClient:
    return TestClient(create_app(production_settings, production_gateway))
