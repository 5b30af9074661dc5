from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from gateway import Gateway
from models import Challenge, UserRecord
from utils.errors import AuthError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])
bearer = HTTPBearer(auto_error=False)


def get_gateway(request: Request) -> Gateway:
    return request.app.state.gateway


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    gateway: Gateway = Depends(get_gateway),
) -> UserRecord:
    if not creds or not creds.credentials:
        raise AuthError("Missing Authorization token")
    claims = gateway.tokens.decode(creds.credentials)
    user = gateway.users.get(claims["sub"])
    if not user:
        raise AuthError("User not found")
    return user


def _required(value: Optional[str], message: str) -> str:
    # Blank strings count as missing; the value itself is kept as sent.
    if value is None or not str(value).strip():
        raise ValidationError(message)
    return value


def _otp_response(gateway: Gateway, challenge: Challenge, message: str) -> dict:
    out = {"success": True, "message": message}
    if gateway.settings.is_demo:
        # Demo only: the code is echoed back to the caller.
        out["message"] = f"{message} (DEMO MODE)"
        out["demo_otp"] = challenge.code
    return out


class SendOtpIn(BaseModel):
    email: Optional[str] = None


class VerifyRegisterIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    otp: Optional[str] = None


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/send-otp")
def send_otp(payload: SendOtpIn, gateway: Gateway = Depends(get_gateway)):
    email = _required(payload.email, "Email is required")
    challenge = gateway.otp.send(email)
    return _otp_response(gateway, challenge, "OTP sent successfully")


@router.post("/resend-otp")
def resend_otp(payload: SendOtpIn, gateway: Gateway = Depends(get_gateway)):
    email = _required(payload.email, "Email is required")
    challenge = gateway.otp.resend(email)
    return _otp_response(gateway, challenge, "New OTP sent successfully")


@router.post("/verify-register")
def verify_register(payload: VerifyRegisterIn, gateway: Gateway = Depends(get_gateway)):
    email = _required(payload.email, "All fields are required")
    password = _required(payload.password, "All fields are required")
    otp = _required(payload.otp, "All fields are required")

    # Compared exactly as sent; surrounding whitespace fails the format check.
    if len(otp) != 6 or not otp.isdigit():
        raise ValidationError("OTP must be 6 digits")

    result = gateway.registration.register(email, password, otp)
    return {
        "success": True,
        "message": "Registration successful!",
        "token": result.token,
        "user": result.user.to_public(),
    }


@router.post("/login")
def login(payload: LoginIn, gateway: Gateway = Depends(get_gateway)):
    email = _required(payload.email, "Email and password are required")
    password = _required(payload.password, "Email and password are required")

    result = gateway.registration.authenticate(email, password)
    return {
        "success": True,
        "token": result.token,
        "token_type": "bearer",
        "user": result.user.to_public(),
    }


@router.get("/me")
def me(current_user: UserRecord = Depends(get_current_user)):
    return {"success": True, "user": current_user.to_public()}
