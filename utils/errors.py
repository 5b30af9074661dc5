from __future__ import annotations


class GatewayError(Exception):
    """Base for every error the HTTP layer turns into a structured response."""

    status_code = 500
    code = "internal_error"
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(GatewayError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request."


class ConflictError(GatewayError):
    status_code = 400
    code = "email_registered"
    default_message = "User already exists with this email"


class ChallengeError(GatewayError):
    status_code = 400
    code = "challenge_error"
    default_message = "Invalid verification code."


class ChallengeNotFound(ChallengeError):
    code = "challenge_not_found"
    default_message = "No verification code was requested for this email."


class ChallengeExpired(ChallengeError):
    code = "challenge_expired"
    default_message = "Verification code has expired. Request a new one."


class CodeMismatch(ChallengeError):
    code = "code_mismatch"
    default_message = "Invalid verification code."


class DeliveryError(GatewayError):
    status_code = 500
    code = "delivery_failed"
    default_message = "Failed to send verification email. Please try again."


class InternalError(GatewayError):
    status_code = 500
    code = "internal_error"
    default_message = "Something went wrong. Please try again."


class AuthError(GatewayError):
    status_code = 401
    code = "invalid_token"
    default_message = "Invalid token"


class InvalidCredentials(AuthError):
    code = "invalid_credentials"
    default_message = "Incorrect email or password."
