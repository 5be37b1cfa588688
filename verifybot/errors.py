"""Verification error hierarchy

VerificationError is the base for every rejection the verify command can
produce. Each carries the message shown to the requester; the command layer
replies with it and deletes the reply shortly after.
"""
from typing import Optional


class VerificationError(Exception):
    """Base verification error. All typed rejections inherit from this."""

    def __init__(self, message: str, *, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class UserInputError(VerificationError):
    """Wrong channel, missing code or unknown code."""


class InsufficientPermissionError(VerificationError):
    """Role missing, already held, or not grantable by the bot."""


class RateLimitedError(VerificationError):
    """Too many attempts in the current rate window."""

    def __init__(self, seconds_remaining: int):
        super().__init__(
            f"❌ Too many verification attempts. Try again in {seconds_remaining} seconds.",
        )
        self.seconds_remaining = seconds_remaining


class OperationalError(VerificationError):
    """Role grant failed on Discord's side. Details never reach the requester."""
