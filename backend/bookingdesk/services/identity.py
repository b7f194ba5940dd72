"""
BookingDesk Backend — Identity Verifier
=========================================

What:  Checks an opaque bearer credential and reports who it belongs to.
How:   `IdentityVerifier` is the abstract contract. `HMACTokenVerifier`
       accepts HS256-signed JWTs (header.payload.signature, base64url)
       signed with the shared AUTH_SECRET_KEY.
Who:   Called only by the auth gate (bookingdesk/security.py).

The verifier reports facts about the token. Expiry and email verification
are policy and are enforced by the auth gate, not here.

Token claims read:
    sub             → VerifiedToken.subject        (required)
    exp             → VerifiedToken.expires_at     (required, UNIX seconds)
    email_verified  → VerifiedToken.email_verified (default False)
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class InvalidCredentialsError(Exception):
    """Raised by a verifier when a credential cannot be accepted."""


@dataclass(frozen=True)
class VerifiedToken:
    """Facts extracted from a credential whose signature checked out."""

    subject: str
    expires_at: int
    email_verified: bool = False


class IdentityVerifier(ABC):
    """Abstract identity verifier. Safe to share across requests."""

    @abstractmethod
    async def verify(self, credential: str) -> VerifiedToken:
        """Return the token's facts or raise InvalidCredentialsError."""
        ...


def _b64_url_decode(data: str) -> bytes:
    """Decode base64url without padding."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


class HMACTokenVerifier(IdentityVerifier):
    """
    Verifies HS256 JSON Web Tokens against a shared secret.

    Any malformed part, an unsupported algorithm, a signature mismatch or a
    missing `sub`/`exp` claim raises InvalidCredentialsError.
    """

    ALGORITHM = "HS256"

    def __init__(self, secret_key: str):
        self._secret = secret_key.encode("utf-8")

    def _sign(self, message: bytes) -> bytes:
        return hmac.new(self._secret, message, hashlib.sha256).digest()

    async def verify(self, credential: str) -> VerifiedToken:
        if not self._secret:
            raise InvalidCredentialsError("no secret configured")

        parts = credential.split(".")
        if len(parts) != 3:
            raise InvalidCredentialsError("malformed token")
        header_b64, payload_b64, signature_b64 = parts

        try:
            header = json.loads(_b64_url_decode(header_b64))
            payload = json.loads(_b64_url_decode(payload_b64))
            signature = _b64_url_decode(signature_b64)
        except (binascii.Error, ValueError) as e:
            raise InvalidCredentialsError("malformed token") from e

        if not isinstance(header, dict) or header.get("alg") != self.ALGORITHM:
            raise InvalidCredentialsError("unsupported algorithm")

        expected = self._sign(f"{header_b64}.{payload_b64}".encode("utf-8"))
        # Constant-time comparison
        if not hmac.compare_digest(expected, signature):
            raise InvalidCredentialsError("signature mismatch")

        if not isinstance(payload, dict):
            raise InvalidCredentialsError("malformed claims")
        subject = payload.get("sub")
        expires_at = payload.get("exp")
        if not isinstance(subject, str) or not subject:
            raise InvalidCredentialsError("missing sub claim")
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            raise InvalidCredentialsError("missing exp claim")

        return VerifiedToken(
            subject=subject,
            expires_at=int(expires_at),
            email_verified=payload.get("email_verified") is True,
        )
