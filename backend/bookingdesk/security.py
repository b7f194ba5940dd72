"""
BookingDesk Backend — Auth Gate
=================================

What:  FastAPI dependency that turns a bearer credential into a Principal.
How:   Reads the Authorization header, asks the identity verifier about it,
       then applies the expiry and email-verification policy.
Who:   Declared by every mutating route (create, delete, image upload).

Decision Table:
    header missing / empty            → AuthenticationError   "invalid credentials"
    verifier raises                   → AuthenticationError   "invalid credentials"
    expires_at <= now                 → TokenExpiredError     "token expired"
    email_verified is False           → EmailNotVerifiedError "email not verified"
    otherwise                         → Principal(id=subject)

All three map to 401. Handlers receive the Principal as a parameter, so a
handler that declares it never runs without one.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from bookingdesk.exceptions import (
    AuthenticationError,
    EmailNotVerifiedError,
    TokenExpiredError,
)
from bookingdesk.middleware.request_id import request_id_var
from bookingdesk.services.identity import IdentityVerifier, InvalidCredentialsError

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"

authorization_header = APIKeyHeader(
    name="Authorization",
    auto_error=False,
    description="Bearer credential issued by the identity provider",
)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""

    id: str


def extract_credential(header_value: Optional[str]) -> str:
    """
    Strip an optional "Bearer" scheme (case-insensitive).

    A header that carries the scheme and nothing else yields "".
    """
    value = (header_value or "").strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        return rest.strip()
    return value


def get_identity_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.identity_verifier


async def require_principal(
    authorization: Optional[str] = Depends(authorization_header),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Principal:
    rid = request_id_var.get("")
    credential = extract_credential(authorization)
    if not credential:
        logger.warning("[%s] Auth rejected: no credential supplied", rid)
        raise AuthenticationError()

    try:
        token = await verifier.verify(credential)
    except InvalidCredentialsError as e:
        logger.warning("[%s] Auth rejected: credential failed verification (%s)", rid, str(e))
        raise AuthenticationError()
    except Exception as e:
        # Verifier outages are reported to the caller as a rejected credential
        logger.error("[%s] Identity verifier failed: %s", rid, str(e), exc_info=True)
        raise AuthenticationError(context={"original_error": type(e).__name__})

    if token.expires_at <= int(time.time()):
        logger.warning(
            "[%s] Auth rejected: token for %s expired at %d", rid, token.subject, token.expires_at
        )
        raise TokenExpiredError(expires_at=token.expires_at)

    if not token.email_verified:
        logger.warning("[%s] Auth rejected: email of %s not verified", rid, token.subject)
        raise EmailNotVerifiedError(subject=token.subject)

    return Principal(id=token.subject)
