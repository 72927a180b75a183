"""
Authentication endpoints.

Login verification plus diagnostics for token and verifier problems.
"""

import logging
import time
from typing import Any, Optional

import jwt
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from modules.auth.exceptions import VerificationFailedError, VerifierUnavailableError
from modules.auth.service import AuthGate
from modules.users.models import VerifyResponse
from modules.users.service import ProfileService
from shared.config import get_settings
from shared.logging_config import mask_token
from shared.models import Principal

from ..dependencies import get_auth_gate, get_profile_service
from ..middleware.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


class TokenDebugRequest(BaseModel):
    """Body of POST /auth/token-debug."""

    token: Optional[str] = None


class TokenStatus(BaseModel):
    """Unverified view of a token's payload."""

    model_config = ConfigDict(populate_by_name=True)

    formatted: bool = True
    expired: bool
    time_remaining: Optional[int] = Field(None, alias="timeRemaining")
    issuer: Optional[str] = None
    audience: Optional[Any] = None
    subject: Optional[str] = None


def inspect_token(token: str, now: Optional[int] = None) -> TokenStatus:
    """
    Decode a token without verifying it.

    Raises:
        jwt.DecodeError: If the token is not a parseable JWT
    """
    payload = jwt.decode(token, options={"verify_signature": False})
    now = int(time.time()) if now is None else now

    exp = payload.get("exp")
    time_remaining = int(exp) - now if isinstance(exp, (int, float)) else None

    return TokenStatus(
        expired=time_remaining is not None and time_remaining < 0,
        time_remaining=time_remaining,
        issuer=payload.get("iss"),
        audience=payload.get("aud"),
        subject=payload.get("sub"),
    )


@router.post("/verify", response_model=VerifyResponse)
async def verify(
    user: Principal = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> VerifyResponse:
    """
    Confirm the caller's token and make sure a user record exists.

    Called by the web client right after sign-in.
    """
    logger.info(f"Verifying login for {user.id}")
    return await service.verify_login(user)


@router.post("/token-debug")
async def token_debug(
    body: TokenDebugRequest,
    gate: AuthGate = Depends(get_auth_gate),
) -> dict:
    """
    Explain why a token is or isn't accepted.

    Returns 200 whether or not verification succeeds; the ``verified``
    flag and ``verifyError`` carry the outcome.
    """
    if not body.token:
        raise HTTPException(status_code=400, detail="No token provided")

    logger.info(f"Received token for debugging: {mask_token(body.token)}")

    try:
        token_status = inspect_token(body.token)
    except jwt.DecodeError as e:
        raise HTTPException(
            status_code=400,
            detail={"message": "Invalid token format", "error": str(e)},
        )

    status = token_status.model_dump(by_alias=True)

    try:
        claims = await gate.verify_token(body.token)
    except VerifierUnavailableError as e:
        raise HTTPException(status_code=500, detail=e.to_dict())
    except VerificationFailedError as e:
        return {
            "message": "Token format is valid but verification failed",
            "tokenStatus": status,
            "verified": False,
            "verifyError": {"code": e.provider_code, "message": e.provider_message},
        }

    return {
        "message": "Token is valid",
        "tokenStatus": status,
        "verified": True,
        "decodedData": {"uid": claims.subject, "email": claims.email},
    }


@router.get("/status")
async def auth_status(gate: AuthGate = Depends(get_auth_gate)) -> dict:
    """Report how tokens are verified and which settings are present."""
    settings = get_settings()
    verifier = gate.verifier
    configured = verifier is not None and verifier.is_configured

    return {
        "message": "Token verifier configured" if configured else "Token verifier not configured",
        "status": {
            "mode": verifier.mode if verifier is not None else settings.token_verification,
            "configured": configured,
            "environmentVars": {
                "supabaseUrl": bool(settings.supabase_url),
                "serviceRoleKey": bool(settings.supabase_service_role_key),
                "jwtSecret": bool(settings.supabase_jwt_secret),
                "jwksUrl": bool(settings.jwks_url),
            },
        },
    }
