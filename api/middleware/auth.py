"""
Bearer token authentication dependency.

Runs the auth gate for a request and exposes the verified Principal
to route handlers.
"""

from fastapi import Depends, HTTPException, Request

from modules.auth.exceptions import AuthError
from modules.auth.interfaces import IAuthGate
from shared.models import Principal

from ..dependencies import get_auth_gate


def auth_http_error(error: AuthError) -> HTTPException:
    """
    Convert a gate failure into an HTTP error with a consistent body.

    Provider codes stay out of the body; only the token-debug endpoint
    reports them.
    """
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return HTTPException(
        status_code=error.status_code,
        detail={"error": error.code, "message": error.message},
        headers=headers,
    )


async def get_current_user(
    request: Request,
    gate: IAuthGate = Depends(get_auth_gate),
) -> Principal:
    """
    Dependency that requires authentication.

    The Principal is also stored on ``request.state.principal``.

    Usage:
        @router.get("/protected")
        async def protected_route(user: Principal = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    try:
        principal = await gate.authenticate(request.headers)
    except AuthError as e:
        raise auth_http_error(e)

    request.state.principal = principal
    return principal

