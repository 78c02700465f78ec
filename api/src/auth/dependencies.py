"""FastAPI dependencies for admin authorization.

Every ``/api/admin`` router declares ``Depends(require_admin)``; tests
replace it through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.auth.schemas import AuthenticatedUser
from src.auth.service import AuthError, FirebaseTokenVerifier
from src.core.context import set_user_id


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Args:
        request: FastAPI request

    Returns:
        Token string or None if not present
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


def get_token_verifier(request: Request) -> FirebaseTokenVerifier:
    """Get the token verifier from app state."""
    verifier = getattr(request.app.state, "token_verifier", None)
    if verifier is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service is not available",
        )
    return verifier


TokenVerifierDep = Annotated[FirebaseTokenVerifier, Depends(get_token_verifier)]


def handle_auth_error(error: AuthError) -> HTTPException:
    """Convert auth errors to HTTP exceptions."""
    status_map = {
        "auth_not_configured": status.HTTP_503_SERVICE_UNAVAILABLE,
        "auth_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
        "invalid_token": status.HTTP_401_UNAUTHORIZED,
        "not_admin": status.HTTP_403_FORBIDDEN,
    }
    status_code = status_map.get(error.code, status.HTTP_401_UNAUTHORIZED)
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if status_code == status.HTTP_401_UNAUTHORIZED
        else None
    )
    return HTTPException(status_code=status_code, detail=error.message, headers=headers)


async def require_admin(
    token: Annotated[str | None, Depends(get_token_from_header)],
    verifier: TokenVerifierDep,
) -> AuthenticatedUser:
    """Require a valid Firebase ID token belonging to an administrator.

    Raises:
        HTTPException(401): Token missing or rejected
        HTTPException(403): User is not an administrator
        HTTPException(503): Firebase not configured or unreachable
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = await verifier.authorize_admin(token)
    except AuthError as e:
        raise handle_auth_error(e) from e

    set_user_id(user.uid)
    return user

