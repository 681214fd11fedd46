"""FastAPI dependencies for authentication, authorization, and tenant context."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import User
from ..services.organizations import OrganizationService
from ..services.response_generator import ResponseGenerator
from .config import Settings
from .database import get_session
from .security import TokenPayload, verify_token

logger = logging.getLogger(__name__)

# Security scheme
bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_claims(
    request: Request,
    settings: SettingsDep,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> TokenPayload:
    """Verified token claims for this request.

    The route guard has already verified the token on protected paths and
    left the claims on ``request.state``. Public paths such as ``/auth/me``
    fall back to reading the bearer header or session cookie here.
    """
    claims = getattr(request.state, "claims", None)
    if claims is not None:
        return claims

    token = credentials.credentials if credentials else None
    if not token:
        token = request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise _unauthorized("Authentication required")

    claims = verify_token(token, settings=settings)
    if claims is None:
        raise _unauthorized("Invalid or expired token")
    request.state.claims = claims
    return claims


ClaimsDep = Annotated[TokenPayload, Depends(get_claims)]


async def get_current_user(claims: ClaimsDep, session: SessionDep) -> User:
    """Re-read the user row behind the token.

    Needed whenever a handler depends on fields the token does not carry,
    such as the current subscription status.
    """
    user = await session.get(User, claims.user_id)
    if user is None:
        logger.warning(f"Token for missing user {claims.user_id}")
        raise _unauthorized("User not found")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


async def get_organization_id(user: CurrentUserDep, session: SessionDep) -> int:
    """Resolve (creating on first use) the caller's organization."""
    return await OrganizationService(session).resolve_id_for_user(user)


OrganizationIdDep = Annotated[int, Depends(get_organization_id)]


def get_response_generator(request: Request) -> ResponseGenerator:
    return request.app.state.response_generator


ResponseGeneratorDep = Annotated[ResponseGenerator, Depends(get_response_generator)]
