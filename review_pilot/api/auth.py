"""Authentication API routes for Review Pilot.

Signup, login, logout and the current-session view. Successful signup and
login both set the ``auth-token`` cookie and return the token in the body
for bearer-header clients.
"""

import logging

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError

from ..core import (
    CurrentUserDep,
    SessionDep,
    SettingsDep,
    clear_auth_cookie,
    create_session,
    get_trial_days_remaining,
    is_trial_active,
    needs_upgrade,
    set_auth_cookie,
)
from ..schemas import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    SignupRequest,
    SignupResponse,
    UserResponse,
)
from ..services import DuplicateUserError, OrganizationService, UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

INVALID_CREDENTIALS = "Invalid email or password"


# =============================================================================
# SIGNUP / LOGIN
# =============================================================================


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    response: Response,
    session: SessionDep,
    settings: SettingsDep,
):
    """Create an account, its organization, and a signed-in session."""
    try:
        user = await UserService(session, settings).create_user(
            email=data.email,
            password=data.password,
            name=data.name,
        )
    except DuplicateUserError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        )

    # The account stands even if the organization has to be created later
    organization_id = None
    try:
        org = await OrganizationService(session).resolve_for_user(user)
        organization_id = org.id
    except SQLAlchemyError as e:
        logger.warning(f"Could not create organization for user {user.id}: {e}")

    token, user = create_session(user, settings)
    set_auth_cookie(response, token, settings)

    return SignupResponse(
        user=UserResponse.model_validate(user),
        organization_id=organization_id,
        token=token,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    response: Response,
    session: SessionDep,
    settings: SettingsDep,
):
    """Login with email and password."""
    user = await UserService(session, settings).authenticate(data.email, data.password)
    if user is None:
        logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
        )

    token, user = create_session(user, settings)
    set_auth_cookie(response, token, settings)
    logger.info(f"User {user.id} logged in")

    return LoginResponse(user=UserResponse.model_validate(user), token=token)


# =============================================================================
# SESSION
# =============================================================================


@router.post("/logout", response_model=MessageResponse)
@router.get("/logout", response_model=MessageResponse)
async def logout(response: Response, settings: SettingsDep):
    """Clear the session cookie. Bearer tokens simply expire."""
    clear_auth_cookie(response, settings)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=MeResponse)
async def me(
    user: CurrentUserDep,
    session: SessionDep,
):
    """Current user from a fresh read, with trial and tenant details."""
    org = await OrganizationService(session).resolve_for_user(user)

    return MeResponse(
        user=UserResponse.model_validate(user),
        organization_id=org.id,
        trial_active=is_trial_active(user),
        trial_days_remaining=get_trial_days_remaining(user),
        needs_upgrade=needs_upgrade(user),
    )
