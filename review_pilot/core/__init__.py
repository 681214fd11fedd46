"""Core application utilities."""

from .config import Settings, get_plan_config, get_settings
from .database import (
    Database,
    close_db,
    get_database,
    get_session,
    init_db,
)
from .security import (
    TokenPayload,
    generate_token,
    has_role,
    hash_password,
    is_admin,
    is_manager,
    verify_password,
    verify_token,
)
from .dependencies import (
    ClaimsDep,
    CurrentUserDep,
    OrganizationIdDep,
    ResponseGeneratorDep,
    SessionDep,
    SettingsDep,
    get_claims,
    get_app_settings,
    get_current_user,
)
from .billing import (
    AIResponseDep,
    can_access_feature,
    create_session,
    get_trial_days_remaining,
    has_active_subscription,
    is_trial_active,
    needs_upgrade,
    require_feature,
)
from .middleware import RouteGuardMiddleware, clear_auth_cookie, set_auth_cookie

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_plan_config",
    # Database
    "Database",
    "get_database",
    "get_session",
    "init_db",
    "close_db",
    # Security
    "TokenPayload",
    "hash_password",
    "verify_password",
    "generate_token",
    "verify_token",
    "has_role",
    "is_admin",
    "is_manager",
    # Dependencies
    "get_claims",
    "get_app_settings",
    "get_current_user",
    "ClaimsDep",
    "CurrentUserDep",
    "OrganizationIdDep",
    "ResponseGeneratorDep",
    "SessionDep",
    "SettingsDep",
    # Billing
    "is_trial_active",
    "get_trial_days_remaining",
    "has_active_subscription",
    "can_access_feature",
    "needs_upgrade",
    "create_session",
    "require_feature",
    "AIResponseDep",
    # Middleware
    "RouteGuardMiddleware",
    "set_auth_cookie",
    "clear_auth_cookie",
]
