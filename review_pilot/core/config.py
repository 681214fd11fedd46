"""Application configuration using Pydantic Settings."""

import json
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "Review Pilot AI"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: Literal["development", "test", "staging", "production"] = "development"

    allowed_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        alias="ALLOWED_ORIGINS",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse allowed origins from string."""
        origins = self.allowed_origins_str
        if origins.startswith("["):
            try:
                return json.loads(origins)
            except json.JSONDecodeError:
                pass
        return [o.strip() for o in origins.split(",") if o.strip()]

    # Database
    database_url: str = Field(default="sqlite:///./data/review-pilot.db")
    database_echo: bool = False  # Log SQL queries

    # Authentication
    jwt_secret: str = Field(
        default="your-super-secret-jwt-key-change-in-production",
        alias="JWT_SECRET",
    )
    jwt_expires_days: int = Field(default=7, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    auth_cookie_name: str = "auth-token"

    # Trial
    trial_days: int = Field(default=14, ge=0)

    # Reviews
    max_page_size: int = Field(default=100, ge=1)

    # Response generation
    ai_response_delay_seconds: float = Field(default=1.0, ge=0)

    # Stripe (Billing)
    stripe_secret_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: str | None = Field(default=None, alias="STRIPE_WEBHOOK_SECRET")

    @property
    def stripe_enabled(self) -> bool:
        """Check if Stripe billing is configured."""
        return bool(self.stripe_secret_key and self.stripe_webhook_secret)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def database_url_async(self) -> str:
        """Get the async driver URL (aiosqlite or asyncpg)."""
        url = self.database_url
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


# Always accessible, even without trial or subscription
FREE_FEATURES = frozenset({"view_reviews", "basic_analytics"})

SUBSCRIPTION_PLANS = {
    "starter": {
        "name": "Starter",
        "price": 29,
        "currency": "usd",
        "interval": "month",
        "features": [
            "ai_response",
            "sentiment_analysis",
            "review_sync",
            "csv_import",
            "basic_analytics",
            "email_support",
        ],
        "limits": {
            "ai_response": 500,
            "sentiment_analysis": 1000,
            "review_sync": 50,
            "csv_import": 20,
            "organizations": 3,
            "users_per_org": 5,
        },
    },
    "professional": {
        "name": "Professional",
        "price": 79,
        "currency": "usd",
        "interval": "month",
        "features": [
            "ai_response",
            "sentiment_analysis",
            "review_sync",
            "csv_import",
            "advanced_analytics",
            "custom_templates",
            "api_access",
            "priority_support",
        ],
        "limits": {
            "ai_response": 2000,
            "sentiment_analysis": 5000,
            "review_sync": 200,
            "csv_import": 100,
            "organizations": 10,
            "users_per_org": 20,
        },
    },
    "enterprise": {
        "name": "Enterprise",
        "price": 199,
        "currency": "usd",
        "interval": "month",
        "features": [
            "ai_response",
            "sentiment_analysis",
            "review_sync",
            "csv_import",
            "advanced_analytics",
            "custom_templates",
            "api_access",
            "white_label",
            "dedicated_support",
            "custom_integrations",
        ],
        "limits": {
            "ai_response": 10000,
            "sentiment_analysis": 25000,
            "review_sync": 1000,
            "csv_import": 500,
            "organizations": -1,  # Unlimited
            "users_per_org": -1,
        },
    },
}


def get_plan_config(plan_type: str) -> dict | None:
    return SUBSCRIPTION_PLANS.get(plan_type)


def get_plan_limits(plan_type: str) -> dict | None:
    plan = get_plan_config(plan_type)
    return plan["limits"] if plan else None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
