"""Tests for settings parsing."""

import pytest

from review_pilot.core import Settings


class TestSettings:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("http://a.test, http://b.test", ["http://a.test", "http://b.test"]),
            ('["http://a.test", "http://b.test"]', ["http://a.test", "http://b.test"]),
        ],
    )
    def test_allowed_origins(self, raw, expected):
        assert Settings(ALLOWED_ORIGINS=raw).allowed_origins == expected

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("sqlite:///./data/review-pilot.db", "sqlite+aiosqlite:///./data/review-pilot.db"),
            ("postgresql://u:p@db/reviews", "postgresql+asyncpg://u:p@db/reviews"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_async_database_url(self, url, expected):
        assert Settings(database_url=url).database_url_async == expected

    def test_stripe_needs_both_keys(self):
        assert not Settings(stripe_secret_key="sk_test").stripe_enabled
        assert Settings(stripe_secret_key="sk_test", stripe_webhook_secret="whsec").stripe_enabled

    def test_production_flag(self):
        assert Settings(environment="production").is_production
        assert not Settings(environment="test").is_production
