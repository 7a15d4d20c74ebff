"""Settings validation tests."""

import pytest
from pydantic import ValidationError

from bizcards.config import DEFAULT_JWT_SECRET, Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.login_max_attempts == 3
    assert settings.login_block_hours == 24
    assert settings.biz_number_max_retries == 5
    assert (settings.biz_number_min, settings.biz_number_max) == (1_000_000, 9_999_999)


def test_default_secret_rejected_in_production():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, environment="production", jwt_secret=DEFAULT_JWT_SECRET)


def test_production_with_real_secret():
    settings = Settings(_env_file=None, environment="production", jwt_secret="s3cr3t-value")
    assert settings.is_production


@pytest.mark.parametrize(
    "overrides",
    [
        {"jwt_secret": ""},
        {"login_max_attempts": 0},
        {"login_block_hours": 0},
        {"biz_number_max_retries": 0},
        {"biz_number_min": 10, "biz_number_max": 5},
    ],
)
def test_invalid_settings(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)


@pytest.mark.parametrize(
    "url",
    [
        "postgresql://user:pw@db:5432/bizcards",
        "postgres://user:pw@db:5432/bizcards",
        "postgresql+psycopg2://user:pw@db:5432/bizcards",
    ],
)
def test_postgres_urls_use_psycopg2(url):
    settings = Settings(_env_file=None, database_url=url)
    assert settings.database_url == "postgresql+psycopg2://user:pw@db:5432/bizcards"


def test_sqlite_url_unchanged():
    settings = Settings(_env_file=None, database_url="sqlite:///./local.db")
    assert settings.database_url == "sqlite:///./local.db"
