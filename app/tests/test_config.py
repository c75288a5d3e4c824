"""
Tests for configuration validation
"""
import pytest
from pydantic import ValidationError
from app.core.config import Settings


def _settings(**overrides):
    values = {
        "DATABASE_URL": "sqlite:///:memory:",
        "JWT_SECRET_KEY": "test-key",
    }
    values.update(overrides)
    return Settings(**values)


def test_prod_settings_rejects_wildcard_origins():
    """Production refuses the '*' CORS wildcard"""
    settings = _settings(JWT_SECRET_KEY="a" * 32, APP_ENV="prod", ALLOWED_ORIGINS="*")

    with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
        settings.validate_production()


def test_prod_settings_rejects_short_jwt_secret():
    """Production needs a JWT secret of at least 32 characters"""
    settings = _settings(JWT_SECRET_KEY="short", APP_ENV="prod", ALLOWED_ORIGINS="https://elra.example")

    with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
        settings.validate_production()


def test_prod_settings_accepts_explicit_origins():
    settings = _settings(JWT_SECRET_KEY="a" * 32, APP_ENV="prod", ALLOWED_ORIGINS="https://elra.example")
    settings.validate_production()


def test_local_settings_allows_wildcard_origins():
    """Local environment keeps the wildcard"""
    settings = _settings(APP_ENV="local", ALLOWED_ORIGINS="*")

    settings.validate_production()
    assert settings.get_allowed_origins_list() == ["*"]


def test_get_allowed_origins_list():
    """Test parsing of ALLOWED_ORIGINS"""
    settings = _settings(ALLOWED_ORIGINS="https://elra.example, https://admin.elra.example,")

    assert settings.get_allowed_origins_list() == [
        "https://elra.example",
        "https://admin.elra.example",
    ]


def test_unknown_app_env_rejected():
    with pytest.raises(ValidationError):
        _settings(APP_ENV="qa")


def test_log_level_normalised_to_upper_case():
    assert _settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    with pytest.raises(ValidationError):
        _settings(LOG_LEVEL="chatty")


def test_bcrypt_rounds_bounds():
    assert _settings(BCRYPT_ROUNDS=4).BCRYPT_ROUNDS == 4

    with pytest.raises(ValidationError):
        _settings(BCRYPT_ROUNDS=2)
