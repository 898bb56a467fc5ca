"""
Environment-aware configuration.
Token lifetimes, issuer and audience are fixed in utils.security, not here.
"""
import os
from dotenv import load_dotenv

load_dotenv()  # Read .env if present

DEV_ACCESS_TOKEN_SECRET = "dev-access-token-secret-change-me"
DEV_REFRESH_TOKEN_SECRET = "dev-refresh-token-secret-change-me"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # signs the Flask session (OAuth state)
    DEBUG = False
    TESTING = False
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///secure-auth.db")
    # Frontend: CORS origin and OAuth redirect target
    CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:5173")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", CLIENT_URL)
    # Two independent signing keys: access tokens vs refresh tokens
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", DEV_ACCESS_TOKEN_SECRET)
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", DEV_REFRESH_TOKEN_SECRET)
    COOKIE_SECURE = _flag("COOKIE_SECURE", "false")
    # OAuth providers
    OAUTH_REDIRECT_BASE = os.getenv("OAUTH_REDIRECT_BASE", "http://localhost:5000")
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
    GITHUB_CLIENT_ID = os.getenv("GITHUB_CLIENT_ID")
    GITHUB_CLIENT_SECRET = os.getenv("GITHUB_CLIENT_SECRET")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    SECRET_KEY = "testing-secret-key"
    ACCESS_TOKEN_SECRET = "testing-access-token-secret-0123456789"
    REFRESH_TOKEN_SECRET = "testing-refresh-token-secret-0123456789"
    COOKIE_SECURE = False
    CLIENT_URL = "http://frontend.test"
    OAUTH_REDIRECT_BASE = "http://api.test"
    GOOGLE_CLIENT_ID = "google-client-id"
    GOOGLE_CLIENT_SECRET = "google-client-secret"
    GITHUB_CLIENT_ID = "github-client-id"
    GITHUB_CLIENT_SECRET = "github-client-secret"


class ProductionConfig(BaseConfig):
    DEBUG = False
    COOKIE_SECURE = _flag("COOKIE_SECURE", "true")


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


def check_production_secrets(config) -> None:
    """Refuse to boot a production app on development or shared token secrets."""
    access = config.get("ACCESS_TOKEN_SECRET")
    refresh = config.get("REFRESH_TOKEN_SECRET")
    if not access or not refresh:
        raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set")
    if access in (DEV_ACCESS_TOKEN_SECRET, DEV_REFRESH_TOKEN_SECRET) or refresh in (
        DEV_ACCESS_TOKEN_SECRET,
        DEV_REFRESH_TOKEN_SECRET,
    ):
        raise RuntimeError("Development token secrets cannot be used in production")
    if access == refresh:
        raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
    if config.get("SECRET_KEY") in (None, "", "dev-secret-key"):
        raise RuntimeError("SECRET_KEY must be set in production")
