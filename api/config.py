"""
Environment-aware configuration.
Token lifetimes, lockout policy and the cleanup cadence all live here;
the database URL is read by DBStorage directly.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # jwt configurations
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "session-auth-api")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "1800")))
    REFRESH_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("REFRESH_TOKEN_EXPIRES_HOURS", "24")))
    REMEMBER_ME_REFRESH_EXPIRES = timedelta(days=int(os.getenv("REMEMBER_ME_REFRESH_EXPIRES_DAYS", "30")))
    # Legacy rows without a stored remember-me flag are classified by lifetime
    REMEMBER_ME_THRESHOLD = timedelta(days=2)

    # Lockout
    MAX_FAILED_LOGINS = int(os.getenv("MAX_FAILED_LOGINS", "10"))
    LOCKOUT_DURATION = timedelta(hours=int(os.getenv("LOCKOUT_DURATION_HOURS", "24")))

    # Session cleanup
    REVOKED_SESSION_RETENTION = timedelta(days=int(os.getenv("REVOKED_SESSION_RETENTION_DAYS", "7")))
    CLEANUP_DAILY_INTERVAL = timedelta(hours=24)
    CLEANUP_HOURLY_INTERVAL = timedelta(hours=1)
    CLEANUP_ENABLED = _env_bool("CLEANUP_ENABLED", "true")

    # argon2 cost parameters (None keeps the library defaults)
    ARGON2_TIME_COST = int(os.getenv("ARGON2_TIME_COST")) if os.getenv("ARGON2_TIME_COST") else None
    ARGON2_MEMORY_COST = int(os.getenv("ARGON2_MEMORY_COST")) if os.getenv("ARGON2_MEMORY_COST") else None


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True


class TestingConfig(BaseConfig):
    TESTING = True
    JWT_SECRET = "test-secret-for-signing-tokens-0123456789"
    CLEANUP_ENABLED = False
    # Cheap hashing keeps the lockout tests fast
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 1024


class ProductionConfig(BaseConfig):
    DEBUG = False


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
