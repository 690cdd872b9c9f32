import os

from dotenv import dotenv_values


def _flag(name: str, default: str = "false") -> bool:
    return (os.getenv(name, default) or "").strip().lower() in ("1", "true", "yes", "on")


def _csv(name: str) -> list:
    raw = os.getenv(name, "") or ""
    return [part.strip() for part in raw.split(",") if part.strip()]


class BaseConfig:
    # Secrets (env in prod; dev/test may use defaults)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-not-secure")
    WTF_CSRF_SECRET_KEY = SECRET_KEY
    WTF_CSRF_TIME_LIMIT = None

    # Database (env in prod; dev/test may use default)
    _ENV_FALLBACK = dotenv_values(".env")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or _ENV_FALLBACK.get("DATABASE_URL") or "sqlite:///feedbackboard.db"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Cookies: secure-by-default
    SESSION_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Flask-Limiter default: off globally; prefer per-route limits
    RATELIMIT_DEFAULT = None
    SUBMIT_RATE_LIMIT = os.getenv("SUBMIT_RATE_LIMIT", "30 per minute")

    # --- Mail ---
    MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _flag("MAIL_USE_TLS", "true")
    MAIL_USE_SSL = _flag("MAIL_USE_SSL", "false")
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "Feedback Boards <no-reply@local.test>")
    MAIL_SUPPRESS_SEND = _flag("MAIL_SUPPRESS_SEND", "false")

    # Used for absolute links in emails (must be https in prod)
    APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")
    SITE_NAME = os.getenv("SITE_NAME", "Feedback Boards")

    # Email-link sign-in for voters and commenters
    SIGN_IN_TOKEN_SALT = os.getenv("SIGN_IN_TOKEN_SALT", "sign-in-v1")
    SIGN_IN_TOKEN_TTL_MINUTES = int(os.getenv("SIGN_IN_TOKEN_TTL_MINUTES", "15"))

    # CORS for the public submission endpoint (embeddable widget)
    CORS_ALLOWED_ORIGINS = _csv("CORS_ALLOWED_ORIGINS")
    CORS_ALLOW_ALL = _flag("CORS_ALLOW_ALL", "false")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False
    MAIL_SUPPRESS_SEND = True
    CORS_ALLOWED_ORIGINS = BaseConfig.CORS_ALLOWED_ORIGINS + [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:3001",
    ]


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True
    SESSION_COOKIE_SAMESITE = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")
    FORCE_HTTPS = _flag("FORCE_HTTPS", "true")
    MAIL_SUPPRESS_SEND = False


class TestingConfig(BaseConfig):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False
    MAIL_SUPPRESS_SEND = True


_ENV_MAP = {
    "development": DevelopmentConfig,
    "staging": ProductionConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config():
    env = os.environ.get("APP_ENV", "development").lower()
    return _ENV_MAP.get(env, DevelopmentConfig)
