import os

from flask import Flask, jsonify

# Load .env only for local/dev. In prod, env vars come from the platform.
if os.getenv("APP_ENV", "development") != "production":
    from dotenv import load_dotenv
    load_dotenv(".env", override=False)


from .config import get_config
from .extensions import db, migrate, csrf, login_manager, limiter, mail
from .security import init_security
from .observability import init_logging, init_sentry


def create_app(config_overrides=None):
    app = Flask(__name__, template_folder="templates")

    # ---- Rate limiting storage ----
    app_env = (os.getenv("APP_ENV", "development") or "development").lower()
    use_redis = app_env in ("staging", "production")
    storage_uri = os.environ.get("REDIS_URL") if use_redis else "memory://"
    if use_redis and not storage_uri:
        # Hard fail in stage/prod so we never silently run without RL storage
        raise RuntimeError("REDIS_URL is required in staging/production for rate limiting")
    app.config["RATELIMIT_STORAGE_URI"] = storage_uri
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)

    app.config.from_object(get_config())
    if config_overrides:
        app.config.update(config_overrides)

    # --- Required env validation for prod-like envs (staging/production) ---
    def _require(name: str):
        val = os.getenv(name)
        if not val:
            raise RuntimeError(f"Missing required environment variable: {name}")
        return val

    if app_env in ("staging", "production"):
        _require("SECRET_KEY")
        _require("DATABASE_URL")

    init_logging(app)
    init_sentry(app)

    if app_env in ("staging", "production"):
        init_security(app)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=os.path.join(os.path.dirname(app.root_path), "migrations"))
    csrf.init_app(app)
    login_manager.init_app(app)
    limiter.init_app(app)
    mail.init_app(app)

    # Models must be imported before create_all / migrations see the metadata
    from . import models  # noqa: F401

    from .blueprints.auth import bp as auth_bp
    from .blueprints.boards import bp as boards_bp
    from .blueprints.feedback import bp as feedback_bp
    from .blueprints.comments import bp as comments_bp
    from .blueprints.api import bp as api_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(boards_bp, url_prefix="/boards")
    app.register_blueprint(feedback_bp, url_prefix="/feedback")
    app.register_blueprint(comments_bp)
    app.register_blueprint(api_bp, url_prefix="/api")

    @limiter.exempt
    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    _register_error_handlers(app)

    # CLI commands (ops-grade utilities)
    from .cli import register_cli
    register_cli(app)

    return app


def _register_error_handlers(app):
    def _json_error(code: str, status: int, message: str, **extra):
        payload = {"success": False, "error": message, "code": code, **extra}
        return jsonify(payload), status

    @app.errorhandler(400)
    def bad_request(e):
        return _json_error("bad_request", 400, "Bad request")

    @app.errorhandler(401)
    def unauthorized(e):
        return _json_error("unauthorized", 401, "Sign in required")

    @app.errorhandler(403)
    def forbidden(e):
        return _json_error("forbidden", 403, "Forbidden")

    @app.errorhandler(404)
    def not_found(e):
        return _json_error("not_found", 404, "Not found")

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _json_error("method_not_allowed", 405, "Method not allowed")

    # 429 Too Many Requests with Retry-After
    @app.errorhandler(429)
    def too_many_requests(e):
        retry_after = getattr(e, "retry_after", None)
        headers = {}
        extra = {}
        if retry_after is not None:
            headers["Retry-After"] = str(int(retry_after))
            extra["retry_after"] = int(retry_after)
        body, status = _json_error("rate_limited", 429, "Too many requests", **extra)
        return body, status, headers

    @app.errorhandler(500)
    def server_error(e):
        return _json_error("internal", 500, "An unexpected error occurred")

    # CSRF error handler (clean 400 instead of generic 500)
    from flask_wtf.csrf import CSRFError

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        return _json_error("csrf_failed", 400, f"CSRF validation failed: {e.description}")
