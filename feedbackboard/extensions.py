from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf import CSRFProtect
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_mail import Mail

db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()
login_manager = LoginManager()


def _rate_limit_key():
    # Key: signed-in customer, then email-link identity, otherwise client IP
    try:
        from flask import session
        from flask_login import current_user
        if getattr(current_user, "is_authenticated", False) and getattr(current_user, "id", None):
            return f"customer:{current_user.id}"
        email = session.get("identity_email")
        if email:
            return f"email:{email}"
    except RuntimeError:
        pass
    return get_remote_address()

# Storage is configured in create_app() via limiter.init_app(...).
limiter = Limiter(key_func=_rate_limit_key)

mail = Mail()
