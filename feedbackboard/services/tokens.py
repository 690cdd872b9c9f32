from typing import Optional
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from flask import current_app

SIGN_IN = "sign-in"


def _serializer() -> URLSafeTimedSerializer:
    secret = current_app.config["SECRET_KEY"]
    salt = current_app.config.get("SIGN_IN_TOKEN_SALT", "sign-in-v1")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)


def generate(kind: str, email: str) -> str:
    """kind: what the token is for; email: lower-cased identity."""
    return _serializer().dumps({"k": kind, "e": email})


def verify(kind: str, token: str, max_age_seconds: int) -> Optional[str]:
    try:
        data = _serializer().loads(token, max_age=max_age_seconds)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict) or data.get("k") != kind:
        return None
    return data.get("e")
