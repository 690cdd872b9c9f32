from flask import current_app, jsonify, redirect, request, session
from flask_login import current_user, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from sqlalchemy import func

from feedbackboard.extensions import csrf, db, limiter
from feedbackboard.models import Customer
from feedbackboard.services import email as email_service
from feedbackboard.services import tokens
from feedbackboard.services.identity import SESSION_EMAIL_KEY, customer_for, normalize_email, resolve_identity
from feedbackboard.utils.validators import clean_text, is_valid_email
from ..responses import json_body
from . import bp


def _login_email_scope():
    data = request.get_json(silent=True) or {}
    email = normalize_email(data.get("email") if isinstance(data, dict) else None)
    return f"login-email:{email or 'missing'}"


# Only allow internal paths like "/acme" (no external URLs or "//" protocol-relative).
def _safe_next_path(next_raw):
    next_raw = clean_text(next_raw)
    if next_raw.startswith("/") and not next_raw.startswith("//"):
        return next_raw
    return None


@csrf.exempt
@bp.get("/csrf-token")
def csrf_token():
    token = generate_csrf()
    resp = jsonify({"csrf_token": token})
    resp.headers["Cache-Control"] = "no-store"
    return resp


@bp.post("/login")
@limiter.limit("10 per minute; 100 per hour")
@limiter.limit("5 per minute; 20 per hour", key_func=_login_email_scope)
def login_post():
    """Board-owner sign in (email + password)."""
    data = json_body()
    email = normalize_email(data.get("email"))
    password = data.get("password") or ""
    if not email or not password:
        return jsonify({"success": False, "error": "Email and password are required", "code": "validation_error"}), 400

    customer = db.session.execute(
        db.select(Customer).where(func.lower(Customer.email) == email)
    ).scalar_one_or_none()
    if not customer or not customer.check_password(password):
        return jsonify({"success": False, "error": "Invalid credentials", "code": "unauthenticated"}), 401

    login_user(customer)
    session[SESSION_EMAIL_KEY] = customer.email
    return jsonify({"success": True, "data": {"email": customer.email, "customer_id": customer.id}}), 200


@bp.post("/logout")
def logout_post():
    if current_user.is_authenticated:
        logout_user()
    session.pop(SESSION_EMAIL_KEY, None)
    return jsonify({"success": True}), 200


@bp.post("/email-link")
@limiter.limit("5 per minute; 20 per hour")
@limiter.limit("3 per 10 minutes", key_func=_login_email_scope)
def email_link_request():
    """Voter/commenter sign in: mail a signed, short-lived link."""
    data = json_body()
    email = normalize_email(data.get("email"))
    if not is_valid_email(email):
        return jsonify({
            "success": False,
            "error": "Invalid email address",
            "code": "validation_error",
            "details": {"email": "Invalid email address"},
        }), 400
    email_service.send_sign_in_link(email, next_path=_safe_next_path(data.get("next")))
    # Same answer whether or not the address is known
    return jsonify({"success": True, "message": "Check your email for a sign-in link"}), 202


@bp.get("/email-link/verify")
def email_link_verify():
    token = (request.args.get("token") or "").strip()
    ttl = int(current_app.config.get("SIGN_IN_TOKEN_TTL_MINUTES", 15)) * 60
    email = tokens.verify(tokens.SIGN_IN, token, max_age_seconds=ttl) if token else None
    if not email:
        return jsonify({"success": False, "error": "Invalid or expired sign-in link", "code": "unauthenticated"}), 400

    session[SESSION_EMAIL_KEY] = normalize_email(email)
    next_path = _safe_next_path(request.args.get("next"))
    if next_path:
        return redirect(next_path)
    return jsonify({"success": True, "data": {"email": session[SESSION_EMAIL_KEY]}}), 200


@bp.get("/me")
def me():
    identity = resolve_identity()
    customer = customer_for(identity)
    return jsonify({
        "success": True,
        "data": {
            "authenticated": identity.is_identified,
            "email": identity.email,
            "customer_id": customer.id if customer else None,
        },
    }), 200
