import json
import time
from typing import Any, Dict, Optional
from urllib.parse import urlencode, urljoin

from flask import current_app, render_template
from flask_mail import Message

from feedbackboard.extensions import mail
from . import tokens


def absolute_url(path: str) -> str:
    base = current_app.config["APP_BASE_URL"].rstrip("/") + "/"
    return urljoin(base, path.lstrip("/"))


def send_email(to_email: str, subject: str, template: str, context: Optional[Dict[str, Any]] = None) -> bool:
    """
    template: basename under templates/email/ without extension.
    Renders both HTML and plaintext. Returns True when handed to the mail backend.
    """
    context = context or {}
    msg = Message(recipients=[to_email], subject=subject)
    msg.body = render_template(f"email/{template}.txt", **context)
    msg.html = render_template(f"email/{template}.html", **context)

    start = time.perf_counter()
    try:
        mail.send(msg)
    except Exception as ex:  # SMTP/transport errors are reported, not raised to the caller
        current_app.logger.warning(json.dumps({
            "event": "mail_send",
            "template": template,
            "to": to_email,
            "outcome": "smtp_error",
            "latency_ms": int((time.perf_counter() - start) * 1000),
            "smtp_error": str(ex),
        }))
        return False
    current_app.logger.info(json.dumps({
        "event": "mail_send",
        "template": template,
        "to": to_email,
        "outcome": "sent",
        "latency_ms": int((time.perf_counter() - start) * 1000),
    }))
    return True


def send_sign_in_link(email: str, next_path: Optional[str] = None) -> bool:
    ttl = int(current_app.config.get("SIGN_IN_TOKEN_TTL_MINUTES", 15))
    params = {"token": tokens.generate(tokens.SIGN_IN, email)}
    if next_path:
        params["next"] = next_path
    ctx = {
        "site_name": current_app.config.get("SITE_NAME", "Feedback Boards"),
        "action_url": absolute_url(f"auth/email-link/verify?{urlencode(params)}"),
        "token_ttl_minutes": ttl,
    }
    return send_email(to_email=email, subject="Your sign-in link", template="sign_in", context=ctx)
