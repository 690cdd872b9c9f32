from flask_talisman import Talisman

# JSON-only service: nothing here is rendered as a page or framed
API_CSP = {
    "default-src": ["'none'"],
    "frame-ancestors": ["'none'"],
    "base-uri": ["'none'"],
    "form-action": ["'none'"],
}


def init_security(app):
    """
    Staging/production headers. HTTPS redirect and HSTS follow FORCE_HTTPS so
    a TLS-terminating proxy can turn them off; the widget endpoint's CORS
    headers are added by the api blueprint and are not touched here.
    """
    force_https = app.config.get("FORCE_HTTPS", True)
    return Talisman(
        app,
        content_security_policy=API_CSP,
        force_https=force_https,
        strict_transport_security=force_https,
        session_cookie_secure=app.config.get("SESSION_COOKIE_SECURE", True),
        frame_options="DENY",
        referrer_policy="no-referrer",
    )
