"""
Public submission endpoint used by the embeddable widget and third-party
sites. Anonymous, CSRF-exempt, rate limited per client, CORS by allow-list.
"""
from flask import current_app, jsonify, make_response, request

from feedbackboard.cors import cors_headers
from feedbackboard.extensions import csrf, limiter
from feedbackboard.services import feedback as feedback_service
from feedbackboard.utils.validators import clean_text
from . import bp

_PUBLIC_FIELDS = {"submitter_email": "user_email"}


def _submit_limit():
    return current_app.config.get("SUBMIT_RATE_LIMIT", "30 per minute")


def _with_cors(resp):
    for key, value in cors_headers(request.headers.get("Origin", ""), current_app.config).items():
        if key == "Vary":
            # Merge; the session layer may add its own Vary values
            resp.vary.add(value)
        else:
            resp.headers[key] = value
    return resp


@bp.route("/feedback", methods=["OPTIONS"])
def submit_preflight():
    return _with_cors(make_response("", 204))


@csrf.exempt
@bp.post("/feedback", provide_automatic_options=False)
@limiter.limit(_submit_limit)
def submit_feedback():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        resp = jsonify({"success": False, "error": "Invalid JSON body", "details": {"body": "Expected a JSON object"}})
        return _with_cors(resp), 400

    board_slug = clean_text(data.get("board_slug"))
    if not board_slug:
        resp = jsonify({"success": False, "error": "Validation failed", "details": {"board_slug": "Board slug is required"}})
        return _with_cors(resp), 400

    result = feedback_service.submit(board_slug, {
        "title": data.get("title"),
        "description": data.get("description"),
        "type": data.get("type"),
        "submitter_email": data.get("user_email"),
    })

    if result.ok:
        feedback = result.data
        message = (
            "Feedback submitted successfully"
            if feedback.is_approved
            else "Feedback submitted and awaiting review"
        )
        resp = jsonify({"success": True, "message": message, "feedback": feedback.to_dict()})
        return _with_cors(resp), 201

    body = {"success": False, "error": result.error}
    if result.code == "validation_error":
        body["error"] = "Validation failed"
        # Report fields under the names this endpoint accepts
        body["details"] = {_PUBLIC_FIELDS.get(k, k): v for k, v in result.details.items()}
    return _with_cors(jsonify(body)), result.status
