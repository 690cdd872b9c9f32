from typing import Any, Callable, Optional

from flask import jsonify, request

from feedbackboard.services.results import ActionResult


def respond(result: ActionResult, serialize: Optional[Callable[[Any], Any]] = None, status: Optional[int] = None):
    """Translate a service ActionResult into a JSON (body, status) pair."""
    if result.ok:
        data = serialize(result.data) if serialize else result.data
        return jsonify({"success": True, "data": data}), status or result.status
    body = {"success": False, "error": result.error, "code": result.code}
    if result.details:
        body["details"] = result.details
    return jsonify(body), result.status


def as_dicts(items):
    return [item.to_dict() for item in items]


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def invalid(field: str, message: str):
    return jsonify({
        "success": False,
        "error": message,
        "code": "validation_error",
        "details": {field: message},
    }), 400
