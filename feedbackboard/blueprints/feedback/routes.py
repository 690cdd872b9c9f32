from flask import g, request

from feedbackboard.extensions import limiter
from feedbackboard.services import feedback as feedback_service
from feedbackboard.services import votes as vote_service
from feedbackboard.services.identity import resolve_identity
from feedbackboard.services.policy import require_customer
from ..responses import json_body, respond
from . import bp


def _to_dict(feedback):
    return feedback.to_dict()


def _parse_ids(raw):
    ids = []
    for part in (raw or "").split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return ids


@bp.get("/votes")
def user_votes():
    """Vote status for a page of items: ``?ids=1,2,3`` -> {"1": true, ...}."""
    result = vote_service.get_user_votes(resolve_identity(), _parse_ids(request.args.get("ids")))
    return respond(result, lambda m: {str(k): v for k, v in m.items()})


@bp.get("/<int:feedback_id>")
def get_feedback(feedback_id):
    return respond(feedback_service.get(resolve_identity(), feedback_id), _to_dict)


@bp.post("/<int:feedback_id>/approve")
@require_customer
def approve(feedback_id):
    return respond(feedback_service.approve(g.customer_id, feedback_id), _to_dict)


@bp.patch("/<int:feedback_id>/status")
@require_customer
def set_status(feedback_id):
    status = json_body().get("status")
    return respond(feedback_service.set_status(g.customer_id, feedback_id, status), _to_dict)


@bp.delete("/<int:feedback_id>")
@require_customer
def delete_feedback(feedback_id):
    return respond(feedback_service.delete(g.customer_id, feedback_id))


@bp.post("/<int:feedback_id>/vote")
@limiter.limit("60 per minute")
def toggle_vote(feedback_id):
    return respond(vote_service.toggle_vote(resolve_identity(), feedback_id))


@bp.get("/<int:feedback_id>/vote")
def vote_status(feedback_id):
    return respond(vote_service.get_user_vote(resolve_identity(), feedback_id))
