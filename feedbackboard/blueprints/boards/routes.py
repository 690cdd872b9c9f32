from flask import g, request

from feedbackboard.services import boards as board_service
from feedbackboard.services import feedback as feedback_service
from feedbackboard.services.identity import resolve_identity
from feedbackboard.services.policy import require_customer
from ..responses import as_dicts, json_body, respond
from . import bp


def _update_payload(data):
    return {
        "board": data["board"].to_dict(),
        "slug": data["slug"],
        "stale_slug": data["stale_slug"],
    }


@bp.get("")
@require_customer
def list_boards():
    """Dashboard listing: the caller's boards, newest first."""
    return respond(board_service.list_boards_for_owner(g.customer_id), as_dicts)


@bp.post("")
@require_customer
def create_board():
    result = board_service.create_board(g.customer_id, json_body())
    return respond(result, lambda b: b.to_dict(), status=201)


@bp.get("/<slug>")
def get_board(slug):
    """Public view; a private board answers exactly like a missing one."""
    return respond(board_service.get_board_by_slug(slug), lambda b: b.to_dict())


@bp.get("/<slug>/manage")
@require_customer
def get_board_for_owner(slug):
    """Owner view used by dashboard and settings pages."""
    return respond(board_service.get_board_by_slug(slug, requester_id=g.customer_id), lambda b: b.to_dict())


@bp.patch("/<int:board_id>")
@require_customer
def update_board(board_id):
    return respond(board_service.update_board(g.customer_id, board_id, json_body()), _update_payload)


@bp.delete("/<int:board_id>")
@require_customer
def delete_board(board_id):
    return respond(board_service.delete_board(g.customer_id, board_id))


@bp.get("/<int:board_id>/feedback")
def list_feedback(board_id):
    result = feedback_service.list_public(
        board_id,
        type_filter=(request.args.get("type") or None),
        sort=(request.args.get("sort") or feedback_service.SORT_RECENT),
        identity=resolve_identity(),
    )
    return respond(result, as_dicts)


@bp.get("/<int:board_id>/feedback/manage")
@require_customer
def list_feedback_for_owner(board_id):
    result = feedback_service.list_for_owner(g.customer_id, board_id, request.args.get("filter") or None)
    return respond(result, as_dicts)
