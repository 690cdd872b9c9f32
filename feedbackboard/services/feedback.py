"""
Feedback lifecycle.

Two orthogonal axes: ``status`` (open / in_progress / completed / declined,
any -> any for the owner) and approval (pending -> approved, forward only).
New items start ``open`` and are approved up front iff their board does not
require review. Vote and comment counters are owned by the vote and comment
services and are never written here.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from feedbackboard.extensions import db
from feedbackboard.models import Board, Feedback, STATUS_CHOICES, STATUS_OPEN, TYPE_CHOICES
from feedbackboard.services import policy
from feedbackboard.services.identity import ANONYMOUS, Identity, normalize_email
from feedbackboard.services.results import NotFound, ValidationError, service_action
from feedbackboard.utils.validators import (
    DESCRIPTION_MIN_LEN,
    TITLE_MAX_LEN,
    TITLE_MIN_LEN,
    clean_str,
    clean_text,
    is_valid_email,
)

SORT_RECENT = "recent"
SORT_VOTES = "votes"
SORT_CHOICES = (SORT_RECENT, SORT_VOTES)

FILTER_ALL = "all"
FILTER_PENDING = "pending"
FILTER_APPROVED = "approved"
APPROVAL_FILTERS = (FILTER_ALL, FILTER_PENDING, FILTER_APPROVED)


def validate_submission(data: Dict[str, Any]) -> Dict[str, Any]:
    """Field-level checks for a new feedback item; raises ValidationError with details."""
    errors: Dict[str, str] = {}

    title = clean_str(data.get("title"))
    if not title or len(title) < TITLE_MIN_LEN:
        errors["title"] = f"Title must be at least {TITLE_MIN_LEN} characters"
    elif len(title) > TITLE_MAX_LEN:
        errors["title"] = f"Title must be {TITLE_MAX_LEN} characters or less"

    description = clean_text(data.get("description"))
    if len(description) < DESCRIPTION_MIN_LEN:
        errors["description"] = f"Description must be at least {DESCRIPTION_MIN_LEN} characters"

    ftype = clean_text(data.get("type"))
    if ftype not in TYPE_CHOICES:
        errors["type"] = f"Type must be one of: {', '.join(TYPE_CHOICES)}"

    raw_email = data.get("submitter_email")
    email = normalize_email(raw_email)
    if (raw_email is not None and not isinstance(raw_email, str)) or (email and not is_valid_email(email)):
        errors["submitter_email"] = "Invalid email address"

    if errors:
        raise ValidationError("Invalid feedback", details=errors)
    return {
        "title": title,
        "description": description,
        "type": ftype,
        "submitter_email": email or None,
    }


@service_action("submit_feedback")
def submit(board_slug: str, data: Dict[str, Any]) -> Feedback:
    """Only creation path; open to anonymous callers (widget, public page)."""
    fields = validate_submission(data or {})
    board = db.session.execute(
        db.select(Board).where(Board.slug == clean_text(board_slug))
    ).scalar_one_or_none()
    if board is None:
        raise NotFound("Board not found")

    feedback = Feedback(
        board_id=board.id,
        status=STATUS_OPEN,
        is_approved=not board.requires_approval,
        vote_count=0,
        comment_count=0,
        **fields,
    )
    db.session.add(feedback)
    db.session.commit()
    return feedback


def _owned_feedback(owner_id: int, feedback_id: int, action: str) -> Feedback:
    feedback = policy.get_feedback(feedback_id)
    policy.require_board_owner(owner_id, feedback.board, action)
    return feedback


@service_action("approve_feedback")
def approve(owner_id: int, feedback_id: int) -> Feedback:
    feedback = _owned_feedback(owner_id, feedback_id, "approve this feedback")
    if not feedback.is_approved:
        feedback.is_approved = True
        db.session.commit()
    return feedback


@service_action("set_feedback_status")
def set_status(owner_id: int, feedback_id: int, new_status: str) -> Feedback:
    if new_status not in STATUS_CHOICES:
        raise ValidationError("Invalid status value", details={"status": f"Status must be one of: {', '.join(STATUS_CHOICES)}"})
    feedback = _owned_feedback(owner_id, feedback_id, "update this feedback")
    feedback.status = new_status
    db.session.commit()
    return feedback


@service_action("delete_feedback")
def delete(owner_id: int, feedback_id: int) -> None:
    feedback = _owned_feedback(owner_id, feedback_id, "delete this feedback")
    db.session.delete(feedback)
    db.session.commit()


@service_action("get_feedback")
def get(identity: Identity, feedback_id: int) -> Feedback:
    return policy.require_visible_feedback(identity, feedback_id)


def _ordered(query, sort: str):
    if sort == SORT_VOTES:
        query = query.order_by(Feedback.vote_count.desc())
    # Ties (and the default) fall back to newest first, then id for full stability
    return query.order_by(Feedback.created_at.desc(), Feedback.id.desc())


@service_action("list_public_feedback")
def list_public(
    board_id: int,
    type_filter: Optional[str] = None,
    sort: str = SORT_RECENT,
    identity: Identity = ANONYMOUS,
) -> List[Feedback]:
    board = policy.get_board(board_id)
    if not policy.can_view_board(identity, board):
        raise NotFound("Board not found")
    if type_filter in (None, "", FILTER_ALL):
        type_filter = None
    elif type_filter not in TYPE_CHOICES:
        raise ValidationError("Invalid type filter", details={"type": f"Type must be one of: all, {', '.join(TYPE_CHOICES)}"})
    if sort not in SORT_CHOICES:
        raise ValidationError("Invalid sort", details={"sort": f"Sort must be one of: {', '.join(SORT_CHOICES)}"})

    query = db.select(Feedback).where(Feedback.board_id == board.id, Feedback.is_approved.is_(True))
    if type_filter:
        query = query.where(Feedback.type == type_filter)
    return list(db.session.execute(_ordered(query, sort)).scalars())


@service_action("list_owner_feedback")
def list_for_owner(owner_id: int, board_id: int, approval_filter: Optional[str] = None) -> List[Feedback]:
    board = policy.get_board(board_id)
    policy.require_board_owner(owner_id, board, "access board feedback")
    approval_filter = approval_filter or FILTER_ALL
    if approval_filter not in APPROVAL_FILTERS:
        raise ValidationError("Invalid filter", details={"filter": f"Filter must be one of: {', '.join(APPROVAL_FILTERS)}"})

    query = db.select(Feedback).where(Feedback.board_id == board.id)
    if approval_filter == FILTER_PENDING:
        query = query.where(Feedback.is_approved.is_(False))
    elif approval_filter == FILTER_APPROVED:
        query = query.where(Feedback.is_approved.is_(True))
    return list(db.session.execute(_ordered(query, SORT_RECENT)).scalars())

