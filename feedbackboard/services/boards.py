from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from feedbackboard.extensions import db
from feedbackboard.models import Board, Customer
from feedbackboard.services import policy
from feedbackboard.services.results import Conflict, Forbidden, NotFound, ValidationError, service_action
from feedbackboard.utils.validators import (
    BOARD_NAME_MAX_LEN,
    BOARD_NAME_MIN_LEN,
    as_bool,
    clean_str,
    clean_text,
    slug_error,
)

_UPDATABLE = ("name", "description", "slug", "is_public", "requires_approval")


def _validate_fields(data: Dict[str, Any], *, partial: bool) -> Dict[str, Any]:
    errors: Dict[str, str] = {}
    cleaned: Dict[str, Any] = {}

    if not partial or "name" in data:
        name = clean_str(data.get("name"))
        if not name or len(name) < BOARD_NAME_MIN_LEN:
            errors["name"] = f"Board name must be at least {BOARD_NAME_MIN_LEN} characters"
        elif len(name) > BOARD_NAME_MAX_LEN:
            errors["name"] = f"Board name must be {BOARD_NAME_MAX_LEN} characters or less"
        cleaned["name"] = name

    if not partial or "slug" in data:
        slug = clean_text(data.get("slug"))
        err = slug_error(slug)
        if err:
            errors["slug"] = err
        cleaned["slug"] = slug

    if not partial or "description" in data:
        cleaned["description"] = clean_text(data.get("description")) or None

    if not partial or "is_public" in data:
        cleaned["is_public"] = as_bool(data.get("is_public"), default=False)
    if not partial or "requires_approval" in data:
        cleaned["requires_approval"] = as_bool(data.get("requires_approval"), default=True)

    if errors:
        raise ValidationError("Invalid board settings", details=errors)
    return cleaned


def _slug_taken(slug: str, exclude_id: Optional[int] = None) -> bool:
    q = db.select(Board.id).where(Board.slug == slug)
    if exclude_id is not None:
        q = q.where(Board.id != exclude_id)
    return db.session.execute(q).first() is not None


def _flush_or_conflict() -> None:
    # The unique index is the real guard; the pre-check only gives a nicer message
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("This slug is already taken", details={"slug": "This slug is already taken"})


@service_action("create_board")
def create_board(owner_id: int, data: Dict[str, Any]) -> Board:
    if db.session.get(Customer, owner_id) is None:
        raise Forbidden("Only customers can create boards")
    fields = _validate_fields(data or {}, partial=False)
    if _slug_taken(fields["slug"]):
        raise Conflict("This slug is already taken", details={"slug": "This slug is already taken"})

    board = Board(owner_id=owner_id, **fields)
    db.session.add(board)
    _flush_or_conflict()
    db.session.commit()
    return board


@service_action("update_board")
def update_board(owner_id: int, board_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Partial update. Returns {"board", "slug", "stale_slug"}; stale_slug is the
    previous slug when it changed so callers can redirect old URLs.
    """
    board = policy.get_board(board_id)
    policy.require_board_owner(owner_id, board, "update this board")

    fields = _validate_fields({k: v for k, v in (data or {}).items() if k in _UPDATABLE}, partial=True)
    old_slug = board.slug
    new_slug = fields.get("slug")
    if new_slug and new_slug != old_slug and _slug_taken(new_slug, exclude_id=board.id):
        raise Conflict("This slug is already taken", details={"slug": "This slug is already taken"})

    for key, value in fields.items():
        setattr(board, key, value)
    _flush_or_conflict()
    db.session.commit()
    return {
        "board": board,
        "slug": board.slug,
        "stale_slug": old_slug if board.slug != old_slug else None,
    }


@service_action("delete_board")
def delete_board(owner_id: int, board_id: int) -> None:
    board = policy.get_board(board_id)
    policy.require_board_owner(owner_id, board, "delete this board")
    # ORM cascade removes feedback, then its votes and comments
    db.session.delete(board)
    db.session.commit()


@service_action("get_board_by_slug")
def get_board_by_slug(slug: str, requester_id: Optional[int] = None) -> Board:
    """
    With requester_id: owner view, the board must belong to that customer.
    Without: public view; a private board is indistinguishable from a missing one.
    """
    board = db.session.execute(
        db.select(Board).where(Board.slug == clean_text(slug))
    ).scalar_one_or_none()
    if board is None:
        raise NotFound("Board not found")
    if requester_id is not None:
        policy.require_board_owner(requester_id, board, "access this board")
        return board
    if not board.is_public:
        raise NotFound("Board not found")
    return board


@service_action("list_boards_for_owner")
def list_boards_for_owner(owner_id: int) -> List[Board]:
    return list(
        db.session.execute(
            db.select(Board)
            .where(Board.owner_id == owner_id)
            .order_by(Board.created_at.desc(), Board.id.desc())
        ).scalars()
    )
