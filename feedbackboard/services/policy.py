"""
Authorization gate: the single place that decides who may see or mutate a
board, a feedback item or a comment. Ownership is always board-scoped: an
identity owns a board iff its email matches the Customer whose id is the
board's owner_id. There is no global admin.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import g, jsonify

from feedbackboard.extensions import db
from feedbackboard.models import Board, Comment, Feedback
from feedbackboard.services.identity import Identity, customer_id_for, resolve_identity
from feedbackboard.services.results import Forbidden, NotFound


@dataclass(frozen=True)
class CommentOwnerChain:
    comment_id: int
    author_email: str
    feedback_id: int
    board_id: int
    board_owner_id: int


def resolve_comment_owner_chain(comment_id: int) -> CommentOwnerChain:
    """comment -> feedback -> board -> owner in one query."""
    row = db.session.execute(
        db.select(
            Comment.id,
            Comment.author_email,
            Feedback.id,
            Board.id,
            Board.owner_id,
        )
        .join(Feedback, Feedback.id == Comment.feedback_id)
        .join(Board, Board.id == Feedback.board_id)
        .where(Comment.id == comment_id)
    ).one_or_none()
    if row is None:
        raise NotFound("Comment not found")
    return CommentOwnerChain(*row)


def get_board(board_id: int) -> Board:
    board = db.session.get(Board, board_id)
    if board is None:
        raise NotFound("Board not found")
    return board


def get_feedback(feedback_id: int) -> Feedback:
    feedback = db.session.get(Feedback, feedback_id)
    if feedback is None:
        raise NotFound("Feedback not found")
    return feedback


def owns_board(customer_id: Optional[int], board: Board) -> bool:
    return customer_id is not None and board.owner_id == customer_id


def is_board_owner(identity: Identity, board_id: int) -> bool:
    board = db.session.get(Board, board_id)
    if board is None:
        return False
    return owns_board(customer_id_for(identity), board)


def can_mutate_feedback(identity: Identity, feedback: Feedback) -> bool:
    return is_board_owner(identity, feedback.board_id)


def can_mutate_comment(identity: Identity, comment) -> bool:
    """Content edits: author only. Accepts a Comment or a CommentOwnerChain."""
    return identity.is_identified and comment.author_email == identity.email


def owns_comment_board(identity: Identity, chain: CommentOwnerChain) -> bool:
    customer_id = customer_id_for(identity)
    return customer_id is not None and customer_id == chain.board_owner_id


def can_delete_comment(identity: Identity, chain: CommentOwnerChain) -> bool:
    return can_mutate_comment(identity, chain) or owns_comment_board(identity, chain)


def can_view_board(identity: Identity, board: Board) -> bool:
    return board.is_public or owns_board(customer_id_for(identity), board)


def can_view_feedback(identity: Identity, feedback: Feedback) -> bool:
    board = feedback.board
    if owns_board(customer_id_for(identity), board):
        return True
    return board.is_public and feedback.is_approved


def require_board_owner(customer_id: Optional[int], board: Board, action: str) -> None:
    if not owns_board(customer_id, board):
        raise Forbidden(f"Unauthorized to {action}")


def require_visible_feedback(identity: Identity, feedback_id: int) -> Feedback:
    """Hidden rows fail exactly like missing rows."""
    feedback = get_feedback(feedback_id)
    if not can_view_feedback(identity, feedback):
        raise NotFound("Feedback not found")
    return feedback


# --- Route guards ---------------------------------------------------------

_DENIALS = {401: "unauthorized", 403: "forbidden"}


def _deny(code: int):
    return jsonify({"success": False, "error": _DENIALS[code], "code": _DENIALS[code]}), code


def require_customer(fn):
    """
    Board-owner endpoints: the caller must resolve to a Customer. The id is
    left on ``g.customer_id`` for the view.
    """
    @wraps(fn)
    def _wrap(*args, **kwargs):
        identity = resolve_identity()
        if not identity.is_identified:
            return _deny(401)
        customer_id = customer_id_for(identity)
        if customer_id is None:
            return _deny(403)
        g.customer_id = customer_id
        return fn(*args, **kwargs)
    return _wrap
