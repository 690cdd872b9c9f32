"""
Comment thread on a feedback item.

Authors edit their own comments; authors or the board owner may delete;
only the board owner marks official responses. Ownership checks go through
``policy.resolve_comment_owner_chain`` rather than walking relations here.
"""
from __future__ import annotations

from typing import List

from feedbackboard.extensions import db
from feedbackboard.models import CONTENT_MAX_LEN, Comment, Feedback
from feedbackboard.models._time import utcnow
from feedbackboard.services import counters, policy
from feedbackboard.services.identity import ANONYMOUS, Identity
from feedbackboard.services.results import Forbidden, NotFound, Unauthenticated, ValidationError, service_action


def _require_identified(identity: Identity, action: str) -> None:
    if not identity.is_identified:
        raise Unauthenticated(f"You must be signed in to {action}")


def _clean_content(content) -> str:
    text = (content or "").strip() if isinstance(content, str) else ""
    if not text:
        raise ValidationError("Comment cannot be empty", details={"content": "Comment cannot be empty"})
    if len(text) > CONTENT_MAX_LEN:
        raise ValidationError(
            f"Comment must be {CONTENT_MAX_LEN} characters or less",
            details={"content": f"Comment must be {CONTENT_MAX_LEN} characters or less"},
        )
    return text


def _get_comment(comment_id: int) -> Comment:
    comment = db.session.get(Comment, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    return comment


@service_action("create_comment")
def create(identity: Identity, feedback_id: int, content: str) -> Comment:
    _require_identified(identity, "comment")
    text = _clean_content(content)
    feedback = db.session.execute(
        db.select(Feedback).where(Feedback.id == feedback_id).with_for_update()
    ).scalar_one_or_none()
    if feedback is None or not policy.can_view_board(identity, feedback.board):
        raise NotFound("Feedback not found")
    if not feedback.is_approved:
        raise Forbidden("Cannot comment on unapproved feedback")

    comment = Comment(
        feedback_id=feedback.id,
        author_email=identity.email,
        content=text,
        is_official=False,
    )
    db.session.add(comment)
    db.session.flush()
    counters.bump(feedback.id, "comment_count", 1)
    db.session.commit()
    return comment


@service_action("update_comment")
def update(identity: Identity, comment_id: int, content: str) -> Comment:
    _require_identified(identity, "update comments")
    text = _clean_content(content)
    comment = _get_comment(comment_id)
    if not policy.can_mutate_comment(identity, comment):
        raise Forbidden("You can only update your own comments")
    comment.content = text
    comment.edited_at = utcnow()
    db.session.commit()
    return comment


@service_action("delete_comment")
def delete(identity: Identity, comment_id: int) -> None:
    _require_identified(identity, "delete comments")
    chain = policy.resolve_comment_owner_chain(comment_id)
    if not policy.can_delete_comment(identity, chain):
        raise Forbidden("You can only delete your own comments")
    removed = db.session.execute(
        db.delete(Comment)
        .where(Comment.id == chain.comment_id)
        .execution_options(synchronize_session="fetch")
    ).rowcount
    if removed:
        counters.bump(chain.feedback_id, "comment_count", -removed)
    db.session.commit()


@service_action("mark_comment_official")
def mark_official(identity: Identity, comment_id: int, is_official: bool) -> Comment:
    _require_identified(identity, "mark comments as official")
    chain = policy.resolve_comment_owner_chain(comment_id)
    if not policy.owns_comment_board(identity, chain):
        raise Forbidden("Only board owners can mark comments as official")
    comment = _get_comment(chain.comment_id)
    comment.is_official = bool(is_official)
    db.session.commit()
    return comment


@service_action("list_comments")
def list_for_feedback(feedback_id: int, identity: Identity = ANONYMOUS) -> List[Comment]:
    feedback = db.session.get(Feedback, feedback_id)
    if feedback is None or not policy.can_view_board(identity, feedback.board):
        raise NotFound("Feedback not found")
    return list(
        db.session.execute(
            db.select(Comment)
            .where(Comment.feedback_id == feedback_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        ).scalars()
    )


@service_action("count_comments")
def count(feedback_id: int) -> int:
    return db.session.execute(
        db.select(db.func.count(Comment.id)).where(Comment.feedback_id == feedback_id)
    ).scalar_one()
