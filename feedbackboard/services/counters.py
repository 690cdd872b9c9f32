from sqlalchemy import func, update

from feedbackboard.extensions import db
from feedbackboard.models import Comment, Feedback, Vote


def bump(feedback_id: int, column: str, delta: int) -> None:
    """
    In-place counter change (``x = x + delta``) issued in the caller's
    transaction, so it commits or rolls back together with the row change.
    """
    col = getattr(Feedback, column)
    db.session.execute(
        update(Feedback)
        .where(Feedback.id == feedback_id)
        .values({column: col + delta})
        .execution_options(synchronize_session=False)
    )


def recount(feedback_id=None) -> int:
    """
    Recompute vote_count/comment_count from the rows themselves.
    Returns how many feedback rows were corrected. Caller commits.
    """
    votes = (
        db.select(func.count(Vote.id))
        .where(Vote.feedback_id == Feedback.id)
        .scalar_subquery()
    )
    comments = (
        db.select(func.count(Comment.id))
        .where(Comment.feedback_id == Feedback.id)
        .scalar_subquery()
    )
    stmt = (
        update(Feedback)
        .where((Feedback.vote_count != votes) | (Feedback.comment_count != comments))
        .values(vote_count=votes, comment_count=comments)
        .execution_options(synchronize_session=False)
    )
    if feedback_id is not None:
        stmt = stmt.where(Feedback.id == feedback_id)
    return db.session.execute(stmt).rowcount
