"""
Vote ledger: one vote per (feedback, email), exposed only as a toggle.

The toggle deletes first and inserts only when nothing was deleted. The
unique constraint on (feedback_id, voter_email) settles races between two
toggles from the same identity: the loser's insert fails, and it then
removes the winner's committed row, so the final state still follows the
parity of the calls. The counter moves in the same transaction.
"""
from __future__ import annotations

from typing import Dict, Iterable

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError

from feedbackboard.extensions import db
from feedbackboard.models import Feedback, Vote
from feedbackboard.services import counters, policy
from feedbackboard.services.identity import Identity
from feedbackboard.services.results import Forbidden, NotFound, Unauthenticated, service_action


def _lock_votable(identity: Identity, feedback_id: int) -> Feedback:
    feedback = db.session.execute(
        db.select(Feedback).where(Feedback.id == feedback_id).with_for_update()
    ).scalar_one_or_none()
    if feedback is None:
        raise NotFound("Feedback not found")
    if not policy.can_view_board(identity, feedback.board):
        raise NotFound("Feedback not found")
    if not feedback.is_approved:
        raise Forbidden("Cannot vote on unapproved feedback")
    return feedback


def _remove(feedback_id: int, email: str) -> int:
    removed = db.session.execute(
        delete(Vote)
        .where(Vote.feedback_id == feedback_id, Vote.voter_email == email)
        .execution_options(synchronize_session=False)
    ).rowcount
    if removed:
        counters.bump(feedback_id, "vote_count", -removed)
    return removed


def _toggle(feedback_id: int, email: str) -> bool:
    if _remove(feedback_id, email):
        return False
    try:
        with db.session.begin_nested():
            db.session.execute(insert(Vote).values(feedback_id=feedback_id, voter_email=email))
    except IntegrityError:
        # A concurrent toggle inserted first and committed
        _remove(feedback_id, email)
        return False
    counters.bump(feedback_id, "vote_count", 1)
    return True


@service_action("toggle_vote")
def toggle_vote(identity: Identity, feedback_id: int) -> Dict[str, object]:
    if not identity.is_identified:
        raise Unauthenticated("You must be signed in to vote")
    feedback = _lock_votable(identity, feedback_id)
    has_voted = _toggle(feedback.id, identity.email)
    db.session.commit()
    vote_count = db.session.execute(
        db.select(Feedback.vote_count).where(Feedback.id == feedback_id)
    ).scalar_one()
    return {"has_voted": has_voted, "vote_count": vote_count}


@service_action("get_user_vote")
def get_user_vote(identity: Identity, feedback_id: int) -> Dict[str, bool]:
    if not identity.is_identified:
        return {"has_voted": False}
    row = db.session.execute(
        db.select(Vote.id).where(Vote.feedback_id == feedback_id, Vote.voter_email == identity.email)
    ).first()
    return {"has_voted": row is not None}


@service_action("get_user_votes")
def get_user_votes(identity: Identity, feedback_ids: Iterable[int]) -> Dict[int, bool]:
    ids = list(feedback_ids)
    result = {fid: False for fid in ids}
    if not identity.is_identified or not ids:
        return result
    voted = db.session.execute(
        db.select(Vote.feedback_id).where(Vote.feedback_id.in_(ids), Vote.voter_email == identity.email)
    ).scalars()
    for fid in voted:
        result[fid] = True
    return result
