from sqlalchemy import UniqueConstraint, func

from feedbackboard.extensions import db
from feedbackboard.models._time import utcnow


class Vote(db.Model):
    __tablename__ = "votes"

    id = db.Column(db.Integer, primary_key=True)
    feedback_id = db.Column(
        db.Integer,
        db.ForeignKey("feedback.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    voter_email = db.Column(db.String(320), nullable=False)  # stored lower-cased
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    feedback = db.relationship("Feedback", back_populates="votes")

    __table_args__ = (
        # One vote per identity per item; the toggle relies on this under races
        UniqueConstraint("feedback_id", "voter_email", name="uq_votes_feedback_voter"),
    )
