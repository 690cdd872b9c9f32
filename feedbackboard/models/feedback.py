from sqlalchemy import CheckConstraint, func

from feedbackboard.extensions import db
from feedbackboard.models._time import utcnow, isoformat

# Keep simple text+CHECK for evolvable enums (no DB enum migration pain)
TYPE_BUG = "bug"
TYPE_IMPROVEMENT = "improvement"
TYPE_FEEDBACK = "feedback"
TYPE_CHOICES = (TYPE_BUG, TYPE_IMPROVEMENT, TYPE_FEEDBACK)

STATUS_OPEN = "open"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_DECLINED = "declined"
STATUS_CHOICES = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_DECLINED)


class Feedback(db.Model):
    __tablename__ = "feedback"

    id = db.Column(db.Integer, primary_key=True)
    board_id = db.Column(
        db.Integer,
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), nullable=False, default=TYPE_FEEDBACK)
    status = db.Column(db.String(20), nullable=False, default=STATUS_OPEN, server_default=STATUS_OPEN)
    submitter_email = db.Column(db.String(320), nullable=True)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)

    # Derived; only touched by the vote/comment services inside their transaction
    vote_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    comment_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    board = db.relationship("Board", back_populates="feedback")
    votes = db.relationship(
        "Vote",
        back_populates="feedback",
        cascade="all, delete-orphan",
    )
    comments = db.relationship(
        "Comment",
        back_populates="feedback",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "type IN ('bug','improvement','feedback')",
            name="ck_feedback_type_valid",
        ),
        CheckConstraint(
            "status IN ('open','in_progress','completed','declined')",
            name="ck_feedback_status_valid",
        ),
        CheckConstraint("vote_count >= 0", name="ck_feedback_vote_count_nonneg"),
        CheckConstraint("comment_count >= 0", name="ck_feedback_comment_count_nonneg"),
        db.Index("ix_feedback_board_approved_created", "board_id", "is_approved", "created_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "board_id": self.board_id,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "status": self.status,
            "submitter_email": self.submitter_email,
            "is_approved": self.is_approved,
            "vote_count": self.vote_count,
            "comment_count": self.comment_count,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Feedback id={self.id} board={self.board_id} status={self.status} approved={self.is_approved}>"
