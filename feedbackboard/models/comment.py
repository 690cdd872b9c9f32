from sqlalchemy import func

from feedbackboard.extensions import db
from feedbackboard.models._time import utcnow, isoformat

CONTENT_MAX_LEN = 1000


class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.Integer, primary_key=True)
    feedback_id = db.Column(
        db.Integer,
        db.ForeignKey("feedback.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_email = db.Column(db.String(320), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    is_official = db.Column(db.Boolean, nullable=False, default=False, server_default=db.text("false"))
    edited_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    feedback = db.relationship("Feedback", back_populates="comments")

    __table_args__ = (
        db.Index("ix_comments_feedback_created", "feedback_id", "created_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "feedback_id": self.feedback_id,
            "author_email": self.author_email,
            "content": self.content,
            "is_official": self.is_official,
            "edited_at": isoformat(self.edited_at),
            "created_at": isoformat(self.created_at),
        }
