from sqlalchemy import func

from feedbackboard.extensions import db
from feedbackboard.models._time import utcnow, isoformat


class Board(db.Model):
    __tablename__ = "boards"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(
        db.Integer,
        db.ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    # Public routing key; renaming keeps the same row
    slug = db.Column(db.String(100), nullable=False, unique=True)
    is_public = db.Column(db.Boolean, nullable=False, default=False)
    requires_approval = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now())

    owner = db.relationship("Customer", back_populates="boards")
    feedback = db.relationship(
        "Feedback",
        back_populates="board",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "slug": self.slug,
            "is_public": self.is_public,
            "requires_approval": self.requires_approval,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Board id={self.id} slug={self.slug!r} public={self.is_public}>"
