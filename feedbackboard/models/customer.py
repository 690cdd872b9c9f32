from flask_login import UserMixin
from sqlalchemy import func
from werkzeug.security import generate_password_hash, check_password_hash

from feedbackboard.extensions import db, login_manager


class Customer(db.Model, UserMixin):
    """A board-owning tenant. Provisioned out-of-band (see `flask customers create`)."""

    __tablename__ = "customers"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(320), nullable=False, unique=True)  # stored lower-cased
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(100), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    boards = db.relationship(
        "Board",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    # helpers
    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def get_id(self) -> str:
        return str(self.id)

    def __repr__(self) -> str:
        return f"<Customer id={self.id} email={self.email!r}>"


@login_manager.user_loader
def load_customer(customer_id: str):
    try:
        return db.session.get(Customer, int(customer_id))
    except (TypeError, ValueError):
        return None
