from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from flask import has_request_context, session
from flask_login import current_user
from sqlalchemy import func

from feedbackboard.extensions import db
from feedbackboard.models.customer import Customer

SESSION_EMAIL_KEY = "identity_email"


@dataclass(frozen=True)
class Anonymous:
    is_identified = False
    email = None


@dataclass(frozen=True)
class Identified:
    email: str
    is_identified = True


Identity = Union[Anonymous, Identified]

ANONYMOUS = Anonymous()


def normalize_email(value: Optional[str]) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def identify(email: Optional[str]) -> Identity:
    email = normalize_email(email)
    return Identified(email) if email else ANONYMOUS


def resolve_identity() -> Identity:
    """
    Map the current request to an identity. A signed-in customer wins over
    an email-link session; no valid session means Anonymous, never an error.
    """
    if not has_request_context():
        return ANONYMOUS
    if getattr(current_user, "is_authenticated", False):
        email = getattr(current_user, "email", None)
        if email:
            return identify(email)
    return identify(session.get(SESSION_EMAIL_KEY))


def customer_for(identity: Identity) -> Optional[Customer]:
    """The Customer row matching this identity's email, if any."""
    if not identity.is_identified:
        return None
    return db.session.execute(
        db.select(Customer).where(func.lower(Customer.email) == identity.email)
    ).scalar_one_or_none()


def customer_id_for(identity: Identity) -> Optional[int]:
    customer = customer_for(identity)
    return customer.id if customer else None
