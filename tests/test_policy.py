import pytest
from flask import g, session

from feedbackboard.extensions import db
from feedbackboard.models import Board, Feedback
from feedbackboard.services import comments, policy
from feedbackboard.services.identity import ANONYMOUS, SESSION_EMAIL_KEY, identify
from feedbackboard.services.results import Forbidden, NotFound
from conftest import make_board, make_customer, make_feedback

OWNER = identify("owner@acme.test")
STRANGER = identify("stranger@x.com")


def test_board_ownership(ctx):
    owner_id = make_customer()
    board_id = make_board(owner_id)

    assert policy.is_board_owner(OWNER, board_id)
    assert policy.is_board_owner(identify("OWNER@acme.test"), board_id)
    assert not policy.is_board_owner(STRANGER, board_id)
    assert not policy.is_board_owner(ANONYMOUS, board_id)
    assert not policy.is_board_owner(OWNER, 9999)


def test_feedback_mutation_follows_board_owner(ctx):
    fid = make_feedback(make_board(make_customer()))
    feedback = db.session.get(Feedback, fid)
    assert policy.can_mutate_feedback(OWNER, feedback)
    assert not policy.can_mutate_feedback(STRANGER, feedback)


def test_view_rules(ctx):
    public_id = make_board(make_customer())
    private_id = make_board(db.session.get(Board, public_id).owner_id, slug="private", is_public=False)
    live = db.session.get(Feedback, make_feedback(public_id))
    pending = db.session.get(Feedback, make_feedback(public_id, approved=False))
    hidden = db.session.get(Feedback, make_feedback(private_id))

    assert policy.can_view_board(ANONYMOUS, db.session.get(Board, public_id))
    assert not policy.can_view_board(STRANGER, db.session.get(Board, private_id))
    assert policy.can_view_board(OWNER, db.session.get(Board, private_id))

    assert policy.can_view_feedback(ANONYMOUS, live)
    assert not policy.can_view_feedback(ANONYMOUS, pending)
    assert not policy.can_view_feedback(STRANGER, hidden)
    assert policy.can_view_feedback(OWNER, pending)
    assert policy.can_view_feedback(OWNER, hidden)


def test_comment_chain_and_rights(ctx):
    fid = make_feedback(make_board(make_customer()))
    cid = comments.create(identify("alice@x.com"), fid, "Hello").data.id

    chain = policy.resolve_comment_owner_chain(cid)
    assert chain.comment_id == cid and chain.feedback_id == fid
    assert chain.author_email == "alice@x.com"

    assert policy.can_mutate_comment(identify("alice@x.com"), chain)
    assert not policy.can_mutate_comment(OWNER, chain)
    assert not policy.can_mutate_comment(ANONYMOUS, chain)
    assert policy.can_delete_comment(OWNER, chain)
    assert policy.can_delete_comment(identify("alice@x.com"), chain)
    assert not policy.can_delete_comment(STRANGER, chain)
    assert policy.owns_comment_board(OWNER, chain)
    assert not policy.owns_comment_board(identify("alice@x.com"), chain)

    with pytest.raises(NotFound):
        policy.resolve_comment_owner_chain(9999)


def test_require_helpers(ctx):
    owner_id = make_customer()
    board = db.session.get(Board, make_board(owner_id))
    policy.require_board_owner(owner_id, board, "do things")
    with pytest.raises(Forbidden, match="Unauthorized to do things"):
        policy.require_board_owner(None, board, "do things")
    with pytest.raises(NotFound):
        policy.get_board(9999)
    with pytest.raises(NotFound):
        policy.require_visible_feedback(ANONYMOUS, make_feedback(board.id, approved=False))


def test_require_customer_guard(app):
    @policy.require_customer
    def view():
        return {"customer_id": g.customer_id}

    with app.app_context():
        owner_id = make_customer()

    with app.test_request_context():
        body, status = view()
        assert status == 401
        assert body.get_json()["code"] == "unauthorized"

    with app.test_request_context():
        session[SESSION_EMAIL_KEY] = "stranger@x.com"
        body, status = view()
        assert status == 403

    with app.test_request_context():
        session["_user_id"] = str(owner_id)
        assert view() == {"customer_id": owner_id}
