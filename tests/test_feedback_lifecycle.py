from datetime import datetime, timedelta, timezone

from feedbackboard.extensions import db
from feedbackboard.models import Feedback
from feedbackboard.services import feedback as feedback_service
from feedbackboard.services import votes
from feedbackboard.services.identity import ANONYMOUS, identify
from conftest import login_customer, make_board, make_customer, make_feedback


VALID = {"title": "Broken button", "description": "It does nothing", "type": "bug"}


def test_review_board_hides_new_items_until_approved(ctx):
    owner_id = make_customer()
    board_id = make_board(owner_id, slug="acme", requires_approval=True)

    result = feedback_service.submit("acme", VALID)
    assert result.ok
    item = result.data
    assert item.status == "open" and item.is_approved is False
    assert item.vote_count == 0 and item.comment_count == 0
    fid = item.id

    assert feedback_service.list_public(board_id).data == []
    assert feedback_service.get(ANONYMOUS, fid).code == "not_found"
    assert votes.toggle_vote(identify("x@y.com"), fid).code == "forbidden"

    assert feedback_service.approve(owner_id, fid).ok
    listed = feedback_service.list_public(board_id).data
    assert [f.id for f in listed] == [fid]

    voted = votes.toggle_vote(identify("x@y.com"), fid)
    assert voted.data == {"has_voted": True, "vote_count": 1}


def test_open_board_publishes_immediately(ctx):
    board_id = make_board(make_customer(), slug="open-board", requires_approval=False)
    item = feedback_service.submit("open-board", VALID).data
    assert item.is_approved is True
    assert [f.id for f in feedback_service.list_public(board_id).data] == [item.id]


def test_submission_validation_reports_each_field(ctx):
    make_board(make_customer())
    result = feedback_service.submit("acme", {
        "title": "  Hi ",
        "description": "It does nothing",
        "type": "question",
        "submitter_email": "not-an-email",
    })
    assert result.code == "validation_error"
    assert set(result.details) == {"title", "type", "submitter_email"}

    short = feedback_service.submit("acme", {"title": "Broken button", "description": "too short", "type": "bug"})
    assert set(short.details) == {"description"}
    assert db.session.execute(db.select(db.func.count(Feedback.id))).scalar_one() == 0


def test_submission_trims_and_lowercases(ctx):
    make_board(make_customer())
    item = feedback_service.submit("acme", {
        "title": "  Dark mode please  ",
        "description": "  Would love a dark theme  ",
        "type": "improvement",
        "submitter_email": " Fan@Example.COM ",
    }).data
    assert item.title == "Dark mode please"
    assert item.description == "Would love a dark theme"
    assert item.submitter_email == "fan@example.com"


def test_submit_to_unknown_board(ctx):
    assert feedback_service.submit("nope", VALID).code == "not_found"
    assert feedback_service.submit(42, VALID).code == "not_found"


def test_submission_rejects_non_text_values(ctx):
    make_board(make_customer())
    result = feedback_service.submit("acme", {**VALID, "type": 1, "submitter_email": 5})
    assert result.code == "validation_error"
    assert set(result.details) == {"type", "submitter_email"}

    long_title = feedback_service.submit("acme", {**VALID, "title": "t" * 256})
    assert long_title.details == {"title": "Title must be 255 characters or less"}
    assert db.session.execute(db.select(db.func.count(Feedback.id))).scalar_one() == 0

    # null email means "not given"
    assert feedback_service.submit("acme", {**VALID, "submitter_email": None}).data.submitter_email is None


def test_approve_is_idempotent_and_owner_only(ctx):
    owner_id = make_customer()
    other_id = make_customer(email="other@x.com", slug="other-co")
    fid = make_feedback(make_board(owner_id), approved=False)

    denied = feedback_service.approve(other_id, fid)
    assert denied.code == "forbidden"
    assert db.session.get(Feedback, fid).is_approved is False

    assert feedback_service.approve(owner_id, fid).data.is_approved is True
    assert feedback_service.approve(owner_id, fid).data.is_approved is True
    assert feedback_service.approve(owner_id, 9999).code == "not_found"


def test_status_moves_freely_and_keeps_counters(ctx):
    owner_id = make_customer()
    fid = make_feedback(make_board(owner_id))
    votes.toggle_vote(identify("a@x.com"), fid)

    for status in ("completed", "open", "declined", "in_progress"):
        result = feedback_service.set_status(owner_id, fid, status)
        assert result.ok and result.data.status == status
        assert result.data.vote_count == 1

    bad = feedback_service.set_status(owner_id, fid, "closed")
    assert bad.code == "validation_error" and "status" in bad.details


def test_non_owner_cannot_change_or_delete(ctx):
    owner_id = make_customer()
    other_id = make_customer(email="other@x.com", slug="other-co")
    fid = make_feedback(make_board(owner_id))

    assert feedback_service.set_status(other_id, fid, "completed").code == "forbidden"
    assert feedback_service.delete(other_id, fid).code == "forbidden"
    assert db.session.get(Feedback, fid).status == "open"


def test_delete_removes_votes_and_comments(ctx):
    from feedbackboard.models import Comment, Vote
    from feedbackboard.services import comments

    owner_id = make_customer()
    fid = make_feedback(make_board(owner_id))
    votes.toggle_vote(identify("a@x.com"), fid)
    comments.create(identify("a@x.com"), fid, "Same here")

    assert feedback_service.delete(owner_id, fid).ok
    assert db.session.get(Feedback, fid) is None
    assert db.session.execute(db.select(db.func.count(Vote.id))).scalar_one() == 0
    assert db.session.execute(db.select(db.func.count(Comment.id))).scalar_one() == 0


def test_public_list_sorting_and_type_filter(ctx):
    board_id = make_board(make_customer())
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    rows = [
        Feedback(board_id=board_id, title="Oldest bug", description="x" * 12, type="bug",
                 is_approved=True, vote_count=5, created_at=base),
        Feedback(board_id=board_id, title="Middle idea", description="x" * 12, type="improvement",
                 is_approved=True, vote_count=5, created_at=base + timedelta(days=1)),
        Feedback(board_id=board_id, title="Newest bug", description="x" * 12, type="bug",
                 is_approved=True, vote_count=1, created_at=base + timedelta(days=2)),
        Feedback(board_id=board_id, title="Pending bug", description="x" * 12, type="bug",
                 is_approved=False, vote_count=9, created_at=base + timedelta(days=3)),
    ]
    db.session.add_all(rows)
    db.session.commit()

    recent = [f.title for f in feedback_service.list_public(board_id).data]
    assert recent == ["Newest bug", "Middle idea", "Oldest bug"]

    by_votes = [f.title for f in feedback_service.list_public(board_id, sort="votes").data]
    assert by_votes == ["Middle idea", "Oldest bug", "Newest bug"]

    bugs = [f.title for f in feedback_service.list_public(board_id, type_filter="bug").data]
    assert bugs == ["Newest bug", "Oldest bug"]

    assert feedback_service.list_public(board_id, type_filter="all").ok
    assert feedback_service.list_public(board_id, type_filter="rant").code == "validation_error"
    assert feedback_service.list_public(board_id, sort="random").code == "validation_error"


def test_private_board_list_is_owner_only(ctx):
    board_id = make_board(make_customer(), is_public=False)
    make_feedback(board_id)
    assert feedback_service.list_public(board_id).code == "not_found"
    assert len(feedback_service.list_public(board_id, identity=identify("owner@acme.test")).data) == 1


def test_owner_list_filters_by_approval(ctx):
    owner_id = make_customer()
    board_id = make_board(owner_id)
    approved = make_feedback(board_id, title="Approved one")
    pending = make_feedback(board_id, title="Pending one", approved=False)

    def ids(result):
        return sorted(f.id for f in result.data)

    assert ids(feedback_service.list_for_owner(owner_id, board_id)) == sorted([approved, pending])
    assert ids(feedback_service.list_for_owner(owner_id, board_id, "pending")) == [pending]
    assert ids(feedback_service.list_for_owner(owner_id, board_id, "approved")) == [approved]
    assert feedback_service.list_for_owner(owner_id, board_id, "weird").code == "validation_error"

    other_id = make_customer(email="other@x.com", slug="other-co")
    assert feedback_service.list_for_owner(other_id, board_id).code == "forbidden"


def test_get_visibility(ctx):
    board_id = make_board(make_customer())
    pending = make_feedback(board_id, approved=False)
    live = make_feedback(board_id, title="Live item")

    assert feedback_service.get(ANONYMOUS, live).data.id == live
    assert feedback_service.get(ANONYMOUS, pending).code == "not_found"
    assert feedback_service.get(identify("owner@acme.test"), pending).data.id == pending
    assert feedback_service.get(ANONYMOUS, 9999).code == "not_found"


def test_owner_routes(app, client):
    with app.app_context():
        owner_id = make_customer()
        board_id = make_board(owner_id)
        fid = make_feedback(board_id, approved=False)

    assert client.post(f"/feedback/{fid}/approve").status_code == 401

    login_customer(client, owner_id)
    resp = client.post(f"/feedback/{fid}/approve")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["is_approved"] is True

    resp = client.patch(f"/feedback/{fid}/status", json={"status": "in_progress"})
    assert resp.get_json()["data"]["status"] == "in_progress"

    resp = client.patch(f"/feedback/{fid}/status", json={"status": "bogus"})
    assert resp.status_code == 400

    listed = client.get(f"/boards/{board_id}/feedback/manage?filter=approved").get_json()
    assert [f["id"] for f in listed["data"]] == [fid]

    assert client.delete(f"/feedback/{fid}").status_code == 200
    assert client.get(f"/feedback/{fid}").status_code == 404
