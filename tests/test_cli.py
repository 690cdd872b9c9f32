from feedbackboard.extensions import db
from feedbackboard.models import Customer, Feedback, Vote
from conftest import make_board, make_customer, make_feedback


def test_customers_create_and_list(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "customers", "create",
        "--email", "Founder@Startup.test",
        "--name", "Startup",
        "--slug", "startup",
        "--password", "pw-123456",
    ])
    assert result.exit_code == 0, result.output
    assert "email=founder@startup.test" in result.output

    with app.app_context():
        customer = db.session.execute(db.select(Customer)).scalar_one()
        assert customer.check_password("pw-123456")
        make_board(customer.id)

    listed = runner.invoke(args=["customers", "list"])
    assert "founder@startup.test\tstartup\tboards=1" in listed.output


def test_customers_create_rejects_duplicates_and_bad_input(app):
    runner = app.test_cli_runner()
    with app.app_context():
        make_customer()

    dup = runner.invoke(args=["customers", "create", "--email", "OWNER@acme.test", "--name", "X", "--slug", "fresh"])
    assert dup.exit_code != 0 and "already exists" in dup.output

    taken = runner.invoke(args=["customers", "create", "--email", "new@x.test", "--name", "X", "--slug", "acme-co"])
    assert taken.exit_code != 0 and "Slug already taken" in taken.output

    bad = runner.invoke(args=["customers", "create", "--email", "nope", "--name", "X", "--slug", "fresh"])
    assert bad.exit_code != 0 and "Invalid email" in bad.output


def test_feedback_recount_repairs_drift(app):
    runner = app.test_cli_runner()
    with app.app_context():
        fid = make_feedback(make_board(make_customer()))
        db.session.add_all([
            Vote(feedback_id=fid, voter_email="a@x.com"),
            Vote(feedback_id=fid, voter_email="b@x.com"),
        ])
        db.session.execute(db.update(Feedback).where(Feedback.id == fid).values(comment_count=3))
        db.session.commit()

    result = runner.invoke(args=["feedback", "recount"])
    assert result.exit_code == 0, result.output
    assert "corrected on 1 feedback" in result.output

    with app.app_context():
        row = db.session.get(Feedback, fid)
        assert (row.vote_count, row.comment_count) == (2, 0)

    again = runner.invoke(args=["feedback", "recount", "--feedback-id", str(fid)])
    assert "corrected on 0 feedback" in again.output
