import click
from flask.cli import with_appcontext
from sqlalchemy import func

from feedbackboard.extensions import db
from feedbackboard.models import Board, Customer
from feedbackboard.services import counters
from feedbackboard.services.identity import normalize_email
from feedbackboard.utils.validators import is_valid_email, slug_error


@click.group()
def customers():
    """Customer (board owner) provisioning."""


@customers.command("create")
@click.option("--email", required=True)
@click.option("--name", required=True)
@click.option("--slug", required=True, help="Account slug (lowercase letters, digits, hyphens)")
@click.option("--password", default=None, help="Optional; without it the customer signs in by email link")
@with_appcontext
def customers_create(email, name, slug, password):
    email = normalize_email(email)
    if not is_valid_email(email):
        raise click.ClickException("Invalid email address")
    err = slug_error(slug)
    if err:
        raise click.ClickException(err)
    # fail fast on duplicates
    if db.session.query(Customer).filter(func.lower(Customer.email) == email).count():
        raise click.ClickException("Customer already exists")
    if db.session.query(Customer).filter_by(slug=slug).count():
        raise click.ClickException("Slug already taken")

    customer = Customer(email=email, name=name.strip(), slug=slug)
    if password:
        customer.set_password(password)
    db.session.add(customer)
    db.session.commit()
    click.echo(f"Customer created id={customer.id} email={customer.email} slug={customer.slug}")


@customers.command("list")
@with_appcontext
def customers_list():
    rows = (
        db.session.query(Customer, func.count(Board.id))
        .outerjoin(Board, Board.owner_id == Customer.id)
        .group_by(Customer.id)
        .order_by(Customer.id.asc())
        .all()
    )
    for customer, board_count in rows:
        click.echo(f"{customer.id}\t{customer.email}\t{customer.slug}\tboards={board_count}")


@click.group("feedback")
def feedback_ops():
    """Feedback maintenance."""


@feedback_ops.command("recount")
@click.option("--feedback-id", type=int, default=None, help="Limit to one item")
@with_appcontext
def feedback_recount(feedback_id):
    """Recompute vote/comment counters from the vote and comment rows."""
    fixed = counters.recount(feedback_id)
    db.session.commit()
    click.echo(f"Counters corrected on {fixed} feedback row(s)")


def register_cli(app):
    app.cli.add_command(customers)
    app.cli.add_command(feedback_ops)
