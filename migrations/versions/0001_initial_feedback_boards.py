"""initial schema: customers, boards, feedback, votes, comments

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("slug"),
    )

    op.create_table(
        "boards",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("requires_approval", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["owner_id"], ["customers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("ix_boards_owner_id", "boards", ["owner_id"], unique=False)

    op.create_table(
        "feedback",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("board_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("submitter_email", sa.String(length=320), nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        sa.Column("vote_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["board_id"], ["boards.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("type IN ('bug','improvement','feedback')", name="ck_feedback_type_valid"),
        sa.CheckConstraint(
            "status IN ('open','in_progress','completed','declined')",
            name="ck_feedback_status_valid",
        ),
        sa.CheckConstraint("vote_count >= 0", name="ck_feedback_vote_count_nonneg"),
        sa.CheckConstraint("comment_count >= 0", name="ck_feedback_comment_count_nonneg"),
    )
    op.create_index("ix_feedback_board_id", "feedback", ["board_id"], unique=False)
    op.create_index(
        "ix_feedback_board_approved_created",
        "feedback",
        ["board_id", "is_approved", "created_at"],
        unique=False,
    )

    op.create_table(
        "votes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("feedback_id", sa.Integer(), nullable=False),
        sa.Column("voter_email", sa.String(length=320), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["feedback_id"], ["feedback.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("feedback_id", "voter_email", name="uq_votes_feedback_voter"),
    )
    op.create_index("ix_votes_feedback_id", "votes", ["feedback_id"], unique=False)

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("feedback_id", sa.Integer(), nullable=False),
        sa.Column("author_email", sa.String(length=320), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_official", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["feedback_id"], ["feedback.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_feedback_id", "comments", ["feedback_id"], unique=False)
    op.create_index("ix_comments_author_email", "comments", ["author_email"], unique=False)
    op.create_index("ix_comments_feedback_created", "comments", ["feedback_id", "created_at"], unique=False)


def downgrade():
    op.drop_index("ix_comments_feedback_created", table_name="comments")
    op.drop_index("ix_comments_author_email", table_name="comments")
    op.drop_index("ix_comments_feedback_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_votes_feedback_id", table_name="votes")
    op.drop_table("votes")
    op.drop_index("ix_feedback_board_approved_created", table_name="feedback")
    op.drop_index("ix_feedback_board_id", table_name="feedback")
    op.drop_table("feedback")
    op.drop_index("ix_boards_owner_id", table_name="boards")
    op.drop_table("boards")
    op.drop_table("customers")
