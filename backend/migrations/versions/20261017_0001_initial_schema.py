"""initial schema: users, incidents, comments, history, votes, photos

Revision ID: 20261017_0001
Revises: 
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


ROLES = ("CITIZEN", "OPERATOR", "ADMIN")
STATUSES = ("PENDING", "IN_PROGRESS", "RESOLVED", "REJECTED")


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    if "users" not in tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("first_name", sa.String(length=100), nullable=False),
            sa.Column("last_name", sa.String(length=100), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("password_hash", sa.String(length=255), nullable=False),
            sa.Column("role", sa.Enum(*ROLES, name="user_role_enum"), nullable=False, server_default="CITIZEN"),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.UniqueConstraint("email", name="uq_users_email"),
        )

    if "incidents" not in tables:
        op.create_table(
            "incidents",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("category", sa.String(length=50), nullable=False),
            sa.Column("latitude", sa.Float(), nullable=False),
            sa.Column("longitude", sa.Float(), nullable=False),
            sa.Column("address", sa.String(length=255), nullable=True),
            sa.Column("status", sa.Enum(*STATUSES, name="incident_status_enum"), nullable=False, server_default="PENDING"),
            sa.Column("upvotes", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("assigned_to_id", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["assigned_to_id"], ["users.id"], ondelete="SET NULL"),
            sa.CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_incidents_latitude"),
            sa.CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_incidents_longitude"),
            sa.CheckConstraint("upvotes >= 0", name="ck_incidents_upvotes"),
        )
        op.create_index("ix_incidents_status", "incidents", ["status"], unique=False)
        op.create_index("ix_incidents_category", "incidents", ["category"], unique=False)
        op.create_index("ix_incidents_created_at", "incidents", ["created_at"], unique=False)
        op.create_index("ix_incidents_user_id", "incidents", ["user_id"], unique=False)

    if "comments" not in tables:
        op.create_table(
            "comments",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("incident_id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("parent_id", sa.Integer(), nullable=True),
            sa.Column("content", sa.String(length=500), nullable=False),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.Column("deleted_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["incident_id"], ["incidents.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["parent_id"], ["comments.id"], ondelete="CASCADE"),
        )
        op.create_index("ix_comments_incident_id", "comments", ["incident_id"], unique=False)
        op.create_index("ix_comments_parent_id", "comments", ["parent_id"], unique=False)

    if "incident_history" not in tables:
        op.create_table(
            "incident_history",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("incident_id", sa.Integer(), nullable=False),
            sa.Column("changed_by_id", sa.Integer(), nullable=False),
            sa.Column("old_status", sa.Enum(*STATUSES, name="incident_status_enum"), nullable=False),
            sa.Column("new_status", sa.Enum(*STATUSES, name="incident_status_enum"), nullable=False),
            sa.Column("changed_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.ForeignKeyConstraint(["incident_id"], ["incidents.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["changed_by_id"], ["users.id"], ondelete="RESTRICT"),
        )
        op.create_index("ix_incident_history_incident_id", "incident_history", ["incident_id"], unique=False)

    if "incident_votes" not in tables:
        op.create_table(
            "incident_votes",
            sa.Column("incident_id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.ForeignKeyConstraint(["incident_id"], ["incidents.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("incident_id", "user_id", name="pk_incident_votes"),
        )

    if "photos" not in tables:
        op.create_table(
            "photos",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("incident_id", sa.Integer(), nullable=True),
            sa.Column("uploaded_by_id", sa.Integer(), nullable=True),
            sa.Column("mime_type", sa.String(length=50), nullable=False),
            sa.Column("size", sa.Integer(), nullable=False),
            sa.Column("data", sa.LargeBinary(length=16 * 1024 * 1024), nullable=False),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
            sa.ForeignKeyConstraint(["incident_id"], ["incidents.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["uploaded_by_id"], ["users.id"], ondelete="SET NULL"),
        )
        op.create_index("ix_photos_incident_id", "photos", ["incident_id"], unique=False)


def downgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    # Children first
    for table in ("photos", "incident_votes", "incident_history", "comments", "incidents", "users"):
        if table in tables:
            op.drop_table(table)
