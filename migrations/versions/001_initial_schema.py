"""Initial schema: users, refresh_tokens, coaches, availability_slots, appointments_private.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("jti", sa.String(), nullable=False),
        sa.Column("issued_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("revoked", sa.Boolean(), nullable=False, server_default="false"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_refresh_tokens_user_id"), "refresh_tokens", ["user_id"], unique=False)
    op.create_index(op.f("ix_refresh_tokens_jti"), "refresh_tokens", ["jti"], unique=True)
    op.create_index(op.f("ix_refresh_tokens_expires_at"), "refresh_tokens", ["expires_at"], unique=False)

    op.create_table(
        "coaches",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("public_note", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_coaches_user_id"), "coaches", ["user_id"], unique=False)
    op.create_index(op.f("ix_coaches_slug"), "coaches", ["slug"], unique=True)

    op.create_table(
        "availability_slots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("coach_id", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="open"),
        sa.CheckConstraint("end_time > start_time", name="ck_availability_slots_interval"),
        sa.CheckConstraint("status IN ('open', 'closed')", name="ck_availability_slots_status"),
        sa.ForeignKeyConstraint(["coach_id"], ["coaches.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_availability_slots_coach_id"), "availability_slots", ["coach_id"], unique=False)
    op.create_index(op.f("ix_availability_slots_start_time"), "availability_slots", ["start_time"], unique=False)
    op.create_index(op.f("ix_availability_slots_status"), "availability_slots", ["status"], unique=False)

    op.create_table(
        "appointments_private",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("coach_id", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("client_name", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.CheckConstraint("end_time > start_time", name="ck_appointments_private_interval"),
        sa.ForeignKeyConstraint(["coach_id"], ["coaches.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_appointments_private_coach_id"), "appointments_private", ["coach_id"], unique=False)
    op.create_index(op.f("ix_appointments_private_start_time"), "appointments_private", ["start_time"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_appointments_private_start_time"), table_name="appointments_private")
    op.drop_index(op.f("ix_appointments_private_coach_id"), table_name="appointments_private")
    op.drop_table("appointments_private")
    op.drop_index(op.f("ix_availability_slots_status"), table_name="availability_slots")
    op.drop_index(op.f("ix_availability_slots_start_time"), table_name="availability_slots")
    op.drop_index(op.f("ix_availability_slots_coach_id"), table_name="availability_slots")
    op.drop_table("availability_slots")
    op.drop_index(op.f("ix_coaches_slug"), table_name="coaches")
    op.drop_index(op.f("ix_coaches_user_id"), table_name="coaches")
    op.drop_table("coaches")
    op.drop_index(op.f("ix_refresh_tokens_expires_at"), table_name="refresh_tokens")
    op.drop_index(op.f("ix_refresh_tokens_jti"), table_name="refresh_tokens")
    op.drop_index(op.f("ix_refresh_tokens_user_id"), table_name="refresh_tokens")
    op.drop_table("refresh_tokens")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
