"""create patients table

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="USER"),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("insurance_provider", sa.String(length=200), nullable=True),
        sa.Column("insurance_number", sa.String(length=100), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=20), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column("blood_type", sa.String(length=3), nullable=True),
        sa.Column("allergies", sa.JSON(), nullable=True),
        sa.Column("conditions", sa.JSON(), nullable=True),
        sa.Column("medications", sa.JSON(), nullable=True),
        sa.Column("last_visit", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    # Enforces email uniqueness under concurrent writers
    op.create_index("ix_patients_email", "patients", ["email"], unique=True)
    op.create_index("ix_patients_insurance_provider", "patients", ["insurance_provider"])


def downgrade() -> None:
    op.drop_index("ix_patients_insurance_provider", table_name="patients")
    op.drop_index("ix_patients_email", table_name="patients")
    op.drop_table("patients")
