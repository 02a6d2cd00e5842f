"""jobs, employee assignments and recurring series

Revision ID: 0002_jobs_recurrence
Revises: 0001_foundation
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_jobs_recurrence"
down_revision = "0001_foundation"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "jobs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("business_id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(length=16), nullable=False),
        sa.Column("duration", sa.Float(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("rate_type", sa.String(length=12), nullable=False),
        sa.Column("payment_status", sa.String(length=16), nullable=False),
        sa.Column("payment_via", sa.String(length=20), nullable=True),
        sa.Column("invoice_sent_at", sa.DateTime(), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False),
        sa.Column("recurrence_rule", sa.String(length=16), nullable=True),
        sa.Column("recurrence_end_date", sa.Date(), nullable=True),
        sa.Column("parent_job_id", sa.Integer(), nullable=True),
        sa.Column("series_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["business_id"], ["businesses.id"]),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["parent_job_id"], ["jobs.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("series_id", "date", name="uq_job_series_date"),
    )
    op.create_index(op.f("ix_jobs_business_id"), "jobs", ["business_id"], unique=False)
    op.create_index(op.f("ix_jobs_client_id"), "jobs", ["client_id"], unique=False)
    op.create_index(op.f("ix_jobs_date"), "jobs", ["date"], unique=False)
    op.create_index(op.f("ix_jobs_status"), "jobs", ["status"], unique=False)
    op.create_index(op.f("ix_jobs_payment_status"), "jobs", ["payment_status"], unique=False)
    op.create_index(op.f("ix_jobs_is_recurring"), "jobs", ["is_recurring"], unique=False)
    op.create_index(op.f("ix_jobs_parent_job_id"), "jobs", ["parent_job_id"], unique=False)
    op.create_index(op.f("ix_jobs_series_id"), "jobs", ["series_id"], unique=False)

    op.create_table(
        "job_employees",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.ForeignKeyConstraint(["job_id"], ["jobs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("job_id", "employee_id", name="uq_job_employee"),
    )
    op.create_index(op.f("ix_job_employees_job_id"), "job_employees", ["job_id"], unique=False)
    op.create_index(op.f("ix_job_employees_employee_id"), "job_employees", ["employee_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_job_employees_employee_id"), table_name="job_employees")
    op.drop_index(op.f("ix_job_employees_job_id"), table_name="job_employees")
    op.drop_table("job_employees")
    op.drop_index(op.f("ix_jobs_series_id"), table_name="jobs")
    op.drop_index(op.f("ix_jobs_parent_job_id"), table_name="jobs")
    op.drop_index(op.f("ix_jobs_is_recurring"), table_name="jobs")
    op.drop_index(op.f("ix_jobs_payment_status"), table_name="jobs")
    op.drop_index(op.f("ix_jobs_status"), table_name="jobs")
    op.drop_index(op.f("ix_jobs_date"), table_name="jobs")
    op.drop_index(op.f("ix_jobs_client_id"), table_name="jobs")
    op.drop_index(op.f("ix_jobs_business_id"), table_name="jobs")
    op.drop_table("jobs")
