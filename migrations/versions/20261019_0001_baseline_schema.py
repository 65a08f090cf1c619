"""baseline schema: deals, projects, invoices, speakers, deal activities

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "deals",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("client_email", sa.String(255), nullable=True),
        sa.Column("client_phone", sa.String(64), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("event_title", sa.String(255), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=True),
        sa.Column("event_location", sa.String(255), nullable=True),
        sa.Column("event_type", sa.String(64), nullable=True),
        sa.Column("speaker_requested", sa.String(255), nullable=True),
        sa.Column("attendee_count", sa.Integer(), nullable=True),
        sa.Column("budget_range", sa.String(64), nullable=True),
        sa.Column("deal_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("status", sa.String(40), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("source", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("last_contact", sa.Date(), nullable=True),
        sa.Column("next_follow_up", sa.Date(), nullable=True),
        sa.Column("travel_required", sa.Boolean(), nullable=False),
        sa.Column("flight_required", sa.Boolean(), nullable=False),
        sa.Column("hotel_required", sa.Boolean(), nullable=False),
        sa.Column("travel_stipend", sa.Numeric(12, 2), nullable=True),
        sa.Column("travel_notes", sa.Text(), nullable=True),
        sa.Column("lost_reason", sa.String(255), nullable=True),
        sa.Column("lost_details", sa.Text(), nullable=True),
        sa.Column("lost_competitor", sa.String(255), nullable=True),
        sa.Column("worth_follow_up", sa.Boolean(), nullable=True),
        sa.Column("won_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("lost_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("commission_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("commission_amount", sa.Numeric(12, 2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_deals_status", "deals", ["status"])
    op.create_index("idx_deals_created_at", "deals", ["created_at"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("deal_id", sa.Integer(), nullable=True),
        sa.Column("project_name", sa.String(255), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=True),
        sa.Column("client_email", sa.String(255), nullable=True),
        sa.Column("client_phone", sa.String(64), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("project_type", sa.String(40), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(40), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("budget", sa.Numeric(12, 2), nullable=False),
        sa.Column("spent", sa.Numeric(12, 2), nullable=False),
        sa.Column("completion_percentage", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("billing_contact_name", sa.String(255), nullable=True),
        sa.Column("billing_contact_email", sa.String(255), nullable=True),
        sa.Column("billing_contact_phone", sa.String(64), nullable=True),
        sa.Column("logistics_contact_name", sa.String(255), nullable=True),
        sa.Column("logistics_contact_email", sa.String(255), nullable=True),
        sa.Column("logistics_contact_phone", sa.String(64), nullable=True),
        sa.Column("contact_person", sa.String(255), nullable=True),
        sa.Column("end_client_name", sa.String(255), nullable=True),
        sa.Column("event_name", sa.String(255), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=True),
        sa.Column("event_location", sa.String(255), nullable=True),
        sa.Column("event_type", sa.String(64), nullable=True),
        sa.Column("event_classification", sa.String(20), nullable=True),
        sa.Column("attendee_count", sa.Integer(), nullable=True),
        sa.Column("requested_speaker_name", sa.String(255), nullable=True),
        sa.Column("program_topic", sa.String(255), nullable=True),
        sa.Column("program_type", sa.String(64), nullable=True),
        sa.Column("audience_size", sa.Integer(), nullable=True),
        sa.Column("audience_demographics", sa.Text(), nullable=True),
        sa.Column("speaker_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("commission_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("commission_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("contract_signed", sa.Boolean(), nullable=False),
        sa.Column("invoice_sent", sa.Boolean(), nullable=False),
        sa.Column("payment_received", sa.Boolean(), nullable=False),
        sa.Column("presentation_ready", sa.Boolean(), nullable=False),
        sa.Column("materials_sent", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["deal_id"], ["deals.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("deal_id", name="uq_projects_deal_id"),
    )
    op.create_index("idx_projects_status", "projects", ["status"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("invoice_number", sa.String(64), nullable=False),
        sa.Column("invoice_type", sa.String(20), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("client_name", sa.String(255), nullable=True),
        sa.Column("client_email", sa.String(255), nullable=True),
        sa.Column("client_company", sa.String(255), nullable=True),
        sa.Column("parent_invoice_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_invoice_id"], ["invoices.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("invoice_number"),
        sa.UniqueConstraint("project_id", "invoice_type", name="uq_invoices_project_type"),
    )
    op.create_index("idx_invoices_status", "invoices", ["status"])

    op.create_table(
        "speakers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("topics", sa.JSON(), nullable=True),
        sa.Column("short_bio", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("speaking_fee_range", sa.String(64), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("ranking", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "deal_activities",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("deal_id", sa.Integer(), nullable=False),
        sa.Column("activity_type", sa.String(40), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("outcome", sa.String(40), nullable=True),
        sa.Column("next_action", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["deal_id"], ["deals.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_deal_activities_deal", "deal_activities", ["deal_id"])


def downgrade() -> None:
    op.drop_index("idx_deal_activities_deal", table_name="deal_activities")
    op.drop_table("deal_activities")
    op.drop_table("speakers")
    op.drop_index("idx_invoices_status", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("idx_projects_status", table_name="projects")
    op.drop_table("projects")
    op.drop_index("idx_deals_created_at", table_name="deals")
    op.drop_index("idx_deals_status", table_name="deals")
    op.drop_table("deals")
