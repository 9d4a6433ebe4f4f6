"""form engine
Revision ID: 0001_form_engine
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_form_engine"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "form_configurations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("facility_id", sa.String(length=80), nullable=False),
        sa.Column("form_type", sa.String(length=80), nullable=False),
        sa.Column("field_name", sa.String(length=120), nullable=False),
        sa.Column("field_label", sa.String(length=200), nullable=False),
        sa.Column("field_type", sa.String(length=30), nullable=False),
        sa.Column("field_options", sa.JSON(), nullable=False, server_default=sa.text("'[]'::json")),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("placeholder_text", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("help_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("field_width", sa.String(length=10), nullable=False, server_default="full"),
        sa.Column("default_value", sa.Text(), nullable=False, server_default=""),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_form_configurations_facility_form", "form_configurations", ["facility_id", "form_type"])

    op.create_table(
        "form_configuration_heads",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("facility_id", sa.String(length=80), nullable=False),
        sa.Column("form_type", sa.String(length=80), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_by", sa.String(length=200), nullable=True),
        sa.UniqueConstraint("facility_id", "form_type", name="uq_form_configuration_heads_facility_form"),
    )

    op.create_table(
        "form_templates",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("template_name", sa.String(length=200), nullable=False),
        sa.Column("form_type", sa.String(length=80), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=80), nullable=True),
        sa.Column("configuration", sa.JSON(), nullable=False, server_default=sa.text("'[]'::json")),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_system_template", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_by", sa.String(length=200), nullable=True),
    )
    op.create_index("ix_form_templates_template_name", "form_templates", ["template_name"])
    op.create_index("ix_form_templates_form_type", "form_templates", ["form_type"])

    op.create_table(
        "form_template_versions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subject_key", sa.String(length=200), nullable=False),
        sa.Column("template_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("facility_id", sa.String(length=80), nullable=True),
        sa.Column("form_type", sa.String(length=80), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("configuration", sa.JSON(), nullable=False, server_default=sa.text("'[]'::json")),
        sa.Column("changed_by", sa.String(length=200), nullable=False),
        sa.Column("changelog", sa.Text(), nullable=True),
        sa.UniqueConstraint("subject_key", "version", name="uq_form_template_versions_subject_version"),
    )
    op.create_index("ix_form_template_versions_subject_key", "form_template_versions", ["subject_key"])
    op.create_index("ix_form_template_versions_template_id", "form_template_versions", ["template_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actor", sa.String(length=200), nullable=False),
        sa.Column("entity", sa.String(length=80), nullable=False),
        sa.Column("entity_id", sa.String(length=200), nullable=False),
        sa.Column("action", sa.String(length=30), nullable=False),
        sa.Column("diff", sa.JSON(), nullable=False, server_default=sa.text("'{}'::json")),
    )

def downgrade():
    op.drop_table("audit_log")
    op.drop_index("ix_form_template_versions_template_id", table_name="form_template_versions")
    op.drop_index("ix_form_template_versions_subject_key", table_name="form_template_versions")
    op.drop_table("form_template_versions")
    op.drop_index("ix_form_templates_form_type", table_name="form_templates")
    op.drop_index("ix_form_templates_template_name", table_name="form_templates")
    op.drop_table("form_templates")
    op.drop_table("form_configuration_heads")
    op.drop_index("ix_form_configurations_facility_form", table_name="form_configurations")
    op.drop_table("form_configurations")
