# File: /alembic/versions/0001_initial_schema.py | Version: 1.0 | Title: Users, documents, database registry, trash ledger, snapshots
"""initial schema"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "document",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("owner_id", sa.String(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_document_owner_id", "document", ["owner_id"])

    op.create_table(
        "document_databases",
        sa.Column("database_id", sa.String(), primary_key=True, nullable=False),
        sa.Column("document_id", sa.String(), sa.ForeignKey("document.id"), nullable=True),
        sa.Column("table_name", sa.String(100), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_document_databases_document_id", "document_databases", ["document_id"])
    op.create_index("ix_document_databases_deleted_at", "document_databases", ["deleted_at"])

    op.create_table(
        "trash_items",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("item_type", sa.String(20), nullable=False),
        sa.Column("item_id", sa.String(), nullable=False),
        sa.Column("physical_location", sa.String(100), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("parent_info", sa.JSON(), nullable=True),
        sa.Column("owner_user_id", sa.String(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("item_type", "item_id", name="uq_trash_items_type_item"),
    )
    op.create_index("ix_trash_items_owner_user_id", "trash_items", ["owner_user_id"])
    op.create_index("ix_trash_items_expires_at", "trash_items", ["expires_at"])

    op.create_table(
        "snapshots",
        sa.Column("token", sa.String(64), primary_key=True, nullable=False),
        sa.Column("entity_type", sa.String(30), nullable=False),
        sa.Column("entity_id", sa.String(), nullable=False),
        sa.Column("physical_location", sa.String(100), nullable=True),
        sa.Column("source_operation", sa.String(50), nullable=False),
        sa.Column("operation_kind", sa.String(20), nullable=False),
        sa.Column("prior_state", sa.JSON(), nullable=False),
        sa.Column("owner_user_id", sa.String(), nullable=False),
        sa.Column("captured_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_snapshots_entity", "snapshots", ["entity_type", "entity_id"])
    op.create_index("ix_snapshots_owner_captured", "snapshots", ["owner_user_id", "captured_at"])


def downgrade():
    op.drop_index("ix_snapshots_owner_captured", table_name="snapshots")
    op.drop_index("ix_snapshots_entity", table_name="snapshots")
    op.drop_table("snapshots")
    op.drop_index("ix_trash_items_expires_at", table_name="trash_items")
    op.drop_index("ix_trash_items_owner_user_id", table_name="trash_items")
    op.drop_table("trash_items")
    op.drop_index("ix_document_databases_deleted_at", table_name="document_databases")
    op.drop_index("ix_document_databases_document_id", table_name="document_databases")
    op.drop_table("document_databases")
    op.drop_index("ix_document_owner_id", table_name="document")
    op.drop_table("document")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
