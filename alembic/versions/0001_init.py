"""Initial schema for contract documents and their signing record."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    status_enum = sa.Enum(
        "draft", "generated", "negotiation_requested", "finalized", name="contractstatus"
    )

    op.create_table(
        "contract_documents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("owner_id", sa.String(length=128), nullable=False),
        sa.Column("contract_type", sa.String(length=40), nullable=False),
        sa.Column("request_snapshot", sa.JSON(), nullable=False),
        sa.Column("effective_date", sa.Date(), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("status", status_enum, nullable=False, server_default="draft"),
        sa.Column("negotiation_notes", sa.JSON(), nullable=False),
        sa.Column("signing_unsigned_body", sa.Text(), nullable=True),
        sa.Column("signing_status", sa.String(length=32), nullable=True),
        sa.Column("buyer_label", sa.String(length=64), nullable=True),
        sa.Column("publisher_label", sa.String(length=64), nullable=True),
        sa.Column("buyer_signer_name", sa.String(length=255), nullable=True),
        sa.Column("buyer_signature_key", sa.String(length=512), nullable=True),
        sa.Column("buyer_signed_at", sa.DateTime(), nullable=True),
        sa.Column("publisher_signer_name", sa.String(length=255), nullable=True),
        sa.Column("publisher_signature_key", sa.String(length=512), nullable=True),
        sa.Column("publisher_signed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "idx_contract_documents_owner_created", "contract_documents", ["owner_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("idx_contract_documents_owner_created", table_name="contract_documents")
    op.drop_table("contract_documents")
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS contractstatus")
