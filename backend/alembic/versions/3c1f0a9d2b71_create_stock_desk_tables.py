"""create product / stock_requests / overflow_management / user_sessions

Revision ID: 3c1f0a9d2b71
Revises:
Create Date: 2024-11-05 09:12:31.402117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b71'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_DELETED_AT_CHECK = (
    "(is_deleted AND deleted_at IS NOT NULL) OR (NOT is_deleted AND deleted_at IS NULL)"
)


def upgrade() -> None:
    """Upgrade schema: product master, both ledgers and the session table."""
    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_number", sa.String(), nullable=False),
        sa.Column("location_number", sa.String(), nullable=False),
        sa.Column("box_type", sa.String(), nullable=True),
        sa.Column("location_capacity", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint("location_capacity >= 0", name="ck_product_capacity_nonneg"),
    )
    op.create_index("ix_product_product_number", "product", ["product_number"], unique=True)
    op.create_index("ix_product_location_number", "product", ["location_number"])

    status_enum = sa.Enum("pending", "completed", "cancelled", name="stockrequeststatus")
    op.create_table(
        "stock_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_number", sa.String(), nullable=False),
        sa.Column("requested_at", sa.DateTime(), nullable=False),
        sa.Column("requested_by", sa.String(), nullable=False),
        sa.Column("status", status_enum, nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=True),
        sa.Column("checked_at", sa.DateTime(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["product_number"], ["product.product_number"], name="fk_stockreq_product"
        ),
        sa.CheckConstraint(
            "status <> 'pending' OR (stock_quantity IS NULL AND checked_at IS NULL)",
            name="ck_stockreq_pending_unanswered",
        ),
        sa.CheckConstraint(
            "status <> 'completed' OR (stock_quantity IS NOT NULL AND checked_at IS NOT NULL)",
            name="ck_stockreq_completed_answered",
        ),
        sa.CheckConstraint(_DELETED_AT_CHECK, name="ck_stockreq_deleted_at"),
    )
    op.create_index("ix_stock_requests_product_number", "stock_requests", ["product_number"])
    op.create_index("ix_stock_requests_requested_at", "stock_requests", ["requested_at"])
    op.create_index("ix_stock_requests_status", "stock_requests", ["status"])
    op.create_index("ix_stock_requests_is_deleted", "stock_requests", ["is_deleted"])

    op.create_table(
        "overflow_management",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_number", sa.String(), nullable=False),
        sa.Column("location_number", sa.String(), nullable=False),
        sa.Column("overflow_quantity", sa.Integer(), nullable=False),
        sa.Column("overflow_reason", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["product_number"], ["product.product_number"], name="fk_overflow_product"
        ),
        sa.UniqueConstraint("product_number", "created_at", name="uq_overflow_identity"),
        sa.CheckConstraint("overflow_quantity > 0", name="ck_overflow_qty_positive"),
        sa.CheckConstraint(_DELETED_AT_CHECK, name="ck_overflow_deleted_at"),
    )
    op.create_index("ix_overflow_management_product_number", "overflow_management", ["product_number"])
    op.create_index("ix_overflow_management_created_at", "overflow_management", ["created_at"])
    op.create_index("ix_overflow_management_is_deleted", "overflow_management", ["is_deleted"])

    op.create_table(
        "user_sessions",
        sa.Column("token", sa.String(length=64), primary_key=True),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_user_sessions_expires_at", "user_sessions", ["expires_at"])


def downgrade() -> None:
    """Downgrade schema: drop everything created above."""
    op.drop_table("user_sessions")
    op.drop_table("overflow_management")
    op.drop_table("stock_requests")
    op.drop_table("product")
    bind = op.get_bind()
    if bind is not None and bind.dialect.name == "postgresql":
        sa.Enum(name="stockrequeststatus").drop(bind, checkfirst=True)
