"""add qr_codes

Revision ID: 8e52b7c04f19
Revises: 3c1f0a9d2b71
Create Date: 2024-11-19 14:03:47.915220

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e52b7c04f19'
down_revision: Union[str, Sequence[str], None] = '3c1f0a9d2b71'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "qr_codes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("content", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("scanned_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_qr_codes_content", "qr_codes", ["content"])
    op.create_index("ix_qr_codes_scanned_at", "qr_codes", ["scanned_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_qr_codes_scanned_at", table_name="qr_codes")
    op.drop_index("ix_qr_codes_content", table_name="qr_codes")
    op.drop_table("qr_codes")
