"""Add single-use and revocation markers.

Revision ID: 002
Revises: 001
Create Date: 2025-07-03

Single-use authorization codes and refresh token rotation need state the
initial schema does not have:
1. auth_codes.consumed_at - set by the one successful redemption
2. auth_codes.name unique - a code value identifies exactly one row
3. access_tokens.revoked_at - revocation and rotation marker
4. access_tokens.user_id - resource owner the token was issued for
5. access_tokens.refresh_token nullable without default - flows without
   refresh (client_credentials, implicit) store NULL
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Add consumption and revocation columns."""
    op.add_column(
        "auth_codes",
        sa.Column("consumed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_unique_constraint("auth_codes__unique_name", "auth_codes", ["name"])
    op.create_index("idx_auth_codes_expires_at", "auth_codes", ["expires_at"])

    op.add_column(
        "access_tokens",
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.add_column(
        "access_tokens",
        sa.Column("user_id", sa.Integer(), nullable=True),
    )
    op.create_index("idx_access_tokens_expires_at", "access_tokens", ["expires_at"])

    op.alter_column(
        "access_tokens",
        "refresh_token",
        existing_type=postgresql.UUID(as_uuid=True),
        nullable=True,
        server_default=None,
    )


def downgrade() -> None:
    """Remove consumption and revocation columns."""
    op.execute(
        "UPDATE access_tokens SET refresh_token = uuid_generate_v4() "
        "WHERE refresh_token IS NULL"
    )
    op.alter_column(
        "access_tokens",
        "refresh_token",
        existing_type=postgresql.UUID(as_uuid=True),
        nullable=False,
        server_default=sa.text("uuid_generate_v4()"),
    )
    op.drop_index("idx_access_tokens_expires_at", table_name="access_tokens")
    op.drop_column("access_tokens", "user_id")
    op.drop_column("access_tokens", "revoked_at")

    op.drop_index("idx_auth_codes_expires_at", table_name="auth_codes")
    op.drop_constraint("auth_codes__unique_name", "auth_codes", type_="unique")
    op.drop_column("auth_codes", "consumed_at")
