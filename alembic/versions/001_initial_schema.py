"""Initial OAuth2 schema and seed data.

Revision ID: 001
Revises:
Create Date: 2025-07-01

Creates the five OAuth2 tables:
1. clients - registered clients and their secrets
2. grant_types - reference list of supported flows
3. client_redirect_uris - redirect URIs registered per client
4. access_tokens - issued access/refresh token pairs
5. auth_codes - authorization codes of the code flow

and seeds the grant types plus one development client.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


GRANT_TYPES = (
    "authorization_code",
    "token",
    "password",
    "client_credentials",
    "refresh_token",
)


def upgrade() -> None:
    """Create OAuth2 tables and seed rows."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("identifier", sa.String(256), nullable=False),
        sa.Column("secret", sa.String(256), nullable=False),
        sa.Column("response_type", sa.String(64), nullable=False),
        sa.UniqueConstraint("identifier", name="clients__unique_identifier"),
    )

    op.create_table(
        "grant_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(32), nullable=False),
        sa.UniqueConstraint("name", name="grant_types__unique_name"),
    )

    op.create_table(
        "client_redirect_uris",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("redirect_uri", sa.String(128), nullable=False),
        sa.ForeignKeyConstraint(
            ["client_id"], ["clients.id"], name="client_redirect_uris__client_id"
        ),
    )

    op.create_table(
        "access_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("grant_id", sa.Integer(), nullable=False),
        sa.Column(
            "token",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("uuid_generate_v4()"),
        ),
        sa.Column(
            "refresh_token",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("uuid_generate_v4()"),
        ),
        sa.Column("scope", sa.String(255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("refresh_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["client_id"], ["clients.id"], name="access_tokens__client_id"
        ),
        sa.ForeignKeyConstraint(
            ["grant_id"], ["grant_types.id"], name="access_tokens__grant_id"
        ),
        sa.UniqueConstraint("token", name="access_tokens__unique_token"),
        sa.UniqueConstraint("refresh_token", name="access_tokens__unique_refresh_token"),
    )

    op.create_table(
        "auth_codes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("scope", sa.String(255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("redirect_uri", sa.String(128), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ["client_id"], ["clients.id"], name="auth_codes__client_id"
        ),
    )

    grant_types = sa.table("grant_types", sa.column("name", sa.String))
    op.bulk_insert(grant_types, [{"name": name} for name in GRANT_TYPES])

    clients = sa.table(
        "clients",
        sa.column("identifier", sa.String),
        sa.column("secret", sa.String),
        sa.column("response_type", sa.String),
    )
    op.bulk_insert(
        clients,
        [{"identifier": "abcd1234", "secret": "abcd1234", "response_type": "something"}],
    )

    redirect_uris = sa.table(
        "client_redirect_uris",
        sa.column("client_id", sa.Integer),
        sa.column("redirect_uri", sa.String),
    )
    op.bulk_insert(
        redirect_uris,
        [{"client_id": 1, "redirect_uri": "http://localhost/testing/redirect_uri_one"}],
    )


def downgrade() -> None:
    """Drop OAuth2 tables."""
    op.drop_table("auth_codes")
    op.drop_table("access_tokens")
    op.drop_table("client_redirect_uris")
    op.drop_table("grant_types")
    op.drop_table("clients")
