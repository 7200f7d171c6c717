# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Named SQL statements issued by the stores.

Timestamps are always bound from Python (never ``now()`` in SQL) so a single
request evaluates expiry against one consistent instant.

Single-use semantics rest on two statements: ``REDEEM_AUTH_CODE`` and
``CONSUME_REFRESH_TOKEN``. Each is one conditional ``UPDATE ... RETURNING``:
the row is returned only to the caller whose update flipped the marker, so
concurrent attempts on one value produce exactly one winner.
"""

CLIENT_COLUMNS = "id, identifier, secret, response_type"

AUTH_CODE_COLUMNS = (
    "id, client_id, name, scope, expires_at, redirect_uri, user_id, consumed_at"
)

ACCESS_TOKEN_COLUMNS = (
    "id, client_id, grant_id, token, refresh_token, scope, expires_at, "
    "issued_at, refresh_expires_at, user_id, revoked_at"
)

# Client registry

SELECT_CLIENT_BY_IDENTIFIER = f"""
    SELECT {CLIENT_COLUMNS}
    FROM clients
    WHERE identifier = $1
"""

SELECT_CLIENT_REDIRECT_URIS = """
    SELECT redirect_uri
    FROM client_redirect_uris
    WHERE client_id = $1
    ORDER BY id
"""

# Grant type catalog

SELECT_GRANT_TYPES = """
    SELECT id, name
    FROM grant_types
    ORDER BY id
"""

# Authorization codes

INSERT_AUTH_CODE = f"""
    INSERT INTO auth_codes (
        client_id, name, scope, expires_at, redirect_uri, user_id
    ) VALUES ($1, $2, $3, $4, $5, $6)
    ON CONFLICT (name) DO NOTHING
    RETURNING {AUTH_CODE_COLUMNS}
"""

REDEEM_AUTH_CODE = f"""
    UPDATE auth_codes
    SET consumed_at = $4
    WHERE name = $1
      AND client_id = $2
      AND redirect_uri = $3
      AND consumed_at IS NULL
      AND expires_at > $4
    RETURNING {AUTH_CODE_COLUMNS}
"""

DELETE_EXPIRED_AUTH_CODES = """
    DELETE FROM auth_codes
    WHERE expires_at <= $1
"""

# Access tokens

INSERT_ACCESS_TOKEN = f"""
    INSERT INTO access_tokens (
        client_id, grant_id, token, refresh_token, scope,
        expires_at, issued_at, refresh_expires_at, user_id
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
    ON CONFLICT DO NOTHING
    RETURNING {ACCESS_TOKEN_COLUMNS}
"""

SELECT_ACCESS_TOKEN_BY_TOKEN = f"""
    SELECT {ACCESS_TOKEN_COLUMNS}
    FROM access_tokens
    WHERE token = $1
"""

SELECT_ACCESS_TOKEN_BY_REFRESH_TOKEN = f"""
    SELECT {ACCESS_TOKEN_COLUMNS}
    FROM access_tokens
    WHERE refresh_token = $1
"""

CONSUME_REFRESH_TOKEN = f"""
    UPDATE access_tokens
    SET revoked_at = $3
    WHERE refresh_token = $1
      AND client_id = $2
      AND revoked_at IS NULL
      AND refresh_expires_at > $3
    RETURNING {ACCESS_TOKEN_COLUMNS}
"""

REVOKE_ACCESS_TOKEN = """
    UPDATE access_tokens
    SET revoked_at = $2
    WHERE (token = $1 OR refresh_token = $1)
      AND revoked_at IS NULL
"""

DELETE_EXPIRED_ACCESS_TOKENS = """
    DELETE FROM access_tokens
    WHERE expires_at <= $1
      AND (refresh_expires_at IS NULL OR refresh_expires_at <= $1)
"""
