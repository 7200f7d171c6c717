# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Client registry: stateless lookups over the ``clients`` tables."""

import secrets

from beartype import beartype
from passlib.context import CryptContext

from ..core.database import QueryExecutor
from ..core.logging_utils import get_logger
from ..db import queries
from ..models import Client

logger = get_logger(__name__)

# Secrets provisioned as hashes are verified through passlib; plain stored
# secrets fall back to a constant time comparison.
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

# Unknown identifiers are checked against this client so both failure paths
# run a secret comparison.
_UNKNOWN_CLIENT = Client(
    id=1,
    identifier="unknown",
    secret=secrets.token_urlsafe(24),
    response_type="",
)


class ClientRegistry:
    """Read-only access to registered clients.

    Nothing is cached; every call re-reads the store.
    """

    def __init__(self, db: QueryExecutor) -> None:
        self._db = db

    @beartype
    async def lookup_by_identifier(self, identifier: str) -> Client | None:
        """Load a client and its registered redirect URIs."""
        row = await self._db.fetchrow(
            queries.SELECT_CLIENT_BY_IDENTIFIER, identifier
        )
        if not row:
            return None

        uri_rows = await self._db.fetch(
            queries.SELECT_CLIENT_REDIRECT_URIS, row["id"]
        )
        return Client(
            **dict(row),
            redirect_uris=tuple(r["redirect_uri"] for r in uri_rows),
        )

    @beartype
    def verify_secret(self, client: Client, presented_secret: str) -> bool:
        """Compare a presented secret with the stored one in constant time."""
        stored = client.secret
        if pwd_context.identify(stored) is not None:
            return pwd_context.verify(presented_secret, stored)
        return secrets.compare_digest(
            presented_secret.encode("utf-8"), stored.encode("utf-8")
        )

    @beartype
    def is_redirect_uri_registered(self, client: Client, uri: str) -> bool:
        """Exact string match against the registered URIs, no normalization."""
        return uri in client.redirect_uris

    @beartype
    async def authenticate(
        self, identifier: str | None, secret: str | None
    ) -> Client | None:
        """Resolve and authenticate a client; None on any failure."""
        if not identifier or secret is None:
            return None

        client = await self.lookup_by_identifier(identifier)
        if client is None:
            self.verify_secret(_UNKNOWN_CLIENT, secret)
            logger.warning("Client authentication failed: unknown client")
            return None

        if not self.verify_secret(client, secret):
            logger.warning(
                "Client authentication failed: secret mismatch for client %d",
                client.id,
            )
            return None

        return client
