# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Token store: issuance, lookup, rotation and revocation of token pairs."""

from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from beartype import beartype

from ..core.database import QueryExecutor, affected_rows, utc_now
from ..core.logging_utils import get_logger
from ..db import queries
from ..models import AccessToken, Client, GrantTypeRecord
from .errors import TokenGenerationError

logger = get_logger(__name__)


@beartype
def parse_token_value(value: str | None) -> UUID | None:
    """Parse a presented token; anything that is not a UUID cannot match a row."""
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


class TokenStore:
    """Persists access/refresh token pairs in ``access_tokens``.

    Token and refresh values are UUID4s drawn independently. Uniqueness is
    enforced by the table's constraints; an insert that hits one is retried
    with fresh values up to ``max_attempts`` times.
    """

    def __init__(
        self,
        db: QueryExecutor,
        *,
        max_attempts: int = 3,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db
        self._max_attempts = max_attempts
        self._clock = clock

    @beartype
    async def issue(
        self,
        client: Client,
        grant_type: GrantTypeRecord,
        scope: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta | None,
        *,
        user_id: int | None = None,
        executor: QueryExecutor | None = None,
    ) -> AccessToken:
        """Issue a new token row; ``refresh_ttl=None`` issues no refresh token."""
        db = executor or self._db
        issued_at = self._clock()
        expires_at = issued_at + access_ttl
        refresh_expires_at = None
        if refresh_ttl is not None:
            refresh_expires_at = max(issued_at + refresh_ttl, expires_at)

        for attempt in range(1, self._max_attempts + 1):
            row = await db.fetchrow(
                queries.INSERT_ACCESS_TOKEN,
                client.id,
                grant_type.id,
                uuid4(),
                uuid4() if refresh_ttl is not None else None,
                scope,
                expires_at,
                issued_at,
                refresh_expires_at,
                user_id,
            )
            if row:
                return AccessToken.from_record(row)
            logger.warning(
                "Token value collision on attempt %d/%d, regenerating",
                attempt,
                self._max_attempts,
            )

        raise TokenGenerationError(
            f"Could not generate a unique token pair in {self._max_attempts} attempts"
        )

    @beartype
    async def find_by_token(
        self, value: str, *, executor: QueryExecutor | None = None
    ) -> AccessToken | None:
        token = parse_token_value(value)
        if token is None:
            return None
        row = await (executor or self._db).fetchrow(
            queries.SELECT_ACCESS_TOKEN_BY_TOKEN, token
        )
        return AccessToken.from_record(row) if row else None

    @beartype
    async def find_by_refresh_token(
        self, value: str, *, executor: QueryExecutor | None = None
    ) -> AccessToken | None:
        refresh_token = parse_token_value(value)
        if refresh_token is None:
            return None
        row = await (executor or self._db).fetchrow(
            queries.SELECT_ACCESS_TOKEN_BY_REFRESH_TOKEN, refresh_token
        )
        return AccessToken.from_record(row) if row else None

    @beartype
    async def consume_refresh_token(
        self,
        value: str,
        client: Client,
        *,
        executor: QueryExecutor | None = None,
    ) -> AccessToken | None:
        """Atomically revoke the row holding a live refresh token of ``client``.

        Returns the row as it was revoked, or None when the refresh token is
        unknown, expired, already used, or belongs to another client. Only
        one of several concurrent callers can win.
        """
        refresh_token = parse_token_value(value)
        if refresh_token is None:
            return None
        row = await (executor or self._db).fetchrow(
            queries.CONSUME_REFRESH_TOKEN,
            refresh_token,
            client.id,
            self._clock(),
        )
        return AccessToken.from_record(row) if row else None

    @beartype
    async def revoke(
        self, value: str, *, executor: QueryExecutor | None = None
    ) -> bool:
        """Revoke the pair holding ``value`` as access or refresh token.

        Idempotent: revoking an unknown or already revoked token is not an
        error. Returns whether a row changed.
        """
        token = parse_token_value(value)
        if token is None:
            return False
        status = await (executor or self._db).execute(
            queries.REVOKE_ACCESS_TOKEN, token, self._clock()
        )
        return affected_rows(status) > 0

    @beartype
    async def purge_expired(self, before: datetime | None = None) -> int:
        """Delete rows whose access and refresh lifetimes both ended."""
        status = await self._db.execute(
            queries.DELETE_EXPIRED_ACCESS_TOKENS, before or self._clock()
        )
        removed = affected_rows(status)
        if removed:
            logger.info("Purged %d expired access tokens", removed)
        return removed
