# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Authorization code store."""

import secrets
from collections.abc import Callable
from datetime import datetime, timedelta

from beartype import beartype

from ..core.database import QueryExecutor, affected_rows, utc_now
from ..core.logging_utils import get_logger
from ..db import queries
from ..models import AuthCode, Client
from .errors import TokenGenerationError

logger = get_logger(__name__)

_CODE_BYTES = 32
_MAX_ISSUE_ATTEMPTS = 3


class AuthorizationCodeStore:
    """Issues and redeems single-use authorization codes."""

    def __init__(
        self,
        db: QueryExecutor,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db
        self._clock = clock

    @beartype
    def _generate_code(self) -> str:
        """Generate an unguessable code value (43 URL-safe characters)."""
        return secrets.token_urlsafe(_CODE_BYTES)

    @beartype
    async def issue(
        self,
        client: Client,
        scope: str,
        redirect_uri: str,
        user_id: int | None,
        ttl: timedelta,
        *,
        executor: QueryExecutor | None = None,
    ) -> AuthCode:
        """Persist a fresh code bound to client, scope, redirect URI and user."""
        db = executor or self._db
        expires_at = self._clock() + ttl

        for _ in range(_MAX_ISSUE_ATTEMPTS):
            row = await db.fetchrow(
                queries.INSERT_AUTH_CODE,
                client.id,
                self._generate_code(),
                scope,
                expires_at,
                redirect_uri,
                user_id,
            )
            if row:
                return AuthCode.from_record(row)
            logger.warning("Authorization code collision, regenerating")

        raise TokenGenerationError(
            f"Could not generate a unique authorization code in {_MAX_ISSUE_ATTEMPTS} attempts"
        )

    @beartype
    async def redeem_once(
        self,
        code: str,
        client: Client,
        redirect_uri: str,
        *,
        executor: QueryExecutor | None = None,
    ) -> AuthCode | None:
        """Consume ``code`` if it is live and bound to this client and redirect URI.

        Validation and consumption are one conditional update, so of any
        number of concurrent attempts at most one gets the code back. Every
        failure reason yields None.
        """
        db = executor or self._db
        row = await db.fetchrow(
            queries.REDEEM_AUTH_CODE,
            code,
            client.id,
            redirect_uri,
            self._clock(),
        )
        if not row:
            return None
        return AuthCode.from_record(row)

    @beartype
    async def purge_expired(self, before: datetime | None = None) -> int:
        """Delete codes that expired before ``before``; returns rows removed."""
        status = await self._db.execute(
            queries.DELETE_EXPIRED_AUTH_CODES, before or self._clock()
        )
        removed = affected_rows(status)
        if removed:
            logger.info("Purged %d expired authorization codes", removed)
        return removed
