# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Token validation for resource servers."""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from beartype import beartype

from ..core.database import utc_now
from ..core.result_types import Err, Ok, Result
from ..models import AccessToken, TokenInfo
from .tokens import TokenStore


class TokenValidator:
    """Answers "is this bearer token good right now, and for what?".

    Read only. Called on every protected request, so it issues a single
    indexed lookup and nothing else.
    """

    def __init__(
        self,
        tokens: TokenStore,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._tokens = tokens
        self._clock = clock

    @beartype
    async def validate(self, token: str) -> Result[TokenInfo, str]:
        """Validate an access token: it exists, is not revoked and not expired."""
        record = await self._tokens.find_by_token(token)
        now = self._clock()
        if record is None or not record.is_active(now):
            return Err("invalid_token")

        return Ok(
            TokenInfo(
                client_id=record.client_id,
                scope=record.scope,
                user_id=record.user_id,
                remaining_ttl=record.remaining_ttl(now),
                expires_at=record.expires_at,
            )
        )

    @beartype
    async def introspect(self, token: str) -> dict[str, Any]:
        """RFC 7662 introspection response for an access or refresh token."""
        now = self._clock()

        record = await self._tokens.find_by_token(token)
        if record is not None and record.is_active(now):
            return self._introspection(record, record.expires_at, "access_token")

        record = await self._tokens.find_by_refresh_token(token)
        if (
            record is not None
            and record.refresh_expires_at is not None
            and record.is_refreshable(now)
        ):
            return self._introspection(
                record, record.refresh_expires_at, "refresh_token"
            )

        return {"active": False}

    @staticmethod
    def _introspection(
        record: AccessToken, expires_at: datetime, token_type: str
    ) -> dict[str, Any]:
        response: dict[str, Any] = {
            "active": True,
            "scope": record.scope,
            "client_id": record.client_id,
            "token_type": token_type,
            "exp": int(expires_at.timestamp()),
            "iat": int(record.issued_at.timestamp()),
        }
        if record.user_id is not None:
            response["sub"] = str(record.user_id)
        return response
