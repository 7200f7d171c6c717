# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Authorization code issued by the front-channel step of the code flow."""

from datetime import datetime

from beartype import beartype
from pydantic import Field, field_validator

from .base import IdentifiableModel, ensure_aware


@beartype
class AuthCode(IdentifiableModel):
    """A short-lived, single-use authorization code.

    ``name`` holds the code value handed to the client. ``consumed_at`` is
    set by the one redemption that succeeds.
    """

    client_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=64, repr=False)
    scope: str = Field(..., max_length=255)
    expires_at: datetime
    redirect_uri: str = Field(..., min_length=1, max_length=128)
    user_id: int | None = None
    consumed_at: datetime | None = None

    @field_validator("expires_at", "consumed_at")
    @classmethod
    def validate_timezone(cls, v: datetime | None) -> datetime | None:
        return v if v is None else ensure_aware(v)

    @property
    def is_consumed(self) -> bool:
        return self.consumed_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
