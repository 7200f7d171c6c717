# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Issued access token rows and the validation view handed to resource servers."""

from datetime import datetime
from uuid import UUID

from beartype import beartype
from pydantic import Field, field_validator, model_validator

from .base import BaseModelConfig, IdentifiableModel, ensure_aware


@beartype
class AccessToken(IdentifiableModel):
    """An issued access token, optionally paired with a refresh token.

    Rows are immutable once written apart from ``revoked_at``, which marks
    the pair permanently invalid before its natural expiry.
    """

    client_id: int = Field(..., ge=1)
    grant_id: int = Field(..., ge=1)
    token: UUID = Field(..., repr=False)
    refresh_token: UUID | None = Field(default=None, repr=False)
    scope: str = Field(..., max_length=255)
    issued_at: datetime
    expires_at: datetime
    refresh_expires_at: datetime | None = None
    user_id: int | None = None
    revoked_at: datetime | None = None

    @field_validator("issued_at", "expires_at", "refresh_expires_at", "revoked_at")
    @classmethod
    def validate_timezone(cls, v: datetime | None) -> datetime | None:
        return v if v is None else ensure_aware(v)

    @model_validator(mode="after")
    def validate_lifetimes(self) -> "AccessToken":
        """Enforce expiry ordering between issuance, access and refresh."""
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be after issued_at")
        if self.refresh_expires_at is not None:
            if self.refresh_token is None:
                raise ValueError("refresh_expires_at set without a refresh_token")
            if self.refresh_expires_at < self.expires_at:
                raise ValueError("refresh_expires_at must not precede expires_at")
        return self

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_active(self, now: datetime) -> bool:
        """The access token is usable: not revoked and not yet expired."""
        return not self.is_revoked and now < self.expires_at

    def is_refreshable(self, now: datetime) -> bool:
        """The refresh token is usable: present, not revoked, not expired."""
        return (
            self.refresh_token is not None
            and self.refresh_expires_at is not None
            and not self.is_revoked
            and now < self.refresh_expires_at
        )

    def remaining_ttl(self, now: datetime) -> int:
        """Whole seconds of access token lifetime left, never negative."""
        return max(0, int((self.expires_at - now).total_seconds()))


@beartype
class TokenInfo(BaseModelConfig):
    """What a resource server learns about a valid access token."""

    client_id: int
    scope: str
    user_id: int | None = None
    remaining_ttl: int = Field(..., ge=0)
    expires_at: datetime
