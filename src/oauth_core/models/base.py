# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Base Pydantic model configuration for all domain models.

Rows read from the store are turned into frozen models right at the store
boundary, so nothing past a store method can mutate persisted state by
accident.
"""

from datetime import datetime
from typing import Any

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field


@beartype
class BaseModelConfig(BaseModel):
    """Base model with strict configuration for all domain entities.

    Enforces:
    - Immutability (frozen=True)
    - No extra fields allowed (extra="forbid")
    - Validation on assignment
    - Timezone-aware datetime handling
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        validate_default=True,
    )

    @classmethod
    def from_record(cls, record: Any) -> "BaseModelConfig":
        """Build a model from an asyncpg ``Record`` or any mapping of columns."""
        return cls.model_validate(dict(record))


@beartype
class IdentifiableModel(BaseModelConfig):
    """Base model for rows keyed by a serial integer primary key."""

    id: int = Field(..., ge=1, description="Primary key")


def ensure_aware(value: datetime) -> datetime:
    """Reject naive datetimes; every persisted timestamp is timezone aware."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("datetime must be timezone aware")
    return value
