# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Grant type enumeration and its stored reference rows."""

from enum import Enum

from beartype import beartype
from pydantic import Field

from .base import IdentifiableModel


class GrantType(str, Enum):
    """The closed set of OAuth2 flows the engine implements."""

    AUTHORIZATION_CODE = "authorization_code"
    IMPLICIT = "token"
    PASSWORD = "password"
    CLIENT_CREDENTIALS = "client_credentials"
    REFRESH_TOKEN = "refresh_token"

    @property
    def issues_refresh_token(self) -> bool:
        """Client credentials and implicit grants never carry a refresh token."""
        return self not in (GrantType.CLIENT_CREDENTIALS, GrantType.IMPLICIT)


@beartype
class GrantTypeRecord(IdentifiableModel):
    """A row of the ``grant_types`` reference table."""

    name: GrantType = Field(...)
