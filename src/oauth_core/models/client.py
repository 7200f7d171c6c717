# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Registered OAuth2 client."""

from beartype import beartype
from pydantic import Field

from .base import IdentifiableModel


@beartype
class Client(IdentifiableModel):
    """A registered client and the redirect URIs it may use."""

    identifier: str = Field(..., min_length=1, max_length=256)
    secret: str = Field(..., min_length=1, max_length=256, repr=False)
    response_type: str = Field(
        ...,
        max_length=64,
        description="Space separated response types the client may request",
    )
    redirect_uris: tuple[str, ...] = Field(default=())

    @property
    def response_types(self) -> frozenset[str]:
        return frozenset(self.response_type.split())

    def allows_response_type(self, response_type: str) -> bool:
        """Check whether the client registered ``response_type``."""
        return response_type in self.response_types
