# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Wire-level request and response schemas."""

from .token import (
    AuthorizationCodeGrantRequest,
    AuthorizationRequest,
    AuthorizationResponse,
    ClientCredentialsGrantRequest,
    GrantRequest,
    ImplicitGrantRequest,
    PasswordGrantRequest,
    RefreshTokenGrantRequest,
    RevocationRequest,
    TokenResponse,
    parse_grant_request,
)

__all__ = [
    "AuthorizationCodeGrantRequest",
    "AuthorizationRequest",
    "AuthorizationResponse",
    "ClientCredentialsGrantRequest",
    "GrantRequest",
    "ImplicitGrantRequest",
    "PasswordGrantRequest",
    "RefreshTokenGrantRequest",
    "RevocationRequest",
    "TokenResponse",
    "parse_grant_request",
]
