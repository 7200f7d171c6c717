# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Domain models for persisted OAuth2 state."""

from .auth_code import AuthCode
from .base import BaseModelConfig, IdentifiableModel
from .client import Client
from .grant import GrantType, GrantTypeRecord
from .token import AccessToken, TokenInfo

__all__ = [
    "AccessToken",
    "AuthCode",
    "BaseModelConfig",
    "Client",
    "GrantType",
    "GrantTypeRecord",
    "IdentifiableModel",
    "TokenInfo",
]
