# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""OAuth2 grant processing and token lifecycle."""

from .auth_codes import AuthorizationCodeStore
from .clients import ClientRegistry
from .engine import GrantEngine
from .errors import CatalogLoadError, GrantErrorKind, OAuth2Error, TokenGenerationError
from .grant_types import GrantTypeCatalog
from .scopes import ScopeValidator
from .tokens import TokenStore
from .users import UserAuthenticator
from .validator import TokenValidator

__all__ = [
    "AuthorizationCodeStore",
    "CatalogLoadError",
    "ClientRegistry",
    "GrantEngine",
    "GrantErrorKind",
    "GrantTypeCatalog",
    "OAuth2Error",
    "ScopeValidator",
    "TokenGenerationError",
    "TokenStore",
    "TokenValidator",
    "UserAuthenticator",
]
