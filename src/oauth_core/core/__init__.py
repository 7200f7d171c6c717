# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Core infrastructure components for OAuthCore."""

from .config import Settings, get_settings
from .database import Database, QueryExecutor

__all__ = ["Database", "QueryExecutor", "Settings", "get_settings"]
