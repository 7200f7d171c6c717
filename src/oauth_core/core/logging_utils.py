# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Central logging utilities for OAuthCore.

Key Features
------------
1. configure_logging(): idempotent initialization of the root logger.
2. get_logger(name): typed helper that always returns a configured logger.
3. mask_secret(value): renders credentials (client secrets, codes, tokens)
   in a form that is safe to write to a log line.

Credentials must never reach a log record in clear text. Always pass them
through ``mask_secret`` first.
"""

from __future__ import annotations

import logging
from typing import Final

from beartype import beartype

__all__: Final = [
    "configure_logging",
    "get_logger",
    "mask_secret",
]

_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_MASKED: Final = "***MASKED***"
_is_configured: bool = False


@beartype
def configure_logging(
    *, level: int = logging.INFO, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Configure the root logger exactly once.

    Calling this function multiple times is safe; configuration is only
    applied on the first invocation.
    """
    global _is_configured
    if _is_configured:
        return

    logging.basicConfig(level=level, format=fmt)
    _is_configured = True


@beartype
def get_logger(name: str | None = None, *, level: int | None = None) -> logging.Logger:
    """Return a module-scoped logger that is guaranteed to be configured."""
    configure_logging()
    logger = logging.getLogger(name or "oauth_core")
    if level is not None:
        logger.setLevel(level)
    return logger


@beartype
def mask_secret(value: str | None) -> str:
    """Mask a credential, keeping only the last four characters of long values."""
    if not value:
        return "***EMPTY***"
    if len(value) > 16:
        return f"...{value[-4:]}"
    return _MASKED
