# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Resource owner authentication seam used by the password grant."""

from beartype.typing import Protocol, runtime_checkable


@runtime_checkable
class UserAuthenticator(Protocol):
    """Verifies resource owner credentials.

    Implementations return the authenticated user's id, or None when the
    credentials are rejected. They must not raise for bad credentials.
    """

    async def authenticate(self, username: str, password: str) -> int | None: ...
