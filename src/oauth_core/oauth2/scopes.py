# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""OAuth2 scope parsing and narrowing."""

from collections.abc import Iterable

from beartype import beartype

from ..core.result_types import Err, Ok, Result


@beartype
def parse_scope(scope: str | None) -> tuple[str, ...]:
    """Split a space separated scope string, dropping duplicates, keeping order."""
    if not scope:
        return ()
    return tuple(dict.fromkeys(scope.split()))


@beartype
def format_scope(scopes: Iterable[str]) -> str:
    return " ".join(scopes)


class ScopeValidator:
    """Validates requested scopes against a grant and the known scope set."""

    def __init__(self, known_scopes: Iterable[str] | None = None) -> None:
        self._known = frozenset(known_scopes) if known_scopes is not None else None

    @beartype
    def validate_known(self, scope: str | None) -> Result[str, str]:
        """Normalize ``scope``; reject scopes the server does not recognise."""
        requested = parse_scope(scope)
        if self._known is not None:
            unknown = [s for s in requested if s not in self._known]
            if unknown:
                return Err(f"Unknown scope: {' '.join(unknown)}")
        return Ok(format_scope(requested))

    @beartype
    def narrow(self, requested: str | None, granted: str) -> Result[str, str]:
        """Narrow ``granted`` to ``requested``.

        An absent request keeps the full grant. Any requested scope outside
        the grant is an error; scopes are never widened.
        """
        if requested is None or not requested.strip():
            return Ok(format_scope(parse_scope(granted)))

        granted_set = set(parse_scope(granted))
        wanted = parse_scope(requested)
        excess = [s for s in wanted if s not in granted_set]
        if excess:
            return Err(f"Scope exceeds original grant: {' '.join(excess)}")
        return Ok(format_scope(wanted))
