# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""OAuth2 error taxonomy (RFC 6749 section 5.2)."""

from enum import Enum
from typing import Any

from beartype import beartype


class GrantErrorKind(str, Enum):
    """Error codes returned in the ``error`` field of a token error response."""

    INVALID_REQUEST = "invalid_request"
    INVALID_CLIENT = "invalid_client"
    INVALID_GRANT = "invalid_grant"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    INVALID_SCOPE = "invalid_scope"
    SERVER_ERROR = "server_error"


_STATUS_CODES = {
    GrantErrorKind.INVALID_CLIENT: 401,
    GrantErrorKind.SERVER_ERROR: 500,
}


class OAuth2Error(Exception):
    """OAuth2 specific errors."""

    def __init__(
        self,
        error: GrantErrorKind,
        error_description: str | None = None,
    ) -> None:
        self.error = GrantErrorKind(error)
        self.error_description = error_description
        self.status_code = _STATUS_CODES.get(self.error, 400)
        super().__init__(error_description or self.error.value)

    def __repr__(self) -> str:
        return f"OAuth2Error({self.error.value!r}, {self.error_description!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OAuth2Error):
            return NotImplemented
        return (self.error, self.error_description) == (
            other.error,
            other.error_description,
        )

    def __hash__(self) -> int:
        return hash((self.error, self.error_description))

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Convert to OAuth2 error response."""
        response: dict[str, Any] = {"error": self.error.value}
        if self.error_description:
            response["error_description"] = self.error_description
        return response

    @classmethod
    def invalid_request(cls, description: str | None = None) -> "OAuth2Error":
        return cls(GrantErrorKind.INVALID_REQUEST, description)

    @classmethod
    def invalid_client(cls) -> "OAuth2Error":
        return cls(GrantErrorKind.INVALID_CLIENT, "Client authentication failed")

    @classmethod
    def invalid_grant(cls) -> "OAuth2Error":
        # One description for every cause so callers cannot tell them apart.
        return cls(
            GrantErrorKind.INVALID_GRANT,
            "The provided authorization grant is invalid, expired, or revoked",
        )

    @classmethod
    def unauthorized_client(cls, description: str | None = None) -> "OAuth2Error":
        return cls(GrantErrorKind.UNAUTHORIZED_CLIENT, description)

    @classmethod
    def unsupported_grant_type(cls) -> "OAuth2Error":
        return cls(GrantErrorKind.UNSUPPORTED_GRANT_TYPE)

    @classmethod
    def invalid_scope(cls, description: str | None = None) -> "OAuth2Error":
        return cls(GrantErrorKind.INVALID_SCOPE, description)

    @classmethod
    def server_error(cls) -> "OAuth2Error":
        return cls(GrantErrorKind.SERVER_ERROR)


class TokenGenerationError(RuntimeError):
    """No unique token pair could be generated within the retry budget."""


class CatalogLoadError(RuntimeError):
    """The grant type reference table is missing required rows."""
