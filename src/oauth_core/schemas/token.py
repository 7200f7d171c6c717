# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Token endpoint request variants and response bodies.

Each grant type gets its own request model carrying only the parameters of
that flow; ``grant_type`` is the discriminator. Parameters a flow does not
define are ignored, as RFC 6749 section 3.2 requires.
"""

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..core.result_types import Err, Ok, Result


class _GrantRequestBase(BaseModel):
    """Fields common to every token request."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    client_id: str = Field(..., min_length=1, max_length=256)
    client_secret: str = Field(..., min_length=1, max_length=256, repr=False)


class AuthorizationCodeGrantRequest(_GrantRequestBase):
    grant_type: Literal["authorization_code"]
    code: str = Field(..., min_length=1, max_length=64, repr=False)
    redirect_uri: str = Field(..., min_length=1, max_length=128)


class RefreshTokenGrantRequest(_GrantRequestBase):
    grant_type: Literal["refresh_token"]
    refresh_token: str = Field(..., min_length=1, repr=False)
    scope: str | None = Field(default=None, max_length=255)


class ClientCredentialsGrantRequest(_GrantRequestBase):
    grant_type: Literal["client_credentials"]
    scope: str | None = Field(default=None, max_length=255)


class PasswordGrantRequest(_GrantRequestBase):
    grant_type: Literal["password"]
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, repr=False)
    scope: str | None = Field(default=None, max_length=255)


class ImplicitGrantRequest(_GrantRequestBase):
    grant_type: Literal["token"]
    redirect_uri: str = Field(..., min_length=1, max_length=128)
    scope: str | None = Field(default=None, max_length=255)


GrantRequest = Annotated[
    AuthorizationCodeGrantRequest
    | RefreshTokenGrantRequest
    | ClientCredentialsGrantRequest
    | PasswordGrantRequest
    | ImplicitGrantRequest,
    Field(discriminator="grant_type"),
]

_grant_request_adapter: TypeAdapter[Any] = TypeAdapter(GrantRequest)


@beartype
def clean_params(params: Mapping[str, str | None]) -> dict[str, str]:
    """Drop absent and empty parameters; OAuth2 treats both as not sent."""
    return {key: value for key, value in params.items() if value}


@beartype
def parse_grant_request(params: Mapping[str, str | None]) -> Result[Any, str]:
    """Parse token endpoint parameters into the variant for their grant type."""
    try:
        return Ok(_grant_request_adapter.validate_python(clean_params(params)))
    except ValidationError as e:
        fields = sorted(
            {str(err["loc"][-1]) for err in e.errors() if err.get("loc")}
        )
        return Err(f"Missing or invalid parameter(s): {', '.join(fields)}")


class TokenResponse(BaseModel):
    """Successful token endpoint response (RFC 6749 section 5.1)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in: int = Field(..., gt=0)
    refresh_token: str | None = None
    scope: str = ""

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Wire body; ``refresh_token`` is omitted when none was issued."""
        return self.model_dump(exclude_none=True)


class AuthorizationRequest(BaseModel):
    """Front-channel request for an authorization code.

    ``user_id`` is the resource owner the caller already authenticated.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    response_type: Literal["code"]
    client_id: str = Field(..., min_length=1, max_length=256)
    redirect_uri: str = Field(..., min_length=1, max_length=128)
    scope: str | None = Field(default=None, max_length=255)
    state: str | None = None
    user_id: int | None = None


class AuthorizationResponse(BaseModel):
    """Code handed back to the client through its redirect URI."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: str = Field(..., repr=False)
    redirect_uri: str
    state: str | None = None

    @beartype
    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, exclude={"redirect_uri"})


class RevocationRequest(BaseModel):
    """Token revocation request (RFC 7009)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    token: str = Field(..., min_length=1, repr=False)
    token_type_hint: Literal["access_token", "refresh_token"] | None = None
    client_id: str = Field(..., min_length=1, max_length=256)
    client_secret: str = Field(..., min_length=1, max_length=256, repr=False)
