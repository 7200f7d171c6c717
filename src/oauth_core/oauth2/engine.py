# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""OAuth2 grant engine: the token endpoint's decision logic."""

from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timedelta
from typing import Any

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.database import Database, utc_now
from ..core.logging_utils import get_logger, mask_secret
from ..core.result_types import Err, Ok, Result
from ..models import AccessToken, Client, GrantType, GrantTypeRecord
from ..schemas.token import (
    AuthorizationCodeGrantRequest,
    AuthorizationRequest,
    AuthorizationResponse,
    ClientCredentialsGrantRequest,
    ImplicitGrantRequest,
    PasswordGrantRequest,
    RefreshTokenGrantRequest,
    RevocationRequest,
    TokenResponse,
    parse_grant_request,
)
from .auth_codes import AuthorizationCodeStore
from .clients import ClientRegistry
from .errors import OAuth2Error
from .grant_types import GrantTypeCatalog
from .scopes import ScopeValidator
from .tokens import TokenStore
from .users import UserAuthenticator
from .validator import TokenValidator

logger = get_logger(__name__)

GrantOutcome = Result[TokenResponse, OAuth2Error]
_Handler = Callable[[Any, Client, GrantTypeRecord], Awaitable[Any]]


class GrantEngine:
    """Validates grant requests and issues, rotates and revokes tokens.

    The engine keeps no request state between calls; every decision is
    re-derived from the store. Multi-statement steps (code redemption plus
    issuance, refresh rotation plus issuance) run inside one database
    transaction, so a failure part way leaves nothing committed.
    """

    def __init__(
        self,
        db: Database,
        catalog: GrantTypeCatalog,
        settings: Settings | None = None,
        *,
        user_authenticator: UserAuthenticator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db
        self._catalog = catalog
        self._settings = settings or get_settings()
        self._users = user_authenticator
        self._clock = clock

        self.clients = ClientRegistry(db)
        self.codes = AuthorizationCodeStore(db, clock=clock)
        self.tokens = TokenStore(
            db,
            max_attempts=self._settings.token_generation_max_attempts,
            clock=clock,
        )
        self.validator = TokenValidator(self.tokens, clock=clock)
        self._scopes = ScopeValidator(self._settings.oauth_known_scopes)

        self._handlers: dict[GrantType, _Handler] = {
            GrantType.AUTHORIZATION_CODE: self._handle_authorization_code_grant,
            GrantType.REFRESH_TOKEN: self._handle_refresh_token_grant,
            GrantType.CLIENT_CREDENTIALS: self._handle_client_credentials_grant,
            GrantType.PASSWORD: self._handle_password_grant,
            GrantType.IMPLICIT: self._handle_implicit_grant,
        }

    @classmethod
    async def create(
        cls,
        db: Database,
        settings: Settings | None = None,
        *,
        user_authenticator: UserAuthenticator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> "GrantEngine":
        """Load the grant type catalog and build an engine around it."""
        settings = settings or get_settings()
        catalog = await GrantTypeCatalog.load(db, settings)
        return cls(
            db,
            catalog,
            settings,
            user_authenticator=user_authenticator,
            clock=clock,
        )

    # Token endpoint

    @beartype
    async def process_grant_request(
        self, params: Mapping[str, str | None]
    ) -> GrantOutcome:
        """Handle a token endpoint request.

        Args:
            params: Token endpoint parameters as received (form fields).

        Returns:
            Ok(TokenResponse) on issuance, Err(OAuth2Error) otherwise. Internal
            failures are reported as ``server_error`` without detail.
        """
        try:
            result = await self._process(params)
        except Exception:
            logger.exception(
                "Grant request failed (grant_type=%r)", params.get("grant_type")
            )
            return Err(OAuth2Error.server_error())

        if result.is_err():
            logger.warning(
                "Grant request rejected (grant_type=%r, client=%r): %s",
                params.get("grant_type"),
                params.get("client_id"),
                result.err_value.error.value,
            )
        return result

    async def _process(self, params: Mapping[str, str | None]) -> GrantOutcome:
        grant_name = params.get("grant_type")
        if not grant_name:
            return Err(OAuth2Error.invalid_request("Missing parameter: grant_type"))

        resolved = self._catalog.resolve(grant_name)
        if resolved.is_err():
            return Err(OAuth2Error.unsupported_grant_type())
        grant = resolved.ok_value

        parsed = parse_grant_request(params)
        if parsed.is_err():
            return Err(OAuth2Error.invalid_request(parsed.err_value))
        request = parsed.ok_value

        client = await self.clients.authenticate(
            request.client_id, request.client_secret
        )
        if client is None:
            return Err(OAuth2Error.invalid_client())

        return await self._handlers[grant.name](request, client, grant)

    async def _handle_authorization_code_grant(
        self,
        request: AuthorizationCodeGrantRequest,
        client: Client,
        grant: GrantTypeRecord,
    ) -> GrantOutcome:
        """Exchange a code for a token pair.

        Redemption and issuance share one transaction: if issuance fails the
        redemption rolls back and the code stays usable.
        """
        async with self._db.transaction() as conn:
            code = await self.codes.redeem_once(
                request.code, client, request.redirect_uri, executor=conn
            )
            if code is None:
                return Err(OAuth2Error.invalid_grant())

            token = await self.tokens.issue(
                client,
                grant,
                code.scope,
                self._settings.access_token_ttl,
                self._refresh_ttl(grant),
                user_id=code.user_id,
                executor=conn,
            )

        return Ok(self._issued(token, grant, client))

    async def _handle_refresh_token_grant(
        self,
        request: RefreshTokenGrantRequest,
        client: Client,
        grant: GrantTypeRecord,
    ) -> GrantOutcome:
        """Rotate a refresh token.

        The presented refresh token is revoked in the same transaction that
        issues the new pair, so each refresh token works once.
        """
        existing = await self.tokens.find_by_refresh_token(request.refresh_token)
        if (
            existing is None
            or existing.client_id != client.id
            or not existing.is_refreshable(self._clock())
        ):
            return Err(OAuth2Error.invalid_grant())

        narrowed = self._scopes.narrow(request.scope, existing.scope)
        if narrowed.is_err():
            return Err(OAuth2Error.invalid_scope(narrowed.err_value))

        async with self._db.transaction() as conn:
            consumed = await self.tokens.consume_refresh_token(
                request.refresh_token, client, executor=conn
            )
            if consumed is None:
                # Lost a race with a concurrent refresh of the same token.
                return Err(OAuth2Error.invalid_grant())

            token = await self.tokens.issue(
                client,
                grant,
                narrowed.ok_value,
                self._settings.access_token_ttl,
                self._refresh_ttl(grant),
                user_id=consumed.user_id,
                executor=conn,
            )

        return Ok(self._issued(token, grant, client))

    async def _handle_client_credentials_grant(
        self,
        request: ClientCredentialsGrantRequest,
        client: Client,
        grant: GrantTypeRecord,
    ) -> GrantOutcome:
        """Issue an access token to the client itself; never a refresh token."""
        scope = self._scopes.validate_known(request.scope)
        if scope.is_err():
            return Err(OAuth2Error.invalid_scope(scope.err_value))

        token = await self.tokens.issue(
            client,
            grant,
            scope.ok_value,
            self._settings.access_token_ttl,
            None,
        )
        return Ok(self._issued(token, grant, client))

    async def _handle_password_grant(
        self,
        request: PasswordGrantRequest,
        client: Client,
        grant: GrantTypeRecord,
    ) -> GrantOutcome:
        """Resource owner password credentials grant."""
        if self._users is None:
            logger.error("Password grant requested but no user authenticator is configured")
            return Err(OAuth2Error.unsupported_grant_type())

        scope = self._scopes.validate_known(request.scope)
        if scope.is_err():
            return Err(OAuth2Error.invalid_scope(scope.err_value))

        user_id = await self._users.authenticate(request.username, request.password)
        if user_id is None:
            return Err(OAuth2Error.invalid_grant())

        token = await self.tokens.issue(
            client,
            grant,
            scope.ok_value,
            self._settings.access_token_ttl,
            self._refresh_ttl(grant),
            user_id=user_id,
        )
        return Ok(self._issued(token, grant, client))

    async def _handle_implicit_grant(
        self,
        request: ImplicitGrantRequest,
        client: Client,
        grant: GrantTypeRecord,
    ) -> GrantOutcome:
        """Implicit grant: access token only, bound to a registered redirect URI."""
        if not client.allows_response_type(GrantType.IMPLICIT.value):
            return Err(
                OAuth2Error.unauthorized_client(
                    "Client is not registered for the implicit grant"
                )
            )

        if not self.clients.is_redirect_uri_registered(client, request.redirect_uri):
            return Err(OAuth2Error.invalid_grant())

        scope = self._scopes.validate_known(request.scope)
        if scope.is_err():
            return Err(OAuth2Error.invalid_scope(scope.err_value))

        token = await self.tokens.issue(
            client,
            grant,
            scope.ok_value,
            self._settings.access_token_ttl,
            None,
        )
        return Ok(self._issued(token, grant, client))

    def _refresh_ttl(self, grant: GrantTypeRecord) -> timedelta | None:
        if not grant.name.issues_refresh_token:
            return None
        return self._settings.refresh_token_ttl

    def _issued(
        self, token: AccessToken, grant: GrantTypeRecord, client: Client
    ) -> TokenResponse:
        logger.info(
            "Issued %s token %s to client %d (scope=%r, refresh=%s)",
            grant.name.value,
            mask_secret(str(token.token)),
            client.id,
            token.scope,
            token.refresh_token is not None,
        )
        return TokenResponse(
            access_token=str(token.token),
            expires_in=token.remaining_ttl(token.issued_at),
            refresh_token=(
                str(token.refresh_token) if token.refresh_token is not None else None
            ),
            scope=token.scope,
        )

    # Authorization endpoint

    @beartype
    async def authorize(
        self, request: AuthorizationRequest
    ) -> Result[AuthorizationResponse, OAuth2Error]:
        """Front-channel step of the code flow: mint an authorization code.

        The caller has already authenticated the resource owner and obtained
        consent; ``request.user_id`` identifies them.
        """
        if request.user_id is None:
            return Err(OAuth2Error.invalid_request("No authenticated resource owner"))

        try:
            client = await self.clients.lookup_by_identifier(request.client_id)
            if client is None:
                return Err(OAuth2Error.invalid_client())

            if not self.clients.is_redirect_uri_registered(
                client, request.redirect_uri
            ):
                return Err(OAuth2Error.invalid_request("Unregistered redirect_uri"))

            scope = self._scopes.validate_known(request.scope)
            if scope.is_err():
                return Err(OAuth2Error.invalid_scope(scope.err_value))

            code = await self.codes.issue(
                client,
                scope.ok_value,
                request.redirect_uri,
                request.user_id,
                self._settings.authorization_code_ttl,
            )
        except Exception:
            logger.exception("Authorization request failed for client %r", request.client_id)
            return Err(OAuth2Error.server_error())

        logger.info("Issued authorization code to client %d", client.id)
        return Ok(
            AuthorizationResponse(
                code=code.name,
                redirect_uri=code.redirect_uri,
                state=request.state,
            )
        )

    # Revocation endpoint

    @beartype
    async def revoke_token(
        self, params: Mapping[str, str | None]
    ) -> Result[bool, OAuth2Error]:
        """Revoke an access or refresh token (RFC 7009).

        Only the owning client can revoke a token. Unknown tokens and tokens
        of other clients are answered with success and left untouched, so the
        endpoint reveals nothing about them.
        """
        try:
            request = RevocationRequest.model_validate(
                {key: value for key, value in params.items() if value}
            )
        except ValueError:
            return Err(OAuth2Error.invalid_request("Missing or invalid parameters"))

        try:
            client = await self.clients.authenticate(
                request.client_id, request.client_secret
            )
            if client is None:
                return Err(OAuth2Error.invalid_client())

            record = None
            if request.token_type_hint != "refresh_token":
                record = await self.tokens.find_by_token(request.token)
            if record is None:
                record = await self.tokens.find_by_refresh_token(request.token)
            if record is None and request.token_type_hint == "refresh_token":
                record = await self.tokens.find_by_token(request.token)

            if record is None or record.client_id != client.id:
                return Ok(False)

            revoked = await self.tokens.revoke(request.token)
        except Exception:
            logger.exception("Token revocation failed")
            return Err(OAuth2Error.server_error())

        if revoked:
            logger.info("Client %d revoked token %s", client.id, mask_secret(request.token))
        return Ok(revoked)
