"""In-memory stand-in for the pooled asyncpg database.

Dispatches on the named statements of ``oauth_core.db.queries`` and applies
their semantics to plain dict rows, so store and engine code runs unchanged.
``transaction()`` serializes writers with a lock and restores a snapshot of
every table when the block raises, like a rolled back PostgreSQL transaction.
"""

import asyncio
import contextlib
import copy
from collections.abc import AsyncIterator, Callable
from datetime import datetime
from typing import Any
from uuid import UUID

from oauth_core.db import queries

SEED_REDIRECT_URI = "http://localhost/testing/redirect_uri_one"
IMPLICIT_REDIRECT_URI = "https://app.example.com/callback"

GRANT_TYPE_NAMES = (
    "authorization_code",
    "token",
    "password",
    "client_credentials",
    "refresh_token",
)


class InMemoryConnection:
    """Connection handed out by ``transaction()``; shares the parent's tables."""

    def __init__(self, db: "InMemoryDatabase") -> None:
        self._db = db

    async def execute(self, query: str, *args: Any) -> str:
        return await self._db.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[Any]:
        return await self._db.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> Any:
        return await self._db.fetchrow(query, *args)


class InMemoryDatabase:
    """Tables as lists of dicts plus per-table serial counters."""

    TABLES = ("clients", "client_redirect_uris", "grant_types", "access_tokens", "auth_codes")

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {name: [] for name in self.TABLES}
        self._serials: dict[str, int] = {name: 0 for name in self.TABLES}
        self._tx_lock = asyncio.Lock()

        # Failure injection: statement -> exception raised when it runs.
        self.failures: dict[str, BaseException] = {}
        # Number of upcoming inserts of a statement to report as conflicting.
        self.forced_conflicts: dict[str, int] = {}
        self.statements: list[str] = []
        self.transactions_committed = 0
        self.transactions_rolled_back = 0

        self._fetchrow_handlers: dict[str, Callable[..., dict[str, Any] | None]] = {
            queries.SELECT_CLIENT_BY_IDENTIFIER: self._select_client,
            queries.INSERT_AUTH_CODE: self._insert_auth_code,
            queries.REDEEM_AUTH_CODE: self._redeem_auth_code,
            queries.INSERT_ACCESS_TOKEN: self._insert_access_token,
            queries.SELECT_ACCESS_TOKEN_BY_TOKEN: self._select_token_by_token,
            queries.SELECT_ACCESS_TOKEN_BY_REFRESH_TOKEN: self._select_token_by_refresh,
            queries.CONSUME_REFRESH_TOKEN: self._consume_refresh_token,
        }
        self._fetch_handlers: dict[str, Callable[..., list[dict[str, Any]]]] = {
            queries.SELECT_CLIENT_REDIRECT_URIS: self._select_redirect_uris,
            queries.SELECT_GRANT_TYPES: self._select_grant_types,
        }
        self._execute_handlers: dict[str, Callable[..., str]] = {
            queries.DELETE_EXPIRED_AUTH_CODES: self._delete_expired_auth_codes,
            queries.REVOKE_ACCESS_TOKEN: self._revoke_access_token,
            queries.DELETE_EXPIRED_ACCESS_TOKENS: self._delete_expired_access_tokens,
        }

    # Seeding helpers

    def insert(self, table: str, **values: Any) -> dict[str, Any]:
        self._serials[table] += 1
        row = {"id": self._serials[table], **values}
        self.tables[table].append(row)
        return row

    def add_client(
        self,
        identifier: str,
        secret: str,
        response_type: str,
        redirect_uris: tuple[str, ...] = (),
    ) -> dict[str, Any]:
        client = self.insert(
            "clients",
            identifier=identifier,
            secret=secret,
            response_type=response_type,
        )
        for uri in redirect_uris:
            self.insert("client_redirect_uris", client_id=client["id"], redirect_uri=uri)
        return client

    def seed(self) -> "InMemoryDatabase":
        """Load the rows the initial migration ships, plus an implicit client."""
        for name in GRANT_TYPE_NAMES:
            self.insert("grant_types", name=name)
        self.add_client("abcd1234", "abcd1234", "something", (SEED_REDIRECT_URI,))
        self.add_client(
            "implicit-app",
            "implicit-secret",
            "code token",
            (IMPLICIT_REDIRECT_URI,),
        )
        return self

    def row(self, table: str, **match: Any) -> dict[str, Any] | None:
        for row in self.tables[table]:
            if all(row.get(key) == value for key, value in match.items()):
                return row
        return None

    # QueryExecutor interface

    async def execute(self, query: str, *args: Any) -> str:
        await self._enter(query)
        return self._execute_handlers[query](*args)

    async def fetch(self, query: str, *args: Any) -> list[Any]:
        await self._enter(query)
        return self._fetch_handlers[query](*args)

    async def fetchrow(self, query: str, *args: Any) -> Any:
        await self._enter(query)
        return self._fetchrow_handlers[query](*args)

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[InMemoryConnection]:
        async with self._tx_lock:
            snapshot = copy.deepcopy((self.tables, self._serials))
            try:
                yield InMemoryConnection(self)
            except BaseException:
                self.tables, self._serials = snapshot
                self.transactions_rolled_back += 1
                raise
            self.transactions_committed += 1

    async def _enter(self, query: str) -> None:
        # Yield to the loop like a real round trip, so concurrent tasks interleave.
        await asyncio.sleep(0)
        self.statements.append(query)
        failure = self.failures.get(query)
        if failure is not None:
            raise failure

    def _conflict_forced(self, query: str) -> bool:
        remaining = self.forced_conflicts.get(query, 0)
        if remaining:
            self.forced_conflicts[query] = remaining - 1
            return True
        return False

    # Clients and grant types

    def _select_client(self, identifier: str) -> dict[str, Any] | None:
        row = self.row("clients", identifier=identifier)
        return dict(row) if row else None

    def _select_redirect_uris(self, client_id: int) -> list[dict[str, Any]]:
        rows = [r for r in self.tables["client_redirect_uris"] if r["client_id"] == client_id]
        return [{"redirect_uri": r["redirect_uri"]} for r in sorted(rows, key=lambda r: r["id"])]

    def _select_grant_types(self) -> list[dict[str, Any]]:
        return [dict(r) for r in sorted(self.tables["grant_types"], key=lambda r: r["id"])]

    # Authorization codes

    def _insert_auth_code(
        self,
        client_id: int,
        name: str,
        scope: str,
        expires_at: datetime,
        redirect_uri: str,
        user_id: int | None,
    ) -> dict[str, Any] | None:
        if self._conflict_forced(queries.INSERT_AUTH_CODE) or self.row("auth_codes", name=name):
            return None
        row = self.insert(
            "auth_codes",
            client_id=client_id,
            name=name,
            scope=scope,
            expires_at=expires_at,
            redirect_uri=redirect_uri,
            user_id=user_id,
            consumed_at=None,
        )
        return dict(row)

    def _redeem_auth_code(
        self, name: str, client_id: int, redirect_uri: str, now: datetime
    ) -> dict[str, Any] | None:
        for row in self.tables["auth_codes"]:
            if (
                row["name"] == name
                and row["client_id"] == client_id
                and row["redirect_uri"] == redirect_uri
                and row["consumed_at"] is None
                and row["expires_at"] > now
            ):
                row["consumed_at"] = now
                return dict(row)
        return None

    def _delete_expired_auth_codes(self, before: datetime) -> str:
        expired = {r["id"] for r in self.tables["auth_codes"] if r["expires_at"] <= before}
        self.tables["auth_codes"] = [
            r for r in self.tables["auth_codes"] if r["id"] not in expired
        ]
        return f"DELETE {len(expired)}"

    # Access tokens

    def _insert_access_token(
        self,
        client_id: int,
        grant_id: int,
        token: UUID,
        refresh_token: UUID | None,
        scope: str,
        expires_at: datetime,
        issued_at: datetime,
        refresh_expires_at: datetime | None,
        user_id: int | None,
    ) -> dict[str, Any] | None:
        if self._conflict_forced(queries.INSERT_ACCESS_TOKEN):
            return None
        for row in self.tables["access_tokens"]:
            if row["token"] == token:
                return None
            if refresh_token is not None and row["refresh_token"] == refresh_token:
                return None
        row = self.insert(
            "access_tokens",
            client_id=client_id,
            grant_id=grant_id,
            token=token,
            refresh_token=refresh_token,
            scope=scope,
            expires_at=expires_at,
            issued_at=issued_at,
            refresh_expires_at=refresh_expires_at,
            user_id=user_id,
            revoked_at=None,
        )
        return dict(row)

    def _select_token_by_token(self, token: UUID) -> dict[str, Any] | None:
        row = self.row("access_tokens", token=token)
        return dict(row) if row else None

    def _select_token_by_refresh(self, refresh_token: UUID) -> dict[str, Any] | None:
        row = self.row("access_tokens", refresh_token=refresh_token)
        return dict(row) if row else None

    def _consume_refresh_token(
        self, refresh_token: UUID, client_id: int, now: datetime
    ) -> dict[str, Any] | None:
        for row in self.tables["access_tokens"]:
            if (
                row["refresh_token"] == refresh_token
                and row["client_id"] == client_id
                and row["revoked_at"] is None
                and row["refresh_expires_at"] is not None
                and row["refresh_expires_at"] > now
            ):
                row["revoked_at"] = now
                return dict(row)
        return None

    def _revoke_access_token(self, value: UUID, now: datetime) -> str:
        count = 0
        for row in self.tables["access_tokens"]:
            if (row["token"] == value or row["refresh_token"] == value) and row[
                "revoked_at"
            ] is None:
                row["revoked_at"] = now
                count += 1
        return f"UPDATE {count}"

    def _delete_expired_access_tokens(self, before: datetime) -> str:
        def expired(row: dict[str, Any]) -> bool:
            return row["expires_at"] <= before and (
                row["refresh_expires_at"] is None or row["refresh_expires_at"] <= before
            )

        kept = [r for r in self.tables["access_tokens"] if not expired(r)]
        removed = len(self.tables["access_tokens"]) - len(kept)
        self.tables["access_tokens"] = kept
        return f"DELETE {removed}"
