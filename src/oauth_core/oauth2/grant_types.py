# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Grant type catalog, loaded once at startup and read-only afterwards."""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from beartype import beartype

from ..core.config import Settings
from ..core.database import QueryExecutor
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..db import queries
from ..models import GrantType, GrantTypeRecord
from .errors import CatalogLoadError

logger = get_logger(__name__)


class GrantTypeCatalog:
    """Maps grant type names to their stored reference rows.

    The mapping is frozen at construction, so concurrent readers need no
    locking.
    """

    def __init__(
        self,
        records: Iterable[GrantTypeRecord],
        *,
        disabled: Iterable[GrantType] = (),
    ) -> None:
        by_name = {record.name: record for record in records}
        missing = [g.value for g in GrantType if g not in by_name]
        if missing:
            raise CatalogLoadError(
                f"grant_types table is missing rows for: {', '.join(missing)}"
            )

        self._disabled = frozenset(disabled)
        self._records: Mapping[GrantType, GrantTypeRecord] = MappingProxyType(
            by_name
        )

    @classmethod
    async def load(cls, db: QueryExecutor, settings: Settings) -> "GrantTypeCatalog":
        """Read the ``grant_types`` table and apply the grant feature flags."""
        rows = await db.fetch(queries.SELECT_GRANT_TYPES)
        records = []
        for row in rows:
            try:
                records.append(GrantTypeRecord.from_record(row))
            except ValueError:
                logger.warning("Ignoring unknown grant type row %r", row["name"])

        disabled = []
        if not settings.enable_implicit_grant:
            disabled.append(GrantType.IMPLICIT)
        if not settings.enable_password_grant:
            disabled.append(GrantType.PASSWORD)

        catalog = cls(records, disabled=disabled)
        logger.info(
            "Grant type catalog loaded: %s",
            ", ".join(g.value for g in catalog.enabled),
        )
        return catalog

    @property
    def enabled(self) -> tuple[GrantType, ...]:
        return tuple(g for g in self._records if g not in self._disabled)

    @beartype
    def resolve(self, name: str) -> Result[GrantTypeRecord, str]:
        """Resolve a grant type name; unknown or disabled names are errors."""
        try:
            grant_type = GrantType(name)
        except ValueError:
            return Err(f"Unsupported grant type: {name}")

        if grant_type in self._disabled:
            return Err(f"Grant type disabled: {name}")

        return Ok(self._records[grant_type])

    @beartype
    def get(self, grant_type: GrantType) -> GrantTypeRecord:
        """Return the stored row of a known grant type."""
        return self._records[grant_type]
