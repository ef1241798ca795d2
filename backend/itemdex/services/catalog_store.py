from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Catalog:
    """One tenant's items plus the lowercase shadow index used for matching.

    Both mappings are read-only views built together by ``Catalog.build``.
    """

    items: Mapping[int, str]
    lower_names: Mapping[int, str]

    @classmethod
    def build(cls, items: Mapping[int, str]) -> Catalog:
        owned = dict(items)
        lower = {item_id: name.lower() for item_id, name in owned.items()}
        return cls(items=MappingProxyType(owned), lower_names=MappingProxyType(lower))

    def __len__(self) -> int:
        return len(self.items)


class CatalogStore:
    """Process-memory catalogs keyed by tenant id.

    A replace swaps in a fully built ``Catalog`` object, so readers holding
    the previous one keep a consistent snapshot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._catalogs: dict[str, Catalog] = {}

    def get(self, tenant_id: str) -> Catalog | None:
        with self._lock:
            return self._catalogs.get(tenant_id)

    def replace(self, tenant_id: str, items: Mapping[int, str]) -> Catalog | None:
        """Install a new catalog for the tenant. Returns the one it replaced."""
        catalog = Catalog.build(items)
        with self._lock:
            previous = self._catalogs.get(tenant_id)
            self._catalogs[tenant_id] = catalog
        logger.info(
            "Replaced catalog for tenant %s: %d items (previously %s)",
            tenant_id,
            len(catalog),
            len(previous) if previous is not None else "none",
        )
        return previous

    def delete(self, tenant_id: str) -> Catalog | None:
        """Drop the tenant's catalog. Returns it, or None if there was none."""
        with self._lock:
            removed = self._catalogs.pop(tenant_id, None)
        if removed is not None:
            logger.info("Deleted catalog for tenant %s (%d items)", tenant_id, len(removed))
        return removed

    def tenants(self) -> list[str]:
        with self._lock:
            return list(self._catalogs.keys())
