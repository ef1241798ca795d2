from __future__ import annotations

from enum import Enum

from itemdex.services.catalog_store import Catalog

SEED_MARKER = "seed"
DEFAULT_LIMIT = 500


class Category(str, Enum):
    ALL = "all"
    BLOCK = "block"
    SEED = "seed"


def is_seed_name(name: str) -> bool:
    return SEED_MARKER in name.lower()


def item_type(name: str) -> str:
    """Display type for an item, derived from its name only."""
    return "Seed" if is_seed_name(name) else "Block"


def _keep(name_lower: str, category: Category) -> bool:
    if category is Category.BLOCK:
        return SEED_MARKER not in name_lower
    if category is Category.SEED:
        return SEED_MARKER in name_lower
    return True


def find_items(
    catalog: Catalog | None,
    query: str,
    category: Category = Category.ALL,
    limit: int = DEFAULT_LIMIT,
) -> list[tuple[int, str]]:
    """Case-insensitive substring search, sorted by id and cut to ``limit``."""
    if catalog is None or not catalog.items:
        return []
    qn = query.strip().lower()
    if not qn:
        return []

    out: list[tuple[int, str]] = []
    for item_id, name_lower in catalog.lower_names.items():
        if qn in name_lower and _keep(name_lower, category):
            out.append((item_id, catalog.items[item_id]))
    out.sort(key=lambda m: m[0])
    return out[:limit]
