# backend/tests/conftest.py
import pytest

from itemdex.services.catalog_service import CatalogService
from itemdex.services.catalog_store import CatalogStore


def _record(item_id, name) -> str:
    return f"add_item\\{item_id}\\0\\0\\0\\0\\{name}\\0\\0"


@pytest.fixture
def make_items_text():
    """Builds items.txt content from (id, name) pairs plus optional extra raw lines."""

    def _make(pairs, extra_lines=()):
        lines = ["// items.txt export", ""]
        lines.extend(_record(i, n) for i, n in pairs)
        lines.extend(extra_lines)
        return "\n".join(lines)

    return _make


@pytest.fixture
def sample_pairs():
    return [
        (1, "Oak Log"),
        (2, "Wheat Seeds"),
        (3, "Dirt"),
        (4, "Dirt Seed"),
        (5, "Rock"),
        (6, "Rock Seed"),
        (7, "Lava"),
    ]


@pytest.fixture
def store():
    return CatalogStore()


@pytest.fixture
def service(store):
    return CatalogService(store, items_per_page=50, max_matches=500)
