from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import islice

from itemdex.core.config import Settings
from itemdex.core.errors import (
    CatalogNotFoundError,
    EmptyCatalogError,
    InvalidItemsFileError,
    InvalidQueryError,
    ItemNotFoundError,
    PermissionDeniedError,
    TooManyMatchesError,
    UploadRejectedError,
)
from itemdex.services.catalog_store import Catalog, CatalogStore
from itemdex.services.item_search import Category, find_items, is_seed_name, item_type
from itemdex.services.items_parser import ParseStats, parse_items_content, validate_items_file
from itemdex.services.pagination import (
    MAX_QUERY_LENGTH,
    RenderedPage,
    decode_action_id,
    next_page,
    parse_indicator_label,
    render_page,
)

logger = logging.getLogger(__name__)

NO_CATALOG_MESSAGE = (
    "No items.txt database is registered for this server. "
    "Use `/additems` to upload an items.txt file first."
)


@dataclass(frozen=True)
class ReplaceResult:
    item_count: int
    previous_count: int | None
    stats: ParseStats
    warnings: list[str] = field(default_factory=list)

    @property
    def replaced(self) -> bool:
        return self.previous_count is not None


@dataclass(frozen=True)
class DeleteResult:
    removed_count: int


@dataclass(frozen=True)
class CatalogSummary:
    total: int
    seed_count: int
    block_count: int
    samples: list[tuple[int, str]]


@dataclass(frozen=True)
class ItemDetail:
    id: int
    name: str
    type: str


class CatalogService:
    def __init__(
        self,
        store: CatalogStore | None = None,
        *,
        items_filename: str = "items.txt",
        max_upload_bytes: int = 10 * 1024 * 1024,
        min_record_lines: int = 5,
        items_per_page: int = 50,
        max_matches: int = 500,
        field_max_length: int = 1024,
    ) -> None:
        self.store = store if store is not None else CatalogStore()
        self.items_filename = items_filename
        self.max_upload_bytes = max_upload_bytes
        self.min_record_lines = min_record_lines
        self.items_per_page = items_per_page
        self.max_matches = max_matches
        self.field_max_length = field_max_length

    @classmethod
    def from_settings(cls, settings: Settings, store: CatalogStore | None = None) -> CatalogService:
        return cls(
            store,
            items_filename=settings.items_filename,
            max_upload_bytes=settings.max_upload_bytes,
            min_record_lines=settings.min_record_lines,
            items_per_page=settings.items_per_page,
            max_matches=settings.max_matches,
            field_max_length=settings.field_max_length,
        )

    def _require_catalog(self, tenant_id: str) -> Catalog:
        catalog = self.store.get(tenant_id)
        if catalog is None or not catalog.items:
            raise CatalogNotFoundError(NO_CATALOG_MESSAGE)
        return catalog

    # --- ingestion --------------------------------------------------------

    def check_upload(self, filename: str, size_bytes: int) -> None:
        if filename.lower() != self.items_filename.lower():
            raise UploadRejectedError(
                f"The file must be named '{self.items_filename}'. Please rename your file first."
            )
        if size_bytes > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise UploadRejectedError(f"File is too large. Maximum size is {limit_mb}MB.")

    def on_file_uploaded(self, tenant_id: str, filename: str, size_bytes: int, content: bytes) -> ReplaceResult:
        self.check_upload(filename, size_bytes)
        text = content.decode("utf-8-sig", errors="replace")

        validation = validate_items_file(text, self.min_record_lines)
        if not validation.valid:
            raise InvalidItemsFileError(validation.reason or "Invalid items file.")

        parsed = parse_items_content(text)
        if not parsed.items:
            raise EmptyCatalogError("No items could be parsed from the file. Make sure the file format is valid.")

        warnings: list[str] = []
        if validation.warning:
            warnings.append(validation.warning)
        if parsed.stats.rejected:
            warnings.append(f"{parsed.stats.rejected} line(s) could not be parsed and were skipped.")

        previous = self.store.replace(tenant_id, parsed.items)
        previous_count = len(previous) if previous is not None and previous.items else None
        return ReplaceResult(
            item_count=len(parsed.items),
            previous_count=previous_count,
            stats=parsed.stats,
            warnings=warnings,
        )

    # --- search -----------------------------------------------------------

    def query(self, tenant_id: str, query: str, category: Category = Category.ALL) -> list[tuple[int, str]]:
        return find_items(self.store.get(tenant_id), query, category, self.max_matches)

    def _checked_matches(self, tenant_id: str, query: str, category: Category) -> list[tuple[int, str]]:
        matches = self.query(tenant_id, query, category)
        if len(matches) >= self.max_matches:
            raise TooManyMatchesError(query, len(matches), self.max_matches)
        return matches

    def on_search_requested(
        self,
        tenant_id: str,
        query: str,
        category: Category = Category.ALL,
        page: int = 1,
    ) -> RenderedPage:
        self._require_catalog(tenant_id)
        query = (query or "").strip()
        if not query:
            raise InvalidQueryError("Please provide a search keyword.")
        if len(query) > MAX_QUERY_LENGTH:
            raise InvalidQueryError(f"Search keyword is too long (max {MAX_QUERY_LENGTH} characters).")

        matches = self._checked_matches(tenant_id, query, category)
        logger.info("Search %r (%s) in tenant %s: %d matches", query, category.value, tenant_id, len(matches))
        return render_page(matches, page, self.items_per_page, query, category, self.field_max_length)

    def on_control_activated(self, tenant_id: str, control_id: str, indicator_label: str | None) -> RenderedPage | None:
        """Re-render a results message after a navigation control was pressed.

        Returns None when the press does not move to another page. The page
        count used for moving is the one shown on the indicator; the new page
        itself is rendered against the live match count.
        """
        control = decode_action_id(control_id)
        current, shown_total = parse_indicator_label(indicator_label)
        target = next_page(control.action, current, shown_total)
        if target == current:
            return None

        self._require_catalog(tenant_id)
        matches = self._checked_matches(tenant_id, control.query, control.category)
        return render_page(
            matches, target, self.items_per_page, control.query, control.category, self.field_max_length
        )

    # --- catalog management -----------------------------------------------

    def on_item_requested(self, tenant_id: str, item_id: int) -> ItemDetail:
        catalog = self._require_catalog(tenant_id)
        name = catalog.items.get(item_id)
        if name is None:
            raise ItemNotFoundError(item_id)
        return ItemDetail(id=item_id, name=name, type=item_type(name))

    def on_info_requested(self, tenant_id: str, sample_size: int = 5) -> CatalogSummary:
        catalog = self._require_catalog(tenant_id)
        seed_count = sum(1 for name in catalog.items.values() if is_seed_name(name))
        samples = list(islice(catalog.items.items(), sample_size))
        return CatalogSummary(
            total=len(catalog),
            seed_count=seed_count,
            block_count=len(catalog) - seed_count,
            samples=samples,
        )

    def on_delete_requested(self, tenant_id: str, caller_is_admin: bool) -> DeleteResult:
        if not caller_is_admin:
            raise PermissionDeniedError("You need Administrator permission to run this command.")
        removed = self.store.delete(tenant_id)
        if removed is None or not removed.items:
            raise CatalogNotFoundError("There is no items.txt database registered for this server.")
        return DeleteResult(removed_count=len(removed))
