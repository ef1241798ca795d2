# backend/tests/unit/test_catalog_service.py
import pytest

from itemdex.core.config import Settings
from itemdex.core.errors import (
    CatalogNotFoundError,
    EmptyCatalogError,
    InvalidControlError,
    InvalidItemsFileError,
    InvalidQueryError,
    ItemNotFoundError,
    PermissionDeniedError,
    TooManyMatchesError,
    UploadRejectedError,
)
from itemdex.services.catalog_service import CatalogService
from itemdex.services.item_search import Category
from itemdex.services.pagination import NavAction, encode_action_id

TENANT = "guild-1"


def _upload(service, text, filename="items.txt", tenant=TENANT):
    content = text.encode("utf-8")
    return service.on_file_uploaded(tenant, filename, len(content), content)


@pytest.fixture
def loaded_service(service, make_items_text, sample_pairs):
    _upload(service, make_items_text(sample_pairs))
    return service


@pytest.fixture
def big_service(service, make_items_text):
    # 120 "dirt" items -> 3 pages of 50
    _upload(service, make_items_text([(i, f"Dirt Block {i}") for i in range(1, 121)]))
    return service


# --- upload -----------------------------------------------------------------


def test_first_upload_creates_catalog(service, make_items_text, sample_pairs):
    result = _upload(service, make_items_text(sample_pairs))

    assert result.item_count == 7
    assert not result.replaced
    assert result.previous_count is None
    assert result.warnings == []
    assert result.stats.accepted == 7
    assert dict(service.store.get(TENANT).items) == dict(sample_pairs)


def test_second_upload_replaces_and_reports_old_count(loaded_service, make_items_text):
    result = _upload(loaded_service, make_items_text([(i, f"New {i}") for i in range(10)]))

    assert result.replaced
    assert result.previous_count == 7
    assert result.item_count == 10
    assert loaded_service.query(TENANT, "oak") == []


@pytest.mark.parametrize("filename", ["items.txt", "ITEMS.TXT", "Items.Txt"])
def test_filename_check_is_case_insensitive(service, make_items_text, sample_pairs, filename):
    assert _upload(service, make_items_text(sample_pairs), filename=filename).item_count == 7


@pytest.mark.parametrize("filename", ["items.csv", "my_items.txt", "items.txt.bak", ""])
def test_wrong_filename_is_rejected(service, make_items_text, sample_pairs, filename):
    with pytest.raises(UploadRejectedError):
        _upload(service, make_items_text(sample_pairs), filename=filename)
    assert service.store.get(TENANT) is None


def test_oversized_upload_is_rejected_before_parsing(service):
    with pytest.raises(UploadRejectedError, match="10MB"):
        service.on_file_uploaded(TENANT, "items.txt", 10 * 1024 * 1024 + 1, b"")


def test_file_without_records_is_invalid_and_store_untouched(loaded_service):
    with pytest.raises(InvalidItemsFileError):
        _upload(loaded_service, "just some text\nnothing here")
    assert len(loaded_service.store.get(TENANT)) == 7


def test_file_with_only_broken_records_is_empty_and_store_untouched(loaded_service):
    text = "\n".join("add_item\\nope\\x" for _ in range(6))
    with pytest.raises(EmptyCatalogError):
        _upload(loaded_service, text)
    assert len(loaded_service.store.get(TENANT)) == 7


def test_small_file_and_rejected_lines_produce_warnings(service, make_items_text):
    result = _upload(service, make_items_text([(1, "Oak Log"), (2, "Wheat Seeds")], extra_lines=["add_item\\bad\\x"]))

    assert result.item_count == 2
    assert len(result.warnings) == 2
    assert "Only 3" in result.warnings[0]
    assert "1 line(s)" in result.warnings[1]


def test_invalid_utf8_is_replaced_not_fatal(service, make_items_text, sample_pairs):
    content = make_items_text(sample_pairs).encode("utf-8") + b"\nadd_item\\99\\a\\b\\c\\d\\Bad \xff Byte"
    result = service.on_file_uploaded(TENANT, "items.txt", len(content), content)
    assert result.item_count == 8
    assert service.store.get(TENANT).items[99].startswith("Bad ")


def test_leading_byte_order_mark_keeps_first_record(service, make_items_text):
    pairs = [(i, f"Item {i}") for i in range(1, 6)]
    lines = make_items_text(pairs).split("\n")[2:]
    content = b"\xef\xbb\xbf" + "\n".join(lines).encode("utf-8")

    result = service.on_file_uploaded(TENANT, "items.txt", len(content), content)

    assert result.item_count == 5
    assert result.warnings == []
    assert sorted(service.store.get(TENANT).items) == [1, 2, 3, 4, 5]


# --- search -----------------------------------------------------------------


def test_search_without_catalog_is_not_found(service):
    with pytest.raises(CatalogNotFoundError):
        service.on_search_requested(TENANT, "dirt")


@pytest.mark.parametrize("query", ["", "   "])
def test_search_requires_keyword(loaded_service, query):
    with pytest.raises(InvalidQueryError):
        loaded_service.on_search_requested(TENANT, query)


def test_search_rejects_keyword_too_long_for_controls(loaded_service):
    with pytest.raises(InvalidQueryError):
        loaded_service.on_search_requested(TENANT, "d" * 81)


def test_search_renders_matches(loaded_service):
    rendered = loaded_service.on_search_requested(TENANT, " Dirt ", Category.SEED)

    assert rendered.total_matches == 1
    assert rendered.payload.title == "Search results for 'Dirt' (Type: seed)"
    assert "Dirt Seed" in rendered.payload.fields[0].value
    assert rendered.controls == []


def test_search_with_no_matches_renders_empty_page(loaded_service):
    rendered = loaded_service.on_search_requested(TENANT, "diamond")
    assert rendered.total_matches == 0
    assert rendered.payload.fields[0].name == "No items found"


def test_search_rejects_too_broad_queries(make_items_text):
    service = CatalogService(max_matches=5)
    _upload(service, make_items_text([(i, f"Dirt {i}") for i in range(10)]))

    with pytest.raises(TooManyMatchesError) as exc_info:
        service.on_search_requested(TENANT, "dirt")
    assert exc_info.value.limit == 5

    # Exactly at the limit is still too broad.
    _upload(service, make_items_text([(i, f"Dirt {i}") for i in range(5)] + [(9, "Rock")]))
    with pytest.raises(TooManyMatchesError):
        service.on_search_requested(TENANT, "dirt")
    assert service.on_search_requested(TENANT, "rock").total_matches == 1


def test_search_page_is_clamped(big_service):
    rendered = big_service.on_search_requested(TENANT, "dirt", page=5)
    assert (rendered.page, rendered.total_pages) == (3, 3)
    assert [c.label for c in rendered.controls][2] == "3/3"


def test_tenants_are_isolated(loaded_service):
    with pytest.raises(CatalogNotFoundError):
        loaded_service.on_search_requested("guild-2", "dirt")


# --- control activation -----------------------------------------------------


def _control(rendered, label):
    return next(c for c in rendered.controls if c.label == label)


def test_next_control_moves_forward(big_service):
    first = big_service.on_search_requested(TENANT, "dirt")
    rendered = big_service.on_control_activated(TENANT, _control(first, ">").custom_id, _control(first, "1/3").label)

    assert rendered.page == 2
    assert rendered.payload.fields[0].name == "Items (51-100)"


def test_next_then_prev_round_trip(big_service):
    page2 = big_service.on_search_requested(TENANT, "dirt", page=2)
    page3 = big_service.on_control_activated(TENANT, _control(page2, ">").custom_id, "2/3")
    back = big_service.on_control_activated(TENANT, _control(page3, "<").custom_id, "3/3")

    assert page3.page == 3
    assert back == page2


def test_first_and_last_controls(big_service):
    page2 = big_service.on_search_requested(TENANT, "dirt", page=2)
    assert big_service.on_control_activated(TENANT, _control(page2, ">>").custom_id, "2/3").page == 3
    assert big_service.on_control_activated(TENANT, _control(page2, "<<").custom_id, "2/3").page == 1


@pytest.mark.parametrize(
    "action,label",
    [(NavAction.PREV, "1/3"), (NavAction.FIRST, "1/3"), (NavAction.NEXT, "3/3"), (NavAction.LAST, "3/3")],
)
def test_control_that_does_not_move_is_a_no_op(big_service, action, label):
    control_id = encode_action_id(action, Category.ALL, "dirt")
    assert big_service.on_control_activated(TENANT, control_id, label) is None


def test_activation_rerenders_against_live_catalog(big_service, make_items_text):
    first = big_service.on_search_requested(TENANT, "dirt")
    # Catalog shrinks to a single page between render and activation.
    _upload(big_service, make_items_text([(i, f"Dirt {i}") for i in range(1, 11)]))

    rendered = big_service.on_control_activated(TENANT, _control(first, ">>").custom_id, "1/3")
    assert rendered.page == 1
    assert rendered.total_pages == 1
    assert rendered.controls == []


def test_activation_after_catalog_deleted(big_service):
    first = big_service.on_search_requested(TENANT, "dirt")
    big_service.on_delete_requested(TENANT, caller_is_admin=True)

    with pytest.raises(CatalogNotFoundError):
        big_service.on_control_activated(TENANT, _control(first, ">").custom_id, "1/3")


@pytest.mark.parametrize(
    "control_id,label",
    [
        ("search:next:all:dirt", "garbage"),
        ("search:next:all:dirt", None),
        ("search:next:all:dirt", "5/3"),
        ("search_next_dirt_all", "1/3"),
        ("search:indicator:1:3", "1/3"),
    ],
)
def test_activation_rejects_undecodable_state(big_service, control_id, label):
    with pytest.raises(InvalidControlError):
        big_service.on_control_activated(TENANT, control_id, label)


# --- item / info / delete ---------------------------------------------------


def test_item_lookup(loaded_service):
    detail = loaded_service.on_item_requested(TENANT, 2)
    assert (detail.id, detail.name, detail.type) == (2, "Wheat Seeds", "Seed")
    assert loaded_service.on_item_requested(TENANT, 3).type == "Block"


def test_item_lookup_missing(loaded_service):
    with pytest.raises(ItemNotFoundError):
        loaded_service.on_item_requested(TENANT, 999)
    with pytest.raises(CatalogNotFoundError):
        loaded_service.on_item_requested("guild-2", 1)


def test_info_counts_and_samples(loaded_service):
    summary = loaded_service.on_info_requested(TENANT)

    assert summary.total == 7
    assert summary.seed_count == 3
    assert summary.block_count == 4
    assert summary.samples == [(1, "Oak Log"), (2, "Wheat Seeds"), (3, "Dirt"), (4, "Dirt Seed"), (5, "Rock")]


def test_info_samples_follow_insertion_order(service, make_items_text):
    _upload(service, make_items_text([(30, "C"), (10, "A"), (20, "B"), (5, "E"), (1, "F"), (2, "G")]))
    assert [i for i, _ in service.on_info_requested(TENANT).samples] == [30, 10, 20, 5, 1]


def test_info_without_catalog(service):
    with pytest.raises(CatalogNotFoundError):
        service.on_info_requested(TENANT)


def test_delete_requires_admin(loaded_service):
    with pytest.raises(PermissionDeniedError):
        loaded_service.on_delete_requested(TENANT, caller_is_admin=False)
    assert loaded_service.store.get(TENANT) is not None


def test_delete_removes_catalog(loaded_service):
    assert loaded_service.on_delete_requested(TENANT, caller_is_admin=True).removed_count == 7
    assert loaded_service.store.get(TENANT) is None
    with pytest.raises(CatalogNotFoundError):
        loaded_service.on_delete_requested(TENANT, caller_is_admin=True)


def test_from_settings_uses_configured_limits():
    settings = Settings(ITEMS_PER_PAGE=10, MAX_MATCHES=20, ITEMS_FILENAME="catalog.txt")
    service = CatalogService.from_settings(settings)

    assert service.items_per_page == 10
    assert service.max_matches == 20
    service.check_upload("CATALOG.TXT", 1)
    with pytest.raises(UploadRejectedError):
        service.check_upload("items.txt", 1)
