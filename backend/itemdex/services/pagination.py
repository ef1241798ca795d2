"""Paged rendering of search results and the stateless navigation controls.

Nothing about a results message is kept on the server. Each navigation
control carries the action, the category and the query in its id, and the
disabled indicator control carries the position as ``<page>/<total>`` in its
label. An activation is turned back into a page by decoding both.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum

from itemdex.core.errors import InvalidControlError, InvalidQueryError
from itemdex.services.item_search import Category

CONTROL_PREFIX = "search"
INDICATOR = "indicator"
CONTROL_ID_MAX_LENGTH = 100
MAX_QUERY_LENGTH = 80
FIELD_MAX_LENGTH = 1024
EMBED_MAX_LENGTH = 6000
OVERFLOW_FIELD_NAME = "More items"
EMBED_COLOR = 0x3498DB

_LABEL_PATTERN = re.compile(r"([0-9]+)/([0-9]+)")


class NavAction(str, Enum):
    FIRST = "first"
    PREV = "prev"
    NEXT = "next"
    LAST = "last"


_NAV_LABELS = {
    NavAction.FIRST: "<<",
    NavAction.PREV: "<",
    NavAction.NEXT: ">",
    NavAction.LAST: ">>",
}


@dataclass(frozen=True)
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass(frozen=True)
class PagePayload:
    title: str
    description: str
    fields: list[EmbedField]
    color: int = EMBED_COLOR


@dataclass(frozen=True)
class Control:
    custom_id: str
    label: str
    disabled: bool = False


@dataclass(frozen=True)
class ControlAction:
    action: NavAction
    category: Category
    query: str


@dataclass(frozen=True)
class RenderedPage:
    page: int
    total_pages: int
    total_matches: int
    payload: PagePayload
    controls: list[Control] = field(default_factory=list)


def total_pages_for(count: int, page_size: int) -> int:
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(page, total_pages))


def next_page(action: NavAction, current: int, total_pages: int) -> int:
    if action is NavAction.FIRST:
        return 1
    if action is NavAction.PREV:
        return max(1, current - 1)
    if action is NavAction.NEXT:
        return min(total_pages, current + 1)
    return total_pages


# --- control ids ----------------------------------------------------------


def encode_action_id(action: NavAction, category: Category, query: str) -> str:
    custom_id = f"{CONTROL_PREFIX}:{action.value}:{category.value}:{query}"
    if len(custom_id) > CONTROL_ID_MAX_LENGTH:
        raise InvalidQueryError(f"Search keyword is too long (max {MAX_QUERY_LENGTH} characters).")
    return custom_id


def decode_action_id(custom_id: str) -> ControlAction:
    parts = custom_id.split(":", 3)
    if len(parts) != 4 or parts[0] != CONTROL_PREFIX:
        raise InvalidControlError(f"Unrecognised control: {custom_id!r}")
    _, raw_action, raw_category, query = parts
    try:
        action = NavAction(raw_action)
        category = Category(raw_category)
    except ValueError:
        raise InvalidControlError(f"Unrecognised control: {custom_id!r}") from None
    if not query.strip():
        raise InvalidControlError("Control does not carry a search keyword.")
    return ControlAction(action=action, category=category, query=query)


def is_search_control(custom_id: str) -> bool:
    return custom_id.startswith(f"{CONTROL_PREFIX}:")


def is_indicator(custom_id: str) -> bool:
    return custom_id.startswith(f"{CONTROL_PREFIX}:{INDICATOR}:")


def indicator_id(page: int, total_pages: int) -> str:
    return f"{CONTROL_PREFIX}:{INDICATOR}:{page}:{total_pages}"


def indicator_label(page: int, total_pages: int) -> str:
    return f"{page}/{total_pages}"


def parse_indicator_label(label: str | None) -> tuple[int, int]:
    """Recover ``(page, total_pages)`` from a rendered indicator label."""
    m = _LABEL_PATTERN.fullmatch((label or "").strip())
    if not m:
        raise InvalidControlError(f"Unreadable page indicator: {label!r}")
    page, total = int(m.group(1)), int(m.group(2))
    if not 1 <= page <= total:
        raise InvalidControlError(f"Page indicator out of range: {label!r}")
    return page, total


def build_controls(page: int, total_pages: int, query: str, category: Category) -> list[Control]:
    if total_pages <= 1:
        return []
    at_first = page == 1
    at_last = page == total_pages
    return [
        Control(encode_action_id(NavAction.FIRST, category, query), _NAV_LABELS[NavAction.FIRST], at_first),
        Control(encode_action_id(NavAction.PREV, category, query), _NAV_LABELS[NavAction.PREV], at_first),
        Control(indicator_id(page, total_pages), indicator_label(page, total_pages), True),
        Control(encode_action_id(NavAction.NEXT, category, query), _NAV_LABELS[NavAction.NEXT], at_last),
        Control(encode_action_id(NavAction.LAST, category, query), _NAV_LABELS[NavAction.LAST], at_last),
    ]


# --- payload --------------------------------------------------------------


def format_item_line(item_id: int, name: str) -> str:
    return f"• `{item_id}` - {name}"


def chunk_lines(lines: list[str], max_length: int = FIELD_MAX_LENGTH) -> list[str]:
    """Pack lines into newline-joined chunks no longer than ``max_length``.

    A line is never split across chunks; a single line that is too long on
    its own is clipped.
    """
    chunks: list[str] = []
    current = ""
    for line in lines:
        if len(line) > max_length:
            line = line[: max_length - 1] + "…"
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > max_length:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


def payload_length(payload: PagePayload) -> int:
    """Characters counted against the whole-embed limit."""
    return len(payload.title) + len(payload.description) + sum(len(f.name) + len(f.value) for f in payload.fields)


def fit_fields(fields: list[EmbedField], budget: int) -> list[EmbedField]:
    """Drop trailing fields that do not fit in ``budget`` characters.

    When anything is dropped, a final field says how many item lines were
    left out.
    """
    if sum(len(f.name) + len(f.value) for f in fields) <= budget:
        return fields

    # room for the overflow field's value
    reserve = len(OVERFLOW_FIELD_NAME) + 96
    kept: list[EmbedField] = []
    used = 0
    for f in fields:
        size = len(f.name) + len(f.value)
        if used + size > budget - reserve:
            break
        kept.append(f)
        used += size

    omitted = sum(f.value.count("\n") + 1 for f in fields[len(kept):])
    kept.append(
        EmbedField(
            name=OVERFLOW_FIELD_NAME,
            value=f"{omitted} more item(s) on this page are not shown. Use a more specific keyword.",
        )
    )
    return kept


def search_title(query: str, category: Category) -> str:
    title = f"Search results for '{query}'"
    if category is not Category.ALL:
        title += f" (Type: {category.value})"
    return title


def render_page(
    matches: list[tuple[int, str]],
    page: int,
    page_size: int,
    query: str,
    category: Category = Category.ALL,
    field_max_length: int = FIELD_MAX_LENGTH,
) -> RenderedPage:
    total = len(matches)
    total_pages = total_pages_for(total, page_size)
    page = clamp_page(page, total_pages)

    start = (page - 1) * page_size
    end = min(start + page_size, total)
    page_items = matches[start:end]

    if page_items:
        chunks = chunk_lines([format_item_line(i, n) for i, n in page_items], field_max_length)
        fields = [
            EmbedField(name=f"Items ({start + 1}-{end})" if idx == 0 else "Continued...", value=chunk)
            for idx, chunk in enumerate(chunks)
        ]
    else:
        fields = [EmbedField(name="No items found", value="Try a different search query")]

    title = search_title(query, category)
    description = f"Found {total} matches. Showing page {page}/{total_pages}"
    payload = PagePayload(
        title=title,
        description=description,
        fields=fit_fields(fields, EMBED_MAX_LENGTH - len(title) - len(description)),
    )
    return RenderedPage(
        page=page,
        total_pages=total_pages,
        total_matches=total,
        payload=payload,
        controls=build_controls(page, total_pages, query, category),
    )
