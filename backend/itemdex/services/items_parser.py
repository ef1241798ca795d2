from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

RECORD_TOKEN = "add_item"
FIELD_DELIMITER = "\\"
ID_FIELD = 1
NAME_FIELD = 6
MIN_FIELDS = 6

_ID_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ItemRecord:
    id: int
    name: str


@dataclass(frozen=True)
class ParseStats:
    lines_scanned: int
    accepted: int
    rejected: int
    skipped: int


@dataclass(frozen=True)
class ParseResult:
    items: dict[int, str]
    stats: ParseStats

    @property
    def records(self) -> list[ItemRecord]:
        return [ItemRecord(id=k, name=v) for k, v in self.items.items()]


@dataclass(frozen=True)
class FileValidation:
    valid: bool
    reason: str | None = None
    warning: str | None = None


def _is_record_line(line: str) -> bool:
    return line.strip().startswith(RECORD_TOKEN)


def _preview(line: str) -> str:
    return line[:60] + "..." if len(line) > 60 else line


def parse_record_line(line: str) -> ItemRecord:
    """Parse one ``add_item`` line.

    Raises ``ValueError`` with a short reason when the line cannot be used.
    """
    parts = [p for p in line.strip().split(FIELD_DELIMITER) if p != ""]
    if len(parts) < MIN_FIELDS:
        raise ValueError(f"Insufficient parts ({len(parts)})")
    if len(parts) <= NAME_FIELD:
        raise ValueError(f"Missing name field ({len(parts)} parts)")

    raw_id = parts[ID_FIELD].strip()
    if not _ID_PATTERN.fullmatch(raw_id):
        raise ValueError(f"Invalid item id {raw_id!r}")

    name = parts[NAME_FIELD].strip()
    if not name:
        raise ValueError(f"Empty item name - ID {raw_id}")
    return ItemRecord(id=int(raw_id), name=name)


def parse_items_content(content: str) -> ParseResult:
    """Turn the text of an items file into an id -> name mapping.

    Bad record lines are logged and counted, never fatal. A later line with
    an id already seen replaces the earlier name.
    """
    items: dict[int, str] = {}
    accepted = rejected = skipped = 0
    lines = content.split("\n")

    for lineno, line in enumerate(lines, start=1):
        if not _is_record_line(line):
            skipped += 1
            continue
        try:
            record = parse_record_line(line)
        except ValueError as e:
            rejected += 1
            logger.warning("Line %d: %s - %s", lineno, e, _preview(line.strip()))
            continue
        items[record.id] = record.name
        accepted += 1

    stats = ParseStats(lines_scanned=len(lines), accepted=accepted, rejected=rejected, skipped=skipped)
    logger.info(
        "Parsing complete: %d lines processed, %d items parsed, %d lines with errors",
        stats.lines_scanned,
        stats.accepted,
        stats.rejected,
    )
    return ParseResult(items=items, stats=stats)


def validate_items_file(content: str, min_records: int = 5) -> FileValidation:
    """Cheap pre-check that the upload looks like an items file at all."""
    count = 0
    for line in content.split("\n"):
        if _is_record_line(line):
            count += 1
            if count >= min_records:
                return FileValidation(valid=True)

    if count == 0:
        return FileValidation(
            valid=False,
            reason=f"Invalid file: no '{RECORD_TOKEN}' entries were found in the file.",
        )
    return FileValidation(
        valid=True,
        warning=f"Only {count} '{RECORD_TOKEN}' entries found. The format may be incomplete.",
    )
