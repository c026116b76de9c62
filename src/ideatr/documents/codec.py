"""Metadata block codec.

A document starts with a block framed by ``---`` lines, one ``key: value``
per line, arrays written as ``[a, b, c]``. Parsing is line-oriented so that
documents written under older schema versions stay readable: unknown keys
are ignored, ``id`` falls back to 0 and ``category`` to "".
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from ideatr.documents.model import KIND, STATUSES, Document, Item, MetadataRecord

logger = logging.getLogger(__name__)

DELIMITER = "---"

_BLOCK_RE = re.compile(r"\A\ufeff?---[ \t]*\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_INT_RE = re.compile(r"\d+")

# (on-disk key, attribute) in serialization order
SCALAR_FIELDS = (
    ("kind", "kind"),
    ("status", "status"),
    ("createdDate", "created_date"),
    ("id", "id"),
    ("category", "category"),
)
ARRAY_FIELDS = (
    ("tags", "tags"),
    ("relatedIds", "related_ids"),
    ("domainChecks", "domain_checks"),
    ("existenceChecks", "existence_checks"),
)
OPTIONAL_FIELDS = (
    ("elevated", "elevated"),
    ("projectPath", "project_path"),
    ("codename", "codename"),
    ("dismissed", "dismissed"),
    ("dismissedAt", "dismissed_at"),
    ("actedUpon", "acted_upon"),
    ("actedUponAt", "acted_upon_at"),
)
# true/false on disk
FLAG_FIELDS = frozenset({"dismissed", "acted_upon"})

_DISK_KEYS = {attr: key for key, attr in SCALAR_FIELDS + ARRAY_FIELDS + OPTIONAL_FIELDS}


# ── Framing ───────────────────────────────────────────────

def split(text: str) -> tuple[str | None, str]:
    """Return (block, body). ``block`` is None when the text has no framing.

    One blank line between the closing delimiter and the body is part of
    the framing; everything else belongs to the body verbatim.
    """
    match = _BLOCK_RE.match(text)
    if not match:
        return None, text
    body = text[match.end():]
    if match.group(0).endswith("\n") and body.startswith("\n"):
        body = body[1:]
    return match.group(1), body


# ── Parsing ───────────────────────────────────────────────

def _read_lines(block: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for line in block.split("\n"):
        key, sep, value = line.strip().partition(":")
        if sep:
            values[key.strip()] = value.strip()
    return values


def _parse_id(value: str | None) -> int:
    if value and _INT_RE.fullmatch(value):
        return int(value)
    return 0


def _parse_array(value: str | None, numeric: bool = False) -> list[Item]:
    """``[a, b]`` -> ["a", "b"]; anything that is not bracketed -> []."""
    if not value or not (value.startswith("[") and value.endswith("]")):
        return []
    items: list[Item] = []
    for raw in value[1:-1].split(","):
        item = raw.strip()
        if not item:
            continue
        if numeric and _INT_RE.fullmatch(item):
            items.append(int(item))
        else:
            items.append(item)
    return items


def _parse_flag(value: str | None) -> bool | None:
    if not value:
        return None
    return value.lower() == "true"


def parse(text: str) -> MetadataRecord | None:
    """Parse the leading metadata block, or return None if there is none."""
    block, _ = split(text)
    if block is None:
        return None

    values = _read_lines(block)
    kind = values.get("kind")
    status = values.get("status")
    created = values.get("createdDate")
    if not kind or not status or not created:
        return None

    record = MetadataRecord(
        kind=kind,
        status=status,
        created_date=created,
        id=_parse_id(values.get("id")),
        category=values.get("category", ""),
        tags=_parse_array(values.get("tags")),
        related_ids=_parse_array(values.get("relatedIds"), numeric=True),
        domain_checks=_parse_array(values.get("domainChecks")),
        existence_checks=_parse_array(values.get("existenceChecks")),
        elevated=values.get("elevated") or None,
        project_path=values.get("projectPath") or None,
        codename=values.get("codename") or None,
        dismissed=_parse_flag(values.get("dismissed")),
        dismissed_at=values.get("dismissedAt") or None,
        acted_upon=_parse_flag(values.get("actedUpon")),
        acted_upon_at=values.get("actedUponAt") or None,
    )
    if not validate(record):
        logger.debug("Metadata block failed validation: kind=%s status=%s", kind, status)
        return None
    return record


def parse_document(text: str) -> Document | None:
    """Parse metadata and body together."""
    record = parse(text)
    if record is None:
        return None
    _, body = split(text)
    return Document(metadata=record, body=body)


def _valid_item(item: object, numeric: bool) -> bool:
    """True if ``item`` is written and read back as the same value."""
    if isinstance(item, bool):
        return False
    if isinstance(item, int):
        return numeric and item >= 0
    if not isinstance(item, str) or not item or item != item.strip():
        return False
    if "," in item or "\n" in item:
        return False
    # digit strings come back as ints in relatedIds
    return not (numeric and _INT_RE.fullmatch(item))


def validate(record: MetadataRecord) -> bool:
    """Check required scalars, enum membership, array items and flags."""
    if record.kind != KIND:
        return False
    if not isinstance(record.status, str) or record.status not in STATUSES:
        return False
    if not isinstance(record.created_date, str) or not _DATE_RE.fullmatch(record.created_date):
        return False
    if not isinstance(record.category, str):
        return False
    if isinstance(record.id, bool) or not isinstance(record.id, int) or record.id < 0:
        return False
    for _, attr in ARRAY_FIELDS:
        items = getattr(record, attr)
        if not isinstance(items, (list, tuple)):
            return False
        numeric = attr == "related_ids"
        if not all(_valid_item(item, numeric) for item in items):
            return False
    for attr in FLAG_FIELDS:
        flag = getattr(record, attr)
        if flag is not None and not isinstance(flag, bool):
            return False
    return True


# ── Serialization ─────────────────────────────────────────

def format_value(value: object) -> str:
    """Render a single field value the way it appears on disk."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(str(item) for item in value) + "]"
    return str(value)


def _format_id(value: object) -> str:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return str(value)
    return "0"


def render_block(record: MetadataRecord) -> str:
    """Render the framed block, without a trailing newline."""
    lines = [DELIMITER]
    for key, attr in SCALAR_FIELDS:
        value = getattr(record, attr)
        rendered = _format_id(value) if attr == "id" else format_value(value)
        lines.append(f"{key}: {rendered}".rstrip())
    for key, attr in ARRAY_FIELDS:
        value = getattr(record, attr)
        if not isinstance(value, (list, tuple)):
            value = []
        lines.append(f"{key}: {format_value(value)}")
    for key, attr in OPTIONAL_FIELDS:
        value = getattr(record, attr)
        if value is not None and value != "":
            lines.append(f"{key}: {format_value(value)}")
    lines.append(DELIMITER)
    return "\n".join(lines)


def build(record: MetadataRecord, body: str) -> str:
    """Serialize ``record`` and append ``body`` after one blank line."""
    return f"{render_block(record)}\n\n{body}"


def update_fields(text: str, changes: Mapping[str, object]) -> str:
    """Rewrite individual block lines in place.

    Keys may be attribute names (``related_ids``) or on-disk keys
    (``relatedIds``). Existing lines are replaced, missing ones appended
    before the closing delimiter. Lines not named in ``changes`` and the
    body are left untouched.
    """
    match = _BLOCK_RE.match(text)
    if not match:
        logger.warning("No metadata block found, leaving text unchanged")
        return text

    block = match.group(1)
    for name, value in changes.items():
        key = _DISK_KEYS.get(name, name)
        line = f"{key}: {format_value(value)}".rstrip()
        pattern = re.compile(rf"^[ \t]*{re.escape(key)}[ \t]*:.*$", re.MULTILINE)
        if pattern.search(block):
            block = pattern.sub(lambda _m: line, block, count=1)
        else:
            block += f"\n{line}"

    return text[: match.start(1)] + block + text[match.end(1):]
