"""Upgrades for documents written by earlier versions.

Two generations of drift are handled:

- the pre-v2 block, which used ``type``/``created``/``related``/``domains``/
  ``existence-check`` and was free-form YAML (block lists, quoted values);
- ``relatedIds`` that still hold file paths instead of ids.

Both functions only compute new text; callers write it back and invalidate
their ``RelationCache``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import date, datetime

import frontmatter

from ideatr.documents import codec
from ideatr.documents.model import DocumentEntry, Item, MetadataRecord
from ideatr.documents.relations import RelationCache

logger = logging.getLogger(__name__)

# current key -> key used by the pre-v2 schema
LEGACY_KEYS = {
    "kind": "type",
    "createdDate": "created",
    "relatedIds": "related",
    "domainChecks": "domains",
    "existenceChecks": "existence-check",
}

_INT_RE = re.compile(r"\d+")


def _load_yaml_block(text: str) -> dict:
    """Parse YAML front matter, {} if it is absent or broken."""
    try:
        post = frontmatter.loads(text)
        return dict(post.metadata)
    except Exception:
        logger.debug("Front matter is not valid YAML", exc_info=True)
        return {}


def _lookup(meta: dict, key: str):
    if key in meta:
        return meta[key]
    return meta.get(LEGACY_KEYS.get(key, key))


def _as_text(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _as_flag(value) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip()
    return text.lower() == "true" if text else None


def _as_id(value) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return max(value, 0)
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    return 0


def _as_list(value, numeric: bool = False) -> list[Item]:
    if not isinstance(value, (list, tuple)):
        return []
    items: list[Item] = []
    for item in value:
        if item is None:
            continue
        if numeric and isinstance(item, int) and not isinstance(item, bool):
            items.append(item)
            continue
        text = _as_text(item)
        if not text:
            continue
        items.append(int(text) if numeric and _INT_RE.fullmatch(text) else text)
    return items


def migrate_legacy_block(text: str) -> str | None:
    """Rewrite an old-style block in the current schema.

    Returns None when the document already parses or cannot be understood.
    The body is carried over unchanged.
    """
    if codec.parse(text) is not None:
        return None
    block, body = codec.split(text)
    if block is None:
        return None

    meta = _load_yaml_block(text)
    if not meta:
        return None

    record = MetadataRecord(
        kind=_as_text(_lookup(meta, "kind")),
        status=_as_text(_lookup(meta, "status")),
        created_date=_as_text(_lookup(meta, "createdDate")),
        id=_as_id(meta.get("id")),
        category=_as_text(meta.get("category")) or "",
        tags=_as_list(meta.get("tags")),
        related_ids=_as_list(_lookup(meta, "relatedIds"), numeric=True),
        domain_checks=_as_list(_lookup(meta, "domainChecks")),
        existence_checks=_as_list(_lookup(meta, "existenceChecks")),
        elevated=_as_text(meta.get("elevated")) or None,
        project_path=_as_text(meta.get("projectPath")) or None,
        codename=_as_text(meta.get("codename")) or None,
        dismissed=_as_flag(meta.get("dismissed")),
        dismissed_at=_as_text(meta.get("dismissedAt")) or None,
        acted_upon=_as_flag(meta.get("actedUpon")),
        acted_upon_at=_as_text(meta.get("actedUponAt")) or None,
    )
    if not codec.validate(record):
        logger.warning(
            "Cannot migrate block: kind=%s status=%s created=%s",
            record.kind,
            record.status,
            record.created_date,
        )
        return None
    return codec.build(record, body)


async def migrate_related(
    entries: Iterable[DocumentEntry], cache: RelationCache
) -> dict[str, str]:
    """Return {path: new_text} for documents whose relatedIds need fixing.

    Paths are translated to ids, ids unknown to the cache and zeros are
    dropped, duplicates keep their first position.
    Nothing is rewritten when the cache could not be built, since every id
    would look unknown.
    """
    if not await cache.load():
        logger.warning("Relation cache unavailable, skipping relatedIds migration")
        return {}

    rewrites: dict[str, str] = {}
    for entry in entries:
        if entry.metadata is None:
            continue
        related = list(entry.metadata.related_ids)
        if not related:
            continue

        migrated: list[int] = []
        for item in related:
            if isinstance(item, str):
                migrated.extend(await cache.paths_to_ids([item]))
            elif item and await cache.id_to_path(item) is not None:
                migrated.append(item)
            else:
                logger.warning("Dropping unknown related id %s in %s", item, entry.path)

        migrated = list(dict.fromkeys(migrated))
        if migrated != related:
            rewrites[entry.path] = codec.update_fields(entry.text, {"related_ids": migrated})
            logger.debug("Migrated relatedIds for %s", entry.path)

    if rewrites:
        logger.info("Migrated relatedIds in %d documents", len(rewrites))
    return rewrites
