"""Document id generation and assignment for documents still at ``id: 0``."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Iterable

from ideatr.documents import codec
from ideatr.documents.model import DocumentEntry

logger = logging.getLogger(__name__)

MAX_RANDOM_ATTEMPTS = 10


def generate_id() -> int:
    """Millisecond timestamp with a 4-digit random suffix."""
    return int(time.time() * 1000) * 10000 + random.randrange(10000)


def next_sequential_id(existing: Iterable[int]) -> int:
    return max(existing, default=0) + 1


def generate_unique_id(existing: Iterable[int]) -> int:
    """A random id not in ``existing``; sequential if random keeps colliding."""
    taken = set(existing)
    for _ in range(MAX_RANDOM_ATTEMPTS):
        candidate = generate_id()
        if candidate not in taken:
            return candidate
    return next_sequential_id(taken)


def plan_id_assignments(entries: Iterable[DocumentEntry]) -> dict[str, str]:
    """Return {path: new_text} for every parsed document whose id is 0."""
    entries = list(entries)
    taken = {e.metadata.id for e in entries if e.metadata is not None and e.metadata.id}
    rewrites: dict[str, str] = {}
    for entry in entries:
        if entry.metadata is None or entry.metadata.id:
            continue
        new_id = generate_unique_id(taken)
        taken.add(new_id)
        rewrites[entry.path] = codec.update_fields(entry.text, {"id": new_id})
        logger.debug("Assigned id %d to %s", new_id, entry.path)
    if rewrites:
        logger.info("Planned id assignment for %d documents", len(rewrites))
    return rewrites
