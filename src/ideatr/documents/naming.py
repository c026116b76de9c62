"""Filenames and initial content for newly captured documents."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime

from ideatr.documents import codec
from ideatr.documents.ids import generate_unique_id
from ideatr.documents.model import MetadataRecord

MAX_SLUG_LENGTH = 50
FALLBACK_SLUG = "idea"


def sanitize_slug(text: str) -> str:
    """Lowercase ASCII slug: ``"My  great_idea!"`` -> ``"my-great-idea"``."""
    slug = text.lower().strip()
    slug = re.sub(r"[\s_]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    if len(slug) > MAX_SLUG_LENGTH:
        slug = slug[:MAX_SLUG_LENGTH].rstrip("-")
    return slug or FALLBACK_SLUG


def generate_filename(text: str, when: datetime) -> str:
    return f"{when:%Y-%m-%d}-{sanitize_slug(text)}.md"


def add_collision_suffix(filename: str, suffix: int) -> str:
    stem = filename[:-3] if filename.endswith(".md") else filename
    return f"{stem}-{suffix}.md"


def render_new_document(text: str, when: datetime, existing_ids: Iterable[int] = ()) -> str:
    """Full text of a freshly captured idea, with a unique id."""
    record = MetadataRecord.captured(
        created_date=f"{when:%Y-%m-%d}",
        id=generate_unique_id(existing_ids),
    )
    return codec.build(record, text.strip())
