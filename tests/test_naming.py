"""Tests for filenames and new-document rendering."""

from __future__ import annotations

from datetime import datetime

from ideatr.documents import codec
from ideatr.documents.naming import (
    MAX_SLUG_LENGTH,
    add_collision_suffix,
    generate_filename,
    render_new_document,
    sanitize_slug,
)

WHEN = datetime(2026, 2, 18, 9, 30)


class TestSlug:
    def test_basic(self):
        assert sanitize_slug("My  great_idea!") == "my-great-idea"

    def test_collapses_hyphens(self):
        assert sanitize_slug("  --a -- b--  ") == "a-b"

    def test_truncates_without_trailing_hyphen(self):
        slug = sanitize_slug("word " * 30)
        assert len(slug) <= MAX_SLUG_LENGTH
        assert not slug.endswith("-")

    def test_fallback(self):
        assert sanitize_slug("!!!") == "idea"
        assert sanitize_slug("王伟") == "idea"


class TestFilename:
    def test_generate(self):
        assert generate_filename("Solar kettle", WHEN) == "2026-02-18-solar-kettle.md"

    def test_collision_suffix(self):
        assert add_collision_suffix("2026-02-18-solar-kettle.md", 2) == "2026-02-18-solar-kettle-2.md"


class TestRenderNewDocument:
    def test_captured_record(self):
        text = render_new_document("  Solar kettle for camping.  ", WHEN, existing_ids=[1, 2])
        document = codec.parse_document(text)
        assert document.metadata.status == "captured"
        assert document.metadata.created_date == "2026-02-18"
        assert document.metadata.id not in (0, 1, 2)
        assert document.metadata.category == ""
        assert document.body == "Solar kettle for camping."
