"""Tests for the file-system document repository."""

from __future__ import annotations

from pathlib import Path

import pytest

from ideatr.documents import codec
from ideatr.documents.model import MetadataRecord
from ideatr.documents.relations import RelationCache
from ideatr.documents.repository import DocumentRepository, DocumentStorage, FileSystemRepository
from ideatr.errors import DocumentReadError


def _write(root: Path, rel: str, text: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    _write(tmp_path, "Ideas/a.md", codec.build(MetadataRecord.captured("2026-02-18", id=5), "A"))
    _write(tmp_path, "Ideas/nested/b.md", codec.build(MetadataRecord.captured("2026-02-19", id=9), "B"))
    _write(tmp_path, "Ideas/plain.md", "no metadata here")
    _write(tmp_path, "Ideas/notes.txt", "ignored")
    _write(tmp_path, "Projects/c.md", codec.build(MetadataRecord.captured("2026-02-20", id=11), "C"))
    return tmp_path


@pytest.fixture
def repo(vault: Path) -> FileSystemRepository:
    return FileSystemRepository(vault)


class TestProtocols:
    def test_implements_both(self, repo: FileSystemRepository):
        assert isinstance(repo, DocumentStorage)
        assert isinstance(repo, DocumentRepository)


class TestListDocuments:
    @pytest.mark.asyncio
    async def test_enumerates_markdown_under_documents_dir(self, repo: FileSystemRepository):
        entries = await repo.list_documents()
        paths = [e.path for e in entries]
        assert paths == ["Ideas/a.md", "Ideas/nested/b.md", "Ideas/plain.md"]

    @pytest.mark.asyncio
    async def test_entries_are_parsed(self, repo: FileSystemRepository):
        entries = {e.path: e for e in await repo.list_documents()}
        assert entries["Ideas/a.md"].metadata.id == 5
        assert entries["Ideas/a.md"].title == "a"
        assert entries["Ideas/plain.md"].metadata is None

    @pytest.mark.asyncio
    async def test_missing_documents_dir(self, tmp_path: Path):
        assert await FileSystemRepository(tmp_path).list_documents() == []

    @pytest.mark.asyncio
    async def test_custom_documents_dir(self, vault: Path):
        entries = await FileSystemRepository(vault, "Projects").list_documents()
        assert [e.path for e in entries] == ["Projects/c.md"]

    @pytest.mark.asyncio
    async def test_unreadable_file_skipped(self, vault: Path, repo: FileSystemRepository):
        (vault / "Ideas" / "binary.md").write_bytes(b"\xff\xfe\x00bad")
        paths = [e.path for e in await repo.list_documents()]
        assert "Ideas/binary.md" not in paths
        assert "Ideas/a.md" in paths


class TestReadWrite:
    @pytest.mark.asyncio
    async def test_read(self, repo: FileSystemRepository):
        text = await repo.read("Ideas/a.md")
        assert codec.parse_document(text).body == "A"

    @pytest.mark.asyncio
    async def test_read_missing(self, repo: FileSystemRepository):
        with pytest.raises(DocumentReadError, match="Ideas/missing.md"):
            await repo.read("Ideas/missing.md")

    @pytest.mark.asyncio
    async def test_read_outside_vault(self, repo: FileSystemRepository):
        with pytest.raises(DocumentReadError, match="outside of vault"):
            await repo.read("../etc/passwd")

    @pytest.mark.asyncio
    async def test_write_and_delete(self, vault: Path, repo: FileSystemRepository):
        await repo.write("Ideas/new/x.md", "hello")
        assert (vault / "Ideas" / "new" / "x.md").read_text(encoding="utf-8") == "hello"
        assert repo.exists("Ideas/new/x.md")
        await repo.delete("Ideas/new/x.md")
        assert not repo.exists("Ideas/new/x.md")

    def test_locator_for(self, repo: FileSystemRepository):
        assert repo.locator_for("x.md") == "Ideas/x.md"


class TestWithRelationCache:
    @pytest.mark.asyncio
    async def test_rename_on_disk(self, vault: Path, repo: FileSystemRepository):
        cache = RelationCache(repo)
        assert await cache.ids_to_paths([5, 9]) == ["Ideas/a.md", "Ideas/nested/b.md"]

        (vault / "Ideas" / "a.md").rename(vault / "Ideas" / "a-renamed.md")
        cache.invalidate()

        assert await cache.ids_to_paths([5]) == ["Ideas/a-renamed.md"]
        assert await cache.id_to_title(5) == "a-renamed"
