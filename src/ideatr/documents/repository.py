"""Storage collaborators: protocols plus a file-system vault implementation."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from ideatr.documents import codec
from ideatr.documents.model import DocumentEntry
from ideatr.errors import DocumentReadError

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENTS_DIR = "Ideas"


@runtime_checkable
class DocumentStorage(Protocol):
    """Anything that can return the full text of a document."""

    async def read(self, locator: str) -> str:
        """Return the current text of the document at ``locator``."""
        ...


@runtime_checkable
class DocumentRepository(Protocol):
    """Anything that can enumerate every known document."""

    async def list_documents(self) -> list[DocumentEntry]:
        """Return all documents with their parsed metadata."""
        ...


class FileSystemRepository:
    """Markdown documents under ``<root>/<documents_dir>``.

    Locators are vault-relative POSIX paths such as ``Ideas/2025-01-02-x.md``.
    """

    def __init__(self, root: Path, documents_dir: str = DEFAULT_DOCUMENTS_DIR) -> None:
        self.root = Path(root)
        self.documents_dir = documents_dir.strip("/")

    @property
    def documents_path(self) -> Path:
        return self.root / self.documents_dir

    def _resolve(self, locator: str) -> Path:
        path = (self.root / locator).resolve()
        root = self.root.resolve()
        if path != root and root not in path.parents:
            raise DocumentReadError(locator, "outside of vault")
        return path

    def locator_for(self, filename: str) -> str:
        return f"{self.documents_dir}/{filename}"

    def exists(self, locator: str) -> bool:
        return self._resolve(locator).is_file()

    # ── Reads ─────────────────────────────────────────────

    def _read_sync(self, locator: str) -> str:
        path = self._resolve(locator)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(locator, str(e)) from e

    async def read(self, locator: str) -> str:
        return await asyncio.to_thread(self._read_sync, locator)

    def _scan(self) -> list[DocumentEntry]:
        entries: list[DocumentEntry] = []
        base = self.documents_path
        if not base.is_dir():
            return entries
        for md_file in sorted(base.rglob("*.md")):
            if not md_file.is_file():
                continue
            locator = md_file.relative_to(self.root).as_posix()
            try:
                text = self._read_sync(locator)
            except DocumentReadError as e:
                logger.warning("%s", e)
                continue
            entries.append(
                DocumentEntry(
                    path=locator,
                    filename=md_file.name,
                    text=text,
                    metadata=codec.parse(text),
                )
            )
        return entries

    async def list_documents(self) -> list[DocumentEntry]:
        entries = await asyncio.to_thread(self._scan)
        logger.debug("Enumerated %d documents under %s", len(entries), self.documents_dir)
        return entries

    # ── Writes (used by callers, never by the core) ─────────

    def _write_sync(self, locator: str, text: str) -> None:
        path = self._resolve(locator)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    async def write(self, locator: str, text: str) -> None:
        await asyncio.to_thread(self._write_sync, locator, text)
        logger.info("Wrote %s (%d chars)", locator, len(text))

    async def delete(self, locator: str) -> None:
        path = self._resolve(locator)
        await asyncio.to_thread(path.unlink)
        logger.info("Deleted %s", locator)
