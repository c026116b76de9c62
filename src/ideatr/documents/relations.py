"""Two-way map between document ids and their current paths and titles.

Related documents are persisted as numeric ids so that links survive
renames. The cache resolves those ids against a single full scan of the
repository, built on first use and dropped with ``invalidate()`` whenever
documents are created, deleted or renamed.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Iterable

from ideatr.documents.repository import DocumentRepository

logger = logging.getLogger(__name__)


class CacheState(enum.Enum):
    EMPTY = "empty"
    BUILDING = "building"
    READY = "ready"


class RelationCache:
    """Lazily built id <-> (path, title) translation for one repository."""

    def __init__(self, repository: DocumentRepository) -> None:
        self._repository = repository
        self._state = CacheState.EMPTY
        self._generation = 0
        self._build_task: asyncio.Task[None] | None = None
        self._path_to_id: dict[str, int] = {}
        self._id_to_path: dict[int, str] = {}
        self._id_to_title: dict[int, str] = {}

    @property
    def state(self) -> CacheState:
        return self._state

    # ── Build ─────────────────────────────────────────────

    async def _build(self, generation: int) -> None:
        path_to_id: dict[str, int] = {}
        id_to_path: dict[int, str] = {}
        id_to_title: dict[int, str] = {}
        try:
            entries = await self._repository.list_documents()
            for entry in entries:
                if entry.metadata is None or not entry.metadata.id:
                    continue
                doc_id = entry.metadata.id
                previous = id_to_path.get(doc_id)
                if previous is not None and previous != entry.path:
                    logger.warning(
                        "Duplicate id %d: %s replaces %s", doc_id, entry.path, previous
                    )
                    path_to_id.pop(previous, None)
                path_to_id[entry.path] = doc_id
                id_to_path[doc_id] = entry.path
                id_to_title[doc_id] = entry.title
        except Exception:
            logger.warning("Failed to build relation cache", exc_info=True)
            if generation == self._generation:
                self._state = CacheState.EMPTY
                self._build_task = None
            return

        if generation != self._generation:
            logger.debug("Discarding relation cache build invalidated mid-scan")
            return
        self._path_to_id = path_to_id
        self._id_to_path = id_to_path
        self._id_to_title = id_to_title
        self._state = CacheState.READY
        self._build_task = None
        logger.debug("Relation cache built with %d documents", len(id_to_path))

    async def _ensure_built(self) -> None:
        while self._state is not CacheState.READY:
            generation = self._generation
            if self._build_task is None:
                self._state = CacheState.BUILDING
                self._build_task = asyncio.create_task(self._build(generation))
            await asyncio.shield(self._build_task)
            if generation == self._generation:
                # Finished, successfully or not; a failed build is not retried here
                break

    async def load(self) -> bool:
        """Build the map if needed. False when the repository scan failed."""
        await self._ensure_built()
        return self._state is CacheState.READY

    def invalidate(self) -> None:
        """Drop all mappings; the next lookup triggers a fresh scan."""
        self._generation += 1
        self._state = CacheState.EMPTY
        self._build_task = None
        self._path_to_id = {}
        self._id_to_path = {}
        self._id_to_title = {}

    # ── Translation ───────────────────────────────────────

    async def paths_to_ids(self, paths: Iterable[str]) -> list[int]:
        await self._ensure_built()
        ids: list[int] = []
        for path in paths:
            doc_id = self._path_to_id.get(path)
            if doc_id:
                ids.append(doc_id)
            else:
                logger.warning("Could not find id for path: %s", path)
        return ids

    async def ids_to_paths(self, ids: Iterable[int]) -> list[str]:
        await self._ensure_built()
        paths: list[str] = []
        for doc_id in ids:
            path = self._id_to_path.get(doc_id)
            if path:
                paths.append(path)
            else:
                logger.warning("Could not find path for id: %s", doc_id)
        return paths

    async def path_to_id(self, path: str) -> int | None:
        await self._ensure_built()
        return self._path_to_id.get(path)

    async def id_to_path(self, doc_id: int) -> str | None:
        await self._ensure_built()
        return self._id_to_path.get(doc_id)

    async def id_to_title(self, doc_id: int) -> str | None:
        await self._ensure_built()
        return self._id_to_title.get(doc_id)

    async def ids_to_titles(self, ids: Iterable[int]) -> dict[int, str]:
        await self._ensure_built()
        titles: dict[int, str] = {}
        for doc_id in ids:
            title = self._id_to_title.get(doc_id)
            if title:
                titles[doc_id] = title
        return titles
