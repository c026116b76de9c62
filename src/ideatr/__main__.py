"""Entry point: python -m ideatr [scan|assign-ids|migrate|capture <text>]

- "scan":        List every document with its id and title
- "assign-ids":  Give documents still at id 0 a unique id
- "migrate":     Upgrade legacy metadata blocks and path-based relatedIds
- "capture":     Create a new idea document from the given text
"""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime

from ideatr.config import IdeatrConfig, load_config
from ideatr.documents import migration, naming
from ideatr.documents.ids import plan_id_assignments
from ideatr.documents.relations import RelationCache
from ideatr.documents.repository import FileSystemRepository


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _repository(config: IdeatrConfig) -> FileSystemRepository:
    return FileSystemRepository(config.vault.root, config.vault.documents_dir)


async def _write_all(repo: FileSystemRepository, rewrites: dict[str, str]) -> None:
    for locator, text in rewrites.items():
        await repo.write(locator, text)


async def scan(repo: FileSystemRepository) -> None:
    entries = await repo.list_documents()
    for entry in entries:
        if entry.metadata is None:
            print(f"{'-':>20}  {entry.title}  (no metadata)")
        else:
            print(f"{entry.metadata.id:>20}  {entry.title}  [{entry.metadata.status}]")
    print(f"{len(entries)} documents")


async def assign_ids(repo: FileSystemRepository, cache: RelationCache) -> None:
    rewrites = plan_id_assignments(await repo.list_documents())
    await _write_all(repo, rewrites)
    if rewrites:
        cache.invalidate()
    print(f"Assigned {len(rewrites)} ids")


async def migrate(repo: FileSystemRepository, cache: RelationCache) -> None:
    upgraded: dict[str, str] = {}
    for entry in await repo.list_documents():
        new_text = migration.migrate_legacy_block(entry.text)
        if new_text is not None:
            upgraded[entry.path] = new_text
    await _write_all(repo, upgraded)
    if upgraded:
        cache.invalidate()

    related = await migration.migrate_related(await repo.list_documents(), cache)
    await _write_all(repo, related)
    print(f"Upgraded {len(upgraded)} blocks, fixed relatedIds in {len(related)} documents")


async def capture(repo: FileSystemRepository, cache: RelationCache, text: str) -> None:
    now = datetime.now()
    filename = naming.generate_filename(text, now)
    locator = repo.locator_for(filename)
    suffix = 2
    while repo.exists(locator):
        locator = repo.locator_for(naming.add_collision_suffix(filename, suffix))
        suffix += 1

    existing = [e.metadata.id for e in await repo.list_documents() if e.metadata and e.metadata.id]
    await repo.write(locator, naming.render_new_document(text, now, existing))
    cache.invalidate()
    print(f"Created {locator}")


async def _run(cmd: str, args: list[str], config: IdeatrConfig) -> None:
    repo = _repository(config)
    cache = RelationCache(repo)
    if cmd == "scan":
        await scan(repo)
    elif cmd == "assign-ids":
        await assign_ids(repo, cache)
    elif cmd == "migrate":
        await migrate(repo, cache)
    elif cmd == "capture":
        await capture(repo, cache, " ".join(args))


def _usage() -> None:
    print("Usage: python -m ideatr [scan|assign-ids|migrate|capture <text>]")
    print("  scan        List documents with their ids")
    print("  assign-ids  Assign ids to documents at id 0")
    print("  migrate     Upgrade legacy blocks and path-based relatedIds")
    print("  capture     Create a new idea document")


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    cmd = argv[0] if argv else "scan"

    if cmd not in ("scan", "assign-ids", "migrate", "capture") or (cmd == "capture" and len(argv) < 2):
        _usage()
        sys.exit(1)

    config = load_config()
    _setup_logging(config.log_level)
    asyncio.run(_run(cmd, argv[1:], config))


if __name__ == "__main__":
    main()
