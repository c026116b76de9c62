"""Document-level read and rewrite operations.

Every write operation takes the current full text and returns the new full
text. Persisting it is the caller's job.
"""

from __future__ import annotations

import logging

from ideatr.documents import codec, sections
from ideatr.documents.model import Document, MetadataRecord
from ideatr.documents.repository import DocumentStorage
from ideatr.documents.sections import MergeMode

logger = logging.getLogger(__name__)


class DocumentStore:
    """Codec and section merger bound to a storage collaborator."""

    def __init__(self, storage: DocumentStorage) -> None:
        self.storage = storage

    async def read(self, locator: str) -> Document | None:
        """Read and parse a document; None when it has no valid metadata."""
        text = await self.storage.read(locator)
        document = codec.parse_document(text)
        if document is None:
            logger.debug("No valid metadata in %s", locator)
        return document

    def update_metadata(self, text: str, **changes: object) -> str:
        """Rewrite the named metadata fields, leaving everything else as is."""
        if not changes:
            return text
        return codec.update_fields(text, changes)

    def replace_metadata(self, text: str, record: MetadataRecord) -> str:
        """Rebuild the whole metadata block from ``record``, keeping the body.

        Only the known fields are written; lines with other keys are dropped.
        Use ``update_metadata`` to keep them.
        """
        _, body = codec.split(text)
        return codec.build(record, body)

    def update_section(
        self,
        text: str,
        label: str,
        content: str,
        mode: MergeMode | str = MergeMode.REPLACE,
    ) -> str:
        """Merge ``content`` into the ``label`` section of the body.

        The metadata block is carried over byte-for-byte.
        """
        block, body = codec.split(text)
        merged = sections.merge(body, label, content, mode)
        if block is None:
            return merged
        head = text[: len(text) - len(body)]
        if merged and not head.endswith("\n"):
            head += "\n\n"
        return head + merged
