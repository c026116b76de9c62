"""Typed shapes shared by the codec, the merger and the relation cache."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

KIND = "idea"

STATUSES = frozenset({"captured", "validated", "promoted", "archived", "elevated"})

Status = Literal["captured", "validated", "promoted", "archived", "elevated"]

Item = Union[str, int]


@dataclass
class MetadataRecord:
    """Metadata block of one document.

    Scalars left as ``None`` are "missing": ``validate`` rejects them and
    ``build`` writes them empty. ``category=""`` is a present, empty category.
    """

    kind: str | None = None
    status: str | None = None
    created_date: str | None = None
    id: int = 0
    category: str | None = None
    tags: list[Item] = field(default_factory=list)
    related_ids: list[Item] = field(default_factory=list)
    domain_checks: list[Item] = field(default_factory=list)
    existence_checks: list[Item] = field(default_factory=list)
    # Written only when set
    elevated: str | None = None
    project_path: str | None = None
    codename: str | None = None
    dismissed: bool | None = None
    dismissed_at: str | None = None
    acted_upon: bool | None = None
    acted_upon_at: str | None = None

    @classmethod
    def captured(cls, created_date: str, id: int = 0) -> MetadataRecord:
        """A fresh record for a newly captured idea."""
        return cls(
            kind=KIND,
            status="captured",
            created_date=created_date,
            id=id,
            category="",
        )


@dataclass
class Document:
    """A parsed document: metadata plus the untouched prose body."""

    metadata: MetadataRecord
    body: str


@dataclass
class DocumentEntry:
    """One document as enumerated from a repository."""

    path: str
    filename: str
    text: str
    metadata: MetadataRecord | None = None

    @property
    def title(self) -> str:
        name = self.filename
        return name[:-3] if name.endswith(".md") else name
