"""Tests for the python -m ideatr entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from ideatr.__main__ import main
from ideatr.documents import codec
from ideatr.documents.model import MetadataRecord

LEGACY = "---\ntype: idea\nstatus: captured\ncreated: 2025-11-02\nrelated: [Ideas/b.md]\n---\n\nOld.\n"


@pytest.fixture
def vault(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("IDEATR_VAULT", str(tmp_path))
    monkeypatch.delenv("IDEATR_DOCUMENTS_DIR", raising=False)
    monkeypatch.setenv("IDEATR_LOG_LEVEL", "WARNING")
    ideas = tmp_path / "Ideas"
    ideas.mkdir()
    (ideas / "a.md").write_text(LEGACY, encoding="utf-8")
    (ideas / "b.md").write_text(
        codec.build(MetadataRecord.captured("2026-02-18", id=9), "B"), encoding="utf-8"
    )
    (ideas / "c.md").write_text(codec.build(MetadataRecord.captured("2026-02-18"), "C"), encoding="utf-8")
    return tmp_path


class TestMain:
    def test_unknown_command(self, vault: Path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["bogus"])
        assert exc.value.code == 1
        assert "Usage" in capsys.readouterr().out

    def test_capture_requires_text(self, vault: Path):
        with pytest.raises(SystemExit):
            main(["capture"])

    def test_scan(self, vault: Path, capsys):
        main(["scan"])
        out = capsys.readouterr().out
        assert "3 documents" in out
        assert "(no metadata)" in out

    def test_migrate(self, vault: Path, capsys):
        main(["migrate"])
        record = codec.parse((vault / "Ideas" / "a.md").read_text(encoding="utf-8"))
        assert record.created_date == "2025-11-02"
        assert record.related_ids == [9]
        assert "Upgraded 1 blocks" in capsys.readouterr().out

    def test_assign_ids(self, vault: Path):
        main(["assign-ids"])
        record = codec.parse((vault / "Ideas" / "c.md").read_text(encoding="utf-8"))
        assert record.id != 0

    def test_capture_with_collision(self, vault: Path, capsys):
        main(["capture", "Solar", "kettle"])
        main(["capture", "Solar", "kettle"])
        created = sorted(p.name for p in (vault / "Ideas").glob("*solar-kettle*.md"))
        assert len(created) == 2
        assert created[0].endswith("-solar-kettle-2.md")
        assert created[1].endswith("-solar-kettle.md")
        texts = [codec.parse_document((vault / "Ideas" / name).read_text(encoding="utf-8")) for name in created]
        assert all(doc.body == "Solar kettle" for doc in texts)
