import asyncio
from pathlib import Path

import pytest

from safeterm.config import ViewerConfig, load_config
from safeterm.sources import FileSource, SourceError, SourceStatus
from safeterm.sources import file as file_source
from safeterm.utils.process import ProcessRunner


def _config(tmp_path: Path) -> ViewerConfig:
    return load_config(tmp_path, files=[Path("x")])


def _collect(source: FileSource, config: ViewerConfig) -> list[str]:
    chunks: list[str] = []

    async def on_output(text: str) -> None:
        chunks.append(text)

    asyncio.run(source.execute(config, ProcessRunner(use_pty=False), on_output))
    return chunks


def test_file_source_decodes_utf8(tmp_path: Path) -> None:
    (tmp_path / "x").write_bytes("漢字 \x1b[1m🎉".encode())
    assert "".join(_collect(FileSource(Path("x")), _config(tmp_path))) == "漢字 \x1b[1m🎉"


def test_file_source_replaces_invalid_bytes(tmp_path: Path) -> None:
    (tmp_path / "x").write_bytes(b"ok\xff\xfe!")
    assert "".join(_collect(FileSource(Path("x")), _config(tmp_path))) == "ok��!"


def test_file_source_keeps_characters_split_across_chunks(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(file_source, "CHUNK_SIZE", 1)
    (tmp_path / "x").write_bytes("é🎉".encode())
    assert "".join(_collect(FileSource(Path("x")), _config(tmp_path))) == "é🎉"


def test_file_source_truncated_character_at_end(tmp_path: Path) -> None:
    (tmp_path / "x").write_bytes(b"a\xe6\xbc")
    assert "".join(_collect(FileSource(Path("x")), _config(tmp_path))) == "a�"


def test_file_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SourceError, match="Failed to read file"):
        _collect(FileSource(Path("missing")), _config(tmp_path))


def test_source_statuses() -> None:
    assert [status.value for status in SourceStatus] == ["pending", "running", "success", "failed"]
