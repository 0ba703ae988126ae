from datetime import datetime, timezone
from pathlib import Path

import pytest

from safeterm.utils.crash import recover_panic, write_crash_report


def _fail() -> None:
    raise RuntimeError("display broke")


def test_recover_panic_writes_report_and_runs_cleanup(tmp_path: Path) -> None:
    calls: list[str] = []

    with recover_panic("ui", lambda: calls.append("cleanup"), crash_dir=tmp_path) as guard:
        _fail()

    assert guard.crashed
    assert isinstance(guard.error, RuntimeError)
    assert calls == ["cleanup"]
    assert guard.report_path is not None
    assert guard.report_path.parent == tmp_path
    assert guard.report_path.name.startswith("safeterm-panic-ui-")

    report = guard.report_path.read_text(encoding="utf-8")
    assert report.startswith("Panic in ui: RuntimeError('display broke')")
    assert "Time: " in report
    assert "Stack Trace:" in report
    assert "in _fail" in report


def test_recover_panic_without_error(tmp_path: Path) -> None:
    calls: list[str] = []

    with recover_panic("ui", lambda: calls.append("cleanup"), crash_dir=tmp_path) as guard:
        pass

    assert not guard.crashed
    assert guard.report_path is None
    assert calls == []
    assert list(tmp_path.iterdir()) == []


def test_recover_panic_without_cleanup(tmp_path: Path) -> None:
    with recover_panic("worker", crash_dir=tmp_path) as guard:
        _fail()

    assert guard.crashed
    assert guard.report_path is not None and guard.report_path.exists()


def test_recover_panic_lets_keyboard_interrupt_through(tmp_path: Path) -> None:
    with pytest.raises(KeyboardInterrupt):
        with recover_panic("ui", crash_dir=tmp_path):
            raise KeyboardInterrupt

    assert list(tmp_path.iterdir()) == []


def test_write_crash_report_name_and_time(tmp_path: Path) -> None:
    now = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
    try:
        _fail()
    except RuntimeError as e:
        path = write_crash_report("viewer", e, tmp_path / "crashes", now=now)

    assert path == tmp_path / "crashes" / "safeterm-panic-viewer-20240506-070809.log"
    assert "Time: 2024-05-06T07:08:09+00:00" in path.read_text(encoding="utf-8")
