from pathlib import Path

import pytest

from safeterm.__main__ import _report_crash, tui_exit_code
from safeterm.utils.logging import setup_logging


def test_report_crash_escapes_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    handle = setup_logging(tmp_path / "safeterm.log")
    try:
        _report_crash(handle.get_logger("test"), ValueError("bad\x1b]0;owned\x07name"), None)
    finally:
        handle.close()

    err = capsys.readouterr().err
    assert "Viewer crashed: bad␛]0;owned␇name (report: not written)" in err
    assert "\x07" not in err
    # Only our own colour codes remain
    assert err.count("\x1b") == 2


@pytest.mark.parametrize(
    ("return_code", "success", "expected"),
    [
        (0, True, 0),
        (None, True, 0),
        (0, False, 1),
        (1, True, 1),
    ],
)
def test_tui_exit_code(return_code: int | None, success: bool, expected: int) -> None:
    assert tui_exit_code(return_code, success) == expected
