from pathlib import Path

import pytest

from safeterm.config import DEFAULT_LOG_FILE, AppConfig, env_flag_enabled, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset the variables and restore them after .env files are loaded."""
    for name in ("SAFETERM_LOG_FILE", "SAFETERM_DEBUG"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.mark.parametrize("value", ["1", "true", " TRUE ", "Yes", "on"])
def test_env_flag_enabled_true_values(value: str) -> None:
    assert env_flag_enabled(value)


@pytest.mark.parametrize("value", [None, "", "0", "False", "off", "maybe"])
def test_env_flag_enabled_false_values(value: str | None) -> None:
    assert env_flag_enabled(value) is False


def test_defaults_without_pyproject(tmp_path: Path) -> None:
    config = load_config(tmp_path, command=["echo", "hi"])

    assert config.app == AppConfig()
    assert config.log_file == DEFAULT_LOG_FILE
    assert config.debug is False
    assert config.preserve_ansi is True
    assert config.validate() == []


def test_pyproject_table(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
[tool.safeterm]
log_file = "logs/app.log"
debug = true
tab_width = 8
preserve_ansi = false
max_transcripts = 2
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path, command=["ls"])

    assert config.app.tab_width == 8
    assert config.app.max_transcripts == 2
    assert config.log_file == Path("logs/app.log")
    assert config.debug is True
    assert config.preserve_ansi is False


def test_pyproject_without_table_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
    assert AppConfig.from_pyproject(tmp_path) == AppConfig()


def test_env_file_and_cli_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text(
        "SAFETERM_LOG_FILE=/var/tmp/from-env.log\nSAFETERM_DEBUG=1\n", encoding="utf-8"
    )

    config = load_config(tmp_path, command=["ls"])
    assert config.log_file == Path("/var/tmp/from-env.log")
    assert config.debug is True

    config = load_config(tmp_path, command=["ls"], log_file=Path("/var/tmp/cli.log"))
    assert config.log_file == Path("/var/tmp/cli.log")


def test_no_ansi_flag(tmp_path: Path) -> None:
    assert load_config(tmp_path, command=["ls"], no_ansi=True).preserve_ansi is False


def test_validate_requires_a_source(tmp_path: Path) -> None:
    errors = load_config(tmp_path).validate()
    assert errors == ["Nothing to view: pass --file PATH and/or a command"]


def test_validate_missing_file(tmp_path: Path) -> None:
    (tmp_path / "present.txt").write_text("x")
    config = load_config(tmp_path, files=[Path("present.txt"), Path("absent.txt")])
    assert config.validate() == ["File not found: absent.txt"]


def test_validate_limits(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "[tool.safeterm]\ntab_width = -1\nmax_transcripts = 0\n", encoding="utf-8"
    )
    errors = load_config(tmp_path, command=["ls"]).validate()
    assert "tab_width must not be negative" in errors
    assert "max_transcripts must be at least 1" in errors


def test_description(tmp_path: Path) -> None:
    config = load_config(tmp_path, command=["make", "all"], files=[Path("a.log")])
    assert config.description == "a.log, make all"
    assert config.log_dir == DEFAULT_LOG_FILE.expanduser().parent
