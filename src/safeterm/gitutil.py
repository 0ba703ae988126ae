"""Git repository helpers used to decorate the viewer title."""

from pathlib import Path

from safeterm.utils.process import ProcessRunner


async def is_inside_work_tree(directory: Path, runner: ProcessRunner | None = None) -> bool:
    """Check whether directory is inside a git work tree."""
    runner = runner or ProcessRunner(use_pty=False)
    try:
        exit_code, output = await runner.capture(
            ["git", "rev-parse", "--is-inside-work-tree"], cwd=directory
        )
    except OSError:
        return False
    return exit_code == 0 and output.strip() == "true"


async def current_branch(directory: Path, runner: ProcessRunner | None = None) -> str:
    """Return the current git branch name for directory.

    Returns an empty string if:
    - The directory is not in a git repository
    - The repository is in a detached HEAD state
    - git is not installed or any error occurs

    Args:
        directory: Directory to inspect (any depth inside the work tree)
        runner: Process runner to use (a non-PTY runner if None)

    Returns:
        Branch name or ""
    """
    runner = runner or ProcessRunner(use_pty=False)
    if not await is_inside_work_tree(directory, runner):
        return ""

    try:
        exit_code, output = await runner.capture(
            ["git", "branch", "--show-current"], cwd=directory
        )
    except OSError:
        return ""
    if exit_code != 0:
        return ""
    return output.strip()
