"""Make control characters visible in terminal output while keeping colours."""

from safeterm.ansiext import control_picture, escape, escape_preserving_ansi, is_control

__all__ = ["control_picture", "escape", "escape_preserving_ansi", "is_control"]

__version__ = "0.1.0"
