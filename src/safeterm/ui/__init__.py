"""UI components for the safeterm viewer."""

from safeterm.ui.protocol import ViewerUI
from safeterm.ui.simple import SimpleUI

__all__ = ["SimpleUI", "ViewerUI"]
