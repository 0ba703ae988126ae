"""Terminal output handling for display in the viewer.

Command output from a PTY arrives in arbitrary chunks that may split lines
and escape sequences. Chunks are assembled into lines first, and only
completed lines are escaped, so a colour sequence cut in half by a read is
never mistaken for a stray ESC.
"""

from safeterm.ansiext import escape, escape_preserving_ansi


class OutputProcessor:
    """Turn raw terminal output into escaped lines.

    Only \\n and \\r\\n end a line. A lone carriage return or backspace is
    kept in the line and shown as a Control Picture like every other control
    character, so output cannot hide earlier text by overwriting it. ANSI
    colour sequences are preserved unless preserve_ansi is False.
    """

    def __init__(self, preserve_ansi: bool = True, tab_width: int = 4) -> None:
        """Initialize the output processor.

        Args:
            preserve_ansi: Keep well-formed CSI sequences instead of escaping them
            tab_width: Spaces per tab stop (0 leaves tabs to be escaped)
        """
        self.preserve_ansi = preserve_ansi
        self.tab_width = tab_width
        self.current_line: str = ""
        self._pending_cr = False

    def _escape_line(self, line: str) -> str:
        if self.tab_width > 0:
            line = line.expandtabs(self.tab_width)
        if self.preserve_ansi:
            return escape_preserving_ansi(line)
        return escape(line)

    def process(self, text: str) -> str:
        """Process raw output into escaped, completed lines.

        Handles:
        - \\n and \\r\\n (also split across chunks): Emit current line and reset
        - lone \\r, \\b and other controls: Kept for the escaper

        Args:
            text: Raw output chunk

        Returns:
            Escaped completed lines joined by newlines, or "" if none completed
        """
        result_lines: list[str] = []

        i = 0
        if self._pending_cr and text:
            self._pending_cr = False
            if text[0] == "\n":
                result_lines.append(self._escape_line(self.current_line))
                self.current_line = ""
                i = 1
            else:
                self.current_line += "\r"

        while i < len(text):
            char = text[i]

            if char == "\r":
                # \r\n may be split across chunks
                if i + 1 == len(text):
                    self._pending_cr = True
                    break
                if text[i + 1] == "\n":
                    result_lines.append(self._escape_line(self.current_line))
                    self.current_line = ""
                    i += 2
                    continue
                self.current_line += char
            elif char == "\n":
                result_lines.append(self._escape_line(self.current_line))
                self.current_line = ""
            else:
                self.current_line += char

            i += 1

        if result_lines:
            return "\n".join(result_lines) + "\n"
        return ""

    def flush(self) -> str:
        """Flush any remaining partial line.

        Call this when a source ends to get output that wasn't terminated
        with a newline. A sequence still open at this point is truncated and
        gets escaped.

        Returns:
            Escaped partial line (with newline appended) or empty string
        """
        if self._pending_cr:
            self._pending_cr = False
            self.current_line += "\r"
        if self.current_line:
            result = self._escape_line(self.current_line) + "\n"
            self.current_line = ""
            return result
        return ""

    def reset(self) -> None:
        """Reset processor state for reuse."""
        self.current_line = ""
        self._pending_cr = False
