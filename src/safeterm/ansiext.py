"""Control character escaping for text shown in the terminal UI.

Untrusted output (command output, file contents) may carry raw control
characters that would corrupt the display. They are replaced with their
Unicode Control Picture glyphs:

- 0x00-0x1F -> U+2400-U+241F ("␀" .. "␟")
- DEL (0x7F) -> U+2421 ("␡")

escape_preserving_ansi() additionally keeps well-formed CSI sequences
(ESC [ params letter) intact so colours and styles still render. A malformed
or truncated sequence only has its ESC replaced ("␛"); whatever followed it
is reprocessed as plain text.
"""

import re

ESC = "\x1b"
DEL = "\x7f"

CONTROL_PICTURE_BASE = 0x2400
DEL_PICTURE = "␡"
ESC_PICTURE = "␛"

# ESC [ then parameter bytes (digits, ';', '?') then one ASCII letter
_CSI = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

# Sequences removed for plain-text sinks (transcripts, non-TTY output)
_ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")

_PICTURES = {code: CONTROL_PICTURE_BASE + code for code in range(0x20)}
_PICTURES[ord(DEL)] = ord(DEL_PICTURE)


def is_control(ch: str) -> bool:
    """Return True for code points 0x00-0x1F and DEL."""
    return ord(ch) in _PICTURES


def control_picture(ch: str) -> str:
    """Return the Control Picture for a control character, else ch unchanged.

    Args:
        ch: A single code point

    Returns:
        The display glyph for ch
    """
    code = _PICTURES.get(ord(ch))
    return chr(code) if code is not None else ch


def escape(content: str) -> str:
    """Replace every control character with its Control Picture.

    The mapping is one code point for one code point, so the result always
    has the same length as the input.

    Args:
        content: Text to escape

    Returns:
        Escaped text
    """
    return content.translate(_PICTURES)


def csi_length(content: str, pos: int) -> int:
    """Length of the well-formed CSI sequence starting at pos, or 0.

    Args:
        content: Text to scan
        pos: Index of the candidate ESC

    Returns:
        Number of code points in the sequence, 0 if none starts at pos
    """
    match = _CSI.match(content, pos)
    if match is None:
        return 0
    return match.end() - pos


def escape_preserving_ansi(content: str) -> str:
    """Escape control characters but keep well-formed CSI sequences.

    Useful for command output that carries intentional colour codes.

    Args:
        content: Text to escape (may contain ANSI escape codes)

    Returns:
        Escaped text with CSI sequences copied verbatim
    """
    parts: list[str] = []
    i = 0
    end = len(content)
    while i < end:
        esc = content.find(ESC, i)
        if esc == -1:
            parts.append(content[i:].translate(_PICTURES))
            break
        if esc > i:
            parts.append(content[i:esc].translate(_PICTURES))

        length = csi_length(content, esc)
        if length:
            parts.append(content[esc : esc + length])
            i = esc + length
        else:
            # Invalid or truncated: escape the ESC only, rescan what follows
            parts.append(ESC_PICTURE)
            i = esc + 1
    return "".join(parts)


def decode(data: bytes) -> str:
    """Decode UTF-8 bytes, replacing invalid sequences with U+FFFD."""
    return data.decode("utf-8", errors="replace")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text.

    Args:
        text: Text possibly containing ANSI codes

    Returns:
        Text with ANSI codes removed
    """
    return _ANSI_ESCAPE.sub("", text)
