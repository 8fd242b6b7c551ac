"""Inline note formatting for option labels."""

from __future__ import annotations

import io
import re

from rich.console import Console
from rich.text import Text

INLINE_NOTE_SEPARATOR = " — note: "
INLINE_EDIT_CURSOR = "▍"
INLINE_NOTE_WRAP_PADDING = 2
ELLIPSIS = "…"

_LINE_BREAKS = re.compile(r"[\r\n\t]")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

# Measures cells while wrapping and turns wrapped lines back into ANSI.
_ansi_console = Console(
    file=io.StringIO(),
    width=200,
    force_terminal=True,
    color_system="truecolor",
    legacy_windows=False,
)


def sanitize_note(raw: str) -> str:
    """Flatten a note to one displayable line."""
    return _CONTROL_CHARS.sub("", _LINE_BREAKS.sub(" ", raw or ""))


def _truncate_keeping_tail(text: str, max_length: int) -> str:
    if max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text
    if max_length == 1:
        return ELLIPSIS
    return f"{ELLIPSIS}{text[-(max_length - 1):]}"


def _truncate_keeping_head(text: str, max_length: int) -> str:
    if max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text
    if max_length == 1:
        return ELLIPSIS
    return f"{text[:max_length - 1]}{ELLIPSIS}"


def build_option_label_with_inline_note(
    label: str,
    raw_note: str,
    is_editing: bool,
    max_length: int | None = None,
) -> str:
    """Compose ``label — note: ...`` for a single display line.

    While editing the tail is kept so the edit cursor stays visible;
    otherwise the head is kept.
    """
    note = sanitize_note(raw_note)
    if not is_editing and not note.strip():
        return label

    inline_note = f"{note}{INLINE_EDIT_CURSOR}" if is_editing else note.strip()
    inline_label = f"{label}{INLINE_NOTE_SEPARATOR}{inline_note}"

    if max_length is None:
        return inline_label
    if is_editing:
        return _truncate_keeping_tail(inline_label, max_length)
    return _truncate_keeping_head(inline_label, max_length)


def _to_ansi(line: Text) -> str:
    with _ansi_console.capture() as capture:
        _ansi_console.print(line, end="", soft_wrap=True, highlight=False)
    return capture.get()


def wrap_text(text: str, width: int) -> list[str]:
    """Soft-wrap ``text`` to ``width`` cells.

    ANSI and wide-character aware. Styles in the input are carried onto
    every wrapped line; plain input comes back plain.
    """
    width = max(1, width)
    lines = Text.from_ansi(text).wrap(_ansi_console, width, overflow="fold")
    wrapped = []
    for line in lines:
        line.rstrip()
        line.end = ""
        wrapped.append(_to_ansi(line))
    return wrapped or [""]


def build_wrapped_option_label_with_inline_note(
    label: str,
    raw_note: str,
    is_editing: bool,
    max_line_width: int,
    wrap_padding: int = INLINE_NOTE_WRAP_PADDING,
) -> list[str]:
    """Like ``build_option_label_with_inline_note`` but wrapped instead of cut."""
    inline_label = build_option_label_with_inline_note(label, raw_note, is_editing)
    padding = max(0, int(wrap_padding))
    wrap_width = max(1, max(1, int(max_line_width)) - padding)
    if not inline_label:
        return [""]
    return wrap_text(inline_label, wrap_width)
