"""Render session state into styled terminal lines.

Render functions are pure: ``(state, width) -> list[Text]``. Colors are
named by role so the host can restyle them through ``STYLES``.
"""

from __future__ import annotations

from rich.cells import cell_len
from rich.text import Text

from askline.ask.inline_note import (
    INLINE_NOTE_WRAP_PADDING,
    build_wrapped_option_label_with_inline_note,
)
from askline.ask.logic import PreparedQuestion, Selection
from askline.ask.session import SingleSessionState, TabsSessionState

STYLES: dict[str, str] = {
    "accent": "cyan",
    "text": "default",
    "muted": "bright_black",
    "dim": "dim",
    "success": "green",
    "warning": "yellow",
    "selected_bg": "reverse",
}

HINT_SINGLE = " ↑↓ move • Enter submit • Tab {verb} note • Esc cancel"
HINT_TABS_SINGLE = " ↑↓ move • Enter select • Tab add note • ←/→ switch tabs • Esc cancel"
HINT_TABS_MULTI = " ↑↓ move • Enter toggle/select • Tab add note • ←/→ switch tabs • Esc cancel"
HINT_EDITING_SINGLE = " Typing note inline • Enter submit • Tab/Esc stop editing"
HINT_EDITING_TABS = " Typing note inline • Enter save note • Tab/Esc stop editing"
HINT_SUBMIT = " ←/→ switch tabs • Esc cancel"


def _style(role: str) -> str:
    return STYLES.get(role, "")


class _Lines:
    """Collects lines, cropping each to the available width."""

    def __init__(self, width: int):
        self.width = max(1, width)
        self.lines: list[Text] = []

    def add(self, *parts: str | tuple[str, str] | Text) -> None:
        line = Text.assemble(*parts)
        line.truncate(self.width, overflow="crop")
        self.lines.append(line)

    def blank(self) -> None:
        self.lines.append(Text(""))

    def rule(self) -> None:
        self.add(("─" * self.width, _style("accent")))


def format_review_value(selection: Selection, multi: bool) -> str:
    """One-line value for the submit review."""
    options = selection.selected_options
    listed = f"[{', '.join(options)}]" if multi else (options[0] if options else "")

    if options and selection.custom_input:
        return f"{listed} + Other: {selection.custom_input}"
    if selection.custom_input:
        return f"Other: {selection.custom_input}"
    if options:
        return listed
    return "(not answered)"


def _render_options(
    out: _Lines,
    question: PreparedQuestion,
    cursor: int,
    selected: tuple[int, ...],
    notes: tuple[str, ...],
    editing: bool,
    wrap_padding: int,
    *,
    cursor_marks_selection: bool = False,
) -> None:
    for index, label in enumerate(question.labels):
        is_cursor = index == cursor
        is_selected = index in selected or (cursor_marks_selection and is_cursor)

        prefix = "→ " if is_cursor else "  "
        if question.multi:
            marker = "[x] " if is_selected else "[ ] "
        else:
            marker = "● " if is_selected else "○ "

        if is_cursor:
            color = _style("accent")
        elif is_selected:
            color = _style("success")
        else:
            color = _style("text")

        prefix_width = cell_len(prefix) + cell_len(marker)
        wrapped = build_wrapped_option_label_with_inline_note(
            label,
            notes[index],
            editing and is_cursor,
            max(1, out.width - prefix_width),
            wrap_padding,
        )
        out.add(
            (prefix, _style("accent") if is_cursor else ""),
            (marker, color),
            Text.from_ansi(wrapped[0], style=color),
        )
        continuation = " " * prefix_width
        for extra in wrapped[1:]:
            out.add(continuation, Text.from_ansi(extra, style=color))


def render_single(
    state: SingleSessionState,
    width: int,
    wrap_padding: int = INLINE_NOTE_WRAP_PADDING,
) -> list[Text]:
    out = _Lines(width)
    out.rule()
    out.add((f" {state.question.question}", _style("text")))
    out.blank()

    _render_options(
        out,
        state.question,
        state.cursor,
        (),
        state.notes,
        state.is_editing,
        wrap_padding,
        cursor_marks_selection=True,
    )

    out.blank()
    if state.is_editing:
        hint = HINT_EDITING_SINGLE
    else:
        hint = HINT_SINGLE.format(verb="edit" if state.current_note.strip() else "add")
    out.add((hint, _style("dim")))
    out.rule()
    return out.lines


def _tab_items(state: TabsSessionState) -> list[Text]:
    items: list[Text] = []
    for index, question in enumerate(state.questions):
        valid = state.is_valid(index)
        label = f" {'■' if valid else '□'} {question.tab_label} "
        if index == state.active_tab:
            style = _style("selected_bg")
        else:
            style = _style("success" if valid else "muted")
        items.append(Text.assemble((label, style), " "))

    submit = " ✓ Submit "
    if state.on_submit_tab:
        items.append(Text(submit, style=_style("selected_bg")))
    else:
        items.append(Text(submit, style=_style("success" if state.all_valid else "dim")))
    return items


def _visible_window(widths: list[int], active: int, budget: int) -> tuple[int, int]:
    """Largest run of items around ``active`` that fits ``budget`` cells."""
    start = end = active
    used = widths[active]
    grew = True
    while grew:
        grew = False
        if end + 1 < len(widths) and used + widths[end + 1] <= budget:
            end += 1
            used += widths[end]
            grew = True
        if start > 0 and used + widths[start - 1] <= budget:
            start -= 1
            used += widths[start]
            grew = True
    return start, end


def render_tab_header(state: TabsSessionState, width: int | None = None) -> Text:
    """Tab strip. When ``width`` is too narrow, only tabs around the active one are shown."""
    items = _tab_items(state)
    start, end = 0, len(items) - 1
    if width is not None:
        widths = [cell_len(item.plain) for item in items]
        budget = width - cell_len("← ") - cell_len(" →")
        if sum(widths) > budget:
            start, end = _visible_window(widths, state.active_tab, budget)

    header = Text("← ")
    for item in items[start:end + 1]:
        header.append(item)
    header.append(" →")
    return header


def _render_submit_tab(out: _Lines, state: TabsSessionState) -> None:
    out.add((" Review answers", f"bold {_style('accent')}"))
    out.blank()

    for index, question in enumerate(state.questions):
        value = format_review_value(state.selection(index), question.multi)
        if state.is_valid(index):
            icon = ("●", _style("success"))
        else:
            icon = ("○", _style("warning"))
        out.add(" ", icon, " ", (f"{question.tab_label}:", _style("muted")), " ", (value, _style("text")))

    out.blank()
    if state.all_valid:
        out.add((" Press Enter to submit", _style("success")))
    else:
        missing = ", ".join(state.missing_labels())
        out.add((f" Complete required answers: {missing}", _style("warning")))
    out.add((HINT_SUBMIT, _style("dim")))


def _render_question_tab(out: _Lines, state: TabsSessionState, index: int, wrap_padding: int) -> None:
    question = state.questions[index]
    out.add((f" {question.question}", _style("text")))
    out.blank()

    _render_options(
        out,
        question,
        state.cursors[index],
        state.selected[index],
        state.notes[index],
        state.is_editing,
        wrap_padding,
    )

    out.blank()
    if state.is_editing:
        hint = HINT_EDITING_TABS
    elif question.multi:
        hint = HINT_TABS_MULTI
    else:
        hint = HINT_TABS_SINGLE
    out.add((hint, _style("dim")))


def render_tabs(
    state: TabsSessionState,
    width: int,
    wrap_padding: int = INLINE_NOTE_WRAP_PADDING,
) -> list[Text]:
    out = _Lines(width)
    out.rule()
    out.add(" ", render_tab_header(state, out.width - 1))
    out.blank()

    if state.on_submit_tab:
        _render_submit_tab(out, state)
    else:
        _render_question_tab(out, state, state.active_tab, wrap_padding)

    out.rule()
    return out.lines
