"""Selection normalization for ask questions.

Turns raw option labels, the recommended index and free-text notes into a
canonical ``Selection``. Pure functions, no UI dependency.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re

OTHER_OPTION = "Other (type your own)"
RECOMMENDED_OPTION_TAG = " (Recommended)"
NOTE_JOIN = " - "


@dataclass
class Option:
    """A single caller-supplied choice."""
    label: str


@dataclass
class Question:
    """A question as received from the host."""
    id: str
    question: str
    options: list[Option] = field(default_factory=list)
    multi: bool = False
    recommended: int | None = None


@dataclass
class Selection:
    """Canonical answer to one question."""
    selected_options: list[str] = field(default_factory=list)
    custom_input: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.selected_options and not self.custom_input


@dataclass(frozen=True)
class Choice:
    """An option inside a running session.

    The recommended and "Other" markers are explicit flags; the decorated
    string is only produced by ``display_label``.
    """

    label: str
    is_other: bool = False
    is_recommended: bool = False

    @property
    def display_label(self) -> str:
        if self.is_other:
            return OTHER_OPTION
        if self.is_recommended and not self.label.endswith(RECOMMENDED_OPTION_TAG):
            return f"{self.label}{RECOMMENDED_OPTION_TAG}"
        return self.label


@dataclass(frozen=True)
class PreparedQuestion:
    """Session view of a question: choices always end with the OTHER choice."""

    id: str
    question: str
    choices: tuple[Choice, ...]
    tab_label: str
    multi: bool = False
    initial_cursor: int = 0

    @property
    def labels(self) -> list[str]:
        return [c.display_label for c in self.choices]

    @property
    def other_index(self) -> int:
        return len(self.choices) - 1


def append_recommended_tag(labels: list[str], recommended: int | None) -> list[str]:
    """Append the recommended tag to ``labels[recommended]``.

    Returns the labels unchanged when the index is missing or out of range.
    Idempotent.
    """
    if recommended is None or recommended < 0 or recommended >= len(labels):
        return labels
    return [
        label if i != recommended or label.endswith(RECOMMENDED_OPTION_TAG)
        else f"{label}{RECOMMENDED_OPTION_TAG}"
        for i, label in enumerate(labels)
    ]


def strip_recommended_tag(label: str) -> str:
    if not label.endswith(RECOMMENDED_OPTION_TAG):
        return label
    return label[: -len(RECOMMENDED_OPTION_TAG)]


def _join_note(label: str, note: str) -> str:
    return f"{label}{NOTE_JOIN}{note}" if note else label


def build_single_selection(selected_label: str, note: str | None = None) -> Selection:
    """Build the selection for a single-choice answer."""
    label = strip_recommended_tag(selected_label)
    trimmed = (note or "").strip()

    if label == OTHER_OPTION:
        return Selection(custom_input=trimmed or None)
    return Selection(selected_options=[_join_note(label, trimmed)])


def build_multi_selection(
    labels: list[str],
    selected_indexes: list[int] | tuple[int, ...],
    notes: list[str] | tuple[str, ...] | dict[int, str],
    other_index: int,
) -> Selection:
    """Build the selection for a multi-choice answer.

    Output follows option order, not the order options were picked in.
    Indexes outside ``labels`` are ignored.
    """
    chosen = set(selected_indexes)
    selected: list[str] = []
    custom_input: str | None = None

    for i, raw_label in enumerate(labels):
        if i not in chosen:
            continue
        note = _note_at(notes, i).strip()
        if i == other_index:
            if note:
                custom_input = note
            continue
        selected.append(_join_note(strip_recommended_tag(raw_label), note))

    return Selection(selected_options=selected, custom_input=custom_input)


def _note_at(notes: list[str] | tuple[str, ...] | dict[int, str], index: int) -> str:
    if isinstance(notes, dict):
        return notes.get(index) or ""
    if 0 <= index < len(notes):
        return notes[index] or ""
    return ""


def normalize_tab_label(question_id: str, fallback: str) -> str:
    normalized = re.sub(r"[_-]+", " ", question_id.strip())
    return normalized if normalized else fallback


def clamp_index(index: int | None, size: int) -> int:
    if index is None or size <= 0 or index < 0:
        return 0
    return min(index, size - 1)


def prepare_question(question: Question, position: int = 0) -> PreparedQuestion:
    """Build the session view of ``question`` (``position`` is 0-based)."""
    recommended = question.recommended
    if recommended is not None and not 0 <= recommended < len(question.options):
        recommended = None

    choices = tuple(
        Choice(label=opt.label, is_recommended=(i == recommended))
        for i, opt in enumerate(question.options)
    ) + (Choice(label=OTHER_OPTION, is_other=True),)

    return PreparedQuestion(
        id=question.id,
        question=question.question,
        choices=choices,
        tab_label=normalize_tab_label(question.id, f"Q{position + 1}"),
        multi=question.multi,
        initial_cursor=recommended or 0,
    )
