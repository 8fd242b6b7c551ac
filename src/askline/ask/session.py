"""Session state machines for the ask UI.

State is held in frozen dataclasses and advanced by pure transition
functions (``step_single``, ``step_tabs``). Rendering and terminal I/O live
elsewhere; nothing here touches the screen.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from askline.ask.logic import (
    PreparedQuestion,
    Selection,
    build_multi_selection,
    build_single_selection,
    clamp_index,
)


class Phase(Enum):
    BROWSING = "browsing"
    EDITING_NOTE = "editing_note"
    DONE = "done"
    CANCELLED = "cancelled"


class Action(Enum):
    """Key-level intents, decoupled from concrete key bindings."""
    UP = "up"
    DOWN = "down"
    PREV_TAB = "prev_tab"
    NEXT_TAB = "next_tab"
    CONFIRM = "confirm"
    EDIT_NOTE = "edit_note"
    STOP_EDITING = "stop_editing"
    CANCEL = "cancel"


class AnswerStatus(Enum):
    UNANSWERED = "unanswered"
    PENDING_NOTE = "pending_note"  # "Other" picked but its note is still blank
    ANSWERED = "answered"


@dataclass(frozen=True)
class NoteChanged:
    text: str


@dataclass(frozen=True)
class NoteSubmitted:
    text: str


Event = Action | NoteChanged | NoteSubmitted

TERMINAL_PHASES = (Phase.DONE, Phase.CANCELLED)


def _set_at(items: tuple, index: int, value) -> tuple:
    return items[:index] + (value,) + items[index + 1:]


def answer_status(
    question: PreparedQuestion,
    selected: tuple[int, ...],
    notes: tuple[str, ...],
) -> AnswerStatus:
    """Classify one question's answer. A question is submittable only when ANSWERED."""
    if not selected:
        return AnswerStatus.UNANSWERED
    other = question.other_index
    if other in selected and not notes[other].strip():
        return AnswerStatus.PENDING_NOTE
    return AnswerStatus.ANSWERED


def selection_for(
    question: PreparedQuestion,
    selected: tuple[int, ...],
    notes: tuple[str, ...],
) -> Selection:
    if not selected:
        return Selection()
    if question.multi:
        return build_multi_selection(question.labels, selected, notes, question.other_index)
    index = clamp_index(selected[0], len(question.choices))
    return build_single_selection(question.labels[index], notes[index])


# ── Single question ─────────────────────────────────────────


@dataclass(frozen=True)
class SingleSessionState:
    question: PreparedQuestion
    cursor: int
    notes: tuple[str, ...]
    phase: Phase = Phase.BROWSING
    selection: Selection | None = None

    @classmethod
    def start(cls, question: PreparedQuestion) -> SingleSessionState:
        size = len(question.choices)
        return cls(
            question=question,
            cursor=clamp_index(question.initial_cursor, size),
            notes=("",) * size,
        )

    @property
    def is_editing(self) -> bool:
        return self.phase is Phase.EDITING_NOTE

    @property
    def is_finished(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def current_note(self) -> str:
        return self.notes[self.cursor]

    @property
    def cursor_is_other(self) -> bool:
        return self.cursor == self.question.other_index

    def result(self) -> Selection:
        if self.phase is Phase.DONE and self.selection is not None:
            return self.selection
        return Selection()


def _complete_single(state: SingleSessionState, note: str) -> SingleSessionState:
    label = state.question.labels[state.cursor]
    return replace(
        state,
        phase=Phase.DONE,
        selection=build_single_selection(label, note),
    )


def step_single(state: SingleSessionState, event: Event) -> SingleSessionState:
    """Advance a single-question session by one event."""
    if state.is_finished:
        return state

    if event is Action.CANCEL:
        return replace(state, phase=Phase.CANCELLED, notes=("",) * len(state.notes), selection=None)

    if state.is_editing:
        if isinstance(event, NoteChanged):
            return replace(state, notes=_set_at(state.notes, state.cursor, event.text))
        if isinstance(event, NoteSubmitted):
            state = replace(state, notes=_set_at(state.notes, state.cursor, event.text))
            if state.cursor_is_other and not event.text.strip():
                return state
            return _complete_single(state, event.text)
        if event is Action.STOP_EDITING:
            return replace(state, phase=Phase.BROWSING)
        return state

    last = len(state.question.choices) - 1
    if event is Action.UP:
        return replace(state, cursor=max(0, state.cursor - 1))
    if event is Action.DOWN:
        return replace(state, cursor=min(last, state.cursor + 1))
    if event is Action.EDIT_NOTE:
        return replace(state, phase=Phase.EDITING_NOTE)
    if event is Action.CONFIRM:
        if state.cursor_is_other and not state.current_note.strip():
            return replace(state, phase=Phase.EDITING_NOTE)
        return _complete_single(state, state.current_note)
    return state


# ── Tabbed questions ────────────────────────────────────────


@dataclass(frozen=True)
class TabsSessionState:
    questions: tuple[PreparedQuestion, ...]
    active_tab: int
    cursors: tuple[int, ...]
    selected: tuple[tuple[int, ...], ...]
    notes: tuple[tuple[str, ...], ...]
    phase: Phase = Phase.BROWSING

    @classmethod
    def start(cls, questions: list[PreparedQuestion] | tuple[PreparedQuestion, ...]) -> TabsSessionState:
        questions = tuple(questions)
        return cls(
            questions=questions,
            active_tab=0,
            cursors=tuple(clamp_index(q.initial_cursor, len(q.choices)) for q in questions),
            selected=tuple(() for _ in questions),
            notes=tuple(("",) * len(q.choices) for q in questions),
        )

    @property
    def submit_tab(self) -> int:
        return len(self.questions)

    @property
    def on_submit_tab(self) -> bool:
        return self.active_tab == self.submit_tab

    @property
    def active_question(self) -> int | None:
        return None if self.on_submit_tab else self.active_tab

    @property
    def is_editing(self) -> bool:
        return self.phase is Phase.EDITING_NOTE

    @property
    def is_finished(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def current_note(self) -> str:
        q = self.active_question
        if q is None:
            return ""
        return self.notes[q][self.cursors[q]]

    def status(self, index: int) -> AnswerStatus:
        return answer_status(self.questions[index], self.selected[index], self.notes[index])

    def is_valid(self, index: int) -> bool:
        return self.status(index) is AnswerStatus.ANSWERED

    @property
    def all_valid(self) -> bool:
        return all(self.is_valid(i) for i in range(len(self.questions)))

    def missing_labels(self) -> list[str]:
        return [q.tab_label for i, q in enumerate(self.questions) if not self.is_valid(i)]

    def selection(self, index: int) -> Selection:
        """Selection as it currently stands, regardless of phase."""
        return selection_for(self.questions[index], self.selected[index], self.notes[index])

    def results(self) -> list[Selection]:
        """Final selections. A cancelled session yields empty selections."""
        if self.phase is Phase.CANCELLED:
            return [Selection() for _ in self.questions]
        return [self.selection(i) for i in range(len(self.questions))]


def _with_note(state: TabsSessionState, q: int, option: int, text: str) -> TabsSessionState:
    return replace(state, notes=_set_at(state.notes, q, _set_at(state.notes[q], option, text)))


def _with_selected(state: TabsSessionState, q: int, indexes: tuple[int, ...]) -> TabsSessionState:
    return replace(state, selected=_set_at(state.selected, q, indexes))


def _advance_tab(state: TabsSessionState) -> TabsSessionState:
    return replace(state, active_tab=min(state.submit_tab, state.active_tab + 1))


def _other_needs_note(state: TabsSessionState, q: int, option: int) -> bool:
    return option == state.questions[q].other_index and not state.notes[q][option].strip()


def step_tabs(state: TabsSessionState, event: Event) -> TabsSessionState:
    """Advance a tabbed session by one event."""
    if state.is_finished:
        return state

    if event is Action.CANCEL:
        return replace(state, phase=Phase.CANCELLED)

    if state.is_editing:
        return _step_tabs_editing(state, event)

    tab_count = len(state.questions) + 1
    if event is Action.PREV_TAB:
        return replace(state, active_tab=(state.active_tab - 1) % tab_count)
    if event is Action.NEXT_TAB:
        return replace(state, active_tab=(state.active_tab + 1) % tab_count)

    if state.on_submit_tab:
        if event is Action.CONFIRM and state.all_valid:
            return replace(state, phase=Phase.DONE)
        return state

    q = state.active_tab
    question = state.questions[q]
    cursor = state.cursors[q]

    if event is Action.UP:
        return replace(state, cursors=_set_at(state.cursors, q, max(0, cursor - 1)))
    if event is Action.DOWN:
        last = len(question.choices) - 1
        return replace(state, cursors=_set_at(state.cursors, q, min(last, cursor + 1)))
    if event is Action.EDIT_NOTE:
        return replace(state, phase=Phase.EDITING_NOTE)
    if event is not Action.CONFIRM:
        return state

    if question.multi:
        current = state.selected[q]
        if cursor in current:
            state = _with_selected(state, q, tuple(i for i in current if i != cursor))
        else:
            state = _with_selected(state, q, tuple(sorted((*current, cursor))))
        if cursor in state.selected[q] and _other_needs_note(state, q, cursor):
            return replace(state, phase=Phase.EDITING_NOTE)
        return state

    state = _with_selected(state, q, (cursor,))
    if _other_needs_note(state, q, cursor):
        return replace(state, phase=Phase.EDITING_NOTE)
    return _advance_tab(state)


def _step_tabs_editing(state: TabsSessionState, event: Event) -> TabsSessionState:
    q = state.active_question
    if q is None:
        return replace(state, phase=Phase.BROWSING)
    cursor = state.cursors[q]

    if event is Action.STOP_EDITING:
        return replace(state, phase=Phase.BROWSING)
    if isinstance(event, NoteChanged):
        return _with_note(state, q, cursor, event.text)
    if not isinstance(event, NoteSubmitted):
        return state

    state = _with_note(state, q, cursor, event.text)
    has_text = bool(event.text.strip())

    if state.questions[q].multi:
        if has_text and cursor not in state.selected[q]:
            state = _with_selected(state, q, tuple(sorted((*state.selected[q], cursor))))
        if _other_needs_note(state, q, cursor):
            return state
        return replace(state, phase=Phase.BROWSING)

    state = _with_selected(state, q, (cursor,))
    if _other_needs_note(state, q, cursor):
        return state
    return _advance_tab(replace(state, phase=Phase.BROWSING))
