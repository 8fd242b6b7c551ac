"""Tests for session rendering."""

from __future__ import annotations

from functools import reduce

import pytest
from rich.cells import cell_len

from askline.ask.logic import Option, Question, Selection, prepare_question
from askline.ask.render import (
    HINT_EDITING_SINGLE,
    HINT_EDITING_TABS,
    HINT_SUBMIT,
    HINT_TABS_MULTI,
    HINT_TABS_SINGLE,
    format_review_value,
    render_single,
    render_tab_header,
    render_tabs,
)
from askline.ask.session import (
    Action,
    NoteChanged,
    NoteSubmitted,
    SingleSessionState,
    TabsSessionState,
    step_single,
    step_tabs,
)


def _question(qid="auth", labels=("JWT", "Session"), multi=False, recommended=None, text=None):
    return Question(
        id=qid,
        question=text or f"Which {qid}?",
        options=[Option(label) for label in labels],
        multi=multi,
        recommended=recommended,
    )


def _plain(lines) -> list[str]:
    return [line.plain for line in lines]


def _tabs(*questions, events=()):
    state = TabsSessionState.start([prepare_question(q, i) for i, q in enumerate(questions)])
    return reduce(step_tabs, events, state)


def _single(question, events=()):
    state = SingleSessionState.start(prepare_question(question))
    return reduce(step_single, events, state)


class TestReviewValue:
    def test_single_option(self):
        assert format_review_value(Selection(["JWT"]), multi=False) == "JWT"

    def test_multi_options_are_bracketed(self):
        assert format_review_value(Selection(["JWT", "OAuth"]), multi=True) == "[JWT, OAuth]"

    def test_options_plus_custom(self):
        value = format_review_value(Selection(["JWT"], "org-sso"), multi=True)
        assert value == "[JWT] + Other: org-sso"

    def test_custom_only(self):
        assert format_review_value(Selection([], "kerberos"), multi=False) == "Other: kerberos"

    def test_empty(self):
        assert format_review_value(Selection(), multi=True) == "(not answered)"


class TestRenderSingle:
    def test_layout(self):
        lines = _plain(render_single(_single(_question()), 60))
        assert lines[0] == "─" * 60
        assert lines[1] == " Which auth?"
        assert "→ ● JWT" in lines
        assert "  ○ Session" in lines
        assert "  ○ Other (type your own)" in lines
        assert lines[-1] == "─" * 60
        assert "Tab add note" in lines[-2]

    def test_styled_label_renders_without_escape_text(self):
        question = _question(labels=("\x1b[1mJWT\x1b[0m", "Session"))
        lines = render_single(_single(question), 60)
        assert "→ ● JWT" in _plain(lines)
        styled = next(line for line in lines if line.plain == "→ ● JWT")
        assert any("bold" in str(span.style) for span in styled.spans)

    def test_recommended_is_decorated(self):
        lines = _plain(render_single(_single(_question(recommended=1)), 60))
        assert "→ ● Session (Recommended)" in lines

    def test_hint_says_edit_when_note_exists(self):
        state = _single(_question(), [Action.EDIT_NOTE, NoteChanged("x"), Action.STOP_EDITING])
        lines = _plain(render_single(state, 80))
        assert "Tab edit note" in lines[-2]
        assert "→ ● JWT — note: x" in lines

    def test_editing_shows_cursor_and_hint(self):
        state = _single(_question(), [Action.EDIT_NOTE, NoteChanged("stateless")])
        lines = _plain(render_single(state, 80))
        assert "→ ● JWT — note: stateless▍" in lines
        assert lines[-2] == HINT_EDITING_SINGLE

    @pytest.mark.parametrize("width", [12, 20, 33, 80])
    def test_lines_fit_width(self, width):
        question = _question(
            labels=("A very long option label that must wrap somewhere", "Short"),
            text="A question whose prompt is clearly longer than the narrow terminal",
        )
        state = _single(question, [Action.EDIT_NOTE, NoteChanged("and a note that goes on for a while")])
        for line in render_single(state, width):
            assert cell_len(line.plain) <= width

    def test_wrapped_option_is_indented(self):
        question = _question(labels=("one two three four five six seven", "x"))
        lines = _plain(render_single(_single(question), 20))
        first = lines.index(next(l for l in lines if l.startswith("→ ● one")))
        assert lines[first + 1].startswith("    ")
        assert lines[first + 1].strip()


class TestRenderTabs:
    def test_header_marks_answered_tabs(self):
        state = _tabs(_question("auth"), _question("cache_layer"), events=[Action.CONFIRM])
        header = render_tab_header(state).plain
        assert "■ auth" in header
        assert "□ cache layer" in header
        assert "✓ Submit" in header
        assert header.startswith("←")
        assert header.endswith("→")

    def test_narrow_header_follows_active_tab(self):
        ids = ("alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel")
        state = _tabs(*[_question(qid) for qid in ids], events=[Action.NEXT_TAB] * 6)
        header = render_tab_header(state, 30).plain
        assert "□ golf" in header
        assert "alpha" not in header
        assert cell_len(header) <= 30
        assert header.startswith("←") and header.endswith("→")

    def test_narrow_header_shows_submit_tab(self):
        ids = ("alpha", "bravo", "charlie", "delta", "echo", "foxtrot")
        state = _tabs(*[_question(qid) for qid in ids], events=[Action.PREV_TAB])
        lines = _plain(render_tabs(state, 32))
        assert "✓ Submit" in lines[1]
        assert "alpha" not in lines[1]

    def test_wide_header_shows_every_tab(self):
        state = _tabs(_question("alpha"), _question("bravo"))
        header = render_tab_header(state, 200).plain
        assert header == render_tab_header(state).plain
        assert "alpha" in header and "bravo" in header

    def test_question_tab(self):
        state = _tabs(_question("auth"), _question("cache"))
        lines = _plain(render_tabs(state, 80))
        assert " Which auth?" in lines
        assert "→ ○ JWT" in lines
        assert lines[-2] == HINT_TABS_SINGLE

    def test_multi_markers(self):
        state = _tabs(_question("auth", multi=True), events=[Action.DOWN, Action.CONFIRM])
        lines = _plain(render_tabs(state, 80))
        assert "  [ ] JWT" in lines
        assert "→ [x] Session" in lines
        assert lines[-2] == HINT_TABS_MULTI

    def test_editing_hint(self):
        state = _tabs(_question("auth"), events=[Action.EDIT_NOTE])
        lines = _plain(render_tabs(state, 80))
        assert lines[-2] == HINT_EDITING_TABS

    def test_submit_tab_ready(self):
        state = _tabs(
            _question("auth"), _question("cache", labels=("Redis", "None")),
            events=[Action.CONFIRM, Action.DOWN, Action.CONFIRM],
        )
        lines = _plain(render_tabs(state, 80))
        assert " Review answers" in lines
        assert " ● auth: JWT" in lines
        assert " ● cache: None" in lines
        assert " Press Enter to submit" in lines
        assert HINT_SUBMIT in lines

    def test_submit_tab_lists_missing(self):
        state = _tabs(
            _question("auth"), _question("cache"),
            events=[Action.CONFIRM, Action.NEXT_TAB],
        )
        lines = _plain(render_tabs(state, 80))
        assert " ○ cache: (not answered)" in lines
        assert " Complete required answers: cache" in lines

    def test_submit_tab_shows_custom_input(self):
        state = _tabs(
            _question("auth", multi=True),
            events=[Action.CONFIRM, Action.DOWN, Action.DOWN, Action.CONFIRM, NoteSubmitted("org-sso"), Action.NEXT_TAB],
        )
        lines = _plain(render_tabs(state, 80))
        assert " ● auth: [JWT] + Other: org-sso" in lines

    @pytest.mark.parametrize("width", [10, 24, 50])
    def test_lines_fit_width(self, width):
        state = _tabs(
            _question("authentication_strategy"), _question("cache_backend"), _question("deploy_target"),
            events=[Action.EDIT_NOTE, NoteChanged("x" * 70)],
        )
        for line in render_tabs(state, width):
            assert cell_len(line.plain) <= width
