"""Terminal surface for ask sessions, built on prompt_toolkit.

Session lines are rendered with Rich and handed to prompt_toolkit as ANSI.
Notes are typed into a prompt_toolkit ``Buffer``.
"""

from __future__ import annotations

import io
from typing import Any, Callable

from prompt_toolkit.application import Application
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.document import Document
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.input import Input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.output import Output
from rich.console import Console as RichConsole
from rich.text import Text

from askline.ask.inline_note import wrap_text
from askline.ask.session import Action
from askline.ui.io import SessionDriver

BACKSPACE = ("\x7f", "\x08")
SUBMIT = ("\r", "\n")


class BufferNoteEditor:
    """Line editor for inline notes, backed by a prompt_toolkit Buffer."""

    def __init__(self):
        self.on_change: Callable[[str], None] | None = None
        self.on_submit: Callable[[str], None] | None = None
        self._loading = False
        self._buffer = Buffer(multiline=False, on_text_changed=self._changed)

    @property
    def text(self) -> str:
        return self._buffer.text

    def set_text(self, text: str) -> None:
        """Replace the content without firing ``on_change``."""
        self._loading = True
        try:
            self._buffer.set_document(Document(text, cursor_position=len(text)), bypass_readonly=True)
        finally:
            self._loading = False

    def handle_input(self, data: str) -> None:
        if data in SUBMIT:
            if self.on_submit:
                self.on_submit(self._buffer.text)
            return
        if data in BACKSPACE:
            self._buffer.delete_before_cursor(count=1)
            return
        printable = "".join(ch for ch in data if ch.isprintable())
        if printable:
            self._buffer.insert_text(printable)

    def render(self, width: int) -> list[str]:
        return wrap_text(self._buffer.text, width)

    def _changed(self, _buffer: Buffer) -> None:
        if not self._loading and self.on_change:
            self.on_change(self._buffer.text)


def lines_to_ansi(lines: list[Text], width: int) -> str:
    """Render Rich lines into an ANSI string."""
    console = RichConsole(
        file=io.StringIO(),
        width=max(1, width),
        force_terminal=True,
        color_system="standard",
    )
    with console.capture() as capture:
        for line in lines:
            console.print(line, no_wrap=True, overflow="crop", crop=True)
    return capture.get().rstrip("\n")


class TerminalSurface:
    """Runs sessions inline in the terminal until they finish."""

    def __init__(self, input: Input | None = None, output: Output | None = None):
        self._input = input
        self._output = output

    async def run(self, driver: SessionDriver[Any]) -> None:
        app: Application[None] = Application(
            layout=Layout(HSplit([Window(
                FormattedTextControl(lambda: self._formatted(app, driver), focusable=True, show_cursor=False),
                wrap_lines=False,
            )])),
            key_bindings=self._key_bindings(driver),
            full_screen=False,
            erase_when_done=True,
            input=self._input,
            output=self._output,
        )
        driver.on_invalidate(app.invalidate)
        if driver.is_finished:
            return
        await app.run_async()

    @staticmethod
    def _formatted(app: Application[None], driver: SessionDriver[Any]) -> ANSI:
        width = app.output.get_size().columns
        return ANSI(lines_to_ansi(driver.render(width), width))

    @staticmethod
    def _key_bindings(driver: SessionDriver[Any]) -> KeyBindings:
        kb = KeyBindings()
        editing = Condition(lambda: driver.is_editing)

        def send(event: Any, action: Action) -> None:
            driver.dispatch(action)
            _exit_when_finished(event.app, driver)

        def feed(event: Any, data: str) -> None:
            driver.handle_input(data)
            _exit_when_finished(event.app, driver)

        @kb.add("up", filter=~editing)
        def _up(event):
            send(event, Action.UP)

        @kb.add("down", filter=~editing)
        def _down(event):
            send(event, Action.DOWN)

        @kb.add("left", filter=~editing)
        def _left(event):
            send(event, Action.PREV_TAB)

        @kb.add("right", filter=~editing)
        def _right(event):
            send(event, Action.NEXT_TAB)

        @kb.add("enter", filter=~editing)
        def _confirm(event):
            send(event, Action.CONFIRM)

        @kb.add("tab", filter=~editing)
        def _note(event):
            send(event, Action.EDIT_NOTE)

        @kb.add("escape", filter=~editing)
        def _cancel(event):
            send(event, Action.CANCEL)

        @kb.add("c-c")
        def _interrupt(event):
            send(event, Action.CANCEL)

        @kb.add("tab", filter=editing)
        @kb.add("escape", filter=editing)
        def _stop_editing(event):
            send(event, Action.STOP_EDITING)

        @kb.add("enter", filter=editing)
        def _submit_note(event):
            feed(event, "\r")

        @kb.add("backspace", filter=editing)
        def _backspace(event):
            feed(event, "\x7f")

        @kb.add(Keys.Any, filter=editing)
        def _type(event):
            # Named keys (arrows, function keys) are not text.
            key = event.key_sequence[0].key
            if key == Keys.BracketedPaste or not isinstance(key, Keys):
                feed(event, event.data)

        return kb


def _exit_when_finished(app: Application[None], driver: SessionDriver[Any]) -> None:
    if driver.is_finished and not app.is_done:
        app.exit()
