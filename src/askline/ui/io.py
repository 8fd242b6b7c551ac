"""Interfaces between ask sessions and the terminal.

``SessionDriver`` owns one running session: it pushes events through the
transition function, keeps the note editor in sync, caches the rendered
lines and resolves exactly once when the session ends. Surfaces only feed
it events and draw what it renders.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

from rich.text import Text

from askline.ask.session import Event, NoteChanged, NoteSubmitted, Phase

logger = logging.getLogger("askline.session")

S = TypeVar("S")


@runtime_checkable
class NoteEditor(Protocol):
    """Single-line text editor used for inline notes."""

    on_change: Callable[[str], None] | None
    on_submit: Callable[[str], None] | None

    def set_text(self, text: str) -> None:
        ...

    def handle_input(self, data: str) -> None:
        """Feed raw input (printable text, backspace, enter)."""
        ...

    def render(self, width: int) -> list[str]:
        ...


@runtime_checkable
class AskSurface(Protocol):
    """Interactive surface able to run a session until it finishes."""

    async def run(self, driver: SessionDriver[Any]) -> None:
        ...


class SessionDriver(Generic[S]):
    """Runs one ask session against a pure state machine."""

    def __init__(
        self,
        state: S,
        step: Callable[[S, Event], S],
        render: Callable[[S, int], list[Text]],
        editor: NoteEditor | None = None,
        kind: str = "session",
    ):
        self._state = state
        self._step = step
        self._render = render
        self._editor = editor
        self.kind = kind
        self._cache: tuple[int, list[Text]] | None = None
        self._listeners: list[Callable[[], None]] = []
        self._future: asyncio.Future[S] | None = None
        self._started = time.monotonic()

        if editor is not None:
            editor.on_change = self._on_editor_change
            editor.on_submit = self._on_editor_submit

        logger.debug("session_start", extra={"data": {"kind": kind}})

    @property
    def state(self) -> S:
        return self._state

    @property
    def editor(self) -> NoteEditor | None:
        return self._editor

    @property
    def is_editing(self) -> bool:
        return bool(getattr(self._state, "is_editing", False))

    @property
    def is_finished(self) -> bool:
        return bool(getattr(self._state, "is_finished", False))

    def on_invalidate(self, callback: Callable[[], None]) -> None:
        """Register a request-render callback."""
        self._listeners.append(callback)

    def invalidate(self) -> None:
        self._cache = None
        for callback in self._listeners:
            callback()

    def dispatch(self, event: Event) -> None:
        """Apply one event. Events after the session ended are ignored."""
        if self.is_finished:
            return
        was_editing = self.is_editing
        self._state = self._step(self._state, event)

        if self._editor is not None and self.is_editing and not was_editing:
            self._editor.set_text(getattr(self._state, "current_note", ""))

        self.invalidate()
        if self.is_finished:
            self._finish()

    def handle_input(self, data: str) -> None:
        """Route raw text to the note editor while it is open."""
        if self._editor is not None and self.is_editing:
            self._editor.handle_input(data)
            self.invalidate()

    def render(self, width: int) -> list[Text]:
        if self._cache is not None and self._cache[0] == width:
            return self._cache[1]
        lines = self._render(self._state, width)
        self._cache = (width, lines)
        return lines

    async def wait(self) -> S:
        """Wait for the terminal state."""
        if self.is_finished:
            return self._state
        return await self._completion()

    def _completion(self) -> asyncio.Future[S]:
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    def _finish(self) -> None:
        cancelled = getattr(self._state, "phase", None) is Phase.CANCELLED
        logger.info(
            "session_end",
            extra={"data": {
                "kind": self.kind,
                "cancelled": cancelled,
                "elapsed_s": round(time.monotonic() - self._started, 3),
            }},
        )
        if self._future is not None and not self._future.done():
            self._future.set_result(self._state)

    def _on_editor_change(self, text: str) -> None:
        if self.is_editing:
            self.dispatch(NoteChanged(text))

    def _on_editor_submit(self, text: str) -> None:
        if self.is_editing:
            self.dispatch(NoteSubmitted(text))

