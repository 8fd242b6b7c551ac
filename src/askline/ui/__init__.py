"""UI package - session driver and terminal surface."""

from askline.ui.io import AskSurface, NoteEditor, SessionDriver

__all__ = ["AskSurface", "NoteEditor", "SessionDriver"]
