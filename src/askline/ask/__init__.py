"""Ask core - selection logic, session state machines, rendering and transcripts."""

from askline.ask.logic import (
    OTHER_OPTION,
    Option,
    Question,
    Selection,
    build_multi_selection,
    build_single_selection,
)
from askline.ask.transcript import build_details, build_transcript

__all__ = [
    "OTHER_OPTION",
    "Option",
    "Question",
    "Selection",
    "build_details",
    "build_multi_selection",
    "build_single_selection",
    "build_transcript",
]
