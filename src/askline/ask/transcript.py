"""Result assembly: transcript text and structured details.

The transcript is sanitized for display. The details payload keeps the
caller's original text untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any

from askline.ask.logic import Question, Selection

UNKNOWN_ID = "(unknown)"
EMPTY_QUESTION = "(empty question)"
EMPTY_OPTION = "(empty option)"
NOT_ANSWERED = "(not answered)"
CANCELLED = "(cancelled)"

_WHITESPACE = re.compile(r"\s+")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def sanitize_session_text(raw: str | None, placeholder: str = "") -> str:
    """Collapse whitespace, drop control characters and trim."""
    text = _WHITESPACE.sub(" ", raw or "")
    text = _CONTROL_CHARS.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return text or placeholder


@dataclass
class QuestionResult:
    """One question paired with its answer."""
    question: Question
    selection: Selection = field(default_factory=Selection)
    cancelled: bool = False

    def to_details(self) -> dict[str, Any]:
        return {
            "id": self.question.id,
            "question": self.question.question,
            "options": [o.label for o in self.question.options],
            "multi": self.question.multi,
            "selectedOptions": list(self.selection.selected_options),
            "customInput": self.selection.custom_input,
        }


def _quoted(text: str) -> str:
    return f'"{text}"'


def format_value(result: QuestionResult) -> str:
    """Summary value for one answer, already sanitized."""
    options = [sanitize_session_text(o, EMPTY_OPTION) for o in result.selection.selected_options]
    custom = sanitize_session_text(result.selection.custom_input)
    multi = result.question.multi

    listed = f"[{', '.join(options)}]" if multi else (options[0] if options else "")
    if options and custom:
        return f"{listed} + Other: {_quoted(custom)}"
    if custom:
        return _quoted(custom)
    if options:
        return listed
    return CANCELLED if result.cancelled else NOT_ANSWERED


def format_summary_line(result: QuestionResult) -> str:
    return f"{sanitize_session_text(result.question.id, UNKNOWN_ID)}: {format_value(result)}"


def format_context_block(result: QuestionResult, position: int) -> str:
    """Full context for one question. ``position`` is 1-based."""
    q = result.question
    lines = [
        f"Question {position} ({sanitize_session_text(q.id, UNKNOWN_ID)})",
        f"Prompt: {sanitize_session_text(q.question, EMPTY_QUESTION)}",
        "Options:",
    ]
    for i, option in enumerate(q.options, start=1):
        lines.append(f"  {i}. {sanitize_session_text(option.label, EMPTY_OPTION)}")

    lines.append("Response:")
    options = [sanitize_session_text(o, EMPTY_OPTION) for o in result.selection.selected_options]
    custom = sanitize_session_text(result.selection.custom_input)
    if options:
        lines.append(f"  Selected: {', '.join(options)}")
    elif not custom:
        lines.append(f"  Selected: {CANCELLED if result.cancelled else NOT_ANSWERED}")
    if custom:
        lines.append(f"  Custom input: {custom}")
    return "\n".join(lines)


def build_transcript(results: list[QuestionResult]) -> str:
    """Summary lines in call order, followed by one context block per question."""
    summary = "\n".join(format_summary_line(r) for r in results)
    blocks = "\n\n".join(format_context_block(r, i) for i, r in enumerate(results, start=1))
    return f"User answers:\n{summary}\n\nAnswer context:\n{blocks}"


def build_details(results: list[QuestionResult], cancelled: bool = False) -> dict[str, Any]:
    """Machine-readable payload mirroring the transcript with unsanitized text.

    A single question is flattened into the top level; several questions
    are listed under ``results``.
    """
    if len(results) == 1:
        details = results[0].to_details()
    else:
        details = {"results": [r.to_details() for r in results]}
    details["cancelled"] = cancelled
    return details
