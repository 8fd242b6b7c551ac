"""Ask tool: puts structured questions to the user in the terminal.

Blocks the agent loop until the user answers or cancels. The answers come
back as a sanitized transcript for the model plus structured details for
the host.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable

from askline.ask.inline_note import INLINE_NOTE_WRAP_PADDING
from askline.ask.logic import OTHER_OPTION, Option, Question, Selection, prepare_question
from askline.ask.render import render_single, render_tabs
from askline.ask.session import (
    Action,
    Phase,
    SingleSessionState,
    TabsSessionState,
    step_single,
    step_tabs,
)
from askline.ask.transcript import QuestionResult, build_details, build_transcript
from askline.tools.base import BaseTool, ToolParam, ToolResult, validate_tool_args
from askline.ui.io import AskSurface, NoteEditor, SessionDriver

logger = logging.getLogger("askline.tool")

ASK_TOOL_DESCRIPTION = """\
Ask the user for clarification when a choice materially affects the outcome.

- Use when multiple valid approaches have different trade-offs.
- Prefer 2-5 concise options.
- Use multi=true when multiple answers are valid.
- Use recommended=<index> (0-indexed) to mark the default option.
- You can ask multiple related questions in one call using questions[].
- Do NOT include an 'Other' option; UI adds it automatically."""

NO_UI_ERROR = "ask tool requires interactive mode"
EMPTY_QUESTIONS_ERROR = "questions must not be empty"

QUESTION_ITEM_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {
            "type": "string",
            "description": "Question id (e.g. auth, cache, priority)",
        },
        "question": {
            "type": "string",
            "description": "Question text",
        },
        "options": {
            "type": "array",
            "description": "Available options. Do not include 'Other'.",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "label": {"type": "string", "description": "Display label"},
                },
                "required": ["label"],
            },
        },
        "multi": {
            "type": "boolean",
            "description": "Allow multi-select",
        },
        "recommended": {
            "type": "number",
            "description": "0-indexed recommended option. '(Recommended)' is shown automatically.",
        },
    },
    "required": ["id", "question", "options"],
}


def _diagnostic(message: str) -> ToolResult:
    """Usage problems are reported to the model as ordinary content."""
    return ToolResult(output=f"Error: {message}")


def _default_editor() -> NoteEditor:
    from askline.ui.terminal import BufferNoteEditor
    return BufferNoteEditor()


class AskTool(BaseTool):
    name = "ask"
    label = "Ask"
    description = ASK_TOOL_DESCRIPTION
    parameters = [
        ToolParam(
            name="questions",
            type="array",
            description=(
                "Questions to ask. Each has 'id', 'question', 'options' "
                "(array of {label}), optional 'multi' and 'recommended'."
            ),
        ),
    ]

    def __init__(
        self,
        surface: AskSurface | None = None,
        wrap_padding: int = INLINE_NOTE_WRAP_PADDING,
        editor_factory: Callable[[], NoteEditor] = _default_editor,
    ):
        self._surface = surface
        self._wrap_padding = wrap_padding
        self._editor_factory = editor_factory

    async def execute(self, **kwargs: Any) -> ToolResult:
        if self._surface is None:
            return _diagnostic(NO_UI_ERROR)

        invalid = validate_tool_args(self.parameters, kwargs)
        if invalid:
            return ToolResult(error=invalid, is_error=True)

        questions = parse_questions(kwargs.get("questions") or [])
        if not questions:
            return _diagnostic(EMPTY_QUESTIONS_ERROR)

        started = time.monotonic()
        if len(questions) == 1 and not questions[0].multi:
            mode = "single"
            selection, cancelled = await self._ask_single(questions[0])
            selections = [selection]
        else:
            mode = "tabs"
            selections, cancelled = await self._ask_tabs(questions)

        results = [
            QuestionResult(question=q, selection=s, cancelled=cancelled)
            for q, s in zip(questions, selections)
        ]
        logger.info(
            "ask_call",
            extra={"data": {
                "questions": len(questions),
                "mode": mode,
                "cancelled": cancelled,
                "answered": sum(not s.is_empty for s in selections),
                "elapsed_s": round(time.monotonic() - started, 3),
            }},
        )
        return ToolResult(
            output=build_transcript(results),
            details=build_details(results, cancelled=cancelled),
        )

    async def _ask_single(self, question: Question) -> tuple[Selection, bool]:
        driver = SessionDriver(
            SingleSessionState.start(prepare_question(question)),
            step_single,
            lambda state, width: render_single(state, width, self._wrap_padding),
            editor=self._editor_factory(),
            kind="single",
        )
        state = await self._run(driver)
        return state.result(), state.phase is Phase.CANCELLED

    async def _ask_tabs(self, questions: list[Question]) -> tuple[list[Selection], bool]:
        prepared = [prepare_question(q, i) for i, q in enumerate(questions)]
        driver = SessionDriver(
            TabsSessionState.start(prepared),
            step_tabs,
            lambda state, width: render_tabs(state, width, self._wrap_padding),
            editor=self._editor_factory(),
            kind="tabs",
        )
        state = await self._run(driver)
        return state.results(), state.phase is Phase.CANCELLED

    async def _run(self, driver: SessionDriver[Any]) -> Any:
        await self._surface.run(driver)
        if not driver.is_finished:
            # Surface closed without a terminal transition (e.g. EOF on input).
            driver.dispatch(Action.CANCEL)
        return await driver.wait()

    def to_openai_schema(self) -> dict[str, Any]:
        """Base schema with the nested question structure filled in."""
        schema = super().to_openai_schema()
        questions = schema["function"]["parameters"]["properties"]["questions"]
        questions["minItems"] = 1
        questions["items"] = QUESTION_ITEM_SCHEMA
        return schema


def parse_questions(raw: list[dict | Any]) -> list[Question]:
    """Parse model-generated question dicts into Question objects.

    Malformed entries and entries without usable options are skipped.
    """
    questions: list[Question] = []
    for item in raw:
        if isinstance(item, str):
            try:
                item = json.loads(item)
            except (json.JSONDecodeError, TypeError):
                continue
        if not isinstance(item, dict):
            continue

        options = []
        for opt in item.get("options") or []:
            if isinstance(opt, str):
                label = opt
            elif isinstance(opt, dict):
                label = str(opt.get("label", ""))
            else:
                continue
            if label == OTHER_OPTION:
                logger.warning("reserved_option_dropped", extra={"data": {"id": item.get("id")}})
                continue
            options.append(Option(label=label))
        if not options:
            continue

        questions.append(Question(
            id=str(item.get("id") or ""),
            question=str(item.get("question") or ""),
            options=options,
            multi=_as_bool(item.get("multi", False)),
            recommended=_as_index(item.get("recommended")),
        ))

    return questions


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    return bool(value)


def _as_index(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return None
