"""Base tool class for host-registered tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolParam:
    """A single tool parameter."""

    name: str
    type: str = "string"
    description: str = ""
    required: bool = True
    enum: list[str] | None = None


@dataclass
class ToolResult:
    """Result from a tool execution.

    ``output`` is the text handed back to the model; ``details`` is the
    structured payload for programmatic consumers.
    """

    output: str = ""
    error: str | None = None
    is_error: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def to_content(self) -> str:
        if self.is_error:
            return f"Error: {self.error}"
        return self.output


def validate_tool_args(params: list[ToolParam], args: dict[str, Any]) -> str | None:
    """Validate tool arguments against parameter definitions.

    Returns an error message string if validation fails, or None if valid.
    """
    errors: list[str] = []

    for p in params:
        if p.required and p.name not in args:
            errors.append(f"Missing required parameter: '{p.name}'")

    type_checks = {
        "string": (str, "a string"),
        "integer": ((int,), "an integer"),
        "number": ((int, float), "a number"),
        "boolean": (bool, "a boolean"),
        "array": (list, "an array"),
        "object": (dict, "an object"),
    }

    for p in params:
        if p.name not in args:
            continue
        val = args[p.name]
        if val is None:
            continue

        expected = type_checks.get(p.type)
        if expected:
            types, label = expected
            if not isinstance(val, types):
                # Auto-coerce string→bool for boolean params
                if p.type == "boolean" and isinstance(val, str):
                    args[p.name] = val.lower() in ("true", "1", "yes")
                    continue
                errors.append(
                    f"Parameter '{p.name}' should be {label}, got {type(val).__name__}"
                )

        if p.enum and val not in p.enum:
            errors.append(
                f"Parameter '{p.name}' must be one of {p.enum}, got '{val}'"
            )

    if errors:
        return "Validation errors:\n" + "\n".join(f"  - {e}" for e in errors)
    return None


class BaseTool(ABC):
    """Base class for tools exposed to the host agent."""

    name: str = ""
    label: str = ""
    description: str = ""
    parameters: list[ToolParam] = []

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with given arguments."""

    def to_openai_schema(self) -> dict[str, Any]:
        """Convert to OpenAI function calling schema."""
        properties = {}
        required = []
        for p in self.parameters:
            prop: dict[str, Any] = {"type": p.type, "description": p.description}
            if p.enum:
                prop["enum"] = p.enum
            properties[p.name] = prop
            if p.required:
                required.append(p.name)

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": properties,
                    "required": required,
                },
            },
        }
