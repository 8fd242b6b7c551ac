"""Entry point for the askline CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any


def load_questions(path: Path) -> list[Any]:
    """Read questions from a JSON file: ``{"questions": [...]}`` or a bare list."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("questions", [])
    return data if isinstance(data, list) else []


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="askline",
        description="Ask structured questions in the terminal",
    )
    parser.add_argument("questions", type=Path, help="JSON file with the questions")
    parser.add_argument(
        "--workspace", "-w",
        type=Path,
        help="Project directory holding .askline/config.toml",
    )
    parser.add_argument(
        "--details", "-d",
        action="store_true",
        help="Also print the structured details as JSON",
    )
    args = parser.parse_args(argv)

    from rich.console import Console as RichConsole
    from rich.panel import Panel
    from rich.text import Text

    from askline.config import Config
    from askline.log import setup_logging
    from askline.tools.ask import AskTool

    config = Config.load(workspace=args.workspace)
    setup_logging(config.log_dir, config.logging_level)
    console = RichConsole()

    try:
        questions = load_questions(args.questions)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Error:[/bold red] cannot read {args.questions}: {e}")
        return 2

    surface = None
    if sys.stdin.isatty() and sys.stdout.isatty():
        from askline.ui.terminal import TerminalSurface
        surface = TerminalSurface()

    tool = AskTool(surface=surface, wrap_padding=config.wrap_padding)
    result = asyncio.run(tool.execute(questions=questions))
    # Usage diagnostics come back as plain content with empty details.
    failed = result.is_error or not result.details

    console.print(
        Panel(
            Text(result.to_content()),
            title="[bold blue]Answers[/bold blue]",
            border_style="red" if failed else "blue",
            expand=False,
            padding=(0, 1),
        )
    )
    if args.details:
        console.print_json(json.dumps(result.details, ensure_ascii=False))
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
