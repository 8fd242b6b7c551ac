"""Tests for the command-line entry point."""

from __future__ import annotations

import json

import pytest

from askline import __main__ as cli


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr("askline.log.setup_logging", lambda *args, **kwargs: None)


class TestLoadQuestions:
    def test_object_with_questions(self, tmp_path):
        path = tmp_path / "q.json"
        path.write_text(json.dumps({"questions": [{"id": "auth"}]}), encoding="utf-8")
        assert cli.load_questions(path) == [{"id": "auth"}]

    def test_bare_list(self, tmp_path):
        path = tmp_path / "q.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert cli.load_questions(path) == [1, 2]

    def test_other_shapes_are_empty(self, tmp_path):
        path = tmp_path / "q.json"
        path.write_text('"text"', encoding="utf-8")
        assert cli.load_questions(path) == []


class TestMain:
    def test_unreadable_file(self, tmp_path, capsys):
        assert cli.main([str(tmp_path / "missing.json"), "-w", str(tmp_path)]) == 2
        assert "cannot read" in capsys.readouterr().out

    def test_non_interactive_reports_error(self, tmp_path, capsys):
        path = tmp_path / "q.json"
        path.write_text(json.dumps({"questions": [{"id": "auth", "question": "?", "options": ["A"]}]}))
        assert cli.main([str(path), "--workspace", str(tmp_path), "--details"]) == 1
        out = capsys.readouterr().out
        assert "Error: ask tool requires interactive mode" in out
        assert "{}" in out
