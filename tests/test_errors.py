"""
Tests for exceptions and the handler boundary in cli/errors.py.
"""

import pytest
import typer

from metacomposer.cli import errors
from metacomposer.cli.errors import ExitCode, print_error, run_handler
from metacomposer.core.exceptions import (
    ExternalToolError,
    FetchError,
    InvalidArgumentError,
    MetaComposerError,
)


@pytest.fixture
def captured(monkeypatch):
    """Route err_console to an in-memory console without colours."""
    from rich.console import Console

    console = Console(stderr=True, record=True, width=200, color_system=None)
    monkeypatch.setattr(errors, "err_console", console)
    return console


class TestExceptions:
    """Test the exception hierarchy."""

    def test_context_kept(self):
        error = MetaComposerError("boom", uri="x")
        assert str(error) == "boom"
        assert error.context == {"uri": "x"}

    def test_fetch_error_message(self):
        error = FetchError("https://example.com/spec.json", "HTTP error! status: 404", status=404)
        assert str(error) == "Failed to load https://example.com/spec.json: HTTP error! status: 404"
        assert error.context["status"] == 404

    def test_invalid_argument_attributes(self):
        error = InvalidArgumentError("id", "abc", "Invalid ID 'abc'.")
        assert (error.argument, error.value) == ("id", "abc")

    def test_subclasses(self):
        assert issubclass(ExternalToolError, MetaComposerError)
        assert issubclass(FetchError, MetaComposerError)


class TestExitCode:
    """Test the exit code contract."""

    def test_only_success_and_failure(self):
        assert {code.name: int(code) for code in ExitCode} == {
            "SUCCESS": 0,
            "GENERAL_ERROR": 1,
        }


class TestPrintError:
    """Test print_error() formatting."""

    def test_problem_only(self, captured):
        print_error("something broke")
        assert captured.export_text().strip() == "Error: something broke"

    def test_reason_and_solution(self, captured):
        print_error("bad id", reason="out of range", solution="meta-composer openapi list x")
        text = captured.export_text()
        assert "out of range" in text
        assert "Try: meta-composer openapi list x" in text

    def test_markup_escaped(self, captured):
        print_error("value [bold]x[/bold]")
        assert "[bold]x[/bold]" in captured.export_text()


class TestRunHandler:
    """Test run_handler() as the single action boundary."""

    def test_success_echoes_payload(self, capsys, captured):
        run_handler("demo", "get", lambda key: f"value:{key}", "k")

        assert capsys.readouterr().out == "value:k\n"
        assert captured.export_text() == ""

    def test_empty_payload_prints_nothing(self, capsys):
        run_handler("demo", "get", lambda: "")
        assert capsys.readouterr().out == ""

    def test_domain_error_exits_1(self, capsys, captured):
        def handler():
            raise InvalidArgumentError("id", "9", "Endpoint with ID '9' not found.")

        with pytest.raises(typer.Exit) as exc_info:
            run_handler("openapi", "show", handler, solution="list first")

        assert exc_info.value.exit_code == ExitCode.GENERAL_ERROR
        assert capsys.readouterr().out == ""
        text = captured.export_text()
        assert "openapi show: Endpoint with ID '9' not found." in text
        assert "list first" in text

    def test_unexpected_error_exits_1_with_reason(self, capsys, captured):
        def handler():
            raise KeyError("paths")

        with pytest.raises(typer.Exit) as exc_info:
            run_handler("openapi", "list", handler)

        assert exc_info.value.exit_code == 1
        assert capsys.readouterr().out == ""
        text = captured.export_text()
        assert "openapi list:" in text
        assert "Unexpected KeyError" in text

    def test_partial_output_never_printed(self, capsys):
        def handler():
            parts = ["first"]
            parts.append(str(1 / 0))
            return "\n".join(parts)

        with pytest.raises(typer.Exit):
            run_handler("demo", "get", handler)

        assert capsys.readouterr().out == ""
