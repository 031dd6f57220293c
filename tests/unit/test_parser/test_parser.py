"""Tests for the terminal command language parser."""

from __future__ import annotations

import pytest

from termview.domain.models import NewTerminal, RemoveTerminal, RunCode
from termview.parser import (
    DEFAULT_HEIGHT,
    HeightTooLargeError,
    InvalidNumberError,
    MissingArgumentError,
    MissingClosingBacktickError,
    NoActionError,
    ParseError,
    UnrecognizedCommandError,
    parse,
)


class TestNew:
    def test_defaults(self) -> None:
        assert parse("new") == NewTerminal(height=DEFAULT_HEIGHT, private=False)

    def test_height(self) -> None:
        assert parse("new height=5") == NewTerminal(height=5)

    def test_private_flag(self) -> None:
        command = parse("new private height=3")
        assert command == NewTerminal(height=3, private=True)

    def test_custom_default_height(self) -> None:
        assert parse("new", default_height=7).height == 7

    def test_height_at_limit(self) -> None:
        assert parse("new height=100", max_height=100).height == 100

    def test_height_over_limit(self) -> None:
        with pytest.raises(HeightTooLargeError) as exc_info:
            parse("new height=101", max_height=100)
        assert exc_info.value.limit == 100

    @pytest.mark.parametrize("value", ["abc", "0", "-4", "2.5"])
    def test_invalid_height(self, value: str) -> None:
        with pytest.raises(InvalidNumberError):
            parse(f"new height={value}")

    @pytest.mark.parametrize("text", ["new height", "new height="])
    def test_height_without_value(self, text: str) -> None:
        with pytest.raises(MissingArgumentError):
            parse(text)

    def test_unknown_word(self) -> None:
        with pytest.raises(UnrecognizedCommandError, match="wide is not a valid command"):
            parse("new wide")


class TestRun:
    def test_run_keyword(self) -> None:
        assert parse("run ls -la") == RunCode(code="ls -la")

    def test_run_keeps_inner_spacing(self) -> None:
        assert parse("run echo 'a  b'") == RunCode(code="echo 'a  b'")

    def test_run_without_code(self) -> None:
        with pytest.raises(MissingArgumentError):
            parse("run")

    def test_inline_code(self) -> None:
        assert parse("`ls`") == RunCode(code="ls")

    def test_fenced_code(self) -> None:
        assert parse("```\nfor i in 1 2; do echo $i; done\n```") == RunCode(
            code="for i in 1 2; do echo $i; done"
        )

    @pytest.mark.parametrize("text", ["`ls", "```ls`"])
    def test_unterminated_code(self, text: str) -> None:
        with pytest.raises(MissingClosingBacktickError, match="missing end to code block"):
            parse(text)

    def test_empty_code(self) -> None:
        with pytest.raises(MissingArgumentError):
            parse("``")


class TestOther:
    def test_remove(self) -> None:
        assert parse("remove") == RemoveTerminal()

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty(self, text: str) -> None:
        with pytest.raises(NoActionError, match="no command was supplied"):
            parse(text)

    def test_unknown_action(self) -> None:
        with pytest.raises(UnrecognizedCommandError) as exc_info:
            parse("explode now")
        assert exc_info.value.word == "explode"

    def test_errors_share_a_base(self) -> None:
        for text in ("", "explode", "new height=x", "`ls"):
            with pytest.raises(ParseError):
                parse(text)
