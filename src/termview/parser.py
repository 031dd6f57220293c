"""Parser for the terminal command language.

Grammar of a command body (the text after ``<id><separator>``)::

    new [height=N] [private]
    remove
    run <code>
    `code`          (or ```code```)
"""

from __future__ import annotations

from termview.domain.models import NewTerminal, RemoveTerminal, RunCode

DEFAULT_HEIGHT = 20
MAX_HEIGHT = 100

ParsedCommand = NewTerminal | RemoveTerminal | RunCode


class ParseError(Exception):
    """Base class for malformed command text. The message is user-facing."""


class NoActionError(ParseError):
    def __init__(self) -> None:
        super().__init__("no command was supplied")


class UnrecognizedCommandError(ParseError):
    def __init__(self, word: str) -> None:
        super().__init__(f"{word} is not a valid command")
        self.word = word


class MissingArgumentError(ParseError):
    def __init__(self, argument: str) -> None:
        super().__init__(f"missing required argument '{argument}'")
        self.argument = argument


class InvalidNumberError(ParseError):
    def __init__(self, value: str) -> None:
        super().__init__(f"{value!r} is not a valid number")
        self.value = value


class HeightTooLargeError(ParseError):
    def __init__(self, height: int, limit: int) -> None:
        super().__init__(f"height {height} is larger than the limit of {limit}")
        self.height = height
        self.limit = limit


class MissingClosingBacktickError(ParseError):
    def __init__(self) -> None:
        super().__init__("missing end to code block")


def parse(
    raw: str,
    default_height: int = DEFAULT_HEIGHT,
    max_height: int = MAX_HEIGHT,
) -> ParsedCommand:
    """Parse a command body.

    Raises:
        ParseError: Describing what is wrong with the text.
    """
    raw = raw.strip()
    if raw.startswith("`"):
        return _parse_code_literal(raw)

    words = raw.split()
    if not words:
        raise NoActionError()

    header, args = words[0], words[1:]
    if header == "new":
        return _parse_new(args, default_height, max_height)
    if header == "remove":
        return RemoveTerminal()
    if header == "run":
        code = raw[len(header):].strip()
        if not code:
            raise MissingArgumentError("code after 'run'")
        return RunCode(code=code)
    raise UnrecognizedCommandError(header)


def _parse_code_literal(raw: str) -> RunCode:
    fence = "```" if raw.startswith("```") else "`"
    end = raw.find(fence, len(fence))
    if end == -1:
        raise MissingClosingBacktickError()
    code = raw[len(fence):end].strip()
    if not code:
        raise MissingArgumentError("code between backticks")
    return RunCode(code=code)


def _parse_new(args: list[str], default_height: int, max_height: int) -> NewTerminal:
    height = default_height
    private = False

    for word in args:
        if word.startswith("height"):
            _, sep, value = word.partition("=")
            if not sep or not value:
                raise MissingArgumentError("int after 'height='")
            try:
                height = int(value)
            except ValueError:
                raise InvalidNumberError(value) from None
            if height <= 0:
                raise InvalidNumberError(value)
            if height > max_height:
                raise HeightTooLargeError(height, max_height)
        elif word == "private":
            private = True
        else:
            raise UnrecognizedCommandError(word)

    return NewTerminal(height=height, private=private)
