"""
Line Tokenizer
==============

Splits one line of input into a command name and its argument tokens.

    "add 2 3"    →  name "add",   arguments ("2", "3")
    "status"     →  name "status", arguments ()
    "say  hi"    →  name "say",   arguments ("", "hi")
    "add 2 "     →  name "add",   arguments ("2",)
    ""           →  name "",      arguments ()

Splitting is a plain split on a single delimiter character (a space by
default). Nothing is trimmed or merged: two spaces in a row produce an
empty token and a tab stays inside its token. A single trailing
delimiter ends the line without adding an empty token, the way a
stream read that stops at end of input would. An empty line or a
line starting with the delimiter yields an empty command name, which
never matches a registered command.

Iterating a Tokenizer yields the argument tokens left to right. Every
call to iter() starts again from the first argument, so the same
tokenizer can be walked more than once.
"""

from __future__ import annotations

from typing import Iterator, Tuple


DEFAULT_DELIMITER = " "


class Tokenizer:
    """Default whitespace tokenizer used by the Dispatcher.

    Any object with a ``name`` attribute and iteration over argument
    tokens can stand in for this class; pass a factory to
    ``Dispatcher(tokenizer=...)`` to use one.
    """

    def __init__(self, line: str, delimiter: str = DEFAULT_DELIMITER):
        if not delimiter:
            raise ValueError("Tokenizer delimiter must be a non-empty string")
        self._line = line
        self._delimiter = delimiter
        tokens = line.split(delimiter)
        if len(tokens) > 1 and tokens[-1] == "":
            # "add 2 " ends after "2"; only the last empty token goes
            tokens.pop()
        self._tokens = tuple(tokens)

    @property
    def line(self) -> str:
        """The original, unmodified input line."""
        return self._line

    @property
    def name(self) -> str:
        """The command name (first token)."""
        return self._tokens[0]

    @property
    def arguments(self) -> Tuple[str, ...]:
        """All argument tokens, in order."""
        return self._tokens[1:]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens[1:])

    def __len__(self) -> int:
        return len(self._tokens) - 1

    def __repr__(self) -> str:
        return f"Tokenizer(name={self.name!r}, arguments={self.arguments!r})"


def tokenizer_for(delimiter: str):
    """Return a tokenizer factory that splits on ``delimiter``."""
    if not delimiter:
        raise ValueError("Tokenizer delimiter must be a non-empty string")

    def factory(line: str) -> Tokenizer:
        return Tokenizer(line, delimiter)

    return factory
