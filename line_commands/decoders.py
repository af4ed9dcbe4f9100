"""
Argument Decoders
=================

Type-directed conversion of a single argument token into a value.

Each handler declares a signature: an ordered list of semantic types.
At dispatch time the Dispatcher walks that signature and asks the
DecoderTable to convert the token at the same index. The table is a
plain dict from type tag to converter, so adding a type never touches
the registry or the dispatcher.

Built-in Types
--------------
    tag      aliases                  rule
    ───────  ───────────────────────  ─────────────────────────────────────
    char     "character"              first character of the token
    text     str, "str", "string"     the token, verbatim
    int      int, "integer"           leading base-10 integer ("12abc" → 12)
    float    float, "double"          leading decimal or hex number ("2.5kg" → 2.5)

Numeric parsing reads the longest numeric prefix: leading whitespace is
skipped, an optional sign is accepted, and parsing stops at the first
character that can't continue the number. A token with no numeric
prefix at all is a decode failure. Floats also accept hexadecimal
("0x1A" → 26.0, "0x1.8p1" → 3.0) and ``inf``, ``infinity`` and ``nan``.
A finite float literal too large for a double ("1e5000") is a decode
failure rather than infinity.

Extending
---------
    table = DecoderTable()
    table.register_type("bool", parse_bool, aliases=[bool])
    dispatcher = Dispatcher(decoders=table)
    dispatcher.register("verbose", ["bool"], set_verbose)

A converter takes the raw token and returns the value, raising
ValueError (or TypeError / LookupError) when the token is unusable.
DecoderTable.decode() turns any of those into a DecodeError carrying
the argument position, so parse failures never escape as bare runtime
faults.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

from line_commands.errors import DecodeError, TypeAlreadyRegistered, UnknownArgumentType

logger = logging.getLogger(__name__)


CHAR = "char"
TEXT = "text"
INT = "int"
FLOAT = "float"

Converter = Callable[[str], Any]


# ─── Built-in converters ────────────────────────────────────────────

_INT_PREFIX = re.compile(r'\s*([+-]?[0-9]+)')

_FLOAT_PREFIX = re.compile(
    r'\s*([+-]?(?:'
    r'0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)(?:p[+-]?[0-9]+)?'
    r'|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?'
    r'|infinity|inf|nan))',
    re.IGNORECASE
)


def decode_char(token: str) -> str:
    if not token:
        raise ValueError("empty token has no first character")
    return token[0]


def decode_text(token: str) -> str:
    return token


def decode_int(token: str) -> int:
    """Parse the leading base-10 integer of ``token``."""
    match = _INT_PREFIX.match(token)
    if match is None:
        raise ValueError("not an integer")
    return int(match.group(1))


def decode_float(token: str) -> float:
    """Parse the leading decimal or hexadecimal number of ``token``."""
    match = _FLOAT_PREFIX.match(token)
    if match is None:
        raise ValueError("not a number")
    text = match.group(1)
    if "x" in text or "X" in text:
        try:
            return float.fromhex(text)
        except OverflowError:
            raise ValueError("out of range") from None
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        # a finite literal too large for a double
        raise ValueError("out of range")
    return value


# ─── Decoder table ──────────────────────────────────────────────────

@dataclass(frozen=True)
class ArgumentType:
    """A semantic argument type and its token conversion rule.

    Attributes
    ----------
    tag : str
        Canonical name stored in handler signatures.
    convert : callable
        ``convert(token) -> value``; raises ValueError on bad input.
    aliases : tuple
        Other names (or Python types) that resolve to this tag.
    description : str
        Short text for help listings.
    """
    tag: str
    convert: Converter
    aliases: Tuple[Any, ...] = field(default_factory=tuple)
    description: str = ""


_BUILTIN_TYPES = (
    ArgumentType(CHAR, decode_char, ("character",), "single character"),
    ArgumentType(TEXT, decode_text, (str, "str", "string"), "text token"),
    ArgumentType(INT, decode_int, (int, "integer"), "base-10 integer"),
    ArgumentType(FLOAT, decode_float, (float, "double"), "decimal number"),
)


class DecoderTable:
    """Maps semantic type tags to converters.

    Each Dispatcher owns one table. Extension types registered on one
    table are invisible to the others.
    """

    def __init__(self, include_builtins: bool = True):
        self._types: Dict[str, ArgumentType] = {}
        self._aliases: Dict[Any, str] = {}
        if include_builtins:
            for arg_type in _BUILTIN_TYPES:
                self._add(arg_type)

    def _add(self, arg_type: ArgumentType) -> None:
        names = [arg_type.tag, *arg_type.aliases]
        for name in names:
            if name in self._aliases:
                raise TypeAlreadyRegistered(name)
        self._types[arg_type.tag] = arg_type
        for name in names:
            self._aliases[name] = arg_type.tag

    def register_type(
        self,
        tag: str,
        converter: Converter,
        aliases: Iterable[Any] = (),
        description: str = "",
    ) -> ArgumentType:
        """Add an extension type.

        Raises
        ------
        TypeAlreadyRegistered
            If the tag or any alias is already known. The table is
            left unchanged.
        TypeError
            If ``tag`` is not a non-empty string or the converter is
            not callable.
        """
        if not isinstance(tag, str) or not tag:
            raise TypeError(f"Argument type tag must be a non-empty string, got {tag!r}")
        if not callable(converter):
            raise TypeError(f"Converter for {tag!r} is not callable")

        arg_type = ArgumentType(tag, converter, tuple(aliases), description)
        self._add(arg_type)
        logger.debug(f"Registered argument type: {tag}")
        return arg_type

    def resolve(self, type_ref: Any) -> str:
        """Return the canonical tag for a tag, alias, or Python type."""
        try:
            return self._aliases[type_ref]
        except (KeyError, TypeError):
            # TypeError: unhashable type_ref
            raise UnknownArgumentType(type_ref) from None

    def resolve_signature(self, signature: Sequence[Any]) -> Tuple[str, ...]:
        return tuple(self.resolve(type_ref) for type_ref in signature)

    def get(self, type_ref: Any) -> ArgumentType:
        return self._types[self.resolve(type_ref)]

    def tags(self) -> List[str]:
        return sorted(self._types)

    def __contains__(self, type_ref: Any) -> bool:
        try:
            return type_ref in self._aliases
        except TypeError:
            return False

    def decode(self, type_ref: Any, token: str, position: int = 0) -> Any:
        """Convert one token.

        Parameters
        ----------
        type_ref : str or type
            Tag or alias of the target type.
        token : str
            The raw argument token.
        position : int
            Zero-based argument index, reported in DecodeError.

        Raises
        ------
        DecodeError
            If the converter rejects the token.
        UnknownArgumentType
            If ``type_ref`` names no registered type.
        """
        arg_type = self.get(type_ref)
        try:
            return arg_type.convert(token)
        except (ValueError, TypeError, LookupError, OverflowError) as e:
            raise DecodeError(position, token, arg_type.tag, reason=str(e)) from e

    def decode_all(self, signature: Sequence[Any], tokens: Sequence[str]) -> List[Any]:
        """Decode ``tokens[i]`` as ``signature[i]`` for every i, in order.

        Only ``len(signature)`` tokens are consumed; the caller checks
        arity beforehand. Stops at the first failure.
        """
        if len(tokens) < len(signature):
            raise IndexError(
                f"{len(signature)} tokens required, {len(tokens)} available"
            )
        return [
            self.decode(type_ref, tokens[index], index)
            for index, type_ref in enumerate(signature)
        ]
