"""
Command Dispatcher
==================

Routes a line of text to a registered handler with typed arguments.

    Host feeds:  "add 2 3"
                   ↓
    Tokenizer    name "add", arguments ("2", "3")
                   ↓
    Registry     "add" → HandlerBinding(signature=("int", "int"))
                   ↓
    Arity        2 tokens available, 2 required → ok
                   ↓
    Decoders     "2" → 2, "3" → 3
                   ↓
    Invoke       add(2, 3)
                   ↓
    Returns      DispatchResult(outcome=HANDLED, value=5)

Every phase that can fail has its own Outcome, so the host always knows
where a line went wrong:

    HANDLED        the handler ran; ``value`` holds its return value
    NOT_FOUND      no command with that name (handler never touched)
    ARITY_ERROR    fewer tokens than the signature needs
    DECODE_ERROR   a token didn't convert; ``error.position`` says which

Only ``arity`` tokens are ever read. Surplus tokens are ignored unless
``strict_arity`` is enabled in the dispatch config, in which case they
are an ARITY_ERROR too.

Exceptions raised *inside* a handler are not dispatch outcomes: they
are logged and propagate to the caller unchanged.

Usage
-----
    dispatcher = Dispatcher()

    @dispatcher.command("add", int, int)
    def add(a, b):
        return a + b

    result = dispatcher.dispatch("add 2 3")
    if result.handled:
        print(result.value)
    else:
        print(result.summary)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from line_commands.config import DispatchConfig
from line_commands.decoders import DecoderTable
from line_commands.errors import ArityError, CommandError, CommandNotFound, DecodeError
from line_commands.registry import CommandRegistry, HandlerBinding
from line_commands.tokenizer import tokenizer_for

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """Terminal state of one dispatch() call."""
    HANDLED = "handled"
    NOT_FOUND = "not_found"
    ARITY_ERROR = "arity_error"
    DECODE_ERROR = "decode_error"


@dataclass
class DispatchResult:
    """Structured output of a dispatch.

    Attributes
    ----------
    command : str
        The command name taken from the line (may be "" for a blank
        line).
    outcome : Outcome
        Which terminal state the dispatch reached.
    arguments : tuple
        Decoded arguments passed to the handler. Empty unless HANDLED.
    value : Any
        Whatever the handler returned. None unless HANDLED.
    error : CommandError or None
        The CommandNotFound / ArityError / DecodeError describing the
        failure. None when HANDLED.
    """
    command: str
    outcome: Outcome
    arguments: Tuple[Any, ...] = field(default_factory=tuple)
    value: Any = None
    error: Optional[CommandError] = None

    @property
    def handled(self) -> bool:
        return self.outcome is Outcome.HANDLED

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def summary(self) -> str:
        """Human-readable one-liner for terminal display."""
        if self.error is not None:
            return str(self.error)
        if self.value is None:
            return f"{self.command}: ok"
        return f"{self.command}: {self.value}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "outcome": self.outcome.value,
            "arguments": list(self.arguments),
            "value": self.value,
            "error": self.error.to_dict() if self.error is not None else None,
        }


class Dispatcher:
    """Tokenizes lines, looks up handlers, decodes arguments and invokes.

    Parameters
    ----------
    registry : CommandRegistry, optional
        Shared registry. A new empty one is created if omitted.
    decoders : DecoderTable, optional
        Decoder table for a new registry. Ignored when ``registry`` is
        given, unless it conflicts with the registry's own table.
    tokenizer : callable, optional
        ``tokenizer(line)`` returning an object with a ``name``
        attribute that iterates the argument tokens. Defaults to
        splitting on ``config.delimiter``.
    config : DispatchConfig, optional
        Delimiter, strict arity and logging switches.

    Thread Safety
    -------------
    dispatch() keeps no state between calls. Registration may happen
    concurrently with dispatching; see CommandRegistry.
    """

    def __init__(
        self,
        registry: Optional[CommandRegistry] = None,
        decoders: Optional[DecoderTable] = None,
        tokenizer: Optional[Callable[[str], Any]] = None,
        config: Optional[DispatchConfig] = None,
    ):
        self.config = config if config is not None else DispatchConfig()

        if registry is None:
            registry = CommandRegistry(decoders)
        elif decoders is not None and decoders is not registry.decoders:
            raise ValueError("decoders conflicts with the registry's decoder table")
        self.registry = registry

        # a custom tokenizer may split on anything, so only the default
        # one lets register() reject unreachable names
        self._delimiter = self.config.delimiter if tokenizer is None else None
        self._tokenize = tokenizer if tokenizer is not None else tokenizer_for(self.config.delimiter)

    @property
    def decoders(self) -> DecoderTable:
        return self.registry.decoders

    # ─── Registration ───────────────────────────────────────────────

    def register(
        self,
        name: str,
        signature: Optional[Sequence[Any]],
        target: Any,
        help_text: str = "",
    ) -> HandlerBinding:
        """Bind a command. See CommandRegistry.register().

        Raises AlreadyRegistered if ``name`` is taken, and ValueError if
        it is empty or contains the delimiter (no line could reach it).
        """
        if self._delimiter and isinstance(name, str) and self._delimiter in name:
            raise ValueError(
                f"Command name {name!r} contains the delimiter {self._delimiter!r}"
            )
        return self.registry.register(name, signature, target, help_text)

    def command(
        self,
        name: Optional[str] = None,
        *types: Any,
        signature: Optional[Sequence[Any]] = None,
        help_text: str = "",
    ):
        """
        Decorator to register a function as a command.

        Types may be listed positionally or passed as ``signature``;
        ``signature=[]`` declares a zero-argument command explicitly.
        With neither, the signature is read from the annotations.

        Usage:
            @dispatcher.command("scale", float, float)
            def scale(value, factor):
                return value * factor

            @dispatcher.command()
            def greet(who: str):
                ...

            @dispatcher.command("ping", signature=[])
            def ping(verbose=False):
                ...
        """
        if types and signature is not None:
            raise TypeError("Pass argument types positionally or as signature=, not both")
        if types:
            declared = list(types)
        elif signature is not None:
            declared = list(signature)
        else:
            declared = None

        def decorator(func: Callable):
            self.register(
                name or func.__name__,
                declared,
                func,
                help_text=help_text,
            )
            return func

        return decorator

    # ─── Dispatch ───────────────────────────────────────────────────

    def dispatch(self, line: str) -> DispatchResult:
        """Run one line through tokenize → lookup → arity → decode → invoke.

        Parameters
        ----------
        line : str
            A single line of input. Not stripped.

        Returns
        -------
        DispatchResult
            Always returned for not-found, arity and decode failures;
            these never raise.
        """
        tokens = self._tokenize(line)
        name = tokens.name

        binding = self.registry.lookup(name)
        if binding is None:
            if self.config.log_not_found:
                logger.info(f"No command registered for '{name}'")
            return DispatchResult(command=name, outcome=Outcome.NOT_FOUND,
                                  error=CommandNotFound(name))

        available = list(tokens)
        too_few = len(available) < binding.arity
        too_many = self.config.strict_arity and len(available) > binding.arity
        if too_few or too_many:
            error = ArityError(name, binding.arity, len(available))
            logger.warning(error.message)
            return DispatchResult(command=name, outcome=Outcome.ARITY_ERROR, error=error)

        try:
            arguments = tuple(self.decoders.decode_all(binding.signature, available))
        except DecodeError as e:
            e.command = name
            logger.warning(f"{name}: {e.message}")
            return DispatchResult(command=name, outcome=Outcome.DECODE_ERROR, error=e)

        logger.debug(f"Dispatching {name}{arguments!r}")
        try:
            value = binding(arguments)
        except Exception:
            logger.exception(f"Handler for '{name}' raised")
            raise

        return DispatchResult(command=name, outcome=Outcome.HANDLED,
                              arguments=arguments, value=value)

    # ─── Introspection ──────────────────────────────────────────────

    def list_commands(self) -> List[Tuple[str, str]]:
        """Return (name, usage) for every command, sorted by name."""
        return [(binding.name, binding.usage) for binding in self.registry.bindings()]

    def __contains__(self, name: object) -> bool:
        return name in self.registry
