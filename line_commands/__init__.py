"""
line_commands
=============

A typed, line-oriented command dispatcher. A host application owns a
Dispatcher, registers handlers with an argument signature, and feeds it
lines of text (from a REPL, a socket line reader, a config script...).

Architecture Overview
---------------------

    ┌──────────────┐    ┌───────────┐    ┌──────────┐    ┌──────────┐
    │  "add 2 3"   │───►│ Tokenizer │───►│ Registry │───►│ Decoders │
    └──────────────┘    └───────────┘    └──────────┘    └────┬─────┘
                                                              │
                          DispatchResult ◄── handler(2, 3) ◄──┘

    tokenizer.py   line → command name + argument tokens
    registry.py    command name → HandlerBinding (signature + target)
    decoders.py    token + type tag → value (char, text, int, float, ...)
    dispatcher.py  ties them together; returns a DispatchResult
    errors.py      AlreadyRegistered, CommandNotFound, ArityError, DecodeError
    config.py      YAML configuration, CLI overrides, logging setup
    demo.py        interactive REPL host

Quick Start
-----------

    from line_commands import Dispatcher

    dispatcher = Dispatcher()

    @dispatcher.command("add", int, int)
    def add(a, b):
        return a + b

    result = dispatcher.dispatch("add 2 3")
    result.handled   # True
    result.value     # 5

    dispatcher.dispatch("add 2 x").error.position   # 1
    dispatcher.dispatch("unknown").outcome          # Outcome.NOT_FOUND

Handlers bound to per-object state use an (instance, method) pair:

    dispatcher.register("bump", ["int"], (counter, Counter.bump))

New argument types go into the dispatcher's decoder table:

    dispatcher.decoders.register_type("bool", parse_bool, aliases=[bool])

A module-level ``dispatcher`` and its ``command`` decorator are provided
for applications that only need one.

Dependencies
------------
PyYAML for configuration files. Everything else is standard library.
"""

from line_commands.decoders import CHAR, FLOAT, INT, TEXT, ArgumentType, DecoderTable
from line_commands.dispatcher import Dispatcher, DispatchResult, Outcome
from line_commands.errors import (
    AlreadyRegistered,
    ArityError,
    CommandError,
    CommandNotFound,
    DecodeError,
    TypeAlreadyRegistered,
    UnknownArgumentType,
)
from line_commands.registry import CommandRegistry, HandlerBinding
from line_commands.tokenizer import Tokenizer

# ─── Default dispatcher for single-dispatcher applications ──────────

dispatcher = Dispatcher()
command = dispatcher.command

__all__ = [
    'dispatcher', 'command',
    'Dispatcher', 'DispatchResult', 'Outcome',
    'CommandRegistry', 'HandlerBinding',
    'DecoderTable', 'ArgumentType', 'CHAR', 'TEXT', 'INT', 'FLOAT',
    'Tokenizer',
    'CommandError', 'AlreadyRegistered', 'CommandNotFound', 'ArityError',
    'DecodeError', 'UnknownArgumentType', 'TypeAlreadyRegistered',
]
