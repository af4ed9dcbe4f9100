#!/usr/bin/env python3
"""
line_commands — Interactive Demo

Reads lines from the terminal and dispatches them. Try:

    greet world
    add 2 3
    add 2 x
    scale 2.5 4
    initial Ada
    count 3
    count
    reset
    help
    quit

Run with:  python -m line_commands.demo [-c config.yaml] [-v]
"""

import sys

from line_commands.config import setup_configuration, setup_logging
from line_commands.dispatcher import Dispatcher


class Counter:
    """Per-instance state reached through an (instance, method) binding."""

    def __init__(self):
        self.total = 0

    def bump(self, amount):
        self.total += amount
        return self.total

    def reset(self):
        self.total = 0


def build_dispatcher(config=None) -> Dispatcher:
    """A dispatcher with the demo commands registered."""
    dispatcher = Dispatcher(config=config)

    @dispatcher.command("greet")
    def greet(who: str):
        """Say hello"""
        return f"Hello, {who}!"

    @dispatcher.command("add", int, int)
    def add(a, b):
        """Add two integers"""
        return a + b

    @dispatcher.command("scale", float, float)
    def scale(value, factor):
        """Multiply two numbers"""
        return value * factor

    @dispatcher.command("initial", "char")
    def initial(letter):
        """Echo the first letter of a word"""
        return letter.upper()

    counter = Counter()
    dispatcher.register("count", ["int"], (counter, Counter.bump),
                        help_text="Add to a running total")
    dispatcher.register("reset", [], (counter, "reset"),
                        help_text="Zero the running total")
    return dispatcher


def main(argv=None) -> int:
    config, should_exit, _ = setup_configuration(argv)
    if should_exit:
        return 0

    setup_logging(config.console)
    dispatcher = build_dispatcher(config.dispatch)
    exit_commands = set(config.repl.exit_commands)

    print("=" * 60)
    print("  line_commands — Demo")
    print(f"  Type help for commands, {' or '.join(sorted(exit_commands))} to exit")
    print("=" * 60)
    print()

    while True:
        try:
            line = input(config.repl.prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        if line in exit_commands:
            break

        if line == "help":
            print("\nAvailable commands:")
            for name, usage in dispatcher.list_commands():
                help_text = dispatcher.registry.lookup(name).help_text
                print(f"  {usage:<28} {help_text}")
            print()
            continue

        result = dispatcher.dispatch(line)

        if result.is_error:
            print(f"  [{result.outcome.value}] {result.summary}")
        else:
            print(f"  {result.summary}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
