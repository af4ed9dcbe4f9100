"""
Handler Registry
================

The table of command name → HandlerBinding.

A binding records three things about a command:

    signature   ordered tuple of argument type tags, e.g. ("int", "int")
    target      what the host registered: a function, or an
                (instance, method) pair for per-object state
    invoke      a uniform ``invoke(arguments)`` callable built from the
                target, so the Dispatcher never cares which shape it was

Target Shapes
-------------
    registry.register("greet", ["text"], greet)                 # function
    registry.register("bump", ["int"], (counter, Counter.bump))  # instance + function
    registry.register("bump", ["int"], (counter, "bump"))        # instance + method name
    registry.register("bump", ["int"], counter.bump)             # bound method

Names are case-sensitive and can be bound only once. There is no
unregister; a binding lives as long as its registry.

Thread Safety
-------------
Registrations are serialized with a lock and publish a fresh copy of
the mapping (copy-on-write). lookup() reads whichever snapshot is
current without taking the lock, so a dispatch running on another
thread never observes a half-updated table.
"""

from __future__ import annotations

import inspect
import logging
import threading
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from line_commands.decoders import TEXT, DecoderTable
from line_commands.errors import AlreadyRegistered

logger = logging.getLogger(__name__)


Invoker = Callable[[Sequence[Any]], Any]


@dataclass(frozen=True)
class HandlerBinding:
    """A registered command."""

    name: str
    signature: Tuple[str, ...]
    target: Any = field(repr=False)
    invoke: Invoker = field(repr=False, compare=False)
    help_text: str = ""

    @property
    def arity(self) -> int:
        return len(self.signature)

    @property
    def usage(self) -> str:
        """e.g. ``add <int> <int>``"""
        return " ".join([self.name] + [f"<{tag}>" for tag in self.signature])

    def __call__(self, arguments: Sequence[Any]) -> Any:
        return self.invoke(arguments)


# ─── Target normalization ───────────────────────────────────────────

def make_invoker(target: Any) -> Invoker:
    """Build a uniform ``invoke(arguments)`` callable for a target.

    Raises
    ------
    TypeError
        If the target is not callable, or is a pair whose method can't
        be resolved to something callable.
    """
    if isinstance(target, tuple):
        if len(target) != 2:
            raise TypeError(
                f"Method target must be an (instance, method) pair, got {len(target)} items"
            )
        instance, method = target

        if isinstance(method, str):
            bound = getattr(instance, method, None)
            if not callable(bound):
                raise TypeError(
                    f"{type(instance).__name__} has no callable method '{method}'"
                )
            return lambda arguments: bound(*arguments)

        if not callable(method):
            raise TypeError(f"Method {method!r} is not callable")
        return lambda arguments: method(instance, *arguments)

    if not callable(target):
        raise TypeError(f"Command target {target!r} is not callable")
    return lambda arguments: target(*arguments)


def infer_signature(target: Any) -> List[Any]:
    """Read a signature from the target's parameter annotations.

    Annotated parameters contribute their annotation (a Python type or
    a tag string); unannotated ones default to text. For an
    (instance, function) pair the leading ``self`` is skipped.
    """
    skip_first = False
    if isinstance(target, tuple):
        instance, method = target
        if isinstance(method, str):
            func = getattr(instance, method)
        else:
            func = method
            skip_first = True
    else:
        func = target

    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError):
        # unresolvable forward references; fall back to raw annotations
        hints = {}

    parameters = list(inspect.signature(func).parameters.values())
    if skip_first:
        parameters = parameters[1:]

    signature = []
    for parameter in parameters:
        if parameter.kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            raise TypeError(
                f"Cannot infer a signature: parameter '{parameter.name}' is not positional"
            )
        annotation = hints.get(parameter.name, parameter.annotation)
        if annotation is inspect.Parameter.empty:
            annotation = TEXT
        signature.append(annotation)
    return signature


def _describe(target: Any) -> str:
    func = target[1] if isinstance(target, tuple) else target
    if isinstance(func, str):
        return ""
    return inspect.getdoc(func) or ""


# ─── Registry ───────────────────────────────────────────────────────

class CommandRegistry:
    """Command name → HandlerBinding, bound once per name."""

    def __init__(self, decoders: Optional[DecoderTable] = None):
        self.decoders = decoders if decoders is not None else DecoderTable()
        self._bindings: Dict[str, HandlerBinding] = {}
        self._write_lock = threading.Lock()

    def register(
        self,
        name: str,
        signature: Optional[Sequence[Any]],
        target: Any,
        help_text: str = "",
    ) -> HandlerBinding:
        """Bind ``name`` to ``target``.

        Parameters
        ----------
        name : str
            Command name. Case-sensitive, must not contain the
            tokenizer's delimiter to be reachable.
        signature : sequence or None
            Argument types (tags, aliases or Python types). None means
            infer them from the target's annotations.
        target : callable or (instance, method)
            What to call with the decoded arguments.
        help_text : str
            Description for listings; defaults to the target docstring.

        Returns
        -------
        HandlerBinding

        Raises
        ------
        AlreadyRegistered
            If ``name`` is already bound. Nothing is changed.
        ValueError
            If ``name`` is empty.
        UnknownArgumentType
            If the signature names an unregistered type.
        TypeError
            If the target can't be invoked.
        """
        if not isinstance(name, str):
            raise TypeError(f"Command name must be a string, got {type(name).__name__}")
        if not name:
            # blank lines tokenize to an empty name; it must never match
            raise ValueError("Command name must not be empty")

        invoke = make_invoker(target)
        if signature is None:
            signature = infer_signature(target)
        tags = self.decoders.resolve_signature(signature)

        binding = HandlerBinding(
            name=name,
            signature=tags,
            target=target,
            invoke=invoke,
            help_text=help_text or _describe(target),
        )

        with self._write_lock:
            if name in self._bindings:
                raise AlreadyRegistered(name)
            updated = dict(self._bindings)
            updated[name] = binding
            self._bindings = updated

        logger.debug(f"Registered command: {binding.usage}")
        return binding

    def lookup(self, name: str) -> Optional[HandlerBinding]:
        """Return the binding for ``name``, or None."""
        return self._bindings.get(name)

    def names(self) -> List[str]:
        return sorted(self._bindings)

    def bindings(self) -> List[HandlerBinding]:
        """All bindings, sorted by name."""
        snapshot = self._bindings
        return [snapshot[name] for name in sorted(snapshot)]

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
