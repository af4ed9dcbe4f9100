"""
Command Errors
==============

Exception taxonomy for the line command system.

Every failure the dispatcher can report has its own class, so a host
can tell *which phase* went wrong without parsing message text:

    AlreadyRegistered     register() saw a name that is already bound
    CommandNotFound       the first token matches no registered command
    ArityError            not enough argument tokens (or too many, in
                          strict mode)
    DecodeError           a token could not be converted to its declared
                          argument type
    UnknownArgumentType   a signature names a type the decoder table
                          doesn't know
    TypeAlreadyRegistered an extension type reuses an existing tag

register() raises these to its caller. dispatch() never raises the
not-found / arity / decode kinds; it hands the exception instance back
inside a DispatchResult instead.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CommandError(Exception):
    """Base class for all line command errors."""

    def __init__(self, message: str, command: Optional[str] = None):
        self.message = message
        self.command = command
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for UI rendering or logging."""
        return {
            "error_type": self.__class__.__name__,
            "command": self.command,
            "message": self.message,
        }


class AlreadyRegistered(CommandError, ValueError):
    """Raised when a command name is registered twice."""

    def __init__(self, command: str):
        super().__init__(
            f"Command name collision: '{command}' is already registered",
            command=command,
        )


class CommandNotFound(CommandError):
    """No handler is bound to the command name."""

    def __init__(self, command: str):
        super().__init__(f"Unknown command: '{command}'", command=command)


class ArityError(CommandError):
    """The line carries the wrong number of argument tokens."""

    def __init__(self, command: str, expected: int, received: int):
        self.expected = expected
        self.received = received
        noun = "argument" if expected == 1 else "arguments"
        super().__init__(
            f"'{command}' expects {expected} {noun}, got {received}",
            command=command,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(expected=self.expected, received=self.received)
        return data


class DecodeError(CommandError, ValueError):
    """A token could not be converted to its declared type.

    Attributes
    ----------
    position : int
        Zero-based index of the failing argument (the command name is
        not counted).
    token : str
        The raw token that failed to convert.
    type_name : str
        Tag of the semantic type the token was decoded as.
    """

    def __init__(
        self,
        position: int,
        token: str,
        type_name: str,
        reason: str = "",
        command: Optional[str] = None,
    ):
        self.position = position
        self.token = token
        self.type_name = type_name
        self.reason = reason
        message = f"argument {position}: cannot decode {token!r} as {type_name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, command=command)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(position=self.position, token=self.token, type=self.type_name)
        return data


class UnknownArgumentType(CommandError, KeyError):
    """A signature refers to a type with no registered decoder."""

    def __init__(self, type_ref: Any):
        self.type_ref = type_ref
        super().__init__(f"No decoder registered for argument type {type_ref!r}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class TypeAlreadyRegistered(CommandError, ValueError):
    """An extension type tag or alias collides with an existing one."""

    def __init__(self, tag: Any):
        self.tag = tag
        super().__init__(f"Argument type {tag!r} is already registered")
