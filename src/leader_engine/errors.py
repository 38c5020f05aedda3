"""Exception hierarchy shared by the keymap and session layers."""

from __future__ import annotations

from typing import Iterable


class LeaderEngineError(RuntimeError):
    """Base class for every error raised by the engine."""


class ConfigurationError(LeaderEngineError):
    """Raised when binding records are malformed or ambiguous."""


class NotTerminalError(LeaderEngineError):
    """Raised when a command is requested from a non-terminal position."""

    def __init__(self, path: Iterable[str] = ()) -> None:
        self.path = tuple(path)
        sequence = " ".join(self.path) or "<root>"
        super().__init__(f"No command bound to sequence '{sequence}'")


class InvalidKeyError(LeaderEngineError):
    """Raised (or carried) when a key token is not a legal next key."""

    def __init__(self, key: str, expected: Iterable[str] = ()) -> None:
        self.key = key
        self.expected = tuple(expected)
        super().__init__(f"Invalid key '{key}', expected one of {list(self.expected)}")


class SessionDisposedError(LeaderEngineError):
    """Raised when a disposed leader session is asked to start again."""


class UnknownCommandError(LeaderEngineError):
    """Raised by the command registry for ids nobody registered."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Command '{command}' is not registered")


__all__ = [
    "LeaderEngineError",
    "ConfigurationError",
    "NotTerminalError",
    "InvalidKeyError",
    "SessionDisposedError",
    "UnknownCommandError",
]
