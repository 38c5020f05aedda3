"""Cursor that walks a :class:`KeyTree` one key token at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional, cast

from leader_engine.errors import InvalidKeyError, NotTerminalError

from .models import KeyBinding, KeyOption
from .tree import KeyNode


@dataclass(frozen=True, slots=True)
class ChooseResult:
    """Outcome of :meth:`TreeTraverser.choose_option`."""

    status: Literal["advanced", "invalid"]
    key: str
    terminal: bool = False
    error: Optional[InvalidKeyError] = None

    @property
    def ok(self) -> bool:
        return self.status == "advanced"

    def raise_for_status(self) -> None:
        if self.error is not None:
            raise self.error


class TreeTraverser:
    """Tracks the current node and the path taken from the root."""

    def __init__(self, root: KeyNode) -> None:
        self._root = root
        self._current = root
        self._path: list[str] = []

    @property
    def current_node(self) -> KeyNode:
        return self._current

    @property
    def path(self) -> tuple[str, ...]:
        return tuple(self._path)

    def is_terminal(self) -> bool:
        return self._current.is_terminal

    def get_terminal_binding(self) -> KeyBinding:
        binding = self._current.binding
        if binding is None or binding.command is None:
            raise NotTerminalError(self._path)
        return binding

    def get_command(self) -> str:
        return cast(str, self.get_terminal_binding().command)

    def get_args(self) -> tuple[Any, ...]:
        return self.get_terminal_binding().args or ()

    def get_current_options(self) -> tuple[KeyOption, ...]:
        return self._current.options()

    def choose_option(self, key: str) -> ChooseResult:
        child = self._current.children.get(key)
        if child is None:
            error = InvalidKeyError(key, self._current.children.keys())
            return ChooseResult(status="invalid", key=key, error=error)

        self._current = child
        self._path.append(key)
        return ChooseResult(status="advanced", key=key, terminal=child.is_terminal)

    def reset(self) -> None:
        self._current = self._root
        self._path.clear()


__all__ = [
    "ChooseResult",
    "TreeTraverser",
]
