"""Trie of key tokens built from leader bindings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, Mapping, Optional, Sequence

from leader_engine.errors import ConfigurationError
from leader_engine.runtime.telemetry import span

from .models import KeyBinding, KeyOption

if TYPE_CHECKING:
    from .traverser import TreeTraverser


@dataclass(slots=True)
class KeyNode:
    """Single trie node; ``binding`` is set when a sequence ends here.

    Only :class:`KeyTree` writes ``_binding`` and ``_children``, while building.
    """

    key: str = ""
    _binding: Optional[KeyBinding] = None
    _children: Dict[str, "KeyNode"] = field(default_factory=dict, repr=False)

    @property
    def binding(self) -> Optional[KeyBinding]:
        return self._binding

    @property
    def children(self) -> Mapping[str, "KeyNode"]:
        return MappingProxyType(self._children)

    @property
    def is_terminal(self) -> bool:
        return self.binding is not None and self.binding.command is not None

    def options(self) -> tuple[KeyOption, ...]:
        return tuple(
            KeyOption(key=child.key, binding=child.binding)
            for child in self._children.values()
        )

    def _child(self, token: str) -> "KeyNode":
        node = self._children.get(token)
        if node is None:
            node = KeyNode(key=token)
            self._children[token] = node
        return node


class KeyTree:
    """Immutable keybinding trie; build a new one when configuration changes."""

    def __init__(
        self,
        records: Iterable[KeyBinding] = (),
        *,
        logger_name: str | None = None,
    ) -> None:
        self._root = KeyNode()
        self._logger_name = logger_name
        self._size = 0
        records = tuple(records)
        with span(
            "keymaps::build",
            logger_name=logger_name,
            component="keymaps",
            metadata={"records": len(records)},
        ) as handle:
            for record in records:
                self._insert(record)
            handle.add_metadata("commands", self._size)

    @classmethod
    def build(
        cls, records: Iterable[KeyBinding], *, logger_name: str | None = None
    ) -> "KeyTree":
        return cls(records, logger_name=logger_name)

    @property
    def root(self) -> KeyNode:
        return self._root

    def get_root(self) -> KeyNode:
        return self._root

    def get_traverser(self) -> "TreeTraverser":
        from .traverser import TreeTraverser

        return TreeTraverser(self._root)

    def find(self, sequence: Sequence[str]) -> Optional[KeyNode]:
        node = self._root
        for token in sequence:
            child = node.children.get(token)
            if child is None:
                return None
            node = child
        return node

    def iter_bindings(self) -> Iterator[KeyBinding]:
        """Yield command bindings depth-first, siblings in insertion order."""

        stack = [self._root]
        while stack:
            node = stack.pop()
            if node.is_terminal and node.binding is not None:
                yield node.binding
            stack.extend(reversed(tuple(node.children.values())))

    def __len__(self) -> int:
        return self._size

    def _insert(self, record: KeyBinding) -> None:
        node = self._root
        for depth, token in enumerate(record.key_sequence):
            if node.is_terminal:
                prefix = " ".join(record.key_sequence[:depth])
                raise ConfigurationError(
                    f"Ambiguous binding '{record.signature}': prefix '{prefix}' "
                    f"is already bound to '{node.binding.command}'"  # type: ignore[union-attr]
                )
            node = node._child(token)
        self._attach(node, record)

    def _attach(self, node: KeyNode, record: KeyBinding) -> None:
        existing = node.binding
        if record.is_command and node.children:
            longer = ", ".join(sorted(node.children))
            raise ConfigurationError(
                f"Ambiguous binding '{record.signature}' -> '{record.command}': "
                f"the sequence continues with [{longer}]"
            )

        if existing is None:
            node._binding = record
            if record.is_command:
                self._size += 1
            return

        if not record.is_command:
            node._binding = replace(existing, label=record.label or existing.label)
            return

        if not existing.is_command:
            node._binding = replace(record, label=record.label or existing.label)
            self._size += 1
            return

        if existing.command == record.command and (existing.args or ()) == (
            record.args or ()
        ):
            node._binding = replace(existing, label=record.label or existing.label)
            return

        raise ConfigurationError(
            f"Duplicate binding '{record.signature}': already bound to "
            f"'{existing.command}', cannot rebind to '{record.command}'"
        )


__all__ = [
    "KeyNode",
    "KeyTree",
]
