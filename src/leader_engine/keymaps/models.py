"""Dataclasses describing leader bindings and hint options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from leader_engine.errors import ConfigurationError

NO_DESCRIPTION = "[No Description]"


def _normalize_sequence(keys: Iterable[str] | str) -> tuple[str, ...]:
    if isinstance(keys, str):
        return tuple(keys.split())
    return tuple(keys)


@dataclass(frozen=True, slots=True)
class KeyBinding:
    """One configured leader sequence.

    A binding without ``command`` is a group label: it only names the node the
    sequence reaches so hints can describe it.
    """

    key_sequence: tuple[str, ...]
    command: Optional[str] = None
    args: Optional[tuple[Any, ...]] = None
    label: Optional[str] = None

    def __post_init__(self) -> None:
        sequence = _normalize_sequence(self.key_sequence)
        if not sequence:
            raise ConfigurationError("keySequence cannot be empty")
        for token in sequence:
            if not isinstance(token, str) or not token:
                raise ConfigurationError(
                    f"keySequence {list(sequence)!r} contains an empty or non-string key"
                )
        object.__setattr__(self, "key_sequence", sequence)
        if self.command is not None and not self.command:
            raise ConfigurationError(
                f"binding '{self.signature}' has an empty command"
            )
        if self.args is not None:
            object.__setattr__(self, "args", tuple(self.args))

    @property
    def is_command(self) -> bool:
        return self.command is not None

    @property
    def signature(self) -> str:
        return " ".join(self.key_sequence)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "KeyBinding":
        """Build a binding from the ``keySequence``/``command``/``args`` shape."""

        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"binding must be a mapping, got {type(data).__name__}"
            )
        sequence = data.get("keySequence", data.get("key_sequence"))
        if sequence is None:
            raise ConfigurationError("binding is missing 'keySequence'")
        if not isinstance(sequence, (str, list, tuple)):
            raise ConfigurationError(
                f"keySequence must be a list of keys, got {type(sequence).__name__}"
            )
        args = data.get("args")
        if args is not None and not isinstance(args, (list, tuple)):
            args = (args,)
        label = data.get("label")
        command = data.get("command")
        return cls(
            key_sequence=_normalize_sequence(sequence),
            command=None if command is None else str(command),
            args=None if args is None else tuple(args),
            label=None if label is None else str(label),
        )


@dataclass(frozen=True, slots=True)
class KeyOption:
    """A legal next key offered to the user while a sequence is pending."""

    key: str
    binding: Optional[KeyBinding] = None

    @property
    def label(self) -> Optional[str]:
        return self.binding.label if self.binding else None

    @property
    def command(self) -> Optional[str]:
        return self.binding.command if self.binding else None

    @property
    def description(self) -> str:
        return self.label or self.command or NO_DESCRIPTION


__all__ = [
    "NO_DESCRIPTION",
    "KeyBinding",
    "KeyOption",
]
