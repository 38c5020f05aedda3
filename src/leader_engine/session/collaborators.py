"""Interfaces the leader session depends on, with in-process defaults."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from itertools import count
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Optional,
    Protocol,
    Sequence,
    Union,
    runtime_checkable,
)

from leader_engine.errors import UnknownCommandError
from leader_engine.runtime import telemetry

KeyHandler = Callable[[str], Union[Awaitable[None], None]]
CommandHandler = Callable[..., Any]

IS_ACTIVE_FLAG = "leader.isActive"


@dataclass(frozen=True, slots=True)
class Subscription:
    """Handle returned by :meth:`KeyInputSource.subscribe`."""

    id: int
    handler: KeyHandler = field(compare=False, repr=False)


@runtime_checkable
class KeyInputSource(Protocol):
    def subscribe(self, handler: KeyHandler) -> Subscription: ...

    def unsubscribe(self, subscription: Subscription) -> None: ...


@runtime_checkable
class CommandExecutor(Protocol):
    async def execute(self, command: str, args: Sequence[Any]) -> Any: ...


@runtime_checkable
class ActiveFlag(Protocol):
    async def set_active(self, active: bool) -> None: ...


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class KeyInputHub:
    """Fan-out of key tokens to subscribed handlers."""

    def __init__(self) -> None:
        self._subscribers: Dict[int, Subscription] = {}
        self._ids = count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, handler: KeyHandler) -> Subscription:
        subscription = Subscription(id=next(self._ids), handler=handler)
        self._subscribers[subscription.id] = subscription
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscribers.pop(subscription.id, None)

    async def feed(self, token: str) -> bool:
        """Deliver ``token`` to every subscriber; ``False`` when nobody listens."""

        subscribers = tuple(self._subscribers.values())
        for subscription in subscribers:
            await _maybe_await(subscription.handler(token))
        return bool(subscribers)


class CommandRegistry:
    """Maps command ids to callables and executes them."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._handlers: Dict[str, CommandHandler] = {}
        self._logger_name = logger_name

    def __contains__(self, command: object) -> bool:
        return command in self._handlers

    def commands(self) -> tuple[str, ...]:
        return tuple(sorted(self._handlers))

    def register(
        self, command: str, handler: CommandHandler, *, replace: bool = False
    ) -> CommandHandler:
        if not command:
            raise ValueError("command id cannot be empty")
        if not callable(handler):
            raise TypeError("handler must be callable")
        if not replace and command in self._handlers:
            raise ValueError(f"Command '{command}' already registered")
        self._handlers[command] = handler
        return handler

    def unregister(self, command: str) -> Optional[CommandHandler]:
        return self._handlers.pop(command, None)

    async def execute(self, command: str, args: Sequence[Any] = ()) -> Any:
        with telemetry.span(
            "commands::execute",
            logger_name=self._logger_name,
            component="commands",
            metadata={"command": command, "argc": len(args)},
        ) as handle:
            handler = self._handlers.get(command)
            if handler is None:
                handle.add_metadata("status", "unknown")
                raise UnknownCommandError(command)
            return await _maybe_await(handler(*args))


class ContextFlags:
    """Boolean context store consulted by the host UI."""

    def __init__(self, *, key: str = IS_ACTIVE_FLAG) -> None:
        self.key = key
        self._flags: Dict[str, bool] = {}
        self._listeners: list[Callable[[str, bool], None]] = []

    def get(self, key: str, default: bool = False) -> bool:
        return self._flags.get(key, default)

    @property
    def active(self) -> bool:
        return self.get(self.key)

    def subscribe(self, listener: Callable[[str, bool], None]) -> None:
        self._listeners.append(listener)

    def set_flag(self, key: str, value: bool) -> None:
        self._flags[key] = value
        for listener in tuple(self._listeners):
            listener(key, value)

    async def set_active(self, active: bool) -> None:
        self.set_flag(self.key, active)


__all__ = [
    "IS_ACTIVE_FLAG",
    "KeyHandler",
    "CommandHandler",
    "Subscription",
    "KeyInputSource",
    "CommandExecutor",
    "ActiveFlag",
    "KeyInputHub",
    "CommandRegistry",
    "ContextFlags",
]
