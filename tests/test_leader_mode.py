from __future__ import annotations

import asyncio
from typing import Any, List, Sequence, Tuple

import pytest

from leader_engine.errors import SessionDisposedError, UnknownCommandError
from leader_engine.keymaps import KeyBinding, KeyOption, KeyTree
from leader_engine.session import (
    ENTER_LEADER_MODE_COMMAND,
    EXIT_LEADER_MODE_COMMAND,
    CommandRegistry,
    ContextFlags,
    KeyInputHub,
    LeaderMode,
    Subscription,
    register_leader_commands,
)


class RecordingPresenter:
    def __init__(self) -> None:
        self.shown: List[List[str]] = []
        self.hide_calls = 0
        self.dispose_calls = 0

    def show(self, options: Sequence[KeyOption]) -> None:
        self.shown.append([option.key for option in options])

    def hide(self) -> None:
        self.hide_calls += 1

    def dispose_resource(self) -> None:
        self.dispose_calls += 1


class RecordingKeyInput(KeyInputHub):
    def __init__(self) -> None:
        super().__init__()
        self.subscribe_calls = 0
        self.unsubscribe_calls = 0

    def subscribe(self, handler: Any) -> Subscription:
        self.subscribe_calls += 1
        return super().subscribe(handler)

    def unsubscribe(self, subscription: Subscription) -> None:
        self.unsubscribe_calls += 1
        super().unsubscribe(subscription)


class RecordingExecutor:
    def __init__(self, *, fail: bool = False) -> None:
        self.calls: List[Tuple[str, List[Any]]] = []
        self.fail = fail

    async def execute(self, command: str, args: Sequence[Any]) -> None:
        self.calls.append((command, list(args)))
        if self.fail:
            raise RuntimeError("command failed")


class RecordingFlags:
    def __init__(self) -> None:
        self.values: List[bool] = []

    async def set_active(self, active: bool) -> None:
        self.values.append(active)


class Harness:
    def __init__(self, records: Sequence[KeyBinding], *, fail: bool = False) -> None:
        self.presenter = RecordingPresenter()
        self.key_input = RecordingKeyInput()
        self.executor = RecordingExecutor(fail=fail)
        self.flags = RecordingFlags()
        self.leader = LeaderMode(
            KeyTree(records),
            self.presenter,
            key_input=self.key_input,
            executor=self.executor,
            context=self.flags,
        )


SCENARIO = (KeyBinding(("a", "b"), command="foo", args=({"x": 1},)),)


@pytest.mark.asyncio
async def test_full_sequence_dispatches_command_and_ends_session() -> None:
    harness = Harness(SCENARIO)

    await harness.leader.enable()
    assert harness.presenter.shown == [["a"]]

    await harness.key_input.feed("a")
    assert harness.presenter.shown == [["a"], ["b"]]
    assert harness.executor.calls == []
    assert harness.leader.is_active is True

    await harness.key_input.feed("b")
    assert harness.executor.calls == [("foo", [{"x": 1}])]
    assert harness.leader.is_active is False
    assert harness.presenter.hide_calls == 1
    assert harness.key_input.unsubscribe_calls == 1
    assert harness.key_input.subscriber_count == 0
    assert harness.flags.values == [True, False]


@pytest.mark.asyncio
async def test_command_without_args_receives_empty_list() -> None:
    harness = Harness((KeyBinding(("a",), command="foo"),))

    await harness.leader.enable()
    await harness.key_input.feed("a")

    assert harness.executor.calls == [("foo", [])]


@pytest.mark.asyncio
async def test_invalid_key_ends_session_without_dispatch() -> None:
    harness = Harness(SCENARIO)

    await harness.leader.enable()
    await harness.key_input.feed("z")

    assert harness.executor.calls == []
    assert harness.leader.is_active is False
    assert harness.presenter.hide_calls == 1
    assert harness.key_input.subscriber_count == 0
    assert harness.flags.values == [True, False]


@pytest.mark.asyncio
async def test_invalid_key_mid_sequence_ends_session() -> None:
    harness = Harness(SCENARIO)

    await harness.leader.enable()
    await harness.key_input.feed("a")
    await harness.key_input.feed("a")

    assert harness.executor.calls == []
    assert harness.leader.is_active is False


@pytest.mark.asyncio
async def test_enable_is_idempotent() -> None:
    harness = Harness(SCENARIO)

    await harness.leader.enable()
    await harness.leader.enable()

    assert harness.key_input.subscribe_calls == 1
    assert harness.presenter.shown == [["a"]]
    assert harness.flags.values == [True]


@pytest.mark.asyncio
async def test_disable_when_idle_has_no_side_effects() -> None:
    harness = Harness(SCENARIO)

    await harness.leader.disable()

    assert harness.key_input.unsubscribe_calls == 0
    assert harness.presenter.hide_calls == 0
    assert harness.flags.values == []


@pytest.mark.asyncio
async def test_disable_tears_down_but_keeps_presenter() -> None:
    harness = Harness(SCENARIO)

    await harness.leader.enable()
    await harness.leader.disable()
    await harness.leader.disable()

    assert harness.key_input.unsubscribe_calls == 1
    assert harness.presenter.hide_calls == 1
    assert harness.presenter.dispose_calls == 0
    assert harness.flags.values == [True, False]
    assert harness.leader.traverser is None


@pytest.mark.asyncio
async def test_each_session_starts_from_root() -> None:
    harness = Harness(SCENARIO)

    await harness.leader.enable()
    await harness.key_input.feed("a")
    await harness.leader.disable()
    await harness.leader.enable()

    assert harness.presenter.shown[-1] == ["a"]
    traverser = harness.leader.traverser
    assert traverser is not None
    assert traverser.path == ()


@pytest.mark.asyncio
async def test_keys_fed_while_idle_are_ignored() -> None:
    harness = Harness(SCENARIO)

    delivered = await harness.key_input.feed("a")

    assert delivered is False
    assert harness.presenter.shown == []


@pytest.mark.asyncio
@pytest.mark.parametrize("active", [True, False])
async def test_dispose_releases_presenter_once(active: bool) -> None:
    harness = Harness(SCENARIO)
    if active:
        await harness.leader.enable()

    await harness.leader.dispose()
    await harness.leader.dispose()

    assert harness.presenter.dispose_calls == 1
    assert harness.leader.is_active is False
    assert harness.leader.is_disposed is True
    assert harness.presenter.hide_calls == (1 if active else 0)
    assert harness.key_input.subscriber_count == 0


@pytest.mark.asyncio
async def test_enable_after_dispose_is_rejected() -> None:
    harness = Harness(SCENARIO)
    await harness.leader.dispose()

    with pytest.raises(SessionDisposedError):
        await harness.leader.enable()


@pytest.mark.asyncio
async def test_command_failure_still_tears_down() -> None:
    harness = Harness(SCENARIO, fail=True)

    await harness.leader.enable()
    await harness.key_input.feed("a")
    with pytest.raises(RuntimeError, match="command failed"):
        await harness.key_input.feed("b")

    assert harness.leader.is_active is False
    assert harness.presenter.hide_calls == 1
    assert harness.key_input.subscriber_count == 0


@pytest.mark.asyncio
async def test_enable_rolls_back_when_flag_fails() -> None:
    class FailingFlags:
        async def set_active(self, active: bool) -> None:
            raise RuntimeError("no context")

    presenter = RecordingPresenter()
    key_input = RecordingKeyInput()
    leader = LeaderMode(
        KeyTree(SCENARIO),
        presenter,
        key_input=key_input,
        executor=RecordingExecutor(),
        context=FailingFlags(),
    )

    with pytest.raises(RuntimeError, match="no context"):
        await leader.enable()

    assert leader.is_active is False
    assert key_input.subscriber_count == 0
    assert presenter.shown == []


@pytest.mark.asyncio
async def test_update_tree_applies_to_next_session() -> None:
    harness = Harness(SCENARIO)
    await harness.leader.enable()

    harness.leader.update_tree(KeyTree([KeyBinding(("q",), command="quit")]))
    await harness.key_input.feed("a")
    assert harness.presenter.shown[-1] == ["b"]

    await harness.leader.disable()
    await harness.leader.enable()
    assert harness.presenter.shown[-1] == ["q"]


@pytest.mark.asyncio
async def test_works_with_default_collaborators() -> None:
    seen: List[str] = []
    registry = CommandRegistry()
    registry.register("greet", lambda who: seen.append(f"hello {who}"))
    flags = ContextFlags()
    hub = KeyInputHub()
    presenter = RecordingPresenter()
    leader = LeaderMode(
        KeyTree([KeyBinding(("g", "h"), command="greet", args=("world",))]),
        presenter,
        key_input=hub,
        executor=registry,
        context=flags,
    )
    register_leader_commands(registry, leader)

    await registry.execute(ENTER_LEADER_MODE_COMMAND)
    assert flags.active is True

    await hub.feed("g")
    await hub.feed("h")

    assert seen == ["hello world"]
    assert flags.active is False

    await registry.execute(ENTER_LEADER_MODE_COMMAND)
    await registry.execute(EXIT_LEADER_MODE_COMMAND)
    assert flags.active is False
    assert leader.is_active is False


@pytest.mark.asyncio
async def test_unknown_command_propagates_after_teardown() -> None:
    flags = ContextFlags()
    hub = KeyInputHub()
    leader = LeaderMode(
        KeyTree([KeyBinding(("x",), command="missing")]),
        RecordingPresenter(),
        key_input=hub,
        executor=CommandRegistry(),
        context=flags,
    )

    await leader.enable()
    with pytest.raises(UnknownCommandError):
        await hub.feed("x")

    assert leader.is_active is False
    assert flags.active is False


class SlowActivationFlags:
    def __init__(self) -> None:
        self.calls: List[bool] = []
        self.value = False

    async def set_active(self, active: bool) -> None:
        self.calls.append(active)
        if active:
            await asyncio.sleep(0.01)
        self.value = active


@pytest.mark.asyncio
async def test_disable_during_enable_leaves_flag_cleared() -> None:
    presenter = RecordingPresenter()
    key_input = RecordingKeyInput()
    flags = SlowActivationFlags()
    leader = LeaderMode(
        KeyTree(SCENARIO),
        presenter,
        key_input=key_input,
        executor=RecordingExecutor(),
        context=flags,
    )

    await asyncio.gather(leader.enable(), leader.disable())

    assert leader.is_active is False
    assert key_input.subscriber_count == 0
    assert presenter.shown == []
    assert flags.value is False

    await leader.enable()
    assert flags.value is True
    assert presenter.shown == [["a"]]
