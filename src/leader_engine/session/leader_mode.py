"""Leader mode: the session state machine driving a tree traverser."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from leader_engine.errors import SessionDisposedError
from leader_engine.keymaps import KeyTree, TreeTraverser
from leader_engine.runtime import telemetry

from .collaborators import (
    ActiveFlag,
    CommandExecutor,
    CommandRegistry,
    KeyInputSource,
    Subscription,
)
from .hints import HintPresenter

ENTER_LEADER_MODE_COMMAND = "leader.enter"
EXIT_LEADER_MODE_COMMAND = "leader.exit"


@dataclass(frozen=True, slots=True)
class ActiveSession:
    """The traverser and key subscription owned by one running session."""

    traverser: TreeTraverser
    subscription: Subscription


class LeaderMode:
    """Owns at most one leader session and tears it down on every exit path.

    ``Idle -> Active`` on :meth:`enable`; back to ``Idle`` after a terminal key
    (command dispatched), an invalid key, or :meth:`disable`. :meth:`dispose`
    moves to ``Disposed`` for good and releases the hint presenter.
    """

    def __init__(
        self,
        tree: KeyTree,
        presenter: HintPresenter,
        *,
        key_input: KeyInputSource,
        executor: CommandExecutor,
        context: ActiveFlag,
        logger_name: str | None = None,
    ) -> None:
        self._tree = tree
        self._presenter = presenter
        self._key_input = key_input
        self._executor = executor
        self._context = context
        self._logger_name = logger_name or "leader_engine.session"
        self._session: Optional[ActiveSession] = None
        self._disposed = False

    @property
    def tree(self) -> KeyTree:
        return self._tree

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def traverser(self) -> Optional[TreeTraverser]:
        return self._session.traverser if self._session else None

    def update_tree(self, tree: KeyTree) -> None:
        """Use ``tree`` for the next session; a running one keeps its traverser."""

        if self._disposed:
            raise SessionDisposedError("leader mode has been disposed")
        self._tree = tree

    async def enable(self) -> None:
        if self._disposed:
            raise SessionDisposedError("leader mode has been disposed")
        if self._session is not None:
            return

        with telemetry.span(
            "session::enable",
            logger_name=self._logger_name,
            component="session",
        ):
            traverser = self._tree.get_traverser()
            subscription = self._key_input.subscribe(self._handle_key)
            session = ActiveSession(traverser=traverser, subscription=subscription)
            self._session = session
            flagged = False
            try:
                await self._context.set_active(True)
                flagged = True
                if self._session is not session:
                    # torn down while the flag was being set; its clear may
                    # have landed before ours, so clear again
                    if self._session is None:
                        await self._context.set_active(False)
                    return
                self._presenter.show(traverser.get_current_options())
            except Exception:
                if self._session is session:
                    self._session = None
                    self._key_input.unsubscribe(subscription)
                    if flagged:
                        await self._context.set_active(False)
                raise

        telemetry.record_event(
            "session.enabled",
            level="debug",
            data={"options": len(traverser.get_current_options())},
            logger_name=self._logger_name,
        )

    async def disable(self) -> None:
        session = self._session
        if session is None:
            return
        await self._teardown(session, reason="disable")

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        try:
            await self.disable()
        finally:
            self._presenter.dispose_resource()

    async def _handle_key(self, token: str) -> None:
        session = self._session
        if session is None:
            return

        traverser = session.traverser
        with telemetry.span(
            "session::key",
            logger_name=self._logger_name,
            component="session",
            metadata={"key": token},
        ) as handle:
            result = traverser.choose_option(token)
            if not result.ok:
                handle.add_metadata("status", "invalid")
                telemetry.record_event(
                    "session.invalid_key",
                    level="debug",
                    data={"key": token, "path": " ".join(traverser.path)},
                    logger_name=self._logger_name,
                )
                await self._teardown(session, reason="invalid_key")
                return

            if result.terminal:
                binding = traverser.get_terminal_binding()
                handle.add_metadata("status", "terminal")
                handle.add_metadata("command", binding.command)
                try:
                    await self._executor.execute(
                        traverser.get_command(), list(traverser.get_args())
                    )
                finally:
                    await self._teardown(session, reason="command")
                return

            handle.add_metadata("status", "pending")
            self._presenter.show(traverser.get_current_options())

    async def _teardown(self, session: ActiveSession, *, reason: str) -> None:
        if self._session is not session:
            return
        self._session = None

        with telemetry.span(
            "session::disable",
            logger_name=self._logger_name,
            component="session",
            metadata={"reason": reason},
        ):
            self._key_input.unsubscribe(session.subscription)
            try:
                await self._context.set_active(False)
            finally:
                self._presenter.hide()

        telemetry.record_event(
            "session.disabled",
            level="debug",
            data={"reason": reason, "path": " ".join(session.traverser.path)},
            logger_name=self._logger_name,
        )


def register_leader_commands(registry: CommandRegistry, leader_mode: LeaderMode) -> None:
    """Expose enter/exit of leader mode as commands a host can bind to keys."""

    registry.register(ENTER_LEADER_MODE_COMMAND, leader_mode.enable)
    registry.register(EXIT_LEADER_MODE_COMMAND, leader_mode.disable)


__all__ = [
    "ENTER_LEADER_MODE_COMMAND",
    "EXIT_LEADER_MODE_COMMAND",
    "ActiveSession",
    "LeaderMode",
    "register_leader_commands",
]
