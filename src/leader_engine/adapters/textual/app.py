"""Executable Textual app hosting a leader-key session."""

from __future__ import annotations

import argparse
from typing import Any, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use leader_engine.adapters.textual.app"
    ) from exc

from leader_engine.config import (
    LeaderConfig,
    create_hint_presenter,
    default_config_path,
    load_configuration_file,
)
from leader_engine.keymaps import KeyBinding, KeyTree
from leader_engine.runtime import telemetry
from leader_engine.session import (
    ENTER_LEADER_MODE_COMMAND,
    EXIT_LEADER_MODE_COMMAND,
    CommandRegistry,
    ContextFlags,
    KeyInputHub,
    LeaderMode,
    register_leader_commands,
)

from .presenter import StaticHintPresenter

DEMO_KEYBINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding(("w",), label="+window"),
    KeyBinding(("w", "d"), command="app.toggle_dark", label="Toggle dark mode"),
    KeyBinding(("w", "c"), command="app.clear", label="Clear output"),
    KeyBinding(("g",), label="+greet"),
    KeyBinding(("g", "h"), command="app.echo", args=("Hello!",), label="Say hello"),
    KeyBinding(("g", "b"), command="app.bell"),
    KeyBinding(("q",), command="app.quit", label="Quit"),
)


def key_token(event: events.Key) -> str:
    """Printable characters map to themselves, everything else to its key name."""

    if event.character and event.is_printable:
        return event.character
    return event.key


class LeaderApp(App[None]):
    """Minimal Textual UI: ``space`` starts a leader sequence, ``escape`` aborts."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#output {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
	}

	#leader-hints {
		height: auto;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    LEADER_KEY = "space"
    CANCEL_KEY = "escape"

    def __init__(self, config: Optional[LeaderConfig] = None) -> None:
        super().__init__()
        self.config = config or LeaderConfig(keybindings=DEMO_KEYBINDINGS)
        self.commands = CommandRegistry(logger_name="leader_engine.commands")
        self.key_input = KeyInputHub()
        self.flags = ContextFlags()
        self.leader_mode: LeaderMode | None = None
        self._output: Static | None = None
        self._lines: list[str] = []

    def compose(self) -> ComposeResult:
        yield Header()
        self._output = Static("Press <space> to start a leader sequence.", id="output")
        yield self._output
        hints = Static("", id="leader-hints")
        hints.display = False
        yield hints
        yield Footer()

    async def on_mount(self) -> None:
        tree = KeyTree(self.config.keybindings, logger_name="leader_engine.keymaps")
        hints = self.query_one("#leader-hints", Static)
        presenter = create_hint_presenter(
            self.config, lambda: StaticHintPresenter(hints)
        )
        self.leader_mode = LeaderMode(
            tree,
            presenter,
            key_input=self.key_input,
            executor=self.commands,
            context=self.flags,
        )
        register_leader_commands(self.commands, self.leader_mode)
        self._register_app_commands()
        self.flags.subscribe(self._on_flag_change)

    async def on_unmount(self) -> None:
        if self.leader_mode is not None:
            await self.leader_mode.dispose()

    async def on_key(self, event: events.Key) -> None:
        if self.flags.active:
            event.stop()
            event.prevent_default()
            if event.key == self.CANCEL_KEY:
                await self.commands.execute(EXIT_LEADER_MODE_COMMAND)
                return
            await self.key_input.feed(key_token(event))
            return

        if event.key == self.LEADER_KEY:
            event.stop()
            event.prevent_default()
            await self.commands.execute(ENTER_LEADER_MODE_COMMAND)

    def _register_app_commands(self) -> None:
        self.commands.register("app.echo", self._echo)
        self.commands.register("app.clear", self._clear)
        self.commands.register("app.bell", self.bell)
        self.commands.register("app.quit", self.exit)
        self.commands.register("app.toggle_dark", self._toggle_dark)
        self.commands.register("app.notify", self._notify)

    def _echo(self, *parts: Any) -> None:
        self._lines.append(" ".join(str(part) for part in parts))
        if self._output is not None:
            self._output.update("\n".join(self._lines))

    def _clear(self) -> None:
        self._lines.clear()
        if self._output is not None:
            self._output.update("")

    def _notify(self, message: str = "", *_rest: Any) -> None:
        self.notify(str(message))

    def _toggle_dark(self) -> None:
        self.theme = "textual-light" if self.theme == "textual-dark" else "textual-dark"

    def _on_flag_change(self, key: str, value: bool) -> None:
        self.sub_title = "LEADER" if value else ""


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the leader-key Textual demo.")
    parser.add_argument(
        "--config",
        default=None,
        help="JSON file with 'keybindings' and 'showKeyGuide' (default: $LEADER_ENGINE_CONFIG)",
    )
    parser.add_argument(
        "--log-preset",
        default="quiet",
        choices=telemetry.PRESETS,
        help="Telemetry preset (default: quiet, keeps the terminal clean)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    path = args.config or default_config_path()
    config = load_configuration_file(path) if path else None
    app = LeaderApp(config)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
