"""Hint presenters that show the keys legal at the current position."""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence, runtime_checkable

from leader_engine.keymaps import KeyOption


def format_option(option: KeyOption) -> str:
    return f"[{option.key}]: {option.description}"


def format_options(options: Sequence[KeyOption]) -> str:
    return " ".join(format_option(option) for option in options)


@runtime_checkable
class HintPresenter(Protocol):
    def show(self, options: Sequence[KeyOption]) -> None: ...

    def hide(self) -> None: ...

    def dispose_resource(self) -> None: ...


class StatusHintPresenter:
    """Writes formatted hints to a status-line style sink."""

    def __init__(
        self,
        sink: Callable[[str], None],
        *,
        on_dispose: Optional[Callable[[], None]] = None,
    ) -> None:
        self._sink: Optional[Callable[[str], None]] = sink
        self._on_dispose = on_dispose
        self.text = ""
        self.visible = False

    @property
    def disposed(self) -> bool:
        return self._sink is None

    def show(self, options: Sequence[KeyOption]) -> None:
        if self._sink is None:
            return
        self.text = format_options(options)
        self.visible = True
        self._sink(self.text)

    def hide(self) -> None:
        if self._sink is None:
            return
        self.text = ""
        self.visible = False
        self._sink("")

    def dispose_resource(self) -> None:
        if self._sink is None:
            return
        self._sink = None
        self.visible = False
        if self._on_dispose is not None:
            self._on_dispose()


class NullHintPresenter:
    """Presenter for ``showKeyGuide: never``."""

    def show(self, options: Sequence[KeyOption]) -> None:
        del options

    def hide(self) -> None:
        return None

    def dispose_resource(self) -> None:
        return None


__all__ = [
    "HintPresenter",
    "StatusHintPresenter",
    "NullHintPresenter",
    "format_option",
    "format_options",
]
