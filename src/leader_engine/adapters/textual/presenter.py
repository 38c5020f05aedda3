"""Hint presenter rendering into a Textual ``Static`` widget."""

from __future__ import annotations

from typing import Sequence

from rich.text import Text
from textual.widgets import Static

from leader_engine.keymaps import KeyOption
from leader_engine.session.hints import format_options


class StaticHintPresenter:
    """Shows hints in a ``Static`` and hides it between sessions."""

    def __init__(self, widget: Static) -> None:
        self._widget = widget
        self._released = False

    @property
    def widget(self) -> Static:
        return self._widget

    @property
    def released(self) -> bool:
        return self._released

    def show(self, options: Sequence[KeyOption]) -> None:
        if self._released:
            return
        # plain Text: "[key]" must not be parsed as console markup
        self._widget.update(Text(format_options(options)))
        self._widget.display = True

    def hide(self) -> None:
        if self._released:
            return
        self._widget.update("")
        self._widget.display = False

    def dispose_resource(self) -> None:
        if self._released:
            return
        self._released = True
        if getattr(self._widget, "is_attached", True):
            self._widget.remove()


__all__ = ["StaticHintPresenter"]
