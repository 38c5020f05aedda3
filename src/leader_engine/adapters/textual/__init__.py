"""Textual integration: a widget hint presenter and a demo app."""

from .presenter import StaticHintPresenter

__all__ = ["StaticHintPresenter"]
