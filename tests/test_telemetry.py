from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Tuple

import pytest

from leader_engine.runtime import telemetry


class FakeConfig:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any]] = []

    def __getattr__(self, name: str) -> Any:
        return lambda value: self.calls.append((name, value))


class FakeLogger:
    def __init__(self) -> None:
        self.records: List[Tuple[str, str, list]] = []
        self.context: dict = {}
        self.profiled: List[str] = []

    def info_with(self, message: str, pairs: list) -> None:
        self.records.append(("info", message, pairs))

    def error_with(self, message: str, pairs: list) -> None:
        self.records.append(("error", message, pairs))

    def add_context(self, key: str, value: str) -> None:
        self.context[key] = value

    def remove_context(self, key: str) -> None:
        del self.context[key]

    @contextmanager
    def track_component(self, component: str) -> Iterator[None]:
        yield

    @contextmanager
    def profile(self, name: str) -> Iterator[None]:
        self.profiled.append(name)
        yield


class FakeTelelog:
    Config = FakeConfig

    def __init__(self) -> None:
        self.logger = FakeLogger()
        outer = self

        class Logger:
            @staticmethod
            def with_config(name: str, config: Any) -> FakeLogger:
                return outer.logger

        self.Logger = Logger


@pytest.fixture
def fake_telelog(monkeypatch: pytest.MonkeyPatch) -> FakeTelelog:
    fake = FakeTelelog()
    monkeypatch.setattr(telemetry, "tl", fake)
    monkeypatch.setattr(telemetry, "_config", None)
    monkeypatch.setattr(telemetry, "_loggers", {})
    return fake


def test_unknown_preset_is_rejected(fake_telelog: FakeTelelog) -> None:
    with pytest.raises(ValueError, match="Unknown preset"):
        telemetry.configure(preset="verbose")


def test_config_and_preset_are_exclusive(fake_telelog: FakeTelelog) -> None:
    with pytest.raises(ValueError, match="not both"):
        telemetry.configure(config=FakeConfig(), preset="quiet")


def test_quiet_preset_keeps_console_off(fake_telelog: FakeTelelog) -> None:
    telemetry.configure(preset="quiet")

    calls = telemetry._config.calls  # type: ignore[union-attr]
    assert ("with_min_level", "WARNING") in calls
    assert ("with_console_output", False) in calls


def test_record_event_sends_structured_pairs(fake_telelog: FakeTelelog) -> None:
    telemetry.record_event("session.invalid_key", data={"key": "z", "path": ["a"]})

    assert fake_telelog.logger.records == [
        (
            "info",
            "event::session.invalid_key",
            [("event", "session.invalid_key"), ("key", "z"), ("path", "['a']")],
        )
    ]


def test_span_scopes_context_and_reports_failure(fake_telelog: FakeTelelog) -> None:
    logger = fake_telelog.logger

    with pytest.raises(RuntimeError, match="boom"):
        with telemetry.span("work", component="keymaps", metadata={"n": 2}) as handle:
            assert logger.context == {"n": "2"}
            handle.add_metadata("step", 1)
            raise RuntimeError("boom")

    assert logger.context == {}
    assert logger.profiled == ["work"]
    assert logger.records == [
        (
            "error",
            "span::fail",
            [
                ("span", "work"),
                ("n", "2"),
                ("component", "keymaps"),
                ("step", "1"),
                ("reason", "boom"),
            ],
        )
    ]
