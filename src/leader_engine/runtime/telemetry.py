"""Structured logging and profiling spans for the leader engine (telelog)."""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "LEADER_ENGINE_"
PRESETS = ("development", "production", "quiet")

_loggers: Dict[str, Any] = {}
_config: Optional[Any] = None


def _setting(name: str) -> Optional[str]:
    return os.getenv(ENV_PREFIX + name)


def _enabled(name: str) -> bool:
    return (_setting(name) or "").lower() in {"1", "true", "yes", "on"}


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _config_from_env() -> Any:
    config = tl.Config()
    config.with_min_level((_setting("LOG_LEVEL") or "INFO").upper())
    console = not _enabled("DISABLE_CONSOLE")
    config.with_console_output(console)
    if console:
        config.with_colored_output(not _enabled("NO_COLOR"))
    if _enabled("LOG_JSON"):
        config.with_json_format(True)
    if _setting("LOG_FILE"):
        config.with_file_output(_setting("LOG_FILE"))
    if _enabled("LOG_BUFFERED"):
        config.with_buffering(True)
        config.with_buffer_size(int(_setting("LOG_BUFFER_SIZE") or "2048"))
    return config


def _config_from_preset(preset: str) -> Any:
    name = preset.lower()
    if name not in PRESETS:
        raise ValueError(f"Unknown preset '{preset}', expected one of {PRESETS}")

    config = tl.Config()
    log_file = _setting("LOG_FILE")
    if name == "development":
        config.with_min_level("DEBUG")
        config.with_console_output(True)
        config.with_colored_output(True)
    elif name == "production":
        config.with_min_level("INFO")
        config.with_console_output(False)
        config.with_file_output(log_file or "leader_engine.log")
        config.with_buffering(True)
    else:
        # a TUI host owns the terminal
        config.with_min_level("WARNING")
        config.with_console_output(False)
        if log_file:
            config.with_file_output(log_file)
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Adopt ``config`` or a named ``preset``; with neither, read ``LEADER_ENGINE_*``."""

    global _config
    if config is not None and preset is not None:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if preset is not None:
        config = _config_from_preset(preset)
    _config = config if config is not None else _config_from_env()
    _loggers.clear()


def get_logger(name: Optional[str] = None) -> Any:
    global _config
    if _config is None:
        _config = _config_from_env()
    logger_name = name or "leader_engine"
    if logger_name not in _loggers:
        _loggers[logger_name] = tl.Logger.with_config(logger_name, _config)
    return _loggers[logger_name]


def _emit(log: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    structured: Optional[Callable[..., None]] = getattr(log, f"{level}_with", None)
    if structured is not None:
        structured(message, [(key, _text(value)) for key, value in payload.items()])
        return
    plain = getattr(log, level, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    _emit(
        get_logger(logger_name),
        level.lower(),
        f"event::{name}",
        {"event": name, **(data or {})},
    )


@dataclass
class SpanHandle:
    """Collects metadata for the running span; reported if the block raises."""

    logger: Any
    name: str
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        _emit(
            self.logger,
            "error",
            "span::fail",
            {"span": self.name, **self.metadata, "reason": reason},
        )


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the block as ``name``; ``metadata`` is logger context while it runs."""

    log = get_logger(logger_name)
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    handle = SpanHandle(logger=log, name=name, metadata=dict(context))
    if component:
        handle.metadata["component"] = component

    with ExitStack() as stack:
        for key, value in context.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if component:
            stack.enter_context(log.track_component(component))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise


__all__ = [
    "PRESETS",
    "SpanHandle",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
