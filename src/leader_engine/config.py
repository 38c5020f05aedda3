"""Leader configuration: binding records and hint-guide settings."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from leader_engine.errors import ConfigurationError
from leader_engine.keymaps import KeyBinding
from leader_engine.session.hints import HintPresenter, NullHintPresenter

CONFIG_ENV_VAR = "LEADER_ENGINE_CONFIG"


class ShowKeyGuide(str, Enum):
    """When the hint guide is displayed."""

    ALWAYS = "always"
    NEVER = "never"


@dataclass(frozen=True)
class LeaderConfig:
    keybindings: tuple[KeyBinding, ...] = ()
    show_key_guide: ShowKeyGuide = ShowKeyGuide.ALWAYS
    source: Optional[str] = field(default=None, compare=False)


def _parse_show_key_guide(raw: Any) -> ShowKeyGuide:
    if raw is None:
        return ShowKeyGuide.ALWAYS
    try:
        return ShowKeyGuide(str(raw).lower())
    except ValueError as exc:
        choices = ", ".join(item.value for item in ShowKeyGuide)
        raise ConfigurationError(
            f"showKeyGuide must be one of [{choices}], got {raw!r}"
        ) from exc


def load_configuration(
    data: Mapping[str, Any], *, source: Optional[str] = None
) -> LeaderConfig:
    """Parse ``{"keybindings": [...], "showKeyGuide": ...}`` settings."""

    if not isinstance(data, Mapping):
        raise ConfigurationError(
            f"configuration must be a mapping, got {type(data).__name__}"
        )
    raw_bindings = data.get("keybindings", [])
    if not isinstance(raw_bindings, (list, tuple)):
        raise ConfigurationError("'keybindings' must be a list")

    bindings: list[KeyBinding] = []
    for index, entry in enumerate(raw_bindings):
        try:
            bindings.append(KeyBinding.from_mapping(entry))
        except ConfigurationError as exc:
            raise ConfigurationError(f"keybindings[{index}]: {exc}") from exc

    return LeaderConfig(
        keybindings=tuple(bindings),
        show_key_guide=_parse_show_key_guide(data.get("showKeyGuide")),
        source=source,
    )


def load_configuration_file(path: str | os.PathLike[str]) -> LeaderConfig:
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"cannot read {config_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{config_path} is not valid JSON: {exc}") from exc
    return load_configuration(raw, source=str(config_path))


def default_config_path() -> Optional[Path]:
    raw = os.environ.get(CONFIG_ENV_VAR)
    return Path(raw).expanduser() if raw else None


def create_hint_presenter(
    config: LeaderConfig, factory: Callable[[], HintPresenter]
) -> HintPresenter:
    """Build the guide via ``factory`` unless ``showKeyGuide`` is ``never``."""

    if config.show_key_guide is ShowKeyGuide.NEVER:
        return NullHintPresenter()
    return factory()


__all__ = [
    "CONFIG_ENV_VAR",
    "ShowKeyGuide",
    "LeaderConfig",
    "load_configuration",
    "load_configuration_file",
    "default_config_path",
    "create_hint_presenter",
]
