"""Leader session state machine, its collaborators, and hint presenters."""

from .collaborators import (
    IS_ACTIVE_FLAG,
    ActiveFlag,
    CommandExecutor,
    CommandRegistry,
    ContextFlags,
    KeyInputHub,
    KeyInputSource,
    Subscription,
)
from .hints import (
    HintPresenter,
    NullHintPresenter,
    StatusHintPresenter,
    format_option,
    format_options,
)
from .leader_mode import (
    ENTER_LEADER_MODE_COMMAND,
    EXIT_LEADER_MODE_COMMAND,
    ActiveSession,
    LeaderMode,
    register_leader_commands,
)

__all__ = [
    "IS_ACTIVE_FLAG",
    "ActiveFlag",
    "CommandExecutor",
    "CommandRegistry",
    "ContextFlags",
    "KeyInputHub",
    "KeyInputSource",
    "Subscription",
    "HintPresenter",
    "NullHintPresenter",
    "StatusHintPresenter",
    "format_option",
    "format_options",
    "ENTER_LEADER_MODE_COMMAND",
    "EXIT_LEADER_MODE_COMMAND",
    "ActiveSession",
    "LeaderMode",
    "register_leader_commands",
]
