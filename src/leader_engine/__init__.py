"""Leader-key sequence engine: key trie, traverser, and session state machine."""

__all__ = [
    "adapters",
    "config",
    "errors",
    "keymaps",
    "runtime",
    "session",
]

__version__ = "0.1.0"
