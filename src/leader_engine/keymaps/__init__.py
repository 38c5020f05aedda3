"""Leader keybinding records, the key trie, and its traverser."""

from .models import NO_DESCRIPTION, KeyBinding, KeyOption
from .tree import KeyNode, KeyTree
from .traverser import ChooseResult, TreeTraverser

__all__ = [
    "NO_DESCRIPTION",
    "KeyBinding",
    "KeyOption",
    "KeyNode",
    "KeyTree",
    "ChooseResult",
    "TreeTraverser",
]
