"""Label management for SPL code generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


class LabelError(Exception):
    """Raised on a redeclared label or a loop jump outside a loop."""


@dataclass(frozen=True)
class Label:
    """An assembly label."""

    name: str


class LabelManager:
    """Generated labels, declared labels and the stack of enclosing loops."""

    def __init__(self) -> None:
        self._next = 1
        self._declared: Dict[str, Label] = {}
        self._loops: List[Tuple[Label, Label]] = []

    def create(self) -> Label:
        """Make a fresh, unregistered label."""
        label = Label(f"_L{self._next}")
        self._next += 1
        return label

    def add(self, name: str) -> Label:
        """Declare a named label."""
        if name in self._declared:
            raise LabelError(f"Label '{name}' redeclared.")
        label = Label(name)
        self._declared[name] = label
        return label

    def get(self, name: str) -> Optional[Label]:
        return self._declared.get(name)

    def push_while(self, start: Label, end: Label) -> None:
        self._loops.append((start, end))

    def pop_while(self) -> None:
        if not self._loops:
            raise LabelError("no enclosing while loop")
        self._loops.pop()

    def _innermost(self) -> Tuple[Label, Label]:
        if not self._loops:
            raise LabelError("break or continue outside a while loop")
        return self._loops[-1]

    def while_end(self) -> Label:
        return self._innermost()[1]

    def while_start(self) -> Label:
        return self._innermost()[0]