"""Mapping from assembly labels to addresses."""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple


class LabelTable:
    """Ordered label-to-address table; the first entry for a name wins."""

    def __init__(self) -> None:
        self._entries: List[Tuple[str, int]] = []

    def append(self, label: str, addr: int) -> None:
        self._entries.append((label, addr))

    def find(self, name: str) -> Optional[int]:
        """Return the address of ``name``, or None if it is unknown."""
        return next((addr for label, addr in self._entries if label == name), None)

    def format(self) -> str:
        return "".join(f"{label} : {addr}\n" for label, addr in self._entries)

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return any(label == name for label, _ in self._entries)