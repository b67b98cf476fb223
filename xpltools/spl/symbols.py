"""Symbolic constants and register aliases of an SPL program."""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .nodes import Node, NodeType

CONSTANT_NAME_MAX_LEN = 30
DEFAULT_CONSTANTS_FILE = "splconstants.cfg"

_WORD = re.compile(r"\s*(\S+)")
_INT = re.compile(r"\s*([+-]?\d+)")


class CompileError(Exception):
    """Raised when an SPL program cannot be compiled."""


@dataclass
class Constant:
    """A symbolic constant."""

    name: str
    value: int


@dataclass
class Alias:
    """A name given to a register inside a block."""

    name: str
    reg: int
    depth: int


class Environment:
    """Constants and block-scoped register aliases."""

    def __init__(self) -> None:
        self.constants: List[Constant] = []
        self.aliases: List[Alias] = []
        self.depth = 0
        self.linecount = 0

    def _error(self, message: str) -> CompileError:
        return CompileError(f"{self.linecount}: {message}")

    def lookup_constant(self, name: str) -> Optional[Constant]:
        return next((c for c in reversed(self.constants) if c.name == name), None)

    def lookup_alias(self, name: str) -> Optional[Alias]:
        return next((a for a in reversed(self.aliases) if a.name == name), None)

    def lookup_alias_reg(self, reg: int) -> Optional[Alias]:
        return next((a for a in reversed(self.aliases) if a.reg == reg), None)

    def push_alias(self, name: str, reg: int) -> None:
        """Name a register in the current block; a register has one name per block."""
        if self.lookup_constant(name) is not None:
            raise self._error(f"Alias name {name} already used as symbolic contant!!")
        existing = self.lookup_alias(name)
        if existing is not None and existing.depth == self.depth:
            raise self._error(f"Alias name {name} already used as in the current block!!")
        same_reg = self.lookup_alias_reg(reg)
        if same_reg is not None and same_reg.depth == self.depth:
            same_reg.name = name
        else:
            self.aliases.append(Alias(name, reg, self.depth))

    def pop_alias(self) -> None:
        """Drop the aliases declared in the current block."""
        while self.aliases and self.aliases[-1].depth == self.depth:
            self.aliases.pop()

    @contextmanager
    def block(self) -> Iterator["Environment"]:
        """Enter a nested block; its aliases are dropped on leaving it."""
        self.depth += 1
        try:
            yield self
        finally:
            self.pop_alias()
            self.depth -= 1

    def insert_constant(self, name: str, value: int) -> Constant:
        if self.lookup_constant(name) is not None:
            raise self._error(f"Multiple Definitions for constant {name}!!")
        constant = Constant(name, value)
        self.constants.append(constant)
        return constant

    def load_constants(self, path=DEFAULT_CONSTANTS_FILE) -> None:
        """Read ``name value`` pairs until the first malformed pair."""
        try:
            with open(path, encoding="utf-8") as handle:
                text = handle.read()
        except OSError as exc:
            raise CompileError(f"Unable to open {path} file!") from exc
        pos = 0
        while True:
            word = _WORD.match(text, pos)
            if word is None:
                break
            number = _INT.match(text, word.end())
            if number is None:
                break
            self.insert_constant(word.group(1), int(number.group(1)))
            pos = number.end()

    def substitute_id(self, node: Node) -> Node:
        """Turn an identifier node into a number or register node."""
        constant = self.lookup_constant(node.name)
        if constant is not None:
            node.nodetype = NodeType.NUM
            node.name = None
            node.value = constant.value
            return node
        alias = self.lookup_alias(node.name)
        if alias is None:
            raise self._error(f"Unknown identifier {node.name} used!!")
        node.nodetype = NodeType.REG
        node.name = None
        node.value = alias.reg
        return node