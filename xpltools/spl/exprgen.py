"""Assembly generation for SPL expressions."""

from __future__ import annotations

import sys
from typing import List, Optional

from .nodes import Node, NodeType
from .registers import C_REG_BASE, register_name
from .symbols import CompileError

# Temporaries R16..R19 are available; a fifth one overflows.
MAX_TEMPORARIES = 5


class RegisterOverflow(CompileError):
    """Raised when an expression needs more temporary registers than exist."""


_COMPARE = {
    NodeType.LT: ("LT", "GT"),
    NodeType.GT: ("GT", "LT"),
    NodeType.EQ: ("EQ", "EQ"),
    NodeType.LE: ("LE", "GE"),
    NodeType.GE: ("GE", "LE"),
    NodeType.NE: ("NE", "NE"),
    NodeType.AND: ("MUL", "MUL"),
    NodeType.OR: ("ADD", "ADD"),
}

_ARITH = {
    NodeType.ADD: ("ADD", "ADD"),
    NodeType.MUL: ("MUL", "MUL"),
    NodeType.SUB: ("SUB", None),
    NodeType.DIV: ("DIV", None),
    NodeType.MOD: ("MOD", None),
}


class ExpressionGenerator:
    """Emits assembly for SPL expressions into the temporary registers R16 upwards."""

    _HANDLERS = {
        **{nodetype: "_operation" for nodetype in (*_COMPARE, *_ARITH)},
        NodeType.NOT: "_not",
        NodeType.ADDR_EXPR: "_address",
        NodeType.NUM: "_number",
        NodeType.STRING: "_string",
        NodeType.REG: "_register",
    }

    def __init__(self) -> None:
        self.regcount = 0
        self.out_linecount = 0
        self._lines: List[str] = []

    def emit(self, *args: str) -> None:
        """Append instructions, one per argument, counting them as output lines."""
        for line in args:
            self._lines.append(f"{line}\n")
        self.out_linecount += len(args)

    def _mark(self, name: str) -> None:
        """Place a label; labels do not count as instructions."""
        self._lines.append(f"{name}:\n")

    def code(self) -> str:
        """All assembly emitted so far."""
        return "".join(self._lines)

    def generate(self, node: Optional[Node]) -> None:
        """Emit code for ``node``; an expression leaves its value in a new temporary."""
        if node is None:
            return
        handler = self._HANDLERS.get(node.nodetype)
        if handler is None:
            print(f"Unknown Command {node.nodetype} {node.name}", file=sys.stderr)
            return
        getattr(self, handler)(node)

    # Temporaries

    def _push(self) -> int:
        reg = C_REG_BASE + self.regcount
        self.regcount += 1
        if self.regcount >= MAX_TEMPORARIES:
            raise RegisterOverflow("Register Overflow. Please reduce size of your expression.")
        return reg

    def _top(self) -> int:
        return C_REG_BASE + self.regcount - 1

    def _combine(self, op: str) -> None:
        top = self._top()
        self.emit(f"{op} R{top - 1}, R{top}")
        self.regcount -= 1

    # Expressions

    def _operation(self, node: Node) -> None:
        if node.nodetype in _COMPARE:
            op, swapped = _COMPARE[node.nodetype]
            immediate = False
        else:
            op, swapped = _ARITH[node.nodetype]
            immediate = True
        left, right = node.ptr1, node.ptr2
        if left.nodetype == NodeType.REG:
            reg1 = register_name(left.value)
            if right.nodetype == NodeType.REG:
                reg = self._push()
                self.emit(f"MOV R{reg}, {reg1}", f"{op} R{reg}, {register_name(right.value)}")
            elif immediate and right.nodetype == NodeType.NUM:
                reg = self._push()
                self.emit(f"MOV R{reg}, {reg1}", f"{op} R{reg}, {right.value}")
            elif swapped is not None:
                self.generate(right)
                self.emit(f"{swapped} R{self._top()}, {reg1}")
            else:
                reg = self._push()
                self.emit(f"MOV R{reg}, {reg1}")
                self.generate(right)
                self._combine(op)
        else:
            self.generate(left)
            if right.nodetype == NodeType.REG:
                self.emit(f"{op} R{self._top()}, {register_name(right.value)}")
            elif immediate and right.nodetype == NodeType.NUM:
                self.emit(f"{op} R{self._top()}, {right.value}")
            else:
                self.generate(right)
                self._combine(op)

    def _not(self, node: Node) -> None:
        reg = self._push()
        self.emit(f"MOV R{reg}, 1")
        operand = node.ptr1
        if operand.nodetype == NodeType.REG:
            self.emit(f"SUB R{self._top()}, {register_name(operand.value)}")
        else:
            self.generate(operand)
            self._combine("SUB")

    def _address(self, node: Node) -> None:
        self.generate(node.ptr1)
        top = self._top()
        self.emit(f"MOV R{top}, [R{top}]")

    def _number(self, node: Node) -> None:
        reg = self._push()
        self.emit(f"MOV R{reg}, {node.value}")

    def _string(self, node: Node) -> None:
        reg = self._push()
        self.emit(f"MOV R{reg}, {node.name}")

    def _register(self, node: Node) -> None:
        name = register_name(node.value)
        reg = self._push()
        self.emit(f"MOV R{reg}, {name}")