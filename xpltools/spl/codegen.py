"""Complete SPL code generator: statements, expressions, labels, calls and jumps."""

from __future__ import annotations

import sys
from typing import Optional

from .labels import LabelManager
from .nodes import Node, NodeType
from .stmtgen import StatementGenerator
from .symbols import CompileError


class CodeGenerator(StatementGenerator):
    """Emits assembly for a whole SPL program tree.

    Label definitions, calls and jumps are written without counting them as
    output lines, as the assembler resolves them itself.
    """

    _HANDLERS = {
        **StatementGenerator._HANDLERS,
        NodeType.LABEL_DEF: "_label_def",
        NodeType.CALL: "_call",
        NodeType.GOTO: "_goto",
    }

    def __init__(self, labels: Optional[LabelManager] = None) -> None:
        super().__init__(labels)

    def generate(self, node: Optional[Node]) -> None:
        """Emit code for any node of an SPL program."""
        super().generate(node)

    def _label_def(self, node: Node) -> None:
        self._mark(node.ptr1.name)

    def _call(self, node: Node) -> None:
        target = node.ptr1
        if target.nodetype == NodeType.NUM:
            self._uncounted(f"CALL {target.value}")
            return
        if self.labels.get(target.name) is None:
            raise CompileError(f"{node.value}: Label '{target.name}' is not declared")
        self._uncounted(f"CALL {target.name}")

    def _goto(self, node: Node) -> None:
        target = node.ptr1
        if target.nodetype == NodeType.NUM:
            self._uncounted(f"JMP {target.value}")
            return
        if self.labels.get(target.name) is None:
            # An undeclared jump target is reported but does not stop compilation.
            print(f"{node.value}: Label '{target.name}' is not declared", file=sys.stderr)
            return
        self._uncounted(f"JMP {target.name}")