"""Assembly generation for SPL statements."""

from __future__ import annotations

from typing import Optional

from .exprgen import ExpressionGenerator
from .labels import LabelManager
from .nodes import Node, NodeType
from .registers import C_REG_BASE, register_name

_TRANSFER = {
    NodeType.LOAD: "LOAD",
    NodeType.LOADI: "LOADI",
    NodeType.STORE: "STORE",
}

_SIMPLE = {
    NodeType.BACKUP: "BACKUP",
    NodeType.RESTORE: "RESTORE",
    NodeType.RETURN: "RET",
    NodeType.IRETURN: "IRET",
    NodeType.HALT: "HALT",
    NodeType.BREAKPOINT: "BRKP",
    NodeType.READ: "IN",
}


class StatementGenerator(ExpressionGenerator):
    """Emits assembly for SPL statements and the expressions within them."""

    _HANDLERS = {
        **ExpressionGenerator._HANDLERS,
        **{nodetype: "_transfer" for nodetype in _TRANSFER},
        **{nodetype: "_simple" for nodetype in _SIMPLE},
        NodeType.STMTLIST: "_statements",
        NodeType.ASSIGN: "_assignment",
        NodeType.IF: "_if",
        NodeType.WHILE: "_while",
        NodeType.BREAK: "_break",
        NodeType.CONTINUE: "_continue",
        NodeType.MULTIPUSH: "_multipush",
        NodeType.MULTIPOP: "_multipop",
        NodeType.READI: "_readi",
        NodeType.PRINT: "_print",
        NodeType.INLINE: "_inline",
        NodeType.ENCRYPT: "_encrypt",
    }

    def __init__(self, labels: Optional[LabelManager] = None) -> None:
        super().__init__()
        self.labels = labels if labels is not None else LabelManager()

    def generate(self, node: Optional[Node]) -> None:
        """Emit code for a statement or an expression."""
        super().generate(node)

    def _uncounted(self, line: str) -> None:
        self._lines.append(f"{line}\n")

    # Statements

    def _statements(self, node: Node) -> None:
        self.generate(node.ptr1)
        self.generate(node.ptr2)

    def _store_value(self, target: str, value: Node) -> None:
        kind = value.nodetype
        if kind == NodeType.REG:
            self.emit(f"MOV {target}, {register_name(value.value)}")
        elif kind == NodeType.NUM:
            self.emit(f"MOV {target}, {value.value}")
        elif kind == NodeType.STRING:
            self.emit(f"MOV {target}, {value.name}")
        elif kind == NodeType.PORT:
            temp = C_REG_BASE + self.regcount
            self.emit(f"PORT R{temp}, {register_name(value.value)}")
            self._uncounted(f"MOV {target}, R{temp}")
        else:
            self.generate(value)
            self.emit(f"MOV {target}, R{self._top()}")
            self.regcount -= 1

    def _assignment(self, node: Node) -> None:
        left = node.ptr1
        if left.nodetype != NodeType.ADDR_EXPR:
            self._store_value(register_name(left.value), node.ptr2)
            return
        address = left.ptr1
        if address.nodetype == NodeType.NUM:
            self._store_value(f"[{address.value}]", node.ptr2)
        elif address.nodetype == NodeType.REG:
            self._store_value(f"[{register_name(address.value)}]", node.ptr2)
        else:
            self.generate(address)
            self._store_value(f"[R{self._top()}]", node.ptr2)
            self.regcount -= 1

    def _jump_if_zero(self, condition: Node, target: str) -> None:
        if condition.nodetype == NodeType.REG:
            self.emit(f"JZ {register_name(condition.value)}, {target}")
        else:
            self.generate(condition)
            self.emit(f"JZ R{self._top()}, {target}")
            self.regcount -= 1

    def _if(self, node: Node) -> None:
        otherwise = self.labels.create()
        end = self.labels.create()
        self._jump_if_zero(node.ptr1, otherwise.name)
        self.generate(node.ptr2)
        self.emit(f"JMP {end.name}")
        self._mark(otherwise.name)
        self.generate(node.ptr3)
        self._mark(end.name)

    def _while(self, node: Node) -> None:
        start = self.labels.create()
        end = self.labels.create()
        self.labels.push_while(start, end)
        self._mark(start.name)
        self._jump_if_zero(node.ptr1, end.name)
        self.generate(node.ptr2)
        self.emit(f"JMP {start.name}")
        self.labels.pop_while()
        self._mark(end.name)

    def _break(self, node: Node) -> None:
        self.emit(f"JMP {self.labels.while_end().name}")

    def _continue(self, node: Node) -> None:
        self.emit(f"JMP {self.labels.while_start().name}")

    def _transfer(self, node: Node) -> None:
        op = _TRANSFER[node.nodetype]
        first, second = node.ptr1, node.ptr2
        if first.nodetype == NodeType.REG:
            reg1 = register_name(first.value)
            if second.nodetype == NodeType.REG:
                self.emit(f"{op} {reg1}, {register_name(second.value)}")
            elif second.nodetype == NodeType.NUM:
                self.emit(f"{op} {reg1}, {second.value}")
            else:
                self.generate(second)
                self.emit(f"{op} {reg1}, R{self._top()}")
                self.regcount -= 1
            return
        self.generate(first)
        if second.nodetype == NodeType.REG:
            self.emit(f"{op} R{self._top()}, {register_name(second.value)}")
        elif second.nodetype == NodeType.NUM:
            self.emit(f"{op} R{self._top()}, {second.value}")
        else:
            self.generate(second)
            self._combine(op)
        self.regcount -= 1

    @staticmethod
    def _register_list(node: Node):
        current = node.ptr1
        while current is not None:
            yield current
            current = current.ptr1

    def _multipush(self, node: Node) -> None:
        for reg in self._register_list(node):
            self.emit(f"PUSH {register_name(reg.value)}")

    def _multipop(self, node: Node) -> None:
        for reg in reversed(list(self._register_list(node))):
            self.emit(f"POP {register_name(reg.value)}")

    def _simple(self, node: Node) -> None:
        self.emit(_SIMPLE[node.nodetype])

    def _readi(self, node: Node) -> None:
        self.emit("INI", f"PORT {register_name(node.ptr1.value)}, P0")

    def _print(self, node: Node) -> None:
        self.generate(node.ptr1)
        self.emit(f"PORT P1, R{self._top()}", "OUT")
        self.regcount -= 1

    def _inline(self, node: Node) -> None:
        self.emit(node.ptr1.name)

    def _encrypt(self, node: Node) -> None:
        self.emit(f"ENCRYPT {register_name(node.ptr1.value)}")