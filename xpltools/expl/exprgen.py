"""Assembly generation for ExpL expressions."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .ast import ASTNode, NodeType
from .symbols import Field, SymbolTable

MAX_REGISTER = 16
FIRST_LABEL = 4


class CodeGenError(Exception):
    """Raised when code cannot be generated for a tree."""


_BINARY = {
    NodeType.LE: "LE",
    NodeType.GE: "GE",
    NodeType.LT: "LT",
    NodeType.GT: "GT",
    NodeType.DEQ: "EQ",
    NodeType.NEQ: "NE",
    NodeType.PLUS: "ADD",
    NodeType.MINUS: "SUB",
    NodeType.MUL: "MUL",
    NodeType.DIV: "DIV",
    NodeType.MOD: "MOD",
}


def _index(entries: Iterable, name: str) -> int:
    return next(position for position, entry in enumerate(entries) if entry.name == name)


class ExpressionGenerator:
    """Emits stack-machine assembly for expressions, with register and label allocation.

    ``address_only`` asks the next identifier for its address instead of its value;
    ``store_target`` asks the next identifier, field or array element to leave the
    address it was loaded from in its result register.
    """

    _HANDLERS = {
        **{nodetype: "_binary" for nodetype in _BINARY},
        NodeType.AND: "_and",
        NodeType.OR: "_or",
        NodeType.NOT: "_not",
        NodeType.ID: "_identifier",
        NodeType.FIELD: "_field",
        NodeType.ARRAY: "_array",
        NodeType.NUM: "_number",
        NodeType.STRVAL: "_string",
        NodeType.NILL: "_nill",
        NodeType.DEFAULT: "_sequence",
    }

    def __init__(self, symbols: SymbolTable) -> None:
        self.symbols = symbols
        self.counter = -1
        self.label = FIRST_LABEL - 1
        self.address_only = False
        self.store_target = False
        self._lines: List[str] = []

    def get_label(self) -> int:
        self.label += 1
        return self.label

    def get_reg(self) -> int:
        if self.counter >= MAX_REGISTER:
            raise CodeGenError("Running out of registers")
        self.counter += 1
        return self.counter

    def free_reg(self) -> None:
        if self.counter >= 0:
            self.counter -= 1

    def free_all_regs(self) -> None:
        self.counter = -1

    def emit(self, line: str) -> None:
        self._lines.append(f"{line}\n")

    def code(self) -> str:
        """All assembly emitted so far."""
        return "".join(self._lines)

    def generate(self, node: Optional[ASTNode]) -> int:
        """Emit code for ``node`` and return the register holding its value."""
        if node is None:
            return 0
        handler = self._HANDLERS.get(node.nodetype)
        if handler is None:
            raise CodeGenError(f"Unknown node type {node.nodetype}")
        return getattr(self, handler)(node)

    # Operators

    def _binary(self, node: ASTNode) -> int:
        r1 = self.generate(node.ptr1)
        r2 = self.generate(node.ptr2)
        self.emit(f"{_BINARY[node.nodetype]} R{r1},R{r2}")
        self.free_reg()
        return r1

    def _logical(self, node: ASTNode, jump: str, combine: str) -> int:
        r1 = self.generate(node.ptr1)
        r2 = self.get_reg()
        self.emit(f"MOV R{r2},1")
        skip = self.get_label()
        self.emit(f"{jump} R{r1},L{skip}")
        r3 = self.generate(node.ptr2)
        self.emit(f"MOV R{r2},R{r3}")
        self.free_reg()
        self.emit(f"L{skip}:")
        self.emit(f"{combine} R{r1},R{r2}")
        self.free_reg()
        return r1

    def _and(self, node: ASTNode) -> int:
        return self._logical(node, "JZ", "MUL")

    def _or(self, node: ASTNode) -> int:
        return self._logical(node, "JNZ", "ADD")

    def _not(self, node: ASTNode) -> int:
        r1 = self.generate(node.ptr2)
        is_true = self.get_label()
        self.emit(f"JNZ R{r1},L{is_true}")
        self.emit(f"MOV R{r1},1")
        done = self.get_label()
        self.emit(f"JMP L{done}")
        self.emit(f"L{is_true}:")
        self.emit(f"MOV R{r1},0")
        self.emit(f"L{done}:")
        return r1

    def _sequence(self, node: ASTNode) -> int:
        self.generate(node.ptr1)
        self.generate(node.ptr2)
        return 0

    # Leaves

    def _number(self, node: ASTNode) -> int:
        r1 = self.get_reg()
        self.emit(f"MOV R{r1},{node.value}")
        return r1

    def _string(self, node: ASTNode) -> int:
        r1 = self.get_reg()
        self.emit(f'MOV R{r1},"{node.name}"')
        return r1

    def _nill(self, node: ASTNode) -> int:
        r1 = self.get_reg()
        self.emit(f"MOV R{r1},-1")
        return r1

    # Variables

    def _local_address(self, name: str, value_reg: int, addr_reg: int) -> None:
        offset = _index(self.symbols.locals, name)
        self.emit(f"MOV R{addr_reg},BP")
        self.emit(f"MOV R{value_reg},{offset + 1}")
        self.emit(f"ADD R{addr_reg},R{value_reg}")

    def _param_address(self, name: str) -> int:
        """Leave BP-2-(position+1) in a fresh register, which is returned."""
        offset = _index(self.symbols.params, name)
        r2 = self.get_reg()
        self.emit(f"MOV R{r2},BP")
        r3 = self.get_reg()
        self.emit(f"MOV R{r3},2")
        self.emit(f"SUB R{r2},R{r3}")
        self.emit(f"MOV R{r3},{offset + 1}")
        self.emit(f"SUB R{r2},R{r3}")
        self.free_reg()
        return r2

    def _identifier(self, node: ASTNode) -> int:
        r1 = self.get_reg()
        if self.symbols.llookup(node.name) is not None:
            r2 = self.get_reg()
            self._local_address(node.name, r1, r2)
            if self.address_only:
                self.emit(f"MOV R{r1},R{r2}")
                self.address_only = False
            else:
                self.emit(f"MOV R{r1},[R{r2}]")
                if self.store_target:
                    self.emit(f"MOV R{r1},R{r2}")
                    self.store_target = False
            self.free_reg()
        elif self.symbols.plookup(node.name) is not None:
            r2 = self._param_address(node.name)
            self.address_only = False
            self.store_target = False
            self.emit(f"MOV R{r1},[R{r2}]")
            self.free_reg()
        else:
            binding = node.gentry.binding
            if self.address_only:
                self.emit(f"MOV R{r1},{binding}")
                self.address_only = False
            else:
                self.emit(f"MOV R{r1},[{binding}]")
                if self.store_target:
                    self.emit(f"MOV R{r1},{binding}")
                    self.store_target = False
        return r1

    def _walk_fields(self, node: ASTNode, fields: Optional[List[Field]], r1: int, r2: int) -> None:
        current = node
        while current.ptr2 is not None:
            target = current.ptr2.name
            for offset, item in enumerate(fields or (), start=1):
                if item.name == target:
                    r2 = self.get_reg()
                    self.emit(f"MOV R{r2},{offset}")
                    self.emit(f"ADD R{r2},R{r1}")
                    self.emit(f"MOV R{r1},[R{r2}]")
                    self.free_reg()
                    break
            current = current.ptr2
        if self.store_target:
            self.emit(f"MOV R{r1},R{r2}")
            self.store_target = False

    def _field(self, node: ASTNode) -> int:
        r1 = self.get_reg()
        local = self.symbols.llookup(node.name)
        if local is not None:
            r2 = self.get_reg()
            self._local_address(node.name, r1, r2)
            self.emit(f"MOV R{r1},[R{r2}]")
            self.free_reg()
            self._walk_fields(node, local.type.fields if local.type else None, r1, r2)
            return r1
        param = self.symbols.plookup(node.name)
        if param is not None:
            r2 = self._param_address(node.name)
            self.emit(f"MOV R{r1},[R{r2}]")
            self.free_reg()
            self._walk_fields(node, param.type.fields if param.type else None, r1, r2)
            return r1
        symbol = node.gentry
        self.emit(f"MOV R{r1},[{symbol.binding}]")
        self._walk_fields(node, symbol.type.fields if symbol.type else None, r1, r1 + 1)
        return r1

    def _array(self, node: ASTNode) -> int:
        saved = self.store_target
        self.store_target = False
        index = self.generate(node.ptr2)
        self.store_target = saved
        r1 = self.get_reg()
        self.emit(f"MOV R{r1},{node.ptr1.gentry.binding}")
        self.emit(f"ADD R{r1},R{index}")
        self.emit(f"MOV R{index},[R{r1}]")
        if self.store_target:
            self.emit(f"MOV R{index},R{r1}")
            self.store_target = False
        self.free_reg()
        return index