"""Semantic checks and type assignment for ExpL syntax trees."""

from __future__ import annotations

from typing import Optional

from .ast import ASTNode
from .symbols import STACK_BASE, SymbolTable, TypeEntry, flookup


class TypeCheckError(Exception):
    """Raised when a program breaks a typing or declaration rule."""


_MUST_MATCH = {
    "r": "return type do not match with the function return type",
    "i": "Expected boolean , Found value in if",
    "e": "Expected boolean , Found value in if else",
    "w": "Expected boolean , Found value in while",
    "a": "conflict in assignment types",
    "d": "conflict in operand types in DEQ",
    "n": "conflict in operand types in NEQ",
}

_NO_STRING = {
    "+": "PLUS",
    "-": "MINUS",
    "*": "MUL",
    "/": "DIV",
    "%": "MOD",
    "<": "LT",
    ">": "GT",
    "#": "LE",
    "$": "GE",
}

_BOTH_BOOLEAN = {"&": "AND", "|": "OR"}

_NILL_COMPARE = {"=": "DEQNILL", "^": "NEQNILL"}


def _udt_message(free: bool, alloc: bool, field: bool) -> str:
    if free:
        return "cannot free a non udt"
    if alloc:
        return "cannot ALLOC a non udt"
    if field:
        return " . operation over integer/string type is not allowed"
    return "cannot assign null to non-udt"


class TypeChecker:
    """Checks declarations and expressions against a symbol table."""

    def __init__(self, symbols: SymbolTable) -> None:
        self.symbols = symbols

    def _type(self, name: str) -> Optional[TypeEntry]:
        return self.symbols.tlookup(name)

    def _is_primitive(self, type: Optional[TypeEntry]) -> bool:
        return type is self._type("integer") or type is self._type("string")

    def verify(self, node, check_global, check_local, check_param, type=None) -> bool:
        """Reject a declaration whose name is already taken, or a non-integer array."""
        if check_local and self.symbols.llookup(node.name) is not None:
            raise TypeCheckError("Re initialization of variable")
        if check_param and self.symbols.plookup(node.name) is not None:
            raise TypeCheckError("Re initialization of variable in paramlist")
        if check_global and self.symbols.glookup(node.name) is not None:
            raise TypeCheckError("Re initialization of identifier")
        if type is not None and type is not self._type("integer"):
            raise TypeCheckError("arrays of udt and strings are not allowed")
        return True

    def install_array(self, node, size_node, type):
        """Declare a global array of integers or strings."""
        if type is self._type("integer"):
            array_type = self._type("array_integer")
        elif type is self._type("string"):
            array_type = self._type("array_string")
        else:
            raise TypeCheckError("arrays of udt is not allowed")
        return self.symbols.ginstall(node.name, array_type, size_node.value, None)

    def compare(self, t1, t2, op) -> bool:
        """Check two operand types for the operation ``op``."""
        if op == " ":
            return t1 is t2
        if op in _MUST_MATCH:
            if t1 is not t2:
                raise TypeCheckError(_MUST_MATCH[op])
        elif op in _NO_STRING:
            string = self._type("string")
            if t1 is string or t2 is string:
                raise TypeCheckError(f"conflict in operand types in {_NO_STRING[op]}")
        elif op in _BOTH_BOOLEAN:
            boolean = self._type("boolean")
            if not (t1 is boolean and t2 is boolean):
                raise TypeCheckError(f"conflict in operand types in {_BOTH_BOOLEAN[op]}")
        elif op == "!":
            if t1 is not self._type("boolean"):
                raise TypeCheckError("conflict in operand types in NOT")
        elif op in _NILL_COMPARE:
            if self._is_primitive(t1):
                raise TypeCheckError(f"conflict in operand types in {_NILL_COMPARE[op]}")
            if op == "^":
                # A "not nil" comparison is also held to the system call rules.
                self._check_exposcall(t1, t2)
        elif op == "x":
            self._check_exposcall(t1, t2)
        return True

    def _check_exposcall(self, t1, t2) -> None:
        string = self._type("string")
        if t2 is not None:
            if t2 is not string:
                raise TypeCheckError("invalid fun_code type in exposcall")
        elif t1 is string:
            raise TypeCheckError("invalid return type to exposcall")

    def _attach_field(self, node: ASTNode, field_node: ASTNode) -> None:
        fields = node.type.fields if node.type is not None else None
        found = flookup(field_node.name, fields)
        if found is None:
            raise TypeCheckError("Un-declared field variable")
        field_node.type = found.type
        node.ptr2 = field_node

    def assign_type(self, node, field_node=None, udt=False, free=False,
                    alloc=False, field=False, read=False) -> bool:
        """Give an identifier node its type from the local, parameter or global tables."""
        local = self.symbols.llookup(node.name)
        if local is not None:
            if udt and self._is_primitive(local.type):
                raise TypeCheckError(_udt_message(free, alloc, field))
            node.type = local.type
            if field:
                self._attach_field(node, field_node)
            return True

        param = self.symbols.plookup(node.name)
        if param is not None:
            if not read:
                if udt and self._is_primitive(param.type):
                    raise TypeCheckError(_udt_message(free, alloc, field))
                node.type = param.type
                if field:
                    self._attach_field(node, field_node)
            elif param.type is self._type("integer"):
                node.type = self._type("integer")
            elif param.type is self._type("string"):
                node.type = self._type("string")
            return True

        symbol = self.symbols.glookup(node.name)
        if symbol is None:
            raise TypeCheckError(f"Un-declared variable: {node.name}")
        if not read and symbol.type in (self._type("array_integer"), self._type("array_string")):
            if field:
                raise TypeCheckError(f" . operation over arrays not allowed: {node.name}")
            raise TypeCheckError(
                f"conflict in ID NodeType : Expected Variable . Found Array: {node.name}"
            )
        if udt and self._is_primitive(symbol.type):
            raise TypeCheckError(_udt_message(free, alloc, field))
        if not free:
            node.gentry = symbol
        node.type = symbol.type
        if field:
            self._attach_field(node, field_node)
        return True

    def assign_array_type(self, node, index=None, func=False) -> bool:
        """Type an array access, or a function call when ``func`` is set.

        Returns False for a function and True for an array element.
        """
        symbol = self.symbols.glookup(node.name)
        if symbol is None:
            raise TypeCheckError(f"Un-declared identifier: {node.name}")
        if func:
            if symbol.size != -1:
                raise TypeCheckError(
                    f"conflict in ID NodeType : Expected Function: {node.name}"
                )
            node.gentry = symbol
            node.type = symbol.type
            return False
        if self._is_primitive(symbol.type):
            raise TypeCheckError(
                f"conflict in ID NodeType : Expected Variable , Found Array: {node.name}"
            )
        if index is None or index.type is not self._type("integer"):
            raise TypeCheckError(f"Expected value: {node.name}")
        node.gentry = symbol
        if symbol.type is self._type("array_integer"):
            node.type = self._type("integer")
        elif symbol.type is self._type("array_string"):
            node.type = self._type("string")
        return True


def program_header(stack_base: int = STACK_BASE) -> str:
    """Executable header and start-up code that calls MAIN."""
    return (
        "0\n2056\n0\n0\n0\n0\n0\n0\n"
        f"MOV SP,{stack_base - 1}\n"
        f"MOV BP,{stack_base}\n"
        "PUSH R0\n"
        "CALL MAIN\n"
        "INT 10\n"
    )


def get_last(head: ASTNode) -> ASTNode:
    """Follow the ``ptr2`` chain to its last node."""
    while head.ptr2 is not None:
        head = head.ptr2
    return head