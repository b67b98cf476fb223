"""Abstract syntax tree nodes for ExpL programs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .symbols import GlobalSymbol, LocalSymbol, TypeEntry


class NodeType(IntEnum):
    """Kinds of nodes in an ExpL syntax tree."""

    ASGN = 5
    READ = 6
    WRITE = 7
    IF = 8
    IF_ELSE = 9
    ID = 10
    PLUS = 11
    MINUS = 12
    MUL = 13
    LT = 14
    GT = 15
    DEQ = 16
    NUM = 17
    WHILE = 18
    T = 20
    F = 21
    LE = 22
    GE = 23
    ARRAY = 24
    DIV = 25
    MOD = 26
    NEQ = 27
    ARRAY_ASGN = 28
    ARRAY_READ = 29
    AND = 30
    OR = 31
    NOT = 32
    FUNC = 33
    RET = 36
    BODY = 37
    MAIN = 38
    EXPR = 39
    FIELD = 40
    ALLOC = 41
    FREE = 42
    NILL = 43
    INIT = 44
    BRK = 45
    CONTINUE = 46
    STRVAL = 48
    EXPOSCALL = 49
    BRKP = 50
    NEW = 51
    CLASS_FUNC = 52
    DEFAULT = 100


@dataclass(eq=False)
class ASTNode:
    """A node of the syntax tree; up to three subtrees plus an argument list."""

    type: Optional["TypeEntry"]
    nodetype: int
    name: Optional[str] = None
    value: Union[int, str, None] = None
    arglist: Optional["ASTNode"] = None
    ptr1: Optional["ASTNode"] = None
    ptr2: Optional["ASTNode"] = None
    ptr3: Optional["ASTNode"] = None
    gentry: Optional["GlobalSymbol"] = None
    lentry: Optional["LocalSymbol"] = None


def tree_create(type, nodetype, name=None, value=None, arglist=None,
                ptr1=None, ptr2=None, ptr3=None) -> ASTNode:
    """Build a syntax tree node."""
    return ASTNode(
        type=type,
        nodetype=nodetype,
        name=name,
        value=value,
        arglist=arglist,
        ptr1=ptr1,
        ptr2=ptr2,
        ptr3=ptr3,
    )