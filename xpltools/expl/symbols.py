"""Global, local, parameter and type symbol tables for ExpL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

STACK_BASE = 4096


class SymbolError(Exception):
    """Raised when a symbol is declared twice."""


@dataclass(eq=False)
class Field:
    """A field of a user defined type."""

    name: str
    type: Optional["TypeEntry"]
    field_index: int = 0


@dataclass(eq=False)
class TypeEntry:
    """An entry of the type table."""

    name: str
    size: int = 0
    fields: List[Field] = field(default_factory=list)


@dataclass(eq=False)
class Param:
    """A formal parameter of a function."""

    name: str
    type: Optional[TypeEntry]
    amp: int = 0


@dataclass(eq=False)
class GlobalSymbol:
    """A global variable, array or function."""

    name: str
    type: Optional[TypeEntry]
    size: int
    binding: int
    paramlist: List[Param] = field(default_factory=list)
    flabel: int = 0


@dataclass(eq=False)
class LocalSymbol:
    """A local variable of a function."""

    name: str
    type: Optional[TypeEntry]
    binding: int


def _find(entries, name):
    return next((entry for entry in entries if entry.name == name), None)


def flookup(name: str, fields: Optional[Iterable[Field]]) -> Optional[Field]:
    """Find the field called ``name`` in ``fields``."""
    return _find(fields or (), name)


class SymbolTable:
    """All symbol tables of one compilation, with storage allocation."""

    def __init__(self, stack_base: int = STACK_BASE) -> None:
        self.total_count = stack_base
        self.function_count = 0
        self.globals: List[GlobalSymbol] = []
        self.locals: List[LocalSymbol] = []
        self.params: List[Param] = []
        self.types: List[TypeEntry] = []
        self.pending_fields: List[Field] = []

    def glookup(self, name: str) -> Optional[GlobalSymbol]:
        return _find(self.globals, name)

    def ginstall(self, name, type, size, paramlist=None) -> GlobalSymbol:
        """Declare a global; a size of -1 declares a function."""
        if self.glookup(name) is not None:
            raise SymbolError(f'Variable re-initialized "{name}"')
        if size == -1:
            binding = self.function_count
            self.function_count += 1
        else:
            binding = self.total_count
            self.total_count += size
        symbol = GlobalSymbol(name, type, size, binding, list(paramlist or []))
        self.globals.append(symbol)
        return symbol

    def llookup(self, name: str) -> Optional[LocalSymbol]:
        return _find(self.locals, name)

    def linstall(self, name, type) -> LocalSymbol:
        symbol = LocalSymbol(name, type, self.total_count)
        self.total_count += 1
        self.locals.append(symbol)
        return symbol

    def plookup(self, name: str) -> Optional[Param]:
        return _find(self.params, name)

    def pinstall(self, name, type) -> Param:
        param = Param(name, type)
        self.params.append(param)
        return param

    def tlookup(self, name: str) -> Optional[TypeEntry]:
        return _find(self.types, name)

    def tinstall(self, name, fields=None) -> TypeEntry:
        """Declare a type; fields default to those collected by finstall."""
        entry = TypeEntry(name)
        self.types.append(entry)
        field_list = list(self.pending_fields if fields is None else fields)
        dummy = self.tlookup("dummy")
        for index, item in enumerate(field_list):
            if item.type is dummy:
                item.type = self.tlookup(name)
            item.field_index = index
        entry.fields = field_list
        entry.size = len(field_list)
        self.pending_fields = []
        return entry

    def finstall(self, type, name) -> Field:
        item = Field(name, type)
        self.pending_fields.append(item)
        return item

    def format_globals(self) -> str:
        return "".join(
            f"{sym.name}----{sym.type.name if sym.type else None}-----{sym.binding}\n"
            for sym in self.globals
        )