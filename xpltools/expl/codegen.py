"""Assembly generation for ExpL statements."""

from __future__ import annotations

from typing import Optional

from .ast import ASTNode, NodeType
from .callgen import CallGenerator
from .symbols import SymbolTable

# Scratch word used to hand an array element's address to the Read system call.
_READ_ADDRESS = 2044


class CodeGenerator(CallGenerator):
    """Complete code generator: statements, calls and expressions."""

    _HANDLERS = {
        **CallGenerator._HANDLERS,
        NodeType.ASGN: "_assign",
        NodeType.ARRAY_ASGN: "_array_assign",
        NodeType.READ: "_read",
        NodeType.ARRAY_READ: "_array_read",
        NodeType.WRITE: "_write",
        NodeType.IF: "_if",
        NodeType.IF_ELSE: "_if_else",
        NodeType.WHILE: "_while",
        NodeType.RET: "_return",
        NodeType.BRK: "_break",
        NodeType.CONTINUE: "_continue",
        NodeType.BRKP: "_breakpoint",
    }

    def __init__(self, symbols: SymbolTable) -> None:
        super().__init__(symbols)
        # Labels of the most recently entered while loop.
        self.loop_start = 0
        self.loop_end = 0

    def generate(self, node: Optional[ASTNode]) -> int:
        """Emit code for a statement or expression; expressions return their register."""
        return super().generate(node)

    # Helpers

    def _push_live(self) -> None:
        for reg in range(self.counter + 1):
            self.emit(f"PUSH R{reg}")

    def _read_prologue(self) -> None:
        self.emit('MOV R0,"Read"')
        self.emit("PUSH R0")
        self.emit("MOV R0,-1")
        self.emit("PUSH R0")

    def _syscall_tail(self, status: int, temporary: int) -> None:
        self.emit("ADD SP,2")
        self.free_all_regs()
        self.emit("CALL 0")
        self.emit("SUB SP,5")
        for _ in range(temporary):
            self.emit("POP R0")
        for reg in range(status, -1, -1):
            self.emit(f"POP R{reg}")
        self.counter = status

    # Assignments

    def _assign(self, node: ASTNode) -> int:
        value = self.generate(node.ptr2)
        target = node.ptr1
        if target.nodetype == NodeType.FIELD:
            self.store_target = True
            address = self.generate(target)
            self.emit(f"MOV [R{address}],R{value}")
            self.free_reg()
        elif self.symbols.llookup(target.name) is not None:
            r1 = self.get_reg()
            r2 = self.get_reg()
            self._local_address(target.name, r1, r2)
            self.emit(f"MOV [R{r2}],R{value}")
            self.free_reg()
            self.free_reg()
        elif self.symbols.plookup(target.name) is not None:
            address = self._param_address(target.name)
            self.emit(f"MOV [R{address}],R{value}")
            self.free_reg()
        else:
            self.emit(f"MOV [{target.gentry.binding}],R{value}")
        self.free_reg()
        return 0

    def _array_assign(self, node: ASTNode) -> int:
        index = self.generate(node.ptr2)
        base = self.get_reg()
        self.emit(f"MOV R{base},{node.ptr1.gentry.binding}")
        self.emit(f"ADD R{index},R{base}")
        self.free_reg()
        value = self.generate(node.ptr3)
        self.emit(f"MOV [R{index}],R{value}")
        self.free_reg()
        self.free_reg()
        return 0

    # Input and output

    def _read(self, node: ASTNode) -> int:
        target = node.ptr2
        temporary = 0
        if target.nodetype == NodeType.FIELD:
            self.store_target = True
            self._push_live()
            self._read_prologue()
            address = self.generate(target)
            self.emit(f"PUSH R{address}")
            self.free_reg()
            temporary = 1
        elif self.symbols.llookup(target.name) is not None:
            r2 = self.get_reg()
            r3 = self.get_reg()
            self._local_address(target.name, r2, r3)
            self._push_live()
            self._read_prologue()
            self.emit(f"PUSH R{r3}")
            self.free_reg()
            self.free_reg()
            temporary = 2
        elif self.symbols.plookup(target.name) is not None:
            address = self._param_address(target.name)
            self._push_live()
            self._read_prologue()
            self.emit(f"PUSH R{address}")
            self.free_reg()
            temporary = 1
        else:
            self._push_live()
            self._read_prologue()
            self.emit(f"MOV R0,{target.gentry.binding}")
            self.emit("PUSH R0")
        self._syscall_tail(self.counter, temporary)
        return 0

    def _array_read(self, node: ASTNode) -> int:
        index = self.generate(node.ptr3)
        array = node.ptr2.gentry
        base = self.get_reg()
        self.emit(f"MOV R{base},{array.binding}")
        bound = self.get_reg()
        self.emit(f"MOV R{bound},{array.size}")
        self.emit(f"GT R{bound},R{index}")
        in_range = self.get_label()
        self.emit(f"JNZ R{bound},L{in_range}")
        self.emit("INT 10")
        self.emit(f"L{in_range}:")
        self.free_reg()
        self.emit(f"ADD R{index},R{base}")
        self.free_reg()
        self.emit(f"MOV [{_READ_ADDRESS}],R{index}")
        self._push_live()
        self._read_prologue()
        self.emit(f"MOV R0,[{_READ_ADDRESS}]")
        self.emit("PUSH R0")
        self.free_reg()
        self._syscall_tail(self.counter, 1)
        return 0

    def _write(self, node: ASTNode) -> int:
        self._push_live()
        status = self.counter
        self.emit('MOV R0,"Write"')
        self.emit("PUSH R0")
        self.emit("MOV R0,-2")
        self.emit("PUSH R0")
        value = self.generate(node.ptr2)
        self.emit(f"PUSH R{value}")
        self.free_reg()
        self._syscall_tail(status, 0)
        return 0

    # Control flow

    def _if(self, node: ASTNode) -> int:
        end = self.get_label()
        cond = self.generate(node.ptr1)
        self.emit(f"JZ R{cond},L{end}")
        self.generate(node.ptr2)
        self.emit(f"L{end}:")
        self.free_reg()
        return 0

    def _if_else(self, node: ASTNode) -> int:
        cond = self.generate(node.ptr1)
        otherwise = self.get_label()
        end = self.get_label()
        self.emit(f"JZ R{cond},L{otherwise}")
        self.free_reg()
        self.generate(node.ptr2)
        self.emit(f"JMP L{end}")
        self.emit(f"L{otherwise}:")
        self.free_reg()
        self.generate(node.ptr3)
        self.emit(f"L{end}:")
        return 0

    def _while(self, node: ASTNode) -> int:
        start = self.get_label()
        end = self.get_label()
        self.loop_start = start
        self.loop_end = end
        self.emit(f"L{start}:")
        cond = self.generate(node.ptr1)
        self.emit(f"JZ R{cond},L{end}")
        self.free_reg()
        self.generate(node.ptr2)
        self.emit(f"JMP L{start}")
        self.emit(f"L{end}:")
        self.free_reg()
        return 0

    def _break(self, node: ASTNode) -> int:
        self.emit(f"JMP L{self.loop_end}")
        return 0

    def _continue(self, node: ASTNode) -> int:
        self.emit(f"JMP L{self.loop_start}")
        return 0

    def _breakpoint(self, node: ASTNode) -> int:
        self.emit("BRKP")
        return 0

    def _return(self, node: ASTNode) -> int:
        result = self.generate(node.ptr2)
        r1 = self.get_reg()
        self.emit(f"MOV R{r1},BP")
        r2 = self.get_reg()
        self.emit(f"MOV R{r2},2")
        self.emit(f"SUB R{r1},R{r2}")
        self.free_reg()
        self.emit(f"MOV [R{r1}],R{result}")
        self.free_reg()
        self.free_reg()
        for _ in self.symbols.locals:
            self.emit("POP R0")
        self.emit("MOV BP,[SP]")
        self.emit("POP R0")
        self.emit("RET")
        return 0