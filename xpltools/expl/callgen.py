"""Assembly generation for ExpL function calls, argument lists and system calls."""

from __future__ import annotations

from typing import Optional

from .ast import ASTNode, NodeType
from .exprgen import CodeGenError, ExpressionGenerator
from .symbols import SymbolTable

# Words between the saved registers and a system call's return value on the stack.
_TRAP_FRAME = 5
_SYSCALL_ARGS = 4


class CallGenerator(ExpressionGenerator):
    """Expression generator that also handles user function calls and system calls."""

    _HANDLERS = {
        **ExpressionGenerator._HANDLERS,
        NodeType.EXPR: "_arguments",
        NodeType.FUNC: "_call",
        NodeType.ALLOC: "_alloc",
        NodeType.FREE: "_free",
        NodeType.INIT: "_init",
        NodeType.EXPOSCALL: "_exposcall",
    }

    def __init__(self, symbols: SymbolTable) -> None:
        super().__init__(symbols)
        # Set by a "Read" system call until its second argument has been emitted.
        self._read_pending = False

    def generate(self, node: Optional[ASTNode]) -> int:
        """Emit code for ``node``, calls included, and return its result register."""
        return super().generate(node)

    # Register saving around calls

    def _save_registers(self) -> int:
        status = self.counter
        for reg in range(status + 1):
            self.emit(f"PUSH R{reg}")
        self.free_all_regs()
        return status

    def _restore_registers(self, status: int) -> int:
        """Pop the saved registers back; return how many were popped."""
        for reg in range(status, -1, -1):
            self.emit(f"POP R{reg}")
        self.counter = status
        return status + 1

    def _trap(self) -> None:
        self.emit("PUSH R0")
        self.emit("CALL 0")
        self.emit(f"SUB SP,{_TRAP_FRAME}")

    def _return_value(self, popped: int) -> int:
        """Load the system call's return value, found above the popped registers."""
        r1 = self.get_reg()
        r2 = self.get_reg()
        self.emit(f"MOV R{r1},{popped + _TRAP_FRAME}")
        self.emit(f"MOV R{r2},SP")
        self.emit(f"ADD R{r2},R{r1}")
        self.emit(f"MOV R{r1},[R{r2}]")
        self.free_reg()
        return r1

    # User functions

    def _push_argument(self, node: ASTNode) -> None:
        reg = self.generate(node)
        self.emit(f"PUSH R{reg}")
        self.free_reg()

    def _arguments(self, node: ASTNode) -> int:
        current: Optional[ASTNode] = node
        while current is not None and current.nodetype == NodeType.EXPR:
            self._push_argument(current.ptr1)
            current = current.ptr2
        if current is not None:
            self._push_argument(current)
        return 0

    def _call(self, node: ASTNode) -> int:
        function = self.symbols.glookup(node.name)
        if function is None:
            raise CodeGenError(f"Unknown function {node.name}")
        status = self._save_registers()
        if node.ptr2 is not None:
            self.generate(node.ptr2)
        elif node.ptr3 is not None:
            self._push_argument(node.ptr3)
        self.emit("PUSH R0")
        self.emit(f"CALL F{function.binding}")
        self.emit(f"POP R{status + 1}")
        if status == -1:
            self.get_reg()
        scratch = self.get_reg()
        for _ in function.paramlist:
            self.emit(f"POP R{scratch}")
        if status == -1:
            self.free_reg()
        self.free_reg()
        self._restore_registers(status)
        return self.get_reg()

    # Heap and system calls

    def _alloc(self, node: ASTNode) -> int:
        status = self._save_registers()
        self.emit('MOV R0,"Alloc"')
        self.emit("PUSH R0")
        self.emit("MOV R0,8")
        self.emit("PUSH R0")
        self.emit("ADD SP,2")
        self._trap()
        popped = self._restore_registers(status)
        return self._return_value(popped)

    def _free(self, node: ASTNode) -> int:
        self.get_reg()
        value = self.generate(node.ptr2)
        status = self._save_registers()
        self.emit('MOV R0,"Free"')
        self.emit("PUSH R0")
        self.emit(f"PUSH R{value}")
        self.emit("ADD SP,2")
        self._trap()
        self._restore_registers(status)
        return 0

    def _init(self, node: ASTNode) -> int:
        status = self._save_registers()
        self.emit('MOV R0,"Heapset"')
        self.emit("PUSH R0")
        self.emit("ADD SP,3")
        self._trap()
        self._restore_registers(status)
        return 0

    def _exposcall(self, node: ASTNode) -> int:
        status = self._save_registers()
        code = node.ptr3
        if code.name == "Read":
            self._read_pending = True
        if code.nodetype == NodeType.STRVAL:
            self.emit(f'MOV R0,"{code.name}"')
            self.emit("PUSH R0")
        elif code.nodetype == NodeType.ID:
            reg = self.generate(code)
            self.emit(f"MOV R0,R{reg}")
            self.emit("PUSH R0")
        count = 1
        arg = code.ptr1
        while arg is not None:
            if arg.nodetype == NodeType.STRVAL:
                self.emit(f'MOV R0,"{arg.name}"')
            elif arg.nodetype == NodeType.NUM:
                self.emit(f"MOV R0,{arg.value}")
            elif arg.nodetype in (NodeType.ID, NodeType.ARRAY, NodeType.FIELD):
                if count == 2 and self._read_pending:
                    self.store_target = True
                    self._read_pending = False
                reg = self.generate(arg)
                self.emit(f"MOV R0,R{reg}")
            self.emit("PUSH R0")
            count += 1
            arg = arg.ptr1
        while count < _SYSCALL_ARGS:
            self.emit("PUSH R0")
            count += 1
        self._trap()
        popped = self._restore_registers(status)
        return self._return_value(popped)