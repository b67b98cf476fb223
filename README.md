# xpltools

Code-generation building blocks for two small teaching languages that
compile to assembly for the XSM machine:

* **ExpL**: a typed application language with integers, strings,
  arrays, user-defined record types, functions and heap allocation.
* **SPL**: a system programming language for writing an operating
  system kernel. It has register aliases, symbolic constants, labels and
  privileged instructions.

The package holds the parts of both compilers that sit behind the
parser. These are syntax trees, symbol and type tables, type checking,
label management, and code generators that write XSM assembly text.
It needs nothing outside the standard library.

## Layout

### `xpltools.expl`

| Module | What it holds |
| --- | --- |
| `ast` | `NodeType`, `ASTNode` and `tree_create` for building ExpL syntax trees |
| `symbols` | `SymbolTable` with global, local, parameter, type and field tables (`Field`, `TypeEntry`, `Param`, `GlobalSymbol`, `LocalSymbol`, `flookup`). It raises `SymbolError` when a global is declared twice |
| `labeltable` | `LabelTable`, an ordered table from label names to addresses (`append`, `find`, `format`) |
| `typecheck` | `TypeChecker` for declarations, operators, identifiers, fields, arrays and calls. It raises `TypeCheckError`. The module also has `program_header` and `get_last` |
| `heap` | `initialize_routine`, `alloc_routine` and `free_routine`, which return the assembly text of the fixed-size heap allocator |
| `exprgen` | `ExpressionGenerator`: register and label allocation and code for expressions. It raises `CodeGenError` |
| `callgen` | `CallGenerator`, which adds argument lists, user function calls, `Alloc`, `Free`, `Heapset` and other system calls |
| `codegen` | `CodeGenerator`, the complete generator. It adds assignments, read, write, if, while, break, continue, breakpoints and return |

### `xpltools.spl`

| Module | What it holds |
| --- | --- |
| `registers` | `Register`, `is_allowed_register` and `register_name` |
| `paths` | `expand_path`, `remove_extension` and `output_filename` |
| `labels` | `Label` and `LabelManager` for generated labels, declared labels and the stack of enclosing `while` loops. It raises `LabelError` |
| `nodes` | `NodeType`, `Node`, `term_node`, `nonterm_node` and `attach` |
| `symbols` | `Environment` of symbolic constants and block-scoped register aliases (`Constant`, `Alias`). `load_constants` reads `name value` pairs from a file, by default `splconstants.cfg`. It raises `CompileError` |
| `exprgen` | `ExpressionGenerator` for arithmetic, relational and logical expressions in the temporaries R16 and up. It raises `RegisterOverflow` |
| `stmtgen` | `StatementGenerator` for assignments, control flow, load/store, push/pop and machine instructions |
| `codegen` | `CodeGenerator`, the complete SPL generator. It adds label definitions, calls and jumps |

## Examples

Building an SPL output file name and naming registers:

```python
from xpltools.spl.paths import output_filename
from xpltools.spl.registers import Register, is_allowed_register, register_name

output_filename("os_startup.spl")        # "os_startup.xsm"
register_name(Register.BP)               # "BP"
is_allowed_register(Register.R3)         # True: R0 to R15 are free for SPL code
is_allowed_register(Register.R16)        # False: reserved for the compiler
```

Keeping track of ExpL types, globals and their memory bindings:

```python
from xpltools.expl.symbols import SymbolTable

table = SymbolTable()
integer = table.tinstall("integer", [])
table.ginstall("count", integer, 1, None)
table.glookup("count").binding           # 4096, the first static address
```

Generating SPL code for a small tree:

```python
from xpltools.spl.codegen import CodeGenerator
from xpltools.spl.nodes import NodeType, term_node, nonterm_node

tree = nonterm_node(
    NodeType.ASSIGN,
    term_node(NodeType.REG, None, 0),
    term_node(NodeType.NUM, None, 7),
)
generator = CodeGenerator()
generator.generate(tree)
print(generator.code())                  # MOV R0, 7
```

The back ends report errors such as redeclared identifiers, type
conflicts, unknown labels and running out of registers by raising
exceptions. Each exception carries the error's message, so a front end
can catch it and report it however it likes.

## What the package does not do

* It has no lexer or parser for either language. Syntax trees must be
  built by the caller with the node constructors.
* It installs no command. Nothing here reads a source file and writes a
  finished assembly file.
* It does not assemble or link. `LabelTable` only records and looks up
  label addresses. Nothing replaces labels in the generated text with
  those addresses.
* `SymbolTable` starts with no types. The caller installs `integer`,
  `string`, `boolean` and the array types with `tinstall`.

## Running the tests

Install the `test` extra and run `pytest` from the project root.