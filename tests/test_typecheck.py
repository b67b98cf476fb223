import pytest

from xpltools.expl.ast import ASTNode, NodeType, tree_create
from xpltools.expl.symbols import SymbolError, SymbolTable
from xpltools.expl.typecheck import (
    TypeCheckError,
    TypeChecker,
    get_last,
    program_header,
)


@pytest.fixture
def table():
    symbols = SymbolTable()
    for name in ("integer", "string", "boolean", "array_integer", "array_string", "void"):
        symbols.tinstall(name, [])
    symbols.finstall(symbols.tlookup("integer"), "data")
    symbols.finstall(symbols.tlookup("string"), "label")
    symbols.tinstall("node")
    return symbols


@pytest.fixture
def checker(table):
    return TypeChecker(table)


def ident(name):
    return tree_create(None, NodeType.ID, name)


def test_verify_accepts_fresh_name(checker):
    assert checker.verify(ident("x"), True, True, True, None) is True


def test_verify_rejects_local_duplicate(checker, table):
    table.linstall("x", table.tlookup("integer"))
    with pytest.raises(TypeCheckError, match="Re initialization of variable"):
        checker.verify(ident("x"), False, True, False)


def test_verify_rejects_param_duplicate(checker, table):
    table.pinstall("p", table.tlookup("integer"))
    with pytest.raises(TypeCheckError, match="paramlist"):
        checker.verify(ident("p"), False, False, True)


def test_verify_rejects_global_duplicate(checker, table):
    table.ginstall("g", table.tlookup("integer"), 1)
    with pytest.raises(TypeCheckError, match="identifier"):
        checker.verify(ident("g"), True, False, False)


def test_verify_ignores_unchecked_tables(checker, table):
    table.ginstall("g", table.tlookup("integer"), 1)
    assert checker.verify(ident("g"), False, True, True) is True


def test_verify_rejects_non_integer_array(checker, table):
    with pytest.raises(TypeCheckError, match="arrays of udt"):
        checker.verify(ident("a"), False, False, False, table.tlookup("string"))


def test_install_array_integer(checker, table):
    size = tree_create(table.tlookup("integer"), NodeType.NUM, value=10)
    before = table.total_count
    symbol = checker.install_array(ident("arr"), size, table.tlookup("integer"))
    assert symbol.type is table.tlookup("array_integer")
    assert symbol.binding == before
    assert table.total_count == before + 10


def test_install_array_string(checker, table):
    size = tree_create(table.tlookup("integer"), NodeType.NUM, value=3)
    symbol = checker.install_array(ident("names"), size, table.tlookup("string"))
    assert symbol.type is table.tlookup("array_string")
    assert table.glookup("names") is symbol


def test_install_array_rejects_udt(checker, table):
    size = tree_create(table.tlookup("integer"), NodeType.NUM, value=3)
    with pytest.raises(TypeCheckError):
        checker.install_array(ident("n"), size, table.tlookup("node"))


def test_install_array_twice_fails(checker, table):
    size = tree_create(table.tlookup("integer"), NodeType.NUM, value=3)
    checker.install_array(ident("arr"), size, table.tlookup("integer"))
    with pytest.raises(SymbolError):
        checker.install_array(ident("arr"), size, table.tlookup("integer"))


def test_compare_equality_operator(checker, table):
    integer = table.tlookup("integer")
    assert checker.compare(integer, integer, " ") is True
    assert checker.compare(integer, table.tlookup("string"), " ") is False


@pytest.mark.parametrize("op", ["r", "i", "e", "w", "a", "d", "n"])
def test_compare_must_match(checker, table, op):
    integer = table.tlookup("integer")
    assert checker.compare(integer, integer, op) is True
    with pytest.raises(TypeCheckError):
        checker.compare(integer, table.tlookup("boolean"), op)


@pytest.mark.parametrize("op", ["+", "-", "*", "/", "%", "<", ">", "#", "$"])
def test_compare_arithmetic_rejects_strings(checker, table, op):
    integer = table.tlookup("integer")
    assert checker.compare(integer, integer, op) is True
    with pytest.raises(TypeCheckError, match="conflict in operand types"):
        checker.compare(integer, table.tlookup("string"), op)


def test_compare_plus_message(checker, table):
    with pytest.raises(TypeCheckError, match="PLUS"):
        checker.compare(table.tlookup("string"), table.tlookup("integer"), "+")


@pytest.mark.parametrize("op", ["&", "|"])
def test_compare_logical(checker, table, op):
    boolean = table.tlookup("boolean")
    assert checker.compare(boolean, boolean, op) is True
    with pytest.raises(TypeCheckError):
        checker.compare(boolean, table.tlookup("integer"), op)


def test_compare_not(checker, table):
    assert checker.compare(table.tlookup("boolean"), None, "!") is True
    with pytest.raises(TypeCheckError, match="NOT"):
        checker.compare(table.tlookup("integer"), None, "!")


def test_compare_nill(checker, table):
    assert checker.compare(table.tlookup("node"), None, "=") is True
    with pytest.raises(TypeCheckError, match="DEQNILL"):
        checker.compare(table.tlookup("integer"), None, "=")
    with pytest.raises(TypeCheckError, match="NEQNILL"):
        checker.compare(table.tlookup("string"), None, "^")


def test_compare_neqnill_also_checks_exposcall(checker, table):
    with pytest.raises(TypeCheckError, match="fun_code"):
        checker.compare(table.tlookup("node"), table.tlookup("integer"), "^")


def test_compare_exposcall(checker, table):
    string = table.tlookup("string")
    assert checker.compare(None, string, "x") is True
    assert checker.compare(table.tlookup("integer"), None, "x") is True
    with pytest.raises(TypeCheckError, match="fun_code"):
        checker.compare(None, table.tlookup("integer"), "x")
    with pytest.raises(TypeCheckError, match="return type to exposcall"):
        checker.compare(string, None, "x")


def test_assign_type_local(checker, table):
    table.linstall("x", table.tlookup("integer"))
    node = ident("x")
    assert checker.assign_type(node) is True
    assert node.type is table.tlookup("integer")


def test_assign_type_local_udt_errors(checker, table):
    table.linstall("x", table.tlookup("integer"))
    with pytest.raises(TypeCheckError, match="cannot free"):
        checker.assign_type(ident("x"), None, True, True)
    with pytest.raises(TypeCheckError, match="cannot ALLOC"):
        checker.assign_type(ident("x"), None, True, False, True)
    with pytest.raises(TypeCheckError, match="operation over integer"):
        checker.assign_type(ident("x"), ident("data"), True, False, False, True)
    with pytest.raises(TypeCheckError, match="null"):
        checker.assign_type(ident("x"), None, True)


def test_assign_type_local_field(checker, table):
    table.linstall("n", table.tlookup("node"))
    node = ident("n")
    field_node = ident("label")
    checker.assign_type(node, field_node, field=True)
    assert node.type is table.tlookup("node")
    assert node.ptr2 is field_node
    assert field_node.type is table.tlookup("string")


def test_assign_type_unknown_field(checker, table):
    table.linstall("n", table.tlookup("node"))
    with pytest.raises(TypeCheckError, match="field"):
        checker.assign_type(ident("n"), ident("missing"), field=True)


def test_assign_type_param(checker, table):
    table.pinstall("p", table.tlookup("node"))
    node = ident("p")
    checker.assign_type(node, ident("data"), field=True)
    assert node.type is table.tlookup("node")
    assert node.ptr2.type is table.tlookup("integer")


def test_assign_type_param_read(checker, table):
    table.pinstall("p", table.tlookup("string"))
    table.pinstall("q", table.tlookup("node"))
    node = ident("p")
    checker.assign_type(node, read=True)
    assert node.type is table.tlookup("string")
    other = ident("q")
    checker.assign_type(other, read=True)
    assert other.type is None


def test_assign_type_global(checker, table):
    symbol = table.ginstall("g", table.tlookup("integer"), 1)
    node = ident("g")
    checker.assign_type(node)
    assert node.gentry is symbol
    assert node.type is table.tlookup("integer")


def test_assign_type_global_free_keeps_entry_unset(checker, table):
    table.ginstall("g", table.tlookup("node"), 1)
    node = ident("g")
    checker.assign_type(node, None, True, True)
    assert node.gentry is None
    assert node.type is table.tlookup("node")


def test_assign_type_undeclared(checker):
    with pytest.raises(TypeCheckError, match="Un-declared variable"):
        checker.assign_type(ident("nope"))


def test_assign_type_global_array_errors(checker, table):
    table.ginstall("arr", table.tlookup("array_integer"), 4)
    with pytest.raises(TypeCheckError, match="Found Array"):
        checker.assign_type(ident("arr"))
    with pytest.raises(TypeCheckError, match="over arrays"):
        checker.assign_type(ident("arr"), ident("data"), field=True)


def test_assign_type_global_array_read_allowed(checker, table):
    table.ginstall("arr", table.tlookup("array_integer"), 4)
    node = ident("arr")
    checker.assign_type(node, read=True)
    assert node.type is table.tlookup("array_integer")


def test_assign_array_type_function(checker, table):
    symbol = table.ginstall("f", table.tlookup("integer"), -1)
    node = ident("f")
    assert checker.assign_array_type(node, None, True) is False
    assert node.gentry is symbol
    assert node.type is table.tlookup("integer")


def test_assign_array_type_not_function(checker, table):
    table.ginstall("g", table.tlookup("integer"), 1)
    with pytest.raises(TypeCheckError, match="Expected Function"):
        checker.assign_array_type(ident("g"), None, True)


def test_assign_array_type_element(checker, table):
    table.ginstall("arr", table.tlookup("array_string"), 4)
    index = tree_create(table.tlookup("integer"), NodeType.NUM, value=1)
    node = ident("arr")
    assert checker.assign_array_type(node, index, False) is True
    assert node.type is table.tlookup("string")
    assert node.gentry is table.glookup("arr")


def test_assign_array_type_errors(checker, table):
    table.ginstall("g", table.tlookup("integer"), 1)
    table.ginstall("arr", table.tlookup("array_integer"), 4)
    index = tree_create(table.tlookup("integer"), NodeType.NUM, value=1)
    bad_index = tree_create(table.tlookup("string"), NodeType.STRVAL, name="a")
    with pytest.raises(TypeCheckError, match="Un-declared identifier"):
        checker.assign_array_type(ident("nope"), index)
    with pytest.raises(TypeCheckError, match="Found Array"):
        checker.assign_array_type(ident("g"), index)
    with pytest.raises(TypeCheckError, match="Expected value"):
        checker.assign_array_type(ident("arr"), bad_index)


def test_program_header():
    lines = program_header(4096).splitlines()
    assert lines[:8] == ["0", "2056", "0", "0", "0", "0", "0", "0"]
    assert lines[8] == "MOV SP,4095"
    assert lines[9] == "MOV BP,4096"
    assert lines[10:] == ["PUSH R0", "CALL MAIN", "INT 10"]


def test_get_last_follows_ptr2():
    tail = ASTNode(None, NodeType.NUM)
    middle = ASTNode(None, NodeType.DEFAULT, ptr2=tail)
    head = ASTNode(None, NodeType.DEFAULT, ptr2=middle)
    assert get_last(head) is tail
    assert get_last(tail) is tail