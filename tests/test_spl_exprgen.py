import pytest

from xpltools.spl.exprgen import ExpressionGenerator, RegisterOverflow
from xpltools.spl.nodes import NodeType, nonterm_node, term_node
from xpltools.spl.symbols import CompileError


def reg(number):
    return term_node(NodeType.REG, None, number)


def num(value):
    return term_node(NodeType.NUM, None, value)


def lines_of(gen):
    return gen.code().splitlines()


def test_number_loads_first_temporary():
    gen = ExpressionGenerator()
    gen.generate(num(7))
    assert lines_of(gen) == ["MOV R16, 7"]
    assert gen.regcount == 1


def test_register_plus_immediate():
    gen = ExpressionGenerator()
    gen.generate(nonterm_node(NodeType.ADD, reg(1), num(5)))
    assert lines_of(gen) == ["MOV R16, R1", "ADD R16, 5"]
    assert gen.regcount == 1


def test_less_than_with_register_on_left_swaps_operator():
    gen = ExpressionGenerator()
    gen.generate(nonterm_node(NodeType.LT, reg(2), num(3)))
    assert lines_of(gen) == ["MOV R16, 3", "GT R16, R2"]


def test_subtract_register_minus_expression():
    gen = ExpressionGenerator()
    inner = nonterm_node(NodeType.ADD, reg(2), reg(3))
    gen.generate(nonterm_node(NodeType.SUB, reg(1), inner))
    lines = lines_of(gen)
    assert lines[0] == "MOV R16, R1"
    assert lines[-1] == "SUB R16, R17"
    assert "ADD R17, R3" in lines
    assert gen.regcount == 1


def test_not_of_register():
    gen = ExpressionGenerator()
    gen.generate(nonterm_node(NodeType.NOT, reg(0), None))
    assert lines_of(gen) == ["MOV R16, 1", "SUB R16, R0"]


def test_address_expression_dereferences():
    gen = ExpressionGenerator()
    gen.generate(nonterm_node(NodeType.ADDR_EXPR, nonterm_node(NodeType.ADD, reg(1), num(2)), None))
    lines = lines_of(gen)
    assert lines[-1] == "MOV R16, [R16]"
    assert gen.regcount == 1


def test_special_registers_are_named():
    gen = ExpressionGenerator()
    gen.generate(nonterm_node(NodeType.EQ, reg(24), reg(26)))
    assert lines_of(gen) == ["MOV R16, BP", "EQ R16, SP"]


def test_string_loaded_verbatim():
    gen = ExpressionGenerator()
    gen.generate(term_node(NodeType.STRING, '"hello"', 0))
    assert lines_of(gen) == ['MOV R16, "hello"']


def test_line_count_matches_instructions():
    gen = ExpressionGenerator()
    gen.generate(nonterm_node(NodeType.OR, nonterm_node(NodeType.GE, reg(1), num(0)), reg(4)))
    assert gen.out_linecount == len(lines_of(gen))


def test_register_overflow():
    gen = ExpressionGenerator()
    tree = num(0)
    for value in range(1, 6):
        tree = nonterm_node(NodeType.ADD, num(value), tree)
    with pytest.raises(RegisterOverflow) as info:
        gen.generate(tree)
    assert isinstance(info.value, CompileError)


def test_unknown_register_value_raises():
    gen = ExpressionGenerator()
    with pytest.raises(ValueError):
        gen.generate(reg(99))


def test_unknown_node_reported(capsys):
    gen = ExpressionGenerator()
    gen.generate(term_node(NodeType.HALT, None, 0))
    assert "Unknown Command" in capsys.readouterr().err
    assert gen.code() == ""


def test_none_generates_nothing():
    gen = ExpressionGenerator()
    gen.generate(None)
    assert gen.code() == ""
    assert gen.regcount == 0