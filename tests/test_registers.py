import pytest

from xpltools.spl.registers import (
    C_REG_BASE,
    Register,
    is_allowed_register,
    register_name,
)


@pytest.mark.parametrize("value", range(0, 16))
def test_general_registers_are_allowed(value):
    assert is_allowed_register(value) is True


@pytest.mark.parametrize("value", [-1, C_REG_BASE, Register.R19, Register.BP])
def test_reserved_registers_are_not_allowed(value):
    assert is_allowed_register(value) is False


def test_general_register_names():
    assert register_name(Register.R5) == "R5"
    assert register_name(Register.R15) == "R15"


def test_port_names():
    assert register_name(Register.P2) == "P2"


@pytest.mark.parametrize("name", ["BP", "SP", "IP", "PTBR", "PTLR", "EIP", "EPN", "EC", "EMA"])
def test_special_names_round_trip(name):
    assert register_name(Register[name]) == name


def test_compiler_registers_have_no_name():
    with pytest.raises(ValueError):
        register_name(Register.R17)