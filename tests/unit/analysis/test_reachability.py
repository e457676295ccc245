import pytest
import libcst as cst
from pathlib import Path

from cmpgen.analysis import evaluate_constant
from cmpgen.spec import BindingOrigin, CallTarget, Constant, TypeShape
from cmpgen.test_utils import analyze_code

TARGET = CallTarget("main", "target_func")

TEMPLATE = """
import os
import typing
from os import path as os_path
from typing import AnyStr, TypeVar

T = TypeVar("T")


class GlobalClass:
    pass


GLOBAL_VAR = 1


def target_func(*args):
    pass


def main():
    class LocalClass:
        pass

    local_var = 2
    target_func[{type_arg}]({arg})
"""


def _single_call(tmp_path: Path, type_arg: str = "GlobalClass", arg: str = '"name"'):
    _, calls = analyze_code(
        tmp_path / "main.py", TEMPLATE.format(type_arg=type_arg, arg=arg), TARGET
    )
    assert len(calls) == 1
    return calls[0]


@pytest.mark.parametrize(
    "arg, reachable",
    [
        ("1", True),
        ('"name"', True),
        ("-1.5", True),
        ("None", True),
        ("GlobalClass()", True),
        ("LocalClass()", False),
        ("local_var", False),
        ("GLOBAL_VAR", True),
        ("-GLOBAL_VAR", True),
        ("-local_var", False),
        ("os.sep", True),
        ("os_path.join", True),
        ("len", True),
        ("[GLOBAL_VAR, 1]", True),
        ("(GLOBAL_VAR, local_var)", False),
        ("{GLOBAL_VAR: GlobalClass()}", True),
        ("undefined_name", False),
        ("lambda: 1", False),
        ("[x for x in range(3)]", False),
    ],
)
def test_argument_reachability(tmp_path, arg, reachable):
    call = _single_call(tmp_path, arg=arg)

    assert len(call.arguments) == 1
    assert call.arguments[0].reachable is reachable


def test_constants_are_always_reachable_and_carry_their_value(tmp_path):
    call = _single_call(tmp_path, arg='"na" "me"')

    argument = call.arguments[0]
    assert argument.constant == Constant("name", "str")
    assert argument.reachable is True
    assert argument.definition is None


def test_local_definition_is_recorded(tmp_path):
    call = _single_call(tmp_path, arg="local_var")

    assert call.arguments[0].definition.origin is BindingOrigin.LOCAL


def test_imported_definition_is_recorded(tmp_path):
    call = _single_call(tmp_path, arg="os_path.join")

    definition = call.arguments[0].definition
    assert definition.origin is BindingOrigin.IMPORT
    assert definition.import_spec.resolved_path == "os.path"


def test_unresolved_identifier_has_no_definition(tmp_path):
    call = _single_call(tmp_path, arg="undefined_name")

    assert call.arguments[0].definition is None
    assert call.arguments[0].reachable is False


@pytest.mark.parametrize(
    "type_arg, shape, reachable",
    [
        ("int", TypeShape.NAME, True),
        ("None", TypeShape.NAME, True),
        ("GlobalClass", TypeShape.NAME, True),
        ("LocalClass", TypeShape.NAME, False),
        ("os.PathLike", TypeShape.ATTRIBUTE, True),
        ("list[GlobalClass]", TypeShape.GENERIC, True),
        ("dict[str, LocalClass]", TypeShape.GENERIC, False),
        ("tuple[int, ...]", TypeShape.GENERIC, True),
        ("int | GlobalClass", TypeShape.GENERIC, True),
        ('"GlobalClass"', TypeShape.REFERENCE, True),
        ('"LocalClass"', TypeShape.REFERENCE, False),
        ('"not a type"', TypeShape.REFERENCE, False),
        ("T", TypeShape.NAME, False),
        ("Undefined", TypeShape.NAME, False),
        ("GlobalClass()", TypeShape.UNSUPPORTED, False),
        ("[GlobalClass]", TypeShape.UNSUPPORTED, False),
        ("(GlobalClass, int)", TypeShape.UNSUPPORTED, False),
        ('"[GlobalClass]"', TypeShape.REFERENCE, False),
        ("...", TypeShape.NAME, False),
        ("typing.Callable[[int], GlobalClass]", TypeShape.GENERIC, True),
        ("typing.Callable[[LocalClass], int]", TypeShape.GENERIC, False),
        ("typing.Callable[..., int]", TypeShape.GENERIC, True),
        ("AnyStr", TypeShape.NAME, False),
        ("typing.AnyStr", TypeShape.ATTRIBUTE, False),
        ("typing.Optional[GlobalClass]", TypeShape.GENERIC, True),
    ],
)
def test_type_argument_reachability(tmp_path, type_arg, shape, reachable):
    call = _single_call(tmp_path, type_arg=type_arg)

    assert len(call.type_arguments) == 1
    type_argument = call.type_arguments[0]
    assert type_argument.shape is shape
    assert type_argument.reachable is reachable
    assert type_argument.code == type_arg


def test_type_variable_binding_is_classified(tmp_path):
    call = _single_call(tmp_path, type_arg="T")

    assert [b.origin for b in call.type_arguments[0].bindings] == [
        BindingOrigin.TYPE_VARIABLE
    ]


@pytest.mark.parametrize(
    "code, expected",
    [
        ("42", Constant(42, "int")),
        ("-42", Constant(-42, "int")),
        ("~1", Constant(-2, "int")),
        ("not 0", Constant(True, "bool")),
        ("2.5", Constant(2.5, "float")),
        ("1j", Constant(1j, "complex")),
        ("b'x'", Constant(b"x", "bytes")),
        ("'a' 'b'", Constant("ab", "str")),
        ("True", Constant(True, "bool")),
        ("None", Constant(None, "none")),
        ("...", Constant(..., "ellipsis")),
    ],
)
def test_evaluate_constant(code, expected):
    assert evaluate_constant(cst.parse_expression(code)) == expected


@pytest.mark.parametrize("code", ['f"{x}"', "'a' f'{x}'", "-'a'", "x", "x + 1"])
def test_evaluate_constant_rejects_non_literals(code):
    assert evaluate_constant(cst.parse_expression(code)) is None
