from dataclasses import dataclass
from typing import List, Optional, Tuple

import libcst as cst


@dataclass(frozen=True)
class CalleeChain:
    """The callee of a call, reduced to a root name plus attribute accesses."""

    root: cst.Name
    attributes: Tuple[str, ...]
    # The first subscript met while unwrapping; it carries the type arguments.
    subscript: Optional[cst.Subscript]
    # True when the chain passed through an inner call, e.g. f[T]("x")(a, b).
    through_call: bool = False


def unwrap_callee(call: cst.Call) -> Optional[CalleeChain]:
    """
    Walks from ``call.func`` towards the identifier naming the callee.

    Call -> func, Subscript -> value, Attribute -> value, Name is terminal.
    Any other node gives up.
    """
    node: cst.BaseExpression = call.func
    subscript: Optional[cst.Subscript] = None
    attributes: List[str] = []
    through_call = False

    while True:
        if isinstance(node, cst.Name):
            return CalleeChain(
                root=node,
                attributes=tuple(reversed(attributes)),
                subscript=subscript,
                through_call=through_call,
            )
        if isinstance(node, cst.Call):
            through_call = True
            node = node.func
        elif isinstance(node, cst.Subscript):
            if subscript is None:
                subscript = node
            node = node.value
        elif isinstance(node, cst.Attribute):
            attributes.append(node.attr.value)
            node = node.value
        else:
            return None


def unwrap_reference(expr: cst.BaseExpression) -> Optional[cst.Name]:
    """
    Reduces an argument expression to the identifier it refers to.

    Attribute -> value, UnaryOperation -> operand, Name is terminal.
    Any other node gives up.
    """
    node = expr
    while True:
        if isinstance(node, cst.Name):
            return node
        if isinstance(node, cst.Attribute):
            node = node.value
        elif isinstance(node, cst.UnaryOperation):
            node = node.expression
        else:
            return None


def composite_parts(expr: cst.BaseExpression) -> Optional[List[cst.BaseExpression]]:
    """
    The sub-expressions of a constructor call or a container display.

    Returns None for anything else.
    """
    if isinstance(expr, cst.Call):
        return [expr.func] + [arg.value for arg in expr.args]
    if isinstance(expr, (cst.List, cst.Tuple, cst.Set)):
        return [element.value for element in expr.elements]
    if isinstance(expr, cst.Dict):
        parts: List[cst.BaseExpression] = []
        for element in expr.elements:
            if isinstance(element, cst.DictElement):
                parts.extend([element.key, element.value])
            else:
                parts.append(element.value)
        return parts
    return None


def subscript_values(subscript: cst.Subscript) -> List[Optional[cst.BaseExpression]]:
    """The index expressions of a subscript; slices map to None."""
    values: List[Optional[cst.BaseExpression]] = []
    for element in subscript.slice:
        if isinstance(element.slice, cst.Index):
            values.append(element.slice.value)
        else:
            values.append(None)
    return values
