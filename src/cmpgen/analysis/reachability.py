"""
Classification of marker call arguments.

An expression is *reachable* when code in another module of the same
package could name it: a builtin, a module-level definition or import, or
something built only from those. Anything bound inside a function or class
body is not.
"""

from typing import List, Optional, Tuple

import libcst as cst
from libcst.helpers import get_full_name_for_node
from libcst.metadata import Scope

from cmpgen.spec import (
    BindingOrigin,
    CallArgument,
    Constant,
    NameBinding,
    TypeArgument,
    TypeShape,
)

from .bindings import is_type_variable_path, resolve_binding
from .chains import composite_parts, unwrap_reference
from .unit import SourceFile

_NUMERIC_KINDS = {bool: "bool", int: "int", float: "float", complex: "complex"}


def evaluate_constant(expr: cst.BaseExpression) -> Optional[Constant]:
    if isinstance(expr, (cst.SimpleString, cst.ConcatenatedString)):
        value = expr.evaluated_value
        if value is None:
            # Concatenation involving an f-string.
            return None
        return Constant(value, "bytes" if isinstance(value, bytes) else "str")
    if isinstance(expr, cst.Integer):
        return Constant(expr.evaluated_value, "int")
    if isinstance(expr, cst.Float):
        return Constant(expr.evaluated_value, "float")
    if isinstance(expr, cst.Imaginary):
        return Constant(expr.evaluated_value, "complex")
    if isinstance(expr, cst.Ellipsis):
        return Constant(..., "ellipsis")
    if isinstance(expr, cst.Name):
        if expr.value == "True":
            return Constant(True, "bool")
        if expr.value == "False":
            return Constant(False, "bool")
        if expr.value == "None":
            return Constant(None, "none")
        return None
    if isinstance(expr, cst.UnaryOperation):
        inner = evaluate_constant(expr.expression)
        if inner is None or type(inner.value) not in _NUMERIC_KINDS:
            return None
        value = inner.value
        op = expr.operator
        if isinstance(op, cst.Minus):
            result = -value
        elif isinstance(op, cst.Plus):
            result = +value
        elif isinstance(op, cst.Not):
            result = not value
        elif isinstance(op, cst.BitInvert) and isinstance(value, int):
            result = ~value
        else:
            return None
        return Constant(result, _NUMERIC_KINDS[type(result)])
    return None


def _binding_or_none(binding: NameBinding) -> Optional[NameBinding]:
    return None if binding.origin is BindingOrigin.UNRESOLVED else binding


def expression_reachable(
    source: SourceFile, scope: Optional[Scope], expr: cst.BaseExpression
) -> bool:
    if evaluate_constant(expr) is not None:
        return True
    name = unwrap_reference(expr)
    if name is not None:
        return resolve_binding(source, scope, name.value).reachable
    parts = composite_parts(expr)
    if parts is None:
        return False
    return all(expression_reachable(source, scope, part) for part in parts)


def classify_argument(source: SourceFile, scope: Optional[Scope], arg: cst.Arg) -> CallArgument:
    value = arg.value
    keyword = arg.keyword.value if arg.keyword is not None else None
    common = dict(
        code=source.code_for(value),
        span=source.span_for(value),
        keyword=keyword,
        star=arg.star,
        node=value,
    )

    constant = evaluate_constant(value)
    if constant is not None:
        return CallArgument(reachable=True, constant=constant, **common)

    name = unwrap_reference(value)
    if name is not None:
        definition = _binding_or_none(resolve_binding(source, scope, name.value))
        reachable = definition is not None and definition.reachable
        return CallArgument(reachable=reachable, definition=definition, **common)

    return CallArgument(reachable=expression_reachable(source, scope, value), **common)


def _is_literal_generic(base: cst.BaseExpression) -> bool:
    if isinstance(base, cst.Name):
        return base.value == "Literal"
    if isinstance(base, cst.Attribute):
        return base.attr.value == "Literal"
    return False


class _TypeClassifier:
    def __init__(self, source: SourceFile, scope: Optional[Scope]):
        self.source = source
        self.scope = scope
        self.bindings: List[NameBinding] = []

    def _name(self, name: cst.Name) -> bool:
        if name.value == "None":
            return True
        binding = resolve_binding(self.source, self.scope, name.value)
        self.bindings.append(binding)
        return binding.reachable

    def _attribute(self, expr: cst.Attribute, root: cst.Name) -> bool:
        reachable = self._name(root)
        binding = self.bindings[-1] if root.value != "None" else None
        if binding is not None and binding.origin is BindingOrigin.IMPORT and binding.import_spec:
            base = binding.import_spec.qualified_path(self.source.package)
            full_name = get_full_name_for_node(expr) or ""
            rest = full_name[len(root.value):]
            if base and is_type_variable_path(self.source, f"{base}{rest}"):
                return False
        return reachable

    def classify(self, expr: cst.BaseExpression, nested: bool = False) -> Tuple[TypeShape, bool]:
        """
        Returns the shape of a type expression and whether it is reachable.

        ``nested`` is set for the parameters of a generic, the only place
        where list and tuple displays such as ``Callable[[int], str]`` are
        types.
        """
        if isinstance(expr, cst.Name):
            return TypeShape.NAME, self._name(expr)

        if isinstance(expr, cst.Attribute):
            root = expr.value
            while isinstance(root, cst.Attribute):
                root = root.value
            if not isinstance(root, cst.Name):
                return TypeShape.UNSUPPORTED, False
            return TypeShape.ATTRIBUTE, self._attribute(expr, root)

        if isinstance(expr, cst.Subscript):
            _, reachable = self.classify(expr.value)
            literal = _is_literal_generic(expr.value)
            for element in expr.slice:
                if not isinstance(element.slice, cst.Index):
                    reachable = False
                    continue
                value = element.slice.value
                if literal:
                    reachable = reachable and evaluate_constant(value) is not None
                else:
                    reachable = self.classify(value, nested=True)[1] and reachable
            return TypeShape.GENERIC, reachable

        if isinstance(expr, (cst.List, cst.Tuple)):
            if not nested:
                return TypeShape.UNSUPPORTED, False
            results = [self.classify(e.value)[1] for e in expr.elements]
            return TypeShape.GENERIC, all(results)

        if isinstance(expr, cst.BinaryOperation) and isinstance(expr.operator, cst.BitOr):
            left = self.classify(expr.left)[1]
            right = self.classify(expr.right)[1]
            return TypeShape.GENERIC, left and right

        if isinstance(expr, cst.Ellipsis):
            return TypeShape.NAME, nested

        if isinstance(expr, (cst.SimpleString, cst.ConcatenatedString)):
            text = expr.evaluated_value
            if not isinstance(text, str):
                return TypeShape.REFERENCE, False
            try:
                referenced = cst.parse_expression(text.strip())
            except cst.ParserSyntaxError:
                return TypeShape.REFERENCE, False
            return TypeShape.REFERENCE, self.classify(referenced, nested)[1]

        return TypeShape.UNSUPPORTED, False


def classify_type(
    source: SourceFile, scope: Optional[Scope], expr: cst.BaseExpression
) -> TypeArgument:
    classifier = _TypeClassifier(source, scope)
    shape, reachable = classifier.classify(expr)
    return TypeArgument(
        code=source.code_for(expr),
        span=source.span_for(expr),
        shape=shape,
        reachable=reachable,
        bindings=tuple(classifier.bindings),
        node=expr,
    )


def unreachable_type(source: SourceFile, node: cst.CSTNode) -> TypeArgument:
    """Placeholder for a slice (``a:b``) where a type was expected."""
    return TypeArgument(
        code=source.code_for(node),
        span=source.span_for(node),
        shape=TypeShape.UNSUPPORTED,
        reachable=False,
        node=node,
    )
