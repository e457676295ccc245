import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

import libcst as cst

from cmpgen.analysis.bindings import module_imports
from cmpgen.analysis.unit import SourceFile
from cmpgen.spec import (
    BindingOrigin,
    CallInfo,
    CallSiteError,
    CallTarget,
    GeneratedFile,
    ImportSpec,
    NameBinding,
    RenderError,
    UnorderableField,
)

from .imports import ImportSet, NameAllocator

log = logging.getLogger(__name__)

GENERATED_HEADER = "# Code generated by cmpgen from {source}. DO NOT EDIT."
GENERATED_MARKER = "# Code generated by cmpgen"

# Builtin annotations whose values have no natural total order.
_UNORDERABLE_TYPES = {
    "dict",
    "set",
    "frozenset",
    "complex",
    "object",
    "Dict",
    "Set",
    "FrozenSet",
    "Mapping",
    "MutableMapping",
    "AbstractSet",
    "MutableSet",
}

_INDENT = "    "


def _annotation_root(annotation: cst.BaseExpression) -> Optional[str]:
    node = annotation
    if isinstance(node, cst.Subscript):
        node = node.value
    if isinstance(node, cst.Attribute):
        return node.attr.value
    if isinstance(node, cst.Name):
        return node.value
    return None


def _class_field_annotations(node: cst.ClassDef) -> Dict[str, cst.BaseExpression]:
    annotations: Dict[str, cst.BaseExpression] = {}
    body = node.body
    if not isinstance(body, cst.IndentedBlock):
        return annotations
    for stmt in body.body:
        if not isinstance(stmt, cst.SimpleStatementLine):
            continue
        for small in stmt.body:
            if isinstance(small, cst.AnnAssign) and isinstance(small.target, cst.Name):
                annotations[small.target.value] = small.annotation.annotation
    return annotations


def _type_code(code: str) -> str:
    # Parentheses keep a type expression that spans lines valid everywhere.
    return f"({code})" if "\n" in code else code


def _three_way(a: str, b: str, field: str) -> str:
    return f"({a}.{field} > {b}.{field}) - ({a}.{field} < {b}.{field})"


class CodeSynthesizer:
    """
    Renders the companion module for one source file.

    The companion holds one comparator per call site and an initialization
    routine, run on import, that registers each of them under the call
    site's type and field names.
    """

    def __init__(
        self,
        target: CallTarget,
        register_name: str = "register",
        suffix: str = "_generated",
        prune_imports: bool = True,
    ):
        self.target = target
        self.register_name = register_name
        self.suffix = suffix
        self.prune_imports = prune_imports

    def output_path_for(self, source_path: Path) -> Path:
        return source_path.with_name(f"{source_path.stem}{self.suffix}.py")

    def check(self, source: SourceFile, calls: Sequence[CallInfo]) -> List[CallSiteError]:
        """Reports fields whose declared type cannot be ordered."""
        errors: List[CallSiteError] = []
        for call in calls:
            if call.chained or len(call.type_arguments) != 1:
                continue
            class_node = self._local_class(call)
            if class_node is None:
                continue
            annotations = _class_field_annotations(class_node)
            for arg in call.arguments:
                if arg.constant is None or arg.constant.value not in annotations:
                    continue
                annotation = annotations[arg.constant.value]
                if _annotation_root(annotation) in _UNORDERABLE_TYPES:
                    errors.append(
                        UnorderableField(
                            arg.span,
                            f"field '{arg.constant.value}' of '{class_node.name.value}' "
                            f"is annotated as '{source.code_for(annotation)}', "
                            "which has no natural ordering",
                        )
                    )
        return errors

    def _local_class(self, call: CallInfo) -> Optional[cst.ClassDef]:
        bindings = call.type_arguments[0].bindings
        if len(bindings) != 1:
            return None
        binding = bindings[0]
        if binding.origin is BindingOrigin.MODULE and isinstance(binding.node, cst.ClassDef):
            return binding.node
        return None

    def _source_import(self, source: SourceFile, name: str) -> ImportSpec:
        if source.is_package_init:
            return ImportSpec(".", name=name)
        if source.in_package:
            return ImportSpec(f".{source.path.stem}", name=name)
        return ImportSpec(source.path.stem, name=name)

    def _required_imports(self, source: SourceFile, calls: Sequence[CallInfo]) -> ImportSet:
        required = ImportSet()
        seen: Set[str] = set()
        for call in calls:
            for binding in call.type_arguments[0].bindings:
                if binding.name in seen:
                    continue
                seen.add(binding.name)
                required.merge(self._imports_for_binding(source, binding))
        return required

    def _imports_for_binding(self, source: SourceFile, binding: NameBinding) -> List[ImportSpec]:
        if binding.origin is BindingOrigin.IMPORT:
            return binding.import_specs
        if binding.origin is BindingOrigin.MODULE:
            return [self._source_import(source, binding.name)]
        return []

    def synthesize(self, source: SourceFile, calls: Sequence[CallInfo]) -> Optional[GeneratedFile]:
        calls = [call for call in calls if not call.chained]
        if not calls:
            return None

        errors = self.check(source, calls)
        if errors:
            raise errors[0]

        imports = self._required_imports(source, calls)
        if not self.prune_imports:
            imports = ImportSet(module_imports(source)).merge(imports)

        allocator = NameAllocator(imports.bound_names)
        for call in calls:
            for binding in call.type_arguments[0].bindings:
                allocator.reserve(binding.name)

        register_alias = allocator.allocate(self.register_name)
        imports.add(
            ImportSpec(
                self.target.module,
                name=self.register_name,
                alias=register_alias if register_alias != self.register_name else None,
            )
        )
        init_name = allocator.allocate("_init")
        left = allocator.allocate("a")
        right = allocator.allocate("b")

        body: List[str] = []
        for call in calls:
            compare_name = allocator.allocate(f"compare_{len(body)}")
            body.append(
                self._render_call_site(call, compare_name, register_alias, left, right)
            )

        lines = [GENERATED_HEADER.format(source=source.path.name)]
        lines.extend(imports.render())
        lines.extend(["", "", f"def {init_name}() -> None:"])
        lines.append("\n\n".join(body))
        lines.extend(["", "", f"{init_name}()", ""])
        content = "\n".join(lines)

        output_path = self.output_path_for(source.path)
        try:
            cst.parse_module(content)
        except cst.ParserSyntaxError as e:
            raise RenderError(output_path, e.message) from e

        log.debug("Rendered %d comparators for %s", len(calls), source.path)
        return GeneratedFile(
            source_path=source.path,
            output_path=output_path,
            content=content,
            call_count=len(calls),
        )

    def _render_call_site(
        self, call: CallInfo, compare_name: str, register_alias: str, left: str, right: str
    ) -> str:
        type_code = _type_code(call.type_arguments[0].code)
        fields = call.field_names
        pad = _INDENT * 2

        lines = [f"{_INDENT}def {compare_name}({left}: {type_code}, {right}: {type_code}) -> int:"]
        if len(fields) == 1:
            lines.append(f"{pad}return {_three_way(left, right, fields[0])}")
        else:
            lines.append(f"{pad}return (")
            for index, field in enumerate(fields):
                joiner = "" if index == 0 else "or "
                lines.append(f"{pad}{_INDENT}{joiner}({_three_way(left, right, field)})")
            lines.append(f"{pad})")

        quoted = ", ".join(f'"{field}"' for field in fields)
        lines.append("")
        lines.append(f"{_INDENT}{register_alias}[{type_code}]({compare_name}, {quoted})")
        return "\n".join(lines)
