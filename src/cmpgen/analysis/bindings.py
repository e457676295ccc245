from typing import List, Optional, Tuple

import libcst as cst
from libcst.helpers import get_full_name_for_node
from libcst.metadata import (
    Assignment,
    BaseAssignment,
    BuiltinAssignment,
    BuiltinScope,
    GlobalScope,
    ImportAssignment,
    Scope,
)

from cmpgen.spec import BindingOrigin, ImportSpec, NameBinding

from .unit import SourceFile

# Type variables predefined by the standard library.
TYPING_TYPE_VARIABLES = frozenset({"typing.AnyStr", "typing_extensions.AnyStr"})


def import_module_name(node: cst.ImportFrom) -> str:
    dots = "." * len(node.relative)
    name = get_full_name_for_node(node.module) if node.module else ""
    return f"{dots}{name or ''}"


def specs_from_import(node: cst.CSTNode) -> List[ImportSpec]:
    """Every binding introduced by one import statement. Star imports bind nothing we can name."""
    specs: List[ImportSpec] = []
    if isinstance(node, cst.Import):
        for alias in node.names:
            specs.append(ImportSpec(alias.evaluated_name, alias=_alias_of(alias)))
    elif isinstance(node, cst.ImportFrom) and not isinstance(node.names, cst.ImportStar):
        module = import_module_name(node)
        for alias in node.names:
            specs.append(ImportSpec(module, name=alias.evaluated_name, alias=_alias_of(alias)))
    return specs


def _alias_of(alias: cst.ImportAlias) -> Optional[str]:
    # `import x as x` binds the same name as `import x`.
    name = alias.evaluated_alias
    return None if name == alias.evaluated_name else name


class _ModuleImportCollector(cst.CSTVisitor):
    def __init__(self):
        self.specs: List[ImportSpec] = []

    def visit_Import(self, node: cst.Import) -> Optional[bool]:
        self.specs.extend(specs_from_import(node))
        return False

    def visit_ImportFrom(self, node: cst.ImportFrom) -> Optional[bool]:
        self.specs.extend(specs_from_import(node))
        return False

    # Imports inside these bind local names.
    def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
        return False

    def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
        return False

    def visit_Lambda(self, node: cst.Lambda) -> Optional[bool]:
        return False


def module_imports(source: SourceFile) -> List[ImportSpec]:
    """
    Imports that bind module-level names, in source order.

    This includes imports nested in top-level ``if``/``try`` blocks such as
    ``if TYPE_CHECKING:``.
    """
    collector = _ModuleImportCollector()
    source.module.visit(collector)
    return collector.specs


def _spec_for_assignment(assignment: ImportAssignment) -> Optional[ImportSpec]:
    for spec in specs_from_import(assignment.node):
        if spec.bound_name == assignment.name:
            return spec
    return None


def _is_module_level(assignment: BaseAssignment) -> bool:
    return isinstance(assignment.scope, (GlobalScope, BuiltinScope))


def _line_of(source: SourceFile, assignment: BaseAssignment) -> int:
    code_range = source.positions.get(assignment.node)
    return code_range.start.line if code_range else 0


def is_type_variable_path(source: SourceFile, path: Optional[str]) -> bool:
    """True when the dotted ``path`` names a TypeVar of the unit or of ``typing``."""
    if not path:
        return False
    return path in source.unit_type_variables or path in TYPING_TYPE_VARIABLES


def _submodule_imports(
    source: SourceFile, imports: List[ImportAssignment], chosen: Optional[ImportSpec]
) -> Tuple[ImportSpec, ...]:
    if chosen is None or chosen.name is not None or chosen.alias:
        return ()
    found: List[ImportSpec] = []
    for assignment in sorted(imports, key=lambda a: _line_of(source, a)):
        for spec in specs_from_import(assignment.node):
            plain = spec.name is None and not spec.alias
            if plain and spec.bound_name == chosen.bound_name and spec != chosen:
                if spec not in found:
                    found.append(spec)
    return tuple(found)


def resolve_binding(source: SourceFile, scope: Optional[Scope], name: str) -> NameBinding:
    """
    Finds where ``name`` is bound as seen from ``scope``.

    Lookup follows Python's rules (local, enclosing functions, global,
    builtins; class bodies are not visible from nested functions). When a
    name has several assignments, one local assignment is enough to make the
    binding LOCAL.
    """
    if scope is None:
        scope = source.scopes.get(source.module)
    if scope is None:
        return NameBinding(name, BindingOrigin.UNRESOLVED)

    assignments = list(scope[name])
    if not assignments:
        return NameBinding(name, BindingOrigin.UNRESOLVED)

    local = [a for a in assignments if not _is_module_level(a)]
    if local:
        node = local[0].node if isinstance(local[0], Assignment) else None
        return NameBinding(name, BindingOrigin.LOCAL, node=node)

    if all(isinstance(a, BuiltinAssignment) for a in assignments):
        return NameBinding(name, BindingOrigin.BUILTIN)

    if name in source.type_variables:
        return NameBinding(name, BindingOrigin.TYPE_VARIABLE)

    imports = [a for a in assignments if isinstance(a, ImportAssignment)]
    if imports and len(imports) == len(assignments):
        # With several candidate imports the last one in the file wins.
        chosen = max(imports, key=lambda a: _line_of(source, a))
        spec = _spec_for_assignment(chosen)
        if spec is not None and is_type_variable_path(
            source, spec.qualified_path(source.package)
        ):
            return NameBinding(name, BindingOrigin.TYPE_VARIABLE, import_spec=spec)
        return NameBinding(
            name,
            BindingOrigin.IMPORT,
            import_spec=spec,
            node=chosen.node,
            submodule_imports=_submodule_imports(source, imports, spec),
        )

    definitions = [a for a in assignments if isinstance(a, Assignment)]
    node = definitions[0].node if definitions else None
    return NameBinding(name, BindingOrigin.MODULE, node=node)
