import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

import libcst as cst
from libcst.helpers import get_full_name_for_node
from libcst.metadata import (
    CodeRange,
    MetadataWrapper,
    PositionProvider,
    Scope,
    ScopeProvider,
)

from cmpgen.spec import LoadError, SourceSpan

log = logging.getLogger(__name__)

_TYPE_VARIABLE_FACTORIES = {"TypeVar", "ParamSpec", "TypeVarTuple"}


def module_name_for(path: Path) -> Tuple[str, Optional[str]]:
    """
    Returns the dotted module name of ``path`` and its package.

    Parent directories are included as long as they contain an
    ``__init__.py``. A file outside any package is a top-level module.
    """
    parts: List[str] = []
    directory = path.parent
    while (directory / "__init__.py").is_file() and directory.parent != directory:
        parts.insert(0, directory.name)
        directory = directory.parent

    if path.stem == "__init__":
        module = ".".join(parts) or path.parent.name
        return module, module
    package = ".".join(parts) or None
    module = ".".join(parts + [path.stem])
    return module, package


def _find_type_variables(module: cst.Module) -> FrozenSet[str]:
    names = set()
    for stmt in module.body:
        if not isinstance(stmt, cst.SimpleStatementLine):
            continue
        for small in stmt.body:
            if not isinstance(small, cst.Assign) or not isinstance(small.value, cst.Call):
                continue
            factory = get_full_name_for_node(small.value.func) or ""
            if factory.split(".")[-1] not in _TYPE_VARIABLE_FACTORIES:
                continue
            for target in small.targets:
                if isinstance(target.target, cst.Name):
                    names.add(target.target.value)
    return frozenset(names)


@dataclass
class SourceFile:
    path: Path
    module_name: str
    package: Optional[str]
    wrapper: MetadataWrapper
    scopes: Mapping[cst.CSTNode, Optional[Scope]]
    positions: Mapping[cst.CSTNode, CodeRange]
    type_variables: FrozenSet[str] = frozenset()
    # Dotted paths of the type variables declared anywhere in the loaded unit.
    unit_type_variables: FrozenSet[str] = frozenset()

    @property
    def module(self) -> cst.Module:
        return self.wrapper.module

    @property
    def is_package_init(self) -> bool:
        return self.path.stem == "__init__"

    @property
    def in_package(self) -> bool:
        return (self.path.parent / "__init__.py").is_file()

    def code_for(self, node: cst.CSTNode) -> str:
        return self.module.code_for_node(node)

    def span_for(self, node: cst.CSTNode) -> SourceSpan:
        code_range = self.positions.get(node)
        if code_range is None:
            return SourceSpan(self.path, 0, 0, 0, 0)
        return SourceSpan(
            path=self.path,
            start_line=code_range.start.line,
            start_column=code_range.start.column,
            end_line=code_range.end.line,
            end_column=code_range.end.column,
        )

    @classmethod
    def parse(cls, path: Path, code: str) -> "SourceFile":
        try:
            module = cst.parse_module(code)
        except cst.ParserSyntaxError as e:
            raise LoadError(path, f"syntax error: {e.message} (line {e.raw_line})") from e

        wrapper = MetadataWrapper(module)
        module_name, package = module_name_for(path)
        return cls(
            path=path,
            module_name=module_name,
            package=package,
            wrapper=wrapper,
            scopes=wrapper.resolve(ScopeProvider),
            positions=wrapper.resolve(PositionProvider),
            type_variables=_find_type_variables(wrapper.module),
        )


@dataclass
class CompilationUnit:
    root: Path
    files: List[SourceFile] = field(default_factory=list)

    def by_path(self) -> Dict[Path, SourceFile]:
        return {f.path: f for f in self.files}


def link_type_variables(files: List[SourceFile]) -> None:
    """
    Shares the type variables of every file with the whole unit.

    Each variable is known by its full module path and by the bare stem,
    since a directory that is not a package imports its siblings as
    top-level modules.
    """
    paths = set()
    for source in files:
        for name in source.type_variables:
            paths.add(f"{source.module_name}.{name}")
            paths.add(f"{source.path.stem}.{name}")
    known = frozenset(paths)
    for source in files:
        source.unit_type_variables = known


def load_unit(directory: Path, generated_suffix: str = "_generated") -> CompilationUnit:
    """
    Parses every ``*.py`` file directly inside ``directory``.

    Previously generated companions are skipped so they never feed back
    into the analysis.
    """
    if not directory.is_dir():
        raise LoadError(directory, "not a directory")

    unit = CompilationUnit(root=directory)
    for path in sorted(directory.glob("*.py")):
        if generated_suffix and path.stem.endswith(generated_suffix):
            log.debug("Skipping generated file %s", path)
            continue
        try:
            code = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(path, str(e)) from e
        unit.files.append(SourceFile.parse(path, code))

    link_type_variables(unit.files)
    log.debug("Loaded %d source files from %s", len(unit.files), directory)
    return unit
