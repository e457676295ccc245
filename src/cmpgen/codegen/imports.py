import keyword
from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple

from cmpgen.spec import ImportSpec


class NameAllocator:
    """Hands out identifiers that do not clash with names already in use."""

    def __init__(self, taken: Iterable[str] = ()):
        self._taken: Set[str] = set(taken)

    def reserve(self, name: str) -> None:
        self._taken.add(name)

    def allocate(self, preferred: str) -> str:
        name = preferred
        counter = 1
        while name in self._taken or keyword.iskeyword(name):
            name = f"{preferred}_{counter}"
            counter += 1
        self._taken.add(name)
        return name


class ImportSet:
    """
    An ordered, de-duplicated collection of import bindings.

    Two imports are the same when they bind the same name to the same
    dotted path. ``from __future__`` imports are never carried over: they
    only apply to the module that declares them.
    """

    def __init__(self, specs: Iterable[ImportSpec] = ()):
        self._specs: Dict[Tuple[str, str], ImportSpec] = {}
        for spec in specs:
            self.add(spec)

    def add(self, spec: ImportSpec) -> bool:
        if spec.is_future or spec.identity in self._specs:
            return False
        self._specs[spec.identity] = spec
        return True

    def merge(self, other: Iterable[ImportSpec]) -> "ImportSet":
        for spec in other:
            self.add(spec)
        return self

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, spec: object) -> bool:
        return isinstance(spec, ImportSpec) and spec.identity in self._specs

    @property
    def bound_names(self) -> Set[str]:
        return {spec.bound_name for spec in self._specs.values()}

    def pruned(self, used_names: Iterable[str]) -> "ImportSet":
        used = set(used_names)
        return ImportSet(spec for spec in self if spec.bound_name in used)

    def render(self) -> List[str]:
        """
        Renders sorted import lines.

        Absolute imports come first, relative ones follow after a blank
        line. ``from`` imports of one module are combined on one line.
        """
        plain: List[str] = []
        absolute_from: Dict[str, List[str]] = defaultdict(list)
        relative_from: Dict[str, List[str]] = defaultdict(list)

        for spec in self:
            if spec.name is None:
                plain.append(spec.render())
                continue
            entry = f"{spec.name} as {spec.alias}" if spec.alias else spec.name
            bucket = relative_from if spec.is_relative else absolute_from
            if entry not in bucket[spec.module]:
                bucket[spec.module].append(entry)

        def from_lines(groups: Dict[str, List[str]]) -> List[str]:
            return [
                f"from {module} import {', '.join(sorted(names))}"
                for module, names in sorted(groups.items())
            ]

        lines = sorted(set(plain)) + from_lines(absolute_from)
        relative = from_lines(relative_from)
        if lines and relative:
            lines.append("")
        return lines + relative
