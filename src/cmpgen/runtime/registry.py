import inspect
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Sequence

from cmpgen.spec.errors import RegistrationError, RegistryMiss

log = logging.getLogger(__name__)

Comparator = Callable[[Any, Any], int]

# Generation and lookup must agree on this byte for byte.
FIELD_SEPARATOR = ", "


@dataclass(frozen=True)
class RegistryKey:
    type: Any
    fields: str

    @classmethod
    def for_fields(cls, tp: Any, fields: Sequence[str]) -> "RegistryKey":
        return cls(tp, FIELD_SEPARATOR.join(fields))


def _check_comparator(tp: Any, comparator: Any, fields: Sequence[str]) -> None:
    if not fields:
        raise RegistrationError(tp, "at least one field name is required", fields)
    for name in fields:
        if not isinstance(name, str):
            raise RegistrationError(tp, f"field name {name!r} is not a string", fields)
    if not callable(comparator):
        raise RegistrationError(tp, f"{comparator!r} is not callable", fields)

    try:
        signature = inspect.signature(comparator)
    except (TypeError, ValueError):
        # Some builtins carry no signature; nothing left to check.
        return

    try:
        bound = signature.bind(None, None)
    except TypeError:
        raise RegistrationError(
            tp, "comparator must accept exactly two positional arguments", fields
        )

    for param_name in bound.arguments:
        param = signature.parameters[param_name]
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            continue
        annotation = param.annotation
        if annotation in (inspect.Parameter.empty, Any) or isinstance(annotation, str):
            continue
        if annotation != tp:
            raise RegistrationError(
                tp,
                f"parameter '{param_name}' is annotated as {annotation!r}",
                fields,
            )


class Registry:
    """
    Comparators keyed by (type, ordered field names).

    Companion modules populate a registry when they are imported; call sites
    of ``cmp_by_fields`` read from it. Instances are independent, so tests
    and embedding applications can use a private one.
    """

    def __init__(self):
        self._comparators: Dict[RegistryKey, Comparator] = {}
        self._lock = threading.Lock()
        self.register = Registrar(self)
        self.cmp_by_fields = FieldComparatorLookup(self)

    def add(self, tp: Any, comparator: Comparator, fields: Sequence[str]) -> RegistryKey:
        fields = tuple(fields)
        _check_comparator(tp, comparator, fields)
        key = RegistryKey.for_fields(tp, fields)
        with self._lock:
            if key in self._comparators:
                log.debug("Overwriting comparator for %r", key)
            self._comparators[key] = comparator
        return key

    def lookup(self, tp: Any, fields: Sequence[str]) -> Comparator:
        key = RegistryKey.for_fields(tp, fields)
        with self._lock:
            comparator = self._comparators.get(key)
        if comparator is None:
            raise RegistryMiss(tp, key.fields)
        return comparator

    def keys(self) -> List[RegistryKey]:
        with self._lock:
            return list(self._comparators)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._comparators

    def __len__(self) -> int:
        with self._lock:
            return len(self._comparators)

    def __iter__(self) -> Iterator[RegistryKey]:
        return iter(self.keys())


class Registrar:
    """``registry.register[T](comparator, "field", ...)``, used by generated code."""

    def __init__(self, registry: Registry):
        self._registry = registry

    def __getitem__(self, tp: Any) -> Callable[..., Comparator]:
        registry = self._registry

        def register(comparator: Comparator, *fields: str) -> Comparator:
            registry.add(tp, comparator, fields)
            return comparator

        return register


class FieldComparatorLookup:
    """``registry.cmp_by_fields[T]("field", ...)``, the marker call sites use."""

    def __init__(self, registry: Registry):
        self._registry = registry

    def __getitem__(self, tp: Any) -> Callable[..., Comparator]:
        registry = self._registry

        def cmp_by_fields(field: str, *fields: str) -> Comparator:
            return registry.lookup(tp, (field, *fields))

        return cmp_by_fields


default_registry = Registry()

cmp_by_fields = default_registry.cmp_by_fields
register = default_registry.register
