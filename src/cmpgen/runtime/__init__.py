from .registry import (
    FIELD_SEPARATOR,
    Comparator,
    FieldComparatorLookup,
    Registrar,
    Registry,
    RegistryKey,
    cmp_by_fields,
    default_registry,
    register,
)
from .combinators import chain, cmp_by
from .loader import import_companions

__all__ = [
    "FIELD_SEPARATOR",
    "Comparator",
    "FieldComparatorLookup",
    "Registrar",
    "Registry",
    "RegistryKey",
    "cmp_by_fields",
    "default_registry",
    "register",
    "import_companions",
    "chain",
    "cmp_by",
]
