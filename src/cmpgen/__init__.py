from .runtime import (
    Registry,
    RegistryKey,
    chain,
    cmp_by,
    cmp_by_fields,
    default_registry,
    import_companions,
    register,
)
from .spec.errors import CmpgenError, RegistrationError, RegistryMiss

__version__ = "0.1.0"

__all__ = [
    "Registry",
    "RegistryKey",
    "chain",
    "cmp_by",
    "cmp_by_fields",
    "default_registry",
    "import_companions",
    "register",
    "CmpgenError",
    "RegistrationError",
    "RegistryMiss",
]
