from .models import (
    BindingOrigin,
    CallArgument,
    CallInfo,
    CallTarget,
    Constant,
    GeneratedFile,
    ImportSpec,
    NameBinding,
    SourceSpan,
    TypeArgument,
    TypeShape,
)
from .errors import (
    CallSiteError,
    CmpgenError,
    ConfigError,
    InvalidFieldName,
    LoadError,
    NoFieldsSpecified,
    NonLiteralFieldArgument,
    RegistrationError,
    RegistryMiss,
    RenderError,
    UnorderableField,
    UnreachableTypeArgument,
)

__all__ = [
    "BindingOrigin",
    "CallArgument",
    "CallInfo",
    "CallTarget",
    "Constant",
    "GeneratedFile",
    "ImportSpec",
    "NameBinding",
    "SourceSpan",
    "TypeArgument",
    "TypeShape",
    # Errors
    "CmpgenError",
    "LoadError",
    "ConfigError",
    "CallSiteError",
    "UnreachableTypeArgument",
    "NonLiteralFieldArgument",
    "NoFieldsSpecified",
    "InvalidFieldName",
    "UnorderableField",
    "RenderError",
    "RegistryMiss",
    "RegistrationError",
]
