from .analyzer import CallSiteAnalyzer, CallSiteVisitor
from .bindings import module_imports, resolve_binding, specs_from_import
from .chains import CalleeChain, unwrap_callee, unwrap_reference
from .reachability import classify_argument, classify_type, evaluate_constant
from .unit import CompilationUnit, SourceFile, load_unit, module_name_for
from .validator import ArgumentValidator

__all__ = [
    "CallSiteAnalyzer",
    "CallSiteVisitor",
    "ArgumentValidator",
    "CompilationUnit",
    "SourceFile",
    "load_unit",
    "module_name_for",
    "module_imports",
    "resolve_binding",
    "specs_from_import",
    "CalleeChain",
    "unwrap_callee",
    "unwrap_reference",
    "classify_argument",
    "classify_type",
    "evaluate_constant",
]
