import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import libcst as cst

from cmpgen.spec import BindingOrigin, CallInfo, CallTarget, TypeArgument

from .bindings import resolve_binding
from .chains import CalleeChain, subscript_values, unwrap_callee
from .reachability import classify_argument, classify_type, unreachable_type
from .unit import CompilationUnit, SourceFile

log = logging.getLogger(__name__)


class CallSiteVisitor(cst.CSTVisitor):
    def __init__(self, analyzer: "CallSiteAnalyzer", source: SourceFile):
        self.analyzer = analyzer
        self.source = source
        self.calls: List[CallInfo] = []

    def visit_Call(self, node: cst.Call) -> Optional[bool]:
        info = self.analyzer.inspect(self.source, node)
        if info is not None:
            self.calls.append(info)
        # Arguments may contain further call sites.
        return True


class CallSiteAnalyzer:
    """
    Finds the call sites of one marker function across a compilation unit.

    A call matches when its callee, after unwrapping calls, subscripts and
    attribute accesses, resolves to the target's qualified name through the
    file's own bindings. Calls through local aliases of the marker are not
    recognised.
    """

    def __init__(self, target: CallTarget):
        self.target = target

    def resolve_callee(
        self, source: SourceFile, call: cst.Call
    ) -> Optional[Tuple[str, CalleeChain]]:
        chain = unwrap_callee(call)
        if chain is None:
            return None

        scope = source.scopes.get(call)
        name = chain.root.value
        binding = resolve_binding(source, scope, name)

        base: Optional[str] = None
        if binding.origin is BindingOrigin.IMPORT and binding.import_spec:
            base = binding.import_spec.qualified_path(source.package)
        elif binding.origin is BindingOrigin.MODULE:
            base = f"{source.module_name}.{name}"
        elif binding.origin is BindingOrigin.BUILTIN:
            base = f"builtins.{name}"
        if base is None:
            return None

        return ".".join([base, *chain.attributes]), chain

    def inspect(self, source: SourceFile, call: cst.Call) -> Optional[CallInfo]:
        resolved = self.resolve_callee(source, call)
        if resolved is None:
            return None
        callee, chain = resolved
        if not self.target.matches(callee):
            return None

        scope = source.scopes.get(call)
        type_arguments: List[TypeArgument] = []
        if chain.subscript is not None:
            for element, value in zip(chain.subscript.slice, subscript_values(chain.subscript)):
                if value is None:
                    type_arguments.append(unreachable_type(source, element))
                else:
                    type_arguments.append(classify_type(source, scope, value))

        arguments = tuple(classify_argument(source, scope, arg) for arg in call.args)
        info = CallInfo(
            file_path=source.path,
            span=source.span_for(call),
            callee=callee,
            type_arguments=tuple(type_arguments),
            arguments=arguments,
            chained=chain.through_call,
            node=call,
        )
        log.debug("Found call site %s at %s", callee, info.span)
        return info

    def collect(self, source: SourceFile) -> List[CallInfo]:
        visitor = CallSiteVisitor(self, source)
        source.module.visit(visitor)
        return visitor.calls

    def collect_unit(self, unit: CompilationUnit) -> Dict[Path, List[CallInfo]]:
        return {source.path: self.collect(source) for source in unit.files}
