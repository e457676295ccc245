import keyword
from typing import Iterable, List

from cmpgen.spec import (
    CallInfo,
    CallSiteError,
    InvalidFieldName,
    NoFieldsSpecified,
    NonLiteralFieldArgument,
    UnreachableTypeArgument,
)


class ArgumentValidator:
    """
    Checks that a call site carries everything needed to generate code.

    Duplicate field names are accepted and kept: the comparator compares the
    field twice and the registry key keeps the duplicate, so generation and
    lookup still agree.
    """

    def validate(self, call: CallInfo) -> List[CallSiteError]:
        if call.chained:
            # Invokes the comparator an inner call site produced.
            return []

        errors: List[CallSiteError] = []

        if len(call.type_arguments) != 1:
            errors.append(
                UnreachableTypeArgument(
                    call.span,
                    f"expected exactly one type argument, got {len(call.type_arguments)}",
                )
            )
        elif not call.type_arguments[0].reachable:
            type_arg = call.type_arguments[0]
            errors.append(
                UnreachableTypeArgument(
                    call.span,
                    f"type '{type_arg.code}' is not visible at module level",
                )
            )

        if not call.arguments:
            errors.append(NoFieldsSpecified(call.span, "at least one field name is required"))
            return errors

        for arg in call.arguments:
            if not arg.is_positional:
                errors.append(
                    NonLiteralFieldArgument(
                        arg.span, f"'{arg.code}' must be a positional string literal"
                    )
                )
            elif not arg.is_string_literal or arg.constant is None:
                errors.append(
                    NonLiteralFieldArgument(
                        arg.span, f"'{arg.code}' is not a string literal"
                    )
                )
            elif not arg.constant.value.isidentifier() or keyword.iskeyword(
                arg.constant.value
            ):
                errors.append(
                    InvalidFieldName(
                        arg.span, f"{arg.constant.value!r} is not a valid attribute name"
                    )
                )
        return errors

    def validate_all(self, calls: Iterable[CallInfo]) -> List[CallSiteError]:
        errors: List[CallSiteError] = []
        for call in calls:
            errors.extend(self.validate(call))
        return errors
