"""Walk top-level declarations and emit Bindings-DSL lines.

Only declarations that come from the header being translated are emitted;
everything the preprocessor pulled in from other headers is skipped, except
that typedefs are always recorded so later declarations can use them.

We end up printing the following constructs:

* Structure definitions (``#starttype`` ... ``#stoptype``)
* Opaque types, i.e. structs declared without a body (``#opaque_t``)
* Enums (``#integral_t`` and ``#num``)
* Extern functions (``#ccall``)
* Inline functions (``#cinline``, plus a ``BC_INLINE`` helper macro line)

Example
-------
::

    from c2hsc.backends import get_backend
    from c2hsc.emitter import generate_hsc

    unit = get_backend().parse_file("foo.h")
    output = generate_hsc(unit, "foo.h")
    print("\\n".join(output.hsc_lines))
"""

import os
from collections.abc import (
    Sequence,
)
from typing import (
    assert_never,
)

from c2hsc.hsc_output import (
    HscOutput,
)
from c2hsc.ir import (
    ArrayDeclarator,
    AsmBlock,
    BaseKind,
    BuiltinType,
    Declaration,
    Declarator,
    EnumType,
    ExternalDeclaration,
    FunctionDeclarator,
    FunctionDefinition,
    StructType,
    TranslationUnit,
    TypeSpecifier,
)
from c2hsc.signatures import (
    BINDING,
    C,
    apply_declarators,
    declaration_signature,
    declarator_signature,
    derived_signature,
)


def decl_in_file(filename: str, node: ExternalDeclaration) -> bool:
    """Check whether a declaration came from ``filename`` (compared by base name)."""
    if node.location is None:
        return False
    return os.path.basename(node.location.file) == os.path.basename(filename)


def generate_hsc(unit: TranslationUnit, filename: str, output: HscOutput | None = None) -> HscOutput:
    """Emit every declaration of ``unit`` that belongs to ``filename``.

    :param unit: Parsed translation unit, in source order.
    :param filename: The header being translated.
    :param output: Accumulator to extend; a fresh one if omitted.
    :returns: The accumulator holding the emitted lines.
    """
    if output is None:
        output = HscOutput()
    for node in unit.declarations:
        append_node(filename, node, output)
    return output


def append_node(filename: str, node: ExternalDeclaration, output: HscOutput) -> None:
    if isinstance(node, Declaration):
        _append_declaration(filename, node, output)
    elif isinstance(node, FunctionDefinition):
        _append_inline(filename, node, output)
    elif isinstance(node, AsmBlock):
        return
    else:
        assert_never(node)


def _comment(decl: Declaration) -> str:
    return f"{{- {decl.text} -}}"


def _is_function(declarator: Declarator) -> bool:
    return bool(declarator.derived) and isinstance(declarator.derived[0], FunctionDeclarator)


def _append_declaration(filename: str, decl: Declaration, output: HscOutput) -> None:
    in_file = decl_in_file(filename, decl)

    if not decl.declarators:
        # e.g. "struct foo { ... };" on its own
        if in_file:
            output.append_hsc(_comment(decl))
            append_type(decl.specifiers, "", output)
        return

    for declarator in decl.declarators:
        if _is_function(declarator) and not decl.is_typedef:
            if in_file:
                append_func("#ccall", decl.specifiers, declarator, output)
            continue

        if in_file:
            output.append_hsc(_comment(decl))
            append_type(decl.specifiers, declarator.name or "", output)

        # Record typedefs wherever they come from; declarations in this file
        # may use aliases defined by the headers it includes
        if decl.is_typedef and declarator.name:
            signature = declarator_signature(decl.specifiers, declarator, output.types)
            if signature:
                output.define_type(declarator.name, signature)


def append_func(marker: str, specifiers: Sequence[TypeSpecifier], declarator: Declarator, output: HscOutput) -> None:
    """Print a function as ``#ccall`` or ``#cinline``.

    The syntax is the same for both: the name, then the argument types and
    the ``IO``-wrapped return type separated by ``->``.
    """
    derived = declarator.derived
    return_type = derived_signature(specifiers, derived[1:], output.types)

    arg_types: list[str] = []
    if derived and isinstance(derived[0], FunctionDeclarator):
        for param in derived[0].parameters:
            arg_type = declaration_signature(param, output.types)
            if arg_type:
                arg_types.append(arg_type)
    arg_types.append(f"IO ({return_type})")

    name = declarator.name or "<no name>"
    output.append_hsc(f"{marker} {name} , {' -> '.join(arg_types)}")


def _is_void_parameter(param: Declaration) -> bool:
    if param.declarators and param.declarators[0].derived:
        return False
    return any(isinstance(spec, BuiltinType) and spec.kind is BaseKind.VOID for spec in param.specifiers)


def parameter_count(function: FunctionDeclarator) -> int:
    """Number of parameters, counting ``(void)`` as none."""
    params = function.parameters
    if len(params) == 1 and _is_void_parameter(params[0]):
        return 0
    return len(params)


def _append_inline(filename: str, fdef: FunctionDefinition, output: HscOutput) -> None:
    # Functions defined in a header are assumed to be inline functions
    if not decl_in_file(filename, fdef):
        return

    append_func("#cinline", fdef.specifiers, fdef.declarator, output)

    name = fdef.declarator.name
    derived = fdef.declarator.derived
    if name is None or not derived or not isinstance(derived[0], FunctionDeclarator):
        return

    return_type = derived_signature(fdef.specifiers, derived[1:], output.types, C)
    fun_type = apply_declarators(return_type, derived, output.types, C)
    count = parameter_count(derived[0])
    args = ", ".join(part for part in (name, fun_type) if part)

    if return_type:
        output.append_helper(f"BC_INLINE{count}({args})")
    else:
        output.append_helper(f"BC_INLINE{count}VOID({args})")


def append_type(specifiers: Sequence[TypeSpecifier], declarator_name: str, output: HscOutput) -> None:
    """Emit struct/union and enum definitions found in a specifier sequence.

    :param declarator_name: Name to use when the struct or enum is anonymous,
        e.g. the alias in ``typedef struct { ... } foo;``.
    """
    for spec in specifiers:
        if isinstance(spec, StructType):
            _append_struct(spec, spec.name or declarator_name, output)
        elif isinstance(spec, EnumType):
            _append_enum(spec, spec.name or declarator_name, output)


def _append_struct(spec: StructType, name: str, output: HscOutput) -> None:
    if spec.members is None:
        output.append_hsc(f"#opaque_t {name}")
        return

    output.append_hsc(f"#starttype {name}")
    for member in spec.members:
        # Anonymous members (nested unnamed structs/unions) are not laid out
        if not member.declarators or member.declarators[0].name is None:
            continue
        declarator = member.declarators[0]
        derived = declarator.derived
        if derived and isinstance(derived[0], ArrayDeclarator):
            element_type = derived_signature(member.specifiers, derived[1:], output.types, BINDING)
            output.append_hsc(f"#array_field {declarator.name} , {element_type}")
        else:
            field_type = declaration_signature(member, output.types, BINDING)
            output.append_hsc(f"#field {declarator.name} , {field_type}")
    output.append_hsc("#stoptype")


def _append_enum(spec: EnumType, name: str, output: HscOutput) -> None:
    output.append_hsc(f"#integral_t {name}")
    for enumerator in spec.enumerators or []:
        output.append_hsc(f"#num {enumerator}")
