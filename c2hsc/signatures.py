"""Turn C specifiers and declarator chains into type signatures.

This is the part that turns ``int ** foo`` into ``Ptr (Ptr CInt)``. One
algorithm walks the specifiers and the derived declarator chain; a
:class:`Dialect` decides how each step is spelled. Two dialects exist:

* :data:`BINDING` - Bindings-DSL signatures (``Ptr``, ``FunPtr``, ``IO``),
  used for fields, arguments and return types.
* :data:`C` - plain C type names, used to re-render inline function
  signatures for the ``BC_INLINE`` helper macros.

``void`` is represented by the empty string, so returning void becomes
``IO ()`` and a void pointer becomes ``Ptr ()``.

Example
-------
::

    from c2hsc.hsc_output import TypeMap
    from c2hsc.ir import BaseKind, BuiltinType, PointerDeclarator
    from c2hsc.signatures import derived_signature

    types = TypeMap()
    derived_signature([BuiltinType(BaseKind.INT)], [PointerDeclarator(), PointerDeclarator()], types)
    # 'Ptr (Ptr CInt)'
"""

from abc import (
    ABCMeta,
    abstractmethod,
)
from collections.abc import (
    Sequence,
)
from typing import (
    assert_never,
)

from c2hsc.hsc_output import (
    TypeMap,
)
from c2hsc.ir import (
    ArrayDeclarator,
    BaseKind,
    BuiltinType,
    Declaration,
    Declarator,
    DerivedDeclarator,
    EnumType,
    FunctionDeclarator,
    PointerDeclarator,
    Signedness,
    SignModifier,
    StructType,
    TypedefName,
    TypeOf,
    TypeSpecifier,
)

# Specifiers that name a type by themselves (everything but signed/unsigned)
BaseSpecifier = BuiltinType | StructType | EnumType | TypedefName | TypeOf


class Dialect(metaclass=ABCMeta):
    """Formatting strategy for one output dialect.

    :attr:`builtin_names` holds, per base kind, the names for no modifier,
    ``signed`` and ``unsigned``, indexed by :attr:`Signedness.value`.
    """

    builtin_names: dict[BaseKind, tuple[str, str, str]]
    bare_names: dict[Signedness, str]

    def builtin_name(self, kind: BaseKind, signedness: Signedness) -> str:
        return self.builtin_names[kind][signedness.value]

    def bare_sign_name(self, signedness: Signedness) -> str:
        """Name of a lone ``signed``/``unsigned`` with no base kind."""
        return self.bare_names[signedness]

    @abstractmethod
    def typedef_name(self, name: str, types: TypeMap) -> str:
        pass

    @abstractmethod
    def function_pointer_base(self, base: str) -> str:
        """Base type handed to the function step of a pointer-to-function."""

    @abstractmethod
    def trailing_pointer(self, base: str) -> str:
        """A pointer that ends the chain."""

    @abstractmethod
    def wrap_pointer(self, inner: str) -> str:
        pass

    @abstractmethod
    def wrap_array(self, inner: str) -> str:
        pass

    @abstractmethod
    def wrap_function(self, arg_types: list[str], return_type: str) -> str:
        pass


class BindingDialect(Dialect):
    builtin_names = {
        BaseKind.VOID: ("", "", ""),
        BaseKind.BOOL: ("CInt", "CInt", "CInt"),
        BaseKind.CHAR: ("CChar", "CSChar", "CUChar"),
        BaseKind.SHORT: ("CShort", "CShort", "CUShort"),
        BaseKind.INT: ("CInt", "CInt", "CUInt"),
        BaseKind.LONG: ("CLong", "CLong", "CULong"),
        BaseKind.FLOAT: ("CFloat", "CFloat", "CFloat"),
        BaseKind.DOUBLE: ("CDouble", "CDouble", "CDouble"),
        BaseKind.COMPLEX: ("", "", ""),
    }
    bare_names = {
        Signedness.NONE: "",
        Signedness.SIGNED: "CInt",
        Signedness.UNSIGNED: "CUInt",
    }

    def typedef_name(self, name: str, types: TypeMap) -> str:
        # <name> marks an alias we know nothing about yet; bindings-dsl
        # also reads it as a reference to the C type of that name
        definition = types.lookup(name)
        if definition is None:
            return f"<{name}>"
        return definition

    def function_pointer_base(self, base: str) -> str:
        return self.trailing_pointer(base)

    def trailing_pointer(self, base: str) -> str:
        if base == "":
            return "Ptr ()"
        if base == "CChar":
            return "CString"
        if " " in base:
            # A typedef can stand for a whole signature, e.g. "Ptr ()"
            return f"Ptr ({base})"
        return f"Ptr {base}"

    def wrap_pointer(self, inner: str) -> str:
        return f"Ptr ({inner})"

    def wrap_array(self, inner: str) -> str:
        return f"Ptr ({inner})"

    def wrap_function(self, arg_types: list[str], return_type: str) -> str:
        return f"FunPtr ({' -> '.join([*arg_types, f'IO ({return_type})'])})"


class CDialect(Dialect):
    builtin_names = {
        BaseKind.VOID: ("", "", ""),
        BaseKind.BOOL: ("int", "int", "int"),
        BaseKind.CHAR: ("char", "signed char", "unsigned char"),
        BaseKind.SHORT: ("short", "signed short", "unsigned short"),
        BaseKind.INT: ("int", "signed int", "unsigned int"),
        BaseKind.LONG: ("long", "signed long", "unsigned long"),
        BaseKind.FLOAT: ("float", "float", "float"),
        BaseKind.DOUBLE: ("double", "double", "double"),
        BaseKind.COMPLEX: ("", "", ""),
    }
    bare_names = {
        Signedness.NONE: "",
        Signedness.SIGNED: "signed",
        Signedness.UNSIGNED: "unsigned",
    }

    def typedef_name(self, name: str, types: TypeMap) -> str:
        # The helper file includes the header, so the alias is valid C as is
        return name

    def function_pointer_base(self, base: str) -> str:
        return f"{base} *"

    def trailing_pointer(self, base: str) -> str:
        if base == "":
            return "void *"
        return f"{base}*"

    def wrap_pointer(self, inner: str) -> str:
        return f"{inner} *"

    def wrap_array(self, inner: str) -> str:
        return f"{inner}[]"

    def wrap_function(self, arg_types: list[str], return_type: str) -> str:
        return ", ".join(t for t in [*arg_types, return_type] if t)


BINDING = BindingDialect()
C = CDialect()


def _base_name(spec: BaseSpecifier, signedness: Signedness, types: TypeMap, dialect: Dialect) -> str:
    if isinstance(spec, BuiltinType):
        return dialect.builtin_name(spec.kind, signedness)
    if isinstance(spec, TypedefName):
        return dialect.typedef_name(spec.name, types)
    if isinstance(spec, (StructType, EnumType, TypeOf)):
        # Structs and enums are emitted by the emitter, never inlined
        return ""
    assert_never(spec)


def specifier_signature(
    specifiers: Sequence[TypeSpecifier],
    types: TypeMap,
    dialect: Dialect = BINDING,
) -> str:
    """Resolve the base type named by a specifier sequence.

    The first specifier that names a type decides the result, using the
    signedness seen before it. A lone ``signed`` or ``unsigned`` falls back
    to the dialect's default integer; an empty sequence is void.
    """
    signedness = Signedness.NONE
    for spec in specifiers:
        if isinstance(spec, SignModifier):
            signedness = spec.signedness
            continue
        return _base_name(spec, signedness, types, dialect)
    return dialect.bare_sign_name(signedness)


def apply_declarators(
    base: str,
    derived: Sequence[DerivedDeclarator],
    types: TypeMap,
    dialect: Dialect = BINDING,
) -> str:
    """Apply a derived declarator chain to an already resolved base type.

    The chain is processed from the identifier outward. A function step
    takes ``base`` as its return type and ends the walk.
    """
    if not derived:
        return base

    head, rest = derived[0], derived[1:]

    if isinstance(head, PointerDeclarator):
        if rest and isinstance(rest[0], FunctionDeclarator):
            return apply_declarators(dialect.function_pointer_base(base), rest, types, dialect)
        if not rest:
            return dialect.trailing_pointer(base)
        return dialect.wrap_pointer(apply_declarators(base, rest, types, dialect))

    if isinstance(head, ArrayDeclarator):
        return dialect.wrap_array(apply_declarators(base, rest, types, dialect))

    if isinstance(head, FunctionDeclarator):
        arg_types = [declaration_signature(param, types, dialect) for param in head.parameters]
        return dialect.wrap_function([t for t in arg_types if t], base)

    assert_never(head)


def derived_signature(
    specifiers: Sequence[TypeSpecifier],
    derived: Sequence[DerivedDeclarator],
    types: TypeMap,
    dialect: Dialect = BINDING,
) -> str:
    return apply_declarators(specifier_signature(specifiers, types, dialect), derived, types, dialect)


def declarator_signature(
    specifiers: Sequence[TypeSpecifier],
    declarator: Declarator,
    types: TypeMap,
    dialect: Dialect = BINDING,
) -> str:
    return derived_signature(specifiers, declarator.derived, types, dialect)


def declaration_signature(
    decl: Declaration,
    types: TypeMap,
    dialect: Dialect = BINDING,
) -> str:
    """Signature of a parameter or member declaration (its first declarator)."""
    if decl.declarators:
        return declarator_signature(decl.specifiers, decl.declarators[0], types, dialect)
    return specifier_signature(decl.specifiers, types, dialect)
