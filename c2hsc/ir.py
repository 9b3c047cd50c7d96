"""Intermediate Representation (IR) for parsed C declarations.

Parser backends produce this IR; the emitter consumes it to generate
Bindings-DSL ``.hsc`` lines. The IR mirrors the shape of C's declaration
grammar rather than its semantics: a declaration is a sequence of type
specifiers plus zero or more declarators, and each declarator carries a
chain of derived declarators (pointer, array, function).

Type Specifiers
---------------
* :class:`BuiltinType` - ``void``, ``_Bool``, ``char``, ``short``, ``int``,
  ``long``, ``float``, ``double``, ``_Complex``
* :class:`SignModifier` - ``signed`` / ``unsigned``
* :class:`StructType` - struct or union, with or without a member list
* :class:`EnumType` - enum, with or without an enumerator list
* :class:`TypedefName` - reference to a typedef alias
* :class:`TypeOf` - ``typeof`` expression or type

Derived Declarators
-------------------
* :class:`PointerDeclarator`
* :class:`ArrayDeclarator`
* :class:`FunctionDeclarator`

Derived declarators are ordered from the identifier outward, so
``int (*f)(void)`` is ``[PointerDeclarator(), FunctionDeclarator([...])]``
("f is a pointer to a function") while ``int *f(void)`` is
``[FunctionDeclarator([...]), PointerDeclarator()]``.

Top-level Nodes
---------------
* :class:`Declaration` - plain declaration (possibly a typedef)
* :class:`FunctionDefinition` - function with a body
* :class:`AsmBlock` - top-level assembly block

Example
-------
::

    from c2hsc.ir import BaseKind, BuiltinType, Declaration, Declarator, PointerDeclarator

    # char *name;
    decl = Declaration(
        specifiers=[BuiltinType(BaseKind.CHAR)],
        declarators=[Declarator("name", [PointerDeclarator()])],
    )
"""

from __future__ import (
    annotations,
)

import enum
from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Optional,
    Protocol,
    Union,
)

# =============================================================================
# Source Location
# =============================================================================


@dataclass(frozen=True)
class SourceLocation:
    """Location of a declaration in the preprocessed input.

    The preprocessor's line markers make ``file`` name the header a
    declaration actually came from, which is what the emitter uses to drop
    declarations pulled in through ``#include``.

    :param file: Path of the originating file, as named by the line markers.
    :param line: Line number (1-indexed).
    :param column: Column number (1-indexed), or None if unknown.
    """

    file: str
    line: int
    column: Optional[int] = None


# =============================================================================
# Type Specifiers
# =============================================================================


class BaseKind(enum.Enum):
    """Concrete base kinds a specifier sequence can name."""

    VOID = "void"
    BOOL = "_Bool"
    CHAR = "char"
    SHORT = "short"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    COMPLEX = "_Complex"


class Signedness(enum.Enum):
    """Tri-state signedness accumulated while scanning specifiers."""

    NONE = 0
    SIGNED = 1
    UNSIGNED = 2


@dataclass(frozen=True)
class BuiltinType:
    """One of C's keyword base types.

    :param kind: Which base type.
    """

    kind: BaseKind


@dataclass(frozen=True)
class SignModifier:
    """A ``signed`` or ``unsigned`` keyword.

    :param signedness: :attr:`Signedness.SIGNED` or :attr:`Signedness.UNSIGNED`.
    """

    signedness: Signedness


@dataclass
class StructType:
    """A struct or union specifier.

    :param name: The tag, or None for an anonymous struct/union.
    :param members: Member declarations, or None when the specifier is a
        reference (``struct foo``) rather than a definition.
    :param is_union: True for ``union``.

    Example
    -------
    ::

        # struct point { int x; int y; }
        StructType("point", [
            Declaration([BuiltinType(BaseKind.INT)], [Declarator("x")]),
            Declaration([BuiltinType(BaseKind.INT)], [Declarator("y")]),
        ])
    """

    name: Optional[str]
    members: Optional[list[Declaration]] = None
    is_union: bool = False


@dataclass
class EnumType:
    """An enum specifier.

    Only enumerator names are kept; values are assigned by the target
    binding language.

    :param name: The tag, or None for an anonymous enum.
    :param enumerators: Constant names in declaration order, or None when
        the specifier is a reference (``enum color``).
    """

    name: Optional[str]
    enumerators: Optional[list[str]] = None


@dataclass(frozen=True)
class TypedefName:
    """A reference to a typedef alias, e.g. ``size_t``.

    :param name: The alias name.
    """

    name: str


@dataclass(frozen=True)
class TypeOf:
    """A ``typeof(...)`` specifier.

    :param text: Source text of the operand, for diagnostics.
    """

    text: str = ""


TypeSpecifier = Union[BuiltinType, SignModifier, StructType, EnumType, TypedefName, TypeOf]


# =============================================================================
# Declarators
# =============================================================================


@dataclass(frozen=True)
class PointerDeclarator:
    """``*`` applied to the rest of the chain."""


@dataclass(frozen=True)
class ArrayDeclarator:
    """``[size]`` applied to the rest of the chain.

    :param size: Dimension as an integer, a symbolic expression, or None
        for an incomplete array.
    """

    size: Union[int, str, None] = None


@dataclass
class FunctionDeclarator:
    """``(params)`` applied to the rest of the chain.

    :param parameters: Parameter declarations, each with at most one
        (possibly abstract) declarator. ``(void)`` is kept as a single
        ``void`` parameter, as written.
    :param is_variadic: True if the list ends in ``...``.
    """

    parameters: list[Declaration] = field(default_factory=list)
    is_variadic: bool = False


DerivedDeclarator = Union[PointerDeclarator, ArrayDeclarator, FunctionDeclarator]


@dataclass
class Declarator:
    """A declared name together with its derived declarator chain.

    :param name: The identifier, or None for an abstract declarator
        (unnamed parameter).
    :param derived: Derived declarators, ordered from the identifier outward.
    """

    name: Optional[str] = None
    derived: list[DerivedDeclarator] = field(default_factory=list)


# =============================================================================
# Top-level Nodes
# =============================================================================


@dataclass
class Declaration:
    """A plain declaration: specifiers plus zero or more declarators.

    Also used for struct members and function parameters.

    :param specifiers: Type specifiers in source order.
    :param declarators: Declarators; empty for ``struct foo { ... };``.
    :param is_typedef: True if the storage class is ``typedef``.
    :param location: Where the declaration came from.
    :param text: Pretty-printed source of the declaration, for comments.
    """

    specifiers: list[TypeSpecifier]
    declarators: list[Declarator] = field(default_factory=list)
    is_typedef: bool = False
    location: Optional[SourceLocation] = None
    text: str = ""


@dataclass
class FunctionDefinition:
    """A function with a body; in a header this is an inline function.

    :param specifiers: Return type specifiers.
    :param declarator: The function's declarator; its first derived
        declarator is the :class:`FunctionDeclarator`.
    :param location: Where the definition came from.
    :param text: Pretty-printed prototype, for diagnostics.
    """

    specifiers: list[TypeSpecifier]
    declarator: Declarator
    location: Optional[SourceLocation] = None
    text: str = ""


@dataclass
class AsmBlock:
    """A top-level ``asm(...)`` block. Never emitted."""

    location: Optional[SourceLocation] = None
    text: str = ""


ExternalDeclaration = Union[Declaration, FunctionDefinition, AsmBlock]


@dataclass
class TranslationUnit:
    """All top-level declarations of one preprocessed header, in order.

    :param path: Path of the header that was parsed.
    :param declarations: Declarations from the header and everything it
        includes, each tagged with its own location.
    """

    path: str
    declarations: list[ExternalDeclaration] = field(default_factory=list)

    def __str__(self) -> str:
        return f"TranslationUnit({self.path}, {len(self.declarations)} declarations)"


# =============================================================================
# Parser Backend Protocol
# =============================================================================


class ParserBackend(Protocol):  # pylint: disable=too-few-public-methods
    """Interface every parser backend implements.

    A backend preprocesses and parses C source, and converts its native AST
    into a :class:`TranslationUnit`.

    Example
    -------
    ::

        from c2hsc.backends import get_backend

        backend = get_backend()
        unit = backend.parse("int foo(void);", "test.h")
    """

    # pylint: disable=unnecessary-ellipsis

    def parse(
        self,
        code: str,
        filename: str,
        include_dirs: Optional[list[str]] = None,
        extra_args: Optional[list[str]] = None,
        cpp_path: Optional[str] = None,
        use_cpp: bool = True,
    ) -> TranslationUnit:
        """Parse in-memory C code.

        :param code: Source code to parse.
        :param filename: Name the declarations should be attributed to.
        :param include_dirs: Directories to search for ``#include`` files.
        :param extra_args: Additional preprocessor arguments.
        :param cpp_path: Explicit preprocessor (``cpp`` or ``gcc``) to run.
        :param use_cpp: If False, parse the code without preprocessing.
        :returns: The parsed translation unit.
        :raises RuntimeError: If preprocessing or parsing fails.
        """
        ...

    def parse_file(
        self,
        path: str,
        include_dirs: Optional[list[str]] = None,
        extra_args: Optional[list[str]] = None,
        cpp_path: Optional[str] = None,
    ) -> TranslationUnit:
        """Preprocess and parse a header on disk.

        :raises RuntimeError: If preprocessing or parsing fails.
        """
        ...

    @property
    def name(self) -> str:
        """Human-readable name of this backend (e.g., ``"pycparser"``)."""
        ...
