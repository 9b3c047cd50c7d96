# pylint: disable=cyclic-import
# Cyclic import is intentional - backends register themselves when loaded
"""pycparser-based parser backend.

This backend runs the system C preprocessor and parses its output with
pycparser (pure Python C99 parser). The preprocessor's line markers tell
pycparser which header each declaration came from, which is what lets the
emitter skip declarations from included headers.

Limitations
-----------
* C99 only; GNU extensions are neutralised with ``-D`` defines, so headers
  relying on them heavily may need a fake libc include directory
  (``-I`` or ``--cppopts``)
* Macro definitions are consumed by the preprocessor

Example
-------
::

    from c2hsc.backends.pycparser_backend import PycparserBackend

    backend = PycparserBackend()
    unit = backend.parse_file("foo.h")
"""

import os
import platform
import subprocess

from pycparser import (
    c_ast,
    c_generator,
    c_parser,
)
from pycparser.plyparser import (
    ParseError,
)

from c2hsc.backends import (
    register_backend,
)
from c2hsc.ir import (
    ArrayDeclarator,
    BaseKind,
    BuiltinType,
    Declaration,
    Declarator,
    DerivedDeclarator,
    EnumType,
    ExternalDeclaration,
    FunctionDeclarator,
    FunctionDefinition,
    PointerDeclarator,
    Signedness,
    SignModifier,
    SourceLocation,
    StructType,
    TranslationUnit,
    TypedefName,
    TypeSpecifier,
)

# Keywords pycparser reports as IdentifierType names; anything else there
# is a typedef name
BUILTIN_SPECIFIERS: dict[str, TypeSpecifier] = {
    "void": BuiltinType(BaseKind.VOID),
    "_Bool": BuiltinType(BaseKind.BOOL),
    "char": BuiltinType(BaseKind.CHAR),
    "short": BuiltinType(BaseKind.SHORT),
    "int": BuiltinType(BaseKind.INT),
    "long": BuiltinType(BaseKind.LONG),
    "float": BuiltinType(BaseKind.FLOAT),
    "double": BuiltinType(BaseKind.DOUBLE),
    "_Complex": BuiltinType(BaseKind.COMPLEX),
    "signed": SignModifier(Signedness.SIGNED),
    "unsigned": SignModifier(Signedness.UNSIGNED),
}

# GNU extensions pycparser cannot parse
GNU_EXTENSION_DEFINES = [
    "-D__attribute__(x)=",
    "-D__extension__=",
    "-D__inline=",
    "-D__inline__=",
    "-D__asm(x)=",
    "-D__asm__(x)=",
    "-D__restrict=",
    "-D__restrict__=",
    "-D__builtin_va_list=int",
]


def render(node: c_ast.Node) -> str:
    """Pretty-print a declaration back to C on a single line."""
    text = c_generator.CGenerator().visit(node)
    return " ".join(f"{text};".split())


class ASTConverter:
    """Converts a pycparser AST to the c2hsc IR.

    Declarations are kept in source order, including those from included
    headers; each carries the location pycparser recorded for it.

    :param filename: Fallback file name for nodes without coordinates.
    """

    def __init__(self, filename: str) -> None:
        self.filename = filename

    def convert(self, ast: c_ast.FileAST) -> TranslationUnit:
        """Convert a pycparser AST to a :class:`~c2hsc.ir.TranslationUnit`."""
        declarations: list[ExternalDeclaration] = []
        for node in ast.ext:
            decl = self._visit_top_level(node)
            if decl is not None:
                declarations.append(decl)
        return TranslationUnit(path=self.filename, declarations=declarations)

    def _visit_top_level(self, node: c_ast.Node) -> ExternalDeclaration | None:
        if isinstance(node, (c_ast.Decl, c_ast.Typedef)):
            return self._convert_decl(node, text=render(node))
        if isinstance(node, c_ast.FuncDef):
            return self._convert_func_def(node)
        # Pragmas and static asserts declare nothing
        return None

    def _convert_decl(
        self,
        node: c_ast.Decl | c_ast.Typedef | c_ast.Typename,
        text: str = "",
    ) -> Declaration:
        """Convert a declaration, struct member, or parameter."""
        specifiers, derived = self._split_type(node.type)

        declarators: list[Declarator] = []
        if node.name is not None or derived or isinstance(node.type, c_ast.TypeDecl):
            declarators.append(Declarator(name=node.name, derived=derived))

        storage = getattr(node, "storage", None) or []
        return Declaration(
            specifiers=specifiers,
            declarators=declarators,
            is_typedef="typedef" in storage,
            location=self._get_location(node),
            text=text,
        )

    def _convert_func_def(self, node: c_ast.FuncDef) -> FunctionDefinition:
        decl = node.decl
        specifiers, derived = self._split_type(decl.type)
        return FunctionDefinition(
            specifiers=specifiers,
            declarator=Declarator(name=decl.name, derived=derived),
            location=self._get_location(node),
            text=render(decl),
        )

    def _split_type(self, node: c_ast.Node) -> tuple[list[TypeSpecifier], list[DerivedDeclarator]]:
        """Peel derived declarators off a type, outermost node first.

        pycparser nests type nodes so that the outermost one binds tightest
        to the identifier, which is the order the IR uses.
        """
        derived: list[DerivedDeclarator] = []
        while True:
            if isinstance(node, c_ast.PtrDecl):
                derived.append(PointerDeclarator())
            elif isinstance(node, c_ast.ArrayDecl):
                derived.append(ArrayDeclarator(size=self._eval_dimension(node.dim)))
            elif isinstance(node, c_ast.FuncDecl):
                derived.append(self._convert_func_decl(node))
            elif not isinstance(node, c_ast.TypeDecl):
                break
            node = node.type
        return self._convert_specifiers(node), derived

    def _convert_specifiers(self, node: c_ast.Node) -> list[TypeSpecifier]:
        if isinstance(node, c_ast.IdentifierType):
            return [BUILTIN_SPECIFIERS.get(name) or TypedefName(name) for name in node.names]
        if isinstance(node, (c_ast.Struct, c_ast.Union)):
            return [self._convert_struct(node)]
        if isinstance(node, c_ast.Enum):
            return [self._convert_enum(node)]
        return []

    def _convert_struct(self, node: c_ast.Struct | c_ast.Union) -> StructType:
        members: list[Declaration] | None = None
        if node.decls is not None:
            members = [
                self._convert_decl(decl, text=render(decl)) for decl in node.decls if isinstance(decl, c_ast.Decl)
            ]
        return StructType(
            name=node.name,
            members=members,
            is_union=isinstance(node, c_ast.Union),
        )

    def _convert_enum(self, node: c_ast.Enum) -> EnumType:
        enumerators: list[str] | None = None
        if node.values is not None:
            enumerators = [enumerator.name for enumerator in node.values.enumerators]
        return EnumType(name=node.name, enumerators=enumerators)

    def _convert_func_decl(self, node: c_ast.FuncDecl) -> FunctionDeclarator:
        params: list[Declaration] = []
        is_variadic = False

        if node.args is None:
            return FunctionDeclarator(parameters=params, is_variadic=is_variadic)

        for param in node.args.params:
            if isinstance(param, c_ast.EllipsisParam):
                is_variadic = True
            elif isinstance(param, (c_ast.Decl, c_ast.Typename)):
                params.append(self._convert_decl(param))
            elif isinstance(param, c_ast.ID):
                # K&R identifier list; the type defaults to int
                params.append(
                    Declaration(
                        specifiers=[BuiltinType(BaseKind.INT)],
                        declarators=[Declarator(name=param.name)],
                    )
                )

        return FunctionDeclarator(parameters=params, is_variadic=is_variadic)

    def _eval_dimension(self, node: c_ast.Node | None) -> int | str | None:
        """Evaluate an array dimension, keeping symbolic sizes as text."""
        if node is None:
            return None
        if isinstance(node, c_ast.Constant):
            try:
                return int(node.value.rstrip("lLuU"), base=0)
            except ValueError:
                return str(node.value)
        if isinstance(node, c_ast.ID):
            return str(node.name)
        return c_generator.CGenerator().visit(node)

    def _get_location(self, node: c_ast.Node) -> SourceLocation | None:
        """Get source location from a node."""
        if hasattr(node, "coord") and node.coord:
            return SourceLocation(
                file=node.coord.file or self.filename,
                line=node.coord.line,
                column=node.coord.column,
            )
        return None


class PycparserBackend:
    """Parser backend using pycparser.

    Properties
    ----------
    name : str
        Returns ``"pycparser"``.

    Example
    -------
    ::

        from c2hsc.backends.pycparser_backend import PycparserBackend

        backend = PycparserBackend()

        # Preprocess and parse a header on disk
        unit = backend.parse_file("foo.h", cpp_path="/usr/bin/gcc")

        # Parse code that needs no preprocessing
        unit = backend.parse("int foo(void);", "foo.h", use_cpp=False)
    """

    @property
    def name(self) -> str:
        return "pycparser"

    def parse(
        self,
        code: str,
        filename: str,
        include_dirs: list[str] | None = None,
        extra_args: list[str] | None = None,
        cpp_path: str | None = None,
        use_cpp: bool = True,
    ) -> TranslationUnit:
        """Parse in-memory C code.

        The code is fed to the preprocessor on stdin, behind a ``#line``
        directive so that declarations are attributed to ``filename``.

        :param code: C source code to parse.
        :param filename: File name the declarations belong to.
        :param include_dirs: Additional include directories for the preprocessor.
        :param extra_args: Extra arguments to pass to the preprocessor.
        :param cpp_path: Preprocessor to run (``cpp``, or a ``gcc``-like driver run with ``-E``).
        :param use_cpp: If False, hand the code to pycparser as is.
        :returns: :class:`~c2hsc.ir.TranslationUnit` of the parsed declarations.
        :raises RuntimeError: If preprocessing or parsing fails.
        """
        if use_cpp:
            source = f'#line 1 "{filename}"\n{code}'
            text = self._preprocess(["-"], source, include_dirs, extra_args, cpp_path)
        else:
            text = code
        return self._parse_text(text, filename)

    def parse_file(
        self,
        path: str,
        include_dirs: list[str] | None = None,
        extra_args: list[str] | None = None,
        cpp_path: str | None = None,
    ) -> TranslationUnit:
        """Preprocess and parse a header on disk.

        :raises RuntimeError: If preprocessing or parsing fails.
        """
        text = self._preprocess([path], None, include_dirs, extra_args, cpp_path)
        return self._parse_text(text, path)

    def _parse_text(self, text: str, filename: str) -> TranslationUnit:
        parser = c_parser.CParser()
        try:
            ast = parser.parse(text, filename=filename)
        except ParseError as exc:
            raise RuntimeError(f"Failed to compile: {exc}") from exc

        converter = ASTConverter(filename)
        return converter.convert(ast)

    def _cpp_command(self, cpp_path: str | None) -> list[str]:
        if cpp_path is None:
            if platform.system() == "Darwin":
                return ["clang", "-E"]
            return ["cpp"]
        if os.path.basename(cpp_path).startswith("cpp"):
            return [cpp_path]
        return [cpp_path, "-E"]

    def _preprocess(
        self,
        inputs: list[str],
        stdin: str | None,
        include_dirs: list[str] | None = None,
        extra_args: list[str] | None = None,
        cpp_path: str | None = None,
    ) -> str:
        """Run the C preprocessor.

        :param inputs: Trailing command line arguments (a path, or ``-`` for stdin).
        :param stdin: Text to feed on stdin, if any.
        :returns: Preprocessed code, with line markers.
        :raises RuntimeError: If the preprocessor is missing or fails.
        """
        cmd = self._cpp_command(cpp_path)
        cmd += GNU_EXTENSION_DEFINES
        for inc in include_dirs or []:
            cmd.append(f"-I{inc}")
        cmd += extra_args or []
        cmd += inputs

        try:
            with subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            ) as proc:
                stdout, stderr = proc.communicate(input=stdin.encode("utf-8") if stdin is not None else None)
        except FileNotFoundError as exc:
            raise RuntimeError(f"Cannot find executable '{cmd[0]}'") from exc

        if proc.returncode != 0:
            raise RuntimeError(
                f"C preprocessor failed (exit {proc.returncode}): " f"{stderr.decode('utf-8', errors='replace')}"
            )

        result = stdout.decode("utf-8")
        return result.replace("\r\n", "\n")


# Register this backend as the default
register_backend("pycparser", PycparserBackend, is_default=True)
