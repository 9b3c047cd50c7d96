import shlex
import shutil
import sys
from importlib.metadata import (
    version as get_version,
)

import click

from .backends import (
    get_backend,
    get_default_backend,
    list_backends,
)
from .emitter import (
    generate_hsc,
)
from .hsc_output import (
    HscProducts,
)
from .ir import (
    AsmBlock,
    Declaration,
    EnumType,
    ExternalDeclaration,
    FunctionDefinition,
    StructType,
    TranslationUnit,
)
from .writer import (
    write_products,
)

__version__ = get_version("c2hsc")


def _debug_print(msg: str) -> None:
    """Print debug message to stderr."""
    print(f"[c2hsc] {msg}", file=sys.stderr)


def _describe(decl: ExternalDeclaration) -> str:
    if isinstance(decl, FunctionDefinition):
        name = decl.declarator.name
    elif isinstance(decl, Declaration):
        name = next((d.name for d in decl.declarators if d.name), None)
        if name is None:
            tagged = [s for s in decl.specifiers if isinstance(s, (StructType, EnumType))]
            name = tagged[0].name if tagged else None
    else:
        name = None
    where = f" ({decl.location.file}:{decl.location.line})" if decl.location else ""
    return f"{type(decl).__name__}: {name or '(anonymous)'}{where}"


def _generate(unit: TranslationUnit, filename: str, debug: bool) -> HscProducts:
    if debug:
        _debug_print(f"Found {len(unit.declarations)} declarations")
        for decl in unit.declarations:
            if not isinstance(decl, AsmBlock):
                _debug_print(f"  {_describe(decl)}")

    output = generate_hsc(unit, filename)

    if debug:
        _debug_print(
            f"Emitted {len(output.hsc_lines)} binding lines, "
            f"{len(output.helper_lines)} helper lines, {len(output.types)} typedefs"
        )
    return output.finish()


def translate(
    code: str,
    filename: str,
    backend: str | None = None,
    include_dirs: list[str] | None = None,
    extra_args: list[str] | None = None,
    cpp_path: str | None = None,
    use_cpp: bool = True,
    debug: bool = False,
) -> HscProducts:
    """Generate Bindings-DSL lines from C header code.

    Args:
        code: C header source code.
        filename: Header file name; only declarations attributed to a file
            with this base name are emitted.
        backend: Backend name, or None for the default ("pycparser").
        include_dirs: Extra include directories for the preprocessor.
        extra_args: Extra arguments passed to the preprocessor (e.g., ["-DFOO=1"]).
        cpp_path: Explicit path to gcc or cpp.
        use_cpp: If False, parse the code without preprocessing it.
        debug: Print debug info to stderr.

    Returns:
        Finalized binding and helper lines.

    Raises:
        RuntimeError: If preprocessing or parsing fails.
        ValueError: If the backend is unknown.
    """
    backend_name = backend or get_default_backend()
    if debug:
        _debug_print(f"Backend: {backend_name}")
        _debug_print(f"Parsing: {filename}")

    backend_obj = get_backend(backend_name)
    unit = backend_obj.parse(
        code,
        filename,
        include_dirs=include_dirs,
        extra_args=extra_args,
        cpp_path=cpp_path,
        use_cpp=use_cpp,
    )
    return _generate(unit, filename, debug)


def translate_file(
    path: str,
    backend: str | None = None,
    include_dirs: list[str] | None = None,
    extra_args: list[str] | None = None,
    cpp_path: str | None = None,
    debug: bool = False,
) -> HscProducts:
    """Generate Bindings-DSL lines from a header on disk.

    Same as :func:`translate`, but the preprocessor reads the file itself,
    so relative ``#include "..."`` directives resolve next to it.
    """
    backend_name = backend or get_default_backend()
    if debug:
        _debug_print(f"Backend: {backend_name}")
        _debug_print(f"Parsing: {path}")

    backend_obj = get_backend(backend_name)
    unit = backend_obj.parse_file(
        path,
        include_dirs=include_dirs,
        extra_args=extra_args,
        cpp_path=cpp_path,
    )
    return _generate(unit, path, debug)


CONTEXT_SETTINGS: dict[str, list[str]] = dict(help_option_names=["-h", "--help"])


@click.command(
    context_settings=CONTEXT_SETTINGS,
    no_args_is_help=True,
    help="Create a .hsc Bindings-DSL file from a C API header file.",
)
@click.option("--version", is_flag=True, help="Print version and exit.")
@click.option(
    "--prefix",
    default="",
    metavar="<prefix>",
    help="Use PREFIX when naming modules.",
)
@click.option(
    "--gcc",
    default="",
    metavar="<path>",
    help="Specify explicit path to gcc or cpp.",
)
@click.option(
    "--cppopts",
    default="",
    metavar="<opts>",
    help="Pass OPTS to the preprocessor.",
)
@click.option(
    "--include-dir",
    "-I",
    multiple=True,
    metavar="<dir>",
    help="Add include search path.",
)
@click.option(
    "--define",
    "-D",
    "defines",
    multiple=True,
    metavar="<macro>",
    help="Define preprocessor macro.",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, writable=True),
    default=".",
    help="Directory to write generated files to (default: current directory).",
)
@click.option(
    "--stdout",
    "use_stdout",
    is_flag=True,
    help="Send all output to stdout (for testing).",
)
@click.option(
    "--backend",
    "-b",
    default=None,
    metavar="<name>",
    help="Parser backend (default: pycparser).",
)
@click.option(
    "--list-backends",
    is_flag=True,
    help="List available backends and exit.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Report progress verbosely.",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Print debug info to stderr.",
)
@click.argument(
    "files",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False),
)
def cli(
    version: bool,
    prefix: str,
    gcc: str,
    cppopts: str,
    include_dir: tuple[str, ...],
    defines: tuple[str, ...],
    output_dir: str,
    use_stdout: bool,
    backend: str | None,
    list_backends: bool,  # pylint: disable=redefined-outer-name
    verbose: bool,
    debug: bool,
    files: tuple[str, ...],
) -> None:
    if version:
        print(__version__)
        return

    if list_backends:
        default = get_default_backend()
        for name in _registered_backends():
            click.echo(f"{name} (default)" if name == default else name)
        return

    if not files:
        click.echo("Error: Missing argument 'FILES...'.", err=True)
        raise SystemExit(2)

    if not prefix:
        click.echo("Error: Please specify a module prefix to use with --prefix", err=True)
        raise SystemExit(1)

    gcc_name = gcc or "gcc"
    gcc_path = shutil.which(gcc_name)
    if gcc_path is None:
        click.echo(f"Error: Cannot find executable '{gcc_name}'", err=True)
        raise SystemExit(1)

    extra_args = shlex.split(cppopts)
    for define in defines:
        extra_args.append(f"-D{define}")

    for path in files:
        if verbose:
            click.echo(f"Translating {path} with {gcc_path}", err=True)

        try:
            products = translate_file(
                path,
                backend=backend,
                include_dirs=list(include_dir) or None,
                extra_args=extra_args or None,
                cpp_path=gcc_path,
                debug=debug,
            )
        except (RuntimeError, ValueError) as exc:
            click.echo(f"Error: {exc}", err=True)
            raise SystemExit(1) from exc

        with open(path, encoding="utf-8") as f:
            source = f.read()

        written = write_products(
            products,
            prefix,
            path,
            source,
            output_dir=output_dir,
            stream=sys.stdout if use_stdout else None,
        )
        if not use_stdout:
            for name in written:
                click.echo(f"Wrote {name}")


def _registered_backends() -> list[str]:
    return list_backends()
