"""Parser backends for c2hsc.

A backend preprocesses and parses C source and converts its native AST into
the c2hsc IR (:class:`~c2hsc.ir.TranslationUnit`).

Available Backends
------------------
pycparser
    Pure Python C99 parser. Runs the system C preprocessor first.

Example
-------
::

    from c2hsc.backends import get_backend, list_backends

    backend = get_backend()
    unit = backend.parse_file("foo.h")

    for name in list_backends():
        print(name)
"""

from c2hsc.ir import (
    ParserBackend,
)

# Backends are registered lazily, when their module is first imported
_BACKEND_REGISTRY: dict[str, type[ParserBackend]] = {}
_DEFAULT_BACKEND: str | None = None
_BACKENDS_LOADED: bool = False


def register_backend(name: str, backend_class: type[ParserBackend], is_default: bool = False) -> None:
    """Register a parser backend.

    The first registered backend becomes the default unless ``is_default``
    is set on a later registration.

    :param name: Unique name for the backend (e.g., ``"pycparser"``).
    :param backend_class: Class implementing :class:`~c2hsc.ir.ParserBackend`.
    :param is_default: If True, this becomes the default for :func:`get_backend`.
    """
    global _DEFAULT_BACKEND  # pylint: disable=global-statement
    _BACKEND_REGISTRY[name] = backend_class
    if is_default or _DEFAULT_BACKEND is None:
        _DEFAULT_BACKEND = name


def list_backends() -> list[str]:
    """List names of all registered backends."""
    _ensure_backends_loaded()
    return list(_BACKEND_REGISTRY.keys())


def get_backend(name: str | None = None) -> ParserBackend:
    """Get a parser backend instance.

    :param name: Backend name, or None for the default backend.
    :returns: New instance of the requested backend.
    :raises ValueError: If the requested backend is not registered.
    """
    _ensure_backends_loaded()

    if name is None:
        name = get_default_backend()

    if name not in _BACKEND_REGISTRY:
        available = ", ".join(_BACKEND_REGISTRY.keys()) or "(none)"
        raise ValueError(f"Unknown backend: {name!r}. Available: {available}")

    return _BACKEND_REGISTRY[name]()


def get_default_backend() -> str:
    """Get the name of the default backend.

    :raises ValueError: If no backends are available.
    """
    _ensure_backends_loaded()

    if _DEFAULT_BACKEND is None:
        raise ValueError("No backends available")
    return _DEFAULT_BACKEND


def _ensure_backends_loaded() -> None:
    """Lazily load backend modules to populate the registry."""
    global _BACKENDS_LOADED  # pylint: disable=global-statement

    if _BACKENDS_LOADED:
        return

    _BACKENDS_LOADED = True

    # pylint: disable=import-outside-toplevel
    from c2hsc.backends import (  # noqa: F401
        pycparser_backend,
    )
