"""Write finalized :class:`~c2hsc.hsc_output.HscProducts` to ``.hsc`` files.

For a header ``foo_bar.h`` translated with prefix ``Bindings.Foo`` this
produces ``FooBar.hsc``::

    #include <bindings.dsl.h>
    #include <foo_bar.h>
    module Bindings.Foo.FooBar where
    #strict_import

    import Bindings.Foo.Common
    ...binding lines...

and, when the header defines inline functions, ``FooBar.hsc.helper.c``
holding the ``BC_INLINE`` macro lines. Each local ``#include "..."`` of the
header becomes an ``import`` of the module generated for that header.
"""

import os
from typing import (
    IO,
)

from c2hsc.hsc_output import (
    HscProducts,
)


def capitalize(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + camel_case(text[1:])


def camel_case(text: str) -> str:
    """Drop underscores, upper-casing the character after each."""
    if not text:
        return text
    if text[0] == "_":
        return capitalize(text[1:])
    return text[0] + camel_case(text[1:])


def module_name(path: str) -> str:
    """Haskell module name for a header, e.g. ``foo_bar.h`` -> ``FooBar``."""
    base, _ = os.path.splitext(os.path.basename(path))
    return capitalize(base)


def local_includes(source: str) -> list[str]:
    """The ``#include "..."`` lines of a header, as written."""
    return [line for line in source.splitlines() if line.startswith('#include "')]


def include_module(line: str) -> str:
    """Module name for a local include line, e.g. ``#include "git2/oid.h"`` -> ``Oid``."""
    included = line[len('#include "') :].split('"', 1)[0]
    return module_name(included)


def render_hsc(products: HscProducts, prefix: str, filename: str, source: str) -> str:
    lines = [
        "#include <bindings.dsl.h>",
        f"#include <{os.path.basename(filename)}>",
        f"module {prefix}.{module_name(filename)} where",
        "#strict_import",
        "",
    ]
    for include in local_includes(source):
        lines.append(f"import {prefix}.{include_module(include)}")
    lines.extend(products.hsc_lines)
    return "\n".join(lines) + "\n"


def render_helper(products: HscProducts, filename: str, source: str) -> str:
    lines = [
        "#include <bindings.cmacros.h>",
        f"#include <{os.path.basename(filename)}>",
    ]
    lines.extend(local_includes(source))
    lines.append("")
    lines.extend(products.helper_lines)
    return "\n".join(lines) + "\n"


def write_products(
    products: HscProducts,
    prefix: str,
    filename: str,
    source: str,
    output_dir: str = ".",
    stream: IO[str] | None = None,
) -> list[str]:
    """Write the ``.hsc`` file and, if needed, its helper ``.c`` file.

    :param products: Finalized output of the translation.
    :param prefix: Module prefix, e.g. ``Bindings.Libgit2``.
    :param filename: The translated header.
    :param source: Original (unpreprocessed) text of the header.
    :param output_dir: Directory the files are written to.
    :param stream: If given, write both files' contents here instead.
    :returns: Names of the targets written.
    """
    target = f"{module_name(filename)}.hsc"
    outputs = [(target, render_hsc(products, prefix, filename, source))]
    if products.helper_lines:
        outputs.append((f"{target}.helper.c", render_helper(products, filename, source)))

    written: list[str] = []
    for name, content in outputs:
        if stream is not None:
            stream.write(content)
        else:
            with open(os.path.join(output_dir, name), "w", encoding="utf-8") as f:
                f.write(content)
        written.append(name)
    return written
