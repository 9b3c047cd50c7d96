"""Tests for module naming and .hsc file rendering."""

import io

import pytest

from c2hsc.hsc_output import HscProducts
from c2hsc.writer import (
    camel_case,
    include_module,
    local_includes,
    module_name,
    render_helper,
    render_hsc,
    write_products,
)

SOURCE = """\
#ifndef INCLUDE_git_oid_h__
#include "common.h"
#include "types.h"
#include <stdio.h>
int x;
"""


def products(hsc=(), helper=()) -> HscProducts:
    return HscProducts(hsc_lines=tuple(hsc), helper_lines=tuple(helper), types={})


class TestNaming:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("oid.h", "Oid"),
            ("/usr/include/git2/oid.h", "Oid"),
            ("foo_bar.h", "FooBar"),
            ("a_b_c.h", "ABC"),
            ("Types.h", "Types"),
        ],
    )
    def test_module_name(self, path, expected) -> None:
        assert module_name(path) == expected

    def test_camel_case(self) -> None:
        assert camel_case("strict_import") == "strictImport"
        assert camel_case("") == ""

    def test_local_includes(self) -> None:
        assert local_includes(SOURCE) == ['#include "common.h"', '#include "types.h"']

    def test_include_module(self) -> None:
        assert include_module('#include "git2/sys/odb_backend.h"') == "OdbBackend"


class TestRender:
    def test_hsc(self) -> None:
        text = render_hsc(products(["#opaque_t git_oid"]), "Bindings.Libgit2", "/usr/include/git2/oid.h", SOURCE)
        assert text == (
            "#include <bindings.dsl.h>\n"
            "#include <oid.h>\n"
            "module Bindings.Libgit2.Oid where\n"
            "#strict_import\n"
            "\n"
            "import Bindings.Libgit2.Common\n"
            "import Bindings.Libgit2.Types\n"
            "#opaque_t git_oid\n"
        )

    def test_helper(self) -> None:
        text = render_helper(products(helper=["BC_INLINE0VOID(f)"]), "oid.h", SOURCE)
        assert text == (
            "#include <bindings.cmacros.h>\n"
            "#include <oid.h>\n"
            '#include "common.h"\n'
            '#include "types.h"\n'
            "\n"
            "BC_INLINE0VOID(f)\n"
        )


class TestWriteProducts:
    def test_hsc_only(self, tmp_path) -> None:
        written = write_products(products(["#ccall f , IO ()"]), "P", "foo_bar.h", "", output_dir=str(tmp_path))
        assert written == ["FooBar.hsc"]
        assert (tmp_path / "FooBar.hsc").read_text(encoding="utf-8").endswith("#ccall f , IO ()\n")
        assert not (tmp_path / "FooBar.hsc.helper.c").exists()

    def test_with_helper(self, tmp_path) -> None:
        written = write_products(
            products(["#cinline f , IO ()"], ["BC_INLINE0VOID(f)"]),
            "P",
            "foo.h",
            "",
            output_dir=str(tmp_path),
        )
        assert written == ["Foo.hsc", "Foo.hsc.helper.c"]
        assert "BC_INLINE0VOID(f)" in (tmp_path / "Foo.hsc.helper.c").read_text(encoding="utf-8")

    def test_stream(self) -> None:
        stream = io.StringIO()
        written = write_products(products(["#opaque_t a"], ["BC_INLINE0VOID(f)"]), "P", "foo.h", "", stream=stream)
        assert written == ["Foo.hsc", "Foo.hsc.helper.c"]
        text = stream.getvalue()
        assert text.index("module P.Foo where") < text.index("#include <bindings.cmacros.h>")
