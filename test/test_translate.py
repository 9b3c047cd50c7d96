"""End-to-end tests for translate() and translate_file()."""

import pytest

from c2hsc import translate, translate_file
from c2hsc.hsc_output import HscProducts


def hsc(code: str) -> list[str]:
    return list(translate(code, "test.h", use_cpp=False).hsc_lines)


class TestTranslate:
    def test_returns_products(self) -> None:
        products = translate("int foo(void);", "test.h", use_cpp=False)
        assert isinstance(products, HscProducts)
        assert products.hsc_lines == ("#ccall foo , IO (CInt)",)
        assert products.helper_lines == ()

    def test_functions(self) -> None:
        assert hsc("double scale(double x, unsigned int n, const char *label);") == [
            "#ccall scale , CDouble -> CUInt -> CString -> IO (CDouble)"
        ]

    def test_struct_with_array_and_callback(self) -> None:
        code = "struct stream { char name[32]; int (*read)(void *buf, int len); struct stream *next; };"
        assert hsc(code)[1:] == [
            "#starttype stream",
            "#array_field name , CChar",
            "#field read , FunPtr (Ptr () -> CInt -> IO (Ptr CInt))",
            "#field next , Ptr ()",
            "#stoptype",
        ]

    def test_opaque_typedef(self) -> None:
        code = "typedef struct git_repository git_repository;\nvoid git_repository_free(git_repository *repo);"
        assert hsc(code) == [
            "{- typedef struct git_repository git_repository; -}",
            "#opaque_t git_repository",
            "#ccall git_repository_free , Ptr <git_repository> -> IO ()",
        ]

    def test_enum(self) -> None:
        code = "typedef enum { GIT_OK = 0, GIT_ERROR = -1 } git_error_code;"
        assert hsc(code)[1:] == [
            "#integral_t git_error_code",
            "#num GIT_OK",
            "#num GIT_ERROR",
        ]

    def test_typedef_chain(self) -> None:
        code = "typedef unsigned long size;\ntypedef size *size_ptr;\nsize_ptr get(void);"
        assert hsc(code)[-1] == "#ccall get , IO (Ptr CULong)"

    def test_bool(self) -> None:
        assert hsc("_Bool is_set(void);") == ["#ccall is_set , IO (CInt)"]

    def test_inline_function(self) -> None:
        products = translate(
            "static inline unsigned int twice(unsigned int x) { return x * 2; }\n"
            "static inline void reset(void) { }",
            "test.h",
            use_cpp=False,
        )
        assert products.hsc_lines == (
            "#cinline twice , CUInt -> IO (CUInt)",
            "#cinline reset , IO ()",
        )
        assert products.helper_lines == (
            "BC_INLINE1(twice, unsigned int, unsigned int)",
            "BC_INLINE0VOID(reset)",
        )

    def test_pointer_to_pointer_typedefs(self) -> None:
        code = (
            "typedef struct git_odb *git_odb_t;\n"
            "typedef int *int_ptr;\n"
            "int git_odb_open(git_odb_t *out);\n"
            "void fill(int_ptr *slots);"
        )
        assert hsc(code)[-2:] == [
            "#ccall git_odb_open , Ptr (Ptr ()) -> IO (CInt)",
            "#ccall fill , Ptr (Ptr CInt) -> IO ()",
        ]

    def test_pointer_to_function_typedef(self) -> None:
        code = "typedef int fn(int);\nfn *get(void);"
        assert hsc(code) == [
            "{- typedef int fn(int); -}",
            "#ccall get , IO (Ptr (FunPtr (CInt -> IO (CInt))))",
        ]

    def test_other_file_is_filtered(self) -> None:
        code = '# 1 "common.h"\nint foo(void);\n# 1 "test.h"\nint bar(void);'
        assert hsc(code) == ["#ccall bar , IO (CInt)"]

    def test_types_exposed(self) -> None:
        products = translate("typedef char *string;", "test.h", use_cpp=False)
        assert dict(products.types) == {"string": "CString"}

    def test_parse_error(self) -> None:
        with pytest.raises(RuntimeError, match="Failed to compile"):
            translate("int foo(", "test.h", use_cpp=False)

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError, match="Unknown backend"):
            translate("int x;", "test.h", backend="nope", use_cpp=False)

    def test_debug_output(self, capsys) -> None:
        translate("int foo(void);\nstruct s;", "test.h", use_cpp=False, debug=True)
        err = capsys.readouterr().err
        assert "[c2hsc] Backend: pycparser" in err
        assert "[c2hsc] Found 2 declarations" in err
        assert "Declaration: foo (test.h:1)" in err
        assert "Declaration: s (test.h:2)" in err
        assert "[c2hsc] Emitted 3 binding lines, 0 helper lines, 0 typedefs" in err


@pytest.mark.cpp
class TestTranslatePreprocessed:
    def test_translate_code(self, gcc_path) -> None:
        products = translate("#define N 4\nstruct v { float xs[N]; };\n", "vec.h", cpp_path=gcc_path)
        assert products.hsc_lines[1:] == ("#starttype v", "#array_field xs , CFloat", "#stoptype")

    def test_included_typedefs_resolve(self, gcc_path, tmp_path) -> None:
        (tmp_path / "common.h").write_text("typedef long git_off;\nint git_common(void);\n", encoding="utf-8")
        header = tmp_path / "blob.h"
        header.write_text('#include "common.h"\ngit_off git_blob_size(void);\n', encoding="utf-8")

        products = translate_file(str(header), cpp_path=gcc_path)
        assert products.hsc_lines == ("#ccall git_blob_size , IO (CLong)",)
        assert products.types["git_off"] == "CLong"
