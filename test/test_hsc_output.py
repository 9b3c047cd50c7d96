"""Tests for the typedef environment and output accumulator."""

import pytest

from c2hsc.hsc_output import HscOutput, HscProducts, TypeMap


class TestTypeMap:
    def test_lookup_missing(self) -> None:
        assert TypeMap().lookup("size_t") is None

    def test_define_and_lookup(self) -> None:
        types = TypeMap()
        types.define("git_off", "CLong")
        assert types.lookup("git_off") == "CLong"
        assert "git_off" in types
        assert len(types) == 1

    def test_redefine_overwrites(self) -> None:
        types = TypeMap()
        types.define("handle", "CInt")
        types.define("handle", "Ptr ()")
        assert types.lookup("handle") == "Ptr ()"
        assert len(types) == 1

    def test_iterates_in_definition_order(self) -> None:
        types = TypeMap()
        for name in ["b", "a", "c"]:
            types.define(name, "CInt")
        assert list(types) == ["b", "a", "c"]

    def test_mapping_is_a_snapshot(self) -> None:
        types = TypeMap()
        types.define("a", "CInt")
        view = types.as_mapping()
        types.define("b", "CChar")
        assert dict(view) == {"a": "CInt"}
        with pytest.raises(TypeError):
            view["c"] = "CLong"  # type: ignore[index]


class TestHscOutput:
    def test_starts_empty(self, output) -> None:
        assert output.hsc_lines == []
        assert output.helper_lines == []
        assert len(output.types) == 0

    def test_appends_in_order(self, output) -> None:
        output.append_hsc("#opaque_t a")
        output.append_hsc("#opaque_t b")
        output.append_helper("BC_INLINE0VOID(f)")
        assert output.hsc_lines == ["#opaque_t a", "#opaque_t b"]
        assert output.helper_lines == ["BC_INLINE0VOID(f)"]

    def test_types_pass_through(self, output) -> None:
        output.define_type("git_off", "CLong")
        assert output.lookup_type("git_off") == "CLong"
        assert output.lookup_type("other") is None

    def test_finish(self, output) -> None:
        output.append_hsc("#ccall f , IO ()")
        output.define_type("t", "CInt")
        products = output.finish()

        assert isinstance(products, HscProducts)
        assert products.hsc_lines == ("#ccall f , IO ()",)
        assert products.helper_lines == ()
        assert dict(products.types) == {"t": "CInt"}

    def test_finished_products_are_frozen(self, output) -> None:
        products = output.finish()
        output.append_hsc("#opaque_t late")
        assert products.hsc_lines == ()

    def test_separate_accumulators_share_nothing(self) -> None:
        first, second = HscOutput(), HscOutput()
        first.define_type("t", "CInt")
        first.append_hsc("x")
        assert second.lookup_type("t") is None
        assert second.hsc_lines == []
