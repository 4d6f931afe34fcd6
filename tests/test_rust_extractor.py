"""Tests for bunbind.extractors.rust."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from bunbind.extractors import RustExtractor, SignatureParseError, discover_extractors, get_extractor
from bunbind.models import ExportedFunction, Parameter
from tests._fixtures.lib_builder import ADD_RS


def _extract(source: str) -> list[ExportedFunction]:
    return RustExtractor().extract(textwrap.dedent(source))


def test_add_module_exports_only_the_public_function() -> None:
    functions = _extract(ADD_RS)

    assert functions == [
        ExportedFunction(
            name="add",
            params=(Parameter(type="i32", name="a"), Parameter(type="i32", name="b")),
            return_type="i32",
            line=3,
        )
    ]


def test_functions_and_parameters_keep_declaration_order() -> None:
    functions = _extract(
        """
        #[no_mangle]
        pub extern "C" fn third(z: f64, y: u8, x: bool) -> f64 { z }

        #[no_mangle]
        pub extern "C" fn first(a: u16) {}

        pub extern "C" fn second(flag: bool, count: u64) -> bool { flag }
        """
    )

    assert [fn.name for fn in functions] == ["third", "first", "second"]
    assert functions[0].arg_types == ["f64", "u8", "bool"]
    assert functions[2].arg_types == ["bool", "u64"]


def test_zero_parameter_function_has_empty_params() -> None:
    functions = _extract('pub extern "C" fn tick() {}')

    assert functions[0].params == ()
    assert functions[0].return_type == "void"


def test_private_and_restricted_functions_are_excluded() -> None:
    functions = _extract(
        """
        extern "C" fn private_abi(a: i32) -> i32 { a }
        #[no_mangle]
        fn private_mangled() {}
        #[no_mangle]
        pub(crate) extern "C" fn crate_only() {}
        pub fn plain_rust(a: i32) -> i32 { a }
        pub extern "C" fn visible() {}
        """
    )

    assert [fn.name for fn in functions] == ["visible"]


def test_no_mangle_marks_pub_fn_as_exported() -> None:
    functions = _extract(
        """
        #[no_mangle]
        pub unsafe fn legacy(p: *mut u8) {}

        #[unsafe(no_mangle)]
        pub extern "C" fn edition_2024() -> u32 { 0 }
        """
    )

    assert [fn.name for fn in functions] == ["legacy", "edition_2024"]


def test_non_function_exports_are_ignored() -> None:
    functions = _extract(
        """
        #[no_mangle]
        pub static COUNTER: u32 = 0;
        pub const LIMIT: usize = 8;
        #[repr(C)]
        pub struct Point { pub x: f32, pub y: f32 }
        pub type Callback = extern "C" fn(i32) -> i32;
        pub extern "C" fn real() {}
        """
    )

    assert [fn.name for fn in functions] == ["real"]


def test_nested_generic_types_do_not_split_parameters() -> None:
    functions = _extract(
        """
        #[no_mangle]
        pub extern "C" fn consume(
            data: *const Option<HashMap<u32, Vec<u8>>>,
            cb: extern "C" fn(i32, i32) -> i32,
            len: usize,
        ) -> *mut c_void {
            std::ptr::null_mut()
        }
        """
    )

    (function,) = functions
    assert function.arg_types == [
        "*const Option<HashMap<u32, Vec<u8>>>",
        'extern "C" fn(i32, i32) -> i32',
        "usize",
    ]
    assert function.return_type == "*mut c_void"


def test_declaration_without_body_is_accepted() -> None:
    functions = _extract(
        """
        pub extern "C" fn declared(x: i8) -> i8;
        pub extern "C" fn trailing(x: i8) -> i8"""
    )

    assert [fn.name for fn in functions] == ["declared", "trailing"]


def test_bodies_impl_blocks_and_foreign_imports_are_skipped() -> None:
    functions = _extract(
        """
        extern "C" {
            pub fn imported(x: i32) -> i32;
        }

        impl Widget {
            #[no_mangle]
            pub extern "C" fn method_like(&self) -> i32 { 1 }
        }

        macro_rules! export {
            () => { pub extern "C" fn from_macro() {} };
        }

        pub extern "C" fn outer() -> i32 {
            let text = "pub extern \\"C\\" fn fake() {}";
            let brace = '}';
            fn inner_helper() {}
            if true { 1 } else { 2 }
        }
        """
    )

    assert [fn.name for fn in functions] == ["outer"]


def test_functions_inside_modules_are_found() -> None:
    functions = _extract(
        """
        pub mod ffi {
            #[no_mangle]
            pub extern "C" fn nested(v: f32) -> f32 { v }
        }
        """
    )

    assert [fn.name for fn in functions] == ["nested"]


def test_where_clause_and_raw_identifier() -> None:
    functions = _extract(
        """
        pub extern "C" fn r#type(value: u8) -> u8 where u8: Copy { value }
        """
    )

    assert functions[0].name == "type"
    assert functions[0].return_type == "u8"


def test_module_with_non_ascii_identifiers_is_scanned() -> None:
    functions = _extract(
        """
        fn helper() -> u8 {
            let élan = 1;
            élan
        }

        pub extern "C" fn größe(wert: u32) -> u32 { wert }
        """
    )

    assert [fn.name for fn in functions] == ["größe"]
    assert functions[0].params == (Parameter(type="u32", name="wert"),)


def test_generic_exports_are_skipped() -> None:
    functions = _extract(
        """
        pub extern "C" fn generic<T: Copy>(value: T) -> T { value }
        pub extern "C" fn concrete() {}
        """
    )

    assert [fn.name for fn in functions] == ["concrete"]


def test_module_without_exports_returns_empty_list() -> None:
    assert _extract("fn main() {}\n") == []
    assert _extract("") == []


@pytest.mark.parametrize(
    "source, message",
    [
        ('pub extern "C" fn broken(a: i32', "unterminated parameter list of fn broken"),
        ('pub extern "C" fn broken(a: i32) -> i32 { a', "unterminated body of fn broken"),
        ('pub extern "C" fn broken -> i32 {}', "expected parameter list after fn broken"),
        ('pub extern "C" fn broken(a) {}', "parameter 1 of fn broken has no type"),
        ('pub extern "C" fn broken() -> {}', "missing return type for fn broken"),
    ],
)
def test_malformed_declarations_raise_parse_error(source: str, message: str) -> None:
    with pytest.raises(SignatureParseError, match=message) as excinfo:
        _extract(source)

    assert excinfo.value.line == 1


def test_registry_selects_extractor_by_suffix() -> None:
    assert isinstance(get_extractor(Path("src/add.rs")), RustExtractor)
    assert get_extractor(Path("src/add.c")) is None
    with pytest.raises(ValueError, match="Unknown extractors"):
        discover_extractors(["zig"])
