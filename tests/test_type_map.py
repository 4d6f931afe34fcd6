"""Tests for bunbind.type_map."""

from __future__ import annotations

import pytest

from bunbind.type_map import (
    CSTRING_TAG,
    DEFAULT_TAG,
    DEFAULT_TYPE_TABLE,
    POINTER_TAG,
    SCALAR_TAGS,
    TypeTable,
)


@pytest.mark.parametrize("designator", SCALAR_TAGS)
def test_scalar_designators_map_to_themselves(designator: str) -> None:
    assert DEFAULT_TYPE_TABLE.resolve(designator) == designator


def test_pointer_and_cstring_have_distinct_tags() -> None:
    assert DEFAULT_TYPE_TABLE.resolve("ptr") == POINTER_TAG
    assert DEFAULT_TYPE_TABLE.resolve("cstring") == CSTRING_TAG
    assert POINTER_TAG != CSTRING_TAG


@pytest.mark.parametrize(
    "designator",
    ["", "   ", "usize", "String", "*const u8", "*mut c_void", "Option<&mut Vec<u8>>", "()"],
)
def test_unknown_designators_fall_back_to_u64(designator: str) -> None:
    assert DEFAULT_TYPE_TABLE.resolve(designator) == DEFAULT_TAG == "u64"


def test_resolve_ignores_surrounding_whitespace() -> None:
    assert DEFAULT_TYPE_TABLE.resolve(" i32 ") == "i32"


def test_with_aliases_returns_new_table_and_leaves_default_untouched() -> None:
    table = DEFAULT_TYPE_TABLE.with_aliases({"usize": "u64", "*const c_char": "cstring"})

    assert table.resolve("*const c_char") == "cstring"
    assert "usize" in table
    assert DEFAULT_TYPE_TABLE.resolve("*const c_char") == DEFAULT_TAG
    assert "usize" not in DEFAULT_TYPE_TABLE


def test_alias_to_unknown_tag_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown FFI type tags"):
        TypeTable({"usize": "size_t"})
