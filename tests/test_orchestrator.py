"""Tests for bunbind.orchestrator."""

from __future__ import annotations

import pytest

from bunbind.aggregator import BENCHMARK_HELPER, IndexAggregator
from bunbind.models import STATUS_FAILED, STATUS_PARTIAL, STATUS_SUCCESS
from bunbind.orchestrator import Orchestrator
from tests._fixtures.lib_builder import ADD_RS, LibBuilder

EXPECTED_ADD_BINDING = """\
import { dlopen, FFIType, suffix } from "bun:ffi";

const BASE_DIR = "lib/bin";

const lib = dlopen(`${BASE_DIR}/libadd.${suffix}`, {
  add: {
    args: [FFIType.i32, FFIType.i32],
    returns: FFIType.i32,
  },
});

export const add = lib.symbols.add;
"""


class FailingAggregator(IndexAggregator):
    """Aggregator whose writes always fail."""

    def update(self, index_path, import_paths, *, dry_run=False):  # type: ignore[override]
        raise OSError("read-only filesystem")


def test_add_module_end_to_end(lib_builder: LibBuilder) -> None:
    lib_builder.write_source("add.rs", ADD_RS)

    report = Orchestrator().run(lib_builder.path(), platform="linux")

    assert report.status == STATUS_SUCCESS
    assert lib_builder.read("mod/add.ts") == EXPECTED_ADD_BINDING
    assert report.exports == {"./mod/add": ["add"]}
    assert lib_builder.read("index.ts") == (
        'export * from "./mod/add";\n\n' f"{BENCHMARK_HELPER}\n"
    )


def test_rerun_leaves_index_byte_identical(lib_builder: LibBuilder) -> None:
    lib_builder.write_source("add.rs", ADD_RS)
    orchestrator = Orchestrator()

    orchestrator.run(lib_builder.path(), platform="linux")
    first = lib_builder.read("index.ts")
    report = orchestrator.run(lib_builder.path(), platform="linux")

    assert lib_builder.read("index.ts") == first
    assert report.index_changed is False


def test_manual_index_edits_survive(lib_builder: LibBuilder) -> None:
    lib_builder.write_source("add.rs", ADD_RS)
    lib_builder.write({"index.ts": 'export const VERSION = "1.0";\n'})

    Orchestrator().run(lib_builder.path(), platform="linux")

    content = lib_builder.read("index.ts")
    assert content.startswith('export const VERSION = "1.0";\n\nexport * from "./mod/add";\n')


def test_nested_modules_mirror_source_layout(lib_builder: LibBuilder) -> None:
    lib_builder.write_source("add.rs", ADD_RS)
    lib_builder.write_source(
        "math/scale.rs",
        """
        pub extern "C" fn scale(value: f64, factor: f64) -> f64 { value * factor }
        """,
    )

    report = Orchestrator().run(lib_builder.path(), platform="win32")

    assert lib_builder.exists("mod/math/scale.ts")
    assert "dlopen(`${BASE_DIR}/scale.${suffix}`" in lib_builder.read("mod/math/scale.ts")
    assert list(report.exports) == ["./mod/add", "./mod/math/scale"]
    assert 'export * from "./mod/math/scale";' in lib_builder.read("index.ts")


def test_bad_and_empty_modules_do_not_stop_the_run(lib_builder: LibBuilder) -> None:
    lib_builder.write_source("add.rs", ADD_RS)
    lib_builder.write_source("broken.rs", 'pub extern "C" fn broken(a: i32')
    lib_builder.write_source("internal.rs", "fn only_private() {}\n")

    report = Orchestrator().run(lib_builder.path(), platform="linux")

    assert report.status == STATUS_PARTIAL
    assert [d.path for d in report.errors] == ["rs/broken.rs"]
    assert "unterminated parameter list" in report.errors[0].message
    assert [d.path for d in report.warnings] == ["rs/internal.rs"]
    assert not lib_builder.exists("mod/broken.ts")
    assert not lib_builder.exists("mod/internal.ts")
    assert lib_builder.exists("mod/add.ts")
    assert report.exports == {"./mod/add": ["add"]}


def test_empty_library_still_writes_benchmark_helper(lib_builder: LibBuilder) -> None:
    report = Orchestrator().run(lib_builder.path(), platform="linux")

    assert report.status == STATUS_SUCCESS
    assert lib_builder.read("index.ts") == f"{BENCHMARK_HELPER}\n"


def test_unsupported_platform_aborts_before_index(lib_builder: LibBuilder) -> None:
    lib_builder.write_source("add.rs", ADD_RS)

    report = Orchestrator().run(lib_builder.path(), platform="freebsd")

    assert report.status == STATUS_FAILED
    assert "Unsupported platform: freebsd" in report.errors[-1].message
    assert not lib_builder.exists("mod/add.ts")
    assert not lib_builder.exists("index.ts")


def test_index_write_failure_marks_run_failed(lib_builder: LibBuilder) -> None:
    lib_builder.write_source("add.rs", ADD_RS)

    report = Orchestrator(aggregator=FailingAggregator()).run(lib_builder.path(), platform="linux")

    assert report.status == STATUS_FAILED
    assert "read-only filesystem" in report.errors[-1].message
    assert lib_builder.exists("mod/add.ts")


def test_existing_binding_is_overwritten(lib_builder: LibBuilder) -> None:
    lib_builder.write_source("add.rs", ADD_RS)
    lib_builder.write({"mod/add.ts": "// stale\n"})

    Orchestrator().run(lib_builder.path(), platform="linux")

    assert lib_builder.read("mod/add.ts") == EXPECTED_ADD_BINDING


def test_dry_run_writes_nothing(lib_builder: LibBuilder) -> None:
    lib_builder.write_source("add.rs", ADD_RS)

    report = Orchestrator().run(lib_builder.path(), platform="linux", dry_run=True)

    assert report.dry_run is True
    assert report.index_changed is True
    assert [path.name for path in report.written] == ["add.ts"]
    assert not lib_builder.exists("mod")
    assert not lib_builder.exists("index.ts")


@pytest.mark.parametrize("workers", [1, 4])
def test_parallel_workers_keep_discovery_order(lib_builder: LibBuilder, workers: int) -> None:
    names = ["delta", "alpha", "charlie", "bravo", "echo"]
    for name in names:
        lib_builder.write_source(f"{name}.rs", f'pub extern "C" fn {name}() -> u8 {{ 0 }}\n')

    report = Orchestrator().run(lib_builder.path(), platform="linux", workers=workers)

    expected = [f"./mod/{name}" for name in sorted(names)]
    assert list(report.exports) == expected
    export_lines = [
        line for line in lib_builder.read("index.ts").splitlines() if line.startswith("export * from")
    ]
    assert export_lines == [f'export * from "{path}";' for path in expected]


def test_config_file_drives_layout_and_aliases(lib_builder: LibBuilder) -> None:
    lib_builder.write(
        {
            ".bunbind.yml": """
            source_dir: native
            output_dir: bindings
            index_file: entry.ts
            platform: darwin
            type_aliases:
              "*const c_char": cstring
            """,
            "native/greet.rs": """
            pub extern "C" fn greet(name: *const c_char) {}
            """,
        }
    )

    report = Orchestrator().run(lib_builder.path())

    binding = lib_builder.read("bindings/greet.ts")
    assert "args: [FFIType.cstring]" in binding
    assert "libgreet.${suffix}" in binding
    assert report.exports == {"./bindings/greet": ["greet"]}
    assert 'export * from "./bindings/greet";' in lib_builder.read("entry.ts")
