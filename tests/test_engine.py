"""End-to-end tests for the listing engine and its error boundary."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from elfnm.core.engine import NmEngine
from elfnm.core.errors import (
    AllocationError,
    FileOpenError,
    NoSymbolTableError,
    UnsupportedFormatError,
)
from elfnm.core.models import (
    ByteOrder,
    SectionType,
    SymbolBinding,
    SymbolKind,
    WordSize,
)
from shared.config import ElfnmConfig
from shared.console import NmConsole

from tests.conftest import ALLOC, WRITE, ElfBuilder


@pytest.fixture
def engine() -> NmEngine:
    return NmEngine()


@pytest.fixture
def console_io() -> tuple[NmConsole, io.StringIO, io.StringIO]:
    out, err = io.StringIO(), io.StringIO()
    return NmConsole(file=out, err_file=err), out, err


def _write(tmp_path: Path, data: bytes, name: str = "a.out") -> str:
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)


def _main_and_printf(builder: ElfBuilder) -> ElfBuilder:
    text = builder.add_text()
    builder.add_symbol("main", 0x401000, shndx=text, kind=SymbolKind.FUNC)
    builder.add_symbol("printf", kind=SymbolKind.FUNC)
    return builder


def test_scenario_a_defined_function(tmp_path, engine, console_io):
    builder = ElfBuilder()
    text = builder.add_text()
    builder.add_symbol("main", 0x401000, shndx=text, kind=SymbolKind.FUNC)
    console, out, err = console_io

    assert engine.run(_write(tmp_path, builder.build()), console) is True
    assert out.getvalue() == "0000000000401000 T main\n"
    assert err.getvalue() == ""


def test_scenario_b_undefined_function(tmp_path, engine, console_io):
    console, out, _ = console_io
    path = _write(tmp_path, _main_and_printf(ElfBuilder()).build())

    assert engine.run(path, console)
    assert out.getvalue().splitlines() == [
        "0000000000401000 T main",
        "                 U printf",
    ]


def test_scenario_c_unsupported_format(tmp_path, engine, console_io):
    console, out, err = console_io
    path = _write(tmp_path, _main_and_printf(ElfBuilder()).build(class_byte=7))

    assert engine.run(path, console) is False
    assert out.getvalue() == ""
    lines = err.getvalue().splitlines()
    assert len(lines) == 1
    assert path in lines[0]
    assert "unsupported format" in lines[0]


def test_scenario_d_no_symbols(tmp_path, engine, console_io):
    console, out, err = console_io
    builder = ElfBuilder()
    builder.add_text()
    path = _write(tmp_path, builder.build(with_symtab=False))

    assert engine.run(path, console) is False
    assert out.getvalue() == ""
    assert err.getvalue().strip() == f"elfnm: {path}: no symbols"


def test_missing_file_is_reported(tmp_path, engine, console_io):
    console, out, err = console_io
    path = str(tmp_path / "missing.o")

    assert engine.run(path, console) is False
    assert out.getvalue() == ""
    assert "failed to open file" in err.getvalue()
    with pytest.raises(FileOpenError) as excinfo:
        engine.list_symbols(path)
    assert excinfo.value.path == path


def test_unsupported_endianness_is_reported(tmp_path, engine, console_io):
    console, _, err = console_io
    path = _write(tmp_path, _main_and_printf(ElfBuilder()).build(data_byte=9))
    assert engine.run(path, console) is False
    assert "unsupported endianness" in err.getvalue()


def test_failure_does_not_affect_next_file(tmp_path, engine, console_io):
    console, out, err = console_io
    bad = _write(tmp_path, b"not an elf at all", "bad.o")
    good = _write(tmp_path, _main_and_printf(ElfBuilder()).build(), "good.o")

    assert engine.run(bad, console) is False
    assert engine.run(good, console) is True
    assert out.getvalue().splitlines()[0] == "0000000000401000 T main"
    assert err.getvalue().count("\n") == 1


def test_error_path_is_attached(engine):
    with pytest.raises(UnsupportedFormatError) as excinfo:
        engine.list_data(b"\x00" * 64, file_path="blob.bin")
    assert excinfo.value.path == "blob.bin"

    with pytest.raises(NoSymbolTableError):
        engine.list_data(ElfBuilder().build(with_symtab=False))


@pytest.mark.parametrize("byte_order", [ByteOrder.LITTLE, ByteOrder.BIG])
def test_elf32_listing(engine, byte_order):
    builder = ElfBuilder(word_size=WordSize.ELF32, byte_order=byte_order)
    text = builder.add_text()
    data = builder.add_section(".data", SectionType.PROGBITS, ALLOC | WRITE, b"\x00" * 8)
    bss = builder.add_section(".bss", SectionType.NOBITS, ALLOC | WRITE)
    builder.add_symbol("main", 0x080491A0, shndx=text, kind=SymbolKind.FUNC)
    builder.add_symbol("counter", 0x0804C010, shndx=data, kind=SymbolKind.OBJECT)
    builder.add_symbol("buffer", 0x0804C020, shndx=bss, bind=SymbolBinding.LOCAL)
    builder.add_symbol("__gmon_start__", bind=SymbolBinding.WEAK)
    builder.add_symbol("puts", kind=SymbolKind.FUNC)

    listing = engine.list_data(builder.build())
    lines = [
        f"{' ' * 9}{e.type_char} {e.name}" if e.undefined
        else f"{e.value:08x} {e.type_char} {e.name}"
        for e in listing.symbols
    ]
    assert listing.word_size == WordSize.ELF32
    assert listing.byte_order == byte_order
    assert lines == [
        "080491a0 T main",
        "0804c010 D counter",
        "0804c020 b buffer",
        "         w __gmon_start__",
        "         U puts",
    ]


def test_big_endian_64bit_values_are_swapped(engine):
    builder = ElfBuilder(byte_order=ByteOrder.BIG)
    text = builder.add_text()
    builder.add_symbol("_start", 0x0000FFFF00001234, shndx=text, kind=SymbolKind.FUNC)
    listing = engine.list_data(builder.build())
    assert listing.symbols[0].value == 0x0000FFFF00001234
    assert listing.symbols[0].type_char == "T"


def test_json_output(tmp_path, engine, console_io):
    console, out, _ = console_io
    path = _write(tmp_path, _main_and_printf(ElfBuilder()).build())

    assert engine.run(path, console, json_output=True)
    report = json.loads(out.getvalue())
    assert report["word_size"] == 64
    assert report["byte_order"] == "little"
    assert report["symbols"] == [
        {"name": "main", "type": "T", "value": 0x401000},
        {"name": "printf", "type": "U", "value": None},
    ]


def test_report_file_is_written(tmp_path, engine, console_io):
    console, out, _ = console_io
    path = _write(tmp_path, _main_and_printf(ElfBuilder()).build())
    report_path = tmp_path / "out" / "symbols.json"

    assert engine.run(path, console, report_path=str(report_path))
    assert out.getvalue().count("\n") == 2
    saved = json.loads(report_path.read_text(encoding="utf-8"))
    assert saved["symbol_count"] == 2
    assert saved["path"] == path


def test_table_limit_from_config(engine):
    config = ElfnmConfig()
    config.nm.max_table_bytes = 32
    limited = NmEngine(config=config)
    data = _main_and_printf(ElfBuilder()).build()

    assert len(engine.list_data(data).symbols) == 2
    with pytest.raises(AllocationError) as excinfo:
        limited.list_data(data)
    assert "memory allocation error" in str(excinfo.value)


def test_corrupt_section_name_table_does_not_block_listing(tmp_path, engine, console_io):
    builder = ElfBuilder()
    text = builder.add_text()
    builder.add_symbol("main", 0x10, shndx=text, kind=SymbolKind.FUNC)
    console, out, err = console_io
    path = _write(tmp_path, builder.build(shstrtab_size=1 << 20), "a.o")

    assert engine.run(path, console) is True
    assert out.getvalue() == "0000000000000010 T main\n"
    assert err.getvalue() == ""


def test_unwritable_report_path_is_reported(tmp_path, engine, console_io):
    console, out, err = console_io
    path = _write(tmp_path, _main_and_printf(ElfBuilder()).build())
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    report_path = blocker / "symbols.json"

    assert engine.run(path, console, report_path=str(report_path)) is False
    assert out.getvalue().count("\n") == 2
    assert err.getvalue().startswith(f"elfnm: {report_path}: cannot write report")
