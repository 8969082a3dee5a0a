"""
Symbol Table and Relocator Tests
================================

Tests for label definition, forward-reference patching and the error
conditions of finalization.

Copyright (c) 2025 SBNZ SDK Contributors
"""

import pytest

from sbnz_sdk.assembler import Label, Relocator
from sbnz_sdk.cpu import HALT
from sbnz_sdk.errors import (
    AddressRangeError,
    AssemblerError,
    DuplicateSymbolError,
    ProgramSizeError,
    UndefinedSymbolError,
)


@pytest.fixture
def rel():
    return Relocator()


class TestResolve:
    """Test resolve() for defined and undefined labels."""

    def test_unresolved_label_records_site(self, rel):
        """An undefined label returns HALT and records the current pc."""
        rel.emit_word(0)
        assert "foo" not in rel.pending
        assert rel.resolve("foo") == HALT
        assert rel.pending == {"foo": [2]}

    def test_resolved_label(self, rel):
        """A defined label returns its address and records nothing."""
        rel.emit_word(0)
        rel.define_label("foo")
        assert rel.resolve("foo") == 2
        assert rel.pending == {}

    def test_sites_keep_order(self, rel):
        for _ in range(3):
            rel.emit_address(Label("foo"))
        assert rel.pending["foo"] == [0, 2, 4]

    def test_define_returns_label(self, rel):
        assert rel.define_label("here") == Label("here")
        assert rel.symbols == {"here": 0}

    def test_address_of(self, rel):
        rel.emit_byte(1)
        rel.define_label("x")
        assert rel.address_of("x") == 1

    def test_address_of_does_not_record(self, rel):
        with pytest.raises(UndefinedSymbolError):
            rel.address_of("missing")
        assert rel.pending == {}


class TestFinalize:
    """Test patching and the finalized image."""

    def test_forward_reference_patched(self, rel):
        rel.emit_address(Label("target"))
        rel.emit_word(0)
        rel.define_label("target")
        rel.emit_word(0x1234)
        assert rel.finalize() == bytes([0x00, 0x04, 0x00, 0x00, 0x12, 0x34])

    def test_forward_and_backward_identical(self, rel):
        """References before and after the definition get the same bytes."""
        rel.emit_address(Label("mid"))
        rel.define_label("mid")
        rel.emit_address(Label("mid"))
        rel.emit_address(Label("mid"))
        image = rel.finalize()
        assert image == bytes([0x00, 0x02] * 3)

    def test_all_sites_patched(self, rel):
        for _ in range(4):
            rel.emit_address(Label("end"))
        rel.define_label("end")
        image = rel.finalize()
        assert image == bytes([0x00, 0x08] * 4)
        assert rel.pending == {}

    def test_image_truncated_to_pc(self, rel):
        rel.emit_byte(0xAA)
        assert rel.finalize() == b"\xAA"

    def test_empty(self, rel):
        assert rel.finalize() == b""

    def test_finalize_twice(self, rel):
        rel.emit_address(Label("x"))
        rel.define_label("x")
        first = rel.finalize()
        assert rel.finalize() == first

    def test_sealed_after_finalize(self, rel):
        rel.finalize()
        assert rel.finalized
        with pytest.raises(AssemblerError):
            rel.emit_word(1)
        with pytest.raises(AssemblerError):
            rel.define_label("late")

    def test_resolve_after_finalize_rejected(self, rel):
        rel.finalize()
        with pytest.raises(AssemblerError):
            rel.resolve("late")
        assert rel.pending == {}


class TestErrors:
    """Test redefinition, undefined labels and range checks."""

    def test_redefinition_rejected(self, rel):
        rel.define_label("loop")
        rel.emit_word(0)
        with pytest.raises(DuplicateSymbolError) as exc_info:
            rel.define_label("loop")
        assert exc_info.value.symbol == "loop"
        assert exc_info.value.original_address == 0
        # The first binding is kept
        assert rel.address_of("loop") == 0

    def test_undefined_label_at_finalize(self, rel):
        rel.emit_address(Label("nowhere"))
        with pytest.raises(UndefinedSymbolError) as exc_info:
            rel.finalize()
        assert exc_info.value.symbols == ["nowhere"]
        assert not rel.finalized

    def test_all_undefined_reported(self, rel):
        rel.emit_address(Label("a"))
        rel.emit_address(Label("b"))
        with pytest.raises(UndefinedSymbolError) as exc_info:
            rel.finalize()
        assert exc_info.value.symbols == ["a", "b"]

    def test_similar_symbol_hint(self, rel):
        rel.define_label("loop")
        rel.emit_address(Label("lopo"))
        with pytest.raises(UndefinedSymbolError) as exc_info:
            rel.finalize()
        assert "loop" in exc_info.value.similar_symbols
        assert "did you mean 'loop'?" in str(exc_info.value)

    @pytest.mark.parametrize("value", [-1, 0x10000])
    def test_address_out_of_range(self, rel, value):
        with pytest.raises(AddressRangeError):
            rel.emit_address(value)

    @pytest.mark.parametrize("value", [-0x8001, 0x10000])
    def test_word_out_of_range(self, rel, value):
        with pytest.raises(AddressRangeError):
            rel.emit_word(value)

    def test_negative_word_twos_complement(self, rel):
        rel.emit_word(-2)
        assert rel.finalize() == b"\xFF\xFE"

    def test_program_too_large(self):
        rel = Relocator(size_limit=4)
        rel.emit_word(0)
        rel.emit_address(Label("x"))
        with pytest.raises(ProgramSizeError):
            rel.emit_byte(0)

    def test_rejected_fields_emit_nothing(self, rel):
        """A bad field rejects the whole group, including earlier labels."""
        with pytest.raises(AddressRangeError):
            rel.emit_addresses([Label("a"), 0x10, 0x10000, Label("b")])
        assert rel.pc == 0
        assert rel.pending == {}

    def test_fields_that_do_not_fit_emit_nothing(self):
        rel = Relocator(size_limit=6)
        with pytest.raises(ProgramSizeError):
            rel.emit_addresses([Label("a"), 1, 2, 3])
        assert rel.pc == 0
        assert rel.pending == {}
