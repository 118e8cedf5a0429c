"""
Keyboard Matrix Unit Tests
==========================

Scan-code encoding, key transitions, the compound RUBOUT key and the
port-read row decoding.
"""

import pytest

from zx81emu.core.keyboard_matrix import (
    NO_ROW_SELECTED,
    KeyboardMatrix,
    scan_code,
)

from tests.conftest import TEST_KEYMAP


def row_port(row):
    """Port address that selects *row* (its bit clear in the high byte)."""
    return ((~(1 << row) & 0xFF) << 8) | 0xFE


# =============================================================================
# Scan codes
# =============================================================================

class TestScanCode:
    """Row / column encoding."""

    def test_encoding(self):
        assert scan_code(0, 1) == 0x01
        assert scan_code(3, 4) == (3 << 5) | 4
        assert scan_code(7, 16) == 0xF0

    @pytest.mark.parametrize("row", [-1, 8])
    def test_bad_row(self, row):
        with pytest.raises(ValueError):
            scan_code(row, 1)

    @pytest.mark.parametrize("mask", [0, 3, 32, 0x11])
    def test_bad_column(self, mask):
        with pytest.raises(ValueError):
            scan_code(0, mask)


# =============================================================================
# Initial state
# =============================================================================

class TestInit:

    def test_all_released(self, keyboard):
        assert keyboard.rows == bytes([0xFF] * 8)

    def test_lookup(self, keyboard):
        assert keyboard.lookup("a") == scan_code(1, 1)
        assert keyboard.lookup("F13") is None


# =============================================================================
# Key transitions
# =============================================================================

class TestKeyPressRelease:

    @pytest.mark.parametrize("key", sorted(TEST_KEYMAP))
    def test_round_trip(self, keyboard, key):
        code = TEST_KEYMAP[key]
        row, mask = code >> 5, code & 0x1F

        assert keyboard.key_down(key) is True
        assert keyboard.port_read(row_port(row)) == 0xFF & ~mask

        assert keyboard.key_up(key) is True
        assert keyboard.port_read(row_port(row)) == 0xFF

    def test_other_rows_untouched(self, keyboard):
        keyboard.key_down("g")
        rows = keyboard.rows
        assert rows[1] == 0xFF & ~0x10
        assert all(r == 0xFF for i, r in enumerate(rows) if i != 1)

    def test_two_keys_same_row(self, keyboard):
        keyboard.key_down("shift")
        keyboard.key_down("z")
        assert keyboard.port_read(row_port(0)) == 0xFC
        keyboard.key_up("shift")
        assert keyboard.port_read(row_port(0)) == 0xFD

    def test_unmapped_key_is_inert(self, keyboard):
        assert keyboard.key_down("F13") is False
        assert keyboard.key_up("F13") is False
        assert keyboard.rows == bytes([0xFF] * 8)

    def test_reset_releases_everything(self, keyboard):
        keyboard.key_down("a")
        keyboard.key_down("b")
        keyboard.reset()
        assert keyboard.rows == bytes([0xFF] * 8)


class TestDeleteKey:
    """RUBOUT presses SHIFT and 0 at once."""

    def test_down_clears_rows_0_and_4(self, keyboard):
        keyboard.key_down("delete")
        rows = keyboard.rows
        assert rows[0] == 0xFE
        assert rows[4] == 0xFE
        assert [i for i, r in enumerate(rows) if r != 0xFF] == [0, 4]

    def test_up_restores_both(self, keyboard):
        keyboard.key_down("delete")
        keyboard.key_up("delete")
        assert keyboard.rows == bytes([0xFF] * 8)

    def test_without_delete_key(self):
        kb = KeyboardMatrix(TEST_KEYMAP)
        assert kb.key_down("delete") is False
        assert kb.rows == bytes([0xFF] * 8)


# =============================================================================
# Port decoding
# =============================================================================

class TestPortRead:

    def test_first_zero_bit_wins(self, keyboard):
        keyboard.key_down("a")  # row 1
        # Rows 1 and 2 both selected: row 1 is found first.
        assert keyboard.port_read(0xF9FE) == 0xFE

    def test_lower_row_shadows(self, keyboard):
        keyboard.key_down("a")  # row 1
        # Rows 0 and 1 selected: row 0 is returned.
        assert keyboard.port_read(0xFCFE) == 0xFF

    def test_row7(self, keyboard):
        keyboard.key_down("b")
        assert keyboard.port_read(0x7FFE) == 0xEF

    def test_no_row_selected(self, keyboard):
        keyboard.key_down("a")
        assert keyboard.port_read(0xFFFE) == NO_ROW_SELECTED

    def test_low_byte_ignored(self, keyboard):
        keyboard.key_down("newline")
        assert keyboard.port_read(0xBF00) == 0xFE
        assert keyboard.port_read(0xBFFE) == 0xFE
