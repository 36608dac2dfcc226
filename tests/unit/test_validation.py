"""
Tests for input validation helpers.
"""

import pytest

from fusion.utils.validation import (
    validate_address,
    validate_signature,
    validate_uint,
    validate_amount,
    validate_token_id,
    validate_points,
    validate_hex_string,
    require,
    MAX_UINT24,
    MAX_UINT32,
)


class TestScalars:
    """Tests for scalar validators."""

    def test_address(self):
        assert validate_address(bytes(20))[0]
        valid, err = validate_address(bytes(19))
        assert not valid
        assert "20 bytes" in err
        assert not validate_address("0x" + "00" * 20)[0]

    def test_signature(self):
        assert validate_signature(bytes(65))[0]
        assert not validate_signature(bytes(66))[0]

    def test_uint_bounds(self):
        assert validate_uint(2**24 - 1, "x", 24)[0]
        assert not validate_uint(2**24, "x", 24)[0]
        assert not validate_uint(-1, "x")[0]

    def test_bool_is_not_an_amount(self):
        valid, err = validate_amount(True)
        assert not valid
        assert "must be int" in err

    def test_amount_positive(self):
        assert validate_amount(1)[0]
        assert not validate_amount(0)[0]

    def test_token_id(self):
        assert validate_token_id(0)[0]
        assert validate_token_id(2**256 - 1)[0]
        assert not validate_token_id(2**256)[0]


class TestPoints:
    """Tests for schedule validation."""

    def test_valid_schedule(self):
        assert validate_points([(10, 5), (20, 0)])[0]
        assert validate_points(())[0]

    def test_not_a_pair(self):
        valid, err = validate_points([(10, 5, 1)])
        assert not valid
        assert "pair" in err

    def test_not_increasing(self):
        valid, err = validate_points([(20, 5), (10, 1)])
        assert not valid
        assert "must be >" in err

    def test_rate_range(self):
        assert validate_points([(10, MAX_UINT24)])[0]
        assert not validate_points([(10, MAX_UINT24 + 1)])[0]

    def test_elapsed_range(self):
        assert validate_points([(MAX_UINT32, 1)])[0]
        assert not validate_points([(MAX_UINT32 + 1, 1)])[0]


class TestHex:
    """Tests for hex string validation."""

    def test_hex(self):
        assert validate_hex_string("0xdead", "h")[0]
        assert validate_hex_string("dead", "h", 2)[0]
        assert not validate_hex_string("0xdea", "h")[0]
        assert not validate_hex_string("0xzz", "h")[0]
        assert not validate_hex_string("0xdead", "h", 3)[0]


class TestRequire:
    """Tests for require."""

    def test_raises_value_error(self):
        with pytest.raises(ValueError, match="boom"):
            require((False, "boom"))
        require((True, ""))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
