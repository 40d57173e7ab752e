"""Tests for utility functions."""

import pytest
from hexbytes import HexBytes

from isc_withdraw.constants import UINT64_MAX, WEI_PER_GLOW
from isc_withdraw.exceptions import FormatError
from isc_withdraw.utils import parse_base_tokens, serialise_receipt, wei_to_base_tokens


class TestBaseTokenConversion:
    """Test wei to base token conversion."""

    def test_exact_conversion(self):
        """Test converting a whole number of base tokens."""
        assert wei_to_base_tokens(5 * WEI_PER_GLOW) == (5, 0)

    def test_dust_is_reported(self):
        """Test that the remainder is returned instead of rounded."""
        assert wei_to_base_tokens(5 * WEI_PER_GLOW + 999) == (5, 999)

    def test_below_one_base_token(self):
        """Test that a balance below one base token converts to zero."""
        assert wei_to_base_tokens(WEI_PER_GLOW - 1) == (0, WEI_PER_GLOW - 1)

    def test_negative_balance_raises_error(self):
        """Test that a negative balance raises error."""
        with pytest.raises(FormatError):
            wei_to_base_tokens(-1)


class TestParseBaseTokens:
    """Test base token amount validation."""

    def test_decimal_string(self):
        """Test parsing a decimal string."""
        assert parse_base_tokens("4999970") == 4_999_970

    def test_integer(self):
        """Test passing an integer through."""
        assert parse_base_tokens(0) == 0

    def test_uint64_maximum(self):
        """Test the largest representable amount."""
        assert parse_base_tokens(str(UINT64_MAX)) == UINT64_MAX

    def test_float_raises_error(self):
        """Test that floats are rejected."""
        with pytest.raises(FormatError):
            parse_base_tokens(1.5)  # type: ignore[arg-type]


def test_serialise_receipt_hexlifies_bytes() -> None:
    receipt = {
        "blockNumber": 3,
        "transactionHash": HexBytes("0x" + "ab" * 32),
        "logs": [{"data": b"\x01"}],
    }
    assert serialise_receipt(receipt) == {
        "blockNumber": 3,
        "transactionHash": "0x" + "ab" * 32,
        "logs": [{"data": "0x01"}],
    }
    assert serialise_receipt(None) is None

    def test_non_ascii_digits_raise_error(self):
        """Test that Unicode digits are rejected as malformed amounts."""
        with pytest.raises(FormatError) as excinfo:
            parse_base_tokens("²")
        assert excinfo.value.field == "base_tokens"
