"""
Tests for size conversion utilities — used by --min-size parsing and result output.
"""
import pytest
from dupfinder.utils.convert_utils import ConvertUtils


class TestHumanToBytes:
    """Conversion from human-readable sizes (e.g., "500KB") to bytes."""

    def test_plain_numbers_are_bytes(self):
        assert ConvertUtils.human_to_bytes("0") == 0
        assert ConvertUtils.human_to_bytes("1024") == 1024
        assert ConvertUtils.human_to_bytes("0B") == 0

    def test_binary_multipliers(self):
        """Suffixes are powers of 1024, with and without the trailing B."""
        assert ConvertUtils.human_to_bytes("1K") == 1024
        assert ConvertUtils.human_to_bytes("1.5KB") == 1536
        assert ConvertUtils.human_to_bytes("1MB") == 1024 * 1024
        assert ConvertUtils.human_to_bytes("0.5GB") == 512 * 1024 * 1024

    def test_case_and_whitespace(self):
        assert ConvertUtils.human_to_bytes(" 1kb ") == 1024
        assert ConvertUtils.human_to_bytes("\t1Mb\n") == 1024 * 1024

    @pytest.mark.parametrize("value", ["-1", "-5KB"])
    def test_rejects_negative_values(self, value):
        with pytest.raises(ValueError, match="Negative size not allowed"):
            ConvertUtils.human_to_bytes(value)

    @pytest.mark.parametrize("value", ["abc", "KB", "1.2.3MB", "10XB", "1.5", ""])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            ConvertUtils.human_to_bytes(value)


class TestBytesToHuman:
    """Conversion from bytes to display strings."""

    def test_formats_with_two_decimals(self):
        assert ConvertUtils.bytes_to_human(0) == "0.00B"
        assert ConvertUtils.bytes_to_human(1536) == "1.50KB"
        assert ConvertUtils.bytes_to_human(1024 * 1024) == "1.00MB"

    def test_negative_is_zero(self):
        assert ConvertUtils.bytes_to_human(-10) == "0B"
