"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
Size conversions for the --min-size option and for result reports.
Multipliers are binary: 1K == 1KB == 1024 bytes.
"""
import re

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")
_MULTIPLIERS = {unit[0]: 1024 ** power for power, unit in enumerate(_SIZE_UNITS)}

# "<number><optional K/M/G/T/P><optional B>", already upper-cased
_SIZE_PATTERN = re.compile(r"^(?P<number>-?\d+(?:\.\d+)?|-?\.\d+)\s*(?P<prefix>[KMGTP]?)(?P<suffix>B?)$")


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int) -> str:
        """Formats a byte count with two decimals, e.g. 1536 -> '1.50KB'."""
        if size_bytes < 0:
            return "0B"
        value = float(size_bytes)
        for unit in _SIZE_UNITS:
            if value < 1024:
                return f"{value:.2f}{unit}"
            value /= 1024
        return f"{value:.2f}EB"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Parses sizes such as '500KB', '1.5G', '2048' or '0B'.
        A bare number is a byte count and must be whole.

        Raises:
            ValueError: For negative values or anything that is not a size.
        """
        text = size_str.strip().upper()
        match = _SIZE_PATTERN.match(text)
        if match is None:
            raise ValueError(
                f"Invalid size format: '{size_str.strip()}'. "
                f"Supported formats: 1.5GB, 2048KB, 1000, 1K, 1M, etc."
            )

        number = float(match.group("number"))
        if number < 0:
            raise ValueError(f"Negative size not allowed: '{text}'")

        prefix = match.group("prefix")
        if not prefix and not match.group("suffix") and not number.is_integer():
            raise ValueError(f"Byte count must be a whole number: '{text}'")
        return int(number * _MULTIPLIERS.get(prefix, 1))
