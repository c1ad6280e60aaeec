"""
Culture-specific symbols consumed by the number formatters.

Only the handful of fields a number formatter needs: separators, group sizes, signs and the
literals for non-finite values. Instances are immutable and are passed explicitly into every
formatting call.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import locale
from dataclasses import dataclass
from typing import Self

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import fmt_type, fmt_value


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class NumberSymbols:
    """
    Separators, signs and special-value literals for formatted numbers.

    Attributes:
        decimal_separator: Between the integer and fractional digits.
        group_separator: Between integer digit groups in "N" output.
        group_sizes: Digits per group counted from the right. The last size repeats;
            a trailing 0 stops grouping, e.g. (3, 2) renders 12,34,56,789.
        negative_sign: Prefix of negative values and of negative exponents.
        positive_sign: Sign of non-negative exponents.
        nan: Literal for NaN.
        pos_infinity: Literal for +inf.
        neg_infinity: Literal for -inf.

    Examples:
        >>> NumberSymbols.invariant().decimal_separator
        '.'
        >>> NumberSymbols(decimal_separator=",", group_separator=".").group_sizes
        (3,)

    Raises:
        TypeError: If a symbol is not str or group_sizes is not a sequence of int.
        ValueError: If decimal_separator is empty or a group size is negative.
    """
    decimal_separator: str = "."
    group_separator: str = ","
    group_sizes: tuple[int, ...] = (3,)
    negative_sign: str = "-"
    positive_sign: str = "+"
    nan: str = "NaN"
    pos_infinity: str = "Infinity"
    neg_infinity: str = "-Infinity"

    def __post_init__(self):
        """Validate and normalize fields"""
        for name in ("decimal_separator", "group_separator", "negative_sign", "positive_sign",
                     "nan", "pos_infinity", "neg_infinity"):
            symbol = getattr(self, name)
            if not isinstance(symbol, str):
                raise TypeError(f"{name} must be str, but got {fmt_type(symbol)}")

        if not self.decimal_separator:
            raise ValueError("decimal_separator must not be empty")

        if isinstance(self.group_sizes, (str, bytes)) or not hasattr(self.group_sizes, "__iter__"):
            raise TypeError(f"group_sizes must be a sequence of int, but got {fmt_type(self.group_sizes)}")
        sizes = tuple(self.group_sizes)
        for size in sizes:
            if isinstance(size, bool) or not isinstance(size, int):
                raise TypeError(f"group sizes must be int, but got {fmt_value(size)}")
            if size < 0:
                raise ValueError(f"group sizes must be >= 0, but got {size}")
        object.__setattr__(self, "group_sizes", sizes)

    @classmethod
    def invariant(cls) -> Self:
        """
        Culture-independent symbols: '.' decimal point, ',' groups of 3, '-'/'+' signs.

        Used whenever no symbols are passed.
        """
        return cls()

    @classmethod
    def from_locale(cls) -> Self:
        """
        Symbols of the current process locale, read from locale.localeconv().

        Call locale.setlocale() first; under the default "C" locale this yields a '.'
        decimal point and no grouping. Group sizes follow localeconv() grouping, where
        CHAR_MAX ends grouping and 0 repeats the previous size.
        """
        conv = locale.localeconv()
        sizes = []
        for size in conv.get("grouping", []):
            if size == 0:
                break
            if size == locale.CHAR_MAX:
                sizes.append(0)
                break
            sizes.append(size)
        return cls(
            decimal_separator=conv.get("decimal_point") or ".",
            group_separator=conv.get("thousands_sep", ""),
            group_sizes=tuple(sizes) if conv.get("thousands_sep") else (),
            negative_sign=conv.get("negative_sign") or "-",
            positive_sign=conv.get("positive_sign") or "+",
        )
