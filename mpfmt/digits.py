"""
Digit strings with a positional exponent and the pure digit arithmetic used by the formatters.

A DecimalNumberString holds ``0.<digits> × base^exponent``. Splitting, rounding and carry
propagation all work on the digit characters themselves, so formatting never loses or invents
precision beyond what the extractor produced.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import fmt_type, fmt_value

DIGITS_LOWER = "0123456789abcdefghijklmnopqrstuvwxyz"
DIGITS_MIXED = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

_ZERO = ord("0")
_NINE = ord("9")


def digit_alphabet(base: int) -> str:
    """
    Digit characters for base in [2, 62], lowercase letters up to base 36, mixed case above.

    Raises:
        ValueError: If base is outside [2, 62].
    """
    if isinstance(base, bool) or not isinstance(base, int):
        raise TypeError(f"base must be int, but got {fmt_type(base)}")
    if not 2 <= base <= 62:
        raise ValueError(f"base must be in range [2, 62], but got {base}")
    return DIGITS_LOWER[:base] if base <= 36 else DIGITS_MIXED


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class ExpParts:
    """
    Scientific-notation view of a digit string: ``leading.remaining × 10^exponent``.

    Attributes:
        negative: Sign of the value.
        leading: Single digit before the point; '0' only for zero.
        remaining: Digits after the point, unrounded.
        exponent: Power of ten of the leading digit.
    """
    negative: bool
    leading: str
    remaining: str
    exponent: int


@dataclass(frozen=True)
class DecimalNumberString:
    """
    Sign, significant digits and exponent: the value is ``±0.<digits> × base^exponent``.

    The exponent is the power of the most significant digit plus one, so digits="314159",
    exponent=1 is 3.14159. Digits may be empty only for zero.

    Attributes:
        negative: True for negative values.
        digits: Digit characters of base, no sign and no point.
        exponent: Position of the point relative to the first digit.
        base: Base of the digits, 10 for everything the formatters render.

    Examples:
        >>> DecimalNumberString(False, "314159", 1).split()
        ('3', '14159')
        >>> DecimalNumberString(True, "9876", -2).split()
        ('0', '009876')

    Raises:
        TypeError: If digits is not str or exponent/base is not int.
        ValueError: If digits contains characters outside the base alphabet.
    """
    negative: bool
    digits: str
    exponent: int
    base: int = 10

    def __post_init__(self):
        """Validate fields"""
        if not isinstance(self.digits, str):
            raise TypeError(f"digits must be str, but got {fmt_type(self.digits)}")
        if isinstance(self.exponent, bool) or not isinstance(self.exponent, int):
            raise TypeError(f"exponent must be int, but got {fmt_type(self.exponent)}")

        alphabet = digit_alphabet(self.base)
        invalid = set(self.digits) - set(alphabet)
        if invalid:
            raise ValueError(f"digits must be base-{self.base} digit characters, "
                             f"but found {fmt_value(''.join(sorted(invalid)))} in {fmt_value(self.digits)}")

        object.__setattr__(self, "negative", bool(self.negative))

    @classmethod
    def zero(cls, negative: bool = False) -> "DecimalNumberString":
        """Zero as an empty digit string."""
        return cls(negative, "", 0)

    def split(self) -> tuple[str, str]:
        """
        Re-segment the digits into integer and fractional digit strings.

        No rounding happens here. The integer part is "0" whenever it would be empty;
        zeros are padded on the right of the integer part or the left of the fraction
        as the exponent requires.
        """
        n, e = len(self.digits), self.exponent
        if e >= n:
            return (self.digits + "0" * (e - n)) or "0", ""
        if e >= 0:
            return self.digits[:e] or "0", self.digits[e:]
        return "0", "0" * -e + self.digits

    def to_exp_parts(self) -> ExpParts:
        """
        Normalize to one leading digit for scientific notation.

        ``0.d1d2d3 × 10^E`` becomes ``d1.d2d3 × 10^(E-1)``. Leading zeros in hand-built
        digit strings are skipped, so the leading digit is '1'..'9' unless the value is zero,
        in which case the exponent is 0.
        """
        stripped = self.digits.lstrip("0")
        if not stripped:
            return ExpParts(self.negative, "0", "", 0)
        shift = len(self.digits) - len(stripped)
        return ExpParts(self.negative, stripped[0], stripped[1:], self.exponent - shift - 1)

    def to_fraction(self) -> Fraction:
        """Exact signed value as a Fraction."""
        if not self.digits:
            return Fraction(0)
        values = {ch: i for i, ch in enumerate(digit_alphabet(self.base))}
        mantissa = 0
        for ch in self.digits:
            mantissa = mantissa * self.base + values[ch]
        magnitude = mantissa * Fraction(self.base) ** (self.exponent - len(self.digits))
        return -magnitude if self.negative else magnitude


# Methods --------------------------------------------------------------------------------------------------------------

def increment_digits(digits: str) -> tuple[str, bool]:
    """
    Add one unit in the last place of a decimal digit string.

    Returns:
        (digits, carry) where digits keeps its length and carry is True when the increment
        ran past the most significant digit ("999" → ("000", True)).

    Examples:
        >>> increment_digits("129")
        ('130', False)
        >>> increment_digits("")
        ('', True)
    """
    buf = bytearray(digits, "ascii")
    for i in range(len(buf) - 1, -1, -1):
        if buf[i] == _NINE:
            buf[i] = _ZERO
        else:
            buf[i] += 1
            return buf.decode("ascii"), False
    return buf.decode("ascii"), True


def increment_integer(digits: str) -> str:
    """Increment an integer digit string, growing it by one digit on overflow ("99" → "100")."""
    incremented, carry = increment_digits(digits)
    return "1" + incremented if carry else incremented


def round_fraction(digits: str, length: int) -> tuple[str, bool]:
    """
    Round fractional digits to exactly length digits, half away from zero.

    Short fractions are padded with zeros. When the first dropped digit is 5..9 the kept
    digits are incremented; the carry flag reports an increment out of the fraction that
    the caller must add to the digit on its left.

    Examples:
        >>> round_fraction("4", 2)
        ('40', False)
        >>> round_fraction("996", 2)
        ('00', True)
        >>> round_fraction("96", 0)
        ('', True)

    Raises:
        ValueError: If length < 0.
    """
    if length < 0:
        raise ValueError(f"length must be >= 0, but got {length}")
    if len(digits) <= length:
        return digits.ljust(length, "0"), False
    kept = digits[:length]
    if digits[length] < "5":
        return kept, False
    return increment_digits(kept)


def group_digits(digits: str, separator: str, sizes: Sequence[int]) -> str:
    """
    Insert separator into an integer digit string, counting groups from the right.

    The last group size repeats for the rest of the digits; a size of 0 stops grouping.

    Examples:
        >>> group_digits("123456789", ",", (3,))
        '123,456,789'
        >>> group_digits("123456789", ",", (3, 2))
        '12,34,56,789'
        >>> group_digits("123456789", " ", (3, 0))
        '123456 789'
    """
    if not sizes:
        return digits

    groups = []
    end = len(digits)
    index = 0
    size = sizes[0]
    while 0 < size < end:
        groups.append(digits[end - size:end])
        end -= size
        if index < len(sizes) - 1:
            index += 1
            size = sizes[index]
    groups.append(digits[:end])
    return separator.join(reversed(groups))
