"""
Correctly rounded digit extraction from mpmath binary floats.

This is the only place where a binary value becomes a digit string. The conversion is exact
integer arithmetic on the ``man × 2^exp`` representation followed by a single rounding step in
the target base, so the digits are correctly rounded under the context's rounding mode.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import math
from typing import Any

# Third-party ----------------------------------------------------------------------------------------------------------
import structlog

# Local ----------------------------------------------------------------------------------------------------------------
from .digits import DecimalNumberString, digit_alphabet
from .numeric import ArithmeticContext, ConversionError, DEFAULT_CONTEXT, MpfTuple, Rounding
from .numeric import is_finite, is_zero, std_mpf
from .utils import fmt_type

logger = structlog.wrap_logger(logging.getLogger(__name__))

# Digits rendered per chunk; keeps base-10 str() below the interpreter's int/str digit limit
_CHUNK_DIGITS = 512


# Methods --------------------------------------------------------------------------------------------------------------

def max_digit_count(precision: int, base: int = 10) -> int:
    """
    Number of base digits needed to round-trip any value of the given binary precision.

    That is ``1 + ceil(p × log(2)/log(b))``, with p replaced by p - 1 when b is a power of two.

    Examples:
        >>> max_digit_count(53)
        17
        >>> max_digit_count(53, base=2)
        53
        >>> max_digit_count(113)
        36

    Raises:
        TypeError: If precision is not int.
        ValueError: If precision < 1 or base is outside [2, 62].
    """
    digit_alphabet(base)
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise TypeError(f"precision must be int, but got {fmt_type(precision)}")
    if precision < 1:
        raise ValueError(f"precision must be >= 1 bit, but got {precision}")

    k = base.bit_length() - 1
    if base == 1 << k:
        return 1 + -(-(precision - 1) // k)

    # Smallest m with base**m >= 2**precision; the float estimate is off by at most one
    bound = 1 << precision
    m = math.ceil(precision * math.log(2) / math.log(base))
    while base ** m < bound:
        m += 1
    while m > 0 and base ** (m - 1) >= bound:
        m -= 1
    return 1 + m


def extract_digits(value: Any,
                   context: ArithmeticContext | None = None,
                   *,
                   base: int = 10,
                   n_digits: int = 0) -> DecimalNumberString:
    """
    Extract sign, significant digits and exponent of a nonzero finite value.

    The value is converted with std_mpf() under the context, then rounded once to exactly
    n_digits digits of base using context.rounding. Trailing zeros are removed from the result,
    so ``extract_digits(500)`` gives digits "5" with exponent 3.

    Args:
        value: Any number std_mpf() accepts.
        context: Precision and rounding; DEFAULT_CONTEXT when None.
        base: Digit base in [2, 62].
        n_digits: Significant digits to produce; 0 selects max_digit_count(context.precision, base).

    Returns:
        DecimalNumberString with ``|value| ≈ 0.<digits> × base^exponent``.

    Raises:
        ConversionError: If the value is zero, NaN or infinite, or cannot be parsed.
        TypeError: If n_digits is not int or value has an unsupported type.
        ValueError: If base is outside [2, 62] or n_digits < 0.

    Examples:
        >>> extract_digits(3.25)
        DecimalNumberString(negative=False, digits='325', exponent=1, base=10)
        >>> extract_digits(-1 / 3, n_digits=4)
        DecimalNumberString(negative=True, digits='3333', exponent=0, base=10)
    """
    if context is None:
        context = DEFAULT_CONTEXT
    return mpf_digits(std_mpf(value, context), context, base=base, n_digits=n_digits)


def mpf_digits(t: MpfTuple,
               context: ArithmeticContext,
               *,
               base: int = 10,
               n_digits: int = 0) -> DecimalNumberString:
    """
    Digit extraction for a raw mpmath tuple already rounded to context.

    Same contract as extract_digits() without the conversion step.
    """
    alphabet = digit_alphabet(base)
    if isinstance(n_digits, bool) or not isinstance(n_digits, int):
        raise TypeError(f"n_digits must be int, but got {fmt_type(n_digits)}")
    if n_digits < 0:
        raise ValueError(f"n_digits must be >= 0, but got {n_digits}")

    if is_zero(t) or not is_finite(t):
        reason = "zero" if is_zero(t) else "non-finite"
        logger.warning("digits.unconvertible", reason=reason, base=base)
        raise ConversionError(f"cannot extract digits of a {reason} value, "
                              f"zero, NaN and infinity are rendered before extraction")

    n = n_digits or max_digit_count(context.precision, base)
    sign, man, exp, bc = t
    man = int(man)
    negative = bool(sign)

    # |value| lies in [2^(exp+bc-1), 2^(exp+bc)); start from the lower estimate of its base exponent
    exponent = math.floor((exp + bc - 1) * math.log(2) / math.log(base)) + 1
    upper = base ** n
    lower = base ** (n - 1)
    while True:
        q, r, den = _scaled(man, exp, base, n - exponent)
        if q >= upper:
            exponent += 1
        elif q < lower:
            exponent -= 1
        else:
            break

    if r and _rounds_away(context.rounding, negative, q, r, den, base):
        q += 1
        if q == upper:
            q = lower
            exponent += 1

    digits = _to_base(q, base, alphabet, n).rstrip("0")
    logger.debug("digits.extracted", base=base, n_digits=n, exponent=exponent)
    return DecimalNumberString(negative, digits, exponent, base)


# Private Methods ------------------------------------------------------------------------------------------------------

def _scaled(man: int, exp: int, base: int, shift: int) -> tuple[int, int, int]:
    """Exact floor division of man × 2^exp × base^shift: (quotient, remainder, denominator)."""
    if exp >= 0:
        num, den = man << exp, 1
    else:
        num, den = man, 1 << -exp
    if shift >= 0:
        num *= base ** shift
    else:
        den *= base ** -shift
    q, r = divmod(num, den)
    return q, r, den


def _rounds_away(rounding: Rounding, negative: bool, q: int, r: int, den: int, base: int) -> bool:
    """Whether a nonzero remainder r/den bumps the magnitude q up by one unit."""
    if rounding is Rounding.NEAREST:
        twice = 2 * r
        return twice > den or (twice == den and (q % base) % 2 == 1)
    if rounding is Rounding.ZERO:
        return False
    if rounding is Rounding.AWAY_FROM_ZERO:
        return True
    if rounding is Rounding.UP:
        return not negative
    if rounding is Rounding.DOWN:
        return negative
    raise NotImplementedError(f"rounding mode {rounding!r}")


def _to_base(q: int, base: int, alphabet: str, width: int) -> str:
    """Render 0 <= q < base**width as exactly width digits."""
    divisor = base ** _CHUNK_DIGITS
    chunks = []
    while q:
        q, r = divmod(q, divisor)
        if base == 10:
            chunks.append(str(r).zfill(_CHUNK_DIGITS))
        else:
            chunk = []
            for _ in range(_CHUNK_DIGITS):
                r, d = divmod(r, base)
                chunk.append(alphabet[d])
            chunks.append("".join(reversed(chunk)))
    return "".join(reversed(chunks)).rjust(width, "0")[-width:]
