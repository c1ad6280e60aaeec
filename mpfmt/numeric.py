"""
Convert numbers from Python stdlib and third-party libraries into mpmath binary floats.

Values are normalized into mpmath's raw ``(sign, man, exp, bc)`` tuples, rounded to an explicit
ArithmeticContext. The global ``mpmath.mp`` context is never read or modified, so conversions
are safe to run from any thread.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import operator
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum, unique
from fractions import Fraction
from typing import Any, Self

# Third-party ----------------------------------------------------------------------------------------------------------
from mpmath import libmp

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import fmt_type, fmt_value

MpfTuple = tuple[int, int, int, int]


# Classes --------------------------------------------------------------------------------------------------------------

class ConversionError(ValueError):
    """A value cannot be converted to a binary float or to a digit string."""


@unique
class Rounding(StrEnum):
    """
    Rounding modes for binary conversion and digit extraction.

    Attributes:
        NEAREST: Round to nearest, ties to even.
        ZERO: Round toward zero (truncate).
        UP: Round toward +inf.
        DOWN: Round toward -inf.
        AWAY_FROM_ZERO: Round away from zero.
    """
    NEAREST = "nearest"
    ZERO = "zero"
    UP = "up"
    DOWN = "down"
    AWAY_FROM_ZERO = "away_from_zero"

    @property
    def mpmath(self) -> str:
        """The mpmath rounding letter for this mode."""
        return _MPMATH_ROUNDING[self]


_MPMATH_ROUNDING = {
    Rounding.NEAREST: libmp.round_nearest,
    Rounding.ZERO: libmp.round_down,
    Rounding.UP: libmp.round_ceiling,
    Rounding.DOWN: libmp.round_floor,
    Rounding.AWAY_FROM_ZERO: libmp.round_up,
}


@dataclass(frozen=True)
class ArithmeticContext:
    """
    Working precision and rounding mode, passed explicitly into every conversion and extraction.

    Attributes:
        precision: Mantissa precision in bits, at least 1. Default 53 (IEEE 754 double).
        rounding: Rounding mode; plain strings like "zero" are coerced to Rounding.

    Examples:
        >>> ArithmeticContext(precision=113, rounding="zero")
        ArithmeticContext(precision=113, rounding=<Rounding.ZERO: 'zero'>)
        >>> ArithmeticContext.double().precision
        53

    Raises:
        TypeError: If precision is not int or rounding is not a Rounding/str.
        ValueError: If precision < 1 or rounding is an unknown mode name.
    """
    precision: int = 53
    rounding: Rounding = Rounding.NEAREST

    def __post_init__(self):
        """Validate and coerce fields"""
        if isinstance(self.precision, bool) or not isinstance(self.precision, int):
            raise TypeError(f"precision must be int, but got {fmt_type(self.precision)}")
        if self.precision < 1:
            raise ValueError(f"precision must be >= 1 bit, but got {self.precision}")

        if not isinstance(self.rounding, str):
            raise TypeError(f"rounding must be Rounding | str, but got {fmt_type(self.rounding)}")
        if not isinstance(self.rounding, Rounding):
            try:
                rounding = Rounding(self.rounding)
            except ValueError:
                raise ValueError(f"rounding expected one of {', '.join(r.value for r in Rounding)} "
                                 f"but found {fmt_value(self.rounding)}") from None
            object.__setattr__(self, "rounding", rounding)

    @classmethod
    def double(cls) -> Self:
        """53-bit precision, round to nearest."""
        return cls(precision=53)

    @classmethod
    def quad(cls) -> Self:
        """113-bit precision (IEEE 754 binary128), round to nearest."""
        return cls(precision=113)


DEFAULT_CONTEXT = ArithmeticContext()


# Methods --------------------------------------------------------------------------------------------------------------

def std_mpf(value: Any, context: ArithmeticContext | None = None) -> MpfTuple:
    """
    Convert a number to a raw mpmath float tuple rounded to the context precision.

    Detection order:
        1. bool is rejected (bool is a subclass of int)
        2. objects exposing ``_mpf_`` (mpmath.mpf and compatible types), re-rounded to the context
        3. int, float, Decimal, Fraction
        4. str, parsed by mpmath ("1.5e3", "-inf", "nan", "1/3")
        5. __index__() → int (NumPy integers)
        6. __float__() → float (NumPy floats and other float-like types)

    Args:
        value: Number to convert.
        context: Precision and rounding; DEFAULT_CONTEXT (53 bits, nearest) when None.

    Returns:
        The ``(sign, man, exp, bc)`` tuple. NaN and infinities come back as mpmath's special
        tuples and are not errors here.

    Raises:
        TypeError: For bool and unsupported types.
        ConversionError: For strings mpmath cannot parse.

    Examples:
        >>> std_mpf(3)
        (0, 3, 0, 2)
        >>> std_mpf(0.5)
        (0, 1, -1, 1)
        >>> std_mpf("-inf") == libmp.fninf
        True
    """
    if context is None:
        context = DEFAULT_CONTEXT
    if not isinstance(context, ArithmeticContext):
        raise TypeError(f"context must be ArithmeticContext, but got {fmt_type(context)}")

    prec, rnd = context.precision, context.rounding.mpmath

    if isinstance(value, bool):
        raise TypeError(f"boolean values not supported, got {value}")

    raw = getattr(value, "_mpf_", None)
    if isinstance(raw, tuple):
        return libmp.mpf_pos(raw, prec, rnd)

    if isinstance(value, int):
        return libmp.from_int(value, prec, rnd)

    if isinstance(value, float):
        return libmp.from_float(value, prec, rnd)

    if isinstance(value, Decimal):
        if value.is_nan():
            return libmp.fnan
        if value.is_infinite():
            return libmp.fninf if value.is_signed() else libmp.finf
        p, q = value.as_integer_ratio()
        return libmp.from_rational(p, q, prec, rnd)

    if isinstance(value, Fraction):
        return libmp.from_rational(value.numerator, value.denominator, prec, rnd)

    if isinstance(value, str):
        try:
            return libmp.from_str(value.strip(), prec, rnd)
        except ValueError as e:
            raise ConversionError(f"cannot parse {fmt_value(value)} as a binary float: {e}") from e

    if hasattr(value, "__index__"):
        try:
            return libmp.from_int(operator.index(value), prec, rnd)
        except (TypeError, ValueError) as e:
            raise TypeError(f"cannot convert {fmt_type(value)} to int via __index__: {e}") from e

    if hasattr(value, "__float__"):
        try:
            return libmp.from_float(float(value), prec, rnd)
        except (TypeError, ValueError) as e:
            raise TypeError(f"cannot convert {fmt_type(value)} to float: {e}") from e

    raise TypeError(
        f"unsupported numeric type: {fmt_type(value)}. "
        f"Expected mpf, int, float, Decimal, Fraction, str, or types implementing __index__ or __float__"
    )


def is_zero(t: MpfTuple) -> bool:
    """True for a zero of either sign."""
    _, man, exp, bc = t
    return not man and exp == 0 and bc == 0


def is_finite(t: MpfTuple) -> bool:
    """True unless t is NaN or an infinity."""
    return bool(t[1]) or is_zero(t)


def compare_abs(t: MpfTuple, threshold: float) -> int:
    """
    Compare |t| with a float threshold: -1, 0 or 1.

    The threshold is taken as the exact binary double, so compare_abs(std_mpf(1e-5), 1e-5) == 0.
    """
    return libmp.mpf_cmp(libmp.mpf_abs(t), libmp.from_float(threshold))
