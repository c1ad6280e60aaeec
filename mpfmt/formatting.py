"""
Decimal string formatting of arbitrary-precision binary floats.

Renders a DecimalNumberString as fixed-point ("F"), grouped fixed-point ("N"), scientific ("E")
or general ("G") text, plus the round-trip default used by str(). Every renderer rounds the digit
string half away from zero, independently of the rounding the extractor already applied.
"""

# ## Format specifiers
#
# "<kind><digits>", kind is one of N, F, E, G in either case, digits is an optional length:
#
#   F / N   digits after the decimal separator, default 2
#   E       mantissa digits after the separator, default 6; the letter case is the exponent marker
#   G       scientific "e" form when |value| < 1e-5 or |value| > 1e16, else fixed-point
#
# None or "" selects the round-trip rendering. The thresholds, defaults and the exponent widths
# (3 for E, 2 for G) are compatibility constants.

# Standard library -----------------------------------------------------------------------------------------------------
import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum, unique
from typing import Any

# Third-party ----------------------------------------------------------------------------------------------------------
import structlog
from mpmath import libmp

# Local ----------------------------------------------------------------------------------------------------------------
from .digits import DecimalNumberString, group_digits, increment_integer, round_fraction
from .extract import mpf_digits
from .numeric import ArithmeticContext, DEFAULT_CONTEXT, MpfTuple
from .numeric import compare_abs, is_finite, is_zero, std_mpf
from .symbols import NumberSymbols
from .utils import fmt_type, fmt_value

logger = structlog.wrap_logger(logging.getLogger(__name__))

_SPECIFIER = re.compile(r"(?P<kind>[A-Za-z])(?P<length>[0-9]*)")


class FormatConf:
    """
    Default constants of the format specifiers.

    Attributes:
        FIXED_LENGTH: Fractional digits for "F", "N" and fixed-point "G".
        SCIENTIFIC_LENGTH: Mantissa digits for "E" and scientific "G".
        SCIENTIFIC_EXPONENT_WIDTH: Minimum exponent digits for "E".
        GENERAL_EXPONENT_WIDTH: Minimum exponent digits for scientific "G".
        GENERAL_LOWER: "G" goes scientific when |value| is below this.
        GENERAL_UPPER: "G" goes scientific when |value| is above this.
    """
    FIXED_LENGTH = 2
    SCIENTIFIC_LENGTH = 6
    SCIENTIFIC_EXPONENT_WIDTH = 3
    GENERAL_EXPONENT_WIDTH = 2
    GENERAL_LOWER = 1e-5
    GENERAL_UPPER = 1e16


# Classes --------------------------------------------------------------------------------------------------------------

class FormatSpecError(ValueError):
    """Unsupported or malformed format specifier."""


@unique
class FormatKind(StrEnum):
    """Format kind letters, upper case."""
    NUMBER = "N"
    FIXED = "F"
    EXPONENTIAL = "E"
    GENERAL = "G"


def _validate_length(length: int | None, *, optional: bool = False):
    if length is None and optional:
        return
    if isinstance(length, bool) or not isinstance(length, int):
        raise TypeError(f"length must be int, but got {fmt_type(length)}")
    if length < 0:
        raise ValueError(f"length must be >= 0, but got {length}")


@dataclass(frozen=True)
class RoundTripFormat:
    """Default rendering: every extracted digit, no grouping, trailing fractional zeros removed."""

    def render(self, dns: DecimalNumberString, symbols: NumberSymbols) -> str:
        return format_0(dns, symbols)


@dataclass(frozen=True)
class FixedFormat:
    """Fixed-point "F" with length fractional digits."""
    length: int = FormatConf.FIXED_LENGTH

    def __post_init__(self):
        _validate_length(self.length)

    def render(self, dns: DecimalNumberString, symbols: NumberSymbols) -> str:
        return format_f(dns, self.length, symbols)


@dataclass(frozen=True)
class GroupedFormat:
    """Grouped fixed-point "N" with length fractional digits."""
    length: int = FormatConf.FIXED_LENGTH

    def __post_init__(self):
        _validate_length(self.length)

    def render(self, dns: DecimalNumberString, symbols: NumberSymbols) -> str:
        return format_n(dns, self.length, symbols)


@dataclass(frozen=True)
class ScientificFormat:
    """
    Scientific "E" with length mantissa digits.

    Attributes:
        length: Digits after the mantissa separator.
        marker: Exponent marker, 'E' or 'e'.
        exponent_width: Minimum exponent digits, zero-padded.
    """
    length: int = FormatConf.SCIENTIFIC_LENGTH
    marker: str = "E"
    exponent_width: int = FormatConf.SCIENTIFIC_EXPONENT_WIDTH

    def __post_init__(self):
        _validate_length(self.length)
        if self.marker not in ("E", "e"):
            raise ValueError(f"marker must be 'E' or 'e', but got {fmt_value(self.marker)}")
        if isinstance(self.exponent_width, bool) or not isinstance(self.exponent_width, int):
            raise TypeError(f"exponent_width must be int, but got {fmt_type(self.exponent_width)}")
        if self.exponent_width < 1:
            raise ValueError(f"exponent_width must be >= 1, but got {self.exponent_width}")

    def render(self, dns: DecimalNumberString, symbols: NumberSymbols) -> str:
        return format_e(dns, self.length, symbols, marker=self.marker, exponent_width=self.exponent_width)


@dataclass(frozen=True)
class GeneralFormat:
    """
    General "G": picks scientific or fixed-point from the magnitude of the value.

    The decision is made on the binary value, not on its digits, so select() must be called
    with the converted value before rendering.
    """
    length: int | None = None

    def __post_init__(self):
        _validate_length(self.length, optional=True)

    def select(self, t: MpfTuple) -> "FixedFormat | ScientificFormat":
        """
        Resolve to ScientificFormat('e', width 2) when |t| < 1e-5 or |t| > 1e16, else FixedFormat.

        Values exactly at a threshold are fixed-point. Zero is below 1e-5 and renders scientific.
        """
        if compare_abs(t, FormatConf.GENERAL_LOWER) < 0 or compare_abs(t, FormatConf.GENERAL_UPPER) > 0:
            length = FormatConf.SCIENTIFIC_LENGTH if self.length is None else self.length
            return ScientificFormat(length, marker="e", exponent_width=FormatConf.GENERAL_EXPONENT_WIDTH)
        length = FormatConf.FIXED_LENGTH if self.length is None else self.length
        return FixedFormat(length)


FormatSpec = RoundTripFormat | FixedFormat | GroupedFormat | ScientificFormat | GeneralFormat


@dataclass(frozen=True)
class NumberDisplay:
    """
    A binary float bound to its context and symbols, formattable with str() and format().

    The value is converted once at construction; str() gives the round-trip rendering and
    format specs follow format_number().

    Attributes:
        value: Any number std_mpf() accepts.
        context: Precision and rounding, DEFAULT_CONTEXT when None.
        symbols: Culture symbols, NumberSymbols.invariant() when None.

    Examples:
        >>> str(NumberDisplay(2.5))
        '2.5'
        >>> f"{NumberDisplay(1234.5678):N1}"
        '1,234.6'
    """
    value: Any
    context: ArithmeticContext | None = None
    symbols: NumberSymbols | None = None

    _mpf: MpfTuple = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate fields and convert the value"""
        context = DEFAULT_CONTEXT if self.context is None else self.context
        symbols = NumberSymbols.invariant() if self.symbols is None else self.symbols
        if not isinstance(symbols, NumberSymbols):
            raise TypeError(f"symbols must be NumberSymbols, but got {fmt_type(symbols)}")
        object.__setattr__(self, "context", context)
        object.__setattr__(self, "symbols", symbols)
        object.__setattr__(self, "_mpf", std_mpf(self.value, context))

    def __str__(self):
        return _render(self._mpf, RoundTripFormat(), self.context, self.symbols)

    def __format__(self, format_spec: str) -> str:
        return _render(self._mpf, parse_format(format_spec), self.context, self.symbols)


# Methods --------------------------------------------------------------------------------------------------------------

def parse_format(fmt: str | None) -> FormatSpec:
    """
    Parse a format specifier into its FormatSpec variant.

    Examples:
        >>> parse_format("N0")
        GroupedFormat(length=0)
        >>> parse_format("e3")
        ScientificFormat(length=3, marker='e', exponent_width=3)
        >>> parse_format(None)
        RoundTripFormat()

    Raises:
        FormatSpecError: If the kind letter is not one of N, F, E, G, or anything other
            than digits follows it.
        TypeError: If fmt is not str or None.
    """
    if fmt is None or fmt == "":
        return RoundTripFormat()
    if not isinstance(fmt, str):
        raise TypeError(f"format specifier must be str | None, but got {fmt_type(fmt)}")

    match = _SPECIFIER.fullmatch(fmt)
    if not match or match["kind"].upper() not in {k.value for k in FormatKind}:
        logger.warning("format.rejected", specifier=fmt)
        raise FormatSpecError(f"unsupported format specifier {fmt_value(fmt)}, "
                              f"supported: {', '.join(FormatKind)} with an optional digit count")

    length = int(match["length"]) if match["length"] else None
    kind = FormatKind(match["kind"].upper())

    if kind is FormatKind.FIXED:
        return FixedFormat(FormatConf.FIXED_LENGTH if length is None else length)
    if kind is FormatKind.NUMBER:
        return GroupedFormat(FormatConf.FIXED_LENGTH if length is None else length)
    if kind is FormatKind.EXPONENTIAL:
        return ScientificFormat(FormatConf.SCIENTIFIC_LENGTH if length is None else length,
                                marker=match["kind"])
    if kind is FormatKind.GENERAL:
        return GeneralFormat(length)
    raise NotImplementedError(f"format kind {kind!r}")


def format_number(value: Any,
                  fmt: str | None = None,
                  symbols: NumberSymbols | None = None,
                  context: ArithmeticContext | None = None) -> str:
    """
    Format a number with an "N", "F", "E" or "G" specifier.

    The value is converted under context, its digits are extracted with the digit count
    of context.precision, and the selected formatter renders them with symbols.

    Args:
        value: Any number std_mpf() accepts (mpmath.mpf, int, float, Decimal, Fraction, str).
        fmt: Format specifier, None or "" for the round-trip rendering.
        symbols: Culture symbols, NumberSymbols.invariant() when None.
        context: Precision and rounding, DEFAULT_CONTEXT when None.

    Returns:
        The formatted string. NaN and infinities render the symbols' literals.

    Raises:
        FormatSpecError: For an unsupported specifier.
        ConversionError: If the value cannot be converted.
        TypeError: For unsupported value, specifier or config types.

    Examples:
        >>> format_number(1234.5678, "N")
        '1,234.57'
        >>> format_number(9.96, "F0")
        '10'
        >>> format_number(0.000001234, "G3")
        '1.234e-06'
        >>> format_number(12345.6789, "e2")
        '1.23e+004'
    """
    spec = parse_format(fmt)
    context = DEFAULT_CONTEXT if context is None else context
    symbols = NumberSymbols.invariant() if symbols is None else symbols
    if not isinstance(symbols, NumberSymbols):
        raise TypeError(f"symbols must be NumberSymbols, but got {fmt_type(symbols)}")
    return _render(std_mpf(value, context), spec, context, symbols)


def format_0(dns: DecimalNumberString, symbols: NumberSymbols) -> str:
    """Round-trip rendering: all digits, no grouping, no trailing fractional zeros."""
    _check_decimal(dns)
    integer, fraction = dns.split()
    fraction = fraction.rstrip("0")
    return _fixed_string(dns.negative, integer.lstrip("0") or "0", fraction, symbols)


def format_f(dns: DecimalNumberString, length: int, symbols: NumberSymbols) -> str:
    """
    Fixed-point rendering with exactly length fractional digits.

    Examples:
        >>> format_f(DecimalNumberString(False, "996", 1), 0, NumberSymbols())
        '10'
        >>> format_f(DecimalNumberString(True, "123", 3), 2, NumberSymbols())
        '-123.00'
    """
    integer, fraction = _fixed_parts(dns, length)
    return _fixed_string(dns.negative, integer, fraction, symbols)


def format_n(dns: DecimalNumberString, length: int, symbols: NumberSymbols) -> str:
    """
    Fixed-point rendering with the integer part grouped by symbols.group_sizes.

    Examples:
        >>> format_n(DecimalNumberString(False, "1234567", 4), 2, NumberSymbols())
        '1,234.57'
    """
    integer, fraction = _fixed_parts(dns, length)
    integer = group_digits(integer, symbols.group_separator, symbols.group_sizes)
    return _fixed_string(dns.negative, integer, fraction, symbols)


def format_e(dns: DecimalNumberString,
             length: int,
             symbols: NumberSymbols,
             *,
             marker: str = "E",
             exponent_width: int = FormatConf.SCIENTIFIC_EXPONENT_WIDTH) -> str:
    """
    Scientific rendering with one leading digit and exactly length mantissa digits.

    A carry out of the mantissa that overflows the leading digit renormalizes, so 9.99 at
    length 1 becomes 1.0 with the exponent raised by one.

    Examples:
        >>> format_e(DecimalNumberString(False, "999", 1), 1, NumberSymbols(), marker="e", exponent_width=2)
        '1.0e+01'
        >>> format_e(DecimalNumberString(True, "123", -1), 3, NumberSymbols())
        '-1.230E-002'
    """
    _check_decimal(dns)
    _validate_length(length)
    parts = dns.to_exp_parts()
    remaining, carry = round_fraction(parts.remaining, length)
    leading, exponent = parts.leading, parts.exponent
    if carry:
        if leading == "9":
            leading, remaining, exponent = "1", "0" * length, exponent + 1
        else:
            leading = chr(ord(leading) + 1)

    mantissa = _fixed_string(dns.negative, leading, remaining, symbols)
    exponent_sign = symbols.negative_sign if exponent < 0 else symbols.positive_sign
    return f"{mantissa}{marker}{exponent_sign}{abs(exponent):0{exponent_width}d}"


# Private Methods ------------------------------------------------------------------------------------------------------

_RENDERABLE = (RoundTripFormat, FixedFormat, GroupedFormat, ScientificFormat)


def _render(t: MpfTuple, spec: FormatSpec, context: ArithmeticContext, symbols: NumberSymbols) -> str:
    """Render a converted value with a parsed spec; NaN and infinities short-circuit to literals."""
    if not is_finite(t):
        if t == libmp.fnan:
            return symbols.nan
        return symbols.neg_infinity if t[0] else symbols.pos_infinity

    if isinstance(spec, GeneralFormat):
        spec = spec.select(t)
    if not isinstance(spec, _RENDERABLE):
        raise TypeError(f"format spec must be one of {', '.join(c.__name__ for c in _RENDERABLE)}, "
                        f"but got {fmt_type(spec)}")

    dns = DecimalNumberString.zero() if is_zero(t) else mpf_digits(t, context)
    result = spec.render(dns, symbols)
    logger.debug("format.rendered", spec=type(spec).__name__, length=getattr(spec, "length", None))
    return result


def _check_decimal(dns: DecimalNumberString):
    if not isinstance(dns, DecimalNumberString):
        raise TypeError(f"dns must be DecimalNumberString, but got {fmt_type(dns)}")
    if dns.base != 10:
        raise ValueError(f"only base-10 digit strings can be formatted, but got base {dns.base}")


def _fixed_parts(dns: DecimalNumberString, length: int) -> tuple[str, str]:
    """Integer digits and exactly length fractional digits, rounded half away from zero."""
    _check_decimal(dns)
    _validate_length(length)
    integer, fraction = dns.split()
    fraction, carry = round_fraction(fraction, length)
    integer = integer.lstrip("0") or "0"
    if carry:
        integer = increment_integer(integer)
    return integer, fraction


def _fixed_string(negative: bool, integer: str, fraction: str, symbols: NumberSymbols) -> str:
    sign = symbols.negative_sign if negative else ""
    if fraction:
        return f"{sign}{integer}{symbols.decimal_separator}{fraction}"
    return f"{sign}{integer}"
