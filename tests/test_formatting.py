#
# Mpfmt - Formatting Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import FrozenInstanceError
from decimal import Decimal
from fractions import Fraction

# Third-party ----------------------------------------------------------------------------------------------------------
import mpmath
import pytest
from structlog.testing import capture_logs

# Local ----------------------------------------------------------------------------------------------------------------
from mpfmt.digits import DecimalNumberString
from mpfmt.formatting import FixedFormat, FormatSpecError, GeneralFormat, GroupedFormat, NumberDisplay
from mpfmt.formatting import RoundTripFormat, ScientificFormat
from mpfmt.formatting import format_0, format_e, format_f, format_n, format_number, parse_format
from mpfmt.numeric import ArithmeticContext, ConversionError, std_mpf
from mpfmt.symbols import NumberSymbols


# Tests ----------------------------------------------------------------------------------------------------------------


# Digit String Formatters -------------------------------------------------------------

class TestFormatF:
    """Tests for format_f() fixed-point rendering of digit strings."""

    @pytest.mark.parametrize('digits, exponent, length, expected', [
        pytest.param("996", 1, 0, "10", id='carry_into_new_integer_digit'),
        pytest.param("996", 1, 1, "10.0", id='carry_through_fraction'),
        pytest.param("123", 3, 2, "123.00", id='integer_padded'),
        pytest.param("4", -2, 2, "0.00", id='tiny_rounds_to_zero'),
        pytest.param("5", -2, 2, "0.01", id='tiny_rounds_half_up'),
        pytest.param("5", -1, 2, "0.05", id='short_fraction_padded'),
        pytest.param("25", 1, 0, "3", id='half_away_from_zero'),
        pytest.param("314159", 1, 4, "3.1416", id='pi'),
        pytest.param("12", 5, 1, "12000.0", id='integer_zero_padded'),
        pytest.param("", 0, 2, "0.00", id='zero'),
    ])
    def test_format_f(self, invariant, digits, exponent, length, expected):
        assert format_f(DecimalNumberString(False, digits, exponent), length, invariant) == expected

    def test_negative_sign(self, invariant):
        assert format_f(DecimalNumberString(True, "25", 1), 0, invariant) == "-3"

    def test_fraction_length_invariant(self, invariant):
        dns = DecimalNumberString(False, "987654321", 3)
        for length in range(8):
            result = format_f(dns, length, invariant)
            fraction = result.partition(".")[2]
            assert len(fraction) == length

    def test_negative_length(self, invariant):
        with pytest.raises(ValueError, match=r"(?i)length must be >= 0"):
            format_f(DecimalNumberString(False, "1", 1), -1, invariant)

    def test_non_decimal_base(self, invariant):
        with pytest.raises(ValueError, match=r"(?i)base-10"):
            format_f(DecimalNumberString(False, "ff", 2, base=16), 2, invariant)

    def test_not_digit_string(self, invariant):
        with pytest.raises(TypeError, match=r"(?i)dns must be DecimalNumberString"):
            format_f("1.5", 2, invariant)


class TestFormatN:
    """Tests for format_n() grouped fixed-point rendering."""

    @pytest.mark.parametrize('digits, exponent, length, expected', [
        pytest.param("1234567", 4, 2, "1,234.57", id='thousands'),
        pytest.param("9999996", 4, 2, "10,000.00", id='carry_adds_group'),
        pytest.param("123", 3, 0, "123", id='no_separator_needed'),
        pytest.param("1", 7, 0, "1,000,000", id='million'),
    ])
    def test_format_n(self, invariant, digits, exponent, length, expected):
        assert format_n(DecimalNumberString(False, digits, exponent), length, invariant) == expected

    @pytest.mark.parametrize('digits, exponent, length', [
        ("1234567", 4, 2), ("9999996", 4, 2), ("123456789012", 9, 3), ("5", -3, 1),
    ])
    def test_matches_fixed_without_separators(self, invariant, digits, exponent, length):
        dns = DecimalNumberString(True, digits, exponent)
        grouped = format_n(dns, length, invariant)
        assert grouped.replace(invariant.group_separator, "") == format_f(dns, length, invariant)

    def test_custom_symbols(self, de_symbols):
        dns = DecimalNumberString(True, "123456789", 7)
        assert format_n(dns, 2, de_symbols) == "-1.234.567,89"

    def test_indian_grouping(self):
        symbols = NumberSymbols(group_sizes=(3, 2))
        assert format_n(DecimalNumberString(False, "123456789", 9), 0, symbols) == "12,34,56,789"


class TestFormatE:
    """Tests for format_e() scientific rendering."""

    @pytest.mark.parametrize('digits, exponent, length, expected', [
        pytest.param("123456789", 5, 6, "1.234568E+004", id='rounded_mantissa'),
        pytest.param("123", -1, 3, "1.230E-002", id='negative_exponent'),
        pytest.param("5", 1, 0, "5E+000", id='no_mantissa_digits'),
        pytest.param("996", 1, 1, "1.0E+001", id='carry_renormalizes'),
        pytest.param("196", 1, 1, "2.0E+000", id='carry_into_leading'),
        pytest.param("", 0, 6, "0.000000E+000", id='zero'),
        pytest.param("1", 1235, 2, "1.00E+1234", id='wide_exponent'),
    ])
    def test_format_e(self, invariant, digits, exponent, length, expected):
        assert format_e(DecimalNumberString(False, digits, exponent), length, invariant) == expected

    def test_marker_and_width(self, invariant):
        dns = DecimalNumberString(False, "999", 1)
        assert format_e(dns, 1, invariant, marker="e", exponent_width=2) == "1.0e+01"

    def test_negative_value(self, invariant):
        assert format_e(DecimalNumberString(True, "25", -3), 1, invariant) == "-2.5E-004"

    def test_symbols_signs(self):
        symbols = NumberSymbols(decimal_separator=",", positive_sign="", negative_sign="−")
        assert format_e(DecimalNumberString(True, "125", 1), 2, symbols) == "−1,25E000"
        assert format_e(DecimalNumberString(False, "125", -1), 1, symbols) == "1,3E−002"


class TestFormat0:
    """Tests for format_0() round-trip rendering."""

    @pytest.mark.parametrize('digits, exponent, negative, expected', [
        pytest.param("314159", 1, False, "3.14159", id='pi'),
        pytest.param("5", 3, False, "500", id='integer'),
        pytest.param("9876", -2, True, "-0.009876", id='small_negative'),
        pytest.param("1500", 2, False, "15", id='trailing_zeros_dropped'),
        pytest.param("", 0, False, "0", id='zero'),
    ])
    def test_format_0(self, invariant, digits, exponent, negative, expected):
        assert format_0(DecimalNumberString(negative, digits, exponent), invariant) == expected


# Format Specifier Parsing ------------------------------------------------------------

class TestParseFormat:
    """Tests for parse_format() specifier parsing."""

    @pytest.mark.parametrize('fmt, expected', [
        pytest.param(None, RoundTripFormat(), id='none'),
        pytest.param("", RoundTripFormat(), id='empty'),
        pytest.param("F", FixedFormat(2), id='f_default'),
        pytest.param("f4", FixedFormat(4), id='f_lower'),
        pytest.param("N", GroupedFormat(2), id='n_default'),
        pytest.param("n0", GroupedFormat(0), id='n_zero'),
        pytest.param("E", ScientificFormat(6, "E", 3), id='e_default'),
        pytest.param("e2", ScientificFormat(2, "e", 3), id='e_lower_marker'),
        pytest.param("G", GeneralFormat(None), id='g_default'),
        pytest.param("g3", GeneralFormat(3), id='g_length'),
        pytest.param("F12", FixedFormat(12), id='two_digit_length'),
    ])
    def test_parse(self, fmt, expected):
        assert parse_format(fmt) == expected

    @pytest.mark.parametrize('fmt', [
        pytest.param("X", id='unknown_kind'),
        pytest.param("D2", id='unsupported_kind'),
        pytest.param("F2x", id='trailing_garbage'),
        pytest.param("2F", id='length_first'),
        pytest.param("F-1", id='negative_length'),
        pytest.param(" F2", id='leading_space'),
    ])
    def test_rejected(self, fmt):
        with pytest.raises(FormatSpecError, match=r"(?i)unsupported format specifier"):
            parse_format(fmt)

    def test_rejected_lists_supported_kinds(self):
        with pytest.raises(FormatSpecError, match=r"supported: N, F, E, G"):
            parse_format("X")

    def test_rejected_logs_warning(self):
        with capture_logs() as logs:
            with pytest.raises(FormatSpecError):
                parse_format("X")
        assert logs == [{"event": "format.rejected", "specifier": "X", "log_level": "warning"}]

    def test_format_spec_error_is_value_error(self):
        assert issubclass(FormatSpecError, ValueError)

    def test_not_str(self):
        with pytest.raises(TypeError, match=r"(?i)format specifier must be str"):
            parse_format(2)

    def test_spec_validation(self):
        with pytest.raises(ValueError, match=r"(?i)marker must be"):
            ScientificFormat(2, marker="x")
        with pytest.raises(ValueError, match=r"(?i)exponent_width must be >= 1"):
            ScientificFormat(2, exponent_width=0)
        with pytest.raises(TypeError, match=r"(?i)length must be int"):
            FixedFormat("2")

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            FixedFormat(2).length = 3


# General Format Dispatch -------------------------------------------------------------

class TestGeneralFormat:
    """Tests for GeneralFormat.select() threshold dispatch."""

    @pytest.mark.parametrize('value, expected', [
        pytest.param(1234.5678, FixedFormat(2), id='moderate'),
        pytest.param(0, ScientificFormat(6, "e", 2), id='zero_below_lower'),
        pytest.param(1e-5, FixedFormat(2), id='exactly_lower_threshold'),
        pytest.param(1e16, FixedFormat(2), id='exactly_upper_threshold'),
        pytest.param(-1e16, FixedFormat(2), id='negative_upper_threshold'),
        pytest.param(9.99e-6, ScientificFormat(6, "e", 2), id='below_lower'),
        pytest.param(2e16, ScientificFormat(6, "e", 2), id='above_upper'),
        pytest.param(-2e-6, ScientificFormat(6, "e", 2), id='negative_small'),
    ])
    def test_select_default_length(self, value, expected):
        assert GeneralFormat().select(std_mpf(value)) == expected

    def test_select_explicit_length(self):
        assert GeneralFormat(3).select(std_mpf(1.5)) == FixedFormat(3)
        assert GeneralFormat(3).select(std_mpf(1e-9)) == ScientificFormat(3, "e", 2)


# Public API --------------------------------------------------------------------------

class TestFormatNumber:
    """Tests for format_number() end to end."""

    @pytest.mark.parametrize('value, fmt, expected', [
        pytest.param(1234.5678, "N", "1,234.57", id='n_default'),
        pytest.param(12345.6789, "N", "12,345.68", id='n_rounds_not_truncates'),
        pytest.param(-1234.5, "N1", "-1,234.5", id='n_negative'),
        pytest.param(1234.5678, "F", "1234.57", id='f_default'),
        pytest.param(9.96, "F0", "10", id='f_carry'),
        pytest.param(2.5, "F0", "3", id='f_half_away'),
        pytest.param(-2.5, "F0", "-3", id='f_half_away_negative'),
        pytest.param(0.125, "F2", "0.13", id='f_binary_exact_half'),
        pytest.param(12345.6789, "E", "1.234568E+004", id='e_default'),
        pytest.param(12345.6789, "e2", "1.23e+004", id='e_lower'),
        pytest.param(-0.00025, "E1", "-2.5E-004", id='e_negative'),
        pytest.param(1234.5678, "G", "1234.57", id='g_fixed'),
        pytest.param(0.000001234, "G3", "1.234e-06", id='g_small'),
        pytest.param(1e-6, "G", "1.000000e-06", id='g_small_carry'),
        pytest.param(2e16, "G2", "2.00e+16", id='g_large'),
        pytest.param(1e-5, "G", "0.00", id='g_at_lower_threshold'),
        pytest.param(1e16, "G", "10000000000000000.00", id='g_at_upper_threshold'),
        pytest.param(1e100, "g1", "1.0e+100", id='g_three_digit_exponent'),
    ])
    def test_format(self, value, fmt, expected):
        assert format_number(value, fmt) == expected

    @pytest.mark.parametrize('fmt, expected', [
        pytest.param("F", "0.00", id='f'),
        pytest.param("N0", "0", id='n0'),
        pytest.param("E", "0.000000E+000", id='e'),
        pytest.param("G", "0.000000e+00", id='g_scientific'),
        pytest.param("G2", "0.00e+00", id='g_length'),
        pytest.param(None, "0", id='round_trip'),
    ])
    def test_zero(self, fmt, expected):
        assert format_number(0, fmt) == expected

    @pytest.mark.parametrize('value, expected', [
        pytest.param(float("nan"), "NaN", id='nan'),
        pytest.param(float("inf"), "Infinity", id='inf'),
        pytest.param(float("-inf"), "-Infinity", id='neg_inf'),
        pytest.param(Decimal("NaN"), "NaN", id='decimal_nan'),
    ])
    @pytest.mark.parametrize('fmt', ["F", "N3", "E", "G", None])
    def test_special_values(self, value, fmt, expected):
        assert format_number(value, fmt) == expected

    def test_special_value_symbols(self):
        symbols = NumberSymbols(nan="nan", pos_infinity="∞", neg_infinity="-∞")
        assert format_number(float("inf"), "F", symbols) == "∞"
        assert format_number(float("-inf"), "E", symbols) == "-∞"
        assert format_number(float("nan"), "G", symbols) == "nan"

    def test_invalid_specifier_checked_before_special_values(self):
        with pytest.raises(FormatSpecError):
            format_number(float("nan"), "X")

    @pytest.mark.parametrize('value, expected', [
        pytest.param(2.5, "2.5", id='exact'),
        pytest.param(500, "500", id='integer'),
        pytest.param(0.1, "0.10000000000000001", id='all_extracted_digits'),
        pytest.param(-0.001, "-0.001", id='small_negative'),
    ])
    def test_round_trip(self, value, expected):
        assert format_number(value) == expected

    @pytest.mark.parametrize('value', [
        pytest.param(mpmath.mpf("0.75"), id='mpf'),
        pytest.param(Decimal("0.75"), id='decimal'),
        pytest.param(Fraction(3, 4), id='fraction'),
        pytest.param("0.75", id='str'),
    ])
    def test_input_types(self, value):
        assert format_number(value, "F3") == "0.750"

    def test_custom_symbols(self, de_symbols):
        assert format_number(1234567.891, "N2", de_symbols) == "1.234.567,89"
        assert format_number(12345.6789, "E2", de_symbols) == "1,23E+004"
        assert format_number(0.5, "F1", de_symbols) == "0,5"

    def test_quad_context(self, quad):
        assert format_number(Fraction(1, 3), "F20", context=quad) == "0.33333333333333333333"
        assert format_number(Fraction(1, 3), "F20") == "0.33333333333333331000"

    def test_unparseable_value(self):
        with pytest.raises(ConversionError):
            format_number("abc", "F")

    def test_symbols_type(self):
        with pytest.raises(TypeError, match=r"(?i)symbols must be NumberSymbols"):
            format_number(1.5, "F", symbols={"decimal_separator": ","})

    def test_rendering_logs_debug(self):
        with capture_logs() as logs:
            format_number(1.5, "G")
        rendered = [e for e in logs if e["event"] == "format.rendered"]
        assert rendered == [{"event": "format.rendered", "spec": "FixedFormat", "length": 2,
                             "log_level": "debug"}]


class TestNumberDisplay:
    """Tests for NumberDisplay str() and format() integration."""

    def test_str_is_round_trip(self):
        assert str(NumberDisplay(2.5)) == "2.5"

    @pytest.mark.parametrize('fmt, expected', [
        pytest.param("N1", "1,234.6", id='n1'),
        pytest.param("F0", "1235", id='f0'),
        pytest.param("e1", "1.2e+003", id='e1'),
        pytest.param("", "1234.5678", id='empty'),
    ])
    def test_format(self, fmt, expected):
        assert format(NumberDisplay(1234.5678), fmt) == expected

    def test_f_string(self):
        assert f"{NumberDisplay(-0.125):F2}" == "-0.13"

    def test_symbols_and_context(self, de_symbols):
        display = NumberDisplay(Fraction(1, 3), context=ArithmeticContext.quad(), symbols=de_symbols)
        assert f"{display:F20}" == "0,33333333333333333333"

    def test_defaults_resolved(self):
        display = NumberDisplay(1)
        assert display.context == ArithmeticContext()
        assert display.symbols == NumberSymbols.invariant()

    def test_invalid_specifier(self):
        with pytest.raises(FormatSpecError):
            format(NumberDisplay(1.5), "Q")

    def test_invalid_value(self):
        with pytest.raises(TypeError):
            NumberDisplay(True)

    def test_invalid_symbols(self):
        with pytest.raises(TypeError, match=r"(?i)symbols must be NumberSymbols"):
            NumberDisplay(1.5, symbols="de")

    def test_equality_ignores_converted_value(self):
        assert NumberDisplay(1.5) == NumberDisplay(1.5)
