import pytest

from asel.services.formatting_service import (
    format_arabic_number,
    format_currency,
    format_percentage,
)

ARABIC_DIGITS = set("٠١٢٣٤٥٦٧٨٩")


class TestFormatArabicNumber:
    @pytest.mark.parametrize("value, decimals, expected", [
        (0, 0, "٠"),
        (123, 0, "١٢٣"),
        (1000, 0, "١٬٠٠٠"),
        (10000, 0, "١٠٬٠٠٠"),
        (100000, 0, "١٠٠٬٠٠٠"),
        (1000000, 0, "١٬٠٠٠٬٠٠٠"),
        (123.45, 2, "١٢٣٫٤٥"),
        (1000.50, 2, "١٬٠٠٠٫٥٠"),
        (0.99, 2, "٠٫٩٩"),
        (999999999.99, 2, "٩٩٩٬٩٩٩٬٩٩٩٫٩٩"),
        (0.001, 3, "٠٫٠٠١"),
    ])
    def test_groups_and_converts_digits(self, value, decimals, expected):
        assert format_arabic_number(value, decimals) == expected

    def test_default_is_two_decimals(self):
        assert format_arabic_number(123.4) == "١٢٣٫٤٠"
        assert format_arabic_number(123) == "١٢٣٫٠٠"

    @pytest.mark.parametrize("decimals, expected", [
        (0, "١٢٣"),
        (1, "١٢٣٫٥"),
        (2, "١٢٣٫٤٦"),
        (4, "١٢٣٫٤٥٦٠"),
    ])
    def test_rounds_to_requested_decimals(self, decimals, expected):
        assert format_arabic_number(123.456, decimals) == expected

    def test_exact_ties_round_away_from_zero(self):
        assert format_arabic_number(2.5, 0) == "٣"
        assert format_arabic_number(0.125, 2) == "٠٫١٣"
        assert format_arabic_number(-2.5, 0) == "-٣"

    def test_inexact_binary_values_round_by_stored_value(self):
        # 1.005 is stored as 1.00499999...
        assert format_arabic_number(1.005, 2) == "١٫٠٠"

    @pytest.mark.parametrize("value", [None, float("nan"), "abc", "", float("inf"), True, object()])
    def test_invalid_input_formats_as_zero(self, value):
        assert format_arabic_number(value) == "٠٫٠٠"

    def test_numeric_strings_are_parsed(self):
        assert format_arabic_number("123", 0) == "١٢٣"
        assert format_arabic_number("123.45") == "١٢٣٫٤٥"
        assert format_arabic_number("1000", 0) == "١٬٠٠٠"

    def test_negative_values_keep_grouping_mark_after_sign(self):
        # The sign is counted as a character of the integer part
        assert format_arabic_number(-100) == "-٬١٠٠٫٠٠"
        assert format_arabic_number(-123, 0) == "-٬١٢٣"
        assert format_arabic_number(-12, 0) == "-١٢"
        assert "١٢٣٫٤٥" in format_arabic_number(-123.45)

    def test_negative_zero(self):
        assert format_arabic_number(-0.0) == "٠٫٠٠"
        assert format_arabic_number(-0.001) == "-٠٫٠٠"

    @pytest.mark.parametrize("value", [0, 7, 1234.5678, -98765.4321, "42"])
    @pytest.mark.parametrize("decimals", [0, 1, 2, 3, 5])
    def test_fraction_width_matches_decimals(self, value, decimals):
        formatted = format_arabic_number(value, decimals)
        if decimals == 0:
            assert "٫" not in formatted
        else:
            fraction = formatted.split("٫")[1]
            assert len(fraction) == decimals
            assert set(fraction) <= ARABIC_DIGITS

    def test_no_ascii_digits_remain(self):
        formatted = format_arabic_number(9876543210.12)
        assert not any(ch.isascii() and ch.isdigit() for ch in formatted)

    def test_huge_values_do_not_raise(self):
        formatted = format_arabic_number(1e30, 0)
        assert formatted.startswith("١٬")
        assert formatted.count("٬") == 10

    def test_formatting_is_repeatable(self):
        assert format_arabic_number(1234.5) == format_arabic_number(1234.5)
    @pytest.mark.parametrize("decimals, expected", [
        (None, "٥٫٠٠"),
        ("abc", "٥٫٠٠"),
        (float("nan"), "٥٫٠٠"),
        (float("inf"), "٥٫٠٠"),
        ("3", "٥٫٠٠٠"),
        (2.9, "٥٫٠٠"),
        (-1, "٥"),
    ])
    def test_unusable_decimals_never_raise(self, decimals, expected):
        assert format_arabic_number(5, decimals) == expected

    def test_decimals_are_capped(self):
        formatted = format_arabic_number(1, 500)
        assert len(formatted.split("٫")[1]) == 100


class TestFormatCurrency:
    def test_default_currency(self):
        assert format_currency(100) == "١٠٠٫٠٠ ج.م"

    def test_custom_currency(self):
        assert format_currency(100, "$") == "١٠٠٫٠٠ $"

    def test_empty_currency_leaves_trailing_space(self):
        assert format_currency(100, "") == "١٠٠٫٠٠ "

    def test_decimals_pass_through(self):
        assert format_currency(1500, "ج.م", 0) == "١٬٥٠٠ ج.م"

    def test_invalid_amount(self):
        assert format_currency(None) == "٠٫٠٠ ج.م"
    @pytest.mark.parametrize("currency, expected", [
        (None, "٥٫٠٠ "),
        (5, "٥٫٠٠ 5"),
        ("USD", "٥٫٠٠ USD"),
    ])
    def test_currency_label_of_any_type(self, currency, expected):
        assert format_currency(5, currency) == expected

    def test_unusable_decimals(self):
        assert format_currency(5, "ج.م", None) == "٥٫٠٠ ج.م"


class TestFormatPercentage:
    def test_two_decimals(self):
        assert format_percentage(25.5) == "٢٥٫٥٠%"
        assert format_percentage(100) == "١٠٠٫٠٠%"

    def test_negative(self):
        assert format_percentage(-5) == "-٥٫٠٠%"

    def test_invalid(self):
        assert format_percentage("n/a") == "٠٫٠٠%"
