"""
Money helper tests.
"""
from decimal import Decimal

import pytest

from payments.money import ceil_units, format_money, percent_of, quantize, round_half_up, to_decimal


class TestConversion:

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal('0.1')

    def test_decimal_passthrough(self):
        value = Decimal('12.34')
        assert to_decimal(value) is value


class TestRounding:

    @pytest.mark.parametrize('value,expected', [
        ('12.5', Decimal('13')),
        ('12.49', Decimal('12')),
        ('0.5', Decimal('1')),
        ('25.25', Decimal('25')),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_ceil_units(self):
        assert ceil_units('333.34') == Decimal('334')
        assert ceil_units('334') == Decimal('334')

    def test_percent_of_unrounded(self):
        assert percent_of('1010', '2.5') == Decimal('25.25')

    def test_quantize_to_minor_unit(self):
        assert quantize('INR', '10.125') == Decimal('10.13')
        assert quantize('JPY', '1234.5') == Decimal('1235')


class TestFormatting:

    def test_whole_amount_drops_decimals(self):
        assert format_money(Decimal('400.00')) == '₹400'

    def test_fractional_amount_keeps_paise(self):
        assert format_money(Decimal('99.5')) == '₹99.50'

    def test_unknown_currency_uses_code(self):
        assert format_money(Decimal('10'), 'CHF') == 'CHF 10'
