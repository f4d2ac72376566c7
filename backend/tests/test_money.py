"""
Money helper tests.

Verifies:
- Decimal inputs convert to integer cents with half-up rounding
- Line totals and sums are exact regardless of order
- Invalid inputs raise ValidationError
"""

from decimal import Decimal
from itertools import permutations

import pytest

from pgims import money
from pgims.errors import ValidationError


class TestToCents:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("10.00", 1000),
            ("2.50", 250),
            (3, 300),
            (2.5, 250),
            ("0.005", 1),
            ("10.004", 1000),
            (Decimal("19.995"), 2000),
            (" 7.10 ", 710),
        ],
    )
    def test_converts_to_cents(self, value, expected):
        assert money.to_cents(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", True, "NaN", "Infinity"])
    def test_rejects_invalid_amounts(self, value):
        with pytest.raises(ValidationError) as exc:
            money.to_cents(value, field="price")
        assert exc.value.field == "price"

    def test_binary_float_noise_is_not_carried(self):
        # 0.1 + 0.2 is 0.30000000000000004 as a float
        assert money.to_cents(0.1 + 0.2) == 30


class TestArithmetic:

    def test_order_total_example(self):
        lines = [money.multiply(1000, 3), money.multiply(250, 4)]
        total = money.sum_cents(lines)
        assert total == 4000
        assert money.format_cents(total) == "40.00"

    def test_sum_is_order_independent(self):
        amounts = [money.to_cents(v) for v in ("0.10", "0.20", "19.99", "1234.56")]
        totals = {money.sum_cents(p) for p in permutations(amounts)}
        assert totals == {125485}

    def test_format_cents(self):
        assert money.format_cents(0) == "0.00"
        assert money.format_cents(5) == "0.05"
        assert money.format_cents(-1250) == "-12.50"
        assert money.format_cents(None) is None
