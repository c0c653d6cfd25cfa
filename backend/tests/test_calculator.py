from decimal import ROUND_HALF_UP, Decimal

import pytest

from vatbook.core.exceptions import InvalidAmount, InvalidDeductionType, UnknownCategory
from vatbook.core.money import round2
from vatbook.tax.calculator import Deduction, apply_deductions, compute_vat
from vatbook.tax.rates import TaxCategory, list_rates, rate_for, rates_for


class TestRateTable:

    def test_standard_rate_is_21(self):
        entry = rate_for("standard")
        assert entry.category == TaxCategory.STANDARD
        assert entry.rate == Decimal("21")

    def test_reduced_resolves_to_first_reduced_rate(self):
        assert rate_for("reduced").rate == Decimal("12")

    def test_both_reduced_rates_are_listed(self):
        assert [e.rate for e in rates_for("reduced")] == [Decimal("12"), Decimal("6")]

    @pytest.mark.parametrize("category", ["zero", "exempt"])
    def test_zero_and_exempt_are_zero(self, category):
        assert rate_for(category).rate == Decimal("0")

    def test_accepts_enum_member(self):
        assert rate_for(TaxCategory.STANDARD) is rate_for("standard")

    @pytest.mark.parametrize("category", ["luxury", "", "STANDARD", None])
    def test_unknown_category(self, category):
        with pytest.raises(UnknownCategory):
            rate_for(category)

    def test_schedule_has_five_entries(self):
        assert len(list_rates()) == 5


class TestComputeVAT:

    @pytest.mark.parametrize(
        "amount",
        ["0.01", "0.50", "1", "19.99", "99.95", "1234.56", "100000.05"],
    )
    def test_standard_rate_matches_half_up_formula(self, amount):
        base = Decimal(amount)
        result = compute_vat(base, "standard")

        expected_vat = (base * Decimal("0.21")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        assert result.vat_amount == expected_vat
        assert result.total_amount == round2(base + expected_vat)
        assert result.applied_rate == Decimal("21")

    def test_rounds_half_up_not_half_even(self):
        # 0.50 * 21% = 0.105
        assert compute_vat("0.50").vat_amount == Decimal("0.11")

    def test_defaults_to_standard(self):
        result = compute_vat(1000)
        assert result.vat_amount == Decimal("210.00")
        assert result.total_amount == Decimal("1210.00")

    def test_float_input_goes_through_str(self):
        result = compute_vat(19.99)
        assert result.vat_amount == Decimal("4.20")
        assert result.total_amount == Decimal("24.19")

    def test_reduced_category(self):
        result = compute_vat(Decimal("50"), "reduced")
        assert result.vat_amount == Decimal("6.00")
        assert result.applied_rate == Decimal("12")

    @pytest.mark.parametrize("category", ["zero", "exempt"])
    def test_zero_rated(self, category):
        result = compute_vat(Decimal("80"), category)
        assert result.vat_amount == Decimal("0.00")
        assert result.total_amount == Decimal("80.00")

    @pytest.mark.parametrize("amount", [0, "0.00", -1, Decimal("-0.01")])
    def test_non_positive_amount(self, amount):
        with pytest.raises(InvalidAmount):
            compute_vat(amount, "standard")

    @pytest.mark.parametrize("amount", ["abc", None, float("nan")])
    def test_non_numeric_amount(self, amount):
        with pytest.raises(InvalidAmount):
            compute_vat(amount)

    def test_unknown_category(self):
        with pytest.raises(UnknownCategory):
            compute_vat(100, "luxury")

    def test_amount_checked_before_category(self):
        with pytest.raises(InvalidAmount):
            compute_vat(0, "luxury")

    @pytest.mark.parametrize("amount", [Decimal("1e30"), "1e30", Decimal("9e25")])
    def test_amount_too_large_for_cents(self, amount):
        # 9e25 itself fits but its VAT-inclusive total does not
        with pytest.raises(InvalidAmount):
            compute_vat(amount, "standard")


class TestApplyDeductions:

    def test_professional_capped_at_30_percent(self):
        result = apply_deductions(1000, [{"type": "professional", "amount": 400}])
        assert result.applied_deductions == [Deduction("professional", Decimal("300.00"))]
        assert result.final_amount == Decimal("700.00")

    def test_caps_use_original_total(self):
        result = apply_deductions(
            1000,
            [
                {"type": "professional", "amount": 400},
                {"type": "investment", "amount": 300},
            ],
        )
        assert [d.amount for d in result.applied_deductions] == [Decimal("300"), Decimal("200")]
        assert result.final_amount == Decimal("500.00")

    def test_request_below_cap_applies_in_full(self):
        result = apply_deductions(Decimal("1000"), [Deduction("investment", Decimal("150"))])
        assert result.applied_deductions[0].amount == Decimal("150.00")
        assert result.final_amount == Decimal("850.00")

    def test_repeated_type_each_capped_against_original(self):
        result = apply_deductions(
            100,
            [
                {"type": "professional", "amount": 50},
                {"type": "professional", "amount": 50},
            ],
        )
        assert result.final_amount == Decimal("40.00")

    def test_no_deductions(self):
        result = apply_deductions("99.999", [])
        assert result.final_amount == Decimal("100.00")
        assert result.applied_deductions == []

    def test_unknown_type_fails_whole_call(self):
        with pytest.raises(InvalidDeductionType) as excinfo:
            apply_deductions(
                1000,
                [
                    {"type": "professional", "amount": 100},
                    {"type": "bogus", "amount": 1},
                ],
            )
        assert excinfo.value.deduction_type == "bogus"

    def test_unknown_type_alone(self):
        with pytest.raises(InvalidDeductionType):
            apply_deductions(1000, [{"type": "bogus", "amount": 1}])

    def test_negative_request_never_increases_total(self):
        result = apply_deductions(1000, [{"type": "investment", "amount": -500}])
        assert result.final_amount == Decimal("1000.00")

    def test_negative_total_rejected(self):
        with pytest.raises(InvalidAmount):
            apply_deductions(-1, [])

    def test_total_too_large_for_cents(self):
        with pytest.raises(InvalidAmount):
            apply_deductions(Decimal("1e30"), [])

    def test_request_too_large_for_cents(self):
        with pytest.raises(InvalidAmount):
            apply_deductions(1000, [{"type": "professional", "amount": Decimal("1e30")}])

    def test_zero_total(self):
        result = apply_deductions(0, [{"type": "professional", "amount": 10}])
        assert result.final_amount == Decimal("0.00")

    def test_final_rounded_once_at_the_end(self):
        # 30% of 33.33 is 9.999, 20% is 6.666; 33.33 - 16.665 = 16.665
        result = apply_deductions(
            Decimal("33.33"),
            [
                {"type": "professional", "amount": 1000},
                {"type": "investment", "amount": 1000},
            ],
        )
        assert result.final_amount == Decimal("16.67")
