"""
Financial Wizards calculators.
"""
import pytest

from services.exchange_rates import exchange_rate_client
from tools import PremiumRequiredError, execute_tool
from tools.financial import (
    break_even,
    compound_interest,
    compute_income_tax,
    investment_return,
    loan_emi,
    percentage,
    retirement_corpus,
    savings_goal,
    simple_interest,
    tax_calculator,
)


class TestInterestAndLoans:
    def test_simple_interest(self):
        result = simple_interest({"principal": 1000, "rate": 5, "time": 2})

        assert result["interest"] == 100.0
        assert result["total_amount"] == 1100.0
        assert result["locked_features"] == ["schedule"]

    def test_simple_interest_schedule_covers_partial_year(self):
        result = simple_interest({"principal": 1000, "rate": 5, "time": 2.5}, premium=True)

        assert result["schedule"]["rows"] == [
            [1, 50.0, 1050.0],
            [2, 100.0, 1100.0],
            [3, 125.0, 1125.0],
        ]

    def test_emi_with_interest(self):
        result = loan_emi({"principal": 100000, "rate": 12, "tenure": 1})

        assert result["emi"] == 8884.88
        assert result["months"] == 12
        assert result["locked_features"] == ["amortization"]

    def test_zero_rate_loan(self):
        result = loan_emi({"principal": 12000, "rate": 0, "tenure": 12, "tenure_type": "months"})

        assert result["emi"] == 1000.0
        assert result["total_interest"] == 0.0

    def test_amortization_ends_at_zero(self):
        rows = loan_emi({"principal": 100000, "rate": 12, "tenure": 1}, premium=True)["amortization"]["rows"]

        assert len(rows) == 12
        assert rows[0][3] == 1000.0
        assert rows[-1][4] == 0.0

    def test_loan_rejects_non_positive_principal(self):
        with pytest.raises(ValueError, match="Loan amount must be greater than zero"):
            loan_emi({"principal": 0, "rate": 10, "tenure": 1})

    @pytest.mark.parametrize("tool,inputs,message", [
        (compound_interest, {"principal": 1000, "rate": 10, "time": 10000, "frequency": 12}, "at most 100"),
        (simple_interest, {"principal": 1000, "rate": 5, "time": 200000}, "at most 100"),
        (loan_emi, {"principal": 1000, "rate": 12, "tenure": 100000}, "at most 100 years"),
        (loan_emi, {"principal": 1000, "rate": 12, "tenure": 1201, "tenure_type": "months"}, "at most 100 years"),
        (investment_return, {"monthly_investment": 100, "rate": 10, "years": 500}, "at most 100"),
        (retirement_corpus, {"current_age": 1, "retirement_age": 500, "monthly_savings": 100, "expected_return": 8}, "at most 100 years"),
    ])
    def test_long_periods_are_rejected(self, tool, inputs, message):
        with pytest.raises(ValueError, match=message):
            tool(inputs, premium=True)

    def test_overflowing_growth_is_rejected(self):
        with pytest.raises(ValueError, match="Result is too large"):
            compound_interest({"principal": 1e300, "rate": 1000, "time": 100, "frequency": 365})

    def test_huge_integer_input_is_rejected(self):
        with pytest.raises(ValueError, match="Please enter a valid principal"):
            simple_interest({"principal": 10 ** 400, "rate": 5, "time": 1})

    def test_negligible_rate_does_not_divide_by_zero(self):
        result = loan_emi({"principal": 1200, "rate": 1e-20, "tenure": 1})
        assert result["emi"] == 100.0


class TestPlanning:
    def test_sip_future_value(self):
        result = investment_return({"monthly_investment": 1000, "rate": 12, "years": 1})

        assert result["invested"] == 12000.0
        assert result["future_value"] == 12809.33
        assert result["returns"] == 809.33

    def test_retirement_projection_by_age(self):
        result = retirement_corpus(
            {"current_age": 30, "retirement_age": 32, "monthly_savings": 1000, "expected_return": 12}
        )

        assert result["years"] == 2
        assert result["total_invested"] == 24000.0
        assert [row[0] for row in result["table"]["rows"]] == [31, 32]

    def test_retirement_age_must_follow_current_age(self):
        with pytest.raises(ValueError, match="valid, positive values"):
            retirement_corpus(
                {"current_age": 40, "retirement_age": 40, "monthly_savings": 1000, "expected_return": 8}
            )

    def test_savings_goal_without_interest(self):
        result = savings_goal({"goal_amount": 1000, "monthly_savings": 100})

        assert result["months"] == 10
        assert result["years"] == 0.8
        assert result["future_value"] == 1000.0

    def test_unreachable_savings_goal(self):
        with pytest.raises(ValueError, match="100 years"):
            savings_goal({"goal_amount": 10_000_000, "monthly_savings": 1})

    def test_break_even(self):
        result = break_even({"fixed_cost": 1000, "variable_cost": 5, "selling_price": 15, "units_sold": 200})

        assert result["break_even_units"] == 100.0
        assert result["break_even_revenue"] == 1500.0
        assert result["contribution_margin"] == 10.0
        assert result["margin_of_safety"] == 50.0
        rows = result["table"]["rows"]
        assert rows[0] == [0, 0.0, 1000.0, -1000.0]
        assert [100, 1500.0, 1500.0, 0.0] in rows

    def test_break_even_needs_positive_margin(self):
        with pytest.raises(ValueError, match="Selling price must be greater"):
            break_even({"fixed_cost": 1000, "variable_cost": 15, "selling_price": 15})


class TestPercentage:
    @pytest.mark.parametrize("operation,v1,v2,expected", [
        ("percentage-of", 20, 50, 10.0),
        ("what-percent", 25, 200, 12.5),
        ("percent-change", 50, 75, 50.0),
        ("percent-change", -50, -25, 50.0),
    ])
    def test_free_operations(self, operation, v1, v2, expected):
        assert percentage({"operation": operation, "value1": v1, "value2": v2})["result"] == expected

    def test_increase_and_decrease_are_premium(self):
        with pytest.raises(PremiumRequiredError) as exc:
            percentage({"operation": "decrease", "value1": 200, "value2": 25})
        assert exc.value.feature == "percentage decrease"

        assert percentage({"operation": "increase", "value1": 100, "value2": 10}, premium=True)["result"] == 110.0
        assert percentage({"operation": "decrease", "value1": 200, "value2": 25}, premium=True)["result"] == 150.0

    def test_division_by_zero(self):
        with pytest.raises(ValueError, match="Cannot divide by zero"):
            percentage({"operation": "what-percent", "value1": 5, "value2": 0})


class TestIncomeTax:
    def test_us_brackets(self):
        result = compute_income_tax(50000, "US")

        assert result["taxable_income"] == 37050.0
        assert result["total_tax"] == 4240.38
        assert result["effective_rate"] == 8.48
        assert result["net_income"] == 45759.62
        assert [item["name"] for item in result["breakdown"]] == [
            "Standard Deduction",
            "0 - 10,275 @ 10%",
            "10,276 - 41,775 @ 12%",
        ]

    def test_india_adds_cess(self):
        result = compute_income_tax(1_000_000, "IN")

        assert result["breakdown"][-1]["name"] == "Health and Education Cess"
        assert result["breakdown"][-1]["amount"] == 4099.99
        assert result["total_tax"] == 106599.74

    def test_income_below_deduction(self):
        assert compute_income_tax(10000, "GB")["total_tax"] == 0.0

    def test_breakdown_is_premium(self):
        free = tax_calculator({"country": "US", "income": 50000})
        assert free["locked_features"] == ["breakdown"]
        assert "breakdown" not in free

        pro = tax_calculator({"country": "US", "income": 50000}, premium=True)
        assert pro["table"]["rows"][0] == ["Standard Deduction", -12950]

    def test_unknown_country(self):
        with pytest.raises(ValueError, match="Invalid country"):
            tax_calculator({"country": "FR", "income": 50000})


class TestCurrency:
    @pytest.mark.asyncio
    async def test_same_currency_needs_no_lookup(self, monkeypatch):
        async def fail(base):
            raise AssertionError("rates should not be fetched")
        monkeypatch.setattr(exchange_rate_client, "get_rates", fail)

        result = await execute_tool("currency-conversion", {"amount": 10, "from": "usd", "to": "USD"})
        assert result["rate"] == 1.0
        assert result["converted"] == 10.0

    @pytest.mark.asyncio
    async def test_conversion_uses_live_rate(self, monkeypatch):
        async def rates(base):
            assert base == "USD"
            return {"INR": 83.25, "EUR": 0.92}
        monkeypatch.setattr(exchange_rate_client, "get_rates", rates)

        result = await execute_tool("currency-conversion", {"amount": 2, "from": "USD", "to": "inr"}, premium=True)
        assert result["to"] == "INR"
        assert result["converted"] == 166.5

    @pytest.mark.asyncio
    async def test_missing_rate(self, monkeypatch):
        async def rates(base):
            return {"EUR": 0.92}
        monkeypatch.setattr(exchange_rate_client, "get_rates", rates)

        with pytest.raises(ValueError, match="Exchange rate for XYZ not available"):
            await execute_tool("currency-conversion", {"amount": 2, "from": "USD", "to": "XYZ"})
