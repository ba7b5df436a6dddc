"""Financial Wizards: interest, loan, investment, tax and conversion calculators."""
from typing import Any, Dict, List
import math

from tools.registry import register
from tools.inputs import (
    PremiumRequiredError,
    finite,
    get_number,
    get_optional_number,
    get_int,
    get_choice,
    get_str,
    round_to,
    table,
)

# ============================================================================
# Interest & loans
# ============================================================================

MAX_SCHEDULE_ROWS = 50 * 365
MAX_YEARS = 100


def _grow(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except OverflowError:
        raise ValueError("Result is too large")


@register("compound-interest-calculator", exports=("csv", "pdf"))
def compound_interest(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    principal = get_number(inputs, "principal", positive=True)
    rate = get_number(inputs, "rate", positive=True, label="interest rate")
    years = get_number(inputs, "time", positive=True, maximum=MAX_YEARS, label="time period")
    frequency = get_int(inputs, "frequency", 12, minimum=1, maximum=365, label="compounding frequency")

    r = rate / 100
    amount = finite(principal * _grow(1 + r / frequency, frequency * years))
    result = {
        "principal": round_to(principal),
        "amount": round_to(amount),
        "interest": round_to(amount - principal),
    }

    if premium:
        periods = min(int(frequency * years), MAX_SCHEDULE_ROWS)
        rows = []
        for i in range(1, periods + 1):
            value = principal * _grow(1 + r / frequency, i)
            rows.append([round_to(i / frequency, 4), round_to(value), round_to(value - principal)])
        result["schedule"] = table(["Period (years)", "Amount", "Interest Earned"], rows)
        result["table"] = result["schedule"]
    else:
        result["locked_features"] = ["schedule"]
    return result


@register("simple-interest-calculator", exports=("csv", "pdf"))
def simple_interest(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    principal = get_number(inputs, "principal", positive=True)
    rate = get_number(inputs, "rate", positive=True, label="interest rate")
    years = get_number(inputs, "time", positive=True, maximum=MAX_YEARS, label="time period")

    interest = finite(principal * rate * years / 100)
    result = {
        "principal": round_to(principal),
        "interest": round_to(interest),
        "total_amount": round_to(principal + interest),
    }

    if premium:
        rows = []
        for year in range(1, math.ceil(years) + 1):
            elapsed = min(year, years)
            accrued = principal * rate * elapsed / 100
            rows.append([year, round_to(accrued), round_to(principal + accrued)])
        result["schedule"] = table(["Year", "Interest", "Total Amount"], rows)
        result["table"] = result["schedule"]
    else:
        result["locked_features"] = ["schedule"]
    return result


@register("loan-emi-calculator", exports=("csv", "pdf"))
def loan_emi(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    principal = get_number(inputs, "principal", positive=True, label="loan amount")
    rate = get_number(inputs, "rate", non_negative=True, label="interest rate")
    tenure = get_number(inputs, "tenure", positive=True)
    tenure_type = get_choice(inputs, "tenure_type", ("years", "months"), "years")

    months = int(round(tenure * 12 if tenure_type == "years" else tenure))
    if months < 1:
        raise ValueError("Tenure must be at least one month")
    if months > MAX_YEARS * 12:
        raise ValueError(f"Tenure must be at most {MAX_YEARS} years")
    monthly_rate = rate / 12 / 100

    growth = _grow(1 + monthly_rate, months)
    if growth == 1:
        # Zero or negligible rate
        emi = principal / months
    else:
        emi = finite(principal * monthly_rate * growth / (growth - 1))

    total_payment = emi * months
    result = {
        "emi": round_to(emi),
        "months": months,
        "total_payment": round_to(total_payment),
        "total_interest": round_to(total_payment - principal),
    }

    if premium:
        balance = principal
        rows = []
        for month in range(1, months + 1):
            interest = balance * monthly_rate
            principal_part = emi - interest
            balance = max(0.0, balance - principal_part)
            rows.append([month, round_to(emi), round_to(principal_part), round_to(interest), round_to(balance)])
        result["amortization"] = table(["Month", "EMI", "Principal", "Interest", "Balance"], rows)
        result["table"] = result["amortization"]
    else:
        result["locked_features"] = ["amortization"]
    return result


# ============================================================================
# Investing & planning
# ============================================================================

def _sip_future_value(monthly: float, monthly_rate: float, months: int) -> float:
    return finite(monthly * ((_grow(1 + monthly_rate, months) - 1) / monthly_rate) * (1 + monthly_rate))


@register("investment-return-calculator", exports=("csv", "pdf"))
def investment_return(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    monthly = get_number(inputs, "monthly_investment", positive=True)
    rate = get_number(inputs, "rate", positive=True, label="expected return rate")
    years = get_number(inputs, "years", positive=True, maximum=MAX_YEARS, label="investment period")

    monthly_rate = rate / 100 / 12
    months = int(round(years * 12))
    future_value = _sip_future_value(monthly, monthly_rate, months)
    invested = monthly * months

    rows = []
    for year in range(1, math.ceil(years) + 1):
        m = min(year * 12, months)
        rows.append([year, round_to(monthly * m), round_to(_sip_future_value(monthly, monthly_rate, m))])

    return {
        "invested": round_to(invested),
        "returns": round_to(future_value - invested),
        "future_value": round_to(future_value),
        "table": table(["Year", "Invested", "Value"], rows),
    }


@register("retirement-corpus-calculator", exports=("csv", "pdf"))
def retirement_corpus(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    current_age = get_number(inputs, "current_age")
    retirement_age = get_number(inputs, "retirement_age")
    monthly = get_number(inputs, "monthly_savings")
    rate = get_number(inputs, "expected_return")
    if current_age <= 0 or retirement_age <= current_age or monthly <= 0 or rate <= 0:
        raise ValueError("Please provide valid, positive values.")
    if retirement_age - current_age > MAX_YEARS:
        raise ValueError(f"Retirement must be at most {MAX_YEARS} years away")

    years = int(retirement_age - current_age)
    monthly_rate = rate / 12 / 100
    projection = []
    corpus = 0.0
    for year in range(1, years + 1):
        corpus = _sip_future_value(monthly, monthly_rate, year * 12)
        projection.append([int(current_age) + year, round_to(monthly * 12), round_to(corpus)])

    return {
        "final_corpus": round_to(corpus),
        "total_invested": round_to(monthly * 12 * years),
        "years": years,
        "table": table(["Your Age", "Yearly Contribution", "Total Corpus"], projection),
    }


MAX_SAVINGS_MONTHS = 1200


@register("savings-goal-calculator", exports=("csv", "pdf"))
def savings_goal(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    goal = get_number(inputs, "goal_amount", positive=True)
    monthly = get_number(inputs, "monthly_savings", positive=True)
    annual_rate = get_number(inputs, "interest_rate", 0, non_negative=True)
    r = annual_rate / 100 / 12

    months = 0
    total = 0.0
    rows = []
    while total < goal:
        if months >= MAX_SAVINGS_MONTHS:
            raise ValueError("Goal cannot be reached within 100 years at this savings rate")
        total = total * (1 + r) + monthly
        months += 1
        rows.append([months, round(months / 12, 1), round_to(finite(total))])

    return {
        "months": months,
        "years": round(months / 12, 1),
        "future_value": round_to(total),
        "table": table(["Month", "Year", "Value"], rows),
    }


@register("roi-calculator", exports=("csv", "pdf"))
def roi(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    gain = get_number(inputs, "gain", positive=True, label="amount returned")
    cost = get_number(inputs, "cost", positive=True, label="amount invested")

    value = (gain - cost) / cost * 100
    return {
        "roi": round_to(value),
        "net_profit": round_to(gain - cost),
        "table": table(["Metric", "Value"], [
            ["Amount Invested", round_to(cost)],
            ["Amount Returned", round_to(gain)],
            ["Net Profit", round_to(gain - cost)],
            ["ROI (%)", round_to(value)],
        ]),
    }


@register("break-even-point-calculator", exports=("csv", "pdf"))
def break_even(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    fixed = get_number(inputs, "fixed_cost", label="fixed cost")
    variable = get_number(inputs, "variable_cost", label="variable cost per unit")
    price = get_number(inputs, "selling_price", label="selling price per unit")
    units_sold = get_optional_number(inputs, "units_sold") or 0

    if fixed <= 0:
        raise ValueError("Fixed cost must be greater than zero")
    if price <= variable:
        raise ValueError("Selling price must be greater than variable cost per unit")

    units = finite(fixed / (price - variable))
    revenue = units * price
    result = {
        "break_even_units": round_to(units),
        "break_even_revenue": round_to(revenue),
        "contribution_margin": round_to(price - variable),
    }
    if units_sold > 0:
        result["margin_of_safety"] = round_to((units_sold - units) / units_sold * 100)

    max_units = max(units_sold or units * 2, units * 1.5)
    step = max(1, math.ceil(max_units / 20))
    rows = []
    for u in range(0, int(max_units) + 1, step):
        total_revenue = u * price
        total_cost = fixed + u * variable
        rows.append([u, round_to(total_revenue), round_to(total_cost), round_to(total_revenue - total_cost)])
    result["table"] = table(["Units", "Revenue", "Total Cost", "Profit"], rows)
    return result


# ============================================================================
# Percentages
# ============================================================================

PERCENTAGE_OPERATIONS = (
    "percentage-of",
    "what-percent",
    "value-from-percent",
    "percent-change",
    "increase",
    "decrease",
)
PREMIUM_PERCENTAGE_OPERATIONS = ("increase", "decrease")


@register("percentage-calculator")
def percentage(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    operation = get_choice(inputs, "operation", PERCENTAGE_OPERATIONS, "percentage-of")
    if operation in PREMIUM_PERCENTAGE_OPERATIONS and not premium:
        raise PremiumRequiredError(f"percentage {operation}")

    v1 = get_number(inputs, "value1", label="first value")
    v2 = get_number(inputs, "value2", label="second value")

    if operation == "percentage-of":
        value = v1 / 100 * v2
        explanation = f"{v1:g}% of {v2:g}"
    elif operation in ("what-percent", "value-from-percent"):
        if v2 == 0:
            raise ValueError("Cannot divide by zero")
        value = v1 / v2 * 100
        explanation = f"{v1:g} is {round_to(value):g}% of {v2:g}"
    elif operation == "percent-change":
        if v1 == 0:
            raise ValueError("Original value cannot be zero")
        value = (v2 - v1) / abs(v1) * 100
        explanation = f"Change from {v1:g} to {v2:g}"
    elif operation == "increase":
        value = v1 * (1 + v2 / 100)
        explanation = f"{v1:g} increased by {v2:g}%"
    else:
        value = v1 * (1 - v2 / 100)
        explanation = f"{v1:g} decreased by {v2:g}%"

    return {"operation": operation, "result": round_to(value), "explanation": explanation}


# ============================================================================
# Income tax
# ============================================================================

TAX_TABLES: Dict[str, Dict[str, Any]] = {
    "IN": {
        "name": "India",
        "currency": "INR",
        "tax_year": "2023-2024",
        "standard_deduction": 50000,
        "slabs": [
            {"min": 0, "max": 250000, "rate": 0.0},
            {"min": 250001, "max": 500000, "rate": 0.05},
            {"min": 500001, "max": 1000000, "rate": 0.2},
            {"min": 1000001, "max": None, "rate": 0.3},
        ],
        "cess": {"name": "Health and Education Cess", "threshold": 250000, "rate": 0.04},
    },
    "US": {
        "name": "United States",
        "currency": "USD",
        "tax_year": "2023",
        "standard_deduction": 12950,
        "slabs": [
            {"min": 0, "max": 10275, "rate": 0.1},
            {"min": 10276, "max": 41775, "rate": 0.12},
            {"min": 41776, "max": 89075, "rate": 0.22},
            {"min": 89076, "max": 170050, "rate": 0.24},
            {"min": 170051, "max": 215950, "rate": 0.32},
            {"min": 215951, "max": 539900, "rate": 0.35},
            {"min": 539901, "max": None, "rate": 0.37},
        ],
    },
    "GB": {
        "name": "United Kingdom",
        "currency": "GBP",
        "tax_year": "2023-2024",
        "standard_deduction": 12570,
        "slabs": [
            {"min": 0, "max": 12570, "rate": 0.0},
            {"min": 12571, "max": 50270, "rate": 0.2},
            {"min": 50271, "max": 125140, "rate": 0.4},
            {"min": 125141, "max": None, "rate": 0.45},
        ],
    },
}


def _slab_label(slab: Dict[str, Any]) -> str:
    if slab["max"] is None:
        return f"Above {slab['min'] - 1:,} @ {slab['rate'] * 100:g}%"
    return f"{slab['min']:,} - {slab['max']:,} @ {slab['rate'] * 100:g}%"


def compute_income_tax(income: float, country: str) -> Dict[str, Any]:
    config = TAX_TABLES[country]
    taxable = max(0.0, income - config["standard_deduction"])

    tax = 0.0
    breakdown: List[Dict[str, Any]] = [{
        "name": "Standard Deduction",
        "amount": -config["standard_deduction"],
    }]
    for slab in config["slabs"]:
        if taxable <= slab["min"]:
            continue
        if slab["max"] is not None:
            in_slab = min(taxable, slab["max"]) - slab["min"]
        else:
            in_slab = taxable - slab["min"]
        if in_slab > 0:
            slab_tax = in_slab * slab["rate"]
            tax += slab_tax
            breakdown.append({"name": _slab_label(slab), "amount": round_to(slab_tax)})

    cess = config.get("cess")
    if cess and taxable > cess["threshold"]:
        cess_amount = tax * cess["rate"]
        tax += cess_amount
        breakdown.append({"name": cess["name"], "amount": round_to(cess_amount)})

    effective_rate = tax / income * 100 if income > 0 else 0.0
    return {
        "taxable_income": round_to(taxable),
        "total_tax": round_to(tax),
        "effective_rate": round_to(effective_rate),
        "net_income": round_to(income - tax),
        "breakdown": breakdown,
    }


@register("tax-calculator", exports=("csv", "pdf"))
def tax_calculator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    country = get_choice(inputs, "country", tuple(TAX_TABLES.keys()), "IN")
    income = get_number(inputs, "income", positive=True, label="annual income")

    details = compute_income_tax(income, country)
    config = TAX_TABLES[country]
    result = {
        "country": country,
        "currency": config["currency"],
        "tax_year": config["tax_year"],
        "income": round_to(income),
        "taxable_income": details["taxable_income"],
        "total_tax": details["total_tax"],
        "effective_rate": details["effective_rate"],
        "net_income": details["net_income"],
    }
    if premium:
        result["breakdown"] = details["breakdown"]
        result["table"] = table(
            ["Component", "Amount"],
            [[item["name"], item["amount"]] for item in details["breakdown"]],
        )
    else:
        result["locked_features"] = ["breakdown"]
    return result


# ============================================================================
# Currency
# ============================================================================

@register("currency-conversion")
async def currency_conversion(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    from services.exchange_rates import exchange_rate_client

    amount = get_number(inputs, "amount", positive=True)
    source = get_str(inputs, "from", "USD", required=True, label="a source currency").strip().upper()
    target = get_str(inputs, "to", "INR", required=True, label="a target currency").strip().upper()

    if source == target:
        return {"from": source, "to": target, "amount": amount, "rate": 1.0, "converted": round_to(amount, 6)}

    rates = await exchange_rate_client.get_rates(source)
    if target not in rates:
        raise ValueError(f"Exchange rate for {target} not available")
    rate = float(rates[target])
    return {
        "from": source,
        "to": target,
        "amount": amount,
        "rate": round_to(rate, 6),
        "converted": round_to(amount * rate, 6),
    }
