"""
Regional pricing for the Pro plan.
Prices are tax inclusive and always end in .99.
"""
from typing import Dict, Any, List, Optional
import math

DEFAULT_COUNTRY = "US"
# Annual billing: ten months at a 20% discount
ANNUAL_MONTHS = 10
ANNUAL_DISCOUNT = 0.8

COUNTRIES: List[Dict[str, Any]] = [
    {"code": "US", "name": "United States", "currency": "USD", "symbol": "$", "base_price": 5.99, "tax_rate": 0.08, "tax_name": "Sales Tax"},
    {"code": "IN", "name": "India", "currency": "INR", "symbol": "₹", "base_price": 499, "tax_rate": 0.18, "tax_name": "GST"},
    {"code": "GB", "name": "United Kingdom", "currency": "GBP", "symbol": "£", "base_price": 4.99, "tax_rate": 0.20, "tax_name": "VAT"},
    {"code": "EU", "name": "European Union", "currency": "EUR", "symbol": "€", "base_price": 5.99, "tax_rate": 0.19, "tax_name": "VAT"},
    {"code": "CA", "name": "Canada", "currency": "CAD", "symbol": "C$", "base_price": 7.99, "tax_rate": 0.13, "tax_name": "HST"},
    {"code": "AU", "name": "Australia", "currency": "AUD", "symbol": "A$", "base_price": 8.99, "tax_rate": 0.10, "tax_name": "GST"},
    {"code": "JP", "name": "Japan", "currency": "JPY", "symbol": "¥", "base_price": 899, "tax_rate": 0.10, "tax_name": "Consumption Tax"},
    {"code": "BR", "name": "Brazil", "currency": "BRL", "symbol": "R$", "base_price": 29.99, "tax_rate": 0.17, "tax_name": "ICMS"},
    {"code": "MX", "name": "Mexico", "currency": "MXN", "symbol": "$", "base_price": 119.99, "tax_rate": 0.16, "tax_name": "IVA"},
    {"code": "SG", "name": "Singapore", "currency": "SGD", "symbol": "S$", "base_price": 7.99, "tax_rate": 0.07, "tax_name": "GST"},
]

_BY_CODE = {country["code"]: country for country in COUNTRIES}

FREE_FEATURES = [
    "Access to essential tools",
    "Standard calculations",
    "10 tool uses per month",
    "No data export",
]

PRO_FEATURES = [
    "Unlimited usage without restrictions",
    "Access to every premium tool",
    "Export to CSV, PDF and images",
    "Detailed breakdowns and schedules",
    "Early access to newly released tools",
]


def get_country(code: Optional[str]) -> Dict[str, Any]:
    """Unknown or missing codes fall back to US pricing."""
    return _BY_CODE.get((code or "").upper(), _BY_CODE[DEFAULT_COUNTRY])


def monthly_price(country: Dict[str, Any]) -> float:
    return round(math.floor(country["base_price"] * (1 + country["tax_rate"])) + 0.99, 2)


def annual_price(country: Dict[str, Any]) -> float:
    return round(math.floor(monthly_price(country) * ANNUAL_MONTHS * ANNUAL_DISCOUNT) + 0.99, 2)


def get_pricing(code: Optional[str], annual: bool = False) -> Dict[str, Any]:
    country = get_country(code)
    pro_price = annual_price(country) if annual else monthly_price(country)
    return {
        "country": {k: country[k] for k in ("code", "name", "currency", "symbol", "tax_rate", "tax_name")},
        "billing_period": "annual" if annual else "monthly",
        "plans": [
            {"name": "Free", "price": 0, "features": FREE_FEATURES},
            {
                "name": "Pro",
                "price": pro_price,
                "monthly_price": monthly_price(country),
                "annual_price": annual_price(country),
                "features": PRO_FEATURES + [f"All taxes ({country['tax_name']}) included"],
            },
        ],
    }
