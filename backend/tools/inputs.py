"""Input coercion shared by the tool computations.

Tools receive the raw JSON `inputs` object. These helpers pull typed values
out of it and raise ValueError with a user-facing message, which the tools
route turns into a 400.
"""
from typing import Any, Dict, List, Optional
import math
import random


class PremiumRequiredError(Exception):
    """A premium-only feature was requested by a free user."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(premium_message(feature))


def premium_message(feature: str) -> str:
    return f"This {feature} feature is only available for premium users. Upgrade to unlock!"


def get_number(
    inputs: Dict[str, Any],
    key: str,
    default: Optional[float] = None,
    *,
    positive: bool = False,
    non_negative: bool = False,
    maximum: Optional[float] = None,
    label: Optional[str] = None,
) -> float:
    label = label or key.replace("_", " ")
    value = inputs.get(key, default)
    if value is None or value == "":
        raise ValueError(f"Please enter a valid {label}")
    if isinstance(value, bool):
        raise ValueError(f"Please enter a valid {label}")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"Please enter a valid {label}")
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"Please enter a valid {label}")
    if positive and number <= 0:
        raise ValueError(f"{label.capitalize()} must be greater than zero")
    if non_negative and number < 0:
        raise ValueError(f"{label.capitalize()} cannot be negative")
    if maximum is not None and number > maximum:
        raise ValueError(f"{label.capitalize()} must be at most {maximum:g}")
    return number


def get_optional_number(inputs: Dict[str, Any], key: str) -> Optional[float]:
    value = inputs.get(key)
    if value is None or value == "":
        return None
    return get_number(inputs, key)


def get_int(inputs: Dict[str, Any], key: str, default: Optional[int] = None, *, minimum: Optional[int] = None,
            maximum: Optional[int] = None, label: Optional[str] = None) -> int:
    label = label or key.replace("_", " ")
    number = get_number(inputs, key, default, label=label)
    if number != int(number):
        raise ValueError(f"{label.capitalize()} must be a whole number")
    number = int(number)
    if minimum is not None and number < minimum:
        raise ValueError(f"{label.capitalize()} must be at least {minimum}")
    if maximum is not None and number > maximum:
        raise ValueError(f"{label.capitalize()} must be at most {maximum}")
    return number


def get_str(inputs: Dict[str, Any], key: str, default: Optional[str] = None, *, required: bool = False,
            label: Optional[str] = None) -> str:
    value = inputs.get(key, default)
    if value is None:
        value = ""
    if not isinstance(value, str):
        value = str(value)
    if required and not value.strip():
        raise ValueError(f"Please enter {label or key.replace('_', ' ')}")
    return value


def get_choice(inputs: Dict[str, Any], key: str, choices, default: Optional[str] = None) -> str:
    value = inputs.get(key, default)
    if value not in choices:
        allowed = ", ".join(choices)
        raise ValueError(f"Invalid {key.replace('_', ' ')}: choose one of {allowed}")
    return value


def get_bool(inputs: Dict[str, Any], key: str, default: bool = False) -> bool:
    value = inputs.get(key, default)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def get_list(inputs: Dict[str, Any], key: str, *, required: bool = False) -> List[Any]:
    value = inputs.get(key)
    if value is None:
        value = []
    if not isinstance(value, list):
        raise ValueError(f"{key.replace('_', ' ').capitalize()} must be a list")
    if required and not value:
        raise ValueError(f"Add at least one {key.rstrip('s').replace('_', ' ')}")
    return value


def seeded_random(inputs: Dict[str, Any]) -> random.Random:
    """A generator seeded from `seed` when given, so output can be reproduced."""
    seed = inputs.get("seed")
    if seed is None:
        return random.Random()
    if isinstance(seed, bool) or not isinstance(seed, (int, str)):
        raise ValueError("Seed must be a whole number or text")
    return random.Random(seed)


def finite(value: float, message: str = "Result is too large") -> float:
    """Infinite or NaN results cannot be returned as JSON."""
    if math.isnan(value) or math.isinf(value):
        raise ValueError(message)
    return value


def round_to(value: float, places: int = 2) -> float:
    return round(value + 0.0, places)


def table(columns: List[str], rows: List[List[Any]]) -> Dict[str, Any]:
    """Tabular payload used by the CSV and PDF exports."""
    return {"columns": columns, "rows": rows}
