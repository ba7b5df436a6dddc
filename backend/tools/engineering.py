"""Math & Engineering: geometry, physics and conversion calculators."""
from typing import Any, Dict, List
import ast
import math
import operator

from tools.registry import register
from tools.inputs import get_number, get_optional_number, get_choice, get_str, round_to


def _sig(value: float, digits: int = 6) -> float:
    """Round to significant figures, like Number.toPrecision."""
    return float(f"{value:.{digits}g}")


# ============================================================================
# Geometry
# ============================================================================

@register("area-calculator")
def area(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    shape = get_choice(inputs, "shape", ("square", "rectangle", "circle", "triangle"), "square")

    if shape == "square":
        side = get_number(inputs, "side", positive=True)
        value, formula = side * side, "A = side²"
    elif shape == "rectangle":
        length = get_number(inputs, "length", positive=True)
        width = get_number(inputs, "width", positive=True)
        value, formula = length * width, "A = length × width"
    elif shape == "circle":
        radius = get_number(inputs, "radius", positive=True)
        value, formula = math.pi * radius * radius, "A = π × radius²"
    else:
        base = get_number(inputs, "base", positive=True)
        height = get_number(inputs, "height", positive=True)
        value, formula = 0.5 * base * height, "A = ½ × base × height"

    return {"shape": shape, "area": round_to(value), "formula": formula}


@register("volume-calculator")
def volume(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    shape = get_choice(inputs, "shape", ("cube", "sphere", "cylinder", "cone", "rectangular-prism"), "cube")

    if shape == "cube":
        side = get_number(inputs, "side", positive=True)
        value, formula = side ** 3, "V = side³"
    elif shape == "sphere":
        radius = get_number(inputs, "radius", positive=True)
        value, formula = 4 / 3 * math.pi * radius ** 3, "V = 4/3 × π × radius³"
    elif shape == "cylinder":
        radius = get_number(inputs, "radius", positive=True)
        height = get_number(inputs, "height", positive=True)
        value, formula = math.pi * radius ** 2 * height, "V = π × radius² × height"
    elif shape == "cone":
        radius = get_number(inputs, "radius", positive=True)
        height = get_number(inputs, "height", positive=True)
        value, formula = math.pi * radius ** 2 * height / 3, "V = 1/3 × π × radius² × height"
    else:
        length = get_number(inputs, "length", positive=True)
        width = get_number(inputs, "width", positive=True)
        height = get_number(inputs, "height", positive=True)
        value, formula = length * width * height, "V = length × width × height"

    return {"shape": shape, "volume": round_to(value), "formula": formula}


def _triangle(a: float, b: float, c: float, A: float, B: float, C: float) -> Dict[str, Any]:
    area_value = 0.5 * b * c * math.sin(math.radians(A))
    return {
        "sides": {"a": round_to(a, 4), "b": round_to(b, 4), "c": round_to(c, 4)},
        "angles": {"A": round_to(A, 4), "B": round_to(B, 4), "C": round_to(C, 4)},
        "area": round_to(area_value, 4),
        "perimeter": round_to(a + b + c, 4),
    }


def _check_angles(*angles: float):
    for angle in angles:
        if angle <= 0 or angle >= 180:
            raise ValueError("Angles must be between 0 and 180 degrees")
    if sum(angles) >= 180:
        raise ValueError("The sum of the given angles must be less than 180 degrees")


@register("triangle-solver")
def triangle_solver(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    """Solve a triangle from three known parts.

    Sides a, b, c are opposite angles A, B, C (degrees).
    """
    mode = get_choice(inputs, "mode", ("sss", "sas", "asa", "aas", "ssa"), "sss")
    sin = lambda deg: math.sin(math.radians(deg))
    cos = lambda deg: math.cos(math.radians(deg))
    solutions: List[Dict[str, Any]] = []

    if mode == "sss":
        a = get_number(inputs, "a", positive=True, label="side a")
        b = get_number(inputs, "b", positive=True, label="side b")
        c = get_number(inputs, "c", positive=True, label="side c")
        if a + b <= c or a + c <= b or b + c <= a:
            raise ValueError("These sides do not form a valid triangle")
        A = math.degrees(math.acos(max(-1.0, min(1.0, (b * b + c * c - a * a) / (2 * b * c)))))
        B = math.degrees(math.acos(max(-1.0, min(1.0, (a * a + c * c - b * b) / (2 * a * c)))))
        solutions.append(_triangle(a, b, c, A, B, 180 - A - B))

    elif mode == "sas":
        b = get_number(inputs, "b", positive=True, label="side b")
        c = get_number(inputs, "c", positive=True, label="side c")
        A = get_number(inputs, "A", label="angle A")
        _check_angles(A)
        a = math.sqrt(b * b + c * c - 2 * b * c * cos(A))
        B = math.degrees(math.acos(max(-1.0, min(1.0, (a * a + c * c - b * b) / (2 * a * c)))))
        solutions.append(_triangle(a, b, c, A, B, 180 - A - B))

    elif mode == "asa":
        A = get_number(inputs, "A", label="angle A")
        B = get_number(inputs, "B", label="angle B")
        c = get_number(inputs, "c", positive=True, label="side c")
        _check_angles(A, B)
        C = 180 - A - B
        solutions.append(_triangle(c * sin(A) / sin(C), c * sin(B) / sin(C), c, A, B, C))

    elif mode == "aas":
        A = get_number(inputs, "A", label="angle A")
        B = get_number(inputs, "B", label="angle B")
        a = get_number(inputs, "a", positive=True, label="side a")
        _check_angles(A, B)
        C = 180 - A - B
        solutions.append(_triangle(a, a * sin(B) / sin(A), a * sin(C) / sin(A), A, B, C))

    else:
        a = get_number(inputs, "a", positive=True, label="side a")
        b = get_number(inputs, "b", positive=True, label="side b")
        A = get_number(inputs, "A", label="angle A")
        _check_angles(A)
        sin_b = b * sin(A) / a
        if sin_b > 1 + 1e-12:
            raise ValueError("No triangle satisfies these measurements")
        B1 = math.degrees(math.asin(min(1.0, sin_b)))
        for B in (B1, 180 - B1):
            C = 180 - A - B
            if C <= 1e-9:
                continue
            if solutions and abs(B - B1) < 1e-9:
                continue
            c = a * sin(C) / sin(A)
            solutions.append(_triangle(a, b, c, A, B, C))
        if not solutions:
            raise ValueError("No triangle satisfies these measurements")

    return {"mode": mode, "solution_count": len(solutions), "solutions": solutions}


# ============================================================================
# Health & physics
# ============================================================================

@register("bmi-calculator")
def bmi(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    weight = get_number(inputs, "weight", positive=True, label="weight (kg)")
    height = get_number(inputs, "height", positive=True, label="height (cm)")

    value = weight / ((height / 100) ** 2)
    if value < 18.5:
        category = "Underweight"
    elif value < 24.9:
        category = "Normal weight"
    elif value < 29.9:
        category = "Overweight"
    else:
        category = "Obese"
    return {"bmi": round_to(value, 1), "category": category}


SPEED_OF_LIGHT = {"vacuum": 299792458, "air": 299702547}
FREQUENCY_UNITS = {"Hz": 1, "kHz": 1e3, "MHz": 1e6, "GHz": 1e9}
WAVELENGTH_UNITS = {"m": 1, "cm": 1e-2, "mm": 1e-3, "nm": 1e-9}


@register("frequency-wavelength-converter")
def frequency_wavelength(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    mode = get_choice(inputs, "mode", ("frequency-to-wavelength", "wavelength-to-frequency"), "frequency-to-wavelength")
    medium = get_choice(inputs, "medium", tuple(SPEED_OF_LIGHT.keys()), "vacuum")
    value = get_number(inputs, "value", positive=True)
    c = SPEED_OF_LIGHT[medium]

    if mode == "frequency-to-wavelength":
        from_unit = get_choice(inputs, "from_unit", tuple(FREQUENCY_UNITS.keys()), "Hz")
        to_unit = get_choice(inputs, "to_unit", tuple(WAVELENGTH_UNITS.keys()), "m")
        meters = c / (value * FREQUENCY_UNITS[from_unit])
        converted = meters / WAVELENGTH_UNITS[to_unit]
    else:
        from_unit = get_choice(inputs, "from_unit", tuple(WAVELENGTH_UNITS.keys()), "m")
        to_unit = get_choice(inputs, "to_unit", tuple(FREQUENCY_UNITS.keys()), "Hz")
        hertz = c / (value * WAVELENGTH_UNITS[from_unit])
        converted = hertz / FREQUENCY_UNITS[to_unit]

    return {
        "mode": mode,
        "medium": medium,
        "speed_of_light": c,
        "result": _sig(converted),
        "unit": to_unit,
    }


@register("ohms-law-calculator")
def ohms_law(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    voltage = get_optional_number(inputs, "voltage")
    current = get_optional_number(inputs, "current")
    resistance = get_optional_number(inputs, "resistance")

    given = [v is not None for v in (voltage, current, resistance)]
    if sum(given) != 2:
        raise ValueError("Enter exactly two of voltage, current and resistance")

    if voltage is None:
        voltage = current * resistance
        solved = "voltage"
    elif current is None:
        if resistance == 0:
            raise ValueError("Resistance cannot be zero")
        current = voltage / resistance
        solved = "current"
    else:
        if current == 0:
            raise ValueError("Current cannot be zero")
        resistance = voltage / current
        solved = "resistance"

    return {
        "solved_for": solved,
        "voltage": round_to(voltage, 4),
        "current": round_to(current, 4),
        "resistance": round_to(resistance, 4),
        "power": round_to(voltage * current, 4),
    }


@register("snr-calculator")
def snr(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    signal = get_number(inputs, "signal_power", positive=True, label="signal power")
    noise = get_number(inputs, "noise_power", positive=True, label="noise power")

    db = 10 * math.log10(signal / noise)
    if db >= 20:
        quality = "Good"
    elif db >= 10:
        quality = "Fair"
    else:
        quality = "Poor"
    return {"snr_db": round_to(db), "ratio": round_to(signal / noise, 4), "quality": quality}


# ============================================================================
# Unit conversion
# ============================================================================

UNIT_TABLES: Dict[str, Dict[str, float]] = {
    "length": {
        "meter": 1, "kilometer": 1000, "centimeter": 0.01, "millimeter": 0.001,
        "micrometer": 0.000001, "nanometer": 0.000000001, "mile": 1609.34,
        "yard": 0.9144, "foot": 0.3048, "inch": 0.0254, "nautical mile": 1852,
    },
    "mass": {
        "kilogram": 1, "gram": 0.001, "milligram": 0.000001, "tonne": 1000,
        "pound": 0.453592, "ounce": 0.0283495, "carat": 0.0002,
    },
    "time": {
        "second": 1, "millisecond": 0.001, "minute": 60, "hour": 3600, "day": 86400,
        "week": 604800, "month": 2629800, "year": 31557600,
    },
    "speed": {
        "meter/second": 1, "kilometer/hour": 0.277778, "mile/hour": 0.44704, "knot": 0.514444,
    },
    "energy": {
        "joule": 1, "kilojoule": 1000, "calorie": 4.184, "kilocalorie": 4184,
        "electronvolt": 1.60218e-19, "foot-pound": 1.35582,
    },
    "volume": {
        "cubic meter": 1, "cubic centimeter": 0.000001, "liter": 0.001, "milliliter": 0.000001,
        "gallon": 0.00378541, "quart": 0.000946353, "pint": 0.000473176,
    },
    "area": {
        "square meter": 1, "square kilometer": 1000000, "square centimeter": 0.0001,
        "square millimeter": 0.000001, "acre": 4046.86, "hectare": 10000,
        "square mile": 2589990, "square yard": 0.836127, "square foot": 0.092903,
        "square inch": 0.00064516,
    },
}
TEMPERATURE_UNITS = ("celsius", "fahrenheit", "kelvin")


def convert_temperature(value: float, source: str, target: str) -> float:
    if source == "fahrenheit":
        celsius = (value - 32) * 5 / 9
    elif source == "kelvin":
        celsius = value - 273.15
    else:
        celsius = value
    if target == "fahrenheit":
        return celsius * 9 / 5 + 32
    if target == "kelvin":
        return celsius + 273.15
    return celsius


@register("unit-converter")
def unit_converter(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    category = get_choice(inputs, "category", tuple(UNIT_TABLES.keys()) + ("temperature",), "length")
    value = get_number(inputs, "value")

    if category == "temperature":
        source = get_choice(inputs, "from_unit", TEMPERATURE_UNITS)
        target = get_choice(inputs, "to_unit", TEMPERATURE_UNITS)
        converted = round_to(convert_temperature(value, source, target), 4)
    else:
        units = UNIT_TABLES[category]
        source = get_choice(inputs, "from_unit", tuple(units.keys()))
        target = get_choice(inputs, "to_unit", tuple(units.keys()))
        converted = round_to(value * units[source] / units[target], 6)

    return {"category": category, "value": value, "from_unit": source, "to_unit": target, "result": converted}


# ============================================================================
# Scientific calculator
# ============================================================================

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: operator.pow,
}
_UNARY_OPERATORS = {ast.UAdd: operator.pos, ast.USub: operator.neg}
_CONSTANTS = {"pi": math.pi, "e": math.e}
MAX_EXPRESSION_LENGTH = 500


class _ExpressionEvaluator:
    def __init__(self, angle_mode: str):
        self.angle_mode = angle_mode

    def _to_radians(self, x: float) -> float:
        return math.radians(x) if self.angle_mode == "degrees" else x

    def _function(self, name: str, x: float) -> float:
        if name == "sqrt":
            if x < 0:
                raise ValueError("Cannot take the square root of a negative number")
            return math.sqrt(x)
        if name in ("log", "ln"):
            if x <= 0:
                raise ValueError("Logarithm is only defined for positive numbers")
            return math.log10(x) if name == "log" else math.log(x)
        if name == "sin":
            return math.sin(self._to_radians(x))
        if name == "cos":
            return math.cos(self._to_radians(x))
        if name == "tan":
            if self.angle_mode == "degrees" and (x - 90) % 180 == 0:
                raise ValueError("tan is undefined at this angle")
            return math.tan(self._to_radians(x))
        raise ValueError(f"Unknown function: {name}")

    def evaluate(self, node: ast.AST) -> float:
        if isinstance(node, ast.Expression):
            return self.evaluate(node.body)
        if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
            try:
                return float(node.value)
            except OverflowError:
                raise ValueError("Number is too large")
        if isinstance(node, ast.Name):
            if node.id not in _CONSTANTS:
                raise ValueError(f"Unknown name: {node.id}")
            return _CONSTANTS[node.id]
        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            if isinstance(node.op, ast.Div) and right == 0:
                raise ValueError("Cannot divide by zero")
            try:
                value = _BINARY_OPERATORS[type(node.op)](left, right)
            except OverflowError:
                raise ValueError("Result is too large")
            except ZeroDivisionError:
                raise ValueError("Cannot divide by zero")
            if isinstance(value, complex):
                raise ValueError("Result is not a real number")
            return value
        if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
            return _UNARY_OPERATORS[type(node.op)](self.evaluate(node.operand))
        if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and len(node.args) == 1 and not node.keywords:
            argument = self.evaluate(node.args[0])
            try:
                return self._function(node.func.id, argument)
            except OverflowError:
                raise ValueError("Result is too large")
        raise ValueError("Invalid expression")


def evaluate_expression(expression: str, angle_mode: str = "degrees") -> float:
    if len(expression) > MAX_EXPRESSION_LENGTH:
        raise ValueError("Expression is too long")
    normalized = (
        expression.replace("×", "*")
        .replace("÷", "/")
        .replace("^", "**")
        .replace("π", "pi")
        .replace("%", "/100")
    )
    try:
        tree = ast.parse(normalized, mode="eval")
    except SyntaxError:
        raise ValueError("Invalid expression")
    value = _ExpressionEvaluator(angle_mode).evaluate(tree)
    if math.isinf(value):
        raise ValueError("Result is too large")
    if math.isnan(value):
        raise ValueError("Result is not a real number")
    return value


@register("scientific-calculator")
def scientific_calculator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    expression = get_str(inputs, "expression", required=True, label="an expression")
    angle_mode = get_choice(inputs, "angle_mode", ("degrees", "radians"), "degrees")
    value = evaluate_expression(expression, angle_mode)
    return {"expression": expression, "result": _sig(value, 12), "angle_mode": angle_mode}
