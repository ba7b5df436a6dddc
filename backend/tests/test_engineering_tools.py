"""
Math & Engineering calculators.
"""
import pytest

from tools.engineering import (
    area,
    bmi,
    evaluate_expression,
    frequency_wavelength,
    ohms_law,
    scientific_calculator,
    snr,
    triangle_solver,
    unit_converter,
    volume,
)


class TestGeometry:
    @pytest.mark.parametrize("inputs,expected", [
        ({"shape": "square", "side": 4}, 16.0),
        ({"shape": "rectangle", "length": 3, "width": 4}, 12.0),
        ({"shape": "circle", "radius": 1}, 3.14),
        ({"shape": "triangle", "base": 10, "height": 5}, 25.0),
    ])
    def test_area(self, inputs, expected):
        assert area(inputs)["area"] == expected

    @pytest.mark.parametrize("inputs,expected", [
        ({"shape": "cube", "side": 3}, 27.0),
        ({"shape": "sphere", "radius": 1}, 4.19),
        ({"shape": "cone", "radius": 3, "height": 4}, 37.7),
        ({"shape": "rectangular-prism", "length": 2, "width": 3, "height": 4}, 24.0),
    ])
    def test_volume(self, inputs, expected):
        assert volume(inputs)["volume"] == expected

    def test_negative_dimension(self):
        with pytest.raises(ValueError, match="Radius must be greater than zero"):
            area({"shape": "circle", "radius": -1})


class TestTriangleSolver:
    def test_right_triangle_from_sides(self):
        result = triangle_solver({"mode": "sss", "a": 3, "b": 4, "c": 5})

        solution = result["solutions"][0]
        assert result["solution_count"] == 1
        assert solution["angles"] == {"A": 36.8699, "B": 53.1301, "C": 90.0}
        assert solution["area"] == 6.0
        assert solution["perimeter"] == 12.0

    def test_impossible_sides(self):
        with pytest.raises(ValueError, match="do not form a valid triangle"):
            triangle_solver({"mode": "sss", "a": 1, "b": 2, "c": 3})

    def test_equilateral_from_asa(self):
        solution = triangle_solver({"mode": "asa", "A": 60, "B": 60, "c": 1})["solutions"][0]

        assert solution["sides"] == {"a": 1.0, "b": 1.0, "c": 1.0}

    def test_ambiguous_case_has_two_solutions(self):
        result = triangle_solver({"mode": "ssa", "a": 6, "b": 8, "A": 30})

        assert result["solution_count"] == 2
        obtuse = result["solutions"][1]
        assert obtuse["angles"]["B"] > 90

    def test_ssa_without_solution(self):
        with pytest.raises(ValueError, match="No triangle"):
            triangle_solver({"mode": "ssa", "a": 2, "b": 10, "A": 60})

    def test_angle_sum_check(self):
        with pytest.raises(ValueError, match="less than 180"):
            triangle_solver({"mode": "aas", "A": 100, "B": 80, "a": 5})


class TestPhysics:
    def test_bmi_categories(self):
        assert bmi({"weight": 70, "height": 175}) == {"bmi": 22.9, "category": "Normal weight"}
        assert bmi({"weight": 50, "height": 175})["category"] == "Underweight"
        assert bmi({"weight": 110, "height": 175})["category"] == "Obese"

    def test_frequency_to_wavelength(self):
        result = frequency_wavelength({"value": 100, "from_unit": "MHz", "to_unit": "m"})

        assert result["result"] == 2.99792
        assert result["unit"] == "m"

    def test_wavelength_to_frequency(self):
        result = frequency_wavelength({
            "mode": "wavelength-to-frequency", "value": 500, "from_unit": "nm", "to_unit": "GHz",
        })
        assert result["result"] == 599585.0

    def test_ohms_law_solves_missing_value(self):
        result = ohms_law({"voltage": 12, "resistance": 4})

        assert result["solved_for"] == "current"
        assert result["current"] == 3.0
        assert result["power"] == 36.0

    def test_ohms_law_needs_exactly_two_values(self):
        with pytest.raises(ValueError, match="exactly two"):
            ohms_law({"voltage": 12, "current": 2, "resistance": 6})

    def test_snr(self):
        assert snr({"signal_power": 1000, "noise_power": 1}) == {"snr_db": 30.0, "ratio": 1000.0, "quality": "Good"}
        assert snr({"signal_power": 5, "noise_power": 1})["quality"] == "Poor"


class TestUnitConverter:
    def test_length(self):
        assert unit_converter({"category": "length", "value": 1, "from_unit": "mile", "to_unit": "kilometer"})[
            "result"] == 1.60934

    def test_temperature(self):
        result = unit_converter({"category": "temperature", "value": 100, "from_unit": "celsius",
                                 "to_unit": "fahrenheit"})
        assert result["result"] == 212.0

        result = unit_converter({"category": "temperature", "value": 0, "from_unit": "kelvin",
                                 "to_unit": "celsius"})
        assert result["result"] == -273.15

    def test_unknown_unit(self):
        with pytest.raises(ValueError, match="Invalid from unit"):
            unit_converter({"category": "mass", "value": 1, "from_unit": "stone", "to_unit": "gram"})


class TestScientificCalculator:
    @pytest.mark.parametrize("expression,expected", [
        ("2+3×4", 14.0),
        ("sqrt(16)+2^3", 12.0),
        ("sin(30)", 0.5),
        ("50%", 0.5),
        ("-(2+3)*2", -10.0),
        ("log(1000)", 3.0),
    ])
    def test_expressions(self, expression, expected):
        assert scientific_calculator({"expression": expression})["result"] == expected

    def test_radians_mode(self):
        assert evaluate_expression("cos(pi)", "radians") == -1.0

    @pytest.mark.parametrize("expression,message", [
        ("1/0", "Cannot divide by zero"),
        ("sqrt(-4)", "square root of a negative"),
        ("tan(90)", "undefined"),
        ("__import__('os')", "Invalid expression"),
        ("x + 1", "Unknown name"),
        ("2 +", "Invalid expression"),
        ("9" * 400, "Number is too large"),
        ("10^400", "Result is too large"),
    ])
    def test_rejected_expressions(self, expression, message):
        with pytest.raises(ValueError, match=message):
            evaluate_expression(expression)
