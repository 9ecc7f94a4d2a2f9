import random

import pytest

from calculator import MathEngine


# --- Normalizer ---

def test_glyphs_are_replaced():
    assert MathEngine.normalize(" 2×3÷4 ") == "2*3/4"


@pytest.mark.parametrize("raw, expected", [
    ("5%", "(5 / 100)"),
    ("12.5 %", "(12.5 / 100)"),
    ("200*10%", "200*(10 / 100)"),
    ("(2+3)%", "(2+3)%"),
])
def test_percent_suffix(raw, expected):
    assert MathEngine.normalize(raw) == expected


def test_empty_input_normalizes_to_empty_string():
    assert MathEngine.normalize("") == ""
    assert MathEngine.normalize("   ") == ""
    assert MathEngine.normalize(None) == ""


def test_functions_and_constants_untouched():
    assert MathEngine.normalize("sin(30)+π-e") == "sin(30)+π-e"


def test_parenthesis_balance_preserved():
    raw = "((1+2)×3%"
    normalized = MathEngine.normalize(raw)
    depth_raw = raw.count("(") - raw.count(")")
    depth_normalized = normalized.count("(") - normalized.count(")")
    assert depth_raw == depth_normalized


# --- Validator ---

@pytest.mark.parametrize("expression", [
    "(1+2)",
    "sin(30)",
    "5%",
    "(2+3)%",
    "2×3",
    "",
    "sqrt(16) ",
])
def test_plausible(expression):
    assert MathEngine.is_valid_expression(expression)


@pytest.mark.parametrize("expression", [
    "(1+2",
    ")(",
    "1+2)",
    "sin(",
    "1+",
    "2×",
    "2÷ ",
    "2^",
    "3-",
    "4/",
    "5+%",
    "%",
])
def test_implausible(expression):
    assert not MathEngine.is_valid_expression(expression)


@pytest.mark.parametrize("expression", [
    "(", ")", "(()", "())", "((1)", "sin(cos(0)", "1)+(2", "(((", ")))(((",
])
def test_unbalanced_parentheses_are_never_plausible(expression):
    assert not MathEngine.is_syntactically_plausible(expression)


def balanced(expression):
    depth = 0
    for char in expression:
        depth += {"(": 1, ")": -1}.get(char, 0)
        if depth < 0:
            return False
    return depth == 0


def test_unbalanced_random_strings_are_never_valid():
    rng = random.Random(1234)
    alphabet = "()123+-*/^%. sinπ"
    for _ in range(2000):
        expression = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 12)))
        if not balanced(expression):
            assert not MathEngine.is_valid_expression(expression), expression
            assert not MathEngine.is_syntactically_plausible(expression), expression


def test_validator_accepts_what_the_evaluator_resolves():
    for expression in ("5%", "(2+3)%", "2π", "-2^2", "sqrt(16)", "50%×200"):
        assert MathEngine.evaluate(expression) is not None
        assert MathEngine.is_valid_expression(expression)


# --- Formatter ---

def test_scientific_notation_thresholds():
    assert MathEngine.format_for_display(1e11) == "1.000000e+11"
    assert MathEngine.format_for_display(-1e11) == "-1.000000e+11"
    assert MathEngine.format_for_display(0.00005) == "5.000000e-05"
    assert MathEngine.format_for_display(123456789012.5) == "1.234568e+11"


def test_plain_notation():
    assert MathEngine.format_for_display(0.1 + 0.2) == "0.3"
    assert MathEngine.format_for_display(4.0) == "4"
    assert MathEngine.format_for_display(-2.5) == "-2.5"
    assert MathEngine.format_for_display(0.0) == "0"
    assert MathEngine.format_for_display(-0.0) == "0"
    assert MathEngine.format_for_display(1e10) == "10000000000"
    assert MathEngine.format_for_display(0.0001) == "0.0001"
    assert MathEngine.format_for_display(1 / 3) == "0.3333333333"


def test_formatter_never_fails():
    assert MathEngine.format_for_display(float("nan")) == "NaN"
    assert MathEngine.format_for_display(float("inf")) == "∞"
    assert MathEngine.format_for_display(float("-inf")) == "-∞"
