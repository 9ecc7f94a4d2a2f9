import math

from calculator import MathEngine
from calculator import error as E
from calculator.MathEngine import Token, TokenKind


def kinds(tokens):
    return [token.kind for token in tokens]


def test_function_call():
    tokens = MathEngine.tokenize("asin(1)")
    assert tokens == [
        Token(TokenKind.FUNCTION, "asin"),
        MathEngine.LEFT_PAREN,
        Token(TokenKind.NUMBER, 1.0),
        MathEngine.RIGHT_PAREN,
    ]


def test_inverse_trig_is_not_split():
    for name in ("asin", "acos", "atan"):
        tokens = MathEngine.tokenize(f"{name}(0)")
        assert tokens[0] == Token(TokenKind.FUNCTION, name)


def test_every_function_name_is_recognized():
    for name in ("sin", "cos", "tan", "asin", "acos", "atan", "log", "ln", "sqrt", "cbrt"):
        assert MathEngine.tokenize(name)[0] == Token(TokenKind.FUNCTION, name)


def test_constants():
    tokens = MathEngine.tokenize("π + Pi * e")
    assert tokens == [
        Token(TokenKind.CONSTANT, "pi"),
        Token(TokenKind.OPERATOR, "+"),
        Token(TokenKind.CONSTANT, "pi"),
        Token(TokenKind.OPERATOR, "*"),
        Token(TokenKind.CONSTANT, "e"),
    ]


def test_numbers():
    assert MathEngine.tokenize("3.5") == [Token(TokenKind.NUMBER, 3.5)]
    assert MathEngine.tokenize(".5") == [Token(TokenKind.NUMBER, 0.5)]
    assert MathEngine.tokenize("5.") == [Token(TokenKind.NUMBER, 5.0)]
    assert MathEngine.tokenize("2e-5") == [Token(TokenKind.NUMBER, 2e-5)]
    assert MathEngine.tokenize("1.000000e+11") == [Token(TokenKind.NUMBER, 1e11)]


def test_operators_and_glyphs():
    tokens = MathEngine.tokenize("1+2-3*4/5^6%×÷")
    values = [token.value for token in tokens if token.kind is TokenKind.OPERATOR]
    assert values == ["+", "-", "*", "/", "^", "%", "*", "/"]


def test_whitespace_is_skipped():
    assert kinds(MathEngine.tokenize("  ( 1 )  ")) == [
        TokenKind.LEFT_PAREN, TokenKind.NUMBER, TokenKind.RIGHT_PAREN,
    ]


def test_bare_e_is_euler():
    tokens = MathEngine.tokenize("2e")
    assert tokens == [Token(TokenKind.NUMBER, 2.0), Token(TokenKind.CONSTANT, "e")]


def test_malformed_number():
    failure = MathEngine.tokenize("1.2.3")
    assert isinstance(failure, E.Failure)
    assert failure.kind is E.FailureKind.MALFORMED_NUMBER

    assert MathEngine.tokenize(".").kind is E.FailureKind.MALFORMED_NUMBER


def test_unrecognized_character():
    failure = MathEngine.tokenize("2 # 3")
    assert failure.kind is E.FailureKind.UNRECOGNIZED_CHARACTER
    assert failure.detail == "#"
    assert failure.message == "Unrecognized character: #"


def test_unknown_identifiers_are_rejected():
    assert MathEngine.tokenize("exp(1)").detail == "x"
    assert MathEngine.tokenize("sinh(1)").detail == "h"
    assert MathEngine.tokenize("x+1").kind is E.FailureKind.UNRECOGNIZED_CHARACTER


def test_tokens_are_created_per_call():
    first = MathEngine.tokenize("1+pi")
    second = MathEngine.tokenize("1+pi")
    assert first == second
    assert first is not second
    assert MathEngine.evaluate_tokens(first) == math.pi + 1
