# MathEngine.py
"""""
Core calculation engine for the calculator.

Pipeline
--------
1) Normalizer: canonicalizes display glyphs (×, ÷) and rewrites 'n%' as '(n / 100)'.
2) Validator: cheap parenthesis / trailing-operator check, run on every keystroke.
3) Tokenizer: converts the normalized string into a flat list of tokens.
4) Parser (AST): builds an Abstract Syntax Tree (recursive-descent, precedence aware).
5) Evaluator: walks the AST under the caller's angle mode.
6) Formatter: renders a finite result for the display.

Every public function is pure and synchronous. A malformed expression is the
normal case while the user is typing, so nothing here raises on bad input:
the evaluator returns either a finite float or an `error.Failure`.
"""""

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum

from . import ScientificEngine
from . import error as E
from .ScientificEngine import AngleMode

logger = logging.getLogger(__name__)

# Supported operators (kept as simple lists for quick membership checks)
Operations = ["+", "-", "*", "/", "^", "%"]
Operator_Glyphs = {"×": "*", "÷": "/"}
Trailing_Operators = ["+", "-", "×", "*", "÷", "/", "^"]
DIGITS = "0123456789"

_NUMBER = r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+\-]?\d+)?"
_PERCENT = re.compile(rf"({_NUMBER})\s*%")
_EXPONENT = re.compile(r"[eE][+\-]?\d+")


# -----------------------------
# Tokens
# -----------------------------

class TokenKind(Enum):
    NUMBER = "number"
    OPERATOR = "operator"
    FUNCTION = "function"
    CONSTANT = "constant"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: object

    def __str__(self):
        return str(self.value)


LEFT_PAREN = Token(TokenKind.LEFT_PAREN, "(")
RIGHT_PAREN = Token(TokenKind.RIGHT_PAREN, ")")


def _failure(kind, detail=""):
    return E.Failure(kind, detail=detail)


# -----------------------------
# Normalizer
# -----------------------------

def normalize(raw):
    """Replace display glyphs and rewrite percent suffixes on numeric literals.

    '×' -> '*', '÷' -> '/', '12.5 %' -> '(12.5 / 100)'. Total: empty or
    whitespace-only input gives ''.
    """
    if not raw:
        return ""
    expression = raw.strip()
    for glyph, operator in Operator_Glyphs.items():
        expression = expression.replace(glyph, operator)
    return _PERCENT.sub(lambda match: f"({match.group(1)} / 100)", expression)


# -----------------------------
# Validator
# -----------------------------

def _plausibility_failure(expression):
    """Return the first Failure the cheap pre-check finds, or None."""
    depth = 0
    for char in expression:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return _failure(E.FailureKind.UNBALANCED_PARENTHESES)
    if depth != 0:
        return _failure(E.FailureKind.UNBALANCED_PARENTHESES)

    stripped = expression.rstrip()
    if not stripped:
        return None
    last_char = stripped[-1]
    if last_char in Trailing_Operators:
        return _failure(E.FailureKind.TRAILING_OPERATOR, last_char)
    if last_char == "%":
        # '%' is postfix: fine after an operand, dangling after an operator
        before = stripped[:-1].rstrip()
        if not before or before[-1] in Trailing_Operators or before[-1] == "(":
            return _failure(E.FailureKind.TRAILING_OPERATOR, last_char)
    return None


def is_syntactically_plausible(expression):
    """Cheap check used before live evaluation.

    False when parentheses are unbalanced (or close before they open) or the
    expression ends in a binary operator. Looser than the parser: it may let
    through something the parser rejects, never the other way round.
    """
    return _plausibility_failure(expression or "") is None


# -----------------------------
# Tokenizer
# -----------------------------

def _scan_number(expression, start):
    """Read a numeric literal starting at `start`. Returns (Token | Failure, end)."""
    b = start
    has_dot = False  # Only one dot allowed in a numeric literal
    while b < len(expression) and (expression[b] in DIGITS or expression[b] == "."):
        if expression[b] == ".":
            if has_dot:
                return _failure(E.FailureKind.MALFORMED_NUMBER, expression[start:b + 1]), b
            has_dot = True
        b += 1

    # '1.5e+11' as rendered by format_for_display; a bare 'e' stays Euler's number
    exponent = _EXPONENT.match(expression, b)
    if exponent:
        b = exponent.end()

    literal = expression[start:b]
    try:
        return Token(TokenKind.NUMBER, float(literal)), b
    except ValueError:
        return _failure(E.FailureKind.MALFORMED_NUMBER, literal), b


def _scan_name(expression, start):
    """Match a function or constant name at `start`. Returns (Token, end) or (None, start)."""
    for name in ScientificEngine.FUNCTION_NAMES:
        if expression.startswith(name, start):
            return Token(TokenKind.FUNCTION, name), start + len(name)

    if expression[start] == "π":
        return Token(TokenKind.CONSTANT, "pi"), start + 1
    if expression[start:start + 2].lower() == "pi":
        return Token(TokenKind.CONSTANT, "pi"), start + 2
    if expression[start] == "e":
        return Token(TokenKind.CONSTANT, "e"), start + 1
    return None, start


def tokenize(expression):
    """Convert an expression into a token list, or a Failure for the first bad character."""
    tokens = []
    b = 0

    while b < len(expression):
        current_char = expression[b]

        # --- Whitespace (ignored) ---
        if current_char.isspace():
            b += 1

        # --- Numbers: digits and decimal separator ---
        elif current_char in DIGITS or current_char == ".":
            token, b = _scan_number(expression, b)
            if isinstance(token, E.Failure):
                return token
            tokens.append(token)

        # --- Operators ---
        elif current_char in Operations or current_char in Operator_Glyphs:
            tokens.append(Token(TokenKind.OPERATOR, Operator_Glyphs.get(current_char, current_char)))
            b += 1

        # --- Parentheses ---
        elif current_char == "(":
            tokens.append(LEFT_PAREN)
            b += 1
        elif current_char == ")":
            tokens.append(RIGHT_PAREN)
            b += 1

        # --- Functions and constants ---
        else:
            token, b = _scan_name(expression, b)
            if token is None:
                return _failure(E.FailureKind.UNRECOGNIZED_CHARACTER, current_char)
            tokens.append(token)

    return tokens


# -----------------------------
# AST node types
# -----------------------------

def _checked(value):
    """Reject NaN / ±inf before it can travel any further up the tree."""
    if not math.isfinite(value):
        raise E.CalculationError(_failure(E.FailureKind.NON_FINITE_RESULT))
    return value


class Number:
    """AST node for a numeric literal."""
    def __init__(self, value):
        self.value = float(value)

    def evaluate(self, angle_mode):
        return _checked(self.value)

    def __repr__(self):
        return f"Number({self.value!r})"


class Constant:
    def __init__(self, name):
        self.name = name

    def evaluate(self, angle_mode):
        return ScientificEngine.constant_value(self.name)

    def __repr__(self):
        return f"Constant({self.name!r})"


class UnaryOp:
    """AST node for a leading '+' / '-'."""
    def __init__(self, operator, operand):
        self.operator = operator
        self.operand = operand

    def evaluate(self, angle_mode):
        value = self.operand.evaluate(angle_mode)
        return -value if self.operator == "-" else value

    def __repr__(self):
        return f"UnaryOp({self.operator!r}, {self.operand})"


class Percent:
    """AST node for a postfix '%' that survived normalization, e.g. '(2+3)%'."""
    def __init__(self, operand):
        self.operand = operand

    def evaluate(self, angle_mode):
        return _checked(self.operand.evaluate(angle_mode) / 100)

    def __repr__(self):
        return f"Percent({self.operand})"


class FunctionCall:
    """AST node for a scientific function applied to a fully evaluated argument."""
    def __init__(self, name, argument):
        self.name = name
        self.argument = argument

    def evaluate(self, angle_mode):
        # Innermost call first: the argument subtree is resolved before this function runs
        argument_value = self.argument.evaluate(angle_mode)
        try:
            result = ScientificEngine.apply_function(self.name, argument_value, angle_mode)
        except (ValueError, OverflowError):
            raise E.CalculationError(_failure(E.FailureKind.NON_FINITE_RESULT))
        return _checked(result)

    def __repr__(self):
        return f"FunctionCall({self.name!r}, {self.argument})"


def _power(base, exponent):
    try:
        return math.pow(base, exponent)
    except (ValueError, ZeroDivisionError, OverflowError):
        # 0^-1, (-8)^0.5, 10^400: no finite real result
        raise E.CalculationError(_failure(E.FailureKind.NON_FINITE_RESULT))


class BinOp:
    """AST node for a binary operation: left <operator> right."""
    def __init__(self, left, operator, right):
        self.left = left
        self.operator = operator
        self.right = right

    def evaluate(self, angle_mode):
        left_value = self.left.evaluate(angle_mode)
        right_value = self.right.evaluate(angle_mode)

        if self.operator == "+":
            result = left_value + right_value
        elif self.operator == "-":
            result = left_value - right_value
        elif self.operator == "*":
            result = left_value * right_value
        elif self.operator == "/":
            if right_value == 0:
                raise E.CalculationError(_failure(E.FailureKind.NON_FINITE_RESULT, " (division by zero)"))
            result = left_value / right_value
        elif self.operator == "^":
            result = _power(left_value, right_value)
        else:
            raise E.SyntaxError(_failure(E.FailureKind.UNEXPECTED_TOKEN, self.operator))
        return _checked(result)

    def __repr__(self):
        return f"BinOp({self.operator!r}, left={self.left}, right={self.right})"


# -----------------------------
# Parser (recursive descent)
# -----------------------------

class Parser:
    """Parse a token list into an AST.

    Precedence, lowest first: sum (+ -) → term (* /, implicit *) →
    power (^, right-associative) → unary (+ -) → postfix (%) → primary.
    Unary minus sits below '^' in the chain, so it binds tighter: -2^2 == 4.
    """

    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.position = 0
        self.depth = 0

    def peek(self):
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def previous(self):
        if self.position > 0:
            return self.tokens[self.position - 1]
        return None

    def advance(self):
        token = self.peek()
        self.position += 1
        return token

    def at_operator(self, *operators):
        token = self.peek()
        return token is not None and token.kind is TokenKind.OPERATOR and token.value in operators

    def parse(self):
        tree = self.parse_sum()
        token = self.peek()
        if token is not None:
            if token.kind is TokenKind.RIGHT_PAREN:
                raise E.SyntaxError(_failure(E.FailureKind.UNBALANCED_PARENTHESES))
            raise E.SyntaxError(_failure(E.FailureKind.UNEXPECTED_TOKEN, str(token)))
        return tree

    def parse_sum(self):
        """Addition and subtraction."""
        tree = self.parse_term()
        while self.at_operator("+", "-"):
            operator = self.advance().value
            tree = BinOp(tree, operator, self.parse_term())
        return tree

    def parse_term(self):
        """Multiplication and division, explicit or implied by adjacency."""
        tree = self.parse_power()
        while True:
            if self.at_operator("*", "/"):
                operator = self.advance().value
            elif self.implicit_multiplication():
                operator = "*"
            else:
                return tree
            tree = BinOp(tree, operator, self.parse_power())

    def implicit_multiplication(self):
        """'2π', '2(3)', '(1)(2)', '3sin(30)', '(2)3' multiply; '2 3' does not."""
        token = self.peek()
        if token is None:
            return False
        if token.kind in (TokenKind.LEFT_PAREN, TokenKind.FUNCTION, TokenKind.CONSTANT):
            return True
        previous = self.previous()
        return token.kind is TokenKind.NUMBER and (
            previous.kind in (TokenKind.CONSTANT, TokenKind.RIGHT_PAREN) or previous.value == "%"
        )

    def parse_power(self):
        """Exponentiation, right-associative: 2^3^2 == 2^9."""
        base = self.parse_unary()
        if self.at_operator("^"):
            self.advance()
            return BinOp(base, "^", self.parse_power())
        return base

    def parse_unary(self):
        if self.at_operator("+", "-"):
            operator = self.advance().value
            return UnaryOp(operator, self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self):
        tree = self.parse_primary()
        while self.at_operator("%"):
            self.advance()
            tree = Percent(tree)
        return tree

    def parse_group(self):
        """'(' sum ')'. The current token is the '('."""
        self.advance()
        self.depth += 1
        tree = self.parse_sum()
        token = self.peek()
        if token is None:
            raise E.SyntaxError(_failure(E.FailureKind.UNBALANCED_PARENTHESES))
        if token.kind is not TokenKind.RIGHT_PAREN:
            raise E.SyntaxError(_failure(E.FailureKind.UNEXPECTED_TOKEN, str(token)))
        self.advance()
        self.depth -= 1
        return tree

    def parse_primary(self):
        """Numbers, constants, sub-expressions in '()' and function calls."""
        token = self.peek()

        if token is None:
            previous = self.previous()
            if previous is not None and previous.kind is TokenKind.OPERATOR:
                raise E.SyntaxError(_failure(E.FailureKind.TRAILING_OPERATOR, previous.value))
            raise E.SyntaxError(_failure(E.FailureKind.UNBALANCED_PARENTHESES))

        if token.kind is TokenKind.NUMBER:
            self.advance()
            return Number(token.value)

        if token.kind is TokenKind.CONSTANT:
            self.advance()
            return Constant(token.value)

        if token.kind is TokenKind.LEFT_PAREN:
            return self.parse_group()

        if token.kind is TokenKind.FUNCTION:
            self.advance()
            following = self.peek()
            if following is None or following.kind is not TokenKind.LEFT_PAREN:
                raise E.SyntaxError(_failure(E.FailureKind.MISSING_FUNCTION_PARENTHESIS, token.value))
            return FunctionCall(token.value, self.parse_group())

        if token.kind is TokenKind.RIGHT_PAREN and self.depth == 0:
            raise E.SyntaxError(_failure(E.FailureKind.UNBALANCED_PARENTHESES))

        # ')' right after '(' or an operator, or a binary operator with no left operand
        raise E.SyntaxError(_failure(E.FailureKind.UNEXPECTED_TOKEN, str(token)))


def evaluate_tokens(tokens, angle_mode=AngleMode.DEGREES):
    """Parse and evaluate a token list. Returns a finite float or a Failure."""
    angle_mode = AngleMode.parse(angle_mode)
    if not tokens:
        return _failure(E.FailureKind.EMPTY_EXPRESSION)
    try:
        tree = Parser(tokens).parse()
        logger.debug("AST: %s", tree)
        return tree.evaluate(angle_mode)
    except E.MathError as e:
        return e.failure
    except RecursionError:
        return _failure(E.FailureKind.TOO_DEEPLY_NESTED)


# -----------------------------
# Result formatting
# -----------------------------

def format_for_display(value):
    """Render a result for the display.

    Very large (> 1e10) or very small (< 1e-4) magnitudes use scientific
    notation with 6 mantissa decimals; everything else is rounded to 10
    decimals to hide float noise (0.1 + 0.2 -> '0.3').
    """
    if not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "∞" if value > 0 else "-∞"

    if abs(value) > 1e10 or (value != 0 and abs(value) < 1e-4):
        return f"{value:.6e}"

    rounded = round(value, 10)
    if rounded == int(rounded):
        return str(int(rounded))
    return repr(rounded)


# -----------------------------
# Public entry points
# -----------------------------

def evaluate_outcome(expression, angle_mode=AngleMode.DEGREES):
    """Normalize → validate → tokenize → parse/evaluate. Returns a float or a Failure."""
    angle_mode = AngleMode.parse(angle_mode)
    normalized = normalize(expression)

    if not normalized:
        outcome = _failure(E.FailureKind.EMPTY_EXPRESSION)
    else:
        outcome = _plausibility_failure(normalized)
        if outcome is None:
            tokens = tokenize(normalized)
            if isinstance(tokens, E.Failure):
                outcome = tokens
            else:
                outcome = evaluate_tokens(tokens, angle_mode)

    if isinstance(outcome, E.Failure):
        logger.debug("Could not evaluate %r: [%s] %s", expression, outcome.code, outcome.message)
    return outcome


def evaluate(expression, angle_mode=AngleMode.DEGREES):
    """Main API: the finite result of `expression`, or None if it cannot be evaluated."""
    outcome = evaluate_outcome(expression, angle_mode)
    if isinstance(outcome, E.Failure):
        return None
    return outcome


def is_valid_expression(expression):
    return is_syntactically_plausible(expression)


def calculate_percentage(value, percentage, operation="+"):
    """value ± value * percentage / 100."""
    percent_value = value * percentage / 100
    if operation == "+":
        return value + percent_value
    elif operation == "-":
        return value - percent_value
    raise ValueError(f"Unknown percentage operation: {operation!r}")


def test_main():
    """Simple REPL-like runner for manual testing of the engine."""
    print("Enter the problem: ")
    problem = input()
    outcome = evaluate_outcome(problem)
    if isinstance(outcome, E.Failure):
        print(f"Error {outcome.code}: {outcome.message}")
    else:
        print("= " + format_for_display(outcome))


if __name__ == "__main__":
    # Allow running this module directly for quick CLI tests:
    #   python -m calculator.MathEngine
    test_main()
