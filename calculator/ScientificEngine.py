# ScientificEngine.py
"""""
Scientific functions and constants used by MathEngine.

Everything in here is read-only after import: the angle mode is passed in on
every call, nothing remembers the last mode used.
"""""

import math
from enum import Enum

from . import error as E


class AngleMode(Enum):
    DEGREES = "deg"
    RADIANS = "rad"

    @classmethod
    def parse(cls, value):
        """Accept an AngleMode or its persisted string value ('deg' / 'rad')."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


# -----------------------------
# Angle converter
# -----------------------------

def degrees_to_radians(degrees):
    return degrees * math.pi / 180


def radians_to_degrees(radians):
    return radians * 180 / math.pi


# -----------------------------
# Domain predicates
# -----------------------------

def _any_real(x):
    return True


def _non_negative(x):
    return x >= 0


def _positive(x):
    return x > 0


def _unit_interval(x):
    return -1 <= x <= 1


class ScientificFunction:
    """One entry of the function table: unary operation + angle handling + domain."""

    def __init__(self, name, operation, angle_sensitive=False, inverse=False, domain=_any_real):
        self.name = name
        self.operation = operation
        self.angle_sensitive = angle_sensitive
        self.inverse = inverse
        self.domain = domain

    def apply(self, argument, angle_mode):
        if not self.domain(argument):
            raise E.DomainError(E.Failure(E.FailureKind.DOMAIN_ERROR, function=self.name, argument=argument))

        degrees = self.angle_sensitive and angle_mode is AngleMode.DEGREES
        # Forward trig takes degrees in, inverse trig hands degrees out
        if degrees and not self.inverse:
            argument = degrees_to_radians(argument)
        result = self.operation(argument)
        if degrees and self.inverse:
            result = radians_to_degrees(result)
        return result

    def __repr__(self):
        return f"ScientificFunction({self.name!r})"


FUNCTIONS = {
    "asin": ScientificFunction("asin", math.asin, angle_sensitive=True, inverse=True, domain=_unit_interval),
    "acos": ScientificFunction("acos", math.acos, angle_sensitive=True, inverse=True, domain=_unit_interval),
    "atan": ScientificFunction("atan", math.atan, angle_sensitive=True, inverse=True),
    "sqrt": ScientificFunction("sqrt", math.sqrt, domain=_non_negative),
    "cbrt": ScientificFunction("cbrt", math.cbrt),
    "sin": ScientificFunction("sin", math.sin, angle_sensitive=True),
    "cos": ScientificFunction("cos", math.cos, angle_sensitive=True),
    "tan": ScientificFunction("tan", math.tan, angle_sensitive=True),
    "log": ScientificFunction("log", math.log10, domain=_positive),
    "ln": ScientificFunction("ln", math.log, domain=_positive),
}

# Longest first so the lexer never reads 'asin' as 'a' + 'sin'.
FUNCTION_NAMES = sorted(FUNCTIONS, key=len, reverse=True)


CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}

# Spellings accepted in an expression -> canonical constant name.
# 'pi' is matched case-insensitively by the lexer.
CONSTANT_SPELLINGS = {
    "π": "pi",
    "pi": "pi",
    "e": "e",
}


def apply_function(name, argument, angle_mode=AngleMode.DEGREES):
    """Apply a named function from the table.

    Raises:
        E.DomainError: argument outside the function's real domain.
        KeyError: unknown function name (the lexer never produces one).
    """
    return FUNCTIONS[name].apply(argument, AngleMode.parse(angle_mode))


def constant_value(name):
    return CONSTANTS[CONSTANT_SPELLINGS.get(name, name.lower())]
