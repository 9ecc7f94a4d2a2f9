# error.py
"""""
Failure taxonomy and error codes for the calculator.

The expression engine never lets an exception escape its public functions:
every problem with a typed expression ends up as a `Failure` value. The
`MathError` hierarchy is only used *inside* the engine (and by the stores)
to unwind to the nearest boundary, where the carried `Failure` is returned.
"""""

from dataclasses import dataclass
from enum import Enum


class FailureKind(Enum):
    """Why an expression could not be evaluated. Value is the error code."""
    EMPTY_EXPRESSION = "3000"
    UNRECOGNIZED_CHARACTER = "3001"
    MALFORMED_NUMBER = "3002"
    UNBALANCED_PARENTHESES = "3003"
    TRAILING_OPERATOR = "3004"
    UNEXPECTED_TOKEN = "3005"
    MISSING_FUNCTION_PARENTHESIS = "3006"
    NON_FINITE_RESULT = "3007"
    TOO_DEEPLY_NESTED = "3008"
    DOMAIN_ERROR = "2001"


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    function: str = None
    argument: float = None
    detail: str = ""

    @property
    def code(self):
        return self.kind.value

    @property
    def message(self):
        text = ERROR_MESSAGES.get(self.code, ERROR_MESSAGES["9999"])
        if self.kind is FailureKind.DOMAIN_ERROR:
            return f"{text}{self.function}: {self.argument!r}"
        return text + self.detail


class MathError(Exception):
    def __init__(self, failure):
        super().__init__(failure.message)
        self.failure = failure
        self.message = failure.message
        self.code = failure.code

class SyntaxError(MathError):
    pass

class CalculationError(MathError):
    pass

class DomainError(MathError):
    pass


class ConfigurationError(Exception):
    def __init__(self, message, code="5000", key=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.key = key


Error_Dictionary = {

    "2" : "Scientific Calculation Error",
    "3" : "Calculator Error",
    "5" : "Configuration Error",
    "9" : "Unexpected Error"

}

#Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Specification
# 3. and 4. Digit: Error Number


ERROR_MESSAGES = {
    "2001" : "Argument outside the domain of ", # + function: argument

    "3000" : "Empty expression.",
    "3001" : "Unrecognized character: ", # + character
    "3002" : "Invalid number: ", # + literal
    "3003" : "Unbalanced parentheses.",
    "3004" : "Missing number after operator: ", # + operator
    "3005" : "Unexpected token: ", # + token
    "3006" : "Missing '(' after function: ", # + function
    "3007" : "Result is not a finite number.",
    "3008" : "Expression is nested too deeply.",

    "5000" : "Invalid setting: ", # + key
    "5001" : "Unknown angle mode: ", # + value
    "5002" : "Sound volume must be between 0.0 and 1.0: ", # + value
    "5003" : "Setting must be True or False: ", # + key

    "9999" : "Unexpected Error: "
}


def category(code):
    """Return the main error category for a 4-digit code."""
    return Error_Dictionary.get(str(code)[:1], Error_Dictionary["9"])
