"""Error kinds raised while tokenizing and evaluating expressions."""
from typing import Optional


class CalculatorError(ValueError):
    """
    Base class of every failure an evaluation can end with.

    Each subclass carries a ``kind`` tag so that reporters can tell the
    categories apart without matching on class names.
    """

    kind: str = "error"

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position


class LexicalError(CalculatorError):
    """An unrecognized character was found in the input."""

    kind = "lexical"

    def __init__(self, character: str, position: int) -> None:
        super().__init__(f"Invalid character {character!r} at position {position}", position)
        self.character = character


class StructuralError(CalculatorError):
    """Mismatched parentheses, missing operands, empty or malformed expression."""

    kind = "structural"


class UnknownFunctionError(CalculatorError):
    """An identifier is not present in the function registry."""

    kind = "unknown-function"

    def __init__(self, name: str, position: Optional[int] = None) -> None:
        super().__init__(f"Unknown function: {name}", position)
        self.name = name


class DomainError(CalculatorError):
    """A well-formed expression whose value is undefined over the reals."""

    kind = "domain"


class NumberParseError(CalculatorError):
    """A numeric literal could not be converted to a real."""

    kind = "numeric-parse"

    def __init__(self, literal: str, position: Optional[int] = None) -> None:
        super().__init__(f"Invalid number literal: {literal!r}", position)
        self.literal = literal
