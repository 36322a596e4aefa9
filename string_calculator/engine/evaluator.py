"""Evaluate arithmetic expressions with the shunting-yard algorithm."""
from collections.abc import Callable as ABCCallable
import math
import operator
from typing import Callable, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from string_calculator.common.errors import CalculatorError, DomainError, StructuralError
from string_calculator.common.logger import logger
from string_calculator.engine.functions import FunctionRegistry
from string_calculator.engine.tokenizer import Tokenizer
from string_calculator.engine.tokens import (
    FunctionToken,
    LParenToken,
    NumberToken,
    OperatorToken,
    RParenToken,
    Token,
)


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]
Associativity = Literal["left", "right"]


def _divide(a: float, b: float) -> float:
    if b == 0:
        raise DomainError("Division by zero")
    return a / b


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except ValueError as exc:
        raise DomainError(f"Power undefined over the reals: {a} ^ {b}") from exc
    except OverflowError as exc:
        raise DomainError(f"Power overflow: {a} ^ {b}") from exc


# Mapping of operator symbols to (precedence, associativity, function)
OPERATORS: dict[str, Tuple[int, Associativity, OperatorFn]] = {
    "+": (1, "left", operator.add),
    "-": (1, "left", operator.sub),
    "*": (2, "left", operator.mul),
    "/": (2, "left", _divide),
    "^": (3, "right", _power),
}

# Prefix signs bind tighter than any binary operator, "^" included
UNARY_PRECEDENCE: int = 4
UNARY_OPERATORS: dict[str, ABCCallable[[float], float]] = {
    "+": operator.pos,
    "-": operator.neg,
}


class UnaryOperator(BaseModel):
    """Prefix sign waiting on the pending stack for its operand."""

    model_config = ConfigDict(frozen=True)

    op: Literal["+", "-"]
    position: int = 0


PendingEntry = Union[OperatorToken, UnaryOperator, FunctionToken, LParenToken]


class Calculator(BaseModel):
    """
    Evaluate single-line arithmetic expressions.

    Design constraints:
        - No eval(), no dynamic code execution
        - No state shared between calls: both stacks live inside :meth:`evaluate`

    Algorithm:
        1. Tokenize the input (see :class:`Tokenizer`)
        2. Walk the tokens once, keeping a stack of values and a stack of
           pending operators, functions and open parentheses
        3. Reduce pending entries as precedence, associativity and closing
           parentheses require, computing values directly instead of
           building a Reverse Polish Notation buffer

    Examples:
        - ``2 + 3 * 4`` -> ``14``
        - ``2 ^ 3 ^ 2`` -> ``512`` (``^`` is right-associative)
        - ``-2 ^ 2`` -> ``4`` (prefix signs bind tighter than ``^``)
    """

    model_config = ConfigDict(frozen=True)

    registry: FunctionRegistry = Field(
        default_factory=FunctionRegistry.default,
        description="Functions and constants available to expressions",
    )
    unary_minus: bool = Field(
        default=True,
        description="Accept prefix '+'/'-' at the start, after an operator or after '('",
    )

    @staticmethod
    def _precedence(entry: PendingEntry) -> Optional[int]:
        """Return the precedence of an operator entry, or None for barriers and functions."""
        if isinstance(entry, UnaryOperator):
            return UNARY_PRECEDENCE
        if isinstance(entry, OperatorToken):
            return OPERATORS[entry.op][0]
        return None

    @staticmethod
    def _pop_operands(values: List[float], count: int, what: str) -> List[float]:
        """
        Pop ``count`` operands from the value stack, oldest first.

        :raises StructuralError: If fewer than ``count`` values are available
        """
        if len(values) < count:
            raise StructuralError(f"Missing operand for {what}")
        operands = values[-count:]
        del values[-count:]
        return operands

    def _apply_function(self, token: FunctionToken, x: float) -> float:
        fn = self.registry.lookup(token.name, token.position)
        try:
            return fn(x)
        except CalculatorError:
            raise
        except (ValueError, OverflowError) as exc:
            raise DomainError(f"{token.name}({x}) is undefined: {exc}") from exc

    def _reduce(self, values: List[float], pending: List[PendingEntry]) -> None:
        """
        Pop one entry from ``pending`` and replace its operands on ``values`` by its result.

        :param List[float] values: Value stack
        :param List[PendingEntry] pending: Pending stack, must not be empty

        :raises StructuralError: On an open parenthesis or missing operands
        :raises DomainError: If the operation is undefined for its operands
        """
        entry = pending.pop()

        if isinstance(entry, LParenToken):
            raise StructuralError(f"Mismatched parentheses: '(' at position {entry.position} is never closed")

        if isinstance(entry, FunctionToken):
            (x,) = self._pop_operands(values, 1, f"function {entry.name!r}")
            values.append(self._apply_function(entry, x))
        elif isinstance(entry, UnaryOperator):
            (x,) = self._pop_operands(values, 1, f"prefix {entry.op!r}")
            values.append(UNARY_OPERATORS[entry.op](x))
        else:
            a, b = self._pop_operands(values, 2, f"operator {entry.op!r}")
            values.append(OPERATORS[entry.op][2](a, b))

    def _push_operator(self, token: OperatorToken, values: List[float], pending: List[PendingEntry]) -> None:
        """Reduce pending operators that bind at least as tightly as ``token``, then push it."""
        prec, assoc, _ = OPERATORS[token.op]
        while pending:
            top_prec = self._precedence(pending[-1])
            if top_prec is None:
                # Parentheses and functions are only flushed by ')'
                break
            if top_prec > prec or (top_prec == prec and assoc == "left"):
                self._reduce(values, pending)
            else:
                break
        pending.append(token)

    def evaluate(self, expr: str) -> float:
        """
        Evaluate an arithmetic expression.

        :param str expr: Arithmetic expression string

        :return: Computed result as float
        :rtype: float
        :raises LexicalError: On an unrecognized character
        :raises NumberParseError: On an invalid number literal
        :raises UnknownFunctionError: On an identifier missing from the registry
        :raises StructuralError: If the expression is empty or malformed
        :raises DomainError: If the value is undefined over the reals
        """
        logger.debug(f"🧮 Evaluating {expr!r}")
        tokens: List[Token] = Tokenizer.tokenize(expr)

        if not tokens:
            raise StructuralError("Empty expression")

        values: List[float] = []
        pending: List[PendingEntry] = []
        # True where the grammar needs a value next: start, after an operator or '('
        expect_operand = True

        for index, token in enumerate(tokens):
            if isinstance(token, NumberToken):
                values.append(token.value)
                expect_operand = False

            elif isinstance(token, FunctionToken):
                constant = self.registry.constant(token.name)
                if constant is not None:
                    values.append(constant)
                    expect_operand = False
                    continue
                # Unknown names fail here, before any argument is evaluated
                self.registry.lookup(token.name, token.position)
                following = tokens[index + 1] if index + 1 < len(tokens) else None
                if not isinstance(following, LParenToken):
                    raise StructuralError(
                        f"Function {token.name!r} at position {token.position} must be followed by '('"
                    )
                pending.append(token)

            elif isinstance(token, LParenToken):
                pending.append(token)
                expect_operand = True

            elif isinstance(token, RParenToken):
                if expect_operand:
                    raise StructuralError(f"Missing operand before ')' at position {token.position}")
                while pending and not isinstance(pending[-1], LParenToken):
                    self._reduce(values, pending)
                if not pending:
                    raise StructuralError(f"Mismatched parentheses: ')' at position {token.position} has no '('")
                pending.pop()
                if pending and isinstance(pending[-1], FunctionToken):
                    self._reduce(values, pending)

            else:
                if expect_operand:
                    if self.unary_minus and token.op in UNARY_OPERATORS:
                        pending.append(UnaryOperator(op=token.op, position=token.position))
                        continue
                    raise StructuralError(f"Missing operand before {token.op!r} at position {token.position}")
                self._push_operator(token, values, pending)
                expect_operand = True

        if expect_operand:
            raise StructuralError("Missing operand at end of expression")

        while pending:
            self._reduce(values, pending)

        if len(values) != 1:
            raise StructuralError(f"Malformed expression ({len(values)} values remain): {expr}")

        logger.debug(f"🧮 {expr!r} = {values[0]}")
        return values[0]


_DEFAULT_CALCULATOR = Calculator()


def evaluate(expr: str) -> float:
    """
    Evaluate ``expr`` with the built-in functions and prefix signs enabled.

    :param str expr: Arithmetic expression string

    :return: Computed result as float
    :rtype: float
    :raises CalculatorError: On any lexical, structural or domain failure
    """
    return _DEFAULT_CALCULATOR.evaluate(expr)
