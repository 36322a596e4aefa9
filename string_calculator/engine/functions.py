"""Registry of built-in single-argument functions and named constants."""
from collections.abc import Callable as ABCCallable
import math
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from string_calculator.common.errors import DomainError, UnknownFunctionError


# Type alias for function procedures (taking one float, returning a float)
FunctionFn: ABCCallable[[float], float] = Callable[[float], float]

PI: float = math.acos(-1.0)
E: float = math.exp(1.0)

# Poles of tan/ctg are detected after rounding to this many decimals
POLE_PRECISION: int = 7


def _tan(x: float) -> float:
    if round(math.cos(x), POLE_PRECISION) == 0:
        raise DomainError(f"Undefined tangent at {x} (cosine is zero)")
    return math.tan(x)


def _ctg(x: float) -> float:
    if round(math.sin(x), POLE_PRECISION) == 0:
        raise DomainError(f"Undefined cotangent at {x} (sine is zero)")
    return math.cos(x) / math.sin(x)


def _sqrt(x: float) -> float:
    if x < 0:
        raise DomainError(f"Square root of negative number: {x}")
    return math.sqrt(x)


def _log(x: float) -> float:
    if x <= 0:
        raise DomainError(f"Logarithm of non-positive number: {x}")
    return math.log(x)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError as exc:
        raise DomainError(f"Exponential overflow: exp({x})") from exc


DEFAULT_FUNCTIONS: Dict[str, FunctionFn] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": _tan,
    "ctg": _ctg,
    "sqrt": _sqrt,
    "log": _log,
    "exp": _exp,
    "abs": abs,
}

DEFAULT_CONSTANTS: Dict[str, float] = {
    "pi": PI,
    "e": E,
}


class FunctionRegistry(BaseModel):
    """
    Read-only mapping from identifiers to numeric procedures and constants.

    Functions take exactly one argument and report domain problems by raising
    :class:`DomainError`. Constants are identifiers that evaluate to a fixed
    value and take no argument.

    The registry is frozen; :meth:`extend` returns a new registry instead of
    mutating this one, so the evaluator never sees the table change.
    """

    model_config = ConfigDict(frozen=True)

    functions: Dict[str, FunctionFn] = Field(
        default_factory=lambda: dict(DEFAULT_FUNCTIONS),
        description="Function name to single-argument procedure",
    )
    constants: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_CONSTANTS),
        description="Constant name to value",
    )

    @classmethod
    def default(cls) -> "FunctionRegistry":
        """Build the registry holding the built-in functions and constants."""
        return cls()

    def __contains__(self, name: str) -> bool:
        return name in self.functions or name in self.constants

    def names(self) -> List[str]:
        """Return every known identifier, sorted."""
        return sorted(set(self.functions) | set(self.constants))

    def lookup(self, name: str, position: Optional[int] = None) -> FunctionFn:
        """
        Return the procedure registered under ``name``.

        :param str name: Function identifier
        :param int position: Offset of the identifier in the input, for diagnostics

        :return: Single-argument procedure
        :rtype: FunctionFn
        :raises UnknownFunctionError: If no function has this name
        """
        try:
            return self.functions[name]
        except KeyError:
            raise UnknownFunctionError(name, position) from None

    def constant(self, name: str) -> Optional[float]:
        """Return the value of constant ``name``, or None if it is not a constant."""
        return self.constants.get(name)

    def extend(
        self,
        functions: Optional[Dict[str, FunctionFn]] = None,
        constants: Optional[Dict[str, float]] = None,
    ) -> "FunctionRegistry":
        """
        Return a new registry with extra entries added to this one.

        :param dict functions: Additional or replacing functions
        :param dict constants: Additional or replacing constants

        :return: New registry
        :rtype: FunctionRegistry
        """
        return FunctionRegistry(
            functions={**self.functions, **(functions or {})},
            constants={**self.constants, **(constants or {})},
        )
