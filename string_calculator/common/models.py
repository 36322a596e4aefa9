"""Pydantic models for evaluation requests and their outcomes."""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def format_result(value: float, precision: int = 7) -> str:
    """
    Render a result as fixed-point text.

    :param float value: Evaluated value
    :param int precision: Number of fractional digits

    :return: Formatted value, e.g. ``"14.0000000"``
    :rtype: str
    """
    # Adding 0.0 turns -0.0 into 0.0
    return f"{value + 0.0:.{precision}f}"


class EvaluationRequest(BaseModel):
    """A single expression to evaluate, with its position in the input."""

    model_config = ConfigDict(frozen=True)

    expression: str = Field(..., description="Arithmetic expression as a string")
    line_number: int = Field(default=1, ge=1, description="Line number in the input")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not blank."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v


class EvaluationResult(BaseModel):
    """Successful evaluation of an expression."""

    status: Literal["ok"] = "ok"
    line_number: int = Field(default=1, ge=1, description="Line number in the input")
    expression: str = Field(..., description="Original arithmetic expression")
    result: float = Field(..., description="Evaluated numeric result of the expression")

    def render(self, precision: int = 7) -> str:
        """Format the line written to a results file."""
        return f"{self.expression} = {format_result(self.result, precision)}"


class EvaluationFailure(BaseModel):
    """Failed evaluation of an expression."""

    status: Literal["error"] = "error"
    line_number: int = Field(default=1, ge=1, description="Line number in the input")
    expression: str = Field(..., description="Original arithmetic expression")
    kind: str = Field(..., description="Error category, e.g. 'domain' or 'lexical'")
    error: str = Field(..., description="Human-readable error message")

    def render(self, precision: int = 7) -> str:
        """Format the line written to a results file."""
        return f"{self.expression} -> ERROR: {self.error}"


Outcome = Annotated[Union[EvaluationResult, EvaluationFailure], Field(discriminator="status")]

# Rebuilds outcomes from the dictionaries sent by worker processes
outcome_adapter: TypeAdapter = TypeAdapter(Outcome)
