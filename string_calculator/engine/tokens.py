"""Token types produced by the tokenizer."""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


OperatorSymbol = Literal["+", "-", "*", "/", "^"]


class _BaseToken(BaseModel):
    """Common configuration: tokens are immutable once produced."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(default=0, ge=0, description="Offset of the token in the input")


class NumberToken(_BaseToken):
    kind: Literal["number"] = "number"
    value: float = Field(..., description="Numeric value of the literal")


class OperatorToken(_BaseToken):
    kind: Literal["operator"] = "operator"
    op: OperatorSymbol = Field(..., description="Operator symbol")


class FunctionToken(_BaseToken):
    """Identifier: a function name or a named constant."""

    kind: Literal["function"] = "function"
    name: str = Field(..., min_length=1, description="Identifier")


class LParenToken(_BaseToken):
    kind: Literal["lparen"] = "lparen"


class RParenToken(_BaseToken):
    kind: Literal["rparen"] = "rparen"


Token = Annotated[
    Union[NumberToken, OperatorToken, FunctionToken, LParenToken, RParenToken],
    Field(discriminator="kind"),
]
