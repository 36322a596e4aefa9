"""Worker process for evaluating one arithmetic expression."""
from multiprocessing.connection import Connection
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from string_calculator.common.errors import CalculatorError
from string_calculator.common.logger import logger
from string_calculator.common.models import EvaluationFailure, EvaluationResult
from string_calculator.engine.evaluator import Calculator


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single arithmetic expression.

    Lifecycle:
        - Spawned by the batch runner
        - Receives one expression only and builds its own :class:`Calculator`
        - Sends an :class:`EvaluationResult` or :class:`EvaluationFailure` through a Pipe
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending outcomes back to the runner")
    expression: str = Field(..., description="Single arithmetic expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")
    unary_minus: bool = Field(default=True, description="Accept prefix '+'/'-' signs")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def compute(self) -> Union[EvaluationResult, EvaluationFailure]:
        """
        Evaluate the expression and wrap the outcome in a model.

        :return: Result on success, failure carrying the error kind otherwise
        :rtype: Union[EvaluationResult, EvaluationFailure]
        """
        calculator = Calculator(unary_minus=self.unary_minus)
        try:
            result = calculator.evaluate(self.expression)
        except CalculatorError as exc:
            logger.error(
                f"👷❌ Worker failed on line {self.line_number}: {exc}\n"
                f"Invalid arithmetic expression, could not evaluate: {self.expression!r}"
            )
            return EvaluationFailure(
                line_number=self.line_number,
                expression=self.expression,
                kind=exc.kind,
                error=str(exc),
            )
        return EvaluationResult(line_number=self.line_number, expression=self.expression, result=result)

    def run(self) -> None:
        """
        Evaluate the arithmetic expression and send the outcome through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.expression}")

        try:
            outcome = self.compute()
            self.conn.send(outcome.model_dump())
        finally:
            # Always close the connection
            self.conn.close()

        if isinstance(outcome, EvaluationResult):
            logger.info(f"👷✅ Worker finished on line {self.line_number}: {outcome.result}")
