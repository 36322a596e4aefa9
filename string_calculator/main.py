"""
Command line entry point.

This script:
- Reads one expression (argument or one line of standard input)
- Prints ``Result: <value>`` on success
- Prints ``Error: <message>`` to standard error and exits with status 1 on failure

With ``--file`` it evaluates every line of a text file or archive in worker
processes and writes a results file instead.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError

from string_calculator.batch.runner import BatchRunner, build_output_path
from string_calculator.common.errors import CalculatorError
from string_calculator.common.logger import logger, set_level
from string_calculator.common.models import format_result
from string_calculator.engine.evaluator import Calculator


PROMPT: str = "Enter a mathematical expression:"


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    expression : str, optional
        Expression to evaluate instead of reading standard input.
    file_path : FilePath, optional
        Path to a file or archive of expressions, one per line.
    output : Path, optional
        Results file for ``file_path``.
    precision : int
        Fractional digits of the printed result.
    unary_minus : bool
        Accept prefix signs such as ``-3`` or ``2 * -3``.
    log_level : str, optional
        Overrides the level read from the environment.
    """

    expression: Optional[str] = None
    file_path: Optional[FilePath] = None
    output: Optional[Path] = None
    precision: int = Field(default=7, ge=0, le=15)
    unary_minus: bool = True
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param list argv: Arguments without the program name, defaults to ``sys.argv[1:]``

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        prog="string-calculator",
        description="Evaluate a single-line arithmetic expression",
    )

    parser.add_argument(
        "expression",
        nargs="?",
        help="Expression to evaluate, read from standard input when omitted",
    )
    parser.add_argument(
        "-f", "--file",
        dest="file_path",
        help="Evaluate every line of a .txt, .zip, .tar.xz or .7z file",
    )
    parser.add_argument(
        "-o", "--output",
        help="Results file for --file (default: next to the input)",
    )
    parser.add_argument(
        "-p", "--precision",
        type=int,
        default=7,
        help="Number of fractional digits in results (default: 7)",
    )
    parser.add_argument(
        "--no-unary",
        dest="unary_minus",
        action="store_false",
        help="Reject prefix '+'/'-'; write '0 - x' instead",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    args = parser.parse_args(argv)

    if args.expression is not None and args.file_path is not None:
        parser.error("an expression and --file are mutually exclusive")

    try:
        return CliArgs(**{key: value for key, value in vars(args).items() if value is not None})
    except ValidationError as exc:
        parser.error(str(exc))


def read_expression() -> str:
    """Read exactly one line from standard input, prompting when interactive."""
    if sys.stdin.isatty():
        print(PROMPT)
    return sys.stdin.readline().rstrip("\r\n")


def run_single(cli_args: CliArgs) -> int:
    """
    Evaluate one expression and print the result or the error.

    :param CliArgs cli_args: Validated CLI arguments

    :return: Process exit status
    :rtype: int
    """
    expression = cli_args.expression if cli_args.expression is not None else read_expression()
    calculator = Calculator(unary_minus=cli_args.unary_minus)

    try:
        result = calculator.evaluate(expression)
    except CalculatorError as exc:
        logger.info(f"🧮❌ {exc.kind} error in {expression!r}")
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Result: {format_result(result, cli_args.precision)}")
    return 0


def run_batch(cli_args: CliArgs) -> int:
    """
    Evaluate a file of expressions and write the results file.

    :param CliArgs cli_args: Validated CLI arguments with ``file_path`` set

    :return: Process exit status, 1 if any expression failed
    :rtype: int
    """
    output_path: Path = cli_args.output or build_output_path(cli_args.file_path)
    runner = BatchRunner(
        output_file=output_path,
        precision=cli_args.precision,
        unary_minus=cli_args.unary_minus,
    )

    try:
        outcomes = runner.run(cli_args.file_path)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    failed = sum(1 for outcome in outcomes if outcome.status == "error")
    print(f"Evaluated {len(outcomes)} expressions ({failed} failed), results in {output_path}")
    return 1 if failed else 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function executed by the ``string-calculator`` console script.
    """
    cli_args = parse_args(argv)
    if cli_args.log_level:
        set_level(cli_args.log_level)

    if cli_args.file_path is not None:
        return run_batch(cli_args)
    return run_single(cli_args)


if __name__ == "__main__":
    sys.exit(main())
