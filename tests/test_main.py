"""Test the command line entry point."""
import io
import sys
from pathlib import Path

import pytest

from string_calculator.common.logger import logger
from string_calculator.main import CliArgs, main, parse_args


@pytest.fixture
def stdin(monkeypatch):
    """Replace standard input with a given text."""
    def _set(text: str) -> None:
        monkeypatch.setattr(sys, "stdin", io.StringIO(text))
    return _set


def test_parse_args_defaults() -> None:
    """Without options the driver reads stdin with 7 digits and unary signs enabled."""
    assert parse_args([]) == CliArgs()
    assert CliArgs().precision == 7
    assert CliArgs().unary_minus is True


def test_parse_args_options(tmp_path: Path) -> None:
    """Options are validated into CliArgs."""
    ops = tmp_path / "ops.txt"
    ops.write_text("1+1\n")

    cli_args = parse_args(["--file", str(ops), "--precision", "3", "--no-unary", "--log-level", "debug"])

    assert cli_args.file_path == ops
    assert cli_args.precision == 3
    assert cli_args.unary_minus is False
    assert cli_args.log_level == "DEBUG"


@pytest.mark.parametrize("argv", [
    ["--precision", "42"],
    ["--file", "does/not/exist.txt"],
    ["--log-level", "loud"],
    ["1 + 1", "--file", "ops.txt"],
])
def test_parse_args_invalid(argv) -> None:
    """Invalid arguments exit through argparse with status 2."""
    with pytest.raises(SystemExit) as exc_info:
        parse_args(argv)
    assert exc_info.value.code == 2


def test_main_reads_one_line_from_stdin(stdin, capsys) -> None:
    """Only the first line of standard input is evaluated."""
    stdin("(2 + 3) * 4\n1 / 0\n")

    assert main([]) == 0
    assert capsys.readouterr().out == "Result: 20.0000000\n"


@pytest.mark.parametrize("expr,expected", [
    ("2 + 3 * 4", "Result: 14.0000000\n"),
    ("2 ^ 3 ^ 2", "Result: 512.0000000\n"),
    ("sin(0)", "Result: 0.0000000\n"),
    ("sqrt(9) + abs(-0)", "Result: 3.0000000\n"),
])
def test_main_prints_result(stdin, capsys, expr, expected) -> None:
    """Successful evaluations print 'Result:' with 7 fractional digits."""
    stdin(expr + "\n")

    assert main([]) == 0
    assert capsys.readouterr().out == expected


@pytest.mark.parametrize("expr,message", [
    ("1 / 0", "Error: Division by zero"),
    ("log(0)", "Error: Logarithm of non-positive number"),
    ("((1+2)", "Error: Mismatched parentheses"),
    ("2 + ", "Error: Missing operand"),
    ("2 & 3", "Error: Invalid character '&'"),
    ("", "Error: Empty expression"),
])
def test_main_prints_error(stdin, capsys, expr, message) -> None:
    """Failures write one 'Error:' line to stderr and return status 1."""
    stdin(expr + "\n")

    assert main([]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith(message)
    assert len(captured.err.splitlines()) == 1


def test_main_expression_argument(capsys) -> None:
    """An expression given as argument is evaluated instead of stdin."""
    assert main(["--precision", "2", "1 / 3"]) == 0
    assert capsys.readouterr().out == "Result: 0.33\n"


def test_main_no_unary(stdin, capsys) -> None:
    """--no-unary rejects prefix signs."""
    stdin("-3 + 2\n")

    assert main(["--no-unary"]) == 1
    assert capsys.readouterr().err.startswith("Error: Missing operand")


def test_main_log_level(stdin, capsys) -> None:
    """--log-level changes the package logger level."""
    previous = logger.level
    stdin("1 + 1\n")
    try:
        assert main(["--log-level", "error"]) == 0
        assert logger.level == 40
    finally:
        logger.setLevel(previous)


def test_main_batch(tmp_path: Path, capsys) -> None:
    """--file evaluates every line and writes the results next to the input."""
    ops = tmp_path / "ops.txt"
    ops.write_text("2 + 3\n4 * 5\n")

    assert main(["--file", str(ops)]) == 0
    assert (tmp_path / "ops_txt_results.txt").read_text().splitlines() == [
        "2 + 3 = 5.0000000",
        "4 * 5 = 20.0000000",
    ]
    assert "Evaluated 2 expressions (0 failed)" in capsys.readouterr().out


def test_main_batch_with_failures(tmp_path: Path) -> None:
    """The batch exit status is 1 when any line fails."""
    ops = tmp_path / "ops.txt"
    ops.write_text("2 + 3\n1 / 0\n")
    output = tmp_path / "out.txt"

    assert main(["--file", str(ops), "--output", str(output)]) == 1
    assert output.read_text().splitlines()[1] == "1 / 0 -> ERROR: Division by zero"


def test_main_batch_unsupported_archive(tmp_path: Path, capsys) -> None:
    """Unsupported archives are reported as an error."""
    ops = tmp_path / "ops.rar"
    ops.write_text("1+1\n")

    assert main(["--file", str(ops)]) == 1
    assert capsys.readouterr().err.startswith("Error: ")


def test_main_rejects_overflowing_literal(capsys) -> None:
    """Literals beyond float range are reported instead of printing inf or nan."""
    big = "9" * 400

    assert main([f"{big} - {big}"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error: Invalid number literal")
