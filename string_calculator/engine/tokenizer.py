"""Split an expression string into tokens."""
import math
import string
from typing import List

from string_calculator.common.errors import LexicalError, NumberParseError
from string_calculator.common.logger import logger
from string_calculator.engine.tokens import (
    FunctionToken,
    LParenToken,
    NumberToken,
    OperatorToken,
    RParenToken,
    Token,
)


OPERATOR_SYMBOLS: str = "+-*/^"
NUMBER_START: str = string.digits + "."
IDENTIFIER_CHARS: str = string.ascii_letters


class Tokenizer:
    """
    Scan an expression left to right and emit tokens greedily.

    Rules:
        - Whitespace is skipped
        - A digit or ``.`` starts a number: the longest run of digits holding at most one ``.``
        - A letter starts an identifier: the longest run of letters
        - ``(`` and ``)`` are parentheses
        - ``+ - * / ^`` are one-character operators
        - Anything else is a lexical error

    Unary and binary minus are not told apart here; the evaluator does that
    from context.

    Examples:
        - ``"2*sin(.5)"`` -> ``2``, ``*``, ``sin``, ``(``, ``0.5``, ``)``
        - ``"1.2.3"`` -> ``1.2``, ``0.3``
    """

    @staticmethod
    def _scan_number(expr: str, start: int) -> int:
        """
        Return the end offset of the number literal starting at ``start``.

        :param str expr: Expression being scanned
        :param int start: Offset of the first digit or dot

        :return: Offset one past the last character of the literal
        :rtype: int
        """
        end = start
        seen_dot = False
        while end < len(expr) and expr[end] in NUMBER_START:
            if expr[end] == ".":
                if seen_dot:
                    break
                seen_dot = True
            end += 1
        return end

    @staticmethod
    def _scan_identifier(expr: str, start: int) -> int:
        """Return the end offset of the identifier starting at ``start``."""
        end = start
        while end < len(expr) and expr[end] in IDENTIFIER_CHARS:
            end += 1
        return end

    @staticmethod
    def _to_number(literal: str, position: int) -> float:
        """
        Convert a number literal to a float.

        :param str literal: Digits with at most one dot
        :param int position: Offset of the literal, for diagnostics

        :return: Parsed value
        :rtype: float
        :raises NumberParseError: If the literal is not a valid decimal number or overflows a float
        """
        try:
            value = float(literal)
        except ValueError:
            raise NumberParseError(literal, position) from None
        if math.isinf(value):
            raise NumberParseError(literal, position)
        return value

    @staticmethod
    def tokenize(expr: str) -> List[Token]:
        """
        Split an arithmetic expression into tokens.

        :param str expr: Arithmetic expression as a string

        :return: List of tokens in input order
        :rtype: List[Token]
        :raises LexicalError: On a character that starts no token
        :raises NumberParseError: On a literal that is not a valid number
        """
        tokens: List[Token] = []
        i = 0
        while i < len(expr):
            c = expr[i]

            if c.isspace():
                i += 1
            elif c in NUMBER_START:
                end = Tokenizer._scan_number(expr, i)
                tokens.append(NumberToken(value=Tokenizer._to_number(expr[i:end], i), position=i))
                i = end
            elif c in IDENTIFIER_CHARS:
                end = Tokenizer._scan_identifier(expr, i)
                tokens.append(FunctionToken(name=expr[i:end], position=i))
                i = end
            elif c == "(":
                tokens.append(LParenToken(position=i))
                i += 1
            elif c == ")":
                tokens.append(RParenToken(position=i))
                i += 1
            elif c in OPERATOR_SYMBOLS:
                tokens.append(OperatorToken(op=c, position=i))
                i += 1
            else:
                raise LexicalError(c, i)

        logger.debug(f"🔤 Tokenized {expr!r} into {len(tokens)} tokens")
        return tokens
