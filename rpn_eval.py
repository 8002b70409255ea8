"""Integer evaluation of postfix token sequences, and the per-line pipeline.

A line goes through `validate`, `tokenize`, the lexical division-by-zero check,
`to_postfix` and `evaluate`; `run_line` does all of it and never raises for a
bad expression, it records the `ErrorKind` in the returned `Outcome` instead.
"""
import logging
import operator as op
from typing import NamedTuple, Optional, Tuple

from rpn_parser import (
    MAX_LINE_LENGTH,
    MAX_RESULT_BITS,
    ErrorKind,
    ExpressionError,
    Kind,
    Token,
    has_division_by_zero,
    to_postfix,
    tokenize,
    validate,
)

logger = logging.getLogger(__name__)


def trunc_div(a, b):
    """`a / b` rounded toward zero.

    >>> trunc_div(7, 2), trunc_div(-7, 2), trunc_div(7, -2), trunc_div(-7, -2)
    (3, -3, -3, 3)
    """
    if b == 0:
        raise ExpressionError(ErrorKind.DIVISION_BY_ZERO)
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def int_pow(a, b, max_bits=MAX_RESULT_BITS):
    """`a ^ b`, with any fractional result truncated toward zero.

    Powers certain to need more than `max_bits` bits are refused before they
    are computed.

    >>> int_pow(2, 10), int_pow(-3, 3)
    (1024, -27)
    >>> int_pow(2, -1), int_pow(-1, -3), int_pow(1, -5)
    (0, -1, 1)
    >>> int_pow(9, 9**4)
    Traceback (most recent call last):
    ...
    rpn_parser.ExpressionError: result is too large. (9^6561 needs over 4096 bits)
    """
    if a == 0 and b == 0:
        raise ExpressionError(ErrorKind.INDETERMINATE_POWER)
    if b >= 0:
        # log2(|a|^b) >= (bit_length - 1) * b
        if (abs(a).bit_length() - 1) * b > max_bits:
            raise ExpressionError(
                ErrorKind.RESULT_TOO_LARGE, f"{a}^{b} needs over {max_bits} bits"
            )
        return check_size(a**b, max_bits)
    if a == 0:
        raise ExpressionError(ErrorKind.DIVISION_BY_ZERO, "0 raised to a negative power")
    # |1 / a^-b| < 1 unless a is 1 or -1.
    if abs(a) == 1:
        return a ** -b
    return 0


def check_size(value, max_bits=MAX_RESULT_BITS):
    if value.bit_length() > max_bits:
        raise ExpressionError(
            ErrorKind.RESULT_TOO_LARGE, f"{value.bit_length()} bits > {max_bits}"
        )
    return value


ARITH = {
    "+": op.add,
    "-": op.sub,
    "*": op.mul,
    "/": trunc_div,
    "^": int_pow,
}


def evaluate(postfix, max_bits=MAX_RESULT_BITS):
    """Compute the integer value of a postfix token sequence.

    No intermediate value may need more than `max_bits` bits.

    >>> evaluate(tokenize("12+3*"))
    9
    >>> evaluate(tokenize("1 2"))
    Traceback (most recent call last):
    ...
    rpn_parser.ExpressionError: malformed expression. (2 values left on the stack)
    """
    stack = []
    for tok in postfix:
        if tok.kind is Kind.NUMBER:
            stack.append(ord(tok.char) - ord("0"))
        elif tok.kind is Kind.OPERATOR:
            if len(stack) < 2:
                raise ExpressionError(
                    ErrorKind.MALFORMED_EXPRESSION, f"{tok.char!r} is missing an operand"
                )
            b = stack.pop()
            a = stack.pop()
            if tok.char == "^":
                stack.append(int_pow(a, b, max_bits))
            else:
                stack.append(check_size(ARITH[tok.char](a, b), max_bits))
        elif tok.kind in (Kind.PARENTHESIS, Kind.INVALID):
            raise ExpressionError(ErrorKind.MALFORMED_EXPRESSION, f"unexpected {tok.char!r}")
        else:
            raise AssertionError(f"unhandled token kind {tok.kind}")
    if len(stack) != 1:
        raise ExpressionError(
            ErrorKind.MALFORMED_EXPRESSION, f"{len(stack)} values left on the stack"
        )
    (ans,) = stack
    return ans


class Outcome(NamedTuple):
    line: str
    error: ErrorKind = ErrorKind.NO_ERROR
    tokens: Tuple[Token, ...] = ()
    postfix: Tuple[Token, ...] = ()
    value: Optional[int] = None

    @property
    def ok(self):
        return self.error is ErrorKind.NO_ERROR


def run_line(line, max_length=MAX_LINE_LENGTH, max_bits=MAX_RESULT_BITS):
    """Validate, convert and evaluate a single expression line.

    >>> run_line("3*2+4").value
    10
    >>> run_line("6/0").error.name
    'DIVISION_BY_ZERO'
    """
    try:
        if len(line) > max_length:
            raise ExpressionError(ErrorKind.LINE_TOO_LONG, f"{len(line)} > {max_length}")
        validate(line)
        logger.debug("Valid expression: %r", line)
        tokens = tuple(tokenize(line))
        if has_division_by_zero(tokens):
            raise ExpressionError(ErrorKind.DIVISION_BY_ZERO, "literal '/0'")
        postfix = tuple(to_postfix(tokens))
        logger.debug("RPN: %s", " ".join(t.char for t in postfix))
        value = evaluate(postfix, max_bits)
    except ExpressionError as e:
        logger.debug("Rejected %r: %s", line, e)
        return Outcome(line, e.kind)
    logger.debug("Result of %r: %s", line, value)
    return Outcome(line, tokens=tokens, postfix=postfix, value=value)
