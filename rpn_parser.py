"""Validation, tokenization and infix -> postfix conversion of digit expressions.

Operands are single digits; operators are `+ - * / ^`, grouped with
parentheses. All operators, `^` included, associate to the left:

>>> " ".join(t.char for t in to_postfix(tokenize("2^3^2")))
'2 3 ^ 2 ^'
"""
from enum import Enum, auto
from typing import NamedTuple

MAX_LINE_LENGTH = 100
# Well under the 4300 digit limit on int -> str conversion.
MAX_RESULT_BITS = 4096

DIGITS = "0123456789"
PARENS = "()"

# One precedence level per group, loosest first.
OP_GROUPS = "+- */ ^"
PRECEDENCE = {o: prec for prec, group in enumerate(OP_GROUPS.split(), 1) for o in group}
UNSET = -1

SYMBOLS = DIGITS + "".join(PRECEDENCE) + PARENS


class ErrorKind(Enum):
    NO_ERROR = auto()
    INVALID_CHARACTER = auto()
    UNBALANCED_PARENTHESES = auto()
    MISSING_OPERATOR = auto()
    INVALID_OPERATOR = auto()
    NUMBER_AFTER_NUMBER = auto()
    INVALID_ENDING = auto()
    DIVISION_BY_ZERO = auto()
    INDETERMINATE_POWER = auto()
    LINE_TOO_LONG = auto()
    MALFORMED_EXPRESSION = auto()
    RESULT_TOO_LARGE = auto()


ERROR_MESSAGES = {
    ErrorKind.NO_ERROR: "no error.",
    ErrorKind.INVALID_CHARACTER: "invalid character.",
    ErrorKind.UNBALANCED_PARENTHESES: "unbalanced parentheses.",
    ErrorKind.MISSING_OPERATOR: "missing operator.",
    ErrorKind.INVALID_OPERATOR: "invalid operator.",
    ErrorKind.NUMBER_AFTER_NUMBER: "number after number.",
    ErrorKind.INVALID_ENDING: "expression ends with an operator.",
    ErrorKind.DIVISION_BY_ZERO: "division by zero detected in expression.",
    ErrorKind.INDETERMINATE_POWER: "0 raised to 0 is undefined.",
    ErrorKind.LINE_TOO_LONG: "expression line is too long.",
    ErrorKind.MALFORMED_EXPRESSION: "malformed expression.",
    ErrorKind.RESULT_TOO_LARGE: "result is too large.",
}


def describe(kind):
    """Human readable message for `kind`.

    >>> describe(ErrorKind.MISSING_OPERATOR)
    'missing operator.'
    """
    return ERROR_MESSAGES.get(kind, "unknown error.")


class ExpressionError(ValueError):
    """A line was rejected; `kind` says why."""

    def __init__(self, kind, detail=None):
        msg = describe(kind) if detail is None else f"{describe(kind)} ({detail})"
        super().__init__(msg)
        self.kind = kind


class Kind(Enum):
    NUMBER = auto()
    OPERATOR = auto()
    PARENTHESIS = auto()
    INVALID = auto()


class Token(NamedTuple):
    char: str
    kind: Kind
    precedence: int = UNSET

    def __repr__(self):
        return f"tok({self.char!r})"


def validate(line):
    """Raise `ExpressionError` unless `line` is a well-formed expression.

    Spaces are skipped. A `+` or `-` is tolerated where an operand is expected,
    but nothing gives it unary meaning later on.

    >>> validate("(1 + 2) * 3")
    >>> try:
    ...     validate("4 2")
    ... except ExpressionError as e:
    ...     print(e.kind.name, "-", e)
    NUMBER_AFTER_NUMBER - number after number. (at column 3)
    """
    depth = 0
    expecting_operand = True
    last_was_number = False
    for col, c in enumerate(line, 1):
        if c == " ":
            continue
        if c not in SYMBOLS:
            raise ExpressionError(ErrorKind.INVALID_CHARACTER, f"{c!r} at column {col}")
        if c == "(":
            # No implicit multiplication, so `2(3)` lacks an operator.
            if last_was_number:
                raise ExpressionError(ErrorKind.MISSING_OPERATOR, f"at column {col}")
            depth += 1
            expecting_operand = True
        elif c == ")":
            depth -= 1
            if depth < 0:
                raise ExpressionError(ErrorKind.UNBALANCED_PARENTHESES, f"at column {col}")
            expecting_operand = False
        elif c in DIGITS:
            if not expecting_operand:
                raise ExpressionError(ErrorKind.NUMBER_AFTER_NUMBER, f"at column {col}")
            expecting_operand = False
            last_was_number = True
        else:
            if expecting_operand and c not in "+-":
                raise ExpressionError(ErrorKind.INVALID_OPERATOR, f"{c!r} at column {col}")
            expecting_operand = True
            last_was_number = False
    if depth:
        raise ExpressionError(ErrorKind.UNBALANCED_PARENTHESES, f"{depth} left open")
    if expecting_operand:
        raise ExpressionError(ErrorKind.INVALID_ENDING)


def classify(c):
    if c in DIGITS:
        return Token(c, Kind.NUMBER, 0)
    if c in PRECEDENCE:
        return Token(c, Kind.OPERATOR, PRECEDENCE[c])
    if c in PARENS:
        return Token(c, Kind.PARENTHESIS, 0)
    return Token(c, Kind.INVALID, UNSET)


def tokenize(line):
    """Yield a token per non-space character of an already validated `line`.

    >>> [(t.char, t.kind.name, t.precedence) for t in tokenize("2 ^ (1)")]
    [('2', 'NUMBER', 0), ('^', 'OPERATOR', 3), ('(', 'PARENTHESIS', 0), ('1', 'NUMBER', 0), (')', 'PARENTHESIS', 0)]
    """
    for c in line:
        if c != " ":
            yield classify(c)


def has_division_by_zero(tokens):
    """Is some `/` directly followed by the literal digit 0?

    Only the lexical case is caught; `4/(2-2)` fails later, in evaluation.

    >>> has_division_by_zero(list(tokenize("6 / 0"))), has_division_by_zero(list(tokenize("4/(2-2)")))
    (True, False)
    """
    tokens = list(tokens)
    return any(
        a.kind is Kind.OPERATOR and a.char == "/" and b.kind is Kind.NUMBER and b.char == "0"
        for a, b in zip(tokens, tokens[1:])
    )


def to_postfix(tokens):
    """Reorder infix `tokens` into postfix with the shunting-yard algorithm.

    An operator first pops every stacked operator of greater *or equal*
    precedence, which is what makes `^` left-associative. A `)` without a
    matching `(` simply stops popping at the bottom of the stack.

    >>> to_postfix(tokenize("(1+2)*3"))
    [tok('1'), tok('2'), tok('+'), tok('3'), tok('*')]
    """
    out = []
    ops = []
    for tok in tokens:
        if tok.kind is Kind.NUMBER:
            out.append(tok)
        elif tok.kind is Kind.OPERATOR:
            while ops and ops[-1].kind is Kind.OPERATOR and ops[-1].precedence >= tok.precedence:
                out.append(ops.pop())
            ops.append(tok)
        elif tok.kind is Kind.PARENTHESIS:
            if tok.char == "(":
                ops.append(tok)
                continue
            while ops and ops[-1].char != "(":
                out.append(ops.pop())
            if ops:
                ops.pop()
        elif tok.kind is Kind.INVALID:
            raise ExpressionError(ErrorKind.INVALID_CHARACTER, repr(tok.char))
        else:
            raise AssertionError(f"unhandled token kind {tok.kind}")
    while ops:
        out.append(ops.pop())
    return out
