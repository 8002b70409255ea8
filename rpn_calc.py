"""Evaluate the arithmetic expressions of a text file, one per line.

For every line a header is printed, followed by either a single error line or
the tokens, the RPN form and the integer result:

    $ printf '3*2+4\\n' | rpn-calc -
    --- EXPRESSION 1 ---
    Valid expression!
    Tokens:
    Value: 3 | Kind: NUMBER | Precedence: 0
    ...
    RPN: 3 2 * 4 +
    Result: 10
"""
import argparse
import io
import logging
import sys

from rpn_config import CALC_CONFIG, validate_config
from rpn_eval import run_line
from rpn_parser import MAX_LINE_LENGTH, MAX_RESULT_BITS, describe

logger = logging.getLogger(__name__)


def report(number, line, max_length=MAX_LINE_LENGTH, max_bits=MAX_RESULT_BITS):
    """Return the output lines for input line `number`.

    >>> report(3, "4+")
    ['--- EXPRESSION 3 ---', 'Error: expression ends with an operator.']
    """
    out = [f"--- EXPRESSION {number} ---"]
    if not line:
        out.append("Empty expression. Skipping.")
        return out
    outcome = run_line(line, max_length, max_bits)
    if not outcome.ok:
        out.append(f"Error: {describe(outcome.error)}")
        return out
    out.append("Valid expression!")
    out.append("Tokens:")
    for t in outcome.tokens:
        out.append(f"Value: {t.char} | Kind: {t.kind.name} | Precedence: {t.precedence}")
    out.append("RPN: " + " ".join(t.char for t in outcome.postfix))
    out.append(f"Result: {outcome.value}")
    return out


def run(lines, max_length=MAX_LINE_LENGTH, max_bits=MAX_RESULT_BITS):
    for number, line in enumerate(lines, 1):
        yield from report(number, line.rstrip("\r\n"), max_length, max_bits)


def main(argv=None):
    argparser = argparse.ArgumentParser(
        description="Validate arithmetic expressions, convert them to RPN and evaluate them."
    )
    argparser.add_argument(
        "input",
        nargs="?",
        default=CALC_CONFIG["input_path"],
        help="file with one expression per line, '-' for stdin (default: %(default)s)",
    )
    argparser.add_argument(
        "--max-length",
        default=CALC_CONFIG["max_line_length"],
        help="longest accepted line, in characters (default: %(default)s)",
    )
    argparser.add_argument(
        "--max-bits",
        default=CALC_CONFIG["max_result_bits"],
        help="largest accepted intermediate result, in bits (default: %(default)s)",
    )
    argparser.add_argument(
        "-v", "--verbose", action="store_true", help="log every pipeline stage"
    )
    args = argparser.parse_args(argv)

    config = dict(
        CALC_CONFIG,
        input_path=args.input,
        max_line_length=args.max_length,
        max_result_bits=args.max_bits,
    )
    if args.verbose:
        config["log_level"] = "DEBUG"
    try:
        config = validate_config(config)
    except ValueError as e:
        argparser.error(str(e))

    logging.basicConfig(
        level=config["log_level"].upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if config["input_path"] == "-":
        f = io.TextIOWrapper(sys.stdin.buffer, encoding="utf-8", errors="replace")
    else:
        try:
            f = open(config["input_path"], encoding="utf-8", errors="replace")
        except OSError as e:
            logger.error("Cannot open input file %s: %s", config["input_path"], e)
            return 1
    with f:
        for text in run(f, config["max_line_length"], config["max_result_bits"]):
            print(text)
    return 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
