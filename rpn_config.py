"""Runtime settings, overridable from the environment.

Values read from the environment stay strings until `validate_config`
converts and checks them.
"""
import logging
import os

from rpn_parser import MAX_LINE_LENGTH, MAX_RESULT_BITS

CALC_CONFIG = {
    "input_path": os.getenv("RPN_INPUT", "in.txt"),
    "max_line_length": os.getenv("RPN_MAX_LINE_LENGTH", MAX_LINE_LENGTH),
    "max_result_bits": os.getenv("RPN_MAX_RESULT_BITS", MAX_RESULT_BITS),
    "log_level": os.getenv("RPN_LOG_LEVEL", "DEBUG" if os.getenv("DEBUG") else "WARNING"),
}


def _positive_int(config, key):
    try:
        value = int(config[key])
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer, got {config[key]!r}") from None
    if value < 1:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


def validate_config(config=CALC_CONFIG):
    """Return a checked copy of `config` with numbers converted to int.

    >>> validate_config(dict(CALC_CONFIG, max_line_length="80"))["max_line_length"]
    80
    >>> validate_config(dict(CALC_CONFIG, max_line_length=0))
    Traceback (most recent call last):
    ...
    ValueError: max_line_length must be positive, got 0
    """
    checked = dict(config)
    for key in ("max_line_length", "max_result_bits"):
        checked[key] = _positive_int(config, key)
    if not isinstance(logging.getLevelName(str(config["log_level"]).upper()), int):
        raise ValueError(f"unknown log level {config['log_level']!r}")
    return checked
