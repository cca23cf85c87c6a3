"""Generalize failure messages into patterns used to group similar failures."""

import re

UNKNOWN_ERROR = "Unknown error"

_DIGITS = re.compile(r"\d+")
_SINGLE_QUOTED = re.compile(r"'[^']+'")
_DOUBLE_QUOTED = re.compile(r'"[^"]+"')


def extract_failure_pattern(message: str | None, max_length: int = 100) -> str:
    """Reduce a failure message to a placeholder-substituted pattern.

    Only the first ``max_length`` characters are kept. Digit runs become ``N``,
    quoted literals become ``'X'`` / ``"X"`` and newlines become spaces, so that
    messages differing only in values share a pattern.

    Examples:
        >>> extract_failure_pattern("expected 42 == 'foo'")
        "expected N == 'X'"
        >>> extract_failure_pattern(None)
        'Unknown error'

    """
    if not message:
        return UNKNOWN_ERROR

    pattern = message[:max_length]
    pattern = _DIGITS.sub("N", pattern)
    pattern = _SINGLE_QUOTED.sub("'X'", pattern)
    pattern = _DOUBLE_QUOTED.sub('"X"', pattern)
    return pattern.replace("\n", " ")
