"""Formula tokenizer: splits formula text into a flat list of string tokens."""

from __future__ import annotations

import re

# Alternation order matters: identifiers and numbers first, then the
# two-character comparison operators before their one-character prefixes.
_TOKEN_RE = re.compile(
    r"[A-Za-z_][A-Za-z0-9_]*"
    r"|\d+(?:\.\d+)?"
    r"|<=|>=|<>"
    r"|[+\-*/^()=,<>]"
)

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$")


def tokenize(formula: str) -> list[str]:
    """Split *formula* into tokens.

    Whitespace and characters outside the token grammar are skipped. No
    grammar checks happen here; the parser rejects malformed sequences.
    """
    return _TOKEN_RE.findall(formula)
