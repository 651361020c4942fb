"""Parse LaTeX, Unicode, ASCII and word-operator Boolean formulas.

Input is first rewritten into a compact canonical form that uses single
characters for every operator::

    *  AND      +  OR      !  NOT
    ^  XOR      @  NAND    #  NOR      =  XNOR

Variables are single upper-case letters and the constants are ``0``/``1``.
The canonical string is then validated, implicit multiplication is made
explicit, and a recursive-descent parser builds the expression tree with
precedence NOT > AND/NAND > XOR/XNOR > OR/NOR (all left-associative).
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Type

from .errors import ParseError
from .expression import (
    And,
    Binary,
    BooleanExpression,
    Constant,
    Nand,
    Nor,
    Not,
    Or,
    Variable,
    Xnor,
    Xor,
)

logger = logging.getLogger(__name__)

BINARY_OPERATORS = "*+^@#="
MAX_IMPLICIT_PASSES = 10
MAX_OVERLINE_PASSES = 50

LATEX_COMMANDS: Dict[str, str] = {
    "land": "*",
    "wedge": "*",
    "cdot": "*",
    "times": "*",
    "lor": "+",
    "vee": "+",
    "lnot": "!",
    "neg": "!",
    "not": "!",
    "oplus": "^",
    "uparrow": "@",
    "downarrow": "#",
    "leftrightarrow": "=",
    "Leftrightarrow": "=",
    "iff": "=",
    "equiv": "=",
    "left": "",
    "right": "",
    "quad": "",
    "qquad": "",
}

UNICODE_SYMBOLS: Dict[str, str] = {
    "∧": "*",
    "·": "*",
    "⋅": "*",
    "∨": "+",
    "¬": "!",
    "⊕": "^",
    "↑": "@",
    "⊼": "@",
    "↓": "#",
    "⊽": "#",
    "↔": "=",
    "⇔": "=",
    "≡": "=",
}

# Longest words first so NAND is never read as N+AND.
WORD_OPERATORS = (
    ("XNOR", "="),
    ("NAND", "@"),
    ("NOR", "#"),
    ("XOR", "^"),
    ("AND", "*"),
    ("OR", "+"),
    ("NOT", "!"),
    ("TRUE", "1"),
    ("FALSE", "0"),
)

ASCII_ALIASES = (
    ("<=>", "="),
    ("<->", "="),
    ("==", "="),
    ("&&", "*"),
    ("&", "*"),
    ("||", "+"),
    ("|", "+"),
    ("~", "!"),
    ("`", "'"),
)

_WORD_RE = re.compile(
    r"\b(" + "|".join(word for word, _ in WORD_OPERATORS) + r")\b", re.IGNORECASE
)
_WORD_MAP = dict(WORD_OPERATORS)
_TEXT_RE = re.compile(r"\\(?:text|mathrm|mathbf|textrm)\{([^{}]*)\}")
_OVERLINE_RE = re.compile(r"\\(?:overline|bar)\{([^{}]*)\}")
_SPACING_RE = re.compile(r"\\[,;:! ]")
_COMMAND_RE = re.compile(r"\\([A-Za-z]+)")
_IMPLICIT_RE = re.compile(r"([A-Z01)])(?=[A-Z01(!])")

_BINARY_NODES: Dict[str, Type[Binary]] = {
    "*": And,
    "@": Nand,
    "^": Xor,
    "=": Xnor,
    "+": Or,
    "#": Nor,
}


def detect_format(text: str) -> str:
    """Return ``"latex"`` when ``text`` uses LaTeX commands or logic symbols."""
    if re.search(r"\\[A-Za-z]", text) or any(ch in UNICODE_SYMBOLS for ch in text):
        return "latex"
    return "standard"


def _replace_text_macro(match: "re.Match[str]") -> str:
    content = match.group(1).strip()
    upper = content.upper()
    if upper in ("T", "TRUE", "1"):
        return " 1 "
    if upper in ("F", "FALSE", "0"):
        return " 0 "
    return f" {content} "


def _replace_command(match: "re.Match[str]") -> str:
    name = match.group(1)
    if name not in LATEX_COMMANDS:
        raise ParseError(
            f"Unknown LaTeX command '\\{name}'.",
            fragment=match.group(0),
            processed=match.string,
        )
    return f" {LATEX_COMMANDS[name]} "


def _normalize_latex(text: str) -> str:
    text = _TEXT_RE.sub(_replace_text_macro, text)
    for _ in range(MAX_OVERLINE_PASSES):
        updated = _OVERLINE_RE.sub(r" !(\1) ", text)
        if updated == text:
            break
        text = updated
    text = _SPACING_RE.sub(" ", text)
    text = _COMMAND_RE.sub(_replace_command, text)
    return text.replace("{", "(").replace("}", ")")


def _replace_word(match: "re.Match[str]") -> str:
    return f" {_WORD_MAP[match.group(1).upper()]} "


def _apply_primes(text: str) -> str:
    """Rewrite postfix complements (``A'``, ``(A+B)'``) as prefix ``!``."""
    while "'" in text:
        idx = text.index("'")
        prev = text[idx - 1] if idx > 0 else ""
        if prev.isalpha() or prev in "01":
            text = text[: idx - 1] + "!" + prev + text[idx + 1 :]
        elif prev == ")":
            depth = 0
            start = -1
            for pos in range(idx - 1, -1, -1):
                if text[pos] == ")":
                    depth += 1
                elif text[pos] == "(":
                    depth -= 1
                    if depth == 0:
                        start = pos
                        break
            if start < 0:
                raise ParseError(
                    "Unbalanced parentheses before complement mark.",
                    fragment=text[max(0, idx - 3) : idx + 1],
                    processed=text,
                )
            text = text[:start] + "!" + text[start:idx] + text[idx + 1 :]
        else:
            raise ParseError(
                "Complement mark without an operand.",
                fragment=text[max(0, idx - 2) : idx + 1],
                processed=text,
            )
    return text


def normalize(text: str) -> str:
    """Rewrite ``text`` into the canonical single-character notation.

    The result has no whitespace, upper-case variables, prefix negation only
    and ``()`` replaced by ``0``. Implicit multiplication is not yet inserted.
    """
    if text is None or not text.strip():
        raise ParseError("Expression is empty.", processed="")
    text = text.strip()

    lowered = text.lower()
    for marker in ("undefined", "null"):
        if marker in lowered:
            raise ParseError(
                f"Expression contains the invalid token '{marker}'.",
                fragment=marker,
                processed=text,
            )

    text = _normalize_latex(text)
    for symbol, replacement in UNICODE_SYMBOLS.items():
        text = text.replace(symbol, f" {replacement} ")
    text = _WORD_RE.sub(_replace_word, text)
    for alias, replacement in ASCII_ALIASES:
        text = text.replace(alias, replacement)

    text = re.sub(r"\s+", "", text).upper()
    text = _apply_primes(text)
    while "()" in text:
        text = text.replace("()", "0")
    if not text:
        raise ParseError("Expression is empty.", processed=text)
    return text


def _snippet(text: str, idx: int) -> str:
    return text[max(0, idx - 2) : idx + 3]


def validate_operands(text: str) -> None:
    """Reject operators with a missing left or right operand."""
    for idx, ch in enumerate(text):
        prev = text[idx - 1] if idx > 0 else ""
        nxt = text[idx + 1] if idx + 1 < len(text) else ""
        if ch in BINARY_OPERATORS:
            if not prev or prev in "(!" or prev in BINARY_OPERATORS:
                raise ParseError(
                    f"Operator '{ch}' is missing its left operand.",
                    fragment=_snippet(text, idx),
                    processed=text,
                )
            if not nxt or nxt == ")" or nxt in BINARY_OPERATORS:
                raise ParseError(
                    f"Operator '{ch}' is missing its right operand.",
                    fragment=_snippet(text, idx),
                    processed=text,
                )
        elif ch == "!":
            if not nxt or nxt == ")" or nxt in BINARY_OPERATORS:
                raise ParseError(
                    "NOT is missing its operand.",
                    fragment=_snippet(text, idx),
                    processed=text,
                )


def insert_implicit_multiplication(text: str) -> str:
    for _ in range(MAX_IMPLICIT_PASSES):
        updated = _IMPLICIT_RE.sub(r"\1*", text)
        if updated == text:
            break
        text = updated
    return text


def check_parentheses(text: str) -> None:
    depth = 0
    for idx, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise ParseError(
                    "Unmatched closing parenthesis.",
                    fragment=_snippet(text, idx),
                    processed=text,
                )
    if depth:
        raise ParseError("Unclosed parenthesis.", fragment="(", processed=text)


def tokenize(text: str) -> List[str]:
    tokens: List[str] = []
    for ch in text:
        if ch.isascii() and (ch.isalpha() or ch in "01()!" or ch in BINARY_OPERATORS):
            tokens.append(ch)
        else:
            raise ParseError(f"Unexpected character {ch!r}.", fragment=ch, processed=text)
    return tokens


class _DescentParser:
    def __init__(self, tokens: List[str], processed: str) -> None:
        self.tokens = tokens
        self.processed = processed
        self.pos = 0

    def peek(self) -> str:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else ""

    def advance(self) -> str:
        token = self.peek()
        self.pos += 1
        return token

    def error(self, message: str) -> ParseError:
        fragment = "".join(self.tokens[max(0, self.pos - 2) : self.pos + 3])
        return ParseError(message, fragment=fragment or None, processed=self.processed)

    def parse(self) -> BooleanExpression:
        expr = self.parse_level(0)
        if self.pos != len(self.tokens):
            raise self.error(f"Unexpected token '{self.peek()}'.")
        return expr

    # Binary levels from loosest to tightest binding.
    LEVELS = ("+#", "^=", "*@")

    def parse_level(self, level: int) -> BooleanExpression:
        if level == len(self.LEVELS):
            return self.parse_unary()
        operators = self.LEVELS[level]
        left = self.parse_level(level + 1)
        while self.peek() and self.peek() in operators:
            node = _BINARY_NODES[self.advance()]
            right = self.parse_level(level + 1)
            left = node(left, right)
        return left

    def parse_unary(self) -> BooleanExpression:
        if self.peek() == "!":
            self.advance()
            return Not(self.parse_unary())
        return self.parse_primary()

    def parse_primary(self) -> BooleanExpression:
        token = self.advance()
        if token == "(":
            expr = self.parse_level(0)
            if self.advance() != ")":
                raise self.error("Expected ')'.")
            return expr
        if token in ("0", "1"):
            return Constant(token == "1")
        if token.isalpha():
            return Variable(token)
        if not token:
            raise self.error("Unexpected end of expression.")
        raise self.error(f"Unexpected token '{token}'.")


def prepare(text: str) -> str:
    """Run every string-level stage and return the fully processed form."""
    processed = normalize(text)
    validate_operands(processed)
    processed = insert_implicit_multiplication(processed)
    check_parentheses(processed)
    return processed


def parse(text: str) -> BooleanExpression:
    """Parse ``text`` into an expression tree or raise :class:`ParseError`."""
    processed = prepare(text)
    logger.debug("parsing %r as %r", text, processed)
    return _DescentParser(tokenize(processed), processed).parse()


__all__ = [
    "ASCII_ALIASES",
    "LATEX_COMMANDS",
    "UNICODE_SYMBOLS",
    "WORD_OPERATORS",
    "check_parentheses",
    "detect_format",
    "insert_implicit_multiplication",
    "normalize",
    "parse",
    "prepare",
    "tokenize",
    "validate_operands",
]
