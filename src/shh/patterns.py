"""Naming pattern resolution.

A naming pattern is a path template such as ``./env/.env.[name]`` holding
exactly one ``[name]`` placeholder and optional ``*`` / ``**`` wildcards.
From the same pattern this module derives:

- a permissive glob used to discover candidate files,
- a strict, anchored matcher that recovers the environment name from a path,
- the concrete path of an environment with a given name.

The pattern is walked once by a small tokenizer and every output is built
from that token stream, so the translation of ``**`` can never be corrupted
by the translation of ``*``.
"""

import os
import re
from collections.abc import Callable
from enum import Enum
from typing import NamedTuple

from icecream import ic

from shh.exceptions import PatternError

PLACEHOLDER = "[name]"

_NAME_GROUP = "name"
_NAME_REGEX = rf"(?P<{_NAME_GROUP}>[a-zA-Z0-9]+)"
_MULTI_WILDCARD_REGEX = r".+"
_SINGLE_WILDCARD_REGEX = r"[^ /]+"


class TokenKind(Enum):
    """Kinds of tokens found in a naming pattern."""

    LITERAL = "literal"
    PLACEHOLDER = "placeholder"
    MULTI_WILDCARD = "multi_wildcard"
    SINGLE_WILDCARD = "single_wildcard"


class Token(NamedTuple):
    """A single classified piece of a naming pattern."""

    kind: TokenKind
    text: str


def tokenize(pattern: str) -> list[Token]:
    """Split a naming pattern into classified tokens.

    Adjacent literal characters are merged into a single literal token.

    Args:
        pattern: The naming pattern.

    Returns:
        The tokens in pattern order.

    """
    tokens: list[Token] = []
    literal: list[str] = []
    i = 0

    def flush() -> None:
        if literal:
            tokens.append(Token(TokenKind.LITERAL, "".join(literal)))
            literal.clear()

    while i < len(pattern):
        if pattern.startswith(PLACEHOLDER, i):
            flush()
            tokens.append(Token(TokenKind.PLACEHOLDER, PLACEHOLDER))
            i += len(PLACEHOLDER)
        elif pattern.startswith("**", i):
            flush()
            tokens.append(Token(TokenKind.MULTI_WILDCARD, "**"))
            i += 2
        elif pattern[i] == "*":
            flush()
            tokens.append(Token(TokenKind.SINGLE_WILDCARD, "*"))
            i += 1
        else:
            literal.append(pattern[i])
            i += 1

    flush()
    return tokens


def _count_placeholders(tokens: list[Token]) -> int:
    return sum(1 for token in tokens if token.kind is TokenKind.PLACEHOLDER)


def _glob_fragment(token: Token) -> str:
    match token.kind:
        case TokenKind.PLACEHOLDER:
            return "*"
        case _:
            return token.text


def _regex_fragment(token: Token) -> str:
    match token.kind:
        case TokenKind.PLACEHOLDER:
            return _NAME_REGEX
        case TokenKind.MULTI_WILDCARD:
            return _MULTI_WILDCARD_REGEX
        case TokenKind.SINGLE_WILDCARD:
            return _SINGLE_WILDCARD_REGEX
        case _:
            return re.escape(token.text)


def to_glob(pattern: str) -> str:
    """Build the discovery glob for a naming pattern.

    The placeholder is replaced with a single-segment wildcard; nothing else
    changes. A pattern without placeholder is returned as is and can only
    ever match one fixed file.

    Args:
        pattern: The naming pattern.

    Returns:
        A glob pattern.

    """
    return "".join(_glob_fragment(token) for token in tokenize(pattern))


def to_git_pattern(pattern: str) -> str:
    """Build the glob used in ``.gitattributes`` and ``.gitignore``.

    Git patterns are relative to the repository root and do not accept a
    leading ``./``.

    Args:
        pattern: The naming pattern.

    Returns:
        The discovery glob without a leading ``./``.

    """
    glob = to_glob(pattern)
    while glob.startswith("./"):
        glob = glob[2:]
    return glob


def to_regex(pattern: str, root_dir: str) -> re.Pattern[str]:
    """Compile the name-extracting regular expression for a naming pattern.

    Args:
        pattern: The naming pattern.
        root_dir: Directory relative patterns are resolved against.

    Returns:
        A compiled expression with a ``name`` group, meant for full matching.

    Raises:
        PatternError: If the pattern does not contain exactly one placeholder.

    """
    root = os.path.abspath(root_dir)
    absolute = os.path.abspath(os.path.join(root, pattern))
    # Only the pattern part carries wildcards; the root directory is literal.
    prefix = "" if os.path.isabs(pattern) else os.path.commonpath([root, absolute])
    tokens = tokenize(absolute[len(prefix) :])

    count = _count_placeholders(tokens)
    if count == 0:
        raise PatternError(f"Naming pattern '{pattern}' has no {PLACEHOLDER} placeholder")
    if count > 1:
        raise PatternError(f"Naming pattern '{pattern}' has more than one {PLACEHOLDER} placeholder")

    expression = re.escape(prefix) + "".join(_regex_fragment(token) for token in tokens)
    ic(expression)
    return re.compile(expression)


def to_matcher(pattern: str, root_dir: str) -> Callable[[str], str | None]:
    """Build a function recovering the environment name from a path.

    The returned function answers ``None`` when the path does not conform
    to the pattern. Callers doing discovery must treat that as an error.

    Args:
        pattern: The naming pattern.
        root_dir: Directory relative patterns are resolved against.

    Returns:
        A function mapping an absolute path to a name or ``None``.

    Raises:
        PatternError: If the pattern does not contain exactly one placeholder.

    """
    regex = to_regex(pattern, root_dir)

    def match(path: str) -> str | None:
        found = regex.fullmatch(path)
        return found.group(_NAME_GROUP) if found else None

    return match


def render(pattern: str, name: str) -> str:
    """Substitute the placeholder of a naming pattern with a literal name.

    The name is not validated here.

    Args:
        pattern: The naming pattern.
        name: The environment name.

    Returns:
        The concrete path for the environment.

    Raises:
        PatternError: If the pattern has no placeholder.

    """
    if PLACEHOLDER not in pattern:
        raise PatternError(f"Naming pattern '{pattern}' has no {PLACEHOLDER} placeholder")
    return pattern.replace(PLACEHOLDER, name)
