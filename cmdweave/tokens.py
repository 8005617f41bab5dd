"""
cmdweave tokenizer.

What this module provides
- TokenKind / Token: the typed token stream consumed by the command parser.
- tokenize(strings): classify raw strings into NORMAL / OPTION_NAME /
  OPTION_VALUE tokens, splitting "--name=value" at the first "=".
- expand(tokens, known): short-option cluster expansion ("-xyz" -> "-x -y -z")
  performed only when every single-letter option is known.
- isoption(text) / trim(name): the "looks like an option" test and the
  leading-dash stripper shared by the parser and the accessors.

Notes
- The value half of "--name=value" is always an OPTION_VALUE token, so it is
  never reinterpreted as an option name even when it starts with "-".
- Expansion is all-or-nothing: an ambiguous cluster is left untouched and
  fails later as an unknown option.
"""
import re
from collections import namedtuple
from enum import IntEnum

_OPTION = re.compile(r"^-+([\s\S]*)")


class TokenKind(IntEnum):
    NORMAL = 0
    OPTION_NAME = 1
    OPTION_VALUE = 2


Token = namedtuple("Token", ("value", "kind"), defaults=(TokenKind.NORMAL,))
Token.__doc__ = "Immutable (value, kind) pair produced by tokenize()."


def isoption(text, /):
    """
    Return whether `text` looks like an option (one or more leading dashes).
    """
    return isinstance(text, str) and _OPTION.match(text) is not None


def trim(name, /):
    """
    Strip the leading dashes of an option-looking name.

    Other strings are returned unchanged; so is None.
    """
    if not isoption(name):
        return name
    return _OPTION.match(name)[1]


def tokenize(strings, /):
    """
    Split raw strings into a token list.

    Rules (per string, in order)
    - not option-looking -> one NORMAL token;
    - option-looking and containing "=" -> OPTION_NAME (left of the first "=")
      followed by OPTION_VALUE (right of it);
    - otherwise -> one OPTION_NAME token.
    """
    tokens = []
    for string in strings:
        if not isoption(string):
            tokens.append(Token(string, TokenKind.NORMAL))
            continue
        name, separator, value = string.partition("=")
        tokens.append(Token(name, TokenKind.OPTION_NAME))
        if separator:
            tokens.append(Token(value, TokenKind.OPTION_VALUE))
    return tokens


def _cluster(token, known):
    """
    Return the expanded single-letter names for `token`, or None when the
    token must stay as-is.
    """
    if token.kind != TokenKind.OPTION_NAME or known(token.value):
        return None
    letters = trim(token.value)
    # a repeated letter makes the cluster ambiguous ("-vv")
    if len(letters) < 2 or len(set(letters)) != len(letters):
        return None
    names = ["-" + letter for letter in letters]
    if not all(map(known, names)):
        return None
    return names


def expand(tokens, known, /):
    """
    Expand combined short options.

    Parameters
    - tokens: the token list produced by tokenize().
    - known: callable answering whether an option name is registered.

    Returns
    - a new token list; `tokens` itself is not mutated.
    """
    expanded = []
    for token in tokens:
        if (names := _cluster(token, known)) is None:
            expanded.append(token)
        else:
            expanded.extend(Token(name, TokenKind.OPTION_NAME) for name in names)
    return expanded


__all__ = (
    "TokenKind",
    "Token",
    "isoption",
    "trim",
    "tokenize",
    "expand",
)
