r"""
cmdweave argument specifications.

Overview
- Specs
  • Option: named flag with one or more aliases (e.g., -t/--tab) bound to a Type;
    validates and converts the token that follows it.
  • Argument: positional slot bound to a Type; validates the i-th positional.
  • Action: handler function plus the condition under which it is eligible.

- Required variants (resolved once, when the action is registered)
  • ANY: always eligible ("*").
  • NONE: eligible only when nothing was supplied (False).
  • RequiredNames: eligible when every named parameter is present.

- Parameter keys
  • keys(name) spells a Python identifier as the parameter-map keys it may
    refer to: "_1" -> "$1", "dry_run" -> "dry-run".

Validation highlights
- Option names must start with a dash, may not contain whitespace or "=", and
  must be unique within an option.
- Types are resolved through the registry; unknown type names fall back to
  "string".

Quick example:
    >>> from cmdweave.arguments import Option, Action
    >>> tab = Option(["-t", "--tab"], "number")
    >>> tab.keys
    ('t', 'tab')
    >>> Action(lambda tab: None).required
    required-names(names=['tab'])
"""
import inspect
import re
from collections.abc import Iterable
from inspect import Parameter
from typing import final

from . import registry
from .tokens import trim
from .utils import *


def _sanitize_names(cls, names, /):
    r"""
    Internal: validate and normalize the alias list of an Option.

    Rules
    - a single string is promoted to a one-element list;
    - every name must match r"-+[^\s=-][^\s=]*" (one or more dashes, then no
      whitespace or "=" since the tokenizer splits on it);
    - duplicates are rejected; order is preserved (the first alias is the
      canonical one).
    """
    if isinstance(names, str):
        names = [names]
    elif not isinstance(names, Iterable):
        raise TypeError(f"{cls.__typename__} names must be a string or an iterable of strings")

    sanitized = []
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"-+[^\s=-][^\s=]*", name):
            raise ValueError(f"{cls.__typename__} names must be dash-prefixed option names (got {name!r})")
        elif name in sanitized:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        sanitized.append(name)

    if not sanitized:
        raise TypeError(f"{cls.__typename__} must specify at least one name")
    return tuple(sanitized)


class Option(metaclass=SpecType):
    """
    Named, value-bearing option specification.

    Properties
    - names: aliases in declaration order (e.g., ("-t", "--tab")).
    - type: the resolved registry Type.
    - keys: the aliases without their leading dashes; these are the keys used
      in the parsed options map.
    """
    __introspectable__ = (
        "names",
        "type",
    )

    def __new__(cls, names, /, type="string"):
        self = super().__new__(cls)
        self._names = _sanitize_names(cls, names)
        self._type = registry.lookup(type)
        return self

    @property
    def keys(self):
        return tuple(map(trim, self._names))

    def has(self, name, /):
        return name in self._names

    def test(self, value, /):
        return self._type.test(value)

    def convert(self, value, /):
        return self._type.convert(value)


class Argument(metaclass=SpecType):
    """
    Positional argument specification: the i-th declared Argument validates
    the i-th positional token.
    """
    __introspectable__ = (
        "type",
    )

    def __new__(cls, type="string", /):
        self = super().__new__(cls)
        self._type = registry.lookup(type)
        return self

    def test(self, value, /):
        return self._type.test(value)


def keys(name, /):
    """
    Yield the parameter-map keys a handler parameter name may refer to.

    Order
    - the name itself;
    - "_<digits>" -> "$<digits>" (positionals and the "$0" command label);
    - names with inner underscores -> dashed spelling ("dry_run" -> "dry-run").
    """
    yield name
    if match := re.fullmatch(r"_(\d+)", name):
        yield "$" + match[1]
    elif "_" in name.strip("_"):
        yield name.replace("_", "-")


class Required(metaclass=SpecType):
    """
    Base class of the eligibility variants of an Action.
    """

    def matches(self, command, /):
        raise NotImplementedError


@final
class RequiredAny(Required):
    """
    Always eligible, whatever was parsed.
    """

    def __new__(cls):
        if not hasattr(cls, "_instance"):
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ANY"

    def matches(self, command, /):
        return True


@final
class RequiredNone(Required):
    """
    Eligible only when no positional and no option was parsed.
    """

    def __new__(cls):
        if not hasattr(cls, "_instance"):
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "NONE"

    def matches(self, command, /):
        return command.argc < 1 and len(command.options) < 1


@final
class RequiredNames(Required):
    """
    Eligible when every listed parameter is present in the parameter map.
    """
    __introspectable__ = (
        "names",
    )

    def __new__(cls, names, /):
        self = super().__new__(cls)
        for name in (names := tuple(names)):
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} entries must be strings")
        self._names = names
        return self

    def matches(self, command, /):
        return all(any(map(command.has, keys(name))) for name in self._names)


ANY = RequiredAny()
NONE = RequiredNone()


def parameters(handler, /):
    """
    Return the inspectable parameters of `handler` (variadics excluded).

    Raises TypeError when the signature cannot be inspected.
    """
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        raise TypeError(f"cannot inspect the parameters of {handler!r}") from None
    return [
        parameter for parameter in signature.parameters.values()
        if parameter.kind not in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
    ]


def _resolve_required(handler, required, /):
    match required:
        case Required():
            return required
        case "*":
            return ANY
        case False:
            return NONE
        case UnsetType() | None:
            try:
                # defaults only matter at injection time
                return RequiredNames(parameter.name for parameter in parameters(handler))
            except TypeError:
                raise TypeError("action handler signature cannot be inspected; declare 'required' explicitly") from None
        case str():
            return RequiredNames((required,))
        case Iterable():
            return RequiredNames(required)
    raise TypeError("action 'required' must be '*', False, a name or an iterable of names")


class Action(metaclass=SpecType):
    """
    Handler function plus its eligibility condition.

    Parameters
    - handler: callable receiving parameters injected by name at dispatch.
    - required:
      • "*" / ANY: always run;
      • False / NONE: run only when nothing was supplied;
      • a name or an iterable of names: run when all of them are present;
      • omitted: every named handler parameter (variadics excluded), whether
        or not it declares a default.

    Returning exactly False from the handler stops further actions.
    """
    __introspectable__ = (
        "handler",
        "required",
    )

    def __new__(cls, handler, /, required=Unset):
        if not callable(handler):
            raise TypeError(f"{cls.__typename__} handler must be callable")
        self = super().__new__(cls)
        self._handler = handler
        self._required = _resolve_required(handler, required)
        return self

    def matches(self, command, /):
        return self._required.matches(command)


__all__ = (
    "Option",
    "Argument",
    "Action",
    "Required",
    "RequiredAny",
    "RequiredNone",
    "RequiredNames",
    "ANY",
    "NONE",
    "keys",
    "parameters",
)
