r"""
cmdweave type registry.

Overview
- Type: a named value kind carrying a validation pattern, a default value, a
  converter and a greedy marker. Instances are immutable and shared by
  reference across every Option/Argument that uses them.
- Built-in kinds: "string", "string*" (greedy), "number", "boolean", "switch".
- lookup(name) resolves a kind by name (unknown names fall back to "string");
  register(type) adds a custom kind.

Validation
- Type.test(candidate) is a pure predicate using *search* semantics over the
  compiled pattern. Built-in patterns are anchored; custom patterns are free
  to match a fragment. Anything that is not a string (None, Unset, ...) never
  matches, which forces the caller back to the type default.

Quick example:
    >>> from cmdweave.registry import Type, register, lookup
    >>> register(Type("hex", r"^[0-9a-f]+$", 0, lambda raw: int(raw, 16)))
    type(name='hex', pattern='^[0-9a-f]+$', default=0, greedy=False)
    >>> lookup("hex").convert("ff")
    255
"""
import re
from types import MappingProxyType

from .utils import *


def _identity(raw, /):
    return raw


def _number(raw, /):
    # "^[0-9]*$" admits the empty string, which reads as zero.
    return int(raw) if raw else 0


def _boolean(raw, /):
    return raw.lower() in ("1", "true", "yes")


def _presence(raw, /):
    return True


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize Type metadata in place.

    Rules
    - name: non-empty string after trimming.
    - pattern: str (compiled here) or an already compiled re.Pattern.
    - converter: callable; Unset means identity.
    - default: any value, not validated.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    if isinstance(pattern := metadata["pattern"], str):
        try:
            pattern = re.compile(pattern)
        except re.error as error:
            raise ValueError(f"{cls.__typename__} 'pattern' is not a valid expression: {error}") from None
    elif not isinstance(pattern, re.Pattern):
        raise TypeError(f"{cls.__typename__} 'pattern' must be a string or a compiled expression")
    metadata["pattern"] = pattern

    if not callable(converter := coalesce(metadata["converter"], _identity)):
        raise TypeError(f"{cls.__typename__} 'converter' must be callable")
    metadata["converter"] = converter


class Type(metaclass=SpecType):
    """
    Named value kind used by options and positional arguments.

    Properties
    - name: registry key.
    - pattern: compiled expression accepted values must match.
    - default: value assigned to an option whose value could not be consumed.
    - converter: callable turning the raw token into the stored value.
    - greedy: when True, an option of this type consumes the next token even
      if that token looks like another option name (e.g., negative numbers).
    """
    __introspectable__ = (
        "name",
        "pattern",
        "default",
        "converter",
        "greedy",
    )
    __displayable__ = (
        "name",
        "pattern",
        "default",
        "greedy",
    )

    def __new__(cls, name, /, pattern=r"[\s\S]*", default="", converter=Unset, *, greedy=False):
        metadata = {
            "name": name,
            "pattern": pattern,
            "default": default,
            "converter": converter,
            "greedy": bool(greedy),
        }
        _sanitize_metadata(cls, metadata)
        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __setattr__(self, name, value, /):
        if not name.startswith("_") or hasattr(self, name):
            raise AttributeError(f"{type(self).__typename__} is immutable")
        object.__setattr__(self, name, value)

    def __rich_repr__(self):
        yield "name", self.name
        yield "pattern", self.pattern.pattern
        yield "default", self.default
        yield "greedy", self.greedy

    def test(self, candidate, /):
        """
        Return whether `candidate` is an acceptable raw value for this type.
        """
        if not isinstance(candidate, str):
            return False
        return self._pattern.search(candidate) is not None

    def convert(self, raw, /):
        return self._converter(raw)


_registry = {}


def register(type, /):
    """
    Add a custom Type to the registry and return it.

    Errors
    - TypeError when the argument is not a Type.
    - ValueError when a type with the same name is already registered
      (built-in kinds are process-wide constants and are never replaced).
    """
    if not isinstance(type, Type):
        raise TypeError("register() argument must be a type")
    if _registry.setdefault(type.name, type) is not type:
        raise ValueError(f"type name {type.name!r} is already registered")
    return type


def lookup(type, /):
    """
    Resolve a Type by name; Type instances pass through unchanged.

    Unknown names fall back to the "string" type.
    """
    if isinstance(type, Type):
        return type
    if not isinstance(type, str):
        raise TypeError("lookup() argument must be a type or a type name")
    return _registry.get(type, _registry["string"])


def types():
    """
    Return a read-only view of the registry (name -> Type).
    """
    return MappingProxyType(_registry)


STRING = register(Type("string"))
GREEDY_STRING = register(Type("string*", greedy=True))
NUMBER = register(Type("number", r"^[0-9]*\Z", 0, _number))
BOOLEAN = register(Type("boolean", re.compile(r"^(1|0|true|false|yes|no)\Z", re.IGNORECASE), True, _boolean))
SWITCH = register(Type("switch", r"^\Z", True, _presence))


__all__ = (
    "Type",
    "register",
    "lookup",
    "types",
    "STRING",
    "GREEDY_STRING",
    "NUMBER",
    "BOOLEAN",
    "SWITCH",
)
