"""
cmdweave faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- CommandException: base type that carries a message + options and knows how to
  render itself in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault through its default sink.
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages where a position exists (“at second position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- Command nodes build faults during parsing/dispatch and call
  Command.trigger(fault, **ctx), which merges node context (tool, logger,
  colorful, fancy) and hands the fault to the node's error sink.
- The default sink prints the fault to the node logger and never raises; a custom
  sink installed with Command.error(...) receives the fault instance instead.
- InvalidArgumentsError is a programming error: it is raised directly by
  Command.parse and never routed through a sink.
"""
import os
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - usage (1100x)
      • INVALID_ARGUMENTS: parse() called without an argument sequence
    - routing (1110x)
      • INVALID_COMMAND
    - options (1111x)
      • INVALID_OPTION
    - positionals (1112x)
      • INVALID_ARGUMENT
    - delegated errors (1113x)
      • DELEGATED_ERROR
    - dispatch (1115x)
      • NO_PROCESSING

    normalize() lets the host remap codes to friendlier labels while keeping
    the numeric values stable.
    """
    # --- usage errors (11xxx) ---
    INVALID_ARGUMENTS = 11001

    # --- routing errors (11xxx) ---
    INVALID_COMMAND   = 11101

    # --- option errors (11xxx) ---
    INVALID_OPTION    = 11112

    # --- positional errors (11xxx) ---
    INVALID_ARGUMENT  = 11121

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR   = 11131

    # --- dispatch errors (11xxx) ---
    NO_PROCESSING     = 11151

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base class of every parser fault.

    - message: one lowercase sentence (also the str() of the exception).
    - options: read-only mapping of rendering/context values, typically
      title, code, hint, input, index, suggestions, tool, logger, colorful, fancy.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*((message,) if message is not Unset else ()))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        tool = self.options.get("tool")
        label = getattr(getattr(tool, "root", None), "name", None) or os.path.basename(sys.argv[0])
        prog = text(getattr(main, "__prog__", label), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renderables = [message]
        if hint := self.options.get("hint"):
            renderables.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renderables), title=header, title_align="left")

        return Group(header, *renderables)

    def __trigger__(self):
        """
        default sink: print to the node logger (stderr console when unknown).
        """
        self.options.get("logger", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidArgumentsError(CommandException, TypeError): ...
class InvalidCommandError(CommandException): ...
class InvalidOptionError(CommandException): ...
class InvalidArgumentError(CommandException): ...
class NoProcessingError(CommandException): ...


class DelegatedCommandError(CommandException):
    """
    wraps an exception raised by an action handler; the original exception is
    kept in options["exception"] and chained as __cause__.
    """

    def __init__(self, message=Unset, /, **options):
        super().__init__(message, **options)
        self.__cause__ = options.get("exception")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.

    typical options
    - tool, logger, colorful, fancy, title, code, hint, input, index,
      suggestions, docs.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings. when
    not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "InvalidArgumentsError",
    "InvalidCommandError",
    "InvalidOptionError",
    "InvalidArgumentError",
    "NoProcessingError",
    "DelegatedCommandError",
    "FaultCode",
    "trigger",
    "getdoc",
)
