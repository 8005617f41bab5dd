"""
cmdweave command layer: build, compose, and run command trees.

What this module provides
- Command: a tree node holding its own options, positional arguments and
  actions plus child commands. It owns the parse algorithm:
  • sub-command detection and recursive delegation to the matching child;
  • local parse (tokenize, short-option expansion, option/positional walk);
  • alias normalization and parameter-map assembly;
  • dispatch of the eligible actions (see cmdweave.dispatching).
- invoke(command, prompt): convenience runner accepting a shell-like string
  or an iterable of tokens.

Core ideas
- Fluent builder: every builder call returns the node (command() returns the
  new child), so a whole tree is declared in one expression.
- Fail fast: an unknown command, an unknown option or a positional rejected by
  its type aborts the whole parse; no partial state is kept and the fault goes
  to the node's error sink.
- Live parameter map: has/get/set read and write the same objects the
  handlers receive, so argv/options/params never drift apart.

Quick start
    from cmdweave import Command

    def greet(name="world", _1=None, tab=0):
        print("hello", _1 or name, "tab:", tab)

    (Command()
        .version("1.0.0")
        .help("usage: app [-t N] NAME")
        .option(["-t", "--tab"], "number")
        .arguments("string")
        .action(greet, ["$1"])
        .ready())

Parameter map
- command/$command/cmd/$cmd/cmd0/$0: the resolved command label;
- self/$self/$this: the command node itself;
- argv/$argv and argc/$argc: positional list and count;
- $1..$n: positionals (1-indexed);
- one key per option alias without its dashes. Reserved keys always win
  over options that happen to share their name.

See also
- cmdweave.arguments for Option/Argument/Action semantics.
- cmdweave.faults for fault codes and rendering behavior.
"""
import difflib
import os.path
import re
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from .arguments import Option, Argument, Action
from .dispatching import dispatch, adispatch
from .faults import *
from .tokens import Token, TokenKind, tokenize, expand, isoption, trim
from .utils import *

console = Console()

_COMMAND = re.compile(r"^[a-z0-9]+", re.IGNORECASE)
_POSITIONAL = re.compile(r"\$([0-9]+)")

# parameter-map keys owned by the parser, grouped by the value they carry
_RESERVED = {
    "label": ("command", "$command", "cmd", "$cmd", "cmd0", "$0"),
    "node": ("self", "$self", "$this"),
    "argv": ("argv", "$argv"),
    "argc": ("argc", "$argc"),
}


def _reserved(name, /):
    """
    Return whether `name` is a parser-owned parameter-map key ("$N" included).
    """
    return any(name in names for names in _RESERVED.values()) or _POSITIONAL.fullmatch(name) is not None


def _sanitize_names(cls, names, /):
    """
    Internal: normalize command names into a tuple of strings/compiled patterns.
    """
    if names is Unset:
        return ()
    if isinstance(names, str | re.Pattern):
        names = [names]
    elif not isinstance(names, Iterable):
        raise TypeError(f"{cls.__typename__} names must be strings or compiled expressions")

    sanitized = []
    for name in names:
        if isinstance(name, str):
            if not (name := name.strip()):
                raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not isinstance(name, re.Pattern):
            raise TypeError(f"{cls.__typename__} names must be strings or compiled expressions")
        sanitized.append(name)
    return tuple(sanitized)


def _sanitize_argv(command, argv, /):
    """
    Internal: validate the invocation sequence handed to parse().

    A missing sequence is a programming error and is raised, not routed.
    """
    fault = InvalidArgumentsError(
        "invalid arguments: parse() expects a sequence of strings",
        title="invalid arguments",
        code=FaultCode.INVALID_ARGUMENTS,
        hint="pass the invocation words, program path first (e.g., [sys.executable, *sys.argv])",
        docs=getdoc(FaultCode.INVALID_ARGUMENTS),
        tool=command,
    )
    if argv is Unset or argv is None or isinstance(argv, str) or not isinstance(argv, Iterable):
        raise fault
    argv = list(argv)
    if not all(isinstance(item, str) for item in argv):
        raise fault
    return argv


def _strorfile(text, /):
    """
    String-or-file rule: "@path" reads the file (UTF-8); on failure the
    literal text, "@" included, is used.
    """
    if not isinstance(text, str) or not text.startswith("@"):
        return text
    try:
        with open(text[1:], encoding="utf-8") as file:
            return file.read()
    except OSError:
        return text


class Command(metaclass=SpecType):
    """
    Command tree node.

    Declared state (read-only views)
    - names: strings or compiled expressions this node answers to as a sub-command.
    - parent/root: a node created without a parent is its own parent and root.
    - children, switches (options), cardinals (positional arguments), actions.
    - logger: rich Console-like object used by version/help and the default sink.
    - colorful/fancy: fault rendering flags.

    Inheritance
    - children copy the logger, the error sink and the rendering flags of
      their parent at construction time.

    Parsed state (recomputed, not merged, on every parse)
    - name, argv, argc, options, params.
    """
    __introspectable__ = (
        "names",
        "parent",
        "children",
        "switches",
        "cardinals",
        "actions",
        "logger",
        "colorful",
        "fancy",
    )

    __displayable__ = (
        "names",
        "children",
        "switches",
        "cardinals",
        "actions",
    )

    def __new__(cls, names=Unset, /, parent=Unset, *, logger=Unset, colorful=Unset, fancy=Unset):
        """
        Construct a node.

        Parameters
        - names: str | re.Pattern | Iterable[str | re.Pattern] | Unset
        - parent: Command | Unset
          when Unset the node is a root (its own parent).
        - logger, colorful, fancy: inherited from the parent when Unset.

        The node is not attached to the parent here; use parent.command(...)
        to create attached children.
        """
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")
        self = super().__new__(cls)
        self._names = _sanitize_names(cls, names)
        self._parent = coalesce(parent, self)
        self._root = self if parent is Unset else parent.root
        self._children = []
        self._switches = []
        self._cardinals = []
        self._actions = []
        self._helper = None
        self._fallback = getattr(parent, "_fallback", None)
        self._logger = coalesce(logger, getattr(parent, "logger", console))
        self._colorful = bool(coalesce(colorful, getattr(parent, "colorful", False)))
        self._fancy = bool(coalesce(fancy, getattr(parent, "fancy", False)))
        self._origin = []
        self._name = None
        self._argv = []
        self._options = {}
        self._params = {}
        return self

    @property
    def root(self):
        return self._root

    @property
    def path(self):
        """
        Return the ancestry from root to this node as a tuple.
        """
        path = [command := self]
        while not command.isroot():
            path.append(command := command._parent)
        return tuple(reversed(path))

    @property
    def name(self):
        return self._name

    @property
    def argv(self):
        return self._argv

    @property
    def argc(self):
        return len(self._argv)

    @property
    def options(self):
        return self._options

    @property
    def params(self):
        return self._params

    def isroot(self):
        return self._root is self

    def matches(self, token, /):
        """
        Return whether `token` names this node (equality for strings, search
        for compiled expressions).
        """
        return any(
            name == token if isinstance(name, str) else name.search(token) is not None
            for name in self._names
        )

    # ── Builder ─────────────────────────────────────────────────────────────

    def command(self, names, /):
        """
        Create a child node under this node and return the child.
        """
        child = type(self)(names, self)
        for name in child._names:
            if isinstance(name, str) and any(peer.matches(name) for peer in self._children):
                raise ValueError(f"{self.__typename__} name {name!r} is already in use")
        self._children.append(child)
        return child

    def option(self, names, type="string", /):
        """
        Declare an option; aliases must not overlap with options already
        declared on this node.
        """
        option = Option(names, type)
        for name in option.names:
            if self._lookup(name) is not None:
                raise ValueError(f"{self.__typename__} option name {name!r} is already in use")
        self._switches.append(option)
        return self

    def arguments(self, *types):
        """
        Declare the positional slots (replaces previous declarations).
        A single list/tuple of types is accepted as well.
        """
        if len(types) == 1 and isinstance(types[0], list | tuple):
            types, = types
        self._cardinals = [Argument(type) for type in types]
        return self

    def action(self, handler, /, required=Unset):
        self._actions.append(Action(handler, required))
        return self

    def error(self, handler, /):
        """
        Install the error sink for this node (children created afterwards inherit it).
        """
        if not callable(handler):
            raise TypeError(f"{self.__typename__} error handler must be callable")
        self._fallback = handler
        return self

    def console(self, logger, /):
        self._logger = logger or self._logger
        return self

    def _printer(self, text, name):
        @rename(name)
        def printer():
            self._logger.print(Text(str(_strorfile(text) or "unknown")))
            return False
        return printer

    def version(self, text, /):
        """
        Register -v/--version: prints `text` (or "@file" contents) and stops dispatch.
        A callable is used as the handler directly.
        """
        handler = text if callable(text) else self._printer(text, "version")
        self.option(["-v", "--version"], "switch")
        return self.action(handler, ["version"])

    def help(self, text, /):
        """
        Register -h/--help: prints `text` (or "@file" contents) and stops dispatch.
        The same handler runs when no other action is eligible.
        """
        handler = text if callable(text) else self._printer(text, "help")
        self.option(["-h", "--help"], "switch")
        self.action(handler, ["help"])
        self._helper = self._actions[-1]
        return self

    def ready(self, argv=Unset, /):
        """
        Parse the invocation sequence on the root node; defaults to
        [sys.executable, *sys.argv].
        """
        return self._root.parse(coalesce(argv, [sys.executable, *sys.argv]))

    # ── Faults ──────────────────────────────────────────────────────────────

    def trigger(self, fault, /, **options):
        """
        Route a fault through this node's error sink.

        The node context (tool, logger, colorful, fancy) is merged into the
        fault options; explicit options win.
        """
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = fault.__replace__(**({
            "tool": self,
            "logger": self._logger,
            "colorful": self._colorful,
            "fancy": self._fancy,
        } | options))
        if self._fallback is not None:
            return self._fallback(fault)
        trigger(fault)

    def _label(self):
        # ancestors keep no name when a child is parsed directly
        return " ".join(str(step.name) for step in self.path if step.name is not None)

    def _route_hint(self, kind, suggestions):
        route = self._label()
        try:
            return "did you mean %r? run '%s' with a valid %s" % (suggestions[0], route, kind)
        except IndexError:
            if self._helper is not None:
                return "run '%s --help' to see the valid %ss" % (route, kind)
            return "check the spelling of the %s" % kind

    def _unmatched(self):
        route = self._label()
        return self.trigger(NoProcessingError(
            "no action can process %r with the given arguments" % route,
            title="no processing",
            code=FaultCode.NO_PROCESSING,
            input=route,
            hint="check the required arguments and options of '%s'" % route,
            docs=getdoc(FaultCode.NO_PROCESSING),
        ))

    # ── Parsing ─────────────────────────────────────────────────────────────

    def _lookup(self, name, /):
        for option in self._switches:
            if option.has(name):
                return option
        return None

    def _known(self, name, /):
        return self._lookup(name) is not None

    def _route(self):
        """
        Return the child matching the sub-command slot, a fault, or None when
        there is no sub-command to route to.
        """
        try:
            candidate = self._origin[1]
        except IndexError:
            return None
        if not self._children or isoption(candidate):
            return None

        if _COMMAND.match(candidate):
            for child in self._children:
                if child.matches(candidate):
                    return child

        suggestions = difflib.get_close_matches(candidate, [
            name for child in self._children for name in child._names if isinstance(name, str)
        ], 5)
        return InvalidCommandError(
            "unknown command %r at %s position" % (candidate, ordinal(1)),
            title="invalid command",
            code=FaultCode.INVALID_COMMAND,
            input=candidate,
            index=1,
            suggestions=suggestions,
            hint=self._route_hint("command", suggestions),
            docs=getdoc(FaultCode.INVALID_COMMAND),
        )

    def _parseargs(self):
        """
        Local parse of self._origin; returns a fault on failure, None on success.

        Token index 0 is always the command label just consumed, so the walk
        starts at 1.
        """
        tokens = expand([Token(self._origin[0]), *tokenize(self._origin[1:])], self._known)
        argv = []
        options = {}

        index = 1
        while index < len(tokens):
            token = tokens[index]
            if token.kind == TokenKind.OPTION_NAME:
                if (option := self._lookup(token.value)) is None:
                    suggestions = difflib.get_close_matches(token.value, [
                        name for option in self._switches for name in option.names
                    ], 5)
                    return InvalidOptionError(
                        "unknown option %r at %s position" % (token.value, ordinal(index)),
                        title="invalid option",
                        code=FaultCode.INVALID_OPTION,
                        input=token.value,
                        index=index,
                        suggestions=suggestions,
                        hint=self._route_hint("option", suggestions),
                        docs=getdoc(FaultCode.INVALID_OPTION),
                    )
                following = tokens[index + 1] if index + 1 < len(tokens) else None
                if (
                        following is None or
                        (following.kind == TokenKind.OPTION_NAME and not option.type.greedy) or
                        not option.test(following.value)
                ):
                    # leave the following token for the next iteration
                    options[token.value] = option.type.default
                else:
                    options[token.value] = option.convert(following.value)
                    index += 1
            else:
                if len(argv) < len(self._cardinals) and not self._cardinals[len(argv)].test(token.value):
                    return InvalidArgumentError(
                        "invalid argument %r at %s position" % (token.value, ordinal(len(argv) + 1)),
                        title="invalid argument",
                        code=FaultCode.INVALID_ARGUMENT,
                        input=token.value,
                        index=len(argv) + 1,
                        hint="expected a %s value" % self._cardinals[len(argv)].type.name,
                        docs=getdoc(FaultCode.INVALID_ARGUMENT),
                    )
                argv.append(token.value)
            index += 1

        normalized = {}
        for name, value in options.items():
            normalized[trim(name)] = value
            normalized.update(dict.fromkeys(self._lookup(name).keys, value))

        self._argv = argv
        self._options = normalized
        self._params = self._assemble()

    def _assemble(self):
        params = (
            dict.fromkeys(_RESERVED["label"], self._name) |
            dict.fromkeys(_RESERVED["node"], self) |
            dict.fromkeys(_RESERVED["argv"], self._argv) |
            dict.fromkeys(_RESERVED["argc"], len(self._argv))
        )
        params.update(("$%d" % index, value) for index, value in enumerate(self._argv, 1))
        params.update((name, value) for name, value in self._options.items() if not _reserved(name))
        return params

    def _reset(self):
        self._origin = []
        self._name = None
        self._argv = []
        self._options = {}
        self._params = {}

    def _descend(self, argv):
        """
        Parse down the tree; return the node that parsed locally, or None.
        """
        origin = _sanitize_argv(self, argv)[1:]
        self._reset()
        if not origin:
            return None
        self._origin = origin
        self._name = os.path.basename(origin[0])

        match self._route():
            case Command() as child:
                return child._descend(origin)
            case CommandException() as fault:
                self.trigger(fault)
                return None

        if (fault := self._parseargs()) is not None:
            self.trigger(fault)
            return None
        return self

    def parse(self, argv=Unset, /):
        """
        Parse an invocation sequence and dispatch the eligible actions.

        Parameters
        - argv: sequence of strings; argv[0] is the program path and is
          dropped, argv[1] is this node's label.

        Returns
        - the node that performed the local parse (a sub-command when one
          matched), or None when parsing failed or there was nothing to parse.

        Raises
        - InvalidArgumentsError when argv is missing or not a sequence of strings.
        """
        if (node := self._descend(argv)) is not None:
            dispatch(node)
        return node

    async def aparse(self, argv=Unset, /):
        """
        Coroutine twin of parse(): asynchronous handlers are awaited in the
        running event loop.
        """
        if (node := self._descend(argv)) is not None:
            await adispatch(node)
        return node

    # ── Accessors ───────────────────────────────────────────────────────────

    def has(self, name, /):
        if not isinstance(name, str):
            return False
        return trim(name) in self._params

    def get(self, name, default=None, /):
        if not self.has(name):
            return default
        return self._params[trim(name)]

    def set(self, name, value, /):
        """
        Write a parameter in place.

        - "$N" (N >= 1) writes positional N; N == argc + 1 appends.
        - anything else writes the option value under every alias of the
          matching declared option (or under the name alone). Parser-owned
          keys ("argv", "argc", "$0", ...) keep their parameter-map entry;
          writing one that no declared option carries is a KeyError.
        """
        if not isinstance(name, str):
            raise TypeError(f"{self.__typename__} parameter name must be a string")
        name = trim(name)
        if (match := _POSITIONAL.fullmatch(name)) and int(match[1]) > 0:
            if (index := int(match[1]) - 1) < len(self._argv):
                self._argv[index] = value
            elif index == len(self._argv):
                self._argv.append(value)
            else:
                raise IndexError(f"positional {name!r} is out of range")
            self._params.update(
                {name: value} |
                dict.fromkeys(_RESERVED["argv"], self._argv) |
                dict.fromkeys(_RESERVED["argc"], len(self._argv))
            )
            return self

        option = self._lookup("-" + name) or self._lookup("--" + name)
        if option is None and _reserved(name):
            raise KeyError(f"parameter {name!r} is reserved")
        for key in (option.keys if option else (name,)):
            self._options[key] = value
            if not _reserved(key):
                self._params[key] = value
        return self


def invoke(command, prompt=Unset, /):
    """
    Convenience runner for commands.

    Parameters
    - command: the Command to parse with.
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).

    The program path and program label slots are filled in: the label is
    __main__.__prog__ when defined, else the script name.

    Returns
    - whatever Command.parse returns.
    """
    if not isinstance(command, Command):
        raise TypeError("invoke() first argument must be a command")

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() argument must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() argument must be a string or an iterable of strings")

    label = getattr(__import__("__main__"), "__prog__", os.path.basename(sys.argv[0]))
    return command.parse([sys.executable, label, *tokens])


# shared root for applications that declare a single command tree
cmdline = Command()


__all__ = (
    "Command",
    "invoke",
    "cmdline",
)
