"""
cmdweave dispatch engine.

After a successful parse, a command node hands its parameter map here:
- select(command) picks the eligible actions, in registration order;
- inject(action, params) maps each handler parameter to a parameter-map
  value by name (see arguments.keys for the spelling rules);
- dispatch(command) / adispatch(command) run the eligible handlers strictly
  one after another.

Stop rules
- a handler returning exactly False stops the loop;
- a handler raising stops the loop and its exception reaches the node's
  error sink wrapped in DelegatedCommandError;
- awaitable results are settled before the stop rule is evaluated.

There is no timeout: a handler that never returns (or an awaitable that never
settles) blocks dispatch indefinitely.
"""
import asyncio
import inspect
from inspect import Parameter

from .arguments import keys, parameters
from .faults import *


def select(command, /):
    """
    Return the actions of `command` whose eligibility condition holds.
    """
    return [action for action in command._actions if action.matches(command)]


def _eligible(command):
    # nothing matched: fall back to the help action when one was registered
    if actions := select(command):
        return actions
    if command._helper is not None:
        return [command._helper]
    return None


def _lookup(params, name, default):
    for key in keys(name):
        if key in params:
            return params[key]
    return default


def inject(action, params, /):
    """
    Build the (args, kwargs) pair used to call `action.handler`.

    - positional-only parameters are passed positionally, the others by keyword;
    - an absent value falls back to the parameter default, else None;
    - variadic parameters receive nothing.
    """
    args = []
    kwargs = {}
    try:
        declared = parameters(action.handler)
    except TypeError:
        return args, kwargs
    for parameter in declared:
        default = None if parameter.default is Parameter.empty else parameter.default
        value = _lookup(params, parameter.name, default)
        if parameter.kind is Parameter.POSITIONAL_ONLY:
            args.append(value)
        else:
            kwargs[parameter.name] = value
    return args, kwargs


def _call(action, params):
    args, kwargs = inject(action, params)
    return action.handler(*args, **kwargs)


def _settle(result):
    # drive an awaitable to completion outside of any running loop
    if not inspect.isawaitable(result):
        return result

    async def wait():
        return await result

    return asyncio.run(wait())


def _delegated(command, action, exception):
    name = getattr(action.handler, "__qualname__", repr(action.handler))
    return command.trigger(DelegatedCommandError(
        "something occurred in action %r of command %r" % (name, command.name),
        title="delegated action error",
        code=FaultCode.DELEGATED_ERROR,
        input=name,
        hint="check additional logs for more details",
        docs=getdoc(FaultCode.DELEGATED_ERROR),
        exception=exception
    ))


def dispatch(command, /):
    """
    Run the eligible actions of a parsed `command` synchronously.

    Awaitable results are settled with asyncio.run(); callers that already run
    an event loop must use adispatch() (through Command.aparse) instead.
    """
    if (actions := _eligible(command)) is None:
        return command._unmatched()
    for action in actions:
        try:
            result = _settle(_call(action, command.params))
        except Exception as exception:
            return _delegated(command, action, exception)
        if result is False:
            break


async def adispatch(command, /):
    """
    Coroutine twin of dispatch(): awaitable results are awaited in the running loop.
    """
    if (actions := _eligible(command)) is None:
        return command._unmatched()
    for action in actions:
        try:
            result = _call(action, command.params)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exception:
            return _delegated(command, action, exception)
        if result is False:
            break


__all__ = (
    "select",
    "inject",
    "dispatch",
    "adispatch",
)
