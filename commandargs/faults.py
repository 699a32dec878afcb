"""
Commandargs faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain so logs and searches stay predictable.
- CommandException / ArgumentWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).

Severity model
- Programmer errors (a nameless argument, a lookup of an unregistered name, a parse
  without any invocation tokens) are exceptions. They are always fatal: raised as-is
  outside shell mode, rendered then exited with status 1 inside shell mode.
- Argument faults (missing required flag, too few values, conversion failure, invalid
  choice) are warnings. They never stop the parse: the engine surfaces them and
  records a False result for the argument, leaving the decision to the caller.

Integration
- The engine and the registry build faults with a title/code/hint and call
  trigger(fault, **ctx). In non-shell mode, exceptions are raised and warnings go
  through the warnings module; in shell mode, both are rendered via rich on stderr.
"""
import inspect
import sys
import warnings
from abc import ABC
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
    canonical fault codes (stable identifiers).

    grouping
    - programmer errors (21xxx)
      • MISSING_NAME, UNKNOWN_ARGUMENT, MISSING_TOKENS
    - argument faults, reported as warnings (22xxx)
      • MISSING_REQUIRED, NOT_ENOUGH_VALUES, CONVERSION_FAILED, INVALID_CHOICE
    """
    # --- programmer errors (21xxx) ---
    MISSING_NAME          = 21101
    UNKNOWN_ARGUMENT      = 21102
    MISSING_TOKENS        = 21103

    # --- argument faults (22xxx) ---
    MISSING_REQUIRED      = 22111
    NOT_ENOUGH_VALUES     = 22112
    CONVERSION_FAILED     = 22121
    INVALID_CHOICE        = 22122

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    build the rich renderable shared by errors and warnings.

    layout
    - header: "[ <prog> — <code> | <Title> ]"
    - body:   the message, then " → <hint>" on its own line.
    - fancy:  header becomes the title of a left-aligned panel.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    tool = options.get("tool")
    prog = text(getattr(main, "__prog__", getattr(tool, "name", "commandargs")), "prog-name")

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if code else "-", "code"),
        " | ",
        text(str(options.get("title", "fault")).title(), "title"),
        " ]"
    )
    message = text(fault.message, "message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(options.get("hint", ""), "hint"))

    if options.get("fancy", False):
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*((message,) if message else ()))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingNameError(CommandException, TypeError): ...
class UnknownArgumentError(CommandException, KeyError):
    def __str__(self):
        return str(self.message)
class MissingTokensError(CommandException, ValueError): ...


class ArgumentWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*((message,) if message else ()))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingRequiredWarning(ArgumentWarning): ...
class NotEnoughValuesWarning(ArgumentWarning): ...
class ConversionFailedWarning(ArgumentWarning): ...
class InvalidChoiceWarning(ArgumentWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise exceptions are
      raised and warnings are emitted through the warnings module.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, and any other context the
      reporter may want to keep (argument, input, index, value, exception).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandException",
    "MissingNameError",
    "UnknownArgumentError",
    "MissingTokensError",
    "ArgumentWarning",
    "MissingRequiredWarning",
    "NotEnoughValuesWarning",
    "ConversionFailedWarning",
    "InvalidChoiceWarning",
    "trigger",
)
