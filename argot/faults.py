"""
Argot faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (routing, options, coercion, declarations).
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves through rich.
- trigger(): central entry point to surface any fault.
- getdoc(): optional description lookup for a code from the host application.

Channels
- Errors are printed on the stderr console, warnings on the stdout console.
  Both consoles travel in the fault options ("stdout"/"stderr"); the module-level
  `stdout` and `stderr` consoles are the fallback.

Modes
- shell=True (default for commands): faults are rendered; the owning command then
  prints help and exits for errors.
- shell=False (embedding): errors are raised and warnings go through warnings.warn.
"""
import copy
import inspect
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset, coalesce

stdout = Console()
stderr = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping
    - routing errors (1110x)
      • MISSING_COMMAND, UNKNOWN_COMMAND
    - option errors (1111x)
      • MISSING_REQUIRED_OPTION
    - coercion errors (1112x)
      • VALUE_COERCION
    - declaration warnings (1210x)
      • DUPLICATE_NAME, DUPLICATE_SHORT, DUPLICATE_VALUE_LABEL, DUPLICATE_REST
    - configuration warnings (1211x)
      • UNCONFIGURED_HANDLER
    - matching warnings (1212x)
      • EXTRANEOUS_POSITIONAL
    """
    # --- routing errors (11xxx) ---
    MISSING_COMMAND         = 11101
    UNKNOWN_COMMAND         = 11102

    # --- option errors (11xxx) ---
    MISSING_REQUIRED_OPTION = 11111

    # --- coercion errors (11xxx) ---
    VALUE_COERCION          = 11121

    # --- declaration warnings (12xxx) ---
    DUPLICATE_NAME          = 12101
    DUPLICATE_SHORT         = 12102
    DUPLICATE_VALUE_LABEL   = 12103
    DUPLICATE_REST          = 12104

    # --- configuration warnings (12xxx) ---
    UNCONFIGURED_HANDLER    = 12111

    # --- matching warnings (12xxx) ---
    EXTRANEOUS_POSITIONAL   = 12121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette):
    """
    Build the rich renderable shared by errors and warnings.

    Layout
        [ <route> | <code> | <Title> ]
        <message>
         → <hint>
    """
    options = fault.options
    colorful = options.get("colorful", False)
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    tool = options.get("tool")
    header = Text.assemble(
        "[ ",
        text(getattr(tool, "route", "") or "argot", "prog-name"),
        " | ",
        text(options["code"].normalize() if "code" in options else "", "code"),
        " | ",
        text(options.get("title", "").title(), "title"),
        " ]",
    )
    renders = [header, text(coalesce(fault.message, ""), "message")]
    if hint := options.get("hint"):
        renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
    return Group(*renders)


class CommandException(Exception):
    """
    Base of every fatal parse fault.

    The message is a single lowercase sentence; options carry the rendering
    context (tool, title, code, hint, shell, colorful, consoles) plus any
    payload the fault wants to expose (input, option, value, exception...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self):
        if not self.options.get("shell", True):
            raise self from None
        self.options.get("stderr", stderr).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingCommandError(CommandException): ...
class UnknownCommandError(CommandException): ...
class MissingRequiredOptionError(CommandException): ...
class ValueCoercionError(CommandException): ...


class CommandWarning(ABC, Warning):
    """
    Base of every non-fatal fault; surfacing one never changes control flow.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self):
        if not self.options.get("shell", True):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        self.options.get("stdout", stdout).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicateNameWarning(CommandWarning): ...
class DuplicateShortWarning(CommandWarning): ...
class DuplicateValueLabelWarning(CommandWarning): ...
class DuplicateRestWarning(CommandWarning): ...
class UnconfiguredHandlerWarning(CommandWarning): ...
class ExtraneousPositionalWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace before triggering.
    - errors render on stderr (or raise when shell is False); warnings render
      on stdout (or go through warnings.warn when shell is False).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandException",
    "MissingCommandError",
    "UnknownCommandError",
    "MissingRequiredOptionError",
    "ValueCoercionError",
    "CommandWarning",
    "DuplicateNameWarning",
    "DuplicateShortWarning",
    "DuplicateValueLabelWarning",
    "DuplicateRestWarning",
    "UnconfiguredHandlerWarning",
    "ExtraneousPositionalWarning",
    "trigger",
    "getdoc",
)
