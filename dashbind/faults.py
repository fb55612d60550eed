"""
Dashbind faults.

Every failure of the engine is a DashbindException subclass with a stable
FaultCode. A fault carries a short message and read-only keyword options: the
rendering options (title, hint, docs) and whatever context the raising site
knows about (pattern, token, expected, name, argument...).

Families
- ArgumentError: one parameter value could not be extracted.
- WrongVariantError: a Value was unwrapped as the wrong variant.
- CommandError: binding, lookup or dispatch failed.

Policy
- Required arguments fail loud, options fail soft (parameters.Option.value).
- Dispatchers only skip IncorrectCommandNameError.
- trigger() merges runtime flags into a fault. Without shell=True the fault is
  raised; with it, the fault is printed to stderr and the process exits with 1.

Host hooks (read from __main__)
- __codes__: {FaultCode: label} shown instead of the numeric code.
- __docs__: {FaultCode: text} returned by getdoc().
- __styles__: palette overrides for colorful rendering.
- __prog__: program label shown in the fault header.
"""
import copy
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
    stable fault identifiers.

    211xx argument extraction, 212xx value access, 213xx commands.
    """
    NO_ASSIGNMENT               = 21101
    WRONG_FORMAT                = 21102
    INCORRECT_VALUE             = 21103
    INDIRECT_VALUE              = 21104
    NO_VALUE                    = 21105

    WRONG_VARIANT               = 21201

    PARAMETER_NAME_NOT_ALLOWED  = 21301
    MISSING_COMMAND_ARGUMENTS   = 21302
    NOT_ENOUGH_ARGUMENTS        = 21303
    INCORRECT_COMMAND_NAME      = 21304
    UNKNOWN_COMMAND             = 21305

    def normalize(self):
        """label of this code, as remapped by __main__.__codes__ if present."""
        labels = getattr(__import__("__main__"), "__codes__", {})
        return str(labels.get(self, self.value))


class DashbindException(Exception):
    """
    base fault: message plus read-only options.

    the 'code' option defaults to the class' __default_code__; trigger() and
    Command.trigger() add the runtime flags (tool, shell, fancy, colorful).
    """
    __default_code__ = None

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError("fault message must be a string")
        self.message = message
        self.options = MappingProxyType({"code": type(self).__default_code__, **options})

    @property
    def code(self):
        return self.options["code"]

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __reduce__(self):
        return _restore, (type(self), self.message, dict(self.options))

    def __replace__(self, /, **changes):
        return type(self)(self.message, **(dict(self.options) | changes))

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        palette = defaultdict(str, {
            "fault-prog": "bold #F5F5F5",
            "fault-code": "bold #FFB300",  # amber
            "fault-title": "bold #FF5252",  # red
            "fault-message": "#E0E0E0",
            "fault-arrow": "dim #80CBC4",
            "fault-hint": "italic #80CBC4",  # teal
            "fault-docs": "dim #B0BEC5",
        } | getattr(main, "__styles__", {}))

        def piece(fragment, style):
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), palette[style] if colorful else "")

        code = self.options["code"]
        title = self.options.get("title", type(self).__name__)
        prog = getattr(main, "__prog__", getattr(self.options.get("tool"), "name", "dashbind"))

        header = Text.assemble(
            "[ ", piece(prog, "fault-prog"),
            " — ", piece("?" if code is None else code.normalize(), "fault-code"),
            " | ", piece(str(title).title(), "fault-title"), " ]",
        )
        body = [piece(self, "fault-message")]
        if hint := self.options.get("hint"):
            body.append(Text.assemble(piece(" → ", "fault-arrow"), piece(hint, "fault-hint")))
        if docs := self.options.get("docs"):
            body.append(piece(docs, "fault-docs"))

        if self.options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)


def _restore(cls, message, options):
    return cls(message, **options)


class ArgumentError(DashbindException):
    """extraction of a single parameter value failed."""


class NoAssignmentError(ArgumentError):
    """the parameter was given bare, without '=<value>'."""
    __default_code__ = FaultCode.NO_ASSIGNMENT


class WrongFormatError(ArgumentError):
    __default_code__ = FaultCode.WRONG_FORMAT


class IncorrectValueError(ArgumentError):
    __default_code__ = FaultCode.INCORRECT_VALUE


class IndirectValueError(ArgumentError):
    """arrays of arrays cannot be expressed on the command line."""
    __default_code__ = FaultCode.INDIRECT_VALUE


class NoValueError(ArgumentError):
    __default_code__ = FaultCode.NO_VALUE


class WrongVariantError(DashbindException):
    """a typed accessor was used on a value holding another variant."""
    __default_code__ = FaultCode.WRONG_VARIANT


class CommandError(DashbindException):
    """binding, lookup or dispatch failed."""


class ParameterNameNotAllowedError(CommandError):
    __default_code__ = FaultCode.PARAMETER_NAME_NOT_ALLOWED

    @property
    def name(self):
        """the undeclared name that was looked up."""
        return self.options.get("name")


class MissingCommandArgumentsError(CommandError):
    __default_code__ = FaultCode.MISSING_COMMAND_ARGUMENTS


class NotEnoughArgumentsError(CommandError):
    __default_code__ = FaultCode.NOT_ENOUGH_ARGUMENTS


class IncorrectCommandNameError(CommandError):
    __default_code__ = FaultCode.INCORRECT_COMMAND_NAME


class UnknownCommandError(CommandError):
    __default_code__ = FaultCode.UNKNOWN_COMMAND


def trigger(fault, /, **options):
    """
    raise or render 'fault' after merging 'options' into a copy of it.

    the fault must implement __replace__ and __trigger__.
    """
    if not callable(getattr(fault, "__trigger__", None)) or not callable(getattr(fault, "__replace__", None)):
        raise TypeError("trigger() argument must implement __trigger__ and __replace__")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """documentation registered for 'code' in __main__.__docs__, or None."""
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "DashbindException",
    "ArgumentError",
    "NoAssignmentError",
    "WrongFormatError",
    "IncorrectValueError",
    "IndirectValueError",
    "NoValueError",
    "WrongVariantError",
    "CommandError",
    "ParameterNameNotAllowedError",
    "MissingCommandArgumentsError",
    "NotEnoughArgumentsError",
    "IncorrectCommandNameError",
    "UnknownCommandError",
    "FaultCode",
    "trigger",
    "getdoc",
)
