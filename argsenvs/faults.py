"""
argsenvs faults (error records, configuration errors) and rendering.

Scope
- FaultCode: canonical, stable identifiers for every problem the resolver reports.
  The five resolution codes (PARSE, TYPE_UNKNOWN, VALIDATION, UNKNOWN_ARG, MISSING_ARG)
  are the error records of a resolution; the configuration codes belong to errors
  that abort a resolution immediately.
- ResolutionError: one error record. Collected by the engine, never raised by it.
- ConfigurationError: broken registry state or malformed input; always raised.
- ResolutionExit: the façade's exception, grouping every error record of a failed run.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).

Record fields
- code, message: always present.
- option: logical option name, when the problem belongs to one option.
- source: "argv", "env" or "default", where the offending value came from.
- value: the raw (uncoerced) value, when there is one.
- token: the literal argv token, for UNKNOWN_ARG.

Integration
- Styles can be overridden from the host with a __styles__ mapping in __main__,
  program name with __prog__, and code labels with __codes__.
- In non-shell mode faults are raised; in shell mode they are rendered via rich on stderr.
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
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - resolution (211xx): reported as error records, collected across a run
      • PARSE, TYPE_UNKNOWN, VALIDATION, UNKNOWN_ARG, MISSING_ARG
    - configuration (221xx): raised immediately, abort the run
      • DUPLICATE_SINK, MISSING_VALUE, UNKNOWN_VERDICT

    the member name is the public identifier (FaultCode.PARSE.name == "PARSE");
    numeric values leave room for future additions without reshuffling.
    """
    # --- resolution errors (211xx) ---
    PARSE           = 21101
    TYPE_UNKNOWN    = 21102
    VALIDATION      = 21103
    UNKNOWN_ARG     = 21104
    MISSING_ARG     = 21105

    # --- configuration errors (221xx) ---
    DUPLICATE_SINK  = 22101
    MISSING_VALUE   = 22102
    UNKNOWN_VERDICT = 22103

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__
        to override labels; the member name is used otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.name))


def _styles(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _text(fragment, style, colorful):
    if not fragment:
        return Text("")
    if not colorful:
        return Text(str(fragment))
    if isinstance(fragment, Text):
        return fragment
    return Text(str(fragment), style)


class Fault(Exception):
    """
    base type for every argsenvs problem: a message plus read-only options.

    options are free-form context (code, option, source, value, token, hint)
    and rendering flags (shell, fancy, colorful, ratio). copy.replace(fault, **x)
    returns a copy with options merged.
    """
    __fault__ = Unset
    __title__ = "fault"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__fault__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return self.message if self.message is not Unset else ""

    def __rich__(self):
        colorful = self.options.get("colorful", True)
        styles = _styles({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        def text(fragment, style=""):
            return _text(fragment, styles[style] if colorful else "", colorful)

        prog = text(getattr(__import__("__main__"), "__prog__", "argsenvs"), "prog-name")
        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize() if self.code else "FAULT", "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(str(self), "error-message")
        parts = [message]
        if self.hint:
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if self.options.get("fancy", False):
            try:
                width = int((console.width - 4) * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(*parts), title=header, title_align="left", width=width)

        return Group(header, *parts)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ResolutionError(Fault):
    """
    one error record of a resolution.

    the engine collects these; it never raises them. every record names its
    FaultCode and, where it applies, the option, source, raw value and token.
    """
    __title__ = "resolution error"

    @property
    def option(self):
        return self.options.get("option")

    @property
    def source(self):
        return self.options.get("source")

    @property
    def value(self):
        return self.options.get("value")

    @property
    def token(self):
        return self.options.get("token")


class ParseError(ResolutionError):
    __fault__ = FaultCode.PARSE
    __title__ = "unparsable value"
class UnknownTypeError(ResolutionError):
    __fault__ = FaultCode.TYPE_UNKNOWN
    __title__ = "unknown type"
class ValidationError(ResolutionError):
    __fault__ = FaultCode.VALIDATION
    __title__ = "invalid value"
class UnknownArgumentError(ResolutionError):
    __fault__ = FaultCode.UNKNOWN_ARG
    __title__ = "unknown argument"
class MissingArgumentError(ResolutionError):
    __fault__ = FaultCode.MISSING_ARG
    __title__ = "missing argument"


class ConfigurationError(Fault):
    """
    a problem with the registry or the input shape that makes resolution
    meaningless. raised immediately instead of collected.
    """
    __title__ = "configuration error"

    @property
    def option(self):
        return self.options.get("option")


class DuplicateSinkError(ConfigurationError):
    __fault__ = FaultCode.DUPLICATE_SINK
    __title__ = "duplicate sink"
class MissingValueError(ConfigurationError):
    __fault__ = FaultCode.MISSING_VALUE
    __title__ = "missing value"
class VerdictError(ConfigurationError):
    __fault__ = FaultCode.UNKNOWN_VERDICT
    __title__ = "unknown verdict"


class ResolutionExit(ExceptionGroup[ResolutionError]):
    """
    raised by the façade when a resolution produced error records.

    .exceptions (alias .errors) holds every record in detection order.
    """
    def __new__(cls, exceptions, /, **options):
        return super().__new__(cls, "Could not parse command line.", tuple(exceptions))

    def __init__(self, exceptions, /, **options):
        super().__init__("Could not parse command line.", tuple(exceptions))
        self.options = MappingProxyType(options)

    @property
    def errors(self):
        return self.exceptions

    def derive(self, exceptions, /):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        colorful = self.options.get("colorful", True)
        styles = _styles({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title
        })

        def text(fragment, style=""):
            return _text(fragment, styles[style] if colorful else "", colorful)

        prog = text(getattr(__import__("__main__"), "__prog__", "argsenvs"), "prog-name")
        header = Text.assemble("[ ", prog, " — ", text(self.message.rstrip(".").title(), "title"), " ]")

        renders = [
            copy.replace(exception, ratio=2/3, colorful=colorful, fancy=self.options.get("fancy", False))
            for exception in self.exceptions
        ]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see Fault, ResolutionExit).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich console on stderr; otherwise the
      fault is raised.

    typical options
    - shell, fancy, colorful, and any other context the renderer may want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "Fault",
    "ResolutionError",
    "ParseError",
    "UnknownTypeError",
    "ValidationError",
    "UnknownArgumentError",
    "MissingArgumentError",
    "ConfigurationError",
    "DuplicateSinkError",
    "MissingValueError",
    "VerdictError",
    "ResolutionExit",
    "trigger",
)
