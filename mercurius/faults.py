"""
Mercurius faults (errors and warnings), the per-line reporter and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue
  the translator can surface. Codes are grouped by domain so that logs and
  lesson feedback stay searchable.
- CommandException / CommandWarning: base types that carry a catalog key,
  template parameters and options, and know how to render themselves.
- Reporter: the per-invocation channel (ordered advisories + at most one
  terminal fault).
- trigger(): surface a fault or advisory under the runtime flags (shell, deferred, fancy, colorful).
- getdoc(): per-code documentation supplied by the host through __main__.__docs__.

Message policy
- Faults never carry composed text. They carry a `key` and `params`; the text
  is rendered lazily through mercurius.intl for the locale in their options.

Integration
- Handlers raise terminal faults (directly or through Invocation helpers) and
  add advisories through Invocation.warn(); the Translator records them on the
  Reporter and triggers them once the line is resolved.
- In non-shell mode, exceptions are raised and warnings go through warnings.warn;
  in shell mode, both are rendered via rich.
"""
import copy
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

from .intl import getstr
from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the translator (stable identifiers).

    codes by family
    - routing (1110x)
      • UNRECOGNIZED_COMMAND, MALFORMED_INPUT
    - options (1111x)
      • UNSUPPORTED_OPERATION, INCOMPATIBLE_OPTIONS, MISSING_REQUIRED_OPTION
    - general arguments (1112x)
      • ARGUMENT_COUNT
    - delegation (1113x)
      • UNKNOWN_CANONICAL_COMMAND
    - advisories (121xx)
      • ADVISORY, INEFFECTIVE_OPTION

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # line routing
    UNRECOGNIZED_COMMAND        = 11101
    MALFORMED_INPUT             = 11102

    # option policy
    UNSUPPORTED_OPERATION       = 11111
    INCOMPATIBLE_OPTIONS        = 11112
    MISSING_REQUIRED_OPTION     = 11113

    # general arguments
    ARGUMENT_COUNT              = 11121

    # delegation
    UNKNOWN_CANONICAL_COMMAND   = 11131

    # advisories
    ADVISORY                    = 12111
    INEFFECTIVE_OPTION          = 12112

    def normalize(self):
        """
        label of this code for display.

        a host may map codes to its own labels with __main__.__codes__;
        unmapped codes (or no mapping at all) fall back to the number.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    shared rich renderer for exceptions and warnings.

    palette names the message/title style keys ("error-*" or "warning-*");
    styles can be overridden by the host through __main__.__styles__.
    """
    main = __import__("__main__")
    options = fault.options

    styles = defaultdict(str, {
        "prog-name": "bold #F2F2F2",
        "code": "bold #5FD7FF",
        "error-title": "bold #FF5F87",
        "warning-title": "bold #FFD75F",
        "error-message": "#D0D0D0",
        "warning-message": "#D0D0D0",
        "hint-arrow": "dim #87D787",
        "hint": "italic #87D787",
    } | getattr(main, "__styles__", {}))

    colorful = options.get("colorful", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    prog = text(getattr(main, "__prog__", getattr(options.get("tool"), "prog", "mercurius")), "prog-name")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(fault.code.normalize(), "code"),
        " | ",
        text(fault.title.title(), "%s-title" % palette),
        " ]"
    )
    body = [text(fault.message, "%s-message" % palette)]
    if hint := fault.hint:
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if options.get("fancy", False):
        try:
            width = int((console.width - 4) * options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(*body), title=header, title_align="left", width=width)

    return Group(header, *body)


class CommandException(Exception):
    """
    base class for terminal translation faults.

    construction
    - key: catalog key selected by the engine (positional-only).
    - params: mapping of template parameters for the key.
    - hint: optional catalog key for a one-line hint (rendered with the same params).
    - any other option (tool, shell, fancy, colorful, deferred, locale, ...) is
      stored read-only and consulted when the fault is rendered or triggered.

    class attributes
    - code: FaultCode, kind: taxonomy tag, title: short header text.
    """
    code = Unset
    kind = "error"
    title = "error"

    def __init__(self, key, /, **options):
        if not isinstance(key, str):
            raise TypeError(f"{type(self).__name__}() key must be a string")
        super().__init__(key)
        self.key = key
        self.options = MappingProxyType(options)

    @property
    def params(self):
        return MappingProxyType(dict(self.options.get("params", {})))

    @property
    def message(self):
        return getstr(self.key, self.options.get("locale", Unset), **self.params)

    @property
    def hint(self):
        if not (key := self.options.get("hint")):
            return None
        return getstr(key, self.options.get("locale", Unset), **self.params)

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "__replace__() takes keyword arguments only"
        return type(self)(self.key, **{**self.options, **overrides})


class UnrecognizedCommandError(CommandException):
    code = FaultCode.UNRECOGNIZED_COMMAND
    kind = "unrecognized command"
    title = "unrecognized command"


class MalformedInputError(CommandException):
    code = FaultCode.MALFORMED_INPUT
    kind = "malformed input"
    title = "malformed input"


class UnsupportedOperationError(CommandException):
    code = FaultCode.UNSUPPORTED_OPERATION
    kind = "unsupported operation"
    title = "unsupported operation"


class IncompatibleOptionsError(CommandException):
    code = FaultCode.INCOMPATIBLE_OPTIONS
    kind = "incompatible options"
    title = "incompatible options"


class MissingRequiredOptionError(CommandException):
    code = FaultCode.MISSING_REQUIRED_OPTION
    kind = "missing required option"
    title = "missing option"


class ArgumentCountError(CommandException):
    code = FaultCode.ARGUMENT_COUNT
    kind = "argument-count violation"
    title = "wrong number of arguments"


class UnknownCanonicalCommandError(CommandException):
    code = FaultCode.UNKNOWN_CANONICAL_COMMAND
    kind = "unknown canonical command"
    title = "unknown canonical command"


class CommandWarning(ABC, Warning):
    """
    base class for non-terminal advisories.

    same construction and rendering contract as CommandException; triggering a
    warning never interrupts the translation of the line.
    """
    code = FaultCode.ADVISORY
    kind = "advisory"
    title = "advisory"

    def __init__(self, key, /, **options):
        if not isinstance(key, str):
            raise TypeError(f"{type(self).__name__}() key must be a string")
        super().__init__(key)
        self.key = key
        self.options = MappingProxyType(options)

    params = CommandException.params
    message = CommandException.message
    hint = CommandException.hint

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "__replace__() takes keyword arguments only"
        return type(self)(self.key, **{**self.options, **overrides})


class AdvisoryWarning(CommandWarning): ...


class IneffectiveOptionWarning(AdvisoryWarning):
    code = FaultCode.INEFFECTIVE_OPTION
    kind = "ineffective option"
    title = "option has no effect"


class Reporter:
    """
    per-invocation fault channel.

    - warnings: advisories in insertion order (zero or more).
    - fault: the terminal fault, if any (at most one per line).

    the reporter only records; surfacing (raise/print/warn) is the translator's
    job once the line is resolved. options given at construction (tool, shell,
    locale, ...) are merged into every recorded fault via __replace__.
    """
    __slots__ = ("_warnings", "_fault", "_options")

    def __init__(self, **options):
        self._warnings = []
        self._fault = None
        self._options = MappingProxyType(options)

    @property
    def options(self):
        return self._options

    @property
    def warnings(self):
        return tuple(self._warnings)

    @property
    def fault(self):
        return self._fault

    def warn(self, warning, /):
        if not isinstance(warning, CommandWarning):
            raise TypeError("Reporter.warn() argument must be a command warning")
        if self._options:
            warning = copy.replace(warning, **self._options)
        self._warnings.append(warning)
        return warning

    def fail(self, fault, /):
        if not isinstance(fault, CommandException):
            raise TypeError("Reporter.fail() argument must be a command exception")
        if self._fault is not None:
            raise RuntimeError("reporter already holds a terminal fault")
        if self._options:
            fault = copy.replace(fault, **self._options)
        self._fault = fault
        return fault

    def __bool__(self):
        # truthy when anything was reported
        return bool(self._warnings) or self._fault is not None

    def __repr__(self):
        return f"reporter(warnings={self._warnings!r}, fault={self._fault!r})"


def trigger(fault, /, **options):
    """
    surface `fault` once `options` (shell, deferred, locale, ...) are merged into it.

    errors are raised outside the shell and printed inside it (exiting unless
    deferred); advisories are warned outside the shell and printed inside it.
    """
    if not all(callable(getattr(fault, name, None)) for name in ("__trigger__", "__replace__")):
        raise TypeError("trigger() argument must be a command exception or warning")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation the host registered for `code` in __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "CommandException",
    "UnrecognizedCommandError",
    "MalformedInputError",
    "UnsupportedOperationError",
    "IncompatibleOptionsError",
    "MissingRequiredOptionError",
    "ArgumentCountError",
    "UnknownCanonicalCommandError",
    "CommandWarning",
    "AdvisoryWarning",
    "IneffectiveOptionWarning",
    "Reporter",
    "trigger",
    "getdoc",
)
