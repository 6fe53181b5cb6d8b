r"""
Mercurius argument handling: option parsing and the per-line invocation.

Overview
- parseargs(tokens, options)
  • Table-driven, single pass over the tokens that follow the command word.
  • Every declared flag absorbs the tokens after it, up to the next declared
    flag or the end of input.
  • Tokens seen before the first declared flag are general arguments.
  • Dash-tokens that are not declared are plain arguments (never an error).

- Invocation
  • The structured result of matching one line: the matched command, the
    option map and the general arguments, plus the reporter of that line.
  • Offers the helpers definitions use while translating: bounds checks,
    placeholder substitution, flag exclusivity, required flags, advisories.
  • Mutable during the handler run only through setoptions()/setargs(); the
    public `options`/`args` properties hand out copies, so every rewrite is an
    explicit commit.

Quick example:
    >>> parseargs(["feature", "-r", "C3", "name"], ("-r", "-d"))
    ({'-r': ['C3', 'name']}, ['feature'])
"""
import logging
import re
from collections.abc import Iterable, Mapping

from .faults import *
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

# Spelling of "current checked-out position" in the alternate dialect and its
# canonical counterpart.
PLACEHOLDER = "."
TIP = "HEAD"

_FLAG = re.compile(r"--?[^\W\d_](-?[^\W_]+)*")


def isflag(token, /):
    """
    tell whether a token is spelled like an option flag ('-x', '--name', '-long-name').
    """
    return isinstance(token, str) and _FLAG.fullmatch(token) is not None


def parseargs(tokens, options, /):
    """
    split a flat token list into (option map, general arguments).

    parameters
    - tokens: Iterable[str] — everything after the command word, in order.
    - options: Iterable[str] — the declared flags of the matched command.

    returns
    - dict[str, list[str]]: declared flag → tokens it absorbed (insertion ordered;
      absent flags are absent, present flags without tokens map to []).
    - list[str]: general arguments, in order.

    notes
    - a flag given twice re-opens its list and keeps appending, so no token is
      ever dropped or duplicated.
    """
    tokens = list(tokens)
    recognized = frozenset(options)
    namespace = {}
    general = []
    current = general

    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("parseargs() tokens must be strings")
        if token in recognized:
            current = namespace.setdefault(token, [])
            continue
        current.append(token)

    logger.debug("parsed %r into options=%r general=%r", tokens, namespace, general)
    return namespace, general


class Invocation:
    """
    ParsedInvocation: one matched line, mutable while its handler runs.

    attributes (read-only)
    - command: the matched Command definition (shared, never mutated).
    - line: the raw input line.
    - word: the command word actually typed (an alias such as 'ci' or 'book').
    - reporter: the Reporter collecting advisories for this line.

    state (read via properties, replaced via setters)
    - options: dict[str, list[str]]
    - args: list[str]
    """
    __slots__ = ("_command", "_line", "_word", "_options", "_args", "_reporter")

    def __init__(self, command, /, options=Unset, args=Unset, *, line="", word=Unset, reporter=Unset):
        self._command = command
        self._line = line
        self._word = coalesce(word, getattr(command, "name", None))
        self._reporter = Reporter() if reporter is Unset else reporter
        self._options = {}
        self._args = []
        self.setoptions(coalesce(options, {}))
        self.setargs(coalesce(args, ()))

    @property
    def command(self):
        return self._command

    @property
    def line(self):
        return self._line

    @property
    def word(self):
        return self._word

    @property
    def reporter(self):
        return self._reporter

    @property
    def options(self):
        """
        a copy of the current option map (commit changes with setoptions()).
        """
        return {flag: list(values) for flag, values in self._options.items()}

    @property
    def args(self):
        """
        a copy of the current general arguments (commit changes with setargs()).
        """
        return list(self._args)

    def setoptions(self, options, /):
        if not isinstance(options, Mapping):
            raise TypeError("setoptions() argument must be a mapping")
        replacement = {}
        for flag, values in options.items():
            if not isinstance(flag, str):
                raise TypeError("setoptions() keys must be strings")
            if isinstance(values, str) or not isinstance(values, Iterable):
                raise TypeError("setoptions() values must be iterables of strings")
            replacement[flag] = self._strings(values, "setoptions")
        self._options = replacement

    def setargs(self, args, /):
        if isinstance(args, str) or not isinstance(args, Iterable):
            raise TypeError("setargs() argument must be an iterable of strings")
        self._args = self._strings(args, "setargs")

    @staticmethod
    def _strings(values, caller):
        values = list(values)
        if not all(isinstance(value, str) for value in values):
            raise TypeError(f"{caller}() values must be strings")
        return values

    def has(self, flag, /):
        """
        presence test; a flag given without values is still present.
        """
        return flag in self._options

    def bounds(self, minimum, maximum=Unset, /, *, flag=Unset):
        """
        require minimum <= len(args) <= maximum (inclusive), else ArgumentCountError.

        - maximum: int | None — None means unbounded; defaults to minimum.
        - flag: check the values absorbed by this flag instead of the general arguments.
        """
        maximum = coalesce(maximum, minimum)
        if minimum < 0 or (maximum is not None and maximum < minimum):
            raise ValueError("bounds() expects 0 <= minimum <= maximum")
        if flag is Unset:
            values, what = self._args, "the general arguments"
        else:
            values, what = self._options.get(flag, []), flag

        if maximum is not None and len(values) > maximum:
            raise ArgumentCountError(
                "git-error-args-many",
                params={"upper": maximum, "what": what, "count": len(values)},
                hint="hint-options",
            )
        if len(values) < minimum:
            raise ArgumentCountError(
                "git-error-args-few",
                params={"lower": minimum, "what": what, "count": len(values)},
                hint="hint-options",
            )

    def noargs(self):
        """
        shorthand for "no positional arguments allowed".
        """
        if self._args:
            raise ArgumentCountError(
                "git-error-no-general-args",
                params={"upper": 0, "what": "the general arguments", "count": len(self._args)},
            )

    def mapdot(self):
        """
        substitute the current-position placeholder ('.') with the canonical tip
        ('HEAD') in general arguments and in option values. idempotent.
        """
        def substitute(values):
            return [TIP if value == PLACEHOLDER else value for value in values]

        self._args = substitute(self._args)
        self._options = {flag: substitute(values) for flag, values in self._options.items()}

    def exclusive(self, *flags):
        """
        raise IncompatibleOptionsError when two or more of the flags are present.
        """
        if len(present := [flag for flag in flags if flag in self._options]) > 1:
            first, second = present[:2]
            raise IncompatibleOptionsError(
                "option-incompatible",
                params={"first": first, "second": second, "options": tuple(present)},
                hint="hint-options",
            )

    def require(self, flag, /, key="option-required"):
        """
        raise MissingRequiredOptionError (with catalog `key`) when the flag is absent.
        """
        if flag not in self._options:
            raise MissingRequiredOptionError(key, params={"option": flag}, hint="hint-options")

    def warn(self, key, /, category=AdvisoryWarning, **params):
        """
        append a non-terminal advisory to this line's reporter.
        """
        if not (isinstance(category, type) and issubclass(category, CommandWarning)):
            raise TypeError("warn() category must be a command warning type")
        return self._reporter.warn(category(key, params=params))

    def fail(self, category, key, /, **params):
        """
        raise a terminal fault of `category` for catalog `key`.
        """
        if not (isinstance(category, type) and issubclass(category, CommandException)):
            raise TypeError("fail() category must be a command exception type")
        raise category(key, params=params)

    def __rich_repr__(self):
        yield "command", getattr(self._command, "name", self._command)
        yield "word", self._word
        yield "options", self._options
        yield "args", self._args

    def __repr__(self):
        return "invocation(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "PLACEHOLDER",
    "TIP",
    "isflag",
    "parseargs",
    "Invocation",
)
