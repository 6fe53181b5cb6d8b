"""
Mercurius command layer: define, register, match and resolve dialect commands.

What this module provides
- Command: one alternate-dialect definition (name, line pattern, declared
  flags, scoring exemption) bound to exactly one handler:
  • delegate — pure; returns a Descriptor naming a canonical command.
  • execute  — direct; performs its effect through the engine, returns nothing.
- Factories: delegate(...) / execute(...) decorators build Commands from handlers.
- Descriptor: (vcs, name) record returned by delegating handlers.
- Registry: ordered, immutable collection of Commands; first match wins.
- Translator: resolves raw lines into Translations, surfacing faults and
  advisories according to its runtime flags (shell/fancy/colorful/deferred).
- Translation: the outcome of one line (descriptor or direct effect, warnings, fault).

Core ideas
- Table-driven dispatch: the registry is a tuple scanned in declaration order;
  the pattern set is expected to be disjoint but registry order is the tie-break.
- Validation before effects: direct handlers check every option before they
  touch the engine, so a failing line leaves the engine untouched.
- Key-driven diagnostics: faults carry catalog keys; text lives in mercurius.intl.

Quick start
    from mercurius import Translator

    translator = Translator(engine)
    translation = translator.translate("hg book -r C3 feature")
    translation.descriptor       # Descriptor(vcs='git', name='branch')
    translation.invocation.args  # ['feature', 'C3']
    translation.canonical()      # ['git', 'branch', '-r', 'C3', 'feature', 'feature', 'C3']

See also
- mercurius.arguments for the option parser and invocation helpers.
- mercurius.faults for fault codes and rendering behavior.
- mercurius.mercurial for the hg definitions.
"""
import functools
import inspect
import logging
import operator
import re
import shlex
from collections import namedtuple
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from rich.text import Text

from .arguments import Invocation, isflag, parseargs
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


Descriptor = namedtuple("Descriptor", ("vcs", "name"))
Descriptor.__doc__ = """
Output of a delegating handler: target-system identifier and canonical command name.

The invocation's (possibly rewritten) options and general arguments travel
alongside it; the caller consults them to build the canonical invocation.
"""


class RecordType(type):
    """
    Metaclass for the read-only records of this module (Command, Registry, Translation, Translator).

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private backing field "_{name}" (see utils.mirror).
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_name(cls, name):
    if not isinstance(name, str | Text):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := str(name).strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    return name


def _process_pattern(cls, pattern):
    """
    Accept a regex source or a compiled pattern; empty patterns are rejected.
    """
    if isinstance(pattern, re.Pattern):
        if not pattern.pattern:
            raise ValueError(f"{cls.__typename__} 'pattern' cannot be empty")
        return pattern
    if not isinstance(pattern, str):
        raise TypeError(f"{cls.__typename__} 'pattern' must be a string or a compiled pattern")
    elif not pattern:
        raise ValueError(f"{cls.__typename__} 'pattern' cannot be empty")
    try:
        return re.compile(pattern)
    except re.error as error:
        raise ValueError(f"{cls.__typename__} 'pattern' is not a valid regular expression ({error})") from None


def _process_options(cls, options):
    """
    Validate declared flags: an iterable (not a string) of unique, flag-shaped names.
    """
    if isinstance(options, str) or not isinstance(options, Iterable):
        raise TypeError(f"{cls.__typename__} 'options' must be an iterable of strings")
    seen = []
    for option in options:
        if not isinstance(option, str):
            raise TypeError(f"{cls.__typename__} 'options' must be an iterable of strings")
        elif not isflag(option):
            raise ValueError(f"{cls.__typename__} option {option!r} is not a valid flag")
        elif option in seen:
            raise ValueError(f"{cls.__typename__} 'options' cannot contain duplicates")
        seen.append(option)
    return tuple(seen)


def _process_handler(cls, delegate, execute):
    """
    Exactly one handler kind: returns (kind, handler).
    """
    if (delegate is Unset) == (execute is Unset):
        raise TypeError(f"{cls.__typename__} requires exactly one of 'delegate' or 'execute'")
    kind, handler = ("delegate", delegate) if delegate is not Unset else ("execute", execute)
    if not callable(handler):
        raise TypeError(f"{cls.__typename__} {kind!r} handler must be callable")
    return kind, handler


class Command(metaclass=RecordType):
    """
    One alternate-dialect command definition (CommandDefinition).

    Fields (read-only)
    - name: registry identity (e.g. 'bookmark').
    - pattern: compiled regex matched at the start of the whole input line.
    - options: declared flags recognized by the option parser, in order.
    - uncounted: exempt from tutorial scoring (read-only queries like log/status).
    - kind: 'delegate' or 'execute'.
    - descr: short description (defaults to the handler docstring).

    Calling
    - command(engine, invocation) runs the handler. Delegating handlers must
      return a Descriptor; direct handlers must return None.
    """
    __introspectable__ = (
        "name",
        "pattern",
        "options",
        "uncounted",
        "kind",
        "descr",
    )

    __displayable__ = (
        "name",
        "options",
        "kind",
        "uncounted",
    )

    def __new__(cls, name, pattern, /, options=(), *, delegate=Unset, execute=Unset, uncounted=False, descr=Unset):
        self = super().__new__(cls)
        self._name = _process_name(cls, name)
        self._pattern = _process_pattern(cls, pattern)
        self._options = _process_options(cls, options)
        self._kind, self._handler = _process_handler(cls, delegate, execute)
        self._uncounted = bool(uncounted)
        if not isinstance(descr := coalesce(descr, inspect.getdoc(self._handler)), str | None):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        self._descr = descr
        return self

    @property
    def handler(self):
        return self._handler

    def __call__(self, engine, invocation, /):
        if not isinstance(invocation, Invocation):
            raise TypeError(f"{type(self).__typename__} argument must be an invocation")
        if invocation.command is not self:
            raise ValueError(f"invocation was matched by {invocation.command!r}, not {self.name!r}")

        if self._kind == "execute":
            logger.info("running direct command %r", self._name)
            if (result := self._handler(engine, invocation)) is not None:
                raise TypeError(f"direct command {self._name!r} must not return a value, got {result!r}")
            return None

        descriptor = self._handler(engine, invocation)
        if not isinstance(descriptor, Descriptor):
            raise TypeError(f"delegating command {self._name!r} must return a descriptor, got {descriptor!r}")
        logger.debug("command %r delegates to %s %s", self._name, descriptor.vcs, descriptor.name)
        return descriptor


def _factory(kind, name, pattern, /, options=(), *, uncounted=False, descr=Unset):
    @rename(kind)
    def wrapper(handler, /):
        if not callable(handler):
            raise TypeError(f"@{kind}() must be applied to a callable")
        return Command(name, pattern, options, uncounted=uncounted, descr=descr, **{kind: handler})
    return wrapper


def delegate(name, pattern, /, options=(), *, uncounted=False, descr=Unset):
    """
    Decorator factory: wrap a pure handler returning a Descriptor into a Command.

        @delegate("update", r"^hg +(update|up)($|\\s+)")
        def update(engine, invocation):
            return Descriptor("git", "checkout")
    """
    return _factory("delegate", name, pattern, options, uncounted=uncounted, descr=descr)


def execute(name, pattern, /, options=(), *, uncounted=False, descr=Unset):
    """
    Decorator factory: wrap a side-effecting handler (returns nothing) into a Command.
    """
    return _factory("execute", name, pattern, options, uncounted=uncounted, descr=descr)


class Registry(metaclass=RecordType):
    """
    Ordered, immutable collection of Commands (process-lifetime).

    - Declaration order is the matching order; the first matching pattern wins.
    - Command names are unique; lookup by name is available for tooling.
    - There is no mutation API: attributes cannot be set or deleted.
    """
    __slots__ = ("_prog", "_commands", "_index")

    __introspectable__ = (
        "prog",
        "commands",
    )

    def __new__(cls, *commands, prog="hg"):
        self = super().__new__(cls)
        index = {}
        for command in commands:
            if not isinstance(command, Command):
                raise TypeError(f"{cls.__typename__} entries must be commands")
            if index.setdefault(command.name, command) is not command:
                raise ValueError(f"{cls.__typename__} command name {command.name!r} is already in use")
        object.__setattr__(self, "_prog", _process_name(cls, prog))
        object.__setattr__(self, "_commands", commands)
        object.__setattr__(self, "_index", MappingProxyType(index))
        return self

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    @property
    def names(self):
        return tuple(self._index)

    @property
    def options(self):
        """
        command name → declared flags.
        """
        return MappingProxyType({name: command.options for name, command in self._index.items()})

    def __iter__(self):
        return iter(self._commands)

    def __len__(self):
        return len(self._commands)

    def __contains__(self, name, /):
        return name in self._index

    def __getitem__(self, name, /):
        return self._index[name]

    def match(self, line, /):
        """
        Return (command, match) for the first command whose pattern matches the line.

        Raises
        - UnrecognizedCommandError when no pattern matches.
        """
        if not isinstance(line, str):
            raise TypeError("match() argument must be a string")
        for command in self._commands:
            if match := command.pattern.match(line):
                logger.debug("line %r matched command %r", line, command.name)
                return command, match
        logger.debug("line %r matched no command", line)
        raise UnrecognizedCommandError(
            "error-command-not-found",
            params={"line": line, "commands": self.names},
            hint="hint-help",
        )


class Translation(metaclass=RecordType):
    """
    Outcome of translating one line.

    Fields (read-only)
    - line: the raw input line.
    - command: the matched Command (None when nothing matched).
    - invocation: the Invocation after the handler ran (None when matching/tokenizing failed).
    - descriptor: the Descriptor of a delegating command (None for direct commands and failures).
    - warnings: advisories, in insertion order.
    - fault: the terminal fault (None on success).
    """
    __introspectable__ = (
        "line",
        "command",
        "invocation",
        "descriptor",
        "warnings",
        "fault",
    )

    def __init__(self, line, invocation, descriptor, reporter, /):
        self._line = line
        self._invocation = invocation
        self._command = getattr(invocation, "command", None)
        self._descriptor = descriptor
        self._warnings = reporter.warnings
        self._fault = reporter.fault

    @property
    def ok(self):
        return self._fault is None

    @property
    def counted(self):
        """
        whether the line counts toward tutorial scoring.
        """
        return self.ok and self._command is not None and not self._command.uncounted

    def canonical(self):
        """
        Flatten a delegated result into canonical tokens:
        [vcs, name, *flag-and-values..., *general-arguments].

        Returns None for direct commands and failures.
        """
        if self._descriptor is None or self._invocation is None:
            return None
        tokens = [self._descriptor.vcs, self._descriptor.name]
        for flag, values in self._invocation.options.items():
            tokens += [flag, *values]
        return tokens + self._invocation.args


def _process_catalog(catalog):
    """
    Normalize the canonical catalog: Unset, a flat iterable of names (any vcs)
    or a mapping of vcs → names.
    """
    if catalog is Unset:
        return Unset
    if isinstance(catalog, Mapping):
        return MappingProxyType({vcs: frozenset(names) for vcs, names in catalog.items()})
    if isinstance(catalog, str) or not isinstance(catalog, Iterable):
        raise TypeError("translator 'catalog' must be an iterable of names or a mapping of names")
    return frozenset(catalog)


class Translator(metaclass=RecordType):
    """
    Delegation resolver: turns raw lines into Translations.

    Parameters
    - engine: the graph-mutation engine handed to direct handlers (e.g. hg_rebase()).
    - registry: Registry to match against (defaults to mercurius.mercurial.REGISTRY).
    - catalog: optional canonical command names accepted from delegates.
    - locale: catalog locale used to render fault messages.
    - shell, fancy, colorful, deferred: runtime flags for surfacing faults.

    Runtime flags
    - shell=False: terminal faults are raised; advisories go through warnings.warn.
    - shell=True: both are rendered to stderr with rich; a terminal fault exits
      the process unless deferred=True, in which case the failed Translation is
      returned.
    """
    __introspectable__ = (
        "engine",
        "registry",
        "catalog",
        "locale",
        "shell",
        "fancy",
        "colorful",
        "deferred",
    )

    __displayable__ = (
        "registry",
        "locale",
        "shell",
        "fancy",
        "colorful",
        "deferred",
    )

    def __init__(
            self,
            engine,
            /,
            registry=Unset,
            *,
            catalog=Unset,
            locale=Unset,
            shell=False,
            fancy=False,
            colorful=False,
            deferred=False
    ):
        if registry is Unset:
            from .mercurial import REGISTRY as registry
        if not isinstance(registry, Registry):
            raise TypeError(f"{type(self).__typename__} 'registry' must be a registry")
        if not isinstance(locale, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'locale' must be a string")
        self._engine = engine
        self._registry = registry
        self._catalog = _process_catalog(catalog)
        self._locale = coalesce(locale)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._deferred = bool(deferred)
        self._fallback = Unset

    @property
    def prog(self):
        return self._registry.prog

    def fallback(self, fallback, /):
        """
        Register a one-time handler receiving every fault instead of triggering it.

        Returns the same callable, enabling decorator-style usage: @translator.fallback
        """
        if not callable(fallback):
            raise TypeError(f"{type(self).__typename__} fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError(f"{type(self).__typename__} fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def _runtime(self):
        options = {
            "tool": self,
            "shell": self._shell,
            "fancy": self._fancy,
            "colorful": self._colorful,
            "deferred": self._deferred,
        }
        if self._locale is not None:
            options["locale"] = self._locale
        return options

    def trigger(self, fault, /):
        if self._fallback is not Unset:
            return self._fallback(fault)
        trigger(fault, **self._runtime())

    def parse(self, line, /, reporter=Unset):
        """
        Match a line and build its Invocation (no handler is run).

        Raises
        - UnrecognizedCommandError when no command matches.
        - MalformedInputError when the remainder cannot be split into tokens.
        """
        if not isinstance(line, str):
            raise TypeError("parse() argument must be a string")
        line = line.strip()
        command, match = self._registry.match(line)
        try:
            tokens = shlex.split(line[match.end():])
        except ValueError as error:
            raise MalformedInputError(
                "error-malformed-input",
                params={"line": line, "reason": str(error).lower()},
                hint="hint-quotes",
            ) from None
        options, args = parseargs(tokens, command.options)
        # the typed command word (alias included) follows the program name
        words = match.group(0).split()
        return Invocation(
            command,
            options,
            args,
            line=line,
            word=words[1] if len(words) > 1 else command.name,
            reporter=coalesce(reporter, Reporter()),
        )

    def _verify(self, descriptor):
        if self._catalog is Unset:
            return
        if isinstance(self._catalog, Mapping):
            known = descriptor.name in self._catalog.get(descriptor.vcs, ())
        else:
            known = descriptor.name in self._catalog
        if not known:
            raise UnknownCanonicalCommandError(
                "error-canonical-unknown",
                params={"vcs": descriptor.vcs, "name": descriptor.name},
            )

    def translate(self, line, /):
        """
        Resolve one line: match, parse, run the handler, verify the descriptor.

        Behavior
        - Validation and handler errors become the line's terminal fault; the
          registry and later lines are unaffected.
        - Advisories are surfaced first, then the terminal fault (if any).
        - Returns the Translation unless the fault was raised (non-shell mode)
          or the process exited (shell mode without deferred).
        """
        reporter = Reporter(**self._runtime())
        invocation = descriptor = None
        try:
            invocation = self.parse(line, reporter=reporter)
            if (descriptor := invocation.command(self._engine, invocation)) is not None:
                self._verify(descriptor)
        except CommandException as fault:
            descriptor = None
            reporter.fail(fault)

        translation = Translation(line, invocation, descriptor, reporter)
        for warning in translation.warnings:
            self.trigger(warning)
        if translation.fault is not None:
            self.trigger(translation.fault)
        return translation

    def __invoke__(self, line, /):
        return self.translate(line)


def invoke(object, line, /):
    """
    Convenience runner: call object.__invoke__(line) (a Translator or compatible object).
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(line)
    raise TypeError("invoke() first argument must implement __invoke__ method")


__all__ = (
    "Descriptor",
    "Command",
    "delegate",
    "execute",
    "Registry",
    "Translation",
    "Translator",
    "invoke",
)

# The metaclass is an implementation detail of the records above.
del RecordType
