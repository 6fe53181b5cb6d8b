"""
Mercurius utilities shared by the translation layers.

Contents
- UnsetType / Unset
  • "Not provided" marker for parameters where None is a meaningful value
    (a fallback locale, an unbounded maximum, a descr of None).

- coalesce(value, default=None)
  • Turn Unset into a default; every other value, falsey or not, passes through.

- rename(callable, name) / @rename("name")
  • Give generated functions (reprs, decorator wrappers) a readable __name__.

- mirror("attr")
  • Read-only property over self._attr. Containers come back frozen, so
    definitions, registries and translations cannot be edited through what
    they expose.

Import these from mercurius.utils; the package root does not re-export them.
"""
import builtins
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    - one instance per process (UnsetType() returns it)
    - falsey, repr "Unset", survives copy and pickle as itself
    - sealed against subclassing
    - usable in unions: `str | Unset` is `str | UnsetType`
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    __ror__ = __or__

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")


def coalesce(object, default=None, /):
    """
    coalesce(Unset, "zh_CN") -> "zh_CN"; coalesce(None, "zh_CN") -> None.
    """
    if object is Unset:
        return default
    return object


def _rename(callable, name):
    if not builtins.callable(callable):
        raise TypeError("rename() target must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() name must be a string")
    try:
        callable.__name__ = callable.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"rename() cannot rename {callable!r}") from None
    return callable


def rename(*parameters):
    """
    rename(callable, name) renames in place and returns the callable;
    rename(name) returns a decorator doing the same.
    """
    match parameters:
        case (callable, name):
            return _rename(callable, name)
        case (name,):
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def decorator(callable):
                return _rename(callable, name)

            return _rename(decorator, "rename")
        case _:
            raise TypeError(f"rename() takes 1 or 2 arguments ({len(parameters)} given)")


def _immortalize(object):
    # named tuples keep their type, other sequences become tuples
    if isinstance(object, tuple) and hasattr(object, "_make"):
        return type(object)._make(map(_immortalize, object))
    if isinstance(object, Mapping):
        return MappingProxyType({key: _immortalize(value) for key, value in object.items()})
    if isinstance(object, Set):
        return frozenset(map(_immortalize, object))
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Property returning a frozen view of self._{name}.

        class Command:
            options = mirror("options")   # reads self._options, returns a tuple
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, f"_{name}"))

    return property(getter)


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)
