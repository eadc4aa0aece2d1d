"""
argsenvs utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the options, registry and engine layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None, False and 0.
    A default of False is a real default; a default of Unset is no default.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, keep every other value (falsey ones included).

- @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- mirror("attr")
  • Read-only property over a private backing field (self._attr), frozen on read.

- freeze(object)
  • Shallow immutable snapshot: sequences → tuple, mappings → MappingProxyType, sets → frozenset.

- mask(value, silent)
  • Printable form of a value that hides secrets of silent options.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(False, "fallback")
    False
    >>> freeze(["a", "b"])
    ('a', 'b')
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns object unless it is Unset, in which case default is returned.
    Falsey values like None, 0, "", False or () are preserved as-is.
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator giving a generated callable a stable __name__ and __qualname__.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def freeze(object, /):
    """
    Return a shallow, read-only snapshot of a container.

    Rules
    - Sequence (non-string) → tuple
    - Mapping → MappingProxyType over a copy
    - Set → frozenset
    - anything else → unchanged
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Containers are returned frozen (see freeze()) so callers cannot mutate
    definition state through the public API.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return freeze(getattr(self, "_" + name))

    return property(getter)


def mask(value, silent=False, /):
    """
    Printable form of a value for logs and diagnostics.

    Values of silent options are replaced by "***" (lists keep their length
    visible, nothing else).
    """
    if not silent or value is Unset or value is None:
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[%s]" % ", ".join("***" for _ in value)
    return "***"


def pluralize(word, count, /):
    """
    Minimal English plural used by messages: "argument" → "arguments".
    """
    if count == 1:
        return word
    if word.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    return word + "s"


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None (or False) is a meaningful user value.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "freeze",
    "mirror",
    "mask",
    "pluralize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
