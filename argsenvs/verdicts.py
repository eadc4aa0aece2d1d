"""
Verdicts returned by validators and handlers.

Validators and handlers are chained per option: every stacked definition of a
name contributes its callbacks, in registration order. Each callback answers
with one of a closed set of verdicts, so the engine can `match` on them:

- validators
  • Accept(value=Unset): the value is valid; stop validating. A value other than
    Unset replaces the coerced value.
  • Reject(message): the value is invalid; records a VALIDATION error and stops.
  • Defer: no judgment; ask the next validator. A chain of Defers passes.

- handlers
  • Proceed(value): replace the value and continue with the next handler.
  • Commit(value): replace the value and stop the chain for this option.
  • Defer: keep the value and continue with the next handler.

Legacy validator returns (normalized by as_validation()):
- None  → Accept()
- str   → Reject(str)
"""
import functools
from typing import final

from .faults import VerdictError
from .utils import Unset


class Verdict:
    """
    Base of the value-carrying verdicts; equality is by kind and payload.
    """
    __slots__ = ()

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __hash__(self):
        return hash((type(self), *(getattr(self, name) for name in self.__slots__)))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join(repr(getattr(self, name)) for name in self.__slots__))


@final
class Accept(Verdict):
    __slots__ = ("value",)
    __match_args__ = ("value",)

    def __init__(self, value=Unset, /):
        self.value = value


@final
class Reject(Verdict):
    __slots__ = ("message",)
    __match_args__ = ("message",)

    def __init__(self, message, /):
        if not isinstance(message, str):
            raise TypeError("Reject() argument must be a string")
        self.message = message


@final
class Proceed(Verdict):
    __slots__ = ("value",)
    __match_args__ = ("value",)

    def __init__(self, value, /):
        self.value = value


@final
class Commit(Verdict):
    __slots__ = ("value",)
    __match_args__ = ("value",)

    def __init__(self, value, /):
        self.value = value


@final
class DeferType:
    """
    Singleton type of the Defer verdict ("ask the next callback").
    """
    __slots__ = ()

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __repr__(self):
        return "Defer"

    def __reduce__(self):
        return "Defer"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'DeferType' is not an acceptable base type")


Defer = DeferType()


def as_validation(verdict, /, *, option):
    """
    Normalize a validator's return value into Accept/Reject/Defer.
    """
    match verdict:
        case Accept() | Reject() | DeferType():
            return verdict
        case None:
            return Accept()
        case str():
            return Reject(verdict)
    raise VerdictError(
        "validator for option %r returned %r, expected Accept, Reject or Defer" % (option, verdict),
        option=option,
        hint="return a verdict from argsenvs.verdicts",
    )


def as_handling(verdict, /, *, option):
    """
    Check a handler's return value is one of Proceed/Commit/Defer.
    """
    match verdict:
        case Proceed() | Commit() | DeferType():
            return verdict
    raise VerdictError(
        "handler for option %r returned %r, expected Proceed, Commit or Defer" % (option, verdict),
        option=option,
        hint="return a verdict from argsenvs.verdicts",
    )


__all__ = (
    "Verdict",
    "Accept",
    "Reject",
    "Proceed",
    "Commit",
    "DeferType",
    "Defer",
    "as_validation",
    "as_handling",
)
