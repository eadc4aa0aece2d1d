"""
argsenvs resolution engine.

What this module provides
- Resolver: runs the resolution phases over an argv token sequence and an
  environment mapping, against a Registry, and returns a Resolution.
- Resolution: (values, errors) named tuple; truthy iff there are no errors.
- publish(): explicit, opt-in copy of resolved values into a mutable store.
- TRUTHY / FALSEY: default boolean word lists (case-insensitive).

Phases
1. argument scan      tokens left to right; "--switch=value" or "--switch value";
                      booleans without "=value" are True and consume nothing;
                      list options accumulate, other options keep the last value;
                      unclaimed tokens go to the positional sink or become UNKNOWN_ARG;
                      with a remainder sink, everything after a bare "--" goes to it.
2. environment        options argv did not supply: env var, else default, else
                      MISSING_ARG when required.
3. coercion           raw strings to boolean/integer/string/list (defaults are
                      already typed and bypass this); PARSE, TYPE_UNKNOWN.
4. validation         chained validators of every stacked definition; VALIDATION.
5. handling           chained handlers; skipped entirely when any error exists.
6. freeze             read-only mapping, tuples for lists, tuple of errors.

Errors are collected, never raised, except configuration errors (an exhausted
token stream, a callback returning something that is not a verdict), which
abort the resolution. An option with an error has no value in the result.

Quick example:
    >>> registry = Registry(OptionDefinition("integer", ("--int", "-i"), type="integer", default=10))
    >>> Resolver(registry, ["--int=12"]).resolve()
    Resolution(values=mappingproxy({'integer': 12}), errors=())
"""
import itertools
import re
from collections import deque, namedtuple
from collections.abc import Iterable, Mapping, MutableMapping
from types import MappingProxyType

from .faults import *
from .logs import getLogger
from .options import ValueType
from .registry import Registry
from .utils import *
from .verdicts import *

logger = getLogger("engine")

TRUTHY = (
    "true", "yes", "y", "on",  # english
    "1", "high", "h",  # electronics
    "da", "ja", "oui", "si", "sí",  # other languages
)
FALSEY = (
    "false", "no", "n", "off",  # english
    "0", "low", "l",  # electronics
    "nyet", "niet", "geen", "nein", "non",  # other languages
)


class Resolution(namedtuple("Resolution", ("values", "errors"))):
    """
    Result of one resolution: a read-only value mapping and a tuple of error records.
    """
    __slots__ = ()

    @property
    def ok(self):
        return not self.errors

    def __bool__(self):
        return self.ok


def _words(words, name, /):
    if isinstance(words, str) or not isinstance(words, Iterable):
        raise TypeError("Resolver() %r must be an iterable of strings" % name)
    words = tuple(words)
    if not all(isinstance(word, str) for word in words):
        raise TypeError("Resolver() %r must contain only strings" % name)
    return frozenset(word.strip().lower() for word in words)


def _missing(definition, /):
    """
    Message of a MISSING_ARG record, naming every switch and the env var.
    """
    switches = ['"%s"' % switch for switch in definition.switches] if definition.sink is None else []
    env = definition.env

    if not switches:
        if env is None:
            return "Missing required argument."
        return 'Missing required environment variable "%s".' % env

    match switches:
        case [one]:
            listing = one
        case [first, second]:
            listing = "%s or %s" % (first, second)
        case [*head, last]:
            listing = "%s, or %s" % (", ".join(head), last)

    message = "Missing required %s %s" % (pluralize("argument", len(switches)), listing)
    if env is None:
        return message + "."
    return message + ' or environment variable "%s".' % env


class Resolver:
    """
    Resolution engine bound to one registry and one argv/env snapshot.

    Parameters
    - registry: Registry
    - argv: Iterable[str], the argument tokens (program name already stripped).
    - env: Mapping[str, str], the environment; copied on construction.
    - truthy / falsey: boolean word lists, matched case-insensitively.

    resolve() always runs every phase from scratch. The resolution/values/errors
    properties memoize the last run and re-run it when the registry changed.
    """

    def __init__(self, registry, /, argv=(), env=Unset, *, truthy=TRUTHY, falsey=FALSEY):
        if not isinstance(registry, Registry):
            raise TypeError("Resolver() first argument must be a registry")
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("Resolver() 'argv' must be an iterable of strings")
        argv = tuple(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("Resolver() 'argv' must contain only strings")
        env = coalesce(env, {})
        if not isinstance(env, Mapping):
            raise TypeError("Resolver() 'env' must be a mapping")

        self._registry = registry
        self._argv = argv
        self._env = MappingProxyType(dict(env))
        self._truthy = _words(truthy, "truthy")
        self._falsey = _words(falsey, "falsey")

        self._resolution = None
        self._revision = None

        # scratch state, rebuilt by every resolve()
        self._values = {}
        self._sources = {}
        self._errors = []
        self._failed = set()

    @property
    def registry(self):
        return self._registry

    @property
    def argv(self):
        return self._argv

    @property
    def env(self):
        return self._env

    @property
    def resolution(self):
        """
        The memoized Resolution; recomputed when definitions were registered since.
        """
        if self._resolution is None or self._revision != self._registry.revision:
            self.resolve()
        return self._resolution

    @property
    def values(self):
        return self.resolution.values

    @property
    def errors(self):
        return self.resolution.errors

    def resolve(self):
        """
        Run every phase over the argv/env snapshot and return a new Resolution.

        Raises
        - MissingValueError: a value-bearing switch is the last token.
        - VerdictError: a validator or handler returned something that is not a verdict.
        """
        self._values = {}
        self._sources = {}
        self._errors = []
        self._failed = set()

        revision = self._registry.revision
        logger.debug("resolving %d option(s) from %d token(s)", len(self._registry), len(self._argv))

        self._scan_argv()
        self._scan_env()
        self._coerce()
        self._validate()
        self._handle()

        self._resolution = self._freeze()
        self._revision = revision

        logger.debug("resolved %d value(s) with %d error(s)", len(self._resolution.values), len(self._resolution.errors))
        return self._resolution

    def _fail(self, error, /):
        """
        Record an error; an option in error loses its value.
        """
        self._errors.append(error)
        if (name := error.option) is not None:
            self._failed.add(name)
            self._values.pop(name, None)
        logger.debug("%s: %s", error.code.name, error.message)

    def _collect(self, name, value, /):
        """
        Store an argv value: list options accumulate, others keep the last occurrence.
        """
        definition = self._registry.primary(name)
        if definition.type is ValueType.LIST:
            self._values.setdefault(name, []).append(value)
        else:
            self._values[name] = value
        self._sources[name] = "argv"
        logger.debug("argv supplied %r = %s", name, mask(value, definition.silent))

    def _scan_argv(self):
        """
        phase 1: match tokens against switches, sinks and the remainder marker.
        """
        tokens = deque(self._argv)
        positional = self._registry.positional
        remainder = self._registry.remainder

        while tokens:
            token = tokens.popleft()

            if token == "--" and remainder is not None:
                self._values.setdefault(remainder, []).extend(tokens)
                self._sources[remainder] = "argv"
                logger.debug("remainder %r captured %d token(s)", remainder, len(tokens))
                tokens.clear()
                break

            switch, separator, inline = token.partition("=")

            if (name := self._registry.match(switch)) is None:
                if positional is not None:
                    self._collect(positional, token)
                    continue
                self._fail(UnknownArgumentError(
                    'Unknown command line option "%s"' % switch,
                    token=token,
                    source="argv",
                    value=inline if separator else None,
                    hint="check the spelling of %r" % switch,
                ))
                continue

            definition = self._registry.primary(name)

            if separator:
                value = inline
            elif definition.type is ValueType.BOOLEAN:
                value = True
            else:
                try:
                    value = tokens.popleft()
                except IndexError:
                    raise MissingValueError(
                        'Option "%s" expects a value after "%s"' % (name, switch),
                        option=name,
                        token=token,
                        source="argv",
                        hint="pass %s=<value> or %s <value>" % (switch, switch),
                    ) from None

            self._collect(name, value)

    def _scan_env(self):
        """
        phase 2: environment fallback, then default, then the required check.
        """
        for name in self._registry.names:
            if name in self._values:
                continue

            definition = self._registry.primary(name)

            if definition.env is not None and definition.env in self._env:
                value = self._env[definition.env]
                self._values[name] = [value] if definition.type is ValueType.LIST else value
                self._sources[name] = "env"
                logger.debug("env %s supplied %r = %s", definition.env, name, mask(value, definition.silent))
            elif definition.default is not Unset:
                self._values[name] = definition.default
                self._sources[name] = "default"
                logger.debug("default supplied %r = %s", name, mask(definition.default, definition.silent))
            elif definition.required:
                self._fail(MissingArgumentError(
                    _missing(definition),
                    option=name,
                    hint="pass it on the command line or through the environment",
                ))

    def _coerce(self):
        """
        phase 3: convert raw values to their declared types.
        """
        for name in self._registry.names:
            if name not in self._values or self._sources[name] == "default":
                continue

            definition = self._registry.primary(name)
            raw = self._values[name]
            shown = mask(raw, definition.silent) if definition.silent else '"%s"' % (raw,)

            match definition.type:
                case ValueType.BOOLEAN:
                    if isinstance(raw, bool):
                        value = raw
                    elif (word := str(raw).strip().lower()) in self._truthy:
                        value = True
                    elif word in self._falsey:
                        value = False
                    else:
                        self._fail(ParseError(
                            'Could not parse boolean argument "%s" value %s' % (name, shown),
                            option=name,
                            source=self._sources[name],
                            value=raw,
                            hint="use a yes/no word such as true, false, on or off",
                        ))
                        continue
                case ValueType.INTEGER:
                    if isinstance(raw, str) and re.fullmatch(r"[+-]?[0-9]+", raw.strip()):
                        value = int(raw.strip(), 10)
                    else:
                        self._fail(ParseError(
                            'Could not parse integer argument "%s" value %s' % (name, shown),
                            option=name,
                            source=self._sources[name],
                            value=raw,
                            hint="use a base-10 whole number",
                        ))
                        continue
                case ValueType.STRING:
                    value = raw
                case ValueType.LIST:
                    value = tuple(raw) if isinstance(raw, list | tuple) else (raw,)
                case _:
                    self._fail(UnknownTypeError(
                        'Unknown type "%s" for argument "%s"' % (definition.type, name),
                        option=name,
                        source=self._sources[name],
                        value=raw,
                        hint="declare one of: %s" % ", ".join(ValueType),
                    ))
                    continue

            self._values[name] = value

    def _validate(self):
        """
        phase 4: run the validator chain of every option that still has a value.
        """
        view = MappingProxyType(self._values)

        for name in self._registry.names:
            if name in self._failed or name not in self._values:
                continue

            value = self._values[name]
            callbacks = itertools.chain.from_iterable(
                definition.validators for definition in self._registry.stack(name)
            )
            for callback in callbacks:
                match as_validation(callback(name, value, view), option=name):
                    case Accept(UnsetType()):
                        break
                    case Accept(replacement):
                        self._values[name] = replacement
                        break
                    case Reject(message):
                        self._fail(ValidationError(
                            message,
                            option=name,
                            source=self._sources[name],
                            value=value,
                        ))
                        break
                    case DeferType():
                        continue

    def _handle(self):
        """
        phase 5: run the handler chains, only when the run has no errors at all.
        """
        if self._errors:
            logger.debug("handlers skipped, %d error(s) recorded", len(self._errors))
            return

        view = MappingProxyType(self._values)

        for name in self._registry.names:
            if name not in self._values:
                continue

            value = self._values[name]
            callbacks = itertools.chain.from_iterable(
                definition.handlers for definition in self._registry.stack(name)
            )
            for callback in callbacks:
                match as_handling(callback(name, value, view), option=name):
                    case Proceed(replacement):
                        value = replacement
                    case Commit(replacement):
                        value = replacement
                        break
                    case DeferType():
                        continue

            self._values[name] = value

    def _freeze(self):
        """
        phase 6: read-only values in registry order, tuple of errors.
        """
        values = {
            name: freeze(self._values[name]) for name in self._registry.names if name in self._values
        }
        return Resolution(MappingProxyType(values), tuple(self._errors))


def publish(target, values, /, *, key=Unset):
    """
    Copy resolved values into a mutable store, explicitly.

    Parameters
    - target: MutableMapping (a settings dict, vars(builtins), ...)
    - values: Mapping | Resolution
    - key: when given, the whole mapping is stored under target[key];
      otherwise every option is written under its own name.

    Returns the target.
    """
    if not isinstance(target, MutableMapping):
        raise TypeError("publish() first argument must be a mutable mapping")
    if isinstance(values, Resolution):
        values = values.values
    if not isinstance(values, Mapping):
        raise TypeError("publish() second argument must be a mapping or a resolution")

    if key is Unset:
        target.update(values)
    else:
        target[key] = values
    logger.debug("published %d value(s)%s", len(values), "" if key is Unset else " under %r" % key)
    return target


__all__ = (
    "TRUTHY",
    "FALSEY",
    "Resolution",
    "Resolver",
    "publish",
)
