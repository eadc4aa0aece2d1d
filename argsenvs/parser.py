"""
argsenvs façade: one-call resolution and the stateful Parser.

What this module provides
- ParserOptions: the configuration bundle (argv, env, boolean words, rendering
  flags, opt-in publishing target).
- Parser: registry + resolver pair with incremental registration; re-parses
  after new options once it has parsed (unless told not to).
- parse(options, *definitions): build, resolve once, return the values or
  raise ResolutionExit carrying every error record.

Quick start
    from argsenvs import parse, OptionDefinition

    values = parse(
        {"env": {"TOKEN": "s3cr3t"}},
        OptionDefinition("token", "--token", env="TOKEN", required=True, silent=True),
        OptionDefinition("verbose", ("--verbose", "-v"), type="boolean", default=False),
        OptionDefinition("files", "positional"),
    )

Shell mode
- With shell=True a failed parse is rendered with rich on stderr and the process
  exits with status 1, instead of raising.
"""
import os
import sys
from collections.abc import Iterable, Mapping, MutableMapping
from types import MappingProxyType

from .engine import *
from .faults import ResolutionExit, trigger
from .logs import getLogger
from .registry import Registry
from .utils import *

logger = getLogger("parser")


class ParserOptions:
    """
    Configuration bundle of a Parser.

    Parameters
    - argv: Iterable[str]; defaults to sys.argv[1:] read at construction.
    - env: Mapping[str, str]; defaults to a snapshot of os.environ.
    - truthy / falsey: boolean words overriding TRUTHY / FALSEY.
    - target: MutableMapping or None; when set, successful parses publish their
      values into it (see engine.publish).
    - key: publish every value under target[key] instead of one entry per option.
    - shell, fancy, colorful: how ResolutionExit is surfaced (see faults.trigger).
    """
    __slots__ = ("argv", "env", "truthy", "falsey", "target", "key", "shell", "fancy", "colorful")

    def __init__(
            self,
            argv=Unset,
            env=Unset,
            truthy=TRUTHY,
            falsey=FALSEY,
            target=None,
            key=Unset,
            *,
            shell=False,
            fancy=False,
            colorful=True
    ):
        if target is not None and not isinstance(target, MutableMapping):
            raise TypeError("ParserOptions 'target' must be a mutable mapping")
        if not isinstance(key, str | Unset):
            raise TypeError("ParserOptions 'key' must be a string")
        for name, words in (("truthy", truthy), ("falsey", falsey)):
            if isinstance(words, str) or not isinstance(words, Iterable):
                raise TypeError("ParserOptions %r must be an iterable of strings" % name)

        self.argv = tuple(coalesce(argv, sys.argv[1:]))
        self.env = MappingProxyType(dict(coalesce(env, os.environ)))
        self.truthy = tuple(truthy)
        self.falsey = tuple(falsey)
        self.target = target
        self.key = key
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

    @classmethod
    def coerce(cls, options=Unset, /):
        """
        Accept ParserOptions, a mapping of its fields, or Unset (all defaults).
        """
        if options is Unset:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            return cls(**options)
        raise TypeError("parser options must be ParserOptions or a mapping")

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(**{name: getattr(self, name) for name in self.__slots__} | overrides)

    def __repr__(self):
        return "parser-options(%s)" % ", ".join(
            "%s=%r" % (name, getattr(self, name)) for name in self.__slots__ if name != "env"
        )


class Parser:
    """
    Stateful resolver: add options over time, parse, read args/errors.

    add_option()/add_options() after a parse() re-parse right away, so args and
    errors always reflect every registered option. Pass reparse=False to batch
    registrations; the next read of args/errors then re-parses lazily.
    """

    def __init__(self, options=Unset, /, *batches):
        self._options = ParserOptions.coerce(options)
        self._registry = Registry()
        self._resolver = Resolver(
            self._registry,
            self._options.argv,
            self._options.env,
            truthy=self._options.truthy,
            falsey=self._options.falsey,
        )
        self._parsed = False
        self._revision = None
        self._registry.subscribe(self._ready)
        if batches:
            self.add_options(*batches)

    @property
    def options(self):
        return self._options

    @property
    def registry(self):
        return self._registry

    @property
    def parsed(self):
        return self._parsed

    @property
    def resolution(self):
        """
        Latest Resolution; an empty one before the first parse().

        Options registered since the last parse() trigger a new parse() first, so
        a configured target is published to as well.
        """
        if not self._parsed:
            return Resolution(MappingProxyType({}), ())
        if self._revision != self._registry.revision:
            self.parse()
        return self._resolver.resolution

    @property
    def args(self):
        return self.resolution.values

    @property
    def errors(self):
        return self.resolution.errors

    def add_option(self, definition, /, reparse=True):
        """
        Register one definition (or mapping); re-parse when already parsed and reparse is true.
        """
        self._registry.register(definition, notify=reparse)

    def add_options(self, *batches):
        """
        Register definitions, mappings or iterables of them; re-parse once if already parsed.
        """
        self._registry.register_many(*batches)

    def parse(self):
        """
        Resolve from scratch; publish on success when a target is configured.

        Returns True when no error was recorded.
        """
        resolution = self._resolver.resolve()
        self._parsed = True
        self._revision = self._registry.revision
        if resolution.ok and self._options.target is not None:
            publish(self._options.target, resolution.values, key=self._options.key)
        return resolution.ok

    def _ready(self, registry, /):
        if self._parsed:
            logger.debug("new options registered, re-parsing")
            self.parse()


def parse(options=Unset, /, *batches):
    """
    Resolve definitions once and return the values.

    Parameters
    - options: ParserOptions | Mapping | Unset (process argv/env)
    - *batches: OptionDefinition, mappings, or iterables of them

    Returns
    - Mapping[str, object]: the read-only resolved values.

    Raises
    - ResolutionExit: any error record; .exceptions holds all of them. In shell
      mode the exit is rendered on stderr and the process exits instead.
    - ConfigurationError: broken definitions or input (see faults).
    """
    parser = Parser(options, *batches)
    if not parser.parse():
        trigger(
            ResolutionExit(parser.errors),
            shell=parser.options.shell,
            fancy=parser.options.fancy,
            colorful=parser.options.colorful,
        )
    return parser.args


__all__ = (
    "ParserOptions",
    "Parser",
    "parse",
)
