"""
argsenvs option registry.

The registry accumulates option definitions keyed by name. Definitions for a
name stack instead of replacing each other:

- the FIRST definition of a name is its primary: it alone decides how the option
  is parsed (switches, env, type, default, required);
- EVERY definition of a name contributes its validators and handlers, in
  registration order, to that name's chains.

Storage is an arena (every definition, in registration order) plus an index
(name → arena positions); names iterate in first-registration order, which is
the order the engine processes options and reports their errors in.

At most one option may be the positional sink and at most one the remainder
sink; a second one is a DuplicateSinkError at registration time.

Quick example:
    >>> registry = Registry()
    >>> registry.register_many([
    ...     OptionDefinition("file", ("--file", "-f")),
    ...     OptionDefinition("rest", "positional"),
    ... ])
    >>> registry.names
    ('file', 'rest')
    >>> registry.match("-f")
    'file'
"""
from collections.abc import Mapping

from .faults import DuplicateSinkError
from .logs import getLogger
from .options import OptionDefinition, Sink, definitions
from .utils import Unset

logger = getLogger("registry")


class Registry:
    """
    Ordered, stacked collection of option definitions.
    """

    def __init__(self, *batches):
        self._arena = []
        self._index = {}
        self._switches = {}
        self._sinks = dict.fromkeys(Sink)
        self._subscribers = []
        self._revision = 0
        if batches:
            self.register_many(*batches)

    @property
    def revision(self):
        """
        Number of registrations so far; changes whenever the registry does.
        """
        return self._revision

    @property
    def names(self):
        """
        Unique option names in first-registration order.
        """
        return tuple(self._index)

    @property
    def positional(self):
        return self._sinks[Sink.POSITIONAL]

    @property
    def remainder(self):
        return self._sinks[Sink.REMAINDER]

    def stack(self, name, /):
        """
        Every definition registered under name, in registration order.
        """
        return tuple(self._arena[index] for index in self._index[name])

    def primary(self, name, /):
        """
        The definition that decides how name is parsed (its first one).
        """
        return self._arena[self._index[name][0]]

    def match(self, switch, /):
        """
        Name of the first option, in registry order, accepting switch; None if none does.
        """
        return self._switches.get(switch)

    def register(self, definition, /, *, notify=True):
        """
        Append a definition to its name's stack.

        Parameters
        - definition: OptionDefinition | Mapping (see OptionDefinition.from_mapping)
        - notify: tell subscribers the registry is ready to resolve

        Raises
        - DuplicateSinkError: a different option already owns the definition's sink.
        """
        if isinstance(definition, Mapping):
            definition = OptionDefinition.from_mapping(definition)
        if not isinstance(definition, OptionDefinition):
            raise TypeError("register() argument must be an option definition or a mapping")

        name = definition.name
        primary = name not in self._index
        self._claim(definition, self._sinks, self._index)

        if primary:
            self._index[name] = []
            for switch in definition.switches if definition.sink is None else ():
                self._switches.setdefault(switch, name)

        self._index[name].append(len(self._arena))
        self._arena.append(definition)
        self._revision += 1

        logger.debug("registered %s definition #%d for %r", "primary" if primary else "stacked", len(self._index[name]), name)

        if notify:
            self._notify()

    def register_many(self, *batches):
        """
        Register definitions (or iterables/mappings of them) in order, then notify once.

        A batch is all-or-nothing: every definition is built and checked for sink
        conflicts before the first one is registered.
        """
        batch = tuple(definitions(*batches))
        owners, known = dict(self._sinks), set(self._index)
        for definition in batch:
            self._claim(definition, owners, known)
            known.add(definition.name)

        for definition in batch:
            self.register(definition, notify=False)
        self._notify()

    def hook(self, *, validators=Unset, handlers=Unset):
        """
        Register validators/handlers by object form.

        Each of validators/handlers may be
        - a callable: stacked onto every option registered so far;
        - a mapping {name: callable | iterable of callables}: stacked onto each named option.

        The expansion happens now, at registration time: options registered later do
        not receive a callable given here.
        """
        expansions = {}

        for field, callbacks in (("validators", validators), ("handlers", handlers)):
            if callbacks is Unset:
                continue
            if callable(callbacks):
                callbacks = dict.fromkeys(self._index, callbacks)
            elif not isinstance(callbacks, Mapping):
                raise TypeError("hook() %r must be a callable or a mapping of option names to callables" % field)
            for name, callback in callbacks.items():
                if name not in self._index:
                    raise ValueError("hook() %r names unknown option %r" % (field, name))
                expansions.setdefault(name, {})[field] = callback

        self.register_many(
            self.primary(name).expand(**fields) for name, fields in expansions.items()
        )

    def subscribe(self, callback, /):
        """
        Call callback(registry) whenever a registration batch completes.
        """
        if not callable(callback):
            raise TypeError("subscribe() argument must be callable")
        self._subscribers.append(callback)
        return callback

    @staticmethod
    def _claim(definition, owners, known, /):
        """
        Record the sink of a primary definition in owners; stacked definitions claim nothing.

        Raises DuplicateSinkError when a different option already owns that sink.
        """
        name = definition.name
        if name in known or (sink := definition.sink) is None:
            return
        if (owner := owners[sink]) is not None and owner != name:
            raise DuplicateSinkError(
                "option %r cannot be the %s sink, option %r already is" % (name, sink.name.lower(), owner),
                option=name,
                hint="declare a single %s option" % sink.name.lower(),
            )
        owners[sink] = name

    def _notify(self):
        for subscriber in tuple(self._subscribers):
            subscriber(self)

    def __getitem__(self, name, /):
        return self.primary(name)

    def __contains__(self, name, /):
        return name in self._index

    def __iter__(self):
        return iter(tuple(self._index))

    def __len__(self):
        return len(self._index)

    def __repr__(self):
        return "registry(%s)" % ", ".join(map(repr, self._index))

    def __rich_repr__(self):
        for name in self._index:
            yield name, self.stack(name)


__all__ = (
    "Registry",
)
