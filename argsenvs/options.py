r"""
argsenvs option definitions.

Overview
- OptionDefinition: one logical option: accepted switches (or a sink), an optional
  environment-variable fallback, a value type, an optional default, required-ness,
  and the validator/handler callbacks it contributes to its name's chains.
- ValueType: the four value types (string, integer, boolean, list).
- Sink: the two switch-less capture modes.
  • Sink.POSITIONAL: collects every token no other option claims.
  • Sink.REMAINDER: collects every token after a bare "--".

Metadata (sanitized on construction)
- name: non-empty string, trimmed.
- switches: Iterable[str] | str | Sink. A bare string is one switch; the strings
  "positional" and "--" stand for the sinks. Switches must be non-empty, must not
  contain whitespace or "=", and must be unique within a definition.
- env: Unset | str (non-empty), becomes None when Unset.
- type: Unset | ValueType | str. Defaults to LIST for sinks, STRING otherwise. A
  string naming no ValueType is kept verbatim; the engine reports it as TYPE_UNKNOWN
  when a value reaches it. Sinks must be list-typed.
- default: anything; Unset means “no default”. False, 0 and "" are real defaults.
- required: bool.
- validators/handlers: a callable or an iterable of callables.
- descr: Unset | str (non-empty), becomes None when Unset.
- silent: bool; values are masked in logs, reprs and messages.

Quick example:
    >>> OptionDefinition("integer", ("--int", "-i"), env="INTEGER", type="integer", default=10)
    option-definition(name='integer', switches=('--int', '-i'), env='INTEGER', ...)
    >>> OptionDefinition.from_mapping({"name": "files", "arg": "positional"}).type
    <ValueType.LIST: 'list'>
"""
import builtins
import functools
import operator
import re
from collections.abc import Iterable, Mapping
from enum import Enum, StrEnum

from .utils import *


class ValueType(StrEnum):
    """
    value types an option can be coerced to.
    """
    STRING  = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    LIST    = "list"


class Sink(Enum):
    """
    switch-less capture modes; at most one option per registry may use each.
    """
    POSITIONAL = "positional"
    REMAINDER  = "--"


class DefinitionType(type):
    """
    Metaclass giving definitions stable, readable representations.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens).
    - Expose every name in __introspectable__ as a read-only mirror() property.
    - Provide __repr__/__rich_repr__ over those properties, masking the default of
      silent definitions.
    """
    __introspectable__ = ()

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
            for name in type(self).__introspectable__:
                value = getattr(self, name)
                if name == "default" and self.silent and value is not Unset:
                    value = "***"
                yield name, value
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, metadata, /):
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name


def _sanitize_switches(cls, metadata, /):
    """
    Normalize 'switches' into a Sink or a tuple of unique switch strings.
    """
    switches = metadata["switches"]

    if isinstance(switches, str):
        try:
            switches = Sink(switches)
        except ValueError:
            switches = (switches,)

    if isinstance(switches, Sink):
        metadata["switches"] = switches
        return

    if not isinstance(switches, Iterable):
        raise TypeError(f"{cls.__typename__} 'switches' must be a string, an iterable of strings, or a sink")

    sanitized = []
    for switch in switches:
        if not isinstance(switch, str):
            raise TypeError(f"{cls.__typename__} switches must be strings")
        elif not (switch := switch.strip()):
            raise ValueError(f"{cls.__typename__} switches cannot be empty-strings")
        elif "=" in switch or re.search(r"\s", switch):
            raise ValueError(f"{cls.__typename__} switch {switch!r} cannot contain '=' or whitespace")
        elif switch in sanitized:
            raise ValueError(f"{cls.__typename__} switches cannot contain duplicates")
        sanitized.append(switch)

    metadata["switches"] = tuple(sanitized)


def _sanitize_type(cls, metadata, /):
    """
    Resolve 'type' to a ValueType, keeping unrecognized names verbatim.
    """
    sink = isinstance(metadata["switches"], Sink)

    match metadata["type"]:
        case UnsetType():
            type = ValueType.LIST if sink else ValueType.STRING
        case ValueType() as type:
            pass
        case str() as type:
            try:
                type = ValueType(type.strip().lower())
            except ValueError:
                pass
        case _:
            raise TypeError(f"{cls.__typename__} 'type' must be a value-type or a string")

    if sink and type is not ValueType.LIST:
        raise ValueError(f"{cls.__typename__} sink {metadata['name']!r} must be list-typed")

    metadata["type"] = type


def _sanitize_strings(cls, metadata, /):
    for name in ("env", "descr"):
        if not isinstance(value := metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(value)


def _sanitize_callbacks(cls, metadata, /):
    for name in ("validators", "handlers"):
        callbacks = metadata[name]
        if builtins.callable(callbacks):
            callbacks = (callbacks,)
        elif not isinstance(callbacks, Iterable) or isinstance(callbacks, str | Mapping):
            raise TypeError(f"{cls.__typename__} {name!r} must be a callable or an iterable of callables")
        callbacks = tuple(callbacks)
        if not all(map(builtins.callable, callbacks)):
            raise TypeError(f"{cls.__typename__} {name!r} must contain only callables")
        metadata[name] = callbacks


def _sanitize_default(cls, metadata, /):
    default = metadata["default"]
    if metadata["type"] is ValueType.LIST and isinstance(default, list):
        default = tuple(default)
    metadata["default"] = default


class OptionDefinition(metaclass=DefinitionType):
    """
    Declarative description of one logical option.

    Several definitions may share a name (see Registry.register): the first one
    decides how the option is parsed (switches, env, type, default, required);
    every one of them contributes its validators and handlers to the chains.
    """

    __introspectable__ = (
        "name",
        "switches",
        "env",
        "type",
        "default",
        "required",
        "validators",
        "handlers",
        "descr",
        "silent",
    )

    def __new__(
            cls,
            name,
            switches=(),
            env=Unset,
            type=Unset,
            default=Unset,
            required=False,
            validators=(),
            handlers=(),
            descr=Unset,
            *,
            silent=False
    ):
        metadata = {
            "name": name,
            "switches": switches,
            "env": env,
            "type": type,
            "default": default,
            "required": bool(required),
            "validators": validators,
            "handlers": handlers,
            "descr": descr,
            "silent": bool(silent),
        }
        _sanitize_name(cls, metadata)
        _sanitize_switches(cls, metadata)
        _sanitize_type(cls, metadata)
        _sanitize_strings(cls, metadata)
        _sanitize_callbacks(cls, metadata)
        _sanitize_default(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @classmethod
    def from_mapping(cls, mapping, /):
        """
        Build a definition from a plain mapping.

        Both the Python field names and the short keys of declarative option
        tables are understood: "arg" for switches, "validator"/"handler" for the
        callback lists, "description" for descr.
        """
        if not isinstance(mapping, Mapping):
            raise TypeError("from_mapping() argument must be a mapping")

        aliases = {
            "arg": "switches",
            "validator": "validators",
            "handler": "handlers",
            "description": "descr",
        }
        fields = {}
        for key, value in mapping.items():
            key = aliases.get(key, key)
            if key not in cls.__introspectable__:
                raise TypeError(f"{cls.__typename__} got an unexpected field {key!r}")
            if key in fields:
                raise TypeError(f"{cls.__typename__} got multiple values for field {key!r}")
            fields[key] = value

        try:
            name = fields.pop("name")
        except KeyError:
            raise TypeError(f"{cls.__typename__} mapping must specify a 'name'") from None
        silent = fields.pop("silent", False)
        return cls(name, **fields, silent=silent)

    @property
    def sink(self):
        """
        The Sink this definition captures into, or None for switch options.
        """
        return self._switches if isinstance(self._switches, Sink) else None

    def accepts(self, switch, /):
        """
        Whether a candidate switch (exact string) identifies this option.
        """
        return self.sink is None and switch in self._switches

    def expand(self, *, validators=(), handlers=()):
        """
        A callback-only stacked definition for the same name.
        """
        return type(self)(self._name, validators=validators, handlers=handlers)


def definitions(*batches):
    """
    Flatten definitions, mappings and iterables of them into OptionDefinitions.
    """
    for batch in batches:
        if isinstance(batch, OptionDefinition):
            yield batch
        elif isinstance(batch, Mapping):
            yield OptionDefinition.from_mapping(batch)
        elif isinstance(batch, Iterable) and not isinstance(batch, str):
            yield from definitions(*batch)
        else:
            raise TypeError("option definitions must be definitions, mappings, or iterables of them")


__all__ = (
    # Types
    "ValueType",
    "Sink",
    "OptionDefinition",

    # Helpers
    "definitions",
)

# Keep the metaclass out of star-imports.
del DefinitionType
