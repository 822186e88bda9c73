r"""
Argot option declarations.

Overview
- Kinds
  • Flag: presence-only switch (e.g., -v/--verbose). Never required, default forced to False.
  • Named: value-bearing key (--name=value or -n value), with an optional result label ('value').
  • Pos: positional value, matched by order once flags and named options are stripped.
  • Rest: catch-all collector for positional tokens left over after every Pos is filled.

- Tagging
  • Every record carries an explicit Kind (option.kind); the matcher dispatches on it.

- Introspection & representation
  • OptionType metaclass provides stable __repr__/__rich_repr__ and exposes the fields
    listed in __introspectable__ as read-only properties (see utils.mirror).

Defaulting (applied on construction)
- Flag: required=False and default=False regardless of caller input.
- Named: required defaults to False.
- Pos/Rest: required defaults to True unless passed explicitly.
- Flag/Named: a one-character name with no explicit short also becomes the short alias.

Validation highlights
- name: non-empty string, cannot start with '-'; Flag/Named names cannot contain '=' or whitespace.
- short: exactly one character, not '-' nor '='.
- value: non-empty string when provided.
- describe: string when provided (trimmed, empty becomes None).
- parse: callable when provided.

Quick example:
    >>> from argot.options import Flag, Named, Pos, Rest
    >>> Flag("verbose", short="v", describe="print more")
    >>> Named("jobs", short="j", value="workers", parse=int)
    >>> Pos("source")
    >>> Rest("files", required=False)
"""
import enum
import functools
import operator
import re

from .utils import *


class Kind(enum.Enum):
    """
    Tag identifying which of the four option kinds a record is.

    The declaration order is also the order options are listed in usage lines
    and resolved after matching.
    """
    FLAG = "flag"
    NAMED = "named"
    POS = "pos"
    REST = "rest"


class OptionType(type):
    """
    Metaclass for option records.

    Responsibilities
    - Derive a human-friendly __typename__ from the class name ("Named" -> "named").
    - Expose every name listed in __introspectable__ as a read-only property.
    - Provide stable __repr__/__rich_repr__ for diagnostics and rich pretty-printing.
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
            """
            Return a concise representation, e.g. named(name='jobs', short='j', ...).
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the fields shared by every kind.

    - name: required non-empty string (trimmed) that does not start with '-'.
    - describe: Unset or string; trimmed, empty becomes None.
    - required: Unset or bool (kind defaulting happens in the constructors).
    - default: any value; Unset means "no default".

    Mutates metadata in place.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif name.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'name' cannot start with '-' (prefixes are added when matching)")
    metadata["name"] = name

    if not isinstance(describe := metadata["describe"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'describe' must be a string")
    metadata["describe"] = coalesce(describe) and describe.strip() or None

    if not isinstance(metadata["required"], bool | Unset):
        raise TypeError(f"{cls.__typename__} 'required' must be a boolean")


def _sanitize_switch_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for dash-matched kinds (Flag, Named).

    - name: cannot contain '=' or whitespace, since '--name=value' splits on the first '='.
    - short: Unset or exactly one character other than '-' and '='.
      A one-character name with no short is promoted to the short alias.
    """
    if re.search(r"[=\s]", metadata["name"]):
        raise ValueError(f"{cls.__typename__} 'name' cannot contain '=' or whitespace")

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and (len(short) != 1 or short in "-=" or short.isspace()):
        raise ValueError(f"{cls.__typename__} 'short' must be a single character")

    if not short and len(metadata["name"]) == 1:
        short = metadata["name"]
    metadata["short"] = coalesce(short)


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate the converter of value-bearing kinds (Named, Pos, Rest).

    - parse: Unset or callable taking the raw string; it should raise on bad input.
    """
    if not isinstance(parse := metadata["parse"], UnsetType) and not callable(parse):
        raise TypeError(f"{cls.__typename__} 'parse' must be callable")
    metadata["parse"] = coalesce(parse)


class Option(metaclass=OptionType):
    """
    Common base of the four option kinds.

    Subclasses set __kind__ and build their metadata through the _sanitize_*
    helpers; the sanitized values are stored on private fields and exposed as
    read-only properties.
    """
    __kind__ = Unset
    __introspectable__ = (
        "name",
        "describe",
        "required",
        "default",
    )

    def __new__(cls, *args, **kwargs):
        if cls.__kind__ is Unset:
            raise TypeError(f"type {cls.__name__!r} cannot be instantiated directly, use flag/named/pos/rest")
        return super().__new__(cls)

    def _assign(self, metadata, /):
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def kind(self):
        """
        The Kind tag of this record.
        """
        return type(self).__kind__

    @property
    def key(self):
        """
        Result-map key: the Named 'value' label when set, otherwise the name.
        """
        return self.name

    @property
    def defaulted(self):
        """
        True when a default was declared (a None default counts as declared).
        """
        return self._default is not Unset


class Flag(Option):
    """
    Presence-only switch.

    Matched by '--name' or '-short'; its presence records True. It can never
    be required and its default is always False.
    """
    __kind__ = Kind.FLAG
    __introspectable__ = (
        "name",
        "short",
        "describe",
        "required",
        "default",
    )

    def __init__(self, name, /, describe=Unset, required=Unset, default=Unset, *, short=Unset):
        metadata = {
            "name": name,
            "describe": describe,
            "required": required,
            "default": default,
            "short": short,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_switch_metadata(type(self), metadata)
        # Flags ignore caller input here: never required, default False.
        metadata["required"] = False
        metadata["default"] = False
        self._assign(metadata)


class Named(Option):
    """
    Value-bearing option matched by '--name=value' or '-short value'.

    The parsed value is stored under 'value' when provided (a label decoupled
    from the matching name), otherwise under 'name'. 'parse' converts the raw
    string and should raise on malformed input.
    """
    __kind__ = Kind.NAMED
    __introspectable__ = (
        "name",
        "short",
        "value",
        "describe",
        "required",
        "default",
        "parse",
    )

    def __init__(self, name, /, describe=Unset, required=Unset, default=Unset, *, short=Unset, value=Unset, parse=Unset):
        metadata = {
            "name": name,
            "describe": describe,
            "required": required,
            "default": default,
            "short": short,
            "value": value,
            "parse": parse,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_switch_metadata(type(self), metadata)
        _sanitize_parametric_metadata(type(self), metadata)

        if not isinstance(label := metadata["value"], str | Unset):
            raise TypeError(f"{type(self).__typename__} 'value' must be a string")
        elif isinstance(label, str) and not (label := label.strip()):
            raise ValueError(f"{type(self).__typename__} 'value' cannot be empty")
        metadata["value"] = coalesce(label)
        metadata["required"] = coalesce(metadata["required"], False)
        self._assign(metadata)

    @property
    def key(self):
        return self._value or self._name


class Pos(Option):
    """
    Positional option, filled in declaration order from the leftover tokens.
    Required unless required=False is passed.
    """
    __kind__ = Kind.POS
    __introspectable__ = (
        "name",
        "describe",
        "required",
        "default",
        "parse",
    )

    def __init__(self, name, /, describe=Unset, required=Unset, default=Unset, *, parse=Unset):
        metadata = {
            "name": name,
            "describe": describe,
            "required": required,
            "default": default,
            "parse": parse,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_parametric_metadata(type(self), metadata)
        metadata["required"] = coalesce(metadata["required"], True)
        self._assign(metadata)


class Rest(Option):
    """
    Collector for every positional token beyond the declared Pos options.

    The result is a list; 'parse' applies to each item. Required unless
    required=False is passed.
    """
    __kind__ = Kind.REST
    __introspectable__ = (
        "name",
        "describe",
        "required",
        "default",
        "parse",
    )

    def __init__(self, name, /, describe=Unset, required=Unset, default=Unset, *, parse=Unset):
        metadata = {
            "name": name,
            "describe": describe,
            "required": required,
            "default": default,
            "parse": parse,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_parametric_metadata(type(self), metadata)
        metadata["required"] = coalesce(metadata["required"], True)
        self._assign(metadata)


__all__ = (
    "Kind",
    "Option",
    "Flag",
    "Named",
    "Pos",
    "Rest",
)
