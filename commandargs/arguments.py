r"""
Commandargs argument specifications.

Overview
- ValueType: closed enumeration of the value types an argument can declare.
  Each member owns its converter (see ValueType.convert); adding a type is a
  one-place change and unknown type names are rejected at construction.
    • boolean         explicit TRUE/FALSE style values ("--plot yes")
    • presence-true   set by presence ("--plot"), consumes no value
    • presence-false  cleared by presence ("--no-plot"), consumes no value
    • string          verbatim text
    • numeric         integers when the text is integral, floats otherwise
    • integer         integers only
    • double          floats
  The historical names logical/set_true/set_false/character are accepted as aliases.
  Numeric text follows Python's int()/float() grammar, so surrounding whitespace
  and digit separators ("1_000") are accepted, as are "inf" and "nan" for doubles.

- Argument: declaration of one named argument (flag, type, arity, required-ness,
  choices, default, post-processing action, help) plus its single mutable slot,
  `value`, written by the matching engine (see commandargs.matching).

Metadata (sanitized on construction)
- name: non-empty string, the lookup key inside a registry (mandatory).
- flag: matching token; defaults to name; leading dashes are stripped.
- type: ValueType or one of its names/aliases.
- nargs: integer; >= 0 is an exact count of value tokens, < 0 is greedy
  (values run up to the next dash-led token or the end of input).
- required: bool; a missing required flag fails the parse of that argument.
- choices: iterable of allowed values (duplicates rejected unless a Set).
- default: any value; `value` starts here and returns here whenever the flag is absent.
- action: optional callable invoked as action(argument, *args, **kwargs) on resolve().
- help: string or iterable of strings, shown by the help renderer.

Quick example:
    >>> from commandargs.arguments import Argument
    >>> count = Argument("count", type="integer", default=1, choices=range(1, 10))
    >>> count.usage()
    '[--count integer]'
    >>> count.resolve()
    1
"""
import copy
import functools
import operator
import re
from collections.abc import Iterable, Set
from enum import StrEnum
from typing import assert_never

from rich.console import Console, Group
from rich.text import Text

from .faults import *
from .utils import *

# Tokens that convert to True for the boolean type (compared upper-cased).
_TRUTHS = frozenset({"TRUE", "YES", "T", "Y"})

_ALIASES = {
    "logical": "boolean",
    "set_true": "presence-true",
    "set_false": "presence-false",
    "character": "string",
}


def _numeric(token, /):
    try:
        return int(token)
    except ValueError:
        return float(token)


class ValueType(StrEnum):
    """
    value types understood by the matching engine.

    members compare equal to their canonical names, so ValueType.INTEGER == "integer".
    """
    BOOLEAN = "boolean"
    PRESENCE_TRUE = "presence-true"
    PRESENCE_FALSE = "presence-false"
    STRING = "string"
    NUMERIC = "numeric"
    INTEGER = "integer"
    DOUBLE = "double"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        value = value.strip().lower()
        value = _ALIASES.get(value, value)
        for member in cls:
            if member.value == value:
                return member
        return None

    @property
    def presence(self):
        """
        True for types whose value is the mere presence of the flag.
        """
        return self in (ValueType.PRESENCE_TRUE, ValueType.PRESENCE_FALSE)

    def convert(self, tokens, /):
        """
        convert a window of raw tokens into values of this type.

        returns
        - True / False for presence types (tokens are ignored).
        - a list with one converted item per token otherwise.

        raises
        - ValueError when a token cannot be read as the declared numeric type.
        """
        match self:
            case ValueType.PRESENCE_TRUE:
                return True
            case ValueType.PRESENCE_FALSE:
                return False
            case ValueType.BOOLEAN:
                return [token.upper() in _TRUTHS for token in tokens]
            case ValueType.STRING:
                return list(tokens)
            case ValueType.NUMERIC:
                return list(map(_numeric, tokens))
            case ValueType.INTEGER:
                return list(map(int, tokens))
            case ValueType.DOUBLE:
                return list(map(float, tokens))
            case _:
                assert_never(self)


class ArgumentType(type):
    """
    Metaclass wiring read-only introspection onto argument specs.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the sanitized private field (see utils.mirror).
    - Provide stable __repr__/__rich_repr__ implementations built from
      __displayable__ (or __introspectable__ when unset).
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
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the construction metadata of an argument.

    The dict is mutated in place. A missing name is a programmer error and raises
    MissingNameError; every other malformed field raises TypeError or ValueError.
    """
    if (name := metadata["name"]) is Unset:
        raise MissingNameError(
            "%s name is required" % cls.__typename__,
            title="missing argument name",
            code=FaultCode.MISSING_NAME,
            hint="pass a name as the first argument (for example: Argument('output'))",
        )
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    # strip leading dashes; they are only rendered in usage text and matched by the engine
    if not isinstance(flag := coalesce(metadata["flag"], name), str):
        raise TypeError(f"{cls.__typename__} 'flag' must be a string")
    elif not (flag := re.sub(r"^-+", "", flag.strip())):
        raise ValueError(f"{cls.__typename__} 'flag' cannot be empty or dashes only")
    metadata["flag"] = flag

    if not isinstance(type := metadata["type"], str):
        raise TypeError(f"{cls.__typename__} 'type' must be a string or a value type")
    try:
        metadata["type"] = ValueType(type)
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'type' must be one of: %s" % ", ".join(ValueType)) from None

    if not isinstance(nargs := metadata["nargs"], int) or isinstance(nargs, bool):
        raise TypeError(f"{cls.__typename__} 'nargs' must be an integer")

    if not isinstance(metadata["required"], bool):
        raise TypeError(f"{cls.__typename__} 'required' must be a boolean")

    if not isinstance(choices := metadata["choices"], Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be a non-string iterable")
    if not isinstance(choices, Set):
        sanitized = []
        for choice in choices:
            if choice in sanitized:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        choices = tuple(sanitized)
    metadata["choices"] = choices

    if (action := metadata["action"]) is not Unset and not callable(action):
        raise TypeError(f"{cls.__typename__} 'action' must be callable")

    if isinstance(help := metadata["help"], str):
        help = (help,) if help.strip() else ()
    elif not isinstance(help, Iterable) or not all(isinstance(line, str) for line in help):
        raise TypeError(f"{cls.__typename__} 'help' must be a string or an iterable of strings")
    metadata["help"] = tuple(help)


class Argument(metaclass=ArgumentType):
    """
    Named argument specification with a single mutable value slot.

    Everything but `value` is fixed at construction and exposed read-only.
    `value` starts at a shallow copy of `default`; the matching engine overwrites
    it after a successful match, or restores a fresh copy when the flag is absent,
    so mutating a resolved value never alters the declared default.
    """

    __introspectable__ = (
        "name",
        "flag",
        "type",
        "nargs",
        "required",
        "choices",
        "default",
        "action",
        "help",
    )

    __displayable__ = (
        "name",
        "flag",
        "type",
        "nargs",
        "required",
        "choices",
        "default",
        "value",
    )

    def __new__(
            cls,
            name=Unset,
            /,
            flag=Unset,
            choices=(),
            default=None,
            required=False,
            nargs=1,
            action=Unset,
            type=ValueType.STRING,
            help=()
    ):
        metadata = {
            "name": name,
            "flag": flag,
            "choices": choices,
            "default": default,
            "required": required,
            "nargs": nargs,
            "action": action,
            "type": type,
            "help": help,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self.reset()
        return self

    @property
    def greedy(self):
        return self._nargs < 0

    def reset(self):
        """
        Put a shallow copy of the declared default back into the value slot.
        """
        self.value = copy.copy(self._default)

    def resolve(self, *args, **kwargs):
        """
        Return the post-processed value.

        When an action was declared it is called as action(self, *args, **kwargs)
        and its result is returned; otherwise the raw stored value is returned.
        """
        if self._action is Unset:
            return self.value
        return self._action(self, *args, **kwargs)

    def usage(self):
        """
        Short usage token, e.g. "[--output string]".
        """
        return "[--%s %s]" % (self._flag, self._type)

    def details(self, *, colorful=False):
        """
        Build the help block for this argument.

        Lines
        - "--flag (required, type 'x')" or "--flag (type 'x')"
        - the help text (indented) when present
        - "default: <value>" (indented) when a default is set
        """
        def text(fragment, style=""):
            return Text(str(fragment), style if colorful else "")

        if self._required:
            kind = text(" (required, type '%s')" % self._type, "bold #FF4DA6")
        else:
            kind = text(" (type '%s')" % self._type, "#9CA3AF")
        lines = [Text.assemble(text("--" + self._flag, "bold #00E6FF"), kind)]
        if help := " ".join(self._help).strip():
            lines.append(Text.assemble("    ", text(help, "#9CA3AF")))
        if self._default is not None:
            lines.append(Text.assemble("    default: ", text(self._default, "bold #FFD600")))
        return Group(*lines)

    def print_help(self, *, console=Unset, colorful=False):
        coalesce(console, Console()).print(self.details(colorful=colorful))


__all__ = (
    "ValueType",
    "Argument",
)

# The metaclass is an implementation detail of the argument classes.
del ArgumentType
