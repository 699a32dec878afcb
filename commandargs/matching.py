"""
Commandargs matching engine.

One call, one argument: parse_argument(argument, tokens) looks for the argument's
flag in the trailing token segment, slices the value window that follows it,
converts the window to the declared value type, checks the declared choices, and
stores the result in argument.value.

Steps
1. locate(): first token that is one or more dashes followed by exactly the flag.
   The flag may sit anywhere in the segment; the first occurrence wins.
2. absent flag: the value returns to the default; a required argument then fails.
3. presence types consume nothing; the flag alone yields True / False.
4. window(): the next `nargs` tokens, or (greedy arity, nargs < 0) every token up to
   the next dash-led token or the end of the segment.
5. conversion through ValueType.convert; a fixed arity of 1 stores a scalar, any
   other arity stores a list.
6. choices: every converted value must be one of them.

Failures never raise: each one is surfaced through faults.trigger() as an argument
warning and reported as False, leaving argument.value untouched.

Known limitation
- The greedy scan treats any dash-led token as the next flag, so a negative number
  such as "-5" ends a greedy window instead of being consumed.
"""
import functools
import re

from .faults import *
from .utils import *


@functools.cache
def _pattern(flag, /):
    return re.compile("-+" + re.escape(flag))


def locate(argument, tokens, /):
    """
    Return the index of the first token matching the argument's flag, or None.
    """
    pattern = _pattern(argument.flag)
    for index, token in enumerate(tokens):
        if pattern.fullmatch(token):
            return index
    return None


def window(argument, tokens, index, /):
    """
    Return the raw value tokens following the flag found at `index`.

    - fixed arity: exactly the next `nargs` tokens, or None when fewer remain.
    - greedy arity: the tokens up to (excluding) the next dash-led token.
    """
    start = index + 1
    if argument.greedy:
        stop = next((position for position in range(start, len(tokens)) if tokens[position].startswith("-")), len(tokens))
        return list(tokens[start:stop])
    if len(tokens) - start < argument.nargs:
        return None
    return list(tokens[start:start + argument.nargs])


def parse_argument(argument, tokens, /, **options):
    """
    Match one argument against the trailing token segment.

    parameters
    - argument: Argument
      the specification whose value slot receives the result.
    - tokens: Sequence[str]
      the trailing (user) segment of the invocation.
    - options:
      runtime context forwarded to trigger() (tool, shell, fancy, colorful).

    returns
    - bool: True when the value slot now holds a valid value (or the default for an
      absent optional flag), False when the argument failed.
    """
    flag = "--" + argument.flag
    index = locate(argument, tokens)

    if index is None:
        argument.reset()
        if argument.required:
            trigger(MissingRequiredWarning(
                "required argument %r was not found" % argument.name,
                title="missing required argument",
                code=FaultCode.MISSING_REQUIRED,
                argument=argument,
                hint="pass it on the command line (for example: %s)" % (
                    flag if argument.type.presence else "%s <%s>" % (flag, argument.type)
                ),
            ), **options)
            return False
        return True

    if argument.type.presence:
        argument.value = argument.type.convert(())
        return True

    if (values := window(argument, tokens, index)) is None:
        remaining = len(tokens) - index - 1
        trigger(NotEnoughValuesWarning(
            "option %r at %s position expects %d value%s but only %d remain%s" % (
                flag,
                ordinal(index + 1),
                argument.nargs,
                "s" * (argument.nargs != 1),
                remaining,
                "s" * (remaining == 1)
            ),
            title="not enough values",
            code=FaultCode.NOT_ENOUGH_VALUES,
            argument=argument,
            index=index,
            hint="add the missing values after %s" % flag,
        ), **options)
        return False

    try:
        converted = argument.type.convert(values)
    except ValueError as exception:
        trigger(ConversionFailedWarning(
            "value for option %r at %s position cannot be converted to %s" % (
                flag, ordinal(index + 1), argument.type
            ),
            title="conversion error",
            code=FaultCode.CONVERSION_FAILED,
            argument=argument,
            index=index,
            values=values,
            exception=exception,
            hint="use a valid %s (for example: %s <%s>)" % (argument.type, flag, argument.type),
        ), **options)
        return False

    if argument.choices:
        if invalid := [value for value in converted if value not in argument.choices]:
            trigger(InvalidChoiceWarning(
                "value %s for option %r at %s position is not a valid choice" % (
                    ", ".join(map(repr, invalid)), flag, ordinal(index + 1)
                ),
                title="invalid choice",
                code=FaultCode.INVALID_CHOICE,
                argument=argument,
                index=index,
                values=invalid,
                hint="use one of: %s" % " · ".join(map(str, argument.choices)),
            ), **options)
            return False

    if argument.nargs == 1:
        converted, = converted
    argument.value = converted
    return True


__all__ = (
    "locate",
    "window",
    "parse_argument",
)
