# Copyright (c) 2013-2025 NASK. All rights reserved.

"""
The conversion subsystem: coercing *dynamically typed* input values
(as decoded from JSON, form-encoded data or query parameters) to the
types expected by schema fields.

:func:`convert_value` tries, in this fixed order:

1. *direct match* -- the value already is an instance of the target
   type (but a :class:`bool` is never taken as an integer number);

2. *settable-from-value* -- the target type implements
   :class:`SettableFromValue` (e.g., the wrappers provided by
   :mod:`bindspec.nullable`): a new instance is created and its
   :meth:`~SettableFromValue.set_from_value` is called (any
   exception it raises is propagated verbatim);

3. *structural coercion* -- type-directed rules for :class:`str`,
   :class:`int` (and the bounded integer kinds defined here),
   :class:`float` and :class:`bool`;

4. *failure* -- :exc:`~bindspec.exceptions.ConversionError`.

>>> convert_value('42', int)
42
>>> convert_value(42, str)
'42'
>>> convert_value(-7.9, int)
-7
>>> convert_value('yes', bool), convert_value('whatever', bool)
(True, False)
>>> convert_value({'a': 1}, int)          # doctest: +IGNORE_EXCEPTION_DETAIL
Traceback (most recent call last):
  ...
bindspec.exceptions.ConversionError: cannot convert dict to int
"""

import abc
import decimal
import math
import numbers
import re

from bindspec.class_helpers import is_seq
from bindspec.encoding_helpers import (
    ascii_str,
    str_is_truthy,
    str_to_bool,
)
from bindspec.exceptions import (
    ConversionError,
    ShapeError,
    error_message,
)


#
# The *settable-from-value* capability

class SettableFromValue(abc.ABC):

    """
    An abstract base for types whose instances can be set from an
    arbitrary dynamically typed value.

    A concrete subclass must be instantiable without arguments and
    must implement :meth:`set_from_value`.
    """

    @abc.abstractmethod
    def set_from_value(self, value):
        """
        Set the state of the instance from the given raw value (may be
        :obj:`None`); raise an exception if that is not possible.
        """
        raise NotImplementedError


#
# Bounded integer kinds

class BoundedInt(int):

    """
    The base for integer kinds of a limited range.

    >>> Int8(127)
    Int8(127)
    >>> Int8(128)                             # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    ValueError: 128 is out of range for Int8 [-128..127]
    >>> UInt16() == 0
    True
    """

    min_value = None
    max_value = None

    def __new__(cls, value=0):
        obj = super(BoundedInt, cls).__new__(cls, value)
        if not cls.is_in_range(obj):
            raise ValueError('{} is out of range for {} [{}..{}]'.format(
                int(obj),
                cls.__qualname__,
                cls.min_value,
                cls.max_value))
        return obj

    def __repr__(self):
        return '{}({})'.format(self.__class__.__qualname__, int(self))

    @classmethod
    def is_in_range(cls, value):
        return ((cls.min_value is None or value >= cls.min_value) and
                (cls.max_value is None or value <= cls.max_value))


class Int8(BoundedInt):
    min_value = -2 ** 7
    max_value = 2 ** 7 - 1


class Int16(BoundedInt):
    min_value = -2 ** 15
    max_value = 2 ** 15 - 1


class Int32(BoundedInt):
    min_value = -2 ** 31
    max_value = 2 ** 31 - 1


class Int64(BoundedInt):
    min_value = -2 ** 63
    max_value = 2 ** 63 - 1


class UInt8(BoundedInt):
    min_value = 0
    max_value = 2 ** 8 - 1


class UInt16(BoundedInt):
    min_value = 0
    max_value = 2 ** 16 - 1


class UInt32(BoundedInt):
    min_value = 0
    max_value = 2 ** 32 - 1


class UInt64(BoundedInt):
    min_value = 0
    max_value = 2 ** 64 - 1


#
# Public functions

def convert_value(value, target_type, strict_bool=False):
    """
    Convert `value` to `target_type` (see the module docstring).

    Args:
        `value`:
            Any object (typically, a JSON-like scalar, list or dict).
        `target_type`:
            The expected type.

    Kwargs:
        `strict_bool` (default: :obj:`False`):
            If true, strings converted to :class:`bool` must be one of
            the known *YES/NO* tokens (otherwise an error is raised);
            if false, any string that is not a known *YES* token is
            just converted to :obj:`False`.

    Returns:
        The converted value.

    Raises:
        :exc:`~bindspec.exceptions.ConversionError` (or any exception
        raised by :meth:`SettableFromValue.set_from_value`).

    .. note::

       Only the sized integer kinds (:class:`Int8`...:class:`UInt64`)
       are range-checked; plain :class:`int` is unbounded.

    >>> convert_value('9223372036854775808', int)
    9223372036854775808
    >>> convert_value('3.5', float)
    3.5
    >>> convert_value('-inf', float)
    -inf
    >>> convert_value('12.9', int)
    12
    >>> convert_value(True, str)
    'True'
    >>> convert_value('300', UInt8)           # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ConversionError: 300 is out of range for UInt8
    >>> convert_value('maybe', bool, strict_bool=True)   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ConversionError: "maybe" is not a valid YES/NO flag...
    """
    if not isinstance(target_type, type):
        raise TypeError('{!a} is not a type'.format(target_type))
    if _is_direct_match(value, target_type):
        return value
    if issubclass(target_type, SettableFromValue):
        instance = target_type()
        instance.set_from_value(value)
        return instance
    for base_type, coercer in _STRUCTURAL_COERCERS:
        if issubclass(target_type, base_type):
            return coercer(value, target_type, strict_bool)
    raise ConversionError(source_type=type(value), target_type=target_type)


def convert_sequence(values, item_type, strict_bool=False):
    """
    Convert each item of the given (non-string) sequence with
    :func:`convert_value`.  Returns a new :class:`list`.

    The first failing item is reported (its index included in the
    error message).

    >>> convert_sequence(['1', 2, 3.0], int)
    [1, 2, 3]
    >>> convert_sequence([1, 'x'], int)       # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ConversionError: element 1: "x" cannot be interpreted...
    >>> convert_sequence('abc', str)          # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ShapeError: expected sequence, got str
    """
    if not is_seq(values):
        raise ShapeError(public_message='expected sequence, got {}'.format(
            ascii_str(type(values).__qualname__)))
    converted = []
    for i, item in enumerate(values):
        try:
            converted.append(convert_value(item, item_type, strict_bool=strict_bool))
        except Exception as exc:
            raise ConversionError(
                public_message='element {}: {}'.format(i, error_message(exc)),
                source_type=type(item),
                target_type=item_type) from exc
    return converted


#
# Non-public helpers

_INTEGER_STR_REGEX = re.compile(r'\A[+-]?\d+\Z', re.ASCII)
_DECIMAL_STR_REGEX = re.compile(r'\A[+-]?(?:\d+\.\d*|\.\d+)\Z', re.ASCII)
_FLOAT_STR_REGEX = re.compile(
    r'\A[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\Z', re.ASCII)
_FLOAT_SPECIAL_TOKENS = frozenset({
    'inf', '+inf', '-inf',
    'infinity', '+infinity', '-infinity',
    'nan', '+nan', '-nan',
})


def _is_direct_match(value, target_type):
    if isinstance(value, bool) and issubclass(target_type, int) and target_type is not bool:
        return False
    return isinstance(value, target_type)


def _coerce_to_str(value, target_type, strict_bool):
    if value is None:
        raise ConversionError(source_type=type(value), target_type=target_type)
    if isinstance(value, (bytes, bytearray)):
        try:
            return target_type(value.decode('utf-8'))
        except UnicodeDecodeError:
            raise ConversionError(
                public_message='"{}" cannot be decoded with encoding "utf-8"'.format(
                    ascii_str(value)),
                source_type=type(value),
                target_type=target_type) from None
    return target_type(value)


def _coerce_to_int(value, target_type, strict_bool):
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, str)):
        raise ConversionError(source_type=type(value), target_type=target_type)
    if isinstance(value, str):
        try:
            if _INTEGER_STR_REGEX.search(value):
                number = int(value)
            elif _DECIMAL_STR_REGEX.search(value):
                # truncating toward zero, as for floats
                number = int(decimal.Decimal(value))
            else:
                raise ValueError
        except ValueError:   # includes too many digits for `int()`
            raise ConversionError(
                public_message='"{}" cannot be interpreted as an integer number'.format(
                    ascii_str(value)),
                source_type=str,
                target_type=target_type) from None
    else:
        try:
            number = math.trunc(value)
        except (ValueError, OverflowError):   # NaN or infinity
            raise ConversionError(
                public_message='{} cannot be interpreted as an integer number'.format(
                    ascii_str(value)),
                source_type=type(value),
                target_type=target_type) from None
    if issubclass(target_type, BoundedInt) and not target_type.is_in_range(number):
        raise ConversionError(
            public_message='{} is out of range for {}'.format(
                number,
                target_type.__qualname__),
            source_type=type(value),
            target_type=target_type)
    return target_type(number)


def _coerce_to_float(value, target_type, strict_bool):
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, str)):
        raise ConversionError(source_type=type(value), target_type=target_type)
    if isinstance(value, str):
        is_special_token = value.lower() in _FLOAT_SPECIAL_TOKENS
        if not (is_special_token or _FLOAT_STR_REGEX.search(value)):
            raise ConversionError(
                public_message='"{}" cannot be interpreted as a floating-point number'.format(
                    ascii_str(value)),
                source_type=str,
                target_type=target_type)
        number = float(value)
        if math.isinf(number) and not is_special_token:
            raise ConversionError(
                public_message='"{}" is out of range for {}'.format(
                    ascii_str(value),
                    target_type.__qualname__),
                source_type=str,
                target_type=target_type)
    else:
        try:
            number = float(value)
        except OverflowError:
            raise ConversionError(
                public_message='{} is out of range for {}'.format(
                    value,
                    target_type.__qualname__),
                source_type=type(value),
                target_type=target_type) from None
    return target_type(number)


def _coerce_to_bool(value, target_type, strict_bool):
    if not isinstance(value, str):
        raise ConversionError(source_type=type(value), target_type=target_type)
    if not strict_bool:
        return str_is_truthy(value)
    try:
        return str_to_bool(value)
    except ValueError:
        raise ConversionError(
            public_message=str_to_bool.PUBLIC_MESSAGE_PATTERN.format(ascii_str(value)),
            source_type=str,
            target_type=target_type) from None


# (note: the `bool` entry must precede the `int` one)
_STRUCTURAL_COERCERS = (
    (str, _coerce_to_str),
    (bool, _coerce_to_bool),
    (int, _coerce_to_int),
    (float, _coerce_to_float),
)
