# Copyright (c) 2013-2025 NASK. All rights reserved.

"""
Nullable scalar wrappers: each of them keeps a value of a particular
type together with the *valid* flag (false means *null*).

They implement the *settable-from-value* capability, so that
:func:`~bindspec.conversion.convert_value` delegates to them:

>>> from bindspec.conversion import convert_value
>>> convert_value('42', NullInt)
NullInt(42)
>>> convert_value(None, NullInt)
NullInt(None)
>>> convert_value(None, NullInt).valid
False
>>> convert_value(7, NullString).value
'7'
"""

from bindspec.conversion import (
    SettableFromValue,
    convert_value,
)


class Nullable(SettableFromValue):

    """
    The base class of the nullable scalar wrappers.

    Concrete subclasses need to specify :attr:`value_type`.

    >>> n = NullFloat(2.5)
    >>> n.valid, n.value, n.plain_value()
    (True, 2.5, 2.5)
    >>> n = NullFloat()
    >>> n.valid, n.value, n.plain_value()
    (False, 0.0, None)
    >>> NullBool(True) == NullBool(True) and NullBool() != NullBool(False)
    True
    """

    value_type = None

    #: The *strict_bool* flag used when the value is converted.
    strict_bool = False

    def __init__(self, value=None):
        if self.value_type is None:
            raise TypeError('{} does not specify value_type'.format(
                self.__class__.__qualname__))
        self.set_from_value(value)

    def set_from_value(self, value):
        if value is None:
            self.valid = False
            self.value = self.value_type()
        else:
            self.value = convert_value(value, self.value_type, strict_bool=self.strict_bool)
            self.valid = True

    def plain_value(self):
        """Get the wrapped value, or :obj:`None` if not valid."""
        return self.value if self.valid else None

    def __eq__(self, other):
        if isinstance(other, Nullable):
            return (self.value_type is other.value_type and
                    self.plain_value() == other.plain_value())
        return NotImplemented

    def __ne__(self, other):
        equal = self.__eq__(other)
        if equal is NotImplemented:
            return equal
        return not equal

    __hash__ = None

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__qualname__, self.plain_value())


class NullString(Nullable):
    value_type = str


class NullInt(Nullable):
    value_type = int


class NullFloat(Nullable):
    value_type = float


class NullBool(Nullable):
    value_type = bool


def plain_value_of(obj):
    """
    Unwrap the given object if it is a :class:`Nullable`; return it
    intact otherwise.

    >>> plain_value_of(NullInt(3)), plain_value_of(NullInt()), plain_value_of('x')
    (3, None, 'x')
    """
    if isinstance(obj, Nullable):
        return obj.plain_value()
    return obj
