# Copyright (c) 2013-2025 NASK. All rights reserved.

import collections

from bindspec.encoding_helpers import ascii_str


#
# Generic mix-ins
#

class _ErrorWithPublicMessageMixin(object):

    r"""
    A mix-in class that provides the :attr:`public_message` property.

    The value of this property is a :class:`str`.  It is taken either
    from the `public_message` constructor keyword argument or -- if the
    argument was not specified -- from the value of the
    :attr:`default_public_message` attribute.

    Public messages of field-level errors are short lower-case phrases
    (e.g., ``'field is required'``) -- so that they can be joined into
    ``'<field>: <message>; <field>: <message>'`` strings.

    The :class:`str` conversion provided by the class uses the value of
    :attr:`public_message`:

    >>> class SomeError(_ErrorWithPublicMessageMixin, Exception):
    ...     pass
    ...
    >>> str(SomeError('a', 'b'))  # using attribute default_public_message
    'internal error'
    >>> str(SomeError('a', 'b', public_message='spam'))
    'spam'

    The :func:`repr` conversion results in a programmer-readable
    representation (containing the class name, :func:`repr`-formatted
    constructor arguments and the :attr:`public_message` property):

    >>> SomeError('a', 'b')   # using class's default_public_message
    <SomeError: args=('a', 'b'); public_message='internal error'>
    >>> SomeError('a', 'b', public_message='spam')
    <SomeError: args=('a', 'b'); public_message='spam'>
    """

    #: (overridable in subclasses)
    default_public_message = 'internal error'

    def __init__(self, *args, **kwargs):
        try:
            public_message = kwargs.pop('public_message')
        except KeyError:
            pass
        else:
            self._public_message = str(public_message)
        try:
            super(_ErrorWithPublicMessageMixin, self).__init__(*args, **kwargs)
        except TypeError:
            if kwargs:
                raise TypeError(
                    'illegal keyword arguments for {} constructor: {}'.format(
                        self.__class__.__name__,
                        ', '.join(sorted(map(repr, kwargs)))))
            else:
                raise

    @property
    def public_message(self):
        """The aforementioned property."""
        try:
            return self._public_message
        except AttributeError:
            # (in subclasses `default_public_message` can also be a @property)
            self._public_message = str(self.default_public_message)
            return self._public_message

    def __str__(self):
        return self.public_message

    def __repr__(self):
        return ('<{0.__class__.__name__}: args={0.args!r}; '
                'public_message={0.public_message!r}>'.format(self))


class _ErrorSeqMixin(object):
    """
    Mix-in for exception classes that collect per-field errors.

    Each instance of such a class:

    * should be initialized with one argument being a list of
      :class:`FieldError` named tuples (*field*, *description*,
      *actual exception*);

    * exposes that argument as the :attr:`error_info_seq` attribute
      (for possible later inspection).
    """

    def __init__(self, error_info_seq, **kwargs):
        self.error_info_seq = list(error_info_seq)
        super(_ErrorSeqMixin, self).__init__(self.error_info_seq, **kwargs)


#
# Auxiliary classes
#

class FieldError(collections.namedtuple('FieldError', 'field, description, error')):

    """
    A single field-scoped failure: the field name, the field's
    description (possibly :obj:`None`) and the actual exception.

    >>> e = FieldError('age', None, ValidationError(public_message='too small'))
    >>> e.message
    'too small'
    >>> str(e)
    'age: too small'
    >>> str(FieldError('x', 'The X.', KeyError('foo')))
    "x: 'foo'"
    """

    __slots__ = ()

    @property
    def message(self):
        return error_message(self.error)

    def __str__(self):
        return '{}: {}'.format(self.field, self.message)


#
# Actual exception classes
#

class BindingConfigError(TypeError):

    """
    Raised when a schema or a field is configured in a wrong way (a
    programmer error).

    It is **never** collected as a field error: the *schema* machinery
    lets it propagate immediately.
    """


class FieldValueError(_ErrorWithPublicMessageMixin, ValueError):

    """
    The base class of field-level errors: raised by fields' `assign()`
    and `validate()` machinery, by the conversion subsystem, as well as
    by validators and transformers.

    It is recommended (though not required) to instantiate the exception
    specifying the `public_message` keyword argument.

    Typically, this exception (as any other :exc:`Exception` raised
    when a field is being assigned or validated) is caught by the
    *schema* machinery -- then, eventually, :exc:`BindingErrors` is
    raised (its :attr:`public_message` includes :attr:`public_message`
    of this exception, prefixed with the field name).
    """

    default_public_message = 'not a valid value'


class ConversionError(FieldValueError):

    """
    Raised when a dynamically typed input value cannot be converted to
    the expected type.

    The optional keyword-only arguments `source_type` and `target_type`
    become attributes of the exception instance.

    >>> exc = ConversionError(source_type=dict, target_type=int)
    >>> exc.public_message
    'cannot convert dict to int'
    >>> exc.source_type is dict and exc.target_type is int
    True
    >>> str(ConversionError(public_message='"x" is not a number', target_type=int))
    '"x" is not a number'
    """

    def __init__(self, *args, **kwargs):
        self.source_type = kwargs.pop('source_type', None)
        self.target_type = kwargs.pop('target_type', None)
        super(ConversionError, self).__init__(*args, **kwargs)

    @property
    def default_public_message(self):
        """The aforementioned property."""
        return 'cannot convert {} to {}'.format(
            _type_name(self.source_type),
            _type_name(self.target_type))


class LengthMismatchError(FieldValueError):

    """
    Raised when a fixed-size sequence is bound from a source of
    another length.

    Instances *must* be initialized with the keyword-only arguments
    `expected` and `got` (they become attributes of the instance).

    >>> exc = LengthMismatchError(expected=3, got=2)
    >>> str(exc)
    'length mismatch: expected 3, got 2'
    >>> LengthMismatchError(expected=3)   # doctest: +ELLIPSIS
    Traceback (most recent call last):
      ...
    TypeError: __init__() needs keyword-only argument got
    """

    def __init__(self, *args, **kwargs):
        try:
            self.expected = kwargs.pop('expected')
            self.got = kwargs.pop('got')
        except KeyError as exc:
            [kw] = exc.args
            raise TypeError('__init__() needs keyword-only argument ' + kw)
        super(LengthMismatchError, self).__init__(*args, **kwargs)

    @property
    def default_public_message(self):
        """The aforementioned property."""
        return 'length mismatch: expected {}, got {}'.format(self.expected, self.got)


class ShapeError(FieldValueError):

    """
    Raised when the raw value does not have the expected structure
    (e.g., a nested-object field got something that is not a mapping).
    """

    default_public_message = 'expected object'


class ValidationError(FieldValueError):

    """
    Raised by validators when a business rule is not satisfied.
    """


class BindingError(_ErrorWithPublicMessageMixin, Exception):

    """
    The base class for exceptions raised by the *schema* machinery
    itself (they are **not** intended to be raised by validators,
    transformers or converters -- use :exc:`FieldValueError` instead).
    """

    default_public_message = 'invalid data'


class PayloadError(BindingError):

    """
    Raised when the payload cannot be turned into a string-keyed
    mapping (e.g., when it is not a valid JSON object).
    """

    default_public_message = 'invalid payload'


class BindingErrors(_ErrorSeqMixin, BindingError):

    r"""
    Raised by :meth:`~bindspec.schema.Schema.apply` when any field
    could not be assigned or validated.

    This exception class provides :attr:`default_public_message` (see:
    :exc:`_ErrorWithPublicMessageMixin`) as a property whose value is a
    ``"<field>: <message>; <field>: <message>"`` string including, *for
    each contained error*, the field name and the message of the
    *contained exception*.

    >>> err1 = ValidationError(public_message='field is required')
    >>> err2 = TypeError('foo')
    >>> exc = BindingErrors([
    ...     FieldError('name', None, err1),
    ...     FieldError('age', 'Age in years.', err2),
    ... ])
    >>> isinstance(exc, BindingError)
    True
    >>> exc.public_message
    'name: field is required; age: foo'
    >>> str(exc) == exc.public_message
    True
    >>> [e.field for e in exc.error_info_seq]
    ['name', 'age']
    >>> exc.run is None
    True
    >>> len(exc)
    2
    """

    separator = '; '

    def __init__(self, error_info_seq, run=None, **kwargs):
        self.run = run
        super(BindingErrors, self).__init__(error_info_seq, **kwargs)

    def __iter__(self):
        return iter(self.error_info_seq)

    def __len__(self):
        return len(self.error_info_seq)

    @property
    def default_public_message(self):
        """The aforementioned property."""
        return self.separator.join(map(str, self.error_info_seq))

    def as_dict(self):
        """
        Get a `{<field name>: [<message>, ...]}` dict (handy for
        producing, e.g., JSON error responses).

        >>> BindingErrors([
        ...     FieldError('a', None, ValueError('x')),
        ...     FieldError('b', None, ValueError('y')),
        ...     FieldError('a', None, ValueError('z')),
        ... ]).as_dict()
        {'a': ['x', 'z'], 'b': ['y']}
        """
        result = {}
        for field_error in self.error_info_seq:
            result.setdefault(field_error.field, []).append(field_error.message)
        return result


def error_message(exc):
    """
    Get the message of the given exception: its :attr:`public_message`
    if it provides one, or just ``str(exc)`` otherwise.

    >>> error_message(ShapeError())
    'expected object'
    >>> error_message(ValueError('foo'))
    'foo'
    """
    if isinstance(exc, _ErrorWithPublicMessageMixin):
        return exc.public_message
    return str(exc)


def _type_name(tp):
    if tp is None:
        return 'unknown type'
    return ascii_str(getattr(tp, '__qualname__', tp))
