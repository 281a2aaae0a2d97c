# Copyright (c) 2013-2025 NASK. All rights reserved.

"""
Validators -- named predicates run (in the declaration order) during
the *validate* phase of :meth:`bindspec.schema.Schema.apply`.

A validator is an instance of a :class:`Validator` subclass.  Its
:meth:`~Validator.validate` method receives the field's value (or
:obj:`None` if no value was assigned in the current run) and the field
name; it raises :exc:`~bindspec.exceptions.ValidationError` (or any
other :exc:`Exception`) if the value is not valid.

The error message of any validator can be overridden -- either with
the `message` constructor keyword argument, or with the
:meth:`~Validator.with_message` method (which returns a modified copy):

>>> Min(18).validate(10, 'age')              # doctest: +IGNORE_EXCEPTION_DETAIL
Traceback (most recent call last):
  ...
bindspec.exceptions.ValidationError: value must be at least 18
>>> Min(18, message='too young').validate(10, 'age')   # doctest: +IGNORE_EXCEPTION_DETAIL
Traceback (most recent call last):
  ...
bindspec.exceptions.ValidationError: too young
>>> Email().with_message('bad e-mail').message
'bad e-mail'

Except :class:`Required` and :class:`NotEmpty`, validators accept
:obj:`None` (i.e., a missing value is *not* their concern):

>>> Min(18).validate(None, 'age')
>>> Email().validate(None, 'email')
"""

import contextlib
import copy
import numbers
import re

from bindspec.class_helpers import (
    is_mapping,
    is_seq,
    is_seq_or_set,
)
from bindspec.encoding_helpers import ascii_str
from bindspec.exceptions import (
    BindingConfigError,
    ValidationError,
)
from bindspec.nullable import plain_value_of


EMAIL_REGEX = re.compile(r'\A[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\Z')
URL_SCHEME_PREFIXES = ('http://', 'https://')



#
# The base validator class

class Validator(object):

    """
    The base class for all validators.

    Subclasses should implement :meth:`check` (note that values
    wrapped in :class:`~bindspec.nullable.Nullable` instances are
    unwrapped before being passed to :meth:`check`).

    Validators that need to know the current *run* (e.g., to check
    field presence or values of other fields) should override
    :meth:`validate_in_run`.
    """

    #: The overriding message (:obj:`None` means: keep the original one).
    message = None

    def __init__(self, message=None):
        if message is not None:
            self.message = message

    def with_message(self, message):
        """Get a copy of the validator, with the overriding message set."""
        validator = copy.copy(self)
        validator.message = message
        return validator

    def validate(self, value, field_name):
        with self._message_overriding():
            self.check(plain_value_of(value), field_name)

    def validate_in_run(self, value, field_name, run):
        """
        The method actually called by fields' *validate* machinery.

        The default implementation just calls :meth:`validate`.
        """
        self.validate(value, field_name)

    def check(self, value, field_name):
        raise NotImplementedError

    def __repr__(self):
        return '<{} validator>'.format(self.__class__.__qualname__)

    @contextlib.contextmanager
    def _message_overriding(self):
        try:
            yield
        except BindingConfigError:
            raise
        except Exception as exc:
            if self.message is None:
                raise
            raise ValidationError(public_message=self.message) from exc



#
# Presence/emptiness validators

class NotEmpty(Validator):

    """
    Rejects :obj:`None`, as well as empty strings and collections
    (numbers, including zero, and booleans are accepted).

    >>> NotEmpty().validate(0, 'x')
    >>> NotEmpty().validate(False, 'x')
    >>> NotEmpty().validate('', 'x')          # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: value cannot be empty
    >>> NotEmpty().validate(None, 'x')        # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: field is required
    """

    def check(self, value, field_name):
        if value is None:
            raise ValidationError(public_message='field is required')
        if isinstance(value, (str, bytes, bytearray)) or is_seq_or_set(value) or is_mapping(value):
            if len(value) == 0:
                raise ValidationError(public_message='value cannot be empty')


class Required(Validator):

    """
    Requires that the field's key was *present* in the payload and --
    if it was -- that the value (see :class:`NotEmpty`) is not empty.

    This validator consults the current run, so it makes sense
    primarily when called via :meth:`validate_in_run` (when called via
    :meth:`validate` it is equivalent to :class:`NotEmpty`).
    """

    def validate_in_run(self, value, field_name, run):
        with self._message_overriding():
            if not run.is_field_present(field_name):
                raise ValidationError(public_message='field is required')
            NotEmpty().validate(value, field_name)

    def check(self, value, field_name):
        NotEmpty().check(value, field_name)



#
# Numeric validators

class _NumericBoundValidator(Validator):

    bound = None

    def __init__(self, bound, **kwargs):
        if isinstance(bound, bool) or not isinstance(bound, numbers.Real):
            raise BindingConfigError('{!a} is not a number'.format(bound))
        self.bound = bound
        super(_NumericBoundValidator, self).__init__(**kwargs)

    def check(self, value, field_name):
        if value is None:
            return
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ValidationError(public_message='value must be a numeric type')
        if self.is_beyond_bound(value):
            raise ValidationError(public_message=self.error_message_pattern.format(self.bound))

    def is_beyond_bound(self, value):
        raise NotImplementedError


class Min(_NumericBoundValidator):

    """
    >>> Min(18).validate(18, 'age')
    >>> Min(0.5).validate(0.4, 'ratio')       # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: value must be at least 0.5
    >>> Min(1).validate('2', 'n')             # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: value must be a numeric type
    """

    error_message_pattern = 'value must be at least {}'

    def is_beyond_bound(self, value):
        return value < self.bound


class Max(_NumericBoundValidator):

    """
    >>> Max(120).validate(120, 'age')
    >>> Max(120).validate(121, 'age')         # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: value must be at most 120
    """

    error_message_pattern = 'value must be at most {}'

    def is_beyond_bound(self, value):
        return value > self.bound



#
# Length validators

class _LengthBoundValidator(Validator):

    def __init__(self, length, **kwargs):
        if isinstance(length, bool) or not isinstance(length, int):
            raise BindingConfigError('{!a} is not an integer number'.format(length))
        self.length = length
        super(_LengthBoundValidator, self).__init__(**kwargs)

    def check(self, value, field_name):
        if isinstance(value, str):
            if self.is_beyond_bound(len(value)):
                raise ValidationError(public_message=self.str_message_pattern.format(self.length))
        elif is_seq_or_set(value) or is_mapping(value):
            if self.is_beyond_bound(len(value)):
                raise ValidationError(public_message=self.items_message_pattern.format(self.length))

    def is_beyond_bound(self, actual_length):
        raise NotImplementedError


class MinLength(_LengthBoundValidator):

    """
    >>> MinLength(3).validate('abc', 'x')
    >>> MinLength(3).validate('ab', 'x')      # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: must be at least 3 characters long
    >>> MinLength(3).validate([1], 'x')       # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: must have at least 3 items
    """

    str_message_pattern = 'must be at least {} characters long'
    items_message_pattern = 'must have at least {} items'

    def is_beyond_bound(self, actual_length):
        return actual_length < self.length


class MaxLength(_LengthBoundValidator):

    """
    >>> MaxLength(2).validate([1, 2], 'x')
    >>> MaxLength(2).validate('abc', 'x')     # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: must be at most 2 characters long
    """

    str_message_pattern = 'must be at most {} characters long'
    items_message_pattern = 'must have at most {} items'

    def is_beyond_bound(self, actual_length):
        return actual_length > self.length



#
# Format validators

class Email(Validator):

    """
    >>> Email().validate('john@example.com', 'email')
    >>> Email().validate('', 'email')
    >>> Email().validate('john@example', 'email')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: invalid email format
    """

    def check(self, value, field_name):
        if value is None:
            return
        if not isinstance(value, str):
            raise ValidationError(
                public_message='email validation requires a str value, not {}'.format(
                    ascii_str(type(value).__qualname__)))
        if value and not EMAIL_REGEX.search(value):
            raise ValidationError(public_message='invalid email format')


class URL(Validator):

    """
    Only ``http://...`` and ``https://...`` URLs are accepted.

    >>> URL().validate('https://example.com/', 'homepage')
    >>> URL().validate('https://', 'homepage')      # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: invalid URL format
    >>> URL().validate('ftp://example.com', 'homepage')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: invalid URL format
    """

    def check(self, value, field_name):
        if value is None:
            return
        if not isinstance(value, str):
            raise ValidationError(public_message='URL validation requires a str value')
        if not value:
            return
        if not value.startswith(URL_SCHEME_PREFIXES) or value in URL_SCHEME_PREFIXES:
            raise ValidationError(public_message='invalid URL format')



#
# Membership/collection validators

class In(Validator):

    """
    >>> In('admin', 'user').validate('user', 'role')
    >>> In('admin', 'user').validate('root', 'role')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: value must be one of: admin, user
    """

    def __init__(self, *values, **kwargs):
        self.values = values
        super(In, self).__init__(**kwargs)

    def check(self, value, field_name):
        if value is None:
            return
        if value not in self.values:
            raise ValidationError(public_message='value must be one of: {}'.format(
                ', '.join(map(ascii_str, self.values))))


class Each(Validator):

    """
    Applies the given validators to each item of a sequence (the first
    error is reported).

    >>> Each(MinLength(2)).validate(['ab', 'cd'], 'tags')
    >>> Each(MinLength(2)).validate(['ab', 'c'], 'tags')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: must be at least 2 characters long
    """

    def __init__(self, *validators, **kwargs):
        self.validators = validators
        super(Each, self).__init__(**kwargs)

    def check(self, value, field_name):
        if value is None:
            return
        if not is_seq(value):
            raise ValidationError(public_message='each validator can only be applied to sequences')
        for i, item in enumerate(value):
            item_name = '{}[{}]'.format(field_name, i)
            for validator in self.validators:
                validator.validate(item, item_name)


class Unique(Validator):

    """
    Rejects duplicate items of a sequence (or duplicate values of a
    mapping).

    >>> Unique().validate([1, 2, 3], 'ids')
    >>> Unique().validate([1, 2, 1], 'ids')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: duplicate value found: 1
    >>> Unique().validate({'a': 'x', 'b': 'x'}, 'labels')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: duplicate value found: x
    """

    def check(self, value, field_name):
        if value is None:
            return
        if is_mapping(value):
            items = list(value.values())
        elif is_seq(value):
            items = list(value)
        else:
            raise ValidationError(
                public_message='unique validator can only be applied to sequences or mappings')
        duplicate = _find_duplicate(items)
        if duplicate is not _NOT_FOUND:
            raise ValidationError(public_message='duplicate value found: {}'.format(
                ascii_str(duplicate)))


class UniqueBy(Validator):

    """
    Rejects sequence items for which the given `key_func` returns
    duplicate keys.

    >>> by_id = UniqueBy(lambda item: item['id'])
    >>> by_id.validate([{'id': 1}, {'id': 2}], 'users')
    >>> by_id.validate([{'id': 1}, {'id': 1}], 'users')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: duplicate key found: 1
    """

    def __init__(self, key_func, **kwargs):
        if not callable(key_func):
            raise BindingConfigError('{!a} is not callable'.format(key_func))
        self.key_func = key_func
        super(UniqueBy, self).__init__(**kwargs)

    def check(self, value, field_name):
        if value is None:
            return
        if not is_seq(value):
            raise ValidationError(
                public_message='unique-by validator can only be applied to sequences')
        duplicate = _find_duplicate([self.key_func(item) for item in value])
        if duplicate is not _NOT_FOUND:
            raise ValidationError(public_message='duplicate key found: {}'.format(
                ascii_str(duplicate)))


class HasKeys(Validator):

    """
    Requires that a mapping contains all the given keys.

    >>> HasKeys('host', 'port').validate({'host': 'h', 'port': 1}, 'server')
    >>> HasKeys('host', 'port').validate({'host': 'h'}, 'server')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: key port not found in map
    """

    def __init__(self, *keys, **kwargs):
        self.keys = keys
        super(HasKeys, self).__init__(**kwargs)

    def check(self, value, field_name):
        if value is None:
            return
        if not is_mapping(value):
            raise ValidationError(public_message='expected map for map field')
        for key in self.keys:
            if key not in value:
                raise ValidationError(public_message='key {} not found in map'.format(
                    ascii_str(key)))


WithMapKeys = HasKeys



#
# Custom and context-aware validators

class ValidatorFunc(Validator):

    """
    Wraps a plain function: ``func(value, field_name)`` that raises an
    exception if the value is not valid (its return value is ignored).

    If `value_type` is given, values that are not its instances are
    rejected before the function is called.

    >>> def check_even(value, field_name):
    ...     if value % 2:
    ...         raise ValidationError(public_message='{} must be even'.format(field_name))
    ...
    >>> ValidatorFunc(check_even, value_type=int).validate(4, 'n')
    >>> ValidatorFunc(check_even, value_type=int).validate(3, 'n')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: n must be even
    >>> ValidatorFunc(check_even, value_type=int).validate('4', 'n')   # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.ValidationError: expected type int, got str
    """

    def __init__(self, func, value_type=None, **kwargs):
        if not callable(func):
            raise BindingConfigError('{!a} is not callable'.format(func))
        self.func = func
        self.value_type = value_type
        super(ValidatorFunc, self).__init__(**kwargs)

    def check(self, value, field_name):
        if self.value_type is not None:
            if value is None:
                return
            if not isinstance(value, self.value_type):
                raise ValidationError(public_message='expected type {}, got {}'.format(
                    ascii_str(self.value_type.__qualname__),
                    ascii_str(type(value).__qualname__)))
        self.func(value, field_name)


class FieldEquals(object):

    """
    A condition (to be used with :class:`When`): true if the value of
    the named field -- as bound in the current run -- equals the given
    value.
    """

    def __init__(self, field_name, value):
        self.field_name = field_name
        self.value = value

    def __call__(self, run):
        return plain_value_of(run.get_field_value(self.field_name)) == self.value

    def __repr__(self):
        return 'FieldEquals({!r}, {!r})'.format(self.field_name, self.value)


class When(Validator):

    """
    Applies the given validators only if `condition` -- a callable
    that takes the current run, e.g., a :class:`FieldEquals` instance
    -- returns a true value.

    Note that this validator needs the run, so it cannot be used
    inside :class:`Each`.
    """

    def __init__(self, condition, *validators, **kwargs):
        if not callable(condition):
            raise BindingConfigError('{!a} is not callable'.format(condition))
        self.condition = condition
        self.validators = validators
        super(When, self).__init__(**kwargs)

    def validate_in_run(self, value, field_name, run):
        if not self.condition(run):
            return
        with self._message_overriding():
            for validator in self.validators:
                validator.validate_in_run(value, field_name, run)

    def check(self, value, field_name):
        raise BindingConfigError(
            'the {} validator can only be used within a schema run'.format(
                self.__class__.__qualname__))



#
# Non-public helpers

_NOT_FOUND = object()


def _find_duplicate(items):
    seen_hashable = set()
    seen_unhashable = []
    for item in items:
        try:
            if item in seen_hashable:
                return item
            seen_hashable.add(item)
        except TypeError:
            if item in seen_unhashable:
                return item
            seen_unhashable.append(item)
    return _NOT_FOUND
