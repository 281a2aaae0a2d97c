# Copyright (c) 2013-2025 NASK. All rights reserved.

"""
Transformers -- pure (though fallible) ``value -> value`` mappings,
applied (in the declaration order) after conversion and before the
value is written to the target.

Any callable taking one argument can be used as a transformer; the
classes defined here are just the ready-to-use ones:

>>> value = '  jOHN  '
>>> for transformer in [TrimSpace(), Capitalize()]:
...     value = transformer(value)
...
>>> value
'John'
>>> SanitizeEmail()('  John@Example.COM ')
'john@example.com'
"""

from bindspec.encoding_helpers import ascii_str
from bindspec.exceptions import (
    BindingConfigError,
    FieldValueError,
)


class Transformer(object):

    """
    The base class for transformers (subclasses need to implement
    :meth:`transform`).
    """

    def __call__(self, value):
        return self.transform(value)

    def transform(self, value):
        raise NotImplementedError

    def __repr__(self):
        return '<{} transformer>'.format(self.__class__.__qualname__)


class _StrTransformer(Transformer):

    def __call__(self, value):
        if not isinstance(value, str):
            raise FieldValueError(public_message='{} transformer requires a str value, not {}'.format(
                self.__class__.__qualname__,
                ascii_str(type(value).__qualname__)))
        return self.transform(value)


class ToUpper(_StrTransformer):

    def transform(self, value):
        return value.upper()


class ToLower(_StrTransformer):

    def transform(self, value):
        return value.lower()


class TrimSpace(_StrTransformer):

    def transform(self, value):
        return value.strip()


class TitleCase(_StrTransformer):

    """
    >>> TitleCase()('jOHN mARY smith')
    'John Mary Smith'
    """

    def transform(self, value):
        return value.lower().title()


class Capitalize(_StrTransformer):

    """
    Upper-case the first character, lower-case the rest.

    >>> Capitalize()('mcDONALD'), Capitalize()('')
    ('Mcdonald', '')
    """

    def transform(self, value):
        return value[:1].upper() + value[1:].lower()


class SanitizeEmail(_StrTransformer):

    def transform(self, value):
        return value.strip().lower()


class CustomTransformer(Transformer):

    """
    Wraps a plain function.

    >>> double = CustomTransformer(lambda value: value * 2)
    >>> double(21)
    42
    """

    def __init__(self, func):
        if not callable(func):
            raise BindingConfigError('{!a} is not callable'.format(func))
        self.func = func

    def transform(self, value):
        return self.func(value)

    def __repr__(self):
        return 'CustomTransformer({!r})'.format(self.func)


def apply_transformers(transformers, value):
    """
    Apply the given transformers in order (the first failure aborts).

    >>> apply_transformers([TrimSpace(), ToUpper()], ' abc ')
    'ABC'
    >>> apply_transformers([], 42)
    42
    """
    for transformer in transformers:
        value = transformer(value)
    return value
