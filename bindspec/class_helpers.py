# Copyright (c) 2013-2025 NASK. All rights reserved.

import collections.abc as collections_abc


def is_seq(obj):
    """
    Check if the object is a *non-string* sequence.

    >>> is_seq([1, 2]) and is_seq((1,)) and is_seq(range(3))
    True
    >>> is_seq('12') or is_seq(b'12') or is_seq(bytearray(b'12'))
    False
    >>> is_seq({1, 2}) or is_seq({'a': 1}) or is_seq(42)
    False
    """
    return (isinstance(obj, collections_abc.Sequence)
            and not isinstance(obj, (str, bytes, bytearray)))


def is_seq_or_set(obj):
    """
    Check if the object is a *non-string* sequence or a set.

    >>> is_seq_or_set([1, 2]) and is_seq_or_set(frozenset({1}))
    True
    >>> is_seq_or_set('12') or is_seq_or_set({'a': 1})
    False
    """
    return is_seq(obj) or isinstance(obj, collections_abc.Set)


def is_mapping(obj):
    """
    Check if the object is a mapping (e.g., a decoded JSON object).

    >>> is_mapping({}) and is_mapping({'a': 1})
    True
    >>> is_mapping([('a', 1)]) or is_mapping('a') or is_mapping(None)
    False
    """
    return isinstance(obj, collections_abc.Mapping)
